#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command line front end.

    python -m circle_spectra factorize "0:2,-1:0.5,1:0.5" [--precision 50] [--no-oracle]
    python -m circle_spectra bochner-finite 2 -1 -1
    python -m circle_spectra self-test

Exit codes: 0 success, 1 precondition violation / bad input,
2 non-convergence, 3 internal invariant violation.
"""

from __future__ import annotations

import argparse
import logging
import math
from fractions import Fraction
from typing import Any, Dict, List, Optional

import mpmath

from .bochner import BochnerWitness, bochner_approximate
from .characters import dft, inverse_dft
from .errors import DidNotConverge, InternalInvariantViolation, NotNonNegative, NotPositiveDefinite, PreconditionViolation
from .fejer_riesz import FactorizationConfig, factorize_with_certificate, phase_equivalent
from .finite_bochner import bochner_finite
from .trig_poly import TrigPoly, parse_scalar, max_coefficient_distance, norm_sq
from .winding import winding_number

_logger = logging.getLogger(__name__)


def _self_test() -> Dict[str, Any]:
    """
    Small deterministic end-to-end checks:
      - 2 + cos(theta) factors with |P|^2 reproducing its coefficients
      - a negative trigonometric polynomial is rejected
      - exact DFT round trip on Z/12Z
      - [2, -1, -1] on Z/3Z equals chi_1 + chi_2; [1, 2, 2] is refuted
      - cos(theta) yields the two-point measure {-1: 1/2, 1: 1/2}
      - winding number counts the roots inside a radius
    """
    results: Dict[str, Any] = {"ok": True, "tests": []}

    def record(name: str, passed: bool, detail: str = "") -> None:
        results["tests"].append({"name": name, "passed": passed, "detail": detail})
        if not passed:
            results["ok"] = False
            _logger.error("SELF-TEST FAILED: %s - %s", name, detail)

    try:
        R = TrigPoly({-1: Fraction(1, 2), 0: 2, 1: Fraction(1, 2)})
        res = factorize_with_certificate(R)
        assert res.factor.support == (0, 1), f"unexpected support {res.factor.support}"
        with mpmath.workdps(res.precision):
            assert max_coefficient_distance(norm_sq(res.factor), R) <= res.tolerance
            beta = -2 + mpmath.sqrt(3)
            expected = TrigPoly({0: -beta, 1: 1}) * mpmath.sqrt((2 + mpmath.sqrt(3)) / 2)
            assert phase_equivalent(res.factor, expected), "factor differs from the closed form"
        record("fejer_riesz_2_plus_cos", True)
    except Exception as e:
        record("fejer_riesz_2_plus_cos", False, str(e))

    try:
        rejected = False
        try:
            factorize_with_certificate(TrigPoly({-1: Fraction(1, 2), 0: Fraction(1, 4), 1: Fraction(1, 2)}))
        except NotNonNegative:
            rejected = True
        assert rejected, "1/4 + cos(theta) was not rejected"
        record("fejer_riesz_rejects_negative", True)
    except Exception as e:
        record("fejer_riesz_rejects_negative", False, str(e))

    try:
        values = [Fraction(m * m - 3, m + 1) for m in range(12)]
        back = inverse_dft(dft(values))
        assert all(b.is_rational() and b.as_rational() == v for b, v in zip(back, values))
        record("exact_dft_round_trip", True)
    except Exception as e:
        record("exact_dft_round_trip", False, str(e))

    try:
        dec = bochner_finite([2, -1, -1])
        assert dec.rational_weights() == {1: Fraction(1), 2: Fraction(1)}, dec.rational_weights()
        assert dec.matches_input()
        refuted = False
        try:
            bochner_finite([1, 2, 2])
        except NotPositiveDefinite as exc:
            refuted = exc.index == 1
        assert refuted, "[1, 2, 2] was not refuted at frequency 1"
        record("finite_bochner_z3", True)
    except Exception as e:
        record("finite_bochner_z3", False, str(e))

    try:
        mu = bochner_approximate(math.cos, BochnerWitness.lipschitz(1.0), 0.05)
        assert abs(mu[1] - 0.5) <= 0.05 and abs(mu[-1] - 0.5) <= 0.05, repr(mu)
        assert mu.mass(lambda k: abs(k) != 1) <= 0.05
        record("bochner_cos", True)
    except Exception as e:
        record("bochner_cos", False, str(e))

    try:
        # (z - 1/2)(z - 3): one root inside r = 1, two inside r = 4
        Q = [Fraction(3, 2), Fraction(-7, 2), 1]
        assert winding_number(Q, 1.0, 64, min_gap=0.5) == 1
        assert winding_number(Q, 4.0, 64, min_gap=1.0) == 2
        record("winding_counts", True)
    except Exception as e:
        record("winding_counts", False, str(e))

    if not results["ok"]:
        raise RuntimeError("circle_spectra self-test failed")
    return results


def _cmd_factorize(args: argparse.Namespace) -> int:
    R = TrigPoly.from_string(args.poly)
    config = FactorizationConfig(precision=args.precision, use_oracle=not args.no_oracle)
    res = factorize_with_certificate(R, config)
    for k in range(res.factor.max_frequency + 1):
        print(f"p[{k}] = {mpmath.nstr(mpmath.mpc(res.factor.coefficient(k)), args.digits)}")
    print(f"[RESULT] degree={res.degree} residual={mpmath.nstr(res.residual, 3)} digest={res.digest}")
    return 0


def _cmd_bochner_finite(args: argparse.Namespace) -> int:
    dec = bochner_finite([parse_scalar(v) for v in args.values])
    for k, w in dec.weights:
        shown = w.as_rational() if w.is_rational() else mpmath.nstr(w.to_complex(200).real, 30)
        print(f"w[{k}] = {shown}")
    print(f"[RESULT] n={dec.n} support={list(dec.support)} digest={dec.digest()}")
    return 0


def _cmd_self_test(args: argparse.Namespace) -> int:
    out = _self_test()
    for t in out["tests"]:
        print(f"{'PASS' if t['passed'] else 'FAIL'} {t['name']}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="circle_spectra", description="Fejér–Riesz and Bochner spectral engines")
    parser.add_argument("--quiet", action="store_true", help="suppress logs")
    sub = parser.add_subparsers(dest="command", required=True)

    p_fac = sub.add_parser("factorize", help="factor a non-negative trigonometric polynomial")
    p_fac.add_argument("poly", help='coefficients as "k:c,k:c,..." (e.g. "0:2,-1:0.5,1:0.5"; start with a non-negative frequency or use --)')
    p_fac.add_argument("--precision", type=int, default=50, help="decimal digits (default: 50)")
    p_fac.add_argument("--no-oracle", action="store_true", help="use Weierstrass refinement instead of mpmath.polyroots")
    p_fac.add_argument("--digits", type=int, default=20, help="digits printed per coefficient")
    p_fac.set_defaults(func=_cmd_factorize)

    p_fin = sub.add_parser("bochner-finite", help="decompose f on Z/nZ into characters")
    p_fin.add_argument("values", nargs="+", help="f(0) f(1) ... f(n-1); ints, a/b, floats or complex")
    p_fin.set_defaults(func=_cmd_bochner_finite)

    p_self = sub.add_parser("self-test", help="run the package self-test")
    p_self.set_defaults(func=_cmd_self_test)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except PreconditionViolation as ex:
        print(f"[FATAL] {ex}")
        return 1
    except DidNotConverge as ex:
        print(f"[FATAL] {ex}")
        return 2
    except InternalInvariantViolation as ex:
        print(f"[FATAL] {ex}")
        return 3
    except RuntimeError as ex:
        print(f"[FATAL] {ex}")
        return 1
    except ValueError as ex:
        print(f"[FATAL] invalid input: {ex}")
        return 1


__all__ = ["build_parser", "main"]
