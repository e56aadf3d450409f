#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Fejér–Riesz factorisation by spiral pairing.

Given R(theta) = sum_{|k| <= n} c_k e^{ik theta}, real and >= 0 on the circle,
produce an analytic P(theta) = sum_{k=0}^{n} p_k e^{ik theta} with

    |P(theta)|^2 = R(theta),   i.e.   norm_sq(P) == R coefficient-wise.

Pipeline:
  1) exact normalisation: coefficients are converted exactly to Q(i);
     Hermitian symmetry is checked exactly (R real-valued), then sampled
     non-negativity on a grid with mpmath confirmation of any negative sample.
  2) Q(z) = z^n R(z) (degree 2n, Q(0) = conj(c_n) != 0); roots with exact
     multiplicities from Yun + root oracle (or the Weierstrass refinement).
     Overlapping inclusion discs trigger a precision-doubling retry.
  3) certified winding numbers at radii separating the distinct moduli must
     reproduce the root counts.
  4) spiral pairing {alpha, 1/conj(alpha)}; one representative per pair and
     half of every (even) on-circle multiplicity.
  5) assembly P(z) = a * prod (z - beta_j) with

         a^2 = |c_n| / prod |beta_j|   (= M(Q) for the minimum-phase choice)

     because for every pair |e^{i theta} - 1/conj(beta)| = |e^{i theta} - beta| / |beta|.
  6) postcondition: max_k |norm_sq(P)_k - c_k| <= tol, with tol derived from
     working precision, guard digits, degree (binomial coefficient growth)
     and the Mahler measure. Roots are algebraic, so P lives in mpmath
     complex numbers; exact coefficients are returned when R is a constant
     rational square.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Dict, List, Optional, Tuple

import mpmath
import numpy as np
from scipy.special import comb

from . import polynomial as P
from .certificates import sha256_hex_of_dict
from .errors import DidNotConverge, InternalInvariantViolation, NotNonNegative
from .exact import GaussianRational, require_exact_int, to_exact, to_mp
from .roots import (
    IsolationFailure,
    RootClass,
    RootOracle,
    RootRecord,
    classify_roots,
    default_oracle,
    mahler_measure,
)
from .spiral import REPRESENTATIVE_CHOICES, SpiralPairing, odd_on_circle_roots, pair_roots
from .trig_poly import (
    TrigPoly,
    coefficient_norm_1,
    evaluate_many,
    evaluate_mp,
    from_polynomial,
    is_analytic,
    is_hermitian,
    max_coefficient_distance,
    norm_sq,
    to_polynomial,
)
from .winding import WindingSample, separating_radii, verify_root_counts

_logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class FactorizationConfig:
    """
    Numerical budget of one factorisation.

      - precision: decimal digits for root location and assembly
      - guard_digits: digits sacrificed in the postcondition tolerance
      - root_oracle: explicit oracle (its own precision is used, no retry)
      - use_oracle: mpmath.polyroots when True, Weierstrass refinement otherwise
      - max_refinement_steps: sweep budget of the Weierstrass refinement
      - nonnegativity_grid_factor: grid of factor * (n + 1) angles
      - winding_budget: largest N spent on one winding cross-check
      - max_precision_doublings: retries after an isolation failure
      - representative: "inside" (minimum phase) or "outside"
    """

    precision: int = 50
    guard_digits: int = 10
    root_oracle: Optional[RootOracle] = None
    use_oracle: bool = True
    max_refinement_steps: int = 500
    nonnegativity_grid_factor: int = 8
    winding_budget: int = 1 << 16
    max_precision_doublings: int = 3
    representative: str = "inside"

    def __post_init__(self) -> None:
        precision = require_exact_int(self.precision, name="precision")
        guard = require_exact_int(self.guard_digits, name="guard_digits")
        if precision < 15:
            raise ValueError(f"precision must be >= 15 decimal digits, got {precision}")
        if not 0 <= guard < precision:
            raise ValueError(f"guard_digits must lie in [0, precision), got {guard}")
        if require_exact_int(self.max_refinement_steps, name="max_refinement_steps") < 1:
            raise ValueError("max_refinement_steps must be >= 1")
        if require_exact_int(self.nonnegativity_grid_factor, name="nonnegativity_grid_factor") < 1:
            raise ValueError("nonnegativity_grid_factor must be >= 1")
        if require_exact_int(self.winding_budget, name="winding_budget") < 1:
            raise ValueError("winding_budget must be >= 1")
        if require_exact_int(self.max_precision_doublings, name="max_precision_doublings") < 0:
            raise ValueError("max_precision_doublings must be >= 0")
        if self.representative not in REPRESENTATIVE_CHOICES:
            raise ValueError(f"representative must be one of {REPRESENTATIVE_CHOICES}")
        if self.root_oracle is not None and not isinstance(self.root_oracle, RootOracle):
            raise TypeError("root_oracle must be a RootOracle instance")

    def oracle_for(self, precision: int) -> RootOracle:
        if self.root_oracle is not None:
            return self.root_oracle
        return default_oracle(
            precision,
            use_oracle=self.use_oracle,
            max_steps=self.max_refinement_steps,
            guard_digits=self.guard_digits,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "precision": int(self.precision),
            "guard_digits": int(self.guard_digits),
            "root_oracle": None if self.root_oracle is None else type(self.root_oracle).__name__,
            "use_oracle": bool(self.use_oracle),
            "max_refinement_steps": int(self.max_refinement_steps),
            "nonnegativity_grid_factor": int(self.nonnegativity_grid_factor),
            "winding_budget": int(self.winding_budget),
            "max_precision_doublings": int(self.max_precision_doublings),
            "representative": self.representative,
        }


# =============================================================================
# Result
# =============================================================================


@dataclass(frozen=True)
class FactorizationResult:
    factor: TrigPoly
    source: TrigPoly
    roots: Tuple[RootRecord, ...]
    pairing: Optional[SpiralPairing]
    mahler_measure: Any
    residual: Any
    tolerance: Any
    precision: int
    winding_checks: Tuple[WindingSample, ...] = ()
    skipped_radii: Tuple[float, ...] = ()
    certificate: Dict[str, Any] = field(default_factory=dict)

    @property
    def degree(self) -> int:
        return self.factor.max_frequency

    @property
    def digest(self) -> str:
        return self.certificate.get("digest", "")


# =============================================================================
# Helpers
# =============================================================================


def _exact_sqrt(q: Fraction) -> Optional[Fraction]:
    """sqrt(q) when q is the square of a rational, else None."""
    q = Fraction(q)
    if q < 0:
        return None
    rn, rd = math.isqrt(q.numerator), math.isqrt(q.denominator)
    if rn * rn == q.numerator and rd * rd == q.denominator:
        return Fraction(rn, rd)
    return None


def _exact_input(R: Any) -> TrigPoly:
    if not isinstance(R, TrigPoly):
        raise TypeError(f"factorize expects a TrigPoly, got {type(R).__name__}")
    return TrigPoly({k: to_exact(c) for k, c in R.items()})


def _hermitian_defect(R: TrigPoly) -> Optional[int]:
    """First frequency k with c_{-k} != conj(c_k), or None for Hermitian R."""
    if is_hermitian(R):
        return None
    for k, c in R.items():
        if GaussianRational.coerce(R.coefficient(-k)) != GaussianRational.coerce(c).conjugate():
            return k
    raise InternalInvariantViolation("hermitian_check", "is_hermitian disagrees with coefficient scan")


def _evaluation_error(R: TrigPoly, digits: int) -> mpmath.mpf:
    """Bound on the rounding error of evaluate_mp(R, theta) at ``digits`` digits."""
    return 4 * (len(R) + 1) * mpmath.mpf(10) ** (-digits) * max(mpmath.mpf(1), coefficient_norm_1(R))


def _check_sampled_nonnegativity(R: TrigPoly, grid_factor: int, precision: int) -> None:
    """
    Sample R on a grid; any sample negative in double precision is re-evaluated
    with mpmath and reported when the negativity exceeds the rounding bound.
    """
    n = R.degree
    count = grid_factor * (n + 1)
    thetas = 2.0 * np.pi * np.arange(count) / count
    values = evaluate_many(R, thetas).real
    suspects = np.nonzero(values < 0)[0]
    if suspects.size == 0:
        return
    with mpmath.workdps(precision):
        err = _evaluation_error(R, precision)
        for j in suspects[np.argsort(values[suspects])].tolist():
            value = evaluate_mp(R, mpmath.mpf(float(thetas[j]))).real
            if value < -err:
                raise NotNonNegative(
                    f"sample {j} of {count} is negative",
                    angle=float(thetas[j]),
                    value=float(value),
                )
    _logger.debug("%d grid samples within rounding of 0 confirmed non-negative", int(suspects.size))


def exhibit_negative_value(R: TrigPoly, record: RootRecord, precision: int) -> Optional[Tuple[float, mpmath.mpf]]:
    """
    Look for theta next to an odd-multiplicity root on the circle with R(theta) < 0.

    Near such a root R changes sign like (theta - theta0)^m, so one side of
    theta0 carries a negative value of size ~ h^m for small offsets h.
    """
    m = record.multiplicity
    with mpmath.workdps(precision):
        theta0 = mpmath.arg(record.value)
        err = _evaluation_error(R, precision)
        for j in range(1, max(2, precision // m)):
            h = mpmath.mpf(10) ** (-j)
            for t in (theta0 - h, theta0 + h):
                value = evaluate_mp(R, t).real
                if value < -err:
                    return float(t), value
    return None


def verification_tolerance(precision: int, guard_digits: int, degree: int, mahler: Any) -> mpmath.mpf:
    """
    Tolerance of the norm_sq postcondition.

    A root perturbation delta moves each coefficient of P by at most
    a * n * C(n, j) * delta, so norm_sq(P) moves by at most about
    M(Q) * (n + 1) * C(2n, n) * delta; delta is taken as 10^-(precision - guard).
    """
    growth = comb(2 * degree, degree, exact=True)
    scale = max(mpmath.mpf(1), mpmath.mpf(mahler))
    return mpmath.mpf(10) ** (-(precision - guard_digits)) * (degree + 1) * growth * scale


def _locate(Q: P.Poly, config: FactorizationConfig) -> Tuple[List[RootRecord], int]:
    precision = config.precision
    attempts = 0 if config.root_oracle is not None else config.max_precision_doublings
    last: Optional[IsolationFailure] = None
    for attempt in range(attempts + 1):
        oracle = config.oracle_for(precision)
        try:
            located = oracle.locate(Q)
            with mpmath.workdps(oracle.precision):
                return classify_roots(located), oracle.precision
        except IsolationFailure as exc:
            last = exc
            _logger.warning("root isolation failed at %d digits (%s); retrying", precision, exc.details)
            precision *= 2
    raise DidNotConverge("root isolation", attempts, best=None if last is None else last.details)


def _winding_cross_check(
    Q: P.Poly, records: List[RootRecord], budget: int
) -> Tuple[List[WindingSample], List[float]]:
    moduli = [1.0 if r.root_class is RootClass.ON_CIRCLE else float(r.modulus) for r in records]
    radii = separating_radii(moduli)
    return verify_root_counts(Q, [(r.value, r.multiplicity) for r in records], radii, max_samples=budget)


def _certificate(result_fields: Dict[str, Any]) -> Dict[str, Any]:
    body = dict(result_fields)
    body["digest"] = sha256_hex_of_dict(result_fields)
    return body


# =============================================================================
# Entry points
# =============================================================================


def factorize_with_certificate(R: TrigPoly, config: Optional[FactorizationConfig] = None) -> FactorizationResult:
    """
    Fejér–Riesz factor of R with the data that certifies it.

    Raises:
        TypeError: R is not a TrigPoly.
        NotNonNegative: R is not real-valued, or takes a negative value.
        DidNotConverge: root location exceeded its budget.
        InternalInvariantViolation: an assembled intermediate contradicts a
            structural guarantee (never expected for valid input).
    """
    config = config or FactorizationConfig()
    source = _exact_input(R)
    bad = _hermitian_defect(source)
    if bad is not None:
        raise NotNonNegative(f"coefficients at {bad} and {-bad} are not conjugate; R is not real-valued")

    n = source.degree
    cert: Dict[str, Any] = {
        "input": {str(k): c for k, c in source.items()},
        "degree": n,
        "config": config.to_dict(),
    }

    if source.is_zero:
        cert.update({"factor": [], "roots": []})
        return FactorizationResult(
            factor=TrigPoly.zero(), source=source, roots=(), pairing=None, mahler_measure=mpmath.mpf(0),
            residual=mpmath.mpf(0), tolerance=mpmath.mpf(0), precision=config.precision,
            certificate=_certificate(cert),
        )

    if n == 0:
        c0 = Fraction(to_exact(source.coefficient(0)))
        if c0 < 0:
            raise NotNonNegative("constant term is negative", angle=0.0, value=float(c0))
        root = _exact_sqrt(c0)
        with mpmath.workdps(config.precision):
            factor = TrigPoly.constant(root if root is not None else mpmath.sqrt(to_mp(c0).real))
            residual = max_coefficient_distance(norm_sq(factor), source)
            tolerance = verification_tolerance(config.precision, config.guard_digits, 0, c0)
        if residual > tolerance:
            raise InternalInvariantViolation("norm_sq_reproduction", f"constant residual {mpmath.nstr(residual, 5)}")
        cert.update({"factor": [str(factor.coefficient(0))], "roots": [], "exact": root is not None})
        return FactorizationResult(
            factor=factor, source=source, roots=(), pairing=None, mahler_measure=to_mp(c0).real,
            residual=residual, tolerance=tolerance, precision=config.precision, certificate=_certificate(cert),
        )

    _check_sampled_nonnegativity(source, config.nonnegativity_grid_factor, config.precision)

    coeffs, lo = to_polynomial(source)
    if lo != -n:
        raise InternalInvariantViolation("hermitian_support", f"lowest frequency {lo} != -{n}")
    Q = P.exact_poly(coeffs)
    if not P.is_self_reciprocal(Q):
        raise InternalInvariantViolation("self_reciprocal", "z^n R(z) is not its own conjugate reciprocal")
    records, precision = _locate(Q, config)

    for rec in odd_on_circle_roots(records):
        witness = exhibit_negative_value(source, rec, precision)
        if witness is not None:
            angle, value = witness
            raise NotNonNegative(
                f"sign change at an on-circle root of odd multiplicity {rec.multiplicity}",
                angle=angle,
                value=float(value),
            )

    windings, skipped = _winding_cross_check(Q, records, config.winding_budget)

    with mpmath.workdps(precision):
        pairing = pair_roots(records, config.representative)
        if pairing.factor_degree != n:
            raise InternalInvariantViolation("factor_degree", f"pairing yields degree {pairing.factor_degree}, expected {n}")
        lc = to_mp(source.coefficient(n))
        betas = pairing.expanded_representatives()
        scale_sq = abs(lc) / mpmath.fprod(abs(b) for b in betas)
        mahler = mahler_measure(lc, [(r.value, r.multiplicity) for r in records])
        tolerance = verification_tolerance(precision, config.guard_digits, n, mahler)
        if config.representative == "inside" and abs(scale_sq - mahler) > tolerance:
            raise InternalInvariantViolation(
                "mahler_normalisation",
                f"|a|^2 = {mpmath.nstr(scale_sq, 15)} differs from M(Q) = {mpmath.nstr(mahler, 15)}",
            )
        factor = from_polynomial(P.from_roots(betas, mpmath.sqrt(scale_sq)), 0)
        if not is_analytic(factor) or factor.max_frequency != n:
            raise InternalInvariantViolation("analytic_factor", f"assembled factor has support {factor.support}")
        residual = max_coefficient_distance(norm_sq(factor), source)
        if residual > tolerance:
            raise InternalInvariantViolation(
                "norm_sq_reproduction",
                f"max coefficient error {mpmath.nstr(residual, 5)} exceeds {mpmath.nstr(tolerance, 5)}",
            )
        cert.update(
            {
                "precision": precision,
                "roots": [r.to_dict() for r in records],
                "pairing": pairing.to_dict(),
                "mahler_measure": mpmath.nstr(mahler, 30),
                "residual": mpmath.nstr(residual, 5),
                "tolerance": mpmath.nstr(tolerance, 5),
                "windings": [w.to_dict() for w in windings],
                "skipped_radii": [repr(r) for r in skipped],
                "factor": [mpmath.nstr(factor.coefficient(k), 30) for k in range(n + 1)],
            }
        )

    _logger.info(
        "factorized degree %d: %d distinct roots (%d on circle), M(Q)=%s, residual=%s, %d winding checks",
        n,
        len(records),
        sum(1 for r in records if r.root_class is RootClass.ON_CIRCLE),
        mpmath.nstr(mahler, 10),
        mpmath.nstr(residual, 3),
        len(windings),
    )
    return FactorizationResult(
        factor=factor,
        source=source,
        roots=tuple(records),
        pairing=pairing,
        mahler_measure=mahler,
        residual=residual,
        tolerance=tolerance,
        precision=precision,
        winding_checks=tuple(windings),
        skipped_radii=tuple(skipped),
        certificate=_certificate(cert),
    )


def factorize(R: TrigPoly, config: Optional[FactorizationConfig] = None) -> TrigPoly:
    """Analytic P with norm_sq(P) == R; see factorize_with_certificate."""
    return factorize_with_certificate(R, config).factor


# =============================================================================
# Equivalence
# =============================================================================


def _default_tolerance(p: TrigPoly) -> mpmath.mpf:
    return mpmath.mpf(10) ** (-(mpmath.mp.dps // 2)) * max(mpmath.mpf(1), coefficient_norm_1(p))


def factors_equivalent(p1: TrigPoly, p2: TrigPoly, tol: Any = None) -> bool:
    """
    True when p1 and p2 are factors of the same R: norm_sq(p1) == norm_sq(p2)
    within ``tol``. This identifies factors that differ by a unimodular phase
    or by the choice of representative in some conjugate-reciprocal pairs.
    """
    n1, n2 = norm_sq(p1), norm_sq(p2)
    tol = _default_tolerance(n1) if tol is None else mpmath.mpf(tol)
    return max_coefficient_distance(n1, n2) <= tol


def phase_equivalent(p1: TrigPoly, p2: TrigPoly, tol: Any = None) -> bool:
    """True when p2 == u * p1 for a constant u with |u| = 1, within ``tol``."""
    if p1.is_zero or p2.is_zero:
        return p1.is_zero and p2.is_zero
    tol = _default_tolerance(p1) if tol is None else mpmath.mpf(tol)
    k = max(p1.support, key=lambda j: abs(to_mp(p1.coefficient(j))))
    u = to_mp(p2.coefficient(k)) / to_mp(p1.coefficient(k))
    if abs(abs(u) - 1) > tol:
        return False
    return max_coefficient_distance(p1 * u, p2) <= tol


__all__ = [
    "FactorizationConfig",
    "FactorizationResult",
    "factorize",
    "factorize_with_certificate",
    "factors_equivalent",
    "phase_equivalent",
    "exhibit_negative_value",
    "verification_tolerance",
]
