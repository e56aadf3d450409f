#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Trigonometric-polynomial algebra.

A TrigPoly is an immutable sparse mapping from integer frequencies to complex
coefficients:

    p(theta) = sum_k c_k e^{i k theta}

Coefficients are kept exact whenever they enter exactly (int, Fraction,
GaussianRational, and floats, which convert bit-for-bit). mpmath numbers are
admitted as numeric coefficients; any operation mixing the two kinds is
carried out in mpmath at the current working precision.

Algebra:
  add / sub       support = union
  multiply        support = Minkowski sum (convolution of coefficient maps)
  conjugate_reflect(p)_k = conj(p_{-k})
  norm_sq(p) = p * conjugate_reflect(p)   (= |p(theta)|^2, real and >= 0)
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import mpmath
import numpy as np

from .exact import GaussianRational, is_exact, require_exact_int, to_exact, to_mp


# =============================================================================
# Scalar helpers (exact when both operands are exact, mpmath otherwise)
# =============================================================================


def _normalize_scalar(x: Any) -> Any:
    if isinstance(x, (mpmath.mpf, mpmath.mpc)):
        return mpmath.mpc(x)
    return to_exact(x)


def _is_zero(x: Any) -> bool:
    return x == 0


def _add(a: Any, b: Any) -> Any:
    if is_exact(a) and is_exact(b):
        if isinstance(a, GaussianRational) or isinstance(b, GaussianRational):
            return to_exact(GaussianRational.coerce(a) + b)
        return a + b
    return to_mp(a) + to_mp(b)


def _mul(a: Any, b: Any) -> Any:
    if is_exact(a) and is_exact(b):
        if isinstance(a, GaussianRational) or isinstance(b, GaussianRational):
            return to_exact(GaussianRational.coerce(a) * b)
        return a * b
    return to_mp(a) * to_mp(b)


def _conj(a: Any) -> Any:
    if isinstance(a, GaussianRational):
        return to_exact(a.conjugate())
    if isinstance(a, (int, Fraction)):
        return a
    return mpmath.conj(a)


# =============================================================================
# TrigPoly
# =============================================================================


class TrigPoly:
    """
    Finite-support trigonometric polynomial.

    Instances are immutable; every operation returns a new instance.
    """

    __slots__ = ("_coeffs", "_hash")

    def __init__(self, coeffs: Optional[Mapping[int, Any]] = None):
        cleaned: Dict[int, Any] = {}
        for k, c in (coeffs or {}).items():
            kk = require_exact_int(k, name="frequency")
            cc = _normalize_scalar(c)
            if kk in cleaned:
                cc = _add(cleaned[kk], cc)
            if _is_zero(cc):
                cleaned.pop(kk, None)
            else:
                cleaned[kk] = cc
        self._coeffs: Dict[int, Any] = dict(sorted(cleaned.items()))
        self._hash: Optional[int] = None

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def zero(cls) -> "TrigPoly":
        return cls({})

    @classmethod
    def constant(cls, c: Any) -> "TrigPoly":
        return cls({0: c})

    @classmethod
    def monomial(cls, k: int, c: Any = 1) -> "TrigPoly":
        return cls({k: c})

    @classmethod
    def from_string(cls, text: str) -> "TrigPoly":
        """
        Parse ``"k:c,k:c,..."``. Coefficients accept Python complex syntax
        (``1+2j``) and rationals (``1/2``); floats are taken exactly.
        """
        coeffs: Dict[int, Any] = {}
        for item in text.split(","):
            item = item.strip()
            if not item:
                continue
            head, sep, tail = item.partition(":")
            if not sep:
                raise ValueError(f"expected 'frequency:coefficient', got {item!r}")
            k = int(head)
            coeffs[k] = _add(coeffs.get(k, 0), to_exact(parse_scalar(tail.strip())))
        return cls(coeffs)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def support(self) -> Tuple[int, ...]:
        return tuple(self._coeffs)

    @property
    def is_zero(self) -> bool:
        return not self._coeffs

    @property
    def degree(self) -> int:
        """Largest |k| with a nonzero coefficient (0 for the zero polynomial)."""
        if not self._coeffs:
            return 0
        return max(abs(k) for k in self._coeffs)

    @property
    def min_frequency(self) -> int:
        return min(self._coeffs) if self._coeffs else 0

    @property
    def max_frequency(self) -> int:
        return max(self._coeffs) if self._coeffs else 0

    @property
    def is_exact(self) -> bool:
        return all(is_exact(c) for c in self._coeffs.values())

    def coefficient(self, k: int) -> Any:
        return self._coeffs.get(int(k), 0)

    __getitem__ = coefficient

    def items(self) -> Iterator[Tuple[int, Any]]:
        return iter(self._coeffs.items())

    def to_dict(self) -> Dict[int, Any]:
        return dict(self._coeffs)

    def __len__(self) -> int:
        return len(self._coeffs)

    # ------------------------------------------------------------------
    # Algebra
    # ------------------------------------------------------------------

    def __add__(self, other: Any) -> "TrigPoly":
        if not isinstance(other, TrigPoly):
            other = TrigPoly.constant(other)
        return add(self, other)

    __radd__ = __add__

    def __neg__(self) -> "TrigPoly":
        return scale(self, -1)

    def __sub__(self, other: Any) -> "TrigPoly":
        if not isinstance(other, TrigPoly):
            other = TrigPoly.constant(other)
        return sub(self, other)

    def __rsub__(self, other: Any) -> "TrigPoly":
        return TrigPoly.constant(other) - self

    def __mul__(self, other: Any) -> "TrigPoly":
        if isinstance(other, TrigPoly):
            return multiply(self, other)
        return scale(self, other)

    __rmul__ = __mul__

    def __call__(self, theta: Any) -> Any:
        return evaluate(self, theta)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TrigPoly):
            return NotImplemented
        return self._coeffs == other._coeffs

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(tuple(self._coeffs.items()))
        return self._hash

    def __repr__(self) -> str:
        body = ", ".join(f"{k}: {c}" for k, c in self._coeffs.items())
        return f"TrigPoly({{{body}}})"


def parse_scalar(text: str) -> Any:
    if "j" in text:
        return complex(text.replace(" ", ""))
    if "/" in text:
        return Fraction(text)
    if any(ch in text for ch in ".eE"):
        return float(text)
    return int(text)


# =============================================================================
# Operations
# =============================================================================


def add(p: TrigPoly, q: TrigPoly) -> TrigPoly:
    out: Dict[int, Any] = dict(p.to_dict())
    for k, c in q.items():
        out[k] = _add(out[k], c) if k in out else c
    return TrigPoly(out)


def sub(p: TrigPoly, q: TrigPoly) -> TrigPoly:
    return add(p, scale(q, -1))


def scale(p: TrigPoly, factor: Any) -> TrigPoly:
    f = _normalize_scalar(factor)
    return TrigPoly({k: _mul(c, f) for k, c in p.items()})


def multiply(p: TrigPoly, q: TrigPoly) -> TrigPoly:
    """Convolution of coefficient maps; support is the Minkowski sum of supports."""
    out: Dict[int, Any] = {}
    for k1, c1 in p.items():
        for k2, c2 in q.items():
            k = k1 + k2
            term = _mul(c1, c2)
            out[k] = _add(out[k], term) if k in out else term
    return TrigPoly(out)


def conjugate_reflect(p: TrigPoly) -> TrigPoly:
    """Coefficient at k becomes the conjugate of the coefficient at -k."""
    return TrigPoly({-k: _conj(c) for k, c in p.items()})


def norm_sq(p: TrigPoly) -> TrigPoly:
    """|p(theta)|^2 as a trigonometric polynomial; Hermitian by construction."""
    return multiply(p, conjugate_reflect(p))


def shift(p: TrigPoly, k: int) -> TrigPoly:
    """Multiply by e^{i k theta}."""
    k = require_exact_int(k, name="shift")
    return TrigPoly({j + k: c for j, c in p.items()})


def evaluate(p: TrigPoly, theta: Any) -> Any:
    """
    p(theta). Float angles give a Python complex; mpmath angles give mpc at
    the current working precision.
    """
    if isinstance(theta, (mpmath.mpf, mpmath.mpc)):
        return evaluate_mp(p, theta)
    t = float(theta)
    return complex(sum(complex(to_mp(c)) * complex(math.cos(k * t), math.sin(k * t)) for k, c in p.items()))


def evaluate_mp(p: TrigPoly, theta: Any) -> mpmath.mpc:
    t = mpmath.mpf(theta) if not isinstance(theta, mpmath.mpf) else theta
    acc = mpmath.mpc(0)
    for k, c in p.items():
        acc += to_mp(c) * mpmath.expj(k * t)
    return acc


def evaluate_many(p: TrigPoly, thetas: Sequence[float]) -> np.ndarray:
    """Vectorised double-precision evaluation on an array of angles."""
    t = np.asarray(thetas, dtype=np.float64)
    out = np.zeros(t.shape, dtype=np.complex128)
    for k, c in p.items():
        out += complex(to_mp(c)) * np.exp(1j * k * t)
    return out


def is_hermitian(p: TrigPoly, tol: Any = 0) -> bool:
    """True iff c_{-k} == conj(c_k) for every k, i.e. p is real on the circle.

    Exact coefficients are compared exactly; ``tol`` applies to mpmath ones.
    """
    for k, c in p.items():
        partner = p.coefficient(-k)
        target = _conj(c)
        if is_exact(partner) and is_exact(target):
            if to_exact(GaussianRational.coerce(partner) - target) != 0:
                return False
        elif abs(to_mp(partner) - to_mp(target)) > tol:
            return False
    return True


def is_analytic(p: TrigPoly) -> bool:
    """Only non-negative frequencies occur."""
    return p.min_frequency >= 0


def to_polynomial(p: TrigPoly) -> Tuple[List[Any], int]:
    """
    Substitute z = e^{i theta}: returns ``(coeffs, lo)`` where ``coeffs`` are the
    ascending coefficients of Q(z) = z^{-lo} p(z) and ``lo`` the lowest
    frequency. For a Hermitian p of degree n this is Q(z) = z^n p(z), of
    degree 2n with Q(0) != 0.
    """
    if p.is_zero:
        return [0], 0
    lo, hi = p.min_frequency, p.max_frequency
    return [p.coefficient(k) for k in range(lo, hi + 1)], lo


def from_polynomial(coeffs: Sequence[Any], shift: int = 0) -> TrigPoly:
    """Inverse of to_polynomial: coefficient j lands on frequency j + shift."""
    return TrigPoly({j + shift: c for j, c in enumerate(coeffs)})


def max_coefficient_distance(p: TrigPoly, q: TrigPoly) -> mpmath.mpf:
    """sup_k |p_k - q_k| at the current mpmath precision."""
    keys = set(p.support) | set(q.support)
    if not keys:
        return mpmath.mpf(0)
    return max(abs(to_mp(p.coefficient(k)) - to_mp(q.coefficient(k))) for k in keys)


def coefficient_norm_1(p: TrigPoly) -> mpmath.mpf:
    """sum_k |c_k|; bounds sup_theta |p(theta)|."""
    return mpmath.fsum(abs(to_mp(c)) for _, c in p.items())


__all__ = [
    "TrigPoly",
    "parse_scalar",
    "add",
    "sub",
    "scale",
    "multiply",
    "conjugate_reflect",
    "norm_sq",
    "shift",
    "evaluate",
    "evaluate_mp",
    "evaluate_many",
    "is_hermitian",
    "is_analytic",
    "to_polynomial",
    "from_polynomial",
    "max_coefficient_distance",
    "coefficient_norm_1",
]
