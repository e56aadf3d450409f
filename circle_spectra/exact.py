#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exact arithmetic kernel: Gaussian rationals Q(i).

Trigonometric polynomials whose coefficients are exact (int, Fraction or
GaussianRational) go through every algebraic step of the factorisation engine
without rounding: Hermitian checks, square-free decomposition and the exact
comparison of norm_sq against its input. Floats are admitted only through an
exact conversion (``Fraction(float)`` is exact), never through rounding.

Red-lines:
  - No silent rounding: non-finite floats and non-integral "integers" raise.
  - Equality is exact; there is no tolerance anywhere in this module.
"""

from __future__ import annotations

import math
import numbers
from fractions import Fraction
from typing import Any, Union

import mpmath
import numpy as np

ExactScalar = Union[int, Fraction, "GaussianRational"]

_FLOAT64_EPS = float(np.finfo(np.float64).eps)


def require_exact_int(x: Any, *, name: str = "value") -> int:
    """Coerce ``x`` to an int when it provably is one.

    Python ints and numpy integers pass; floats pass only when they differ
    from the nearest integer by no more than machine rounding.

    Raises:
        TypeError / ValueError: when integrality cannot be established.
    """
    if isinstance(x, bool):
        raise TypeError(f"{name} must be an integer, got bool")
    if isinstance(x, (int, np.integer)):
        return int(x)
    if isinstance(x, Fraction):
        if x.denominator == 1:
            return int(x.numerator)
        raise ValueError(f"{name} must be an exact integer, got {x}")
    if isinstance(x, (float, np.floating)):
        if not math.isfinite(float(x)):
            raise ValueError(f"{name} must be a finite integer, got {x!r}.")
        nearest = int(round(float(x)))
        tol = _FLOAT64_EPS * max(1.0, abs(float(x)))
        if abs(float(x) - nearest) <= tol:
            return nearest
        raise ValueError(f"{name} must be an exact integer; refusing to round {x!r}.")
    raise TypeError(f"{name} must be an integer, got {type(x).__name__}.")


def _mpf_to_fraction(x: "mpmath.mpf", *, name: str) -> Fraction:
    if not mpmath.isfinite(x):
        raise ValueError(f"{name} must be finite, got {x!r}")
    if x == 0:
        return Fraction(0)
    sign, man, exp, _ = x._mpf_
    value = Fraction(-int(man) if sign else int(man))
    return value * Fraction(2) ** int(exp)


def _exact_real(x: Any, *, name: str) -> Fraction:
    if isinstance(x, bool):
        raise TypeError(f"{name}: bool is not a number here")
    if isinstance(x, Fraction):
        return x
    if isinstance(x, (int, np.integer)):
        return Fraction(int(x))
    if isinstance(x, (float, np.floating)):
        xf = float(x)
        if not math.isfinite(xf):
            raise ValueError(f"{name} must be finite, got {xf!r}")
        return Fraction(xf)
    if isinstance(x, mpmath.mpf):
        return _mpf_to_fraction(x, name=name)
    if isinstance(x, numbers.Rational):
        return Fraction(x.numerator, x.denominator)
    raise TypeError(f"{name}: cannot convert {type(x).__name__} to an exact rational")


class GaussianRational:
    """
    Element ``re + i*im`` of Q(i) with Fraction components.

    Immutable and hashable. Mixed arithmetic with int, Fraction, float and
    complex is exact (floats are converted bit-for-bit).
    """

    __slots__ = ("_re", "_im")

    def __init__(self, re: Any = 0, im: Any = 0):
        self._re = _exact_real(re, name="re")
        self._im = _exact_real(im, name="im")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def zero(cls) -> "GaussianRational":
        return cls(0, 0)

    @classmethod
    def one(cls) -> "GaussianRational":
        return cls(1, 0)

    @classmethod
    def i(cls) -> "GaussianRational":
        return cls(0, 1)

    @classmethod
    def coerce(cls, x: Any) -> "GaussianRational":
        """Exact conversion of a supported scalar; raises TypeError otherwise."""
        if isinstance(x, GaussianRational):
            return x
        if isinstance(x, (complex, np.complexfloating)):
            xc = complex(x)
            return cls(xc.real, xc.imag)
        if isinstance(x, mpmath.mpc):
            return cls(_mpf_to_fraction(x.real, name="re"), _mpf_to_fraction(x.imag, name="im"))
        return cls(_exact_real(x, name="value"), 0)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def real(self) -> Fraction:
        return self._re

    @property
    def imag(self) -> Fraction:
        return self._im

    def conjugate(self) -> "GaussianRational":
        return GaussianRational(self._re, -self._im)

    def abs_squared(self) -> Fraction:
        return self._re * self._re + self._im * self._im

    def is_zero(self) -> bool:
        return self._re == 0 and self._im == 0

    def is_real(self) -> bool:
        return self._im == 0

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    @staticmethod
    def _other(x: Any):
        try:
            return GaussianRational.coerce(x)
        except TypeError:
            return NotImplemented

    def __add__(self, other: Any) -> "GaussianRational":
        o = self._other(other)
        if o is NotImplemented:
            return NotImplemented
        return GaussianRational(self._re + o._re, self._im + o._im)

    __radd__ = __add__

    def __neg__(self) -> "GaussianRational":
        return GaussianRational(-self._re, -self._im)

    def __pos__(self) -> "GaussianRational":
        return self

    def __sub__(self, other: Any) -> "GaussianRational":
        o = self._other(other)
        if o is NotImplemented:
            return NotImplemented
        return GaussianRational(self._re - o._re, self._im - o._im)

    def __rsub__(self, other: Any) -> "GaussianRational":
        o = self._other(other)
        if o is NotImplemented:
            return NotImplemented
        return o - self

    def __mul__(self, other: Any) -> "GaussianRational":
        o = self._other(other)
        if o is NotImplemented:
            return NotImplemented
        return GaussianRational(
            self._re * o._re - self._im * o._im,
            self._re * o._im + self._im * o._re,
        )

    __rmul__ = __mul__

    def __truediv__(self, other: Any) -> "GaussianRational":
        o = self._other(other)
        if o is NotImplemented:
            return NotImplemented
        den = o.abs_squared()
        if den == 0:
            raise ZeroDivisionError("division by zero in Q(i)")
        num = self * o.conjugate()
        return GaussianRational(num._re / den, num._im / den)

    def __rtruediv__(self, other: Any) -> "GaussianRational":
        o = self._other(other)
        if o is NotImplemented:
            return NotImplemented
        return o / self

    def __pow__(self, n: int) -> "GaussianRational":
        n = require_exact_int(n, name="exponent")
        if n < 0:
            return GaussianRational.one() / (self ** (-n))
        result = GaussianRational.one()
        base = self
        while n > 0:
            if n & 1:
                result = result * base
            base = base * base
            n >>= 1
        return result

    # ------------------------------------------------------------------
    # Comparison / conversion
    # ------------------------------------------------------------------

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, GaussianRational):
            return self._re == other._re and self._im == other._im
        try:
            o = GaussianRational.coerce(other)
        except (TypeError, ValueError):
            return NotImplemented
        return self._re == o._re and self._im == o._im

    def __hash__(self) -> int:
        if self._im == 0:
            return hash(self._re)
        return hash((self._re, self._im))

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __complex__(self) -> complex:
        return complex(float(self._re), float(self._im))

    def __abs__(self) -> float:
        return math.hypot(float(self._re), float(self._im))

    def to_mpc(self) -> mpmath.mpc:
        """Round to the current mpmath working precision."""
        return mpmath.mpc(mpmath.mpf(self._re.numerator) / self._re.denominator,
                          mpmath.mpf(self._im.numerator) / self._im.denominator)

    def __repr__(self) -> str:
        return f"GaussianRational({self._re}, {self._im})"

    def __str__(self) -> str:
        if self._im == 0:
            return str(self._re)
        if self._re == 0:
            return f"{self._im}i"
        sign = "+" if self._im > 0 else "-"
        return f"({self._re}{sign}{abs(self._im)}i)"


def to_exact(x: Any) -> ExactScalar:
    """
    Exact normal form of a scalar: int/Fraction stay rational, complex values
    become GaussianRational, and a GaussianRational with zero imaginary part
    collapses to its Fraction real part.
    """
    if isinstance(x, bool):
        raise TypeError("bool is not a coefficient")
    if isinstance(x, (int, np.integer)):
        return int(x)
    if isinstance(x, Fraction):
        return x
    if isinstance(x, (float, np.floating)):
        return _exact_real(x, name="value")
    if isinstance(x, mpmath.mpf):
        return _mpf_to_fraction(x, name="value")
    if isinstance(x, (GaussianRational, complex, np.complexfloating, mpmath.mpc)):
        g = GaussianRational.coerce(x)
        return g.real if g.is_real() else g
    if isinstance(x, numbers.Rational):
        return Fraction(x.numerator, x.denominator)
    raise TypeError(f"cannot convert {type(x).__name__} to an exact scalar")


def is_exact(x: Any) -> bool:
    return isinstance(x, (int, Fraction, GaussianRational)) and not isinstance(x, bool)


def to_mp(x: Any) -> mpmath.mpc:
    """Any supported scalar (exact, float or mpmath) as an mpmath complex."""
    if isinstance(x, GaussianRational):
        return x.to_mpc()
    if isinstance(x, Fraction):
        return mpmath.mpc(mpmath.mpf(x.numerator) / x.denominator)
    if isinstance(x, (mpmath.mpf, mpmath.mpc)):
        return mpmath.mpc(x)
    if isinstance(x, (int, np.integer)):
        return mpmath.mpc(int(x))
    if isinstance(x, (float, complex, np.floating, np.complexfloating)):
        return mpmath.mpc(complex(x))
    raise TypeError(f"cannot convert {type(x).__name__} to mpmath")


__all__ = [
    "ExactScalar",
    "GaussianRational",
    "is_exact",
    "require_exact_int",
    "to_exact",
    "to_mp",
]
