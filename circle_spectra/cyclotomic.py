#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exact arithmetic in cyclotomic fields Q(zeta_L).

Characters of Z/NZ take values in Q(zeta_N); Gaussian-rational sample values
need i as well, so every field here is Q(zeta_L) with L = lcm(N, 4), where
i = zeta_L^{L/4}. Elements are stored in the canonical power basis
1, x, ..., x^{phi(L)-1} modulo the L-th cyclotomic polynomial, which makes
equality (and therefore the zero test) exact and structural.

Signs of real elements are certified numerically: an element that is not
exactly zero is evaluated with mpmath at increasing precision until its value
is separated from zero by more than a proven rounding bound.
"""

from __future__ import annotations

import logging
import math
from fractions import Fraction
from functools import lru_cache
from typing import Any, Dict, List, Sequence, Tuple

import mpmath

from .errors import DidNotConverge
from .exact import GaussianRational, require_exact_int

_logger = logging.getLogger(__name__)

# bits; doubled up to _MAX_SIGN_PRECISION while certifying a sign
_INITIAL_SIGN_PRECISION = 64
_MAX_SIGN_PRECISION = 1 << 16


# =============================================================================
# Cyclotomic polynomials
# =============================================================================


def _int_poly_exact_div(a: List[int], b: List[int]) -> List[int]:
    """Exact division of integer polynomials by a monic divisor (ascending)."""
    a = list(a)
    db = len(b) - 1
    if b[-1] != 1:
        raise ValueError("divisor must be monic")
    q = [0] * (len(a) - db)
    for s in range(len(a) - 1 - db, -1, -1):
        coef = a[s + db]
        q[s] = coef
        if coef:
            for j in range(db + 1):
                a[s + j] -= coef * b[j]
    if any(a[:db]):
        raise ValueError("cyclotomic division left a remainder")
    return q


@lru_cache(maxsize=None)
def cyclotomic_polynomial(n: int) -> Tuple[int, ...]:
    """Ascending integer coefficients of Phi_n."""
    n = require_exact_int(n, name="n")
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    num = [-1] + [0] * (n - 1) + [1]
    for d in range(1, n):
        if n % d == 0:
            num = _int_poly_exact_div(num, list(cyclotomic_polynomial(d)))
    return tuple(num)


def euler_phi(n: int) -> int:
    return len(cyclotomic_polynomial(n)) - 1


@lru_cache(maxsize=None)
def _power_table(order: int) -> Tuple[Tuple[int, ...], ...]:
    """x^j mod Phi_order for j = 0..order-1, as integer vectors of length phi(order)."""
    phi = cyclotomic_polynomial(order)
    d = len(phi) - 1
    rows: List[Tuple[int, ...]] = []
    cur = [0] * d
    cur[0] = 1
    for _ in range(order):
        rows.append(tuple(cur))
        # multiply by x, then reduce the x^d term using monic Phi
        top = cur[-1]
        nxt = [0] + cur[:-1]
        if top:
            for j in range(d):
                nxt[j] -= top * phi[j]
        cur = nxt
    return tuple(rows)


def _reduce_exponent_vector(order: int, vec: Dict[int, Fraction]) -> Tuple[Fraction, ...]:
    table = _power_table(order)
    d = euler_phi(order)
    out = [Fraction(0)] * d
    for e, c in vec.items():
        if c == 0:
            continue
        row = table[e % order]
        for j in range(d):
            if row[j]:
                out[j] += c * row[j]
    return tuple(out)


# =============================================================================
# Field elements
# =============================================================================


class CyclotomicNumber:
    """Element of Q(zeta_L) in canonical reduced form (L a multiple of 4)."""

    __slots__ = ("_order", "_coeffs")

    def __init__(self, order: int, coeffs: Sequence[Any]):
        order = require_exact_int(order, name="order")
        if order < 4 or order % 4 != 0:
            raise ValueError(f"order must be a positive multiple of 4, got {order}")
        d = euler_phi(order)
        cs = [Fraction(c) for c in coeffs]
        if len(cs) > d:
            cs = list(_reduce_exponent_vector(order, dict(enumerate(cs))))
        cs += [Fraction(0)] * (d - len(cs))
        self._order = order
        self._coeffs: Tuple[Fraction, ...] = tuple(cs)

    @classmethod
    def from_exponents(cls, order: int, vec: Dict[int, Any]) -> "CyclotomicNumber":
        """sum_e vec[e] * zeta_order^e with Gaussian-rational weights."""
        quarter = order // 4
        rational: Dict[int, Fraction] = {}
        for e, c in vec.items():
            g = GaussianRational.coerce(c)
            if g.real:
                rational[e % order] = rational.get(e % order, Fraction(0)) + g.real
            if g.imag:
                k = (e + quarter) % order
                rational[k] = rational.get(k, Fraction(0)) + g.imag
        return cls(order, _reduce_exponent_vector(order, rational))

    @property
    def order(self) -> int:
        return self._order

    @property
    def coeffs(self) -> Tuple[Fraction, ...]:
        return self._coeffs

    def is_zero(self) -> bool:
        return not any(self._coeffs)

    def _same_field(self, other: "CyclotomicNumber") -> None:
        if other._order != self._order:
            raise ValueError(f"field mismatch: Q(zeta_{self._order}) vs Q(zeta_{other._order})")

    def _coerce(self, other: Any):
        if isinstance(other, CyclotomicNumber):
            self._same_field(other)
            return other
        try:
            g = GaussianRational.coerce(other)
        except TypeError:
            return NotImplemented
        return CyclotomicNumber.from_exponents(self._order, {0: g})

    def __add__(self, other: Any) -> "CyclotomicNumber":
        o = self._coerce(other)
        if o is NotImplemented:
            return NotImplemented
        return CyclotomicNumber(self._order, [a + b for a, b in zip(self._coeffs, o._coeffs)])

    __radd__ = __add__

    def __neg__(self) -> "CyclotomicNumber":
        return CyclotomicNumber(self._order, [-a for a in self._coeffs])

    def __sub__(self, other: Any) -> "CyclotomicNumber":
        o = self._coerce(other)
        if o is NotImplemented:
            return NotImplemented
        return CyclotomicNumber(self._order, [a - b for a, b in zip(self._coeffs, o._coeffs)])

    def __rsub__(self, other: Any) -> "CyclotomicNumber":
        return (-self) + other

    def __mul__(self, other: Any) -> "CyclotomicNumber":
        if isinstance(other, (int, Fraction)) and not isinstance(other, bool):
            f = Fraction(other)
            return CyclotomicNumber(self._order, [a * f for a in self._coeffs])
        o = self._coerce(other)
        if o is NotImplemented:
            return NotImplemented
        vec: Dict[int, Fraction] = {}
        for i, a in enumerate(self._coeffs):
            if not a:
                continue
            for j, b in enumerate(o._coeffs):
                if b:
                    vec[i + j] = vec.get(i + j, Fraction(0)) + a * b
        return CyclotomicNumber(self._order, _reduce_exponent_vector(self._order, vec))

    __rmul__ = __mul__

    def times_root_of_unity(self, e: int) -> "CyclotomicNumber":
        """Multiply by zeta_L^e (a permutation-and-reduce, no general product)."""
        vec = {i + e: a for i, a in enumerate(self._coeffs) if a}
        return CyclotomicNumber(self._order, _reduce_exponent_vector(self._order, vec))

    def conjugate(self) -> "CyclotomicNumber":
        vec = {-i: a for i, a in enumerate(self._coeffs) if a}
        return CyclotomicNumber(self._order, _reduce_exponent_vector(self._order, vec))

    def is_real(self) -> bool:
        return self == self.conjugate()

    def is_rational(self) -> bool:
        return not any(self._coeffs[1:])

    def as_rational(self) -> Fraction:
        if not self.is_rational():
            raise ValueError("element is not rational")
        return self._coeffs[0]

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, CyclotomicNumber):
            return self._order == other._order and self._coeffs == other._coeffs
        o = self._coerce(other)
        if o is NotImplemented:
            return NotImplemented
        return self._coeffs == o._coeffs

    def __hash__(self) -> int:
        return hash((self._order, self._coeffs))

    # ------------------------------------------------------------------
    # Numeric embedding (zeta_L -> exp(2 pi i / L))
    # ------------------------------------------------------------------

    def to_complex(self, prec: int = 53) -> mpmath.mpc:
        with mpmath.workprec(prec):
            acc = mpmath.mpc(0)
            for j, c in enumerate(self._coeffs):
                if c:
                    acc += (mpmath.mpf(c.numerator) / c.denominator) * mpmath.expjpi(mpmath.mpf(2 * j) / self._order)
            return acc

    def __complex__(self) -> complex:
        return complex(self.to_complex())

    def _error_bound(self, prec: int) -> mpmath.mpf:
        # each term: rational rounding + exp rounding + accumulation, all <= 2^(3-prec) |c|
        total = sum(abs(c) for c in self._coeffs)
        n_terms = sum(1 for c in self._coeffs if c)
        return mpmath.mpf(total) * (n_terms + 4) * mpmath.ldexp(1, 3 - prec)

    def sign(self) -> int:
        """
        Certified sign (-1, 0, 1) of a real element.

        Raises:
            ValueError: when the element is not real.
            DidNotConverge: when the precision cap is reached (a nonzero
                algebraic number always separates from zero eventually).
        """
        if not self.is_real():
            raise ValueError("sign() requires a real element")
        if self.is_zero():
            return 0
        if self.is_rational():
            return 1 if self._coeffs[0] > 0 else -1
        prec = _INITIAL_SIGN_PRECISION
        while prec <= _MAX_SIGN_PRECISION:
            with mpmath.workprec(prec + 16):
                value = self.to_complex(prec + 16).real
                err = self._error_bound(prec)
                if abs(value) > err:
                    return 1 if value > 0 else -1
            _logger.debug("sign undecided at %d bits; doubling", prec)
            prec *= 2
        raise DidNotConverge("cyclotomic sign certification", steps=_MAX_SIGN_PRECISION)

    def __repr__(self) -> str:
        terms = [f"{c}*z^{j}" if j else f"{c}" for j, c in enumerate(self._coeffs) if c]
        body = " + ".join(terms) if terms else "0"
        return f"CyclotomicNumber[{self._order}]({body})"


class CyclotomicField:
    """Q(zeta_L) with L = lcm(n, 4); hosts the values of the characters of Z/nZ."""

    def __init__(self, n: int):
        n = require_exact_int(n, name="n")
        if n < 1:
            raise ValueError(f"n must be >= 1, got {n}")
        self.n = n
        self.order = n * 4 // math.gcd(n, 4)

    def zero(self) -> CyclotomicNumber:
        return CyclotomicNumber(self.order, [])

    def one(self) -> CyclotomicNumber:
        return CyclotomicNumber(self.order, [1])

    def zeta_power(self, e: int) -> CyclotomicNumber:
        """zeta_n^e."""
        step = self.order // self.n
        return CyclotomicNumber.from_exponents(self.order, {(e % self.n) * step: 1})

    def lift(self, value: Any) -> CyclotomicNumber:
        if isinstance(value, CyclotomicNumber):
            if value.order != self.order:
                raise ValueError("value lives in a different cyclotomic field")
            return value
        return CyclotomicNumber.from_exponents(self.order, {0: value})

    def from_n_exponents(self, vec: Dict[int, Any]) -> CyclotomicNumber:
        """sum_e vec[e] * zeta_n^e, reduced once."""
        step = self.order // self.n
        lifted: Dict[int, GaussianRational] = {}
        for e, c in vec.items():
            k = (e % self.n) * step
            lifted[k] = lifted.get(k, GaussianRational.zero()) + c
        return CyclotomicNumber.from_exponents(self.order, lifted)


__all__ = [
    "CyclotomicField",
    "CyclotomicNumber",
    "cyclotomic_polynomial",
    "euler_phi",
]
