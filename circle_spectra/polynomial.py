#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dense univariate polynomials over Q(i).

Coefficient lists are ascending (index j holds the coefficient of z^j) and
every coefficient is a GaussianRational. Only exact field operations are used
here; the numeric side (mpmath) begins where roots are located.

The square-free decomposition is what makes root multiplicities exact: the
root oracle only ever sees square-free parts, whose roots are simple, so no
multiplicity is ever inferred from clustering of floating-point roots.
"""

from __future__ import annotations

import logging
from typing import Any, List, Sequence, Tuple

import mpmath

from .exact import GaussianRational, to_mp

_logger = logging.getLogger(__name__)

Poly = List[GaussianRational]

_ZERO = GaussianRational.zero()
_ONE = GaussianRational.one()


def exact_poly(coeffs: Sequence[Any]) -> Poly:
    """Ascending coefficients as trimmed GaussianRational list."""
    return trim([GaussianRational.coerce(c) for c in coeffs])


def trim(a: Poly) -> Poly:
    out = list(a)
    while len(out) > 1 and out[-1].is_zero():
        out.pop()
    if not out:
        out = [_ZERO]
    return out


def is_zero(a: Poly) -> bool:
    return len(a) == 1 and a[0].is_zero()


def degree(a: Poly) -> int:
    """Degree; -1 for the zero polynomial."""
    a = trim(a)
    return -1 if is_zero(a) else len(a) - 1


def leading(a: Poly) -> GaussianRational:
    return trim(a)[-1]


def add(a: Poly, b: Poly) -> Poly:
    n = max(len(a), len(b))
    return trim([(a[i] if i < len(a) else _ZERO) + (b[i] if i < len(b) else _ZERO) for i in range(n)])


def sub(a: Poly, b: Poly) -> Poly:
    n = max(len(a), len(b))
    return trim([(a[i] if i < len(a) else _ZERO) - (b[i] if i < len(b) else _ZERO) for i in range(n)])


def scale(a: Poly, factor: Any) -> Poly:
    f = GaussianRational.coerce(factor)
    return trim([c * f for c in a])


def mul(a: Poly, b: Poly) -> Poly:
    if is_zero(a) or is_zero(b):
        return [_ZERO]
    out = [_ZERO] * (len(a) + len(b) - 1)
    for i, ai in enumerate(a):
        if ai.is_zero():
            continue
        for j, bj in enumerate(b):
            out[i + j] = out[i + j] + ai * bj
    return trim(out)


def divmod_poly(a: Poly, b: Poly) -> Tuple[Poly, Poly]:
    """Euclidean division a = q*b + r with deg r < deg b."""
    b = trim(b)
    if is_zero(b):
        raise ZeroDivisionError("polynomial division by zero")
    r = list(trim(a))
    db = len(b) - 1
    lb = b[-1]
    if len(r) - 1 < db:
        return [_ZERO], trim(r)
    q = [_ZERO] * (len(r) - db)
    for shift_ in range(len(r) - 1 - db, -1, -1):
        coef = r[shift_ + db] / lb
        q[shift_] = coef
        if coef.is_zero():
            continue
        for j in range(db + 1):
            r[shift_ + j] = r[shift_ + j] - coef * b[j]
    return trim(q), trim(r[:db] if db > 0 else [_ZERO])


def exact_div(a: Poly, b: Poly) -> Poly:
    q, r = divmod_poly(a, b)
    if not is_zero(r):
        raise ValueError("polynomial division is not exact")
    return q


def monic(a: Poly) -> Poly:
    a = trim(a)
    if is_zero(a):
        return a
    lc = a[-1]
    return [c / lc for c in a]


def gcd(a: Poly, b: Poly) -> Poly:
    """Monic greatest common divisor (gcd(0, 0) = 0)."""
    a, b = trim(a), trim(b)
    while not is_zero(b):
        _, r = divmod_poly(a, b)
        a, b = b, r
    return monic(a)


def derivative(a: Poly) -> Poly:
    if len(a) <= 1:
        return [_ZERO]
    return trim([a[j] * j for j in range(1, len(a))])


def evaluate(a: Poly, z: Any) -> Any:
    """Horner evaluation; exact for exact z, mpmath for mpmath z."""
    if isinstance(z, (mpmath.mpf, mpmath.mpc)):
        acc = mpmath.mpc(0)
        for c in reversed(a):
            acc = acc * z + to_mp(c)
        return acc
    zz = GaussianRational.coerce(z)
    acc = _ZERO
    for c in reversed(a):
        acc = acc * zz + c
    return acc


def square_free_decomposition(a: Poly) -> List[Tuple[Poly, int]]:
    """
    Yun's algorithm (characteristic 0).

    Returns ``[(S_k, k), ...]`` with each S_k monic, square-free and pairwise
    coprime such that a = lc(a) * prod_k S_k^k. Constant factors are omitted.
    """
    a = trim(a)
    if degree(a) <= 0:
        return []
    da = derivative(a)
    g = gcd(a, da)
    b = exact_div(monic(a), g)
    c = exact_div(scale(da, _ONE / leading(a)), g)
    d = sub(c, derivative(b))
    out: List[Tuple[Poly, int]] = []
    k = 1
    while degree(b) > 0:
        ak = gcd(b, d)
        b = exact_div(b, ak)
        c = exact_div(d, ak)
        d = sub(c, derivative(b))
        if degree(ak) > 0:
            out.append((ak, k))
        k += 1
    _logger.debug(
        "square-free decomposition: degree=%d parts=%s",
        degree(a),
        [(degree(s), m) for s, m in out],
    )
    return out


def conjugate_reciprocal(a: Poly) -> Poly:
    """z^d * conj(a(1/conj z)): roots alpha map to 1/conj(alpha)."""
    a = trim(a)
    return trim([c.conjugate() for c in reversed(a)])


def is_self_reciprocal(a: Poly) -> bool:
    """True iff a equals its conjugate reciprocal up to a nonzero scalar."""
    a = trim(a)
    r = conjugate_reciprocal(a)
    if len(a) != len(r):
        return False
    return monic(a) == monic(r)


def to_mp_coeffs(a: Poly) -> List[mpmath.mpc]:
    return [to_mp(c) for c in a]


def cauchy_bound(a: Poly) -> mpmath.mpf:
    """Every root satisfies |z| <= 1 + max_j |a_j / a_d|."""
    a = trim(a)
    if degree(a) <= 0:
        return mpmath.mpf(0)
    lc = abs(to_mp(a[-1]))
    return 1 + max(abs(to_mp(c)) for c in a[:-1]) / lc


def lower_root_bound(a: Poly) -> mpmath.mpf:
    """Every root satisfies |z| >= |a_0| / (|a_0| + max_{j>0} |a_j|); 0 if a(0) = 0."""
    a = trim(a)
    a0 = abs(to_mp(a[0]))
    if a0 == 0:
        return mpmath.mpf(0)
    rest = max((abs(to_mp(c)) for c in a[1:]), default=mpmath.mpf(0))
    return a0 / (a0 + rest)


def coefficient_norm_1(a: Poly) -> mpmath.mpf:
    return mpmath.fsum(abs(to_mp(c)) for c in a)


def from_roots(roots: Sequence[Any], leading_coefficient: Any = 1) -> List[mpmath.mpc]:
    """mpmath coefficients of lc * prod (z - r)."""
    out = [mpmath.mpc(1)]
    for r in roots:
        rr = mpmath.mpc(r)
        nxt = [mpmath.mpc(0)] * (len(out) + 1)
        for j, c in enumerate(out):
            nxt[j + 1] += c
            nxt[j] -= c * rr
        out = nxt
    lc = to_mp(leading_coefficient)
    return [c * lc for c in out]


__all__ = [
    "Poly",
    "exact_poly",
    "trim",
    "is_zero",
    "degree",
    "leading",
    "add",
    "sub",
    "scale",
    "mul",
    "divmod_poly",
    "exact_div",
    "monic",
    "gcd",
    "derivative",
    "evaluate",
    "square_free_decomposition",
    "conjugate_reciprocal",
    "is_self_reciprocal",
    "to_mp_coeffs",
    "cauchy_bound",
    "lower_root_bound",
    "coefficient_norm_1",
    "from_roots",
]
