#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Characters and the discrete Fourier transform on Z/NZ.

    chi_k(m) = exp(2 pi i k m / N)

Orthogonality, (1/N) sum_m chi_k(m) conj(chi_j(m)) = [k == j mod N], is the
single algebraic fact the finite Bochner argument rests on. The exact layer
computes it (and the DFT) inside Q(zeta_L), so inverse_dft(dft(f)) == f holds
as an equality of field elements, not up to rounding. The numeric layer uses
numpy.fft with the same normalisation for large sample counts.

    DFT(f)(k) = (1/N) sum_m f(m) chi_k(-m)
    f(m)      = sum_k DFT(f)(k) chi_k(m)
"""

from __future__ import annotations

import cmath
import math
from fractions import Fraction
from typing import Any, Callable, List, Optional, Sequence, Tuple

import numpy as np

from .cyclotomic import CyclotomicField, CyclotomicNumber
from .exact import GaussianRational, require_exact_int


def _check_order(n: Any) -> int:
    n = require_exact_int(n, name="N")
    if n < 1:
        raise ValueError(f"group order must be >= 1, got {n}")
    return n


# =============================================================================
# Characters
# =============================================================================


def character(k: int, n: int) -> Callable[[int], complex]:
    """Numeric chi_k on Z/nZ."""
    n = _check_order(n)
    k = require_exact_int(k, name="k") % n

    def chi(m: int) -> complex:
        return cmath.exp(2j * math.pi * ((k * int(m)) % n) / n)

    return chi


def exact_character(k: int, n: int, m: int) -> CyclotomicNumber:
    """chi_k(m) as an element of Q(zeta_lcm(n,4))."""
    n = _check_order(n)
    return CyclotomicField(n).zeta_power(require_exact_int(k, name="k") * require_exact_int(m, name="m"))


def character_table(n: int) -> np.ndarray:
    """table[k, m] = chi_k(m), double precision."""
    n = _check_order(n)
    km = np.outer(np.arange(n), np.arange(n)) % n
    return np.exp(2j * np.pi * km / n)


def exact_character_table(n: int) -> List[List[CyclotomicNumber]]:
    n = _check_order(n)
    field = CyclotomicField(n)
    return [[field.zeta_power(k * m) for m in range(n)] for k in range(n)]


def orthogonality(k: int, j: int, n: int) -> Fraction:
    """
    (1/n) sum_m chi_k(m) conj(chi_j(m)), evaluated exactly.

    The result is 1 when k == j (mod n) and 0 otherwise; it is computed from
    the field arithmetic rather than asserted.
    """
    n = _check_order(n)
    field = CyclotomicField(n)
    d = require_exact_int(k, name="k") - require_exact_int(j, name="j")
    total = field.from_n_exponents({})
    for m in range(n):
        total = total + field.zeta_power(d * m)
    return (total * Fraction(1, n)).as_rational()


# =============================================================================
# Exact DFT
# =============================================================================


def lift_values(values: Sequence[Any]) -> Tuple[CyclotomicNumber, ...]:
    """Embed Gaussian-rational samples of a function on Z/NZ into Q(zeta_L)."""
    n = _check_order(len(values))
    field = CyclotomicField(n)
    return tuple(field.lift(v) for v in values)


def dft(values: Sequence[Any]) -> Tuple[CyclotomicNumber, ...]:
    """Exact DFT(f)(k) = (1/N) sum_m f(m) zeta_N^{-km}, k = 0..N-1."""
    if len(values) == 0:
        raise ValueError("dft of an empty sequence")
    n = len(values)
    field = CyclotomicField(n)
    samples = [GaussianRational.coerce(v) for v in values]
    inv_n = Fraction(1, n)
    out: List[CyclotomicNumber] = []
    for k in range(n):
        vec: dict = {}
        for m, fm in enumerate(samples):
            if fm.is_zero():
                continue
            e = (-k * m) % n
            vec[e] = vec.get(e, GaussianRational.zero()) + fm
        out.append(field.from_n_exponents(vec) * inv_n)
    return tuple(out)


def inverse_dft(coeffs: Sequence[CyclotomicNumber]) -> Tuple[CyclotomicNumber, ...]:
    """Exact inverse: f(m) = sum_k c_k zeta_N^{km}."""
    if len(coeffs) == 0:
        raise ValueError("inverse_dft of an empty sequence")
    n = len(coeffs)
    field = CyclotomicField(n)
    cs = [field.lift(c) for c in coeffs]
    step = field.order // n
    out: List[CyclotomicNumber] = []
    for m in range(n):
        acc = field.zero()
        for k, c in enumerate(cs):
            if not c.is_zero():
                acc = acc + c.times_root_of_unity(((k * m) % n) * step)
        out.append(acc)
    return tuple(out)


def hermitian_defect_on_cyclic(values: Sequence[Any]) -> Optional[int]:
    """Smallest m with f(-m) != conj(f(m)) on Z/nZ, or None when f is Hermitian."""
    n = len(values)
    g = [GaussianRational.coerce(v) for v in values]
    for m in range(n):
        if g[(-m) % n] != g[m].conjugate():
            return m
    return None


def is_hermitian_on_cyclic(values: Sequence[Any]) -> bool:
    """f(-m) == conj(f(m)) for every m, exactly."""
    return hermitian_defect_on_cyclic(values) is None



# =============================================================================
# Numeric DFT
# =============================================================================


def numeric_dft(values: Sequence[complex]) -> np.ndarray:
    """Same normalisation as dft(): numpy's forward FFT divided by N."""
    arr = np.asarray(values, dtype=np.complex128)
    if arr.ndim != 1 or arr.size == 0:
        raise ValueError("numeric_dft expects a non-empty 1-D sequence")
    return np.fft.fft(arr) / arr.size


def numeric_inverse_dft(coeffs: Sequence[complex]) -> np.ndarray:
    arr = np.asarray(coeffs, dtype=np.complex128)
    if arr.ndim != 1 or arr.size == 0:
        raise ValueError("numeric_inverse_dft expects a non-empty 1-D sequence")
    return np.fft.ifft(arr) * arr.size


def signed_frequency(k: int, n: int) -> int:
    """Representative of k mod n in (-n/2, n/2]."""
    k %= n
    return k - n if k > n // 2 else k


__all__ = [
    "character",
    "exact_character",
    "character_table",
    "exact_character_table",
    "orthogonality",
    "lift_values",
    "dft",
    "inverse_dft",
    "hermitian_defect_on_cyclic",
    "is_hermitian_on_cyclic",
    "numeric_dft",
    "numeric_inverse_dft",
    "signed_frequency",
]
