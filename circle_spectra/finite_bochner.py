#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Bochner's theorem on Z/nZ, exactly.

A function f on Z/nZ is positive-definite iff

    f = sum_k w_k chi_k      with every w_k >= 0,

and after dropping zero weights, iff it is a combination of characters with
strictly positive weights. The weights are the DFT coefficients
w_k = (1/n) sum_m f(m) chi_k(-m): the character table is invertible, so the
representation is unique. Everything is computed in Q(zeta_lcm(n,4)); signs
of the (real) coefficients are certified, never read off a float.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Dict, Mapping, Sequence, Tuple

from .certificates import sha256_hex_of_dict
from .characters import dft, hermitian_defect_on_cyclic, inverse_dft, lift_values, signed_frequency
from .cyclotomic import CyclotomicField, CyclotomicNumber
from .errors import NotPositiveDefinite
from .exact import GaussianRational, require_exact_int, to_exact
from .measure import SpectralMeasure

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FiniteBochnerDecomposition:
    """
    f = sum_{k in weights} weights[k] * chi_k on Z/nZ with every weight > 0.

    ``coefficients`` is the full DFT (zero entries included); ``weights``
    keeps the strictly positive ones, keyed by k in 0..n-1.
    """

    n: int
    values: Tuple[Any, ...]
    coefficients: Tuple[CyclotomicNumber, ...]
    weights: Tuple[Tuple[int, CyclotomicNumber], ...]

    @property
    def support(self) -> Tuple[int, ...]:
        return tuple(k for k, _ in self.weights)

    def weight_map(self) -> Dict[int, CyclotomicNumber]:
        return dict(self.weights)

    def rational_weights(self) -> Dict[int, Fraction]:
        """Weights as Fractions; ValueError when one of them is irrational."""
        return {k: w.as_rational() for k, w in self.weights}

    def numeric_weights(self) -> Dict[int, float]:
        return {k: float(w.to_complex().real) for k, w in self.weights}

    def reconstruct(self) -> Tuple[CyclotomicNumber, ...]:
        """sum_k w_k chi_k(m) for m = 0..n-1, exactly."""
        field = CyclotomicField(self.n)
        full = [field.zero()] * self.n
        for k, w in self.weights:
            full[k] = w
        return inverse_dft(full)

    def matches_input(self) -> bool:
        return self.reconstruct() == lift_values(self.values)

    def to_spectral_measure(self) -> SpectralMeasure:
        """Weights on signed frequencies in (-n/2, n/2]; exact when rational."""
        weights: Dict[int, Any] = {}
        for k, w in self.weights:
            weights[signed_frequency(k, self.n)] = w.as_rational() if w.is_rational() else float(w.to_complex().real)
        return SpectralMeasure(weights, error_bound=0.0, discretization=self.n, cutoff=self.n // 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n": int(self.n),
            "values": [to_exact(v) for v in self.values],
            "weights": {str(k): (w.as_rational() if w.is_rational() else [c for c in w.coeffs]) for k, w in self.weights},
        }

    def digest(self) -> str:
        return sha256_hex_of_dict(self.to_dict())


def bochner_finite(values: Sequence[Any]) -> FiniteBochnerDecomposition:
    """
    Exact finite Bochner decomposition of f = values on Z/nZ.

    Raises:
        ValueError: empty input.
        NotPositiveDefinite: f is not Hermitian (f(-m) != conj f(m)), or a
            Fourier coefficient is negative; ``index`` names the frequency.
    """
    if len(values) == 0:
        raise ValueError("bochner_finite needs at least one value")
    n = len(values)
    exact = tuple(to_exact(v) for v in values)
    m = hermitian_defect_on_cyclic(exact)
    if m is not None:
        raise NotPositiveDefinite(f"f(-{m}) != conj(f({m})) on Z/{n}Z", index=m, value=exact[m])

    coefficients = dft(exact)
    weights = []
    for k, c in enumerate(coefficients):
        if not c.is_real():
            raise NotPositiveDefinite(f"coefficient {k} is not real", index=k, value=complex(c))
        sign = c.sign()
        if sign < 0:
            raise NotPositiveDefinite(
                f"negative Fourier coefficient on Z/{n}Z", index=k, value=float(c.to_complex().real)
            )
        if sign > 0:
            weights.append((k, c))
    _logger.debug("finite Bochner on Z/%dZ: %d of %d characters carry positive weight", n, len(weights), n)
    return FiniteBochnerDecomposition(n, exact, coefficients, tuple(weights))


def is_positive_definite_finite(values: Sequence[Any]) -> bool:
    try:
        bochner_finite(values)
    except NotPositiveDefinite:
        return False
    return True


def from_characters(n: int, weights: Mapping[int, Any]) -> Tuple[CyclotomicNumber, ...]:
    """
    The function sum_k weights[k] * chi_k on Z/nZ, exactly.

    Weights must be non-negative rationals; frequencies are taken mod n.
    """
    n = require_exact_int(n, name="n")
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    field = CyclotomicField(n)
    full = [field.zero()] * n
    for k, w in weights.items():
        ww = to_exact(w)
        if isinstance(ww, GaussianRational) or ww < 0:
            raise ValueError(f"weight at {k} must be a non-negative rational, got {w!r}")
        idx = require_exact_int(k, name="frequency") % n
        full[idx] = full[idx] + Fraction(ww)
    return inverse_dft(full)


__all__ = [
    "FiniteBochnerDecomposition",
    "bochner_finite",
    "is_positive_definite_finite",
    "from_characters",
]
