#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Constructive Bochner theorem on the circle by finite sampling.

For a continuous, periodic, positive-definite f the Fourier coefficients

    c_k = (1/2pi) int_0^{2pi} f(theta) e^{-ik theta} d theta

are >= 0 and sum to f(0). We never integrate: on Z/NZ the sample
f_N(m) = f(2 pi m / N) is positive-definite, and by character orthogonality
that is the same as every DFT coefficient

    c_k^N = (1/N) sum_m f_N(m) chi_k(-m)

being >= 0. c_k^N is the N-th Riemann sum of c_k, and with a modulus of
continuity omega of f (the caller's witness)

    |c_k^N - c_k| <= e_N(K) = omega(2pi/N) + K (2pi/N) f(0)      for |k| <= K.

Setting mu_k = max(0, Re c_k^N) for |k| <= K (projection onto [0, inf) only
moves c_k^N closer to c_k >= 0) gives the certified sup-norm bound

    sup |f - sum mu_k e^{ik theta}| <= E(N, K) = 2 (2K + 1) e_N(K) + (f(0) - sum_{|k|<=K} mu_k),

the second term bounding the tail sum_{|k|>K} c_k. E is minimised over K and
N doubles until E <= tolerance.

A coefficient c_k^N below the rounding slack refutes positive-definiteness
outright (restriction to a subgroup preserves it), so it raises
NotPositiveDefinite rather than asking for more samples.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import numpy as np
from scipy import integrate

from .characters import numeric_dft, signed_frequency
from .errors import DidNotConverge, InternalInvariantViolation, NotContinuous, NotPositiveDefinite
from .exact import require_exact_int
from .measure import SpectralMeasure

_logger = logging.getLogger(__name__)

_FLOAT64_EPS = float(np.finfo(np.float64).eps)


# =============================================================================
# Witness and configuration
# =============================================================================


@dataclass(frozen=True)
class BochnerWitness:
    """
    Caller-supplied evidence about f.

      - modulus_of_continuity: omega(delta) >= |f(s) - f(t)| whenever |s - t| <= delta
      - hermitian_tolerance: absolute slack for f(-t) = conj(f(t)) and for
        rounding in the values of f
    """

    modulus_of_continuity: Callable[[float], float]
    hermitian_tolerance: float = 1e-12

    def __post_init__(self) -> None:
        if not callable(self.modulus_of_continuity):
            raise TypeError("modulus_of_continuity must be callable")
        tol = float(self.hermitian_tolerance)
        if not math.isfinite(tol) or tol < 0:
            raise ValueError(f"hermitian_tolerance must be finite and >= 0, got {self.hermitian_tolerance!r}")

    @classmethod
    def lipschitz(cls, constant: float, hermitian_tolerance: float = 1e-12) -> "BochnerWitness":
        """omega(delta) = L * delta."""
        L = float(constant)
        if not math.isfinite(L) or L < 0:
            raise ValueError(f"Lipschitz constant must be finite and >= 0, got {constant!r}")
        return cls(lambda delta: L * delta, hermitian_tolerance)

    def omega(self, delta: float) -> float:
        value = float(self.modulus_of_continuity(float(delta)))
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"modulus of continuity returned {value!r} at delta={delta!r}")
        return value


@dataclass(frozen=True)
class BochnerConfig:
    initial_n: int = 16
    max_doublings: int = 20
    max_cutoff: Optional[int] = None
    cross_check: bool = False

    def __post_init__(self) -> None:
        if require_exact_int(self.initial_n, name="initial_n") < 2:
            raise ValueError("initial_n must be >= 2")
        if require_exact_int(self.max_doublings, name="max_doublings") < 0:
            raise ValueError("max_doublings must be >= 0")
        if self.max_cutoff is not None and require_exact_int(self.max_cutoff, name="max_cutoff") < 0:
            raise ValueError("max_cutoff must be >= 0")


# =============================================================================
# Finite samples
# =============================================================================


@dataclass(frozen=True, eq=False)
class FiniteSample:
    """f sampled on Z/NZ with its DFT and the finite positive-definiteness verdict."""

    n: int
    samples: np.ndarray
    coefficients: np.ndarray
    positive_definite: bool
    slack: float
    f0: float

    def first_negative(self) -> Optional[Tuple[int, float]]:
        """(signed frequency, Re c_k) of the most negative coefficient beyond the slack."""
        re = self.coefficients.real
        k = int(np.argmin(re))
        if re[k] < -self.slack:
            return signed_frequency(k, self.n), float(re[k])
        return None

    def signed_coefficients(self) -> Dict[int, float]:
        return {signed_frequency(k, self.n): float(c.real) for k, c in enumerate(self.coefficients)}


def sample_finite(f: Callable[[float], Any], n: int, witness: BochnerWitness) -> FiniteSample:
    """
    Sample f at 2 pi m / N and certify the finite hypotheses.

    Raises:
        NotContinuous: consecutive samples jump by more than omega(2pi/N).
        NotPositiveDefinite: f(0) not real and >= 0, |f(m)| > f(0), or f not
            Hermitian within the witness tolerance.
        ValueError: N < 1 or f returned a non-finite value.
    """
    n = require_exact_int(n, name="N")
    if n < 1:
        raise ValueError(f"N must be >= 1, got {n}")
    thetas = 2.0 * np.pi * np.arange(n) / n
    samples = np.array([complex(f(float(t))) for t in thetas], dtype=np.complex128)
    if not np.all(np.isfinite(samples)):
        raise ValueError("f returned a non-finite value")
    tol = float(witness.hermitian_tolerance)
    scale = float(np.max(np.abs(samples)))

    bound = witness.omega(2.0 * np.pi / n) + 4.0 * _FLOAT64_EPS * scale + tol
    jumps = np.abs(np.roll(samples, -1) - samples)
    j = int(np.argmax(jumps))
    if jumps[j] > bound:
        raise NotContinuous(j, float(jumps[j]), bound)

    f0 = samples[0]
    if abs(f0.imag) > tol or f0.real < -tol:
        raise NotPositiveDefinite("f(0) must be real and >= 0", index=0, value=complex(f0))
    f0_real = max(float(f0.real), 0.0)
    mirror = np.conj(samples[(-np.arange(n)) % n])
    herm = np.abs(samples - mirror)
    m = int(np.argmax(herm))
    if herm[m] > 2.0 * tol + 4.0 * _FLOAT64_EPS * scale:
        raise NotPositiveDefinite(f"f(-t) != conj(f(t)) at sample {m}", index=m, value=complex(samples[m]))
    over = int(np.argmax(np.abs(samples)))
    if abs(samples[over]) > f0_real + tol + 4.0 * _FLOAT64_EPS * scale:
        raise NotPositiveDefinite(f"|f| exceeds f(0) at sample {over}", index=over, value=complex(samples[over]))

    coefficients = numeric_dft(samples)
    slack = _FLOAT64_EPS * n * f0_real + tol
    positive_definite = bool(np.all(coefficients.real >= -slack) and np.all(np.abs(coefficients.imag) <= slack + tol))
    return FiniteSample(n, samples, coefficients, positive_definite, slack, f0_real)


# =============================================================================
# Error bounds
# =============================================================================


def riemann_error_bound(witness: BochnerWitness, n: int, cutoff: int, sup_norm: float) -> float:
    """e_N(K) = omega(2pi/N) + K (2pi/N) sup|f|: Riemann-sum error of c_k, |k| <= K."""
    n = require_exact_int(n, name="N")
    cutoff = require_exact_int(cutoff, name="K")
    if n < 1 or cutoff < 0:
        raise ValueError("N must be >= 1 and K >= 0")
    delta = 2.0 * math.pi / n
    return witness.omega(delta) + cutoff * delta * float(sup_norm)


def certified_error(sample: FiniteSample, witness: BochnerWitness, max_cutoff: Optional[int] = None) -> Tuple[float, int]:
    """
    min over K of E(N, K) with the minimising K.

    K stays below N/2 so that k and -k are distinct classes mod N.
    """
    n = sample.n
    k_max = (n - 1) // 2
    if max_cutoff is not None:
        k_max = min(k_max, int(max_cutoff))
    mu = np.maximum(sample.coefficients.real, 0.0)
    pair_mass = np.zeros(k_max + 1)
    pair_mass[0] = mu[0]
    if k_max >= 1:
        ks = np.arange(1, k_max + 1)
        pair_mass[1:] = mu[ks] + mu[(-ks) % n]
    captured = np.cumsum(pair_mass)
    cutoffs = np.arange(k_max + 1)
    delta = 2.0 * np.pi / n
    e_n = witness.omega(delta) + cutoffs * delta * sample.f0 + sample.slack
    tail = np.maximum(sample.f0 - captured, 0.0)
    total = 2.0 * (2.0 * cutoffs + 1.0) * e_n + tail
    best = int(np.argmin(total))
    return float(total[best]), best


def fourier_coefficient(f: Callable[[float], Any], k: int, *, limit: int = 200) -> Tuple[complex, float]:
    """
    Reference coefficient (1/2pi) int f(theta) e^{-ik theta} by adaptive quadrature.

    Returns (value, absolute error estimate).
    """
    k = require_exact_int(k, name="k")
    re, re_err = integrate.quad(lambda t: (complex(f(t)) * complex(math.cos(k * t), -math.sin(k * t))).real,
                                0.0, 2.0 * math.pi, limit=limit)
    im, im_err = integrate.quad(lambda t: (complex(f(t)) * complex(math.cos(k * t), -math.sin(k * t))).imag,
                                0.0, 2.0 * math.pi, limit=limit)
    scale = 1.0 / (2.0 * math.pi)
    return complex(re, im) * scale, (re_err + im_err) * scale


def _cross_check(f: Callable[[float], Any], measure: SpectralMeasure, riemann: float, ks: Iterable[int]) -> None:
    for k in ks:
        ref, err = fourier_coefficient(f, k)
        gap = abs(float(measure[k]) - ref.real)
        if gap > riemann + err + 1e3 * _FLOAT64_EPS:
            raise InternalInvariantViolation(
                "riemann_bound",
                f"coefficient {k}: sampled {float(measure[k])!r} vs quadrature {ref.real!r} exceeds bound {riemann!r}",
            )


# =============================================================================
# Entry point
# =============================================================================


def bochner_approximate(
    f: Callable[[float], Any],
    witness: BochnerWitness,
    tolerance: float,
    config: Optional[BochnerConfig] = None,
) -> SpectralMeasure:
    """
    Non-negative spectral measure mu with sup |f - sum mu_k e^{ik theta}| <= tolerance.

    Raises:
        NotPositiveDefinite: a finite sample has a negative Fourier coefficient.
        NotContinuous: samples violate the witness's modulus of continuity.
        DidNotConverge: the certified error stays above ``tolerance`` after
            ``max_doublings`` doublings of N.
    """
    if not isinstance(witness, BochnerWitness):
        raise TypeError("witness must be a BochnerWitness")
    tolerance = float(tolerance)
    if not math.isfinite(tolerance) or tolerance <= 0:
        raise ValueError(f"tolerance must be finite and > 0, got {tolerance!r}")
    config = config or BochnerConfig()

    n = int(config.initial_n)
    best: Optional[float] = None
    for step in range(config.max_doublings + 1):
        sample = sample_finite(f, n, witness)
        negative = sample.first_negative()
        if negative is not None:
            k, value = negative
            raise NotPositiveDefinite(
                f"finite sample on Z/{n}Z has a negative Fourier coefficient", index=k, value=value
            )
        if not sample.positive_definite:
            raise NotPositiveDefinite(f"finite sample on Z/{n}Z has non-real Fourier coefficients")
        error, cutoff = certified_error(sample, witness, config.max_cutoff)
        best = error if best is None else min(best, error)
        _logger.debug("Bochner step %d: N=%d K=%d certified error %.3e", step, n, cutoff, error)
        if error <= tolerance:
            weights = {}
            for k in range(-cutoff, cutoff + 1):
                mu = max(0.0, float(sample.coefficients[k % n].real))
                if mu > 0.0:
                    weights[k] = mu
            measure = SpectralMeasure(weights, error_bound=error, discretization=n, cutoff=cutoff, refinement=step)
            if config.cross_check:
                riemann = riemann_error_bound(witness, n, cutoff, sample.f0) + sample.slack
                _cross_check(f, measure, riemann, range(-cutoff, cutoff + 1))
            _logger.info(
                "Bochner measure: N=%d K=%d |support|=%d mass=%.6g certified error %.3e",
                n, cutoff, len(measure), float(measure.total_mass), error,
            )
            return measure
        n *= 2
    raise DidNotConverge("Bochner sampling", config.max_doublings, best=best)


__all__ = [
    "BochnerWitness",
    "BochnerConfig",
    "FiniteSample",
    "sample_finite",
    "riemann_error_bound",
    "certified_error",
    "fourier_coefficient",
    "bochner_approximate",
]
