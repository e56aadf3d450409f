#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Argument principle by discretised winding numbers.

For a polynomial Q and a radius r with no root on |z| = r, the number of roots
(with multiplicity) of modulus < r equals the winding number of the closed
curve theta -> Q(r e^{i theta}) around 0. We sample the curve at N equally
spaced angles and add up principal arguments of consecutive ratios; the sum
is exact once every true argument step is < pi.

Two certificates establish that step condition:

  gap certificate         N >= N0(deg, r, gap) = floor(2 deg r / gap) + 1,
                          where gap = min_i | |alpha_i| - r |. Indeed
                          |d/dtheta arg Q| <= sum_i r / |z - alpha_i| <= deg r / gap,
                          so a step of 2 pi / N moves the argument by < pi.

  derivative certificate  no root data needed. With D = sum_k k |q_k| r^{k-1}
                          bounding |Q'| on the circle, each arc between samples
                          satisfies |Q| >= m_j = min(|Q(z_j)|, |Q(z_{j+1})|) - D r delta / 2,
                          and its argument change is <= D r delta / m_j.

Below its certificate a winding value carries no guarantee and is never
returned, cached or merged.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .errors import DidNotConverge, InternalInvariantViolation, RootOnBoundary, WindingNotCertified
from .exact import require_exact_int, to_mp

_logger = logging.getLogger(__name__)

_FLOAT64_EPS = float(np.finfo(np.float64).eps)
_ROUNDING_RESIDUAL = 0.25  # a certified sum sits within rounding of an integer


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class WindingSample:
    """
    One certified winding computation.

      - coefficients: ascending coefficients of Q (as complex)
      - radius / n: circle radius and discretisation count
      - value: winding number = #roots with |alpha| < radius
      - threshold: N0 known to suffice (None when certified step-by-step)
      - certificate: "gap" or "derivative"
    """

    coefficients: Tuple[complex, ...]
    radius: float
    n: int
    value: int
    threshold: Optional[int]
    certificate: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "radius": repr(self.radius),
            "n": int(self.n),
            "value": int(self.value),
            "threshold": None if self.threshold is None else int(self.threshold),
            "certificate": self.certificate,
        }


# =============================================================================
# Helpers
# =============================================================================


def _as_complex_array(poly: Sequence[Any]) -> np.ndarray:
    arr = np.array([complex(to_mp(c)) for c in poly], dtype=np.complex128)
    nz = np.nonzero(arr)[0]
    if nz.size == 0:
        raise ValueError("winding number of the zero polynomial is undefined")
    return arr[: int(nz[-1]) + 1]


def _validate_radius(radius: Any) -> float:
    r = float(radius)
    if not math.isfinite(r) or r <= 0:
        raise ValueError(f"radius must be finite and > 0, got {radius!r}")
    return r


def winding_threshold(degree: int, radius: Any, min_gap: Any) -> int:
    """N0(deg, r, gap) = floor(2 deg r / gap) + 1; every N >= N0 is exact."""
    degree = require_exact_int(degree, name="degree")
    if degree < 0:
        raise ValueError("degree must be >= 0")
    r = _validate_radius(radius)
    gap = float(min_gap)
    if gap <= 0:
        raise RootOnBoundary(radius, "minimal gap between root moduli and radius is 0")
    return int(math.floor(2.0 * degree * r / gap)) + 1


def _value_and_multiplicity(item: Any) -> Tuple[Any, int]:
    if isinstance(item, tuple):
        return item[0], int(item[1])
    if hasattr(item, "value") and hasattr(item, "multiplicity"):
        return item.value, int(item.multiplicity)
    return item, 1


def root_gap(roots: Iterable[Any], radius: Any) -> float:
    """min over roots of | |alpha| - r |; roots are values, (value, mult) pairs or RootRecords."""
    r = _validate_radius(radius)
    gaps = [abs(abs(complex(to_mp(_value_and_multiplicity(item)[0]))) - r) for item in roots]
    return min(gaps) if gaps else math.inf


def count_roots_inside(roots: Iterable[Any], radius: Any) -> int:
    r = _validate_radius(radius)
    total = 0
    for item in roots:
        z, m = _value_and_multiplicity(item)
        if abs(complex(to_mp(z))) < r:
            total += m
    return total


def _samples(coeffs: np.ndarray, r: float, n: int) -> np.ndarray:
    theta = 2.0 * np.pi * np.arange(n) / n
    z = r * np.exp(1j * theta)
    return np.polyval(coeffs[::-1], z)


def _evaluation_error(coeffs: np.ndarray, r: float) -> float:
    deg = coeffs.size - 1
    scale = float(np.sum(np.abs(coeffs) * r ** np.arange(coeffs.size)))
    return 4.0 * (2 * deg + 2) * _FLOAT64_EPS * scale


# =============================================================================
# Winding numbers
# =============================================================================


def winding_sample(
    poly: Sequence[Any],
    radius: Any,
    n: int,
    *,
    min_gap: Any = None,
) -> WindingSample:
    """
    Certified winding number of Q(r e^{i theta}) from N samples.

    Raises:
        RootOnBoundary: gap <= 0, or a sample vanishes within evaluation error.
        WindingNotCertified: N below the gap threshold, or a step fails the
            derivative certificate (``threshold`` suggests the next N).
    """
    coeffs = _as_complex_array(poly)
    r = _validate_radius(radius)
    n = require_exact_int(n, name="N")
    if n < 1:
        raise ValueError(f"N must be >= 1, got {n}")
    deg = coeffs.size - 1
    key = tuple(complex(c) for c in coeffs)
    if deg == 0:
        return WindingSample(key, r, n, 0, 1, "constant")

    threshold: Optional[int] = None
    if min_gap is not None:
        threshold = winding_threshold(deg, r, min_gap)
        if n < threshold:
            raise WindingNotCertified(n, threshold, "below gap threshold")

    q = _samples(coeffs, r, n)
    mod = np.abs(q)
    err = _evaluation_error(coeffs, r)
    j_min = int(np.argmin(mod))
    if mod[j_min] <= err:
        raise RootOnBoundary(radius, f"sample {j_min} of {n} vanishes (|Q| = {mod[j_min]:.3e} <= {err:.3e})")

    mod_next = np.roll(mod, -1)
    if threshold is None:
        delta = 2.0 * np.pi / n
        d_bound = float(sum(k * abs(coeffs[k]) * r ** (k - 1) for k in range(1, deg + 1)))
        lower = np.minimum(mod, mod_next) - d_bound * r * delta / 2.0 - err
        ok = (lower > 0) & (d_bound * r * delta < np.pi * lower)
        if not bool(np.all(ok)):
            bad = int(np.argmin(ok))
            estimate = int(math.floor(d_bound * r * (2.0 + np.pi) / max(float(mod[j_min]) - err, err))) + 1
            raise WindingNotCertified(n, max(estimate, 2 * n), f"derivative certificate failed at step {bad}")
        certificate = "derivative"
    else:
        certificate = "gap"

    ratios = np.roll(q, -1) / q
    total = math.fsum(np.angle(ratios).tolist())
    w = total / (2.0 * np.pi)
    value = int(round(w))
    if abs(w - value) > _ROUNDING_RESIDUAL:
        raise InternalInvariantViolation(
            "winding_integrality",
            f"certified argument sum {total!r} is {abs(w - value):.3e} turns away from an integer",
        )
    if not 0 <= value <= deg:
        raise InternalInvariantViolation("winding_range", f"winding {value} outside [0, {deg}]")
    _logger.debug("winding r=%s N=%d -> %d (%s)", r, n, value, certificate)
    return WindingSample(key, r, n, value, threshold, certificate)


def winding_number(poly: Sequence[Any], radius: Any, n: int, *, min_gap: Any = None) -> int:
    """windingNumber(Q, r, N): roots of modulus < r, or a certification failure."""
    return winding_sample(poly, radius, n, min_gap=min_gap).value


def certified_winding_number(
    poly: Sequence[Any],
    radius: Any,
    *,
    start: int = 16,
    max_doublings: int = 20,
) -> WindingSample:
    """
    Increase N (at least doubling) until the derivative certificate holds.

    Raises:
        RootOnBoundary: a sample lands on a root.
        DidNotConverge: the budget is exhausted (e.g. a root exactly on the
            circle between samples).
    """
    n = max(1, require_exact_int(start, name="start"))
    last: Optional[WindingNotCertified] = None
    for step in range(max_doublings + 1):
        try:
            return winding_sample(poly, radius, n)
        except WindingNotCertified as exc:
            last = exc
            _logger.debug("winding refinement step %d: N=%d not certified (%s)", step, n, exc.details)
            n = max(2 * n, exc.threshold or 0)
    raise DidNotConverge("winding-number refinement", max_doublings, best=None if last is None else last.threshold)


# =============================================================================
# Per-run cache
# =============================================================================


@dataclass
class WindingCache:
    """
    Certified samples of one polynomial, keyed by radius.

    Values merge by exact equality only; conflicting certified values expose an
    implementation defect.
    """

    samples: Dict[float, WindingSample] = field(default_factory=dict)

    def get(self, radius: Any) -> Optional[WindingSample]:
        return self.samples.get(float(radius))

    def merge(self, sample: WindingSample) -> WindingSample:
        key = float(sample.radius)
        prev = self.samples.get(key)
        if prev is not None and prev.value != sample.value:
            raise InternalInvariantViolation(
                "winding_merge",
                f"radius {key}: certified values {prev.value} (N={prev.n}) and {sample.value} (N={sample.n}) disagree",
            )
        if prev is None or sample.n < prev.n:
            self.samples[key] = sample
        return self.samples[key]

    def values(self) -> List[WindingSample]:
        return [self.samples[k] for k in sorted(self.samples)]


def verify_root_counts(
    poly: Sequence[Any],
    roots: Sequence[Tuple[Any, int]],
    radii: Iterable[Any],
    *,
    max_samples: int,
    cache: Optional[WindingCache] = None,
) -> Tuple[List[WindingSample], List[float]]:
    """
    Cross-check a root multiset against certified winding numbers.

    Radii whose gap threshold exceeds ``max_samples`` are not computed (no
    below-threshold value is ever used) and are returned in the second list.

    Raises:
        InternalInvariantViolation: a certified count disagrees with the roots.
    """
    cache = cache if cache is not None else WindingCache()
    coeffs = _as_complex_array(poly)
    deg = coeffs.size - 1
    done: List[WindingSample] = []
    skipped: List[float] = []
    for radius in radii:
        r = _validate_radius(radius)
        gap = root_gap(roots, r)
        n0 = winding_threshold(deg, r, gap)
        if n0 > max_samples:
            _logger.warning("winding check at r=%.6g skipped: N0=%d exceeds budget %d", r, n0, max_samples)
            skipped.append(r)
            continue
        sample = cache.merge(winding_sample(coeffs, r, n0, min_gap=gap))
        expected = count_roots_inside(roots, r)
        if sample.value != expected:
            raise InternalInvariantViolation(
                "root_count",
                f"winding number {sample.value} at r={r} but root multiset has {expected} roots inside",
            )
        done.append(sample)
    return done, skipped


def separating_radii(moduli: Iterable[Any]) -> List[float]:
    """Midpoints between consecutive distinct moduli, plus one radius beyond the largest."""
    ms = sorted({float(m) for m in moduli})
    out = [(a + b) / 2.0 for a, b in zip(ms, ms[1:])]
    if ms:
        out.append(ms[-1] * 1.5 + 0.5)
    return [r for r in out if r > 0]


__all__ = [
    "WindingSample",
    "WindingCache",
    "winding_threshold",
    "root_gap",
    "count_roots_inside",
    "winding_sample",
    "winding_number",
    "certified_winding_number",
    "verify_root_counts",
    "separating_radii",
]
