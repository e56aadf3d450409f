#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Root multisets with exact multiplicities and certified locations.

Pipeline for an exact polynomial Q:

  1) Yun square-free decomposition:  Q = lc * prod_k S_k^k   (exact, Q(i))
  2) simple roots of every S_k from either
       - a root oracle (mpmath.polyroots), or
       - WeierstrassRefinement: a bounded Durand-Kerner sweep whose iterates
         are kept inside the Cauchy disc |z| <= B(S_k). Every approximate
         root set lies in that compact disc, so the refinement sequence has
         convergent subsequences; the loop stops at an a-priori stopping
         radius derived from the Landau bound M(S) <= ||S||_2.
  3) Weierstrass inclusion discs  D(z_i, d |W_i|): each contains a root;
     pairwise disjoint discs isolate the roots of S_k.
  4) classification against the unit circle by reflection: the reflection
     1/conj(alpha) of a root of a self-reciprocal part is again a root of
     that part. If the reflected disc meets only the root's own disc, the
     root is its own partner, i.e. |alpha| = 1 exactly.

Red-lines:
  - Multiplicities never come from clustering floating-point roots.
  - An undecidable classification is reported (IsolationFailure), never guessed.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import mpmath
from mpmath.libmp.libhyper import NoConvergence

from . import polynomial as P
from .errors import DidNotConverge, SpectralError
from .exact import require_exact_int

_logger = logging.getLogger(__name__)


class RootClass(Enum):
    INSIDE = "inside"
    ON_CIRCLE = "on_circle"
    OUTSIDE = "outside"


class IsolationFailure(SpectralError):
    """Inclusion discs overlap at the current precision; retry with more digits."""

    def __init__(self, details: str):
        self.details = details
        super().__init__(f"Root isolation failed: {details}")


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class LocatedRoot:
    """A simple root of square-free part ``part`` (multiplicity in Q = ``multiplicity``)."""

    value: mpmath.mpc
    multiplicity: int
    inclusion_radius: mpmath.mpf
    part: int
    precision: Optional[int] = None


@dataclass(frozen=True)
class RootRecord:
    """
    Root of Q(z) = z^n R(z), its multiplicity and its position relative to |z| = 1.

    ``inclusion_radius`` bounds the distance between ``value`` and the true root.
    ``precision`` is the decimal precision the root was located at (None: ambient).
    """

    value: mpmath.mpc
    multiplicity: int
    root_class: RootClass
    inclusion_radius: mpmath.mpf
    part: int = 0
    precision: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.multiplicity, int) or self.multiplicity < 1:
            raise ValueError(f"multiplicity must be int >= 1, got {self.multiplicity!r}")
        if not isinstance(self.root_class, RootClass):
            raise TypeError("root_class must be a RootClass")

    @property
    def modulus(self) -> mpmath.mpf:
        return abs(self.value)

    @property
    def argument(self) -> mpmath.mpf:
        return mpmath.arg(self.value)

    def sort_key(self) -> Tuple[float, float]:
        return (float(self.modulus), float(self.argument))

    def to_dict(self, digits: int = 20) -> Dict[str, Any]:
        return {
            "value": mpmath.nstr(self.value, digits),
            "multiplicity": int(self.multiplicity),
            "class": self.root_class.value,
            "inclusion_radius": mpmath.nstr(self.inclusion_radius, 5),
        }


# =============================================================================
# Bounds
# =============================================================================


def mahler_measure(leading_coefficient: Any, roots: Sequence[Tuple[Any, int]]) -> mpmath.mpf:
    """M(Q) = |lc| * prod max(1, |alpha|)^mult."""
    m = abs(mpmath.mpc(leading_coefficient))
    for z, mult in roots:
        az = abs(mpmath.mpc(z))
        if az > 1:
            m *= az ** int(mult)
    return m


def landau_bound(poly: P.Poly) -> mpmath.mpf:
    """Landau: M(Q) <= ||Q||_2."""
    return mpmath.sqrt(mpmath.fsum(abs(c) ** 2 for c in P.to_mp_coeffs(poly)))


def _rounding_floor(z: mpmath.mpc, d: int) -> mpmath.mpf:
    return 4 * (d + 1) * mpmath.mp.eps * max(mpmath.mpf(1), abs(z))


def evaluation_error(coeffs: Sequence[mpmath.mpc], z: mpmath.mpc) -> mpmath.mpf:
    """Rounding bound of Horner's rule for sum_j c_j z^j at the working precision."""
    d = len(coeffs) - 1
    az = abs(z)
    return 4 * (d + 1) * mpmath.mp.eps * mpmath.fsum(abs(c) * az ** j for j, c in enumerate(coeffs))


def inclusion_radii(coeffs: Sequence[mpmath.mpc], approx: Sequence[mpmath.mpc]) -> List[mpmath.mpf]:
    """
    Weierstrass inclusion radii: every disc D(z_i, d |W_i|) with
    W_i = S(z_i) / (lc * prod_{j != i} (z_i - z_j)) contains a root of S.

    |S(z_i)| is enlarged by the rounding error of its evaluation and the
    computed denominator is shrunk by its own rounding, so the discs enclose
    true roots even when the computed residual is below working precision.
    """
    d = len(approx)
    lc = coeffs[-1]
    horner = list(reversed(coeffs))
    shrink = 1 - 4 * (d + 1) * mpmath.mp.eps
    out: List[mpmath.mpf] = []
    for i, zi in enumerate(approx):
        val = mpmath.polyval(horner, zi)
        den = lc
        for j, zj in enumerate(approx):
            if j != i:
                den *= zi - zj
        if den == 0:
            out.append(mpmath.inf)
        else:
            residual = abs(val) + evaluation_error(coeffs, zi)
            out.append(d * residual / (abs(den) * shrink) + _rounding_floor(zi, d))
    return out


def discs_isolated(values: Sequence[mpmath.mpc], radii: Sequence[mpmath.mpf]) -> bool:
    for i in range(len(values)):
        for j in range(i + 1, len(values)):
            if abs(values[i] - values[j]) <= radii[i] + radii[j]:
                return False
    return True


# =============================================================================
# Oracles
# =============================================================================


class RootOracle(ABC):
    """
    ExactRootOracle interface: simple roots of a square-free exact polynomial.

    ``locate`` lifts it to arbitrary exact polynomials with exact multiplicities.
    """

    def __init__(self, precision: int = 50):
        self.precision = require_exact_int(precision, name="precision")
        if self.precision < 15:
            raise ValueError("precision (decimal digits) must be >= 15")

    @abstractmethod
    def simple_roots(self, part: P.Poly) -> List[mpmath.mpc]:
        """Roots of a square-free polynomial of degree >= 1."""

    def __call__(self, poly: Sequence[Any]) -> List[Tuple[mpmath.mpc, int]]:
        return [(r.value, r.multiplicity) for r in self.locate(poly)]

    def locate(self, poly: Sequence[Any]) -> List[LocatedRoot]:
        exact = P.exact_poly(poly)
        if P.is_zero(exact):
            raise ValueError("root oracle is undefined for the zero polynomial")
        out: List[LocatedRoot] = []
        with mpmath.workdps(self.precision):
            for index, (part, mult) in enumerate(P.square_free_decomposition(exact)):
                if P.degree(part) == 1:
                    root = -P.to_mp_coeffs(part)[0] / P.to_mp_coeffs(part)[1]
                    out.append(LocatedRoot(root, mult, _rounding_floor(root, 1), index, self.precision))
                    continue
                values = self.simple_roots(part)
                radii = inclusion_radii(P.to_mp_coeffs(part), values)
                if not discs_isolated(values, radii):
                    raise IsolationFailure(
                        f"square-free part {index} (degree {P.degree(part)}) not isolated at {self.precision} digits"
                    )
                out.extend(LocatedRoot(v, mult, rho, index, self.precision) for v, rho in zip(values, radii))
        total = sum(r.multiplicity for r in out)
        if total != P.degree(exact):
            raise DidNotConverge("root location", steps=0, best=f"{total} of {P.degree(exact)} roots")
        _logger.debug("located %d distinct roots (degree %d) at %d digits", len(out), total, self.precision)
        return out


class MpmathRootOracle(RootOracle):
    """mpmath.polyroots on each square-free part."""

    def __init__(self, precision: int = 50, maxsteps: int = 200):
        super().__init__(precision)
        self.maxsteps = require_exact_int(maxsteps, name="maxsteps")

    def simple_roots(self, part: P.Poly) -> List[mpmath.mpc]:
        coeffs = list(reversed(P.to_mp_coeffs(part)))
        try:
            roots = mpmath.polyroots(coeffs, maxsteps=self.maxsteps, extraprec=2 * self.precision)
        except NoConvergence as exc:
            raise DidNotConverge("mpmath.polyroots", self.maxsteps, best=str(exc)) from exc
        return [mpmath.mpc(r) for r in roots]


class WeierstrassRefinement(RootOracle):
    """
    Bounded Durand-Kerner refinement with a compact search region.

    Stops when every inclusion radius is below ``10^-(precision - guard_digits)``
    times the Landau bound of the part and the discs are pairwise disjoint.
    """

    def __init__(self, precision: int = 50, max_steps: int = 500, guard_digits: int = 10):
        super().__init__(precision)
        self.max_steps = require_exact_int(max_steps, name="max_steps")
        self.guard_digits = require_exact_int(guard_digits, name="guard_digits")
        if not 0 <= self.guard_digits < self.precision:
            raise ValueError("guard_digits must lie in [0, precision)")

    def stopping_radius(self, part: P.Poly) -> mpmath.mpf:
        scale = max(mpmath.mpf(1), landau_bound(part) / abs(P.to_mp_coeffs(part)[-1]))
        return mpmath.mpf(10) ** (-(self.precision - self.guard_digits)) * scale

    def simple_roots(self, part: P.Poly) -> List[mpmath.mpc]:
        coeffs = P.to_mp_coeffs(P.monic(part))
        d = len(coeffs) - 1
        bound = P.cauchy_bound(part)
        inner = P.lower_root_bound(part)
        start_radius = (bound + inner) / 2
        offset = mpmath.pi / (2 * d) + mpmath.mpf("0.4")
        z = [start_radius * mpmath.expj(2 * mpmath.pi * j / d + offset) for j in range(d)]
        target = self.stopping_radius(part)
        horner = list(reversed(coeffs))
        best = mpmath.inf
        for step in range(1, self.max_steps + 1):
            for i in range(d):
                den = mpmath.mpc(1)
                for j in range(d):
                    if j != i:
                        den *= z[i] - z[j]
                if den == 0:
                    # coincident iterates: perturb inside the disc
                    z[i] += target * mpmath.expj(i + 1)
                    continue
                z[i] -= mpmath.polyval(horner, z[i]) / den
                if abs(z[i]) > 2 * bound:
                    z[i] = bound * z[i] / abs(z[i])
            radii = inclusion_radii(coeffs, z)
            worst = max(radii)
            best = min(best, worst)
            if worst < target and discs_isolated(z, radii):
                _logger.debug("Weierstrass refinement: degree %d converged in %d sweeps", d, step)
                return list(z)
        raise DidNotConverge("Weierstrass refinement", self.max_steps, best=mpmath.nstr(best, 5))


# =============================================================================
# Classification
# =============================================================================


def _reflection_radius(value: mpmath.mpc, rho: mpmath.mpf) -> mpmath.mpf:
    m = abs(value)
    if m <= rho:
        return mpmath.inf
    return rho / (m * (m - rho)) + _rounding_floor(1 / m, 1)


def working_precision(roots: Sequence[Any]) -> int:
    """Decimal digits for comparing located roots: the largest recorded, at least the ambient."""
    recorded = [r.precision for r in roots if r.precision is not None]
    return max([mpmath.mp.dps] + recorded)


def reflection_partner(located: Sequence[Any], i: int) -> int:
    """
    Index of the root whose inclusion disc holds the reflection 1/conj(alpha_i).

    Only roots of the same square-free part are candidates. The comparison
    runs at the precision the roots were located at.

    Raises:
        IsolationFailure: none or several candidate discs meet the reflected disc.
    """
    with mpmath.workdps(working_precision(located)):
        me = located[i]
        w = 1 / mpmath.conj(me.value)
        rw = _reflection_radius(me.value, me.inclusion_radius)
        hits = [
            j
            for j, other in enumerate(located)
            if other.part == me.part and abs(other.value - w) <= other.inclusion_radius + rw
        ]
    if len(hits) != 1:
        raise IsolationFailure(f"reflection of root {i} meets {len(hits)} inclusion discs")
    return hits[0]


def classify_roots(located: Sequence[LocatedRoot]) -> List[RootRecord]:
    out: List[RootRecord] = []
    with mpmath.workdps(working_precision(located)):
        for i, r in enumerate(located):
            partner = reflection_partner(located, i)
            if partner == i:
                cls = RootClass.ON_CIRCLE
            elif abs(r.value) < abs(located[partner].value):
                cls = RootClass.INSIDE
            else:
                cls = RootClass.OUTSIDE
            out.append(RootRecord(r.value, r.multiplicity, cls, r.inclusion_radius, r.part, r.precision))
    return out



def default_oracle(precision: int = 50, *, use_oracle: bool = True, max_steps: int = 500,
                   guard_digits: int = 10) -> RootOracle:
    if use_oracle:
        return MpmathRootOracle(precision)
    return WeierstrassRefinement(precision, max_steps=max_steps, guard_digits=guard_digits)


__all__ = [
    "RootClass",
    "RootRecord",
    "LocatedRoot",
    "IsolationFailure",
    "RootOracle",
    "MpmathRootOracle",
    "WeierstrassRefinement",
    "mahler_measure",
    "landau_bound",
    "evaluation_error",
    "inclusion_radii",
    "discs_isolated",
    "working_precision",
    "reflection_partner",
    "classify_roots",
    "default_oracle",
]
