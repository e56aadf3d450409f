#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Spectral measures on the integers.

A SpectralMeasure is a non-negative, finitely supported weight map k -> mu_k
whose exponential sum

    f_mu(theta) = sum_k mu_k e^{ik theta}

approximates (or, for finite groups, equals) a positive-definite function.
``error_bound`` is the certified sup-norm distance to that function;
``discretization`` and ``cutoff`` record the sample count N and frequency
window K it came from; ``refinement`` counts the doubling steps taken.

Instances are immutable and built only through validation
(``SpectralMeasure.from_sequence`` or the constructor, which runs the same
checks).
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .certificates import sha256_hex_of_dict
from .exact import require_exact_int
from .trig_poly import TrigPoly

Weight = Union[int, float, Fraction]


def _validate_weight(k: int, w: Any) -> Weight:
    if isinstance(w, bool) or not isinstance(w, numbers.Real):
        raise TypeError(f"weight at {k} must be a real number, got {type(w).__name__}")
    if isinstance(w, (float, np.floating)):
        w = float(w)
        if not math.isfinite(w):
            raise ValueError(f"weight at {k} is not finite: {w!r}")
    elif not isinstance(w, (int, Fraction)):
        w = Fraction(w)
    if w < 0:
        raise ValueError(f"weight at {k} is negative: {w!r}")
    return w


def _total(values: Iterable[Weight]) -> Weight:
    vals = list(values)
    if all(isinstance(v, (int, Fraction)) for v in vals):
        return sum(vals, Fraction(0))
    return math.fsum(float(v) for v in vals)


@dataclass(frozen=True, eq=False)
class SpectralMeasure:
    weights: Mapping[int, Weight]
    error_bound: float = 0.0
    discretization: Optional[int] = None
    cutoff: Optional[int] = None
    refinement: int = 0
    _items: Tuple[Tuple[int, Weight], ...] = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        cleaned: Dict[int, Weight] = {}
        for k, w in dict(self.weights).items():
            kk = require_exact_int(k, name="frequency")
            ww = _validate_weight(kk, w)
            if ww != 0:
                cleaned[kk] = ww
        bound = float(self.error_bound)
        if not math.isfinite(bound) or bound < 0:
            raise ValueError(f"error_bound must be finite and >= 0, got {self.error_bound!r}")
        items = tuple(sorted(cleaned.items()))
        object.__setattr__(self, "weights", dict(items))
        object.__setattr__(self, "error_bound", bound)
        object.__setattr__(self, "_items", items)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_sequence(
        cls,
        values: Union[Mapping[int, Any], Sequence[Any]],
        *,
        offset: int = 0,
        **meta: Any,
    ) -> "SpectralMeasure":
        """
        Build from a mapping k -> weight, or from a sequence whose entry j sits
        at frequency j + offset. Negative or non-finite weights raise.
        """
        if isinstance(values, Mapping):
            return cls(dict(values), **meta)
        offset = require_exact_int(offset, name="offset")
        return cls({j + offset: w for j, w in enumerate(values)}, **meta)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def support(self) -> Tuple[int, ...]:
        return tuple(k for k, _ in self._items)

    @property
    def total_mass(self) -> Weight:
        return _total(w for _, w in self._items)

    def __getitem__(self, k: int) -> Weight:
        return self.weights.get(int(k), 0)

    def __len__(self) -> int:
        return len(self._items)

    def mass(self, where: Union[Iterable[int], Callable[[int], bool]]) -> Weight:
        """Measure of a set of frequencies (an iterable or a predicate)."""
        if callable(where):
            return _total(w for k, w in self._items if where(k))
        wanted = {int(k) for k in where}
        return _total(w for k, w in self._items if k in wanted)

    def evaluate(self, theta: Any) -> complex:
        t = float(theta)
        return complex(sum(float(w) * complex(math.cos(k * t), math.sin(k * t)) for k, w in self._items))

    def evaluate_many(self, thetas: Sequence[float]) -> np.ndarray:
        t = np.asarray(thetas, dtype=np.float64)
        out = np.zeros(t.shape, dtype=np.complex128)
        for k, w in self._items:
            out += float(w) * np.exp(1j * k * t)
        return out

    def to_trig_poly(self) -> TrigPoly:
        return TrigPoly(dict(self._items))

    def distance_to(self, other: "SpectralMeasure") -> float:
        """l1 distance between weight maps (a bound on the sup-distance of the sums)."""
        keys = set(self.support) | set(other.support)
        return math.fsum(abs(float(self[k]) - float(other[k])) for k in keys)

    # ------------------------------------------------------------------
    # Certificates
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weights": {str(k): (w if isinstance(w, (int, Fraction)) else repr(float(w))) for k, w in self._items},
            "error_bound": repr(self.error_bound),
            "discretization": self.discretization,
            "cutoff": self.cutoff,
            "refinement": int(self.refinement),
        }

    def digest(self) -> str:
        return sha256_hex_of_dict(self.to_dict())

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, SpectralMeasure):
            return NotImplemented
        return (self._items, self.error_bound, self.discretization, self.cutoff) == (
            other._items, other.error_bound, other.discretization, other.cutoff
        )

    def __hash__(self) -> int:
        return hash((self._items, self.error_bound, self.discretization, self.cutoff))

    def __repr__(self) -> str:
        body = ", ".join(f"{k}: {w}" for k, w in self._items)
        return f"SpectralMeasure({{{body}}}, error_bound={self.error_bound:.3e}, N={self.discretization}, K={self.cutoff})"


__all__ = ["SpectralMeasure"]
