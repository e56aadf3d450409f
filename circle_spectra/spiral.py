#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Spiral symmetry: conjugate-reciprocal pairing of the roots of Q(z) = z^n R(z).

For Hermitian R the polynomial Q is self-reciprocal, so its roots are closed
under alpha -> 1/conj(alpha) with multiplicities preserved. Non-negativity of
R additionally forces every root on |z| = 1 to have even multiplicity. The
pairing below verifies both facts on the data; it never assumes them.

Representative choice (one root per pair) is made deterministic:
  - "inside"  (default): the root of modulus < 1, giving the minimum-phase
    (outer) factor whose leading normalisation is the Mahler measure of Q;
  - "outside": the root of modulus > 1 (maximum-phase factor).
On-circle roots contribute half of their multiplicity either way. Pairs are
ordered by (modulus, argument) of their representative.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

import mpmath

from .errors import InternalInvariantViolation
from .roots import RootClass, RootRecord, reflection_partner, working_precision

_logger = logging.getLogger(__name__)

REPRESENTATIVE_CHOICES = ("inside", "outside")


@dataclass(frozen=True)
class SpiralPair:
    """
    One orbit {alpha, 1/conj(alpha)} of the reflection.

    ``multiplicity`` is the multiplicity the representative carries into the
    factor: the common multiplicity of an off-circle pair, or half the
    multiplicity of an on-circle root.
    """

    representative: RootRecord
    partner: RootRecord
    multiplicity: int

    @property
    def on_circle(self) -> bool:
        return self.representative.root_class is RootClass.ON_CIRCLE

    def to_dict(self, digits: int = 20) -> Dict[str, Any]:
        return {
            "representative": mpmath.nstr(self.representative.value, digits),
            "partner": mpmath.nstr(self.partner.value, digits),
            "multiplicity": int(self.multiplicity),
            "on_circle": bool(self.on_circle),
        }


@dataclass(frozen=True)
class SpiralPairing:
    """Perfect matching of a root multiset into reflection orbits."""

    roots: Tuple[RootRecord, ...]
    pairs: Tuple[SpiralPair, ...]
    choice: str = "inside"

    def __post_init__(self) -> None:
        total = sum(r.multiplicity for r in self.roots)
        half = sum(p.multiplicity for p in self.pairs)
        if 2 * half != total:
            raise InternalInvariantViolation(
                "pairing_degree", f"representatives carry {half} roots but Q has {total}"
            )

    @property
    def factor_degree(self) -> int:
        return sum(p.multiplicity for p in self.pairs)

    def representatives(self) -> List[Tuple[mpmath.mpc, int]]:
        return [(p.representative.value, p.multiplicity) for p in self.pairs]

    def expanded_representatives(self) -> List[mpmath.mpc]:
        out: List[mpmath.mpc] = []
        for value, mult in self.representatives():
            out.extend([value] * mult)
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "choice": self.choice,
            "factor_degree": int(self.factor_degree),
            "pairs": [p.to_dict() for p in self.pairs],
        }


def odd_on_circle_roots(records: Sequence[RootRecord]) -> List[RootRecord]:
    return [r for r in records if r.root_class is RootClass.ON_CIRCLE and r.multiplicity % 2]


def pair_roots(records: Sequence[RootRecord], choice: str = "inside") -> SpiralPairing:
    """
    Build the spiral pairing.

    Raises:
        ValueError: unknown representative choice.
        InternalInvariantViolation: the reflection is not an involution on the
            data, a pair has unequal multiplicities, or an on-circle root has
            odd multiplicity.
    """
    if choice not in REPRESENTATIVE_CHOICES:
        raise ValueError(f"choice must be one of {REPRESENTATIVE_CHOICES}, got {choice!r}")
    matched: Dict[int, int] = {}
    pairs: List[SpiralPair] = []
    for i, rec in enumerate(records):
        if i in matched:
            continue
        j = reflection_partner(records, i)
        if reflection_partner(records, j) != i:
            raise InternalInvariantViolation("reflection_involution", f"root {i} -> {j} does not map back")
        if j in matched:
            raise InternalInvariantViolation("perfect_matching", f"root {j} matched twice")
        if j == i:
            if rec.root_class is not RootClass.ON_CIRCLE:
                raise InternalInvariantViolation("self_partner_on_circle", f"root {i} is its own reflection off the circle")
            if rec.multiplicity % 2:
                raise InternalInvariantViolation(
                    "even_multiplicity_on_circle",
                    f"root {mpmath.nstr(rec.value, 15)} on |z|=1 has odd multiplicity {rec.multiplicity}",
                )
            pairs.append(SpiralPair(rec, rec, rec.multiplicity // 2))
            matched[i] = i
            continue
        other = records[j]
        if other.multiplicity != rec.multiplicity:
            raise InternalInvariantViolation(
                "pair_multiplicity",
                f"roots {i} and {j} have multiplicities {rec.multiplicity} and {other.multiplicity}",
            )
        with mpmath.workdps(working_precision(records)):
            inside_first = abs(rec.value) < abs(other.value)
        inner, outer = (rec, other) if inside_first else (other, rec)
        rep, partner = (inner, outer) if choice == "inside" else (outer, inner)
        pairs.append(SpiralPair(rep, partner, rec.multiplicity))
        matched[i] = j
        matched[j] = i
    pairs.sort(key=lambda p: p.representative.sort_key())
    pairing = SpiralPairing(tuple(records), tuple(pairs), choice)
    _logger.debug(
        "spiral pairing: %d orbits (%d on circle), factor degree %d",
        len(pairs),
        sum(1 for p in pairs if p.on_circle),
        pairing.factor_degree,
    )
    return pairing


__all__ = [
    "REPRESENTATIVE_CHOICES",
    "SpiralPair",
    "SpiralPairing",
    "odd_on_circle_roots",
    "pair_roots",
]
