#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Error taxonomy for the circle-spectra engines.

Three disjoint failure families:

  (a) PreconditionViolation      - caller input fails a stated hypothesis
                                   (non-negativity, continuity, positive
                                   definiteness, no root on a chosen radius).
  (b) DidNotConverge             - a bounded refinement ran out of budget
                                   before reaching a provable threshold.
                                   Retrying with a larger budget is legitimate.
  (c) InternalInvariantViolation - an assembled intermediate contradicts a
                                   structural guarantee. Never expected for
                                   inputs satisfying every documented
                                   precondition.

Red-lines:
  - No silent coercion: preconditions are surfaced immediately.
  - No partial results: a below-threshold value is never returned.
"""

from __future__ import annotations

from typing import Any, Optional


class SpectralError(Exception):
    """Base error for all circle-spectra failures."""


# =============================================================================
# (a) Precondition violations
# =============================================================================


class PreconditionViolation(SpectralError, ValueError):
    """Caller input violates a documented hypothesis."""


class NotNonNegative(PreconditionViolation):
    """
    The trigonometric polynomial is not real and non-negative on the circle.

    ``angle``/``value`` locate a witness sample when one is known; a polynomial
    that is not real-valued at all carries ``angle=None``.
    """

    def __init__(self, details: str, *, angle: Optional[float] = None, value: Any = None):
        self.angle = angle
        self.value = value
        self.details = details
        where = "" if angle is None else f" at theta={angle!r} (value={value!r})"
        super().__init__(f"Not non-negative on the circle{where}: {details}")


class NotPositiveDefinite(PreconditionViolation):
    """A (sampled or finite) function has a negative or non-real Fourier coefficient."""

    def __init__(self, details: str, *, index: Optional[int] = None, value: Any = None):
        self.index = index
        self.value = value
        self.details = details
        where = "" if index is None else f" at frequency {index} (coefficient={value!r})"
        super().__init__(f"Not positive-definite{where}: {details}")


class NotContinuous(PreconditionViolation):
    """Consecutive samples jump by more than the declared modulus of continuity allows."""

    def __init__(self, index: int, jump: float, bound: float):
        self.index = index
        self.jump = jump
        self.bound = bound
        super().__init__(
            f"Sample jump {jump:.3e} at index {index} exceeds modulus-of-continuity bound {bound:.3e}"
        )


class RootOnBoundary(PreconditionViolation):
    """A root lies exactly on the radius chosen for a winding-number computation."""

    def __init__(self, radius: Any, details: str = ""):
        self.radius = radius
        self.details = details
        tail = f": {details}" if details else ""
        super().__init__(f"Root on the boundary circle |z| = {radius!r}{tail}")


class WindingNotCertified(PreconditionViolation):
    """
    The discretisation is too coarse to certify every argument step is < pi.

    ``threshold`` is the smallest discretisation count known to be sufficient
    (``None`` when no finite estimate is available).
    """

    def __init__(self, n: int, threshold: Optional[int], details: str = ""):
        self.n = n
        self.threshold = threshold
        self.details = details
        need = "unknown" if threshold is None else str(threshold)
        tail = f" ({details})" if details else ""
        super().__init__(f"Winding number not certified at N={n}; need N >= {need}{tail}")


# =============================================================================
# (b) Non-convergence
# =============================================================================


class DidNotConverge(SpectralError, RuntimeError):
    """A bounded refinement exhausted its budget; a larger budget may succeed."""

    def __init__(self, process: str, steps: int, best: Any = None):
        self.process = process
        self.steps = steps
        self.best = best
        extra = "" if best is None else f"; best bound reached: {best!r}"
        super().__init__(f"{process} did not converge within {steps} refinement steps{extra}")


# =============================================================================
# (c) Internal invariant violations
# =============================================================================


class InternalInvariantViolation(SpectralError, RuntimeError):
    """An intermediate contradicts a structural guarantee (implementation defect)."""

    def __init__(self, invariant: str, details: str):
        self.invariant = invariant
        self.details = details
        super().__init__(f"Internal invariant '{invariant}' violated: {details}")


__all__ = [
    "SpectralError",
    "PreconditionViolation",
    "NotNonNegative",
    "NotPositiveDefinite",
    "NotContinuous",
    "RootOnBoundary",
    "WindingNotCertified",
    "DidNotConverge",
    "InternalInvariantViolation",
]
