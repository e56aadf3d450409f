"""
circle_spectra: computational spectral theory on the circle group.

  - factorize / factorize_with_certificate: Fejér–Riesz factorisation of a
    non-negative trigonometric polynomial by winding numbers and spiral pairing
  - bochner_approximate: constructive Bochner measure of a continuous
    positive-definite function by finite sampling
  - bochner_finite: exact Bochner decomposition on Z/nZ
"""

from .bochner import BochnerConfig, BochnerWitness, FiniteSample, bochner_approximate, riemann_error_bound, sample_finite
from .errors import (
    DidNotConverge,
    InternalInvariantViolation,
    NotContinuous,
    NotNonNegative,
    NotPositiveDefinite,
    PreconditionViolation,
    RootOnBoundary,
    SpectralError,
    WindingNotCertified,
)
from .exact import GaussianRational
from .fejer_riesz import (
    FactorizationConfig,
    FactorizationResult,
    factorize,
    factorize_with_certificate,
    factors_equivalent,
    phase_equivalent,
)
from .finite_bochner import FiniteBochnerDecomposition, bochner_finite, from_characters, is_positive_definite_finite
from .measure import SpectralMeasure
from .roots import MpmathRootOracle, RootClass, RootRecord, WeierstrassRefinement
from .spiral import SpiralPair, SpiralPairing, pair_roots
from .trig_poly import TrigPoly, conjugate_reflect, evaluate, norm_sq
from .winding import WindingSample, certified_winding_number, winding_number, winding_threshold

__version__ = "0.1.0"

__all__ = [
    "BochnerConfig",
    "BochnerWitness",
    "DidNotConverge",
    "FactorizationConfig",
    "FactorizationResult",
    "FiniteBochnerDecomposition",
    "FiniteSample",
    "GaussianRational",
    "InternalInvariantViolation",
    "MpmathRootOracle",
    "NotContinuous",
    "NotNonNegative",
    "NotPositiveDefinite",
    "PreconditionViolation",
    "RootClass",
    "RootOnBoundary",
    "RootRecord",
    "SpectralError",
    "SpectralMeasure",
    "SpiralPair",
    "SpiralPairing",
    "TrigPoly",
    "WeierstrassRefinement",
    "WindingNotCertified",
    "WindingSample",
    "bochner_approximate",
    "bochner_finite",
    "certified_winding_number",
    "conjugate_reflect",
    "evaluate",
    "factorize",
    "factorize_with_certificate",
    "factors_equivalent",
    "from_characters",
    "is_positive_definite_finite",
    "norm_sq",
    "pair_roots",
    "phase_equivalent",
    "riemann_error_bound",
    "sample_finite",
    "winding_number",
    "winding_threshold",
]
