"""Shared fixtures for circle_spectra tests."""

from fractions import Fraction

import mpmath
import numpy as np
import pytest

from circle_spectra.exact import GaussianRational
from circle_spectra.trig_poly import TrigPoly


def random_analytic(seed, degree, spread=3):
    """Analytic TrigPoly of the given degree with small Gaussian-integer coefficients."""
    rng = np.random.default_rng(seed)
    coeffs = {}
    for k in range(degree + 1):
        re, im = rng.integers(-spread, spread + 1, size=2)
        coeffs[k] = GaussianRational(int(re), int(im))
    if coeffs[degree].is_zero():
        coeffs[degree] = GaussianRational(1, 0)
    return TrigPoly(coeffs)


@pytest.fixture
def two_plus_cos():
    """R(theta) = 2 + cos(theta)."""
    return TrigPoly({-1: Fraction(1, 2), 0: 2, 1: Fraction(1, 2)})


@pytest.fixture
def mp50():
    """Run a test body at 50 decimal digits."""
    with mpmath.workdps(50):
        yield
