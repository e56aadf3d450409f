"""Tests for the constructive Bochner engine."""

import cmath
import math

import numpy as np
import pytest

from circle_spectra.bochner import (
    BochnerConfig,
    BochnerWitness,
    bochner_approximate,
    certified_error,
    fourier_coefficient,
    riemann_error_bound,
    sample_finite,
)
from circle_spectra.errors import DidNotConverge, NotContinuous, NotPositiveDefinite


@pytest.fixture
def lip1():
    return BochnerWitness.lipschitz(1.0)


def test_cos_two_point_measure(lip1):
    mu = bochner_approximate(math.cos, lip1, 0.05)
    assert mu.error_bound <= 0.05
    assert mu.discretization == 2048
    assert mu.cutoff == 1
    assert mu.refinement == 7
    assert mu[1] == pytest.approx(0.5, abs=1e-12)
    assert mu[-1] == pytest.approx(0.5, abs=1e-12)
    assert mu.mass(lambda k: abs(k) != 1) <= 1e-12


def test_cos_sup_norm_within_certified_error(lip1):
    mu = bochner_approximate(math.cos, lip1, 0.05)
    thetas = np.linspace(0.0, 2.0 * np.pi, 97)
    assert np.max(np.abs(mu.evaluate_many(thetas) - np.cos(thetas))) <= mu.error_bound


def test_cos_tighter_tolerance_needs_more_samples(lip1):
    mu = bochner_approximate(math.cos, lip1, 0.01)
    assert mu.discretization == 8192


def test_character(lip1):
    mu = bochner_approximate(lambda t: cmath.exp(2j * t), BochnerWitness.lipschitz(2.0), 0.1)
    assert mu.support[-1] == 2
    assert mu[2] == pytest.approx(1.0, abs=1e-12)


def test_cross_check_against_quadrature(lip1):
    mu = bochner_approximate(math.cos, lip1, 0.05, BochnerConfig(cross_check=True))
    assert mu[1] == pytest.approx(0.5, abs=1e-12)


def test_negative_coefficient_refutes():
    f = lambda t: 1.0 + math.cos(t) - 0.1 * math.cos(3 * t)
    with pytest.raises(NotPositiveDefinite) as exc:
        bochner_approximate(f, BochnerWitness.lipschitz(1.5), 0.05)
    assert abs(exc.value.index) == 3
    assert exc.value.value == pytest.approx(-0.05, abs=1e-12)


def test_value_exceeding_f0(lip1):
    with pytest.raises(NotPositiveDefinite):
        bochner_approximate(lambda t: math.cos(t) - 0.5, lip1, 0.05)


def test_complex_f0(lip1):
    with pytest.raises(NotPositiveDefinite) as exc:
        sample_finite(lambda t: 1j + 0.0 * t, 16, lip1)
    assert exc.value.index == 0


def test_non_hermitian(lip1):
    with pytest.raises(NotPositiveDefinite):
        sample_finite(lambda t: 1.0 + 0.3 * math.sin(t), 16, lip1)


def test_discontinuity(lip1):
    step = lambda t: 1.0 if math.cos(t) > 0 else 0.5
    with pytest.raises(NotContinuous):
        sample_finite(step, 16, lip1)


def test_budget_exhausted(lip1):
    with pytest.raises(DidNotConverge) as exc:
        bochner_approximate(math.cos, lip1, 1e-6, BochnerConfig(max_doublings=2))
    assert exc.value.best > 1e-6


def test_invalid_arguments(lip1):
    with pytest.raises(ValueError):
        bochner_approximate(math.cos, lip1, 0.0)
    with pytest.raises(TypeError):
        bochner_approximate(math.cos, lambda d: d, 0.1)
    with pytest.raises(ValueError):
        BochnerConfig(initial_n=1)
    with pytest.raises(ValueError):
        BochnerWitness.lipschitz(-1.0)
    with pytest.raises(ValueError):
        BochnerWitness(lambda d: -1.0).omega(0.1)


def test_finite_sample_of_cos(lip1):
    s = sample_finite(math.cos, 16, lip1)
    assert s.positive_definite
    assert s.first_negative() is None
    coeffs = s.signed_coefficients()
    assert coeffs[1] == pytest.approx(0.5)
    assert coeffs[-1] == pytest.approx(0.5)
    assert coeffs[0] == pytest.approx(0.0, abs=1e-15)


def test_certified_error_picks_cutoff(lip1):
    error, cutoff = certified_error(sample_finite(math.cos, 2048, lip1), lip1)
    assert cutoff == 1
    assert error == pytest.approx(24 * math.pi / 2048, rel=1e-9)
    # too few samples: keeping k = +-1 costs more than dropping them
    _, coarse = certified_error(sample_finite(math.cos, 16, lip1), lip1)
    assert coarse == 0


def test_riemann_error_bound(lip1):
    assert riemann_error_bound(lip1, 8, 2, 1.0) == pytest.approx(3 * math.pi / 4)
    with pytest.raises(ValueError):
        riemann_error_bound(lip1, 0, 1, 1.0)


def test_fourier_coefficient_reference():
    value, err = fourier_coefficient(math.cos, 1)
    assert value.real == pytest.approx(0.5, abs=1e-9)
    assert abs(value.imag) < 1e-9
    assert err >= 0
