"""Tests for SpectralMeasure."""

import math
from fractions import Fraction

import numpy as np
import pytest

from circle_spectra.measure import SpectralMeasure
from circle_spectra.trig_poly import TrigPoly


def test_zero_weights_dropped():
    mu = SpectralMeasure({-1: 1, 0: 0, 1: Fraction(1, 2)})
    assert mu.support == (-1, 1)
    assert len(mu) == 2
    assert mu[0] == 0


def test_rejects_negative_and_non_finite():
    with pytest.raises(ValueError):
        SpectralMeasure({0: -1})
    with pytest.raises(ValueError):
        SpectralMeasure({0: float("nan")})
    with pytest.raises(ValueError):
        SpectralMeasure({0: 1}, error_bound=-1.0)
    with pytest.raises(TypeError):
        SpectralMeasure({0: True})
    with pytest.raises(TypeError):
        SpectralMeasure({0: 1j})


def test_from_sequence_offset():
    mu = SpectralMeasure.from_sequence([1, 0, 2], offset=-1)
    assert mu.weights == {-1: 1, 1: 2}
    assert SpectralMeasure.from_sequence({3: 1}).support == (3,)


def test_masses():
    mu = SpectralMeasure({-1: Fraction(1, 3), 0: Fraction(1, 3), 2: Fraction(1, 3)})
    assert mu.total_mass == 1
    assert isinstance(mu.total_mass, Fraction)
    assert mu.mass([0, 2]) == Fraction(2, 3)
    assert mu.mass(lambda k: k < 0) == Fraction(1, 3)
    assert SpectralMeasure({0: 0.1, 1: 0.2}).total_mass == pytest.approx(0.3)


def test_evaluation():
    mu = SpectralMeasure({-1: 0.5, 1: 0.5})
    assert mu.evaluate(0.0) == pytest.approx(1.0)
    assert mu.evaluate(math.pi) == pytest.approx(-1.0)
    thetas = np.linspace(0, 2 * np.pi, 9)
    assert np.allclose(mu.evaluate_many(thetas), np.cos(thetas))


def test_to_trig_poly():
    mu = SpectralMeasure({-1: Fraction(1, 2), 1: Fraction(1, 2)})
    assert mu.to_trig_poly() == TrigPoly({-1: Fraction(1, 2), 1: Fraction(1, 2)})


def test_distance():
    a = SpectralMeasure({0: 1.0, 1: 0.5})
    b = SpectralMeasure({0: 0.75, 2: 0.25})
    assert a.distance_to(b) == pytest.approx(1.0)


def test_equality_hash_and_digest():
    a = SpectralMeasure({1: 1, -1: 1}, error_bound=0.0, discretization=4, cutoff=2)
    b = SpectralMeasure({-1: 1, 1: 1}, discretization=4, cutoff=2)
    assert a == b
    assert hash(a) == hash(b)
    assert a.digest() == b.digest()
    assert a != SpectralMeasure({-1: 1, 1: 1})
    assert len({a, b}) == 1


def test_repr_lists_weights():
    assert "1: 2" in repr(SpectralMeasure({1: 2}))
