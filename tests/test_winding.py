"""Tests for discretised winding numbers."""

import math
from fractions import Fraction

import numpy as np
import pytest

from circle_spectra.errors import DidNotConverge, InternalInvariantViolation, RootOnBoundary, WindingNotCertified
from circle_spectra.winding import (
    WindingCache,
    WindingSample,
    certified_winding_number,
    count_roots_inside,
    root_gap,
    separating_radii,
    verify_root_counts,
    winding_number,
    winding_sample,
    winding_threshold,
)

# (z - 1/2)(z - 3)
Q = [Fraction(3, 2), Fraction(-7, 2), 1]


def test_threshold_formula():
    assert winding_threshold(2, 1.0, 0.5) == 9
    assert winding_threshold(3, 2.0, 0.1) == math.floor(2 * 3 * 2.0 / 0.1) + 1


def test_counts_with_gap_certificate():
    assert winding_number(Q, 1.0, 9, min_gap=0.5) == 1
    assert winding_number(Q, 0.25, 64, min_gap=0.25) == 0
    assert winding_number(Q, 4.0, 64, min_gap=1.0) == 2


def test_below_threshold_is_refused():
    with pytest.raises(WindingNotCertified) as exc:
        winding_number(Q, 1.0, 4, min_gap=0.5)
    assert exc.value.threshold == 9


def test_root_on_radius():
    with pytest.raises(RootOnBoundary):
        winding_number([-1, 1], 1.0, 16)
    with pytest.raises(RootOnBoundary):
        winding_number(Q, 0.5, 64, min_gap=0)


def test_invalid_arguments():
    with pytest.raises(ValueError):
        winding_number(Q, 0.0, 16)
    with pytest.raises(ValueError):
        winding_number(Q, 1.0, 0)
    with pytest.raises(ValueError):
        winding_number([0, 0], 1.0, 16)


@pytest.mark.parametrize("seed", range(10))
def test_random_polynomials_above_threshold(seed):
    rng = np.random.default_rng(seed)
    degree = int(rng.integers(1, 7))
    moduli = rng.uniform(0.2, 3.0, size=degree)
    angles = rng.uniform(0.0, 2 * np.pi, size=degree)
    roots = moduli * np.exp(1j * angles)
    coeffs = list(np.poly(roots)[::-1])
    checked = 0
    for r in rng.uniform(0.1, 3.5, size=8):
        gap = root_gap(roots, r)
        if gap < 0.05:
            continue
        n = winding_threshold(degree, r, gap)
        assert winding_number(coeffs, r, n, min_gap=gap) == count_roots_inside(roots, r)
        assert winding_number(coeffs, r, 2 * n + 1, min_gap=gap) == count_roots_inside(roots, r)
        checked += 1
    assert checked > 0


def test_derivative_certificate():
    sample = certified_winding_number(Q, 1.0)
    assert sample.value == 1
    assert sample.certificate == "derivative"
    assert sample.threshold is None


def test_derivative_certificate_budget():
    with pytest.raises(DidNotConverge):
        certified_winding_number([-(1 + 1e-3), 1], 1.0, start=16, max_doublings=0)


def test_cache_merges_equal_values_only():
    cache = WindingCache()
    a = winding_sample(Q, 1.0, 16, min_gap=0.5)
    b = winding_sample(Q, 1.0, 9, min_gap=0.5)
    cache.merge(a)
    assert cache.merge(b).n == 9
    bogus = WindingSample(a.coefficients, 1.0, 32, 2, 9, "gap")
    with pytest.raises(InternalInvariantViolation):
        cache.merge(bogus)
    assert [s.value for s in cache.values()] == [1]


def test_verify_root_counts():
    roots = [(0.5, 1), (3.0, 1)]
    samples, skipped = verify_root_counts(Q, roots, [1.0, 4.0], max_samples=1000)
    assert [s.value for s in samples] == [1, 2]
    assert skipped == []
    with pytest.raises(InternalInvariantViolation):
        verify_root_counts(Q, [(0.5, 1), (0.2, 1)], [1.25], max_samples=1000)


def test_verify_root_counts_skips_over_budget():
    samples, skipped = verify_root_counts(Q, [(0.5, 1), (3.0, 1)], [0.5001], max_samples=100)
    assert samples == []
    assert skipped == [0.5001]


def test_separating_radii():
    assert separating_radii([0.5, 2.0, 2.0]) == [1.25, 3.5]
    assert separating_radii([]) == []


def test_sample_record_serialises():
    d = winding_sample(Q, 1.0, 9, min_gap=0.5).to_dict()
    assert d["value"] == 1 and d["certificate"] == "gap" and d["radius"] == "1.0"
