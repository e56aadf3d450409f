"""Tests for characters and the exact / numeric DFT on Z/NZ."""

from fractions import Fraction

import numpy as np
import pytest

from circle_spectra.characters import (
    character,
    character_table,
    dft,
    exact_character,
    exact_character_table,
    hermitian_defect_on_cyclic,
    inverse_dft,
    is_hermitian_on_cyclic,
    lift_values,
    numeric_dft,
    numeric_inverse_dft,
    orthogonality,
    signed_frequency,
)
from circle_spectra.exact import GaussianRational


def _random_values(n, seed):
    rng = np.random.default_rng(seed)
    nums = rng.integers(-9, 10, size=(n, 2))
    dens = rng.integers(1, 6, size=(n, 2))
    return [GaussianRational(Fraction(int(a), int(b)), Fraction(int(c), int(d)))
            for (a, c), (b, d) in zip(nums, dens)]


@pytest.mark.parametrize("n", range(1, 65))
def test_exact_round_trip(n):
    values = _random_values(n, seed=n)
    assert inverse_dft(dft(values)) == lift_values(values)


@pytest.mark.parametrize("n", [1, 2, 5, 8, 12])
def test_orthogonality(n):
    for k in range(n):
        for j in range(n):
            expected = Fraction(1) if (k - j) % n == 0 else Fraction(0)
            assert orthogonality(k, j, n) == expected


def test_orthogonality_mod_n():
    assert orthogonality(7, 2, 5) == 1
    assert orthogonality(-1, 4, 5) == 1


def test_numeric_dft_matches_exact():
    values = [Fraction(3), Fraction(1, 2), Fraction(-1), Fraction(1, 2)]
    exact = [complex(c) for c in dft(values)]
    numeric = numeric_dft([float(v) for v in values])
    assert np.allclose(numeric, exact, atol=1e-14)
    assert np.allclose(numeric_inverse_dft(numeric), [float(v) for v in values], atol=1e-14)


def test_character_table_is_unitary():
    n = 7
    table = character_table(n)
    assert np.allclose(table @ table.conj().T / n, np.eye(n), atol=1e-12)


def test_character_values():
    chi = character(1, 4)
    assert abs(chi(1) - 1j) < 1e-15
    assert exact_character(1, 4, 1) == GaussianRational(0, 1)
    assert exact_character(2, 6, 3) == 1


def test_dft_of_delta_is_constant():
    coeffs = dft([1, 0, 0, 0, 0])
    assert all(c == Fraction(1, 5) for c in coeffs)


def test_hermitian_on_cyclic():
    assert is_hermitian_on_cyclic([2, -1, -1])
    assert is_hermitian_on_cyclic([1, 1j, 0, -1j])
    assert not is_hermitian_on_cyclic([1, 1j, 0, 1j])
    assert hermitian_defect_on_cyclic([1, 1j, 0, 1j]) == 1
    assert hermitian_defect_on_cyclic([1, 1, 0]) == 1
    assert hermitian_defect_on_cyclic([1j]) == 0
    assert hermitian_defect_on_cyclic([2, -1, -1]) is None


def test_signed_frequency():
    assert signed_frequency(3, 4) == -1
    assert signed_frequency(2, 4) == 2
    assert signed_frequency(0, 1) == 0


def test_empty_and_invalid_order():
    with pytest.raises(ValueError):
        dft([])
    with pytest.raises(ValueError):
        character_table(0)


def test_exact_table_matches_numeric():
    n = 6
    exact = [[complex(c) for c in row] for row in exact_character_table(n)]
    assert np.allclose(exact, character_table(n), atol=1e-14)
