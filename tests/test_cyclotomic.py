"""Tests for exact cyclotomic arithmetic."""

from fractions import Fraction

import pytest

from circle_spectra.cyclotomic import CyclotomicField, CyclotomicNumber, cyclotomic_polynomial, euler_phi
from circle_spectra.exact import GaussianRational


@pytest.mark.parametrize(
    "n, expected",
    [
        (1, (-1, 1)),
        (2, (1, 1)),
        (4, (1, 0, 1)),
        (6, (1, -1, 1)),
        (12, (1, 0, -1, 0, 1)),
    ],
)
def test_cyclotomic_polynomial(n, expected):
    assert cyclotomic_polynomial(n) == expected


def test_euler_phi():
    assert [euler_phi(n) for n in (1, 5, 8, 12, 15)] == [1, 4, 4, 4, 8]


def test_field_contains_i():
    field = CyclotomicField(3)
    assert field.order == 12
    assert field.lift(GaussianRational(0, 1)) * field.lift(GaussianRational(0, 1)) == -1


def test_sum_of_roots_of_unity():
    field = CyclotomicField(3)
    assert field.zeta_power(1) + field.zeta_power(2) == -1
    field5 = CyclotomicField(5)
    total = field5.zero()
    for e in range(5):
        total = total + field5.zeta_power(e)
    assert total.is_zero()


def test_conjugate_inverts_root():
    field = CyclotomicField(7)
    z = field.zeta_power(3)
    assert z.conjugate() == field.zeta_power(-3)
    assert (z * z.conjugate()) == 1


def test_real_and_rational():
    field = CyclotomicField(5)
    c = field.zeta_power(1) + field.zeta_power(4)
    assert c.is_real()
    assert not c.is_rational()
    assert not field.zeta_power(1).is_real()
    assert (field.one() * Fraction(3, 2)).as_rational() == Fraction(3, 2)


def test_certified_sign():
    field = CyclotomicField(5)
    assert (field.zeta_power(1) + field.zeta_power(4)).sign() == 1   # 2 cos 72 deg
    assert (field.zeta_power(2) + field.zeta_power(3)).sign() == -1  # 2 cos 144 deg
    assert field.zero().sign() == 0
    with pytest.raises(ValueError):
        field.zeta_power(1).sign()


def test_numeric_embedding():
    field = CyclotomicField(8)
    z = field.zeta_power(1)
    assert abs(complex(z) - complex(2 ** -0.5, 2 ** -0.5)) < 1e-15


def test_field_mismatch():
    with pytest.raises(ValueError):
        CyclotomicField(3).one() + CyclotomicField(5).one()


def test_from_n_exponents_accumulates():
    field = CyclotomicField(4)
    x = field.from_n_exponents({1: 1, 5: 1})
    assert x == field.zeta_power(1) * 2
    assert isinstance(x, CyclotomicNumber)
