"""Tests for Gaussian rationals and exact scalar conversion."""

from fractions import Fraction

import mpmath
import pytest

from circle_spectra.exact import GaussianRational, is_exact, require_exact_int, to_exact, to_mp


def test_field_operations():
    a = GaussianRational(1, 2)
    b = GaussianRational(3, -1)
    assert a * b == GaussianRational(5, 5)
    assert (a * b) / b == a
    assert a + b == GaussianRational(4, 1)
    assert a - b == GaussianRational(-2, 3)
    assert a.conjugate() == GaussianRational(1, -2)
    assert a.abs_squared() == 5


def test_power_and_inverse():
    i = GaussianRational.i()
    assert i ** 2 == -1
    assert i ** 4 == 1
    assert i ** -1 == GaussianRational(0, -1)


def test_division_by_zero():
    with pytest.raises(ZeroDivisionError):
        GaussianRational(1, 1) / 0


def test_mixed_equality_and_hash():
    """A real GaussianRational is interchangeable with its Fraction as a dict key."""
    assert GaussianRational(2, 0) == 2
    assert hash(GaussianRational(Fraction(1, 2), 0)) == hash(Fraction(1, 2))
    assert GaussianRational(1, 1) == complex(1, 1)


def test_float_conversion_is_exact():
    assert to_exact(0.1) == Fraction(0.1)
    assert to_exact(0.1) != Fraction(1, 10)
    assert to_exact(0.5) == Fraction(1, 2)


def test_complex_collapses_to_real():
    assert to_exact(complex(1.5, 0)) == Fraction(3, 2)
    assert isinstance(to_exact(complex(1.5, 0)), Fraction)
    assert to_exact(1 + 2j) == GaussianRational(1, 2)


def test_mpmath_conversion_is_exact():
    assert to_exact(mpmath.mpf("0.25")) == Fraction(1, 4)
    assert to_exact(mpmath.mpc(1, -2)) == GaussianRational(1, -2)
    assert to_exact(mpmath.mpf(-2)) == -2
    assert to_exact(mpmath.mpf("-0.375")) == Fraction(-3, 8)
    assert GaussianRational.coerce(mpmath.mpc(-0.5, -0.25)) == GaussianRational(Fraction(-1, 2), Fraction(-1, 4))


def test_non_finite_rejected():
    with pytest.raises(ValueError):
        to_exact(float("nan"))
    with pytest.raises(ValueError):
        to_exact(float("inf"))


def test_unsupported_type_rejected():
    with pytest.raises(TypeError):
        to_exact("1")
    with pytest.raises(TypeError):
        to_exact(True)


def test_require_exact_int():
    assert require_exact_int(3) == 3
    assert require_exact_int(3.0) == 3
    assert require_exact_int(Fraction(6, 2)) == 3
    with pytest.raises(ValueError):
        require_exact_int(2.5)
    with pytest.raises(TypeError):
        require_exact_int(True)


def test_is_exact_and_to_mp():
    assert is_exact(Fraction(1, 3))
    assert is_exact(GaussianRational(1, 1))
    assert not is_exact(0.5)
    z = to_mp(GaussianRational(Fraction(1, 2), -1))
    assert z == mpmath.mpc(0.5, -1)
