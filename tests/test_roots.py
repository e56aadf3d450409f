"""Tests for root location, multiplicities and circle classification."""

from fractions import Fraction

import mpmath
import pytest

from circle_spectra import polynomial as P
from circle_spectra.errors import DidNotConverge
from circle_spectra.exact import GaussianRational, to_mp
from circle_spectra.roots import (
    MpmathRootOracle,
    RootClass,
    RootRecord,
    WeierstrassRefinement,
    classify_roots,
    default_oracle,
    evaluation_error,
    mahler_measure,
)

# (z - 2)^3 (z + 1)
CUBE_TIMES_LINEAR = [-8, 4, 6, -5, 1]
# (z^2 + 1)^2 (z - 3)
SQUARED_QUADRATIC = [-3, 1, -6, 2, -3, 1]


def _sorted_roots(pairs):
    return sorted(pairs, key=lambda p: (float(p[0].real), float(p[0].imag)))


def test_multiplicities_are_exact():
    roots = _sorted_roots(MpmathRootOracle(30)(CUBE_TIMES_LINEAR))
    assert [m for _, m in roots] == [1, 3]
    with mpmath.workdps(30):
        assert abs(roots[0][0] + 1) < mpmath.mpf(10) ** -25
        assert abs(roots[1][0] - 2) < mpmath.mpf(10) ** -25


@pytest.mark.parametrize("oracle", [MpmathRootOracle(40), WeierstrassRefinement(40)])
def test_quadratic_square_free_part(oracle):
    located = oracle.locate(SQUARED_QUADRATIC)
    by_mult = {}
    for r in located:
        by_mult.setdefault(r.multiplicity, []).append(r.value)
    assert sorted(by_mult) == [1, 2]
    assert len(by_mult[2]) == 2
    with mpmath.workdps(40):
        assert abs(by_mult[1][0] - 3) < mpmath.mpf(10) ** -30
        for z in by_mult[2]:
            assert abs(z * z + 1) < mpmath.mpf(10) ** -28


def test_weierstrass_matches_oracle():
    poly = [1, 2, 3, 4, 5, 6]
    a = [z for z, _ in MpmathRootOracle(40)(poly)]
    b = [z for z, _ in WeierstrassRefinement(40)(poly)]
    assert len(a) == len(b) == 5
    with mpmath.workdps(40):
        for z in a:
            assert min(abs(z - w) for w in b) < mpmath.mpf(10) ** -28


def test_weierstrass_budget():
    with pytest.raises(DidNotConverge):
        WeierstrassRefinement(40, max_steps=1).locate([1, 2, 3, 4, 5, 6])


def test_zero_polynomial_rejected():
    with pytest.raises(ValueError):
        MpmathRootOracle(30).locate([0])


def test_classify_two_plus_cos():
    # z (2 + cos) = 1/2 + 2 z + 1/2 z^2, roots -2 +- sqrt(3)
    oracle = MpmathRootOracle(50)
    records = classify_roots(oracle.locate([Fraction(1, 2), 2, Fraction(1, 2)]))
    with mpmath.workdps(50):
        inside = [r for r in records if r.root_class is RootClass.INSIDE]
        outside = [r for r in records if r.root_class is RootClass.OUTSIDE]
        assert len(inside) == len(outside) == 1
        assert abs(inside[0].value - (-2 + mpmath.sqrt(3))) < mpmath.mpf(10) ** -40
        assert abs(outside[0].value - (-2 - mpmath.sqrt(3))) < mpmath.mpf(10) ** -40


def test_classify_double_root_on_circle():
    # z (1 - cos) = -1/2 (z - 1)^2
    records = classify_roots(MpmathRootOracle(50).locate([Fraction(-1, 2), 1, Fraction(-1, 2)]))
    assert len(records) == 1
    assert records[0].root_class is RootClass.ON_CIRCLE
    assert records[0].multiplicity == 2


def test_classify_complex_on_circle_roots():
    # z^2 + 1 has roots +-i on the circle
    records = classify_roots(WeierstrassRefinement(40).locate([1, 0, 1]))
    assert [r.root_class for r in records] == [RootClass.ON_CIRCLE, RootClass.ON_CIRCLE]


def test_gaussian_coefficients():
    # (z - i)(z - 2i) = z^2 - 3i z - 2
    roots = MpmathRootOracle(30)([-2, GaussianRational(0, -3), 1])
    with mpmath.workdps(30):
        for z, m in roots:
            assert m == 1
            assert min(abs(z - 1j), abs(z - 2j)) < mpmath.mpf(10) ** -25


def test_mahler_measure():
    with mpmath.workdps(30):
        s = mpmath.sqrt(3)
        m = mahler_measure(Fraction(1, 2), [(-2 + s, 1), (-2 - s, 1)])
        assert abs(m - (2 + s) / 2) < mpmath.mpf(10) ** -25
        assert mahler_measure(3, [(mpmath.mpc(0.5), 2)]) == 3


def test_root_record_validation():
    with pytest.raises(ValueError):
        RootRecord(mpmath.mpc(1), 0, RootClass.ON_CIRCLE, mpmath.mpf(0))
    with pytest.raises(TypeError):
        RootRecord(mpmath.mpc(1), 1, "on_circle", mpmath.mpf(0))


def test_root_record_sort_key_and_dict():
    r = RootRecord(mpmath.mpc(0, 2), 1, RootClass.OUTSIDE, mpmath.mpf("1e-30"))
    modulus, argument = r.sort_key()
    assert modulus == pytest.approx(2.0)
    assert argument == pytest.approx(1.5707963267948966)
    d = r.to_dict()
    assert d["class"] == "outside" and d["multiplicity"] == 1


def test_oracle_precision_floor():
    with pytest.raises(ValueError):
        MpmathRootOracle(10)
    with pytest.raises(ValueError):
        WeierstrassRefinement(30, guard_digits=30)


def test_default_oracle_selection():
    assert isinstance(default_oracle(30), MpmathRootOracle)
    assert isinstance(default_oracle(30, use_oracle=False), WeierstrassRefinement)


def test_square_free_parts_feed_locate():
    parts = P.square_free_decomposition(P.exact_poly(SQUARED_QUADRATIC))
    assert sorted(m for _, m in parts) == [1, 2]


def _unit_point(k):
    # (k^2 - 1 + 2ki) / (k^2 + 1) lies exactly on |z| = 1
    return GaussianRational(Fraction(k * k - 1, k * k + 1), Fraction(2 * k, k * k + 1))


@pytest.mark.parametrize("oracle", [MpmathRootOracle(50), WeierstrassRefinement(50)])
def test_close_on_circle_roots_keep_their_discs(oracle):
    u, v = _unit_point(100), _unit_point(101)
    records = classify_roots(oracle.locate([u * v, -(u + v), 1]))
    assert [r.root_class for r in records] == [RootClass.ON_CIRCLE, RootClass.ON_CIRCLE]
    with mpmath.workdps(50):
        for exact in (u, v):
            target = to_mp(exact)
            assert any(abs(r.value - target) <= r.inclusion_radius for r in records)


def test_evaluation_error_scales_with_coefficients():
    with mpmath.workdps(30):
        small = evaluation_error([mpmath.mpc(1), mpmath.mpc(1)], mpmath.mpc(1))
        large = evaluation_error([mpmath.mpc(1000), mpmath.mpc(1)], mpmath.mpc(1))
        assert 0 < small < large
        assert small < mpmath.mpf(10) ** -25


def test_classification_ignores_ambient_precision():
    located = MpmathRootOracle(50).locate([Fraction(1, 2), 2, Fraction(1, 2)])
    with mpmath.workdps(10):
        records = classify_roots(located)
    assert sorted(r.root_class.value for r in records) == sorted([RootClass.INSIDE.value, RootClass.OUTSIDE.value])
    assert all(r.precision == 50 for r in records)
