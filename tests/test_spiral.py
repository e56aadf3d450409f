"""Tests for conjugate-reciprocal (spiral) pairing."""

from fractions import Fraction

import mpmath
import pytest

from circle_spectra.errors import InternalInvariantViolation
from circle_spectra.roots import MpmathRootOracle, RootClass, RootRecord, classify_roots
from circle_spectra.spiral import odd_on_circle_roots, pair_roots


def _records(coeffs, precision=50):
    return classify_roots(MpmathRootOracle(precision).locate(coeffs))


def test_inside_and_outside_representatives():
    records = _records([Fraction(1, 2), 2, Fraction(1, 2)])
    inside = pair_roots(records)
    outside = pair_roots(records, "outside")
    assert inside.factor_degree == outside.factor_degree == 1
    with mpmath.workdps(50):
        (beta, m), = inside.representatives()
        assert m == 1
        assert abs(beta - (-2 + mpmath.sqrt(3))) < mpmath.mpf(10) ** -40
        (gamma, _), = outside.representatives()
        assert abs(gamma - 1 / mpmath.conj(beta)) < mpmath.mpf(10) ** -40
    assert inside.pairs[0].partner.root_class is RootClass.OUTSIDE


def test_on_circle_double_root_contributes_half():
    records = _records([Fraction(-1, 2), 1, Fraction(-1, 2)])
    pairing = pair_roots(records)
    assert len(pairing.pairs) == 1
    assert pairing.pairs[0].on_circle
    assert pairing.pairs[0].multiplicity == 1
    assert pairing.expanded_representatives() == [records[0].value]


def test_pairs_sorted_by_modulus():
    # (z - 1/2)(z - 2)(z + 1/4)(z + 4)
    q = [1, Fraction(7, 4), Fraction(-69, 8), Fraction(7, 4), 1]
    pairing = pair_roots(_records(q))
    moduli = [float(abs(v)) for v, _ in pairing.representatives()]
    assert moduli == sorted(moduli)
    assert moduli == pytest.approx([0.25, 0.5])


def test_odd_on_circle_root_is_reported():
    lone = RootRecord(mpmath.mpc(1), 1, RootClass.ON_CIRCLE, mpmath.mpf(1e-40))
    assert odd_on_circle_roots([lone]) == [lone]
    with pytest.raises(InternalInvariantViolation) as exc:
        pair_roots([lone])
    assert exc.value.invariant == "even_multiplicity_on_circle"


def test_unequal_pair_multiplicities():
    records = [
        RootRecord(mpmath.mpc(0.5), 1, RootClass.INSIDE, mpmath.mpf(1e-40)),
        RootRecord(mpmath.mpc(2), 2, RootClass.OUTSIDE, mpmath.mpf(1e-40)),
    ]
    with pytest.raises(InternalInvariantViolation) as exc:
        pair_roots(records)
    assert exc.value.invariant == "pair_multiplicity"


def test_unknown_choice():
    with pytest.raises(ValueError):
        pair_roots([], "middle")


def test_pairing_to_dict():
    d = pair_roots(_records([Fraction(1, 2), 2, Fraction(1, 2)])).to_dict()
    assert d["choice"] == "inside"
    assert d["factor_degree"] == 1
    assert d["pairs"][0]["on_circle"] is False


def test_pairing_uses_located_precision():
    records = _records([Fraction(1, 2), 2, Fraction(1, 2)])
    with mpmath.workdps(10):
        pairing = pair_roots(records)
    assert pairing.pairs[0].representative.root_class is RootClass.INSIDE
    assert pairing.pairs[0].representative.precision == 50
