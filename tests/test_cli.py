"""Tests for the command line front end."""

from circle_spectra.cli import _self_test, build_parser, main


def test_self_test_passes():
    out = _self_test()
    assert out["ok"]
    assert {t["name"] for t in out["tests"]} >= {"fejer_riesz_2_plus_cos", "finite_bochner_z3", "bochner_cos"}


def test_bochner_finite_command(capsys):
    assert main(["--quiet", "bochner-finite", "2", "-1", "-1"]) == 0
    out = capsys.readouterr().out
    assert "w[1] = 1" in out
    assert "w[2] = 1" in out
    assert "support=[1, 2]" in out


def test_bochner_finite_refutation(capsys):
    assert main(["--quiet", "bochner-finite", "1", "2", "2"]) == 1
    assert "[FATAL]" in capsys.readouterr().out


def test_factorize_command(capsys):
    assert main(["--quiet", "factorize", "0:2,-1:0.5,1:0.5", "--digits", "10"]) == 0
    out = capsys.readouterr().out
    assert "p[0]" in out and "p[1]" in out
    assert "[RESULT] degree=1" in out


def test_factorize_negative_input(capsys):
    assert main(["--quiet", "factorize", "0:1/4,-1:1/2,1:1/2"]) == 1
    assert "[FATAL]" in capsys.readouterr().out


def test_bad_polynomial_string(capsys):
    assert main(["--quiet", "factorize", "0:2,oops"]) == 1
    assert "invalid input" in capsys.readouterr().out


def test_self_test_command(capsys):
    assert main(["--quiet", "self-test"]) == 0
    assert "PASS fejer_riesz_2_plus_cos" in capsys.readouterr().out


def test_parser_defaults():
    args = build_parser().parse_args(["factorize", "0:1"])
    assert args.precision == 50
    assert args.no_oracle is False
