import argparse
from decimal import Decimal

import pytest

import main


def _args(**overrides):
    values = dict(expression=None, postfix=None, var=None, preset=None,
                  places=None, rounding=None, verbose=False)
    values.update(overrides)
    return argparse.Namespace(**values)


def test_demo_expression(capsys) -> None:
    assert main.main(_args()) == Decimal("1421.2230305")
    assert "result: 1421.2230305" in capsys.readouterr().out


def test_infix_expression(capsys) -> None:
    assert main.main(_args(expression="3+4*2")) == Decimal(11)
    assert "result: 11" in capsys.readouterr().out


def test_postfix_expression() -> None:
    assert main.main(_args(postfix="3 4 2 * +", verbose=True)) == Decimal(11)


def test_variables() -> None:
    assert main.main(_args(expression="x^2+y", var=[("x", "2"), ("y", "0.5")])) == Decimal("4.5")


def test_preset_and_rounding() -> None:
    assert main.main(_args(expression="1/3", preset="decimal64")) == Decimal("0.3333333333333333")
    assert main.main(_args(expression="2/3", places=2, rounding="HALF_UP")) == Decimal("0.67")


def test_parse_variable() -> None:
    assert main._parse_variable(" r = 12 ") == ("r", "12")
    with pytest.raises(argparse.ArgumentTypeError):
        main._parse_variable("r")
    with pytest.raises(argparse.ArgumentTypeError):
        main._parse_variable("=3")
