import pytest

from rpn import InfixNormalizer, MalformedExpression, UnknownIdentifier, normalize


@pytest.mark.parametrize("raw, expected", [
    ("3+4*2", "3 + 4 * 2"),
    ("  3 +\t4 ", "3 + 4"),
    ("2×3÷4−1", "2 * 3 / 4 - 1"),
    ("2**3", "2 ^ 3"),
    ("-3+-2", "neg 3 + neg 2"),
    ("+3", "pos 3"),
    ("2(3+4)", "2 * ( 3 + 4 )"),
    ("(1)(2)", "( 1 ) * ( 2 )"),
    ("2pi", "2 * pi"),
    ("2√4", "2 * √ 4"),
    ("3!2", "3 ! * 2"),
    ("sin(30)cos(60)", "sin ( 30 ) * cos ( 60 )"),
    (".5+1.25", ".5 + 1.25"),
    ("[1]+{2}", "[ 1 ] + { 2 }"),
])
def test_normalize(context, raw, expected) -> None:
    assert normalize(raw, context) == expected


def test_normalize_with_variables(radius_context) -> None:
    assert normalize("pow(r*r,2)", radius_context) == "pow ( r * r , 2 )"
    assert normalize("2πr", radius_context) == "2 * π * r"


def test_longest_name_wins(context) -> None:
    context.set_variable("x", 1).set_variable("xy", 2)
    assert InfixNormalizer(context).split("xy+x") == ["xy", "+", "x"]


def test_split_keeps_unclassified_text(context) -> None:
    assert InfixNormalizer(context).split("-3+-2") == ["-", "3", "+", "-", "2"]


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_blank_input(context, raw) -> None:
    with pytest.raises(MalformedExpression):
        normalize(raw, context)


def test_adjacent_literals(context) -> None:
    with pytest.raises(MalformedExpression, match="missing operator"):
        normalize("12 3", context)


def test_unrecognized_character(context) -> None:
    with pytest.raises(MalformedExpression) as info:
        normalize("1$2", context)
    assert not isinstance(info.value, UnknownIdentifier)


def test_unknown_identifier(context) -> None:
    with pytest.raises(UnknownIdentifier) as info:
        normalize("2*foo", context)
    assert info.value.name == "foo"


def test_function_without_bracket(context) -> None:
    with pytest.raises(UnknownIdentifier):
        normalize("sin 30", context)


def test_operator_without_left_operand(context) -> None:
    with pytest.raises(MalformedExpression):
        normalize("*3", context)


@pytest.mark.parametrize("raw", ["-3+-2", "2(3+4)", "2×3÷4−1", "max(-1,2)!", "sum(1,2,3)"])
def test_normalize_is_idempotent(context, raw) -> None:
    once = normalize(raw, context)
    assert normalize(once, context) == once
