import pytest

from rpn import InfixConverter, MalformedExpression, UnknownIdentifier, convert


@pytest.mark.parametrize("infix, expected", [
    ("3+4*2", "3 4 2 * +"),
    ("2^3^2", "2 3 2 ^ ^"),
    ("(1+2)*3", "1 2 + 3 *"),
    ("10-4-3", "10 4 - 3 -"),
    ("12/3/2", "12 3 / 2 /"),
    ("2*[3+{4-1}]", "2 3 4 1 - + *"),
    ("(1+2]", "1 2 +"),
    ("-3^2", "3 2 ^ neg"),
    ("-3*2", "3 neg 2 *"),
    ("2^-2", "2 2 neg ^"),
    ("-(1+2)*3", "1 2 + neg 3 *"),
    ("3!", "3 !"),
    ("4!/2", "4 ! 2 /"),
    ("√(4)+1", "4 √ 1 +"),
    ("max(1,min(5,3))", "1 5 3 min max"),
    ("sum(1,2,3)", "1 2 3 3 sum"),
    ("sum(7)", "7 1 sum"),
    ("sin(30)cos(60)", "30 sin 60 cos *"),
    ("2×3", "2 3 *"),
])
def test_convert(context, infix, expected) -> None:
    assert convert(infix, context) == expected


def test_convert_with_variables(radius_context) -> None:
    converter = InfixConverter(radius_context)
    assert converter.convert("pow(r*r,2)") == "r r * 2 pow"
    assert converter.convert("pow(π*r,2)") == "π r * 2 pow"


def test_unary_minus_inside_function(context) -> None:
    context.set_variable("x", 30)
    assert convert("sin(-x)", context) == "x neg sin"
    assert convert("max(-1,-x)", context) == "1 neg x neg max"


@pytest.mark.parametrize("infix", ["(1+2", "((1)", "sin(30"])
def test_unmatched_opener(context, infix) -> None:
    with pytest.raises(MalformedExpression, match="opening"):
        convert(infix, context)


@pytest.mark.parametrize("infix", ["1+2)", "(1))", ")"])
def test_unmatched_closer(context, infix) -> None:
    with pytest.raises(MalformedExpression, match="closing"):
        convert(infix, context)


@pytest.mark.parametrize("infix", [
    "max(1)",
    "max(1,2,3)",
    "sin(1,2)",
    "sum()",
    "max(1,,2)",
    "max(1,)",
    "max(,1)",
    "1,2",
    "(1,2)",
    "()",
    "3+",
    "3 +",
    "2*(3-)",
])
def test_malformed(context, infix) -> None:
    with pytest.raises(MalformedExpression):
        convert(infix, context)


def test_unknown_name(context) -> None:
    with pytest.raises(UnknownIdentifier):
        convert("x+1", context)


def test_output_is_single_spaced(context) -> None:
    result = convert("  ( 1 +2 ) * 3 ", context)
    assert result == " ".join(result.split())
