import dataclasses
from decimal import Decimal

import pytest

from rpn import MalformedExpression, UnknownIdentifier
from rpn.token_system import TokenType, classify, classify_postfix, tokenize


@pytest.mark.parametrize("text, kind", [
    ("(", TokenType.OPENER),
    ("[", TokenType.OPENER),
    ("{", TokenType.OPENER),
    (")", TokenType.CLOSER),
    ("]", TokenType.CLOSER),
    ("}", TokenType.CLOSER),
    (",", TokenType.ARG_SEPARATOR),
])
def test_brackets_and_separator(context, text, kind) -> None:
    assert classify(text, context).kind == kind


def test_literal_operand_carries_decimal(context) -> None:
    token = classify("3.25", context)
    assert token.kind == TokenType.OPERAND
    assert token.value == Decimal("3.25")
    assert token.is_literal


def test_named_operand_is_resolved_lazily(context) -> None:
    token = classify("pi", context)
    assert token.kind == TokenType.OPERAND
    assert token.value is None
    assert not token.is_literal


def test_unknown_name(context) -> None:
    with pytest.raises(UnknownIdentifier) as info:
        classify("foo", context)
    assert info.value.name == "foo"


def test_minus_is_unary_at_start(context) -> None:
    token = classify("-", context)
    assert token.kind == TokenType.OPERATOR
    assert token.text == "neg"
    assert token.descriptor.arity == 1


def test_minus_is_binary_after_operand(context) -> None:
    previous = classify("3", context)
    token = classify("-", context, previous=previous)
    assert token.text == "-"
    assert token.descriptor.arity == 2


@pytest.mark.parametrize("previous_text", ["(", ","])
def test_minus_is_unary_after_opener_or_separator(context, previous_text) -> None:
    previous = classify(previous_text, context)
    assert classify("-", context, previous=previous).text == "neg"


def test_minus_is_unary_after_operator(context) -> None:
    previous = classify("*", context, previous=classify("2", context))
    assert classify("-", context, previous=previous).text == "neg"


def test_minus_is_binary_after_postfix_operator(context) -> None:
    previous = classify("!", context, previous=classify("3", context))
    assert classify("-", context, previous=previous).text == "-"


@pytest.mark.parametrize("text", ["*", "/", "^", "!"])
def test_operator_without_left_operand(context, text) -> None:
    with pytest.raises(MalformedExpression):
        classify(text, context)


@pytest.mark.parametrize("glyph, symbol", [("×", "*"), ("÷", "/"), ("−", "-"), ("**", "^")])
def test_glyph_aliases(context, glyph, symbol) -> None:
    previous = classify("2", context)
    assert classify(glyph, context, previous=previous).text == symbol


def test_function_needs_opener(context) -> None:
    token = classify("sin", context, following="(")
    assert token.kind == TokenType.FUNCTION
    assert token.descriptor.arity == 1
    with pytest.raises(UnknownIdentifier) as info:
        classify("sin", context, following="30")
    assert info.value.name == "sin"
    with pytest.raises(UnknownIdentifier):
        classify("sin", context)


def test_postfix_classification_has_no_positional_rule(context) -> None:
    assert classify_postfix("-", context).descriptor.arity == 2
    assert classify_postfix("neg", context).descriptor.arity == 1
    assert classify_postfix("sin", context).kind == TokenType.FUNCTION
    assert classify_postfix("-5", context).value == Decimal("-5")


@pytest.mark.parametrize("text", ["(", ")", ","])
def test_postfix_rejects_brackets_and_separator(context, text) -> None:
    with pytest.raises(MalformedExpression):
        classify_postfix(text, context)


def test_tokenize_resolves_signs_by_position(context) -> None:
    tokens = tokenize(["-", "3", "-", "(", "-", "2", ")"], context)
    assert [t.text for t in tokens] == ["neg", "3", "-", "(", "neg", "2", ")"]


def test_tokens_are_immutable(context) -> None:
    token = classify("1", context)
    with pytest.raises(dataclasses.FrozenInstanceError):
        token.text = "2"


def test_classification_follows_context_registrations(context) -> None:
    with pytest.raises(UnknownIdentifier):
        classify("x", context)
    context.set_variable("x", 1)
    assert classify("x", context).kind == TokenType.OPERAND
