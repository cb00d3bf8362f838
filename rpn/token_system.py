"""rpn/token_system.py"""
import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Callable, Optional

from rpn.errors import MalformedExpression, UnknownIdentifier


class TokenType(Enum):
    OPERAND = "operand"  # 数值字面量、常数或变量
    OPERATOR = "operator"  # 一元/二元操作符
    FUNCTION = "function"  # 函数名，后面必须紧跟左括号
    ARG_SEPARATOR = "arg_separator"  # 函数参数分隔符
    OPENER = "opener"  # ( [ {
    CLOSER = "closer"  # ) ] }


class Precedence(IntEnum):
    LOWEST = 1  # + -
    LOW = 2  # * / %
    HIGH = 3  # 一元操作符
    HIGHEST = 4  # ^


class Associativity(Enum):
    LEFT = "left"
    RIGHT = "right"


# 三种括号可互换使用，只要求数量匹配
OPENERS = ("(", "[", "{")
CLOSERS = (")", "]", "}")

NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?|\.\d+")
SIGNED_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d+)?|\.\d+)")


@dataclass(frozen=True)
class OperatorDescriptor:
    symbol: str
    arity: int
    precedence: int
    associativity: Associativity
    operation: Callable[..., Decimal]
    postfix: bool = False  # 一元后缀操作符（如阶乘 !）

    @property
    def is_unary(self):
        return self.arity == 1

    @property
    def is_prefix_unary(self):
        return self.arity == 1 and not self.postfix

    @property
    def is_postfix_unary(self):
        return self.arity == 1 and self.postfix


@dataclass(frozen=True)
class FunctionDescriptor:
    name: str
    arity: Optional[int]  # None 表示可变参数
    operation: Callable[[list], Decimal]

    @property
    def is_variadic(self):
        return self.arity is None


@dataclass(frozen=True)
class Token:
    kind: TokenType
    text: str
    value: Optional[Decimal] = None  # 仅数值字面量有值，名称在求值时再解析
    descriptor: object = None  # OperatorDescriptor 或 FunctionDescriptor

    @property
    def is_literal(self):
        return self.kind == TokenType.OPERAND and self.value is not None

    def starts_value(self):
        """该Token能否开始一个操作数（用于隐式乘法判断）"""
        if self.kind in (TokenType.OPERAND, TokenType.OPENER, TokenType.FUNCTION):
            return True
        return self.kind == TokenType.OPERATOR and self.descriptor.is_prefix_unary

    def ends_value(self):
        """该Token能否结束一个操作数"""
        if self.kind in (TokenType.OPERAND, TokenType.CLOSER):
            return True
        return self.kind == TokenType.OPERATOR and self.descriptor.is_postfix_unary

    def __str__(self):
        return self.text


def is_opener(text):
    return text in OPENERS


def is_closer(text):
    return text in CLOSERS


def is_unary_position(previous):
    """操作符位于表达式开头、另一个操作符、左括号或参数分隔符之后时视为一元"""
    if previous is None:
        return True
    if previous.kind in (TokenType.OPENER, TokenType.ARG_SEPARATOR):
        return True
    return previous.kind == TokenType.OPERATOR and not previous.descriptor.is_postfix_unary


def _classify_operand(text, context, pattern):
    if pattern.fullmatch(text):
        return Token(TokenType.OPERAND, text, value=Decimal(text))
    if context.has_operand(text):
        return Token(TokenType.OPERAND, text)
    raise UnknownIdentifier(text)


def classify(text, context, previous=None, following=None):
    """
    中缀模式下对单个Token分类
    Args:
        text: Token文本
        context: CalculationContext
        previous: 前一个已分类的Token（用于一元/二元判断）
        following: 下一个Token的文本（用于函数判断）
    Returns:
        Token
    """
    if is_opener(text):
        return Token(TokenType.OPENER, text)
    if is_closer(text):
        return Token(TokenType.CLOSER, text)
    if text == context.separator:
        return Token(TokenType.ARG_SEPARATOR, text)

    text = context.aliases.get(text, text)
    operator = context.operators.get(text)
    if operator is not None:
        if is_unary_position(previous):
            unary_symbol = context.unary_forms.get(text)
            if unary_symbol is not None:
                operator = context.operators[unary_symbol]
            elif not operator.is_prefix_unary:
                raise MalformedExpression(f"operator '{text}' is missing its left operand")
        return Token(TokenType.OPERATOR, operator.symbol, descriptor=operator)

    function = context.functions.get(text)
    if function is not None:
        if following is None or not is_opener(following):
            raise UnknownIdentifier(text, f"function '{text}' must be followed by an opening bracket")
        return Token(TokenType.FUNCTION, text, descriptor=function)

    return _classify_operand(text, context, NUMBER_PATTERN)


def classify_postfix(text, context):
    """后缀模式下对单个Token分类：没有位置规则，括号和分隔符都是非法的"""
    if is_opener(text) or is_closer(text) or text == context.separator:
        raise MalformedExpression(f"bracket or separator '{text}' is not allowed in postfix expression")

    text = context.aliases.get(text, text)
    operator = context.operators.get(text)
    if operator is not None:
        return Token(TokenType.OPERATOR, operator.symbol, descriptor=operator)

    function = context.functions.get(text)
    if function is not None:
        return Token(TokenType.FUNCTION, text, descriptor=function)

    return _classify_operand(text, context, SIGNED_NUMBER_PATTERN)


def tokenize(texts, context):
    """按位置依次分类一串Token文本"""
    tokens = []
    previous = None
    for i, text in enumerate(texts):
        following = texts[i + 1] if i + 1 < len(texts) else None
        previous = classify(text, context, previous=previous, following=following)
        tokens.append(previous)
    return tokens
