"""rpn/infix_normalizer.py - 把原始中缀字符串整理成以单个空格分隔的规范Token流"""
import logging
import re

from rpn.errors import MalformedExpression, UnknownIdentifier
from rpn.token_system import NUMBER_PATTERN, Token, TokenType, tokenize

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"[^\W\d]\w*")


class InfixNormalizer:
    """
    逐字符扫描中缀表达式：
    - 数字开头读取一个十进制字面量
    - 否则按上下文中已注册的名称做最长匹配（函数、常数、变量、操作符、括号、分隔符）
    - 匹配结果再按位置分类：字形别名替换为规范符号，一元 +/- 改写为 pos/neg，
      相邻的两个操作数之间补上隐式乘号
    """

    def __init__(self, context):
        self.context = context

    def split(self, infix):
        """切分为Token文本，不做分类"""
        if infix is None or not infix.strip():
            raise MalformedExpression("infix expression cannot be null or blank")

        names = self.context.names()
        pieces = []
        i = 0
        while i < len(infix):
            if infix[i].isspace():
                i += 1
                continue

            number = NUMBER_PATTERN.match(infix, i)
            if number:
                pieces.append(number.group())
                i = number.end()
                continue

            name = next((n for n in names if infix.startswith(n, i)), None)
            if name is not None:
                pieces.append(name)
                i += len(name)
                continue

            identifier = IDENTIFIER_PATTERN.match(infix, i)
            if identifier:
                raise UnknownIdentifier(identifier.group(),
                                        f"unknown identifier '{identifier.group()}' at position {i} of '{infix}'")
            raise MalformedExpression(f"unrecognized token '{infix[i]}' at position {i} of '{infix}'")

        logger.debug(f"split '{infix}' into {pieces}")
        return pieces

    def tokenize(self, infix):
        """切分、分类并补全隐式乘号，返回 Token 列表"""
        tokens = []
        for token in tokenize(self.split(infix), self.context):
            if tokens and tokens[-1].ends_value() and token.starts_value():
                previous = tokens[-1]
                if previous.is_literal and token.is_literal:
                    raise MalformedExpression(
                        f"missing operator between '{previous.text}' and '{token.text}'")
                multiply = self.context.operators["*"]
                tokens.append(Token(TokenType.OPERATOR, multiply.symbol, descriptor=multiply))
            tokens.append(token)
        return tokens

    def normalize(self, infix):
        result = " ".join(token.text for token in self.tokenize(infix))
        logger.debug(f"normalized '{infix}' to '{result}'")
        return result


def normalize(raw, context):
    return InfixNormalizer(context).normalize(raw)
