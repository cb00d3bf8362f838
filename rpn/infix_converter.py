"""rpn/infix_converter.py - 调度场算法：中缀 -> 后缀(RPN)"""
import logging

from rpn.errors import MalformedExpression
from rpn.infix_normalizer import InfixNormalizer
from rpn.token_system import Associativity, TokenType

logger = logging.getLogger(__name__)


class InfixConverter:
    """把归一化后的Token流转换为以空格分隔的后缀表达式"""

    def __init__(self, context):
        self.context = context
        self.normalizer = InfixNormalizer(context)

    @staticmethod
    def _should_pop(top, operator):
        """栈顶操作符是否先于当前二元操作符输出"""
        if top.kind != TokenType.OPERATOR:
            return False
        top_precedence = top.descriptor.precedence
        precedence = operator.descriptor.precedence
        if top_precedence > precedence:
            return True
        return top_precedence == precedence and operator.descriptor.associativity == Associativity.LEFT

    @staticmethod
    def _pop_until_opener(stack, queue):
        while stack and stack[-1].kind != TokenType.OPENER:
            queue.append(stack.pop())
        return bool(stack)

    def convert(self, infix):
        """
        Args:
            infix: 中缀表达式（可以没有空格）
        Returns:
            后缀表达式字符串
        """
        tokens = self.normalizer.tokenize(infix)
        stack = []  # 操作符/括号/函数名 (LIFO)
        queue = []  # 输出 (FIFO)
        # 与栈中每个左括号一一对应：函数调用记录参数个数，普通括号为 None
        arg_counts = []
        previous = None

        for token in tokens:
            if token.kind == TokenType.OPERAND:
                queue.append(token)

            elif token.kind == TokenType.FUNCTION:
                stack.append(token)

            elif token.kind == TokenType.OPENER:
                is_call = previous is not None and previous.kind == TokenType.FUNCTION
                arg_counts.append(1 if is_call else None)
                stack.append(token)

            elif token.kind == TokenType.ARG_SEPARATOR:
                self._check_operand_before(previous, token)
                if not self._pop_until_opener(stack, queue):
                    raise MalformedExpression("Malformed expression! Argument separator outside of brackets")
                if arg_counts[-1] is None:
                    raise MalformedExpression("Malformed expression! Argument separator outside of a function call")
                if previous.kind in (TokenType.OPENER, TokenType.ARG_SEPARATOR):
                    raise MalformedExpression("Malformed expression! Empty function argument")
                arg_counts[-1] += 1

            elif token.kind == TokenType.CLOSER:
                self._check_operand_before(previous, token)
                if not self._pop_until_opener(stack, queue):
                    raise MalformedExpression("Malformed expression! Unmatched closing bracket ) | ] | }")
                stack.pop()
                count = arg_counts.pop()
                if previous.kind == TokenType.ARG_SEPARATOR:
                    raise MalformedExpression("Malformed expression! Empty function argument")
                if previous.kind == TokenType.OPENER:
                    if count is None:
                        raise MalformedExpression("Malformed expression! Empty brackets")
                    count = 0
                if count is not None:
                    self._emit_function(stack.pop(), count, queue)

            elif token.kind == TokenType.OPERATOR:
                operator = token.descriptor
                if operator.is_postfix_unary:
                    queue.append(token)
                elif operator.is_prefix_unary:
                    stack.append(token)
                else:
                    while stack and self._should_pop(stack[-1], token):
                        queue.append(stack.pop())
                    stack.append(token)

            previous = token

        if previous.kind == TokenType.OPERATOR and not previous.descriptor.is_postfix_unary:
            raise MalformedExpression(f"Malformed expression! Expression ends with operator '{previous.text}'")

        while stack:
            top = stack.pop()
            if top.kind == TokenType.OPENER:
                raise MalformedExpression("Malformed expression! Unmatched opening bracket ( | [ | {")
            queue.append(top)

        result = " ".join(str(item) for item in queue)
        logger.debug(f"converted infix '{infix}' to postfix '{result}'")
        return result

    @staticmethod
    def _check_operand_before(previous, token):
        """逗号或右括号前面不能是等待右操作数的操作符"""
        if previous is not None and previous.kind == TokenType.OPERATOR \
                and not previous.descriptor.is_postfix_unary:
            raise MalformedExpression(
                f"Malformed expression! Operator '{previous.text}' is missing an operand before '{token.text}'")

    @staticmethod
    def _emit_function(token, count, queue):
        function = token.descriptor
        if function.is_variadic:
            if count < 1:
                raise MalformedExpression(f"function '{function.name}' needs at least one argument")
            # 可变参数函数：参数个数作为字面量紧跟在参数之后
            queue.append(str(count))
        elif count != function.arity:
            raise MalformedExpression(
                f"function '{function.name}' expects {function.arity} argument(s), got {count}")
        queue.append(token)


def convert(infix, context):
    return InfixConverter(context).convert(infix)
