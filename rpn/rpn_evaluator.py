"""RPN表达式求值器 - 调用上下文中注册的操作符和函数"""
import logging

from rpn.errors import CalculationArithmeticError, CalculatorError, MalformedExpression
from rpn.token_system import TokenType, classify_postfix

logger = logging.getLogger(__name__)


class RPNEvaluator:
    """评估以空格分隔的后缀表达式"""

    @staticmethod
    def _apply(symbol, operation, args, context, as_sequence):
        try:
            with context.arithmetic():
                result = operation(args) if as_sequence else operation(*args)
            return context.round(result)
        except CalculatorError:
            raise
        except (ArithmeticError, ValueError, TypeError) as e:
            raise CalculationArithmeticError(f"'{symbol}' failed on {[str(a) for a in args]}: {e}") from e

    @staticmethod
    def _pop_operands(stack, count, symbol):
        if len(stack) < count:
            logger.debug(f"Insufficient operands for {symbol}: need {count}, have {len(stack)}")
            raise MalformedExpression(f"Insufficient operands for '{symbol}': need {count}, have {len(stack)}")
        # 先弹出的是右操作数，恢复为入栈顺序
        return [stack.pop() for _ in range(count)][::-1]

    @staticmethod
    def evaluate(postfix, context):
        """
        Args:
            postfix: 后缀表达式字符串
            context: CalculationContext
        Returns:
            按上下文策略舍入后的 Decimal
        """
        if postfix is None or not postfix.strip():
            raise MalformedExpression("postfix expression cannot be null or blank")

        stack = []
        for text in postfix.split():
            token = classify_postfix(text, context)

            if token.kind == TokenType.OPERAND:
                value = token.value if token.value is not None else context.resolve(token.text)
                stack.append(value)

            elif token.kind == TokenType.OPERATOR:
                operator = token.descriptor
                args = RPNEvaluator._pop_operands(stack, operator.arity, operator.symbol)
                stack.append(RPNEvaluator._apply(operator.symbol, operator.operation, args, context, False))

            elif token.kind == TokenType.FUNCTION:
                function = token.descriptor
                arity = function.arity
                if function.is_variadic:
                    # 可变参数函数前面是参数个数
                    count = RPNEvaluator._pop_operands(stack, 1, function.name)[0]
                    if count != count.to_integral_value() or count < 1:
                        raise MalformedExpression(
                            f"invalid argument count '{count}' for variadic function '{function.name}'")
                    arity = int(count)
                args = RPNEvaluator._pop_operands(stack, arity, function.name)
                stack.append(RPNEvaluator._apply(function.name, function.operation, args, context, True))

        if len(stack) != 1:
            logger.debug(f"Stack has {len(stack)} elements after evaluating '{postfix}', expected 1")
            raise MalformedExpression(
                f"Malformed postfix expression '{postfix}': {len(stack)} values left on the stack, expected 1")

        try:
            result = context.round(stack[0])
        except ArithmeticError as e:
            raise CalculationArithmeticError(f"cannot round result '{stack[0]}': {e}") from e
        logger.debug(f"evaluated postfix '{postfix}' to '{result}'")
        return result


def evaluate(postfix, context):
    return RPNEvaluator.evaluate(postfix, context)
