"""rpn/operators.py"""
import logging
import math
from decimal import Decimal

import numpy as np

from config.config import CALCULATION_CONFIG
from rpn.errors import CalculationArithmeticError
from rpn.token_system import (
    Associativity, FunctionDescriptor, OperatorDescriptor, Precedence
)

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)
TWO = Decimal(2)

# 常数保留50位，足够覆盖 Decimal128 之后再舍入
PI = Decimal("3.14159265358979323846264338327950288419716939937510")
E = Decimal("2.71828182845904523536028747135266249775724709369995")


def _from_float(value, name):
    """numpy 结果转回 Decimal，拒绝 nan/inf"""
    if not np.isfinite(value):
        logger.debug(f"Non-finite {name} result: {value}")
        raise CalculationArithmeticError(f"{name} result is not a finite number")
    return Decimal(float(value))


class Operators:
    """所有内置操作符和函数的静态方法集合
    操作符按位置接收操作数，函数接收按顺序排列的参数列表。
    运算在 CalculationContext.arithmetic() 的 decimal 上下文中执行，结果由求值器统一舍入。
    """

    # 二元操作符========================================
    @staticmethod
    def add(operand1, operand2):
        return operand1 + operand2

    @staticmethod
    def sub(operand1, operand2):
        return operand1 - operand2

    @staticmethod
    def mul(operand1, operand2):
        return operand1 * operand2

    @staticmethod
    def div(operand1, operand2):
        return operand1 / operand2

    @staticmethod
    def mod(operand1, operand2):
        """余数，符号与被除数相同"""
        return operand1 % operand2

    @staticmethod
    def power(base, exponent):
        """整数指数精确计算，非整数指数交给 decimal 的幂运算"""
        if exponent == 0:
            return Decimal(1)
        if exponent == exponent.to_integral_value():
            return base ** int(exponent)
        return base ** exponent

    # 一元操作符====================
    @staticmethod
    def neg(operand):
        return -operand

    @staticmethod
    def pos(operand):
        return +operand

    @staticmethod
    def sqrt(operand):
        if operand < 0:
            raise CalculationArithmeticError(f"square root of negative number {operand}")
        return operand.sqrt()

    @staticmethod
    def factorial(operand):
        limit = CALCULATION_CONFIG["max_factorial"]
        if operand != operand.to_integral_value() or operand < 0 or operand > limit:
            raise CalculationArithmeticError(f"{operand} is out of range! factorial needs an integer in 0..{limit}")
        return Decimal(math.factorial(int(operand)))

    # 函数=====================================
    @staticmethod
    def _trigonometric(func, degrees, name):
        """角度制三角函数"""
        with np.errstate(all='ignore'):
            value = func(np.radians(float(degrees)))
        return _from_float(value, name)

    @staticmethod
    def sin(args):
        return Operators._trigonometric(np.sin, args[0], "sin")

    @staticmethod
    def cos(args):
        return Operators._trigonometric(np.cos, args[0], "cos")

    @staticmethod
    def tan(args):
        return Operators._trigonometric(np.tan, args[0], "tan")

    @staticmethod
    def log(args):
        """以10为底的对数"""
        if args[0] <= 0:
            raise CalculationArithmeticError("log base 10 argument cannot be equal or less than 0!")
        return args[0].log10()

    @staticmethod
    def abs(args):
        return abs(args[0])

    @staticmethod
    def min(args):
        return min(args)

    @staticmethod
    def max(args):
        return max(args)

    @staticmethod
    def avg(args):
        return (args[0] + args[1]) / TWO

    @staticmethod
    def pct(args):
        """a 占 b 的百分比"""
        return args[0] / args[1] * HUNDRED

    @staticmethod
    def pow(args):
        return Operators.power(args[0], args[1])

    @staticmethod
    def sum(args):
        return sum(args, Decimal(0))


def default_operators():
    """内置操作符（注册顺序即描述顺序）"""
    LEFT, RIGHT = Associativity.LEFT, Associativity.RIGHT
    return [
        OperatorDescriptor("^", 2, Precedence.HIGHEST, RIGHT, Operators.power),
        OperatorDescriptor("!", 1, Precedence.HIGH, RIGHT, Operators.factorial, postfix=True),
        OperatorDescriptor("√", 1, Precedence.HIGH, LEFT, Operators.sqrt),
        OperatorDescriptor("neg", 1, Precedence.HIGH, LEFT, Operators.neg),
        OperatorDescriptor("pos", 1, Precedence.HIGH, LEFT, Operators.pos),
        OperatorDescriptor("*", 2, Precedence.LOW, LEFT, Operators.mul),
        OperatorDescriptor("/", 2, Precedence.LOW, LEFT, Operators.div),
        OperatorDescriptor("%", 2, Precedence.LOW, LEFT, Operators.mod),
        OperatorDescriptor("+", 2, Precedence.LOWEST, LEFT, Operators.add),
        OperatorDescriptor("-", 2, Precedence.LOWEST, LEFT, Operators.sub),
    ]


def default_functions():
    return [
        FunctionDescriptor("sin", 1, Operators.sin),
        FunctionDescriptor("cos", 1, Operators.cos),
        FunctionDescriptor("tan", 1, Operators.tan),
        FunctionDescriptor("log", 1, Operators.log),
        FunctionDescriptor("abs", 1, Operators.abs),
        FunctionDescriptor("min", 2, Operators.min),
        FunctionDescriptor("max", 2, Operators.max),
        FunctionDescriptor("avg", 2, Operators.avg),
        FunctionDescriptor("pct", 2, Operators.pct),
        FunctionDescriptor("pow", 2, Operators.pow),
        FunctionDescriptor("sum", None, Operators.sum),
    ]


DEFAULT_CONSTANTS = {
    "π": PI,
    "pi": PI,
    "PI": PI,
    "e": E,
}

# Unicode 字形及别名 -> 规范符号
GLYPH_ALIASES = {
    "×": "*",
    "÷": "/",
    "−": "-",
    "**": "^",
}

# 一元位置上的符号 -> 对应的前缀操作符
UNARY_FORMS = {
    "-": "neg",
    "+": "pos",
}
