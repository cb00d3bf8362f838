"""rpn/errors.py - 表达式转换与求值的异常体系"""


class CalculatorError(Exception):
    """所有计算器异常的基类"""


class MalformedExpression(CalculatorError, ValueError):
    """结构错误：括号不匹配、操作数/操作符数量不符、无法解析的Token"""


class UnknownIdentifier(MalformedExpression):
    """名称既不是常数、变量，也不是操作符或函数"""

    def __init__(self, name, message=None):
        self.name = name
        super().__init__(message or f"unknown identifier '{name}'")


class CalculationArithmeticError(CalculatorError, ArithmeticError):
    """操作符或函数自身定义的运算失败（除零、定义域错误等）"""


class DuplicateRegistration(CalculatorError, ValueError):
    """上下文注册冲突"""

    def __init__(self, name, registry):
        self.name = name
        self.registry = registry
        super().__init__(f"'{name}' is already registered as {registry}")
