"""calculator/state.py - 链式计算接口

    Calculator.with_context(context).convert("pow(π*r,2)").do_print().then_calculate()
    Calculator.accept("3 4 2 * +").then_calculate()
"""
import logging
from collections import OrderedDict
from decimal import Decimal

from rpn import CalculationContext, InfixConverter, RPNEvaluator

logger = logging.getLogger(__name__)


class CalculatorState:
    """一次链式计算的状态：上下文、中缀/后缀表达式以及打印缓冲"""

    def __init__(self, context=None):
        self.custom_context = context is not None
        self.context = context if context is not None else CalculationContext.new_instance()
        self.infix = None
        self.postfix = None
        self.printing = False
        self.result = None
        self.messages = OrderedDict()
        self.messages["CALCULATION PARAMETERS"] = ""
        self.messages["CUSTOM CONTEXT" if self.custom_context else "CONTEXT"] = self.context.describe()

    def set_infix(self, infix):
        self.infix = infix
        self.messages["INFIX EXPRESSION"] = infix
        self.set_postfix(InfixConverter(self.context).convert(infix))

    def set_postfix(self, postfix):
        self.postfix = postfix
        self.messages["POSTFIX EXPRESSION"] = postfix

    def calculate(self) -> Decimal:
        if self.postfix is None:
            raise RuntimeError("no expression to calculate; call convert() or accept() first")
        self.result = RPNEvaluator.evaluate(self.postfix, self.context)
        self.messages["RESULT"] = str(self.result)
        self.print()
        return self.result

    def report(self):
        return "".join(f"\n{key:<22}{value}" for key, value in self.messages.items())

    def print(self):
        if self.printing:
            logger.info(self.report())


class CalculationConfigurer:
    def __init__(self, state):
        self.state = state

    @property
    def postfix(self):
        return self.state.postfix

    def do_print(self):
        """计算完成后以 INFO 级别输出计算参数和结果"""
        self.state.printing = True
        return self

    def then_calculate(self) -> Decimal:
        return self.state.calculate()


class ExpressionConfigurer:
    def __init__(self, state):
        self.state = state

    def convert(self, infix) -> CalculationConfigurer:
        self.state.set_infix(infix)
        return CalculationConfigurer(self.state)

    def accept(self, postfix) -> CalculationConfigurer:
        self.state.set_postfix(postfix)
        return CalculationConfigurer(self.state)


class Calculator:
    """链式接口入口"""

    @staticmethod
    def with_context(context) -> ExpressionConfigurer:
        return ExpressionConfigurer(CalculatorState(context))

    @staticmethod
    def with_defaults() -> ExpressionConfigurer:
        return ExpressionConfigurer(CalculatorState())

    @staticmethod
    def convert(infix) -> CalculationConfigurer:
        return Calculator.with_defaults().convert(infix)

    @staticmethod
    def accept(postfix) -> CalculationConfigurer:
        return Calculator.with_defaults().accept(postfix)
