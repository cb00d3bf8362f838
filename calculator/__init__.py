"""计算器模块 - 链式计算接口和公式求值"""
from .state import Calculator, CalculatorState
from .evaluator import FormulaEvaluator

__all__ = ['Calculator', 'CalculatorState', 'FormulaEvaluator']
