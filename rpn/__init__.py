"""核心模块 - Token分类、计算上下文、中缀归一化、调度场转换和RPN求值"""
from .errors import (
    CalculatorError, MalformedExpression, UnknownIdentifier,
    CalculationArithmeticError, DuplicateRegistration
)
from .token_system import (
    TokenType, Token, Precedence, Associativity,
    OperatorDescriptor, FunctionDescriptor, classify, classify_postfix
)
from .context import CalculationContext
from .infix_normalizer import InfixNormalizer, normalize
from .infix_converter import InfixConverter, convert
from .rpn_evaluator import RPNEvaluator, evaluate

__all__ = [
    'CalculatorError', 'MalformedExpression', 'UnknownIdentifier',
    'CalculationArithmeticError', 'DuplicateRegistration',
    'TokenType', 'Token', 'Precedence', 'Associativity',
    'OperatorDescriptor', 'FunctionDescriptor', 'classify', 'classify_postfix',
    'CalculationContext', 'InfixNormalizer', 'normalize',
    'InfixConverter', 'convert', 'RPNEvaluator', 'evaluate'
]
