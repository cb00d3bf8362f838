"""rpn/context.py - 计算上下文：操作符、函数、常数、变量注册表和数值舍入策略"""
import itertools
import logging
import numbers
from decimal import (
    Context, Decimal, DivisionByZero, InvalidOperation, Overflow, localcontext,
    MAX_EMAX, MAX_PREC, MIN_EMIN,
    ROUND_05UP, ROUND_CEILING, ROUND_DOWN, ROUND_FLOOR, ROUND_HALF_DOWN,
    ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_UP,
)
from types import MappingProxyType

from config.config import CALCULATION_CONFIG, PRESET_CONFIG
from rpn.errors import DuplicateRegistration, UnknownIdentifier
from rpn.operators import (
    DEFAULT_CONSTANTS, GLYPH_ALIASES, UNARY_FORMS, default_functions, default_operators
)
from rpn.token_system import (
    CLOSERS, OPENERS, Associativity, FunctionDescriptor, OperatorDescriptor, Precedence
)

logger = logging.getLogger(__name__)

_REVISIONS = itertools.count(1)

ROUNDING_MODES = (
    ROUND_CEILING, ROUND_DOWN, ROUND_FLOOR, ROUND_HALF_DOWN,
    ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_UP, ROUND_05UP,
)


def to_decimal(value):
    """把 Decimal/int/float/numpy 标量/数字字符串转换为有限的 Decimal"""
    if isinstance(value, bool):
        raise TypeError("boolean is not a numeric value")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, numbers.Integral):
        result = Decimal(int(value))
    elif isinstance(value, numbers.Real):
        # 取 float 的最短十进制表示，避免二进制误差的长尾
        result = Decimal(repr(float(value)))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"'{value}' is not a decimal number") from None
    else:
        raise TypeError(f"unsupported value type: {type(value).__name__}")
    if not result.is_finite():
        raise ValueError(f"value must be finite, got {value}")
    return result


def _normalize_rounding(rounding):
    mode = str(rounding).upper()
    if not mode.startswith("ROUND_"):
        mode = "ROUND_" + mode
    if mode not in ROUNDING_MODES:
        raise ValueError(f"unknown rounding mode: {rounding}")
    return mode


class CalculationContext:
    """
    计算上下文
    内置的操作符、函数、常数在构造时注册，之后可以追加；变量表可随时修改。
    上下文在多次转换/求值之间按引用共享。并发读取是安全的，但求值过程中修改变量的行为未定义，
    并发场景请自行加锁或者每个线程使用 copy() 得到的独立实例。
    """

    def __init__(self, places=None, rounding=None, precision=None, separator=None):
        self._places = None
        self._precision = None
        self.places = CALCULATION_CONFIG["decimal_places"] if places is None else places
        self.precision = CALCULATION_CONFIG["working_precision"] if precision is None else precision
        self._rounding = _normalize_rounding(CALCULATION_CONFIG["rounding"] if rounding is None else rounding)

        separator = CALCULATION_CONFIG["arg_separator"] if separator is None else separator
        if len(separator) != 1 or separator.isalnum() or separator.isspace() \
                or separator in OPENERS + CLOSERS or separator == ".":
            raise ValueError(f"invalid argument separator: '{separator}'")
        self._separator = separator

        self._operators = {op.symbol: op for op in default_operators()}
        self._functions = {fn.name: fn for fn in default_functions()}
        self._constants = dict(DEFAULT_CONSTANTS)
        self._variables = {}
        self._aliases = dict(GLYPH_ALIASES)
        self._unary_forms = dict(UNARY_FORMS)
        # 名称集合每变化一次换一个全局唯一的版本号，副本在修改前与原上下文共享版本号
        self.revision = next(_REVISIONS)
        self._names_cache = None

    # ================== 工厂 ==================
    @classmethod
    def new_instance(cls):
        return cls()

    @classmethod
    def decimal32(cls):
        return cls(places=PRESET_CONFIG["decimal32"], rounding=ROUND_HALF_EVEN)

    @classmethod
    def decimal64(cls):
        return cls(places=PRESET_CONFIG["decimal64"], rounding=ROUND_HALF_EVEN)

    @classmethod
    def decimal128(cls):
        return cls(places=PRESET_CONFIG["decimal128"], rounding=ROUND_HALF_EVEN)

    def copy(self):
        """独立副本（注册表浅拷贝，描述符本身不可变）"""
        clone = CalculationContext(self._places, self._rounding, self._precision, self._separator)
        clone._operators = dict(self._operators)
        clone._functions = dict(self._functions)
        clone._constants = dict(self._constants)
        clone._variables = dict(self._variables)
        clone.revision = self.revision
        return clone

    # ================== 舍入策略 ==================
    @property
    def places(self):
        return self._places

    @places.setter
    def places(self, places):
        if isinstance(places, bool) or not isinstance(places, int) or places < 0:
            raise ValueError(f"decimal places must be a non-negative integer, got {places!r}")
        if self._precision is not None and places >= self._precision:
            raise ValueError(f"decimal places {places} must be lower than working precision {self._precision}")
        self._places = places

    @property
    def precision(self):
        return self._precision

    @precision.setter
    def precision(self, precision):
        if isinstance(precision, bool) or not isinstance(precision, int) or precision <= self._places:
            raise ValueError(f"working precision must be an integer greater than {self._places}, got {precision!r}")
        self._precision = precision

    @property
    def rounding(self):
        return self._rounding

    @rounding.setter
    def rounding(self, rounding):
        self._rounding = _normalize_rounding(rounding)

    @property
    def separator(self):
        return self._separator

    def round(self, value):
        """按小数位数和舍入模式舍入"""
        exponent = Decimal(1).scaleb(-self._places)
        rounding_context = Context(prec=MAX_PREC, rounding=self._rounding, Emax=MAX_EMAX, Emin=MIN_EMIN)
        return to_decimal(value).quantize(exponent, context=rounding_context)

    def arithmetic(self):
        """操作符/函数执行时使用的 decimal 上下文"""
        return localcontext(Context(prec=self._precision, rounding=self._rounding,
                                    traps=[InvalidOperation, DivisionByZero, Overflow]))

    # ================== 只读视图 ==================
    @property
    def operators(self):
        return MappingProxyType(self._operators)

    @property
    def functions(self):
        return MappingProxyType(self._functions)

    @property
    def constants(self):
        return MappingProxyType(self._constants)

    @property
    def variables(self):
        return MappingProxyType(self._variables)

    @property
    def aliases(self):
        return MappingProxyType(self._aliases)

    @property
    def unary_forms(self):
        return MappingProxyType(self._unary_forms)

    def has_operand(self, name):
        return name in self._constants or name in self._variables

    def resolve(self, name):
        """按名称解析常数或变量"""
        if name in self._variables:
            return self._variables[name]
        if name in self._constants:
            return self._constants[name]
        raise UnknownIdentifier(name)

    def names(self):
        """归一化器贪婪匹配用的全部名称，按长度从长到短排列"""
        if self._names_cache is None or self._names_cache[0] != self.revision:
            names = set(self._operators) | set(self._aliases) | set(self._functions) \
                | set(self._constants) | set(self._variables) | set(OPENERS) | set(CLOSERS)
            names.add(self._separator)
            self._names_cache = (self.revision, sorted(names, key=len, reverse=True))
        return self._names_cache[1]

    # ================== 注册 ==================
    def _validate_name(self, name, kind, allow_variable=False):
        """名称冲突时抛出 DuplicateRegistration，格式非法时抛出 ValueError"""
        if not isinstance(name, str) or not name or name != name.strip() or any(c.isspace() for c in name):
            raise ValueError(f"{kind} name must be a non-blank string without whitespace, got {name!r}")
        self._check_available(name, allow_variable)
        if name[0].isdigit() or name[0] == ".":
            raise ValueError(f"{kind} name cannot start with a digit or '.': '{name}'")
        if any(c in OPENERS or c in CLOSERS or c == self._separator for c in name):
            raise ValueError(f"{kind} name cannot contain brackets or the argument separator: '{name}'")

    def _check_available(self, name, allow_variable=False):
        """名称冲突时抛出 DuplicateRegistration"""
        if name in OPENERS or name in CLOSERS or name == self._separator:
            registry = "reserved symbol"
        elif name in self._operators:
            registry = "operator"
        elif name in self._aliases:
            registry = "operator alias"
        elif name in self._functions:
            registry = "function"
        elif name in self._constants:
            registry = "constant"
        elif name in self._variables and not allow_variable:
            registry = "variable"
        else:
            return
        logger.warning(f"Rejected registration of '{name}': already a {registry}")
        raise DuplicateRegistration(name, registry)

    def _names_changed(self):
        self.revision = next(_REVISIONS)

    def register_operator(self, symbol, operation, precedence=Precedence.LOW,
                          associativity=Associativity.LEFT, arity=2, postfix=False):
        """
        注册操作符
        Args:
            symbol: 操作符符号
            operation: arity=2 时为 f(a, b)，arity=1 时为 f(a)
            precedence: 优先级，越大结合越紧
            associativity: 结合性
            arity: 1 或 2
            postfix: 一元操作符是否写在操作数之后
        Returns:
            self，便于链式调用
        """
        self._validate_name(symbol, "operator")
        if any(c.isdigit() or c == "." for c in symbol):
            raise ValueError(f"operator symbol cannot contain digits or '.': '{symbol}'")
        if arity not in (1, 2):
            raise ValueError(f"operator arity must be 1 or 2, got {arity!r}")
        if postfix and arity != 1:
            raise ValueError("only unary operators can be postfix")
        self._operators[symbol] = OperatorDescriptor(
            symbol, arity, int(precedence), Associativity(associativity), operation, postfix
        )
        self._names_changed()
        logger.debug(f"registered operator '{symbol}'")
        return self

    def register_function(self, name, operation, arity=1):
        """注册函数，operation 接收参数列表；arity=None 表示可变参数"""
        self._validate_name(name, "function")
        if arity is not None and (isinstance(arity, bool) or not isinstance(arity, int) or arity < 1):
            raise ValueError(f"function arity must be a positive integer or None, got {arity!r}")
        self._functions[name] = FunctionDescriptor(name, arity, operation)
        self._names_changed()
        logger.debug(f"registered function '{name}'")
        return self

    def register_constant(self, name, value):
        self._validate_name(name, "constant")
        value = to_decimal(value)
        self._constants[name] = value
        self._names_changed()
        logger.debug(f"registered constant '{name}' with value '{value}'")
        return self

    def set_variable(self, name, value):
        """设置变量；已存在的变量直接覆盖"""
        self._validate_name(name, "variable", allow_variable=True)
        value = to_decimal(value)
        if name not in self._variables:
            self._names_changed()
        self._variables[name] = value
        logger.debug(f"registered variable '{name}' with value '{value}'")
        return self

    def remove_variable(self, name):
        if name not in self._variables:
            raise UnknownIdentifier(name)
        del self._variables[name]
        self._names_changed()
        return self

    # ================== 描述 ==================
    def _policy_type(self):
        if self._rounding == ROUND_HALF_EVEN:
            for preset, places in PRESET_CONFIG.items():
                if self._places == places:
                    return preset.upper()
        return "CUSTOM"

    def describe(self):
        props = {
            "policy": f"{self._policy_type()} places={self._places} rounding={self._rounding}",
            "constants": ",".join(self._constants),
            "variables": ",".join(f"{k}={v}" for k, v in self._variables.items()),
            "operators": ",".join(self._operators),
            "functions": ",".join(self._functions),
        }
        return "".join(f"\n  {key:<18}{value}" for key, value in props.items())

    def __repr__(self):
        return (f"CalculationContext(places={self._places}, rounding={self._rounding}, "
                f"variables={len(self._variables)})")
