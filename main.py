"""主程序入口 - 中缀/后缀表达式计算演示"""
import argparse
import logging
import sys

from config.config import *
from calculator import Calculator
from rpn import CalculationContext, CalculatorError

logger = logging.getLogger(__name__)


def _parse_variable(text):
    """name=value 形式的变量定义"""
    name, sep, value = text.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"variable must look like name=value, got '{text}'")
    return name.strip(), value.strip()


def build_context(args):
    if args.preset:
        context = getattr(CalculationContext, args.preset)()
    else:
        context = CalculationContext.new_instance()
    if args.places is not None:
        context.places = args.places
    if args.rounding:
        context.rounding = args.rounding

    variables = dict(DEMO_CONFIG["variables"]) if args.expression is None and args.postfix is None else {}
    variables.update(dict(args.var or []))
    for name, value in variables.items():
        context.set_variable(name, value)
    return context


def main(args):
    validate_config()
    context = build_context(args)
    calculator = Calculator.with_context(context)

    if args.postfix is not None:
        configurer = calculator.accept(args.postfix)
    else:
        configurer = calculator.convert(args.expression or DEMO_CONFIG["expression"])
        logger.info(f"Postfix: {configurer.postfix}")

    if args.verbose:
        configurer.do_print()
    result = configurer.then_calculate()
    print(f"result: {result}")
    return result


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Infix to RPN calculator")

    parser.add_argument(
        "expression",
        nargs="?",
        default=None,
        help="Infix expression to convert and evaluate (default: area of a circle with r=12)"
    )
    parser.add_argument(
        "--postfix",
        type=str,
        default=None,
        help="Evaluate a space separated postfix expression instead of an infix one"
    )
    parser.add_argument(
        "--var",
        type=_parse_variable,
        action="append",
        help="Variable definition name=value, may be repeated"
    )
    parser.add_argument(
        "--preset",
        choices=["decimal32", "decimal64", "decimal128"],
        default=None,
        help="Use an IEEE 754R decimal precision preset"
    )
    parser.add_argument(
        "--places",
        type=int,
        default=None,
        help="Decimal places of every result"
    )
    parser.add_argument(
        "--rounding",
        type=str,
        default=None,
        help="Rounding mode, e.g. HALF_UP or ROUND_HALF_EVEN"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log the calculation parameters and result"
    )
    args = parser.parse_args()

    # 设置日志
    logging.basicConfig(
        level=LOGGING_CONFIG["level"],
        format=LOGGING_CONFIG["format"]
    )
    try:
        main(args)
    except (CalculatorError, ValueError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(1)
