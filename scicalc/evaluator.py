"""Expression evaluation backed by SymPy, plus result formatting.

The controller only talks to the narrow ``Evaluator`` protocol: text and an
angle unit go in, a Python number comes out, or ``EvaluationError`` is
raised. Grammar (precedence, ``^`` as power, postfix ``!``, juxtaposition as
multiplication) is SymPy's.

Text is parsed with evaluation switched off and the tree is then rebuilt
bottom-up. Integer powers and factorials whose exact value would be enormous
are computed in floating point during the rebuild, so ``10^10^10`` fails as
an overflow instead of running for hours.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Callable, Protocol, Union

import sympy as sp
from loguru import logger
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication,
    parse_expr,
    standard_transformations,
)

from scicalc.models import DEFAULT_PRECISION, AngleUnit

Number = Union[float, complex]


class EvaluationError(Exception):
    """The expression could not be reduced to a finite number."""


class Evaluator(Protocol):
    """Anything that turns expression text into a number."""

    def evaluate(self, text: str, angle_unit: AngleUnit) -> Number:
        ...


# standard_transformations already covers factorial_notation (postfix "!").
# implicit_multiplication keeps names whole: "2pi" is 2*pi, "pipi" is unknown.
_TRANSFORMATIONS = standard_transformations + (convert_xor, implicit_multiplication)

# Exact powers past this many bits, and factorials past this argument, are
# evaluated numerically.
_EXACT_BITS_LIMIT = 1 << 16
_EXACT_FACTORIAL_LIMIT = 5000

# The only globals the rewritten token stream needs. Anything else the user
# types becomes a Symbol/Function and is rejected as non-numeric.
_PARSER_GLOBALS: dict[str, object] = {
    "Integer": sp.Integer,
    "Float": sp.Float,
    "Rational": sp.Rational,
    "Symbol": sp.Symbol,
    "Function": sp.Function,
    "factorial": sp.factorial,
}


def _log10(x):
    return sp.log(x, 10)


def _sin_deg(x):
    return sp.sin(x * sp.pi / 180)


def _cos_deg(x):
    return sp.cos(x * sp.pi / 180)


def _tan_deg(x):
    return sp.tan(x * sp.pi / 180)


def _asin_deg(x):
    return sp.asin(x) * 180 / sp.pi


def _acos_deg(x):
    return sp.acos(x) * 180 / sp.pi


def _atan_deg(x):
    return sp.atan(x) * 180 / sp.pi


_COMMON_NAMES: dict[str, object] = {
    "pi": sp.pi,
    "e": sp.E,
    "i": sp.I,
    "log": sp.log,
    "log10": _log10,
    "sqrt": sp.sqrt,
    "abs": sp.Abs,
    "exp": sp.exp,
}

_TRIG_NAMES: dict[AngleUnit, dict[str, Callable]] = {
    AngleUnit.RADIANS: {
        "sin": sp.sin,
        "cos": sp.cos,
        "tan": sp.tan,
        "asin": sp.asin,
        "acos": sp.acos,
        "atan": sp.atan,
    },
    AngleUnit.DEGREES: {
        "sin": _sin_deg,
        "cos": _cos_deg,
        "tan": _tan_deg,
        "asin": _asin_deg,
        "acos": _acos_deg,
        "atan": _atan_deg,
    },
}


def namespace(angle_unit: AngleUnit) -> dict[str, object]:
    """Names visible to an expression evaluated in the given angle unit."""
    return {**_COMMON_NAMES, **_TRIG_NAMES[AngleUnit(angle_unit)]}


def _rational_bits(expr: sp.Basic) -> int:
    return max(
        (max(abs(r.p).bit_length(), r.q.bit_length()) for r in expr.atoms(sp.Rational)),
        default=1,
    )


def _too_large_for_exact(node: sp.Basic, args: list[sp.Basic]) -> bool:
    if node.func is sp.Pow:
        base, exponent = args
        return bool(exponent.is_Rational and abs(exponent) * _rational_bits(base) > _EXACT_BITS_LIMIT)
    if node.func is sp.factorial:
        (n,) = args
        return bool(n.is_Integer and n > _EXACT_FACTORIAL_LIMIT)
    return False


def _approximate(node: sp.Basic, digits: int) -> sp.Basic:
    """Numeric value of an unevaluated node; overflow is an error."""
    if not node.is_number:
        raise EvaluationError(f"{node} does not reduce to a number")
    try:
        value = sp.N(node, digits)
        parts = [float(part) for part in value.as_real_imag()]
    except Exception as e:
        raise EvaluationError(f"cannot evaluate {node}: {e}") from e
    if not all(math.isfinite(part) for part in parts):
        raise EvaluationError(f"{node.func.__name__} overflows")
    return value


def _rebuild(expr: sp.Basic, digits: int) -> sp.Basic:
    """Evaluate an unevaluated parse tree from the leaves up."""
    if not expr.args:
        return expr
    args = [_rebuild(arg, digits) for arg in expr.args]
    if _too_large_for_exact(expr, args):
        return _approximate(expr.func(*args, evaluate=False), digits)
    return expr.func(*args)


class SympyEvaluator:
    """Evaluator backed by ``sympy.parsing.sympy_parser.parse_expr``.

    Args:
        working_digits: Decimal digits used for the numeric evaluation.
            Must exceed the display precision so rounding happens once.
    """

    def __init__(self, working_digits: int = 15) -> None:
        self.working_digits = working_digits

    def parse(self, text: str, angle_unit: AngleUnit = AngleUnit.RADIANS) -> sp.Basic:
        """Parse text into a SymPy expression that is known to be numeric.

        Raises:
            EvaluationError: Empty or malformed text, unknown names.
        """
        if not text.strip():
            raise EvaluationError("empty expression")
        try:
            with sp.evaluate(False):
                tree = parse_expr(
                    text,
                    local_dict=namespace(angle_unit),
                    # parse_expr's eval() writes __builtins__ into the dict it gets
                    global_dict=dict(_PARSER_GLOBALS),
                    transformations=_TRANSFORMATIONS,
                )
        except Exception as e:
            raise EvaluationError(f"cannot parse {text!r}: {e}") from e

        if not isinstance(tree, sp.Basic):
            raise EvaluationError(f"{text!r} does not reduce to a number")
        try:
            expr = _rebuild(tree, self.working_digits)
        except EvaluationError:
            raise
        except Exception as e:
            raise EvaluationError(f"cannot evaluate {text!r}: {e}") from e

        if not expr.is_number:
            raise EvaluationError(f"{text!r} does not reduce to a number")
        return expr

    def evaluate(self, text: str, angle_unit: AngleUnit = AngleUnit.RADIANS) -> Number:
        """Evaluate text numerically.

        Returns a float, or a complex when the imaginary part is non-zero.

        Raises:
            EvaluationError: Anything that does not yield a finite number.
        """
        expr = self.parse(text, angle_unit)
        try:
            value = sp.N(expr, self.working_digits)
            real, imag = (float(part) for part in value.as_real_imag())
        except Exception as e:
            raise EvaluationError(f"cannot evaluate {text!r}: {e}") from e

        if not (math.isfinite(real) and math.isfinite(imag)):
            raise EvaluationError(f"{text!r} is not finite")

        logger.debug(f"Evaluated {text!r} ({AngleUnit(angle_unit).label}) -> {value}")
        if imag:
            return complex(real, imag)
        return real


# ---------------------------------------------------------------------------
# Result formatting
# ---------------------------------------------------------------------------

# repr() pads exponents to two digits ("1e-07"); results print as "1e-7".
_EXPONENT_RE = re.compile(r"e([+-])0*(\d)")

# Integral values below this print in full, larger ones in exponent form.
_INTEGER_DISPLAY_LIMIT = 1e21
# Fractions down to this magnitude print positionally ("0.0000125").
_DECIMAL_DISPLAY_FLOOR = 1e-6


def _round_significant(value: float, precision: int) -> float:
    return float(f"{value:.{precision}g}")


def format_number(value: float, precision: int = DEFAULT_PRECISION) -> str:
    """Format a real number to at most ``precision`` significant digits.

    Trailing zeros are dropped by round-tripping through float:
    ``1/3 -> '0.3333333333'``, ``8.0 -> '8'``, ``1/80000 -> '0.0000125'``,
    ``1e-7 -> '1e-7'``.
    """
    rounded = _round_significant(value, precision)
    if rounded == 0:
        return "0"
    if rounded.is_integer() and abs(rounded) < _INTEGER_DISPLAY_LIMIT:
        return str(int(rounded))
    text = repr(rounded)
    if "e" in text and _DECIMAL_DISPLAY_FLOOR <= abs(rounded) < 1:
        return format(Decimal(text), "f")
    return _EXPONENT_RE.sub(r"e\1\2", text)


def format_result(value: Number, precision: int = DEFAULT_PRECISION) -> str:
    """Format an evaluator result; complex values print as ``a + b*i``.

    The complex form uses the evaluator's ``i`` constant so a formatted
    result can be evaluated again.
    """
    if not isinstance(value, complex):
        return format_number(value, precision)

    real = _round_significant(value.real, precision)
    imag = _round_significant(value.imag, precision)
    if imag == 0:
        return format_number(real, precision)

    magnitude = format_number(abs(imag), precision)
    term = "i" if magnitude == "1" else f"{magnitude}*i"
    if real == 0:
        return f"-{term}" if imag < 0 else term
    sign = "-" if imag < 0 else "+"
    return f"{format_number(real, precision)} {sign} {term}"
