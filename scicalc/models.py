"""Data models for the scicalc expression state machine.

AngleUnit enum, CalculatorState, and the action variants: all the typed
structures that flow through keypad → controller → renderer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

# Display shown before any numeric literal has been started.
PLACEHOLDER = "0"
# Display after a failed evaluation.
ERROR_DISPLAY = "Error"
# Significant digits kept in formatted results.
DEFAULT_PRECISION = 10

OPERATORS = ("+", "-", "*", "/", "^", "!", "%", "(", ")")
TRIG_FUNCTIONS = ("sin", "cos", "tan", "asin", "acos", "atan")
PLAIN_FUNCTIONS = ("log", "log10", "sqrt", "abs", "exp")
CONSTANTS = ("pi", "e")


class AngleUnit(str, Enum):
    """How trig arguments (and inverse trig results) are interpreted."""

    RADIANS = "rad"
    DEGREES = "deg"

    @property
    def label(self) -> str:
        return self.value.upper()

    def toggled(self) -> AngleUnit:
        if self is AngleUnit.RADIANS:
            return AngleUnit.DEGREES
        return AngleUnit.RADIANS


@dataclass(frozen=True)
class CalculatorState:
    """Everything the calculator knows. Replaced, never mutated."""

    expression: str = ""
    display: str = PLACEHOLDER
    angle_unit: AngleUnit = AngleUnit.RADIANS
    show_help: bool = False

    @property
    def readout(self) -> str:
        """Secondary line above the display: the raw expression or '0'."""
        return self.expression or PLACEHOLDER

    @property
    def failed(self) -> bool:
        return self.display == ERROR_DISPLAY

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "expression": self.expression,
            "display": self.display,
            "angle_unit": self.angle_unit.value,
            "show_help": self.show_help,
        }


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AppendDigit:
    """A digit 0-9 or the decimal point."""

    token: str


@dataclass(frozen=True)
class AppendOperator:
    """Binary/unary operator or parenthesis."""

    op: str


@dataclass(frozen=True)
class AppendFunction:
    """Opens a function call: appends ``name(``."""

    name: str


@dataclass(frozen=True)
class AppendConstant:
    name: str


@dataclass(frozen=True)
class Evaluate:
    pass


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class Backspace:
    pass


@dataclass(frozen=True)
class ToggleAngleMode:
    pass


@dataclass(frozen=True)
class ToggleHelp:
    pass


Action = Union[
    AppendDigit,
    AppendOperator,
    AppendFunction,
    AppendConstant,
    Evaluate,
    Clear,
    Backspace,
    ToggleAngleMode,
    ToggleHelp,
]
