"""The fixed keypad: labelled keys mapped 1:1 to controller actions.

Rows follow the on-screen grid, five keys wide. Keys whose label is hard to
type in a terminal ("×", "π", "sin⁻¹") carry ASCII aliases.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from scicalc.models import (
    Action,
    AppendConstant,
    AppendDigit,
    AppendFunction,
    AppendOperator,
    Backspace,
    Clear,
    Evaluate,
    ToggleAngleMode,
    ToggleHelp,
)


@dataclass(frozen=True)
class Key:
    """One keypad key."""

    label: str
    action: Action
    aliases: tuple[str, ...] = ()

    @property
    def kind(self) -> str:
        """Action name, e.g. 'AppendFunction'."""
        return type(self.action).__name__

    @property
    def token(self) -> str:
        """What the key appends to the expression, or '' for control keys."""
        action = self.action
        if isinstance(action, AppendDigit):
            return action.token
        if isinstance(action, AppendOperator):
            return action.op
        if isinstance(action, AppendFunction):
            return f"{action.name}("
        if isinstance(action, AppendConstant):
            return action.name
        return ""


def _digit(label: str) -> Key:
    return Key(label, AppendDigit(label))


def _op(label: str, op: Optional[str] = None) -> Key:
    if op is None:
        return Key(label, AppendOperator(label))
    return Key(label, AppendOperator(op), (op,))


def _fn(label: str, name: Optional[str] = None) -> Key:
    if name is None:
        return Key(label, AppendFunction(label))
    return Key(label, AppendFunction(name), (name,))


KEYPAD_ROWS: tuple[tuple[Key, ...], ...] = (
    (
        Key("π", AppendConstant("pi"), ("pi",)),
        Key("e", AppendConstant("e")),
        Key("⌫", Backspace(), ("back", "bs", "del")),
        Key("C", Clear(), ("c", "clear")),
        _op("÷", "/"),
    ),
    (
        _fn("log", "log10"),
        # "log" is taken by the base-10 key
        Key("ln", AppendFunction("log")),
        _fn("√", "sqrt"),
        _op("^"),
        _op("×", "*"),
    ),
    (_fn("sin"), _fn("cos"), _fn("tan"), _op("!"), _op("-")),
    (
        _fn("sin⁻¹", "asin"),
        _fn("cos⁻¹", "acos"),
        _fn("tan⁻¹", "atan"),
        _op(")"),
        _op("+"),
    ),
    (_digit("7"), _digit("8"), _digit("9"), _fn("|x|", "abs"), _op("%")),
    (_digit("4"), _digit("5"), _digit("6"), _fn("EXP", "exp"), _op("(")),
    (_digit("1"), _digit("2"), _digit("3"), _digit("0"), _digit(".")),
    (Key("=", Evaluate(), ("enter",)),),
)

# Shown above the grid rather than in it.
MODE_KEYS: tuple[Key, ...] = (
    Key("RAD/DEG", ToggleAngleMode(), ("mode", "drg")),
    Key("?", ToggleHelp(), ("help",)),
)

ALL_KEYS: tuple[Key, ...] = tuple(k for row in KEYPAD_ROWS for k in row) + MODE_KEYS


def find_key(text: str) -> Optional[Key]:
    """Resolve a label or alias to its key.

    Exact matches win. Multi-character words then match case-insensitively,
    so 'LOG' and 'Sin' work while 'E' does not shadow 'e'.
    """
    for key in ALL_KEYS:
        if text == key.label or text in key.aliases:
            return key

    if len(text) > 1:
        lowered = text.lower()
        for key in ALL_KEYS:
            if lowered == key.label.lower() or lowered in key.aliases:
                return key
    return None
