"""Expression state controller.

``reduce(state, action, evaluator)`` is the whole state machine: a pure
function from the current ``CalculatorState`` and one action to the next
state. ``Calculator`` keeps the current state for callers that want an
object with one method per key press.

Appends never validate. Evaluate is the only place an expression can fail,
and every failure collapses to the same "Error" readout.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from loguru import logger

from scicalc.evaluator import EvaluationError, Evaluator, SympyEvaluator, format_result
from scicalc.keypad import find_key
from scicalc.models import (
    DEFAULT_PRECISION,
    ERROR_DISPLAY,
    PLACEHOLDER,
    Action,
    AngleUnit,
    AppendConstant,
    AppendDigit,
    AppendFunction,
    AppendOperator,
    Backspace,
    CalculatorState,
    Clear,
    Evaluate,
    ToggleAngleMode,
    ToggleHelp,
)
from scicalc.settings import Settings


class UnknownKeyError(ValueError):
    """No keypad key has the given label or alias."""


def _evaluate(state: CalculatorState, evaluator: Evaluator, precision: int) -> CalculatorState:
    try:
        value = evaluator.evaluate(state.expression, state.angle_unit)
    except EvaluationError as e:
        logger.debug(f"Evaluation failed: {e}")
        return replace(state, expression="", display=ERROR_DISPLAY)

    result = format_result(value, precision)
    return replace(state, expression=result, display=result)


def _backspace(state: CalculatorState) -> CalculatorState:
    # Positional: one character off each buffer, even when the last key
    # appended a multi-character token such as "sin(" or "pi".
    if not state.expression:
        return state
    if state.display == PLACEHOLDER:
        display = PLACEHOLDER
    else:
        display = state.display[:-1] or PLACEHOLDER
    return replace(state, expression=state.expression[:-1], display=display)


def reduce(
    state: CalculatorState,
    action: Action,
    evaluator: Evaluator,
    precision: int = DEFAULT_PRECISION,
) -> CalculatorState:
    """Apply one action and return the next state.

    Args:
        state: Current state; left untouched.
        action: One of the action variants from ``scicalc.models``.
        evaluator: Used by ``Evaluate`` only.
        precision: Significant digits kept in evaluation results.

    Raises:
        TypeError: ``action`` is not an action variant.
    """
    if isinstance(action, AppendDigit):
        # A fresh literal replaces the placeholder (or a previous "Error").
        if state.display in (PLACEHOLDER, ERROR_DISPLAY):
            display = action.token
        else:
            display = state.display + action.token
        return replace(state, expression=state.expression + action.token, display=display)

    if isinstance(action, AppendOperator):
        return replace(state, expression=state.expression + action.op, display=PLACEHOLDER)

    if isinstance(action, AppendFunction):
        # Angle unit is not resolved here; the evaluator applies it.
        return replace(state, expression=f"{state.expression}{action.name}(", display=PLACEHOLDER)

    if isinstance(action, AppendConstant):
        return replace(state, expression=state.expression + action.name, display=action.name)

    if isinstance(action, Evaluate):
        return _evaluate(state, evaluator, precision)

    if isinstance(action, Clear):
        return replace(state, expression="", display=PLACEHOLDER)

    if isinstance(action, Backspace):
        return _backspace(state)

    if isinstance(action, ToggleAngleMode):
        return replace(state, angle_unit=state.angle_unit.toggled())

    if isinstance(action, ToggleHelp):
        return replace(state, show_help=not state.show_help)

    raise TypeError(f"Not a calculator action: {action!r}")


class Calculator:
    """Stateful front for ``reduce``: holds the current state between presses."""

    def __init__(
        self,
        evaluator: Optional[Evaluator] = None,
        state: Optional[CalculatorState] = None,
        precision: int = DEFAULT_PRECISION,
    ) -> None:
        self.evaluator = evaluator or SympyEvaluator()
        self.state = state or CalculatorState()
        self.precision = precision

    @classmethod
    def from_settings(cls, settings: Settings, evaluator: Optional[Evaluator] = None) -> Calculator:
        """Fresh calculator starting in the configured angle unit."""
        return cls(
            evaluator=evaluator,
            state=CalculatorState(angle_unit=settings.angle_unit),
            precision=settings.precision,
        )

    @property
    def expression(self) -> str:
        return self.state.expression

    @property
    def display(self) -> str:
        return self.state.display

    @property
    def angle_unit(self) -> AngleUnit:
        return self.state.angle_unit

    @property
    def show_help(self) -> bool:
        return self.state.show_help

    def dispatch(self, action: Action) -> CalculatorState:
        self.state = reduce(self.state, action, self.evaluator, self.precision)
        return self.state

    def press(self, label: str) -> CalculatorState:
        """Apply the keypad key with this label or alias.

        Raises:
            UnknownKeyError: No key matches ``label``.
        """
        key = find_key(label)
        if key is None:
            raise UnknownKeyError(f"Unknown key: {label!r}")
        return self.dispatch(key.action)

    def append_digit(self, token: str) -> CalculatorState:
        return self.dispatch(AppendDigit(token))

    def append_operator(self, op: str) -> CalculatorState:
        return self.dispatch(AppendOperator(op))

    def append_function(self, name: str) -> CalculatorState:
        return self.dispatch(AppendFunction(name))

    def append_constant(self, name: str) -> CalculatorState:
        return self.dispatch(AppendConstant(name))

    def evaluate(self) -> CalculatorState:
        return self.dispatch(Evaluate())

    def clear(self) -> CalculatorState:
        return self.dispatch(Clear())

    def backspace(self) -> CalculatorState:
        return self.dispatch(Backspace())

    def toggle_angle_mode(self) -> CalculatorState:
        return self.dispatch(ToggleAngleMode())

    def toggle_help(self) -> CalculatorState:
        return self.dispatch(ToggleHelp())
