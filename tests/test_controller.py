"""Tests for the expression state controller.

The reducer is exercised against StubEvaluator so the assertions only depend
on the controller's bookkeeping; a few end-to-end cases use SymPy.
"""

import pytest

from conftest import StubEvaluator
from scicalc.controller import Calculator, UnknownKeyError, reduce
from scicalc.models import (
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


def run(actions, evaluator=None, state=None):
    """Fold actions through the reducer from a fresh (or given) state."""
    evaluator = evaluator or StubEvaluator()
    state = state or CalculatorState()
    for action in actions:
        state = reduce(state, action, evaluator)
    return state


# --- Initial state ---

def test_fresh_state_defaults():
    state = CalculatorState()
    assert state.expression == ""
    assert state.display == "0"
    assert state.angle_unit is AngleUnit.RADIANS
    assert state.show_help is False
    assert state.readout == "0"


def test_reduce_does_not_mutate_input():
    state = CalculatorState()
    new = reduce(state, AppendDigit("7"), StubEvaluator())
    assert state == CalculatorState()
    assert new.expression == "7"


# --- Digits ---

@pytest.mark.parametrize("tokens", [
    "9",
    "12.5",
    "100",
    "707",
    ".5",
    "3.14159",
    "2024.0",
])
def test_digits_concatenate_in_both_buffers(tokens):
    state = run([AppendDigit(token) for token in tokens])
    assert state.expression == tokens
    assert state.display == tokens


@pytest.mark.parametrize("prefix, tokens", [
    ("2+", "31"),
    ("sin(", "4.5"),
    ("(", "60"),
])
def test_digits_concatenate_after_existing_expression(prefix, tokens):
    state = run([AppendDigit(token) for token in tokens], state=CalculatorState(expression=prefix))
    assert state.expression == prefix + tokens
    assert state.display == tokens


def test_leading_zero_placeholder_is_replaced():
    state = run([AppendDigit("0"), AppendDigit("7")])
    assert state.expression == "07"
    assert state.display == "7"


def test_digit_after_operator_starts_new_literal():
    state = run([AppendDigit("1"), AppendDigit("2"), AppendOperator("+"), AppendDigit("3")])
    assert state.expression == "12+3"
    assert state.display == "3"


def test_digit_after_error_replaces_error():
    state = run([AppendOperator("("), Evaluate(), AppendDigit("5")])
    assert state.expression == "5"
    assert state.display == "5"


# --- Operators, functions, constants ---

@pytest.mark.parametrize("op", ["+", "-", "*", "/", "^", "!", "%", "(", ")"])
def test_operator_appends_and_resets_display(op):
    state = run([AppendDigit("4"), AppendOperator(op)])
    assert state.expression == f"4{op}"
    assert state.display == "0"


@pytest.mark.parametrize("name", ["sin", "cos", "tan", "asin", "acos", "atan", "log", "log10", "sqrt", "abs", "exp"])
def test_function_opens_call(name):
    state = run([AppendFunction(name)])
    assert state.expression == f"{name}("
    assert state.display == "0"


def test_function_does_not_depend_on_angle_unit():
    rad = run([AppendFunction("sin")])
    deg = run([ToggleAngleMode(), AppendFunction("sin")])
    assert rad.expression == deg.expression == "sin("


def test_constant_shows_its_name():
    state = run([AppendDigit("2"), AppendOperator("*"), AppendConstant("pi")])
    assert state.expression == "2*pi"
    assert state.display == "pi"


# --- Evaluate ---

def test_evaluate_success_seeds_next_expression():
    stub = StubEvaluator({"1+2": 3.0})
    state = run([AppendDigit("1"), AppendOperator("+"), AppendDigit("2"), Evaluate()], stub)
    assert state.expression == "3"
    assert state.display == "3"


def test_evaluate_formats_to_ten_significant_digits():
    stub = StubEvaluator({"1/3": 1 / 3})
    state = run([AppendDigit("1"), AppendOperator("/"), AppendDigit("3"), Evaluate()], stub)
    assert state.display == "0.3333333333"


def test_evaluate_respects_precision_argument():
    stub = StubEvaluator({"x": 2 / 3})
    state = reduce(CalculatorState(expression="x"), Evaluate(), stub, precision=4)
    assert state.display == "0.6667"


def test_evaluate_passes_angle_unit():
    stub = StubEvaluator({"sin(90)": 1.0})
    state = run([ToggleAngleMode(), AppendFunction("sin"), AppendDigit("9"), AppendDigit("0"),
                 AppendOperator(")"), Evaluate()], stub)
    assert stub.calls == [("sin(90)", AngleUnit.DEGREES)]
    assert state.display == "1"


def test_evaluate_failure_collapses_to_error():
    state = run([AppendOperator("("), AppendDigit("2"), AppendOperator("+"), Evaluate()])
    assert state.display == "Error"
    assert state.expression == ""
    assert state.failed


def test_evaluate_keeps_angle_and_help():
    state = run([ToggleAngleMode(), ToggleHelp(), Evaluate()])
    assert state.angle_unit is AngleUnit.DEGREES
    assert state.show_help is True


# --- Clear and backspace ---

def test_clear_resets_buffers():
    state = run([AppendConstant("pi"), AppendOperator("+"), AppendDigit("3"), ToggleAngleMode(), Clear()])
    assert state.expression == ""
    assert state.display == "0"
    assert state.angle_unit is AngleUnit.DEGREES


def test_clear_after_error():
    state = run([Evaluate(), Clear()])
    assert (state.expression, state.display) == ("", "0")


def test_backspace_on_empty_is_noop():
    state = CalculatorState()
    assert run([Backspace()]) == state
    assert run([Backspace(), Backspace()]) == state


def test_backspace_removes_one_character_each():
    state = run([AppendDigit("1"), AppendDigit("2"), Backspace()])
    assert state.expression == "1"
    assert state.display == "1"


def test_backspace_falls_back_to_placeholder():
    state = run([AppendDigit("7"), Backspace()])
    assert state.expression == ""
    assert state.display == "0"


def test_backspace_keeps_placeholder_after_operator():
    state = run([AppendDigit("7"), AppendOperator("+"), Backspace()])
    assert state.expression == "7"
    assert state.display == "0"


def test_backspace_is_character_wise_after_function():
    state = run([AppendFunction("sin"), Backspace()])
    assert state.expression == "sin"
    assert state.display == "0"


def test_backspace_is_character_wise_after_constant():
    state = run([AppendConstant("pi"), Backspace()])
    assert state.expression == "p"
    assert state.display == "p"


# --- Toggles ---

def test_toggle_angle_mode_leaves_buffers():
    before = run([AppendDigit("3"), AppendOperator("*")])
    after = reduce(before, ToggleAngleMode(), StubEvaluator())
    assert after.angle_unit is AngleUnit.DEGREES
    assert (after.expression, after.display) == (before.expression, before.display)
    assert reduce(after, ToggleAngleMode(), StubEvaluator()).angle_unit is AngleUnit.RADIANS


def test_toggle_help():
    state = run([ToggleHelp()])
    assert state.show_help is True
    assert run([ToggleHelp(), ToggleHelp()]).show_help is False


def test_unknown_action_raises():
    with pytest.raises(TypeError):
        reduce(CalculatorState(), "=", StubEvaluator())


# --- End to end with SymPy ---

def test_sin_pi_over_two_in_radians(calc):
    calc.append_function("sin")
    calc.append_constant("pi")
    calc.append_operator("/")
    calc.append_digit("2")
    calc.append_operator(")")
    assert calc.evaluate().display == "1"


def test_sin_90_in_degrees(calc):
    calc.toggle_angle_mode()
    for label in ["sin", "9", "0", ")", "="]:
        calc.press(label)
    assert calc.display == "1"


def test_sin_90_in_radians(calc):
    for label in ["sin", "9", "0", ")", "="]:
        calc.press(label)
    assert calc.display == "0.8939966636"


def test_malformed_input_is_error(calc):
    for label in ["(", "2", "+", "="]:
        calc.press(label)
    assert calc.display == "Error"
    assert calc.expression == ""


def test_one_third(calc):
    for label in ["1", "÷", "3", "="]:
        calc.press(label)
    assert calc.display == "0.3333333333"


def test_evaluate_is_idempotent(calc):
    for label in ["2", "^", "0", ".", "5", "="]:
        calc.press(label)
    first = calc.display
    assert first == "1.414213562"
    calc.evaluate()
    assert calc.display == first
    assert calc.expression == first


def test_chaining(calc):
    for label in ["2", "^", "3", "="]:
        calc.press(label)
    assert calc.display == "8"
    calc.append_operator("+")
    calc.append_digit("5")
    assert calc.evaluate().display == "13"


def test_number_next_to_constant_multiplies(calc):
    for label in ["2", "π", "="]:
        calc.press(label)
    assert calc.display == "6.283185307"


def test_number_next_to_parenthesis_multiplies(calc):
    for label in ["2", "(", "3", ")", "="]:
        calc.press(label)
    assert calc.display == "6"


def test_chained_result_next_to_constant_multiplies(calc):
    for label in ["2", "×", "3", "="]:
        calc.press(label)
    calc.press("π")
    assert calc.expression == "6pi"
    assert calc.evaluate().display == "18.84955592"


@pytest.mark.timeout(10)
def test_tower_of_powers_fails_quickly(calc):
    for label in ["1", "0", "^", "1", "0", "^", "1", "0", "="]:
        calc.press(label)
    assert calc.display == "Error"
    assert calc.expression == ""


def test_small_fraction_shows_positionally(calc):
    for label in ["1", "÷", "8", "0", "0", "0", "0", "="]:
        calc.press(label)
    assert calc.display == "0.0000125"


def test_factorial_and_percent(calc):
    for label in ["5", "!", "%", "7", "="]:
        calc.press(label)
    # 120 mod 7
    assert calc.display == "1"


# --- Calculator wrapper ---

def test_calculator_properties_follow_state(stub):
    calc = Calculator(evaluator=stub)
    calc.append_digit("9")
    calc.toggle_help()
    assert calc.expression == "9"
    assert calc.display == "9"
    assert calc.show_help is True
    assert calc.angle_unit is AngleUnit.RADIANS


def test_press_unknown_key_raises(stub):
    calc = Calculator(evaluator=stub)
    with pytest.raises(UnknownKeyError):
        calc.press("nope")
    assert calc.state == CalculatorState()


def test_from_settings():
    calc = Calculator.from_settings(Settings(angle_unit=AngleUnit.DEGREES, precision=4))
    assert calc.angle_unit is AngleUnit.DEGREES
    assert calc.precision == 4
    for label in ["2", "÷", "3", "="]:
        calc.press(label)
    assert calc.display == "0.6667"
