"""CLI for the scicalc keypad calculator.

Usage:
    python -m scicalc eval "sin(90)" --angle deg    # Evaluate one expression
    python -m scicalc press 2 ^ 1 0 =               # Replay key presses
    python -m scicalc run                           # Interactive keypad session
    python -m scicalc keys                          # List keys and aliases
"""

from __future__ import annotations

import json
from typing import Optional

import typer
from rich.console import Console

from scicalc.controller import Calculator, UnknownKeyError
from scicalc.logger import configure_console_logging
from scicalc.models import AngleUnit, CalculatorState
from scicalc.render import render_calculator, render_key_table
from scicalc.settings import MAX_PRECISION, Settings, load_settings

app = typer.Typer(
    name="scicalc",
    help="Keypad-driven scientific calculator",
    no_args_is_help=True,
)
console = Console(stderr=True)

_QUIT_WORDS = ("q", "quit", "exit")

_ANGLE_HELP = "Angle unit for trig functions (default: $SCICALC_ANGLE_UNIT or rad)"
_PRECISION_HELP = "Significant digits in results (default: $SCICALC_PRECISION or 10)"


def _settings(angle: Optional[AngleUnit], precision: Optional[int]) -> Settings:
    if precision is not None and not 1 <= precision <= MAX_PRECISION:
        console.print(f"[red]Invalid precision: {precision}[/red]. Choose 1..{MAX_PRECISION}")
        raise typer.Exit(1)
    return load_settings().override(angle_unit=angle, precision=precision)


def _press_all(calc: Calculator, keys: list[str]) -> None:
    """Press each key in order; unknown keys abort the command."""
    for label in keys:
        try:
            calc.press(label)
        except UnknownKeyError:
            console.print(f"[red]Unknown key: {label}[/red]. Run 'scicalc keys' for the list.")
            raise typer.Exit(1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Keypad-driven scientific calculator."""
    configure_console_logging(verbose=verbose)


@app.command("eval")
def cmd_eval(
    expression: str = typer.Argument(help="Expression, e.g. '2^10' or 'sin(pi/2)'"),
    angle: Optional[AngleUnit] = typer.Option(None, "--angle", "-a", case_sensitive=False, help=_ANGLE_HELP),
    precision: Optional[int] = typer.Option(None, "--precision", "-p", help=_PRECISION_HELP),
) -> None:
    """Evaluate a single expression and print the result."""
    settings = _settings(angle, precision)
    calc = Calculator(
        state=CalculatorState(expression=expression, angle_unit=settings.angle_unit),
        precision=settings.precision,
    )
    state = calc.evaluate()
    typer.echo(state.display)
    if state.failed:
        raise typer.Exit(1)


@app.command("press")
def cmd_press(
    keys: list[str] = typer.Argument(help="Key labels or aliases, e.g. 2 × 3 ="),
    angle: Optional[AngleUnit] = typer.Option(None, "--angle", "-a", case_sensitive=False, help=_ANGLE_HELP),
    precision: Optional[int] = typer.Option(None, "--precision", "-p", help=_PRECISION_HELP),
    as_json: bool = typer.Option(False, "--json", help="Print the final state as JSON"),
) -> None:
    """Press keys on a fresh calculator and show the final readout."""
    calc = Calculator.from_settings(_settings(angle, precision))
    _press_all(calc, keys)

    if as_json:
        typer.echo(json.dumps(calc.state.to_dict(), indent=2))
    else:
        render_calculator(calc.state, console)


@app.command("run")
def cmd_run(
    angle: Optional[AngleUnit] = typer.Option(None, "--angle", "-a", case_sensitive=False, help=_ANGLE_HELP),
    precision: Optional[int] = typer.Option(None, "--precision", "-p", help=_PRECISION_HELP),
) -> None:
    """Interactive session: type keys separated by spaces, 'q' to quit."""
    calc = Calculator.from_settings(_settings(angle, precision))
    render_calculator(calc.state, console, show_keypad=True)

    while True:
        try:
            line = console.input("[bold]keys>[/bold] ")
        except EOFError:
            break

        words = line.split()
        if any(w.lower() in _QUIT_WORDS for w in words):
            break
        for label in words:
            try:
                calc.press(label)
            except UnknownKeyError:
                console.print(f"[yellow]Unknown key: {label}[/yellow]")
        render_calculator(calc.state, console)


@app.command("keys")
def cmd_keys() -> None:
    """List every key, its aliases and its action."""
    console.print()
    console.print(render_key_table())
    console.print()


if __name__ == "__main__":
    app()
