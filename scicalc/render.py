"""Rich rendering of the calculator: readout, keypad and cheat sheet.

Pure presentation. Every function takes state (or nothing) and returns a
renderable; ``render_calculator`` prints them to a Console.
"""

from __future__ import annotations

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from scicalc.keypad import ALL_KEYS, KEYPAD_ROWS, MODE_KEYS
from scicalc.models import AngleUnit, CalculatorState

# Formula reference shown when help is toggled on.
CHEAT_SHEET: dict[str, tuple[str, ...]] = {
    "Trigonometry": (
        "sin²(θ) + cos²(θ) = 1",
        "tan(θ) = sin(θ)/cos(θ)",
        "sin⁻¹(sin(θ)) = θ",
    ),
    "Logarithms": (
        "log(xy) = log(x) + log(y)",
        "log(x^n) = n·log(x)",
        "e^(ln(x)) = x",
    ),
    "Constants": (
        "π ≈ 3.14159",
        "e ≈ 2.71828",
    ),
    "Algebra": (
        "(a+b)² = a² + 2ab + b²",
        "(a-b)² = a² - 2ab + b²",
        "a² - b² = (a+b)(a-b)",
    ),
}

_KIND_STYLES = {
    "AppendDigit": "white",
    "AppendOperator": "cyan",
    "AppendFunction": "magenta",
    "AppendConstant": "yellow",
    "Evaluate": "bold blue",
    "Clear": "bold red",
}


def render_readout(state: CalculatorState) -> Panel:
    """Angle badge and expression line on top, the display below."""
    badge_style = "bold white on blue" if state.angle_unit is AngleUnit.RADIANS else "bold white on grey37"
    top = Table.grid(expand=True)
    top.add_column(justify="left")
    top.add_column(justify="right", style="dim")
    top.add_row(Text(f" {state.angle_unit.label} ", style=badge_style), state.readout)

    display_style = "bold red" if state.failed else "bold"
    display = Text(state.display, style=display_style, justify="right")
    return Panel(Group(top, display), title="Scientific Calculator", border_style="grey50")


def render_keypad() -> Table:
    """The five-column key grid."""
    table = Table.grid(padding=(0, 2))
    for _ in range(5):
        table.add_column(justify="center", min_width=5)

    for row in KEYPAD_ROWS:
        cells = [Text(key.label, style=_KIND_STYLES.get(key.kind, "white")) for key in row]
        table.add_row(*cells)

    modes = "   ".join(key.label for key in MODE_KEYS)
    table.add_row(Text(modes, style="dim"))
    return table


def render_cheat_sheet() -> Table:
    """Formula cheat sheet, two sections per row."""
    table = Table(title="Formula Cheat Sheet", show_header=False, show_lines=True)
    table.add_column(min_width=28)
    table.add_column(min_width=28)

    sections = [
        Group(Text(title, style="bold"), *(Text(line) for line in lines))
        for title, lines in CHEAT_SHEET.items()
    ]
    for i in range(0, len(sections), 2):
        table.add_row(*sections[i:i + 2])
    return table


def render_key_table() -> Table:
    """Every key with its aliases and what it does."""
    table = Table(title="Keys", show_header=True, header_style="bold")
    table.add_column("Key", style="green", min_width=7)
    table.add_column("Aliases", min_width=10)
    table.add_column("Action", min_width=16)
    table.add_column("Appends", style="dim")

    for key in ALL_KEYS:
        table.add_row(key.label, ", ".join(key.aliases), key.kind, key.token)
    return table


def render_calculator(state: CalculatorState, console: Console, show_keypad: bool = False) -> None:
    """Print the readout, optionally the keypad, and the cheat sheet if enabled."""
    renderables: list[RenderableType] = [render_readout(state)]
    if show_keypad:
        renderables.append(render_keypad())
    if state.show_help:
        renderables.append(render_cheat_sheet())

    console.print()
    for renderable in renderables:
        console.print(renderable)
