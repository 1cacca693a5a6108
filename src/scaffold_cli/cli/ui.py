"""Reusable UI helpers for scaffold CLI interactions.

Every interactive helper returns ``None`` when the user cancels (Esc,
Ctrl+C or closed input) so callers can tell a cancellation apart from an
answer without catching exceptions.
"""

from __future__ import annotations

from typing import Callable, List, NamedTuple, Optional, Sequence

import readchar
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.tree import Tree


class Choice(NamedTuple):
    """One entry of a selection list."""

    value: str
    label: str
    hint: str | None = None


class StepTracker:
    """Track and render hierarchical steps with Rich trees."""

    def __init__(self, title: str):
        self.title = title
        self.steps = []  # list of dicts: {key, label, status, detail}

    def add(self, key: str, label: str):
        if key not in [s["key"] for s in self.steps]:
            self.steps.append({"key": key, "label": label, "status": "pending", "detail": ""})

    def start(self, key: str, detail: str = ""):
        self._update(key, status="running", detail=detail)

    def complete(self, key: str, detail: str = ""):
        self._update(key, status="done", detail=detail)

    def error(self, key: str, detail: str = ""):
        self._update(key, status="error", detail=detail)

    def skip(self, key: str, detail: str = ""):
        self._update(key, status="skipped", detail=detail)

    def status(self, key: str) -> str | None:
        for s in self.steps:
            if s["key"] == key:
                return s["status"]
        return None

    def fail_running(self, detail: str = ""):
        """Mark whichever step is still running as failed."""
        for s in self.steps:
            if s["status"] == "running":
                self.error(s["key"], detail)

    def _update(self, key: str, status: str, detail: str):
        for s in self.steps:
            if s["key"] == key:
                s["status"] = status
                if detail:
                    s["detail"] = detail
                return
        # If not present, add it
        self.steps.append({"key": key, "label": key, "status": status, "detail": detail})

    def render(self) -> Tree:
        tree = Tree(f"[cyan]{self.title}[/cyan]", guide_style="grey50")
        for step in self.steps:
            label = step["label"]
            detail_text = step["detail"].strip() if step["detail"] else ""

            status = step["status"]
            if status == "done":
                symbol = "[green]●[/green]"
            elif status == "pending":
                symbol = "[green dim]○[/green dim]"
            elif status == "running":
                symbol = "[cyan]○[/cyan]"
            elif status == "error":
                symbol = "[red]●[/red]"
            elif status == "skipped":
                symbol = "[yellow]○[/yellow]"
            else:
                symbol = " "

            if status == "pending":
                if detail_text:
                    line = f"{symbol} [bright_black]{label} ({detail_text})[/bright_black]"
                else:
                    line = f"{symbol} [bright_black]{label}[/bright_black]"
            else:
                if detail_text:
                    line = f"{symbol} [white]{label}[/white] [bright_black]({detail_text})[/bright_black]"
                else:
                    line = f"{symbol} [white]{label}[/white]"

            tree.add(line)
        return tree


def get_key() -> str:
    """Get a single keypress in a cross-platform way using readchar."""
    key = readchar.readkey()

    if key == readchar.key.UP or key == readchar.key.CTRL_P:
        return "up"
    if key == readchar.key.DOWN or key == readchar.key.CTRL_N:
        return "down"

    if key in (readchar.key.ENTER, "\r", "\n"):
        return "enter"

    if key in (readchar.key.BACKSPACE, "\x08"):
        return "backspace"

    if key == readchar.key.ESC or key == "\x1b":
        return "escape"

    if key == readchar.key.CTRL_C:
        raise KeyboardInterrupt

    return key


def _resolve_console(console: Optional[Console]) -> Console:
    return console or Console()


def _visible_range(count: int, cursor: int, max_items: int | None) -> range:
    if not max_items or count <= max_items:
        return range(count)
    start = min(max(cursor - max_items // 2, 0), count - max_items)
    return range(start, start + max_items)


def _choice_text(choice: Choice, highlighted: bool) -> str:
    text = f"[cyan]{choice.label}[/cyan]" if highlighted else choice.label
    if choice.hint:
        text += f" [dim]({choice.hint})[/dim]"
    return text


def select_with_arrows(
    options: Sequence[Choice],
    prompt_text: str = "Select an option",
    default_value: str | None = None,
    *,
    max_items: int | None = None,
    console: Console | None = None,
) -> str | None:
    """
    Interactive selection using arrow keys with Rich Live display.

    Returns the chosen value, or None when the user cancels.
    """
    console = _resolve_console(console)
    values = [choice.value for choice in options]
    if default_value is not None and default_value in values:
        selected_index = values.index(default_value)
    else:
        selected_index = 0

    def create_selection_panel():
        """Create the selection panel with current selection highlighted."""
        table = Table.grid(padding=(0, 2))
        table.add_column(style="cyan", justify="left", width=3)
        table.add_column(style="white", justify="left")

        visible = _visible_range(len(options), selected_index, max_items)
        if visible.start > 0:
            table.add_row("", "[dim]↑ more[/dim]")
        for i in visible:
            pointer = "▶" if i == selected_index else " "
            table.add_row(pointer, _choice_text(options[i], i == selected_index))
        if visible.stop < len(options):
            table.add_row("", "[dim]↓ more[/dim]")

        table.add_row("", "")
        table.add_row("", "[dim]Use ↑/↓ to navigate, Enter to select, Esc to cancel[/dim]")

        return Panel(
            table,
            title=f"[bold]{prompt_text}[/bold]",
            border_style="cyan",
            padding=(1, 2),
        )

    console.print()

    with Live(create_selection_panel(), console=console, transient=True, auto_refresh=False) as live:
        while True:
            try:
                key = get_key()
            except KeyboardInterrupt:
                key = "escape"
            if key == "up":
                selected_index = (selected_index - 1) % len(options)
            elif key == "down":
                selected_index = (selected_index + 1) % len(options)
            elif key == "enter":
                break
            elif key == "escape":
                console.print("\n[yellow]Selection cancelled[/yellow]")
                return None

            live.update(create_selection_panel(), refresh=True)

    choice = options[selected_index]
    console.print(f"[bold]{prompt_text}[/bold] [cyan]{choice.label}[/cyan]")
    return choice.value


def multi_select_with_arrows(
    options: Sequence[Choice],
    prompt_text: str = "Select options",
    default_values: Optional[Sequence[str]] = None,
    *,
    max_items: int | None = None,
    required: bool = False,
    console: Console | None = None,
) -> List[str] | None:
    """Allow selecting zero or more options using arrow keys + space to toggle.

    With ``required`` Enter is refused until at least one option is ticked.
    Returns the chosen values in option order, or None when cancelled.
    """

    console = _resolve_console(console)
    values = [choice.value for choice in options]
    selected_indices: set[int] = {values.index(v) for v in (default_values or []) if v in values}
    cursor_index = min(selected_indices) if selected_indices else 0
    warning = ""

    def build_panel():
        table = Table.grid(padding=(0, 2))
        table.add_column(style="cyan", justify="left", width=3)
        table.add_column(style="white", justify="left")

        visible = _visible_range(len(options), cursor_index, max_items)
        if visible.start > 0:
            table.add_row("", "[dim]↑ more[/dim]")
        for i in visible:
            indicator = "[cyan]☑" if i in selected_indices else "[bright_black]☐"
            pointer = "▶" if i == cursor_index else " "
            table.add_row(pointer, f"{indicator} {_choice_text(options[i], i == cursor_index)}")
        if visible.stop < len(options):
            table.add_row("", "[dim]↓ more[/dim]")

        table.add_row("", "")
        if warning:
            table.add_row("", f"[yellow]{warning}[/yellow]")
        table.add_row(
            "",
            "[dim]Use ↑/↓ to move, Space to toggle, Enter to confirm, Esc to cancel[/dim]",
        )

        return Panel(table, title=f"[bold]{prompt_text}[/bold]", border_style="cyan", padding=(1, 2))

    def normalize_selection() -> List[str]:
        return [values[i] for i in range(len(values)) if i in selected_indices]

    console.print()

    with Live(build_panel(), console=console, transient=True, auto_refresh=False) as live:
        while True:
            try:
                key = get_key()
            except KeyboardInterrupt:
                key = "escape"
            warning = ""
            if key == "up":
                cursor_index = (cursor_index - 1) % len(options)
            elif key == "down":
                cursor_index = (cursor_index + 1) % len(options)
            elif key in (" ", readchar.key.SPACE):
                if cursor_index in selected_indices:
                    selected_indices.remove(cursor_index)
                else:
                    selected_indices.add(cursor_index)
            elif key == "enter":
                current = normalize_selection()
                if current or not required:
                    break
                warning = "Select at least one option"
            elif key == "escape":
                console.print("\n[yellow]Selection cancelled[/yellow]")
                return None

            live.update(build_panel(), refresh=True)

    current = normalize_selection()
    labels = [options[i].label for i in sorted(selected_indices)]
    console.print(f"[bold]{prompt_text}[/bold] [cyan]{', '.join(labels) or 'none'}[/cyan]")
    return current


def confirm_with_arrows(
    prompt_text: str,
    *,
    active: str = "Yes",
    inactive: str = "No",
    default: bool = True,
    console: Console | None = None,
) -> bool | None:
    """Yes/no question rendered as a two-option selection."""
    choice = select_with_arrows(
        [Choice("yes", active), Choice("no", inactive)],
        prompt_text,
        "yes" if default else "no",
        console=console,
    )
    if choice is None:
        return None
    return choice == "yes"


def text_input(
    prompt_text: str,
    *,
    placeholder: str | None = None,
    default: str | None = None,
    validate: Callable[[str], str | None] | None = None,
    console: Console | None = None,
) -> str | None:
    """Read a line of text; an empty answer falls back to *default*.

    *validate* returns an error message to re-ask, or None to accept.
    """
    console = _resolve_console(console)
    label = f"[bold]{prompt_text}[/bold]"
    if placeholder and default is None:
        label += f" [dim]({placeholder})[/dim]"

    while True:
        try:
            answer = Prompt.ask(label, console=console, default=default, show_default=default is not None)
        except (KeyboardInterrupt, EOFError):
            console.print("\n[yellow]Input cancelled[/yellow]")
            return None
        answer = answer if answer is not None else ""
        error = validate(answer) if validate else None
        if error is None:
            return answer
        console.print(f"[red]{error}[/red]")


def password_input(
    prompt_text: str,
    *,
    mask: str | None = None,
    console: Console | None = None,
) -> str | None:
    """Read a secret, echoing *mask* for each character typed."""
    console = _resolve_console(console)
    mask = mask or "•"
    chars: list[str] = []
    console.print(f"[bold]{prompt_text}[/bold] ", end="")

    while True:
        try:
            key = get_key()
        except KeyboardInterrupt:
            key = "escape"
        if key == "enter":
            console.print()
            return "".join(chars)
        if key == "escape":
            console.print("\n[yellow]Input cancelled[/yellow]")
            return None
        if key == "backspace":
            if chars:
                chars.pop()
                console.print("\b \b", end="", markup=False, highlight=False)
            continue
        if len(key) == 1 and key.isprintable():
            chars.append(key)
            console.print(mask, end="", markup=False, highlight=False)


__all__ = [
    "Choice",
    "StepTracker",
    "confirm_with_arrows",
    "get_key",
    "multi_select_with_arrows",
    "password_input",
    "select_with_arrows",
    "text_input",
]
