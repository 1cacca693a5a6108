"""
Scaffold CLI - create projects from curated stacks or any template repository.

Usage:
    scaffold my-app --stack ash-stack
    scaffold my-app --from user/repo
    scaffold my-app --from ./my-template --yes
"""

__version__ = "0.1.0"

import typer
from rich.align import Align
from rich.console import Console
from rich.text import Text

from scaffold_cli.cli.commands import register_scaffold_command
from scaffold_cli.core.config import TAGLINE

BANNER = """
 ___  ___ __ _ / _|/ _| ___ | | __| |
/ __|/ __/ _` | |_| |_ / _ \\| |/ _` |
\\__ \\ (_| (_| |  _|  _| (_) | | (_| |
|___/\\___\\__,_|_| |_|  \\___/|_|\\__,_|
"""

console = Console()
err_console = Console(stderr=True)


def show_banner():
    """Display the ASCII art banner."""
    banner_lines = BANNER.strip("\n").split("\n")
    colors = ["bright_blue", "blue", "cyan", "bright_cyan"]

    styled_banner = Text()
    for i, line in enumerate(banner_lines):
        styled_banner.append(line + "\n", style=colors[i % len(colors)])

    console.print(Align.center(styled_banner))
    console.print(Align.center(Text(TAGLINE, style="italic bright_yellow")))
    console.print()


app = typer.Typer(
    name="scaffold",
    help="Scaffold projects from curated stacks or any template repository",
    add_completion=False,
)

register_scaffold_command(app, console=console, err_console=err_console, show_banner=show_banner)


def main():
    app()


__all__ = ["__version__", "app", "main"]
