"""The ``scaffold`` command."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from scaffold_cli.cli.ui import Choice, StepTracker, select_with_arrows, text_input
from scaffold_cli.core.stacks import get_stack, list_stacks
from scaffold_cli.errors import InputError, ScaffoldError
from scaffold_cli.orchestrator import ScaffoldRequest, ScaffoldResult, Scaffolder

logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        from scaffold_cli import __version__

        typer.echo(f"scaffold {__version__}")
        raise typer.Exit()


def configure_logging(debug: bool, console: Console | None = None) -> None:
    """Send log records to stderr through rich when ``--debug`` is on."""
    if not debug:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console or Console(stderr=True), show_path=False)],
        force=True,
    )


def _stacks_table() -> Table:
    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("Stack", style="cyan")
    table.add_column("Description")
    table.add_column("Repository", style="bright_black")
    for stack in list_stacks():
        table.add_row(stack.name, stack.description, stack.repo)
    return table


def _validate_project_name(value: str) -> str | None:
    if not value.strip():
        return "Project name is required"
    if os.path.lexists(Path.cwd() / value):
        return f'Directory "{value}" already exists'
    return None


def _ask_project_name(console: Console) -> str | None:
    return text_input(
        "Project name?",
        placeholder="my-app",
        validate=_validate_project_name,
        console=console,
    )


def _ask_source(console: Console) -> str | None:
    """Let the user pick a curated stack or type a repository/path."""
    kind = select_with_arrows(
        [
            Choice("curated", "Curated stacks", "Pre-configured templates"),
            Choice("custom", "Custom", "GitHub repo or local path"),
        ],
        "Choose a source",
        console=console,
    )
    if kind is None:
        return None
    if kind == "curated":
        return select_with_arrows(
            [Choice(stack.repo, stack.name, stack.description) for stack in list_stacks()],
            "Which stack?",
            console=console,
        )
    return text_input(
        "Enter GitHub repo (user/repo) or local path",
        placeholder="username/repo or ./local/path",
        validate=lambda value: None if value.strip() else "Source is required",
        console=console,
    )


def _source_from_flags(source: str | None, stack: str | None) -> str | None:
    if source:
        return source
    if stack:
        found = get_stack(stack)
        if found is None:
            raise InputError(f'Stack "{stack}" not found. Use --list to see available stacks.')
        return found.repo
    return None


def _next_steps_panel(result: ScaffoldResult, project_name: str) -> Panel:
    lines = [
        f"1. Go to the project folder: [cyan]cd {project_name}[/cyan]",
        "2. Follow the template's README",
    ]
    if result.config.description:
        lines.insert(0, f"[bright_black]{result.config.description}[/bright_black]\n")
    return Panel("\n".join(lines), title="Next Steps", border_style="cyan", padding=(1, 2))


def _cancel(console: Console, kept: Path | None = None) -> None:
    console.print("[yellow]Cancelled[/yellow]")
    if kept is not None:
        console.print(f"[yellow]Files already copied into[/yellow] [cyan]{kept}[/cyan] [yellow]were kept.[/yellow]")
    raise typer.Exit(0)


def register_scaffold_command(
    app: typer.Typer,
    *,
    console: Console,
    show_banner: Callable[[], None],
    err_console: Console | None = None,
    scaffolder_factory: Callable[..., Scaffolder] = Scaffolder,
) -> None:
    """Attach the ``scaffold`` command to *app*.

    Collaborators are passed in so tests can capture output and replace the
    banner or the orchestrator.
    """
    err_console = err_console or Console(stderr=True)

    @app.command()
    def scaffold(
        project_name: Optional[str] = typer.Argument(None, help="Name of the new project directory"),
        source: Optional[str] = typer.Option(
            None, "--from", "-f", help="GitHub repo (user/repo), provider:owner/repo[/subdir][#ref] or local path (./my-template)"
        ),
        stack: Optional[str] = typer.Option(None, "--stack", "-s", help="Curated stack (e.g., ash-stack)"),
        list_only: bool = typer.Option(False, "--list", "-l", help="List available stacks and exit"),
        yes: bool = typer.Option(False, "--yes", "-y", help="Non-interactive: use prompt defaults and run post-install automatically"),
        github_token: Optional[str] = typer.Option(
            None, "--github-token", help="GitHub token to use for downloads (or set GH_TOKEN or GITHUB_TOKEN environment variable)"
        ),
        skip_tls: bool = typer.Option(False, "--skip-tls", help="Skip SSL/TLS verification (not recommended)"),
        debug: bool = typer.Option(False, "--debug", help="Show verbose diagnostic output"),
        version: bool = typer.Option(
            False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit"
        ),
    ):
        """
        Create a new project from a curated stack or any template repository.

        Examples:
            scaffold my-app --stack ash-stack
            scaffold my-app --from user/repo
            scaffold my-app --from gitlab:group/repo/templates/web#v2
            scaffold my-app --from ./my-template --yes
        """
        configure_logging(debug)

        if list_only:
            console.print()
            console.print("[bold]Available stacks:[/bold]\n")
            console.print(_stacks_table())
            console.print("\n[dim]Or use --from <user/repo> or --from <./local/path>[/dim]\n")
            return

        if not yes:
            show_banner()

        try:
            template_source = _source_from_flags(source, stack)

            if not project_name:
                if yes:
                    raise InputError("A project name is required with --yes")
                project_name = _ask_project_name(console)
                if project_name is None:
                    _cancel(console)

            if not template_source:
                if yes:
                    raise InputError("A template source (--from or --stack) is required with --yes")
                template_source = _ask_source(console)
                if template_source is None:
                    _cancel(console)

            request = ScaffoldRequest(
                project_name=project_name,
                source=template_source,
                non_interactive=yes,
                github_token=github_token,
                skip_tls=skip_tls,
            )
            tracker = StepTracker("Scaffold Project")
            scaffolder = scaffolder_factory(console=console, tracker=tracker)
            try:
                result = scaffolder.run(request)
            finally:
                console.print()
                console.print(tracker.render())
        except ScaffoldError as exc:
            logger.debug("Scaffold run failed", exc_info=True)
            err_console.print(Panel(str(exc), title="Scaffold Failed", border_style="red", padding=(1, 2)))
            raise typer.Exit(1)

        if result.cancelled:
            _cancel(console, kept=result.target)

        if result.post_install_error is not None:
            err_console.print(
                Panel(
                    f"{result.post_install_error}\n\n[dim]The project was created; the post-install step can be re-run by hand.[/dim]",
                    title="Post-install Warning",
                    border_style="yellow",
                    padding=(1, 2),
                )
            )

        console.print(f"\n[bold green]Scaffolded into[/bold green] [cyan]{project_name}[/cyan]")
        console.print()
        console.print(_next_steps_panel(result, project_name))


__all__ = ["configure_logging", "register_scaffold_command"]
