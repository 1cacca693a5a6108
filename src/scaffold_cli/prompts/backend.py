"""Terminal prompt backend built on rich and readchar."""

from __future__ import annotations

from rich.console import Console

from scaffold_cli.cli.ui import (
    Choice,
    confirm_with_arrows,
    multi_select_with_arrows,
    password_input,
    select_with_arrows,
    text_input,
)
from scaffold_cli.prompts.types import CANCELLED, Cancelled
from scaffold_cli.template.schema import (
    ChoicePrompt,
    ConfirmPrompt,
    MultiSelectPrompt,
    PasswordPrompt,
    SelectPrompt,
    TextPrompt,
)


def _choices(prompt: ChoicePrompt) -> list[Choice]:
    return [Choice(option.value, option.label, option.hint) for option in prompt.normalized_options()]


def _or_cancel(value):
    return CANCELLED if value is None else value


class RichPromptBackend:
    """Asks template prompts on the terminal."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def text(self, prompt: TextPrompt) -> str | Cancelled:
        return _or_cancel(
            text_input(
                prompt.message,
                placeholder=prompt.placeholder,
                default=prompt.initial_value,
                console=self.console,
            )
        )

    def password(self, prompt: PasswordPrompt) -> str | Cancelled:
        return _or_cancel(password_input(prompt.message, mask=prompt.mask, console=self.console))

    def select(self, prompt: SelectPrompt) -> str | Cancelled:
        return _or_cancel(
            select_with_arrows(
                _choices(prompt),
                prompt.message,
                prompt.initial_value,
                max_items=prompt.max_items,
                console=self.console,
            )
        )

    def confirm(self, prompt: ConfirmPrompt) -> bool | Cancelled:
        return _or_cancel(
            confirm_with_arrows(
                prompt.message,
                active=prompt.active or "Yes",
                inactive=prompt.inactive or "No",
                default=True if prompt.initial_value is None else prompt.initial_value,
                console=self.console,
            )
        )

    def multiselect(self, prompt: MultiSelectPrompt) -> list[str] | Cancelled:
        return _or_cancel(
            multi_select_with_arrows(
                _choices(prompt),
                prompt.message,
                prompt.initial_value,
                max_items=prompt.max_items,
                required=bool(prompt.required),
                console=self.console,
            )
        )


__all__ = ["RichPromptBackend"]
