"""Run a template's prompts and turn the answers into hook environment variables."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from scaffold_cli.errors import PromptError
from scaffold_cli.prompts.types import CANCELLED, Cancelled, PromptBackend, is_cancel
from scaffold_cli.template.schema import (
    BasePrompt,
    ConfirmPrompt,
    MultiSelectPrompt,
    PasswordPrompt,
    SelectPrompt,
    TextPrompt,
)

logger = logging.getLogger(__name__)


def escape_shell_value(value: str) -> str:
    """Escape *value* for use inside a POSIX single-quoted literal."""
    return value.replace("'", "'\\''")


def format_answer(value: Any) -> str:
    """Render an answer as the string a hook will see."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)


def _default_answer(prompt: BasePrompt) -> Any:
    if isinstance(prompt, PasswordPrompt):
        raise PromptError(
            f'Password prompt "{prompt.name}" cannot run in non-interactive mode (--yes)'
        )
    initial_value = getattr(prompt, "initial_value", None)
    if initial_value is None:
        raise PromptError(
            f'Prompt "{prompt.name}" needs an initialValue for non-interactive mode (--yes)'
        )
    return initial_value


def _ask(prompt: BasePrompt, backend: PromptBackend) -> Any:
    if isinstance(prompt, TextPrompt):
        return backend.text(prompt)
    if isinstance(prompt, PasswordPrompt):
        return backend.password(prompt)
    if isinstance(prompt, SelectPrompt):
        return backend.select(prompt)
    if isinstance(prompt, ConfirmPrompt):
        return backend.confirm(prompt)
    if isinstance(prompt, MultiSelectPrompt):
        return backend.multiselect(prompt)
    raise PromptError(f"Unhandled prompt type: {getattr(prompt, 'type', type(prompt).__name__)}")


def run_prompts(
    prompts: Sequence[BasePrompt],
    non_interactive: bool,
    backend: PromptBackend | None = None,
) -> dict[str, str] | Cancelled:
    """Ask every prompt in order and return ``{SCAFFOLD_<NAME>: value}``.

    In non-interactive mode each prompt's ``initialValue`` is the answer;
    password prompts and prompts without a default are errors. Interactively
    the questions go to *backend* (a rich terminal UI by default).

    Returns:
        The answer map with shell-escaped values, or ``CANCELLED`` as soon as
        the user aborts a question. No partial map is returned.

    Raises:
        PromptError: On a duplicate name or an unanswerable prompt.
    """
    answers: dict[str, str] = {}
    seen: set[str] = set()

    for prompt in prompts:
        key = prompt.env_key
        if key in seen:
            raise PromptError(f'Duplicate prompt name "{prompt.name}"; prompt names must be unique')
        seen.add(key)

        if non_interactive:
            value = _default_answer(prompt)
        else:
            if backend is None:
                from scaffold_cli.prompts.backend import RichPromptBackend

                backend = RichPromptBackend()
            value = _ask(prompt, backend)
            if is_cancel(value):
                logger.debug("Prompt %s cancelled", prompt.name)
                return CANCELLED

        answers[key] = escape_shell_value(format_answer(value))

    return answers


__all__ = ["escape_shell_value", "format_answer", "run_prompts"]
