"""Shared types for prompt execution."""

from __future__ import annotations

from typing import Any, Protocol

from scaffold_cli.template.schema import (
    ConfirmPrompt,
    MultiSelectPrompt,
    PasswordPrompt,
    SelectPrompt,
    TextPrompt,
)


class Cancelled:
    """Result of an interactive prompt the user aborted."""

    _instance: "Cancelled | None" = None

    def __new__(cls) -> "Cancelled":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CANCELLED"

    def __bool__(self) -> bool:
        return False


CANCELLED = Cancelled()


def is_cancel(value: Any) -> bool:
    return value is CANCELLED


class PromptBackend(Protocol):
    """Interactive capability that asks one question at a time.

    Each method returns the answer, or ``CANCELLED`` if the user aborted.
    """

    def text(self, prompt: TextPrompt) -> "str | Cancelled": ...

    def password(self, prompt: PasswordPrompt) -> "str | Cancelled": ...

    def select(self, prompt: SelectPrompt) -> "str | Cancelled": ...

    def confirm(self, prompt: ConfirmPrompt) -> "bool | Cancelled": ...

    def multiselect(self, prompt: MultiSelectPrompt) -> "list[str] | Cancelled": ...


__all__ = ["CANCELLED", "Cancelled", "PromptBackend", "is_cancel"]
