"""Prompt execution for template questions."""

from .runner import escape_shell_value, format_answer, run_prompts
from .types import CANCELLED, Cancelled, PromptBackend, is_cancel

__all__ = [
    "CANCELLED",
    "Cancelled",
    "PromptBackend",
    "escape_shell_value",
    "format_answer",
    "is_cancel",
    "run_prompts",
]
