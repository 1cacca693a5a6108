"""Template acquisition, validation, filtering and hooks."""

from .copier import copy_template
from .download import archive_url, download_template, make_client
from .hooks import HookScript, base_environment, extract_hooks, run_hook
from .ignore import build_ignore_patterns, should_ignore
from .schema import (
    ConfirmPrompt,
    MultiSelectPrompt,
    PasswordPrompt,
    Prompt,
    PromptOption,
    ScaffoldConfig,
    SelectPrompt,
    TextPrompt,
    load_config,
    parse_config,
    validate_config,
)
from .source import TemplateSource, resolve_source

__all__ = [
    "ConfirmPrompt",
    "HookScript",
    "MultiSelectPrompt",
    "PasswordPrompt",
    "Prompt",
    "PromptOption",
    "ScaffoldConfig",
    "SelectPrompt",
    "TemplateSource",
    "TextPrompt",
    "archive_url",
    "base_environment",
    "build_ignore_patterns",
    "copy_template",
    "download_template",
    "extract_hooks",
    "load_config",
    "make_client",
    "parse_config",
    "resolve_source",
    "run_hook",
    "should_ignore",
    "validate_config",
]
