"""Exception hierarchy for scaffold runs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class ScaffoldError(Exception):
    """Base exception for every failure that aborts a scaffold run."""
    pass


class InputError(ScaffoldError):
    """Missing or invalid command-line input."""


class TargetExistsError(InputError):
    """The target project directory already exists."""

    def __init__(self, target: Path):
        self.target = target
        super().__init__(f'Directory "{target.name}" already exists')


class SourceError(ScaffoldError):
    """The template source reference cannot be used."""


class SourceNotFoundError(SourceError):
    """A local template path does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Local path not found: {path}")


class DownloadError(ScaffoldError):
    """Fetching a remote template failed."""


class ConfigError(ScaffoldError):
    """The template's .scaffold/config.json cannot be loaded."""


class InvalidConfigJSONError(ConfigError):
    """The config file is not valid JSON."""

    def __init__(self, path: Path, detail: str):
        self.path = path
        super().__init__(f"Invalid JSON in {path}: {detail}")


@dataclass(frozen=True)
class ConfigIssue:
    """One schema violation: a dotted field path plus a message."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class ConfigValidationError(ConfigError):
    """The config file parsed as JSON but violates the schema.

    All issues found are reported together, in the order they were found.
    """

    def __init__(self, issues: list[ConfigIssue], source: Path | None = None):
        self.issues = list(issues)
        self.source = source
        joined = ", ".join(str(issue) for issue in self.issues)
        where = f" in {source}" if source else ""
        super().__init__(f"Invalid scaffold config{where}: {joined}")


class CopyError(ScaffoldError):
    """Copying template files into the target failed."""


class HookError(ScaffoldError):
    """A pre-install or post-install script failed."""

    def __init__(self, hook_name: str, returncode: int | None, detail: str | None = None):
        self.hook_name = hook_name
        self.returncode = returncode
        if detail:
            message = f"{hook_name} hook failed: {detail}"
        else:
            message = f"{hook_name} hook exited with status {returncode}"
        super().__init__(message)


class PromptError(ScaffoldError):
    """Prompts cannot be answered (duplicates, or no default when unattended)."""


__all__ = [
    "ConfigError",
    "ConfigIssue",
    "ConfigValidationError",
    "CopyError",
    "DownloadError",
    "HookError",
    "InputError",
    "InvalidConfigJSONError",
    "PromptError",
    "ScaffoldError",
    "SourceError",
    "SourceNotFoundError",
    "TargetExistsError",
]
