"""Classification of template source references."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from scaffold_cli.core.config import DEFAULT_PROVIDER, LOCAL_PREFIXES, PROVIDERS
from scaffold_cli.errors import SourceError, SourceNotFoundError

_REMOTE_PATTERN = re.compile(
    r"^(?P<provider>[a-z]+):(?P<owner>[\w.-]+)/(?P<name>[\w.-]+)(?P<subdir>(?:/[^#]+)?)(?:#(?P<ref>.+))?$"
)


@dataclass(frozen=True)
class TemplateSource:
    """A resolved template reference.

    Local sources point at a directory the user owns; it is read but never
    modified or deleted. Remote sources are fetched into a staging directory
    that the orchestrator deletes once the run no longer needs it.
    """

    kind: Literal["local", "remote"]
    raw: str
    path: Path | None = None
    reference: str | None = None
    provider: str | None = None
    repo: str | None = None
    subdir: str | None = None
    ref: str | None = None

    @property
    def is_local(self) -> bool:
        return self.kind == "local"

    @property
    def display(self) -> str:
        if self.is_local:
            return f"(local) {self.raw}"
        return self.reference or self.raw


def is_local_path(source: str) -> bool:
    return source.startswith(LOCAL_PREFIXES)


def expand_path(source: str, cwd: Path | None = None) -> Path:
    """Expand ``~`` and resolve relative paths against *cwd*."""
    base = cwd or Path.cwd()
    return (base / Path(source).expanduser()).resolve()


def parse_remote(reference: str) -> TemplateSource:
    """Parse ``provider:owner/repo[/subdir][#ref]``."""
    match = _REMOTE_PATTERN.match(reference)
    if match is None:
        raise SourceError(
            f"Invalid template reference '{reference}'. Expected owner/repo or provider:owner/repo"
        )
    provider = match.group("provider")
    if provider not in PROVIDERS:
        raise SourceError(
            f"Unsupported provider '{provider}'. Choose from: {', '.join(PROVIDERS)}"
        )
    subdir = match.group("subdir").strip("/") or None
    return TemplateSource(
        kind="remote",
        raw=reference,
        reference=reference,
        provider=provider,
        repo=f"{match.group('owner')}/{match.group('name')}",
        subdir=subdir,
        ref=match.group("ref"),
    )


def resolve_source(source: str, cwd: Path | None = None) -> TemplateSource:
    """Classify *source* as a local directory or a remote repository.

    Raises:
        SourceNotFoundError: For a local path that does not exist.
        SourceError: For a malformed remote reference.
    """
    source = source.strip()
    if not source:
        raise SourceError("Template source is empty")

    if is_local_path(source):
        path = expand_path(source, cwd)
        if not path.is_dir():
            raise SourceNotFoundError(path)
        return TemplateSource(kind="local", raw=source, path=path)

    reference = source if ":" in source else f"{DEFAULT_PROVIDER}:{source}"
    return parse_remote(reference)


__all__ = ["TemplateSource", "expand_path", "is_local_path", "parse_remote", "resolve_source"]
