"""Path filtering for template copies."""

from __future__ import annotations

from typing import Iterable, Sequence

from scaffold_cli.core.config import DEFAULT_IGNORE


def _segments(relative_path: str) -> list[str]:
    return [part for part in relative_path.replace("\\", "/").split("/") if part]


def _matches(pattern: str, segments: Sequence[str]) -> bool:
    if not segments:
        return False
    if pattern.startswith("*."):
        return segments[-1].endswith(pattern[1:])
    # Exact segment match: "tmp" ignores tmp/cache.txt but not temperature.txt.
    return pattern in segments


def should_ignore(relative_path: str, patterns: Iterable[str]) -> bool:
    """Return True when *relative_path* matches any ignore pattern.

    ``*.ext`` patterns match on the basename suffix; every other pattern must
    equal one ``/``-separated segment of the path.
    """
    segments = _segments(relative_path)
    return any(_matches(pattern, segments) for pattern in patterns)


def build_ignore_patterns(user_patterns: Iterable[str] = ()) -> list[str]:
    """Return the built-in patterns followed by the template's own."""
    return [*DEFAULT_IGNORE, *user_patterns]


__all__ = ["build_ignore_patterns", "should_ignore"]
