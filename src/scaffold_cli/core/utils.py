"""Filesystem helpers."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def safe_remove(path: Path | None) -> bool:
    """Remove a file or directory tree, best effort.

    Returns True when *path* no longer exists afterwards. Errors are logged
    at debug level and swallowed.
    """
    if path is None:
        return True
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)
    except OSError as exc:
        logger.debug("Could not remove %s: %s", path, exc)
    return not path.exists()


__all__ = ["safe_remove"]
