"""Recursive template copy with ignore filtering."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Sequence

from scaffold_cli.core.config import CONFIG_DIR
from scaffold_cli.errors import TargetExistsError
from scaffold_cli.template.ignore import should_ignore

logger = logging.getLogger(__name__)


def copy_template(template_root: Path, target: Path, patterns: Sequence[str]) -> int:
    """Copy *template_root* into a new *target* directory.

    Every path is matched relative to *template_root*; an ignored directory
    is pruned with everything below it. The config directory is excluded no
    matter what *patterns* contains.

    Returns:
        Number of files copied.

    Raises:
        TargetExistsError: If *target* already exists, even as a dangling
            symlink.
    """
    if os.path.lexists(target):
        raise TargetExistsError(target)

    effective = list(patterns)
    if CONFIG_DIR not in effective:
        effective.append(CONFIG_DIR)

    target.mkdir(parents=True)
    copied = 0

    for current, dirnames, filenames in os.walk(template_root):
        current_path = Path(current)
        rel_dir = current_path.relative_to(template_root)

        kept_dirs = []
        for dirname in sorted(dirnames):
            rel = (rel_dir / dirname).as_posix()
            if should_ignore(rel, effective):
                logger.debug("Ignoring directory %s", rel)
                continue
            source_dir = current_path / dirname
            if source_dir.is_symlink():
                os.symlink(os.readlink(source_dir), target / rel)
                continue
            kept_dirs.append(dirname)
            (target / rel).mkdir(exist_ok=True)
        dirnames[:] = kept_dirs

        for filename in sorted(filenames):
            rel = (rel_dir / filename).as_posix()
            if should_ignore(rel, effective):
                logger.debug("Ignoring file %s", rel)
                continue
            shutil.copy2(current_path / filename, target / rel, follow_symlinks=False)
            copied += 1

    logger.debug("Copied %d file(s) from %s to %s", copied, template_root, target)
    return copied


__all__ = ["copy_template"]
