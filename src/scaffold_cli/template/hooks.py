"""Template lifecycle hooks (``.scaffold/pre-install.sh`` and ``post-install.sh``)."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from scaffold_cli.core.config import (
    CONFIG_DIR,
    ENV_NON_INTERACTIVE,
    ENV_TARGET,
    HOOK_NAMES,
    STAGING_PREFIX,
)
from scaffold_cli.core.utils import safe_remove
from scaffold_cli.errors import HookError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HookScript:
    """A hook ready to run.

    ``owned`` hooks are private temp copies that survive deletion of the
    staging directory; they are removed with :meth:`discard` once run.
    """

    name: str
    path: Path
    owned: bool = False

    def discard(self) -> None:
        if self.owned:
            safe_remove(self.path)


def hook_path(template_root: Path, hook_name: str) -> Path:
    return template_root / CONFIG_DIR / f"{hook_name}.sh"


def extract_hooks(template_root: Path, *, copy: bool) -> dict[str, HookScript]:
    """Collect the template's hooks, copying them out of the staging root if asked.

    Raises:
        HookError: If a hook exists but cannot be copied.
    """
    hooks: dict[str, HookScript] = {}
    for hook_name in HOOK_NAMES:
        source = hook_path(template_root, hook_name)
        if not source.is_file():
            continue
        if not copy:
            hooks[hook_name] = HookScript(hook_name, source)
            continue
        fd, temp_name = tempfile.mkstemp(prefix=f"{STAGING_PREFIX}{hook_name}-", suffix=".sh")
        os.close(fd)
        try:
            shutil.copy2(source, temp_name)
        except OSError as exc:
            safe_remove(Path(temp_name))
            raise HookError(hook_name, None, f"could not extract script: {exc}") from exc
        hooks[hook_name] = HookScript(hook_name, Path(temp_name), owned=True)
        logger.debug("Extracted %s hook to %s", hook_name, temp_name)
    return hooks


def base_environment(target: Path, non_interactive: bool) -> dict[str, str]:
    """Variables every hook receives."""
    return {
        ENV_TARGET: str(target),
        ENV_NON_INTERACTIVE: "1" if non_interactive else "",
    }


def run_hook(hook: HookScript, *, cwd: Path, env: Mapping[str, str]) -> None:
    """Run *hook* with bash, inheriting this process's stdio.

    *env* is layered over the current environment.

    Raises:
        HookError: If bash cannot be started or the script exits non-zero.
    """
    full_env = {**os.environ, **env}
    logger.debug("Running %s hook %s in %s", hook.name, hook.path, cwd)
    try:
        result = subprocess.run(["bash", str(hook.path)], cwd=cwd, env=full_env, check=False)
    except OSError as exc:
        raise HookError(hook.name, None, str(exc)) from exc
    if result.returncode != 0:
        raise HookError(hook.name, result.returncode)


__all__ = ["HookScript", "base_environment", "extract_hooks", "hook_path", "run_hook"]
