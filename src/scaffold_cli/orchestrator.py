"""Scaffold run state machine.

A run moves through fixed steps: resolve the source, acquire the template,
extract hooks, load the config, run ``pre-install``, copy the files, release
the staging directory, ask the prompts, run ``post-install``. Any failure up
to and including the copy aborts the run and leaves no target behind. Once
files are copied the new project is kept, even when the user cancels or the
post-install hook fails.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import httpx
from rich.console import Console

from scaffold_cli.cli.ui import StepTracker
from scaffold_cli.core.config import POST_INSTALL_HOOK, PRE_INSTALL_HOOK, STAGING_PREFIX
from scaffold_cli.core.utils import safe_remove
from scaffold_cli.errors import (
    CopyError,
    HookError,
    InputError,
    ScaffoldError,
    TargetExistsError,
)
from scaffold_cli.prompts.runner import run_prompts
from scaffold_cli.prompts.types import PromptBackend, is_cancel
from scaffold_cli.template.copier import copy_template
from scaffold_cli.template.download import download_template, make_client
from scaffold_cli.template.hooks import HookScript, base_environment, extract_hooks, run_hook
from scaffold_cli.template.ignore import build_ignore_patterns
from scaffold_cli.template.schema import ConfirmPrompt, ScaffoldConfig, load_config
from scaffold_cli.template.source import TemplateSource, resolve_source

logger = logging.getLogger(__name__)

STEPS: tuple[tuple[str, str], ...] = (
    ("resolve", "Resolve template source"),
    ("acquire", "Acquire template"),
    ("hooks", "Extract hooks"),
    ("config", "Load template config"),
    ("pre-install", "Run pre-install hook"),
    ("copy", "Copy template files"),
    ("release", "Release staging directory"),
    ("prompts", "Ask template questions"),
    ("post-install", "Run post-install hook"),
    ("final", "Finalize"),
)

POST_INSTALL_CONFIRM = ConfirmPrompt(
    type="confirm",
    name="run_post_install",
    message="Run post-install script?",
    initialValue=True,
)


@dataclass(frozen=True)
class ScaffoldRequest:
    """Validated user input for one run."""

    project_name: str
    source: str
    non_interactive: bool = False
    cwd: Path | None = None
    github_token: str | None = None
    skip_tls: bool = False

    def target_path(self) -> Path:
        # The last component is not resolved: a symlink there is an existing target.
        return (self.cwd or Path.cwd()).resolve() / self.project_name


@dataclass
class Staging:
    """Where the template lives while a run uses it.

    ``owned_dir`` is the temp directory created for a remote download; it is
    None for local sources, which are never removed.
    """

    root: Path
    owned_dir: Path | None = None

    def release(self) -> None:
        if self.owned_dir is not None:
            safe_remove(self.owned_dir)
            self.owned_dir = None


@dataclass
class ScaffoldResult:
    target: Path
    source: TemplateSource
    config: ScaffoldConfig = field(default_factory=ScaffoldConfig)
    files_copied: int = 0
    answers: dict[str, str] = field(default_factory=dict)
    cancelled: bool = False
    post_install_ran: bool = False
    post_install_error: HookError | None = None

    @property
    def ok(self) -> bool:
        return not self.cancelled and self.post_install_error is None


Downloader = Callable[..., Path]


class Scaffolder:
    """Drive one scaffold run from a :class:`ScaffoldRequest` to a result.

    Collaborators are injectable so tests can swap the prompt backend, the
    downloader or the HTTP client factory.
    """

    def __init__(
        self,
        *,
        console: Console | None = None,
        tracker: StepTracker | None = None,
        backend: PromptBackend | None = None,
        downloader: Downloader = download_template,
        client_factory: Callable[..., httpx.Client] = make_client,
    ):
        self.console = console or Console()
        self.tracker = tracker or StepTracker("Scaffold project")
        self.backend = backend
        self.downloader = downloader
        self.client_factory = client_factory
        for key, label in STEPS:
            self.tracker.add(key, label)

    def _backend(self) -> PromptBackend:
        if self.backend is None:
            from scaffold_cli.prompts.backend import RichPromptBackend

            self.backend = RichPromptBackend(self.console)
        return self.backend

    def run(self, request: ScaffoldRequest) -> ScaffoldResult:
        """Execute every step and return the outcome.

        Raises:
            ScaffoldError: For any failure that aborts the run. Temp files and
                a partially copied target are removed before it propagates.
        """
        if not request.project_name.strip():
            raise InputError("Project name is required")
        target = request.target_path()
        if os.path.lexists(target):
            raise TargetExistsError(target)

        tracker = self.tracker
        staging: Staging | None = None
        hooks: dict[str, HookScript] = {}

        try:
            tracker.start("resolve")
            source = resolve_source(request.source, request.cwd)
            tracker.complete("resolve", source.display)
            result = ScaffoldResult(target=target, source=source)

            tracker.start("acquire")
            staging = self._acquire(source, request)
            tracker.complete("acquire", "local directory" if source.is_local else "downloaded")

            tracker.start("hooks")
            hooks = extract_hooks(staging.root, copy=staging.owned_dir is not None)
            tracker.complete("hooks", ", ".join(hooks) or "none")

            tracker.start("config")
            result.config = load_config(staging.root)
            tracker.complete("config", f"{len(result.config.prompts)} prompt(s)")

            env = base_environment(target, request.non_interactive)
            pre_install = hooks.pop(PRE_INSTALL_HOOK, None)
            if pre_install is None:
                tracker.skip("pre-install", "none")
            else:
                tracker.start("pre-install")
                try:
                    run_hook(pre_install, cwd=staging.root, env=env)
                finally:
                    pre_install.discard()
                tracker.complete("pre-install")

            tracker.start("copy")
            result.files_copied = self._copy(staging.root, target, result.config)
            tracker.complete("copy", f"{result.files_copied} file(s)")

            if staging.owned_dir is None:
                tracker.skip("release", "local source kept")
            else:
                tracker.start("release")
                staging.release()
                tracker.complete("release")

            tracker.start("prompts")
            backend = None if request.non_interactive else self._backend()
            answers = run_prompts(result.config.prompts, request.non_interactive, backend)
            if is_cancel(answers):
                tracker.skip("prompts", "cancelled")
                tracker.skip("post-install", "cancelled")
                tracker.skip("final", "cancelled")
                result.cancelled = True
                logger.debug("Run cancelled after copying into %s", target)
                return result
            result.answers = answers
            tracker.complete("prompts", f"{len(answers)} answer(s)")

            post_install = hooks.pop(POST_INSTALL_HOOK, None)
            if post_install is not None:
                self._post_install(post_install, request, result, {**env, **answers})
            else:
                tracker.skip("post-install", "none")

            tracker.complete("final", str(target))
            return result
        except ScaffoldError as exc:
            tracker.fail_running(str(exc))
            raise
        finally:
            for hook in hooks.values():
                hook.discard()
            if staging is not None:
                staging.release()

    def _acquire(self, source: TemplateSource, request: ScaffoldRequest) -> Staging:
        if source.is_local:
            return Staging(root=source.path)

        staging_dir = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX))
        client = self.client_factory(skip_tls=request.skip_tls)
        try:
            with self.console.status(f"Downloading {source.display}..."):
                root = self.downloader(
                    source,
                    staging_dir,
                    client=client,
                    github_token=request.github_token,
                )
        except BaseException:
            safe_remove(staging_dir)
            raise
        finally:
            client.close()
        logger.debug("Template %s staged at %s", source.display, root)
        return Staging(root=root, owned_dir=staging_dir)

    def _copy(self, root: Path, target: Path, config: ScaffoldConfig) -> int:
        """Copy the template, removing the target on failure only if this run created it."""
        patterns = build_ignore_patterns(config.ignore)
        existed = os.path.lexists(target)
        try:
            return copy_template(root, target, patterns)
        except TargetExistsError:
            raise
        except OSError as exc:
            if not existed:
                safe_remove(target)
            raise CopyError(f"Failed to copy template into {target}: {exc}") from exc
        except BaseException:
            if not existed:
                safe_remove(target)
            raise

    def _post_install(
        self,
        hook: HookScript,
        request: ScaffoldRequest,
        result: ScaffoldResult,
        env: dict[str, str],
    ) -> None:
        tracker = self.tracker
        try:
            if not request.non_interactive:
                confirmed = self._backend().confirm(POST_INSTALL_CONFIRM)
                if is_cancel(confirmed) or not confirmed:
                    tracker.skip("post-install", "declined")
                    return

            tracker.start("post-install")
            try:
                run_hook(hook, cwd=result.target, env=env)
            except HookError as exc:
                logger.debug("Post-install hook failed: %s", exc)
                result.post_install_error = exc
                tracker.error("post-install", str(exc))
                return
            result.post_install_ran = True
            tracker.complete("post-install")
        finally:
            hook.discard()


__all__ = ["STEPS", "ScaffoldRequest", "ScaffoldResult", "Scaffolder", "Staging"]
