"""Scaffold run state machine tests."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from scaffold_cli import orchestrator as orchestrator_module
from scaffold_cli.cli.ui import StepTracker
from scaffold_cli.errors import (
    ConfigValidationError,
    CopyError,
    DownloadError,
    HookError,
    InputError,
    TargetExistsError,
)
from scaffold_cli.orchestrator import ScaffoldRequest, Scaffolder
from scaffold_cli.template.schema import ScaffoldConfig

PROMPTS_CONFIG = {
    "name": "demo",
    "ignore": ["*.log"],
    "prompts": [
        {"type": "text", "name": "title", "message": "Title?", "initialValue": "Demo"},
        {"type": "confirm", "name": "docker", "message": "Docker?", "initialValue": False},
    ],
}

ENV_DUMP_HOOK = 'env | grep "^SCAFFOLD_" | sort > scaffold-env.txt\n'


class FakeClient:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeDownloader:
    """Writes a template into the staging directory instead of fetching it."""

    def __init__(self, files: dict[str, str], *, hooks: dict[str, str] | None = None, error: Exception | None = None):
        self.files = files
        self.hooks = hooks or {}
        self.error = error
        self.staging_dirs: list[Path] = []

    def __call__(self, source, staging_dir: Path, *, client, github_token=None) -> Path:
        self.staging_dirs.append(staging_dir)
        root = staging_dir / "template" / "repo-main"
        root.mkdir(parents=True)
        if self.error is not None:
            raise self.error
        for rel, content in self.files.items():
            (root / rel).parent.mkdir(parents=True, exist_ok=True)
            (root / rel).write_text(content, encoding="utf-8")
        for name, body in self.hooks.items():
            (root / ".scaffold").mkdir(exist_ok=True)
            (root / ".scaffold" / f"{name}.sh").write_text(body, encoding="utf-8")
        return root


def _scaffolder(quiet_console, **kwargs) -> Scaffolder:
    return Scaffolder(console=quiet_console, tracker=StepTracker("Test"), **kwargs)


def _request(workdir: Path, source: str, **kwargs) -> ScaffoldRequest:
    return ScaffoldRequest(project_name="my-app", source=source, cwd=workdir, **kwargs)


class TestLocalRuns:
    def test_non_interactive_success(self, make_template, workdir: Path, quiet_console) -> None:
        template = make_template({"index.js": "", "debug.log": "", "src/a.js": ""}, config=PROMPTS_CONFIG)
        scaffolder = _scaffolder(quiet_console)

        result = scaffolder.run(_request(workdir, str(template), non_interactive=True))

        target = workdir / "my-app"
        assert result.target == target.resolve()
        assert result.ok
        assert result.files_copied == 2
        assert (target / "index.js").exists()
        assert not (target / "debug.log").exists()
        assert not (target / ".scaffold").exists()
        assert result.answers == {"SCAFFOLD_TITLE": "Demo", "SCAFFOLD_DOCKER": "false"}
        assert template.exists()
        assert scaffolder.tracker.status("release") == "skipped"
        assert scaffolder.tracker.status("final") == "done"

    def test_existing_target_rejected_before_any_step(self, make_template, workdir: Path, quiet_console) -> None:
        template = make_template({"a.txt": ""})
        (workdir / "my-app").mkdir()
        scaffolder = _scaffolder(quiet_console)

        with pytest.raises(TargetExistsError):
            scaffolder.run(_request(workdir, str(template), non_interactive=True))

        assert scaffolder.tracker.status("resolve") == "pending"

    def test_empty_project_name(self, make_template, workdir: Path, quiet_console) -> None:
        with pytest.raises(InputError):
            _scaffolder(quiet_console).run(ScaffoldRequest(project_name=" ", source=str(make_template()), cwd=workdir))

    def test_invalid_config_leaves_no_target(self, make_template, workdir: Path, quiet_console) -> None:
        template = make_template({"a.txt": ""}, config={"prompts": [{"type": "text", "name": "bad name", "message": "?"}]})
        scaffolder = _scaffolder(quiet_console)

        with pytest.raises(ConfigValidationError):
            scaffolder.run(_request(workdir, str(template), non_interactive=True))

        assert not (workdir / "my-app").exists()
        assert scaffolder.tracker.status("config") == "error"

    def test_copy_failure_removes_partial_target(
        self, make_template, workdir: Path, quiet_console, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        template = make_template({"a.txt": ""})

        def broken_copy(root: Path, target: Path, patterns) -> int:
            target.mkdir()
            (target / "half.txt").write_text("", encoding="utf-8")
            raise OSError("disk full")

        monkeypatch.setattr(orchestrator_module, "copy_template", broken_copy)

        with pytest.raises(CopyError) as exc_info:
            _scaffolder(quiet_console).run(_request(workdir, str(template), non_interactive=True))

        assert "disk full" in str(exc_info.value)
        assert not (workdir / "my-app").exists()

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_dangling_symlink_target_rejected(self, make_template, workdir: Path, quiet_console) -> None:
        template = make_template({"a.txt": ""})
        (workdir / "my-app").symlink_to(workdir / "elsewhere")
        scaffolder = _scaffolder(quiet_console)

        with pytest.raises(TargetExistsError):
            scaffolder.run(_request(workdir, str(template), non_interactive=True))

        assert (workdir / "my-app").is_symlink()
        assert scaffolder.tracker.status("resolve") == "pending"

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_copy_failure_keeps_preexisting_target(
        self, make_template, workdir: Path, quiet_console, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        template = make_template({"a.txt": ""})
        link = workdir / "my-app"
        link.symlink_to(workdir / "elsewhere")

        def broken_copy(root: Path, target: Path, patterns) -> int:
            raise FileExistsError(17, "File exists", str(target))

        monkeypatch.setattr(orchestrator_module, "copy_template", broken_copy)

        with pytest.raises(CopyError):
            _scaffolder(quiet_console)._copy(template, link, ScaffoldConfig())

        assert os.path.lexists(link)
        assert link.is_symlink()


class TestInteractiveRuns:
    def test_backend_answers_used(self, make_template, workdir: Path, quiet_console, fake_backend) -> None:
        template = make_template({"a.txt": ""}, config=PROMPTS_CONFIG)
        backend = fake_backend({"title": "Shop", "docker": True})

        result = _scaffolder(quiet_console, backend=backend).run(_request(workdir, str(template)))

        assert result.answers == {"SCAFFOLD_TITLE": "Shop", "SCAFFOLD_DOCKER": "true"}

    def test_cancel_keeps_target(self, make_template, workdir: Path, quiet_console, fake_backend) -> None:
        template = make_template({"a.txt": ""}, config=PROMPTS_CONFIG, hooks={"post-install": "touch ran.txt"})
        scaffolder = _scaffolder(quiet_console, backend=fake_backend({"title": "Shop"}))

        result = scaffolder.run(_request(workdir, str(template)))

        assert result.cancelled
        assert not result.ok
        assert (workdir / "my-app" / "a.txt").exists()
        assert not (workdir / "my-app" / "ran.txt").exists()
        assert scaffolder.tracker.status("post-install") == "skipped"

    def test_declined_post_install_skips_hook(self, make_template, workdir: Path, quiet_console, fake_backend) -> None:
        template = make_template({"a.txt": ""}, hooks={"post-install": "touch ran.txt"})
        backend = fake_backend(confirm_post_install=False)
        scaffolder = _scaffolder(quiet_console, backend=backend)

        result = scaffolder.run(_request(workdir, str(template)))

        assert not result.post_install_ran
        assert ("confirm", "run_post_install") in backend.asked
        assert not (workdir / "my-app" / "ran.txt").exists()
        assert scaffolder.tracker.status("post-install") == "skipped"


class TestHooks:
    def test_post_install_sees_answers_and_target(self, requires_bash, make_template, workdir: Path, quiet_console) -> None:
        template = make_template({"a.txt": ""}, config=PROMPTS_CONFIG, hooks={"post-install": ENV_DUMP_HOOK})

        result = _scaffolder(quiet_console).run(_request(workdir, str(template), non_interactive=True))

        assert result.post_install_ran
        env_lines = (result.target / "scaffold-env.txt").read_text(encoding="utf-8").splitlines()
        assert "SCAFFOLD_TITLE=Demo" in env_lines
        assert "SCAFFOLD_DOCKER=false" in env_lines
        assert f"SCAFFOLD_TARGET={result.target}" in env_lines
        assert "SCAFFOLD_NON_INTERACTIVE=1" in env_lines

    def test_pre_install_runs_in_template_root(self, requires_bash, make_template, workdir: Path, quiet_console) -> None:
        template = make_template({"a.txt": ""}, hooks={"pre-install": "touch generated.txt\n"})

        result = _scaffolder(quiet_console).run(_request(workdir, str(template), non_interactive=True))

        assert (result.target / "generated.txt").exists()

    def test_failing_pre_install_leaves_no_target(self, requires_bash, make_template, workdir: Path, quiet_console) -> None:
        template = make_template({"a.txt": ""}, hooks={"pre-install": "exit 1\n"})
        scaffolder = _scaffolder(quiet_console)

        with pytest.raises(HookError):
            scaffolder.run(_request(workdir, str(template), non_interactive=True))

        assert not (workdir / "my-app").exists()
        assert scaffolder.tracker.status("pre-install") == "error"
        assert scaffolder.tracker.status("copy") == "pending"

    def test_failing_post_install_keeps_target(self, requires_bash, make_template, workdir: Path, quiet_console) -> None:
        template = make_template({"a.txt": ""}, hooks={"post-install": "exit 2\n"})
        scaffolder = _scaffolder(quiet_console)

        result = scaffolder.run(_request(workdir, str(template), non_interactive=True))

        assert isinstance(result.post_install_error, HookError)
        assert result.post_install_error.returncode == 2
        assert not result.ok
        assert (workdir / "my-app" / "a.txt").exists()
        assert scaffolder.tracker.status("post-install") == "error"


class TestRemoteRuns:
    def test_staging_released_after_success(self, workdir: Path, quiet_console) -> None:
        downloader = FakeDownloader({"README.md": "# hi", ".scaffold/config.json": json.dumps({"ignore": ["tmp"]})})
        client = FakeClient()
        scaffolder = _scaffolder(quiet_console, downloader=downloader, client_factory=lambda skip_tls: client)

        result = scaffolder.run(_request(workdir, "user/repo", non_interactive=True))

        assert (result.target / "README.md").exists()
        assert result.source.reference == "github:user/repo"
        assert client.closed
        assert downloader.staging_dirs and not downloader.staging_dirs[0].exists()
        assert scaffolder.tracker.status("release") == "done"

    def test_staging_released_after_download_failure(self, workdir: Path, quiet_console) -> None:
        downloader = FakeDownloader({}, error=DownloadError("Download failed with 404"))
        scaffolder = _scaffolder(quiet_console, downloader=downloader, client_factory=lambda skip_tls: FakeClient())

        with pytest.raises(DownloadError):
            scaffolder.run(_request(workdir, "user/repo", non_interactive=True))

        assert not downloader.staging_dirs[0].exists()
        assert not (workdir / "my-app").exists()
        assert scaffolder.tracker.status("acquire") == "error"

    def test_staging_and_hook_copies_released_after_failure(
        self, requires_bash, workdir: Path, quiet_console, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        downloader = FakeDownloader({"a.txt": ""}, hooks={"pre-install": "exit 1\n", "post-install": "exit 0\n"})
        scaffolder = _scaffolder(quiet_console, downloader=downloader, client_factory=lambda skip_tls: FakeClient())
        extracted: list[Path] = []
        real_extract = orchestrator_module.extract_hooks

        def recording_extract(root: Path, *, copy: bool):
            hooks = real_extract(root, copy=copy)
            extracted.extend(hook.path for hook in hooks.values())
            return hooks

        monkeypatch.setattr(orchestrator_module, "extract_hooks", recording_extract)

        with pytest.raises(HookError):
            scaffolder.run(_request(workdir, "user/repo", non_interactive=True))

        assert len(extracted) == 2
        assert not any(path.exists() for path in extracted)
        assert not downloader.staging_dirs[0].exists()

    def test_skip_tls_passed_to_client_factory(self, workdir: Path, quiet_console) -> None:
        seen: list[bool] = []

        def factory(skip_tls: bool) -> FakeClient:
            seen.append(skip_tls)
            return FakeClient()

        scaffolder = _scaffolder(quiet_console, downloader=FakeDownloader({"a.txt": ""}), client_factory=factory)
        scaffolder.run(_request(workdir, "user/repo", non_interactive=True, skip_tls=True))

        assert seen == [True]
