from __future__ import annotations

import io
import json
import shutil
from pathlib import Path
from typing import Any, Callable

import pytest
from rich.console import Console

from scaffold_cli.prompts.types import CANCELLED


class FakeBackend:
    """Prompt backend that replays scripted answers and records each question."""

    def __init__(self, answers: dict[str, Any] | None = None, confirm_post_install: Any = True):
        self.answers = dict(answers or {})
        self.confirm_post_install = confirm_post_install
        self.asked: list[tuple[str, str]] = []

    def _reply(self, kind: str, prompt) -> Any:
        self.asked.append((kind, prompt.name))
        return self.answers.get(prompt.name, CANCELLED)

    def text(self, prompt):
        return self._reply("text", prompt)

    def password(self, prompt):
        return self._reply("password", prompt)

    def select(self, prompt):
        return self._reply("select", prompt)

    def confirm(self, prompt):
        if prompt.name == "run_post_install":
            self.asked.append(("confirm", prompt.name))
            return self.confirm_post_install
        return self._reply("confirm", prompt)

    def multiselect(self, prompt):
        return self._reply("multiselect", prompt)


@pytest.fixture()
def fake_backend() -> Callable[..., FakeBackend]:
    return FakeBackend


@pytest.fixture()
def quiet_console() -> Console:
    return Console(file=io.StringIO(), force_terminal=False, width=120)


@pytest.fixture()
def requires_bash() -> str:
    bash_path = shutil.which("bash")
    if bash_path is None:
        pytest.skip("bash is not available in this environment")
    return bash_path


def write_template_tree(
    root: Path,
    files: dict[str, str],
    config: dict[str, Any] | str | None = None,
    hooks: dict[str, str] | None = None,
) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    scaffold_dir = root / ".scaffold"
    if config is not None:
        scaffold_dir.mkdir(exist_ok=True)
        text = config if isinstance(config, str) else json.dumps(config)
        (scaffold_dir / "config.json").write_text(text, encoding="utf-8")
    for name, body in (hooks or {}).items():
        scaffold_dir.mkdir(exist_ok=True)
        (scaffold_dir / f"{name}.sh").write_text(body, encoding="utf-8")
    return root


@pytest.fixture()
def make_template(tmp_path: Path) -> Callable[..., Path]:
    """Build a template directory under ``tmp_path/templates/<name>``."""

    def _make(
        files: dict[str, str] | None = None,
        *,
        config: dict[str, Any] | str | None = None,
        hooks: dict[str, str] | None = None,
        name: str = "template",
    ) -> Path:
        return write_template_tree(tmp_path / "templates" / name, files or {}, config, hooks)

    return _make


@pytest.fixture()
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty working directory the test has chdir'd into."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work
