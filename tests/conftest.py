"""Shared test fixtures and configuration for skillsync tests."""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

from skillsync.git.client import GitClient, GitResult

_MINIMAL_FRONTMATTER = """\
---
name: {name}
description: A test skill called {name}
---

# {name}
"""


def make_skill(base_dir: Path, name: str, content: str | None = None) -> Path:
    """Create a skill directory with a SKILL.md file.

    Args:
        base_dir: Parent directory for skill directories.
        name: Skill directory name.
        content: Optional custom SKILL.md content.

    Returns:
        Path to the created skill directory.
    """
    skill_dir = base_dir / name
    skill_dir.mkdir(parents=True, exist_ok=True)
    text = content if content is not None else _MINIMAL_FRONTMATTER.format(name=name)
    (skill_dir / "SKILL.md").write_text(text, encoding="utf-8")
    return skill_dir


class FakeRunner:
    """Scripted stand-in for ``subprocess_runner``.

    Each rule maps an argument prefix (after the executable) to a result.
    Unmatched commands succeed with empty output. Every call is recorded.

    Usage:
        runner = FakeRunner()
        runner.on(["push"], returncode=1, stderr="error: src refspec main does not match any")
        git = GitClient(runner=runner)
    """

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], Path | None]] = []
        self._rules: list[tuple[list[str], Callable[[list[str]], GitResult]]] = []

    def on(
        self,
        prefix: list[str],
        *,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
    ) -> FakeRunner:
        def _respond(args: list[str]) -> GitResult:
            return GitResult(args=args, returncode=returncode, stdout=stdout, stderr=stderr)

        self._rules.append((prefix, _respond))
        return self

    def on_call(self, prefix: list[str], handler: Callable[[list[str]], GitResult]) -> FakeRunner:
        self._rules.append((prefix, handler))
        return self

    def __call__(self, args: list[str], cwd: Path | None) -> GitResult:
        self.calls.append((args, cwd))
        subcommand = args[1:]
        # Later rules override earlier ones.
        for prefix, handler in reversed(self._rules):
            if subcommand[: len(prefix)] == prefix:
                return handler(args)
        return GitResult(args=args, returncode=0)

    def commands(self) -> list[list[str]]:
        """Recorded argument lists without the executable."""
        return [args[1:] for args, _ in self.calls]


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Provide an empty scripted git runner."""
    return FakeRunner()


@pytest.fixture
def fake_git(fake_runner: FakeRunner) -> GitClient:
    """Provide a GitClient driven by ``fake_runner``."""
    return GitClient(runner=fake_runner)


@pytest.fixture
def skill_factory() -> Callable[..., Path]:
    """Factory fixture wrapping ``make_skill``."""
    return make_skill


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temporary directory and chdir into a fresh project.

    Returns:
        The temporary home directory. The project directory is
        ``tmp_path / "project"``.
    """
    home = tmp_path / "home"
    project = tmp_path / "project"
    home.mkdir()
    project.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.delenv("SKILLSYNC_CONFIG_DIR", raising=False)
    monkeypatch.chdir(project)
    return home


@pytest.fixture
def git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Isolate real git from the user's configuration.

    Skips the test when no git executable is available.
    """
    if shutil.which("git") is None:
        pytest.skip("git executable not available")

    gitconfig = tmp_path / "gitconfig"
    gitconfig.write_text(
        "[user]\n"
        "\tname = Test User\n"
        "\temail = test@example.com\n"
        "[init]\n"
        "\tdefaultBranch = main\n"
        "[commit]\n"
        "\tgpgsign = false\n"
        "[protocol \"file\"]\n"
        "\tallow = always\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    monkeypatch.setenv("HOME", str(tmp_path))
    return dict(os.environ)


def run_git(cwd: Path, *args: str) -> str:
    """Run git for test setup and return stdout."""
    completed = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return completed.stdout


@pytest.fixture
def bare_remote(tmp_path: Path, git_env: dict[str, str]) -> str:
    """Create an empty bare repository and return its ``file://`` URL."""
    remote = tmp_path / "remote.git"
    run_git(tmp_path, "init", "--bare", str(remote))
    return remote.as_uri()


@pytest.fixture
def git_cmd(git_env: dict[str, str]) -> Callable[..., str]:
    """Provide ``run_git`` for arranging repositories with real git."""
    return run_git
