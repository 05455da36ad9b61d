"""Thin synchronous wrapper around the git executable.

Every git invocation in skillsync goes through ``GitClient``. Commands are
run with argument arrays (no shell); each string argument is passed through
``clean_argument`` and the command line is logged at DEBUG level rendered
with ``escape_for_command``.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from skillsync.git.errors import GitCommandError
from skillsync.git.validation import clean_argument, render_command

logger = logging.getLogger(__name__)


@dataclass
class GitResult:
    """Outcome of one git process.

    Attributes:
        args: Full argument list, executable first.
        returncode: Exit status.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """Whether the process exited with status 0."""
        return self.returncode == 0


Runner = Callable[[list[str], Path | None], GitResult]


def subprocess_runner(args: list[str], cwd: Path | None) -> GitResult:
    """Run a command with ``subprocess.run``, blocking until it exits."""
    try:
        completed = subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except FileNotFoundError as exc:
        return GitResult(args=args, returncode=127, stderr=str(exc))
    return GitResult(
        args=args,
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )


class GitClient:
    """Narrow command surface over the git executable.

    Args:
        executable: git executable name or path.
        runner: Callable that runs an argument list in a directory. Defaults
            to ``subprocess_runner``; tests substitute a scripted fake.
    """

    def __init__(self, executable: str = "git", runner: Runner | None = None) -> None:
        self._executable = executable
        self._runner = runner or subprocess_runner

    def run(
        self,
        args: Sequence[str],
        cwd: str | Path | None = None,
        *,
        check: bool = True,
    ) -> GitResult:
        """Run ``git <args>``.

        Args:
            args: Arguments after the executable.
            cwd: Working directory.
            check: Raise on non-zero exit when ``True``.

        Returns:
            The process result.

        Raises:
            GitCommandError: If ``check`` is set and git exits non-zero.
        """
        argv = [self._executable, *(clean_argument(str(a)) for a in args)]
        command = render_command(argv)
        logger.debug("$ %s (cwd=%s)", command, cwd)

        result = self._runner(argv, Path(cwd) if cwd is not None else None)
        if not result.ok:
            logger.debug("exit %d: %s", result.returncode, (result.stderr or result.stdout).strip())
            if check:
                raise GitCommandError(command, result.returncode, result.stdout, result.stderr)
        return result

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def clone(self, url: str, destination: str | Path, *, depth: int | None = None) -> GitResult:
        args = ["clone"]
        if depth is not None:
            args += ["--depth", str(depth)]
        args += ["--quiet", url, str(destination)]
        return self.run(args)

    def fetch(self, cwd: str | Path, remote: str = "origin") -> GitResult:
        return self.run(["fetch", remote], cwd)

    def pull(self, cwd: str | Path, branch: str, remote: str = "origin") -> GitResult:
        return self.run(["pull", remote, branch], cwd)

    def add(self, cwd: str | Path, path: str, *, force: bool = False) -> GitResult:
        args = ["add"]
        if force:
            args.append("-f")
        args += ["--", path]
        return self.run(args, cwd)

    def add_all(self, cwd: str | Path) -> GitResult:
        return self.run(["add", "-A"], cwd)

    def remove(
        self,
        cwd: str | Path,
        path: str,
        *,
        cached: bool = False,
        recursive: bool = False,
        force: bool = False,
    ) -> GitResult:
        args = ["rm"]
        if recursive:
            args.append("-r")
        if cached:
            args.append("--cached")
        if force:
            args.append("--force")
        args += ["--", path]
        return self.run(args, cwd)

    def unstage(self, cwd: str | Path, paths: Sequence[str]) -> GitResult:
        """Reset index entries for ``paths`` to ``HEAD``; the working tree is untouched."""
        return self.run(["reset", "--quiet", "--", *paths], cwd)

    def commit(self, cwd: str | Path, message: str) -> GitResult:
        return self.run(["commit", "-m", message], cwd)

    def push(
        self,
        cwd: str | Path,
        branch: str,
        *,
        set_upstream: bool = False,
        remote: str = "origin",
    ) -> GitResult:
        args = ["push"]
        if set_upstream:
            args.append("-u")
        args += [remote, branch]
        return self.run(args, cwd)

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def current_branch(self, cwd: str | Path) -> str | None:
        """Return the checked-out branch, or ``None`` when git cannot tell."""
        result = self.run(["rev-parse", "--abbrev-ref", "HEAD"], cwd, check=False)
        if not result.ok:
            return None
        branch = result.stdout.strip()
        return branch or None

    def status_short(self, cwd: str | Path) -> str:
        return self.run(["status", "--porcelain"], cwd).stdout

    def remote_url(self, cwd: str | Path, remote: str = "origin") -> str:
        return self.run(["remote", "get-url", remote], cwd).stdout.strip()

    def list_tracked(self, cwd: str | Path, prefix: str) -> list[str]:
        output = self.run(["ls-files", "--", prefix], cwd).stdout
        return [line for line in output.splitlines() if line]

    def list_stage(self, cwd: str | Path, path: str) -> list[tuple[str, str]]:
        """Return ``(mode, path)`` index entries at or under ``path``."""
        output = self.run(["ls-files", "--stage", "--", path], cwd).stdout
        entries: list[tuple[str, str]] = []
        for line in output.splitlines():
            meta, _, entry_path = line.partition("\t")
            if not entry_path:
                continue
            entries.append((meta.split(" ", 1)[0], entry_path))
        return entries


def staged_paths(status_output: str) -> list[str]:
    """Paths with staged changes in ``git status --porcelain`` output.

    Both sides of a rename are reported.
    """
    paths: list[str] = []
    for line in status_output.splitlines():
        if len(line) < 4 or line[0] in " ?!":
            continue
        for path in line[3:].split(" -> "):
            paths.append(path.strip('"'))
    return paths
