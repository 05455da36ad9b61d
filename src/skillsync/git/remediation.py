"""Removal of nested repositories from published bundle paths.

A directory that carries its own ``.git`` entry, or a path the parent index
records as a gitlink (mode ``160000``), is treated by git as a link to
another repository rather than as tracked files: the bundle content never
reaches the parent's history. Before a bundle is copied into such a path
the remediator:

1. detects nested metadata and gitlink registration,
2. unregisters the path from the parent index,
3. purges the nested ``.git`` and the parent's submodule bookkeeping,
4. commits the removal so new plain files are not read as a submodule update.

Sub-steps 2-4 are best effort and log notes on failure. Removing a nested
``.git`` polls until it is gone; if it never goes away the error is fatal.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from skillsync.errors.exceptions import NestedMetadataError
from skillsync.git.client import GitClient, staged_paths
from skillsync.git.errors import GitCommandError
from skillsync.git.validation import escape_for_command

logger = logging.getLogger(__name__)

SUBMODULE_MODE = "160000"
MAX_REMOVAL_ATTEMPTS = 10
REMOVAL_INTERVAL_SECONDS = 0.3

GIT_DIR_NAME = ".git"
CHECKPOINT_MESSAGE = "Remove submodule before uploading as regular files"

# git messages meaning "nothing to remove", which are not worth a note.
_UNMATCHED_MARKERS = ("did not match any files", "No such file")


def delete_command(path: str | Path, platform: str | None = None) -> str:
    """Platform-appropriate shell command that deletes ``path`` recursively."""
    target = escape_for_command(str(path))
    if (platform or sys.platform).startswith("win"):
        return f'Remove-Item -Recurse -Force "{target}"'
    return f'rm -rf "{target}"'


def _delete(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


@dataclass
class RemovalOutcome:
    """Result of a poll-until-absent removal.

    Attributes:
        path: Path that was removed.
        removed: Whether the path is gone.
        attempts: Number of delete attempts made.
    """

    path: Path
    removed: bool
    attempts: int


class MetadataRemover:
    """Delete a path and poll until the filesystem reports it gone.

    Deletion is not visible synchronously on every filesystem. Each attempt
    deletes, waits ``interval`` seconds and re-checks existence; after
    ``max_attempts`` attempts the removal is reported as failed.

    Args:
        max_attempts: Upper bound on delete attempts.
        interval: Seconds to wait between a delete and the existence check.
        sleep: Sleep function.
        delete: Function deleting a path.
    """

    def __init__(
        self,
        max_attempts: int = MAX_REMOVAL_ATTEMPTS,
        interval: float = REMOVAL_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        delete: Callable[[Path], None] = _delete,
    ) -> None:
        self.max_attempts = max_attempts
        self.interval = interval
        self._sleep = sleep
        self._delete = delete

    def remove(self, path: str | Path) -> RemovalOutcome:
        """Remove ``path``, retrying up to ``max_attempts`` times."""
        target = Path(path)
        attempts = 0

        while os.path.lexists(target):
            if attempts >= self.max_attempts:
                return RemovalOutcome(target, removed=False, attempts=attempts)
            attempts += 1
            try:
                self._delete(target)
            except OSError as exc:
                logger.debug("Delete attempt %d of %s failed: %s", attempts, target, exc)
            self._sleep(self.interval)

        return RemovalOutcome(target, removed=True, attempts=attempts)

    def remove_or_raise(self, path: str | Path, context: str = "target") -> RemovalOutcome:
        """Remove ``path`` or raise ``NestedMetadataError``.

        Raises:
            NestedMetadataError: If the path still exists after all attempts.
        """
        target = Path(path)
        if not os.path.lexists(target):
            return RemovalOutcome(target, removed=True, attempts=0)

        logger.warning("Found .git in %s, removing to prevent submodule issue: %s", context, target)
        outcome = self.remove(target)
        if not outcome.removed:
            command = delete_command(target)
            raise NestedMetadataError(
                f".git still exists in {context}: {target}",
                hint=f"git will treat this as a submodule. Delete it manually, then retry:\n  {command}",
                path=target,
                attempts=outcome.attempts,
                delete_command=command,
            )
        return outcome


@dataclass
class SubmoduleRecord:
    """Nested-repository state of one target path.

    Attributes:
        path: Target path relative to the repository root (POSIX form).
        has_nested_metadata: A ``.git`` entry exists inside the target.
        is_registered: The parent index records the path as a gitlink.
    """

    path: str
    has_nested_metadata: bool = False
    is_registered: bool = False

    @property
    def is_submodule(self) -> bool:
        return self.has_nested_metadata or self.is_registered


@dataclass
class RemediationReport:
    """What remediation did for one target path."""

    record: SubmoduleRecord
    unregistered: bool = False
    purged: bool = False
    checkpoint_committed: bool = False
    notes: list[str] = field(default_factory=list)


class SubmoduleRemediator:
    """Detect and undo nested repositories under a mirror.

    Args:
        git: git client.
        repo_dir: Root of the parent repository (the mirror).
        remover: Poll-until-absent remover for ``.git`` entries.
    """

    def __init__(
        self,
        git: GitClient,
        repo_dir: str | Path,
        remover: MetadataRemover | None = None,
    ) -> None:
        self._git = git
        self._repo_dir = Path(repo_dir)
        self._remover = remover or MetadataRemover()

    @property
    def remover(self) -> MetadataRemover:
        return self._remover

    def detect(self, rel_path: str) -> SubmoduleRecord:
        """Inspect ``rel_path`` for nested metadata and gitlink registration."""
        nested = os.path.lexists(self._repo_dir / rel_path / GIT_DIR_NAME)

        registered = False
        try:
            entries = self._git.list_stage(self._repo_dir, rel_path)
            registered = any(mode == SUBMODULE_MODE and path == rel_path for mode, path in entries)
        except GitCommandError as exc:
            self._note(None, "Could not check submodule status", exc)

        return SubmoduleRecord(path=rel_path, has_nested_metadata=nested, is_registered=registered)

    def remediate(self, rel_path: str) -> RemediationReport:
        """Run detect, unregister, purge and checkpoint commit for ``rel_path``.

        Returns:
            Report of the actions taken.

        Raises:
            NestedMetadataError: If the nested ``.git`` cannot be removed.
        """
        record = self.detect(rel_path)
        report = RemediationReport(record=record)

        report.unregistered = self._unregister(record, report)

        if record.has_nested_metadata:
            self._remover.remove_or_raise(self._repo_dir / rel_path / GIT_DIR_NAME)
            report.purged = True

        if record.is_submodule:
            self._purge_bookkeeping(rel_path, report)
            report.checkpoint_committed = self._checkpoint(report)

        return report

    def ensure_no_metadata(self, target: str | Path) -> list[RemovalOutcome]:
        """Remove every ``.git`` entry at or below ``target``.

        Raises:
            NestedMetadataError: If any entry survives removal.
        """
        outcomes = []
        for found in self.find_nested_metadata(target):
            outcomes.append(self._remover.remove_or_raise(found))
        return outcomes

    @staticmethod
    def find_nested_metadata(target: str | Path) -> list[Path]:
        """List ``.git`` entries at or below ``target`` (symlinks not followed)."""
        root = Path(target)
        if not root.is_dir():
            return []

        found: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(root):
            if GIT_DIR_NAME in dirnames:
                found.append(Path(dirpath) / GIT_DIR_NAME)
                dirnames.remove(GIT_DIR_NAME)
            if GIT_DIR_NAME in filenames:
                found.append(Path(dirpath) / GIT_DIR_NAME)
        return found

    # ------------------------------------------------------------------
    # Sub-steps
    # ------------------------------------------------------------------

    def _unregister(self, record: SubmoduleRecord, report: RemediationReport) -> bool:
        try:
            if record.is_registered:
                self._git.remove(self._repo_dir, record.path, cached=True, force=True)
            elif record.has_nested_metadata:
                self._git.remove(self._repo_dir, record.path, cached=True, recursive=True, force=True)
            else:
                self._git.remove(self._repo_dir, record.path, cached=True, recursive=True)
        except GitCommandError as exc:
            self._note(report, "Could not remove from Git index", exc)
            return False
        return True

    def _purge_bookkeeping(self, rel_path: str, report: RemediationReport) -> None:
        self._purge_gitmodules(rel_path, report)
        self._purge_git_config(rel_path, report)
        self._purge_modules_dir(rel_path, report)

    def _purge_gitmodules(self, rel_path: str, report: RemediationReport) -> None:
        gitmodules = self._repo_dir / ".gitmodules"
        if not gitmodules.is_file():
            return

        try:
            content = gitmodules.read_text(encoding="utf-8")
            section = re.compile(
                rf'\[submodule\s+"{re.escape(rel_path)}"\].*?(?=\[submodule|\Z)',
                re.DOTALL,
            )
            remaining = section.sub("", content).strip()
            if remaining:
                gitmodules.write_text(remaining + "\n", encoding="utf-8")
                self._git.add(self._repo_dir, ".gitmodules")
            else:
                gitmodules.unlink()
                try:
                    self._git.remove(self._repo_dir, ".gitmodules")
                except GitCommandError as exc:
                    self._note(report, "Could not remove .gitmodules from Git index", exc)
        except GitCommandError as exc:
            self._note(report, "Could not stage .gitmodules", exc)
        except OSError as exc:
            report.notes.append(f"Could not update .gitmodules: {exc}")
            logger.warning("Note: Could not update .gitmodules: %s", exc)

    def _purge_git_config(self, rel_path: str, report: RemediationReport) -> None:
        config = self._repo_dir / GIT_DIR_NAME / "config"
        if not config.is_file():
            return

        try:
            content = config.read_text(encoding="utf-8")
            section = re.compile(
                rf'\[submodule\s+"{re.escape(rel_path)}"\].*?(?=\[|\Z)',
                re.DOTALL,
            )
            updated = section.sub("", content)
            if updated != content:
                config.write_text(updated.strip() + "\n", encoding="utf-8")
        except OSError as exc:
            report.notes.append(f"Could not clean up .git/config: {exc}")
            logger.warning("Note: Could not clean up .git/config: %s", exc)

    def _purge_modules_dir(self, rel_path: str, report: RemediationReport) -> None:
        modules = self._repo_dir / GIT_DIR_NAME / "modules"
        cache = modules / rel_path
        try:
            if cache.exists():
                shutil.rmtree(cache)
            parent = cache.parent
            if parent != modules and parent.is_dir() and not any(parent.iterdir()):
                parent.rmdir()
        except OSError as exc:
            report.notes.append(f"Could not remove submodule cache {cache}: {exc}")
            logger.warning("Note: Could not remove submodule cache %s: %s", cache, exc)

    def _checkpoint(self, report: RemediationReport) -> bool:
        rel_path = report.record.path
        try:
            staged = staged_paths(self._git.status_short(self._repo_dir))
            own = [p for p in staged if p in (rel_path, ".gitmodules") or p.startswith(f"{rel_path}/")]
            if not own:
                return False
            # Changes staged for other targets belong in the upload commit.
            others = [p for p in staged if p not in own]
            if others:
                logger.debug("Unstaging %d path(s) outside %s before checkpoint", len(others), rel_path)
                self._git.unstage(self._repo_dir, others)
            self._git.commit(self._repo_dir, CHECKPOINT_MESSAGE)
        except GitCommandError as exc:
            self._note(report, "Could not commit submodule removal", exc)
            return False
        logger.info("Committed submodule removal for %s", rel_path)
        return True

    @staticmethod
    def _note(report: RemediationReport | None, what: str, exc: GitCommandError) -> None:
        text = exc.text
        if any(marker in text for marker in _UNMATCHED_MARKERS):
            logger.debug("%s: %s", what, text)
            return
        if report is not None:
            report.notes.append(f"{what}: {text}")
        logger.warning("Note: %s: %s", what, text)
