"""Local mirrors of remote repositories.

Each remote has one persistent working copy used as the staging area for
uploads. ``WorkingCopyManager.ensure_ready`` clones it on first use and
refreshes it afterwards.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from skillsync.errors.exceptions import CloneError, InvalidIdentifierError
from skillsync.git.client import GitClient
from skillsync.git.errors import GitCommandError
from skillsync.git.validation import (
    FALLBACK_BRANCH,
    is_valid_remote_name,
    is_valid_remote_url,
    sanitize_branch,
)
from skillsync.remotes.config import Remote

logger = logging.getLogger(__name__)

# Conventional default branches tried after the current one.
DEFAULT_BRANCHES: tuple[str, ...] = ("main", "master")

CREDENTIALS_HINT = "Check your Git credentials (SSH keys or credential helper)"


def mirror_path_for(repos_dir: str | Path, name: str) -> Path:
    """Map a remote name to its mirror directory.

    Only the final path segment of ``name`` is used, so a name containing
    separators cannot point outside ``repos_dir``.
    """
    safe_name = re.split(r"[/\\]", name)[-1] or name
    return Path(repos_dir) / safe_name


def branch_candidates(current: str) -> list[str]:
    """Current branch followed by the default branches, without repeats."""
    candidates: list[str] = []
    for branch in (current, *DEFAULT_BRANCHES):
        if branch not in candidates:
            candidates.append(branch)
    return candidates


@dataclass
class MirrorState:
    """Result of preparing a mirror.

    Attributes:
        path: Mirror directory.
        cloned: The mirror was created by this call.
        updated: An existing mirror was pulled successfully.
    """

    path: Path
    cloned: bool = False
    updated: bool = False


class WorkingCopyManager:
    """Prepare local mirrors of remotes.

    Args:
        git: git client.
        mirror_path: Maps a remote name to its mirror directory.
    """

    def __init__(self, git: GitClient, mirror_path: Callable[[str], Path]) -> None:
        self._git = git
        self._mirror_path = mirror_path

    def mirror_path(self, remote: Remote) -> Path:
        """Mirror directory for ``remote``."""
        return self._mirror_path(remote.name)

    def current_branch(self, path: str | Path) -> str:
        """Active branch of a mirror, ``main`` when it cannot be determined."""
        branch = self._git.current_branch(path)
        if branch is None or branch == "HEAD":
            return FALLBACK_BRANCH
        return sanitize_branch(branch)

    def ensure_ready(self, remote: Remote) -> MirrorState:
        """Clone or refresh the mirror of ``remote``.

        Args:
            remote: Remote to mirror.

        Returns:
            The mirror state.

        Raises:
            InvalidIdentifierError: If the remote name or URL is unsafe.
            CloneError: If the initial clone fails.
        """
        if not is_valid_remote_name(remote.name):
            raise InvalidIdentifierError(
                f"Invalid repository name '{remote.name}'",
                kind="remote name",
                value=remote.name,
            )
        if not is_valid_remote_url(remote.url):
            raise InvalidIdentifierError(
                f"Invalid Git URL '{remote.url}'",
                kind="url",
                value=remote.url,
            )

        path = self.mirror_path(remote)
        if not path.exists():
            return self._clone(remote, path)
        return self._refresh(path)

    def _clone(self, remote: Remote, path: Path) -> MirrorState:
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Cloning %s into %s", remote.url, path)
        try:
            self._git.clone(remote.url, path)
        except GitCommandError as exc:
            raise CloneError(
                f"Failed to clone repository '{remote.name}'",
                output=exc.text,
                hint=CREDENTIALS_HINT,
                cause=exc,
                url=remote.url,
                destination=path,
            ) from exc
        return MirrorState(path=path, cloned=True)

    def _refresh(self, path: Path) -> MirrorState:
        try:
            self._git.fetch(path)
        except GitCommandError as exc:
            # Freshness is best effort; an unreachable remote still leaves a usable mirror.
            logger.warning("Could not fetch %s: %s", path, exc.text)
            return MirrorState(path=path)

        for branch in branch_candidates(self.current_branch(path)):
            try:
                self._git.pull(path, sanitize_branch(branch))
            except GitCommandError as exc:
                logger.debug("Pull from origin/%s failed: %s", branch, exc.text)
                continue
            logger.info("Repository updated from origin/%s", branch)
            return MirrorState(path=path, updated=True)

        logger.info("Repository ready (no branch could be pulled)")
        return MirrorState(path=path)
