"""JSON-file-backed store of named remotes."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from skillsync.errors.exceptions import (
    InvalidIdentifierError,
    RemoteExistsError,
)
from skillsync.git.validation import is_valid_remote_name, is_valid_remote_url
from skillsync.remotes.config import Remote, RemotesFile

logger = logging.getLogger(__name__)


class RemoteDirectory:
    """Name-to-URL store persisted as ``repositories.json``.

    The file holds ``{"repositories": [{"name", "url", "addedAt"}, ...]}``,
    sorted by name. A missing file reads as empty; so does a corrupt one,
    which is logged.

    Args:
        path: Location of ``repositories.json``.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Location of the backing file."""
        return self._path

    def _load(self) -> list[Remote]:
        if not self._path.exists():
            return []

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return RemotesFile.model_validate(data).repositories
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Ignoring unreadable remotes file %s: %s", self._path, exc)
            return []

    def _save(self, remotes: list[Remote]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        document = RemotesFile(repositories=sorted(remotes, key=lambda r: r.name))
        payload = document.model_dump(mode="json", by_alias=True)
        self._path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

    def list_remotes(self) -> list[Remote]:
        """Return all configured remotes."""
        return self._load()

    def get_remote(self, name: str) -> Remote | None:
        """Return the remote called ``name``, or ``None``."""
        return next((r for r in self._load() if r.name == name), None)

    def add_remote(self, name: str, url: str) -> Remote:
        """Add a remote.

        Args:
            name: Remote name.
            url: git URL.

        Returns:
            The stored remote.

        Raises:
            InvalidIdentifierError: If the name or URL is not acceptable.
            RemoteExistsError: If a remote with this name already exists.
        """
        if not is_valid_remote_name(name):
            raise InvalidIdentifierError(
                f"Invalid repository name '{name}'",
                hint="Repository names can only contain letters, numbers, dots, "
                "hyphens, and underscores, and cannot contain '..'.",
                kind="remote name",
                value=name,
            )
        if not is_valid_remote_url(url):
            raise InvalidIdentifierError(
                f"Invalid Git URL: {url}",
                hint="URL must start with http://, https://, git://, ssh://, file:// "
                "or git@, and cannot contain shell metacharacters.",
                kind="url",
                value=url,
            )

        remotes = self._load()
        if any(r.name == name for r in remotes):
            raise RemoteExistsError(f"Repository '{name}' already exists", name=name)

        remote = Remote(name=name, url=url)
        remotes.append(remote)
        self._save(remotes)
        logger.info("Added repository %s (%s)", name, url)
        return remote

    def remove_remote(self, name: str) -> bool:
        """Remove a remote.

        Returns:
            ``True`` when a remote was removed, ``False`` if none matched.
        """
        remotes = self._load()
        remaining = [r for r in remotes if r.name != name]
        if len(remaining) == len(remotes):
            return False
        self._save(remaining)
        logger.info("Removed repository %s", name)
        return True
