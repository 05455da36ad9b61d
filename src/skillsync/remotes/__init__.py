"""Named remote repositories."""

from __future__ import annotations

from skillsync.remotes.config import Remote, RemotesFile
from skillsync.remotes.directory import RemoteDirectory

__all__ = [
    "Remote",
    "RemoteDirectory",
    "RemotesFile",
]
