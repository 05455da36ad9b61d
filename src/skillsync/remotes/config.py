"""Remote repository models."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Remote(BaseModel):
    """A named remote repository that skills are uploaded to.

    Attributes:
        name: Unique remote name; also names the local mirror directory.
        url: git URL of the repository.
        added_at: When the remote was added (``addedAt`` on disk).
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(description="Unique remote name")
    url: str = Field(description="git URL of the repository")
    added_at: datetime = Field(
        default_factory=_utcnow,
        alias="addedAt",
        description="When the remote was added",
    )


class RemotesFile(BaseModel):
    """Root structure of ``repositories.json``.

    Attributes:
        repositories: Configured remotes.
    """

    repositories: list[Remote] = Field(
        default_factory=list,
        description="Configured remotes",
    )
