"""Error handling."""

from skillsync.errors.exceptions import (
    CloneError,
    CommitError,
    InstallError,
    IntegrityError,
    InvalidIdentifierError,
    InvalidSourceError,
    NestedMetadataError,
    OperationCancelled,
    PathEscapeError,
    PushError,
    RemoteExistsError,
    RemoteNotFoundError,
    SkillSyncError,
    StageError,
)

__all__ = [
    "CloneError",
    "CommitError",
    "InstallError",
    "IntegrityError",
    "InvalidIdentifierError",
    "InvalidSourceError",
    "NestedMetadataError",
    "OperationCancelled",
    "PathEscapeError",
    "PushError",
    "RemoteExistsError",
    "RemoteNotFoundError",
    "SkillSyncError",
    "StageError",
]
