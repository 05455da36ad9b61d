"""git integration: client, identifier validation, mirrors, and remediation."""

from __future__ import annotations

from skillsync.git.client import GitClient, GitResult, subprocess_runner
from skillsync.git.errors import GitCommandError
from skillsync.git.mirror import (
    DEFAULT_BRANCHES,
    MirrorState,
    WorkingCopyManager,
    mirror_path_for,
)
from skillsync.git.remediation import (
    MAX_REMOVAL_ATTEMPTS,
    REMOVAL_INTERVAL_SECONDS,
    SUBMODULE_MODE,
    MetadataRemover,
    SubmoduleRecord,
    SubmoduleRemediator,
)
from skillsync.git.validation import (
    escape_for_command,
    is_valid_branch,
    is_valid_name,
    is_valid_remote_name,
    is_valid_remote_url,
    sanitize_branch,
)

__all__ = [
    "DEFAULT_BRANCHES",
    "MAX_REMOVAL_ATTEMPTS",
    "REMOVAL_INTERVAL_SECONDS",
    "SUBMODULE_MODE",
    "GitClient",
    "GitCommandError",
    "GitResult",
    "MetadataRemover",
    "MirrorState",
    "SubmoduleRecord",
    "SubmoduleRemediator",
    "WorkingCopyManager",
    "escape_for_command",
    "is_valid_branch",
    "is_valid_name",
    "is_valid_remote_name",
    "is_valid_remote_url",
    "mirror_path_for",
    "sanitize_branch",
    "subprocess_runner",
]
