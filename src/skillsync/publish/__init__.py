"""Upload of installed skills to remote repositories."""

from __future__ import annotations

from skillsync.publish.pipeline import (
    SKILLS_DIR,
    PublishOptions,
    PublishPipeline,
    PublishResult,
    PublishStatus,
    default_commit_message,
    push_hint,
    push_with_fallback,
    resolve_bundles,
)

__all__ = [
    "SKILLS_DIR",
    "PublishOptions",
    "PublishPipeline",
    "PublishResult",
    "PublishStatus",
    "default_commit_message",
    "push_hint",
    "push_with_fallback",
    "resolve_bundles",
]
