"""Skill installation from local paths and git repositories."""

from __future__ import annotations

from skillsync.install.installer import (
    MARKETPLACE_SKILLS,
    InstallOptions,
    InstallResult,
    InstallSource,
    SkillInstaller,
    SourceKind,
    directory_size,
    ensure_within,
    format_size,
    install_target_dir,
    parse_source,
)

__all__ = [
    "MARKETPLACE_SKILLS",
    "InstallOptions",
    "InstallResult",
    "InstallSource",
    "SkillInstaller",
    "SourceKind",
    "directory_size",
    "ensure_within",
    "format_size",
    "install_target_dir",
    "parse_source",
]
