"""Skill bundles: data model, manifest parsing, discovery, and copying.

Quick Start:
    >>> from skillsync.skills import BundleLocator
    >>> locator = BundleLocator()
    >>> bundles = locator.find_all()

Classes:
    BundleLocator: Precedence-ordered discovery across search roots.
    Bundle: A discovered, metadata-valid bundle.
    SearchRoot: One location scanned for bundles.

Enums:
    SkillOrigin: Project or global.
    SearchScope: Universal/scoped, project/global.
"""

from __future__ import annotations

from skillsync.skills.config import (
    SKILL_FILE,
    Bundle,
    SearchRoot,
    SearchScope,
    SkillOrigin,
    default_search_roots,
)
from skillsync.skills.copier import GIT_METADATA_NAMES, CopyStep, copy_tree, plan_copy
from skillsync.skills.discovery import BundleLocator, scan_directory
from skillsync.skills.errors import SkillError, SkillNotFoundError, SkillParseError
from skillsync.skills.manifest import extract_field, has_valid_metadata

__all__ = [
    "GIT_METADATA_NAMES",
    "SKILL_FILE",
    "Bundle",
    "BundleLocator",
    "CopyStep",
    "SearchRoot",
    "SearchScope",
    "SkillError",
    "SkillNotFoundError",
    "SkillOrigin",
    "SkillParseError",
    "copy_tree",
    "default_search_roots",
    "extract_field",
    "has_valid_metadata",
    "plan_copy",
    "scan_directory",
]
