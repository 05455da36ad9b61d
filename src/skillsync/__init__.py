"""
skillsync - install, share and upload agent skill bundles.

A skill bundle is a directory holding a ``SKILL.md`` file with YAML
frontmatter. skillsync discovers installed bundles, installs new ones from
local paths or git repositories, and uploads bundles into a ``skills/``
folder of a configured git repository.

Quick Start:
    >>> from skillsync import BundleLocator
    >>> bundles = BundleLocator().find_all()

Uploading:
    >>> from functools import partial
    >>> from skillsync import (
    ...     GitClient, PublishPipeline, RemoteDirectory, SkillSyncSettings,
    ...     WorkingCopyManager, mirror_path_for,
    ... )
    >>> settings = SkillSyncSettings()
    >>> git = GitClient(settings.git_executable)
    >>> pipeline = PublishPipeline(
    ...     git,
    ...     RemoteDirectory(settings.repositories_file),
    ...     WorkingCopyManager(git, partial(mirror_path_for, settings.repos_dir)),
    ... )
    >>> result = pipeline.publish([bundles["my-skill"]], "team")
"""

__version__ = "0.1.0"

from skillsync.config import LoggingConfig, SkillSyncSettings, configure_logging
from skillsync.errors import SkillSyncError
from skillsync.git import GitClient, WorkingCopyManager, mirror_path_for
from skillsync.install import InstallOptions, InstallResult, SkillInstaller
from skillsync.publish import PublishOptions, PublishPipeline, PublishResult, PublishStatus
from skillsync.remotes import Remote, RemoteDirectory
from skillsync.skills import Bundle, BundleLocator, scan_directory

__all__ = [
    "Bundle",
    "BundleLocator",
    "GitClient",
    "InstallOptions",
    "InstallResult",
    "LoggingConfig",
    "PublishOptions",
    "PublishPipeline",
    "PublishResult",
    "PublishStatus",
    "Remote",
    "RemoteDirectory",
    "SkillInstaller",
    "SkillSyncError",
    "SkillSyncSettings",
    "WorkingCopyManager",
    "__version__",
    "configure_logging",
    "mirror_path_for",
    "scan_directory",
]
