"""Configuration system for skillsync.

Main exports:
- SkillSyncSettings: Root configuration class
- LoggingConfig: Logging configuration
"""

from skillsync.config.logging_config import LoggingConfig, configure_logging
from skillsync.config.settings import SkillSyncSettings

__all__ = [
    "LoggingConfig",
    "SkillSyncSettings",
    "configure_logging",
]
