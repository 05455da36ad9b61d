"""Root settings for skillsync.

Values come from (highest priority first) constructor arguments, then
``SKILLSYNC_``-prefixed environment variables (nested fields use ``__``,
e.g. ``SKILLSYNC_LOGGING__LEVEL=DEBUG``), then defaults.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from skillsync.config.logging_config import LoggingConfig


class SkillSyncSettings(BaseSettings):
    """Settings for skillsync.

    Attributes:
        config_dir: Directory holding ``repositories.json`` and mirrors.
        git_executable: git executable name or path.
        logging: Logging settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="SKILLSYNC_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    config_dir: Path = Field(
        default=Path("~/.skillsync"),
        description="Directory for remotes configuration and mirrors",
    )
    git_executable: str = Field(default="git", description="git executable")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def _expand_config_dir(self) -> SkillSyncSettings:
        """Expand ``~`` in config_dir to the home directory."""
        self.config_dir = self.config_dir.expanduser()
        return self

    @property
    def repositories_file(self) -> Path:
        """Location of the remotes store."""
        return self.config_dir / "repositories.json"

    @property
    def repos_dir(self) -> Path:
        """Parent directory of remote mirrors."""
        return self.config_dir / "repos"
