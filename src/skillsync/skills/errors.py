"""Skill lookup and manifest exceptions."""

from __future__ import annotations

from pathlib import Path

from skillsync.errors.exceptions import SkillSyncError


class SkillError(SkillSyncError):
    """Base exception for skill lookup and manifest errors."""

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return f"{type(self).__name__}({self.message!r})"


class SkillNotFoundError(SkillError):
    """Raised when no installed skill or manifest matches.

    Attributes:
        name: Skill name that was not found.
        path: Filesystem path that was checked, if any.
    """

    def __init__(self, name: str, path: str | Path | None = None) -> None:
        """Initialize the error.

        Args:
            name: Skill name that was not found.
            path: Filesystem path that was checked, if any.
        """
        self.name = name
        self.path = Path(path) if path is not None else None
        where = f" at path: {self.path}" if self.path else ""
        super().__init__(f"Skill '{name}' not found{where}")

    def __reduce__(self) -> tuple:
        """Support pickling by returning constructor arguments."""
        return (type(self), (self.name, str(self.path) if self.path else None))

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        path = str(self.path) if self.path else None
        return f"{type(self).__name__}(name={self.name!r}, path={path!r})"


class SkillParseError(SkillError):
    """Raised when SKILL.md frontmatter is missing or malformed.

    Attributes:
        name: Skill name whose frontmatter failed to parse.
        path: Filesystem path of the SKILL.md file.
        detail: Description of the parse error.
    """

    def __init__(self, name: str, path: str | Path, detail: str) -> None:
        """Initialize the error.

        Args:
            name: Skill name whose frontmatter failed to parse.
            path: Filesystem path of the SKILL.md file.
            detail: Description of the parse error.
        """
        self.name = name
        self.path = Path(path)
        self.detail = detail
        super().__init__(f"Invalid SKILL.md for skill '{name}' at {self.path}: {detail}")

    def __reduce__(self) -> tuple:
        """Support pickling by returning constructor arguments."""
        return (type(self), (self.name, str(self.path), self.detail))

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"path={str(self.path)!r}, detail={self.detail!r})"
        )
