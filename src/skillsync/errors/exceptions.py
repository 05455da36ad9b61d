"""Custom exception hierarchy for skillsync."""

from __future__ import annotations

from typing import Any, ClassVar


class SkillSyncError(Exception):
    """Base exception for all skillsync errors.

    All custom exceptions in this package inherit from this class,
    allowing the CLI to report every fatal condition with a single handler.

    Attributes:
        message: Human-readable error message.
        cause: Original exception that caused this error.
        hint: One targeted remediation hint for the operator.
        output: Captured diagnostic output of an external process, verbatim.
        details: Additional error context as key-value pairs.

    Details can be accessed as attributes (e.g., error.path).
    """

    # Map attribute names to default values when not in details
    _defaults: ClassVar[dict[str, Any]] = {}

    def __init__(
        self,
        message: str,
        *,
        cause: Exception | None = None,
        hint: str | None = None,
        output: str | None = None,
        **details: Any,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            cause: Original exception that caused this error.
            hint: Remediation hint shown after the message.
            output: Captured stderr/stdout of the failing process.
            **details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.hint = hint
        self.output = output
        self.details = details

    def __getattr__(self, name: str) -> Any:
        """Access details as attributes."""
        # Guard against recursion before __init__ has run (e.g. unpickling).
        if name == "details":
            raise AttributeError(name)
        if name in self.details:
            return self.details[name]
        if name in self._defaults:
            return self._defaults[name]
        raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")

    def __str__(self) -> str:
        """Return string representation."""
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class InvalidIdentifierError(SkillSyncError):
    """A name, branch, or URL is unsafe to hand to git.

    Raised before any external process is started.

    Attributes from details: kind, value.
    """


class RemoteNotFoundError(SkillSyncError):
    """No remote repository is configured under the requested name.

    Attributes from details: name.
    """


class RemoteExistsError(SkillSyncError):
    """A remote repository with the same name is already configured.

    Attributes from details: name.
    """


class CloneError(SkillSyncError):
    """Cloning a repository failed.

    Attributes from details: url, destination.
    """


class StageError(SkillSyncError):
    """Adding published files to the index failed."""


class CommitError(SkillSyncError):
    """Committing published files failed."""


class PushError(SkillSyncError):
    """Pushing to the remote failed on every candidate branch.

    Attributes from details: branches (default: empty tuple).
    """

    _defaults: ClassVar[dict[str, Any]] = {"branches": ()}


class IntegrityError(SkillSyncError):
    """A copied bundle failed post-copy verification.

    Attributes from details: name, path.
    """


class NestedMetadataError(IntegrityError):
    """A nested ``.git`` entry could not be removed.

    Attributes from details: path, attempts, delete_command.
    """


class InstallError(SkillSyncError):
    """Installing a bundle failed.

    Attributes from details: source.
    """


class InvalidSourceError(InstallError):
    """An install source is neither a local path, git URL nor shorthand."""


class PathEscapeError(InstallError):
    """A computed destination lies outside its destination root.

    Attributes from details: root, path.
    """


class OperationCancelled(SkillSyncError):
    """The user interrupted a prompt.

    Distinct from a declined confirmation, which only skips one item.
    """

    def __init__(self, message: str = "Cancelled by user", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
