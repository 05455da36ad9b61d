"""git process exceptions."""

from __future__ import annotations

from skillsync.errors.exceptions import SkillSyncError


class GitCommandError(SkillSyncError):
    """Raised when a git process exits with a non-zero status.

    Attributes:
        command: Rendered command line.
        returncode: Process exit status.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    def __init__(self, command: str, returncode: int, stdout: str = "", stderr: str = "") -> None:
        """Initialize the error.

        Args:
            command: Rendered command line.
            returncode: Process exit status.
            stdout: Captured standard output.
            stderr: Captured standard error.
        """
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"Command failed with exit code {returncode}: {command}",
            output=self.text or None,
        )

    @property
    def text(self) -> str:
        """Diagnostic text: stderr if present, otherwise stdout."""
        return (self.stderr or self.stdout or "").strip()

    def __reduce__(self) -> tuple:
        """Support pickling by returning constructor arguments."""
        return (type(self), (self.command, self.returncode, self.stdout, self.stderr))

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{type(self).__name__}(command={self.command!r}, "
            f"returncode={self.returncode!r}, stderr={self.stderr!r})"
        )
