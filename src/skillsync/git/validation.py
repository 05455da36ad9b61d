"""Validation of values that reach the git command line.

Names, branches and URLs are checked against fixed allow-lists before git
is started. ``escape_for_command`` renders a value for a double-quoted
shell argument; ``clean_argument`` yields what git receives for that
argument once the shell has unquoted it.
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

FALLBACK_BRANCH = "main"

_NAME_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,255}")
_BRANCH_PATTERN = re.compile(r"[A-Za-z0-9._/-]{1,255}")

URL_PREFIXES: tuple[str, ...] = ("http://", "https://", "git://", "git@", "ssh://", "file://")
URL_FORBIDDEN_CHARS: tuple[str, ...] = ("`", "$", ";", "&", "|", "<", ">", "\n", "\r", "\0")
URL_MAX_LENGTH = 2000


def is_valid_name(value: str) -> bool:
    """1-255 characters from ``[A-Za-z0-9._-]``."""
    return isinstance(value, str) and _NAME_PATTERN.fullmatch(value) is not None


def is_valid_remote_name(value: str) -> bool:
    """A valid name that also contains no ``..`` sequence."""
    return is_valid_name(value) and ".." not in value


def is_valid_branch(value: str) -> bool:
    """1-255 characters from ``[A-Za-z0-9._/-]``."""
    return isinstance(value, str) and _BRANCH_PATTERN.fullmatch(value) is not None


def is_valid_remote_url(value: str) -> bool:
    """Check a repository URL.

    Args:
        value: URL to check.

    Returns:
        ``True`` when it starts with an accepted scheme or SSH form, holds no
        shell metacharacters, and is at most ``URL_MAX_LENGTH`` long.
    """
    if not isinstance(value, str) or not value:
        return False
    if not value.startswith(URL_PREFIXES):
        return False
    if any(char in value for char in URL_FORBIDDEN_CHARS):
        return False
    return len(value) <= URL_MAX_LENGTH


def sanitize_branch(value: str) -> str:
    """Return ``value`` if it is a valid branch name, else ``FALLBACK_BRANCH``."""
    if is_valid_branch(value):
        return value
    logger.warning("Invalid branch name '%s', using '%s' as fallback", value, FALLBACK_BRANCH)
    return FALLBACK_BRANCH


def escape_for_command(value: str) -> str:
    """Escape a value for embedding inside a double-quoted command argument.

    Backslash, double quote, dollar and backtick are escaped; newline,
    carriage return and NUL are removed; tabs become spaces.
    """
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("$", "\\$")
        .replace("`", "\\`")
        .replace("\n", "")
        .replace("\r", "")
        .replace("\0", "")
        .replace("\t", " ")
    )


def clean_argument(value: str) -> str:
    """Return the value git receives for an argument escaped by ``escape_for_command``."""
    return value.replace("\n", "").replace("\r", "").replace("\0", "").replace("\t", " ")


def render_command(args: list[str]) -> str:
    """Render an argument list as a shell command line for logs and hints."""
    rendered = []
    for arg in args:
        if arg and re.fullmatch(r"[A-Za-z0-9._/:=@+-]+", arg):
            rendered.append(arg)
        else:
            rendered.append(f'"{escape_for_command(arg)}"')
    return " ".join(rendered)
