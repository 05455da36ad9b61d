"""SKILL.md manifest parsing.

A manifest starts with a YAML frontmatter block delimited by ``---`` lines.
Discovery only needs two questions answered about it:

- ``has_valid_metadata(content)``: is there a well-formed frontmatter mapping?
- ``extract_field(content, key)``: the string value of one frontmatter key.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from skillsync.skills.errors import SkillNotFoundError, SkillParseError

logger = logging.getLogger(__name__)


def _split_frontmatter(content: str) -> tuple[str, str] | None:
    """Split manifest content into frontmatter YAML and markdown body.

    Only the first pair of ``---`` markers is used, so horizontal rules in
    the body are preserved.

    Returns:
        Tuple of (frontmatter_yaml, body), or ``None`` when either delimiter
        is missing.
    """
    stripped = content.lstrip()
    if not stripped.startswith("---"):
        return None

    lines = stripped.split("\n")
    if lines[0].strip() != "---":
        return None

    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            return "\n".join(lines[1:i]), "\n".join(lines[i + 1 :])

    return None


def _parse_frontmatter(content: str) -> tuple[dict[str, Any] | None, str]:
    """Parse the frontmatter block into a mapping.

    Returns:
        Tuple of (mapping_or_none, reason). The reason is empty on success.
    """
    parts = _split_frontmatter(content)
    if parts is None:
        return None, "missing YAML frontmatter ('---' delimiters)"

    try:
        data = yaml.safe_load(parts[0])
    except yaml.YAMLError as exc:
        detail = str(exc)
        if getattr(exc, "problem_mark", None) is not None:
            mark = exc.problem_mark
            detail = f"YAML syntax error at line {mark.line + 1}, column {mark.column + 1}"
        return None, detail

    if not isinstance(data, dict):
        return None, "frontmatter must be a YAML mapping"

    return data, ""


def has_valid_metadata(content: str) -> bool:
    """Check whether manifest content carries a usable frontmatter mapping.

    Args:
        content: Raw SKILL.md content.

    Returns:
        ``True`` when the frontmatter is delimited and parses to a mapping.
    """
    data, _ = _parse_frontmatter(content)
    return data is not None


def extract_field(content: str, key: str) -> str:
    """Return one frontmatter value as a string.

    Missing keys, ``null`` values and invalid frontmatter all yield ``""``.

    Args:
        content: Raw SKILL.md content.
        key: Frontmatter key to read.

    Returns:
        The value converted to ``str`` and stripped, or an empty string.
    """
    data, _ = _parse_frontmatter(content)
    if not data:
        return ""
    value = data.get(key)
    if value is None:
        return ""
    return str(value).strip()


def read_manifest(path: str | Path) -> str:
    """Read a SKILL.md file and validate its frontmatter.

    Args:
        path: Path to the SKILL.md file.

    Returns:
        The file content.

    Raises:
        SkillNotFoundError: If the file does not exist.
        SkillParseError: If it cannot be read or the frontmatter is invalid.
    """
    file_path = Path(path)
    skill_name = file_path.parent.name or file_path.stem

    if not file_path.is_file():
        raise SkillNotFoundError(name=skill_name, path=file_path)

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SkillParseError(name=skill_name, path=file_path, detail=str(exc)) from exc

    data, reason = _parse_frontmatter(content)
    if data is None:
        raise SkillParseError(name=skill_name, path=file_path, detail=reason)

    return content


def try_read_manifest(path: Path) -> str | None:
    """Read a manifest for discovery, returning ``None`` when it is unusable."""
    try:
        return read_manifest(path)
    except (SkillNotFoundError, SkillParseError) as exc:
        logger.debug("Ignoring %s: %s", path, exc.message)
        return None
