"""Bundle data models, enums, and search-root configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

# Entry file that marks a directory as a bundle.
SKILL_FILE = "SKILL.md"


class SkillOrigin(str, Enum):
    """Where a bundle was found.

    Attributes:
        PROJECT: Found under the current working directory.
        GLOBAL: Found under the user's home directory.
    """

    PROJECT = "project"
    GLOBAL = "global"


class SearchScope(str, Enum):
    """Scope of a search root.

    ``universal`` roots (``.agent/skills``) are shared by every agent;
    ``scoped`` roots (``.claude/skills``) belong to one agent.
    """

    UNIVERSAL_PROJECT = "universal-project"
    UNIVERSAL_GLOBAL = "universal-global"
    SCOPED_PROJECT = "scoped-project"
    SCOPED_GLOBAL = "scoped-global"


@dataclass(frozen=True)
class SearchRoot:
    """One location scanned for bundles.

    Attributes:
        path: Directory to scan.
        origin: Origin assigned to bundles found here.
        scope: Scope of this root.
    """

    path: Path
    origin: SkillOrigin
    scope: SearchScope


@dataclass
class Bundle:
    """A discovered, metadata-valid bundle.

    Attributes:
        name: Bundle identifier (the bundle directory's name).
        description: ``description`` field of the manifest, or empty.
        path: Absolute bundle directory containing ``SKILL.md``.
        search_root: Root directory the bundle was found under.
        origin: Project or global.
        scope: Scope of the root the bundle was found under.
    """

    name: str
    description: str
    path: Path
    search_root: Path
    origin: SkillOrigin
    scope: SearchScope

    @property
    def skill_file(self) -> Path:
        """Path to the bundle's ``SKILL.md``."""
        return self.path / SKILL_FILE


def default_search_roots(
    cwd: str | Path | None = None,
    home: str | Path | None = None,
) -> list[SearchRoot]:
    """Build the fixed search-root list in precedence order.

    Precedence (highest to lowest):
    1. ``<cwd>/.agent/skills``
    2. ``~/.agent/skills``
    3. ``<cwd>/.claude/skills``
    4. ``~/.claude/skills``

    Args:
        cwd: Project directory. Defaults to the current working directory.
        home: Home directory. Defaults to ``Path.home()``.

    Returns:
        Search roots ordered by precedence.
    """
    project = Path(cwd) if cwd is not None else Path.cwd()
    user = Path(home) if home is not None else Path.home()

    return [
        SearchRoot(project / ".agent" / "skills", SkillOrigin.PROJECT, SearchScope.UNIVERSAL_PROJECT),
        SearchRoot(user / ".agent" / "skills", SkillOrigin.GLOBAL, SearchScope.UNIVERSAL_GLOBAL),
        SearchRoot(project / ".claude" / "skills", SkillOrigin.PROJECT, SearchScope.SCOPED_PROJECT),
        SearchRoot(user / ".claude" / "skills", SkillOrigin.GLOBAL, SearchScope.SCOPED_GLOBAL),
    ]
