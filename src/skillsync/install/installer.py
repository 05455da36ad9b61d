"""Install skills from a local path, git URL, or GitHub shorthand.

Sources:
- local path: starts with ``/``, ``./``, ``../`` or ``~/``
- git URL: ``git@``, ``git://``, ``ssh://``, ``file://``, ``http(s)://`` or a ``.git`` suffix
- shorthand: ``owner/repo`` or ``owner/repo/path/to/skill`` on GitHub

A source that is itself a skill (or names one by subpath) installs that
skill; otherwise every skill found inside it is offered for selection.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from skillsync.errors.exceptions import (
    CloneError,
    InstallError,
    InvalidSourceError,
    PathEscapeError,
)
from skillsync.git.client import GitClient
from skillsync.git.errors import GitCommandError
from skillsync.prompts import Choice, Confirm, Select, accept_all
from skillsync.skills.config import SKILL_FILE
from skillsync.skills.copier import copy_tree
from skillsync.skills.discovery import scan_directory
from skillsync.skills.errors import SkillNotFoundError, SkillParseError
from skillsync.skills.manifest import read_manifest

logger = logging.getLogger(__name__)

GITHUB_BASE_URL = "https://github.com"
PRIVATE_REPO_HINT = "For private repos, ensure git SSH keys or credentials are configured"

# Skills published in Anthropic's marketplace. A global install under one of
# these names can be replaced when the marketplace plugins are re-enabled.
MARKETPLACE_SKILLS: frozenset[str] = frozenset(
    {
        "algorithmic-art",
        "artifacts-builder",
        "brand-guidelines",
        "canvas-design",
        "docx",
        "frontend-design",
        "internal-comms",
        "mcp-builder",
        "pdf",
        "pptx",
        "skill-creator",
        "slack-gif-creator",
        "template-skill",
        "theme-factory",
        "webapp-testing",
        "xlsx",
    }
)


class SourceKind(str, Enum):
    """Kind of install source."""

    LOCAL = "local"
    GIT = "git"
    GITHUB = "github"


@dataclass(frozen=True)
class InstallSource:
    """A parsed install source.

    Attributes:
        kind: Local path, git URL, or GitHub shorthand.
        location: Local path or repository URL.
        subpath: Skill directory inside the repository, if given.
    """

    kind: SourceKind
    location: str
    subpath: str = ""

    @property
    def is_remote(self) -> bool:
        return self.kind is not SourceKind.LOCAL


@dataclass
class InstallOptions:
    """Options for an install.

    Attributes:
        global_install: Install under the home directory instead of the project.
        universal: Use ``.agent/skills`` instead of ``.claude/skills``.
        yes: Skip selection and overwrite prompts.
    """

    global_install: bool = False
    universal: bool = False
    yes: bool = False


@dataclass
class InstallResult:
    """Outcome of an install.

    Attributes:
        target_dir: Directory skills were installed into.
        installed: Installed skill names.
        skipped: Skills the user chose not to overwrite.
        rejected: Skills whose destination left ``target_dir``.
        conflicts: Globally installed skills named like a marketplace skill.
    """

    target_dir: Path
    installed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    rejected: list[str] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)


def is_local_path(source: str) -> bool:
    return source.startswith(("/", "./", "../", "~/"))


def is_git_url(source: str) -> bool:
    return source.startswith(("git@", "git://", "ssh://", "file://", "http://", "https://")) or source.endswith(".git")


def expand_path(source: str, home: Path | None = None) -> Path:
    """Expand ``~/`` against ``home`` and make the path absolute."""
    if source.startswith("~/"):
        return (home or Path.home()) / source[2:]
    return Path(source).resolve()


def parse_source(source: str, home: Path | None = None) -> InstallSource:
    """Classify an install source.

    Raises:
        InvalidSourceError: If the source matches no accepted form.
    """
    if is_local_path(source):
        return InstallSource(SourceKind.LOCAL, str(expand_path(source, home)))
    if is_git_url(source):
        return InstallSource(SourceKind.GIT, source)

    parts = source.split("/")
    if len(parts) >= 2 and all(parts):
        url = f"{GITHUB_BASE_URL}/{parts[0]}/{parts[1]}"
        return InstallSource(SourceKind.GITHUB, url, "/".join(parts[2:]))

    raise InvalidSourceError(
        f"Invalid source format: {source}",
        hint="Expected: owner/repo, owner/repo/skill-name, git URL, or local path",
        source=source,
    )


def is_nested(parent: str | Path, child: str | Path) -> bool:
    """Whether ``child`` lies strictly below ``parent`` (both already resolved)."""
    return Path(parent) in Path(child).parents


def directory_size(path: str | Path) -> int:
    """Total size in bytes of the regular files below ``path`` (links not followed)."""
    total = 0
    for dirpath, _dirnames, filenames in os.walk(path):
        for filename in filenames:
            file_path = os.path.join(dirpath, filename)
            if not os.path.islink(file_path):
                total += os.path.getsize(file_path)
    return total


def format_size(size: int) -> str:
    """Human-readable size: ``512B``, ``1.5KB``, ``2.0MB``."""
    if size < 1024:
        return f"{size}B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f}KB"
    return f"{size / (1024 * 1024):.1f}MB"


def install_target_dir(options: InstallOptions, cwd: Path, home: Path) -> Path:
    folder = Path(".agent/skills") if options.universal else Path(".claude/skills")
    return (home if options.global_install else cwd) / folder


def ensure_within(root: str | Path, candidate: str | Path) -> Path:
    """Check that ``candidate`` is lexically inside ``root``.

    Returns:
        The normalized candidate path.

    Raises:
        PathEscapeError: If the candidate is ``root`` itself or outside it.
    """
    base = Path(os.path.normpath(os.path.abspath(root)))
    path = Path(os.path.normpath(os.path.abspath(candidate)))
    if path == base or base not in path.parents:
        raise PathEscapeError(
            "Installation path outside target directory",
            root=base,
            path=path,
        )
    return path


class SkillInstaller:
    """Install skills into a project or global skills directory.

    Args:
        git: git client used for cloning remote sources.
        confirm: Overwrite confirmation callback.
        select: Multi-selection callback for sources holding several skills.
        cwd: Project directory. Defaults to the current working directory.
        home: Home directory. Defaults to ``Path.home()``.
    """

    def __init__(
        self,
        git: GitClient,
        confirm: Confirm | None = None,
        select: Select | None = None,
        cwd: str | Path | None = None,
        home: str | Path | None = None,
    ) -> None:
        self._git = git
        self._confirm = confirm or accept_all
        self._select = select
        self._cwd = Path(cwd) if cwd is not None else Path.cwd()
        self._home = Path(home) if home is not None else Path.home()

    def install(self, source: str, options: InstallOptions | None = None) -> InstallResult:
        """Install skills from ``source``.

        Raises:
            InvalidSourceError: If the source cannot be parsed.
            CloneError: If a remote source cannot be cloned.
            InstallError: If the source holds no valid skill.
            OperationCancelled: If the user interrupts a prompt.
        """
        opts = options or InstallOptions()
        target_dir = install_target_dir(opts, self._cwd, self._home)
        parsed = parse_source(source, self._home)
        logger.info("Installing from %s into %s", source, target_dir)

        if not parsed.is_remote:
            return self._install_local(Path(parsed.location), target_dir, opts)

        with tempfile.TemporaryDirectory(prefix="skillsync-") as tmp:
            repo_dir = Path(tmp) / "repo"
            try:
                self._git.clone(parsed.location, repo_dir, depth=1)
            except GitCommandError as exc:
                raise CloneError(
                    "Failed to clone repository",
                    output=exc.text,
                    hint=PRIVATE_REPO_HINT,
                    cause=exc,
                    url=parsed.location,
                    destination=repo_dir,
                ) from exc

            if parsed.subpath:
                return self._install_single(repo_dir / parsed.subpath, target_dir, opts, source)
            return self._install_many(repo_dir, target_dir, opts, source)

    def install_bundle(
        self,
        bundle_dir: Path,
        name: str,
        target_dir: Path,
        options: InstallOptions,
        result: InstallResult,
    ) -> None:
        """Copy one skill into ``target_dir`` and record the outcome in ``result``."""
        try:
            target = ensure_within(target_dir, target_dir / name)
        except PathEscapeError as exc:
            logger.error("Security error: %s (%s)", exc.message, exc.path)
            result.rejected.append(name)
            return

        source_real = os.path.realpath(bundle_dir)
        target_real = os.path.realpath(target)
        if source_real == target_real:
            logger.warning("Skill '%s' is already installed at %s", name, target)
            result.skipped.append(name)
            return
        if is_nested(source_real, target_real) or is_nested(target_real, source_real):
            raise InstallError(
                f"Cannot install {name}: source and destination overlap",
                hint="Install from a directory outside the target skills directory",
                source=str(bundle_dir),
                path=target,
            )

        if os.path.lexists(target):
            if options.yes:
                logger.info("Overwriting: %s", name)
            elif not self._confirm(f"Skill '{name}' already exists. Overwrite?"):
                logger.info("Skipped: %s", name)
                result.skipped.append(name)
                return
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()

        if options.global_install and name in MARKETPLACE_SKILLS:
            logger.warning("'%s' matches an Anthropic marketplace skill", name)
            result.conflicts.append(name)

        copy_tree(bundle_dir, target, exclude={".git"})
        logger.info("Installed: %s -> %s", name, target)
        result.installed.append(name)

    def _install_local(self, path: Path, target_dir: Path, options: InstallOptions) -> InstallResult:
        if not path.exists():
            raise InstallError(f"Path does not exist: {path}", source=str(path))
        if not path.is_dir():
            raise InstallError("Path must be a directory", source=str(path))

        if (path / SKILL_FILE).exists():
            return self._install_single(path, target_dir, options, str(path))
        return self._install_many(path, target_dir, options, str(path))

    def _install_single(
        self,
        skill_dir: Path,
        target_dir: Path,
        options: InstallOptions,
        source: str,
    ) -> InstallResult:
        try:
            read_manifest(skill_dir / SKILL_FILE)
        except SkillNotFoundError as exc:
            raise InstallError(f"SKILL.md not found at {skill_dir}", cause=exc, source=source) from exc
        except SkillParseError as exc:
            raise InstallError(
                "Invalid SKILL.md (missing YAML frontmatter)",
                cause=exc,
                source=source,
            ) from exc

        result = InstallResult(target_dir=target_dir)
        self.install_bundle(skill_dir, skill_dir.name, target_dir, options, result)
        return result

    def _install_many(
        self,
        repo_dir: Path,
        target_dir: Path,
        options: InstallOptions,
        source: str,
    ) -> InstallResult:
        bundles = scan_directory(repo_dir)
        if not bundles:
            raise InstallError("No valid SKILL.md files found", source=source)
        logger.info("Found %d skill(s)", len(bundles))

        selected = bundles
        if not options.yes and len(bundles) > 1 and self._select is not None:
            choices: Sequence[Choice] = [
                Choice(
                    value=str(b.path),
                    label=b.name,
                    description=b.description[:80],
                    detail=format_size(directory_size(b.path)),
                )
                for b in bundles
            ]
            picked = set(self._select("Select skills to install", choices))
            selected = [b for b in bundles if str(b.path) in picked]

        result = InstallResult(target_dir=target_dir)
        if not selected:
            logger.info("No skills selected. Installation cancelled.")
            return result

        for bundle in selected:
            self.install_bundle(bundle.path, bundle.name, target_dir, options, result)
        return result
