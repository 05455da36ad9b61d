"""Bundle discovery across the fixed search roots.

Scans each search root recursively for directories holding a valid
``SKILL.md`` and merges the results into one mapping keyed by bundle name.

Priority (highest to lowest) follows the order of the roots; see
``default_search_roots``. When two roots hold a bundle with the same name,
the first one wins and later ones are never consulted for that name.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Sequence
from pathlib import Path

from skillsync.skills.config import (
    SKILL_FILE,
    Bundle,
    SearchRoot,
    SearchScope,
    SkillOrigin,
    default_search_roots,
)
from skillsync.skills.manifest import extract_field, try_read_manifest

logger = logging.getLogger(__name__)


def _subdirectories(path: Path) -> list[Path]:
    """Return child directories (following symlinks) in sorted order."""
    try:
        entries = sorted(os.scandir(path), key=lambda e: e.name)
    except (PermissionError, FileNotFoundError, NotADirectoryError):
        logger.warning("Cannot list directory, skipping: %s", path)
        return []

    children: list[Path] = []
    for entry in entries:
        try:
            if entry.is_dir():
                children.append(Path(entry.path))
        except OSError:
            continue
    return children


def iter_bundle_dirs(path: Path) -> Iterator[tuple[Path, str]]:
    """Yield ``(bundle_dir, manifest_content)`` for every valid bundle under ``path``.

    A directory containing ``SKILL.md`` is a leaf: it is yielded when the
    manifest is valid and never descended into. Other directories are
    searched recursively. Symlinked directories are followed; a directory
    already on the current path is not entered twice.

    Args:
        path: Directory to scan.
    """
    if not path.is_dir():
        logger.debug("Skills directory does not exist, skipping: %s", path)
        return

    def _walk(directory: Path, ancestors: frozenset[Path]) -> Iterator[tuple[Path, str]]:
        for child in _subdirectories(directory):
            skill_md = child / SKILL_FILE
            if skill_md.exists():
                content = try_read_manifest(skill_md)
                if content is not None:
                    yield child, content
                continue

            real = child.resolve()
            if real in ancestors:
                logger.debug("Skipping symlink cycle at %s", child)
                continue
            yield from _walk(child, ancestors | {real})

    yield from _walk(path, frozenset({path.resolve()}))


def scan_directory(
    path: Path,
    origin: SkillOrigin = SkillOrigin.PROJECT,
    scope: SearchScope = SearchScope.SCOPED_PROJECT,
) -> list[Bundle]:
    """Scan a single directory tree for bundles.

    Args:
        path: Directory to scan.
        origin: Origin to assign to discovered bundles.
        scope: Scope to assign to discovered bundles.

    Returns:
        Bundles in traversal order. Names may repeat when nested
        directories share a name.
    """
    root = Path(os.path.abspath(path))
    return [
        Bundle(
            name=bundle_dir.name,
            description=extract_field(content, "description"),
            path=bundle_dir,
            search_root=root,
            origin=origin,
            scope=scope,
        )
        for bundle_dir, content in iter_bundle_dirs(root)
    ]


class BundleLocator:
    """Resolve installed bundles across ordered search roots.

    Example::

        locator = BundleLocator()
        bundles = locator.find_all()
        pdf = locator.find("pdf")

    Args:
        roots: Search roots in precedence order. Defaults to
            ``default_search_roots()``.
    """

    def __init__(self, roots: Sequence[SearchRoot] | None = None) -> None:
        self._roots = list(roots) if roots is not None else default_search_roots()

    @property
    def roots(self) -> list[SearchRoot]:
        """Search roots in precedence order."""
        return list(self._roots)

    def scan(self, root: SearchRoot) -> list[Bundle]:
        """Scan one search root."""
        return scan_directory(root.path, root.origin, root.scope)

    def find_all(self) -> dict[str, Bundle]:
        """Build the resolved set.

        Returns:
            Mapping of bundle name to the highest-precedence bundle, in
            insertion (precedence, then traversal) order.
        """
        resolved: dict[str, Bundle] = {}

        for root in self._roots:
            for bundle in self.scan(root):
                existing = resolved.get(bundle.name)
                if existing is not None:
                    if existing.path != bundle.path:
                        logger.info(
                            "Skill '%s' from %s (path: %s) shadows %s (path: %s)",
                            bundle.name,
                            existing.scope.value,
                            existing.path,
                            bundle.scope.value,
                            bundle.path,
                        )
                    continue
                resolved[bundle.name] = bundle

        return resolved

    def find(self, name: str) -> Bundle | None:
        """Find one bundle by name.

        Stops at the first match in precedence order.

        Args:
            name: Bundle name.

        Returns:
            The matching bundle, or ``None``.
        """
        for root in self._roots:
            for bundle_dir, content in iter_bundle_dirs(Path(os.path.abspath(root.path))):
                if bundle_dir.name == name:
                    return Bundle(
                        name=name,
                        description=extract_field(content, "description"),
                        path=bundle_dir,
                        search_root=Path(os.path.abspath(root.path)),
                        origin=root.origin,
                        scope=root.scope,
                    )
        return None
