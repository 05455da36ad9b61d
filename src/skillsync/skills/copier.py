"""Plan-then-execute tree copy for bundles.

``plan_copy`` walks a source tree and returns the list of steps needed to
reproduce it at a destination; ``execute_plan`` performs them. Splitting
the two keeps the exclusion and symlink rules testable without I/O.

Rules:
- Entries named in ``exclude`` are skipped at every nesting level.
- Symlinks are dereferenced: a link to a file copies the file content, a
  link to a directory copies the directory's contents. Broken links are
  skipped.
- A directory reached again through a link on the current path is skipped.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

# Version-control files that must never be published inside a bundle.
GIT_METADATA_NAMES: frozenset[str] = frozenset({".git", ".gitignore", ".gitattributes"})


class StepKind(str, Enum):
    """Kind of a copy step."""

    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True)
class CopyStep:
    """One action of a copy plan.

    Attributes:
        source: Source path (may be a symlink; it is read through).
        destination: Destination path.
        kind: Whether to create a directory or copy a file.
    """

    source: Path
    destination: Path
    kind: StepKind


def plan_copy(
    source: str | Path,
    destination: str | Path,
    exclude: Iterable[str] = GIT_METADATA_NAMES,
) -> list[CopyStep]:
    """Build the copy plan for ``source`` into ``destination``.

    The destination root itself is not part of the plan; callers create it.

    Args:
        source: Source directory.
        destination: Destination directory.
        exclude: Entry names skipped at every level.

    Returns:
        Steps in an order safe to execute (parents before children).
    """
    excluded = frozenset(exclude)
    steps: list[CopyStep] = []
    src_root = Path(source)
    dest_root = Path(destination)

    def _walk(src: Path, dest: Path, ancestors: frozenset[Path]) -> None:
        try:
            entries = sorted(os.scandir(src), key=lambda e: e.name)
        except OSError as exc:
            logger.warning("Cannot read %s: %s", src, exc)
            return

        for entry in entries:
            if entry.name in excluded:
                continue

            src_path = Path(entry.path)
            dest_path = dest / entry.name

            try:
                # Follows symlinks, so a link reports what it points to.
                is_dir = entry.is_dir()
                is_file = entry.is_file()
            except OSError:
                continue

            if is_dir:
                real = src_path.resolve()
                if real in ancestors:
                    logger.debug("Skipping directory link cycle at %s", src_path)
                    continue
                steps.append(CopyStep(src_path, dest_path, StepKind.DIRECTORY))
                _walk(src_path, dest_path, ancestors | {real})
            elif is_file:
                steps.append(CopyStep(src_path, dest_path, StepKind.FILE))
            elif entry.is_symlink():
                logger.debug("Skipping broken symlink %s", src_path)

    _walk(src_root, dest_root, frozenset({src_root.resolve()}))
    return steps


def execute_plan(steps: Iterable[CopyStep]) -> int:
    """Perform a copy plan.

    Args:
        steps: Steps from ``plan_copy``.

    Returns:
        Number of files copied.
    """
    copied = 0
    for step in steps:
        if step.kind is StepKind.DIRECTORY:
            step.destination.mkdir(parents=True, exist_ok=True)
        else:
            step.destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(step.source, step.destination)
            copied += 1
    return copied


def copy_tree(
    source: str | Path,
    destination: str | Path,
    exclude: Iterable[str] = GIT_METADATA_NAMES,
) -> int:
    """Copy a bundle tree, creating ``destination`` if needed.

    Returns:
        Number of files copied.
    """
    dest = Path(destination)
    dest.mkdir(parents=True, exist_ok=True)
    return execute_plan(plan_copy(source, dest, exclude))
