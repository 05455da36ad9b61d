"""Upload of installed skills into a remote repository.

Repository layout: every skill lives at ``skills/<skill-name>/`` as plain
tracked files. One ``publish`` call:

- validates the remote and every skill name before git is started,
- prepares the remote's mirror (clone or fetch + pull),
- per skill: asks before overwriting, remediates nested repositories,
  recreates the target, copies the skill and verifies the copy,
- stages, commits once, and pushes with branch fallback.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from skillsync.errors.exceptions import (
    CommitError,
    IntegrityError,
    InvalidIdentifierError,
    PushError,
    RemoteNotFoundError,
    StageError,
)
from skillsync.git.client import GitClient
from skillsync.git.errors import GitCommandError
from skillsync.git.mirror import CREDENTIALS_HINT, WorkingCopyManager, branch_candidates
from skillsync.git.remediation import MetadataRemover, SubmoduleRemediator
from skillsync.git.validation import (
    is_valid_name,
    is_valid_remote_name,
    is_valid_remote_url,
    render_command,
    sanitize_branch,
)
from skillsync.prompts import Confirm, accept_all
from skillsync.remotes.config import Remote
from skillsync.remotes.directory import RemoteDirectory
from skillsync.skills.config import SKILL_FILE, Bundle
from skillsync.skills.copier import copy_tree
from skillsync.skills.discovery import BundleLocator
from skillsync.skills.errors import SkillNotFoundError

logger = logging.getLogger(__name__)

SKILLS_DIR = "skills"

_NOTHING_TO_COMMIT = ("nothing to commit", "nothing added to commit")
_IDENTITY_MARKERS = ("author", "user.name", "user.email")
_AUTH_MARKERS = ("authentication", "permission", "denied")
_REJECTED_MARKERS = ("rejected", "non-fast-forward")
_UPSTREAM_MARKERS = ("no upstream", "no tracking", "could not read", "refs/heads/", "src refspec")


class PublishStatus(str, Enum):
    """Outcome of a publish that did not fail."""

    PUSHED = "pushed"
    NO_CHANGES = "no_changes"


@dataclass
class PublishOptions:
    """Options for one publish.

    Attributes:
        commit_message: Commit message; generated from the skill names if unset.
        skip_confirmations: Overwrite existing skills without asking.
    """

    commit_message: str | None = None
    skip_confirmations: bool = False


@dataclass
class PublishResult:
    """Outcome of a publish.

    Attributes:
        remote: Remote name.
        status: Pushed or no changes.
        published: Skills copied into the mirror.
        skipped: Skills the user chose not to overwrite.
        branch: Branch pushed to, when pushed.
        commit_message: Message of the upload commit, when committed.
        mirror_path: Local mirror directory.
    """

    remote: str
    status: PublishStatus
    published: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    branch: str | None = None
    commit_message: str | None = None
    mirror_path: Path | None = None


def default_commit_message(names: Sequence[str]) -> str:
    """Commit message naming the uploaded skill(s)."""
    if len(names) == 1:
        return f"Upload skill: {names[0]}"
    return f"Upload {len(names)} skills: {', '.join(names)}"


def resolve_bundles(locator: BundleLocator, names: Iterable[str] | None) -> list[Bundle]:
    """Resolve skill names to installed bundles.

    Args:
        locator: Bundle locator.
        names: Skill names, or ``None`` for every resolved skill.

    Returns:
        Bundles in the requested order (precedence order for ``None``).

    Raises:
        SkillNotFoundError: If a named skill is not installed.
    """
    if names is None:
        return list(locator.find_all().values())

    bundles: list[Bundle] = []
    for name in names:
        bundle = locator.find(name)
        if bundle is None:
            raise SkillNotFoundError(name)
        bundles.append(bundle)
    return bundles


def push_hint(text: str, branch: str) -> str | None:
    """Pick one remediation hint for a push failure's diagnostic text."""
    lowered = text.lower()
    if any(marker in lowered for marker in _AUTH_MARKERS):
        return CREDENTIALS_HINT
    if any(marker in lowered for marker in _REJECTED_MARKERS):
        return (
            "Remote has changes that you don't have. Try:\n"
            f"  git pull origin {branch} --rebase\n"
            f"  git push origin {branch}"
        )
    if any(marker in lowered for marker in _UPSTREAM_MARKERS):
        return f"The branch may not exist on remote. Try:\n  git push -u origin {branch}"
    return None


def is_missing_branch(text: str, branch: str) -> bool:
    """Whether a push failure says ``branch`` is missing locally or remotely."""
    return (
        f"refs/heads/{branch}" in text
        or f"src refspec {branch} does not match" in text
        or "could not read" in text.lower()
    )


def push_with_fallback(git: GitClient, repo_dir: Path, current_branch: str) -> str:
    """Push to the current branch, falling back to the default branches.

    The current branch is pushed with ``-u``. A failure that says the branch
    does not exist (locally or on the remote) advances to the next
    candidate; any other failure stops. The error raised on exhaustion
    carries the output of every attempt.

    Args:
        git: git client.
        repo_dir: Mirror directory.
        current_branch: Checked-out branch of the mirror.

    Returns:
        The branch that was pushed.

    Raises:
        PushError: If no remote is configured or every attempt failed.
    """
    try:
        remote_url = git.remote_url(repo_dir)
    except GitCommandError as exc:
        raise PushError(
            "No remote repository configured",
            output=exc.text,
            cause=exc,
        ) from exc
    logger.info("Remote: %s", remote_url)

    attempted: list[str] = []
    outputs: list[str] = []
    last_error: GitCommandError | None = None

    for branch in branch_candidates(current_branch):
        safe_branch = sanitize_branch(branch)
        attempted.append(safe_branch)
        try:
            git.push(repo_dir, safe_branch, set_upstream=branch == current_branch)
            return safe_branch
        except GitCommandError as exc:
            last_error = exc
            if exc.text and exc.text not in outputs:
                outputs.append(exc.text)
            if is_missing_branch(exc.text, safe_branch):
                logger.info("Push to %s failed, trying next branch", safe_branch)
                continue
            break

    text = "\n".join(outputs)
    raise PushError(
        "Failed to push to remote",
        output=text,
        hint=push_hint(text, current_branch),
        cause=last_error,
        branches=tuple(attempted),
    )


class PublishPipeline:
    """Publish installed skills into a remote repository.

    Example::

        pipeline = PublishPipeline(git, remotes, mirrors, confirm=console_confirm())
        result = pipeline.publish(bundles, "team", PublishOptions(commit_message="Sync"))

    Args:
        git: git client.
        remotes: Remote directory used to look up the target remote.
        mirrors: Working-copy manager.
        confirm: Overwrite confirmation callback. Defaults to accepting.
        remover: Poll-until-absent remover shared by remediation and verification.
    """

    def __init__(
        self,
        git: GitClient,
        remotes: RemoteDirectory,
        mirrors: WorkingCopyManager,
        confirm: Confirm | None = None,
        remover: MetadataRemover | None = None,
    ) -> None:
        self._git = git
        self._remotes = remotes
        self._mirrors = mirrors
        self._confirm = confirm or accept_all
        self._remover = remover or MetadataRemover()

    def publish(
        self,
        bundles: Sequence[Bundle],
        remote_name: str,
        options: PublishOptions | None = None,
    ) -> PublishResult:
        """Publish ``bundles`` to the remote named ``remote_name``.

        Args:
            bundles: Skills to upload.
            remote_name: Configured remote name.
            options: Publish options.

        Returns:
            The publish result.

        Raises:
            RemoteNotFoundError: If no such remote is configured.
            InvalidIdentifierError: If the remote or a skill name is unsafe.
            CloneError: If the mirror cannot be cloned.
            NestedMetadataError: If nested ``.git`` metadata cannot be removed.
            IntegrityError: If a copied skill fails verification.
            StageError: If staging fails.
            CommitError: If committing fails.
            PushError: If pushing fails.
            OperationCancelled: If the user interrupts a confirmation.
        """
        opts = options or PublishOptions()

        remote = self._remotes.get_remote(remote_name)
        if remote is None:
            raise RemoteNotFoundError(
                f"Repository '{remote_name}' not found",
                hint="Add a repository first: skillsync repo add <name> <url>",
                name=remote_name,
            )
        self._validate(remote, bundles)

        mirror = self._mirrors.ensure_ready(remote)
        repo_dir = mirror.path
        skills_dir = repo_dir / SKILLS_DIR
        skills_dir.mkdir(parents=True, exist_ok=True)

        remediator = SubmoduleRemediator(self._git, repo_dir, self._remover)
        result = PublishResult(remote=remote.name, status=PublishStatus.NO_CHANGES, mirror_path=repo_dir)

        for bundle in bundles:
            if self._copy_bundle(bundle, skills_dir, remediator, opts):
                result.published.append(bundle.name)
            else:
                result.skipped.append(bundle.name)

        if not result.published:
            logger.info("Nothing to upload")
            return result

        self._stage(repo_dir, result.published, remediator)

        if not self._git.status_short(repo_dir).strip():
            self._log_up_to_date(repo_dir)
            return result

        message = opts.commit_message or default_commit_message(result.published)
        if not self._commit(repo_dir, message):
            return result
        result.commit_message = message

        current = self._mirrors.current_branch(repo_dir)
        logger.info("Current branch: %s", current)
        result.branch = push_with_fallback(self._git, repo_dir, current)
        result.status = PublishStatus.PUSHED
        return result

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(remote: Remote, bundles: Sequence[Bundle]) -> None:
        if not is_valid_remote_name(remote.name):
            raise InvalidIdentifierError(
                f"Invalid repository name '{remote.name}'",
                hint="Repository names can only contain letters, numbers, dots, "
                "hyphens, and underscores, and cannot contain path traversal characters.",
                kind="remote name",
                value=remote.name,
            )
        if not is_valid_remote_url(remote.url):
            raise InvalidIdentifierError(
                f"Invalid Git URL '{remote.url}'",
                hint="URL must start with http://, https://, git://, ssh://, file:// or git@, "
                "and cannot contain command injection characters.",
                kind="url",
                value=remote.url,
            )
        for bundle in bundles:
            # "." and ".." pass the character check but would leave skills/.
            target = os.path.normpath(os.path.join(SKILLS_DIR, bundle.name))
            if not is_valid_name(bundle.name) or os.path.dirname(target) != SKILLS_DIR:
                raise InvalidIdentifierError(
                    f"Invalid skill name '{bundle.name}'",
                    hint="Skill names can only contain letters, numbers, dots, hyphens, and underscores.",
                    kind="skill name",
                    value=bundle.name,
                )

    def _copy_bundle(
        self,
        bundle: Bundle,
        skills_dir: Path,
        remediator: SubmoduleRemediator,
        opts: PublishOptions,
    ) -> bool:
        """Copy one skill into the mirror. Returns ``False`` when skipped."""
        target = skills_dir / bundle.name
        rel_path = f"{SKILLS_DIR}/{bundle.name}"
        exists = os.path.lexists(target)

        if exists and not opts.skip_confirmations:
            if not self._confirm(f"Skill '{bundle.name}' already exists in repository. Overwrite?"):
                logger.info("Skipped: %s", bundle.name)
                return False

        if exists:
            report = remediator.remediate(rel_path)
            if report.record.is_submodule:
                logger.info(
                    "Remediated nested repository at %s (checkpoint commit: %s)",
                    rel_path,
                    report.checkpoint_committed,
                )
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            elif os.path.lexists(target):
                target.unlink()

        copied = copy_tree(bundle.path, target)

        remediator.ensure_no_metadata(target)
        if not (target / SKILL_FILE).is_file():
            raise IntegrityError(
                f"Failed to copy {bundle.name}: {SKILL_FILE} not found in {target}",
                name=bundle.name,
                path=target,
            )

        logger.info("Copied %s (%d files)", bundle.name, copied)
        return True

    def _stage(self, repo_dir: Path, names: Sequence[str], remediator: SubmoduleRemediator) -> None:
        # Metadata removal may not be visible immediately; check again before git sees the tree.
        for name in names:
            remediator.ensure_no_metadata(repo_dir / SKILLS_DIR / name)

        try:
            for name in names:
                rel_path = f"{SKILLS_DIR}/{name}"
                try:
                    self._git.add(repo_dir, rel_path, force=True)
                except GitCommandError:
                    self._git.add(repo_dir, f"{rel_path}/", force=True)
            self._git.add_all(repo_dir)
        except GitCommandError as exc:
            raise StageError("Failed to add files to Git", output=exc.text, cause=exc) from exc

    def _commit(self, repo_dir: Path, message: str) -> bool:
        """Commit staged changes. Returns ``False`` when there was nothing to commit."""
        try:
            output = self._git.commit(repo_dir, message).stdout.strip()
        except GitCommandError as exc:
            text = "\n".join(part for part in (exc.stderr.strip(), exc.stdout.strip()) if part)
            lowered = text.lower()
            if any(marker in lowered for marker in _NOTHING_TO_COMMIT):
                logger.info("No changes to commit. Skills are already up to date.")
                return False

            hint = None
            if any(marker in lowered for marker in _IDENTITY_MARKERS):
                hint = (
                    "Configure Git user name and email:\n"
                    f"  {render_command(['git', 'config', '--global', 'user.name', 'Your Name'])}\n"
                    f"  {render_command(['git', 'config', '--global', 'user.email', 'your.email@example.com'])}"
                )
            raise CommitError(
                "Failed to commit changes",
                output=text,
                hint=hint,
                cause=exc,
                returncode=exc.returncode,
            ) from exc

        if output:
            logger.info("%s", output)
        return True

    def _log_up_to_date(self, repo_dir: Path) -> None:
        logger.info("No changes detected. Skills are already up to date.")
        try:
            tracked = self._git.list_tracked(repo_dir, f"{SKILLS_DIR}/")
        except GitCommandError as exc:
            logger.warning("Note: Could not list files in Git index: %s", exc.text)
            return
        if tracked:
            logger.info("Files in Git index:\n%s", "\n".join(tracked[:10]))
