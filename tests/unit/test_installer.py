"""Tests for skill installation."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from skillsync.errors import CloneError, InstallError, InvalidSourceError, PathEscapeError
from skillsync.git.client import GitClient, GitResult
from skillsync.install import (
    InstallOptions,
    InstallResult,
    SkillInstaller,
    SourceKind,
    directory_size,
    ensure_within,
    format_size,
    install_target_dir,
    parse_source,
)
from skillsync.install.installer import PRIVATE_REPO_HINT
from skillsync.prompts import Choice


def _make_skill(base_dir: Path, name: str, description: str = "test skill") -> Path:
    skill_dir = base_dir / name
    skill_dir.mkdir(parents=True, exist_ok=True)
    (skill_dir / "SKILL.md").write_text(
        f"---\nname: {name}\ndescription: {description}\n---\n", encoding="utf-8"
    )
    return skill_dir


@pytest.fixture
def dirs(tmp_path: Path) -> tuple[Path, Path]:
    cwd = tmp_path / "project"
    home = tmp_path / "home"
    cwd.mkdir()
    home.mkdir()
    return cwd, home


def _installer(git: GitClient, dirs: tuple[Path, Path], **kwargs) -> SkillInstaller:
    cwd, home = dirs
    return SkillInstaller(git, cwd=cwd, home=home, **kwargs)


class TestParseSource:
    """Tests for parse_source."""

    def test_local_paths(self, tmp_path: Path) -> None:
        assert parse_source("/abs/skills").kind is SourceKind.LOCAL
        assert parse_source("./rel").kind is SourceKind.LOCAL
        assert parse_source("../up").kind is SourceKind.LOCAL
        parsed = parse_source("~/skills/pdf", home=tmp_path)
        assert parsed.location == str(tmp_path / "skills" / "pdf")

    @pytest.mark.parametrize(
        "source",
        ["https://github.com/o/r", "git@github.com:o/r.git", "git://host/r", "http://host/r", "anything.git"],
    )
    def test_git_urls(self, source: str) -> None:
        parsed = parse_source(source)
        assert parsed.kind is SourceKind.GIT
        assert parsed.location == source
        assert parsed.is_remote

    def test_shorthand(self) -> None:
        parsed = parse_source("anthropics/skills")
        assert parsed.kind is SourceKind.GITHUB
        assert parsed.location == "https://github.com/anthropics/skills"
        assert parsed.subpath == ""

    def test_shorthand_with_subpath(self) -> None:
        parsed = parse_source("anthropics/skills/document-skills/pdf")
        assert parsed.location == "https://github.com/anthropics/skills"
        assert parsed.subpath == "document-skills/pdf"

    @pytest.mark.parametrize("source", ["single", "owner/", "a//b"])
    def test_invalid(self, source: str) -> None:
        with pytest.raises(InvalidSourceError) as exc_info:
            parse_source(source)
        assert "owner/repo" in exc_info.value.hint


class TestTargetDir:
    """Tests for install_target_dir and ensure_within."""

    @pytest.mark.parametrize(
        ("global_install", "universal", "expected"),
        [
            (False, False, "project/.claude/skills"),
            (False, True, "project/.agent/skills"),
            (True, False, "home/.claude/skills"),
            (True, True, "home/.agent/skills"),
        ],
    )
    def test_install_target_dir(
        self, tmp_path: Path, global_install: bool, universal: bool, expected: str
    ) -> None:
        options = InstallOptions(global_install=global_install, universal=universal)
        target = install_target_dir(options, tmp_path / "project", tmp_path / "home")
        assert target == tmp_path / expected

    def test_within(self, tmp_path: Path) -> None:
        assert ensure_within(tmp_path, tmp_path / "pdf") == tmp_path / "pdf"

    @pytest.mark.parametrize("name", ["..", "../escape", "a/../../b", "."])
    def test_escape_rejected(self, tmp_path: Path, name: str) -> None:
        with pytest.raises(PathEscapeError):
            ensure_within(tmp_path / "skills", tmp_path / "skills" / name)

    def test_prefix_sibling_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(PathEscapeError):
            ensure_within(tmp_path / "skills", tmp_path / "skills-evil" / "x")


class TestLocalInstall:
    """Installing from local directories."""

    def test_single_skill(self, fake_git: GitClient, fake_runner, dirs, tmp_path: Path) -> None:
        source = _make_skill(tmp_path / "src", "pdf")
        (source / "scripts").mkdir()
        (source / "scripts" / "run.py").write_text("print(1)\n", encoding="utf-8")
        (source / ".git").mkdir()

        result = _installer(fake_git, dirs).install(str(source))

        target = dirs[0] / ".claude" / "skills" / "pdf"
        assert result.installed == ["pdf"]
        assert result.target_dir == dirs[0] / ".claude" / "skills"
        assert (target / "scripts" / "run.py").is_file()
        assert not (target / ".git").exists()
        assert fake_runner.calls == []

    def test_collection_installs_all_with_yes(self, fake_git: GitClient, dirs, tmp_path: Path) -> None:
        _make_skill(tmp_path / "src", "pdf")
        _make_skill(tmp_path / "src" / "office", "xlsx")
        (tmp_path / "src" / "broken").mkdir()
        (tmp_path / "src" / "broken" / "SKILL.md").write_text("no frontmatter", encoding="utf-8")

        result = _installer(fake_git, dirs).install(str(tmp_path / "src"), InstallOptions(universal=True, yes=True))

        assert sorted(result.installed) == ["pdf", "xlsx"]
        assert (dirs[0] / ".agent" / "skills" / "xlsx" / "SKILL.md").is_file()

    def test_collection_uses_selection(self, fake_git: GitClient, dirs, tmp_path: Path) -> None:
        _make_skill(tmp_path / "src", "pdf")
        _make_skill(tmp_path / "src", "xlsx")
        seen: list[Sequence[Choice]] = []

        def pick_xlsx(message: str, choices: Sequence[Choice]) -> list[str]:
            seen.append(choices)
            return [c.value for c in choices if c.label == "xlsx"]

        result = _installer(fake_git, dirs, select=pick_xlsx).install(str(tmp_path / "src"))

        assert [c.label for c in seen[0]] == ["pdf", "xlsx"]
        assert result.installed == ["xlsx"]

    def test_empty_selection(self, fake_git: GitClient, dirs, tmp_path: Path) -> None:
        _make_skill(tmp_path / "src", "pdf")
        _make_skill(tmp_path / "src", "xlsx")

        result = _installer(fake_git, dirs, select=lambda m, c: []).install(str(tmp_path / "src"))

        assert result.installed == []
        assert not (dirs[0] / ".claude" / "skills").exists()

    def test_existing_declined(self, fake_git: GitClient, dirs, tmp_path: Path) -> None:
        source = _make_skill(tmp_path / "src", "pdf", "new")
        existing = _make_skill(dirs[0] / ".claude" / "skills", "pdf", "old")

        result = _installer(fake_git, dirs, confirm=lambda prompt: False).install(str(source))

        assert result.skipped == ["pdf"]
        assert "old" in (existing / "SKILL.md").read_text(encoding="utf-8")

    def test_existing_overwritten_with_yes(self, fake_git: GitClient, dirs, tmp_path: Path) -> None:
        source = _make_skill(tmp_path / "src", "pdf", "new")
        existing = _make_skill(dirs[0] / ".claude" / "skills", "pdf", "old")
        (existing / "stale.txt").write_text("stale", encoding="utf-8")

        result = _installer(fake_git, dirs).install(str(source), InstallOptions(yes=True))

        assert result.installed == ["pdf"]
        assert "new" in (existing / "SKILL.md").read_text(encoding="utf-8")
        assert not (existing / "stale.txt").exists()

    @pytest.mark.parametrize(
        ("make", "message"),
        [
            (lambda p: None, "does not exist"),
            (lambda p: p.write_text("x", encoding="utf-8"), "must be a directory"),
            (lambda p: p.mkdir(), "No valid SKILL.md"),
        ],
    )
    def test_bad_local_sources(self, fake_git: GitClient, dirs, tmp_path: Path, make, message: str) -> None:
        path = tmp_path / "source"
        make(path)

        with pytest.raises(InstallError, match=message):
            _installer(fake_git, dirs).install(str(path))

    def test_invalid_manifest(self, fake_git: GitClient, dirs, tmp_path: Path) -> None:
        source = tmp_path / "pdf"
        source.mkdir()
        (source / "SKILL.md").write_text("# no frontmatter", encoding="utf-8")

        with pytest.raises(InstallError, match="missing YAML frontmatter"):
            _installer(fake_git, dirs).install(str(source))


class TestPathEscape:
    """Destination containment."""

    def test_escaping_name_rejected_before_write(self, fake_git: GitClient, dirs, tmp_path: Path) -> None:
        bundle = _make_skill(tmp_path / "src", "pdf")
        target_dir = dirs[0] / ".claude" / "skills"
        result = InstallResult(target_dir=target_dir)

        _installer(fake_git, dirs).install_bundle(bundle, "../escape", target_dir, InstallOptions(yes=True), result)

        assert result.rejected == ["../escape"]
        assert result.installed == []
        assert not (dirs[0] / ".claude" / "escape").exists()
        assert not target_dir.exists()


class TestSizesAndConflicts:
    """Selection sizes and marketplace name conflicts."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [(0, "0B"), (1023, "1023B"), (1536, "1.5KB"), (5 * 1024 * 1024, "5.0MB")],
    )
    def test_format_size(self, size: int, expected: str) -> None:
        assert format_size(size) == expected

    def test_directory_size(self, tmp_path: Path) -> None:
        (tmp_path / "sub").mkdir()
        (tmp_path / "a.txt").write_bytes(b"x" * 10)
        (tmp_path / "sub" / "b.txt").write_bytes(b"y" * 5)

        assert directory_size(tmp_path) == 15

    def test_selection_shows_size(self, fake_git: GitClient, dirs, tmp_path: Path) -> None:
        pdf = _make_skill(tmp_path / "src", "pdf")
        _make_skill(tmp_path / "src", "xlsx")
        seen: list[Sequence[Choice]] = []

        def pick_none(message: str, choices: Sequence[Choice]) -> list[str]:
            seen.append(choices)
            return []

        _installer(fake_git, dirs, select=pick_none).install(str(tmp_path / "src"))

        assert seen[0][0].detail == format_size(directory_size(pdf))
        assert seen[0][0].detail.endswith("B")

    def test_global_marketplace_name_recorded(self, fake_git: GitClient, dirs, tmp_path: Path) -> None:
        source = _make_skill(tmp_path / "src", "pdf")

        result = _installer(fake_git, dirs).install(str(source), InstallOptions(global_install=True, yes=True))

        assert result.installed == ["pdf"]
        assert result.conflicts == ["pdf"]

    @pytest.mark.parametrize(("name", "global_install"), [("pdf", False), ("my-notes", True)])
    def test_no_conflict(self, fake_git: GitClient, dirs, tmp_path: Path, name: str, global_install: bool) -> None:
        source = _make_skill(tmp_path / "src", name)

        result = _installer(fake_git, dirs).install(
            str(source), InstallOptions(global_install=global_install, yes=True)
        )

        assert result.installed == [name]
        assert result.conflicts == []


class TestOverlappingPaths:
    """Sources that are, contain, or sit inside the destination."""

    def test_reinstall_from_installed_dir_keeps_files(self, fake_git: GitClient, dirs) -> None:
        installed = _make_skill(dirs[0] / ".claude" / "skills", "demo")
        (installed / "notes.txt").write_text("keep me", encoding="utf-8")

        result = _installer(fake_git, dirs).install(str(installed), InstallOptions(yes=True))

        assert result.installed == []
        assert result.skipped == ["demo"]
        assert (installed / "SKILL.md").is_file()
        assert (installed / "notes.txt").read_text(encoding="utf-8") == "keep me"

    def test_project_root_source_skips_installed_copies(self, fake_git: GitClient, dirs) -> None:
        cwd = dirs[0]
        installed = _make_skill(cwd / ".claude" / "skills", "demo")
        _make_skill(cwd / "authoring", "pdf")

        result = _installer(fake_git, dirs).install(str(cwd), InstallOptions(yes=True))

        assert result.skipped == ["demo"]
        assert result.installed == ["pdf"]
        assert (installed / "SKILL.md").is_file()
        assert (cwd / ".claude" / "skills" / "pdf" / "SKILL.md").is_file()

    def test_destination_inside_source_rejected(self, fake_git: GitClient, dirs) -> None:
        source = _make_skill(dirs[0], "demo")
        target_dir = source / "vendor"
        (target_dir / "demo").mkdir(parents=True)

        with pytest.raises(InstallError, match="overlap"):
            _installer(fake_git, dirs).install_bundle(
                source, "demo", target_dir, InstallOptions(yes=True), InstallResult(target_dir=target_dir)
            )

        assert (source / "SKILL.md").is_file()
        assert (target_dir / "demo").is_dir()


class TestRemoteInstall:
    """Installing from git sources."""

    def test_shorthand_clones_shallow(self, fake_runner, dirs) -> None:
        def clone(args: list[str]) -> GitResult:
            repo = Path(args[-1])
            _make_skill(repo / "document-skills", "pdf")
            return GitResult(args=args, returncode=0)

        fake_runner.on_call(["clone"], clone)
        git = GitClient(runner=fake_runner)

        result = _installer(git, dirs).install("anthropics/skills/document-skills/pdf")

        assert result.installed == ["pdf"]
        clone_args = fake_runner.commands()[0]
        assert clone_args[:5] == ["clone", "--depth", "1", "--quiet", "https://github.com/anthropics/skills"]
        assert (dirs[0] / ".claude" / "skills" / "pdf" / "SKILL.md").is_file()
        assert not Path(clone_args[-1]).exists()

    def test_clone_failure(self, fake_runner, fake_git: GitClient, dirs) -> None:
        fake_runner.on(["clone"], returncode=128, stderr="fatal: repository not found")

        with pytest.raises(CloneError) as exc_info:
            _installer(fake_git, dirs).install("https://github.com/o/private.git")

        assert exc_info.value.output == "fatal: repository not found"
        assert exc_info.value.hint == PRIVATE_REPO_HINT
