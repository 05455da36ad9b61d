"""Tests for name, branch and URL validation and argument escaping."""

from __future__ import annotations

import pytest

from skillsync.git.validation import (
    FALLBACK_BRANCH,
    URL_MAX_LENGTH,
    clean_argument,
    escape_for_command,
    is_valid_branch,
    is_valid_name,
    is_valid_remote_name,
    is_valid_remote_url,
    render_command,
    sanitize_branch,
)


def _unquote_double(body: str) -> str:
    """Read ``body`` as the inside of a POSIX double-quoted word.

    Fails if an unescaped character could end the quoting or start an
    expansion.
    """
    out: list[str] = []
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\\" and i + 1 < len(body) and body[i + 1] in '\\"$`':
            out.append(body[i + 1])
            i += 2
            continue
        assert char not in '"$`', f"unescaped {char!r} in {body!r}"
        assert char not in "\n\r\0"
        out.append(char)
        i += 1
    return "".join(out)


class TestNames:
    """Tests for name and branch validation."""

    @pytest.mark.parametrize("value", ["pdf", "my-skill", "v1.2_beta", "a" * 255, ".", ".."])
    def test_valid_name(self, value: str) -> None:
        assert is_valid_name(value)

    @pytest.mark.parametrize("value", ["", "a" * 256, "with space", "a/b", "a;b", "ü", "x\n"])
    def test_invalid_name(self, value: str) -> None:
        assert not is_valid_name(value)

    def test_remote_name_rejects_traversal(self) -> None:
        assert is_valid_remote_name("team.skills")
        assert not is_valid_remote_name("..")
        assert not is_valid_remote_name("a..b")

    @pytest.mark.parametrize("value", ["main", "feature/x", "release-1.0"])
    def test_valid_branch(self, value: str) -> None:
        assert is_valid_branch(value)

    @pytest.mark.parametrize("value", ["", "a b", "x;rm", "$(id)", "b" * 256])
    def test_invalid_branch(self, value: str) -> None:
        assert not is_valid_branch(value)

    def test_sanitize_branch(self) -> None:
        assert sanitize_branch("feature/x") == "feature/x"
        assert sanitize_branch("bad branch") == FALLBACK_BRANCH == "main"


class TestUrls:
    """Tests for is_valid_remote_url."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/owner/repo.git",
            "http://example.com/r.git",
            "git://example.com/r.git",
            "git@github.com:owner/repo.git",
            "ssh://git@example.com/r.git",
            "file:///tmp/remote.git",
        ],
    )
    def test_accepted(self, url: str) -> None:
        assert is_valid_remote_url(url)

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "ftp://example.com/r.git",
            "/local/path",
            "https://x.com/r.git; rm -rf /",
            "https://x.com/$(whoami)",
            "https://x.com/`id`",
            "https://x.com/a|b",
            "https://x.com/a&b",
            "https://x.com/a>b",
            "https://x.com/a\nb",
            "https://x.com/a\0b",
        ],
    )
    def test_rejected(self, url: str) -> None:
        assert not is_valid_remote_url(url)

    def test_length_bound(self) -> None:
        prefix = "https://x.com/"
        assert is_valid_remote_url(prefix + "a" * (URL_MAX_LENGTH - len(prefix)))
        assert not is_valid_remote_url(prefix + "a" * (URL_MAX_LENGTH - len(prefix) + 1))


class TestEscapeForCommand:
    """Tests for escape_for_command."""

    def test_escapes_quoting_characters(self) -> None:
        assert escape_for_command('a"b') == 'a\\"b'
        assert escape_for_command("a$b") == "a\\$b"
        assert escape_for_command("a`b") == "a\\`b"
        assert escape_for_command("a\\b") == "a\\\\b"

    def test_strips_control_characters(self) -> None:
        assert escape_for_command("a\nb\r\0c\td") == "abc d"

    @pytest.mark.parametrize(
        "value",
        [
            'Upload "quoted" skill',
            "cost $HOME and `id`",
            "back\\slash\\",
            'mixed "\\$`\n\0 end',
            '"; rm -rf / #',
        ],
    )
    def test_embedded_in_double_quotes_yields_original(self, value: str) -> None:
        """The shell unquotes the escaped value back to the cleaned original."""
        assert _unquote_double(escape_for_command(value)) == clean_argument(value)

    def test_render_command(self) -> None:
        rendered = render_command(["git", "commit", "-m", 'Fix "x"'])
        assert rendered == 'git commit -m "Fix \\"x\\""'
