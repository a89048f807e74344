"""
Unit tests for pattern compilation.

Tests cover:
- Regex compilation and errors
- Glob syntax, matching semantics and validation
- Per-pattern failure isolation in compile_each
"""

import pytest

from toolgate.errors import PatternCompileError
from toolgate.policy.patterns import (
    PatternIssue,
    compile_each,
    compile_glob,
    compile_regex,
)


class TestCompileRegex:
    """Tests for compile_regex."""

    def test_valid(self) -> None:
        assert compile_regex(r"mkfs\.").search("sudo mkfs.ext4 /dev/sda1")

    @pytest.mark.parametrize("source", ["(", "[a-", "a{2,1}", "*oops", "a{4294967296}"])
    def test_invalid(self, source: str) -> None:
        """Invalid regexes raise PatternCompileError with kind 'regex'."""
        with pytest.raises(PatternCompileError) as exc_info:
            compile_regex(source, "policy.commands.block_patterns[0]")
        assert exc_info.value.kind == "regex"
        assert exc_info.value.pattern == source
        assert exc_info.value.location == "policy.commands.block_patterns[0]"


class TestCompileGlob:
    """Tests for compile_glob."""

    @pytest.mark.parametrize(
        "pattern,text,expected",
        [
            ("Bash", "Bash", True),
            ("Bash", "BashX", False),
            ("mcp__*", "mcp__github__search", True),
            ("evil*", "evilserver", True),
            ("evil*", "notevil", False),
            ("?ead", "Read", True),
            ("[RW]*", "Write", True),
            ("[!RW]*", "Write", False),
            ("**/.env", "proj/.env", True),
            ("**/.env", "/abs/path/.env", True),
            ("**/.env", "proj/.env.local", False),
            ("*.pem", "certs/server.pem", True),
            ("**/.ssh/**", "home/u/.ssh/id_rsa", True),
            ("**/.ssh/**", ".ssh/config", True),
            ("**/.env", ".env", True),
            ("**/.env", "proj/x.env", False),
            ("a/**/b", "a/b", True),
            ("a/**/b", "a/x/y/b", True),
            ("[]]x", "]x", True),
        ],
    )
    def test_matching(self, pattern: str, text: str, expected: bool) -> None:
        assert compile_glob(pattern).matches(text) is expected

    def test_full_match_only(self) -> None:
        """Globs must match the whole string."""
        assert not compile_glob("Read").matches("ReadFile")
        assert not compile_glob("Read").matches("xRead")

    def test_case_sensitive(self) -> None:
        """Matching is case-sensitive."""
        assert not compile_glob("*.PEM").matches("key.pem")

    def test_source_preserved(self) -> None:
        assert compile_glob("**/*.key").source == "**/*.key"

    @pytest.mark.parametrize(
        "source",
        [
            "[abc",
            "foo[",
            "***",
            "a/***/b",
            "a**",
            "**b",
            "a/**b/c",
            "[z-a]",
            "**/[z-a].txt",
        ],
    )
    def test_invalid(self, source: str) -> None:
        """Malformed globs raise PatternCompileError with kind 'glob'."""
        with pytest.raises(PatternCompileError) as exc_info:
            compile_glob(source, "tools.deny[0]")
        assert exc_info.value.kind == "glob"
        assert exc_info.value.reason

    @pytest.mark.parametrize("source", ["**", "**/x", "a/**", "a/**/b", "[]]", "*"])
    def test_valid_edge_cases(self, source: str) -> None:
        compile_glob(source)


class TestCompileEach:
    """Tests for compile_each."""

    def test_drops_only_invalid(self) -> None:
        """Invalid patterns are dropped, valid ones kept in order."""
        issues: list[PatternIssue] = []
        compiled = compile_each(
            ["a+", "(", "b+"],
            "policy.commands.block_patterns",
            compile_regex,
            issues,
        )

        assert [source for source, _ in compiled] == ["a+", "b+"]
        assert len(issues) == 1
        assert issues[0].location == "policy.commands.block_patterns[1]"
        assert issues[0].pattern == "("
        assert issues[0].kind == "regex"

    def test_all_valid(self) -> None:
        issues: list[PatternIssue] = []
        compiled = compile_each(["*.py"], "tools.allow", compile_glob, issues)
        assert len(compiled) == 1
        assert issues == []

    def test_empty(self) -> None:
        issues: list[PatternIssue] = []
        assert compile_each([], "tools.allow", compile_glob, issues) == []

    def test_reversed_range_dropped(self) -> None:
        """A glob that only fails at regex compile time is still dropped."""
        issues: list[PatternIssue] = []
        compiled = compile_each(
            ["**/[z-a].txt", "**/.env"],
            "policy.protected_paths.blocked",
            compile_glob,
            issues,
        )

        assert [source for source, _ in compiled] == ["**/.env"]
        assert issues[0].location == "policy.protected_paths.blocked[0]"
        assert issues[0].kind == "glob"
