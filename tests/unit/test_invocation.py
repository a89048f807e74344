"""
Unit tests for typed invocation parsing.

Tests cover:
- Mapping of known tool names to shapes
- Defaults for missing and non-string fields
- Unknown tools pass through with their raw payload
- Text and path extraction for detectors
"""

import pytest

from toolgate.invocation import (
    FileEdit,
    FileRead,
    FileWrite,
    GlobSearch,
    ShellCommand,
    SubTask,
    TextSearch,
    UnknownInvocation,
    UrlFetch,
    WebSearch,
    file_paths,
    parse_invocation,
    scannable_texts,
)
from toolgate.schema import ToolInvocation


def parse(tool_name: str, tool_input=None):
    return parse_invocation(
        ToolInvocation(tool_name=tool_name, tool_input={} if tool_input is None else tool_input)
    )


# =============================================================================
# Known shapes
# =============================================================================


class TestKnownShapes:
    """Each known tool name maps to its shape."""

    def test_bash(self) -> None:
        assert parse("Bash", {"command": "ls"}) == ShellCommand(command="ls")

    def test_write(self) -> None:
        assert parse("Write", {"file_path": "a.txt", "content": "hi"}) == FileWrite(
            file_path="a.txt", content="hi"
        )

    def test_edit(self) -> None:
        parsed = parse("Edit", {"file_path": "a.py", "old_string": "x", "new_string": "y"})
        assert parsed == FileEdit(file_path="a.py", old_string="x", new_string="y")

    def test_read(self) -> None:
        assert parse("Read", {"file_path": "/etc/hosts"}) == FileRead(file_path="/etc/hosts")

    def test_glob(self) -> None:
        assert parse("Glob", {"pattern": "**/*.py"}) == GlobSearch(pattern="**/*.py")

    def test_grep_with_and_without_path(self) -> None:
        """Grep path is optional."""
        assert parse("Grep", {"pattern": "TODO", "path": "src"}) == TextSearch("TODO", "src")
        assert parse("Grep", {"pattern": "TODO"}) == TextSearch("TODO", None)

    def test_web_fetch(self) -> None:
        assert parse("WebFetch", {"url": "https://x.io"}) == UrlFetch(url="https://x.io")

    def test_web_search(self) -> None:
        assert parse("WebSearch", {"query": "python"}) == WebSearch(query="python")

    def test_task(self) -> None:
        assert parse("Task", {"prompt": "do it"}) == SubTask(prompt="do it")

    def test_names_are_case_sensitive(self) -> None:
        """'bash' is not the shell tool."""
        assert isinstance(parse("bash", {"command": "ls"}), UnknownInvocation)


# =============================================================================
# Totality
# =============================================================================


class TestMissingAndOddFields:
    """Parsing never fails on odd payloads."""

    def test_missing_command_is_empty(self) -> None:
        """Bash without a command is an empty command."""
        assert parse("Bash", {}) == ShellCommand(command="")

    def test_non_string_field_is_empty(self) -> None:
        """Non-string values default to empty string."""
        assert parse("Write", {"file_path": 42, "content": ["x"]}) == FileWrite("", "")

    def test_non_object_payload(self) -> None:
        """A list or scalar payload is treated as an empty object."""
        assert parse("Bash", ["rm", "-rf", "/"]) == ShellCommand(command="")
        assert parse("Read", "not an object") == FileRead(file_path="")

    def test_null_payload(self) -> None:
        """A null payload is treated as an empty object."""
        invocation = ToolInvocation(tool_name="Edit", tool_input=None)
        assert parse_invocation(invocation) == FileEdit("", "", "")

    def test_grep_non_string_path(self) -> None:
        """A non-string grep path becomes None."""
        assert parse("Grep", {"pattern": "x", "path": 3}).path is None

    def test_unknown_tool_keeps_raw(self) -> None:
        """Unknown tools keep name and raw payload."""
        raw = {"nested": {"deep": [1, 2, {"x": None}]}}
        parsed = parse("mcp__github__create_issue", raw)
        assert parsed == UnknownInvocation(tool_name="mcp__github__create_issue", raw=raw)


# =============================================================================
# Detector inputs
# =============================================================================


class TestDetectorInputs:
    """Tests for scannable_texts and file_paths."""

    @pytest.mark.parametrize(
        "parsed,expected",
        [
            (ShellCommand("echo hi"), ["echo hi"]),
            (FileWrite("a", "body"), ["body"]),
            (FileEdit("a", "old", "new"), ["old", "new"]),
            (SubTask("prompt"), ["prompt"]),
            (FileRead("a"), []),
            (UrlFetch("https://x.io"), []),
            (WebSearch("q"), []),
            (UnknownInvocation("X", {"command": "secret"}), []),
        ],
    )
    def test_scannable_texts(self, parsed, expected) -> None:
        assert scannable_texts(parsed) == expected

    @pytest.mark.parametrize(
        "parsed,expected",
        [
            (FileWrite("w.txt", ""), ["w.txt"]),
            (FileEdit("e.txt", "", ""), ["e.txt"]),
            (FileRead("r.txt"), ["r.txt"]),
            (ShellCommand("cat .env"), []),
            (GlobSearch("**/.env"), []),
            (TextSearch("x", ".env"), []),
        ],
    )
    def test_file_paths(self, parsed, expected) -> None:
        assert file_paths(parsed) == expected
