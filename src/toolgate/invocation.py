"""
Typed projection of raw tool invocations.

Hosts deliver parameters as untyped JSON. Before detectors run, the call is
projected into one of a closed set of shapes keyed by tool name. Unknown
tool names map to UnknownInvocation, which keeps the original name and raw
value so new host tools pass through instead of erroring.

Parsing is total: a missing or non-string field becomes "" and a
non-object parameter payload is treated as an empty object. An empty
command, path or URL simply matches no rule.
"""

from dataclasses import dataclass
from typing import Any

from toolgate.schema import ToolInvocation


@dataclass(frozen=True)
class ShellCommand:
    command: str


@dataclass(frozen=True)
class FileWrite:
    file_path: str
    content: str


@dataclass(frozen=True)
class FileEdit:
    file_path: str
    old_string: str
    new_string: str


@dataclass(frozen=True)
class FileRead:
    file_path: str


@dataclass(frozen=True)
class GlobSearch:
    pattern: str


@dataclass(frozen=True)
class TextSearch:
    pattern: str
    path: str | None = None


@dataclass(frozen=True)
class UrlFetch:
    url: str


@dataclass(frozen=True)
class WebSearch:
    query: str


@dataclass(frozen=True)
class SubTask:
    prompt: str


@dataclass(frozen=True)
class UnknownInvocation:
    """A tool outside the known set; carries the original name and payload."""

    tool_name: str
    raw: Any


ParsedInvocation = (
    ShellCommand
    | FileWrite
    | FileEdit
    | FileRead
    | GlobSearch
    | TextSearch
    | UrlFetch
    | WebSearch
    | SubTask
    | UnknownInvocation
)


def _text(params: dict[str, Any], key: str) -> str:
    value = params.get(key)
    return value if isinstance(value, str) else ""


def parse_invocation(invocation: ToolInvocation) -> ParsedInvocation:
    """
    Project a raw invocation into its typed shape.

    Args:
        invocation: The call as delivered by the host

    Returns:
        One of the ParsedInvocation variants; never raises for odd payloads
    """
    raw = invocation.tool_input
    params = raw if isinstance(raw, dict) else {}
    name = invocation.tool_name

    if name == "Bash":
        return ShellCommand(command=_text(params, "command"))
    if name == "Write":
        return FileWrite(
            file_path=_text(params, "file_path"),
            content=_text(params, "content"),
        )
    if name == "Edit":
        return FileEdit(
            file_path=_text(params, "file_path"),
            old_string=_text(params, "old_string"),
            new_string=_text(params, "new_string"),
        )
    if name == "Read":
        return FileRead(file_path=_text(params, "file_path"))
    if name == "Glob":
        return GlobSearch(pattern=_text(params, "pattern"))
    if name == "Grep":
        path = params.get("path")
        return TextSearch(
            pattern=_text(params, "pattern"),
            path=path if isinstance(path, str) else None,
        )
    if name == "WebFetch":
        return UrlFetch(url=_text(params, "url"))
    if name == "WebSearch":
        return WebSearch(query=_text(params, "query"))
    if name == "Task":
        return SubTask(prompt=_text(params, "prompt"))

    return UnknownInvocation(tool_name=name, raw=raw)


def scannable_texts(parsed: ParsedInvocation) -> list[str]:
    """Text-bearing fields that the secret scanner inspects, in order."""
    if isinstance(parsed, ShellCommand):
        return [parsed.command]
    if isinstance(parsed, FileWrite):
        return [parsed.content]
    if isinstance(parsed, FileEdit):
        return [parsed.old_string, parsed.new_string]
    if isinstance(parsed, SubTask):
        return [parsed.prompt]
    return []


def file_paths(parsed: ParsedInvocation) -> list[str]:
    """Path arguments that the path guard inspects."""
    if isinstance(parsed, (FileWrite, FileEdit, FileRead)):
        return [parsed.file_path]
    return []
