"""
JSON and plain-text renderings for Toolgate.

These formatters produce strings only; printing is left to the caller so
the same output can go to a terminal, a file or a test assertion.

Design Principles:
    - Stable keys: snake_case, same shape for every result
    - Machine first: JSON output carries everything the console shows
"""

import json
from typing import Any

from toolgate.lint import LintResult
from toolgate.schema import ToolInvocation
from toolgate.verdict import Verdict


def format_lint_json(result: LintResult, indent: int = 2) -> str:
    """
    Render a lint result as JSON.

    Shape:
        {"path": ..., "valid": bool, "error_count": n, "warning_count": n,
         "issues": [{"severity", "code", "message", "location"}]}
    """
    report = {
        "path": result.path,
        "valid": not result.has_errors,
        "error_count": result.error_count,
        "warning_count": result.warning_count,
        "issues": [issue.model_dump(mode="json") for issue in result.issues],
    }
    return json.dumps(report, indent=indent)


def format_lint_human(result: LintResult) -> str:
    """
    Render a lint result as plain text.

    One line per issue, ``[severity] code: message``, followed by a count
    line; a clean file renders as "Configuration is valid".
    """
    if result.is_clean:
        return "Configuration is valid"

    lines = []
    for issue in result.issues:
        line = f"[{issue.severity.value}] {issue.code}: {issue.message}"
        if issue.location:
            line += f" (at {issue.location})"
        lines.append(line)

    lines.append("")
    lines.append(f"{result.error_count} error(s), {result.warning_count} warning(s)")
    return "\n".join(lines)


def inspection_to_dict(
    invocation: ToolInvocation,
    verdict: Verdict,
    latency_us: int,
) -> dict[str, Any]:
    """Build the JSON-ready record of one inspection."""
    return {
        "tool_name": invocation.tool_name,
        "decision": verdict.permission_decision,
        "reason": verdict.reason,
        "context": verdict.context,
        "block_reason": (
            verdict.block_reason.model_dump(mode="json")
            if verdict.block_reason is not None
            else None
        ),
        "latency_us": latency_us,
    }
