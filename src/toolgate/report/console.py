"""
Console rendering for Toolgate.

Uses Rich to print lint findings and single-call inspection results in the
terminal. Used by the ``lint`` and ``test`` commands.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from toolgate.lint import LintResult, Severity
from toolgate.schema import ToolInvocation
from toolgate.verdict import Decision, Verdict

# Decision styling
DECISION_STYLES = {
    Decision.ALLOW: ("ALLOWED", "green"),
    Decision.DENY: ("DENIED", "red"),
    Decision.ASK: ("ASK", "yellow"),
}

SEVERITY_STYLES = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
}


def print_lint_result(result: LintResult, console: Console | None = None) -> None:
    """
    Print lint findings as a table with a summary line.

    Args:
        result: Result of lint_config()
        console: Rich Console instance (creates one if not provided)
    """
    if console is None:
        console = Console()

    if result.is_clean:
        console.print(f"[green]✓[/green] Configuration is valid: {result.path}")
        return

    table = Table(title=f"Lint: {result.path}", show_header=True, header_style="bold")
    table.add_column("Severity", width=8)
    table.add_column("Code", style="cyan", no_wrap=True)
    table.add_column("Location", style="dim")
    table.add_column("Message")

    for issue in result.issues:
        style = SEVERITY_STYLES[issue.severity]
        table.add_row(
            f"[{style}]{issue.severity.value}[/{style}]",
            issue.code,
            issue.location or "-",
            issue.message,
        )

    console.print(table)
    console.print()

    summary_style = "red" if result.has_errors else "yellow"
    console.print(
        f"[{summary_style}]{result.error_count} error(s), "
        f"{result.warning_count} warning(s)[/{summary_style}]"
    )


def print_inspection(
    invocation: ToolInvocation,
    verdict: Verdict,
    latency_us: int,
    console: Console | None = None,
) -> None:
    """
    Print the outcome of inspecting one tool call.

    Shows the tool, latency and result, plus reason and context when set.
    """
    if console is None:
        console = Console()

    label, style = DECISION_STYLES[verdict.decision]

    lines = [
        f"[bold]Tool:[/bold]    {invocation.tool_name}",
        f"[bold]Latency:[/bold] {latency_us}us",
        f"[bold]Result:[/bold]  [{style}]{label}[/{style}]",
    ]
    if verdict.reason:
        lines.append(f"[bold]Reason:[/bold]  {verdict.reason}")
    if verdict.context:
        lines.append(f"[bold]Context:[/bold] {verdict.context}")

    console.print(
        Panel(
            "\n".join(lines),
            title="[bold]Inspection[/bold]",
            border_style=style,
        )
    )
