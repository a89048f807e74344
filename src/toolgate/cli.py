"""
CLI entry point for Toolgate.

This module provides the Typer-based command-line interface for Toolgate.

Commands:
    hook        Run as a PreToolUse hook (JSON on stdin, JSON on stdout)
    install     Register the hook in the host settings file
    uninstall   Remove the hook from the host settings file
    lint        Check a configuration file for problems
    test        Inspect a single tool call and show the verdict

Architecture Note:
    The CLI is intentionally thin - it loads configuration, compiles the
    policy and delegates to the policy engine. stdout is reserved for
    command output (hook JSON in particular); logs go to stderr.
"""

import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from toolgate import __version__
from toolgate.errors import ConfigError, InstallError
from toolgate.hook import EXIT_DENY, render_error, run_hook
from toolgate.install import (
    default_hook_command,
    default_settings_path,
    install_hook,
    uninstall_hook,
)
from toolgate.lint import lint_config
from toolgate.policy import compile_policy, inspect
from toolgate.report import (
    format_lint_human,
    format_lint_json,
    inspection_to_dict,
    print_inspection,
    print_lint_result,
)
from toolgate.schema import DEFAULT_CONFIG_FILENAME, ToolInvocation, resolve_config

# Initialize Typer app with metadata
app = typer.Typer(
    name="toolgate",
    help="Inline policy engine for agent tool calls.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()

logger = logging.getLogger("toolgate")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]toolgate[/bold] version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send logs to stderr through Rich; WARNING by default, DEBUG when verbose."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            "-c",
            help="Path to the configuration file.",
        ),
    ] = Path(DEFAULT_CONFIG_FILENAME),
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Enable debug logging on stderr.",
        ),
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    Toolgate - Inline policy engine for agent tool calls.

    Inspects every tool call an agent makes and returns allow, deny or ask
    before it runs.
    """
    _configure_logging(verbose)
    ctx.obj = {"config": config, "verbose": verbose}


def _config_path(ctx: typer.Context) -> Path:
    return ctx.obj["config"]


def _output_json_error(error_type: str, message: str, include_traceback: bool = False) -> None:
    """Output an error in JSON format."""
    output: dict[str, Any] = {
        "error": True,
        "error_type": error_type,
        "message": message,
    }
    if include_traceback:
        output["traceback"] = traceback.format_exc()
    print(json.dumps(output, indent=2))


@app.command()
def hook(ctx: typer.Context) -> None:
    """
    Run as a PreToolUse hook.

    Reads {"tool_name": ..., "tool_input": ...} from stdin and writes the
    host's hookSpecificOutput JSON to stdout. Exits 0 for allow/ask and 2
    for deny. A broken configuration denies every call.
    """
    try:
        config = resolve_config(_config_path(ctx))
    except ConfigError as e:
        logger.error("%s", e)
        print(json.dumps(render_error(e.message)))
        raise typer.Exit(code=EXIT_DENY)

    policy = compile_policy(config)
    code = run_hook(policy, sys.stdin.buffer, sys.stdout)
    raise typer.Exit(code=code)


@app.command()
def install(
    settings: Annotated[
        Optional[Path],
        typer.Option(
            "--settings",
            help="Host settings file. Defaults to ~/.claude/settings.json.",
        ),
    ] = None,
    command: Annotated[
        Optional[str],
        typer.Option(
            "--command",
            help="Command the host runs for each tool call. Defaults to '<toolgate> hook'.",
        ),
    ] = None,
) -> None:
    """Register the Toolgate hook in the host settings file."""
    settings_path = settings or default_settings_path()
    hook_command = command or default_hook_command()

    try:
        added = install_hook(settings_path, hook_command)
    except InstallError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if added:
        console.print(f"[green]✓[/green] Installed hook in {settings_path}")
        console.print(f"  Command: {hook_command}")
    else:
        console.print(f"[yellow]Hook already installed in {settings_path}[/yellow]")


@app.command()
def uninstall(
    settings: Annotated[
        Optional[Path],
        typer.Option(
            "--settings",
            help="Host settings file. Defaults to ~/.claude/settings.json.",
        ),
    ] = None,
) -> None:
    """Remove the Toolgate hook from the host settings file."""
    settings_path = settings or default_settings_path()

    try:
        removed = uninstall_hook(settings_path)
    except InstallError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if removed:
        console.print(f"[green]✓[/green] Removed hook from {settings_path}")
    else:
        console.print(f"[dim]No Toolgate hook found in {settings_path}[/dim]")


@app.command()
def lint(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results in JSON format.",
        ),
    ] = False,
    plain: Annotated[
        bool,
        typer.Option(
            "--plain",
            help="Output plain text without tables or colors.",
        ),
    ] = False,
) -> None:
    """
    Check the configuration file for problems.

    Reports YAML and schema errors and every regex or glob that would be
    dropped at runtime. Exits 1 if any error is found.
    """
    result = lint_config(_config_path(ctx))

    if json_output:
        print(format_lint_json(result))
    elif plain:
        print(format_lint_human(result))
    else:
        print_lint_result(result, console)

    if result.has_errors:
        raise typer.Exit(code=1)


@app.command("test")
def test_call(
    ctx: typer.Context,
    tool_name: Annotated[
        str,
        typer.Argument(help="Tool name, e.g. Bash or mcp__github__create_issue."),
    ],
    tool_input: Annotated[
        str,
        typer.Argument(help='Tool parameters as JSON, e.g. \'{"command": "ls"}\'.'),
    ],
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results in JSON format.",
        ),
    ] = False,
) -> None:
    """
    Inspect a single tool call against the active policy.

    Exits 2 if the call would be denied, 0 otherwise.
    """
    verbose = ctx.obj["verbose"]

    try:
        parameters = json.loads(tool_input)
    except json.JSONDecodeError as e:
        if json_output:
            _output_json_error("invalid_tool_input", f"Invalid JSON: {e}", verbose)
        else:
            console.print(f"[red]Error:[/red] Invalid JSON for TOOL_INPUT: {e}")
        raise typer.Exit(code=1)

    try:
        config = resolve_config(_config_path(ctx))
    except ConfigError as e:
        if json_output:
            _output_json_error("config_error", e.message, verbose)
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    invocation = ToolInvocation(tool_name=tool_name, tool_input=parameters)
    verdict, latency_us = inspect(invocation, compile_policy(config))

    if json_output:
        print(json.dumps(inspection_to_dict(invocation, verdict, latency_us), indent=2))
    else:
        print_inspection(invocation, verdict, latency_us, console)

    if verdict.is_deny:
        raise typer.Exit(code=EXIT_DENY)


if __name__ == "__main__":
    app()
