"""
Inspection engine for Toolgate.

The engine is the single entry point that turns one tool call into one
verdict. It runs synchronously in the agent's action loop, so all pattern
compilation happens once, up front, in compile_policy().

How it works:
    1. Tool/server gate on the raw name; a match is final
    2. Parse the call into its typed shape
    3. Run the parameter stages in order, stopping at the first verdict:
       secrets -> commands -> paths -> network
    4. No verdict from any stage means Allow

Fault containment:
    The whole sequence runs inside one try block. Any unexpected exception
    becomes a Deny carrying an internal_error reason (fail_closed=True), or
    an Allow with the fault logged (fail_closed=False). inspect() never
    raises.

Operating mode:
    In monitor mode a would-be Deny from the gate or a stage is logged and
    returned as Allow. Ask verdicts and internal faults are unaffected.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from toolgate.invocation import (
    ParsedInvocation,
    ShellCommand,
    UrlFetch,
    file_paths,
    parse_invocation,
    scannable_texts,
)
from toolgate.policy.commands import CommandScanner
from toolgate.policy.network import NetworkGuard
from toolgate.policy.paths import PathGuard
from toolgate.policy.patterns import PatternIssue
from toolgate.policy.secrets import SecretScanner
from toolgate.policy.tools import ToolGate
from toolgate.schema import Config, PolicyMode, ToolInvocation
from toolgate.verdict import (
    DangerousCommand,
    InternalError,
    NetworkExfiltration,
    ProtectedPath,
    SecretDetected,
    Verdict,
)

logger = logging.getLogger(__name__)

FAIL_CLOSED_MESSAGE = "Internal error - fail closed"


@dataclass(frozen=True)
class CompiledPolicy:
    """
    Immutable, pre-compiled policy shared by every inspection.

    Build a new one to change configuration; never mutate a live policy.

    Attributes:
        mode: strict or monitor
        fail_closed: Deny (True) or Allow (False) on internal faults
        gate: Tool/MCP server permission lists
        secrets: Secret scanner
        commands: Command scanner
        paths: Protected path guard
        network: Exfiltration guard
        issues: Patterns dropped because they failed to compile
    """

    mode: PolicyMode
    fail_closed: bool
    gate: ToolGate
    secrets: SecretScanner
    commands: CommandScanner
    paths: PathGuard
    network: NetworkGuard
    issues: tuple[PatternIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        """True when every configured pattern compiled."""
        return not self.issues


def compile_policy(config: Config) -> CompiledPolicy:
    """
    Compile a configuration into a CompiledPolicy.

    Invalid patterns are dropped from their detector and listed in
    ``issues``; the rest of the policy stays active. Performs no I/O.
    """
    issues: list[PatternIssue] = []
    policy = config.policy

    compiled = CompiledPolicy(
        mode=policy.mode,
        fail_closed=policy.fail_closed,
        gate=ToolGate.from_config(config.tools, issues),
        secrets=SecretScanner.from_config(policy.secrets),
        commands=CommandScanner.from_config(policy.commands, issues),
        paths=PathGuard.from_config(policy.protected_paths, issues),
        network=NetworkGuard.from_config(policy.network),
        issues=tuple(issues),
    )
    if issues:
        logger.warning("Policy compiled with %d invalid pattern(s) dropped", len(issues))
    return compiled


# =============================================================================
# Stages
# =============================================================================

Stage = Callable[[ParsedInvocation, CompiledPolicy], Verdict | None]


def check_secrets(parsed: ParsedInvocation, policy: CompiledPolicy) -> Verdict | None:
    """Deny on the first secret in any text-bearing field."""
    match = policy.secrets.first_match(scannable_texts(parsed))
    if match is None:
        return None
    return Verdict.from_block_reason(
        SecretDetected(secret_type=match.secret_type, redacted=match.redacted)
    )


def check_commands(parsed: ParsedInvocation, policy: CompiledPolicy) -> Verdict | None:
    """Deny destructive shell commands."""
    if not isinstance(parsed, ShellCommand):
        return None
    match = policy.commands.check(parsed.command)
    if match is None:
        return None
    return Verdict.from_block_reason(
        DangerousCommand(pattern=match.pattern, matched=match.matched)
    )


def check_paths(parsed: ParsedInvocation, policy: CompiledPolicy) -> Verdict | None:
    """Deny file operations on protected paths."""
    for path in file_paths(parsed):
        match = policy.paths.check(path)
        if match is not None:
            return Verdict.from_block_reason(
                ProtectedPath(path=match.path, pattern=match.pattern)
            )
    return None


def check_network(parsed: ParsedInvocation, policy: CompiledPolicy) -> Verdict | None:
    """Deny fetches of, or commands referencing, blocked domains."""
    if isinstance(parsed, UrlFetch):
        match = policy.network.check_url(parsed.url)
        if match is not None:
            return Verdict.from_block_reason(NetworkExfiltration(domain=match.domain))

    if isinstance(parsed, ShellCommand):
        matches = policy.network.check_text(parsed.command)
        if matches:
            return Verdict.from_block_reason(NetworkExfiltration(domain=matches[0].domain))

    return None


STAGES: tuple[Stage, ...] = (
    check_secrets,
    check_commands,
    check_paths,
    check_network,
)


# =============================================================================
# Entry point
# =============================================================================


def evaluate(invocation: ToolInvocation, policy: CompiledPolicy) -> Verdict:
    """
    Run the gate and stages without fault containment.

    Exposed for tests and tooling; callers that need the fail-closed
    guarantee must use inspect().
    """
    verdict = policy.gate.check(invocation.tool_name)
    if verdict is not None:
        return verdict

    parsed = parse_invocation(invocation)
    for stage in STAGES:
        verdict = stage(parsed, policy)
        if verdict is not None:
            return verdict

    return Verdict.allow()


def inspect(invocation: ToolInvocation, policy: CompiledPolicy) -> tuple[Verdict, int]:
    """
    Inspect a tool call against the policy.

    Args:
        invocation: The call to inspect
        policy: The compiled policy

    Returns:
        (verdict, latency in microseconds). Never raises.
    """
    start = time.perf_counter_ns()

    try:
        verdict = evaluate(invocation, policy)
    except Exception:
        verdict = _on_fault(invocation, policy)
    else:
        if verdict.is_deny and policy.mode == PolicyMode.MONITOR:
            logger.warning(
                "Monitor mode: would deny %s: %s",
                invocation.tool_name,
                verdict.reason,
            )
            verdict = Verdict.allow()

    latency_us = (time.perf_counter_ns() - start) // 1000
    logger.debug(
        "Inspected %s -> %s in %dus",
        invocation.tool_name,
        verdict.permission_decision,
        latency_us,
    )
    return verdict, latency_us


def _on_fault(invocation: ToolInvocation, policy: CompiledPolicy) -> Verdict:
    if policy.fail_closed:
        logger.exception("Inspection of %s failed; denying", invocation.tool_name)
        return Verdict.from_block_reason(InternalError(message=FAIL_CLOSED_MESSAGE))

    logger.exception("Inspection of %s failed; allowing (fail_closed=false)", invocation.tool_name)
    return Verdict.allow()
