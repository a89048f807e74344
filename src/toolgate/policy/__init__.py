"""
Policy engine for Toolgate.

This package compiles a configuration into an immutable CompiledPolicy and
inspects tool calls against it.

Key concepts:
    - CompiledPolicy: Patterns compiled once, shared read-only by all calls
    - inspect(): One call in, one verdict (plus latency) out
    - Precedence: gate before detectors; deny before ask before allow

The engine is fail-closed: any fault inside inspection produces a Deny.
"""

from toolgate.policy.engine import STAGES, CompiledPolicy, compile_policy, evaluate, inspect
from toolgate.policy.patterns import PatternIssue

__all__ = [
    "STAGES",
    "CompiledPolicy",
    "PatternIssue",
    "compile_policy",
    "evaluate",
    "inspect",
]
