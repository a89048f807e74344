"""
Toolgate - Inline policy gate for autonomous agent tool calls.

Toolgate sits between an agent and its tools. Every attempted tool call is
inspected against a compiled set of security rules before it runs, and
exactly one verdict comes back: allow, ask for confirmation, or deny.
It provides:
- Tool and MCP server permission lists (deny > ask > allow)
- Secret, dangerous-command, protected-path and exfiltration detectors
- Fail-closed fault containment around the whole pipeline

Example usage:
    $ echo '{"tool_name":"Bash","tool_input":{"command":"ls"}}' | toolgate hook
    $ toolgate test Bash '{"command":"rm -rf /"}'
    $ toolgate --config toolgate.yaml lint
"""

from toolgate.policy import CompiledPolicy, compile_policy, inspect
from toolgate.schema import Config, ToolInvocation
from toolgate.verdict import BlockReason, Verdict

__version__ = "0.1.0"
__author__ = "Toolgate Contributors"

__all__ = [
    "__version__",
    "__author__",
    "BlockReason",
    "CompiledPolicy",
    "Config",
    "ToolInvocation",
    "Verdict",
    "compile_policy",
    "inspect",
]
