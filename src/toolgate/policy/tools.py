"""
Tool and MCP server permission gate.

Runs on the tool name alone, before any parameter is inspected. Pattern
order is security-first:

    1. deny   -> Deny
    2. ask    -> Ask
    3. allow  -> Allow
    4. none   -> no opinion, continue to parameter inspection

For MCP tools (``mcp__<server>__<tool>``) the server lists are consulted
first against the server segment; if none match, the generic tool lists are
consulted against the full name.
"""

from dataclasses import dataclass

from toolgate.policy.patterns import Glob, PatternIssue, compile_each, compile_glob
from toolgate.schema import ToolsConfig
from toolgate.verdict import Verdict

MCP_PREFIX = "mcp__"
MCP_SEPARATOR = "__"


def extract_mcp_server(tool_name: str) -> str | None:
    """
    Extract the MCP server from a tool name.

    Examples:
        mcp__context7__query -> "context7"
        Bash -> None
    """
    if not tool_name.startswith(MCP_PREFIX):
        return None
    return tool_name[len(MCP_PREFIX):].split(MCP_SEPARATOR, 1)[0]


def _any_match(patterns: tuple[Glob, ...], name: str) -> bool:
    return any(pattern.matches(name) for pattern in patterns)


@dataclass(frozen=True)
class ToolGate:
    """Compiled tool-level permission lists."""

    deny: tuple[Glob, ...] = ()
    ask: tuple[Glob, ...] = ()
    allow: tuple[Glob, ...] = ()
    mcp_deny: tuple[Glob, ...] = ()
    mcp_ask: tuple[Glob, ...] = ()
    mcp_allow: tuple[Glob, ...] = ()

    @classmethod
    def from_config(cls, config: ToolsConfig, issues: list[PatternIssue]) -> "ToolGate":
        def globs(sources: list[str], location: str) -> tuple[Glob, ...]:
            return tuple(g for _, g in compile_each(sources, location, compile_glob, issues))

        return cls(
            deny=globs(config.deny, "tools.deny"),
            ask=globs(config.ask, "tools.ask"),
            allow=globs(config.allow, "tools.allow"),
            mcp_deny=globs(config.mcp.deny_servers, "tools.mcp.deny_servers"),
            mcp_ask=globs(config.mcp.ask_servers, "tools.mcp.ask_servers"),
            mcp_allow=globs(config.mcp.allow_servers, "tools.mcp.allow_servers"),
        )

    def check(self, tool_name: str) -> Verdict | None:
        """
        Check a tool name against the permission lists.

        Returns:
            Deny/Ask/Allow verdict on a match, None to continue inspection
        """
        server = extract_mcp_server(tool_name)
        if server is not None:
            verdict = self._check_server(server)
            if verdict is not None:
                return verdict

        return self._check_tool(tool_name)

    def _check_server(self, server: str) -> Verdict | None:
        if _any_match(self.mcp_deny, server):
            return Verdict.deny(f"MCP server '{server}' is blocked by policy")
        if _any_match(self.mcp_ask, server):
            return Verdict.ask(f"MCP server '{server}' requires confirmation")
        if _any_match(self.mcp_allow, server):
            return Verdict.allow()
        return None

    def _check_tool(self, tool_name: str) -> Verdict | None:
        if _any_match(self.deny, tool_name):
            return Verdict.deny(f"Tool '{tool_name}' is blocked by policy")
        if _any_match(self.ask, tool_name):
            return Verdict.ask(f"Tool '{tool_name}' requires confirmation")
        if _any_match(self.allow, tool_name):
            return Verdict.allow()
        return None
