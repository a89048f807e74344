"""
Dangerous command detection.

Applies to shell-command calls only. Matching is purely lexical: patterns
are regular expressions searched in the raw command text, with no shell
parsing.

Allow patterns are a global override: if any allow pattern matches anywhere
in the command, the command passes even when block patterns also match.
Otherwise the first block pattern (in configured order) that matches wins.
"""

import re
from dataclasses import dataclass

from toolgate.policy.patterns import PatternIssue, compile_each, compile_regex
from toolgate.schema import CommandsConfig


@dataclass(frozen=True)
class CommandMatch:
    """
    A matched dangerous command.

    Attributes:
        pattern: Source of the block pattern that matched
        matched: The exact matched substring
    """

    pattern: str
    matched: str


@dataclass(frozen=True)
class CommandScanner:
    """Command scanner with compiled block and allow patterns."""

    enabled: bool = True
    block_patterns: tuple[tuple[str, re.Pattern[str]], ...] = ()
    allow_patterns: tuple[re.Pattern[str], ...] = ()

    @classmethod
    def from_config(cls, config: CommandsConfig, issues: list[PatternIssue]) -> "CommandScanner":
        block = compile_each(
            config.block_patterns, "policy.commands.block_patterns", compile_regex, issues
        )
        allow = compile_each(
            config.allow_patterns, "policy.commands.allow_patterns", compile_regex, issues
        )
        return cls(
            enabled=config.enabled,
            block_patterns=tuple(block),
            allow_patterns=tuple(pattern for _, pattern in allow),
        )

    def check(self, command: str) -> CommandMatch | None:
        """
        Check whether a command should be blocked.

        Returns:
            CommandMatch for the first block pattern hit, unless an allow
            pattern matches somewhere in the command
        """
        if not self.enabled:
            return None

        for allow_pattern in self.allow_patterns:
            if allow_pattern.search(command):
                return None

        for source, block_pattern in self.block_patterns:
            m = block_pattern.search(command)
            if m:
                return CommandMatch(pattern=source, matched=m.group(0))

        return None
