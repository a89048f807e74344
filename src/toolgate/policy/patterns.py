"""
Pattern compilation for the policy compiler.

Every regex and glob in a configuration is compiled here, once, when the
policy is built. A pattern that fails to compile raises PatternCompileError;
the compiler collects these as PatternIssue records, drops the pattern, and
keeps the rest of the detector active.

Glob syntax:
    *       any run of characters (separators included)
    ?       one character
    [abc]   character class, [!abc] negated
    **      recursive wildcard; must be a whole path component.
            "**/" also matches zero directories: "**/.env" matches ".env"

Glob matching is case-sensitive. Invalid globs: unclosed ``[``, ``***``,
``**`` fused with other characters in the same component, and classes
with a reversed range such as ``[z-a]``.
"""

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TypeVar

from toolgate.errors import PatternCompileError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PatternIssue:
    """
    A configured pattern that was dropped from the active rule set.

    Attributes:
        location: Where the pattern lives, e.g. "policy.commands.block_patterns[2]"
        pattern: The pattern source
        kind: "regex" or "glob"
        message: Compiler message
    """

    location: str
    pattern: str
    kind: str
    message: str

    @classmethod
    def from_error(cls, error: PatternCompileError) -> "PatternIssue":
        return cls(
            location=error.location,
            pattern=error.pattern,
            kind=error.kind,
            message=error.reason,
        )


@dataclass(frozen=True)
class Glob:
    """A compiled glob pattern."""

    source: str
    regex: re.Pattern[str]

    def matches(self, text: str) -> bool:
        return self.regex.match(text) is not None


def compile_regex(source: str, location: str = "") -> re.Pattern[str]:
    """
    Compile a regular expression.

    Raises:
        PatternCompileError: If the expression is invalid
    """
    try:
        return re.compile(source)
    except (re.error, OverflowError) as e:
        raise PatternCompileError(
            pattern=source,
            location=location,
            kind="regex",
            reason=str(e),
        ) from e


def compile_glob(source: str, location: str = "") -> Glob:
    """
    Compile a glob pattern.

    Raises:
        PatternCompileError: If the glob is invalid
    """
    problem = _glob_problem(source)
    if problem is not None:
        raise PatternCompileError(
            pattern=source,
            location=location,
            kind="glob",
            reason=problem,
        )
    try:
        regex = re.compile(_translate(source))
    except re.error as e:
        # Class bodies pass through, e.g. a reversed range like [z-a].
        raise PatternCompileError(
            pattern=source,
            location=location,
            kind="glob",
            reason=str(e),
        ) from e
    return Glob(source=source, regex=regex)


def _glob_problem(source: str) -> str | None:
    """Return why a glob is invalid, or None if it is valid."""
    i = 0
    n = len(source)
    while i < n:
        c = source[i]
        if c == "*":
            run = 1
            while i + run < n and source[i + run] == "*":
                run += 1
            if run > 2:
                return f"wildcards are either regular '*' or recursive '**' (position {i})"
            if run == 2:
                before_ok = i == 0 or source[i - 1] == "/"
                after_ok = i + 2 == n or source[i + 2] == "/"
                if not (before_ok and after_ok):
                    return f"recursive wildcards must form a single path component (position {i})"
            i += run
        elif c == "[":
            j = i + 1
            if j < n and source[j] == "!":
                j += 1
            # A leading ']' is a literal member of the class.
            if j < n and source[j] == "]":
                j += 1
            while j < n and source[j] != "]":
                j += 1
            if j >= n:
                return f"unclosed character class (position {i})"
            i = j + 1
        else:
            i += 1
    return None


def _class_end(source: str, start: int) -> int:
    """Index of the ``]`` closing the class opened at start."""
    j = start + 1
    if j < len(source) and source[j] == "!":
        j += 1
    if j < len(source) and source[j] == "]":
        j += 1
    return source.index("]", j)


def _translate(source: str) -> str:
    """Translate a validated glob into an anchored regular expression."""
    out: list[str] = []
    i = 0
    n = len(source)
    while i < n:
        c = source[i]
        if c == "*":
            if source.startswith("**/", i):
                out.append("(?:.*/)?")
                i += 3
            elif source.startswith("**", i):
                out.append(".*")
                i += 2
            else:
                out.append(".*")
                i += 1
        elif c == "?":
            out.append(".")
            i += 1
        elif c == "[":
            end = _class_end(source, i)
            body = source[i + 1:end]
            if body.startswith("!"):
                prefix, body = "^", body[1:]
            else:
                prefix = ""
            body = re.sub(r"([\\^&~|\[])", r"\\\1", body)
            out.append(f"[{prefix}{body}]")
            i = end + 1
        else:
            out.append(re.escape(c))
            i += 1
    return f"(?s:{''.join(out)})\\Z"


def compile_each(
    sources: Iterable[str],
    location: str,
    compiler: Callable[[str, str], T],
    issues: list[PatternIssue],
) -> list[tuple[str, T]]:
    """
    Compile a list of patterns, dropping the invalid ones.

    Args:
        sources: Pattern sources in configured order
        location: Config location of the list (index is appended)
        compiler: compile_regex or compile_glob
        issues: Receives one PatternIssue per dropped pattern

    Returns:
        (source, compiled) pairs for the valid patterns, order preserved
    """
    compiled: list[tuple[str, T]] = []
    for index, source in enumerate(sources):
        try:
            compiled.append((source, compiler(source, f"{location}[{index}]")))
        except PatternCompileError as e:
            logger.warning("Dropping invalid %s at %s: %s", e.kind, e.location, e.reason)
            issues.append(PatternIssue.from_error(e))
    return compiled
