"""
Protected path guard.

Applies to the path argument of file read/write/edit calls. Each blocked
glob is tried two ways:

    1. Full match against the normalized path (and, separately, the path as
       given).
    2. Filename fallback: the path's final segment against the pattern's
       final segment, so "certs/*.key" also blocks "deploy/prod.key".
       Skipped when the pattern's final segment is a bare "*" or "**".

The first blocked pattern that matches wins.
"""

import re
from dataclasses import dataclass

from toolgate.policy.patterns import Glob, PatternIssue, compile_each, compile_glob
from toolgate.schema import ProtectedPathsConfig

_SEPARATORS = re.compile(r"[/\\]+")


@dataclass(frozen=True)
class PathMatch:
    """
    A matched protected path.

    Attributes:
        path: The path as given in the call
        pattern: Source of the blocked glob that matched
    """

    path: str
    pattern: str


@dataclass(frozen=True)
class _PathRule:
    source: str
    glob: Glob
    filename_glob: Glob | None


def normalize_path(path: str) -> str:
    """
    Normalize a path for matching.

    Examples:
        ./foo/bar -> foo/bar
        foo//bar -> foo/bar
        foo\\bar -> foo/bar
    """
    if path.startswith("./"):
        path = path[2:]
    return _SEPARATORS.sub("/", path)


def _final_segment(path: str) -> str | None:
    segment = path.rstrip("/").rsplit("/", 1)[-1]
    if segment in ("", ".", ".."):
        return None
    return segment


@dataclass(frozen=True)
class PathGuard:
    """Path guard with compiled blocked globs."""

    enabled: bool = True
    rules: tuple[_PathRule, ...] = ()

    @classmethod
    def from_config(cls, config: ProtectedPathsConfig, issues: list[PatternIssue]) -> "PathGuard":
        rules = []
        for source, glob in compile_each(
            config.blocked, "policy.protected_paths.blocked", compile_glob, issues
        ):
            filename_pattern = source.rsplit("/", 1)[-1]
            filename_glob = None
            if filename_pattern not in ("*", "**"):
                # Valid full pattern implies a valid trailing segment.
                filename_glob = compile_glob(filename_pattern)
            rules.append(_PathRule(source=source, glob=glob, filename_glob=filename_glob))
        return cls(enabled=config.enabled, rules=tuple(rules))

    def check(self, path: str) -> PathMatch | None:
        """Return the first blocked pattern matching path, if any."""
        if not self.enabled:
            return None

        normalized = normalize_path(path)
        filename = _final_segment(normalized)

        for rule in self.rules:
            if rule.glob.matches(normalized) or rule.glob.matches(path):
                return PathMatch(path=path, pattern=rule.source)

            if filename is not None and rule.filename_glob is not None:
                if rule.filename_glob.matches(filename):
                    return PathMatch(path=path, pattern=rule.source)

        return None

    def is_blocked(self, path: str) -> bool:
        return self.check(path) is not None
