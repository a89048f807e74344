"""
Exception hierarchy for Toolgate.

All Toolgate exceptions inherit from ToolgateError, allowing callers to catch
all Toolgate-specific exceptions with a single except clause.

Exception Categories:
    - ConfigError: Configuration file could not be read or validated
    - PatternCompileError: A single regex/glob pattern failed to compile
    - HookInputError: The hook payload could not be decoded
    - InstallError: Host settings file could not be updated

The inspection engine itself never raises: faults inside the pipeline are
converted into verdicts. These errors belong to the collaborators around it
(loader, linter, hook adapter, installer).
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Configuration errors: 1xxx
ERROR_CONFIG_INVALID = 1001
ERROR_CONFIG_NOT_FOUND = 1002
ERROR_PATTERN_INVALID = 1003

# Input errors: 2xxx
ERROR_HOOK_INPUT = 2001

# Install errors: 3xxx
ERROR_INSTALL_FAILED = 3001


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class ToolgateError(Exception):
    """
    Base exception for all Toolgate errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Configuration Errors
# =============================================================================


@dataclass
class ConfigError(ToolgateError):
    """
    Raised when a configuration file cannot be parsed or validated.

    Attributes:
        path: The configuration file involved (if any)
    """

    path: str | None = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid configuration: {self.path}"
        if self.code == 0:
            self.code = ERROR_CONFIG_INVALID
        if not self.suggestion:
            self.suggestion = "Run `toolgate lint` to see every problem in the file"
        self.context["path"] = self.path


@dataclass
class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested configuration file is missing."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Configuration file not found: {self.path}"
        if self.code == 0:
            self.code = ERROR_CONFIG_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "Check the --config path or create the file"
        super().__post_init__()


@dataclass
class PatternCompileError(ToolgateError):
    """
    Raised when a single regex or glob pattern fails to compile.

    The policy compiler catches this per pattern, drops the pattern from the
    active rule set and records it as a PatternIssue.

    Attributes:
        pattern: The offending pattern source
        location: Where the pattern lives in the config
        kind: "regex" or "glob"
        reason: Compiler message
    """

    pattern: str = ""
    location: str = ""
    kind: str = "regex"
    reason: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid {self.kind} in {self.location}: {self.reason}"
        if self.code == 0:
            self.code = ERROR_PATTERN_INVALID
        self.context.update({
            "pattern": self.pattern,
            "location": self.location,
            "kind": self.kind,
            "reason": self.reason,
        })


# =============================================================================
# Input Errors
# =============================================================================


@dataclass
class HookInputError(ToolgateError):
    """Raised when the hook payload on stdin is not a usable invocation."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to parse hook input: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_HOOK_INPUT
        self.context["underlying_error"] = self.underlying_error


# =============================================================================
# Install Errors
# =============================================================================


@dataclass
class InstallError(ToolgateError):
    """Raised when the host settings file cannot be read or written."""

    settings_path: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to update {self.settings_path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_INSTALL_FAILED
        self.context.update({
            "settings_path": self.settings_path,
            "underlying_error": self.underlying_error,
        })
