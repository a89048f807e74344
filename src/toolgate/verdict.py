"""
Verdict and block reason models.

A Verdict is the only externally observable result of inspecting a tool
call. Denials raised by the parameter detectors always carry exactly one
structured BlockReason, from which the human-readable reason and the
context hint shown to the agent are derived.

BlockReason is a closed, tagged union keyed by ``code``:

    secret_detected       {secret_type, redacted}
    dangerous_command     {pattern, matched}
    protected_path        {path, pattern}
    network_exfiltration  {domain}
    internal_error        {message}

Reasons serialize to JSON with their ``code`` and parse back to equal values.
"""

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


# =============================================================================
# Block Reasons
# =============================================================================


class _Reason(BaseModel):
    """Shared behaviour of every block reason."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def hint(self) -> str:
        """Guidance for the agent on how to proceed."""
        raise NotImplementedError


class SecretDetected(_Reason):
    """A credential-shaped value was found in the call's text."""

    code: Literal["secret_detected"] = "secret_detected"
    secret_type: str
    redacted: str

    def __str__(self) -> str:
        return f"Secret detected ({self.secret_type}): {self.redacted}"

    @property
    def hint(self) -> str:
        return (
            "This content contains secrets. Use environment variables "
            "or a secrets manager instead."
        )


class DangerousCommand(_Reason):
    """A shell command matched a destructive pattern."""

    code: Literal["dangerous_command"] = "dangerous_command"
    pattern: str
    matched: str

    def __str__(self) -> str:
        return f"Dangerous command blocked: '{self.matched}' matches pattern '{self.pattern}'"

    @property
    def hint(self) -> str:
        return (
            "This command matches a dangerous pattern. Use more targeted "
            "commands or adjust your policy."
        )


class ProtectedPath(_Reason):
    """A file operation targeted a protected path."""

    code: Literal["protected_path"] = "protected_path"
    path: str
    pattern: str

    def __str__(self) -> str:
        return f"Protected path blocked: '{self.path}' matches pattern '{self.pattern}'"

    @property
    def hint(self) -> str:
        return "This file is protected by policy. Check toolgate.yaml for protected paths."


class NetworkExfiltration(_Reason):
    """A URL pointed at a blocked (exfiltration-prone) domain."""

    code: Literal["network_exfiltration"] = "network_exfiltration"
    domain: str

    def __str__(self) -> str:
        return f"Network exfiltration blocked: domain '{self.domain}' is not allowed"

    @property
    def hint(self) -> str:
        return (
            "This domain is blocked to prevent data exfiltration. "
            "Remove it from block_domains if needed."
        )


class InternalError(_Reason):
    """The engine faulted and failed closed."""

    code: Literal["internal_error"] = "internal_error"
    message: str

    def __str__(self) -> str:
        return f"Internal error: {self.message}"

    @property
    def hint(self) -> str:
        return "An internal error occurred. Toolgate is operating in fail-closed mode."


BlockReason = Annotated[
    SecretDetected | DangerousCommand | ProtectedPath | NetworkExfiltration | InternalError,
    Field(discriminator="code"),
]

_BLOCK_REASON_ADAPTER: TypeAdapter[BlockReason] = TypeAdapter(BlockReason)


def parse_block_reason(data: dict[str, Any]) -> BlockReason:
    """Build a BlockReason from its dict form (dispatches on ``code``)."""
    return _BLOCK_REASON_ADAPTER.validate_python(data)


def parse_block_reason_json(text: str | bytes) -> BlockReason:
    """Build a BlockReason from its JSON form."""
    return _BLOCK_REASON_ADAPTER.validate_json(text)


# =============================================================================
# Verdict
# =============================================================================


class Decision(str, Enum):
    """The three possible outcomes of an inspection."""

    ALLOW = "allow"
    DENY = "deny"
    ASK = "ask"


class Verdict(BaseModel):
    """
    Outcome of inspecting one tool call.

    Attributes:
        decision: allow, deny or ask
        reason: Why the call was denied or needs confirmation
        context: Extra guidance for the agent (deny only)
        block_reason: Structured reason behind a detector denial
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    decision: Decision = Field(..., description="The permission decision")
    reason: str | None = Field(default=None, description="Human-readable reason")
    context: str | None = Field(default=None, description="Additional context for the agent")
    block_reason: BlockReason | None = Field(
        default=None,
        description="Structured reason (detector denials only)",
    )

    @classmethod
    def allow(cls) -> "Verdict":
        """Create an ALLOW verdict."""
        return cls(decision=Decision.ALLOW)

    @classmethod
    def deny(cls, reason: str, context: str | None = None) -> "Verdict":
        """Create a DENY verdict."""
        return cls(decision=Decision.DENY, reason=reason, context=context)

    @classmethod
    def ask(cls, reason: str) -> "Verdict":
        """Create an ASK verdict."""
        return cls(decision=Decision.ASK, reason=reason)

    @classmethod
    def from_block_reason(cls, block_reason: BlockReason) -> "Verdict":
        """Create a DENY verdict derived from a structured reason."""
        return cls(
            decision=Decision.DENY,
            reason=str(block_reason),
            context=block_reason.hint,
            block_reason=block_reason,
        )

    @property
    def is_allow(self) -> bool:
        return self.decision == Decision.ALLOW

    @property
    def is_deny(self) -> bool:
        return self.decision == Decision.DENY

    @property
    def is_ask(self) -> bool:
        return self.decision == Decision.ASK

    @property
    def permission_decision(self) -> str:
        """Decision string as hosts expect it ("allow", "deny", "ask")."""
        return self.decision.value
