"""
Schema definitions for Toolgate.

This module defines the Pydantic models for everything Toolgate reads:
- Config/PolicyConfig/ToolsConfig: What the gate enforces
- Per-detector blocks: secrets, commands, protected paths, network
- ToolInvocation: One attempted tool call as the host delivers it

Design Decisions:
    - Config models are immutable (frozen=True) and reject unknown keys
    - Defaults are a usable policy: an empty file protects out of the box
    - ToolInvocation ignores extra keys so host payloads can grow freely

The loaders at the bottom are the only place configuration touches the
filesystem. The policy compiler receives an already-validated Config.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from toolgate.errors import ConfigError, ConfigNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "toolgate.yaml"


# =============================================================================
# Enums
# =============================================================================


class PolicyMode(str, Enum):
    """
    Operating mode of the gate.

    STRICT enforces verdicts. MONITOR logs would-be denials and lets the
    call proceed, for trialling a policy without blocking an agent.
    """

    STRICT = "strict"
    MONITOR = "monitor"


# =============================================================================
# Default rule sets
# =============================================================================


def default_block_patterns() -> list[str]:
    """Destructive shell command patterns blocked out of the box."""
    return [
        r"rm\s+-rf\s+[/~]",
        r">\s*/dev/sd[a-z]",
        r"mkfs\.",
        r"dd\s+if=.+of=/dev/",
        r"chmod\s+-R\s+777\s+/",
        r":\(\)\s*\{\s*:\|:&\s*\}\s*;",
    ]


def default_blocked_paths() -> list[str]:
    """Sensitive file globs blocked out of the box."""
    return [
        "**/.env",
        "**/.env.*",
        "**/*.pem",
        "**/*.key",
        "**/id_rsa",
        "**/id_ed25519",
        "**/.ssh/**",
        "**/.aws/credentials",
        "**/.git/config",
    ]


def default_blocked_domains() -> list[str]:
    """Paste, tunnel and request-capture services blocked out of the box."""
    return [
        "pastebin.com",
        "hastebin.com",
        "paste.ee",
        "ghostbin.com",
        "ngrok.io",
        "ngrok.app",
        "requestbin.com",
        "hookbin.com",
        "webhook.site",
    ]


# =============================================================================
# Tool permission models
# =============================================================================


class McpConfig(BaseModel):
    """
    Permission lists for MCP servers.

    Patterns are globs matched against the server segment of
    ``mcp__<server>__<tool>`` names.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allow_servers: list[str] = Field(
        default_factory=list,
        description="MCP servers whose tools always proceed",
    )
    deny_servers: list[str] = Field(
        default_factory=list,
        description="MCP servers whose tools are blocked",
    )
    ask_servers: list[str] = Field(
        default_factory=list,
        description="MCP servers whose tools require confirmation",
    )


class ToolsConfig(BaseModel):
    """
    Tool-level permission lists, checked before any parameter inspection.

    Attributes:
        allow: Tool name globs that skip inspection entirely
        deny: Tool name globs that are always blocked
        ask: Tool name globs that require user confirmation
        mcp: Server-scoped lists for MCP tools
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allow: list[str] = Field(default_factory=list, description="Tools that always proceed")
    deny: list[str] = Field(default_factory=list, description="Tools that are blocked")
    ask: list[str] = Field(default_factory=list, description="Tools requiring confirmation")
    mcp: McpConfig = Field(default_factory=McpConfig, description="MCP server permissions")


# =============================================================================
# Detector models
# =============================================================================


class SecretsConfig(BaseModel):
    """
    Secret scanning configuration.

    Attributes:
        enabled: Master switch for the scanner
        entropy_threshold: Reserved for generic high-entropy detection (inert)
        detect_aws_keys: AWS access key IDs
        detect_github_tokens: GitHub personal/service tokens
        detect_openai_keys: OpenAI-style ``sk-`` keys
        detect_private_keys: PEM private key headers
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=True, description="Enable secret scanning")
    entropy_threshold: float = Field(
        default=4.5,
        description="Entropy threshold for generic secret detection (reserved)",
        ge=0,
    )
    detect_aws_keys: bool = Field(default=True, description="Detect AWS access keys")
    detect_github_tokens: bool = Field(default=True, description="Detect GitHub tokens")
    detect_openai_keys: bool = Field(default=True, description="Detect OpenAI API keys")
    detect_private_keys: bool = Field(default=True, description="Detect PEM private keys")


class CommandsConfig(BaseModel):
    """
    Dangerous command detection.

    Attributes:
        enabled: Master switch for the scanner
        block_patterns: Regexes matched against the raw command text
        allow_patterns: Regexes that, when any matches, permit the command
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=True, description="Enable command scanning")
    block_patterns: list[str] = Field(
        default_factory=default_block_patterns,
        description="Patterns to block (regex)",
    )
    allow_patterns: list[str] = Field(
        default_factory=list,
        description="Patterns that override blocks (regex)",
    )


class ProtectedPathsConfig(BaseModel):
    """Protected path globs for file read/write/edit calls."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=True, description="Enable path protection")
    blocked: list[str] = Field(
        default_factory=default_blocked_paths,
        description="Glob patterns for blocked paths",
    )


class NetworkConfig(BaseModel):
    """Domains treated as data-exfiltration endpoints."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=True, description="Enable network checking")
    block_domains: list[str] = Field(
        default_factory=default_blocked_domains,
        description="Domains to block (subdomains included)",
    )


class PolicyConfig(BaseModel):
    """
    Parameter-level policy.

    Attributes:
        mode: strict (enforce) or monitor (log only)
        fail_closed: Deny when the engine hits an internal fault
        secrets: Secret scanner settings
        commands: Command scanner settings
        protected_paths: Path guard settings
        network: Network guard settings
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: PolicyMode = Field(default=PolicyMode.STRICT, description="Operation mode")
    fail_closed: bool = Field(default=True, description="Deny on internal errors")
    secrets: SecretsConfig = Field(default_factory=SecretsConfig)
    commands: CommandsConfig = Field(default_factory=CommandsConfig)
    protected_paths: ProtectedPathsConfig = Field(default_factory=ProtectedPathsConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)


class Config(BaseModel):
    """Root configuration, as stored in ``toolgate.yaml``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)


# =============================================================================
# Runtime Models
# =============================================================================


class ToolInvocation(BaseModel):
    """
    One attempted tool call, as delivered by the host.

    Attributes:
        tool_name: Tool or operation name (e.g. "Bash", "mcp__github__search")
        tool_input: Arbitrary JSON parameters
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    tool_name: str = Field(..., description="Name of the tool being invoked")
    tool_input: Any = Field(default_factory=dict, description="Raw JSON parameters")


# =============================================================================
# YAML Loading Helpers
# =============================================================================


def global_config_path() -> Path:
    """Return the per-user config location (~/.config/toolgate/toolgate.yaml)."""
    return Path.home() / ".config" / "toolgate" / DEFAULT_CONFIG_FILENAME


def load_config(path: Path | str) -> Config:
    """
    Load a configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated Config object

    Raises:
        ConfigNotFoundError: If the file doesn't exist
        ConfigError: If the file is unreadable, not YAML, or fails validation
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigNotFoundError(path=str(path)) from None
    except OSError as e:
        raise ConfigError(message=f"Failed to read config file {path}: {e}", path=str(path)) from e

    return _parse_config(content, str(path))


def load_config_from_string(content: str) -> Config:
    """Load a configuration from a YAML string."""
    return _parse_config(content, None)


def resolve_config(path: Path | str = DEFAULT_CONFIG_FILENAME) -> Config:
    """
    Find and load the active configuration.

    Resolution order:
        1. The given path, if it exists
        2. ~/.config/toolgate/toolgate.yaml, if it exists
        3. Built-in defaults
    """
    path = Path(path)
    if path.exists():
        logger.debug("Loading config from %s", path)
        return load_config(path)

    global_path = global_config_path()
    if global_path.exists():
        logger.debug("Loading global config from %s", global_path)
        return load_config(global_path)

    logger.debug("No config file found, using defaults")
    return Config()


def _parse_config(content: str, source: str | None) -> Config:
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(message=f"Invalid YAML syntax: {e}", path=source) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            message="Configuration root must be a mapping",
            path=source,
        )

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(message=f"Invalid configuration: {e}", path=source) from e
