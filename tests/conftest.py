"""
Pytest configuration and fixtures for Toolgate tests.

This module provides shared fixtures used across unit, integration,
and security tests.
"""

import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any, Generator

import pytest

from toolgate.policy import CompiledPolicy, compile_policy
from toolgate.schema import Config, ToolInvocation


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def default_policy() -> CompiledPolicy:
    """Policy compiled from the built-in defaults."""
    return compile_policy(Config())


@pytest.fixture
def make_call() -> Callable[..., ToolInvocation]:
    """Factory for ToolInvocation values."""

    def _make(tool_name: str, tool_input: Any = None) -> ToolInvocation:
        return ToolInvocation(
            tool_name=tool_name,
            tool_input={} if tool_input is None else tool_input,
        )

    return _make


@pytest.fixture
def sample_config_yaml() -> str:
    """Return a representative configuration YAML."""
    return """
policy:
  mode: strict
  fail_closed: true
  secrets:
    enabled: true
    detect_openai_keys: false
  commands:
    block_patterns:
      - 'rm\\s+-rf\\s+[/~]'
      - 'git\\s+push\\s+--force'
    allow_patterns:
      - 'rm\\s+-rf\\s+/tmp/'
  protected_paths:
    blocked:
      - "**/.env"
      - "**/secrets/**"
  network:
    block_domains:
      - pastebin.com
tools:
  deny:
    - "Dangerous*"
  ask:
    - "Write"
  mcp:
    deny_servers:
      - "evil*"
"""


@pytest.fixture
def config_file(temp_dir: Path, sample_config_yaml: str) -> Path:
    """Write the sample configuration to disk."""
    path = temp_dir / "toolgate.yaml"
    path.write_text(sample_config_yaml)
    return path
