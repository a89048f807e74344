"""
Install and uninstall the hook in the host's settings file.

The host keeps its hooks in ``~/.claude/settings.json``:

    {"hooks": {"PreToolUse": [{"hooks": [{"type": "command", "command": "..."}]}]}}

install_hook() appends a matcher-less entry (all tools) running
``<command>``; it is a no-op when an entry mentioning toolgate already
exists. uninstall_hook() removes every entry whose nested hooks mention
toolgate and leaves everything else untouched.
"""

import json
import logging
import shutil
import sys
from pathlib import Path
from typing import Any

from toolgate.errors import InstallError

logger = logging.getLogger(__name__)

HOOK_MARKER = "toolgate"


def default_settings_path() -> Path:
    """Return the host settings file (~/.claude/settings.json)."""
    return Path.home() / ".claude" / "settings.json"


def default_hook_command() -> str:
    """Command the host should run for each tool call."""
    executable = shutil.which("toolgate") or f"{sys.executable} -m toolgate.cli"
    return f"{executable} hook"


def _load_settings(settings_path: Path) -> dict[str, Any]:
    try:
        settings = json.loads(settings_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise InstallError(settings_path=str(settings_path), underlying_error=str(e)) from e
    except json.JSONDecodeError as e:
        raise InstallError(
            settings_path=str(settings_path),
            underlying_error=f"invalid JSON: {e}",
        ) from e
    if not isinstance(settings, dict):
        raise InstallError(
            settings_path=str(settings_path),
            underlying_error="settings root is not an object",
        )
    return settings


def _save_settings(settings_path: Path, settings: dict[str, Any]) -> None:
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        settings_path.write_text(json.dumps(settings, indent=2), encoding="utf-8")
    except OSError as e:
        raise InstallError(settings_path=str(settings_path), underlying_error=str(e)) from e


def _is_toolgate_entry(entry: Any) -> bool:
    if not isinstance(entry, dict):
        return False
    hooks = entry.get("hooks")
    if not isinstance(hooks, list):
        return False
    return any(
        isinstance(hook, dict)
        and isinstance(hook.get("command"), str)
        and HOOK_MARKER in hook["command"]
        for hook in hooks
    )


def install_hook(settings_path: Path, command: str) -> bool:
    """
    Add the PreToolUse hook to the settings file.

    Args:
        settings_path: Host settings file (created if missing)
        command: Command line the host should run

    Returns:
        True if the hook was added, False if it was already installed

    Raises:
        InstallError: If the settings file cannot be read or written
    """
    settings = _load_settings(settings_path) if settings_path.exists() else {}

    hooks = settings.setdefault("hooks", {})
    if not isinstance(hooks, dict):
        raise InstallError(
            settings_path=str(settings_path),
            underlying_error="'hooks' is not an object",
        )

    entry = {"hooks": [{"type": "command", "command": command}]}
    pre_tool_use = hooks.get("PreToolUse")

    if isinstance(pre_tool_use, list):
        if any(_is_toolgate_entry(e) for e in pre_tool_use):
            logger.info("Hook already installed in %s", settings_path)
            return False
        pre_tool_use.append(entry)
    else:
        hooks["PreToolUse"] = [entry]

    _save_settings(settings_path, settings)
    logger.info("Installed hook in %s", settings_path)
    return True


def uninstall_hook(settings_path: Path) -> int:
    """
    Remove toolgate entries from the settings file.

    Returns:
        Number of entries removed (0 when the file does not exist)

    Raises:
        InstallError: If the settings file cannot be read or written
    """
    if not settings_path.exists():
        logger.info("No settings file at %s", settings_path)
        return 0

    settings = _load_settings(settings_path)
    hooks = settings.get("hooks")
    if not isinstance(hooks, dict) or not isinstance(hooks.get("PreToolUse"), list):
        return 0

    before = hooks["PreToolUse"]
    kept = [e for e in before if not _is_toolgate_entry(e)]
    removed = len(before) - len(kept)
    if removed:
        hooks["PreToolUse"] = kept
        _save_settings(settings_path, settings)
        logger.info("Removed %d hook entr(ies) from %s", removed, settings_path)
    return removed
