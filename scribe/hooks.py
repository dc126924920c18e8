"""Generation and installation of the hook configuration for the agent's settings file."""

from __future__ import annotations

import copy
import json
import sys
from enum import Enum
from pathlib import Path
from typing import Any

# Hook events in canonical order, with whether each one accepts a ``matcher``.
# WorktreeCreate is deliberately left out.
HOOK_EVENTS: tuple[tuple[str, bool], ...] = (
    ("PreToolUse", True),
    ("PostToolUse", True),
    ("PostToolUseFailure", True),
    ("UserPromptSubmit", False),
    ("PermissionRequest", True),
    ("SessionStart", True),
    ("SessionEnd", True),
    ("SubagentStart", True),
    ("SubagentStop", True),
    ("Stop", False),
    ("StopFailure", True),
    ("Notification", True),
    ("PreCompact", True),
    ("PostCompact", True),
    ("InstructionsLoaded", True),
    ("ConfigChange", True),
    ("WorktreeRemove", False),
    ("Elicitation", True),
    ("ElicitationResult", True),
    ("TeammateIdle", False),
    ("TaskCompleted", False),
)

PROJECT_SETTINGS = Path(".claude") / "settings.json"

_LOG_COMMAND = "scribe log"
_GUARD_COMMAND = "scribe guard"
_HOOK_TIMEOUT = 10


class OutputTarget(Enum):
    """Where the generated configuration goes."""

    STDOUT = "stdout"
    PROJECT = "project"
    GLOBAL = "global"


class SettingsError(ValueError):
    """An existing settings file cannot be merged into."""


def _command_hook(command: str) -> dict[str, Any]:
    return {"type": "command", "command": command, "timeout": _HOOK_TIMEOUT}


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def generate_hooks_config(with_guard: bool = False) -> dict[str, Any]:
    """Build the complete hooks configuration.

    With ``with_guard``, PreToolUse runs ``scribe guard`` before ``scribe log``.
    """
    hooks: dict[str, Any] = {}
    for event, has_matcher in HOOK_EVENTS:
        commands = [_LOG_COMMAND]
        if with_guard and event == "PreToolUse":
            commands.insert(0, _GUARD_COMMAND)
        entry: dict[str, Any] = {}
        if has_matcher:
            entry["matcher"] = "*"
        entry["hooks"] = [_command_hook(command) for command in commands]
        hooks[event] = [entry]
    return {"hooks": hooks}


def is_scribe_entry(entry: Any) -> bool:
    """True if a hook entry runs a command starting with ``scribe log``."""
    if not isinstance(entry, dict):
        return False
    hooks = entry.get("hooks")
    if not isinstance(hooks, list):
        return False
    return any(
        isinstance(hook, dict)
        and isinstance(hook.get("command"), str)
        and hook["command"].startswith(_LOG_COMMAND)
        for hook in hooks
    )


def merge_and_write(path: Path | str, config: dict[str, Any]) -> None:
    """Merge the generated hooks into the settings file at ``path``, creating it if needed.

    Other settings and other hooks are kept; an existing scribe entry for an
    event is replaced in place. Raises SettingsError if the existing file is
    not usable, leaving it untouched.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.exists():
        content = path.read_text(encoding="utf-8")
        try:
            existing = json.loads(content)
        except json.JSONDecodeError as exc:
            raise SettingsError(f"existing file {path} contains invalid JSON: {exc}") from None
    else:
        existing = {}

    if not isinstance(existing, dict):
        raise SettingsError("existing settings file is not a JSON object")

    existing_hooks = existing.setdefault("hooks", {})
    if not isinstance(existing_hooks, dict):
        raise SettingsError("existing 'hooks' key is not a JSON object")

    for event, generated_entries in config["hooks"].items():
        generated = generated_entries[0]
        if event not in existing_hooks:
            existing_hooks[event] = [copy.deepcopy(generated)]
            continue
        entries = existing_hooks[event]
        if not isinstance(entries, list):
            continue
        position = next((i for i, e in enumerate(entries) if is_scribe_entry(e)), None)
        if position is None:
            entries.append(copy.deepcopy(generated))
        else:
            entries[position] = copy.deepcopy(generated)

    path.write_text(_to_json(existing) + "\n", encoding="utf-8")


def install_hooks(
    target: OutputTarget,
    home: Path | str | None = None,
    with_guard: bool = False,
) -> Path | None:
    """Generate the hooks and send them to ``target``.

    Returns the settings file written, or None when printed to stdout.
    ``home`` replaces the user's home directory for the global target.
    """
    config = generate_hooks_config(with_guard)

    if target is OutputTarget.STDOUT:
        print(_to_json(config))
        return None

    if target is OutputTarget.PROJECT:
        path = PROJECT_SETTINGS
    else:
        base = Path(home) if home is not None else Path.home()
        path = base / ".claude" / "settings.json"

    merge_and_write(path, config)
    print(f"scribe: wrote hooks to {path}", file=sys.stderr)
    return path