"""Built-in heuristics for assessing the risk of a tool call."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class RiskLevel(Enum):
    """Risk level assigned to a classified tool call."""

    SAFE = "safe"
    RISKY = "risky"
    DANGEROUS = "dangerous"

    def as_str(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Classification:
    """The verdict of one heuristic on a tool call."""

    tool_name: str
    input_pattern: str
    risk_level: RiskLevel
    reason: str
    heuristic: str


_WRITE_TOOLS = frozenset({"Write", "Edit"})

_DESTRUCTIVE_PATTERNS = (
    ("rm -rf", "recursive force deletion"),
    ("rm -fr", "recursive force deletion"),
    ("sudo ", "superuser command"),
    ("chmod 777", "world-writable permissions"),
    ("mkfs", "filesystem creation"),
    ("dd if=", "raw disk write"),
)

_PIPE_TARGETS = ("| sh", "| bash", "| eval", "| exec", "|sh", "|bash")
_SHELL_PIPES = ("| sh", "|sh", "| bash", "|bash")

_SENSITIVE_PATHS = (
    ("/etc/", "system configuration"),
    ("/.ssh/", "SSH keys/config"),
    ("/.gnupg/", "GPG keys"),
    (".env", "environment secrets"),
    ("credentials", "credentials file"),
)

_SIDE_EFFECT_PATTERNS = (
    ("git push", "pushes code to remote"),
    ("git commit", "creates a commit"),
    ("npm install", "installs npm packages"),
    ("npm publish", "publishes npm package"),
    ("cargo build", "builds Rust project"),
    ("cargo publish", "publishes Rust crate"),
    ("pip install", "installs Python packages"),
    ("docker ", "runs Docker command"),
)

_READ_ONLY_TOOLS = frozenset({"Read", "Glob", "Grep", "WebSearch", "WebFetch"})

_SAFE_PREFIXES = (
    "ls",
    "cat",
    "head",
    "tail",
    "grep",
    "find",
    "wc",
    "echo",
    "pwd",
    "date",
    "whoami",
    "git status",
    "git log",
    "git diff",
    "git branch",
)

ToolInput = Mapping[str, Any] | None


def _string_field(tool_input: Any, key: str) -> str | None:
    if not isinstance(tool_input, Mapping):
        return None
    value = tool_input.get(key)
    return value if isinstance(value, str) else None


def _bash_command(tool_name: str, tool_input: Any) -> str | None:
    if tool_name != "Bash":
        return None
    return _string_field(tool_input, "command")


def _write_path(tool_name: str, tool_input: Any) -> str | None:
    if tool_name not in _WRITE_TOOLS:
        return None
    return _string_field(tool_input, "file_path")


def _is_within(path: str, cwd: str) -> bool:
    prefix = cwd if cwd.endswith("/") else f"{cwd}/"
    return path.startswith(prefix) or path == cwd


# Dangerous heuristics


def _bash_destructive(tool_name: str, tool_input: Any, cwd: str | None) -> Classification | None:
    cmd = _bash_command(tool_name, tool_input)
    if cmd is None:
        return None
    for pattern, desc in _DESTRUCTIVE_PATTERNS:
        if pattern in cmd:
            return Classification(
                tool_name=tool_name,
                input_pattern=pattern,
                risk_level=RiskLevel.DANGEROUS,
                reason=f"Bash command contains {desc}: {pattern}",
                heuristic="bash_destructive",
            )
    return None


def _bash_pipe_exec(tool_name: str, tool_input: Any, cwd: str | None) -> Classification | None:
    cmd = _bash_command(tool_name, tool_input)
    if cmd is None:
        return None
    for target in _PIPE_TARGETS:
        if target in cmd:
            return Classification(
                tool_name=tool_name,
                input_pattern=target,
                risk_level=RiskLevel.DANGEROUS,
                reason=f"Bash command pipes to shell/eval: {target}",
                heuristic="bash_pipe_exec",
            )
    if ("curl" in cmd or "wget" in cmd) and any(p in cmd for p in _SHELL_PIPES):
        return Classification(
            tool_name=tool_name,
            input_pattern="curl/wget piped to shell",
            risk_level=RiskLevel.DANGEROUS,
            reason="Remote script execution via curl/wget pipe",
            heuristic="bash_pipe_exec",
        )
    return None


def _bash_network_exfil(tool_name: str, tool_input: Any, cwd: str | None) -> Classification | None:
    cmd = _bash_command(tool_name, tool_input)
    if cmd is None:
        return None
    curl_post = "curl" in cmd and any(
        flag in cmd for flag in ("-d ", "--data", "-X POST", "-X PUT")
    )
    wget_post = "wget" in cmd and "--post" in cmd
    if curl_post or wget_post:
        return Classification(
            tool_name=tool_name,
            input_pattern="network POST/PUT with data",
            risk_level=RiskLevel.DANGEROUS,
            reason="Bash command sends data over network (potential exfiltration)",
            heuristic="bash_network_exfil",
        )
    return None


def _write_sensitive_path(tool_name: str, tool_input: Any, cwd: str | None) -> Classification | None:
    path = _write_path(tool_name, tool_input)
    if path is None:
        return None
    for pattern, desc in _SENSITIVE_PATHS:
        if pattern in path:
            return Classification(
                tool_name=tool_name,
                input_pattern=pattern,
                risk_level=RiskLevel.DANGEROUS,
                reason=f"Write to sensitive path ({desc}): {path}",
                heuristic="write_sensitive_path",
            )
    return None


# Risky heuristics


def _bash_side_effects(tool_name: str, tool_input: Any, cwd: str | None) -> Classification | None:
    cmd = _bash_command(tool_name, tool_input)
    if cmd is None:
        return None
    for pattern, desc in _SIDE_EFFECT_PATTERNS:
        if pattern in cmd:
            return Classification(
                tool_name=tool_name,
                input_pattern=pattern,
                risk_level=RiskLevel.RISKY,
                reason=f"Bash command has side effects ({desc})",
                heuristic="bash_side_effects",
            )
    return None


def _write_outside_cwd(tool_name: str, tool_input: Any, cwd: str | None) -> Classification | None:
    path = _write_path(tool_name, tool_input)
    if path is None or cwd is None or _is_within(path, cwd):
        return None
    return Classification(
        tool_name=tool_name,
        input_pattern="write outside CWD",
        risk_level=RiskLevel.RISKY,
        reason=f"Write/Edit targets path outside working directory: {path}",
        heuristic="write_outside_cwd",
    )


def _agent_spawn(tool_name: str, tool_input: Any, cwd: str | None) -> Classification | None:
    if tool_name != "Agent":
        return None
    return Classification(
        tool_name=tool_name,
        input_pattern="agent spawn",
        risk_level=RiskLevel.RISKY,
        reason="Subagent spawn",
        heuristic="agent_spawn",
    )


# Safe heuristics


def _read_only_tools(tool_name: str, tool_input: Any, cwd: str | None) -> Classification | None:
    if tool_name not in _READ_ONLY_TOOLS:
        return None
    return Classification(
        tool_name=tool_name,
        input_pattern="read-only tool",
        risk_level=RiskLevel.SAFE,
        reason=f"{tool_name} is a read-only tool",
        heuristic="read_only_tools",
    )


def _bash_safe_commands(tool_name: str, tool_input: Any, cwd: str | None) -> Classification | None:
    cmd = _bash_command(tool_name, tool_input)
    if cmd is None:
        return None
    trimmed = cmd.strip()
    for prefix in _SAFE_PREFIXES:
        if trimmed.startswith(prefix):
            return Classification(
                tool_name=tool_name,
                input_pattern=prefix,
                risk_level=RiskLevel.SAFE,
                reason=f"Bash command is a known safe operation: {prefix}",
                heuristic="bash_safe_commands",
            )
    return None


def _write_within_cwd(tool_name: str, tool_input: Any, cwd: str | None) -> Classification | None:
    path = _write_path(tool_name, tool_input)
    if path is None or cwd is None or not _is_within(path, cwd):
        return None
    return Classification(
        tool_name=tool_name,
        input_pattern="write within CWD",
        risk_level=RiskLevel.SAFE,
        reason=f"Write/Edit within working directory: {path}",
        heuristic="write_within_cwd",
    )


_Heuristic = Callable[[str, Any, "str | None"], "Classification | None"]

# Dangerous first, then risky, then safe: the first match wins.
_HEURISTICS: tuple[_Heuristic, ...] = (
    _bash_destructive,
    _bash_pipe_exec,
    _bash_network_exfil,
    _write_sensitive_path,
    _bash_side_effects,
    _write_outside_cwd,
    _agent_spawn,
    _read_only_tools,
    _bash_safe_commands,
    _write_within_cwd,
)


def classify_tool_call(
    tool_name: str,
    tool_input: ToolInput = None,
    cwd: str | None = None,
) -> Classification | None:
    """Classify a tool call; return None when no heuristic matches."""
    for heuristic in _HEURISTICS:
        result = heuristic(tool_name, tool_input, cwd)
        if result is not None:
            return result
    return None