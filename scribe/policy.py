"""Policy rules: validation, promotion from classifications, TOML exchange and stats."""

from __future__ import annotations

import re
import tomllib
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import tomli_w

ACTIONS = ("allow", "deny")


class PolicyError(ValueError):
    """A rule or a policy file is not valid."""


@dataclass(frozen=True)
class PolicyRule:
    """A rule written by the user, read from a policy file or promoted."""

    tool_pattern: str
    action: str
    reason: str
    input_pattern: str | None = None
    priority: int = 0
    source: str = "user"

    def to_dict(self) -> dict[str, Any]:
        """The rule as a TOML table; an absent input pattern is left out."""
        entry: dict[str, Any] = {"tool_pattern": self.tool_pattern}
        if self.input_pattern is not None:
            entry["input_pattern"] = self.input_pattern
        entry["action"] = self.action
        entry["reason"] = self.reason
        entry["priority"] = self.priority
        return entry


def _check_action(action: str) -> None:
    if action not in ACTIONS:
        raise PolicyError(f"invalid --action: must be 'allow' or 'deny', got '{action}'")


def validate_rule(tool_pattern: str, input_pattern: str | None, action: str) -> None:
    """Check the regexes and the action of a new rule. Raises PolicyError."""
    try:
        re.compile(tool_pattern)
    except re.error as exc:
        raise PolicyError(f"invalid --tool regex: {exc}") from None
    if input_pattern is not None:
        try:
            re.compile(input_pattern)
        except re.error as exc:
            raise PolicyError(f"invalid --input regex: {exc}") from None
    _check_action(action)


def promotion_defaults(risk_level: str) -> tuple[str, int]:
    """Default action and priority for a rule promoted from a classification."""
    action = "allow" if risk_level == "safe" else "deny"
    priority = {"dangerous": 100, "risky": 50}.get(risk_level, 0)
    return action, priority


def promote(
    tool_name: str,
    input_pattern: str,
    risk_level: str,
    reason: str,
    action: str | None = None,
    priority: int | None = None,
) -> PolicyRule:
    """Turn a classification into a rule matching exactly its tool name."""
    default_action, default_priority = promotion_defaults(risk_level)
    chosen_action = action if action is not None else default_action
    _check_action(chosen_action)
    return PolicyRule(
        tool_pattern=re.escape(tool_name),
        action=chosen_action,
        reason=reason,
        input_pattern=input_pattern,
        priority=priority if priority is not None else default_priority,
        source="promoted",
    )


def export_rules(rules: Iterable[PolicyRule]) -> str:
    """Render rules as a TOML document with a ``rules`` array of tables."""
    return tomli_w.dumps({"rules": [rule.to_dict() for rule in rules]})


def _required_str(entry: dict[str, Any], key: str, index: int) -> str:
    value = entry.get(key)
    if not isinstance(value, str):
        raise PolicyError(f"rule {index}: missing or invalid '{key}'")
    return value


def import_rules(text: str) -> list[PolicyRule]:
    """Parse a TOML policy document into rules. Raises PolicyError."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise PolicyError(f"invalid policy file: {exc}") from None

    entries = data.get("rules")
    if not isinstance(entries, list):
        raise PolicyError("policy file has no 'rules' array")

    rules = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise PolicyError(f"rule {index}: not a table")
        input_pattern = entry.get("input_pattern")
        if input_pattern is not None and not isinstance(input_pattern, str):
            raise PolicyError(f"rule {index}: invalid 'input_pattern'")
        priority = entry.get("priority")
        if not isinstance(priority, int) or isinstance(priority, bool):
            raise PolicyError(f"rule {index}: missing or invalid 'priority'")
        rules.append(
            PolicyRule(
                tool_pattern=_required_str(entry, "tool_pattern", index),
                action=_required_str(entry, "action", index),
                reason=_required_str(entry, "reason", index),
                input_pattern=input_pattern,
                priority=priority,
                source="imported",
            )
        )
    return rules


def enforcement_percentages(total: int, allowed: int, denied: int) -> tuple[str, str]:
    """Allowed and denied shares of all enforcements, formatted like ``12.5%``."""
    if total <= 0:
        return "0.0%", "0.0%"
    return f"{allowed / total * 100.0:.1f}%", f"{denied / total * 100.0:.1f}%"