"""Rule evaluation for the pre-tool-use guard hook."""

from __future__ import annotations

import json
import re
import sys
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

ALLOWED = "allowed"
DENIED = "denied"

EXIT_ALLOW = 0
EXIT_DENY = 2


@dataclass(frozen=True)
class Rule:
    """A policy rule: regexes on the tool name and, optionally, on its input."""

    id: int
    tool_pattern: str
    action: str
    reason: str
    input_pattern: str | None = None
    priority: int = 0
    enabled: bool = True


@dataclass(frozen=True)
class GuardOutcome:
    """The verdict on one tool call.

    ``decision`` is ``"allowed"`` or ``"denied"`` when a rule matched and
    ``None`` when no rule applied (the call is allowed without a record).
    """

    decision: str | None = None
    rule: Rule | None = None
    warnings: tuple[str, ...] = ()
    session_id: str = ""
    tool_name: str = ""
    tool_input: str = ""
    elapsed_ms: float = 0.0

    @property
    def exit_code(self) -> int:
        return EXIT_DENY if self.decision == DENIED else EXIT_ALLOW

    @property
    def denied(self) -> bool:
        return self.decision == DENIED


def order_rules(rules: Iterable[Rule]) -> list[Rule]:
    """Enabled rules, highest priority first, ties broken by id."""
    return sorted((r for r in rules if r.enabled), key=lambda r: (-r.priority, r.id))


def _compile(pattern: str, rule: Rule, what: str, warnings: list[str]) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern)
    except re.error as exc:
        warnings.append(f"invalid {what}regex in rule {rule.id}: {exc} (skipping)")
        return None


def evaluate_rules(tool_name: str, tool_input: str, rules: Sequence[Rule]) -> GuardOutcome:
    """Apply rules in the given order; the first allow or deny match decides."""
    warnings: list[str] = []
    for rule in rules:
        tool_regex = _compile(rule.tool_pattern, rule, "", warnings)
        if tool_regex is None or not tool_regex.search(tool_name):
            continue

        if rule.input_pattern is not None:
            input_regex = _compile(rule.input_pattern, rule, "input ", warnings)
            if input_regex is None or not input_regex.search(tool_input):
                continue

        if rule.action == "allow":
            decision = ALLOWED
        elif rule.action == "deny":
            decision = DENIED
        else:
            warnings.append(f"unknown action '{rule.action}' in rule {rule.id} (skipping)")
            continue
        return GuardOutcome(
            decision=decision,
            rule=rule,
            warnings=tuple(warnings),
            tool_name=tool_name,
            tool_input=tool_input,
        )

    return GuardOutcome(warnings=tuple(warnings), tool_name=tool_name, tool_input=tool_input)


def _string_field(payload: Any, key: str) -> str:
    if not isinstance(payload, dict):
        return ""
    value = payload.get(key)
    return value if isinstance(value, str) else ""


def evaluate_payload(payload_text: str, rules: Iterable[Rule]) -> GuardOutcome:
    """Evaluate a hook JSON payload against the enabled rules.

    Raises ValueError if the payload is not valid JSON.
    """
    start = time.perf_counter()
    if not payload_text.strip():
        return GuardOutcome()

    payload = json.loads(payload_text)
    session_id = _string_field(payload, "session_id")
    tool_name = _string_field(payload, "tool_name")
    if not tool_name:
        return GuardOutcome(session_id=session_id)

    if isinstance(payload, dict) and "tool_input" in payload:
        tool_input = json.dumps(payload["tool_input"], separators=(",", ":"), ensure_ascii=False)
    else:
        tool_input = ""

    outcome = evaluate_rules(tool_name, tool_input, order_rules(rules))
    elapsed_ms = (time.perf_counter() - start) * 1000.0
    return GuardOutcome(
        decision=outcome.decision,
        rule=outcome.rule,
        warnings=outcome.warnings,
        session_id=session_id,
        tool_name=tool_name,
        tool_input=tool_input,
        elapsed_ms=elapsed_ms,
    )


def guard_exit_code(payload_text: str, rules: Iterable[Rule]) -> int:
    """Exit code for the hook: 0 allows, 2 denies. Any internal error allows."""
    try:
        outcome = evaluate_payload(payload_text, rules)
    except Exception as exc:  # fail open
        print(f"scribe guard: internal error (allowing): {exc}", file=sys.stderr)
        return EXIT_ALLOW
    for warning in outcome.warnings:
        print(f"scribe guard: {warning}", file=sys.stderr)
    if outcome.denied and outcome.rule is not None:
        print(f"scribe guard: DENIED \u2014 {outcome.rule.reason}", file=sys.stderr)
    return outcome.exit_code