"""Parsing of hook payloads read from stdin, and the auto-retention schedule."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from scribe.timespec import parse_duration

_STRING_FIELDS = ("session_id", "hook_event_name", "cwd")
_OPTIONAL_STRING_FIELDS = ("tool_name", "permission_mode")


@dataclass(frozen=True)
class HookEvent:
    """The fields of a hook payload that are stored, plus the payload itself."""

    session_id: str = ""
    event_type: str = ""
    cwd: str = ""
    tool_name: str | None = None
    tool_input: str | None = None
    tool_response: str | None = None
    permission_mode: str | None = None
    raw_payload: str = ""


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _fields_are_valid(payload: dict[str, Any]) -> bool:
    for key in _STRING_FIELDS + _OPTIONAL_STRING_FIELDS:
        value = payload.get(key)
        if value is not None and not isinstance(value, str):
            return False
    return True


def parse_hook_payload(raw: str) -> HookEvent | None:
    """Extract the known fields from a raw hook JSON payload.

    Returns None for empty input or malformed JSON. If the known fields cannot
    be read, the event keeps only the raw payload. Structured values such as
    ``tool_input`` are stored as compact JSON; a JSON null counts as absent.
    """
    if not raw.strip():
        print("scribe log: empty stdin, nothing to log", file=sys.stderr)
        return None

    try:
        payload = json.loads(raw)
    except ValueError as exc:
        print(f"scribe log: malformed JSON: {exc}", file=sys.stderr)
        return None

    if not isinstance(payload, dict) or not _fields_are_valid(payload):
        print(
            "scribe log: failed to extract fields, inserting with minimal data",
            file=sys.stderr,
        )
        return HookEvent(raw_payload=raw)

    tool_input = payload.get("tool_input")
    tool_response = payload.get("tool_response")
    return HookEvent(
        session_id=payload.get("session_id") or "",
        event_type=payload.get("hook_event_name") or "",
        cwd=payload.get("cwd") or "",
        tool_name=payload.get("tool_name"),
        tool_input=None if tool_input is None else _to_json(tool_input),
        tool_response=None if tool_response is None else _to_json(tool_response),
        permission_mode=payload.get("permission_mode"),
        raw_payload=raw,
    )


def _parse_moment(text: str) -> datetime | None:
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        return None
    if moment.tzinfo is None:
        return None
    return moment


def retention_due(
    last_check: str | None,
    check_interval: str,
    now: datetime | None = None,
) -> bool:
    """Whether auto-retention should run now.

    It is due when no check was recorded, when the recorded time cannot be
    parsed, or when ``check_interval`` has passed since it. Raises ValueError
    if ``check_interval`` is not a valid duration.
    """
    try:
        interval = parse_duration(check_interval)
    except ValueError as exc:
        raise ValueError(
            f"invalid retention_check_interval '{check_interval}': {exc}"
        ) from None

    if last_check is None:
        return True
    previous = _parse_moment(last_check)
    if previous is None:
        return True

    reference = now if now is not None else datetime.now(timezone.utc)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)
    return not reference - previous < interval