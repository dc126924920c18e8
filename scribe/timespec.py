"""Time specifiers, timestamp formatting and display truncation helpers."""

from __future__ import annotations

import json
import math
import re
from datetime import datetime, timedelta, timezone

_NANOS_PER_SECOND = 1_000_000_000

_UNIT_NANOS: dict[str, int] = {}
for _names, _nanos in (
    (("nanos", "nsec", "ns"), 1),
    (("usec", "us", "micros"), 1_000),
    (("millis", "msec", "ms"), 1_000_000),
    (("seconds", "second", "sec", "s"), _NANOS_PER_SECOND),
    (("minutes", "minute", "min", "mins", "m"), 60 * _NANOS_PER_SECOND),
    (("hours", "hour", "hr", "hrs", "h"), 3_600 * _NANOS_PER_SECOND),
    (("days", "day", "d"), 86_400 * _NANOS_PER_SECOND),
    (("weeks", "week", "wk", "w"), 604_800 * _NANOS_PER_SECOND),
    (("months", "month", "M"), 2_630_016 * _NANOS_PER_SECOND),
    (("years", "year", "yr", "y"), 31_557_600 * _NANOS_PER_SECOND),
):
    for _name in _names:
        _UNIT_NANOS[_name] = _nanos

_DURATION_SHAPE = re.compile(r"\s*(?:\d+\s*[A-Za-z]+\s*)+")
_DURATION_PART = re.compile(r"(\d+)\s*([A-Za-z]+)")

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})"
)

_SUMMARY_KEYS = ("command", "file_path", "pattern", "content", "query")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``90d``, ``1h 30m`` or ``24h``.

    Raises ValueError if the text is not a valid duration.
    """
    if not _DURATION_SHAPE.fullmatch(text):
        raise ValueError(f"invalid duration: {text!r}")
    total_nanos = 0
    for number, unit in _DURATION_PART.findall(text):
        try:
            per_unit = _UNIT_NANOS[unit]
        except KeyError:
            raise ValueError(f"unknown time unit {unit!r} in duration {text!r}") from None
        total_nanos += int(number) * per_unit
    try:
        return timedelta(microseconds=total_nanos // 1_000)
    except OverflowError:
        raise ValueError(f"duration out of range: {text!r}") from None


def format_iso(moment: datetime) -> str:
    """Format a moment as UTC with millisecond precision, e.g. ``2025-06-01T00:00:00.000Z``."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return f"{moment:%Y-%m-%dT%H:%M:%S}.{moment.microsecond // 1000:03d}Z"


def _parse_rfc3339(text: str) -> datetime | None:
    match = _RFC3339.fullmatch(text)
    if match is None:
        return None
    year, month, day, hour, minute, second, fraction, offset = match.groups()
    micros = int((fraction or "0")[:6].ljust(6, "0"))
    if offset in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        try:
            tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
        except ValueError:
            return None
    try:
        return datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), micros, tzinfo=tz
        )
    except ValueError:
        return None


def parse_time_spec(value: str, now: datetime | None = None) -> str:
    """Turn a duration (``1h``) or a date (``2025-06-01``) into a UTC timestamp string.

    A duration is taken as that long before ``now``. Raises ValueError otherwise.
    """
    try:
        duration = parse_duration(value)
    except ValueError:
        duration = None
    if duration is not None:
        reference = now if now is not None else datetime.now(timezone.utc)
        try:
            return format_iso(reference - duration)
        except OverflowError:
            raise ValueError(f"time specifier out of range: {value!r}") from None

    moment = _parse_rfc3339(value)
    if moment is not None:
        return format_iso(moment)

    try:
        date = datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        pass
    else:
        return format_iso(date.replace(tzinfo=timezone.utc))

    raise ValueError(
        f"cannot parse time specifier: '{value}' "
        "(expected duration like '1h' or date like '2025-06-01')"
    )


def format_timestamp(ts: str) -> str:
    """Reformat an ISO 8601 timestamp as ``YYYY-MM-DD HH:MM:SS``; unparsable text is returned as is."""
    moment = _parse_rfc3339(ts)
    if moment is None:
        return ts
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def format_duration(first_seen: str, last_seen: str) -> str:
    """Describe the span between two timestamps, e.g. ``14m``, ``2h 14m`` or ``3d 1h``."""
    start = _parse_rfc3339(first_seen)
    end = _parse_rfc3339(last_seen)
    if start is None or end is None:
        return "?"

    seconds = (end - start).total_seconds()
    total_minutes = math.trunc(seconds / 60)
    total_hours = math.trunc(seconds / 3_600)
    total_days = math.trunc(seconds / 86_400)

    if total_minutes < 1:
        return "< 1m"
    if total_hours < 1:
        return f"{total_minutes}m"
    if total_days < 1:
        return f"{total_hours}h {total_minutes - total_hours * 60}m"
    return f"{total_days}d {total_hours - total_days * 24}h"


def truncate_str(text: str, max_len: int) -> str:
    """Cut text to at most ``max_len`` characters, ending in ``...`` when shortened."""
    if len(text) <= max_len:
        return text
    return f"{text[:max(max_len - 3, 0)]}..."


def truncate_session_id(session_id: str) -> str:
    """Shorten a session id to its first eight characters."""
    return session_id[:8]


def truncate_summary(tool_input: str | None, max_len: int) -> str:
    """Summarise a JSON tool input by its most telling string field, truncated."""
    if tool_input is None:
        return ""
    try:
        value = json.loads(tool_input)
    except ValueError:
        value = None
    if isinstance(value, dict):
        for key in _SUMMARY_KEYS:
            field = value.get(key)
            if isinstance(field, str):
                return truncate_str(field, max_len)
    return truncate_str(tool_input, max_len)


def truncate_cwd(cwd: str | None, max_len: int) -> str:
    """Keep the tail of a long path, prefixed by ``...``."""
    if cwd is None:
        return ""
    if len(cwd) <= max_len:
        return cwd
    return f"...{cwd[len(cwd) - max_len + 3:]}"