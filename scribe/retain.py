"""Deletion of expired events and of sessions left without events."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone

from scribe.timespec import format_iso, parse_duration


@dataclass(frozen=True)
class RetentionResult:
    """What a retention run removed."""

    retention: str
    cutoff: str
    events_deleted: int
    sessions_deleted: int

    def summary_lines(self) -> list[str]:
        """Human-readable report of the run."""
        if self.events_deleted <= 0:
            return [f"No events older than {self.retention} found."]
        lines = [f"Deleted {self.events_deleted} events older than {self.retention}."]
        if self.sessions_deleted > 0:
            lines.append(f"Removed {self.sessions_deleted} orphaned sessions.")
        return lines


def retention_cutoff(retention: str, now: datetime | None = None) -> str:
    """Timestamp string ``retention`` before ``now``.

    Raises ValueError if ``retention`` is not a valid duration.
    """
    try:
        duration = parse_duration(retention)
    except ValueError as exc:
        raise ValueError(
            f"invalid duration '{retention}': {exc} (expected e.g. 90d, 30d, 1w, 24h)"
        ) from None
    reference = now if now is not None else datetime.now(timezone.utc)
    try:
        return format_iso(reference - duration)
    except OverflowError:
        raise ValueError(f"invalid duration '{retention}': out of range") from None


def prune_events(
    conn: sqlite3.Connection,
    retention: str,
    now: datetime | None = None,
) -> RetentionResult:
    """Delete events older than ``retention`` and sessions that no longer have events."""
    cutoff = retention_cutoff(retention, now)

    with conn:
        events_deleted = conn.execute(
            "DELETE FROM events WHERE timestamp < ?", (cutoff,)
        ).rowcount
        sessions_deleted = conn.execute(
            "DELETE FROM sessions WHERE session_id NOT IN (SELECT DISTINCT session_id FROM events)"
        ).rowcount

    conn.execute("PRAGMA incremental_vacuum").fetchall()
    conn.execute("PRAGMA journal_size_limit = 0").fetchall()

    return RetentionResult(
        retention=retention,
        cutoff=cutoff,
        events_deleted=events_deleted,
        sessions_deleted=sessions_deleted,
    )