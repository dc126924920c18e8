"""Summaries of classification results for display and JSON output."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from scribe.timespec import truncate_str

RULE_LINE = "\u2500" * 40


@dataclass(frozen=True)
class ClassificationCount:
    """How many classifications share one risk level."""

    risk_level: str
    count: int


def _selected(
    summary: Sequence[ClassificationCount], risk_filter: str | None
) -> list[ClassificationCount]:
    return [c for c in summary if risk_filter is None or c.risk_level == risk_filter]


def summary_total(summary: Sequence[ClassificationCount], unclassified: int) -> int:
    """All classified tool calls plus the unclassified ones."""
    return sum(c.count for c in summary) + unclassified


def summary_json(
    summary: Sequence[ClassificationCount],
    unclassified: int,
    risk_filter: str | None = None,
) -> dict[str, Any]:
    """The JSON document for a summary; the filter narrows entries, not the total."""
    return {
        "summary": [
            {"risk_level": c.risk_level, "count": c.count}
            for c in _selected(summary, risk_filter)
        ],
        "total": summary_total(summary, unclassified),
        "unclassified": unclassified,
    }


def summary_rows(
    summary: Sequence[ClassificationCount],
    unclassified: int,
    risk_filter: str | None = None,
) -> list[str]:
    """Table lines: one per risk level with its share, then the totals."""
    total = summary_total(summary, unclassified)
    lines = []
    for entry in _selected(summary, risk_filter):
        pct = entry.count / total * 100.0 if total > 0 else 0.0
        lines.append(f"  {entry.risk_level:<12} {entry.count:>8}   ({pct:.1f}%)")
    lines.append(RULE_LINE)
    lines.append(f"  {'total':<12} {total:>8}")
    if unclassified > 0:
        lines.append(f"  {'unclassified':<12} {unclassified:>8}")
    return lines


def truncate_detail(text: str, width: int) -> str:
    """Fit a detail column: text longer than ``width`` is cut and ends in ``...``."""
    return truncate_str(text, width)