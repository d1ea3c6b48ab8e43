"""
deadlock: Reporting and output formatting.

Handles:
- Filtering results (expired / active / critical)
- Human-readable table output
- JSON output
- The expired-workaround gate summary
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from .result import CRITICAL_WINDOW_DAYS, DeadlockResult

_WHITESPACE = re.compile(r"\s+")

HEADERS = ("Urgency", "Expires", "Location", "Description")


def format_description(description: str, limit: int = 80) -> str:
    """Collapse whitespace and truncate with an ellipsis."""
    normalized = _WHITESPACE.sub(" ", description).strip()
    if len(normalized) <= limit:
        return normalized
    return normalized[: max(0, limit - 1)] + "…"


def format_location(result: DeadlockResult) -> str:
    location = result.location()
    if location == f"{result.file}:{result.line}":
        return location
    return f"{location} (line {result.line})"


@dataclass
class Reporter:
    """Filters and renders scan results."""
    results: list[DeadlockResult]
    today: date = field(default_factory=date.today)
    window: int = CRITICAL_WINDOW_DAYS

    def is_critical(self, result: DeadlockResult) -> bool:
        return result.is_critical(self.today, self.window)

    @property
    def expired(self) -> list[DeadlockResult]:
        return [r for r in self.results if r.is_expired(self.today)]

    @property
    def active(self) -> list[DeadlockResult]:
        return [r for r in self.results if not r.is_expired(self.today)]

    @property
    def critical(self) -> list[DeadlockResult]:
        return [r for r in self.results if self.is_critical(r)]

    def select(
        self,
        expired: bool = False,
        active: bool = False,
        critical: bool = False,
    ) -> "Reporter":
        """Return a Reporter over the matching results, sorted by expiry."""
        if expired:
            chosen: Iterable[DeadlockResult] = self.expired
        elif critical:
            chosen = self.critical
        elif active:
            chosen = self.active
        else:
            chosen = self.results
        ordered = sorted(chosen, key=lambda r: r.expires)
        return Reporter(results=ordered, today=self.today, window=self.window)

    def urgency(self, result: DeadlockResult) -> str:
        if result.is_expired(self.today):
            return "EXPIRED"
        days = result.days_remaining(self.today)
        label = "day" if days == 1 else "days"
        if self.is_critical(result):
            return f"CRITICAL ({days} {label} left)"
        return f"ACTIVE ({days} {label} left)"

    def render_stats(self) -> str:
        return (
            f"Total: {len(self.results)} | Expired: {len(self.expired)} | "
            f"Critical: {len(self.critical)} | Active: {len(self.active)}"
        )

    def rows(self) -> list[tuple[str, str, str, str]]:
        return [
            (
                self.urgency(r),
                r.expires,
                format_location(r),
                format_description(r.description),
            )
            for r in self.results
        ]

    def render_table(self) -> str:
        """Render results as a plain-text table."""
        rows = self.rows()
        widths = [len(h) for h in HEADERS]
        for row in rows:
            widths = [max(w, len(cell)) for w, cell in zip(widths, row)]

        def fmt(cells: Iterable[str]) -> str:
            return " | ".join(c.ljust(w) for c, w in zip(cells, widths)).rstrip()

        sep = "-+-".join("-" * w for w in widths)
        lines = [fmt(HEADERS), sep]
        lines.extend(fmt(row) for row in rows)
        return "\n".join(lines)

    def render_json(self) -> str:
        return json.dumps(
            [
                dict(r.to_dict(self.today), critical=self.is_critical(r))
                for r in self.results
            ],
            indent=2,
        )

    def render_expired(self) -> Optional[str]:
        """Gate summary; None when nothing is expired."""
        expired = self.expired
        if not expired:
            return None
        lines = ["Expired workarounds detected:"]
        for r in expired:
            lines.append(f"- {r.description} | expires: {r.expires} | {r.location()}")
        return "\n".join(lines)
