"""
deadlock: Result records.

One DeadlockResult per decoded marker. Records are immutable and carry
everything the reporting layer needs: expiry status, urgency and a
display location.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Optional

CRITICAL_WINDOW_DAYS = 7


@dataclass(frozen=True)
class DeadlockResult:
    """A workaround marker found in the source tree."""
    description: str
    expires: str  # YYYY-MM-DD, always valid
    file: str
    line: int
    class_name: Optional[str] = None
    method: Optional[str] = None

    @property
    def expires_on(self) -> date:
        return datetime.strptime(self.expires, "%Y-%m-%d").date()

    def days_remaining(self, today: Optional[date] = None) -> int:
        """Whole days until expiry; negative once expired."""
        today = today or date.today()
        return (self.expires_on - today).days

    def is_expired(self, today: Optional[date] = None) -> bool:
        """Expired once today is strictly after the expiry date."""
        today = today or date.today()
        return today > self.expires_on

    def is_critical(
        self,
        today: Optional[date] = None,
        window: int = CRITICAL_WINDOW_DAYS,
    ) -> bool:
        """Active but expiring within ``window`` days (inclusive)."""
        if self.is_expired(today):
            return False
        return 0 <= self.days_remaining(today) <= window

    def location(self) -> str:
        if self.class_name and self.method:
            return f"{self.class_name}::{self.method}"
        if self.class_name:
            return self.class_name
        return f"{self.file}:{self.line}"

    def to_dict(self, today: Optional[date] = None) -> dict[str, Any]:
        d = asdict(self)
        d["location"] = self.location()
        d["expired"] = self.is_expired(today)
        return d
