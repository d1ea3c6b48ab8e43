"""
deadlock: Exception types.

MarkerValidationError aborts a scan; WorkaroundExpiredError aborts the
caller's current operation when the runtime guard fires.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class DeadlockError(Exception):
    """Base class for all deadlock errors."""


class ConfigError(DeadlockError):
    """Configuration file could not be loaded."""


class MarkerValidationError(DeadlockError, ValueError):
    """A workaround marker has malformed arguments.

    The scanner fills in ``path`` and ``line`` before re-raising; the
    message itself is never rewritten.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.path: Optional[Path] = None
        self.line: Optional[int] = None


class WorkaroundExpiredError(DeadlockError, RuntimeError):
    """An expired workaround applies to the declaration being invoked."""

    def __init__(self, description: str, expires: str, location: str) -> None:
        super().__init__(
            f'Expired workaround detected: "{description}" '
            f"(expired on {expires}) at {location}"
        )
        self.description = description
        self.expires = expires
        self.location = location
