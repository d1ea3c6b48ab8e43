"""
deadlock: Expiring workaround markers for Python code.

Mark a temporary workaround with an expiration date, then let a scan
(for reports and CI) or the runtime guard (for local development) tell
you when it is overdue:

    from deadlock import workaround

    @workaround("Upstream bug #123, remove after the 4.2 upgrade", "2025-06-30")
    class LegacyExporter: ...

Usage:
    deadlock list [path]
    deadlock list --expired | --active | --critical
    deadlock check [path]
"""

__version__ = "1.0.0"

from .config import DeadlockConfig, load_config
from .exceptions import (
    ConfigError,
    DeadlockError,
    MarkerValidationError,
    WorkaroundExpiredError,
)
from .guard import DeadlockGuard
from .markers import Workaround, workaround
from .result import DeadlockResult
from .scanner import DeadlockScanner, scan

__all__ = [
    "ConfigError",
    "DeadlockConfig",
    "DeadlockError",
    "DeadlockGuard",
    "DeadlockResult",
    "DeadlockScanner",
    "MarkerValidationError",
    "Workaround",
    "WorkaroundExpiredError",
    "load_config",
    "scan",
    "workaround",
]
