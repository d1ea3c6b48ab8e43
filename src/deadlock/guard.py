"""
deadlock: Runtime guard.

Checks the workaround markers attached to a live class (and optionally
one of its methods) and raises WorkaroundExpiredError on the first
expired one. The guard only fires when the config says the host runs in
a local environment; everywhere else every check is a no-op.
"""

from __future__ import annotations

import functools
import importlib
import inspect
import logging
from datetime import date
from typing import Any, Callable, Optional, TypeVar

from .config import DeadlockConfig
from .decoder import decode_arguments, parse_expires
from .exceptions import WorkaroundExpiredError
from .markers import Workaround, get_markers, unwrap_declaration

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def resolve_class(target: Any) -> Optional[type]:
    """
    Resolve an instance, a class or a dotted path to a class.

    Strings may be ``pkg.mod.Class`` or ``pkg.mod:Class.Inner``.
    Returns None when nothing importable matches.
    """
    if isinstance(target, type):
        return target
    if not isinstance(target, str):
        return type(target)

    if ":" in target:
        module_name, _, qualname = target.partition(":")
        return _lookup(module_name, qualname)

    parts = target.split(".")
    for i in range(len(parts) - 1, 0, -1):
        found = _lookup(".".join(parts[:i]), ".".join(parts[i:]))
        if found is not None:
            return found
    return None


def _lookup(module_name: str, qualname: str) -> Optional[type]:
    if not module_name or not qualname:
        return None
    try:
        obj: Any = importlib.import_module(module_name)
    except (ImportError, ValueError):
        return None
    for attr in qualname.split("."):
        obj = getattr(obj, attr, None)
        if obj is None:
            return None
    return obj if isinstance(obj, type) else None


def class_location(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


class DeadlockGuard:
    """Raises when an expired workaround applies to the code being run.

    ``today`` is a zero-argument clock (default ``date.today``), read on
    every check so a long-lived guard never works from a stale date.
    DeadlockResult and Reporter take a plain ``date`` instead, since they
    evaluate one snapshot of results.
    """

    def __init__(
        self,
        config: Optional[DeadlockConfig] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.config = config or DeadlockConfig()
        self._today = today or date.today

    @property
    def enabled(self) -> bool:
        return self.config.is_local

    def check(self, target: Any, method: Optional[str] = None) -> None:
        """
        Check class-level markers, then markers on ``method`` if given.

        Raises:
            WorkaroundExpiredError: first expired marker found
            MarkerValidationError: a marker with malformed arguments
        """
        if not self.enabled:
            return

        cls = resolve_class(target)
        if cls is None:
            logger.debug("Guard skipped unresolvable target %r", target)
            return

        location = class_location(cls)
        self._inspect(get_markers(cls), location)

        if method:
            func = self._method(cls, method)
            if func is not None:
                self._inspect(get_markers(func), f"{location}::{method}")

    def check_action(self, action: str) -> None:
        """Check a ``Controller@method`` route action string."""
        if not self.enabled:
            return
        if not isinstance(action, str) or "@" not in action:
            return
        controller, _, method = action.partition("@")
        self.check(controller, method or None)

    def check_callable(self, handler: Callable[..., Any]) -> None:
        """Check a bound method handler; plain functions carry no markers."""
        owner = getattr(handler, "__self__", None)
        name = getattr(handler, "__name__", None)
        if owner is None or name is None or inspect.ismodule(owner):
            return
        self.check(owner, name)

    def enforce(self, func: F) -> F:
        """Decorate a method so every call is checked first."""
        name = func.__name__

        @functools.wraps(func)
        def wrapper(instance, *args, **kwargs):
            self.check(instance, name)
            return func(instance, *args, **kwargs)

        return wrapper  # type: ignore[return-value]

    @staticmethod
    def _method(cls: type, name: str) -> Optional[Callable[..., Any]]:
        try:
            attr = inspect.getattr_static(cls, name)
        except AttributeError:
            return None
        attr = unwrap_declaration(attr)
        return attr if callable(attr) else None

    def _inspect(self, markers: tuple[Workaround, ...], location: str) -> None:
        today = self._today()
        for marker in markers:
            description, expires = decode_arguments((marker.description, marker.expires))
            if today > parse_expires(expires):
                logger.warning("Expired workaround at %s (expired on %s)", location, expires)
                raise WorkaroundExpiredError(
                    description=description,
                    expires=expires,
                    location=location,
                )
