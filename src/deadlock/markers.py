"""
deadlock: Workaround marker definition.

A marker is a decorator carrying a free-text description and an
expiration date (YYYY-MM-DD). It may be applied to classes and to
methods defined in a class body:

    @workaround("Vendor API returns numbers as strings", "2025-03-01")
    class BillingClient:

        @workaround(description="Retry storm on 502", expires="2025-01-15")
        def fetch(self): ...

Applying the decorator only records the marker on the target's
``__workarounds__`` tuple. Arguments are validated by the decoder, both
when scanning source and when the runtime guard inspects live objects.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, TypeVar

T = TypeVar("T")

MARKERS_ATTR = "__workarounds__"

# Spellings the source scanner recognizes, short and fully-qualified.
SHORT_NAMES = frozenset({"workaround", "Workaround"})
QUALIFIED_NAMES = frozenset({
    "deadlock.workaround",
    "deadlock.Workaround",
    "deadlock.markers.workaround",
    "deadlock.markers.Workaround",
})
MARKER_NAMES = SHORT_NAMES | QUALIFIED_NAMES

# Modules a marker can be imported from (for per-file alias resolution).
MARKER_MODULES = frozenset({"deadlock", "deadlock.markers"})


@dataclass(frozen=True)
class Workaround:
    """A tracked temporary workaround with an expiration date."""
    description: Any
    expires: Any

    def __call__(self, target: T) -> T:
        # Markers live on the underlying function, never on a property or
        # staticmethod/classmethod wrapper.
        owner = unwrap_declaration(target)
        # Decorators apply bottom-up; prepend so the tuple keeps source order.
        existing = get_markers(owner)
        setattr(owner, MARKERS_ATTR, (self,) + existing)
        return target


def unwrap_declaration(target: Any) -> Any:
    """Return the function behind property, cached_property, staticmethod
    and classmethod wrappers (possibly nested)."""
    while True:
        if isinstance(target, property):
            target = target.fget
        elif isinstance(target, (staticmethod, classmethod)):
            target = target.__func__
        elif isinstance(target, functools.cached_property):
            target = target.func
        else:
            return target


workaround = Workaround


def get_markers(target: Any) -> tuple[Workaround, ...]:
    """Return markers attached directly to ``target`` (never inherited)."""
    try:
        attrs = vars(target)
    except TypeError:
        return ()
    return tuple(attrs.get(MARKERS_ATTR, ()))
