"""
deadlock: Marker argument validation.

Both the source scanner and the runtime guard decode markers through
decode_arguments(), so a marker the scanner rejects is rejected by the
guard with the same message.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

from .exceptions import MarkerValidationError
from .result import DeadlockResult

if TYPE_CHECKING:
    from .visitor import MarkerOccurrence

EXPIRES_FORMAT = "%Y-%m-%d"

_EXPIRES_SHAPE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


@dataclass(frozen=True)
class NonLiteral:
    """Placeholder for an argument that is not a string literal."""
    source: str = ""


@dataclass(frozen=True)
class DecodedMarker:
    """A validated marker occurrence, not yet tied to a file."""
    description: str
    expires: str
    line: int
    class_name: Optional[str] = None
    method: Optional[str] = None

    def with_file(self, path: Path | str) -> DeadlockResult:
        return DeadlockResult(
            description=self.description,
            expires=self.expires,
            file=str(path),
            line=self.line,
            class_name=self.class_name,
            method=self.method,
        )


def parse_expires(value: str) -> date:
    """Parse a validated YYYY-MM-DD string."""
    return datetime.strptime(value, EXPIRES_FORMAT).date()


def validate_expires(value: str) -> str:
    """Check shape and calendar validity of an expires string."""
    if not _EXPIRES_SHAPE.fullmatch(value):
        raise MarkerValidationError(
            f"Invalid expires date '{value}'. Expected YYYY-MM-DD."
        )
    try:
        parse_expires(value)
    except ValueError:
        raise MarkerValidationError(f"Invalid expires date '{value}'.") from None
    return value


def decode_arguments(arguments: Sequence[object]) -> tuple[str, str]:
    """
    Validate marker arguments and return (description, expires).

    Rules are applied in order and the first failure raises
    MarkerValidationError:
    argument count, description literal, expires literal, expires shape,
    expires calendar date.
    """
    if len(arguments) != 2:
        raise MarkerValidationError(
            "Workaround must receive exactly 2 arguments: description and expires."
        )

    description, expires = arguments

    if not isinstance(description, str):
        raise MarkerValidationError("Workaround description must be a string literal.")

    if not isinstance(expires, str):
        raise MarkerValidationError(
            "Workaround expires must be a string literal in YYYY-MM-DD format."
        )

    return description, validate_expires(expires)


def decode_occurrence(occurrence: MarkerOccurrence) -> DecodedMarker:
    """Decode a MarkerOccurrence produced by the declaration visitor."""
    description, expires = decode_arguments(occurrence.arguments)
    return DecodedMarker(
        description=description,
        expires=expires,
        line=occurrence.line,
        class_name=occurrence.class_name,
        method=occurrence.method,
    )
