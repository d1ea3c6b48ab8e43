"""
deadlock: Source tree scanning.

Handles:
- Directory walking with extension filter and exclusions
- Source loading and parsing (unreadable or unparsable files are skipped)
- Decoding every marker occurrence into a DeadlockResult

A single malformed marker anywhere in the tree aborts the scan with a
MarkerValidationError.
"""

from __future__ import annotations

import ast
import logging
from pathlib import Path
from typing import Iterator, Optional

from .config import DeadlockConfig
from .decoder import decode_occurrence
from .exceptions import MarkerValidationError
from .result import DeadlockResult
from .visitor import collect_occurrences

logger = logging.getLogger(__name__)


def iter_source_files(root: Path, cfg: DeadlockConfig) -> Iterator[Path]:
    """Iterate over candidate source files under root."""
    for path in root.rglob("*"):
        if not cfg.is_source_file(path):
            continue
        if cfg.should_exclude(path.relative_to(root)):
            continue
        if not path.is_file():
            continue
        yield path


def read_source(path: Path) -> bytes:
    """Read raw source bytes; encoding is resolved by the parser."""
    return path.read_bytes()


def parse_source(data: bytes, path: Path) -> Optional[ast.Module]:
    """Parse source, returning None for files that are not valid Python."""
    try:
        return ast.parse(data, filename=str(path))
    except (SyntaxError, ValueError, RecursionError) as e:
        logger.debug("Skipping unparsable file %s: %s", path, e)
        return None


def scan_file(path: Path) -> list[DeadlockResult]:
    """
    Scan a single file.

    Returns an empty list for unreadable or unparsable files. Raises
    MarkerValidationError (with ``path`` and ``line`` set) on a
    malformed marker.
    """
    try:
        data = read_source(path)
    except OSError as e:
        logger.debug("Skipping unreadable file %s: %s", path, e)
        return []

    tree = parse_source(data, path)
    if tree is None:
        return []

    real_path = path.resolve()
    results: list[DeadlockResult] = []
    for occurrence in collect_occurrences(tree):
        try:
            decoded = decode_occurrence(occurrence)
        except MarkerValidationError as e:
            e.path = real_path
            e.line = occurrence.line
            logger.debug("Invalid workaround marker at %s:%d: %s", real_path, occurrence.line, e)
            raise
        results.append(decoded.with_file(real_path))
    return results


class DeadlockScanner:
    """Scans a directory tree for workaround markers."""

    def __init__(self, config: Optional[DeadlockConfig] = None) -> None:
        self.config = config or DeadlockConfig()

    def scan(self, root: Path | str) -> list[DeadlockResult]:
        """Return every marker under root, in traversal order."""
        root = Path(root)
        if not root.is_dir():
            raise FileNotFoundError(f"Scan root is not a directory: {root}")

        results: list[DeadlockResult] = []
        files = 0
        for path in iter_source_files(root, self.config):
            files += 1
            results.extend(scan_file(path))

        logger.info("Scanned %d files under %s: %d workarounds", files, root, len(results))
        return results


def scan(root: Path | str, config: Optional[DeadlockConfig] = None) -> list[DeadlockResult]:
    """Scan a directory tree with a one-off DeadlockScanner."""
    return DeadlockScanner(config).scan(root)
