"""
Pytest configuration and shared fixtures.
"""

import sys
import textwrap
from datetime import date
from pathlib import Path

import pytest

# Add src and fixture modules to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent / "fixtures"))

from deadlock import DeadlockConfig


# =============================================================================
# PATH FIXTURES
# =============================================================================

@pytest.fixture
def fixtures_dir():
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def write_tree(tmp_path):
    """Write {relative_path: source} into tmp_path and return the root."""
    def _write(files):
        for rel, text in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(text, bytes):
                path.write_bytes(text)
            else:
                path.write_text(textwrap.dedent(text), encoding="utf-8")
        return tmp_path
    return _write


# =============================================================================
# CONFIG FIXTURES
# =============================================================================

@pytest.fixture
def local_config():
    """Config with the runtime guard enabled."""
    return DeadlockConfig(environment="local")


@pytest.fixture
def production_config():
    """Config with the runtime guard disabled."""
    return DeadlockConfig(environment="production")


@pytest.fixture
def today():
    """Fixed reference date for expiry checks."""
    return date(2025, 1, 15)
