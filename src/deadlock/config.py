"""
deadlock: Configuration.

Loads settings from a YAML file and environment overrides into a frozen
DeadlockConfig. The config is passed explicitly to the scanner and the
guard; neither reads process state on its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .exceptions import ConfigError

logger = logging.getLogger(__name__)


# Config file locations, relative to the working directory (checked in order)
CONFIG_SEARCH_PATHS = (
    Path("deadlock.yaml"),
    Path(".deadlock.yaml"),
)

DEFAULT_CONFIG: dict[str, Any] = {
    "scan_path": ".",
    "environment": "production",
    "local_environments": ["local"],
    "extensions": [".py"],
    "exclude_dirs": [],
    "critical_days": 7,
}

ENV_OVERRIDES = {
    "DEADLOCK_ENV": "environment",
    "DEADLOCK_PATH": "scan_path",
}


@dataclass(frozen=True)
class DeadlockConfig:
    """Runtime configuration for scanning and guarding."""

    scan_path: Path = Path(".")

    # The runtime guard only fires in these environments
    environment: str = "production"
    local_environments: tuple[str, ...] = ("local",)

    # Source files
    extensions: tuple[str, ...] = (".py",)
    exclude_dirs: tuple[str, ...] = ()

    # Reporting
    critical_days: int = 7

    source: Optional[Path] = field(default=None, compare=False)

    @property
    def is_local(self) -> bool:
        return self.environment in self.local_environments

    def should_exclude(self, path: Path) -> bool:
        """Check if path sits under an excluded directory."""
        return any(d in path.parts for d in self.exclude_dirs)

    def is_source_file(self, path: Path) -> bool:
        return path.suffix in self.extensions


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _find_config(explicit: Optional[Path]) -> Optional[Path]:
    if explicit is not None:
        if not explicit.exists():
            raise ConfigError(f"Config file not found: {explicit}")
        return explicit
    for candidate in CONFIG_SEARCH_PATHS:
        if candidate.exists():
            return candidate
    return None


def _as_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value or ())


def load_config(
    path: Optional[Path | str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DeadlockConfig:
    """
    Build a DeadlockConfig from defaults, a YAML file and the environment.

    Args:
        path: Explicit config file. When omitted, CONFIG_SEARCH_PATHS are
            tried and a missing file just means defaults.
        environ: Environment mapping for overrides. Callers pass
            ``os.environ`` explicitly; None means no overrides.
    """
    settings: dict[str, Any] = dict(DEFAULT_CONFIG)

    config_path = _find_config(Path(path) if path is not None else None)
    if config_path is not None:
        user_config = _read_yaml(config_path)
        unknown = set(user_config) - set(DEFAULT_CONFIG)
        if unknown:
            logger.warning("Ignoring unknown config keys in %s: %s",
                           config_path, ", ".join(sorted(unknown)))
        settings.update({k: v for k, v in user_config.items() if k in DEFAULT_CONFIG})
        logger.debug("Loaded config from %s", config_path)

    for env_var, key in ENV_OVERRIDES.items():
        if environ is not None and env_var in environ:
            settings[key] = environ[env_var]

    try:
        critical_days = int(settings["critical_days"])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"critical_days must be an integer: {settings['critical_days']!r}") from e

    return DeadlockConfig(
        scan_path=Path(settings["scan_path"]),
        environment=str(settings["environment"]),
        local_environments=_as_tuple(settings["local_environments"]),
        extensions=_as_tuple(settings["extensions"]),
        exclude_dirs=_as_tuple(settings["exclude_dirs"]),
        critical_days=critical_days,
        source=config_path,
    )

