"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from tempo.config.models import TempoConfig
from tempo.config.paths import get_config_path

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("tempo.toml"),  # Current directory
        get_config_path(),  # ~/.tempo/config.toml (or TEMPO_HOME)
    ]


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply TEMPO_* environment overrides on top of file values."""
    if timezone := os.environ.get("TEMPO_TIMEZONE"):
        config["timezone"] = timezone

    if level := os.environ.get("TEMPO_LOG_LEVEL"):
        level = level.upper()
        if level in LOG_LEVELS:
            config.setdefault("logging", {})["level"] = level

    return config


def find_config_path(path: Path | None = None) -> Path | None:
    """Resolve the config file to load.

    Raises:
        FileNotFoundError: If an explicit path was given and does not exist.
    """
    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return config_path

    for default_path in _get_default_config_paths():
        expanded = default_path.expanduser()
        if expanded.exists():
            return expanded
    return None


def load_config(path: Path | None = None) -> TempoConfig:
    """Load configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, searches default
            locations and falls back to defaults when none exists.

    Returns:
        Validated TempoConfig instance.

    Raises:
        FileNotFoundError: If an explicit config file is missing.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
        pydantic.ValidationError: If config values are invalid.
    """
    config_path = find_config_path(path)

    raw_config: dict[str, Any] = {}
    if config_path is not None:
        with config_path.open("rb") as f:
            raw_config = tomllib.load(f)

    raw_config = _apply_env_overrides(raw_config)
    return TempoConfig.model_validate(raw_config)
