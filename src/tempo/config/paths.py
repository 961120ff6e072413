"""Centralized path management for Tempo.

All state (config, scheduler registrations, metadata, logs) is stored under a
single base directory. The base directory can be overridden with the
TEMPO_HOME environment variable.

Default location: ~/.tempo
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "TEMPO_HOME"


def get_system_timezone() -> str:
    """Detect system timezone, falling back to UTC.

    Resolution order:
    1. TZ environment variable (if set)
    2. /etc/timezone file (Debian/Ubuntu)
    3. /etc/localtime symlink target (most Linux distros)
    4. Fallback to UTC

    Returns:
        IANA timezone name (e.g., "America/Los_Angeles", "Europe/London", "UTC").
    """
    if tz := os.environ.get("TZ"):
        return tz

    try:
        tz = Path("/etc/timezone").read_text().strip()
        if tz:
            return tz
    except (FileNotFoundError, PermissionError):
        pass

    try:
        link = Path("/etc/localtime").resolve()
        parts = str(link).split("zoneinfo/")
        if len(parts) > 1:
            return parts[1]
    except (FileNotFoundError, PermissionError):
        pass

    return "UTC"


@lru_cache(maxsize=1)
def get_tempo_home() -> Path:
    """Get the base directory for all Tempo data.

    Resolution order:
    1. TEMPO_HOME environment variable (if set)
    2. Platform default (~/.tempo)
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()
    return Path.home() / ".tempo"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_tempo_home() / "config.toml"


def get_scheduler_path() -> Path:
    """Get the local native scheduler state file."""
    return get_tempo_home() / "scheduler.json"


def get_metadata_path() -> Path:
    """Get the schedule metadata (key-value) file."""
    return get_tempo_home() / "metadata.json"


def get_logs_path() -> Path:
    """Get the default logs directory path."""
    return get_tempo_home() / "logs"
