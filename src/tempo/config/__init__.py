"""Configuration module."""

from tempo.config.loader import find_config_path, load_config
from tempo.config.models import (
    ConfigError,
    LoggingConfig,
    MetadataConfig,
    SchedulerConfig,
    TempoConfig,
)
from tempo.config.paths import (
    get_config_path,
    get_logs_path,
    get_metadata_path,
    get_scheduler_path,
    get_tempo_home,
)

__all__ = [
    "ConfigError",
    "LoggingConfig",
    "MetadataConfig",
    "SchedulerConfig",
    "TempoConfig",
    "find_config_path",
    "get_config_path",
    "get_logs_path",
    "get_metadata_path",
    "get_scheduler_path",
    "get_tempo_home",
    "load_config",
]
