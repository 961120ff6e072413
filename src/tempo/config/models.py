"""Configuration models using Pydantic."""

from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field

from tempo.config.paths import (
    get_metadata_path,
    get_scheduler_path,
    get_system_timezone,
)


class SchedulerConfig(BaseModel):
    """Configuration for the native scheduler backend.

    "local" persists registrations to state_path; "memory" keeps them in
    process (useful for tests and dry runs).
    """

    backend: Literal["local", "memory"] = "local"
    state_path: Path = Field(default_factory=get_scheduler_path)
    # Action run when a registration fires; only registrations carrying this
    # handler are managed.
    handler: str = "sync_resource"


class MetadataConfig(BaseModel):
    """Configuration for the schedule metadata store."""

    backend: Literal["file", "memory"] = "file"
    path: Path = Field(default_factory=get_metadata_path)


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_to_file: bool = False
    retention_days: int = Field(default=7, ge=1)


class ConfigError(Exception):
    """Configuration error."""

    pass


class TempoConfig(BaseModel):
    """Root configuration model."""

    timezone: str = Field(default_factory=get_system_timezone)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    metadata: MetadataConfig = Field(default_factory=MetadataConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def resolve_timezone(self) -> ZoneInfo:
        """Get the configured timezone object.

        Raises:
            ConfigError: If the timezone cannot be loaded.
        """
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"Unknown timezone '{self.timezone}'") from e
