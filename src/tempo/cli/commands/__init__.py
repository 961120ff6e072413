"""CLI command modules."""

from tempo.cli.commands import config, schedule

__all__ = [
    "config",
    "schedule",
]
