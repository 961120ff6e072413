"""Schedule management commands."""

import tomllib
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated

import click
import typer

from tempo.cli.console import console, create_table, dim, error, success, warning
from tempo.scheduling.errors import NativeSchedulerError
from tempo.scheduling.formatter import weekday_name
from tempo.scheduling.manager import ScheduleManager
from tempo.scheduling.types import (
    DEFAULT_HOUR,
    DEFAULT_INTERVAL_HOURS,
    DEFAULT_MINUTE,
    DEFAULT_MONTH_DAY,
    RecurrenceRequest,
)


def _format_countdown(next_fire: datetime | None) -> str:
    """Format a countdown string for the next fire time."""
    if next_fire is None:
        return "[dim]?[/dim]"

    now = datetime.now(UTC)
    if next_fire <= now:
        return "[green]now[/green]"

    total_seconds = int((next_fire - now).total_seconds())

    if total_seconds < 60:
        return f"in {total_seconds}s"

    total_minutes = total_seconds // 60
    if total_minutes < 60:
        return f"in {total_minutes}m"

    hours = total_minutes // 60
    minutes = total_minutes % 60
    if hours < 24:
        if minutes:
            return f"in {hours}h {minutes}m"
        return f"in {hours}h"

    days = hours // 24
    hours = hours % 24
    if hours:
        return f"in {days}d {hours}h"
    return f"in {days}d"


def register(app: typer.Typer) -> None:
    """Register the schedule command."""

    @app.command()
    def schedule(
        action: Annotated[
            str | None,
            typer.Argument(help="Action: create, list, delete"),
        ] = None,
        resource: Annotated[
            str | None,
            typer.Option("--resource", "-r", help="Target resource (worksheet) name"),
        ] = None,
        frequency: Annotated[
            str | None,
            typer.Option(
                "--frequency", "-f", help="hourly, daily, weekly or monthly"
            ),
        ] = None,
        hour: Annotated[
            int, typer.Option("--hour", help="Hour of day (0-23)")
        ] = DEFAULT_HOUR,
        minute: Annotated[
            int, typer.Option("--minute", help="Minute (0-59)")
        ] = DEFAULT_MINUTE,
        weekday: Annotated[
            list[int] | None,
            typer.Option(
                "--weekday",
                "-w",
                help="Weekday for weekly schedules (Monday=1..Sunday=7), repeatable",
            ),
        ] = None,
        month_day: Annotated[
            int, typer.Option("--month-day", help="Day of month (1-31)")
        ] = DEFAULT_MONTH_DAY,
        interval_hours: Annotated[
            int, typer.Option("--interval-hours", help="Hours between hourly runs")
        ] = DEFAULT_INTERVAL_HOURS,
        handle: Annotated[
            str | None,
            typer.Option("--id", "-i", help="Schedule ID for delete"),
        ] = None,
        config_path: Annotated[
            Path | None,
            typer.Option("--config", "-c", help="Path to configuration file"),
        ] = None,
        verbose: Annotated[
            bool, typer.Option("--verbose", "-v", help="Show log output")
        ] = False,
    ) -> None:
        """Manage recurring schedules for a resource.

        Examples:
            tempo schedule create -r Deals -f daily --hour 9 --minute 30
            tempo schedule create -r Deals -f weekly -w 1 -w 3 -w 5
            tempo schedule list -r Deals
            tempo schedule delete --id 3f2a...
        """
        if action is None:
            ctx = click.get_current_context()
            click.echo(ctx.get_help())
            raise typer.Exit(0)

        if action not in ("create", "list", "delete"):
            error(f"Unknown action: {action}")
            console.print("Valid actions: create, list, delete")
            raise typer.Exit(1)

        manager = _load_manager(config_path, verbose)

        if action == "create":
            if not resource or not frequency:
                error("--resource and --frequency are required for create")
                raise typer.Exit(1)
            request = RecurrenceRequest(
                frequency=frequency,
                hour=hour,
                minute=minute,
                weekdays=list(weekday or []),
                month_day=month_day,
                interval_hours=interval_hours,
            )
            _schedule_create(manager, resource, request)

        elif action == "list":
            if not resource:
                error("--resource is required for list")
                raise typer.Exit(1)
            _schedule_list(manager, resource)

        else:
            if not handle:
                error("--id is required for delete")
                raise typer.Exit(1)
            _schedule_delete(manager, handle)


def _load_manager(config_path: Path | None, verbose: bool) -> ScheduleManager:
    from pydantic import ValidationError

    from tempo.config import ConfigError, load_config
    from tempo.logging import configure_logging
    from tempo.runtime import create_schedule_manager

    try:
        config = load_config(config_path)
    except FileNotFoundError as e:
        error(str(e))
        raise typer.Exit(1) from None
    except tomllib.TOMLDecodeError as e:
        error(f"Invalid TOML: {e}")
        raise typer.Exit(1) from None
    except ValidationError as e:
        error(f"Invalid configuration: {e.error_count()} error(s)")
        raise typer.Exit(1) from None

    configure_logging(
        level=config.logging.level if verbose else "WARNING",
        use_rich=verbose,
        log_to_file=config.logging.log_to_file,
        retention_days=config.logging.retention_days,
    )

    try:
        return create_schedule_manager(config)
    except ConfigError as e:
        error(str(e))
        raise typer.Exit(1) from None


def _schedule_create(
    manager: ScheduleManager, resource: str, request: RecurrenceRequest
) -> None:
    """Create a schedule and report each item."""
    from tempo.scheduling import ValidationError

    try:
        result = manager.create_schedule(resource, request)
    except ValidationError as e:
        error(f"Invalid schedule: {e.message}")
        raise typer.Exit(1) from None

    for created in result.handles:
        success(f"Created: {created.description}")
        dim(f"  id: {created.handle}")

    for failure in result.failures:
        label = (
            weekday_name(failure.weekday) if failure.weekday is not None else None
        )
        if label:
            warning(f"Failed for {label}: {failure.error}")
        else:
            warning(f"Failed: {failure.error}")

    if not result.success:
        error("No schedules were created")
        raise typer.Exit(1)
    if result.is_partial:
        warning(
            f"Created {len(result.handles)} of "
            f"{len(result.handles) + len(result.failures)} schedules"
        )


def _schedule_list(manager: ScheduleManager, resource: str) -> None:
    """List schedules for a resource."""
    try:
        summaries = manager.list_schedules(resource)
    except NativeSchedulerError as e:
        error(e.message)
        raise typer.Exit(1) from None

    if not summaries:
        warning(f'No schedules found for "{resource}"')
        return

    table = create_table(
        None,
        [
            ("ID", "dim"),
            ("Type", ""),
            ("Description", ""),
            ("Next Fire", ""),
        ],
    )
    for summary in summaries:
        table.add_row(
            summary.handle,
            summary.category,
            summary.description,
            _format_countdown(summary.next_fire),
        )

    console.print(table)
    dim(f"Total: {len(summaries)} schedule(s)")


def _schedule_delete(manager: ScheduleManager, handle: str) -> None:
    """Delete a schedule by ID."""
    result = manager.delete_schedule(handle)
    if not result.success:
        error(result.error or f"Failed to delete schedule {handle}")
        raise typer.Exit(1)
    success(f"Deleted schedule {handle}")
