"""Configuration management commands."""

from pathlib import Path
from typing import Annotated

import click
import typer

from tempo.cli.console import console, create_table, error, success


def register(app: typer.Typer) -> None:
    """Register the config command."""

    @app.command()
    def config(
        action: Annotated[
            str | None,
            typer.Argument(help="Action: show, validate"),
        ] = None,
        path: Annotated[
            Path | None,
            typer.Option(
                "--path",
                "-p",
                help="Path to config file (default: $TEMPO_HOME/config.toml)",
            ),
        ] = None,
    ) -> None:
        """Manage configuration."""
        if action is None:
            ctx = click.get_current_context()
            click.echo(ctx.get_help())
            raise typer.Exit(0)

        import tomllib

        from pydantic import ValidationError
        from rich.syntax import Syntax

        from tempo.config import load_config
        from tempo.config.paths import get_config_path

        expanded_path = path.expanduser() if path else get_config_path()

        if action == "show":
            if not expanded_path.exists():
                error(f"Config file not found: {expanded_path}")
                raise typer.Exit(1)

            content = expanded_path.read_text()
            syntax = Syntax(content, "toml", theme="monokai", line_numbers=True)
            console.print(f"[bold]Config file: {expanded_path}[/bold]\n")
            console.print(syntax)

        elif action == "validate":
            try:
                config_obj = load_config(expanded_path)
                config_obj.resolve_timezone()
            except FileNotFoundError as e:
                error(str(e))
                raise typer.Exit(1) from None
            except tomllib.TOMLDecodeError as e:
                error(f"Invalid TOML: {e}")
                raise typer.Exit(1) from None
            except ValidationError as e:
                error("Configuration validation failed:")
                console.print()
                for err in e.errors():
                    loc = ".".join(str(x) for x in err["loc"])
                    console.print(f"  [yellow]{loc}[/yellow]: {err['msg']}")
                raise typer.Exit(1) from None
            except Exception as e:
                error(f"Error loading config: {e}")
                raise typer.Exit(1) from None

            table = create_table(
                "Configuration Summary",
                [("Setting", "cyan"), ("Value", "green")],
            )
            table.add_row("Timezone", config_obj.timezone)
            table.add_row("Scheduler", config_obj.scheduler.backend)
            if config_obj.scheduler.backend == "local":
                table.add_row("Scheduler state", str(config_obj.scheduler.state_path))
            table.add_row("Handler", config_obj.scheduler.handler)
            table.add_row("Metadata", config_obj.metadata.backend)
            if config_obj.metadata.backend == "file":
                table.add_row("Metadata file", str(config_obj.metadata.path))
            table.add_row("Log level", config_obj.logging.level)

            success("Configuration is valid!")
            console.print()
            console.print(table)

        else:
            error(f"Unknown action: {action}")
            console.print("Valid actions: show, validate")
            raise typer.Exit(1)
