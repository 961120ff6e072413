"""Main CLI application."""

import typer

from tempo.cli.commands import config, schedule

app = typer.Typer(
    name="tempo",
    help="Tempo - recurring schedules for named resources",
    no_args_is_help=True,
)

config.register(app)
schedule.register(app)


if __name__ == "__main__":
    app()
