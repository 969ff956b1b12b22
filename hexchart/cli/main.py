"""hexchart CLI - Main entrypoint."""

import typer
from rich.console import Console

from hexchart.cli.commands import config_cmd, run_cmd, validate_cmd
from hexchart.cli.utils import apply_project_logging
from hexchart.kernel.logging import configure_logging

app = typer.Typer(
    name="hexchart",
    help="hexchart - Declarative statecharts with a pure transition engine.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)

console = Console()

app.command("validate", help="Validate a kind: Machine YAML file")(validate_cmd.validate)
app.command("run", help="Run a machine against a sequence of events")(run_cmd.run)
app.add_typer(config_cmd.app, name="config", help="Configuration management")


@app.callback(invoke_without_command=True)
def callback(
    ctx: typer.Context,
    *,
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level: debug|info|warning|error"
    ),
    log_format: str = typer.Option(
        "structured", "--log-format", help="Log format: console|json|structured|rich"
    ),
    version: bool = typer.Option(False, "--version", "-v", help="Show version and exit"),
) -> None:
    """hexchart CLI.

    Global flags are parsed here and stored on `ctx.obj` for subcommands.
    Without `--log-level` the `logging` section of the project configuration
    applies.
    """
    if ctx.obj is None:
        ctx.obj = {}
    ctx.obj.update({"log_level": log_level, "log_format": log_format})

    if log_level is not None:
        configure_logging(
            level=log_level.upper(),  # type: ignore[arg-type]
            format=log_format.lower(),  # type: ignore[arg-type]
            force_reconfigure=True,
        )
    elif not version:
        apply_project_logging()

    if version:
        from hexchart import __version__

        console.print(f"[bold blue]hexchart[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()


def main() -> None:
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
