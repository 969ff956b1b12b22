"""CLI helpers shared by hexchart commands."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from hexchart.compiler.config_loader import load_config
from hexchart.kernel.exceptions import HexChartError
from hexchart.kernel.logging import configure_from_config

console = Console()


def apply_project_logging() -> None:
    """Configure logging from the project's ``logging`` section.

    A broken configuration file is reported and the current logging setup is
    kept, so ``hexchart config show`` can still be used to inspect it.
    """
    try:
        config = load_config()
    except HexChartError as e:
        console.print(f"[yellow]⚠ Ignoring project configuration:[/yellow] {e}")
        return
    configure_from_config(config.logging)


def machine_files(given: Path | None) -> list[Path]:
    """Return ``[given]``, or the ``machines`` listed in the project configuration.

    Relative entries are resolved against the current directory.

    Raises
    ------
    typer.Exit
        With code 1 when no file was given and none is configured.
    """
    if given is not None:
        return [given]
    try:
        configured = load_config().machines
    except HexChartError as e:
        console.print(f"[red]✗ Configuration error:[/red] {e}")
        raise typer.Exit(1) from e
    if not configured:
        console.print(
            "[red]✗ No machine file given[/red] and no [bold]machines[/bold] "
            "listed in the project configuration"
        )
        raise typer.Exit(1)
    return [Path(entry) for entry in configured]
