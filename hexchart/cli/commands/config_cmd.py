"""Configuration management commands."""

import dataclasses
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from hexchart.compiler.config_loader import clear_config_cache, load_config
from hexchart.kernel.exceptions import ConfigurationError

app = typer.Typer(help="Configuration management commands")
console = Console()


@app.command("show")
def show_config(
    path: Annotated[
        Path | None,
        typer.Option("--path", "-p", help="Config file (kind: Config YAML or pyproject.toml)"),
    ] = None,
    key: Annotated[
        str | None,
        typer.Option("--key", "-k", help="Show one dotted key, e.g. logging.level"),
    ] = None,
) -> None:
    """Show the effective configuration or a single key.

    Without ``--path`` the file is discovered through ``HEXCHART_CONFIG_PATH``
    or a ``pyproject.toml`` with a ``[tool.hexchart]`` table.
    """
    clear_config_cache()
    try:
        config = load_config(path)
    except ConfigurationError as e:
        console.print(f"[red]✗ Configuration error:[/red] {e}")
        raise typer.Exit(1) from e

    flat: dict[str, object] = {"machines": config.machines}
    for section in ("logging", "newsletter"):
        for name, value in dataclasses.asdict(getattr(config, section)).items():
            flat[f"{section}.{name}"] = value
    for name, value in config.settings.items():
        flat[f"settings.{name}"] = value

    if key:
        if key not in flat:
            console.print(f"[yellow]<not set>[/yellow] {key}")
            raise typer.Exit(1)
        console.print(str(flat[key]))
        return

    table = Table(title="hexchart configuration", border_style="cyan")
    table.add_column("Key", style="green")
    table.add_column("Value", style="white")
    for name, value in flat.items():
        table.add_row(name, str(value))
    console.print(table)
