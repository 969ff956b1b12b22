"""Run a machine against a sequence of events."""

from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from rich.console import Console
from rich.table import Table

from hexchart.cli.utils import machine_files
from hexchart.compiler.machine_loader import load_machine
from hexchart.kernel.domain.machine import Event, State
from hexchart.kernel.exceptions import HexChartError
from hexchart.kernel.service import interpret

console = Console()


def parse_event(raw: str) -> Event:
    """Parse an ``--event`` value.

    A plain word is an event type. A YAML flow mapping carries a payload,
    e.g. ``{type: SUBMIT, email: cool@cool.com}``.
    """
    text = raw.strip()
    if not text.startswith("{"):
        return Event(type=text)
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise typer.BadParameter(f"invalid event mapping {raw!r}: {e}") from e
    try:
        return Event.coerce(data)
    except HexChartError as e:
        raise typer.BadParameter(str(e)) from e


def run(
    yaml_file: Annotated[
        Path | None,
        typer.Argument(
            help="Path to a kind: Machine YAML file; defaults to the one configured machine",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    events: Annotated[
        list[str] | None,
        typer.Option(
            "--event",
            "-e",
            help="Event to send; repeat for a sequence. Use {type: X, key: value} for payloads",
        ),
    ] = None,
) -> None:
    """Start a service for the machine, send each event and show every state.

    Examples
    --------
    hexchart run toggle.yaml -e FLIP -e FLIP -e FLIP
    hexchart run form.yaml -e "{type: SUBMIT, email: cool@cool.com}"
    """
    parsed = [parse_event(raw) for raw in events or []]
    paths = machine_files(yaml_file)
    if len(paths) > 1:
        listed = ", ".join(map(str, paths))
        console.print(f"[red]✗ Several machines are configured,[/red] pass one of: {listed}")
        raise typer.Exit(1)

    history: list[tuple[str, State]] = []
    label = "(start)"

    def record(state: State) -> None:
        history.append((label, state))

    try:
        machine = load_machine(paths[0])
        with interpret(machine) as service:
            service.subscribe(record)
            for event in parsed:
                label = str(event.type)
                service.send(event)
    except HexChartError as e:
        console.print(f"[red]✗ Run failed:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(_history_table(machine.name, history))


def _history_table(name: str, history: list[tuple[str, State]]) -> Table:
    table = Table(title=f"Machine: {name}", border_style="cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Event", style="yellow")
    table.add_column("State", style="green")
    table.add_column("Changed")
    table.add_column("Context", style="white")

    for index, (event_type, state) in enumerate(history):
        table.add_row(
            str(index),
            event_type,
            str(state.value),
            "[green]✓[/green]" if state.changed else "-",
            _format_context(state.context),
        )
    return table


def _format_context(context: Any) -> str:
    if isinstance(context, dict):
        return ", ".join(f"{key}={value!r}" for key, value in context.items()) or "{}"
    return repr(context)
