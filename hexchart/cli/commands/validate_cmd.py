"""Machine validation command for hexchart CLI."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from hexchart.cli.utils import machine_files
from hexchart.compiler.machine_loader import MachineLoader
from hexchart.kernel.domain.machine import Action, MachineDefinition
from hexchart.kernel.exceptions import MachineLoadError

console = Console()


def validate(
    yaml_file: Annotated[
        Path | None,
        typer.Argument(
            help="Path to a kind: Machine YAML file; defaults to the configured machines",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    show_states: Annotated[
        bool,
        typer.Option("--states", "-s", help="List states, actions and transitions"),
    ] = False,
) -> None:
    """Validate a machine file, or every machine the project configures.

    This command checks:
    - YAML syntax and manifest format (apiVersion, kind, metadata, spec)
    - Action entries and guard/action references
    - The initial state and every transition target
    - Transition events against the declared ``events`` list

    Examples
    --------
    hexchart validate toggle.yaml
    hexchart validate toggle.yaml --states
    hexchart validate          # every file listed under machines in the config
    """
    loader = MachineLoader()
    failures = 0
    for path in machine_files(yaml_file):
        try:
            definition = loader.load_file(path)
        except MachineLoadError as e:
            console.print(f"[red]✗ Validation failed:[/red] {e}")
            failures += 1
            continue

        console.print(
            f"[green]✓ Validation successful:[/green] {path} "
            f"(machine [bold]{definition.name}[/bold], {len(definition.states)} states)"
        )
        if show_states:
            console.print(_states_table(definition))

    if failures:
        raise typer.Exit(1)


def _states_table(definition: MachineDefinition) -> Table:
    table = Table(title=f"Machine: {definition.name}", border_style="cyan")
    table.add_column("State", style="green")
    table.add_column("Entry")
    table.add_column("Exit")
    table.add_column("Transitions", style="white")

    for value, node in definition.states.items():
        transitions = "\n".join(
            f"{event_type} → {value if t.target is None else t.target}"
            + (" [dim](guarded)[/dim]" if t.cond is not None else "")
            for event_type, t in node.on.items()
        )
        label = f"{value} [dim](initial)[/dim]" if value == definition.initial else str(value)
        table.add_row(label, _describe(node.entry), _describe(node.exit), transitions or "-")
    return table


def _describe(actions: tuple[Action, ...]) -> str:
    return ", ".join(action.type for action in actions) or "-"
