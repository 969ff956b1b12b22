"""Shared fixtures for the hexchart test suite.

- toggle_definition: the OFF/ON toggle that counts how often it was switched on
- toggle_machine: a :class:`Machine` built from it
"""

from __future__ import annotations

from typing import Any

import pytest

from hexchart.kernel.actions import assign
from hexchart.kernel.domain.machine import Event, MachineDefinition
from hexchart.kernel.machine import Machine


def increment(context: dict[str, Any], event: Event) -> dict[str, Any]:
    return {**context, "count": context["count"] + 1}


@pytest.fixture
def toggle_definition() -> MachineDefinition:
    return MachineDefinition.from_mapping({
        "name": "toggle",
        "initial": "OFF",
        "context": {"count": 0},
        "states": {
            "OFF": {"on": {"FLIP": {"target": "ON", "actions": [assign(increment)]}}},
            "ON": {"on": {"FLIP": {"target": "OFF"}}},
        },
    })


@pytest.fixture
def toggle_machine(toggle_definition: MachineDefinition) -> Machine:
    return Machine(toggle_definition)
