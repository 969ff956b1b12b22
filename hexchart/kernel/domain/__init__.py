"""Immutable domain models."""

from hexchart.kernel.domain.machine import (
    Action,
    AssignAction,
    EffectAction,
    Event,
    MachineDefinition,
    State,
    StateNode,
    TransitionDefinition,
)

__all__ = [
    "Action",
    "AssignAction",
    "EffectAction",
    "Event",
    "MachineDefinition",
    "State",
    "StateNode",
    "TransitionDefinition",
]
