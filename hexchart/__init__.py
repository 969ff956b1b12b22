"""hexchart: declarative statecharts with a pure transition engine.

A machine definition is immutable data; ``Machine.transition`` is a pure
function from ``(state, event)`` to the next state; an interpreter service
executes the effect actions that transition hands back and notifies
subscribers.

Examples
--------
>>> from hexchart import assign, create_machine, interpret
>>> toggle = create_machine({
...     "initial": "OFF",
...     "context": {"count": 0},
...     "states": {
...         "OFF": {"on": {"FLIP": {"target": "ON", "actions": [
...             assign(lambda ctx, e: {"count": ctx["count"] + 1}),
...         ]}}},
...         "ON": {"on": {"FLIP": {"target": "OFF"}}},
...     },
... })
>>> service = interpret(toggle).start()
>>> service.send("FLIP").value
'ON'
"""

try:
    from importlib.metadata import version

    __version__ = version("hexchart")
except Exception:
    __version__ = "0.0.0.dev0"  # Fallback for development installs

from hexchart.kernel.actions import assign, assign_values, effect, log
from hexchart.kernel.cancellation import CancellationToken, OperationCancelledError
from hexchart.kernel.domain.machine import (
    AssignAction,
    EffectAction,
    Event,
    MachineDefinition,
    State,
    StateNode,
    TransitionDefinition,
)
from hexchart.kernel.exceptions import (
    HexChartError,
    MachineLoadError,
    ServiceLifecycleError,
    UnknownStateError,
    ValidationError,
)
from hexchart.kernel.machine import Machine, create_machine
from hexchart.kernel.service import MachineService, ServiceStatus, interpret

__all__ = [
    "AssignAction",
    "CancellationToken",
    "EffectAction",
    "Event",
    "HexChartError",
    "Machine",
    "MachineDefinition",
    "MachineLoadError",
    "MachineService",
    "OperationCancelledError",
    "ServiceLifecycleError",
    "ServiceStatus",
    "State",
    "StateNode",
    "TransitionDefinition",
    "UnknownStateError",
    "ValidationError",
    "__version__",
    "assign",
    "assign_values",
    "create_machine",
    "effect",
    "interpret",
    "log",
]
