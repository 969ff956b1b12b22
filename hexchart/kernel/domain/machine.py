"""Domain models for declarative statecharts.

A :class:`MachineDefinition` describes states, the transitions between them and
the actions that run along the way. It is built once and never mutated; any
number of services may share it.

Example::

    class Toggle(StrEnum):
        OFF = "OFF"
        ON = "ON"

    definition = MachineDefinition(
        initial=Toggle.OFF,
        context={"count": 0},
        states={
            Toggle.OFF: StateNode(
                on={"FLIP": TransitionDefinition(target=Toggle.ON, actions=(increment,))}
            ),
            Toggle.ON: StateNode(on={"FLIP": TransitionDefinition(target=Toggle.OFF)}),
        },
    )
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from hexchart.kernel.exceptions import ValidationError

ASSIGN_ACTION_TYPE = "ASSIGN_CONTEXT"
INIT_EVENT_TYPE = "STATE_MACHINE_INIT"

Guard = Callable[[Any, "Event"], bool]
Assignment = Callable[[Any, "Event"], Any]
EffectFunc = Callable[[Any, "Event"], None]


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Event:
    """A structured event: a ``type`` plus transition-specific payload."""

    type: Hashable
    data: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def of(cls, type: Hashable, /, **data: Any) -> Event:
        """Build an event from keyword payload, e.g. ``Event.of("SUBMIT", email=...)``."""
        return cls(type=type, data=data)

    @classmethod
    def coerce(cls, event: Event | Mapping[str, Any] | Hashable) -> Event:
        """Normalise the shapes accepted by ``send``.

        Accepts an :class:`Event`, a mapping with a ``"type"`` key (the other
        keys become payload) or a bare event identifier.
        """
        if isinstance(event, Event):
            return event
        if isinstance(event, Mapping):
            if "type" not in event:
                raise ValidationError("event", "mapping events need a 'type' key", dict(event))
            payload = {key: value for key, value in event.items() if key != "type"}
            return cls(type=event["type"], data=payload)
        return cls(type=event)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def get(self, key: str, default: Any = None) -> Any:
        """Payload lookup with a default."""
        return self.data.get(key, default)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AssignAction:
    """Replaces the context; resolved while the next state is computed."""

    assignment: Assignment
    type: str = ASSIGN_ACTION_TYPE

    def apply(self, context: Any, event: Event) -> Any:
        return self.assignment(context, event)


@dataclass(frozen=True, slots=True)
class EffectAction:
    """A side effect, executed by the service after a transition is computed."""

    type: str
    exec: EffectFunc

    def __call__(self, context: Any, event: Event) -> None:
        self.exec(context, event)


Action = AssignAction | EffectAction


def as_action(candidate: Action | EffectFunc) -> Action:
    """Normalise an action list entry; bare callables become effect actions."""
    if isinstance(candidate, AssignAction | EffectAction):
        return candidate
    if callable(candidate):
        return EffectAction(type=getattr(candidate, "__name__", "effect"), exec=candidate)
    raise ValidationError("actions", "entries must be actions or callables", candidate)


def _as_actions(candidates: Iterable[Action | EffectFunc] | None) -> tuple[Action, ...]:
    return tuple(as_action(candidate) for candidate in candidates or ())


# ---------------------------------------------------------------------------
# Definition
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransitionDefinition:
    """Where an event leads, under which guard, running which actions.

    ``target=None`` means the current state: the transition still runs the
    state's exit and entry actions.
    """

    target: Hashable | None = None
    cond: Guard | None = None
    actions: tuple[Action, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "actions", _as_actions(self.actions))

    @classmethod
    def coerce(cls, raw: TransitionDefinition | Mapping[str, Any] | str) -> TransitionDefinition:
        """Accept a definition, a mapping, or a bare string as target shorthand."""
        if isinstance(raw, TransitionDefinition):
            return raw
        if isinstance(raw, str):
            return cls(target=raw)
        if isinstance(raw, Mapping):
            return cls(
                target=raw.get("target"),
                cond=raw.get("cond"),
                actions=raw.get("actions") or (),
            )
        raise ValidationError("on", "transitions must be TransitionDefinition or mappings", raw)

    def allows(self, context: Any, event: Event) -> bool:
        """Evaluate the guard; a missing guard always passes."""
        return self.cond is None or bool(self.cond(context, event))


@dataclass(frozen=True, slots=True)
class StateNode:
    """A single state: its entry/exit actions and the events it reacts to."""

    on: Mapping[Hashable, TransitionDefinition] = field(default_factory=dict)
    entry: tuple[Action, ...] = ()
    exit: tuple[Action, ...] = ()

    def __post_init__(self) -> None:
        transitions = {
            event_type: TransitionDefinition.coerce(raw) for event_type, raw in self.on.items()
        }
        object.__setattr__(self, "on", MappingProxyType(transitions))
        object.__setattr__(self, "entry", _as_actions(self.entry))
        object.__setattr__(self, "exit", _as_actions(self.exit))

    @classmethod
    def coerce(cls, raw: StateNode | Mapping[str, Any]) -> StateNode:
        if isinstance(raw, StateNode):
            return raw
        if isinstance(raw, Mapping):
            return cls(
                on=raw.get("on") or {},
                entry=raw.get("entry") or (),
                exit=raw.get("exit") or (),
            )
        raise ValidationError("states", "state nodes must be StateNode or mappings", raw)


@dataclass(frozen=True, slots=True)
class MachineDefinition:
    """Immutable description of a statechart.

    Attributes
    ----------
    initial:
        Identifier of the starting state.
    states:
        State identifier to :class:`StateNode`.
    context:
        Initial extended state. Treated as immutable; assignments produce new
        context objects.
    events:
        Optional closed set of event types. When given, every ``on`` key
        must belong to it.
    name:
        Label used in logs and the CLI.
    """

    initial: Hashable
    states: Mapping[Hashable, StateNode]
    context: Any = field(default_factory=dict)
    events: frozenset[Hashable] | None = None
    name: str = "machine"

    def __post_init__(self) -> None:
        nodes = {state: StateNode.coerce(raw) for state, raw in self.states.items()}
        object.__setattr__(self, "states", MappingProxyType(nodes))
        if self.events is not None:
            object.__setattr__(self, "events", frozenset(self.events))
        self._check_references()

    def _check_references(self) -> None:
        if not self.states:
            raise ValidationError("states", "at least one state is required")
        if self.initial not in self.states:
            raise ValidationError(
                "initial",
                f"not in states: {sorted(map(str, self.states))}",
                self.initial,
            )
        for state, node in self.states.items():
            for event_type, transition in node.on.items():
                if self.events is not None and event_type not in self.events:
                    raise ValidationError(
                        "on",
                        f"event of state {state!r} not in events: {sorted(map(str, self.events))}",
                        event_type,
                    )
                if transition.target is not None and transition.target not in self.states:
                    raise ValidationError(
                        "target",
                        f"transition {state!r} --{event_type}--> is not a declared state",
                        transition.target,
                    )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> MachineDefinition:
        """Build a definition from a plain nested mapping."""
        if "initial" not in data or "states" not in data:
            raise ValidationError("definition", "'initial' and 'states' are required")
        events = data.get("events")
        return cls(
            initial=data["initial"],
            states=data["states"],
            context=data.get("context") if data.get("context") is not None else {},
            events=frozenset(events) if events is not None else None,
            name=data.get("name", "machine"),
        )


# ---------------------------------------------------------------------------
# Runtime value
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class State:
    """Snapshot produced by every transition; never mutated.

    ``actions`` holds the effect actions still to be executed for the
    transition that produced this state. ``changed`` is ``False`` when the
    event was unmatched or rejected by a guard.
    """

    value: Hashable
    context: Any
    actions: tuple[EffectAction, ...] = ()
    changed: bool = field(default=False, compare=False)

    def matches(self, value: Hashable) -> bool:
        return self.value == value
