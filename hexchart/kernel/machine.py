"""Transition engine.

:class:`Machine` turns a definition into a pure transition function::

    next_state = machine.transition(current_state, event)

The engine never executes effects. It folds assignment actions into the next
context and hands the surviving effect actions back on ``State.actions`` for
the service to run.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping
from typing import Any

from hexchart.kernel.domain.machine import (
    INIT_EVENT_TYPE,
    Action,
    AssignAction,
    EffectAction,
    Event,
    MachineDefinition,
    State,
    StateNode,
)
from hexchart.kernel.exceptions import UnknownStateError

__all__ = ["Machine", "create_machine", "partition_actions"]


def partition_actions(
    actions: Iterable[Action], context: Any, event: Event
) -> tuple[Any, tuple[EffectAction, ...]]:
    """Fold assignments into ``context`` and keep effects in order.

    Assignments are applied strictly left to right, each one seeing the
    context produced by the previous one.

    Returns
    -------
    tuple
        ``(next_context, effects)``
    """
    effects: list[EffectAction] = []
    for action in actions:
        if isinstance(action, AssignAction):
            context = action.apply(context, event)
        else:
            effects.append(action)
    return context, tuple(effects)


class Machine:
    """Pure statechart over an immutable :class:`MachineDefinition`.

    A machine holds no runtime state and can back any number of services.
    """

    __slots__ = ("_definition",)

    def __init__(self, definition: MachineDefinition) -> None:
        self._definition = definition

    def __repr__(self) -> str:
        return f"Machine(name={self._definition.name!r}, initial={self._definition.initial!r})"

    @property
    def definition(self) -> MachineDefinition:
        return self._definition

    @property
    def name(self) -> str:
        return self._definition.name

    @property
    def initial_state(self) -> State:
        """State the service starts in.

        The initial state's entry actions are partitioned like any other
        transition: assignments are folded into the context against the
        synthetic init event, effects are left for ``start()`` to execute.
        """
        definition = self._definition
        node = definition.states[definition.initial]
        context, effects = partition_actions(
            node.entry, definition.context, Event(type=INIT_EVENT_TYPE)
        )
        return State(value=definition.initial, context=context, actions=effects)

    def transition(self, state: State, event: Event | Mapping[str, Any] | Hashable) -> State:
        """Compute the state that follows ``state`` when ``event`` occurs.

        An event without a matching transition, or whose guard rejects it,
        yields the same value and context with no actions.

        Raises
        ------
        UnknownStateError
            If ``state.value`` (or a resolved target) is not declared.
        """
        event = Event.coerce(event)
        node = self._node(state.value)
        unchanged = State(value=state.value, context=state.context)

        transition = node.on.get(event.type)
        if transition is None:
            return unchanged
        if not transition.allows(state.context, event):
            return unchanged

        target = state.value if transition.target is None else transition.target
        target_node = self._node(target)

        # exit -> transition -> entry, even when the target is the current state
        ordered = (*node.exit, *transition.actions, *target_node.entry)
        context, effects = partition_actions(ordered, state.context, event)
        return State(value=target, context=context, actions=effects, changed=True)

    def _node(self, value: Hashable) -> StateNode:
        try:
            return self._definition.states[value]
        except (KeyError, TypeError) as e:
            raise UnknownStateError(value, [str(s) for s in self._definition.states]) from e


def create_machine(definition: MachineDefinition | Mapping[str, Any]) -> Machine:
    """Create a :class:`Machine` from a definition or an equivalent mapping.

    Examples
    --------
    >>> from hexchart.kernel.actions import assign
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
    >>> toggle.transition(toggle.initial_state, "FLIP").context
    {'count': 1}
    """
    if not isinstance(definition, MachineDefinition):
        definition = MachineDefinition.from_mapping(definition)
    return Machine(definition)
