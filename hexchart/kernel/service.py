"""Interpreter service: the stateful runtime around a :class:`Machine`.

A service owns the current :class:`State`, a lifecycle status and an ordered
listener registry::

    service = interpret(machine).start()
    subscription = service.subscribe(render)
    service.send("FLIP")
    service.stop()

``send`` is synchronous. For each event it computes the next state, executes
that state's effect actions in order and then notifies listeners in
subscription order.

Events sent while the service is already handling an event (from inside an
effect or a listener) are queued and handled, first in first out, once the
current event has finished notifying listeners. The outermost ``send`` call
returns only after the queue is drained.
"""

from __future__ import annotations

import dataclasses
from collections import deque
from collections.abc import Hashable, Mapping
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from hexchart.kernel.domain.machine import INIT_EVENT_TYPE, Event, State
from hexchart.kernel.exceptions import ServiceLifecycleError
from hexchart.kernel.logging import get_logger
from hexchart.kernel.observers import ListenerRegistry

if TYPE_CHECKING:
    from hexchart.kernel.machine import Machine
    from hexchart.kernel.observers import Listener, Subscription

logger = get_logger(__name__)

__all__ = ["MachineService", "ServiceStatus", "interpret"]


class ServiceStatus(StrEnum):
    """Service lifecycle: NOT_STARTED -> RUNNING -> STOPPED."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"


class MachineService:
    """Running instance of a machine.

    Each service exclusively owns its current state and listeners; the
    machine itself may be shared.
    """

    def __init__(self, machine: Machine) -> None:
        self._machine = machine
        self._status = ServiceStatus.NOT_STARTED
        self._state = machine.initial_state
        self._listeners: ListenerRegistry[State] = ListenerRegistry()
        self._queue: deque[Event] = deque()
        self._processing = False

    def __repr__(self) -> str:
        return (
            f"MachineService(machine={self._machine.name!r}, "
            f"status={self._status.value}, state={self._state.value!r})"
        )

    @property
    def machine(self) -> Machine:
        return self._machine

    @property
    def status(self) -> ServiceStatus:
        return self._status

    @property
    def state(self) -> State:
        return self._state

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> MachineService:
        """Start the service and run the initial state's effect actions.

        Subscribers are not notified. Starting a running service is a no-op;
        restarting a stopped service is not supported. When an entry effect
        raises, the service stays running in the initial state, the remaining
        effects are skipped and the error propagates.

        Raises
        ------
        ServiceLifecycleError
            If the service has been stopped.
        """
        if self._status is ServiceStatus.RUNNING:
            return self
        if self._status is ServiceStatus.STOPPED:
            raise ServiceLifecycleError(self._status.value, "start")

        self._status = ServiceStatus.RUNNING
        logger.info(
            "Service for machine {machine} started in {state}",
            machine=self._machine.name,
            state=self._state.value,
        )
        self._processing = True
        try:
            self._commit(self._state, Event(type=INIT_EVENT_TYPE))
        except Exception:
            self._queue.clear()
            self._processing = False
            raise
        self._drain()
        return self

    def stop(self) -> MachineService:
        """Stop the service and drop every listener without a final notification.

        Events sent afterwards, and events still queued, are discarded.
        """
        if self._status is not ServiceStatus.STOPPED:
            logger.info(
                "Service for machine {machine} stopped in {state}",
                machine=self._machine.name,
                state=self._state.value,
            )
        self._status = ServiceStatus.STOPPED
        self._listeners.clear()
        self._queue.clear()
        return self

    def __enter__(self) -> MachineService:
        return self.start()

    def __exit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Events and subscriptions
    # ------------------------------------------------------------------

    def send(self, event: Event | Mapping[str, Any] | Hashable) -> State:
        """Deliver an event.

        Does nothing unless the service is running. Effect and listener
        exceptions propagate to the outermost ``send`` caller, and any events
        still queued behind the failing one are discarded.

        Returns
        -------
        State
            The current state once this call returns.
        """
        event = Event.coerce(event)
        if self._status is not ServiceStatus.RUNNING:
            logger.debug(
                "Dropping event {event} sent to {status} service",
                event=event.type,
                status=self._status.value,
            )
            return self._state

        self._queue.append(event)
        if self._processing:
            logger.debug("Queued reentrant event {event}", event=event.type)
            return self._state

        self._processing = True
        self._drain()
        return self._state

    def subscribe(self, listener: Listener[State]) -> Subscription:
        """Register ``listener`` and call it once right away with the current state."""
        subscription = self._listeners.add(listener)
        listener(self._state)
        return subscription

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _drain(self) -> None:
        try:
            while self._queue and self._status is ServiceStatus.RUNNING:
                self._step(self._queue.popleft())
        except Exception:
            self._queue.clear()
            raise
        finally:
            self._processing = False
        self._queue.clear()

    def _step(self, event: Event) -> None:
        previous = self._state
        next_state = self._machine.transition(previous, event)
        if next_state.changed:
            logger.debug(
                "{machine}: {source} --{event}--> {target} ({effects} effects)",
                machine=self._machine.name,
                source=previous.value,
                event=event.type,
                target=next_state.value,
                effects=len(next_state.actions),
            )
        else:
            logger.debug(
                "{machine}: {event} ignored in {source}",
                machine=self._machine.name,
                event=event.type,
                source=previous.value,
            )
        self._commit(next_state, event)
        self._listeners.notify(self._state)

    def _commit(self, state: State, event: Event) -> None:
        # stored without pending actions so a failing effect is never re-run
        self._state = dataclasses.replace(state, actions=()) if state.actions else state
        for action in state.actions:
            action.exec(state.context, event)


def interpret(machine: Machine) -> MachineService:
    """Create a service for ``machine``; call ``start()`` before sending events."""
    return MachineService(machine)
