"""Host adapter binding one machine service to one component instance.

The host contract:

- the machine and its service are created once per host and never replaced,
- the service is started exactly once,
- exactly one listener (the host's change callback) is subscribed,
- the service is stopped exactly once when the host is closed.

Example::

    with MachineHost(toggle_machine, on_change=render) as host:
        host.send("FLIP")
        print(host.state.value)
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping
from typing import TYPE_CHECKING, Any

from hexchart.kernel.logging import get_logger
from hexchart.kernel.service import MachineService, interpret

if TYPE_CHECKING:
    from hexchart.kernel.domain.machine import Event, State
    from hexchart.kernel.machine import Machine

logger = get_logger(__name__)

__all__ = ["MachineHost"]


class MachineHost:
    """Owns a started service and mirrors its state for a rendering callback.

    Parameters
    ----------
    machine:
        The machine to run. Build it once per host instance when its actions
        close over the host.
    on_change:
        Called with every published state, starting with the current one.
    """

    def __init__(
        self,
        machine: Machine,
        on_change: Callable[[State], None] | None = None,
    ) -> None:
        self._on_change = on_change
        self._service = interpret(machine).start()
        self._current = self._service.state
        self._subscription = self._service.subscribe(self._publish)
        self._closed = False

    @property
    def service(self) -> MachineService:
        return self._service

    @property
    def state(self) -> State:
        """Latest state published to the host."""
        return self._current

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: Event | Mapping[str, Any] | Hashable) -> State:
        """Forward an event to the service; ignored once the host is closed."""
        return self._service.send(event)

    def close(self) -> None:
        """Stop the service; later calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        self._service.stop()
        logger.debug("Host for machine {machine} closed", machine=self._service.machine.name)

    def __enter__(self) -> MachineHost:
        return self

    def __exit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        self.close()

    def _publish(self, state: State) -> None:
        self._current = state
        if self._on_change is not None:
            self._on_change(state)
