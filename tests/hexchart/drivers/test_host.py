"""Tests for the MachineHost adapter."""

from __future__ import annotations

import pytest

from hexchart.drivers.host import MachineHost
from hexchart.kernel.actions import effect
from hexchart.kernel.domain.machine import State
from hexchart.kernel.machine import Machine, create_machine
from hexchart.kernel.service import ServiceStatus


class TestMachineHost:
    def test_starts_service_and_publishes_current_state(self, toggle_machine: Machine) -> None:
        seen: list[State] = []

        host = MachineHost(toggle_machine, on_change=seen.append)

        assert host.service.status is ServiceStatus.RUNNING
        assert host.service.listener_count == 1
        assert [s.value for s in seen] == ["OFF"]
        assert host.state.value == "OFF"

    def test_send_updates_state_and_calls_back(self, toggle_machine: Machine) -> None:
        seen: list[State] = []
        host = MachineHost(toggle_machine, on_change=seen.append)

        returned = host.send("FLIP")

        assert returned.value == "ON"
        assert host.state == returned
        assert [s.value for s in seen] == ["OFF", "ON"]

    def test_works_without_callback(self, toggle_machine: Machine) -> None:
        host = MachineHost(toggle_machine)

        host.send("FLIP")

        assert host.state.context == {"count": 1}

    def test_close_stops_once(self, toggle_machine: Machine) -> None:
        host = MachineHost(toggle_machine)

        host.close()
        host.close()

        assert host.closed
        assert host.service.status is ServiceStatus.STOPPED
        assert host.send("FLIP").value == "OFF"

    def test_context_manager_closes(self, toggle_machine: Machine) -> None:
        with MachineHost(toggle_machine) as host:
            host.send("FLIP")

        assert host.closed
        assert host.state.value == "ON"

    def test_each_host_owns_its_service(self, toggle_machine: Machine) -> None:
        first, second = MachineHost(toggle_machine), MachineHost(toggle_machine)

        first.send("FLIP")

        assert first.service is not second.service
        assert first.state.value == "ON"
        assert second.state.value == "OFF"

    def test_initial_effects_run_once(self) -> None:
        calls: list[str] = []
        machine = create_machine({
            "initial": "READY",
            "states": {"READY": {"entry": [effect(lambda ctx, e: calls.append("mounted"))]}},
        })

        with MachineHost(machine):
            pass

        assert calls == ["mounted"]

    def test_callback_errors_propagate_to_sender(self, toggle_machine: Machine) -> None:
        def render(state: State) -> None:
            if state.value == "ON":
                raise RuntimeError("render failed")

        host = MachineHost(toggle_machine, on_change=render)

        with pytest.raises(RuntimeError, match="render failed"):
            host.send("FLIP")
