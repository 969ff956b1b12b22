"""Tests for the hexchart exception hierarchy."""

from __future__ import annotations

import pytest

from hexchart.kernel.exceptions import (
    ConfigurationError,
    HexChartError,
    HttpClientError,
    MachineLoadError,
    ResolveError,
    ServiceLifecycleError,
    UnknownStateError,
    ValidationError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("newsletter", "url missing"),
            ValidationError("initial", "not a declared state"),
            ResolveError("myapp.increment", "not found"),
            MachineLoadError("toggle.yaml", "bad"),
            UnknownStateError("NOPE"),
            ServiceLifecycleError("stopped", "start"),
            HttpClientError(500, "oops"),
        ],
    )
    def test_all_errors_derive_from_root(self, error: HexChartError) -> None:
        assert isinstance(error, HexChartError)


class TestMessages:
    def test_configuration_error(self) -> None:
        error = ConfigurationError("newsletter", "url missing")

        assert str(error) == "Configuration error in 'newsletter': url missing"
        assert error.component == "newsletter"
        assert error.reason == "url missing"

    def test_validation_error_with_value(self) -> None:
        error = ValidationError("initial", "not in states", "IDLE")

        assert str(error) == "Validation failed for 'initial': not in states (got 'IDLE')"
        assert error.value == "IDLE"

    def test_validation_error_without_value(self) -> None:
        error = ValidationError("states", "at least one state is required")

        assert str(error) == "Validation failed for 'states': at least one state is required"

    def test_unknown_state_lists_declared_states(self) -> None:
        error = UnknownStateError("X", ["A", "B", "C", "D", "E", "F", "G"])

        message = str(error)
        assert message.startswith("State 'X' is not declared by the machine")
        assert "A, B, C, D, E" in message
        assert "... and 2 more" in message

    def test_service_lifecycle_error(self) -> None:
        error = ServiceLifecycleError("stopped", "start")

        assert str(error) == "Cannot start a service that is stopped"

    def test_http_client_error_defaults_message(self) -> None:
        error = HttpClientError(404, {"detail": "missing"})

        assert str(error) == "HTTP 404"
        assert error.status_code == 404
        assert error.body == {"detail": "missing"}

    def test_machine_load_error(self) -> None:
        error = MachineLoadError("toggle.yaml", "invalid YAML")

        assert str(error) == "Cannot load machine from toggle.yaml: invalid YAML"
        assert error.source == "toggle.yaml"
