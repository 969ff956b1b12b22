"""Exceptions raised by hexchart itself.

Every class derives from :class:`HexChartError`. Failures of the modelled
domain, such as a rejected signup request, are not exceptions: they reach a
machine as ordinary events.
"""

from __future__ import annotations

_LISTED_STATES = 5


class HexChartError(Exception):
    """Root of the hexchart exception tree."""


# ---------------------------------------------------------------------------
# Definition and configuration problems
# ---------------------------------------------------------------------------


class ConfigurationError(HexChartError):
    """A configuration source is malformed.

    ``component`` names the file or section, ``reason`` what is wrong with it::

        raise ConfigurationError("hexchart.yaml", "'spec' must be a mapping")
    """

    def __init__(self, component: str, reason: str) -> None:
        self.component = component
        self.reason = reason
        super().__init__(f"Configuration error in '{component}': {reason}")


class ValidationError(HexChartError):
    """A value breaks a rule checked when a definition or config is built.

    ``value`` is echoed in the message when given::

        raise ValidationError("initial", "not in states: ['OFF', 'ON']", "IDLE")
    """

    def __init__(self, field: str, constraint: str, value: object = None) -> None:
        self.field = field
        self.constraint = constraint
        self.value = value
        detail = "" if value is None else f" (got {value!r})"
        super().__init__(f"Validation failed for '{field}': {constraint}{detail}")


class ResolveError(HexChartError):
    """Raised when a guard or action reference cannot be resolved."""

    def __init__(self, kind: str, reason: str) -> None:
        self.kind = kind
        self.reason = reason
        super().__init__(f"Cannot resolve '{kind}': {reason}")


class MachineLoadError(HexChartError):
    """Raised when a ``kind: Machine`` document cannot be turned into a definition."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot load machine from {source}: {reason}")


# ---------------------------------------------------------------------------
# Runtime problems
# ---------------------------------------------------------------------------


class UnknownStateError(HexChartError):
    """Raised when a state value is not declared by the machine definition.

    A service never produces such a state on its own, so seeing this means a
    caller handed the engine a state that did not come from the same machine.
    It is not recoverable.
    """
    def __init__(self, state: object, available: list[str] | None = None) -> None:
        self.state = state
        self.available = available
        message = f"State {state!r} is not declared by the machine"
        if available:
            shown, hidden = available[:_LISTED_STATES], len(available) - _LISTED_STATES
            message += f". Declared: {', '.join(shown)}"
            if hidden > 0:
                message += f" ... and {hidden} more"
        super().__init__(message)


class ServiceLifecycleError(HexChartError):
    """Raised when a service is driven through a lifecycle step it does not support."""

    def __init__(self, status: str, operation: str) -> None:
        self.status = status
        self.operation = operation
        super().__init__(f"Cannot {operation} a service that is {status}")


class HttpClientError(HexChartError):
    """Non-2xx reply from :class:`~hexchart.drivers.http_client.HttpClientDriver`.

    ``status_code`` and the decoded ``body`` are kept so a continuation can
    turn the failure into an error event.
    """

    def __init__(self, status_code: int, body: object, message: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"HTTP {status_code}")
