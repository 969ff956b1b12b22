"""Explicit cancellation tokens for effects with asynchronous continuations.

The interpreter has no notion of cancellation. A host creates one token per
piece of asynchronous work and passes it into the machine on the event that
starts that work; the machine keeps it in context.

Rule: only the machine cancels, through an exit action of the state that
owns the work. The asynchronous continuation only reads the token and must
not send its completion event once the token is cancelled.

Example::

    token = CancellationToken(name="submit")
    service.send(Event.of("SUBMIT", email=email, token=token))
    ...
    # continuation
    if not token.cancelled:
        service.send(Event.of("LOG_SUCCESS", message=title))
"""

from __future__ import annotations

from collections.abc import Callable

from hexchart.kernel.exceptions import HexChartError

__all__ = ["CancellationToken", "OperationCancelledError"]


class OperationCancelledError(HexChartError):
    """Raised by :meth:`CancellationToken.raise_if_cancelled`."""

    def __init__(self, name: str, reason: str | None = None) -> None:
        self.name = name
        self.reason = reason
        msg = f"Operation '{name}' was cancelled"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class CancellationToken:
    """One-shot cancellation flag with callbacks.

    Intended for a single logical thread of control (an event loop or a UI
    dispatch thread).
    """

    __slots__ = ("_callbacks", "_cancelled", "_reason", "name")

    def __init__(self, name: str = "operation") -> None:
        self.name = name
        self._cancelled = False
        self._reason: str | None = None
        self._callbacks: list[Callable[[CancellationToken], None]] = []

    def __repr__(self) -> str:
        return f"CancellationToken(name={self.name!r}, cancelled={self._cancelled})"

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> bool:
        """Cancel the token; only the first call has an effect.

        Returns
        -------
        bool
            True if this call cancelled the token.
        """
        if self._cancelled:
            return False
        self._cancelled = True
        self._reason = reason
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)
        return True

    def add_callback(self, callback: Callable[[CancellationToken], None]) -> None:
        """Run ``callback`` on cancellation, immediately if already cancelled."""
        if self._cancelled:
            callback(self)
        else:
            self._callbacks.append(callback)

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelledError(self.name, self._reason)
