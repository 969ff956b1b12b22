"""Ordered listener registry.

Listeners are called synchronously, in subscription order, with each new
value. Unsubscribing is idempotent and safe from inside a notification.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable
from typing import Any, Generic, TypeVar

__all__ = ["Listener", "ListenerRegistry", "Subscription"]

T = TypeVar("T")

Listener = Callable[[T], None]


class Subscription:
    """Handle returned by ``subscribe``; call :meth:`unsubscribe` to detach."""

    __slots__ = ("_registry", "_token")

    def __init__(self, registry: ListenerRegistry[Any], token: int) -> None:
        self._registry = registry
        self._token = token

    @property
    def active(self) -> bool:
        return self._registry.has_token(self._token)

    def unsubscribe(self) -> bool:
        """Detach the listener.

        Returns
        -------
        bool
            True if the listener was removed by this call, False if it was
            already gone.
        """
        return self._registry.remove(self._token)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        self.unsubscribe()


class ListenerRegistry(Generic[T]):
    """Insertion-ordered set of listeners.

    Registering a listener that is already present keeps its original
    position and returns a handle to the existing registration.
    """

    __slots__ = ("_counter", "_listeners")

    def __init__(self) -> None:
        self._listeners: dict[int, Listener[T]] = {}
        self._counter = itertools.count()

    def add(self, listener: Listener[T]) -> Subscription:
        for token, registered in self._listeners.items():
            if registered is listener:
                return Subscription(self, token)
        token = next(self._counter)
        self._listeners[token] = listener
        return Subscription(self, token)

    def remove(self, token: int) -> bool:
        return self._listeners.pop(token, None) is not None

    def has_token(self, token: int) -> bool:
        return token in self._listeners

    def notify(self, value: T) -> None:
        """Call every listener registered at the time of the call, in order.

        A listener removed by an earlier listener during the same round is
        skipped. Listener exceptions propagate to the caller.
        """
        for token, listener in tuple(self._listeners.items()):
            if token in self._listeners:
                listener(value)

    def clear(self) -> None:
        self._listeners.clear()

    def __contains__(self, listener: object) -> bool:
        return any(registered is listener for registered in self._listeners.values())

    def __len__(self) -> int:
        return len(self._listeners)
