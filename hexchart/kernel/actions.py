"""Action creators.

``assign`` builds context updates that the engine folds while it computes the
next state. Everything else is an effect, run later by the service with
``(context, event)``.

Examples
--------
>>> from hexchart.kernel.actions import assign, assign_values, log
>>> increment = assign(lambda ctx, event: {**ctx, "count": ctx["count"] + 1})
>>> clear = assign_values(email="", error=None)
>>> report = log(lambda ctx, event: f"failed: {ctx['error']}", level="ERROR")
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, overload

from hexchart.kernel.domain.machine import AssignAction, EffectAction, Event
from hexchart.kernel.exceptions import ValidationError
from hexchart.kernel.logging import get_logger

if TYPE_CHECKING:
    from loguru import Logger

    from hexchart.kernel.domain.machine import Assignment, EffectFunc

__all__ = ["assign", "assign_values", "effect", "log"]


def assign(assignment: Assignment) -> AssignAction:
    """Wrap ``(context, event) -> next_context`` as an assignment action."""
    if not callable(assignment):
        raise ValidationError("assign", "assignment must be callable", assignment)
    return AssignAction(assignment=assignment)


def assign_values(**values: Any) -> AssignAction:
    """Assignment that overlays literal values on the context.

    Works for mapping contexts (``{**context, **values}``) and dataclass
    contexts (``dataclasses.replace``).
    """

    def _overlay(context: Any, event: Event) -> Any:
        if isinstance(context, Mapping):
            return {**context, **values}
        if dataclasses.is_dataclass(context) and not isinstance(context, type):
            return dataclasses.replace(context, **values)
        raise ValidationError(
            "assign_values", "context must be a mapping or dataclass", type(context).__name__
        )

    return AssignAction(assignment=_overlay)


@overload
def effect(func: EffectFunc, *, type: str | None = None) -> EffectAction: ...


@overload
def effect(
    func: None = None, *, type: str | None = None
) -> Callable[[EffectFunc], EffectAction]: ...


def effect(
    func: EffectFunc | None = None, *, type: str | None = None
) -> EffectAction | Callable[[EffectFunc], EffectAction]:
    """Tag a function as an effect action; usable bare or as a decorator.

    Examples
    --------
    >>> @effect(type="clearInput")
    ... def clear_input(context, event):
    ...     event.get("input", {}).clear()
    """

    def _wrap(target: EffectFunc) -> EffectAction:
        return EffectAction(type=type or getattr(target, "__name__", "effect"), exec=target)

    if func is None:
        return _wrap
    return _wrap(func)


def log(
    message: str | Callable[[Any, Event], str],
    *,
    logger: Logger | None = None,
    level: str = "INFO",
    type: str = "log",
) -> EffectAction:
    """Effect that writes a message through an injected logger.

    ``message`` is either a fixed string or ``(context, event) -> str``.
    Without an explicit logger the hexchart module logger is used.
    """
    sink = logger if logger is not None else get_logger(__name__)

    def _log(context: Any, event: Event) -> None:
        text = message(context, event) if callable(message) else message
        sink.log(level, text)

    return EffectAction(type=type, exec=_log)
