"""Tests for the action creators in hexchart.kernel.actions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest
from loguru import logger

from hexchart.kernel.actions import assign, assign_values, effect, log
from hexchart.kernel.domain.machine import (
    ASSIGN_ACTION_TYPE,
    AssignAction,
    EffectAction,
    Event,
    as_action,
)
from hexchart.kernel.exceptions import ValidationError


class RecordingLogger:
    """Stands in for an injected logger capability."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def log(self, level: str, message: str) -> None:
        self.records.append((level, message))


@dataclass(frozen=True)
class Form:
    email: str = ""
    error: str | None = None


class TestAssign:
    def test_assign_wraps_function(self) -> None:
        action = assign(lambda ctx, event: {"n": ctx["n"] + event["by"]})

        assert isinstance(action, AssignAction)
        assert action.type == ASSIGN_ACTION_TYPE
        assert action.apply({"n": 1}, Event.of("ADD", by=2)) == {"n": 3}

    def test_assign_rejects_non_callable(self) -> None:
        with pytest.raises(ValidationError, match="assign"):
            assign({"n": 1})  # type: ignore[arg-type]


class TestAssignValues:
    def test_mapping_context_is_overlaid(self) -> None:
        action = assign_values(error=None, email="")
        context = {"email": "a@b.c", "error": "boom", "data": 1}

        result = action.apply(context, Event("RESET"))

        assert result == {"email": "", "error": None, "data": 1}
        assert context["error"] == "boom"

    def test_dataclass_context_is_replaced(self) -> None:
        action = assign_values(error="bad")

        result = action.apply(Form(email="a@b.c"), Event("FAIL"))

        assert result == Form(email="a@b.c", error="bad")

    def test_other_contexts_rejected(self) -> None:
        action = assign_values(n=1)

        with pytest.raises(ValidationError, match="mapping or dataclass"):
            action.apply(42, Event("X"))


class TestEffect:
    def test_effect_direct_call(self) -> None:
        calls: list[Any] = []

        action = effect(lambda ctx, event: calls.append((ctx, event.type)), type="record")
        action({"a": 1}, Event("GO"))

        assert isinstance(action, EffectAction)
        assert action.type == "record"
        assert calls == [({"a": 1}, "GO")]

    def test_effect_decorator_uses_function_name(self) -> None:
        @effect
        def announce(ctx: Any, event: Event) -> None:
            pass

        assert isinstance(announce, EffectAction)
        assert announce.type == "announce"

    def test_effect_decorator_with_type(self) -> None:
        @effect(type="clearInput")
        def clear(ctx: Any, event: Event) -> None:
            pass

        assert clear.type == "clearInput"

    def test_as_action_passes_actions_through(self) -> None:
        action = assign(lambda ctx, event: ctx)

        assert as_action(action) is action


class TestLog:
    def test_static_message_goes_to_injected_logger(self) -> None:
        sink = RecordingLogger()

        log("hello", logger=sink, level="WARNING")({}, Event("X"))  # type: ignore[arg-type]

        assert sink.records == [("WARNING", "hello")]

    def test_message_function_receives_context_and_event(self) -> None:
        sink = RecordingLogger()
        action = log(
            lambda ctx, event: f"{event.type}: {ctx['error']}",
            logger=sink,  # type: ignore[arg-type]
            level="ERROR",
            type="logError",
        )

        action({"error": "timeout"}, Event("LOG_ERROR"))

        assert action.type == "logError"
        assert sink.records == [("ERROR", "LOG_ERROR: timeout")]

    def test_default_logger_is_loguru(self) -> None:
        messages: list[str] = []
        handler_id = logger.add(lambda msg: messages.append(msg.record["message"]), level="INFO")
        try:
            log("through loguru")({}, Event("X"))
        finally:
            logger.remove(handler_id)

        assert "through loguru" in messages
