"""Tests for hexchart.kernel.observers."""

from __future__ import annotations

from hexchart.kernel.observers import ListenerRegistry


class TestListenerRegistry:
    def test_notify_in_registration_order(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        calls: list[str] = []
        registry.add(lambda v: calls.append(f"a{v}"))
        registry.add(lambda v: calls.append(f"b{v}"))

        registry.notify(1)

        assert calls == ["a1", "b1"]

    def test_adding_same_listener_twice_keeps_one_registration(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        calls: list[int] = []

        def listener(value: int) -> None:
            calls.append(value)

        first = registry.add(listener)
        again = registry.add(listener)
        registry.notify(7)

        assert len(registry) == 1
        assert calls == [7]
        assert again.unsubscribe() is True
        assert not first.active

    def test_unsubscribe_is_idempotent(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        subscription = registry.add(lambda v: None)

        assert subscription.unsubscribe() is True
        assert subscription.unsubscribe() is False
        assert not subscription.active
        assert len(registry) == 0

    def test_contains(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()

        def listener(value: int) -> None:
            pass

        registry.add(listener)

        assert listener in registry
        assert print not in registry

    def test_unsubscribe_during_notify_skips_later_listener(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        calls: list[str] = []
        holder = {}

        def first(value: int) -> None:
            calls.append("first")
            holder["second"].unsubscribe()

        registry.add(first)
        holder["second"] = registry.add(lambda v: calls.append("second"))

        registry.notify(0)
        registry.notify(1)

        assert calls == ["first", "first"]

    def test_listener_added_during_notify_waits_for_next_round(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        calls: list[str] = []

        def first(value: int) -> None:
            calls.append(f"first{value}")
            registry.add(late)

        def late(value: int) -> None:
            calls.append(f"late{value}")

        registry.add(first)
        registry.notify(0)
        registry.notify(1)

        assert calls == ["first0", "first1", "late1"]

    def test_subscription_context_manager(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()

        with registry.add(lambda v: None) as subscription:
            assert subscription.active

        assert not subscription.active

    def test_clear(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        subscription = registry.add(lambda v: None)

        registry.clear()

        assert len(registry) == 0
        assert subscription.unsubscribe() is False
