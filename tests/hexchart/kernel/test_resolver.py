"""Tests for hexchart.kernel.resolver."""

from __future__ import annotations

import operator

import pytest

from hexchart.kernel.exceptions import ResolveError
from hexchart.kernel.resolver import resolve_callable


def double(context: dict, event: object) -> dict:
    return {"n": context["n"] * 2}


class TestResolveCallable:
    def test_registry_name_wins(self) -> None:
        assert resolve_callable("double", {"double": double}) is double

    def test_dotted_path(self) -> None:
        assert resolve_callable("operator.not_") is operator.not_

    def test_bare_name_without_registry_entry(self) -> None:
        with pytest.raises(ResolveError, match="full module path") as exc_info:
            resolve_callable("triple", {"double": double})

        assert "double" in str(exc_info.value)

    def test_missing_module(self) -> None:
        with pytest.raises(ResolveError, match="not found"):
            resolve_callable("no_such_module_xyz.func")

    def test_missing_attribute(self) -> None:
        with pytest.raises(ResolveError, match="'nope' not found in 'operator'"):
            resolve_callable("operator.nope")

    def test_non_callable_attribute(self) -> None:
        with pytest.raises(ResolveError, match="not callable"):
            resolve_callable("math.pi")
