"""Tests for ComparisonListenerSupport.

Covers:
- General listeners fire before match or difference listeners
- Registration order is invocation order
- Match listeners only see EQUAL, difference listeners everything else
- None and non-callable listeners are rejected
- Listener exceptions propagate
- copy() is independent of later registrations
"""

from __future__ import annotations

import pytest

from xml_structural_diff.engine.comparison import (
    Comparison,
    ComparisonResult,
    ComparisonType,
    Detail,
)
from xml_structural_diff.engine.listeners import ComparisonListenerSupport
from xml_structural_diff.errors import ConfigurationError
from xml_structural_diff.protocols import ComparisonListener

_COMPARISON = Comparison(
    ComparisonType.TEXT_VALUE,
    Detail(None, "/a[1]/text()[1]", "x"),
    Detail(None, "/a[1]/text()[1]", "y"),
)


def _recorder(log: list[str], label: str) -> ComparisonListener:
    def listener(comparison: Comparison, outcome: ComparisonResult) -> None:
        log.append(f"{label}:{outcome.name}")

    return listener


class TestDispatchOrder:
    def test_general_listeners_first(self) -> None:
        log: list[str] = []
        support = ComparisonListenerSupport()
        support.add_difference_listener(_recorder(log, "diff"))
        support.add_comparison_listener(_recorder(log, "all"))
        support.fire(_COMPARISON, ComparisonResult.DIFFERENT)
        assert log == ["all:DIFFERENT", "diff:DIFFERENT"]

    def test_registration_order_preserved(self) -> None:
        log: list[str] = []
        support = ComparisonListenerSupport()
        support.add_comparison_listener(_recorder(log, "first"))
        support.add_comparison_listener(_recorder(log, "second"))
        support.fire(_COMPARISON, ComparisonResult.EQUAL)
        assert log == ["first:EQUAL", "second:EQUAL"]

    def test_match_listeners_only_for_equal(self) -> None:
        log: list[str] = []
        support = ComparisonListenerSupport(
            match_listeners=[_recorder(log, "match")],
            difference_listeners=[_recorder(log, "diff")],
        )
        support.fire(_COMPARISON, ComparisonResult.EQUAL)
        support.fire(_COMPARISON, ComparisonResult.SIMILAR)
        support.fire(_COMPARISON, ComparisonResult.DIFFERENT)
        assert log == ["match:EQUAL", "diff:SIMILAR", "diff:DIFFERENT"]


class TestRegistration:
    def test_none_rejected(self) -> None:
        support = ComparisonListenerSupport()
        with pytest.raises(ConfigurationError, match="None"):
            support.add_comparison_listener(None)  # type: ignore[arg-type]

    def test_non_callable_rejected(self) -> None:
        support = ComparisonListenerSupport()
        with pytest.raises(ConfigurationError, match="callable"):
            support.add_match_listener("not a listener")  # type: ignore[arg-type]

    def test_none_in_constructor_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            ComparisonListenerSupport(difference_listeners=[None])  # type: ignore[list-item]

    def test_copy_is_independent(self) -> None:
        log: list[str] = []
        support = ComparisonListenerSupport()
        support.add_comparison_listener(_recorder(log, "a"))
        snapshot = support.copy()
        support.add_comparison_listener(_recorder(log, "b"))
        snapshot.fire(_COMPARISON, ComparisonResult.EQUAL)
        assert log == ["a:EQUAL"]


class TestExceptions:
    def test_listener_exception_propagates(self) -> None:
        def explode(comparison: Comparison, outcome: ComparisonResult) -> None:
            msg = "listener bug"
            raise RuntimeError(msg)

        support = ComparisonListenerSupport([explode])
        with pytest.raises(RuntimeError, match="listener bug"):
            support.fire(_COMPARISON, ComparisonResult.EQUAL)
