"""ComparisonListenerSupport: ordered dispatch of comparison results.

Three listener lists are kept:

- comparison listeners receive every comparison;
- match listeners receive comparisons whose final result is EQUAL;
- difference listeners receive every other comparison.

For each comparison, general listeners are notified first, then either the
match or the difference listeners, each list in registration order.
Exceptions raised by a listener are not caught; they abort the comparison
and reach the caller.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from xml_structural_diff.engine.comparison import Comparison, ComparisonResult
from xml_structural_diff.errors import ConfigurationError

__all__ = ["ComparisonListenerSupport", "Listener"]

Listener = Callable[[Comparison, ComparisonResult], None]


class ComparisonListenerSupport:
    """Holds registered listeners and fires them.

    Args:
        comparison_listeners: Initial general listeners.
        match_listeners:      Initial match-only listeners.
        difference_listeners: Initial difference-only listeners.
    """

    def __init__(
        self,
        comparison_listeners: Iterable[Listener] = (),
        match_listeners: Iterable[Listener] = (),
        difference_listeners: Iterable[Listener] = (),
    ) -> None:
        self._comparison_listeners: list[Listener] = []
        self._match_listeners: list[Listener] = []
        self._difference_listeners: list[Listener] = []
        for listener in comparison_listeners:
            self.add_comparison_listener(listener)
        for listener in match_listeners:
            self.add_match_listener(listener)
        for listener in difference_listeners:
            self.add_difference_listener(listener)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_comparison_listener(self, listener: Listener) -> None:
        self._comparison_listeners.append(_checked(listener))

    def add_match_listener(self, listener: Listener) -> None:
        self._match_listeners.append(_checked(listener))

    def add_difference_listener(self, listener: Listener) -> None:
        self._difference_listeners.append(_checked(listener))

    def copy(self) -> ComparisonListenerSupport:
        """Return an independent support object with the same registrations."""
        return ComparisonListenerSupport(
            self._comparison_listeners,
            self._match_listeners,
            self._difference_listeners,
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def fire(self, comparison: Comparison, outcome: ComparisonResult) -> None:
        """Notify listeners of a final, user-visible result."""
        for listener in self._comparison_listeners:
            listener(comparison, outcome)
        targets = (
            self._match_listeners
            if outcome is ComparisonResult.EQUAL
            else self._difference_listeners
        )
        for listener in targets:
            listener(comparison, outcome)


def _checked(listener: Listener) -> Listener:
    if listener is None:
        msg = "listener must not be None"
        raise ConfigurationError(msg)
    if not callable(listener):
        msg = f"listener must be callable, got {type(listener).__name__}"
        raise ConfigurationError(msg)
    return listener
