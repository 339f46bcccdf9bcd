"""Diff: the result of comparing two XML trees.

This module provides the rich result type returned by ``compare()`` calls
and the ``Difference`` record it is made of.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import NamedTuple

from xml_structural_diff.engine.comparison import Comparison, ComparisonResult
from xml_structural_diff.formatter import ComparisonFormatter
from xml_structural_diff.tree.nodes import XmlNode

__all__ = ["Diff", "Difference"]


class Difference(NamedTuple):
    """A comparison whose final result is not EQUAL."""

    comparison: Comparison
    result: ComparisonResult


@dataclass(frozen=True, slots=True)
class Diff:
    """Result of a ``compare()`` call.

    Attributes:
        control: Root of the control tree.
        test: Root of the test tree.
        recorded: Every non-EQUAL comparison in traversal order.  CRITICAL
            results are recorded as DIFFERENT.
        comparisons_performed: Number of comparisons evaluated, EQUAL ones
            included.
        stopped_early: True when a comparison controller ended the traversal.
        computation_time_ms: Wall-clock duration of the comparison in
            milliseconds.
    """

    control: XmlNode
    test: XmlNode
    recorded: tuple[Difference, ...]
    comparisons_performed: int
    stopped_early: bool
    computation_time_ms: float

    def has_differences(self) -> bool:
        """True iff at least one comparison's final result is DIFFERENT."""
        return any(d.result is ComparisonResult.DIFFERENT for d in self.recorded)

    def has_similarities(self) -> bool:
        """True iff at least one comparison's final result is SIMILAR."""
        return any(d.result is ComparisonResult.SIMILAR for d in self.recorded)

    def is_identical(self) -> bool:
        """True iff every comparison was EQUAL."""
        return not self.recorded

    def differences(self) -> Iterator[Difference]:
        """Iterate over the non-EQUAL comparisons, in traversal order."""
        return iter(self.recorded)

    def render(self, formatter: ComparisonFormatter | None = None) -> str:
        """Describe the first difference, or ``[identical]`` when there is none."""
        if not self.recorded:
            return "[identical]"
        return (formatter or ComparisonFormatter()).describe(self.recorded[0].comparison)

    def __str__(self) -> str:
        return self.render()
