"""Tests for Diff and Difference.

Covers:
- has_differences / has_similarities / is_identical over recorded results
- differences() iterates in traversal order
- render() and __str__ describe the first difference, or [identical]
- render() accepts a custom formatter
- Diff is frozen
"""

from __future__ import annotations

import dataclasses

import pytest

from xml_structural_diff.comparator import XmlComparator
from xml_structural_diff.engine.comparison import (
    Comparison,
    ComparisonResult,
    ComparisonType,
    Detail,
)
from xml_structural_diff.formatter import ComparisonFormatter
from xml_structural_diff.result import Diff, Difference
from xml_structural_diff.tree.nodes import XmlNode

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _comparison(kind: ComparisonType = ComparisonType.TEXT_VALUE) -> Comparison:
    return Comparison(kind, Detail(None, "/a[1]", "x"), Detail(None, "/a[1]", "y"))


def _diff(*results: ComparisonResult) -> Diff:
    root = XmlNode.element("a")
    return Diff(
        control=root,
        test=root,
        recorded=tuple(Difference(_comparison(), r) for r in results),
        comparisons_performed=len(results) + 3,
        stopped_early=False,
        computation_time_ms=0.5,
    )


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


class TestPredicates:
    def test_empty_is_identical(self) -> None:
        diff = _diff()
        assert diff.is_identical()
        assert not diff.has_differences()
        assert not diff.has_similarities()

    def test_only_similar(self) -> None:
        diff = _diff(ComparisonResult.SIMILAR)
        assert not diff.is_identical()
        assert not diff.has_differences()
        assert diff.has_similarities()

    def test_mixed(self) -> None:
        diff = _diff(ComparisonResult.SIMILAR, ComparisonResult.DIFFERENT)
        assert diff.has_differences()
        assert diff.has_similarities()

    def test_differences_in_order(self) -> None:
        diff = _diff(ComparisonResult.DIFFERENT, ComparisonResult.SIMILAR)
        assert [d.result for d in diff.differences()] == [
            ComparisonResult.DIFFERENT,
            ComparisonResult.SIMILAR,
        ]

    def test_difference_unpacks(self) -> None:
        comparison, result = Difference(_comparison(), ComparisonResult.DIFFERENT)
        assert comparison.comparison_type is ComparisonType.TEXT_VALUE
        assert result is ComparisonResult.DIFFERENT

    def test_frozen(self) -> None:
        diff = _diff()
        with pytest.raises(dataclasses.FrozenInstanceError):
            diff.stopped_early = True  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRendering:
    def test_identical_rendering(self) -> None:
        diff = XmlComparator().compare("<a/>", "<a/>")
        assert diff.render() == "[identical]"
        assert str(diff) == "[identical]"

    def test_first_difference_rendered(self) -> None:
        diff = XmlComparator().compare("<foo>bar</foo>", "<foo>baz</foo>")
        assert str(diff) == (
            "Expected text value 'bar' but was 'baz' - comparing "
            "<foo ...>bar</foo> at /foo[1]/text()[1] to "
            "<foo ...>baz</foo> at /foo[1]/text()[1]"
        )

    def test_custom_formatter(self) -> None:
        class KindOnly(ComparisonFormatter):
            def describe(self, comparison: Comparison) -> str:
                return str(comparison.comparison_type)

        diff = XmlComparator().compare("<foo>bar</foo>", "<foo>baz</foo>")
        assert diff.render(KindOnly()) == "text_value"
