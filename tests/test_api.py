"""Tests for the module-level API functions.

Covers:
- compare() returns a populated Diff and accepts a DiffConfig
- is_identical() is True only when nothing was recorded
- is_similar() tolerates SIMILAR results
- Calls share no state
"""

from __future__ import annotations

from lxml import etree

from xml_structural_diff.api import compare, is_identical, is_similar
from xml_structural_diff.engine import controllers, evaluators
from xml_structural_diff.engine.comparison import ComparisonType
from xml_structural_diff.engine.config import DiffConfig
from xml_structural_diff.result import Diff

_PREFIXED = '<p:a xmlns:p="urn:x"><b>1</b></p:a>'
_OTHER_PREFIX = '<q:a xmlns:q="urn:x"><b>1</b></q:a>'


class TestCompare:
    def test_returns_diff(self) -> None:
        diff = compare("<a>1</a>", "<a>2</a>")
        assert isinstance(diff, Diff)
        assert diff.has_differences()
        assert diff.comparisons_performed > 0
        assert diff.stopped_early is False

    def test_accepts_lxml_input(self) -> None:
        control = etree.fromstring("<a><b/></a>")
        test = etree.fromstring("<a><b/>x</a>")
        diff = compare(control, test)
        assert [d.comparison.comparison_type for d in diff.differences()] == [
            ComparisonType.CHILD_NODELIST_LENGTH,
            ComparisonType.CHILD_LOOKUP,
        ]
        assert compare(control, etree.fromstring("<a><b/></a>")).is_identical()

    def test_config_applied(self) -> None:
        config = DiffConfig(comparison_controller=controllers.stop_when_different)
        diff = compare("<r><a>1</a><b>2</b></r>", "<r><a>3</a><b>4</b></r>", config)
        assert len(diff.recorded) == 1
        assert diff.stopped_early

    def test_calls_are_independent(self) -> None:
        first = compare("<a>1</a>", "<a>2</a>")
        second = compare("<a>1</a>", "<a>1</a>")
        assert first.has_differences()
        assert second.is_identical()


class TestPredicates:
    def test_is_identical(self) -> None:
        assert is_identical("<a x='1'/>", '<a x="1"/>')
        assert not is_identical(_PREFIXED, _OTHER_PREFIX)

    def test_is_similar_default_config(self) -> None:
        assert not is_similar(_PREFIXED, _OTHER_PREFIX)

    def test_is_similar_with_cosmetic_downgrade(self) -> None:
        config = DiffConfig(difference_evaluator=evaluators.downgrade_cosmetic_differences)
        assert is_similar(_PREFIXED, _OTHER_PREFIX, config)
        assert not is_identical(_PREFIXED, _OTHER_PREFIX, config)

    def test_real_difference_is_not_similar(self) -> None:
        config = DiffConfig(difference_evaluator=evaluators.downgrade_cosmetic_differences)
        assert not is_similar("<a>1</a>", "<a>2</a>", config)
