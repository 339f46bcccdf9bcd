"""Tests for DiffConfig, comparison controllers and node filters.

Covers:
- DiffConfig defaults and immutability
- None strategies and listeners are rejected with ConfigurationError
- Objects without match() are rejected as node matchers
- dataclasses.replace() builds validated variants
- Controllers: never_stop, stop_when_different, stop_when_similar
- Filters: comments, processing instructions, whitespace-only text
"""

from __future__ import annotations

import dataclasses

import pytest

from xml_structural_diff.engine import controllers, evaluators, filters
from xml_structural_diff.engine.comparison import (
    Comparison,
    ComparisonResult,
    ComparisonType,
    Detail,
)
from xml_structural_diff.engine.config import DiffConfig
from xml_structural_diff.engine.matcher import DefaultNodeMatcher, PositionalNodeMatcher
from xml_structural_diff.errors import ConfigurationError
from xml_structural_diff.protocols import ComparisonController, NodeFilter
from xml_structural_diff.result import Difference
from xml_structural_diff.tree.nodes import NodeType, XmlNode


def _difference(result: ComparisonResult) -> Difference:
    comparison = Comparison(ComparisonType.TEXT_VALUE, Detail(None, "/", "a"), Detail(None, "/", "b"))
    return Difference(comparison, result)


class TestDefaults:
    def test_default_strategies(self) -> None:
        config = DiffConfig()
        assert isinstance(config.node_matcher, PositionalNodeMatcher)
        assert config.difference_evaluator is evaluators.accept
        assert config.comparison_controller is controllers.never_stop
        assert config.node_filter is filters.accept_all
        assert config.attribute_filter is filters.accept_all_attributes
        assert config.comparison_listeners == ()
        assert config.namespace_context is None
        assert config.check_child_sequence is False

    def test_frozen(self) -> None:
        config = DiffConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.check_child_sequence = True  # type: ignore[misc]

    def test_replace_builds_variant(self) -> None:
        base = DiffConfig()
        variant = dataclasses.replace(base, node_matcher=DefaultNodeMatcher())
        assert isinstance(variant.node_matcher, DefaultNodeMatcher)
        assert isinstance(base.node_matcher, PositionalNodeMatcher)

    def test_instances_do_not_share_matcher(self) -> None:
        assert DiffConfig().node_matcher is not DiffConfig().node_matcher


class TestValidation:
    @pytest.mark.parametrize(
        "field",
        [
            "node_matcher",
            "difference_evaluator",
            "comparison_controller",
            "node_filter",
            "attribute_filter",
            "comparison_listeners",
            "match_listeners",
            "difference_listeners",
        ],
    )
    def test_none_rejected(self, field: str) -> None:
        with pytest.raises(ConfigurationError, match=field):
            DiffConfig(**{field: None})

    def test_none_listener_in_tuple_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="must not contain None"):
            DiffConfig(difference_listeners=(None,))  # type: ignore[arg-type]

    def test_matcher_without_match_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="match"):
            DiffConfig(node_matcher=object())  # type: ignore[arg-type]

    def test_configuration_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            DiffConfig(node_filter=None)  # type: ignore[arg-type]


class TestControllers:
    def test_controllers_satisfy_protocol(self) -> None:
        assert isinstance(controllers.stop_when_different, ComparisonController)

    def test_never_stop(self) -> None:
        assert not controllers.never_stop(_difference(ComparisonResult.DIFFERENT))

    def test_stop_when_different(self) -> None:
        assert controllers.stop_when_different(_difference(ComparisonResult.DIFFERENT))
        assert not controllers.stop_when_different(_difference(ComparisonResult.SIMILAR))

    def test_stop_when_similar(self) -> None:
        assert controllers.stop_when_similar(_difference(ComparisonResult.SIMILAR))
        assert controllers.stop_when_similar(_difference(ComparisonResult.DIFFERENT))


class TestFilters:
    def test_filters_satisfy_protocol(self) -> None:
        assert isinstance(filters.ignore_comments, NodeFilter)

    def test_accept_all(self) -> None:
        assert filters.accept_all(XmlNode.comment("x"))
        assert filters.accept_all_attributes(XmlNode.attribute("a", "1"))

    def test_ignore_comments(self) -> None:
        assert not filters.ignore_comments(XmlNode.comment("x"))
        assert filters.ignore_comments(XmlNode.text("x"))

    def test_ignore_processing_instructions(self) -> None:
        assert not filters.ignore_processing_instructions(XmlNode.processing_instruction("pi"))
        assert filters.ignore_processing_instructions(XmlNode.element("a"))

    def test_ignore_whitespace_text(self) -> None:
        assert not filters.ignore_whitespace_text(XmlNode.text("\n   "))
        assert not filters.ignore_whitespace_text(XmlNode.cdata(""))
        assert filters.ignore_whitespace_text(XmlNode.text(" x "))
        assert filters.ignore_whitespace_text(XmlNode(NodeType.COMMENT, value="  "))
