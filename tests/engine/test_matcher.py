"""Tests for the child pairing policies.

Covers:
- PositionalNodeMatcher pairs by index, trailing children become residuals
- DefaultNodeMatcher first-match pairing in control order, one-to-one
- Several selectors are tried in order over the whole remaining pool
- Non-element children pair by node type; text and CDATA are interchangeable
- None selectors are rejected
"""

from __future__ import annotations

import pytest

from xml_structural_diff.engine import element_selectors as es
from xml_structural_diff.engine.matcher import (
    DefaultNodeMatcher,
    PositionalNodeMatcher,
    node_types_match,
)
from xml_structural_diff.errors import ConfigurationError
from xml_structural_diff.protocols import NodeMatcher
from xml_structural_diff.tree.nodes import NodeType, XmlNode


def _el(name: str, text: str | None = None) -> XmlNode:
    return XmlNode.element(name, children=[XmlNode.text(text)] if text is not None else [])


class TestNodeTypesMatch:
    def test_same_type(self) -> None:
        assert node_types_match(NodeType.COMMENT, NodeType.COMMENT)

    def test_text_and_cdata(self) -> None:
        assert node_types_match(NodeType.TEXT, NodeType.CDATA)
        assert node_types_match(NodeType.CDATA, NodeType.TEXT)

    def test_different_types(self) -> None:
        assert not node_types_match(NodeType.TEXT, NodeType.COMMENT)


class TestPositionalNodeMatcher:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(PositionalNodeMatcher(), NodeMatcher)

    def test_pairs_by_index(self) -> None:
        control = [_el("a"), _el("b")]
        test = [_el("b"), _el("a")]
        match = PositionalNodeMatcher().match(control, test)
        assert match.pairs == ((control[0], test[0]), (control[1], test[1]))
        assert match.unmatched_control == ()
        assert match.unmatched_test == ()

    def test_longer_control_leaves_residuals(self) -> None:
        control = [_el("x"), _el("y")]
        test = [_el("x")]
        match = PositionalNodeMatcher().match(control, test)
        assert match.pairs == ((control[0], test[0]),)
        assert match.unmatched_control == (control[1],)
        assert match.unmatched_test == ()

    def test_longer_test_leaves_residuals(self) -> None:
        control: list[XmlNode] = []
        test = [_el("x")]
        match = PositionalNodeMatcher().match(control, test)
        assert match.unmatched_test == (test[0],)


class TestDefaultNodeMatcher:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(DefaultNodeMatcher(), NodeMatcher)

    def test_pairs_by_name_out_of_order(self) -> None:
        control = [_el("a"), _el("b")]
        test = [_el("b"), _el("a")]
        match = DefaultNodeMatcher(es.by_name).match(control, test)
        assert match.pairs == ((control[0], test[1]), (control[1], test[0]))

    def test_first_match_wins(self) -> None:
        control = [_el("a", "1"), _el("a", "2")]
        test = [_el("a", "2"), _el("a", "1")]
        match = DefaultNodeMatcher(es.by_name).match(control, test)
        # greedy: control[0] takes the first available <a>, not the better one
        assert match.pairs == ((control[0], test[0]), (control[1], test[1]))

    def test_one_to_one(self) -> None:
        control = [_el("a"), _el("a")]
        test = [_el("a")]
        match = DefaultNodeMatcher(es.by_name).match(control, test)
        assert match.pairs == ((control[0], test[0]),)
        assert match.unmatched_control == (control[1],)

    def test_unmatched_on_both_sides(self) -> None:
        control = [_el("a"), _el("b")]
        test = [_el("c"), _el("a")]
        match = DefaultNodeMatcher(es.by_name).match(control, test)
        assert match.pairs == ((control[0], test[1]),)
        assert match.unmatched_control == (control[1],)
        assert match.unmatched_test == (test[0],)

    def test_selectors_tried_in_order(self) -> None:
        control = [_el("a", "2")]
        test = [_el("a", "1"), _el("a", "2")]
        match = DefaultNodeMatcher(es.by_name_and_text, es.by_name).match(control, test)
        assert match.pairs == ((control[0], test[1]),)

    def test_fallback_selector_used_when_first_fails(self) -> None:
        control = [_el("a", "3")]
        test = [_el("a", "1")]
        match = DefaultNodeMatcher(es.by_name_and_text, es.by_name).match(control, test)
        assert match.pairs == ((control[0], test[0]),)

    def test_default_selector_accepts_any_elements(self) -> None:
        control = [_el("a")]
        test = [_el("z")]
        assert DefaultNodeMatcher().match(control, test).pairs == ((control[0], test[0]),)

    def test_text_pairs_with_cdata(self) -> None:
        control = [XmlNode.text("x")]
        test = [XmlNode.comment("c"), XmlNode.cdata("x")]
        match = DefaultNodeMatcher(es.by_name).match(control, test)
        assert match.pairs == ((control[0], test[1]),)
        assert match.unmatched_test == (test[0],)

    def test_elements_never_pair_with_text(self) -> None:
        control = [_el("a")]
        test = [XmlNode.text("a")]
        match = DefaultNodeMatcher().match(control, test)
        assert match.pairs == ()

    def test_none_selector_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            DefaultNodeMatcher(es.by_name, None)  # type: ignore[arg-type]

    def test_none_node_type_matcher_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            DefaultNodeMatcher(node_type_matcher=None)  # type: ignore[arg-type]
