"""Child pairing policies.

Given the child lists of a control node and a test node, a ``NodeMatcher``
decides which control child corresponds to which test child.  Children
without a counterpart are returned as residuals; the engine reports each of
them as a CHILD_LOOKUP comparison.

Two policies are provided:

- ``PositionalNodeMatcher`` (the default) pairs children at the same index.
- ``DefaultNodeMatcher`` pairs elements through element selectors.  For each
  control child, in control order, it takes the *first* unconsumed test child
  the selector accepts.  The pairing is one-to-one and deliberately greedy:
  callers rely on first-match determinism for ambiguous inputs, so this must
  not be replaced by an optimal assignment.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from xml_structural_diff.errors import ConfigurationError
from xml_structural_diff.tree.nodes import NodeType, XmlNode

__all__ = [
    "DefaultNodeMatcher",
    "NodeMatch",
    "PositionalNodeMatcher",
    "node_types_match",
]

NodeTypeMatcher = Callable[[NodeType, NodeType], bool]


@dataclass(frozen=True, slots=True)
class NodeMatch:
    """Result of pairing two child lists.

    Attributes:
        pairs:             ``(control_child, test_child)`` tuples in control order.
        unmatched_control: Control children without a test counterpart.
        unmatched_test:    Test children without a control counterpart.
    """

    pairs: tuple[tuple[XmlNode, XmlNode], ...]
    unmatched_control: tuple[XmlNode, ...]
    unmatched_test: tuple[XmlNode, ...]


def node_types_match(control_type: NodeType, test_type: NodeType) -> bool:
    """Same node type, or text and CDATA in either order."""
    return control_type is test_type or (control_type.is_text_like and test_type.is_text_like)


def _any_element(control: XmlNode, test: XmlNode) -> bool:
    return True


class PositionalNodeMatcher:
    """Pairs children by index; trailing children of the longer list are residuals."""

    def match(self, control_nodes: Sequence[XmlNode], test_nodes: Sequence[XmlNode]) -> NodeMatch:
        common = min(len(control_nodes), len(test_nodes))
        return NodeMatch(
            pairs=tuple(zip(control_nodes[:common], test_nodes[:common], strict=True)),
            unmatched_control=tuple(control_nodes[common:]),
            unmatched_test=tuple(test_nodes[common:]),
        )

    def __repr__(self) -> str:
        return "PositionalNodeMatcher()"


class DefaultNodeMatcher:
    """Selector-driven, first-match pairing.

    Elements are paired when an element selector accepts them.  With several
    selectors, they are consulted in order for each control child: the first
    selector is tried against every unconsumed test child before the second
    one is.  Non-element children are paired by node type.

    Example::

        from xml_structural_diff.engine import element_selectors as es

        matcher = DefaultNodeMatcher(es.by_name_and_text, es.by_name)

    Args:
        selectors: Element selectors; defaults to accepting any two elements.
        node_type_matcher: Predicate over node types used for non-elements.
            Defaults to ``node_types_match``.

    Raises:
        ConfigurationError: If a selector or the node type matcher is None.
    """

    def __init__(
        self,
        *selectors: Callable[[XmlNode, XmlNode], bool],
        node_type_matcher: NodeTypeMatcher = node_types_match,
    ) -> None:
        if any(s is None for s in selectors):
            msg = "element selectors must not be None"
            raise ConfigurationError(msg)
        if node_type_matcher is None:
            msg = "node_type_matcher must not be None"
            raise ConfigurationError(msg)
        self._selectors = selectors or (_any_element,)
        self._node_type_matcher = node_type_matcher

    def match(self, control_nodes: Sequence[XmlNode], test_nodes: Sequence[XmlNode]) -> NodeMatch:
        available = [True] * len(test_nodes)
        pairs: list[tuple[XmlNode, XmlNode]] = []
        unmatched_control: list[XmlNode] = []

        for control in control_nodes:
            index = self._find_match(control, test_nodes, available)
            if index is None:
                unmatched_control.append(control)
                continue
            available[index] = False
            pairs.append((control, test_nodes[index]))

        unmatched_test = [t for t, free in zip(test_nodes, available, strict=True) if free]
        return NodeMatch(tuple(pairs), tuple(unmatched_control), tuple(unmatched_test))

    def _find_match(
        self,
        control: XmlNode,
        test_nodes: Sequence[XmlNode],
        available: list[bool],
    ) -> int | None:
        if control.node_type is not NodeType.ELEMENT:
            for i, test in enumerate(test_nodes):
                if available[i] and test.node_type is not NodeType.ELEMENT:
                    if self._node_type_matcher(control.node_type, test.node_type):
                        return i
            return None
        for selector in self._selectors:
            for i, test in enumerate(test_nodes):
                if available[i] and test.node_type is NodeType.ELEMENT:
                    if selector(control, test):
                        return i
        return None
