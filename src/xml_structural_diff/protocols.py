"""Strategy protocols for the xml-structural-diff extension points.

Defines the structural interfaces of every pluggable strategy.  Users plug
in their own strategies without inheriting from any base class: plain
functions satisfy the callable protocols and any class with a conformant
``match`` method passes ``isinstance(obj, NodeMatcher)``.

Example::

    from xml_structural_diff.engine.comparison import ComparisonResult, ComparisonType
    from xml_structural_diff.protocols import DifferenceEvaluator

    def ignore_comments(comparison, outcome):
        if comparison.comparison_type is ComparisonType.COMMENT_VALUE:
            return ComparisonResult.EQUAL
        return outcome

    assert isinstance(ignore_comments, DifferenceEvaluator)  # structural conformance
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from xml_structural_diff.engine.comparison import Comparison, ComparisonResult
    from xml_structural_diff.engine.matcher import NodeMatch
    from xml_structural_diff.result import Difference
    from xml_structural_diff.tree.nodes import XmlNode

__all__ = [
    "AttributeFilter",
    "ComparisonController",
    "ComparisonListener",
    "DifferenceEvaluator",
    "ElementSelector",
    "NodeFilter",
    "NodeMatcher",
]


@runtime_checkable
class ElementSelector(Protocol):
    """Pure predicate deciding whether two elements may be paired."""

    def __call__(self, control: XmlNode, test: XmlNode) -> bool: ...


@runtime_checkable
class NodeMatcher(Protocol):
    """Child pairing policy.

    ``match`` receives the (filtered) child lists of a control and a test
    node and returns the pairs plus the residuals of both sides.
    """

    def match(self, control_nodes: Sequence[XmlNode], test_nodes: Sequence[XmlNode]) -> NodeMatch: ...


@runtime_checkable
class DifferenceEvaluator(Protocol):
    """Pure function reclassifying the initial result of a comparison."""

    def __call__(self, comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult: ...


@runtime_checkable
class ComparisonListener(Protocol):
    """Observer notified with the final result of a comparison."""

    def __call__(self, comparison: Comparison, outcome: ComparisonResult) -> None: ...


@runtime_checkable
class ComparisonController(Protocol):
    """Decides whether the whole traversal stops after a difference."""

    def __call__(self, difference: Difference) -> bool: ...


@runtime_checkable
class NodeFilter(Protocol):
    """Decides whether a child node takes part in the comparison."""

    def __call__(self, node: XmlNode) -> bool: ...


@runtime_checkable
class AttributeFilter(Protocol):
    """Decides whether an attribute takes part in the comparison."""

    def __call__(self, attribute: XmlNode) -> bool: ...
