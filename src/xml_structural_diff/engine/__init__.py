"""engine subpackage: building blocks of the structural comparison.

Import from this module (not from sub-modules directly) to stay on the
stable public interface.  The selector, evaluator, controller and filter
modules are re-exported as namespaces because their members are meant to be
combined:

    from xml_structural_diff.engine import (
        DefaultNodeMatcher,
        DiffConfig,
        element_selectors,
        evaluators,
    )

    config = DiffConfig(
        node_matcher=DefaultNodeMatcher(element_selectors.by_name_and_text),
        difference_evaluator=evaluators.numeric_tolerance(1e-6),
    )
"""

from __future__ import annotations

from xml_structural_diff.engine import controllers, element_selectors, evaluators, filters
from xml_structural_diff.engine.comparison import Comparison, ComparisonResult, ComparisonType, Detail
from xml_structural_diff.engine.config import DiffConfig
from xml_structural_diff.engine.listeners import ComparisonListenerSupport
from xml_structural_diff.engine.matcher import (
    DefaultNodeMatcher,
    NodeMatch,
    PositionalNodeMatcher,
    node_types_match,
)
from xml_structural_diff.engine.xpath import XPathContext

__all__ = [
    "Comparison",
    "ComparisonListenerSupport",
    "ComparisonResult",
    "ComparisonType",
    "DefaultNodeMatcher",
    "Detail",
    "DiffConfig",
    "NodeMatch",
    "PositionalNodeMatcher",
    "XPathContext",
    "controllers",
    "element_selectors",
    "evaluators",
    "filters",
    "node_types_match",
]
