"""DiffConfig: immutable configuration of one comparison setup.

Every strategy the engine consults is an explicit field here; there is no
process-wide default that could be mutated behind a caller's back.  Build a
variant with ``dataclasses.replace(config, ...)``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from xml_structural_diff.engine import controllers, evaluators, filters
from xml_structural_diff.engine.matcher import PositionalNodeMatcher
from xml_structural_diff.errors import ConfigurationError
from xml_structural_diff.protocols import NodeMatcher

if TYPE_CHECKING:
    from xml_structural_diff.engine.comparison import Comparison, ComparisonResult
    from xml_structural_diff.result import Difference
    from xml_structural_diff.tree.nodes import XmlNode

__all__ = ["DiffConfig"]


@dataclass(frozen=True, slots=True)
class DiffConfig:
    """Immutable configuration for ``XmlComparator``.

    Attributes:
        node_matcher: Child pairing policy.  Defaults to positional pairing.
        difference_evaluator: Reclassifies each comparison's initial result.
            Defaults to ``evaluators.accept`` (identity).
        comparison_controller: Decides whether a difference stops the whole
            traversal.  Defaults to ``controllers.never_stop``.
        node_filter: Selects the children taking part in the comparison.
            Defaults to ``filters.accept_all``.
        attribute_filter: Selects the attributes taking part in the
            comparison.  Defaults to ``filters.accept_all_attributes``.
        comparison_listeners: Listeners notified of every comparison.
        match_listeners: Listeners notified of EQUAL comparisons.
        difference_listeners: Listeners notified of non-EQUAL comparisons.
        namespace_context: Prefix -> URI bindings used only to render XPath
            locations.  Does not affect what is considered equal.
        check_child_sequence: When True, paired children found at different
            positions produce a CHILD_NODELIST_SEQUENCE comparison.  Default
            False.
    """

    node_matcher: NodeMatcher = field(default_factory=PositionalNodeMatcher)
    difference_evaluator: Callable[[Comparison, ComparisonResult], ComparisonResult] = evaluators.accept
    comparison_controller: Callable[[Difference], bool] = controllers.never_stop
    node_filter: Callable[[XmlNode], bool] = filters.accept_all
    attribute_filter: Callable[[XmlNode], bool] = filters.accept_all_attributes
    comparison_listeners: tuple[Callable[[Comparison, ComparisonResult], None], ...] = ()
    match_listeners: tuple[Callable[[Comparison, ComparisonResult], None], ...] = ()
    difference_listeners: tuple[Callable[[Comparison, ComparisonResult], None], ...] = ()
    namespace_context: Mapping[str, str] | None = None
    check_child_sequence: bool = False

    def __post_init__(self) -> None:
        for name in (
            "node_matcher",
            "difference_evaluator",
            "comparison_controller",
            "node_filter",
            "attribute_filter",
        ):
            if getattr(self, name) is None:
                msg = f"{name} must not be None"
                raise ConfigurationError(msg)
        if not isinstance(self.node_matcher, NodeMatcher):
            msg = f"node_matcher must provide match(), got {type(self.node_matcher).__name__}"
            raise ConfigurationError(msg)
        for name in ("comparison_listeners", "match_listeners", "difference_listeners"):
            listeners = getattr(self, name)
            if listeners is None:
                msg = f"{name} must not be None"
                raise ConfigurationError(msg)
            if any(listener is None for listener in listeners):
                msg = f"{name} must not contain None"
                raise ConfigurationError(msg)
