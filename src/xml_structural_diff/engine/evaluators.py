"""Difference evaluators: policy hooks reclassifying comparison results.

An evaluator is a pure function ``(comparison, outcome) -> ComparisonResult``
receiving the initial result the engine computed (EQUAL or DIFFERENT) and
returning the final one.  The default, ``accept``, returns the outcome
unchanged.  Everything else in this module builds evaluators out of smaller
ones:

- ``first`` / ``chain`` combine evaluators.
- ``downgrade_differences_to_equal`` and friends reclassify whole comparison
  kinds.
- ``upgrade_differences_to_critical`` makes a kind abort the remaining
  comparisons of the current node pair.
- ``textual`` intercepts the value comparisons (attribute, text, CDATA,
  comment) and forwards everything else to a delegate; ``numeric_tolerance``
  is built on it.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import numpy as np

from xml_structural_diff.engine.comparison import Comparison, ComparisonResult, ComparisonType
from xml_structural_diff.errors import ConfigurationError
from xml_structural_diff.tree.nodes import NodeType

if TYPE_CHECKING:
    from xml_structural_diff.tree.nodes import XmlNode

__all__ = [
    "TEXTUAL_COMPARISONS",
    "accept",
    "chain",
    "downgrade_cosmetic_differences",
    "downgrade_differences_to_equal",
    "downgrade_differences_to_similar",
    "first",
    "ignore_prolog_differences",
    "ignore_prolog_differences_except_doctype",
    "numeric_tolerance",
    "textual",
    "upgrade_differences_to_critical",
    "upgrade_differences_to_different",
]

Evaluator = Callable[[Comparison, ComparisonResult], ComparisonResult]
TextHandler = Callable[[str | None, str | None, ComparisonResult], ComparisonResult | None]

TEXTUAL_COMPARISONS = frozenset(
    {
        ComparisonType.ATTR_VALUE,
        ComparisonType.TEXT_VALUE,
        ComparisonType.CDATA_VALUE,
        ComparisonType.COMMENT_VALUE,
    }
)

_COSMETIC = frozenset(
    {
        ComparisonType.HAS_DOCTYPE_DECLARATION,
        ComparisonType.DOCTYPE_SYSTEM_ID,
        ComparisonType.SCHEMA_LOCATION,
        ComparisonType.NO_NAMESPACE_SCHEMA_LOCATION,
        ComparisonType.NAMESPACE_PREFIX,
        ComparisonType.CHILD_NODELIST_SEQUENCE,
        ComparisonType.XML_ENCODING,
    }
)


# ---------------------------------------------------------------------------
# Basic evaluators
# ---------------------------------------------------------------------------


def accept(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
    """Identity evaluator: the engine's outcome is final."""
    return outcome


def downgrade_cosmetic_differences(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
    """Treat differences that do not change the document's meaning as SIMILAR.

    Covers text vs CDATA node types, doctype presence and system id, schema
    locations, namespace prefixes, child order and the declared encoding.
    """
    if outcome is not ComparisonResult.DIFFERENT:
        return outcome
    kind = comparison.comparison_type
    if kind is ComparisonType.NODE_TYPE:
        control, test = comparison.control.value, comparison.test.value
        if isinstance(control, NodeType) and isinstance(test, NodeType):
            if control.is_text_like and test.is_text_like:
                return ComparisonResult.SIMILAR
        return outcome
    if kind in _COSMETIC:
        return ComparisonResult.SIMILAR
    return outcome


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


def first(*evaluators: Evaluator) -> Evaluator:
    """Return the result of the first evaluator that changes the outcome."""
    _require_evaluators(*evaluators)

    def evaluate(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
        for evaluator in evaluators:
            evaluated = evaluator(comparison, outcome)
            if evaluated is not outcome:
                return evaluated
        return outcome

    return evaluate


def chain(*evaluators: Evaluator) -> Evaluator:
    """Feed the outcome through every evaluator in turn."""
    _require_evaluators(*evaluators)

    def evaluate(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
        for evaluator in evaluators:
            outcome = evaluator(comparison, outcome)
        return outcome

    return evaluate


def downgrade_differences_to_equal(*types: ComparisonType) -> Evaluator:
    """Report non-EQUAL outcomes of the given kinds as EQUAL."""
    return _record_differences_as(ComparisonResult.EQUAL, types)


def downgrade_differences_to_similar(*types: ComparisonType) -> Evaluator:
    """Report non-EQUAL outcomes of the given kinds as SIMILAR."""
    return _record_differences_as(ComparisonResult.SIMILAR, types)


def upgrade_differences_to_different(*types: ComparisonType) -> Evaluator:
    """Report non-EQUAL outcomes of the given kinds as DIFFERENT."""
    return _record_differences_as(ComparisonResult.DIFFERENT, types)


def upgrade_differences_to_critical(*types: ComparisonType) -> Evaluator:
    """Report non-EQUAL outcomes of the given kinds as CRITICAL.

    A CRITICAL result is reported as DIFFERENT and skips every remaining
    comparison of the node pair it belongs to, including its children.
    """
    return _record_differences_as(ComparisonResult.CRITICAL, types)


def ignore_prolog_differences() -> Evaluator:
    """Treat everything outside the document element as EQUAL.

    Covers the XML declaration, the doctype, comments and processing
    instructions before or after the document element, and the number and
    order of the document's children.
    """
    return _prolog_evaluator(ignore_doctype=True)


def ignore_prolog_differences_except_doctype() -> Evaluator:
    """Like ``ignore_prolog_differences`` but keeps doctype differences."""
    return _prolog_evaluator(ignore_doctype=False)


# ---------------------------------------------------------------------------
# Textual evaluators
# ---------------------------------------------------------------------------


def textual(handler: TextHandler, delegate: Evaluator = accept) -> Evaluator:
    """Intercept value comparisons and forward everything else to ``delegate``.

    ``handler`` receives the control value, the test value and the engine's
    outcome for ATTR_VALUE, TEXT_VALUE, CDATA_VALUE and COMMENT_VALUE
    comparisons.  It returns the final result, or None to let ``delegate``
    decide.

    Raises:
        ConfigurationError: If ``handler`` or ``delegate`` is None.
    """
    if handler is None:
        msg = "handler must not be None"
        raise ConfigurationError(msg)
    _require_evaluators(delegate)

    def evaluate(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
        if comparison.comparison_type in TEXTUAL_COMPARISONS:
            result = handler(comparison.control.value, comparison.test.value, outcome)
            if result is not None:
                return result
        return delegate(comparison, outcome)

    return evaluate


def numeric_tolerance(tolerance: float, delegate: Evaluator = accept) -> Evaluator:
    """Compare numeric values with an absolute tolerance.

    Values are parsed as whitespace-separated lists of floats, so
    ``"1.0 2.0"`` vs ``"1.001 2.0"`` is compared element-wise.  Two lists of
    the same length are EQUAL when every ``|control - test| < tolerance``,
    DIFFERENT otherwise.  Values that are not numbers are left to
    ``delegate``.

    Args:
        tolerance: Absolute tolerance, must be >= 0.
        delegate:  Evaluator for everything that is not a numeric value
            comparison.  Defaults to ``accept``.

    Raises:
        ConfigurationError: If ``tolerance`` is negative.
    """
    if tolerance < 0:
        msg = f"tolerance must be >= 0, got {tolerance}"
        raise ConfigurationError(msg)

    def handler(control: str | None, test: str | None, outcome: ComparisonResult) -> ComparisonResult | None:
        if outcome is ComparisonResult.EQUAL:
            return None
        control_numbers = _parse_numbers(control)
        test_numbers = _parse_numbers(test)
        if control_numbers is None or test_numbers is None:
            return None
        if control_numbers.shape != test_numbers.shape:
            return ComparisonResult.DIFFERENT
        if bool(np.all(np.abs(control_numbers - test_numbers) < tolerance)):
            return ComparisonResult.EQUAL
        return ComparisonResult.DIFFERENT

    return textual(handler, delegate)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require_evaluators(*evaluators: Evaluator) -> None:
    if any(e is None for e in evaluators):
        msg = "evaluators must not be None"
        raise ConfigurationError(msg)


def _record_differences_as(result: ComparisonResult, types: tuple[ComparisonType, ...]) -> Evaluator:
    kinds = frozenset(types)

    def evaluate(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
        if outcome is not ComparisonResult.EQUAL and comparison.comparison_type in kinds:
            return result
        return outcome

    return evaluate


def _prolog_evaluator(ignore_doctype: bool) -> Evaluator:
    def evaluate(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
        if _belongs_to_prolog(comparison, ignore_doctype) or _is_root_sequence(comparison):
            return ComparisonResult.EQUAL
        return outcome

    return evaluate


def _belongs_to_prolog(comparison: Comparison, ignore_doctype: bool) -> bool:
    if comparison.comparison_type.is_doctype_comparison:
        return ignore_doctype
    return _node_in_prolog(comparison.control.target, ignore_doctype) or _node_in_prolog(
        comparison.test.target, ignore_doctype
    )


def _node_in_prolog(node: XmlNode | None, ignore_doctype: bool) -> bool:
    while node is not None:
        if node.node_type is NodeType.ELEMENT:
            return False
        if node.node_type is NodeType.DOCUMENT_TYPE and not ignore_doctype:
            return False
        if node.node_type is NodeType.DOCUMENT:
            return True
        node = node.parent
    return False


def _is_root_sequence(comparison: Comparison) -> bool:
    target = comparison.control.target
    return (
        comparison.comparison_type is ComparisonType.CHILD_NODELIST_SEQUENCE
        and target is not None
        and target.node_type is NodeType.ELEMENT
        and target.parent is not None
        and target.parent.node_type is NodeType.DOCUMENT
    )


def _parse_numbers(text: str | None) -> np.ndarray | None:
    if text is None:
        return None
    tokens = text.split()
    if not tokens:
        return None
    try:
        return np.array([float(token) for token in tokens], dtype=np.float64)
    except ValueError:
        return None
