"""XmlComparator: orchestrator walking two XML trees in lockstep.

This is the central wiring layer between the tree abstraction, the
strategies held by ``DiffConfig`` and the ``Diff`` result.

Architecture:
- ``compare()`` builds ``XmlNode`` trees when needed, creates one
  ``XPathContext`` per side and a fresh ``_Walker`` holding all traversal
  state, then packages what the walker recorded into a ``Diff``.  Nothing
  survives between calls.
- Every atomic fact goes through ``_Walker.compare()``: initial result by
  value equality, then the difference evaluator, then the listeners, then
  the comparison controller.
- The comparisons of one node pair form a left-to-right fold over
  ``_FoldState``.  A CRITICAL result *halts* the fold: later steps of the
  same pair, children included, are skipped, but the parent carries on with
  the next sibling.  A controller stop *finishes* the fold everywhere.
- The steps of a node pair are generators.  Descending into a child pair
  yields the child's generator to ``_Walker.walk()``, which keeps pending
  pairs on an explicit stack and sends each child's ``_FoldState`` back to
  its parent.  Document depth therefore never grows the Python call stack.
- Per node pair the order is: node type, then for elements tag name,
  namespace URI, namespace prefix, attribute count, ``xsi:type``, schema
  locations, attributes (control declaration order, then test-only
  extras), child count and finally the paired children followed by the
  residuals (control side first).
"""

from __future__ import annotations

import logging
import time
from collections.abc import Generator, Sequence
from dataclasses import dataclass
from typing import Any

from xml_structural_diff.engine.comparison import (
    Comparison,
    ComparisonResult,
    ComparisonType,
    Detail,
)
from xml_structural_diff.engine.config import DiffConfig
from xml_structural_diff.engine.listeners import ComparisonListenerSupport, Listener
from xml_structural_diff.engine.xpath import XPathContext
from xml_structural_diff.result import Diff, Difference
from xml_structural_diff.tree.builder import TreeBuilder
from xml_structural_diff.tree.nodes import Fetched, NodeType, QName, XmlNode

__all__ = ["XmlComparator"]

logger = logging.getLogger(__name__)

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
XMLNS_NAMESPACE = "http://www.w3.org/2000/xmlns/"

_SCHEMA_LOCATION = QName("schemaLocation", XSI_NAMESPACE)
_NO_NAMESPACE_SCHEMA_LOCATION = QName("noNamespaceSchemaLocation", XSI_NAMESPACE)
_XSI_TYPE = QName("type", XSI_NAMESPACE)

_CHARACTER_DATA_COMPARISONS: dict[NodeType, ComparisonType] = {
    NodeType.TEXT: ComparisonType.TEXT_VALUE,
    NodeType.CDATA: ComparisonType.CDATA_VALUE,
    NodeType.COMMENT: ComparisonType.COMMENT_VALUE,
}


class XmlComparator:
    """Orchestrator for structural XML comparison.

    Example::

        from xml_structural_diff.comparator import XmlComparator

        cmp = XmlComparator()
        diff = cmp.compare("<foo>bar</foo>", "<foo>baz</foo>")
        diff.has_differences()   # True
        str(diff)                # "Expected text value 'bar' but was 'baz' - ..."

    A comparator is reusable and may be shared between threads as long as
    the strategies in its config are; listeners added after construction
    apply to subsequent ``compare()`` calls.
    """

    def __init__(self, config: DiffConfig | None = None) -> None:
        """Initialise the comparator.

        Args:
            config: Strategies and listeners.  Defaults to ``DiffConfig()``.
        """
        self._config: DiffConfig = config if config is not None else DiffConfig()
        self._listeners = ComparisonListenerSupport(
            self._config.comparison_listeners,
            self._config.match_listeners,
            self._config.difference_listeners,
        )
        self._builder = TreeBuilder()

    @property
    def config(self) -> DiffConfig:
        return self._config

    # ------------------------------------------------------------------
    # Listener registration
    # ------------------------------------------------------------------

    def add_comparison_listener(self, listener: Listener) -> None:
        """Register a listener notified of every comparison.

        Raises:
            ConfigurationError: If ``listener`` is None or not callable.
        """
        self._listeners.add_comparison_listener(listener)

    def add_match_listener(self, listener: Listener) -> None:
        """Register a listener notified of EQUAL comparisons."""
        self._listeners.add_match_listener(listener)

    def add_difference_listener(self, listener: Listener) -> None:
        """Register a listener notified of non-EQUAL comparisons."""
        self._listeners.add_difference_listener(listener)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compare(self, control: Any, test: Any) -> Diff:
        """Compare two XML trees and return a ``Diff``.

        Args:
            control: Expected tree: an ``XmlNode``, an lxml element or
                element tree, or XML text.
            test:    Actual tree, same accepted types.

        Returns:
            A ``Diff`` listing every non-EQUAL comparison in traversal order.

        Raises:
            TypeError: If an input cannot be converted into a tree.
            Exception: Whatever a listener or evaluator raises is propagated.
        """
        t0 = time.perf_counter()
        control_root = self._builder.build(control)
        test_root = self._builder.build(test)

        namespace_context = self._config.namespace_context
        control_ctx = XPathContext(namespace_context, control_root)
        test_ctx = XPathContext(namespace_context, test_root)

        walker = _Walker(self._config, self._listeners.copy())
        logger.debug("Comparing %s to %s", control_root.node_name, test_root.node_name)
        walker.walk(control_root, control_ctx, test_root, test_ctx)

        elapsed_ms = (time.perf_counter() - t0) * 1000.0
        logger.debug(
            "Comparison finished: %d comparisons, %d differences in %.3f ms",
            walker.comparisons_performed,
            len(walker.recorded),
            elapsed_ms,
        )
        return Diff(
            control=control_root,
            test=test_root,
            recorded=tuple(walker.recorded),
            comparisons_performed=walker.comparisons_performed,
            stopped_early=walker.stopped_early,
            computation_time_ms=elapsed_ms,
        )



# ---------------------------------------------------------------------------
# Fold state
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class _FoldState:
    """Outcome of the comparisons performed so far for one node pair.

    Attributes:
        result:   Result of the last comparison that was performed.
        halted:   A CRITICAL result ended this pair's fold.
        finished: The comparison controller ended the whole traversal.
    """

    result: ComparisonResult = ComparisonResult.EQUAL
    halted: bool = False
    finished: bool = False

    @property
    def stopped(self) -> bool:
        return self.halted or self.finished

    def released(self) -> _FoldState:
        """State seen by the parent: a halt stays local, a finish does not."""
        return _FoldState(self.result, finished=self.finished)


# Steps of one node pair: yields the steps of a child pair, receives its state
_Steps = Generator[Any, _FoldState, _FoldState]


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


class _Walker:
    """Traversal state of a single ``compare()`` call."""

    def __init__(self, config: DiffConfig, listeners: ComparisonListenerSupport) -> None:
        self._config = config
        self._listeners = listeners
        self.recorded: list[Difference] = []
        self.comparisons_performed = 0
        self.stopped_early = False

    def walk(
        self,
        control: XmlNode,
        control_ctx: XPathContext,
        test: XmlNode,
        test_ctx: XPathContext,
    ) -> _FoldState:
        """Compare two trees; the contexts are positioned on the two roots.

        Pending node pairs live on an explicit stack.  When a pair yields a
        child pair, the child runs to completion first and its state is sent
        back to the parent.  If a listener or evaluator raises, the pending
        pairs are closed so both contexts unwind before the error propagates.
        """
        stack: list[_Steps] = []
        step: _Steps | None = self._compare_pair(control, control_ctx, test, test_ctx)
        state = _FoldState()
        try:
            while True:
                try:
                    if step is not None:
                        stack.append(step)
                        step = next(step)
                    else:
                        step = stack[-1].send(state)
                except StopIteration as done:
                    stack.pop()
                    state = done.value
                    step = None
                    if not stack:
                        return state
        finally:
            for pending in reversed(stack):
                pending.close()

    # ------------------------------------------------------------------
    # Single comparison
    # ------------------------------------------------------------------

    def compare(self, comparison: Comparison, failed: bool = False) -> _FoldState:
        """Evaluate, dispatch and record one comparison."""
        self.comparisons_performed += 1
        if failed or comparison.control.value != comparison.test.value:
            initial = ComparisonResult.DIFFERENT
        else:
            initial = ComparisonResult.EQUAL
        outcome = self._config.difference_evaluator(comparison, initial)
        reported = outcome.collapse()
        self._listeners.fire(comparison, reported)
        if reported is ComparisonResult.EQUAL:
            return _FoldState(reported, halted=outcome is ComparisonResult.CRITICAL)

        difference = Difference(comparison, reported)
        self.recorded.append(difference)
        if self._config.comparison_controller(difference):
            logger.debug(
                "Traversal stopped after %s at %s",
                comparison.comparison_type,
                comparison.control.xpath or comparison.test.xpath,
            )
            self.stopped_early = True
            return _FoldState(reported, finished=True)
        return _FoldState(reported, halted=outcome is ComparisonResult.CRITICAL)

    def _compare_values(
        self,
        kind: ComparisonType,
        control: XmlNode,
        control_ctx: XPathContext,
        control_value: Fetched,
        test: XmlNode,
        test_ctx: XPathContext,
        test_value: Fetched,
    ) -> _FoldState:
        comparison = Comparison(
            kind,
            _detail(control, control_ctx, control_value.value),
            _detail(test, test_ctx, test_value.value),
        )
        return self.compare(comparison, failed=not (control_value.ok and test_value.ok))

    def _compare_facet(
        self,
        kind: ComparisonType,
        control: XmlNode,
        control_ctx: XPathContext,
        control_value: Any,
        test: XmlNode,
        test_ctx: XPathContext,
        test_value: Any,
    ) -> _FoldState:
        return self.compare(
            Comparison(
                kind,
                _detail(control, control_ctx, control_value),
                _detail(test, test_ctx, test_value),
            )
        )

    # ------------------------------------------------------------------
    # Node pairs
    # ------------------------------------------------------------------

    def _compare_pair(
        self,
        control: XmlNode,
        control_ctx: XPathContext,
        test: XmlNode,
        test_ctx: XPathContext,
    ) -> _Steps:
        """Compare a node pair; the contexts are positioned on the two nodes."""
        state = self._compare_facet(
            ComparisonType.NODE_TYPE,
            control,
            control_ctx,
            control.node_type,
            test,
            test_ctx,
            test.node_type,
        )
        kind = control.node_type
        if kind is not test.node_type:
            # text vs CDATA is only looked into when the evaluator allowed it
            if (
                control.is_text_like
                and test.is_text_like
                and state.result < ComparisonResult.DIFFERENT
                and not state.stopped
            ):
                return self._compare_character_data(
                    ComparisonType.TEXT_VALUE, control, control_ctx, test, test_ctx
                )
            return state
        if state.stopped:
            return state

        if kind is NodeType.ELEMENT:
            return (yield from self._compare_elements(control, control_ctx, test, test_ctx))
        if kind is NodeType.DOCUMENT:
            return (yield from self._compare_documents(control, control_ctx, test, test_ctx))
        if kind in _CHARACTER_DATA_COMPARISONS:
            return self._compare_character_data(
                _CHARACTER_DATA_COMPARISONS[kind], control, control_ctx, test, test_ctx
            )
        if kind is NodeType.PROCESSING_INSTRUCTION:
            return self._compare_processing_instructions(control, control_ctx, test, test_ctx)
        if kind is NodeType.DOCUMENT_TYPE:
            return self._compare_doctypes(control, control_ctx, test, test_ctx)
        if kind is NodeType.ATTRIBUTE:
            return self._compare_attribute_nodes(control, control_ctx, test, test_ctx)
        msg = f"Unsupported node type {kind!r}"
        raise TypeError(msg)

    def _compare_character_data(
        self,
        kind: ComparisonType,
        control: XmlNode,
        control_ctx: XPathContext,
        test: XmlNode,
        test_ctx: XPathContext,
    ) -> _FoldState:
        return self._compare_values(
            kind, control, control_ctx, control.read_value(), test, test_ctx, test.read_value()
        )

    def _compare_processing_instructions(
        self,
        control: XmlNode,
        control_ctx: XPathContext,
        test: XmlNode,
        test_ctx: XPathContext,
    ) -> _FoldState:
        state = self._compare_facet(
            ComparisonType.PROCESSING_INSTRUCTION_TARGET,
            control,
            control_ctx,
            control.node_name,
            test,
            test_ctx,
            test.node_name,
        )
        if state.stopped:
            return state
        return self._compare_values(
            ComparisonType.PROCESSING_INSTRUCTION_DATA,
            control,
            control_ctx,
            control.read_value(),
            test,
            test_ctx,
            test.read_value(),
        )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def _compare_documents(
        self,
        control: XmlNode,
        control_ctx: XPathContext,
        test: XmlNode,
        test_ctx: XPathContext,
    ) -> _Steps:
        control_doctype, test_doctype = control.doctype, test.doctype
        state = self._compare_facet(
            ComparisonType.HAS_DOCTYPE_DECLARATION,
            control,
            control_ctx,
            control_doctype is not None,
            test,
            test_ctx,
            test_doctype is not None,
        )
        if control_doctype is not None and test_doctype is not None and not state.stopped:
            state = self._compare_doctypes(control_doctype, control_ctx, test_doctype, test_ctx)
        for kind, attribute in (
            (ComparisonType.XML_VERSION, "xml_version"),
            (ComparisonType.XML_STANDALONE, "xml_standalone"),
            (ComparisonType.XML_ENCODING, "xml_encoding"),
        ):
            if state.stopped:
                return state
            state = self._compare_facet(
                kind,
                control,
                control_ctx,
                getattr(control, attribute),
                test,
                test_ctx,
                getattr(test, attribute),
            )
        if state.stopped:
            return state
        return (yield from self._compare_children(control, control_ctx, test, test_ctx))

    def _compare_doctypes(
        self,
        control: XmlNode,
        control_ctx: XPathContext,
        test: XmlNode,
        test_ctx: XPathContext,
    ) -> _FoldState:
        state = _FoldState()
        for kind, control_value, test_value in (
            (ComparisonType.DOCTYPE_NAME, control.node_name, test.node_name),
            (ComparisonType.DOCTYPE_PUBLIC_ID, control.public_id, test.public_id),
            (ComparisonType.DOCTYPE_SYSTEM_ID, control.system_id, test.system_id),
        ):
            if state.stopped:
                break
            state = self._compare_facet(
                kind, control, control_ctx, control_value, test, test_ctx, test_value
            )
        return state

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    def _compare_elements(
        self,
        control: XmlNode,
        control_ctx: XPathContext,
        test: XmlNode,
        test_ctx: XPathContext,
    ) -> _Steps:
        control_name, test_name = _name_of(control), _name_of(test)
        state = self._compare_facet(
            ComparisonType.ELEMENT_TAG_NAME,
            control,
            control_ctx,
            control_name.local_name,
            test,
            test_ctx,
            test_name.local_name,
        )
        if not state.stopped:
            state = self._compare_facet(
                ComparisonType.NAMESPACE_URI,
                control,
                control_ctx,
                control_name.namespace_uri,
                test,
                test_ctx,
                test_name.namespace_uri,
            )
        if not state.stopped:
            state = self._compare_facet(
                ComparisonType.NAMESPACE_PREFIX,
                control,
                control_ctx,
                control_name.prefix,
                test,
                test_ctx,
                test_name.prefix,
            )
        if not state.stopped:
            state = self._compare_attributes(control, control_ctx, test, test_ctx)
        if state.stopped:
            return state
        return (yield from self._compare_children(control, control_ctx, test, test_ctx))

    def _compare_attributes(
        self,
        control: XmlNode,
        control_ctx: XPathContext,
        test: XmlNode,
        test_ctx: XPathContext,
    ) -> _FoldState:
        control_special, control_attrs = self._split_attributes(control)
        test_special, test_attrs = self._split_attributes(test)
        control_ctx.add_attributes(_name_of(a) for a in control_attrs)
        test_ctx.add_attributes(_name_of(a) for a in test_attrs)

        state = self._compare_facet(
            ComparisonType.ELEMENT_NUM_ATTRIBUTES,
            control,
            control_ctx,
            len(control_attrs),
            test,
            test_ctx,
            len(test_attrs),
        )
        if not state.stopped:
            state = self._compare_type_attributes(
                control,
                control_ctx,
                control_special.get(_XSI_TYPE),
                test,
                test_ctx,
                test_special.get(_XSI_TYPE),
            )
        for kind, name in (
            (ComparisonType.SCHEMA_LOCATION, _SCHEMA_LOCATION),
            (ComparisonType.NO_NAMESPACE_SCHEMA_LOCATION, _NO_NAMESPACE_SCHEMA_LOCATION),
        ):
            control_attr, test_attr = control_special.get(name), test_special.get(name)
            if state.stopped:
                return state
            if control_attr is None and test_attr is None:
                continue
            state = self._compare_values(
                kind,
                control,
                control_ctx,
                _read_optional(control_attr),
                test,
                test_ctx,
                _read_optional(test_attr),
            )

        test_by_name = {a.name: a for a in test_attrs}
        for control_attr in control_attrs:
            if state.stopped:
                return state
            state = self._compare_control_attribute(
                control_attr, control_ctx, test_by_name.get(control_attr.name), test, test_ctx
            )
        control_names = {a.name for a in control_attrs}
        for test_attr in test_attrs:
            if state.stopped:
                return state
            if test_attr.name not in control_names:
                state = self._report_unexpected_attribute(control, control_ctx, test_attr, test_ctx)
        return state

    def _split_attributes(self, element: XmlNode) -> tuple[dict[QName, XmlNode], list[XmlNode]]:
        """Separate schema instance attributes from the filtered regular ones."""
        special: dict[QName, XmlNode] = {}
        regular: list[XmlNode] = []
        for attribute in element.attributes:
            name = _name_of(attribute)
            if name.namespace_uri == XMLNS_NAMESPACE:
                continue
            if name in (_SCHEMA_LOCATION, _NO_NAMESPACE_SCHEMA_LOCATION, _XSI_TYPE):
                special[name] = attribute
            elif self._config.attribute_filter(attribute):
                regular.append(attribute)
        return special, regular

    def _compare_type_attributes(
        self,
        control: XmlNode,
        control_ctx: XPathContext,
        control_type: XmlNode | None,
        test: XmlNode,
        test_ctx: XPathContext,
        test_type: XmlNode | None,
    ) -> _FoldState:
        """Compare ``xsi:type`` by the namespace-qualified type name it denotes."""
        if control_type is not None:
            control_ctx.add_attribute(_XSI_TYPE)
        if test_type is not None:
            test_ctx.add_attribute(_XSI_TYPE)

        if control_type is None:
            if test_type is None:
                return _FoldState()
            return self._report_unexpected_attribute(control, control_ctx, test_type, test_ctx)
        if test_type is None:
            return self._compare_control_attribute(control_type, control_ctx, None, test, test_ctx)
        with control_ctx.at_attribute(_XSI_TYPE), test_ctx.at_attribute(_XSI_TYPE):
            return self._compare_values(
                ComparisonType.ATTR_VALUE,
                control_type,
                control_ctx,
                _resolve_type_name(control, control_type.read_value()),
                test_type,
                test_ctx,
                _resolve_type_name(test, test_type.read_value()),
            )

    def _compare_control_attribute(
        self,
        control_attr: XmlNode,
        control_ctx: XPathContext,
        test_attr: XmlNode | None,
        test: XmlNode,
        test_ctx: XPathContext,
    ) -> _FoldState:
        name = _name_of(control_attr)
        with control_ctx.at_attribute(name):
            if test_attr is None:
                return self._compare_facet(
                    ComparisonType.ATTR_NAME_LOOKUP,
                    control_attr,
                    control_ctx,
                    True,
                    test,
                    test_ctx,
                    False,
                )
            with test_ctx.at_attribute(name):
                return self._compare_attribute_nodes(control_attr, control_ctx, test_attr, test_ctx)

    def _report_unexpected_attribute(
        self,
        control: XmlNode,
        control_ctx: XPathContext,
        test_attr: XmlNode,
        test_ctx: XPathContext,
    ) -> _FoldState:
        with test_ctx.at_attribute(_name_of(test_attr)):
            return self._compare_facet(
                ComparisonType.ATTR_NAME_LOOKUP,
                control,
                control_ctx,
                False,
                test_attr,
                test_ctx,
                True,
            )

    def _compare_attribute_nodes(
        self,
        control: XmlNode,
        control_ctx: XPathContext,
        test: XmlNode,
        test_ctx: XPathContext,
    ) -> _FoldState:
        control_name, test_name = _name_of(control), _name_of(test)
        state = _FoldState()
        if control_name != test_name:
            state = self._compare_facet(
                ComparisonType.ATTR_NAME_LOOKUP,
                control,
                control_ctx,
                control_name,
                test,
                test_ctx,
                test_name,
            )
        elif control_name.namespace_uri is not None:
            state = self._compare_facet(
                ComparisonType.NAMESPACE_PREFIX,
                control,
                control_ctx,
                control_name.prefix,
                test,
                test_ctx,
                test_name.prefix,
            )
        if state.stopped:
            return state
        return self._compare_values(
            ComparisonType.ATTR_VALUE,
            control,
            control_ctx,
            control.read_value(),
            test,
            test_ctx,
            test.read_value(),
        )

    # ------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------

    def _compare_children(
        self,
        control: XmlNode,
        control_ctx: XPathContext,
        test: XmlNode,
        test_ctx: XPathContext,
    ) -> _Steps:
        # positions come from the unfiltered children, pairing from the filtered ones
        control_all = _merge_adjacent_text(control.children)
        test_all = _merge_adjacent_text(test.children)
        control_index = {node: i for i, node in enumerate(control_all)}
        test_index = {node: i for i, node in enumerate(test_all)}
        node_filter = self._config.node_filter
        control_children = _merge_adjacent_text(
            [c for c in control_all if node_filter(c)], control_index
        )
        test_children = _merge_adjacent_text([t for t in test_all if node_filter(t)], test_index)

        state = self._compare_facet(
            ComparisonType.CHILD_NODELIST_LENGTH,
            control,
            control_ctx,
            len(control_children),
            test,
            test_ctx,
            len(test_children),
        )
        if state.stopped or not (control_children or test_children):
            return state

        control_ctx.set_children(control_all)
        test_ctx.set_children(test_all)
        control_position = {node: i for i, node in enumerate(control_children)}
        test_position = {node: i for i, node in enumerate(test_children)}

        match = self._config.node_matcher.match(control_children, test_children)
        state = _FoldState()
        for control_child, test_child in match.pairs:
            if state.stopped:
                return state
            state = yield from self._compare_child_pair(
                control_child,
                control_ctx,
                control_index[control_child],
                control_position[control_child],
                test_child,
                test_ctx,
                test_index[test_child],
                test_position[test_child],
            )
        for control_child in match.unmatched_control:
            if state.stopped:
                return state
            state = self._report_missing_child(
                control_child, control_ctx, control_index[control_child], test_ctx
            )
        for test_child in match.unmatched_test:
            if state.stopped:
                return state
            state = self._report_unexpected_child(
                control_ctx, test_child, test_ctx, test_index[test_child]
            )
        return state

    def _compare_child_pair(
        self,
        control: XmlNode,
        control_ctx: XPathContext,
        control_index: int,
        control_position: int,
        test: XmlNode,
        test_ctx: XPathContext,
        test_index: int,
        test_position: int,
    ) -> _Steps:
        with control_ctx.at_child(control_index), test_ctx.at_child(test_index):
            state = _FoldState()
            if self._config.check_child_sequence:
                state = self._compare_facet(
                    ComparisonType.CHILD_NODELIST_SEQUENCE,
                    control,
                    control_ctx,
                    control_position,
                    test,
                    test_ctx,
                    test_position,
                )
            if not state.stopped:
                state = yield self._compare_pair(control, control_ctx, test, test_ctx)
            return state.released()

    def _report_missing_child(
        self,
        control: XmlNode,
        control_ctx: XPathContext,
        control_index: int,
        test_ctx: XPathContext,
    ) -> _FoldState:
        with control_ctx.at_child(control_index):
            comparison = Comparison(
                ComparisonType.CHILD_LOOKUP,
                _detail(control, control_ctx, _lookup_value(control)),
                Detail(None, None, None, test_ctx.xpath),
            )
            return self.compare(comparison)

    def _report_unexpected_child(
        self,
        control_ctx: XPathContext,
        test: XmlNode,
        test_ctx: XPathContext,
        test_index: int,
    ) -> _FoldState:
        with test_ctx.at_child(test_index):
            comparison = Comparison(
                ComparisonType.CHILD_LOOKUP,
                Detail(None, None, None, control_ctx.xpath),
                _detail(test, test_ctx, _lookup_value(test)),
            )
            return self.compare(comparison)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _name_of(node: XmlNode) -> QName:
    """QName of an element or attribute node."""
    if node.name is None:
        msg = f"{node.node_type} node has no name"
        raise TypeError(msg)
    return node.name


def _detail(node: XmlNode, ctx: XPathContext, value: Any) -> Detail:
    return Detail(node, ctx.xpath, value, ctx.parent_xpath)


def _read_optional(node: XmlNode | None) -> Fetched:
    return node.read_value() if node is not None else Fetched()


def _lookup_value(node: XmlNode) -> Any:
    """Value identifying a residual child: its QName for elements, else its node name."""
    if node.node_type is NodeType.ELEMENT:
        return node.name
    return node.node_name


def _resolve_type_name(element: XmlNode, fetched: Fetched) -> Fetched:
    """Turn an ``xsi:type`` value (``prefix:local``) into Clark notation.

    The prefix is looked up in the namespace bindings in scope at
    ``element``; an unprefixed value resolves against the default namespace.
    Everything after the first colon is the local name.
    """
    if not fetched.ok or fetched.value is None:
        return fetched
    text = fetched.value.strip()
    prefix, sep, local = text.partition(":")
    if not sep:
        prefix, local = "", text
    return Fetched(QName(local, element.lookup_namespace_uri(prefix or None)).clark)


def _merge_adjacent_text(
    children: Sequence[XmlNode],
    positions: dict[XmlNode, int] | None = None,
) -> list[XmlNode]:
    """Merge runs of adjacent TEXT siblings into a single TEXT node.

    When ``positions`` is given, each merged node is registered there under
    the position of the first node of its run.
    """
    merged: list[XmlNode] = []
    run: list[XmlNode] = []

    def flush() -> None:
        if len(run) == 1:
            merged.append(run[0])
        elif run:
            node = XmlNode(
                NodeType.TEXT,
                value="".join(n.value or "" for n in run),
                source=run[0].source,
                parent=run[0].parent,
            )
            if positions is not None:
                positions[node] = positions[run[0]]
            merged.append(node)
        run.clear()

    for child in children:
        if child.node_type is NodeType.TEXT and child.loader is None:
            run.append(child)
            continue
        flush()
        merged.append(child)
    flush()
    return merged
