"""Element selectors: pure predicates deciding which elements may be paired.

A selector is any callable ``(control, test) -> bool``.  Selectors carry no
state and have no side effects, so they compose freely:

    from xml_structural_diff.engine import element_selectors as es

    selector = (
        es.conditional_builder()
        .when_element_is_named("row")
        .then_use(es.multi_level_by_name_and_text(2))
        .else_use(es.by_name)
        .build()
    )

A value that cannot be read from the tree (see ``XmlNode.read_value``)
makes the pair incomparable: the selector returns False.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from lxml import etree

from xml_structural_diff.cache import XPathCache, default_cache
from xml_structural_diff.engine.matcher import DefaultNodeMatcher
from xml_structural_diff.errors import ConfigurationError
from xml_structural_diff.tree.builder import TreeBuilder, to_lxml
from xml_structural_diff.tree.nodes import NodeType, QName, XmlNode

__all__ = [
    "ConditionalSelectorBuilder",
    "and_",
    "by_name",
    "by_name_and_all_attributes",
    "by_name_and_attributes",
    "by_name_and_text",
    "by_name_and_text_rec",
    "by_xpath",
    "conditional_builder",
    "conditional_selector",
    "default",
    "multi_level_by_name_and_text",
    "not_",
    "or_",
    "selector_for_element_named",
    "xor",
]

Selector = Callable[[XmlNode, XmlNode], bool]
ElementPredicate = Callable[[XmlNode], bool]


# ---------------------------------------------------------------------------
# Basic selectors
# ---------------------------------------------------------------------------


def default(control: XmlNode, test: XmlNode) -> bool:
    """Any element can be paired with any element."""
    return True


def by_name(control: XmlNode, test: XmlNode) -> bool:
    """Elements with the same local name and namespace URI."""
    return control.name is not None and control.name == test.name


def by_name_and_text(control: XmlNode, test: XmlNode) -> bool:
    """Elements with the same name and the same directly nested text."""
    if not by_name(control, test):
        return False
    control_text = control.merged_text()
    test_text = test.merged_text()
    return control_text.ok and test_text.ok and control_text.value == test_text.value


def by_name_and_all_attributes(control: XmlNode, test: XmlNode) -> bool:
    """Elements with the same name and identical attribute sets."""
    if not by_name(control, test):
        return False
    control_attrs = _attribute_values(control)
    test_attrs = _attribute_values(test)
    if control_attrs is None or test_attrs is None:
        return False
    return control_attrs == test_attrs


def by_name_and_attributes(*names: str | QName) -> Selector:
    """Elements with the same name and the same values for the given attributes.

    Plain string names refer to attributes in the null namespace; Clark
    notation selects a namespaced attribute.  An attribute missing on both
    sides counts as equal.

    Raises:
        ConfigurationError: If any name is None.
    """
    if any(n is None for n in names):
        msg = "attribute names must not be None"
        raise ConfigurationError(msg)
    keys = tuple(QName.parse(n) for n in names)

    def selector(control: XmlNode, test: XmlNode) -> bool:
        if not by_name(control, test):
            return False
        control_attrs = _attribute_values(control)
        test_attrs = _attribute_values(test)
        if control_attrs is None or test_attrs is None:
            return False
        return all(control_attrs.get(k) == test_attrs.get(k) for k in keys)

    return selector


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


def not_(selector: Selector) -> Selector:
    """Negate a selector."""
    _require_selectors(selector)

    def negated(control: XmlNode, test: XmlNode) -> bool:
        return not selector(control, test)

    return negated


def or_(*selectors: Selector) -> Selector:
    """Accept a pair if at least one selector does.

    Note that ``or_(a, b)`` is evaluated per pair.  To try ``a`` against all
    candidates before falling back to ``b``, pass both selectors to
    ``DefaultNodeMatcher`` instead.
    """
    _require_selectors(*selectors)

    def any_of(control: XmlNode, test: XmlNode) -> bool:
        return any(s(control, test) for s in selectors)

    return any_of


def and_(*selectors: Selector) -> Selector:
    """Accept a pair if all selectors do."""
    _require_selectors(*selectors)

    def all_of(control: XmlNode, test: XmlNode) -> bool:
        return all(s(control, test) for s in selectors)

    return all_of


def xor(first: Selector, second: Selector) -> Selector:
    """Accept a pair if exactly one of the two selectors does."""
    _require_selectors(first, second)

    def exactly_one(control: XmlNode, test: XmlNode) -> bool:
        return first(control, test) != second(control, test)

    return exactly_one


def conditional_selector(predicate: ElementPredicate, selector: Selector) -> Selector:
    """Apply ``selector`` only when ``predicate`` holds for the control element."""
    if predicate is None:
        msg = "predicate must not be None"
        raise ConfigurationError(msg)
    _require_selectors(selector)

    def conditional(control: XmlNode, test: XmlNode) -> bool:
        return predicate(control) and selector(control, test)

    return conditional


def selector_for_element_named(name: str | QName, selector: Selector) -> Selector:
    """Apply ``selector`` only to control elements with the given name."""
    return conditional_selector(_element_named(name), selector)


# ---------------------------------------------------------------------------
# Conditional builder
# ---------------------------------------------------------------------------


class ConditionalSelectorBuilder:
    """Builds a selector out of ``when(...).then_use(...)`` clauses.

    Clauses are consulted in order; the first one whose predicate accepts
    the control element decides.  When none applies, the ``else_use``
    selector decides, and without one the pair is rejected.
    """

    def __init__(self) -> None:
        self._clauses: list[tuple[ElementPredicate, Selector]] = []
        self._pending: ElementPredicate | None = None
        self._fallback: Selector | None = None

    def when(self, predicate: ElementPredicate) -> ConditionalSelectorBuilder:
        if predicate is None:
            msg = "predicate must not be None"
            raise ConfigurationError(msg)
        if self._pending is not None:
            msg = "unbalanced conditions: when() called twice without then_use()"
            raise ConfigurationError(msg)
        self._pending = predicate
        return self

    def when_element_is_named(self, name: str | QName) -> ConditionalSelectorBuilder:
        return self.when(_element_named(name))

    def then_use(self, selector: Selector) -> ConditionalSelectorBuilder:
        _require_selectors(selector)
        if self._pending is None:
            msg = "then_use() requires a preceding when()"
            raise ConfigurationError(msg)
        self._clauses.append((self._pending, selector))
        self._pending = None
        return self

    def else_use(self, selector: Selector) -> ConditionalSelectorBuilder:
        _require_selectors(selector)
        if self._fallback is not None:
            msg = "else_use() can only be called once"
            raise ConfigurationError(msg)
        self._fallback = selector
        return self

    def build(self) -> Selector:
        if self._pending is not None:
            msg = "unbalanced conditions: when() without then_use()"
            raise ConfigurationError(msg)
        clauses = tuple(self._clauses)
        fallback = self._fallback

        def conditional(control: XmlNode, test: XmlNode) -> bool:
            for predicate, selector in clauses:
                if predicate(control):
                    return selector(control, test)
            if fallback is not None:
                return fallback(control, test)
            return False

        return conditional


def conditional_builder() -> ConditionalSelectorBuilder:
    return ConditionalSelectorBuilder()


# ---------------------------------------------------------------------------
# XPath selector
# ---------------------------------------------------------------------------


def by_xpath(
    xpath: str,
    child_selector: Selector,
    namespaces: dict[str, str] | None = None,
    cache: XPathCache | None = None,
) -> Selector:
    """Pair elements whose XPath-selected sub-values correspond.

    ``xpath`` is evaluated relative to each element.  Selected elements must
    all find a partner under ``child_selector`` (first match, as in
    ``DefaultNodeMatcher``); selected strings and numbers must match as a
    multiset of values.

    Args:
        xpath:          XPath 1.0 expression, e.g. ``"./key"`` or ``"@id"``.
        child_selector: Selector used for element results.
        namespaces:     Prefix -> URI bindings for ``xpath``.
        cache:          Compiled-expression cache; defaults to the shared one.

    Raises:
        ConfigurationError: If the selector is None or the expression is invalid.
    """
    _require_selectors(child_selector)
    compiled = (cache or default_cache).compile(xpath, namespaces)
    matcher = DefaultNodeMatcher(child_selector)
    builder = TreeBuilder()

    def selector(control: XmlNode, test: XmlNode) -> bool:
        control_elements, control_values = _evaluate(compiled, control, builder)
        test_elements, test_values = _evaluate(compiled, test, builder)
        if len(matcher.match(control_elements, test_elements).pairs) != len(control_elements):
            return False
        remaining = list(test_values)
        for value in control_values:
            if value not in remaining:
                return False
            remaining.remove(value)
        return True

    return selector


def _evaluate(
    compiled: etree.XPath,
    node: XmlNode,
    builder: TreeBuilder,
) -> tuple[list[XmlNode], list[str]]:
    source = node.source if isinstance(node.source, etree._Element) else to_lxml(node)
    results: Any = compiled(source)
    if not isinstance(results, list):
        results = [results]
    elements: list[XmlNode] = []
    values: list[str] = []
    for item in results:
        if isinstance(item, etree._Element) and not isinstance(item, etree._Comment | etree._ProcessingInstruction):
            elements.append(builder.build_node(item))
        elif isinstance(item, etree._Element):
            values.append(item.text or "")
        else:
            values.append(str(item))
    return elements, values


# ---------------------------------------------------------------------------
# Recursive selectors
# ---------------------------------------------------------------------------


def by_name_and_text_rec(control: XmlNode, test: XmlNode) -> bool:
    """Like ``by_name_and_text`` but recursively for all non-text descendants.

    Both elements need the same sequence of non-text children (by node
    type), and every pair of child elements must itself be accepted by this
    selector.
    """
    if not by_name_and_text(control, test):
        return False
    control_children = [c for c in control.children if not c.is_text_like]
    test_children = [t for t in test.children if not t.is_text_like]
    if len(control_children) != len(test_children):
        return False
    for c, t in zip(control_children, test_children, strict=True):
        if c.node_type is not t.node_type:
            return False
        if c.node_type is NodeType.ELEMENT and not by_name_and_text_rec(c, t):
            return False
    return True


def multi_level_by_name_and_text(levels: int, ignore_empty_texts: bool = False) -> Selector:
    """Pair elements by name and the text nested ``levels`` elements deep.

    For ``levels == 1`` this is ``by_name_and_text``.  For deeper levels each
    element on the way down must have the same name on both sides and its
    first child must be an element; the innermost pair is compared by name
    and text.  Typically combined with a conditional selector since it only
    suits elements with exactly one child element per level.

    Args:
        levels: Number of levels, at least 1.
        ignore_empty_texts: Skip whitespace-only text nodes when looking for
            the first child of each level.

    Raises:
        ConfigurationError: If ``levels`` is smaller than 1.
    """
    if levels < 1:
        msg = f"levels must be equal or greater than one, got {levels}"
        raise ConfigurationError(msg)

    def selector(control: XmlNode, test: XmlNode) -> bool:
        current_control, current_test = control, test
        for _ in range(levels - 1):
            if not by_name(current_control, current_test):
                return False
            next_control = _first_eligible_child(current_control, ignore_empty_texts)
            next_test = _first_eligible_child(current_test, ignore_empty_texts)
            if next_control is None or next_test is None:
                return False
            if next_control.node_type is not NodeType.ELEMENT or next_test.node_type is not NodeType.ELEMENT:
                return False
            current_control, current_test = next_control, next_test
        return by_name_and_text(current_control, current_test)

    return selector


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require_selectors(*selectors: Selector) -> None:
    if any(s is None for s in selectors):
        msg = "selectors must not be None"
        raise ConfigurationError(msg)


def _element_named(name: str | QName) -> ElementPredicate:
    if name is None:
        msg = "element name must not be None"
        raise ConfigurationError(msg)
    if isinstance(name, QName) or name.startswith("{"):
        expected = QName.parse(name)
        return lambda e: e.node_type is NodeType.ELEMENT and e.name == expected
    return lambda e: e.node_type is NodeType.ELEMENT and e.name is not None and e.name.local_name == name


def _attribute_values(node: XmlNode) -> dict[QName, str | None] | None:
    values: dict[QName, str | None] = {}
    for name, attribute in node.attribute_map().items():
        fetched = attribute.read_value()
        if not fetched.ok:
            return None
        values[name] = fetched.value
    return values


def _first_eligible_child(node: XmlNode, ignore_empty_texts: bool) -> XmlNode | None:
    if not node.children:
        return None
    if not ignore_empty_texts:
        return node.children[0]
    for child in node.children[:-1]:
        if not child.is_text_like:
            return child
        fetched = child.read_value()
        if not fetched.ok:
            return None
        if (fetched.value or "").strip():
            return child
    return node.children[-1]
