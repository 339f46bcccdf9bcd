"""XPathContext: tracks the current position while walking one tree.

The engine keeps one context per side, because control and test positions
diverge as soon as children are paired out of document order.  A context is
a stack of levels.  Each level knows the XPath step for itself, the levels
of its children (``set_children``) and the levels of its attributes
(``add_attributes``); navigating pushes or pops one of those.

Rendering rules:
- the document (and the empty stack) renders as ``/``
- elements render as ``name[n]`` where ``n`` counts same-named siblings
- text and CDATA share the ``text()[n]`` counter
- comments and processing instructions use ``comment()[n]`` and
  ``processing-instruction()[n]``
- attributes render as ``@name``

All indices are 1-based.  Names are prefixed only when the namespace URI is
bound in the namespace context given at construction time; the context is
used for rendering and nothing else.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from xml_structural_diff.tree.nodes import NodeType, QName

if TYPE_CHECKING:
    from xml_structural_diff.tree.nodes import XmlNode

__all__ = ["NodeInfo", "XPathContext"]

_COMMENT = "comment()"
_PI = "processing-instruction()"
_TEXT = "text()"
_SEP = "/"
_ATTR = "@"


class NodeInfo(Protocol):
    """The two facts a level needs about a child node."""

    @property
    def node_type(self) -> NodeType: ...

    @property
    def name(self) -> QName | None: ...


@dataclass(slots=True)
class _Level:
    expression: str
    kind: NodeType | None = None
    children: list[_Level] = field(default_factory=list)
    attributes: dict[QName, _Level] = field(default_factory=dict)
    xpath: str | None = None


class XPathContext:
    """Position tracker producing XPath-like location strings.

    Example::

        ctx = XPathContext()
        ctx.set_children([foo_element])
        with ctx.at_child(0):
            ctx.xpath          # "/foo[1]"
            ctx.parent_xpath   # "/"

    Args:
        namespace_context: Optional prefix -> URI mapping used to render
            qualified names.  Inverted internally.
        root: Optional root node; when given the context starts positioned
            on it.
    """

    def __init__(
        self,
        namespace_context: Mapping[str, str] | None = None,
        root: XmlNode | None = None,
    ) -> None:
        self._uri_to_prefix: dict[str, str] = {
            uri: prefix for prefix, uri in (namespace_context or {}).items()
        }
        self._path: list[_Level] = [_Level("")]
        if root is not None:
            self.set_children([root])
            self.navigate_to_child(0)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def navigate_to_child(self, index: int) -> None:
        """Move to the child at 0-based ``index`` of the current level."""
        self._path.append(self._path[-1].children[index])

    def navigate_to_attribute(self, name: QName) -> None:
        self._path.append(self._path[-1].attributes[name])

    def navigate_to_parent(self) -> None:
        self._path.pop()

    @contextmanager
    def at_child(self, index: int) -> Iterator[XPathContext]:
        """Scope positioned on a child; the parent is restored on exit."""
        self.navigate_to_child(index)
        try:
            yield self
        finally:
            self.navigate_to_parent()

    @contextmanager
    def at_attribute(self, name: QName) -> Iterator[XPathContext]:
        """Scope positioned on an attribute; the element is restored on exit."""
        self.navigate_to_attribute(name)
        try:
            yield self
        finally:
            self.navigate_to_parent()

    # ------------------------------------------------------------------
    # Level population
    # ------------------------------------------------------------------

    def add_attributes(self, names: Iterable[QName]) -> None:
        for name in names:
            self.add_attribute(name)

    def add_attribute(self, name: QName) -> None:
        self._path[-1].attributes[name] = _Level(_ATTR + self._render_name(name))

    def set_children(self, children: Iterable[NodeInfo]) -> None:
        """Replace the children of the current level."""
        self._path[-1].children.clear()
        self.append_children(children)

    def append_children(self, children: Iterable[NodeInfo]) -> None:
        """Add children after the existing ones, continuing their counters."""
        current = self._path[-1]
        counters: dict[str, int] = {}
        for level in current.children:
            key = self._counter_key(level.kind, level.expression)
            if key is not None:
                counters[key] = counters.get(key, 0) + 1

        for child in children:
            kind = child.node_type
            if kind is NodeType.ELEMENT and child.name is not None:
                step = self._render_name(child.name)
            elif kind is NodeType.COMMENT:
                step = _COMMENT
            elif kind is NodeType.PROCESSING_INSTRUCTION:
                step = _PI
            elif kind.is_text_like:
                step = _TEXT
            else:
                current.children.append(_Level("", kind))
                continue
            counters[step] = counters.get(step, 0) + 1
            current.children.append(_Level(f"{step}[{counters[step]}]", kind))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    @property
    def xpath(self) -> str:
        """Location of the node currently visited."""
        return self._render(len(self._path))

    @property
    def parent_xpath(self) -> str:
        """Location of the parent of the node currently visited."""
        return self._render(len(self._path) - 1)

    def _render(self, depth: int) -> str:
        # rendered levels are cached; resume after the deepest cached one
        start = depth
        while start > 0 and self._path[start - 1].xpath is None:
            start -= 1
        rendered = ""
        if start > 0:
            rendered = self._path[start - 1].xpath or ""
        for level in self._path[start:depth]:
            prefix = rendered if rendered == _SEP else rendered + _SEP
            level.xpath = rendered = prefix + level.expression
        return rendered

    def _render_name(self, name: QName) -> str:
        prefix = None
        if name.namespace_uri is not None:
            prefix = self._uri_to_prefix.get(name.namespace_uri)
        return f"{prefix}:{name.local_name}" if prefix else name.local_name

    @staticmethod
    def _counter_key(kind: NodeType | None, expression: str) -> str | None:
        if kind is None or not expression:
            return None
        return expression[: expression.rindex("[")]
