"""ComparisonFormatter: one-line descriptions of comparison records.

Used by ``Diff.render()``.  A description names the comparison kind, the
two compared values and a short rendering of both targets with their
locations, e.g.::

    Expected text value 'bar' but was 'baz' - comparing <foo ...>bar</foo>
    at /foo[1]/text()[1] to <foo ...>baz</foo> at /foo[1]/text()[1]
"""

from __future__ import annotations

from typing import Any

from xml_structural_diff.engine.comparison import Comparison, ComparisonType
from xml_structural_diff.tree.nodes import NodeType, XmlNode

__all__ = ["ComparisonFormatter"]


class ComparisonFormatter:
    """Renders ``Comparison`` records as single-line text."""

    def describe(self, comparison: Comparison) -> str:
        kind = comparison.comparison_type
        control = self.short_string(comparison.control.target, comparison.control.xpath, kind)
        test = self.short_string(comparison.test.target, comparison.test.xpath, kind)
        if kind is ComparisonType.ATTR_NAME_LOOKUP:
            return (
                f"Expected {kind.description} '{comparison.control.xpath}'"
                f" - comparing {control} to {test}"
            )
        return (
            f"Expected {kind.description} '{_value(comparison.control.value)}'"
            f" but was '{_value(comparison.test.value)}'"
            f" - comparing {control} to {test}"
        )

    def short_string(self, node: XmlNode | None, xpath: str | None, kind: ComparisonType) -> str:
        """Compact rendering of ``node`` followed by its location."""
        if node is None:
            text = "<NULL>"
        elif kind is ComparisonType.HAS_DOCTYPE_DECLARATION and node.node_type is NodeType.DOCUMENT:
            text = _doctype(node.doctype) + _root_indication(node)
        elif node.node_type is NodeType.DOCUMENT:
            text = _xml_declaration(node) + _root_indication(node)
        elif node.node_type is NodeType.DOCUMENT_TYPE:
            text = _doctype(node) + (_root_indication(node.parent) if node.parent else "")
        elif node.node_type is NodeType.ATTRIBUTE:
            owner = node.parent.node_name if node.parent else ""
            text = f'<{owner} {node.node_name}="{node.read_value().value}"...>'
        elif node.node_type is NodeType.ELEMENT:
            text = f"<{node.node_name}...>"
        elif node.is_text_like:
            parent = node.parent.node_name if node.parent else ""
            value = node.read_value().value or ""
            if node.node_type is NodeType.CDATA:
                value = f"<![CDATA[{value}]]>"
            text = f"<{parent} ...>{value}</{parent}>"
        elif node.node_type is NodeType.COMMENT:
            text = f"<!--{node.read_value().value}-->"
        else:
            text = f"<?{node.node_name} {node.read_value().value or ''}?>"
        if xpath:
            text += f" at {xpath}"
        return text


def _value(value: Any) -> str:
    if value is None:
        return "null"
    return str(value)


def _xml_declaration(document: XmlNode) -> str:
    if document.xml_version in (None, "1.0") and document.xml_encoding is None and not document.xml_standalone:
        return ""
    parts = [f'<?xml version="{document.xml_version or "1.0"}"']
    if document.xml_encoding is not None:
        parts.append(f' encoding="{document.xml_encoding}"')
    if document.xml_standalone:
        parts.append(' standalone="yes"')
    parts.append("?>")
    return "".join(parts)


def _doctype(doctype: XmlNode | None) -> str:
    if doctype is None:
        return ""
    parts = [f"<!DOCTYPE {doctype.node_name}"]
    if doctype.public_id:
        parts.append(f' PUBLIC "{doctype.public_id}"')
    if doctype.system_id:
        if not doctype.public_id:
            parts.append(" SYSTEM")
        parts.append(f' "{doctype.system_id}"')
    parts.append(">")
    return "".join(parts)


def _root_indication(document: XmlNode) -> str:
    root = document.root_element
    return f"<{root.node_name}...>" if root is not None else ""
