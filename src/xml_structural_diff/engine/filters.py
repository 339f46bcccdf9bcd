"""Node and attribute filters.

Filters decide which children and attributes take part in a comparison.
Filtered-out nodes are invisible to the child pairing policy and to the
CHILD_NODELIST_LENGTH comparison, but they still occupy their position when
XPath locations are rendered, so reported paths match the source document.

Text left adjacent once a node between two text runs has been filtered out is
merged again, so ``x<!--c-->y`` without its comment compares like ``xy``.
The merged node reports the location of its first part.
"""

from __future__ import annotations

from xml_structural_diff.tree.nodes import NodeType, XmlNode

__all__ = [
    "accept_all",
    "accept_all_attributes",
    "ignore_comments",
    "ignore_processing_instructions",
    "ignore_whitespace_text",
]


def accept_all(node: XmlNode) -> bool:
    return True


def accept_all_attributes(attribute: XmlNode) -> bool:
    return True


def ignore_comments(node: XmlNode) -> bool:
    return node.node_type is not NodeType.COMMENT


def ignore_processing_instructions(node: XmlNode) -> bool:
    return node.node_type is not NodeType.PROCESSING_INSTRUCTION


def ignore_whitespace_text(node: XmlNode) -> bool:
    """Drop text nodes consisting only of whitespace (indentation)."""
    if not node.is_text_like or node.loader is not None:
        return True
    return bool((node.value or "").strip())
