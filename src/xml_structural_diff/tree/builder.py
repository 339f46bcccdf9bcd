"""TreeBuilder: converts lxml documents and elements into XmlNode trees.

Dispatches over the lxml node classes.  Elements are converted with an
explicit stack of pending elements, so document depth is not bounded by the
Python call stack.  Element text and the tail text of every child become
TEXT nodes in document order, so the resulting child sequence matches the
DOM view of the document.  Comments and processing instructions keep their
position; ``xmlns`` declarations are namespace bindings in lxml and never
show up as attributes.

lxml merges CDATA sections into ordinary text while parsing, so trees built
from parsed documents contain TEXT nodes only.  CDATA nodes can still be
created by hand with ``XmlNode.cdata()``.

``to_lxml()`` performs the reverse conversion for a single element.  It is
used when an XPath expression has to be evaluated against a hand-built tree
that has no lxml ``source``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from lxml import etree

from xml_structural_diff.tree.nodes import NodeType, QName, XmlNode

__all__ = ["TreeBuilder", "XmlSource", "to_lxml"]

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"

# Anything TreeBuilder.build() accepts
XmlSource = XmlNode | etree._Element | etree._ElementTree | str | bytes


def _default_parser() -> etree.XMLParser:
    return etree.XMLParser(strip_cdata=False, remove_blank_text=False)


@dataclass
class TreeBuilder:
    """Converts lxml trees (or raw XML text) into ``XmlNode`` trees.

    Dispatch:
        - ``XmlNode``          -> returned unchanged
        - ``etree._ElementTree`` -> DOCUMENT node with prolog facets
        - ``etree._Element``   -> ELEMENT (or COMMENT / PI) subtree
        - ``str`` / ``bytes``  -> parsed with lxml, then built as a DOCUMENT

    Example::

        builder = TreeBuilder()
        doc = builder.build("<foo a='1'>bar</foo>")
        # DOCUMENT -> ELEMENT(foo, @a="1") -> TEXT("bar")

    Attributes:
        parser: lxml parser used for ``str`` / ``bytes`` input.
    """

    parser: etree.XMLParser = field(default_factory=_default_parser)

    def build(self, source: Any) -> XmlNode:
        """Convert ``source`` into an ``XmlNode`` tree.

        Args:
            source: An ``XmlNode``, lxml element or element tree, or XML text.

        Returns:
            The root ``XmlNode``.

        Raises:
            TypeError: If ``source`` is none of the supported types.
            lxml.etree.XMLSyntaxError: If XML text is not well-formed.
        """
        if isinstance(source, XmlNode):
            return source
        if isinstance(source, etree._ElementTree):
            return self._build_document(source)
        if isinstance(source, etree._Element):
            return self.build_node(source)
        if isinstance(source, str | bytes):
            data = source.encode("utf-8") if isinstance(source, str) else source
            root = etree.fromstring(data, self.parser)
            return self._build_document(root.getroottree())
        msg = f"Cannot build an XML tree from {type(source).__name__}"
        raise TypeError(msg)

    def build_node(self, node: etree._Element) -> XmlNode:
        """Convert a single lxml node (element, comment, PI or entity)."""
        if isinstance(node, etree._Comment):
            return XmlNode(NodeType.COMMENT, value=node.text or "", source=node)
        if isinstance(node, etree._ProcessingInstruction):
            return XmlNode(
                NodeType.PROCESSING_INSTRUCTION,
                name=QName(node.target),
                value=node.text,
                source=node,
            )
        if isinstance(node, etree._Entity):
            return XmlNode(NodeType.TEXT, value=node.text, source=node)
        return self._build_element(node)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build_document(self, tree: etree._ElementTree) -> XmlNode:
        root = tree.getroot()
        docinfo = tree.docinfo
        doctype = None
        if docinfo.doctype:
            doctype = XmlNode.document_type(
                docinfo.root_name,
                public_id=docinfo.public_id,
                system_id=docinfo.system_url,
            )
        prolog = [self.build_node(n) for n in root.itersiblings(preceding=True)]
        prolog.reverse()
        epilog = [self.build_node(n) for n in root.itersiblings()]
        document = XmlNode(
            NodeType.DOCUMENT,
            children=[*prolog, self._build_element(root), *epilog],
            doctype=doctype,
            xml_version=docinfo.xml_version,
            xml_encoding=docinfo.encoding,
            xml_standalone=docinfo.standalone,
            source=tree,
        )
        return document

    def _build_element(self, element: etree._Element) -> XmlNode:
        root = _element_node(element)
        pending = [(element, root)]
        while pending:
            source, node = pending.pop()
            if source.text:
                node.append(XmlNode.text(source.text))
            for child in source:
                if _is_element(child):
                    child_node = _element_node(child)
                    pending.append((child, child_node))
                else:
                    child_node = self.build_node(child)
                node.append(child_node)
                if child.tail:
                    node.append(XmlNode.text(child.tail))
        return root


def _is_element(node: etree._Element) -> bool:
    return not isinstance(node, (etree._Comment, etree._ProcessingInstruction, etree._Entity))


def _element_node(element: etree._Element) -> XmlNode:
    """ELEMENT node with its attributes; children are attached by the caller."""
    tag = etree.QName(element)
    node = XmlNode(
        NodeType.ELEMENT,
        name=QName(tag.localname, tag.namespace, element.prefix),
        source=element,
    )
    for key, value in element.attrib.items():
        node.append(XmlNode.attribute(_attribute_name(element, key), value))
    return node


def _attribute_name(element: etree._Element, key: str) -> QName:
    """Resolve an lxml attribute key to a QName, recovering its prefix."""
    name = QName.parse(key)
    if name.namespace_uri is None:
        return name
    if name.namespace_uri == XML_NAMESPACE:
        return QName(name.local_name, name.namespace_uri, "xml")
    for prefix, uri in element.nsmap.items():
        if prefix is not None and uri == name.namespace_uri:
            return QName(name.local_name, name.namespace_uri, prefix)
    return name


def to_lxml(node: XmlNode) -> etree._Element:
    """Convert an ELEMENT ``XmlNode`` into a detached lxml element.

    Raises:
        TypeError: If ``node`` is not an element.
    """
    if node.node_type is not NodeType.ELEMENT or node.name is None:
        msg = f"Only element nodes can be converted, got {node.node_type}"
        raise TypeError(msg)
    nsmap = None
    if node.name.namespace_uri is not None:
        nsmap = {node.name.prefix: node.name.namespace_uri}
    element = etree.Element(node.name.clark, nsmap=nsmap)
    for name, attribute in node.attribute_map().items():
        element.set(name.clark, attribute.read_value().value or "")
    last: etree._Element | None = None
    for child in node.children:
        if child.is_text_like:
            text = child.read_value().value or ""
            if last is None:
                element.text = (element.text or "") + text
            else:
                last.tail = (last.tail or "") + text
            continue
        if child.node_type is NodeType.ELEMENT:
            last = to_lxml(child)
        elif child.node_type is NodeType.COMMENT:
            last = etree.Comment(child.read_value().value or "")
        elif child.node_type is NodeType.PROCESSING_INSTRUCTION:
            last = etree.ProcessingInstruction(child.node_name, child.value)
        else:
            continue
        element.append(last)
    return element
