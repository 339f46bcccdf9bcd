"""XmlNode dataclass, QName value type and NodeType StrEnum.

Provides the read-only tree abstraction the comparison engine walks.  Trees
are usually produced by ``TreeBuilder`` from lxml documents, but they can be
assembled by hand through the ``XmlNode`` constructors, which is convenient
in tests and for callers that already hold XML in another representation.

Node values may be computed lazily through a ``loader``.  Reading a value
goes through ``XmlNode.read_value()``, which never raises: a failing loader
is reported as a ``Fetched`` carrying the error, so the engine can record
the affected comparison as DIFFERENT instead of aborting the traversal.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Any

__all__ = ["Fetched", "NodeType", "QName", "XmlNode"]

logger = logging.getLogger(__name__)


class NodeType(StrEnum):
    """Enumeration of the node kinds the engine understands.

    StrEnum values are the lowercased member names:
    - ELEMENT                -> "element"
    - ATTRIBUTE              -> "attribute"
    - TEXT                   -> "text"
    - CDATA                  -> "cdata"
    - COMMENT                -> "comment"
    - PROCESSING_INSTRUCTION -> "processing_instruction"
    - DOCUMENT               -> "document"
    - DOCUMENT_TYPE          -> "document_type"
    """

    ELEMENT = auto()
    ATTRIBUTE = auto()
    TEXT = auto()
    CDATA = auto()
    COMMENT = auto()
    PROCESSING_INSTRUCTION = auto()
    DOCUMENT = auto()
    DOCUMENT_TYPE = auto()

    @property
    def is_text_like(self) -> bool:
        """True for TEXT and CDATA, which carry interchangeable character data."""
        return self in (NodeType.TEXT, NodeType.CDATA)


@dataclass(frozen=True, slots=True)
class QName:
    """Namespace-qualified name.

    Equality and hashing use ``namespace_uri`` and ``local_name`` only; the
    ``prefix`` is informational (it is compared separately as a
    NAMESPACE_PREFIX comparison).  An empty namespace URI is normalised to
    None.

    Attributes:
        local_name:    Name without prefix.
        namespace_uri: Namespace URI, or None for the null namespace.
        prefix:        Prefix used in the source document, if any.
    """

    local_name: str
    namespace_uri: str | None = None
    prefix: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.local_name:
            msg = "local_name must be a non-empty string"
            raise ValueError(msg)
        if self.namespace_uri == "":
            object.__setattr__(self, "namespace_uri", None)

    @classmethod
    def parse(cls, name: str | QName, prefix: str | None = None) -> QName:
        """Build a QName from Clark notation (``{uri}local``) or a plain name."""
        if isinstance(name, QName):
            return name
        if name.startswith("{"):
            uri, _, local = name[1:].partition("}")
            return cls(local, uri, prefix)
        return cls(name, None, prefix)

    @property
    def clark(self) -> str:
        """Clark notation, ``{uri}local`` or just ``local``."""
        if self.namespace_uri is None:
            return self.local_name
        return f"{{{self.namespace_uri}}}{self.local_name}"

    @property
    def prefixed_name(self) -> str:
        """The name as written in the source document (``prefix:local``)."""
        if self.prefix:
            return f"{self.prefix}:{self.local_name}"
        return self.local_name

    def __str__(self) -> str:
        return self.clark


@dataclass(frozen=True, slots=True)
class Fetched:
    """Outcome of reading a node value.

    Attributes:
        value: The value read, or None when the read failed.
        error: The exception raised by the loader, or None on success.
    """

    value: str | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True, eq=False)
class XmlNode:
    """A node in the XML tree representation.

    Nodes compare and hash by identity: two structurally equal subtrees are
    still distinct nodes, which is what child pairing and residual tracking
    rely on.

    Attributes:
        node_type:      Which kind of node this is (see NodeType).
        name:           QName for elements and attributes, the target (as a
                        QName without namespace) for processing instructions
                        and the root element name for doctype nodes.
        value:          Character data for text-like nodes and comments,
                        attribute value, processing instruction data.
        children:       Ordered child nodes.
        attributes:     Ordered ATTRIBUTE nodes of an element.
        doctype:        DOCUMENT_TYPE node of a document, if declared.
        public_id:      Public identifier of a DOCUMENT_TYPE node.
        system_id:      System identifier of a DOCUMENT_TYPE node.
        xml_version:    XML declaration version of a document.
        xml_encoding:   XML declaration encoding of a document.
        xml_standalone: XML declaration standalone flag of a document.
        loader:         Optional zero-argument callable producing the value
                        on demand.  Takes precedence over ``value``.
        source:         The object this node was built from (an lxml element
                        or tree), used for XPath evaluation.
        parent:         Back-reference set when the node is attached.
    """

    node_type: NodeType
    name: QName | None = None
    value: str | None = None
    children: list[XmlNode] = field(default_factory=list)
    attributes: list[XmlNode] = field(default_factory=list)
    doctype: XmlNode | None = None
    public_id: str | None = None
    system_id: str | None = None
    xml_version: str | None = None
    xml_encoding: str | None = None
    xml_standalone: bool | None = None
    loader: Callable[[], str | None] | None = field(default=None, repr=False)
    source: Any = field(default=None, repr=False)
    parent: XmlNode | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.node_type in (NodeType.ELEMENT, NodeType.ATTRIBUTE) and self.name is None:
            msg = f"{self.node_type} nodes require a name"
            raise ValueError(msg)
        for child in self.children:
            child.parent = self
        for attribute in self.attributes:
            attribute.parent = self
        if self.doctype is not None:
            self.doctype.parent = self

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def element(
        cls,
        name: str | QName,
        attributes: Mapping[str | QName, str] | None = None,
        children: Iterable[XmlNode] = (),
        prefix: str | None = None,
    ) -> XmlNode:
        """Create an element.  ``name`` and attribute names accept Clark notation."""
        attrs = [
            cls.attribute(attr_name, attr_value)
            for attr_name, attr_value in (attributes or {}).items()
        ]
        return cls(
            NodeType.ELEMENT,
            name=QName.parse(name, prefix),
            children=list(children),
            attributes=attrs,
        )

    @classmethod
    def attribute(cls, name: str | QName, value: str | None) -> XmlNode:
        return cls(NodeType.ATTRIBUTE, name=QName.parse(name), value=value)

    @classmethod
    def text(cls, value: str) -> XmlNode:
        return cls(NodeType.TEXT, value=value)

    @classmethod
    def cdata(cls, value: str) -> XmlNode:
        return cls(NodeType.CDATA, value=value)

    @classmethod
    def comment(cls, value: str) -> XmlNode:
        return cls(NodeType.COMMENT, value=value)

    @classmethod
    def processing_instruction(cls, target: str, data: str | None = None) -> XmlNode:
        return cls(NodeType.PROCESSING_INSTRUCTION, name=QName(target), value=data)

    @classmethod
    def document_type(
        cls,
        name: str,
        public_id: str | None = None,
        system_id: str | None = None,
    ) -> XmlNode:
        return cls(
            NodeType.DOCUMENT_TYPE,
            name=QName(name),
            public_id=public_id,
            system_id=system_id,
        )

    @classmethod
    def document(
        cls,
        *children: XmlNode,
        doctype: XmlNode | None = None,
        xml_version: str = "1.0",
        xml_encoding: str | None = None,
        xml_standalone: bool | None = None,
    ) -> XmlNode:
        """Create a document node holding the root element plus any prolog/epilog nodes."""
        return cls(
            NodeType.DOCUMENT,
            children=list(children),
            doctype=doctype,
            xml_version=xml_version,
            xml_encoding=xml_encoding,
            xml_standalone=xml_standalone,
        )

    # ------------------------------------------------------------------
    # Tree access
    # ------------------------------------------------------------------

    def append(self, child: XmlNode) -> XmlNode:
        """Attach ``child`` as the last child (or attribute) and return it."""
        child.parent = self
        if child.node_type is NodeType.ATTRIBUTE:
            self.attributes.append(child)
        else:
            self.children.append(child)
        return child

    def read_value(self) -> Fetched:
        """Return this node's value without raising.

        Loader failures are logged and returned as ``Fetched(error=...)``.
        """
        if self.loader is None:
            return Fetched(self.value)
        try:
            return Fetched(self.loader())
        except Exception as exc:  # noqa: BLE001 - collaborator boundary
            logger.warning("Could not read value of %s node: %s", self.node_type, exc)
            return Fetched(error=exc)

    @property
    def is_text_like(self) -> bool:
        return self.node_type.is_text_like

    @property
    def node_name(self) -> str:
        """DOM-style node name (``prefix:local``, ``#text``, PI target, ...)."""
        if self.node_type is NodeType.TEXT:
            return "#text"
        if self.node_type is NodeType.CDATA:
            return "#cdata-section"
        if self.node_type is NodeType.COMMENT:
            return "#comment"
        if self.node_type is NodeType.DOCUMENT:
            return "#document"
        return self.name.prefixed_name if self.name is not None else ""

    @property
    def root_element(self) -> XmlNode | None:
        """First element child, i.e. the document element of a document node."""
        return next(self.element_children(), None)

    def element_children(self) -> Iterator[XmlNode]:
        return (c for c in self.children if c.node_type is NodeType.ELEMENT)

    def get_attribute(self, name: str | QName) -> XmlNode | None:
        """Look up an attribute node by QName (Clark notation accepted)."""
        key = QName.parse(name)
        for attribute in self.attributes:
            if attribute.name == key:
                return attribute
        return None

    def attribute_map(self) -> dict[QName, XmlNode]:
        """Attributes keyed by QName, in declaration order."""
        return {a.name: a for a in self.attributes if a.name is not None}

    def lookup_namespace_uri(self, prefix: str | None) -> str | None:
        """Namespace URI bound to ``prefix`` where this node sits, or None.

        Nodes built from lxml answer from the namespace map of their source
        element.  Hand-built trees carry no declarations, so the binding is
        inferred from the prefixes used by element and attribute names on
        the way up to the root.  ``prefix=None`` asks for the default
        namespace.
        """
        node: XmlNode | None = self
        while node is not None:
            nsmap = getattr(node.source, "nsmap", None)
            if isinstance(nsmap, Mapping):
                return nsmap.get(prefix)
            if node.node_type is NodeType.ELEMENT and node.name is not None:
                if node.name.prefix == prefix:
                    return node.name.namespace_uri
                for attribute in node.attributes:
                    name = attribute.name
                    if prefix is not None and name is not None and name.prefix == prefix:
                        return name.namespace_uri
            node = node.parent
        return None

    def merged_text(self) -> Fetched:
        """Concatenate the values of all direct TEXT and CDATA children."""
        parts: list[str] = []
        for child in self.children:
            if not child.is_text_like:
                continue
            fetched = child.read_value()
            if not fetched.ok:
                return fetched
            if fetched.value is not None:
                parts.append(fetched.value)
        return Fetched("".join(parts))
