"""Tree subpackage: the read-only node abstraction the engine walks.

Re-exports the public API for the tree module:
- XmlNode: dataclass representing a node in the XML tree
- NodeType: StrEnum of the node kinds
- QName: namespace-qualified name value
- Fetched: result of a fallible node value read
- TreeBuilder: converts lxml trees or XML text into XmlNode trees
"""

from xml_structural_diff.tree.builder import TreeBuilder, XmlSource, to_lxml
from xml_structural_diff.tree.nodes import Fetched, NodeType, QName, XmlNode

__all__ = [
    "Fetched",
    "NodeType",
    "QName",
    "TreeBuilder",
    "XmlNode",
    "XmlSource",
    "to_lxml",
]
