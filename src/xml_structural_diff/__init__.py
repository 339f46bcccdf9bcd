"""xml-structural-diff - structural comparison of XML documents."""

from __future__ import annotations

from xml_structural_diff.api import compare, is_identical, is_similar
from xml_structural_diff.comparator import XmlComparator
from xml_structural_diff.engine import (
    Comparison,
    ComparisonResult,
    ComparisonType,
    DefaultNodeMatcher,
    Detail,
    DiffConfig,
    PositionalNodeMatcher,
)
from xml_structural_diff.errors import (
    ConfigurationError,
    NodeAccessError,
    PlaceholderError,
    XmlDiffError,
)
from xml_structural_diff.formatter import ComparisonFormatter
from xml_structural_diff.result import Diff, Difference
from xml_structural_diff.tree import NodeType, QName, XmlNode

__version__: str = "0.1.0"
__all__: list[str] = [
    "Comparison",
    "ComparisonFormatter",
    "ComparisonResult",
    "ComparisonType",
    "ConfigurationError",
    "DefaultNodeMatcher",
    "Detail",
    "Diff",
    "DiffConfig",
    "Difference",
    "NodeAccessError",
    "NodeType",
    "PlaceholderError",
    "PositionalNodeMatcher",
    "QName",
    "XmlComparator",
    "XmlDiffError",
    "XmlNode",
    "compare",
    "is_identical",
    "is_similar",
]
