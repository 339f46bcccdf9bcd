"""Comparison records and the severity model.

A ``Comparison`` is one atomic fact checked between a control node and a
test node.  The engine creates a fresh record for every fact, computes an
initial ``ComparisonResult`` (EQUAL when the two extracted values are equal,
DIFFERENT otherwise) and hands both to the difference evaluator and the
listeners.  Records are frozen: evaluators and listeners may inspect them but
never change them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, StrEnum, auto
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from xml_structural_diff.tree.nodes import XmlNode

__all__ = ["Comparison", "ComparisonResult", "ComparisonType", "Detail"]


class ComparisonType(StrEnum):
    """Closed set of comparison kinds the engine emits.

    The engine dispatches on node types, never on these values, so adding a
    kind means adding the step that emits it.
    """

    XML_VERSION = auto()
    XML_STANDALONE = auto()
    XML_ENCODING = auto()
    HAS_DOCTYPE_DECLARATION = auto()
    DOCTYPE_NAME = auto()
    DOCTYPE_PUBLIC_ID = auto()
    DOCTYPE_SYSTEM_ID = auto()
    SCHEMA_LOCATION = auto()
    NO_NAMESPACE_SCHEMA_LOCATION = auto()
    NODE_TYPE = auto()
    NAMESPACE_PREFIX = auto()
    NAMESPACE_URI = auto()
    TEXT_VALUE = auto()
    CDATA_VALUE = auto()
    COMMENT_VALUE = auto()
    PROCESSING_INSTRUCTION_TARGET = auto()
    PROCESSING_INSTRUCTION_DATA = auto()
    ELEMENT_TAG_NAME = auto()
    ELEMENT_NUM_ATTRIBUTES = auto()
    ATTR_VALUE = auto()
    CHILD_NODELIST_LENGTH = auto()
    CHILD_NODELIST_SEQUENCE = auto()
    CHILD_LOOKUP = auto()
    ATTR_NAME_LOOKUP = auto()

    @property
    def description(self) -> str:
        """Human readable name used when rendering differences."""
        return _DESCRIPTIONS.get(self, self.name.lower().replace("_", " "))

    @property
    def is_doctype_comparison(self) -> bool:
        return self in _DOCTYPE_COMPARISONS


_DESCRIPTIONS: dict[ComparisonType, str] = {
    ComparisonType.ATTR_VALUE: "attribute value",
    ComparisonType.CDATA_VALUE: "CDATA section value",
    ComparisonType.CHILD_LOOKUP: "child",
    ComparisonType.ATTR_NAME_LOOKUP: "attribute name",
    ComparisonType.ELEMENT_NUM_ATTRIBUTES: "number of attributes",
}

_DOCTYPE_COMPARISONS = frozenset(
    {
        ComparisonType.HAS_DOCTYPE_DECLARATION,
        ComparisonType.DOCTYPE_NAME,
        ComparisonType.DOCTYPE_PUBLIC_ID,
        ComparisonType.DOCTYPE_SYSTEM_ID,
    }
)


class ComparisonResult(IntEnum):
    """Totally ordered severity of a single comparison.

    CRITICAL is a transient marker: it stops the remaining comparisons of the
    current node pair and is reported to listeners as DIFFERENT.
    """

    EQUAL = 0
    SIMILAR = 1
    DIFFERENT = 2
    CRITICAL = 3

    def collapse(self) -> ComparisonResult:
        """Return the user-visible result (CRITICAL becomes DIFFERENT)."""
        if self is ComparisonResult.CRITICAL:
            return ComparisonResult.DIFFERENT
        return self


@dataclass(frozen=True, slots=True)
class Detail:
    """One side of a comparison.

    Attributes:
        target:       The node (or attribute) involved, None when the side has
                      no counterpart.
        xpath:        Rendered position of ``target``, None when absent.
        value:        The extracted value that was compared.
        parent_xpath: Rendered position of the parent of ``target``.
    """

    target: XmlNode | None
    xpath: str | None
    value: Any
    parent_xpath: str | None = None


@dataclass(frozen=True, slots=True)
class Comparison:
    """An atomic fact checked between the control and the test tree."""

    comparison_type: ComparisonType
    control: Detail
    test: Detail
