"""Public API functions for xml-structural-diff.

This module provides the three user-facing functions: compare, is_identical
and is_similar.  Each call creates a fresh XmlComparator so that no state
survives between calls.
"""

from __future__ import annotations

from typing import Any

from xml_structural_diff.comparator import XmlComparator
from xml_structural_diff.engine.config import DiffConfig
from xml_structural_diff.result import Diff

__all__ = ["compare", "is_identical", "is_similar"]


def compare(
    control: Any,
    test: Any,
    config: DiffConfig | None = None,
) -> Diff:
    """Compare two XML trees and return a ``Diff``.

    Args:
        control: Expected tree (``XmlNode``, lxml element or tree, XML text).
        test:    Actual tree.
        config:  Strategies and listeners.  Defaults to ``DiffConfig()`` when None.

    Returns:
        A ``Diff`` holding every non-EQUAL comparison in traversal order.
    """
    comparator = XmlComparator(config=config)
    return comparator.compare(control, test)


def is_identical(
    control: Any,
    test: Any,
    config: DiffConfig | None = None,
) -> bool:
    """Return True if every comparison between the two trees is EQUAL."""
    return compare(control, test, config=config).is_identical()


def is_similar(
    control: Any,
    test: Any,
    config: DiffConfig | None = None,
) -> bool:
    """Return True if the two trees differ at most in SIMILAR ways.

    With the default evaluator nothing is ever SIMILAR, so pass a config with
    e.g. ``evaluators.downgrade_cosmetic_differences`` to tolerate prefixes,
    CDATA versus text and the like.
    """
    return not compare(control, test, config=config).has_differences()
