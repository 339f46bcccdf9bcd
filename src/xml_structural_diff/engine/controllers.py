"""Comparison controllers: decide whether a difference ends the whole run.

A controller is called with every difference (final result SIMILAR or
DIFFERENT).  When it returns True the engine stops: no further comparison
is performed anywhere in the tree, and the ``Diff`` contains the
differences found so far, the stopping one included.  This is a global
stop, unlike CRITICAL results, which only end the current node pair.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from xml_structural_diff.engine.comparison import ComparisonResult

if TYPE_CHECKING:
    from xml_structural_diff.result import Difference

__all__ = ["never_stop", "stop_when_different", "stop_when_similar"]


def never_stop(difference: Difference) -> bool:
    """Compare the whole tree (default)."""
    return False


def stop_when_different(difference: Difference) -> bool:
    """Stop at the first DIFFERENT result."""
    return difference.result is ComparisonResult.DIFFERENT


def stop_when_similar(difference: Difference) -> bool:
    """Stop at the first non-EQUAL result."""
    return difference.result is not ComparisonResult.EQUAL
