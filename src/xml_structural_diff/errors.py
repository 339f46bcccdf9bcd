"""Exception hierarchy for xml-structural-diff.

Comparison outcomes are never reported through exceptions: every
discrepancy between two trees is returned as data on the ``Diff``.  The
classes below cover the remaining failure modes:

- ``ConfigurationError``: a strategy, listener, or parameter was rejected
  while setting up a comparison (raised synchronously, before any traversal).
- ``NodeAccessError``: reading a node from the tree abstraction failed.
  Raised by lazy value loaders; the engine absorbs it at the fetch boundary
  and records the affected comparison as DIFFERENT.
- ``PlaceholderError``: a placeholder expression in the control document is
  malformed.
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "NodeAccessError",
    "PlaceholderError",
    "XmlDiffError",
]


class XmlDiffError(Exception):
    """Base class for all errors raised by xml-structural-diff."""


class ConfigurationError(XmlDiffError, ValueError):
    """Raised when a comparison is configured with an invalid value."""


class NodeAccessError(XmlDiffError):
    """Raised when a value cannot be read from the tree abstraction."""


class PlaceholderError(XmlDiffError):
    """Raised when a placeholder expression cannot be evaluated."""
