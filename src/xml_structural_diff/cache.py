"""XPathCache: LRU cache of compiled lxml XPath expressions.

Selectors built with ``element_selectors.by_xpath`` evaluate the same
expression for every candidate element pair.  Compiling an
``lxml.etree.XPath`` object once per ``(expression, namespaces)`` key and
reusing it keeps pairing large child lists cheap.  LRU eviction is silent
when ``max_size`` is exceeded.

Each ``XPathCache`` instance maintains its own ``LRUCache``; the module
level ``default_cache`` only holds compiled expressions, never comparison
results, so sharing it between comparisons does not leak state.

Example::

    from xml_structural_diff.cache import XPathCache

    cache = XPathCache(max_size=64)
    xpath = cache.compile("./name", {})
    xpath(element)
"""

from __future__ import annotations

import threading
from collections.abc import Mapping

from cachetools import LRUCache
from lxml import etree

from xml_structural_diff.errors import ConfigurationError

__all__ = ["XPathCache", "default_cache"]


class XPathCache:
    """LRU-backed store of compiled XPath expressions.

    Args:
        max_size: Maximum number of compiled expressions to keep.  Defaults
            to 256.
    """

    def __init__(self, max_size: int = 256) -> None:
        self._cache: LRUCache[tuple[str, frozenset[tuple[str, str]]], etree.XPath] = LRUCache(
            maxsize=max_size
        )
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def max_size(self) -> int:
        """The maximum number of entries this cache can hold."""
        return int(self._cache.maxsize)

    @property
    def curr_size(self) -> int:
        """The current number of entries stored in the cache."""
        return int(self._cache.currsize)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def compile(self, expression: str, namespaces: Mapping[str, str] | None = None) -> etree.XPath:
        """Return the compiled form of ``expression``, compiling it on a miss.

        Args:
            expression: XPath 1.0 expression.
            namespaces: Prefix -> URI bindings available to the expression.

        Returns:
            A callable ``lxml.etree.XPath`` object.

        Raises:
            ConfigurationError: If the expression does not compile.
        """
        bindings = dict(namespaces or {})
        key = (expression, frozenset(bindings.items()))
        with self._lock:
            compiled = self._cache.get(key)
        if compiled is not None:
            return compiled
        try:
            compiled = etree.XPath(expression, namespaces=bindings)
        except etree.XPathError as exc:
            msg = f"invalid XPath expression {expression!r}: {exc}"
            raise ConfigurationError(msg) from exc
        with self._lock:
            self._cache[key] = compiled
        return compiled


default_cache = XPathCache()
