"""Placeholder wildcards inside control documents.

A control text or attribute value consisting solely of a placeholder such as
``${xmldiff.ignore}`` or ``${xmldiff.matchesRegex(^\\d+$)}`` is not compared
literally; the keyword's handler decides whether the test value is
acceptable instead.

Supported keywords:

- ``ignore``: anything is accepted, including a missing text node or a
  missing attribute on the test side.
- ``isNumber``: the test value is a decimal or scientific number.
- ``matchesRegex(pattern)``: ``re.search(pattern, test_value)`` succeeds.
- ``isDateTime`` / ``isDateTime(format)``: the test value parses as an ISO
  8601 date or date-time, or with the given ``strptime`` format.

Example::

    from xml_structural_diff import DiffConfig, compare
    from xml_structural_diff.placeholders import PlaceholderDifferenceEvaluator

    config = DiffConfig(difference_evaluator=PlaceholderDifferenceEvaluator())
    compare("<a>${xmldiff.isNumber}</a>", "<a>42</a>", config).is_identical()  # True
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from datetime import datetime

from xml_structural_diff.engine.comparison import Comparison, ComparisonResult, ComparisonType
from xml_structural_diff.errors import PlaceholderError
from xml_structural_diff.tree.nodes import NodeType

__all__ = ["HANDLERS", "PlaceholderDifferenceEvaluator", "PlaceholderHandler"]

logger = logging.getLogger(__name__)

PlaceholderHandler = Callable[[str | None, tuple[str, ...]], ComparisonResult]

_NUMBER = re.compile(r"^[-+]?[0-9]*\.?[0-9]+([eE][-+]?[0-9]+)?$")
_KEYWORD = re.compile(r"^(\w+)\s*(?:\((.*)\))?$", re.DOTALL)
_FALLBACK_DATE_FORMATS = ("%m/%d/%y", "%m/%d/%y %H:%M", "%d.%m.%Y", "%d.%m.%Y %H:%M")


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _ignore(test_text: str | None, args: tuple[str, ...]) -> ComparisonResult:
    return ComparisonResult.EQUAL


def _is_number(test_text: str | None, args: tuple[str, ...]) -> ComparisonResult:
    if test_text is not None and _NUMBER.match(test_text.strip()):
        return ComparisonResult.EQUAL
    return ComparisonResult.DIFFERENT


def _matches_regex(test_text: str | None, args: tuple[str, ...]) -> ComparisonResult:
    if not args or not args[0]:
        return ComparisonResult.DIFFERENT
    try:
        pattern = re.compile(args[0].strip())
    except re.error as exc:
        msg = f"Invalid regular expression in placeholder: {args[0]!r} ({exc})"
        raise PlaceholderError(msg) from exc
    if test_text is not None and pattern.search(test_text.strip()):
        return ComparisonResult.EQUAL
    return ComparisonResult.DIFFERENT


def _is_date_time(test_text: str | None, args: tuple[str, ...]) -> ComparisonResult:
    if not test_text:
        return ComparisonResult.DIFFERENT
    text = test_text.strip()
    formats = args[:1] if args else _FALLBACK_DATE_FORMATS
    if not args:
        try:
            datetime.fromisoformat(text)
        except ValueError:
            pass
        else:
            return ComparisonResult.EQUAL
    for fmt in formats:
        try:
            datetime.strptime(text, fmt)
        except ValueError:
            continue
        return ComparisonResult.EQUAL
    return ComparisonResult.DIFFERENT


HANDLERS: Mapping[str, PlaceholderHandler] = {
    "ignore": _ignore,
    "isNumber": _is_number,
    "matchesRegex": _matches_regex,
    "isDateTime": _is_date_time,
}


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


class PlaceholderDifferenceEvaluator:
    """Difference evaluator resolving placeholders found in control values.

    Args:
        opening: Literal opening delimiter.  Defaults to ``${``.
        closing: Literal closing delimiter.  Defaults to ``}``.
        handlers: Keyword -> handler registry.  Defaults to ``HANDLERS``.

    Comparisons without a recognized placeholder keep their outcome, so the
    evaluator can be chained with others via ``evaluators.chain``.
    """

    def __init__(
        self,
        opening: str | None = None,
        closing: str | None = None,
        handlers: Mapping[str, PlaceholderHandler] | None = None,
    ) -> None:
        opening = opening if opening and opening.strip() else "${"
        closing = closing if closing and closing.strip() else "}"
        self._pattern = re.compile(
            r"(\s*" + re.escape(opening) + r"\s*xmldiff\.(.+)\s*" + re.escape(closing) + r"\s*)",
            re.DOTALL,
        )
        self._handlers: Mapping[str, PlaceholderHandler] = dict(handlers or HANDLERS)

    def __call__(self, comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
        kind = comparison.comparison_type
        control, test = comparison.control, comparison.test

        if kind in (ComparisonType.TEXT_VALUE, ComparisonType.ATTR_VALUE):
            return self._evaluate(control.value, test.value, outcome)

        if kind is ComparisonType.CHILD_NODELIST_LENGTH:
            target = control.target
            if control.value == 1 and test.value == 0 and target is not None and target.children:
                first = target.children[0]
                if first.is_text_like:
                    return self._evaluate(first.read_value().value, None, outcome)
            return outcome

        if kind is ComparisonType.CHILD_LOOKUP:
            target = control.target
            if target is not None and test.target is None and target.is_text_like:
                return self._evaluate(target.read_value().value, None, outcome)
            return outcome

        if kind is ComparisonType.NODE_TYPE:
            if control.target is not None and test.target is not None:
                if control.target.is_text_like and test.target.is_text_like:
                    return self._evaluate(
                        control.target.read_value().value, test.target.read_value().value, outcome
                    )
            return outcome

        if kind is ComparisonType.ATTR_NAME_LOOKUP:
            target = control.target
            if target is not None and target.node_type is NodeType.ATTRIBUTE and test.value is False:
                return self._evaluate(target.read_value().value, None, outcome, ignore_only=True)
            return outcome

        if kind is ComparisonType.ELEMENT_NUM_ATTRIBUTES:
            if control.target is None or test.target is None:
                return outcome
            present = {a.name for a in test.target.attributes}
            ignored = sum(
                1
                for attribute in control.target.attributes
                if attribute.name not in present and self._is_ignored(attribute.read_value().value)
            )
            if ignored and control.value - ignored == test.value:
                return ComparisonResult.EQUAL
            return outcome

        return outcome

    def _is_ignored(self, control_text: str | None) -> bool:
        """Whether ``control_text`` is an ``ignore`` placeholder."""
        found = self._evaluate(control_text, None, ComparisonResult.DIFFERENT, ignore_only=True)
        return found is ComparisonResult.EQUAL

    def _evaluate(
        self,
        control_text: str | None,
        test_text: str | None,
        outcome: ComparisonResult,
        ignore_only: bool = False,
    ) -> ComparisonResult:
        if control_text is None:
            return outcome
        found = self._pattern.search(control_text)
        if found is None:
            return outcome
        parsed = _KEYWORD.match(found.group(2).strip())
        if parsed is None:
            return outcome
        keyword, raw_args = parsed.group(1), parsed.group(2)
        handler = self._handlers.get(keyword)
        if handler is None:
            logger.debug("Unknown placeholder keyword %r left uninterpreted", keyword)
            return outcome
        if found.group(1).strip() != control_text.strip():
            msg = f"The placeholder must exclusively occupy the value: {control_text!r}"
            raise PlaceholderError(msg)
        if ignore_only and keyword != "ignore":
            return outcome
        args = (raw_args,) if raw_args is not None else ()
        return handler(test_text, args)
