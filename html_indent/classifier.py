"""Inline/block classification of element names."""

from __future__ import annotations

import re
from collections.abc import Iterable

from .constants import DEFAULT_INLINE_ELEMENTS
from .exceptions import InvalidArgumentError
from .models import ElementType


def coerce_element_type(kind: object) -> ElementType:
    """Resolve an element type from an `ElementType` member or its value.

    Args:
        kind: `ElementType.BLOCK`, `ElementType.INLINE`, ``"block"`` or
            ``"inline"``.

    Returns:
        ElementType: The matching member.

    Raises:
        InvalidArgumentError: If `kind` names no element type.

    Examples:
        coerce_element_type("inline")  # ElementType.INLINE
    """
    if isinstance(kind, ElementType):
        return kind
    try:
        return ElementType(kind)
    except ValueError as error:
        raise InvalidArgumentError(f"Unrecognized element type: {kind!r}") from error


def _ensure_element_name(name: object) -> str:
    if not isinstance(name, str) or not name:
        raise InvalidArgumentError(f"Element name must be a non-empty string, got {name!r}")
    return name


class TagClassifier:
    """Set of element names whose `<tag>text</tag>` runs stay inline.

    Names are matched exactly and case-sensitively.

    Examples:
        classifier = TagClassifier()
        classifier.reclassify("b", ElementType.BLOCK)
        classifier.is_inline("b")  # False
    """

    def __init__(self, inline_elements: Iterable[str] = DEFAULT_INLINE_ELEMENTS):
        self._inline = {_ensure_element_name(name) for name in inline_elements}

    def is_inline(self, name: str) -> bool:
        return name in self._inline

    def reclassify(self, name: str, kind: ElementType | str) -> None:
        """Move an element name between the inline and block sets.

        Args:
            name: Element name, e.g. ``"b"``.
            kind: Target classification.

        Raises:
            InvalidArgumentError: If `kind` is unrecognized or `name` is empty.
        """
        element_type = coerce_element_type(kind)
        name = _ensure_element_name(name)

        if element_type is ElementType.BLOCK:
            self._inline.discard(name)
        else:
            self._inline.add(name)

    @property
    def inline_elements(self) -> tuple[str, ...]:
        return tuple(sorted(self._inline))

    def inline_run_pattern(self) -> re.Pattern[str] | None:
        """Compile the pattern matching `<tag attrs>text</tag>` for inline tags.

        Returns:
            re.Pattern | None: Compiled pattern, or None when no element is
                classified inline.
        """
        if not self._inline:
            return None
        alternation = "|".join(re.escape(name) for name in sorted(self._inline))
        return re.compile(rf"<({alternation})(?=[\s/>])[^<>]*>[^<]*</\1>")
