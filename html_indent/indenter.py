"""Indentation engine: masking, scanning, verification and restoration."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from .classifier import TagClassifier
from .config import IndenterConfig, config_from_options, normalize_config, validate_config
from .constants import ASCII_WHITESPACE, DEFAULT_INDENTATION_UNIT, DEFAULT_INLINE_ELEMENTS
from .exceptions import IntegrityError, InvalidArgumentError
from .masking import (
    collapse_empty_elements,
    mask_inline_runs,
    mask_scripts,
    normalize_whitespace,
    restore_spans,
)
from .models import ElementType, IndentResult, Token
from .tokenizer import scan, verify_placeholders, verify_round_trip

logger = logging.getLogger(__name__)


def indent_html(
    text: str,
    indentation_unit: str = DEFAULT_INDENTATION_UNIT,
    inline_elements: Iterable[str] = DEFAULT_INLINE_ELEMENTS,
) -> IndentResult:
    """Indent a markup document without losing any of its content.

    Script elements are hidden first, whitespace runs are collapsed, and
    text-only runs of inline elements are hidden before the document is
    scanned. The scanned tokens must concatenate back to the scanned text and
    keep every placeholder whole; otherwise the call fails instead of
    returning a damaged document.

    All state of the call is local, so concurrent calls do not interfere.

    Args:
        text: Markup to indent.
        indentation_unit: String written once per nesting level.
        inline_elements: Element names whose `<tag>text</tag>` runs stay on
            the surrounding line.

    Returns:
        IndentResult: Indented output with the token log and masked spans.

    Raises:
        IntegrityError: If the tokens do not reproduce the scanned text or
            split a placeholder.

    Examples:
        indent_html("<div><p>a <b>b</b></p></div>").output
        # "<div>\\n    <p>a <b>b</b></p>\\n</div>"
    """
    classifier = TagClassifier(inline_elements)

    masked, script_spans = mask_scripts(text)
    normalized = normalize_whitespace(masked)
    subject, inline_spans = mask_inline_runs(
        normalized, classifier.inline_run_pattern(), reserved=text
    )

    output, tokens = scan(subject, indentation_unit)
    verify_round_trip(subject, tokens)
    verify_placeholders(subject, tokens, script_spans + inline_spans)

    output = collapse_empty_elements(output)
    # Inline runs may hold script placeholders, so they go back first.
    output = restore_spans(output, inline_spans)
    output = restore_spans(output, script_spans)
    logger.debug(
        "Restored %d script element(s) and %d inline run(s)",
        len(script_spans),
        len(inline_spans),
    )

    return IndentResult(
        output=output.strip(ASCII_WHITESPACE),
        tokens=tokens,
        script_spans=script_spans,
        inline_spans=inline_spans,
    )


class Indenter:
    """Reusable indentation engine.

    Holds the indentation unit and the inline element set. Each call to
    `indent` works on its own state; only its token log is kept afterwards.

    Examples:
        indenter = Indenter()
        indenter.reclassify_tag("b", ElementType.BLOCK)
        print(indenter.indent("<p>a <b>bold</b> c</p>"))
    """

    def __init__(self, config: IndenterConfig | None = None):
        config = normalize_config(config or IndenterConfig())
        validate_config(config)
        self._config = config
        self._classifier = TagClassifier(config.inline_elements)
        for name in config.block_elements:
            self._classifier.reclassify(name, ElementType.BLOCK)
        self._last_log: list[Token] = []

    @property
    def config(self) -> IndenterConfig:
        return self._config

    @property
    def indentation_unit(self) -> str:
        return self._config.indentation_unit

    @property
    def inline_elements(self) -> tuple[str, ...]:
        return self._classifier.inline_elements

    def configure(self, options: Mapping[str, object] | None = None) -> Indenter:
        """Apply engine options; nothing changes when any option is rejected.

        Raises:
            InvalidArgumentError: If an option is unrecognized or invalid.
        """
        self._config = config_from_options(options, self._config)
        return self

    def is_inline(self, name: str) -> bool:
        return self._classifier.is_inline(name)

    def reclassify_tag(self, name: str, kind: ElementType | str) -> None:
        """Treat element `name` as block or inline in later `indent` calls.

        Args:
            name: Element name, e.g. ``"b"``.
            kind: `ElementType.BLOCK` or `ElementType.INLINE` (or their
                string values).

        Raises:
            InvalidArgumentError: If `kind` is not an element type.
        """
        self._classifier.reclassify(name, kind)

    set_element_type = reclassify_tag

    def indent(self, text: str) -> str:
        """Indent `text` with the current configuration.

        Raises:
            InvalidArgumentError: If `text` is not a string.
            IntegrityError: If the document cannot be reproduced exactly.
        """
        if not isinstance(text, str):
            raise InvalidArgumentError(f"Expected markup text, got {type(text).__name__}")

        try:
            result = indent_html(
                text,
                indentation_unit=self._config.indentation_unit,
                inline_elements=self._classifier.inline_elements,
            )
        except IntegrityError as error:
            self._last_log = list(error.tokens)
            raise

        self._last_log = result.tokens
        return result.output

    def last_operation_log(self) -> list[Token]:
        """Debugging utility: tokens scanned by the most recent `indent` call."""
        return list(self._last_log)

    get_log = last_operation_log


def configure(options: Mapping[str, object] | None = None) -> Indenter:
    """Create an `Indenter` from an option mapping.

    Args:
        options: Option mapping; ``indentation_unit`` is the recognized key.

    Returns:
        Indenter: New engine with the default inline element set.

    Raises:
        InvalidArgumentError: If an option key is unrecognized or its value
            is invalid.

    Examples:
        configure({"indentation_unit": "  "}).indent("<ul><li>x</li></ul>")
    """
    return Indenter(config_from_options(options))
