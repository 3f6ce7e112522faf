"""Ordered first-match scanner that assigns indentation depths."""

from __future__ import annotations

import logging
import re
from bisect import bisect_right
from dataclasses import dataclass

from .constants import (
    ASCII_WHITESPACE,
    LINE_TERMINATOR,
    SVG_SELF_CLOSING_ELEMENTS,
    VOID_ELEMENTS,
)
from .exceptions import IntegrityError
from .masking import locate_placeholders
from .models import IndentationState, MaskedSpan, Rule, Token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Matcher:
    """A named pattern tried at the scan cursor, with the rule it applies."""

    name: str
    pattern: re.Pattern[str]
    rule: Rule


def _alternation(names: tuple[str, ...]) -> str:
    return "|".join(names)


# Order is significant: the first matcher that matches at the cursor wins.
MATCHERS: tuple[Matcher, ...] = (
    # Element whose content holds no tag, kept on one line.
    Matcher("block_element", re.compile(r"<([a-z]++)[^>]*>[^<]*</\1>"), Rule.NONE),
    Matcher("declaration", re.compile(r"<![^>]*>"), Rule.NONE),
    Matcher(
        "void_element",
        re.compile(rf"<(?:{_alternation(VOID_ELEMENTS)})(?=[\s/>])[^>]*>"),
        Rule.NONE,
    ),
    Matcher(
        "svg_primitive",
        re.compile(rf"<(?:{_alternation(SVG_SELF_CLOSING_ELEMENTS)})(?=[\s/>])[^>]*/>"),
        Rule.NONE,
    ),
    Matcher("opening_tag", re.compile(r"<[^/][^>]*>"), Rule.INCREASE),
    Matcher("closing_tag", re.compile(r"</[^>]*>"), Rule.DECREASE),
    Matcher("self_closing_tag", re.compile(r"<.+/>"), Rule.DECREASE),
    Matcher("whitespace", re.compile(r"\s+", re.ASCII), Rule.DISCARD),
    Matcher("text", re.compile(r"[^<]+"), Rule.NONE),
)


def match_at(text: str, position: int, matchers: tuple[Matcher, ...] = MATCHERS):
    """Return the first matcher matching at `position` and its match.

    Args:
        text: Text being scanned.
        position: Cursor index.
        matchers: Matchers in priority order.

    Returns:
        tuple[Matcher, re.Match] | None: The winning matcher and match, or
            None when nothing matches.

    Examples:
        matcher, match = match_at("<div>text</div>", 0)
        matcher.name  # "block_element"
    """
    for matcher in matchers:
        match = matcher.pattern.match(text, position)
        if match:
            return matcher, match
    return None


def apply_rule(state: IndentationState, rule: Rule) -> int:
    """Advance the depth counters for one emitted token.

    The current line depth starts from the carried depth. A closing token
    lowers both counters; an opening token raises only the carried one.

    Args:
        state: Counters to update in place.
        rule: Rule of the emitted token; must not be `Rule.DISCARD`.

    Returns:
        int: Depth of the emitted line, never below zero.
    """
    state.current_line_depth = state.next_line_depth
    if rule is Rule.DECREASE:
        state.next_line_depth -= 1
        state.current_line_depth -= 1
    elif rule is Rule.INCREASE:
        state.next_line_depth += 1
    state.current_line_depth = max(state.current_line_depth, 0)
    return state.current_line_depth


def scan(text: str, indentation_unit: str) -> tuple[str, list[Token]]:
    """Tokenize `text` and render each token on its own indented line.

    Whitespace tokens are consumed without producing a line, and trailing
    whitespace of a token is not written. The scan ends at
    the end of `text`, or early when no matcher applies at the cursor; in the
    latter case the returned tokens do not cover the whole input and
    `verify_round_trip` rejects them.

    Args:
        text: Masked and whitespace-normalized document.
        indentation_unit: String repeated once per depth level.

    Returns:
        tuple[str, list[Token]]: Rendered lines and the token log.

    Examples:
        output, tokens = scan("<div><p>a</p></div>", "  ")
        output  # "<div>\\n  <p>a</p>\\n</div>\\n"
    """
    state = IndentationState()
    tokens: list[Token] = []
    lines: list[str] = []
    position = 0
    length = len(text)

    while position < length:
        found = match_at(text, position)
        if found is None:
            logger.debug("No matcher applies at offset %d; stopping scan", position)
            break
        matcher, match = found
        matched_text = match.group(0)

        if matcher.rule is Rule.DISCARD:
            depth = max(state.next_line_depth, 0)
        else:
            depth = apply_rule(state, matcher.rule)
            rendered = matched_text.rstrip(ASCII_WHITESPACE)
            lines.append(f"{indentation_unit * depth}{rendered}{LINE_TERMINATOR}")

        tokens.append(
            Token(
                text=matched_text,
                rule=matcher.rule,
                depth=depth,
                matcher=matcher.name,
                offset=position,
            )
        )
        position = match.end()

    logger.debug("Scanned %d token(s) over %d character(s)", len(tokens), length)
    return "".join(lines), tokens


def verify_round_trip(text: str, tokens: list[Token]) -> None:
    """Check that the tokens concatenate back to exactly `text`.

    Raises:
        IntegrityError: If any character was skipped or duplicated.
    """
    reconstructed = "".join(token.text for token in tokens)
    if reconstructed == text:
        return

    offset = 0
    for expected, actual in zip(text, reconstructed):
        if expected != actual:
            break
        offset += 1
    logger.warning("Round-trip check failed at offset %d", offset)
    raise IntegrityError(offset, len(text), len(reconstructed), tokens)


def verify_placeholders(text: str, tokens: list[Token], spans: list[MaskedSpan]) -> None:
    """Check that no token cuts through a placeholder in `text`.

    A malformed tag such as `<a <script>1</script>` can swallow the start of
    a placeholder, which then cannot be restored.

    Raises:
        IntegrityError: If a placeholder is not contained in a single token.
    """
    starts = [token.offset for token in tokens]
    for position, span in locate_placeholders(text, spans):
        token = tokens[bisect_right(starts, position) - 1]
        if token.offset + len(token.text) < position + len(span.placeholder):
            logger.warning(
                "Placeholder %r split by token at offset %d", span.placeholder, token.offset
            )
            raise IntegrityError(
                position,
                len(text),
                len(text),
                tokens,
                detail=f"a tag runs into masked content {span.placeholder!r}",
            )
