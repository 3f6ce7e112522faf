"""Substitution passes that hide parts of the document from the tokenizer.

Script bodies and short inline runs are swapped for placeholders before
scanning and swapped back afterwards. Restoration is literal: placeholders
are replaced by substring identity, never re-matched as markup.

Every pattern here stops at the next `<` (or at the last `</script>`) so a
pass over the document stays linear in its length.
"""

from __future__ import annotations

import logging
import re

from .constants import (
    INLINE_PLACEHOLDER_MARKER,
    MAX_PLACEHOLDER_DIGITS,
    SCRIPT_PLACEHOLDER_CLOSE,
    SCRIPT_PLACEHOLDER_OPEN,
)
from .models import MaskedSpan

logger = logging.getLogger(__name__)

SCRIPT_PATTERN = re.compile(r"<script\b[^<>]*>[\s\S]*?</script>", re.IGNORECASE)
SCRIPT_CLOSE_PATTERN = re.compile(r"</script>", re.IGNORECASE)
WHITESPACE_RUN_PATTERN = re.compile(r"\s{2,}", re.ASCII)
EMPTY_ELEMENT_PATTERN = re.compile(r"(<(\w++)[^<>]*>)\s*(</\2>)", re.ASCII)

# Zero-width so that overlapping candidates such as `ᐃ1ᐃ2ᐃ` are all seen.
PLACEHOLDER_PATTERN = re.compile(
    "(?=("
    rf"{re.escape(SCRIPT_PLACEHOLDER_OPEN)}[0-9]+{re.escape(SCRIPT_PLACEHOLDER_CLOSE)}"
    rf"|{INLINE_PLACEHOLDER_MARKER}[0-9]+{INLINE_PLACEHOLDER_MARKER}"
    "))"
)


def script_placeholder(ordinal: int) -> str:
    return f"{SCRIPT_PLACEHOLDER_OPEN}{ordinal}{SCRIPT_PLACEHOLDER_CLOSE}"


def inline_placeholder(ordinal: int) -> str:
    return f"{INLINE_PLACEHOLDER_MARKER}{ordinal}{INLINE_PLACEHOLDER_MARKER}"


def _taken_ordinals(opener: str, closer: str, *texts: str) -> set[str]:
    """Collect ordinals whose placeholder stem already occurs in `texts`.

    The stem is the placeholder without its final character. For `ᐃNᐃ` the
    stem `ᐃN` occurs wherever a marker is followed by digits starting with
    ``N``, so every digit prefix counts.
    """
    tail = closer[:-1]
    stem_pattern = re.compile(rf"{re.escape(opener)}([0-9]+){re.escape(tail)}")
    taken: set[str] = set()
    for text in texts:
        for match in stem_pattern.finditer(text):
            digits = match.group(1)[:MAX_PLACEHOLDER_DIGITS]
            if tail:
                taken.add(digits)
            else:
                taken.update(digits[:length] for length in range(1, len(digits) + 1))
    return taken


def _mask(
    text: str,
    pattern: re.Pattern[str],
    opener: str,
    closer: str,
    reserved: str = "",
    endpos: int | None = None,
) -> tuple[str, list[MaskedSpan]]:
    """Replace every match of `pattern` with a numbered placeholder.

    Identical matches share one placeholder. An ordinal is skipped when its
    placeholder, closing marker excluded, already occurs in `text` or
    `reserved`; such text could otherwise run into the placeholder and be
    restored in its place.

    Args:
        text: Working text to mask.
        pattern: Pattern selecting the spans to hide.
        opener: Text written before the ordinal.
        closer: Text written after the ordinal.
        reserved: Additional text placeholders must not occur in.
        endpos: Matches must end at or before this index. Defaults to the
            end of `text`.

    Returns:
        tuple[str, list[MaskedSpan]]: Masked text and spans in order of first
            occurrence.
    """
    spans: list[MaskedSpan] = []
    by_original: dict[str, str] = {}
    taken = _taken_ordinals(opener, closer, text, reserved)
    ordinal = 0

    def _next_placeholder() -> str:
        nonlocal ordinal
        while True:
            ordinal += 1
            if str(ordinal) not in taken:
                return f"{opener}{ordinal}{closer}"

    parts: list[str] = []
    last = 0
    limit = len(text) if endpos is None else endpos
    for match in pattern.finditer(text, 0, limit):
        original = match.group(0)
        placeholder = by_original.get(original)
        if placeholder is None:
            placeholder = _next_placeholder()
            by_original[original] = placeholder
            spans.append(MaskedSpan(placeholder=placeholder, original=original))
        parts.append(text[last : match.start()])
        parts.append(placeholder)
        last = match.end()
    parts.append(text[last:])

    return "".join(parts), spans


def mask_scripts(text: str) -> tuple[str, list[MaskedSpan]]:
    """Hide `<script>` elements, body included, behind `<script>N</script>`.

    Only text up to the last `</script>` is searched; an opening tag after
    it can never be closed.

    Args:
        text: Raw document.

    Returns:
        tuple[str, list[MaskedSpan]]: Masked text and the hidden scripts.

    Examples:
        mask_scripts('<script src="x.js"></script>')
        # ("<script>1</script>", [MaskedSpan("<script>1</script>", '<script src="x.js"></script>')])
    """
    endpos = 0
    for match in SCRIPT_CLOSE_PATTERN.finditer(text):
        endpos = match.end()

    masked, spans = _mask(
        text, SCRIPT_PATTERN, SCRIPT_PLACEHOLDER_OPEN, SCRIPT_PLACEHOLDER_CLOSE, endpos=endpos
    )
    logger.debug("Masked %d script element(s)", len(spans))
    return masked, spans


def normalize_whitespace(text: str) -> str:
    """Delete tabs and collapse ASCII whitespace runs to a single space.

    Examples:
        normalize_whitespace("<p>\\n\\t  a</p>")  # "<p> a</p>"
    """
    text = text.replace("\t", "")
    return WHITESPACE_RUN_PATTERN.sub(" ", text)


def mask_inline_runs(
    text: str, pattern: re.Pattern[str] | None, reserved: str = ""
) -> tuple[str, list[MaskedSpan]]:
    """Hide `<tag>text</tag>` runs of inline elements behind `ᐃNᐃ`.

    Args:
        text: Script-masked, whitespace-normalized document.
        pattern: Inline-run pattern from `TagClassifier.inline_run_pattern`;
            None disables the pass.
        reserved: Text the placeholders must not collide with, usually the
            raw document.

    Returns:
        tuple[str, list[MaskedSpan]]: Masked text and the hidden runs.

    Examples:
        mask_inline_runs("<p>a <b>bold</b></p>", TagClassifier().inline_run_pattern())
        # ("<p>a ᐃ1ᐃ</p>", [MaskedSpan("ᐃ1ᐃ", "<b>bold</b>")])
    """
    if pattern is None:
        return text, []
    masked, spans = _mask(
        text, pattern, INLINE_PLACEHOLDER_MARKER, INLINE_PLACEHOLDER_MARKER, reserved
    )
    logger.debug("Masked %d inline run(s)", len(spans))
    return masked, spans


def collapse_empty_elements(text: str) -> str:
    """Join `<tag ...>` and its `</tag>` when only whitespace separates them.

    Examples:
        collapse_empty_elements("<td>\\n</td>")  # "<td></td>"
    """
    return EMPTY_ELEMENT_PATTERN.sub(r"\1\3", text)


def locate_placeholders(text: str, spans: list[MaskedSpan]) -> list[tuple[int, MaskedSpan]]:
    """Find the placeholders of `spans` in `text`, left to right.

    Occurrences never overlap; a candidate that starts inside an earlier
    occurrence is ignored.

    Returns:
        list[tuple[int, MaskedSpan]]: Start index and span of each occurrence.
    """
    by_placeholder = {span.placeholder: span for span in spans}
    found: list[tuple[int, MaskedSpan]] = []
    if not by_placeholder:
        return found

    end = 0
    for match in PLACEHOLDER_PATTERN.finditer(text):
        start = match.start()
        span = by_placeholder.get(match.group(1))
        if span is None or start < end:
            continue
        found.append((start, span))
        end = start + len(span.placeholder)
    return found


def restore_spans(text: str, spans: list[MaskedSpan]) -> str:
    """Put the original text back in place of each placeholder."""
    parts: list[str] = []
    last = 0
    for start, span in locate_placeholders(text, spans):
        parts.append(text[last:start])
        parts.append(span.original)
        last = start + len(span.placeholder)
    parts.append(text[last:])
    return "".join(parts)
