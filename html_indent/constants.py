"""Constants used across the html-indent package."""

from __future__ import annotations

# Element names treated as inline until reclassified.
DEFAULT_INLINE_ELEMENTS = (
    "b",
    "big",
    "i",
    "small",
    "tt",
    "abbr",
    "acronym",
    "cite",
    "code",
    "dfn",
    "em",
    "kbd",
    "strong",
    "samp",
    "var",
    "a",
    "bdo",
    "br",
    "img",
    "span",
    "sub",
    "sup",
)

# Elements that never carry a closing tag.
VOID_ELEMENTS = ("input", "link", "meta", "base", "br", "img", "source", "hr")

# SVG primitives written as `<name .../>`.
SVG_SELF_CLOSING_ELEMENTS = ("animate", "stop", "path", "circle", "line", "polyline", "rect", "use")

DEFAULT_INDENTATION_UNIT = "    "
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024

# Placeholder wrappers: `<script>N</script>` and `ᐃNᐃ`.
SCRIPT_PLACEHOLDER_OPEN = "<script>"
SCRIPT_PLACEHOLDER_CLOSE = "</script>"
INLINE_PLACEHOLDER_MARKER = "ᐃ"
# Longest ordinal a placeholder can carry.
MAX_PLACEHOLDER_DIGITS = 20

LINE_TERMINATOR = "\n"

HTML_EXTENSIONS = (".html", ".htm", ".xhtml", ".xml", ".svg", ".php", ".tpl")

# Whitespace that may be collapsed or dropped; other whitespace is content.
ASCII_WHITESPACE = " \t\n\r\x0b\x0c"
