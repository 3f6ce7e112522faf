"""Data models for html-indent."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Rule(Enum):
    """Effect of a matched token on indentation.

    Attributes:
        NONE: Emit the token at the current depth.
        DECREASE: Emit the token one level shallower and carry the decrease.
        INCREASE: Emit the token at the current depth and indent what follows.
        DISCARD: Consume the token without writing a line.
    """

    NONE = "none"
    DECREASE = "decrease"
    INCREASE = "increase"
    DISCARD = "discard"


class ElementType(Enum):
    """Classification of an element name."""

    BLOCK = "block"
    INLINE = "inline"


@dataclass(frozen=True)
class Token:
    """A lexical unit consumed by the scanner.

    Attributes:
        text: Matched substring.
        rule: Indentation rule of the matcher that won.
        depth: Depth the token was emitted at, after clamping.
        matcher: Name of the matcher that produced the token.
        offset: Zero-based index in the scanned text where the token starts.
    """

    text: str
    rule: Rule
    depth: int
    matcher: str
    offset: int


@dataclass(frozen=True)
class MaskedSpan:
    """A placeholder and the original text it stands for."""

    placeholder: str
    original: str


@dataclass
class IndentationState:
    """Depth counters threaded through a scan.

    Attributes:
        current_line_depth: Depth of the line being emitted; never negative
            once clamped.
        next_line_depth: Depth carried to the following token. May drop below
            zero when closing tags outnumber opening tags.
    """

    current_line_depth: int = 0
    next_line_depth: int = 0


@dataclass
class IndentResult:
    """Everything produced by a single indentation call.

    Attributes:
        output: Indented document.
        tokens: Tokens in scan order, whitespace included.
        script_spans: Script bodies hidden from the scanner.
        inline_spans: Inline runs hidden from the scanner.
    """

    output: str
    tokens: list[Token] = field(default_factory=list)
    script_spans: list[MaskedSpan] = field(default_factory=list)
    inline_spans: list[MaskedSpan] = field(default_factory=list)
