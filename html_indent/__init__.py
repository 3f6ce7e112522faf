"""
html-indent: lossless indentation of HTML-like markup.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    html-indent index.html

Library Usage:
    from html_indent import ElementType, Indenter

    indenter = Indenter()
    indenter.reclassify_tag("a", ElementType.BLOCK)
    print(indenter.indent("<ul><li><a href='#'>Home</a></li></ul>"))
"""

from .classifier import TagClassifier
from .config import ConfigError, IndenterConfig
from .exceptions import IndentError, IntegrityError, InvalidArgumentError
from .indenter import Indenter, configure, indent_html
from .masking import (
    collapse_empty_elements,
    locate_placeholders,
    mask_inline_runs,
    mask_scripts,
    normalize_whitespace,
    restore_spans,
)
from .models import ElementType, IndentationState, IndentResult, MaskedSpan, Rule, Token
from .tokenizer import MATCHERS, scan, verify_placeholders, verify_round_trip

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "Indenter",
    "configure",
    "indent_html",
    "TagClassifier",
    # Passes
    "mask_scripts",
    "normalize_whitespace",
    "mask_inline_runs",
    "collapse_empty_elements",
    "locate_placeholders",
    "restore_spans",
    "scan",
    "verify_round_trip",
    "verify_placeholders",
    "MATCHERS",
    # Data models
    "ElementType",
    "IndentationState",
    "IndentResult",
    "IndenterConfig",
    "MaskedSpan",
    "Rule",
    "Token",
    # Exceptions
    "ConfigError",
    "IndentError",
    "IntegrityError",
    "InvalidArgumentError",
    # Version
    "__version__",
]
