"""Parser-free source reformatter."""

from .indent import FormattedLine, IndentEngine, format_source, render_lines
from .tokenizer import Fragment, normalize_whitespace, tokenize

__all__ = [
    "Fragment",
    "FormattedLine",
    "IndentEngine",
    "format_source",
    "normalize_whitespace",
    "render_lines",
    "tokenize",
]
