"""Completion suggestions for the editing surface."""

from .provider import KEYWORDS, CompletionItem, buffer_identifiers, complete, word_prefix

__all__ = ["CompletionItem", "KEYWORDS", "buffer_identifiers", "complete", "word_prefix"]
