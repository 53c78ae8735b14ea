"""Keyword, snippet and buffer-identifier completions for Mingo."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Literal

CompletionKind = Literal["keyword", "snippet", "function", "variable"]

KEYWORDS: tuple[str, ...] = (
    "fn",
    "let",
    "if",
    "else",
    "return",
    "true",
    "false",
    "while",
    "print",
)

_IDENTIFIER = re.compile(r"\b[a-zA-Z_][a-zA-Z0-9_]*\b")
_PLACEHOLDER = re.compile(r"\$\{\d+:([^}]*)\}|\$\d+")
_TRAILING_WORD = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*$")


@dataclass(frozen=True, slots=True)
class CompletionItem:
    label: str
    kind: CompletionKind
    insert_text: str
    detail: str = ""
    is_snippet: bool = False

    @property
    def plain_text(self) -> str:
        """Insert text with snippet placeholders replaced by their defaults."""

        if not self.is_snippet:
            return self.insert_text
        expanded = _PLACEHOLDER.sub(lambda m: m.group(1) or "", self.insert_text)
        return expanded.replace("\t", "  ")


SNIPPETS: tuple[CompletionItem, ...] = (
    CompletionItem(
        label="fn snippet",
        kind="snippet",
        detail="function",
        insert_text="fn ${1:name}(${2:args}) {\n\t$0\n}",
        is_snippet=True,
    ),
    CompletionItem(
        label="if snippet",
        kind="snippet",
        detail="if/else",
        insert_text="if (${1:cond}) {\n\t$0\n} else {\n\t\n}",
        is_snippet=True,
    ),
    CompletionItem(
        label="while snippet",
        kind="snippet",
        detail="while loop",
        insert_text="while (${1:cond}) {\n\t$0\n}",
        is_snippet=True,
    ),
    CompletionItem(
        label="print",
        kind="function",
        insert_text="print(${1:expr});",
        is_snippet=True,
    ),
)


def buffer_identifiers(text: str) -> List[str]:
    """Non-keyword identifiers of ``text`` in order of first appearance."""

    keywords = set(KEYWORDS)
    seen: dict[str, None] = {}
    for match in _IDENTIFIER.finditer(text):
        word = match.group(0)
        if word not in keywords:
            seen.setdefault(word, None)
    return list(seen)


def word_prefix(line: str) -> str:
    """Identifier characters immediately before the end of ``line``."""

    match = _TRAILING_WORD.search(line)
    return match.group(0) if match else ""


def complete(text: str, *, prefix: str = "") -> List[CompletionItem]:
    items: List[CompletionItem] = [
        CompletionItem(label=word, kind="keyword", insert_text=word) for word in KEYWORDS
    ]
    items.extend(SNIPPETS)
    items.extend(
        CompletionItem(label=word, kind="variable", insert_text=word)
        for word in buffer_identifiers(text)
    )
    if prefix:
        items = [item for item in items if item.label.startswith(prefix)]
    return items


__all__ = [
    "CompletionItem",
    "KEYWORDS",
    "SNIPPETS",
    "buffer_identifiers",
    "complete",
    "word_prefix",
]
