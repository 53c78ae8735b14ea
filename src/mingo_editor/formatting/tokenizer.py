"""Delimiter-level tokenizer used by the source reformatter."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Literal

FragmentKind = Literal["delimiter", "whitespace", "word"]

_WHITESPACE_RUN = re.compile(r"\s+")
_FRAGMENT = re.compile(r"(?P<delimiter>[{}();,])|(?P<whitespace>\s+)|(?P<word>[^{}();,\s]+)")


@dataclass(frozen=True, slots=True)
class Fragment:
    kind: FragmentKind
    text: str

    @property
    def is_newline(self) -> bool:
        return self.kind == "whitespace" and "\n" in self.text


def _collapse(match: re.Match[str]) -> str:
    return "\n" if "\n" in match.group(0) else " "


def normalize_whitespace(source: str, *, tab_width: int = 4) -> str:
    """Expand tabs, then collapse every whitespace run to one character.

    A run containing a newline becomes a single ``\\n`` (blank lines are
    dropped); any other run becomes a single space.
    """

    text = source.replace("\r\n", "\n").replace("\t", " " * tab_width)
    return _WHITESPACE_RUN.sub(_collapse, text)


def tokenize(source: str, *, tab_width: int = 4) -> Iterator[Fragment]:
    """Yield delimiter, whitespace and word fragments in source order."""

    for match in _FRAGMENT.finditer(normalize_whitespace(source, tab_width=tab_width)):
        kind = match.lastgroup
        assert kind is not None
        yield Fragment(kind=kind, text=match.group(0))  # type: ignore[arg-type]


__all__ = ["Fragment", "FragmentKind", "normalize_whitespace", "tokenize"]
