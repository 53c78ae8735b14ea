"""Source buffer façade: document, cursor and the generation counter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

from mingo_editor.runtime import telemetry

from .document import BufferDocument
from .state import BufferState, Cursor
from .sync import BufferMirror
from .validation import clamp_cursor, ensure_cursor

if TYPE_CHECKING:  # pragma: no cover
    from mingo_editor.diagnostics.models import TextEdit


@dataclass(frozen=True, slots=True)
class BufferView:
    version: int
    text: str
    cursor: Cursor


@dataclass(frozen=True, slots=True)
class BufferDelta:
    version: int
    text: str
    cursor: Cursor
    label: str


class Buffer:
    """Mutable source text owned by the editing surface.

    ``generation`` increases by exactly one on every mutation and is the
    identity used to discard stale asynchronous results.
    """

    def __init__(
        self,
        *,
        name: str = "untitled.mg",
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
    ) -> None:
        self.name = name
        self.document = document or BufferDocument()
        self.state = state or BufferState()

    @classmethod
    def from_text(cls, text: str, *, name: str = "untitled.mg") -> "Buffer":
        return cls(name=name, document=BufferDocument.from_text(text))

    @property
    def generation(self) -> int:
        return self.document.version

    @property
    def text(self) -> str:
        return self.document.text

    @property
    def lines(self) -> Sequence[str]:
        return self.document.snapshot()

    def snapshot(self) -> BufferView:
        return BufferView(
            version=self.document.version,
            text=self.document.text,
            cursor=self.state.cursor,
        )

    def mirror(self, *, attributes: Optional[dict[str, str]] = None) -> BufferMirror:
        return BufferMirror(
            text=self.document.text,
            cursor=self.state.cursor,
            generation=self.document.version,
            attributes=dict(attributes or {}),
        )

    def line_end_column(self, line: int) -> int:
        """1-based column just past the last character of 1-based ``line``."""

        row = max(0, min(line - 1, self.document.line_count - 1))
        return len(self.document.get_line(row)) + 1

    def set_text(self, text: str, *, label: str = "set_text") -> Optional[BufferDelta]:
        """Replace the whole buffer; identical text is not a mutation."""

        if text == self.document.text:
            return None
        row, col = self.state.cursor
        with telemetry.span(
            name=f"buffer::{label}",
            component="buffer",
            metadata={"buffer": self.name},
        ):
            self.document = self.document.replace_text(text)
            self.state.set_cursor(*clamp_cursor(self.document, row, col))
        return self._delta(label)

    def replace_range(
        self, start: Cursor, end: Cursor, text: str, *, label: str
    ) -> BufferDelta:
        start = ensure_cursor(self.document, start)
        end = ensure_cursor(self.document, end)
        if start > end:
            start, end = end, start
        with telemetry.span(
            name=f"buffer::{label}",
            component="buffer",
            metadata={"buffer": self.name},
        ):
            before_text = self.document.text
            start_offset = _offset_for_cursor(self.document, start)
            end_offset = _offset_for_cursor(self.document, end)
            new_text = before_text[:start_offset] + text + before_text[end_offset:]
            self.document = self.document.replace_text(new_text)
            self.state.set_cursor(
                *_cursor_from_offset(self.document, start_offset + len(text))
            )
        return self._delta(label)

    def insert_text(self, text: str, *, cursor: Optional[Cursor] = None) -> BufferDelta:
        position = cursor or self.state.cursor
        return self.replace_range(position, position, text, label="insert_text")

    def delete_range(self, start: Cursor, end: Cursor) -> BufferDelta:
        return self.replace_range(start, end, "", label="delete_range")

    def apply_edit(self, edit: "TextEdit") -> BufferDelta:
        """Apply a 1-based ``TextEdit``, clamping it to the current extents."""

        start = clamp_cursor(self.document, edit.start_line - 1, edit.start_column - 1)
        end = clamp_cursor(self.document, edit.end_line - 1, edit.end_column - 1)
        return self.replace_range(start, end, edit.text, label="apply_edit")

    def _delta(self, label: str) -> BufferDelta:
        return BufferDelta(
            version=self.document.version,
            text=self.document.text,
            cursor=self.state.cursor,
            label=label,
        )


def _offset_for_cursor(document: BufferDocument, cursor: Cursor) -> int:
    lines = document.snapshot()
    row, col = cursor
    offset = 0
    for i in range(row):
        offset += len(lines[i]) + 1  # newline
    return offset + col


def _cursor_from_offset(document: BufferDocument, offset: int) -> Cursor:
    lines = document.snapshot()
    running = 0
    for row, line in enumerate(lines):
        if offset <= running + len(line):
            return (row, offset - running)
        running += len(line) + 1
    return (len(lines) - 1, len(lines[-1]))
