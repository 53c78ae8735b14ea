"""Source buffer abstractions."""

from .buffer import Buffer, BufferDelta, BufferView
from .document import BufferDocument, split_lines
from .state import BufferState, Cursor
from .sync import BufferMirror, BufferValidationError
from .validation import clamp_cursor, ensure_cursor

__all__ = [
    "Buffer",
    "BufferDelta",
    "BufferView",
    "BufferDocument",
    "BufferState",
    "BufferMirror",
    "BufferValidationError",
    "Cursor",
    "clamp_cursor",
    "ensure_cursor",
    "split_lines",
]
