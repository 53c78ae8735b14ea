"""Types exchanged between buffers and host widgets."""

from __future__ import annotations

from dataclasses import dataclass, field

from .state import Cursor


@dataclass(slots=True)
class BufferMirror:
    """Host-friendly snapshot describing the current buffer state."""

    text: str
    cursor: Cursor
    generation: int
    attributes: dict[str, str] = field(default_factory=dict)


class BufferValidationError(RuntimeError):
    """Raised when callers provide out-of-bounds cursor info."""

    def __init__(self, message: str, *, cursor: Cursor | None = None) -> None:
        super().__init__(message)
        self.cursor = cursor
