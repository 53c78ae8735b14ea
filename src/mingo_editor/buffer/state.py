"""Cursor tracking for source buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

Cursor = Tuple[int, int]  # (row, column), both 0-based


@dataclass(slots=True)
class BufferState:
    cursor: Cursor = (0, 0)

    def set_cursor(self, row: int, col: int) -> None:
        self.cursor = (row, col)
