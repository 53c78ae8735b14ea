"""Line-oriented text storage for source buffers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence


def split_lines(text: str) -> List[str]:
    """Split on ``\\n`` keeping a trailing empty line for a final newline."""

    return text.replace("\r\n", "\n").split("\n")


@dataclass(slots=True)
class BufferDocument:
    """Lines plus a version that only ever moves forward.

    Every replacement returns a new document whose version is one higher than
    the one it replaced, which is what makes the version usable as the
    buffer generation.
    """

    _lines: List[str] = field(default_factory=lambda: [""])
    version: int = 0

    @classmethod
    def from_text(cls, text: str, *, version: int = 0) -> "BufferDocument":
        return cls(_lines=split_lines(text), version=version)

    def snapshot(self) -> Sequence[str]:
        """Return the current lines without exposing internal mutability."""

        return tuple(self._lines)

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    def replace_text(self, text: str) -> "BufferDocument":
        """Return a document holding ``text`` with the version bumped."""

        return BufferDocument(_lines=split_lines(text), version=self.version + 1)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, index: int) -> str:
        return self._lines[index]
