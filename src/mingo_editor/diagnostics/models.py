"""Dataclasses describing diagnostics, markers and quick-fix edits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


class MalformedDiagnosticsError(ValueError):
    """Raised when the diagnostics oracle produced unparseable output."""


class OracleUnavailableError(RuntimeError):
    """Raised by oracle callables that cannot reach the compiler at all."""


def _positive(value: Any) -> int:
    if isinstance(value, bool):
        return 1
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 1
    return number if number > 0 else 1


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return None


@dataclass(frozen=True, slots=True)
class DiagnosticRecord:
    """Point diagnostic reported by the oracle (1-based)."""

    line: int
    column: int
    message: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "line", _positive(self.line))
        object.__setattr__(self, "column", _positive(self.column))
        object.__setattr__(self, "message", str(self.message or "Error"))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DiagnosticRecord":
        return cls(
            line=_first(data, "line", "Line"),
            column=_first(data, "column", "Column"),
            message=_first(data, "msg", "Msg", "message") or "Error",
        )


@dataclass(frozen=True, slots=True)
class Marker:
    """Half-open 1-based range with the message to show there."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int
    message: str

    @property
    def label(self) -> str:
        return f"{self.start_line}:{self.start_column} {self.message}"


@dataclass(frozen=True, slots=True)
class MarkerSet:
    """Markers published for one buffer generation."""

    generation: int
    markers: tuple[Marker, ...] = ()
    namespace: str = "mingo"
    error: Optional[str] = None

    def is_current(self, generation: int) -> bool:
        return self.generation == generation

    def __len__(self) -> int:
        return len(self.markers)


@dataclass(frozen=True, slots=True)
class TextEdit:
    """Replacement of a 1-based half-open range; insertions have an empty range."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int
    text: str
    title: str = ""

    @classmethod
    def insertion(
        cls, line: int, column: int, text: str, *, title: str = ""
    ) -> "TextEdit":
        return cls(line, column, line, column, text, title)

    @property
    def is_insertion(self) -> bool:
        return (self.start_line, self.start_column) == (
            self.end_line,
            self.end_column,
        )


__all__ = [
    "DiagnosticRecord",
    "Marker",
    "MarkerSet",
    "TextEdit",
    "MalformedDiagnosticsError",
    "OracleUnavailableError",
]
