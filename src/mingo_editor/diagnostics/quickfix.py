"""Quick fixes synthesized from recognized diagnostic messages."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from .models import Marker, TextEdit

TERMINATOR = ";"

# Lower-cased; matched as substrings of the lower-cased marker message.
MISSING_TERMINATOR_PHRASES: tuple[str, ...] = (
    "expected next token to be semicolon",
    "expected ';'",
)


def is_missing_terminator(message: str) -> bool:
    lowered = message.lower()
    return any(phrase in lowered for phrase in MISSING_TERMINATOR_PHRASES)


def propose(marker: Marker, line_end_column: int) -> Optional[TextEdit]:
    """Suggest inserting ``;`` at the end of the marker's line.

    The parser reports the position of the token after the gap, so the edit
    is anchored at ``line_end_column`` rather than at the marker column.
    """

    if not is_missing_terminator(marker.message):
        return None
    return TextEdit.insertion(
        marker.start_line,
        max(1, line_end_column),
        TERMINATOR,
        title=f"Insert missing '{TERMINATOR}'",
    )


def propose_all(
    markers: Iterable[Marker], lines: Sequence[str]
) -> List[Tuple[Marker, TextEdit]]:
    fixes: List[Tuple[Marker, TextEdit]] = []
    for marker in markers:
        if not lines or marker.start_line > len(lines):
            continue
        edit = propose(marker, len(lines[marker.start_line - 1]) + 1)
        if edit is not None:
            fixes.append((marker, edit))
    return fixes


__all__ = ["MISSING_TERMINATOR_PHRASES", "is_missing_terminator", "propose", "propose_all"]
