"""Turn oracle output into records, and records into UI markers."""

from __future__ import annotations

import json
from typing import Iterable, Mapping, Optional, Sequence

from .models import DiagnosticRecord, MalformedDiagnosticsError, Marker


def parse_records(payload: Optional[str]) -> tuple[DiagnosticRecord, ...]:
    """Decode the oracle's JSON array of diagnostic objects.

    Empty output and ``null`` mean "no diagnostics". Anything that is not an
    array of objects raises ``MalformedDiagnosticsError``.
    """

    if payload is None or not payload.strip():
        return ()
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise MalformedDiagnosticsError(f"invalid diagnostics JSON: {exc}") from exc
    if data is None:
        return ()
    if not isinstance(data, list):
        raise MalformedDiagnosticsError(
            f"expected a JSON array, got {type(data).__name__}"
        )
    records = []
    for index, entry in enumerate(data):
        if not isinstance(entry, Mapping):
            raise MalformedDiagnosticsError(
                f"diagnostic #{index} is {type(entry).__name__}, not an object"
            )
        records.append(DiagnosticRecord.from_mapping(entry))
    return tuple(records)


def map_record(record: DiagnosticRecord, *, end_column: Optional[int] = None) -> Marker:
    line = max(1, record.line)
    column = max(1, record.column)
    if end_column is None or end_column < column:
        end_column = column + 1
    return Marker(
        start_line=line,
        start_column=column,
        end_line=line,
        end_column=end_column,
        message=record.message,
    )


def map_records(
    records: Iterable[DiagnosticRecord], *, width: int = 1
) -> tuple[Marker, ...]:
    """Widen each point record into a ``width``-column range, keeping order."""

    span = max(1, width)
    return tuple(
        map_record(record, end_column=max(1, record.column) + span)
        for record in records
    )


def clamp_marker(marker: Marker, lines: Sequence[str]) -> Marker:
    """Clamp ``marker`` to the extents of ``lines`` before rendering."""

    last_line = max(1, len(lines))

    def _line(value: int) -> int:
        return max(1, min(value, last_line))

    def _column(line: int, value: int) -> int:
        limit = len(lines[line - 1]) + 1 if lines else 1
        return max(1, min(value, limit))

    start_line = _line(marker.start_line)
    end_line = max(start_line, _line(marker.end_line))
    start_column = _column(start_line, marker.start_column)
    end_column = _column(end_line, marker.end_column)
    if end_line == start_line and end_column < start_column:
        end_column = start_column
    return Marker(
        start_line=start_line,
        start_column=start_column,
        end_line=end_line,
        end_column=end_column,
        message=marker.message,
    )


__all__ = ["clamp_marker", "map_record", "map_records", "parse_records"]
