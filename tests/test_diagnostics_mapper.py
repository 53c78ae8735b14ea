from __future__ import annotations

import pytest

from mingo_editor.diagnostics import (
    DiagnosticRecord,
    MalformedDiagnosticsError,
    Marker,
    clamp_marker,
    map_record,
    map_records,
    parse_records,
)


def make_record(line: int = 1, column: int = 1, message: str = "oops") -> DiagnosticRecord:
    return DiagnosticRecord(line=line, column=column, message=message)


def test_map_empty_records() -> None:
    assert map_records([]) == ()


def test_map_preserves_order_and_duplicates() -> None:
    records = [make_record(3, 4, "b"), make_record(1, 2, "a"), make_record(1, 2, "a")]

    markers = map_records(records)

    assert [marker.message for marker in markers] == ["b", "a", "a"]
    assert markers[0] == Marker(3, 4, 3, 5, "b")


def test_map_widens_by_requested_width() -> None:
    marker = map_records([make_record(2, 5)], width=3)[0]

    assert (marker.start_column, marker.end_column) == (5, 8)


def test_map_record_ignores_end_before_start() -> None:
    assert map_record(make_record(1, 6), end_column=2).end_column == 7
    assert map_record(make_record(1, 6), end_column=10).end_column == 10


def test_non_positive_coordinates_coerce_to_one() -> None:
    record = make_record(0, -4)

    assert (record.line, record.column) == (1, 1)
    marker = map_records([record])[0]
    assert 1 <= marker.start_column <= marker.end_column


def test_parse_records_accepts_oracle_json() -> None:
    payload = '[{"msg": "expected next token to be SEMICOLON", "line": 2, "column": 7}]\n'

    (record,) = parse_records(payload)

    assert record == DiagnosticRecord(2, 7, "expected next token to be SEMICOLON")


def test_parse_records_accepts_capitalized_keys_and_fills_gaps() -> None:
    records = parse_records('[{"Msg": "bad", "Line": 4, "Column": 2}, {"line": "x"}]')

    assert records[0] == DiagnosticRecord(4, 2, "bad")
    assert records[1] == DiagnosticRecord(1, 1, "Error")


@pytest.mark.parametrize("payload", [None, "", "   \n", "null", "[]"])
def test_parse_records_empty_output(payload: str | None) -> None:
    assert parse_records(payload) == ()


@pytest.mark.parametrize("payload", ["{", '{"msg": "x"}', "[1, 2]", '"text"'])
def test_parse_records_rejects_malformed_output(payload: str) -> None:
    with pytest.raises(MalformedDiagnosticsError):
        parse_records(payload)


def test_clamp_marker_to_buffer_extents() -> None:
    lines = ["let x = 1", "print(x)"]

    clamped = clamp_marker(Marker(9, 40, 9, 41, "eof"), lines)

    assert clamped == Marker(2, 9, 2, 9, "eof")


def test_clamp_marker_on_empty_buffer() -> None:
    clamped = clamp_marker(Marker(3, 3, 3, 4, "x"), [""])

    assert clamped == Marker(1, 1, 1, 1, "x")
