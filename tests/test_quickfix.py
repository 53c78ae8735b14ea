from __future__ import annotations

from mingo_editor.diagnostics import Marker, TextEdit, propose, propose_all
from mingo_editor.buffer import Buffer


def make_marker(message: str, line: int = 1, column: int = 1) -> Marker:
    return Marker(line, column, line, column + 1, message)


def test_unrecognized_message_yields_nothing() -> None:
    assert propose(make_marker("unexpected token"), 10) is None


def test_missing_semicolon_inserts_at_end_of_line() -> None:
    marker = make_marker("expected next token to be SEMICOLON, got IDENT instead", 2, 1)

    edit = propose(marker, 11)

    assert edit == TextEdit(2, 11, 2, 11, ";", "Insert missing ';'")
    assert edit is not None and edit.is_insertion


def test_phrases_match_case_insensitively() -> None:
    assert propose(make_marker("EXPECTED ';' AFTER STATEMENT"), 4) is not None
    assert propose(make_marker("Expected Next Token To Be semicolon"), 4) is not None


def test_propose_all_uses_line_lengths() -> None:
    lines = ["let x = 10", "print(x)"]
    markers = [
        make_marker("expected next token to be SEMICOLON", 2, 1),
        make_marker("unexpected token", 1, 3),
    ]

    fixes = propose_all(markers, lines)

    assert len(fixes) == 1
    marker, edit = fixes[0]
    assert marker is markers[0]
    assert (edit.start_line, edit.start_column) == (2, 9)


def test_applying_fix_terminates_statement() -> None:
    buffer = Buffer.from_text("let x = 10\nprint(x);")
    marker = make_marker("expected next token to be SEMICOLON", 1, 1)

    edit = propose(marker, buffer.line_end_column(1))
    assert edit is not None
    buffer.apply_edit(edit)

    assert buffer.text == "let x = 10;\nprint(x);"
