"""Single-pass indent engine that re-renders Mingo source.

The engine never builds a syntax tree. It reacts to delimiter fragments only,
tracking one indent depth that ``{`` increments and ``}`` decrements, so any
input produces some output and malformed input merely degrades the layout.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from mingo_editor.runtime import telemetry

from .tokenizer import Fragment, tokenize

TERMINATOR = ";"
INDENT_UNIT = "  "


@dataclass(frozen=True, slots=True)
class FormattedLine:
    depth: int
    text: str


class IndentEngine:
    """Consumes fragments and accumulates ``FormattedLine`` output."""

    def __init__(self) -> None:
        self.depth = 0
        self.lines: List[FormattedLine] = []
        self._content: List[str] = []
        self._pending_space = False
        self._pending_break = False

    def feed(self, fragment: Fragment) -> None:
        if fragment.kind == "whitespace":
            if fragment.is_newline:
                # Deferred so trailing content still ends as a statement.
                self._pending_break = True
            else:
                self._pending_space = True
            return
        if self._pending_break:
            self._pending_break = False
            self._flush()
        if fragment.kind == "delimiter":
            self._delimiter(fragment.text)
        else:
            self._append(fragment.text.strip())

    def feed_all(self, fragments: Iterable[Fragment]) -> "IndentEngine":
        for fragment in fragments:
            self.feed(fragment)
        return self

    def finish(self) -> List[FormattedLine]:
        self._pending_break = False
        self._flush_statement()
        return list(self.lines)

    def _delimiter(self, text: str) -> None:
        if text == "{":
            content = self._take()
            self._emit(f"{content} {{" if content else "{")
            self.depth += 1
        elif text == "}":
            self._flush_statement()
            # Unbalanced closers stay at column zero.
            self.depth = max(0, self.depth - 1)
            self._emit("}")
        elif text == TERMINATOR:
            content = self._take()
            if content:
                self._emit(content + TERMINATOR)
            elif self.lines:
                last = self.lines[-1]
                self.lines[-1] = FormattedLine(last.depth, last.text + TERMINATOR)
            else:
                self._emit(TERMINATOR)
        else:
            # "," and parentheses stay inline with the surrounding content.
            self._append(text)

    def _append(self, text: str) -> None:
        if not text:
            return
        if self._pending_space and self._content:
            self._content.append(" ")
        self._pending_space = False
        self._content.append(text)

    def _take(self) -> str:
        content = "".join(self._content)
        self._content.clear()
        self._pending_space = False
        return content

    def _flush(self) -> None:
        content = self._take()
        if content:
            self._emit(content)

    def _flush_statement(self) -> None:
        content = self._take()
        if not content:
            return
        if not content.endswith(TERMINATOR):
            content += TERMINATOR
        self._emit(content)

    def _emit(self, text: str) -> None:
        self.lines.append(FormattedLine(depth=self.depth, text=text))


def collapse_blank_runs(rendered: Sequence[str]) -> List[str]:
    """Replace every run of three or more blank lines with a single one."""

    out: List[str] = []
    run: List[str] = []
    for line in rendered:
        if not line.strip():
            run.append("")
            continue
        out.extend(run[:1] if len(run) >= 3 else run)
        run = []
        out.append(line)
    out.extend(run[:1] if len(run) >= 3 else run)
    return out


def render_lines(lines: Iterable[FormattedLine], *, indent: str = INDENT_UNIT) -> str:
    rendered = [f"{indent * line.depth}{line.text}" if line.text else "" for line in lines]
    return "\n".join(collapse_blank_runs(rendered))


def format_source(source: str, *, tab_width: int = 4) -> str:
    """Return ``source`` re-rendered in canonical indented form.

    Total over all inputs: statements end up one per line, block contents are
    indented two spaces per level and blank-line structure is discarded.
    """

    with telemetry.span(
        "formatter::format",
        component="formatting",
        metadata={"length": len(source)},
    ) as handle:
        engine = IndentEngine().feed_all(tokenize(source, tab_width=tab_width))
        lines = engine.finish()
        handle.add_metadata("lines", len(lines))
        return render_lines(lines)


__all__ = [
    "FormattedLine",
    "IndentEngine",
    "collapse_blank_runs",
    "format_source",
    "render_lines",
]
