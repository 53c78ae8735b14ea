"""Editing-surface controller that wires the core into host UI callbacks."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from mingo_editor.buffer import Buffer, BufferDelta, BufferMirror, Cursor, clamp_cursor
from mingo_editor.completion import CompletionItem, complete, word_prefix
from mingo_editor.diagnostics import (
    DiagnosticRound,
    DiagnosticScheduler,
    ExecutionResult,
    Marker,
    MarkerSet,
    SubprocessDiagnosticsOracle,
    SubprocessRunner,
    TextEdit,
    clamp_marker,
    propose_all,
)
from mingo_editor.diagnostics.oracle import DiagnosticsOracle, ExecutionOracle
from mingo_editor.diagnostics.scheduler import Clock
from mingo_editor.formatting import format_source
from mingo_editor.runtime import EditorSettings
from mingo_editor.workspace import FileResult, WorkspaceFiles


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class EditorUIHooks:
    """Callbacks the controller uses to update host widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_markers: Callable[[MarkerSet], None] = _noop
    update_status: Callable[[str], None] = _noop
    show_output: Callable[[ExecutionResult], None] = _noop
    log: Callable[[str], None] = _noop


class EditorController:
    """Owns the buffer, the diagnostics scheduler and the runner."""

    def __init__(
        self,
        buffer: Buffer,
        hooks: EditorUIHooks,
        *,
        diagnostics_oracle: DiagnosticsOracle,
        runner: ExecutionOracle,
        settings: EditorSettings,
        clock: Clock = time.monotonic,
        files: Optional[WorkspaceFiles] = None,
    ) -> None:
        self.buffer = buffer
        self.hooks = hooks
        self.settings = settings
        self.files = files or WorkspaceFiles(settings.root)
        self._runner = runner
        self.scheduler = DiagnosticScheduler(
            buffer,
            diagnostics_oracle,
            debounce_ms=settings.debounce_ms,
            clock=clock,
            publish=self._publish_markers,
            namespace=settings.namespace,
        )
        self._refresh_buffer()
        # Initial diagnostics for whatever the buffer was opened with.
        self.scheduler.notify_edit()

    def handle_host_edit(self, text: str) -> bool:
        """Adopt text typed into the host widget; returns whether it changed."""

        delta = self.buffer.set_text(text, label="host_edit")
        if delta is None:
            return False
        self._after_mutation("host_edit")
        return True

    def diagnostics_due(self) -> bool:
        return self.scheduler.due()

    async def process_timeouts(self) -> Optional[DiagnosticRound]:
        """Forward an expired debounce timer to the scheduler."""

        outcome = await self.scheduler.process_timeouts()
        if outcome is None:
            return None
        self._log_state(
            "diagnostics <-", status=outcome.status, round_generation=outcome.generation
        )
        if outcome.status == "unavailable":
            self.hooks.update_status("diagnostics unavailable")
        return outcome

    def visible_markers(self) -> Tuple[Marker, ...]:
        marker_set = self.scheduler.markers
        if marker_set is None:
            return ()
        lines = self.buffer.lines
        return tuple(clamp_marker(marker, lines) for marker in marker_set.markers)

    def format_buffer(self) -> bool:
        formatted = format_source(self.buffer.text, tab_width=self.settings.tab_width)
        delta = self.buffer.set_text(formatted, label="format")
        if delta is None:
            self.hooks.update_status("already formatted")
            return False
        self._after_mutation("format")
        self._refresh_buffer()
        self.hooks.update_status("formatted")
        return True

    def quick_fixes(self) -> List[Tuple[Marker, TextEdit]]:
        """Fixes for the published markers, if they describe the current text."""

        marker_set = self.scheduler.markers
        if marker_set is None or not marker_set.is_current(self.buffer.generation):
            return []
        return propose_all(marker_set.markers, self.buffer.lines)

    def apply_quick_fix(self, index: int = 0) -> Optional[TextEdit]:
        fixes = self.quick_fixes()
        if not 0 <= index < len(fixes):
            self.hooks.update_status("no quick fix available")
            return None
        _marker, edit = fixes[index]
        self.buffer.apply_edit(edit)
        self._after_mutation("quick_fix")
        self._refresh_buffer()
        self.hooks.update_status(edit.title)
        return edit

    async def run(self) -> ExecutionResult:
        self.hooks.update_status("Running...")
        result = await self._runner(self.buffer.text)
        self.hooks.show_output(result)
        self.hooks.update_status(f"Exit {result.exit_code}")
        self._log_state("run <-", exit_code=result.exit_code)
        return result

    def completions(self, prefix: str = "") -> List[CompletionItem]:
        return complete(self.buffer.text, prefix=prefix)

    def completions_at(self, cursor: Optional[Cursor] = None) -> List[CompletionItem]:
        """Items matching the identifier typed just before ``cursor``."""

        row, col = self._cursor(cursor)
        return self.completions(word_prefix(self.buffer.lines[row][:col]))

    def insert_completion(
        self, item: CompletionItem, *, cursor: Optional[Cursor] = None
    ) -> BufferDelta:
        """Replace the identifier before ``cursor`` with the item's text."""

        row, col = self._cursor(cursor)
        prefix = word_prefix(self.buffer.lines[row][:col])
        delta = self.buffer.replace_range(
            (row, col - len(prefix)), (row, col), item.plain_text, label="completion"
        )
        self._after_mutation("completion")
        self._refresh_buffer()
        self.hooks.update_status(f"inserted {item.label}")
        return delta

    def open_file(self, rel_path: str) -> FileResult:
        return self._load(rel_path, self.files.read(rel_path))

    def load_example(self, name: str) -> FileResult:
        return self._load(name, self.files.load_example(name))

    def save_file(self, rel_path: Optional[str] = None) -> FileResult:
        target = rel_path or self.buffer.name
        result = self.files.write(target, self.buffer.text)
        if result.ok:
            self.buffer.name = target
            self.hooks.update_status(f"saved {target}")
        else:
            self.hooks.update_status(f"save failed: {result.error}")
        self._log_state("save ->", path=target, ok=result.ok)
        return result

    def _load(self, name: str, result: FileResult) -> FileResult:
        if not result.ok:
            self.hooks.update_status(f"cannot open {name}: {result.error}")
            return result
        self.buffer.name = name
        # Generation keeps increasing across files so in-flight rounds go stale.
        if self.buffer.set_text(result.content or "", label="open") is not None:
            self._after_mutation("open")
        self._refresh_buffer()
        self.hooks.update_status(f"opened {name}")
        return result

    def _cursor(self, cursor: Optional[Cursor]) -> Cursor:
        row, col = cursor if cursor is not None else self.buffer.state.cursor
        return clamp_cursor(self.buffer.document, row, col)

    def _after_mutation(self, label: str) -> None:
        self.scheduler.notify_edit()
        self._log_state("edit ->", label=label)

    def _publish_markers(self, marker_set: MarkerSet) -> None:
        lines = self.buffer.lines
        clamped = MarkerSet(
            generation=marker_set.generation,
            markers=tuple(clamp_marker(marker, lines) for marker in marker_set.markers),
            namespace=marker_set.namespace,
            error=marker_set.error,
        )
        self.hooks.update_markers(clamped)
        if clamped.error and not clamped.markers:
            self.hooks.update_status(f"diagnostics error: {clamped.error}")
        else:
            count = len(clamped)
            self.hooks.update_status(f"{count} problem{'s' if count != 1 else ''}")

    def _refresh_buffer(self) -> None:
        self.hooks.update_buffer(self.buffer.mirror())

    def _log_state(self, prefix: str, **fields: object) -> None:
        try:
            snapshot = self._state_metadata()
            snapshot.update({k: v for k, v in fields.items() if v is not None})
            parts = [prefix]
            for key, value in snapshot.items():
                parts.append(f"{key}={value!r}")
            self.hooks.log(" ".join(parts))
        except Exception:
            pass

    def _state_metadata(self) -> Dict[str, object]:
        marker_set = self.scheduler.markers
        return {
            "buffer": self.buffer.name,
            "generation": self.buffer.generation,
            "cursor": self.buffer.state.cursor,
            "markers": len(marker_set) if marker_set else 0,
            "pending_diagnostics": self.scheduler.pending is not None,
        }


def create_controller(
    hooks: EditorUIHooks,
    *,
    settings: Optional[EditorSettings] = None,
    text: str = "",
    name: str = "untitled.mg",
    files: Optional[WorkspaceFiles] = None,
) -> EditorController:
    """Build a controller backed by the subprocess oracles from ``settings``."""

    resolved = settings or EditorSettings.from_env()
    return EditorController(
        Buffer.from_text(text, name=name),
        hooks,
        diagnostics_oracle=SubprocessDiagnosticsOracle(resolved.diag_path),
        runner=SubprocessRunner(resolved.run_path),
        settings=resolved,
        files=files,
    )


__all__ = ["EditorController", "EditorUIHooks", "create_controller"]
