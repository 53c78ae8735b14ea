"""Executable Textual app hosting the Mingo editing core."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

try:  # pragma: no cover - imported only when the app is run
    from textual.app import App, ComposeResult
    from textual.containers import Horizontal, Vertical
    from textual.widgets import Footer, Header, Static, TextArea, Tree
    from textual.widgets.tree import TreeNode as UITreeNode
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use mingo_editor.adapters.textual.app"
    ) from exc

from mingo_editor.buffer import BufferMirror
from mingo_editor.diagnostics import ExecutionResult, MarkerSet
from mingo_editor.runtime import EditorSettings, telemetry
from mingo_editor.workspace import TreeNode, WorkspaceFiles, build_tree, iter_tree

from .controller import EditorController, EditorUIHooks, create_controller

DEFAULT_SOURCE = "let x = 10;\nprint(x);"
NOTIFIED_EVENTS = {
    "diagnostics.failed",
    "diagnostics.malformed",
    "workspace.read_failed",
    "workspace.write_failed",
}


class MingoEditorApp(App[None]):
    """Editor pane, problems panel, output console and workspace tree."""

    CSS = """
	#workspace {
		width: 30;
		border: round $accent;
	}

	#editor {
		height: 2fr;
	}

	#problems {
		height: 6;
		border: round $error;
		padding: 0 1;
		overflow: auto;
	}

	#console {
		height: 1fr;
		border: round $accent;
		padding: 0 1;
		overflow: auto;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("f5", "run_source", "Run"),
        ("f6", "format_source", "Format"),
        ("f8", "quick_fix", "Quick fix"),
        ("f2", "complete", "Complete"),
        ("f4", "next_example", "Example"),
        ("ctrl+s", "save_file", "Save"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        *,
        settings: EditorSettings,
        path: Optional[Path] = None,
    ) -> None:
        super().__init__()
        self.settings = settings
        self._path = path
        self.controller: EditorController | None = None
        self._editor: TextArea | None = None
        self._problems: Static | None = None
        self._console: Static | None = None
        self._status: Static | None = None
        self._workspace: Tree[str] | None = None
        self._files = WorkspaceFiles(settings.root)
        self._examples: list[str] = []
        self._example_index = -1
        self._detach_events: Optional[Callable[[], None]] = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal():
            self._workspace = Tree(self.settings.root.name or "workspace", id="workspace")
            yield self._workspace
            with Vertical():
                self._editor = TextArea("", id="editor")
                yield self._editor
                self._problems = Static("", id="problems", markup=False)
                yield self._problems
                self._console = Static("", id="console", markup=False)
                yield self._console
        self._status = Static("", id="status-line", markup=False)
        yield self._status
        yield Footer()

    async def on_mount(self) -> None:
        hooks = EditorUIHooks(
            update_buffer=self._update_buffer,
            update_markers=self._update_markers,
            update_status=self._update_status,
            show_output=self._show_output,
            log=self._log_line,
        )
        self._detach_events = telemetry.add_listener(self._on_event)
        self.controller = create_controller(
            hooks,
            settings=self.settings,
            text="" if self._path else DEFAULT_SOURCE,
            files=self._files,
        )
        if self._path is not None:
            self.controller.open_file(_relative_to(self._path, self._files.root))
        self._examples = self._files.list_examples()
        self._populate_workspace()
        self.set_interval(0.05, self._tick)

    def on_unmount(self) -> None:
        if self._detach_events is not None:
            self._detach_events()

    def _on_event(self, name: str, payload: Dict[str, Any]) -> None:
        if name in NOTIFIED_EVENTS:
            self.notify(f"{name}: {payload.get('error', '')}", severity="warning")

    def _tick(self) -> None:
        if self.controller and self.controller.diagnostics_due():
            self.run_worker(self.controller.process_timeouts(), group="diagnostics")

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if self.controller:
            self.controller.handle_host_edit(event.text_area.text)

    async def action_run_source(self) -> None:
        if self.controller:
            await self.controller.run()

    def action_format_source(self) -> None:
        if self.controller:
            self.controller.format_buffer()

    def action_quick_fix(self) -> None:
        if self.controller:
            self.controller.apply_quick_fix()

    def action_complete(self) -> None:
        if not (self.controller and self._editor):
            return
        cursor = self._editor.cursor_location
        items = self.controller.completions_at(cursor)
        if not items:
            self._update_status("no completions")
            return
        self.controller.insert_completion(items[0], cursor=cursor)

    def action_save_file(self) -> None:
        if self.controller:
            self.controller.save_file()

    def action_next_example(self) -> None:
        if not (self.controller and self._examples):
            self._update_status("no examples found")
            return
        self._example_index = (self._example_index + 1) % len(self._examples)
        self.controller.load_example(self._examples[self._example_index])

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        path = event.node.data
        if self.controller and path and not event.node.allow_expand:
            self.controller.open_file(path)

    def _update_buffer(self, mirror: BufferMirror) -> None:
        if self._editor and self._editor.text != mirror.text:
            self._editor.load_text(mirror.text)
            self._editor.move_cursor(mirror.cursor)

    def _update_markers(self, marker_set: MarkerSet) -> None:
        if self._problems is None:
            return
        lines = [marker.label for marker in marker_set.markers]
        if marker_set.error and not lines:
            lines.append(marker_set.error)
        self._problems.update("\n".join(lines))

    def _update_status(self, status: str) -> None:
        if self._status:
            self._status.update(status)

    def _show_output(self, result: ExecutionResult) -> None:
        if self._console:
            self._console.update(result.stdout + result.stderr)

    def _log_line(self, line: str) -> None:
        telemetry.record_event("ui.log", level="debug", data={"line": line})

    def _populate_workspace(self) -> None:
        if self._workspace is None:
            return
        tree = build_tree(self._files.entries())
        self._workspace.root.expand()
        _attach(self._workspace.root, tree)


def _attach(root: UITreeNode[str], tree: Dict[str, TreeNode]) -> None:
    parents = [root]
    prefixes = [""]
    for depth, name, is_dir in iter_tree(tree):
        del parents[depth + 1 :]
        del prefixes[depth + 1 :]
        path = prefixes[depth] + name
        if is_dir:
            parents.append(parents[depth].add(name, data=path))
            prefixes.append(path + "/")
        else:
            parents[depth].add_leaf(name, data=path)


def _relative_to(path: Path, root: Path) -> str:
    resolved = path.resolve()
    if resolved.is_relative_to(root):
        return resolved.relative_to(root).as_posix()
    # Rejected by the workspace collaborator as outside the root.
    return str(resolved)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Edit and run Mingo programs.")
    parser.add_argument("path", nargs="?", type=Path, help="Source file to open")
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Workspace root holding bin/diag and bin/run (default: $MINGO_EDITOR_ROOT or cwd)",
    )
    parser.add_argument(
        "--debounce-ms",
        type=int,
        default=None,
        help="Quiet period before diagnostics are requested (default: 250)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    telemetry.configure(preset="quiet")
    settings = EditorSettings.from_env().with_overrides(
        root=args.root, debounce_ms=args.debounce_ms
    )
    app = MingoEditorApp(settings=settings, path=args.path)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual entry point
    main()