"""Read/write access to files under the workspace root."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from mingo_editor.runtime import telemetry

from .tree import TreeEntry

SKIPPED_NAMES = {".git", "node_modules", "bin"}
SOURCE_SUFFIX = ".mg"
EXAMPLES_DIR = "examples"


@dataclass(frozen=True, slots=True)
class FileResult:
    """Outcome of a workspace file operation; failures carry ``error``."""

    ok: bool
    content: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "FileResult":
        return cls(ok=False, error=error)


class WorkspaceFiles:
    """File collaborator confined to ``root``.

    Paths are given relative to the root; anything resolving outside of it is
    rejected with ``"Invalid path"`` rather than raising.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    def resolve(self, rel_path: str) -> Optional[Path]:
        candidate = (self.root / rel_path).resolve()
        if not candidate.is_relative_to(self.root):
            return None
        return candidate

    def read(self, rel_path: str) -> FileResult:
        target = self.resolve(rel_path)
        if target is None:
            return FileResult.failure("Invalid path")
        try:
            return FileResult(ok=True, content=target.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            return self._failed("read", rel_path, exc)

    def write(self, rel_path: str, content: str) -> FileResult:
        target = self.resolve(rel_path)
        if target is None:
            return FileResult.failure("Invalid path")
        with telemetry.span(
            "workspace::write",
            component="workspace",
            metadata={"path": rel_path, "length": len(content)},
        ):
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content, encoding="utf-8")
            except OSError as exc:
                return self._failed("write", rel_path, exc)
        return FileResult(ok=True)

    def entries(self, *, max_depth: int = 6) -> Iterator[TreeEntry]:
        """Walk the root the way the file browser lists it (no dotfiles)."""

        def _walk(directory: Path, depth: int) -> Iterator[TreeEntry]:
            if depth < 0:
                return
            try:
                children = sorted(directory.iterdir())
            except OSError:
                return
            for child in children:
                if child.name in SKIPPED_NAMES or child.name.startswith("."):
                    continue
                rel = child.relative_to(self.root).as_posix()
                if child.is_dir():
                    yield TreeEntry(kind="dir", path=rel)
                    yield from _walk(child, depth - 1)
                else:
                    yield TreeEntry(kind="file", path=rel)

        yield from _walk(self.root, max_depth)

    def list_examples(self) -> List[str]:
        """Names of ``.mg`` files at the root, then under ``examples/``."""

        names = [path.name for path in self._sources(self.root)]
        names.extend(
            f"{EXAMPLES_DIR}/{path.name}"
            for path in self._sources(self.root / EXAMPLES_DIR)
        )
        return names

    def load_example(self, name: str) -> FileResult:
        attempts = [name]
        if not name.startswith(f"{EXAMPLES_DIR}/"):
            attempts.append(f"{EXAMPLES_DIR}/{name}")
        for attempt in attempts:
            target = self.resolve(attempt)
            if target is not None and target.is_file():
                return self.read(attempt)
        return FileResult.failure(f"Example not found: {name}")

    @staticmethod
    def _sources(directory: Path) -> List[Path]:
        try:
            children = sorted(directory.iterdir())
        except OSError:
            return []
        return [
            child
            for child in children
            if child.is_file()
            and child.name.endswith(SOURCE_SUFFIX)
            and not child.name.startswith(".")
        ]

    @staticmethod
    def _failed(operation: str, rel_path: str, exc: Exception) -> FileResult:
        telemetry.record_event(
            f"workspace.{operation}_failed",
            level="warning",
            data={"path": rel_path, "error": str(exc)},
        )
        return FileResult.failure(str(exc))


__all__ = ["FileResult", "WorkspaceFiles"]
