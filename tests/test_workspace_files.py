from __future__ import annotations

from pathlib import Path

from mingo_editor.runtime import telemetry
from mingo_editor.workspace import TreeEntry, WorkspaceFiles, build_tree


def make_workspace(tmp_path: Path) -> WorkspaceFiles:
    (tmp_path / "main.mg").write_text("print(1);", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("x", encoding="utf-8")
    (tmp_path / "examples").mkdir()
    (tmp_path / "examples" / "fib.mg").write_text("fn fib(n) { n; }", encoding="utf-8")
    (tmp_path / "bin").mkdir()
    (tmp_path / "bin" / "diag").write_text("", encoding="utf-8")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".hidden.mg").write_text("", encoding="utf-8")
    return WorkspaceFiles(tmp_path)


def test_read_returns_content(tmp_path: Path) -> None:
    files = make_workspace(tmp_path)

    result = files.read("examples/fib.mg")

    assert result.ok is True
    assert result.content == "fn fib(n) { n; }"
    assert result.error is None


def test_read_missing_file_reports_error(tmp_path: Path) -> None:
    files = make_workspace(tmp_path)

    with telemetry.capture_events("workspace.") as events:
        result = files.read("missing.mg")

    assert result.ok is False
    assert result.content is None
    assert result.error
    assert [name for name, _ in events] == ["workspace.read_failed"]


def test_paths_escaping_root_are_rejected(tmp_path: Path) -> None:
    root = tmp_path / "ws"
    root.mkdir()
    files = make_workspace(root)
    (tmp_path / "secret.mg").write_text("top secret", encoding="utf-8")

    assert files.read("../secret.mg").error == "Invalid path"
    assert files.read(str(tmp_path / "secret.mg")).error == "Invalid path"
    assert files.write("../../out.mg", "x").error == "Invalid path"
    assert not (tmp_path.parent / "out.mg").exists()


def test_write_creates_parent_directories(tmp_path: Path) -> None:
    files = make_workspace(tmp_path)

    assert files.write("src/deep/new.mg", "let a = 1;").ok is True
    assert (tmp_path / "src" / "deep" / "new.mg").read_text(encoding="utf-8") == "let a = 1;"


def test_entries_skip_dotfiles_and_build_output(tmp_path: Path) -> None:
    files = make_workspace(tmp_path)

    entries = list(files.entries())

    assert entries == [
        TreeEntry(kind="dir", path="examples"),
        TreeEntry(kind="file", path="examples/fib.mg"),
        TreeEntry(kind="file", path="main.mg"),
        TreeEntry(kind="file", path="notes.txt"),
    ]
    assert build_tree(entries) == {
        "examples": {"fib.mg": None},
        "main.mg": None,
        "notes.txt": None,
    }


def test_list_examples_root_sources_first(tmp_path: Path) -> None:
    files = make_workspace(tmp_path)

    assert files.list_examples() == ["main.mg", "examples/fib.mg"]


def test_load_example_falls_back_to_examples_directory(tmp_path: Path) -> None:
    files = make_workspace(tmp_path)

    assert files.load_example("fib.mg").content == "fn fib(n) { n; }"
    assert files.load_example("examples/fib.mg").ok is True
    assert files.load_example("main.mg").content == "print(1);"

    missing = files.load_example("nope.mg")
    assert missing.ok is False
    assert missing.error == "Example not found: nope.mg"
