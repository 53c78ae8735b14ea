"""Nest flat workspace listings into a name -> node mapping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, Literal, Mapping, Optional, Tuple, Union

EntryKind = Literal["file", "dir"]
TreeNode = Optional[Dict[str, "TreeNode"]]


@dataclass(frozen=True, slots=True)
class TreeEntry:
    kind: EntryKind
    path: str

    def __post_init__(self) -> None:
        if self.kind not in ("file", "dir"):
            raise ValueError(f"unknown entry kind '{self.kind}'")

    @classmethod
    def coerce(cls, item: Union["TreeEntry", Mapping[str, Any]]) -> "TreeEntry":
        if isinstance(item, TreeEntry):
            return item
        raw = str(item.get("kind") or item.get("type") or "file").lower()
        kind: EntryKind = "dir" if raw in ("dir", "directory") else "file"
        return cls(kind=kind, path=str(item.get("path", "")))

    @property
    def parts(self) -> tuple[str, ...]:
        return tuple(part for part in self.path.replace("\\", "/").split("/") if part)


def build_tree(
    items: Iterable[Union[TreeEntry, Mapping[str, Any]]],
) -> Dict[str, TreeNode]:
    """Build ``{name: subtree}``; directories are dicts, files are ``None``.

    Intermediate directories are created on demand, so input order does not
    matter. When two entries disagree on the kind of a path the later one
    wins.
    """

    root: Dict[str, TreeNode] = {}
    for item in items:
        entry = TreeEntry.coerce(item)
        parts = entry.parts
        if not parts:
            continue
        node = root
        for name in parts[:-1]:
            child = node.get(name)
            if child is None:
                child = node[name] = {}
            node = child
        leaf = parts[-1]
        if entry.kind == "dir":
            if node.get(leaf) is None:
                node[leaf] = {}
        else:
            node[leaf] = None
    return root


def iter_tree(
    tree: Mapping[str, TreeNode], *, depth: int = 0
) -> Iterator[Tuple[int, str, bool]]:
    """Yield ``(depth, name, is_dir)`` with directories listed before files."""

    ordered = sorted(tree.items(), key=lambda item: (item[1] is None, item[0].lower()))
    for name, child in ordered:
        yield depth, name, child is not None
        if child:
            yield from iter_tree(child, depth=depth + 1)


__all__ = ["TreeEntry", "TreeNode", "build_tree", "iter_tree"]
