"""Workspace views built from collaborator listings."""

from .files import FileResult, WorkspaceFiles
from .tree import TreeEntry, TreeNode, build_tree, iter_tree

__all__ = [
    "FileResult",
    "TreeEntry",
    "TreeNode",
    "WorkspaceFiles",
    "build_tree",
    "iter_tree",
]
