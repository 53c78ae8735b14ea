"""Textual host for the editing core."""

from .controller import EditorController, EditorUIHooks, create_controller

__all__ = ["EditorController", "EditorUIHooks", "create_controller"]
