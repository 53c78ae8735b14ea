"""Runtime services: telemetry and settings."""

from .settings import EditorSettings

__all__ = ["EditorSettings", "telemetry"]
