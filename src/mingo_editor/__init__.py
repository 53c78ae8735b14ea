"""Diagnostics synchronization and source reformatting core for Mingo."""

__all__ = [
    "adapters",
    "buffer",
    "completion",
    "diagnostics",
    "formatting",
    "runtime",
    "workspace",
]

__version__ = "0.1.0"
