"""Environment-driven settings for the editing surface."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

ENV_PREFIX = "MINGO_EDITOR_"

DEFAULT_DEBOUNCE_MS = 250
DEFAULT_TAB_WIDTH = 4
DEFAULT_NAMESPACE = "mingo"


def _env_int(env: Mapping[str, str], key: str, fallback: int) -> int:
    value = env.get(f"{ENV_PREFIX}{key}")
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


def _binary_name(stem: str) -> str:
    return f"{stem}.exe" if sys.platform == "win32" else stem


@dataclass(frozen=True, slots=True)
class EditorSettings:
    """Knobs shared by the controller, scheduler and oracle adapters."""

    root: Path
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    tab_width: int = DEFAULT_TAB_WIDTH
    namespace: str = DEFAULT_NAMESPACE
    diagnostics_binary: Optional[Path] = None
    runner_binary: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.debounce_ms < 0:
            raise ValueError("debounce_ms cannot be negative")
        if self.tab_width < 1:
            raise ValueError("tab_width must be at least 1")

    @property
    def diag_path(self) -> Path:
        return self.diagnostics_binary or self.root / "bin" / _binary_name("diag")

    @property
    def run_path(self) -> Path:
        return self.runner_binary or self.root / "bin" / _binary_name("run")

    def with_overrides(self, **changes: object) -> "EditorSettings":
        cleaned = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **cleaned)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EditorSettings":
        source = os.environ if env is None else env
        root = Path(source.get(f"{ENV_PREFIX}ROOT") or Path.cwd())
        diag = source.get(f"{ENV_PREFIX}DIAG_BIN")
        run = source.get(f"{ENV_PREFIX}RUN_BIN")
        return cls(
            root=root,
            debounce_ms=max(0, _env_int(source, "DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS)),
            tab_width=max(1, _env_int(source, "TAB_WIDTH", DEFAULT_TAB_WIDTH)),
            namespace=source.get(f"{ENV_PREFIX}NAMESPACE") or DEFAULT_NAMESPACE,
            diagnostics_binary=Path(diag) if diag else None,
            runner_binary=Path(run) if run else None,
        )


__all__ = ["EditorSettings", "ENV_PREFIX"]
