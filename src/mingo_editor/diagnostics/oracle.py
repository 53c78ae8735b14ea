"""Oracle interfaces and the default subprocess-backed adapters."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional

from mingo_editor.runtime import telemetry


@dataclass(frozen=True, slots=True)
class DiagnosticsReply:
    """Raw answer of the diagnostics oracle.

    ``payload`` is the oracle's stdout (a JSON array when healthy);
    ``missing`` signals that the oracle could not be reached at all.
    """

    payload: Optional[str] = None
    missing: bool = False
    stderr: str = ""


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    exit_code: int
    stdout: str = ""
    stderr: str = ""


DiagnosticsOracle = Callable[[str], Awaitable[DiagnosticsReply]]
ExecutionOracle = Callable[[str], Awaitable[ExecutionResult]]


async def _communicate(binary: Path, source: str) -> tuple[int, str, str]:
    process = await asyncio.create_subprocess_exec(
        str(binary),
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    out, err = await process.communicate(source.encode("utf-8"))
    code = process.returncode if process.returncode is not None else -1
    return (
        code,
        out.decode("utf-8", errors="replace"),
        err.decode("utf-8", errors="replace"),
    )


class SubprocessDiagnosticsOracle:
    """Feeds the buffer to the ``diag`` binary and returns its stdout."""

    def __init__(self, binary: Path) -> None:
        self.binary = Path(binary)

    async def __call__(self, source: str) -> DiagnosticsReply:
        if not self.binary.is_file():
            return DiagnosticsReply(missing=True)
        with telemetry.span(
            "oracle::diagnostics",
            component="oracle",
            metadata={"binary": self.binary.name},
        ) as handle:
            try:
                code, out, err = await _communicate(self.binary, source)
            except OSError as exc:
                handle.add_metadata("spawn_error", exc)
                return DiagnosticsReply(payload="", stderr=str(exc))
            handle.add_metadata("exit_code", code)
            return DiagnosticsReply(payload=out, stderr=err)


class SubprocessRunner:
    """Runs the buffer through the ``run`` binary (the VM)."""

    def __init__(self, binary: Path) -> None:
        self.binary = Path(binary)

    async def __call__(self, source: str) -> ExecutionResult:
        if not self.binary.is_file():
            return ExecutionResult(
                exit_code=-1,
                stderr=f"Mingo runner not found at {self.binary}. Build it first (make build).",
            )
        with telemetry.span(
            "oracle::run",
            component="oracle",
            metadata={"binary": self.binary.name},
        ) as handle:
            try:
                code, out, err = await _communicate(self.binary, source)
            except OSError as exc:
                handle.add_metadata("spawn_error", exc)
                return ExecutionResult(
                    exit_code=-1, stderr=f"Failed to start runner: {exc}"
                )
            handle.add_metadata("exit_code", code)
            return ExecutionResult(exit_code=code, stdout=out, stderr=err)


__all__ = [
    "DiagnosticsOracle",
    "DiagnosticsReply",
    "ExecutionOracle",
    "ExecutionResult",
    "SubprocessDiagnosticsOracle",
    "SubprocessRunner",
]
