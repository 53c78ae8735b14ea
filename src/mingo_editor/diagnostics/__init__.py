"""Diagnostics pipeline: oracle replies, markers, quick fixes, scheduling."""

from .mapper import clamp_marker, map_record, map_records, parse_records
from .models import (
    DiagnosticRecord,
    MalformedDiagnosticsError,
    Marker,
    MarkerSet,
    OracleUnavailableError,
    TextEdit,
)
from .oracle import (
    DiagnosticsReply,
    ExecutionResult,
    SubprocessDiagnosticsOracle,
    SubprocessRunner,
)
from .quickfix import propose, propose_all
from .scheduler import DiagnosticRound, DiagnosticScheduler

__all__ = [
    "DiagnosticRecord",
    "DiagnosticRound",
    "DiagnosticScheduler",
    "DiagnosticsReply",
    "ExecutionResult",
    "MalformedDiagnosticsError",
    "Marker",
    "MarkerSet",
    "OracleUnavailableError",
    "SubprocessDiagnosticsOracle",
    "SubprocessRunner",
    "TextEdit",
    "clamp_marker",
    "map_record",
    "map_records",
    "parse_records",
    "propose",
    "propose_all",
]
