"""Debounced diagnostics requests guarded by the buffer generation."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from mingo_editor.buffer import Buffer
from mingo_editor.runtime import telemetry

from .mapper import map_records, parse_records
from .models import MalformedDiagnosticsError, MarkerSet, OracleUnavailableError
from .oracle import DiagnosticsOracle, DiagnosticsReply

Clock = Callable[[], float]
MarkerSink = Callable[[MarkerSet], None]

RoundStatus = Literal["published", "malformed", "unavailable", "stale"]


@dataclass
class PendingRound:
    deadline: float
    armed_generation: int
    ticket: int


@dataclass(frozen=True, slots=True)
class DiagnosticRound:
    """Outcome of one oracle round trip."""

    status: RoundStatus
    generation: int
    markers: Optional[MarkerSet] = None


class DiagnosticScheduler:
    """Keeps one debounce timer per buffer and applies only fresh results.

    ``notify_edit`` (re)arms the timer. Once it expires, ``process_timeouts``
    snapshots the buffer at generation ``G`` and awaits the oracle; the reply
    is applied only if the buffer is still at ``G`` and nothing has been
    accepted for ``G`` yet. Everything else is dropped without touching the
    published marker set.
    """

    def __init__(
        self,
        buffer: Buffer,
        oracle: DiagnosticsOracle,
        *,
        debounce_ms: int = 250,
        clock: Clock = time.monotonic,
        publish: Optional[MarkerSink] = None,
        namespace: str = "mingo",
    ) -> None:
        if debounce_ms < 0:
            raise ValueError("debounce_ms cannot be negative")
        self.buffer = buffer
        self.namespace = namespace
        self._oracle = oracle
        self._debounce_s = debounce_ms / 1000.0
        self._clock = clock
        self._publish = publish
        self._pending: Optional[PendingRound] = None
        self._ticket = 0
        self._accepted_generation = -1
        self._published: Optional[MarkerSet] = None

    @property
    def markers(self) -> Optional[MarkerSet]:
        return self._published

    @property
    def pending(self) -> Optional[PendingRound]:
        return self._pending

    def notify_edit(self) -> None:
        self._ticket += 1
        self._pending = PendingRound(
            deadline=self._clock() + self._debounce_s,
            armed_generation=self.buffer.generation,
            ticket=self._ticket,
        )

    def due(self) -> bool:
        return self._pending is not None and self._pending.deadline <= self._clock()

    async def process_timeouts(self) -> Optional[DiagnosticRound]:
        """Run a round if the debounce timer expired, else return ``None``."""

        if not self.due():
            return None
        return await self._fire()

    async def flush(self) -> Optional[DiagnosticRound]:
        """Run the pending round immediately, ignoring the deadline."""

        if self._pending is None:
            return None
        return await self._fire()

    async def _fire(self) -> DiagnosticRound:
        pending = self._pending
        assert pending is not None
        # Popped before the await so overlapping polls never fire it twice.
        self._pending = None
        view = self.buffer.snapshot()
        with telemetry.span(
            "diagnostics::round",
            component="diagnostics",
            metadata={
                "generation": view.version,
                "armed_generation": pending.armed_generation,
                "ticket": pending.ticket,
            },
        ) as handle:
            try:
                reply = await self._oracle(view.text)
            except OracleUnavailableError as exc:
                reply = DiagnosticsReply(missing=True, stderr=str(exc))
            except Exception as exc:
                telemetry.record_event(
                    "diagnostics.failed",
                    level="warning",
                    data={"generation": view.version, "error": repr(exc)},
                )
                reply = DiagnosticsReply(missing=True, stderr=str(exc))
            outcome = self._settle(view.version, reply)
            handle.add_metadata("status", outcome.status)
        return outcome

    def _settle(self, generation: int, reply: DiagnosticsReply) -> DiagnosticRound:
        current = self.buffer.generation
        if current != generation or generation <= self._accepted_generation:
            telemetry.record_event(
                "diagnostics.stale",
                level="debug",
                data={"generation": generation, "current": current},
            )
            return DiagnosticRound(status="stale", generation=generation)

        if reply.missing:
            telemetry.record_event(
                "diagnostics.unavailable",
                level="debug",
                data={"generation": generation},
            )
            return DiagnosticRound(
                status="unavailable", generation=generation, markers=self._published
            )

        status: RoundStatus
        try:
            records = parse_records(reply.payload)
        except MalformedDiagnosticsError as exc:
            telemetry.record_event(
                "diagnostics.malformed",
                level="warning",
                data={"generation": generation, "error": str(exc)},
            )
            marker_set = MarkerSet(
                generation=generation, namespace=self.namespace, error=str(exc)
            )
            status = "malformed"
        else:
            marker_set = MarkerSet(
                generation=generation,
                markers=map_records(records),
                namespace=self.namespace,
                error=reply.stderr.strip() or None,
            )
            status = "published"

        self._accepted_generation = generation
        self._published = marker_set
        if self._publish is not None:
            self._publish(marker_set)
        return DiagnosticRound(status=status, generation=generation, markers=marker_set)


__all__ = ["DiagnosticRound", "DiagnosticScheduler", "PendingRound"]
