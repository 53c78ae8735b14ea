from __future__ import annotations

import asyncio
import json
from typing import Callable, List, Optional

from mingo_editor.buffer import Buffer
from mingo_editor.diagnostics import (
    DiagnosticScheduler,
    DiagnosticsReply,
    MarkerSet,
    OracleUnavailableError,
)
from mingo_editor.runtime import telemetry


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000.0


class FakeOracle:
    """Answers with queued replies; ``during`` runs while the call is in flight."""

    def __init__(self) -> None:
        self.calls: List[str] = []
        self.replies: List[DiagnosticsReply] = []
        self.during: Optional[Callable[[], None]] = None

    async def __call__(self, source: str) -> DiagnosticsReply:
        self.calls.append(source)
        if self.during is not None:
            hook, self.during = self.during, None
            hook()
        await asyncio.sleep(0)
        if self.replies:
            return self.replies.pop(0)
        return DiagnosticsReply(payload="[]")


def reply_with(*errors: tuple[int, int, str]) -> DiagnosticsReply:
    payload = [{"msg": msg, "line": line, "column": col} for line, col, msg in errors]
    return DiagnosticsReply(payload=json.dumps(payload))


def make_scheduler(
    text: str = "let x = 1",
) -> tuple[DiagnosticScheduler, Buffer, FakeOracle, FakeClock, List[MarkerSet]]:
    buffer = Buffer.from_text(text)
    oracle = FakeOracle()
    clock = FakeClock()
    published: List[MarkerSet] = []
    scheduler = DiagnosticScheduler(
        buffer, oracle, debounce_ms=250, clock=clock, publish=published.append
    )
    return scheduler, buffer, oracle, clock, published


def edit(scheduler: DiagnosticScheduler, buffer: Buffer, text: str) -> None:
    buffer.set_text(text)
    scheduler.notify_edit()


def test_nothing_fires_before_quiet_period() -> None:
    scheduler, buffer, oracle, clock, _ = make_scheduler()
    edit(scheduler, buffer, "let x = 2")
    clock.advance(249)

    assert scheduler.due() is False
    assert asyncio.run(scheduler.process_timeouts()) is None
    assert oracle.calls == []


def test_burst_of_edits_triggers_single_request() -> None:
    scheduler, buffer, oracle, clock, published = make_scheduler()
    for text in ("l", "le", "let", "let y"):
        edit(scheduler, buffer, text)
        clock.advance(100)
    clock.advance(250)

    outcome = asyncio.run(scheduler.process_timeouts())

    assert outcome is not None and outcome.status == "published"
    assert oracle.calls == ["let y"]
    assert len(published) == 1
    assert published[0].generation == buffer.generation
    assert asyncio.run(scheduler.process_timeouts()) is None


def test_markers_are_mapped_from_reply() -> None:
    scheduler, buffer, oracle, clock, published = make_scheduler()
    oracle.replies.append(reply_with((1, 9, "expected next token to be SEMICOLON")))
    edit(scheduler, buffer, "let x = 1\nprint(x)")
    clock.advance(250)

    asyncio.run(scheduler.process_timeouts())

    (marker,) = published[-1].markers
    assert (marker.start_line, marker.start_column, marker.end_column) == (1, 9, 10)
    assert scheduler.markers is published[-1]


def test_reply_for_superseded_generation_is_dropped() -> None:
    scheduler, buffer, oracle, clock, published = make_scheduler()
    oracle.replies.append(reply_with((1, 1, "old")))
    edit(scheduler, buffer, "let x")
    clock.advance(250)
    oracle.during = lambda: edit(scheduler, buffer, "let x = 1;")

    outcome = asyncio.run(scheduler.process_timeouts())

    assert outcome is not None and outcome.status == "stale"
    assert published == []
    assert scheduler.pending is not None

    clock.advance(250)
    fresh = asyncio.run(scheduler.process_timeouts())

    assert fresh is not None and fresh.status == "published"
    assert published[-1].generation == buffer.generation
    assert published[-1].markers == ()


def test_at_most_one_reply_accepted_per_generation() -> None:
    scheduler, buffer, oracle, clock, published = make_scheduler()
    edit(scheduler, buffer, "x")
    asyncio.run(scheduler.flush())
    scheduler.notify_edit()  # re-armed without a mutation

    second = asyncio.run(scheduler.flush())

    assert second is not None and second.status == "stale"
    assert len(published) == 1


def test_unavailable_oracle_keeps_previous_markers() -> None:
    scheduler, buffer, oracle, clock, published = make_scheduler()
    oracle.replies.append(reply_with((1, 1, "first")))
    edit(scheduler, buffer, "a")
    asyncio.run(scheduler.flush())
    shown = scheduler.markers

    oracle.replies.append(DiagnosticsReply(missing=True))
    edit(scheduler, buffer, "ab")
    outcome = asyncio.run(scheduler.flush())
    edit(scheduler, buffer, "abc")

    assert outcome is not None and outcome.status == "unavailable"
    assert scheduler.markers is shown
    assert len(published) == 1

    asyncio.run(scheduler.flush())
    assert scheduler.markers is not shown
    assert scheduler.markers is not None
    assert scheduler.markers.generation == buffer.generation


def test_oracle_unavailable_error_is_treated_as_missing() -> None:
    scheduler, buffer, _, clock, published = make_scheduler()

    async def broken(source: str) -> DiagnosticsReply:
        raise OracleUnavailableError("no compiler")

    scheduler = DiagnosticScheduler(buffer, broken, clock=clock, publish=published.append)
    scheduler.notify_edit()

    outcome = asyncio.run(scheduler.flush())

    assert outcome is not None and outcome.status == "unavailable"
    assert published == []


def test_transport_failure_keeps_markers_and_retries_on_next_edit() -> None:
    _, buffer, oracle, clock, published = make_scheduler()
    oracle.replies.append(reply_with((1, 1, "first")))

    async def flaky(source: str) -> DiagnosticsReply:
        if len(oracle.calls) == 1:
            oracle.calls.append(source)
            raise ConnectionResetError("transport dropped")
        return await oracle(source)

    scheduler = DiagnosticScheduler(buffer, flaky, clock=clock, publish=published.append)
    edit(scheduler, buffer, "a")
    asyncio.run(scheduler.flush())
    shown = scheduler.markers

    edit(scheduler, buffer, "ab")
    with telemetry.capture_events("diagnostics.") as events:
        outcome = asyncio.run(scheduler.flush())

    assert outcome is not None and outcome.status == "unavailable"
    assert scheduler.markers is shown
    assert len(published) == 1
    assert [name for name, _ in events] == ["diagnostics.failed", "diagnostics.unavailable"]
    assert "transport dropped" in events[0][1]["error"]

    edit(scheduler, buffer, "abc")
    again = asyncio.run(scheduler.flush())

    assert again is not None and again.status == "published"
    assert published[-1].generation == buffer.generation


def test_malformed_output_publishes_empty_set_with_error() -> None:
    scheduler, buffer, oracle, clock, published = make_scheduler()
    oracle.replies.append(reply_with((1, 1, "first")))
    edit(scheduler, buffer, "a")
    asyncio.run(scheduler.flush())

    oracle.replies.append(DiagnosticsReply(payload="not json"))
    edit(scheduler, buffer, "ab")
    outcome = asyncio.run(scheduler.flush())

    assert outcome is not None and outcome.status == "malformed"
    assert published[-1].markers == ()
    assert published[-1].error is not None


def test_settled_buffer_ends_with_markers_for_latest_content() -> None:
    scheduler, buffer, oracle, clock, published = make_scheduler()
    texts = ["f", "fn", "fn f", "fn f(", "fn f()"]
    for index, text in enumerate(texts):
        edit(scheduler, buffer, text)
        clock.advance(300 if index % 2 else 50)
        if index % 2:
            oracle.during = lambda i=index: edit(scheduler, buffer, texts[i] + " ")
        asyncio.run(scheduler.process_timeouts())
    clock.advance(300)
    asyncio.run(scheduler.process_timeouts())

    assert scheduler.pending is None
    assert published[-1].generation == buffer.generation
    assert oracle.calls[-1] == buffer.text
