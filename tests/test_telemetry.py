from __future__ import annotations

from typing import Any, Dict, List, Tuple

from mingo_editor.runtime import telemetry


def test_listener_sees_events_until_detached() -> None:
    seen: List[Tuple[str, Dict[str, Any]]] = []
    detach = telemetry.add_listener(lambda name, payload: seen.append((name, payload)))

    telemetry.record_event("editor.opened", data={"path": "main.mg"})
    detach()
    telemetry.record_event("editor.closed")

    assert seen == [("editor.opened", {"event": "editor.opened", "path": "main.mg"})]
    detach()  # detaching twice is harmless


def test_capture_events_filters_by_prefix() -> None:
    with telemetry.capture_events("workspace.") as events:
        telemetry.record_event("workspace.write_failed", level="warning", data={"error": "x"})
        telemetry.record_event("diagnostics.stale", level="debug")

    telemetry.record_event("workspace.read_failed", level="warning")

    assert [name for name, _ in events] == ["workspace.write_failed"]
