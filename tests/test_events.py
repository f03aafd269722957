"""
Tests for the interaction event sinks.
"""

import json

from pointerzone import events
from pointerzone.cv.hover import EventType, InteractionEvent


def test_emit_creates_parent_and_appends(tmp_path):
    path = tmp_path / "nested" / "events.jsonl"

    events.emit("window-in", path_override=str(path), window="A")
    events.emit("window-out", path_override=str(path), window="A")

    lines = [json.loads(line) for line in path.read_text().splitlines()]
    assert [(line["event"], line["window"]) for line in lines] == [("window-in", "A"), ("window-out", "A")]
    assert all("ts" in line for line in lines)


def test_event_log_listener(tmp_path):
    path = tmp_path / "events.jsonl"
    log = events.EventLog(str(path))

    log(InteractionEvent(EventType.ENTER, "play"))

    line = json.loads(path.read_text())
    assert line["event"] == "window-in"
    assert line["window"] == "play"


def test_recent_events_bounded():
    recent = events.RecentEvents(maxlen=3)
    for i in range(5):
        recent(InteractionEvent(EventType.ENTER, f"z{i}", timestamp=float(i)))

    assert [e["window"] for e in recent.latest()] == ["z2", "z3", "z4"]
    assert [e["window"] for e in recent.latest(2)] == ["z3", "z4"]
    assert recent.latest(0) == []
