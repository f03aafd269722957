import json, os, pathlib, threading, time
from collections import deque
from typing import Any, Dict, List, Optional

from .cv.hover import InteractionEvent
from .utils.config import SETTINGS

PATH = os.environ.get("POINTERZONE_EVENTS", str(SETTINGS.events_path))

def path() -> str:
    return PATH

def emit(kind: str, path_override: Optional[str] = None, **kv):
    p = pathlib.Path(path_override or PATH)
    p.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
    line = {"ts": time.time(), "event": kind, **kv}
    with open(p, "a") as f:
        f.write(json.dumps(line) + "\n")
    return line


class EventLog:
    """Event listener appending interaction events to a JSON-lines file."""

    def __init__(self, path: Optional[str] = None):
        self.path = path or PATH
        self._lock = threading.Lock()

    def __call__(self, event: InteractionEvent) -> None:
        with self._lock:
            emit(event.type.value, path_override=self.path, window=event.zone_id)


class RecentEvents:
    """Event listener keeping the last N events in memory."""

    def __init__(self, maxlen: int = 200):
        self._events: deque = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def __call__(self, event: InteractionEvent) -> None:
        with self._lock:
            self._events.append(event.to_dict())

    def latest(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        with self._lock:
            items = list(self._events)
        if limit is not None and limit >= 0:
            items = items[-limit:] if limit else []
        return items
