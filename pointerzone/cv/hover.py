"""
Hover state machine.

Tracks which zone the pointer occupied in the previous frame and turns
changes into enter/exit events, each emitted once per change.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional, Sequence


logger = logging.getLogger(__name__)


class EventType(Enum):
    """Interaction event kinds (values match the pipeline message names)."""
    ENTER = "window-in"
    EXIT = "window-out"


@dataclass(frozen=True)
class InteractionEvent:
    """Pointer entered or left a zone."""
    type: EventType
    zone_id: str
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type.value,
            "window": self.zone_id,
            "ts": self.timestamp,
        }


class HoverStateMachine:
    """
    Idle / InZone(id) state machine.

    State always advances; emit_events only controls whether transitions are
    reported.
    """

    def __init__(self, emit_events: bool = True):
        self.emit_events = emit_events
        self._active_zone_id: Optional[str] = None

    @property
    def active_zone_id(self) -> Optional[str]:
        """Zone occupied in the last processed frame (None = Idle)."""
        return self._active_zone_id

    def update(self, hit_ids: Sequence[str]) -> List[InteractionEvent]:
        """
        Advance one frame.

        Args:
            hit_ids: Ids of zones containing the pointer, in configured order

        Returns:
            Transition events for this frame (empty when unchanged or muted)
        """
        current = hit_ids[0] if hit_ids else None
        previous = self._active_zone_id
        events: List[InteractionEvent] = []

        if current is None:
            if previous is not None:
                logger.debug(f"exit window: {previous}")
                events.append(InteractionEvent(EventType.EXIT, previous))
        elif current != previous:
            logger.debug(f"into window: {current}")
            events.append(InteractionEvent(EventType.ENTER, current))

        self._active_zone_id = current

        if not self.emit_events:
            return []
        return events
