"""
Zone-based pointer interaction engine.

Per frame: color mask → pointer localization → zone hit test → overlay
compositing → hover state update and event delivery. Processing is
synchronous on the caller's thread; configuration (color target, zone layout,
flags) may be swapped from another thread and each frame sees either the
complete old or the complete new configuration.
"""

import time
import logging
import dataclasses
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, Dict, Any, Iterable, List, Optional, Tuple, Union

import numpy as np

from .color_mask import ColorRange, compute_mask
from .compositor import OverlayCompositor, draw_marker
from .frame import Frame, as_frame
from .hover import HoverStateMachine, InteractionEvent
from .localizer import CandidateLocalizer, Circle, PointerPosition
from .zones import Zone, ZoneLayout


logger = logging.getLogger(__name__)

EventListener = Callable[[InteractionEvent], None]

# Frames slower than this are reported
SLOW_FRAME_MS = 40.0


@dataclass(frozen=True)
class EngineSettings:
    """Runtime flags."""
    show_windows_layout: bool = True  # Draw zone icons/outlines
    emit_events: bool = True          # Deliver enter/exit events
    show_debug_info: bool = False     # Log per-frame detection details at INFO

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass
class FrameResult:
    """Outcome of processing one frame."""
    position: PointerPosition
    active_zone_id: Optional[str]
    hit_zone_ids: List[str] = field(default_factory=list)
    events: List[InteractionEvent] = field(default_factory=list)
    detection_enabled: bool = True
    candidates: List[Circle] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "position": self.position.to_dict(),
            "active_zone_id": self.active_zone_id,
            "hit_zone_ids": list(self.hit_zone_ids),
            "events": [event.to_dict() for event in self.events],
            "detection_enabled": self.detection_enabled,
            "candidates": [
                {"x": c.x, "y": c.y, "radius": c.radius} for c in self.candidates
            ],
        }


class PointerZoneEngine:
    """Tracks a colored pointer over configured zones and annotates frames."""

    def __init__(self,
                 color_range: Optional[ColorRange] = None,
                 zones: Iterable[Zone] = (),
                 settings: Optional[EngineSettings] = None,
                 event_listener: Optional[EventListener] = None):
        """
        Args:
            color_range: Pointer color target (None = detection disabled)
            zones: Initial zone layout
            settings: Runtime flags
            event_listener: Optional callable receiving each emitted event
        """
        self._lock = Lock()
        self._color_range = color_range or ColorRange()
        self._settings = settings or EngineSettings()
        self._layout = ZoneLayout(zones)
        self._listeners: Tuple[EventListener, ...] = (event_listener,) if event_listener else ()

        self._localizer = CandidateLocalizer()
        self._compositor = OverlayCompositor()
        self._hover = HoverStateMachine(emit_events=self._settings.emit_events)
        self._position = PointerPosition(0, 0)

        # (position, active zone) of the last completed frame, published as one value
        self._state: Tuple[PointerPosition, Optional[str]] = (self._position, None)

        # Performance tracking (guarded by _lock)
        self._frame_count = 0
        self._total_time_ms = 0.0
        self._max_time_ms = 0.0
        self._min_time_ms = float('inf')

    # ---------- configuration ----------

    @property
    def color_range(self) -> ColorRange:
        with self._lock:
            return self._color_range

    @property
    def settings(self) -> EngineSettings:
        with self._lock:
            return self._settings

    @property
    def layout(self) -> ZoneLayout:
        return self._layout

    @property
    def position(self) -> PointerPosition:
        """Most recent pointer position."""
        return self.state[0]

    @property
    def active_zone_id(self) -> Optional[str]:
        """Zone occupied in the last processed frame."""
        return self.state[1]

    @property
    def state(self) -> Tuple[PointerPosition, Optional[str]]:
        """Position and active zone taken from the same frame."""
        with self._lock:
            return self._state

    def set_color_range(self, color_range: ColorRange) -> None:
        """Swap the color target (all-zero disables detection)."""
        with self._lock:
            self._color_range = color_range
        logger.info(f"Color target set | {color_range.to_dict()}"
                    f"{' (detection disabled)' if color_range.is_unconfigured else ''}")

    def set_layout(self, zones: Iterable[Zone]) -> None:
        """Replace the whole zone layout."""
        zones = list(zones)
        with self._lock:
            self._layout.replace_layout(zones)

    def update_settings(self, **changes) -> EngineSettings:
        """
        Change runtime flags.

        Raises:
            TypeError: On unknown flag names
        """
        with self._lock:
            self._settings = dataclasses.replace(self._settings, **changes)
            settings = self._settings
        logger.info(f"Engine settings updated | {settings.to_dict()}")
        return settings

    def add_event_listener(self, listener: EventListener) -> None:
        with self._lock:
            self._listeners = self._listeners + (listener,)

    def remove_event_listener(self, listener: EventListener) -> None:
        with self._lock:
            self._listeners = tuple(l for l in self._listeners if l is not listener)

    # ---------- per-frame processing ----------

    def _snapshot(self) -> Tuple[ColorRange, EngineSettings, Tuple[Zone, ...], Tuple[EventListener, ...]]:
        with self._lock:
            return self._color_range, self._settings, self._layout.zones, self._listeners

    def process_frame(self, frame: Union[Frame, np.ndarray]) -> FrameResult:
        """
        Process one frame in place.

        Args:
            frame: BGR frame (Frame or ndarray), annotated in place

        Returns:
            FrameResult for this frame. Never raises; failures are logged and
            the frame is handed back as far as it got.
        """
        color_range, settings, zones, listeners = self._snapshot()

        position, active_zone_id = self.state

        if color_range.is_unconfigured:
            return FrameResult(
                position=position,
                active_zone_id=active_zone_id,
                detection_enabled=False,
            )

        start_time = time.perf_counter()
        with self._lock:
            self._frame_count += 1
            frame_number = self._frame_count
        result = FrameResult(position=position, active_zone_id=active_zone_id)

        try:
            pixels = as_frame(frame).pixels

            mask = compute_mask(pixels, color_range)
            position, candidates = self._localizer.localize_with_candidates(mask, self._position)
            del mask
            self._position = position

            hit_ids = self._layout.hit_test(position, zones)

            if settings.show_windows_layout:
                hit_set = set(hit_ids)
                for zone in zones:
                    self._compositor.draw(pixels, zone, zone.id in hit_set)

            draw_marker(pixels, position)

            self._hover.emit_events = settings.emit_events
            events = self._hover.update(hit_ids)
            active_zone_id = self._hover.active_zone_id
            with self._lock:
                self._state = (position, active_zone_id)
            self._deliver(events, listeners)

            result = FrameResult(
                position=position,
                active_zone_id=active_zone_id,
                hit_zone_ids=hit_ids,
                events=events,
                candidates=candidates,
            )

            log = logger.info if settings.show_debug_info else logger.debug
            log(
                f"Frame {frame_number} | candidates={len(candidates)} "
                f"pointer=({position.x},{position.y}) hits={hit_ids} "
                f"active={active_zone_id}"
            )
        except Exception as e:
            logger.error(f"Frame processing failed: {e}", exc_info=True)
        finally:
            elapsed_ms = (time.perf_counter() - start_time) * 1000.0
            with self._lock:
                self._total_time_ms += elapsed_ms
                self._max_time_ms = max(self._max_time_ms, elapsed_ms)
                self._min_time_ms = min(self._min_time_ms, elapsed_ms)

            if elapsed_ms > SLOW_FRAME_MS:
                logger.warning(f"Frame slow: {elapsed_ms:.2f}ms (target <{SLOW_FRAME_MS:.0f}ms)")

        return result

    def _deliver(self, events: List[InteractionEvent], listeners: Tuple[EventListener, ...]) -> None:
        for event in events:
            logger.info(f"{event.type.value}: {event.zone_id}")
            for listener in listeners:
                try:
                    listener(event)
                except Exception as e:
                    logger.error(f"Event listener failed for {event.type.value} {event.zone_id}: {e}",
                                 exc_info=True)

    # ---------- diagnostics ----------

    def get_debug_mask(self, frame: Union[Frame, np.ndarray]) -> np.ndarray:
        """
        Compute the cleaned color mask for a frame without touching state.

        Returns:
            Mask (all zero when detection is disabled)
        """
        pixels = as_frame(frame).pixels
        color_range = self.color_range
        if color_range.is_unconfigured:
            return np.zeros(pixels.shape[:2], dtype=np.uint8)
        return compute_mask(pixels, color_range)

    def get_performance_stats(self) -> Dict[str, Any]:
        """
        Get frame processing statistics.

        Returns:
            Dictionary with avg_ms, max_ms, min_ms, count
        """
        with self._lock:
            if self._frame_count == 0:
                return {"avg_ms": 0.0, "max_ms": 0.0, "min_ms": 0.0, "count": 0}

            return {
                "avg_ms": self._total_time_ms / self._frame_count,
                "max_ms": self._max_time_ms,
                "min_ms": self._min_time_ms if self._min_time_ms != float('inf') else 0.0,
                "count": self._frame_count,
            }

    def reset_performance_stats(self) -> None:
        """Reset performance tracking counters."""
        with self._lock:
            self._total_time_ms = 0.0
            self._max_time_ms = 0.0
            self._min_time_ms = float('inf')
            self._frame_count = 0

    def get_status(self) -> Dict[str, Any]:
        """Snapshot of engine state for the control API."""
        color_range, settings, zones, _ = self._snapshot()
        position, active_zone_id = self.state
        return {
            "position": position.to_dict(),
            "active_zone_id": active_zone_id,
            "detection_enabled": not color_range.is_unconfigured,
            "color_target": color_range.to_dict(),
            "settings": settings.to_dict(),
            "zone_count": len(zones),
            "performance": self.get_performance_stats(),
        }
