"""
Interactive zone layout.

Zones are named rectangles ("buttons") with optional active/inactive icons.
The layout is an ordered, immutable sequence: order decides which zone is
reported active when zones overlap, and a layout change replaces the whole
sequence at once.
"""

import logging
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, Any, Iterable, List, Optional, Tuple

import numpy as np

from .localizer import PointerPosition


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in frame pixels (x, y = top-left corner)."""
    x: int
    y: int
    width: int
    height: int

    @property
    def br_x(self) -> int:
        """Bottom-right X coordinate."""
        return self.x + self.width

    @property
    def br_y(self) -> int:
        """Bottom-right Y coordinate."""
        return self.y + self.height

    def contains(self, px: int, py: int) -> bool:
        """Strict interior test; points on the edges are outside."""
        return self.x < px < self.br_x and self.y < py < self.br_y

    def corners(self) -> Dict[str, Tuple[int, int]]:
        """Top-left and bottom-right corners as drawn by the outline."""
        return {'tl': (self.x, self.y), 'br': (self.br_x, self.br_y)}

    def to_dict(self) -> Dict[str, Any]:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


@dataclass(frozen=True)
class Zone:
    """
    A configured interactive zone.

    Attributes:
        id: Unique zone identifier
        rect: Zone rectangle
        inactive_icon: Icon shown while the pointer is outside (already rect-sized)
        active_icon: Icon shown while the pointer is inside (already rect-sized)
        transparency: Overlay contribution factor in [0, 1]; 1.0 = icon fully applied
    """
    id: str
    rect: Rect
    inactive_icon: Optional[np.ndarray] = field(default=None, repr=False, compare=False)
    active_icon: Optional[np.ndarray] = field(default=None, repr=False, compare=False)
    transparency: float = 1.0

    def contains(self, position: PointerPosition) -> bool:
        return self.rect.contains(position.x, position.y)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (icons reported as presence only)."""
        return {
            'id': self.id,
            'rect': self.rect.to_dict(),
            'has_inactive_icon': self.inactive_icon is not None,
            'has_active_icon': self.active_icon is not None,
            'transparency': self.transparency,
        }


class ZoneLayout:
    """
    Ordered collection of zones with hit-testing.

    Thread-safe: replace_layout() may be called from a control thread while
    the frame thread reads snapshots through the zones property.
    """

    def __init__(self, zones: Iterable[Zone] = ()):
        self._lock = Lock()
        self._zones: Tuple[Zone, ...] = ()
        self.replace_layout(zones)

    @property
    def zones(self) -> Tuple[Zone, ...]:
        """Current zone sequence (immutable snapshot)."""
        with self._lock:
            return self._zones

    def __len__(self) -> int:
        return len(self.zones)

    def replace_layout(self, zones: Iterable[Zone]) -> None:
        """
        Dispose the current zones and install a new sequence atomically.

        Zones whose id repeats an earlier one are skipped.
        """
        installed: List[Zone] = []
        seen = set()
        for zone in zones:
            if zone.id in seen:
                logger.warning(f"Duplicate zone id '{zone.id}' skipped")
                continue
            seen.add(zone.id)
            installed.append(zone)

        new_zones = tuple(installed)
        with self._lock:
            old_zones = self._zones
            self._zones = new_zones

        logger.info(f"Zone layout replaced | {len(old_zones)} → {len(new_zones)} zones")

    def get_zone(self, zone_id: str) -> Optional[Zone]:
        for zone in self.zones:
            if zone.id == zone_id:
                return zone
        return None

    def hit_test(self, position: PointerPosition,
                 zones: Optional[Tuple[Zone, ...]] = None) -> List[str]:
        """
        Ids of all zones strictly containing the position, in configured order.

        Args:
            position: Pointer position
            zones: Snapshot to test against; defaults to the current layout
        """
        if zones is None:
            zones = self.zones
        return [zone.id for zone in zones if zone.contains(position)]

    def active_zone(self, position: PointerPosition,
                    zones: Optional[Tuple[Zone, ...]] = None) -> Optional[str]:
        """First zone (in configured order) containing the position, or None."""
        hits = self.hit_test(position, zones)
        return hits[0] if hits else None

    def to_dict(self) -> Dict[str, Any]:
        return {'zones': [zone.to_dict() for zone in self.zones]}
