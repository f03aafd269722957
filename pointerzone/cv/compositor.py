"""
Zone overlay compositing.

Icons are alpha-blended onto the frame at their zone position; zones without
an applicable icon get a 1px outline. Parts of an overlay that fall outside
the frame are clipped.
"""

import logging
from typing import Tuple

import numpy as np
import cv2

from .frame import Frame
from .localizer import PointerPosition
from .zones import Rect, Zone


logger = logging.getLogger(__name__)

# BGR colors
GREEN: Tuple[int, int, int] = (0, 255, 0)
WHITE: Tuple[int, int, int] = (255, 255, 255)
MARKER_COLOR: Tuple[int, int, int] = (0, 0, 255)
MARKER_RADIUS = 10


def _icon_channels(icon: np.ndarray) -> int:
    return 1 if icon.ndim == 2 else icon.shape[2]


def blend_icon(frame: np.ndarray,
               icon: np.ndarray,
               x: int,
               y: int,
               transparency: float,
               saturate: bool = False) -> None:
    """
    Composite an icon onto the frame in place.

    Args:
        frame: BGR frame (modified in place)
        icon: 1, 3 or 4 channel uint8 image
        x, y: Frame position of the icon's top-left corner (may be off-frame)
        transparency: Overlay contribution factor, applied to 4-channel icons only
        saturate: Push the green channel toward 255 instead of the icon's green
    """
    icon_h, icon_w = icon.shape[:2]

    visible = Frame(frame).clip_rect(x, y, icon_w, icon_h)
    if visible is None:
        logger.debug(f"Icon at ({x},{y}) size={icon_w}x{icon_h} is fully off-frame")
        return
    x0, y0, x1, y1 = visible

    roi = frame[y0:y1, x0:x1]
    patch = icon[y0 - y:y1 - y, x0 - x:x1 - x]
    channels = _icon_channels(icon)

    if channels == 1:
        gray = patch if patch.ndim == 2 else patch[..., 0]
        roi[...] = gray[..., np.newaxis]
    elif channels == 3:
        roi[...] = patch
    elif channels == 4:
        overlay = patch[..., 3:4].astype(np.float64) / 255.0 * transparency
        original = 1.0 - overlay

        source = patch[..., :3].astype(np.float64)
        if saturate:
            source[..., 1] = 255.0

        blended = source * overlay + roi.astype(np.float64) * original
        roi[...] = np.clip(blended, 0, 255).astype(np.uint8)
    else:
        logger.warning(f"Unsupported icon channel count: {channels}")


def draw_outline(frame: np.ndarray, rect: Rect, active: bool) -> None:
    """Draw a 1px zone outline, green when active, white otherwise."""
    color = GREEN if active else WHITE
    corners = rect.corners()
    cv2.rectangle(frame, corners['tl'], corners['br'], color, 1, cv2.LINE_8)


def draw_marker(frame: np.ndarray, position: PointerPosition) -> None:
    """Draw the filled pointer marker."""
    cv2.circle(frame, (position.x, position.y), MARKER_RADIUS, MARKER_COLOR, -1, cv2.LINE_8)


class OverlayCompositor:
    """Chooses and draws the indicator graphic of a zone."""

    def draw(self, frame: np.ndarray, zone: Zone, is_active: bool) -> None:
        """
        Draw a zone onto the frame.

        Policy:
        - active with active icon → active icon
        - active with only inactive icon → inactive icon, saturated
        - inactive with inactive icon → inactive icon
        - otherwise → outline (green if active, white if not)
        """
        rect = zone.rect

        if is_active and zone.active_icon is not None:
            blend_icon(frame, zone.active_icon, rect.x, rect.y, zone.transparency, saturate=False)
        elif is_active and zone.inactive_icon is not None:
            blend_icon(frame, zone.inactive_icon, rect.x, rect.y, zone.transparency, saturate=True)
        elif not is_active and zone.inactive_icon is not None:
            blend_icon(frame, zone.inactive_icon, rect.x, rect.y, zone.transparency, saturate=False)
        else:
            draw_outline(frame, rect, is_active)
