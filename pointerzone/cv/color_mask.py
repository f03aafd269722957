"""
HSV color segmentation for the pointer object.

Builds a binary mask of pixels whose hue and saturation fall inside the
configured color target, then cleans it with morphological closing (fill
gaps inside the pointer blob) and opening (remove noise specks).
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any

import numpy as np
import cv2


logger = logging.getLogger(__name__)

# Fixed value-channel bounds, half-open [V_MIN, V_MAX)
V_MIN = 30
V_MAX = 256

# OpenCV 8-bit hue scale
HUE_MAX = 180
SAT_MAX = 255

# Closing element: fills holes inside the blob
CLOSE_KERNEL_SIZE = (21, 21)
CLOSE_ANCHOR = (10, 10)

# Opening element: removes specks smaller than the element
OPEN_KERNEL_SIZE = (11, 11)
OPEN_ANCHOR = (5, 5)

_CLOSE_KERNEL = cv2.getStructuringElement(cv2.MORPH_RECT, CLOSE_KERNEL_SIZE, anchor=CLOSE_ANCHOR)
_OPEN_KERNEL = cv2.getStructuringElement(cv2.MORPH_RECT, OPEN_KERNEL_SIZE, anchor=OPEN_ANCHOR)


@dataclass(frozen=True)
class ColorRange:
    """Hue/saturation target of the pointer. All-zero means detection is disabled."""
    h_min: int = 0
    h_max: int = 0
    s_min: int = 0
    s_max: int = 0

    @property
    def is_unconfigured(self) -> bool:
        """True for the all-zero sentinel (detection disabled)."""
        return self.h_min == 0 and self.h_max == 0 and self.s_min == 0 and self.s_max == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ColorRange':
        """Create ColorRange from dictionary; missing fields default to 0."""
        return cls(
            h_min=int(data.get("h_min", 0)),
            h_max=int(data.get("h_max", 0)),
            s_min=int(data.get("s_min", 0)),
            s_max=int(data.get("s_max", 0)),
        )


def validate_color_range(color_range: ColorRange) -> None:
    """
    Validate color target values.

    Raises:
        ValueError: If a value is outside its channel scale or min > max
    """
    errors = []
    for name in ("h_min", "h_max"):
        value = getattr(color_range, name)
        if not (0 <= value <= HUE_MAX):
            errors.append(f"{name} must be 0-{HUE_MAX} (got {value})")
    for name in ("s_min", "s_max"):
        value = getattr(color_range, name)
        if not (0 <= value <= SAT_MAX):
            errors.append(f"{name} must be 0-{SAT_MAX} (got {value})")

    if color_range.h_min > color_range.h_max:
        errors.append(f"h_min ({color_range.h_min}) must be <= h_max ({color_range.h_max})")
    if color_range.s_min > color_range.s_max:
        errors.append(f"s_min ({color_range.s_min}) must be <= s_max ({color_range.s_max})")

    if errors:
        raise ValueError("; ".join(errors))


def compute_mask(frame: np.ndarray, color_range: ColorRange) -> np.ndarray:
    """
    Create cleaned binary mask for the color target.

    Args:
        frame: BGR image
        color_range: Hue/saturation target (must not be the all-zero sentinel)

    Returns:
        Single-channel mask (0 or 255) with the frame's height and width
    """
    hsv = cv2.cvtColor(frame, cv2.COLOR_BGR2HSV)

    lower = (color_range.h_min, color_range.s_min, V_MIN)
    upper = (color_range.h_max, color_range.s_max, V_MAX - 1)
    mask = cv2.inRange(hsv, lower, upper)

    mask = cv2.morphologyEx(mask, cv2.MORPH_CLOSE, _CLOSE_KERNEL, anchor=CLOSE_ANCHOR)
    mask = cv2.morphologyEx(mask, cv2.MORPH_OPEN, _OPEN_KERNEL, anchor=OPEN_ANCHOR)

    return mask
