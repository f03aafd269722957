"""
Pointer localization from a cleaned color mask.

Circle candidates are found with the gradient Hough transform; when several
are present the one nearest to the previous pointer position wins, giving
frame-to-frame continuity without an explicit smoothing filter.
"""

import logging
import math
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Sequence, Tuple

import numpy as np
import cv2


logger = logging.getLogger(__name__)

BLUR_KERNEL = (15, 15)
HOUGH_DP = 2
HOUGH_PARAM1 = 100  # Canny high threshold
HOUGH_PARAM2 = 40   # Accumulator threshold
MIN_DIST_DIVISOR = 10  # minDist = mask height / 10


@dataclass(frozen=True)
class PointerPosition:
    """Pointer location in frame coordinates."""
    x: int = 0
    y: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Circle:
    """Circle candidate reported by the Hough transform."""
    x: float
    y: float
    radius: float

    @property
    def center(self) -> PointerPosition:
        return PointerPosition(int(round(self.x)), int(round(self.y)))

    def distance_to(self, position: PointerPosition) -> float:
        return math.hypot(self.x - position.x, self.y - position.y)


def detect_candidates(mask: np.ndarray) -> List[Circle]:
    """
    Run circle detection on a smoothed copy of the mask.

    Args:
        mask: Binary mask (0 or 255), left untouched

    Returns:
        Circle candidates in detection order (possibly empty)
    """
    smoothed = cv2.GaussianBlur(mask, BLUR_KERNEL, 0)
    min_dist = mask.shape[0] / MIN_DIST_DIVISOR

    circles = cv2.HoughCircles(
        smoothed,
        cv2.HOUGH_GRADIENT,
        dp=HOUGH_DP,
        minDist=min_dist,
        param1=HOUGH_PARAM1,
        param2=HOUGH_PARAM2,
        minRadius=0,
        maxRadius=0,
    )

    if circles is None:
        return []
    return [Circle(float(x), float(y), float(r)) for x, y, r in circles[0]]


def select_candidate(candidates: Sequence[Circle], previous: PointerPosition) -> PointerPosition:
    """
    Pick the pointer position for this frame.

    - No candidates: keep the previous position.
    - One candidate: its center.
    - Several: the candidate closest to the previous position; the first
      candidate is kept unless a later one is strictly closer.
    """
    if not candidates:
        return previous

    if len(candidates) == 1:
        return candidates[0].center

    best = candidates[0]
    best_distance = best.distance_to(previous)
    for candidate in candidates[1:]:
        distance = candidate.distance_to(previous)
        if distance < best_distance:
            best = candidate
            best_distance = distance

    logger.debug(
        f"Selected candidate ({best.x:.1f},{best.y:.1f}) of {len(candidates)} | "
        f"previous=({previous.x},{previous.y}) distance={best_distance:.1f}"
    )
    return best.center


class CandidateLocalizer:
    """Locates the pointer in a cleaned mask with continuity to the previous frame."""

    def localize(self, mask: np.ndarray, previous: PointerPosition) -> PointerPosition:
        """
        Locate the pointer.

        Args:
            mask: Cleaned binary mask
            previous: Pointer position from the previous frame

        Returns:
            New pointer position (previous position when nothing is found)
        """
        position, _ = self.localize_with_candidates(mask, previous)
        return position

    def localize_with_candidates(self,
                                 mask: np.ndarray,
                                 previous: PointerPosition) -> Tuple[PointerPosition, List[Circle]]:
        """Same as localize(), also returning the raw candidates for diagnostics."""
        candidates = detect_candidates(mask)
        return select_candidate(candidates, previous), candidates
