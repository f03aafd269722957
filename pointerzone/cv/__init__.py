"""
Computer Vision module for zone-based pointer interaction.

This module provides:
- HSV color segmentation of the pointer object
- Circle-based pointer localization with frame-to-frame continuity
- Zone layout with strict-interior hit testing
- Icon/outline overlay compositing with alpha blending
- Enter/exit hover state machine
- The per-frame engine tying the stages together
"""

from .color_mask import ColorRange, compute_mask, validate_color_range
from .compositor import OverlayCompositor, blend_icon, draw_marker, draw_outline
from .engine import EngineSettings, FrameResult, PointerZoneEngine
from .frame import Frame, FrameError
from .hover import EventType, HoverStateMachine, InteractionEvent
from .localizer import CandidateLocalizer, Circle, PointerPosition, select_candidate
from .zones import Rect, Zone, ZoneLayout

__all__ = [
    # Engine
    "PointerZoneEngine",
    "EngineSettings",
    "FrameResult",

    # Frames
    "Frame",
    "FrameError",

    # Color segmentation
    "ColorRange",
    "compute_mask",
    "validate_color_range",

    # Localization
    "CandidateLocalizer",
    "Circle",
    "PointerPosition",
    "select_candidate",

    # Zones
    "Rect",
    "Zone",
    "ZoneLayout",

    # Compositing
    "OverlayCompositor",
    "blend_icon",
    "draw_marker",
    "draw_outline",

    # Hover events
    "EventType",
    "HoverStateMachine",
    "InteractionEvent",
]
