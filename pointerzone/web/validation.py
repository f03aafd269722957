from __future__ import annotations

from ..cv.color_mask import ColorRange, validate_color_range

_COLOR_FIELDS = ("h_min", "h_max", "s_min", "s_max")

# API flag name -> EngineSettings field
SETTINGS_FIELDS = {
    "show_windows_layout": "show_windows_layout",
    "message": "emit_events",
    "emit_events": "emit_events",
    "show_debug_info": "show_debug_info",
}


def validate_color_target_payload(data):
    """Validate color target payload; returns (ColorRange or None, error)."""
    if not isinstance(data, dict):
        return None, "payload must be an object"

    for name in _COLOR_FIELDS:
        if name not in data:
            return None, f"'{name}' required"
        value = data[name]
        if isinstance(value, bool) or not isinstance(value, int):
            return None, f"'{name}' must be an integer"

    color_range = ColorRange.from_dict(data)
    if color_range.is_unconfigured:
        # All-zero target is the explicit "disabled" state
        return color_range, None

    try:
        validate_color_range(color_range)
    except ValueError as e:
        return None, str(e)
    return color_range, None


def validate_settings_payload(data):
    """Validate settings payload; returns (changes dict or None, error)."""
    if not isinstance(data, dict):
        return None, "payload must be an object"
    if not data:
        return None, "no settings given"

    changes = {}
    for key, value in data.items():
        if key not in SETTINGS_FIELDS:
            return None, f"unknown setting '{key}'"
        if not isinstance(value, bool):
            return None, f"'{key}' must be a boolean"
        changes[SETTINGS_FIELDS[key]] = value
    return changes, None
