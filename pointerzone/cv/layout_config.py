"""
Configuration persistence and zone layout parsing.

Handles loading/saving engine config from:
1. Config file ($POINTERZONE_CONFIG_DIR/pointerzone_config.json)
2. Environment variables (POINTERZONE_COLOR_*)
3. Runtime updates via the control API

Zone layouts are lists of zone specs (or a mapping of name -> spec). Malformed
entries are skipped with a warning; a bad entry never rejects the whole layout.
"""

import os
import json
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, Any, Optional, List, Tuple, Union

import numpy as np

from .assets import IconLoader, resize_icon
from .color_mask import ColorRange, validate_color_range
from .zones import Rect, Zone
from ..utils.config import SETTINGS


logger = logging.getLogger(__name__)

CONFIG_FILENAME = "pointerzone_config.json"

# Accepted spellings for the rect origin
_X_KEYS = ("x", "upRightCornerX")
_Y_KEYS = ("y", "upRightCornerY")


@dataclass
class ZoneSpec:
    """
    Zone layout entry as supplied by configuration.

    transparency is the supplied value (1.0 = see-through icon); it is
    inverted into an overlay factor when the zone is built.
    """
    id: str
    x: int
    y: int
    width: int
    height: int
    inactive_uri: Optional[str] = None
    active_uri: Optional[str] = None
    transparency: Optional[float] = None

    @property
    def overlay_factor(self) -> float:
        """Overlay contribution factor stored on the Zone."""
        if self.transparency is None:
            return 1.0
        return 1.0 - self.transparency

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (unset optionals omitted)."""
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class PointerZoneConfig:
    """Complete engine configuration."""
    color_range: ColorRange = field(default_factory=ColorRange)
    zones: List[ZoneSpec] = field(default_factory=list)
    show_windows_layout: bool = True
    message: bool = True
    show_debug_info: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "color_target": self.color_range.to_dict(),
            "windows": [spec.to_dict() for spec in self.zones],
            "show_windows_layout": self.show_windows_layout,
            "message": self.message,
            "show_debug_info": self.show_debug_info,
        }


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _first_present(entry: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        if key in entry:
            return entry[key]
    return None


def parse_zone_spec(entry: Any, default_id: Optional[str] = None) -> ZoneSpec:
    """
    Parse a single zone entry.

    Raises:
        ValueError: If the entry is malformed
    """
    if not isinstance(entry, dict):
        raise ValueError(f"zone entry must be an object (got {type(entry).__name__})")

    zone_id = entry.get("id", default_id)
    if not isinstance(zone_id, str) or not zone_id.strip():
        raise ValueError("zone id missing or empty")

    x = _as_int(_first_present(entry, _X_KEYS))
    y = _as_int(_first_present(entry, _Y_KEYS))
    width = _as_int(entry.get("width"))
    height = _as_int(entry.get("height"))
    if x is None or y is None or width is None or height is None:
        raise ValueError(f"zone '{zone_id}' needs integer x, y, width and height")
    if width <= 0 or height <= 0:
        raise ValueError(f"zone '{zone_id}' has invalid size {width}x{height}")

    transparency = entry.get("transparency")
    if transparency is not None:
        if isinstance(transparency, bool) or not isinstance(transparency, (int, float)):
            raise ValueError(f"zone '{zone_id}' transparency must be a number")
        transparency = float(transparency)
        if not (0.0 <= transparency <= 1.0):
            raise ValueError(f"zone '{zone_id}' transparency must be 0.0-1.0 (got {transparency})")

    inactive_uri = entry.get("inactive_uri")
    active_uri = entry.get("active_uri")
    for name, uri in (("inactive_uri", inactive_uri), ("active_uri", active_uri)):
        if uri is not None and not isinstance(uri, str):
            raise ValueError(f"zone '{zone_id}' {name} must be a string")

    return ZoneSpec(
        id=zone_id,
        x=x,
        y=y,
        width=width,
        height=height,
        inactive_uri=inactive_uri or None,
        active_uri=active_uri or None,
        transparency=transparency,
    )


def parse_zone_specs(data: Union[List[Any], Dict[str, Any], None],
                     errors: Optional[List[str]] = None) -> List[ZoneSpec]:
    """
    Parse a zone layout, skipping malformed entries.

    Args:
        data: List of zone dicts, or mapping of name -> zone dict
        errors: Optional list collecting one message per skipped entry

    Returns:
        Valid zone specs in configured order
    """
    if data is None:
        return []

    if isinstance(data, dict):
        entries = list(data.items())
    elif isinstance(data, list):
        entries = [(None, entry) for entry in data]
    else:
        message = f"layout must be a list or an object (got {type(data).__name__})"
        logger.warning(f"Zone layout ignored: {message}")
        if errors is not None:
            errors.append(message)
        return []

    specs = []
    for index, (name, entry) in enumerate(entries):
        try:
            specs.append(parse_zone_spec(entry, default_id=name))
        except ValueError as e:
            label = name if name is not None else f"#{index}"
            logger.warning(f"Skipping zone {label}: {e}")
            if errors is not None:
                errors.append(f"{label}: {e}")

    return specs


def _normalize_icon(icon: np.ndarray, uri: str) -> Optional[np.ndarray]:
    if icon.dtype == np.uint8:
        return icon
    if icon.dtype == np.uint16:
        return (icon >> 8).astype(np.uint8)
    logger.warning(f"Unsupported icon depth {icon.dtype} for {uri}")
    return None


def _load_zone_icon(loader: Optional[IconLoader], uri: Optional[str], spec: ZoneSpec) -> Optional[np.ndarray]:
    if not uri or loader is None:
        return None

    icon = loader.load(uri)
    if icon is None:
        logger.warning(f"Zone '{spec.id}' icon unavailable, falling back to outline: {uri}")
        return None

    icon = _normalize_icon(icon, uri)
    if icon is None:
        return None
    return resize_icon(icon, spec.width, spec.height)


def build_zones(specs: List[ZoneSpec], loader: Optional[IconLoader] = None) -> List[Zone]:
    """
    Turn zone specs into zones, loading and resizing their icons.

    Args:
        specs: Parsed zone specs
        loader: Icon loader; None builds outline-only zones

    Returns:
        Zones in the same order as specs
    """
    zones = []
    for spec in specs:
        zones.append(Zone(
            id=spec.id,
            rect=Rect(spec.x, spec.y, spec.width, spec.height),
            inactive_icon=_load_zone_icon(loader, spec.inactive_uri, spec),
            active_icon=_load_zone_icon(loader, spec.active_uri, spec),
            transparency=spec.overlay_factor,
        ))
        logger.debug(
            f"Built zone '{spec.id}' | rect=({spec.x},{spec.y},{spec.width},{spec.height}) "
            f"transparency={spec.overlay_factor:.2f}"
        )
    return zones


def get_config_path() -> Path:
    """Get path to engine config file."""
    config_dir = Path(os.environ.get("POINTERZONE_CONFIG_DIR", str(SETTINGS.config_dir)))
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / CONFIG_FILENAME


def _parse_color_target(value: Any) -> ColorRange:
    """Color target from config; anything invalid disables detection."""
    if value is None:
        return ColorRange()
    if not isinstance(value, dict):
        logger.warning(f"color_target must be an object (got {type(value).__name__}), detection disabled")
        return ColorRange()

    try:
        color_range = ColorRange.from_dict(value)
        if not color_range.is_unconfigured:
            validate_color_range(color_range)
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid color_target {value}: {e}, detection disabled")
        return ColorRange()
    return color_range


def _parse_flag(data: Dict[str, Any], name: str, default: bool) -> bool:
    value = data.get(name, default)
    if not isinstance(value, bool):
        logger.warning(f"'{name}' must be a boolean (got {value!r}), using {default}")
        return default
    return value


def config_from_dict(data: Dict[str, Any], errors: Optional[List[str]] = None) -> PointerZoneConfig:
    """Build a config from its JSON form; invalid parts fall back to defaults."""
    return PointerZoneConfig(
        color_range=_parse_color_target(data.get("color_target")),
        zones=parse_zone_specs(data.get("windows"), errors),
        show_windows_layout=_parse_flag(data, "show_windows_layout", True),
        message=_parse_flag(data, "message", True),
        show_debug_info=_parse_flag(data, "show_debug_info", False),
    )


def load_config(path: Optional[Path] = None, errors: Optional[List[str]] = None) -> PointerZoneConfig:
    """
    Load engine configuration from file and environment.

    Priority: environment > config file > defaults

    Args:
        path: Config file; defaults to get_config_path()
        errors: Optional list collecting messages for skipped zones

    Returns:
        PointerZoneConfig instance
    """
    config_path = path or get_config_path()
    data: Dict[str, Any] = {}

    if config_path.exists():
        try:
            with open(config_path) as f:
                data = json.load(f)
            logger.info(f"Loaded pointerzone config from {config_path}")
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load config file {config_path}: {e}")
            data = {}

    if not isinstance(data, dict):
        logger.warning(f"Config file {config_path} does not hold an object, ignoring it")
        data = {}

    config = config_from_dict(data, errors)

    env_range = _load_color_range_from_env(config.color_range)
    if env_range is not None:
        config.color_range = env_range

    return config


def save_config(config: PointerZoneConfig, path: Optional[Path] = None) -> None:
    """
    Save engine configuration to file after validation.

    Raises:
        ValueError: If the color target is invalid
        IOError: If file write fails
    """
    if not config.color_range.is_unconfigured:
        validate_color_range(config.color_range)

    config_path = path or get_config_path()
    try:
        # Atomic write (temp file + rename)
        temp_path = config_path.with_suffix('.json.tmp')
        with open(temp_path, 'w') as f:
            json.dump(config.to_dict(), f, indent=2)
        temp_path.replace(config_path)

        logger.info(
            f"Saved pointerzone config to {config_path} | "
            f"color_target={config.color_range.to_dict()} zones={len(config.zones)}"
        )
    except OSError as e:
        logger.error(f"Failed to save config to {config_path}: {e}", exc_info=True)
        raise IOError(f"Failed to save config: {e}") from e


def _load_color_range_from_env(current: ColorRange) -> Optional[ColorRange]:
    """Override color target fields from POINTERZONE_COLOR_* variables."""
    names = {
        "h_min": "POINTERZONE_COLOR_H_MIN",
        "h_max": "POINTERZONE_COLOR_H_MAX",
        "s_min": "POINTERZONE_COLOR_S_MIN",
        "s_max": "POINTERZONE_COLOR_S_MAX",
    }
    if not any(env in os.environ for env in names.values()):
        return None

    values = current.to_dict()
    for field_name, env in names.items():
        if env in os.environ:
            try:
                values[field_name] = int(os.environ[env])
            except ValueError:
                logger.warning(f"Ignoring non-integer {env}={os.environ[env]!r}")

    color_range = ColorRange.from_dict(values)
    if not color_range.is_unconfigured:
        try:
            validate_color_range(color_range)
        except ValueError as e:
            logger.warning(f"Ignoring POINTERZONE_COLOR_* override: {e}")
            return None
    return color_range
