import asyncio
import logging
from typing import List

from aiohttp import web

from ..cv.engine import PointerZoneEngine
from ..cv.assets import IconLoader
from ..cv.layout_config import ZoneSpec, build_zones, parse_zone_specs
from ..events import RecentEvents
from .validation import validate_color_target_payload, validate_settings_payload

log = logging.getLogger(__name__)

ENGINE_KEY = web.AppKey("engine", PointerZoneEngine)
LOADER_KEY = web.AppKey("icon_loader", IconLoader)
EVENTS_KEY = web.AppKey("recent_events", RecentEvents)
SPECS_KEY = web.AppKey("zone_specs", list)

# ---------- helpers ----------

def _json(data, status=200):
    return web.json_response(data, status=status)

async def _body(request: web.Request):
    try:
        return await request.json()
    except Exception:
        return None


# ---------- API handlers ----------

async def api_ping(request: web.Request):
    return _json({"ok": True})


async def api_status(request: web.Request):
    """Get engine state, flags and performance."""
    engine = request.app[ENGINE_KEY]
    return _json(engine.get_status())


async def api_color_target_get(request: web.Request):
    engine = request.app[ENGINE_KEY]
    return _json(engine.color_range.to_dict())


async def api_color_target_put(request: web.Request):
    """Replace the pointer color target."""
    body = await _body(request)
    color_range, err = validate_color_target_payload(body)
    if err:
        return _json({"error": err}, 400)

    request.app[ENGINE_KEY].set_color_range(color_range)
    return _json({"ok": True, "color_target": color_range.to_dict()})


async def api_layout_get(request: web.Request):
    """Current layout: configured specs and installed zones."""
    engine = request.app[ENGINE_KEY]
    specs: List[ZoneSpec] = request.app[SPECS_KEY]
    return _json({
        "windows": [spec.to_dict() for spec in specs],
        "zones": engine.layout.to_dict()["zones"],
    })


async def api_layout_put(request: web.Request):
    """
    Replace the zone layout.

    Body: {"windows": [...]} or the zone list itself. Malformed entries are
    skipped and reported; icons are fetched off the event loop.
    """
    body = await _body(request)
    if body is None:
        return _json({"error": "invalid JSON body"}, 400)

    windows = body.get("windows") if isinstance(body, dict) and "windows" in body else body
    skipped: List[str] = []
    specs = parse_zone_specs(windows, skipped)

    loader = request.app[LOADER_KEY]
    try:
        zones = await asyncio.to_thread(build_zones, specs, loader)
    except Exception as e:
        log.error(f"Building zones failed: {e}", exc_info=True)
        return _json({"error": f"building zones failed: {e}"}, 500)

    engine = request.app[ENGINE_KEY]
    engine.set_layout(zones)
    request.app[SPECS_KEY][:] = specs

    return _json({
        "ok": True,
        "zones": engine.layout.to_dict()["zones"],
        "skipped": skipped,
    })


async def api_settings_put(request: web.Request):
    """Toggle show_windows_layout / message / show_debug_info."""
    body = await _body(request)
    changes, err = validate_settings_payload(body)
    if err:
        return _json({"error": err}, 400)

    settings = request.app[ENGINE_KEY].update_settings(**changes)
    return _json({"ok": True, "settings": settings.to_dict()})


async def api_events(request: web.Request):
    """Recent interaction events (oldest first)."""
    try:
        limit = int(request.query.get("limit", "50"))
    except ValueError:
        return _json({"error": "limit must be an integer"}, 400)
    if limit < 0:
        return _json({"error": "limit must be >= 0"}, 400)

    return _json({"events": request.app[EVENTS_KEY].latest(limit)})
