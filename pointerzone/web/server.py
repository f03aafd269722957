from __future__ import annotations

from typing import List, Optional

from aiohttp import web

from ..cv.assets import IconLoader
from ..cv.engine import PointerZoneEngine
from ..cv.layout_config import ZoneSpec
from ..events import RecentEvents
from ..utils.config import SETTINGS
from .handlers import (
    ENGINE_KEY,
    EVENTS_KEY,
    LOADER_KEY,
    SPECS_KEY,
    api_ping,
    api_status,
    api_color_target_get,
    api_color_target_put,
    api_layout_get,
    api_layout_put,
    api_settings_put,
    api_events,
)


def make_app(engine: PointerZoneEngine,
             loader: Optional[IconLoader] = None,
             specs: Optional[List[ZoneSpec]] = None) -> web.Application:
    """Build the control API bound to one engine."""
    app = web.Application()

    recent = RecentEvents()
    engine.add_event_listener(recent)

    app[ENGINE_KEY] = engine
    app[LOADER_KEY] = loader or IconLoader()
    app[EVENTS_KEY] = recent
    app[SPECS_KEY] = list(specs or [])

    async def _cleanup(app: web.Application):
        engine.remove_event_listener(recent)
        if loader is None:
            app[LOADER_KEY].close()

    app.on_cleanup.append(_cleanup)

    app.add_routes([
        web.get("/api/ping", api_ping),
        web.get("/api/status", api_status),

        # Pointer color target
        web.get("/api/color-target", api_color_target_get),
        web.put("/api/color-target", api_color_target_put),

        # Zone layout
        web.get("/api/layout", api_layout_get),
        web.put("/api/layout", api_layout_put),

        # Flags
        web.put("/api/settings", api_settings_put),

        # Interaction events
        web.get("/api/events", api_events),
    ])

    return app


def run(app: web.Application, host: Optional[str] = None, port: Optional[int] = None) -> None:
    host = host or SETTINGS.web_host
    port = port or SETTINGS.web_port
    print(f"Starting pointerzone control API on {host}:{port}")
    web.run_app(app, host=host, port=port, print=None)
