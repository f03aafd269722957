"""
Tests for the control API.

Each test spins the aiohttp app up on a local test server bound to a fresh
engine.
"""

from unittest.mock import patch

import numpy as np
import pytest
from aiohttp import test_utils

from pointerzone.cv.color_mask import ColorRange
from pointerzone.cv.engine import PointerZoneEngine
from pointerzone.cv.layout_config import ZoneSpec
from pointerzone.cv.zones import Rect, Zone
from pointerzone.web.server import make_app


RED_RANGE = ColorRange(h_min=0, h_max=10, s_min=100, s_max=255)


@pytest.fixture
def engine():
    return PointerZoneEngine(RED_RANGE, [Zone("A", Rect(50, 50, 100, 100))])


@pytest.fixture
def app(engine):
    return make_app(engine, specs=[ZoneSpec("A", 50, 50, 100, 100)])


class TestStatusEndpoints:

    @pytest.mark.asyncio
    async def test_ping(self, app):
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.get("/api/ping")
            assert resp.status == 200
            assert await resp.json() == {"ok": True}

    @pytest.mark.asyncio
    async def test_status(self, app):
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.get("/api/status")
            data = await resp.json()

        assert data["detection_enabled"] is True
        assert data["zone_count"] == 1
        assert data["active_zone_id"] is None
        assert "performance" in data


class TestColorTarget:

    @pytest.mark.asyncio
    async def test_get(self, app):
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.get("/api/color-target")
            assert await resp.json() == RED_RANGE.to_dict()

    @pytest.mark.asyncio
    async def test_put_updates_engine(self, app, engine):
        payload = {"h_min": 100, "h_max": 130, "s_min": 50, "s_max": 255}
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.put("/api/color-target", json=payload)
            assert resp.status == 200
            assert (await resp.json())["color_target"] == payload

        assert engine.color_range == ColorRange(100, 130, 50, 255)

    @pytest.mark.asyncio
    async def test_all_zero_disables_detection(self, app, engine):
        payload = {"h_min": 0, "h_max": 0, "s_min": 0, "s_max": 0}
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.put("/api/color-target", json=payload)
            assert resp.status == 200

        assert engine.color_range.is_unconfigured

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"h_min": 0, "h_max": 10, "s_min": 100},
        {"h_min": 0, "h_max": 200, "s_min": 100, "s_max": 255},
        {"h_min": 20, "h_max": 10, "s_min": 100, "s_max": 255},
        {"h_min": "0", "h_max": 10, "s_min": 100, "s_max": 255},
        [1, 2, 3],
    ])
    async def test_put_rejects_invalid(self, app, engine, payload):
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.put("/api/color-target", json=payload)
            assert resp.status == 400
            assert "error" in await resp.json()

        assert engine.color_range == RED_RANGE


class TestLayout:

    @pytest.mark.asyncio
    async def test_get(self, app):
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            data = await (await client.get("/api/layout")).json()

        assert data["windows"] == [{"id": "A", "x": 50, "y": 50, "width": 100, "height": 100}]
        assert [zone["id"] for zone in data["zones"]] == ["A"]

    @pytest.mark.asyncio
    async def test_put_replaces_layout_and_reports_skipped(self, app, engine):
        windows = [
            {"id": "B", "x": 250, "y": 250, "width": 100, "height": 100},
            {"id": "broken", "x": 0, "y": 0},
        ]
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.put("/api/layout", json={"windows": windows})
            assert resp.status == 200
            data = await resp.json()

            layout = await (await client.get("/api/layout")).json()

        assert [zone["id"] for zone in data["zones"]] == ["B"]
        assert len(data["skipped"]) == 1
        assert engine.layout.get_zone("A") is None
        assert [spec["id"] for spec in layout["windows"]] == ["B"]

    @pytest.mark.asyncio
    async def test_put_bare_list(self, app, engine):
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.put("/api/layout", json=[])
            assert resp.status == 200

        assert len(engine.layout) == 0

    @pytest.mark.asyncio
    async def test_put_invalid_json(self, app):
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.put("/api/layout", data="not json",
                                    headers={"Content-Type": "application/json"})
            assert resp.status == 400


class TestSettings:

    @pytest.mark.asyncio
    async def test_toggle_flags(self, app, engine):
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.put("/api/settings", json={"message": False, "show_debug_info": True})
            assert resp.status == 200
            data = await resp.json()

        assert data["settings"]["emit_events"] is False
        assert engine.settings.emit_events is False
        assert engine.settings.show_debug_info is True
        assert engine.settings.show_windows_layout is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{}, {"bogus": True}, {"message": "yes"}, "x"])
    async def test_rejects_invalid(self, app, payload):
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.put("/api/settings", json=payload)
            assert resp.status == 400


class TestEvents:

    @pytest.mark.asyncio
    async def test_recent_events(self, app, engine):
        circles = np.array([[[100, 100, 20]]], dtype=np.float32)
        with patch("cv2.HoughCircles", return_value=circles):
            engine.process_frame(np.zeros((480, 640, 3), dtype=np.uint8))

        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            data = await (await client.get("/api/events")).json()
            limited = await (await client.get("/api/events?limit=0")).json()

        assert [(e["type"], e["window"]) for e in data["events"]] == [("window-in", "A")]
        assert limited["events"] == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", ["abc", "-1"])
    async def test_bad_limit(self, app, limit):
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.get(f"/api/events?limit={limit}")
            assert resp.status == 400
