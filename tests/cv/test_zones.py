"""
Unit tests for pointerzone.cv.zones module.

Tests cover:
- Strict-interior rectangle containment
- Hit testing order with overlapping zones
- Layout replacement and duplicate ids
"""

import unittest
import numpy as np

from pointerzone.cv.localizer import PointerPosition
from pointerzone.cv.zones import Rect, Zone, ZoneLayout


class TestRect(unittest.TestCase):

    def setUp(self):
        self.rect = Rect(50, 50, 100, 100)

    def test_interior_point(self):
        self.assertTrue(self.rect.contains(100, 100))

    def test_one_unit_inside_each_edge(self):
        for px, py in [(51, 51), (149, 149), (51, 149), (149, 51), (51, 100), (149, 100), (100, 51), (100, 149)]:
            self.assertTrue(self.rect.contains(px, py), f"({px},{py}) should be inside")

    def test_edges_are_outside(self):
        """Points exactly on any edge are not inside."""
        for px, py in [(50, 100), (150, 100), (100, 50), (100, 150), (50, 50), (150, 150)]:
            self.assertFalse(self.rect.contains(px, py), f"({px},{py}) should be outside")

    def test_corners(self):
        self.assertEqual(self.rect.corners(), {'tl': (50, 50), 'br': (150, 150)})
        self.assertEqual((self.rect.br_x, self.rect.br_y), (150, 150))


class TestZone(unittest.TestCase):

    def test_contains_position(self):
        zone = Zone("A", Rect(0, 0, 10, 10))
        self.assertTrue(zone.contains(PointerPosition(5, 5)))
        self.assertFalse(zone.contains(PointerPosition(10, 5)))

    def test_to_dict_reports_icon_presence(self):
        icon = np.zeros((10, 10, 4), dtype=np.uint8)
        zone = Zone("A", Rect(1, 2, 10, 10), inactive_icon=icon, transparency=0.25)

        data = zone.to_dict()

        self.assertEqual(data['id'], "A")
        self.assertEqual(data['rect'], {'x': 1, 'y': 2, 'width': 10, 'height': 10})
        self.assertTrue(data['has_inactive_icon'])
        self.assertFalse(data['has_active_icon'])
        self.assertEqual(data['transparency'], 0.25)


class TestZoneLayout(unittest.TestCase):

    def setUp(self):
        self.layout = ZoneLayout([
            Zone("A", Rect(0, 0, 200, 200)),
            Zone("B", Rect(50, 50, 200, 200)),
            Zone("C", Rect(400, 400, 50, 50)),
        ])

    def test_hit_test_preserves_configured_order(self):
        self.assertEqual(self.layout.hit_test(PointerPosition(100, 100)), ["A", "B"])

    def test_active_zone_is_first_hit(self):
        self.assertEqual(self.layout.active_zone(PointerPosition(100, 100)), "A")
        self.assertEqual(self.layout.active_zone(PointerPosition(220, 220)), "B")
        self.assertIsNone(self.layout.active_zone(PointerPosition(300, 300)))

    def test_hit_test_against_snapshot(self):
        snapshot = self.layout.zones
        self.layout.replace_layout([])

        self.assertEqual(self.layout.hit_test(PointerPosition(100, 100)), [])
        self.assertEqual(self.layout.hit_test(PointerPosition(100, 100), snapshot), ["A", "B"])

    def test_replace_layout(self):
        self.layout.replace_layout([Zone("D", Rect(0, 0, 10, 10))])

        self.assertEqual(len(self.layout), 1)
        self.assertIsNone(self.layout.get_zone("A"))
        self.assertEqual(self.layout.get_zone("D").rect, Rect(0, 0, 10, 10))

    def test_duplicate_ids_skipped(self):
        """Only the first zone with a given id is installed."""
        layout = ZoneLayout([
            Zone("A", Rect(0, 0, 10, 10)),
            Zone("A", Rect(100, 100, 10, 10)),
        ])

        self.assertEqual(len(layout), 1)
        self.assertEqual(layout.get_zone("A").rect, Rect(0, 0, 10, 10))

    def test_empty_layout(self):
        layout = ZoneLayout()
        self.assertEqual(layout.hit_test(PointerPosition(5, 5)), [])
        self.assertEqual(layout.to_dict(), {'zones': []})


if __name__ == '__main__':
    unittest.main()
