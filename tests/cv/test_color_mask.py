"""
Unit tests for pointerzone.cv.color_mask module.

Tests cover:
- ColorRange defaults and the all-zero "disabled" sentinel
- Color target validation
- Mask creation (hue/saturation match, value floor)
- Morphological cleanup (speck removal)
"""

import unittest
import numpy as np
import cv2

from pointerzone.cv.color_mask import (
    ColorRange,
    compute_mask,
    validate_color_range,
    V_MIN,
)


RED_RANGE = ColorRange(h_min=0, h_max=10, s_min=100, s_max=255)


def create_frame(width: int = 200, height: int = 200) -> np.ndarray:
    """Create a black BGR frame."""
    return np.zeros((height, width, 3), dtype=np.uint8)


class TestColorRange(unittest.TestCase):
    """Test ColorRange defaults and serialization."""

    def test_default_is_unconfigured(self):
        self.assertTrue(ColorRange().is_unconfigured)

    def test_any_nonzero_field_configures(self):
        self.assertFalse(ColorRange(s_max=1).is_unconfigured)
        self.assertFalse(RED_RANGE.is_unconfigured)

    def test_from_dict_defaults_missing_fields(self):
        color_range = ColorRange.from_dict({"h_min": 5, "h_max": 15})
        self.assertEqual(color_range, ColorRange(5, 15, 0, 0))

    def test_to_dict(self):
        self.assertEqual(
            RED_RANGE.to_dict(),
            {"h_min": 0, "h_max": 10, "s_min": 100, "s_max": 255},
        )


class TestValidateColorRange(unittest.TestCase):
    """Test color target validation."""

    def test_valid_range(self):
        validate_color_range(RED_RANGE)

    def test_hue_out_of_scale(self):
        with self.assertRaises(ValueError):
            validate_color_range(ColorRange(0, 200, 0, 255))

    def test_saturation_out_of_scale(self):
        with self.assertRaises(ValueError):
            validate_color_range(ColorRange(0, 10, -1, 255))

    def test_min_greater_than_max(self):
        with self.assertRaises(ValueError) as ctx:
            validate_color_range(ColorRange(20, 10, 0, 255))
        self.assertIn("h_min", str(ctx.exception))


class TestComputeMask(unittest.TestCase):
    """Test mask creation and cleanup."""

    def test_mask_shape_and_type(self):
        mask = compute_mask(create_frame(320, 240), RED_RANGE)
        self.assertEqual(mask.shape, (240, 320))
        self.assertEqual(mask.dtype, np.uint8)

    def test_matching_blob_is_marked(self):
        """A saturated red disk ends up set in the mask."""
        frame = create_frame()
        cv2.circle(frame, (100, 100), 40, (0, 0, 255), -1)

        mask = compute_mask(frame, RED_RANGE)

        self.assertEqual(mask[100, 100], 255)
        self.assertEqual(mask[0, 0], 0)
        self.assertEqual(mask[199, 199], 0)
        self.assertTrue(set(np.unique(mask)) <= {0, 255})

    def test_other_hue_is_ignored(self):
        frame = create_frame()
        cv2.circle(frame, (100, 100), 40, (0, 255, 0), -1)

        mask = compute_mask(frame, RED_RANGE)

        self.assertEqual(np.count_nonzero(mask), 0)

    def test_dark_pixels_below_value_floor_ignored(self):
        """Pixels with V below the fixed floor never match."""
        frame = create_frame()
        frame[:, :] = (0, 0, V_MIN - 10)

        mask = compute_mask(frame, RED_RANGE)

        self.assertEqual(np.count_nonzero(mask), 0)

    def test_small_speck_removed(self):
        """Blobs smaller than the opening element are cleaned away."""
        frame = create_frame()
        frame[98:102, 98:102] = (0, 0, 255)

        mask = compute_mask(frame, RED_RANGE)

        self.assertEqual(np.count_nonzero(mask), 0)

    def test_frame_not_modified(self):
        frame = create_frame()
        cv2.circle(frame, (100, 100), 40, (0, 0, 255), -1)
        before = frame.copy()

        compute_mask(frame, RED_RANGE)

        np.testing.assert_array_equal(frame, before)


if __name__ == '__main__':
    unittest.main()
