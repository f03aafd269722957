"""
Bounds-checked access to interleaved BGR frame buffers.

Frames delivered by a hosting pipeline may carry padded rows (stride larger
than width * 3). Frame exposes such a buffer as a numpy view so OpenCV calls
and compositing write straight into the caller's memory.
"""

import logging
from typing import Optional, Tuple, Union

import numpy as np
from numpy.lib.stride_tricks import as_strided


logger = logging.getLogger(__name__)

CHANNELS = 3


class FrameError(Exception):
    """Raised when a buffer cannot be interpreted as a BGR frame."""
    pass


class Frame:
    """
    Mutable view over a BGR frame.

    Attributes:
        pixels: (height, width, 3) uint8 array, possibly a strided view
        width, height: Frame dimensions in pixels
        stride: Bytes per row (>= width * 3)
    """

    def __init__(self, pixels: np.ndarray):
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise FrameError(f"Expected (height, width, 3) array, got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise FrameError(f"Expected uint8 pixels, got {pixels.dtype}")
        self.pixels = pixels

    @classmethod
    def from_array(cls, array: np.ndarray) -> 'Frame':
        """Wrap an existing BGR array without copying."""
        return cls(array)

    @classmethod
    def from_buffer(cls,
                    buffer: Union[bytearray, memoryview],
                    width: int,
                    height: int,
                    stride: Optional[int] = None) -> 'Frame':
        """
        Build a frame view over a raw interleaved BGR buffer.

        Args:
            buffer: Writable bytes-like object holding the frame rows
            width: Frame width in pixels
            height: Frame height in pixels
            stride: Bytes per row; defaults to width * 3 (no padding)

        Raises:
            FrameError: If dimensions, stride or buffer length are inconsistent
        """
        if width <= 0 or height <= 0:
            raise FrameError(f"Invalid frame size: {width}x{height}")

        row_bytes = width * CHANNELS
        if stride is None:
            stride = row_bytes
        if stride < row_bytes:
            raise FrameError(f"Stride {stride} smaller than row size {row_bytes}")

        raw = np.frombuffer(buffer, dtype=np.uint8)
        required = (height - 1) * stride + row_bytes
        if raw.size < required:
            raise FrameError(
                f"Buffer too short for {width}x{height} stride={stride}: "
                f"{raw.size} < {required} bytes"
            )
        if not raw.flags.writeable:
            raise FrameError("Frame buffer is read-only")

        pixels = as_strided(raw, shape=(height, width, CHANNELS), strides=(stride, CHANNELS, 1))
        return cls(pixels)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def channels(self) -> int:
        return CHANNELS

    @property
    def stride(self) -> int:
        return self.pixels.strides[0]

    def contains(self, x: int, y: int) -> bool:
        """Check whether (x, y) addresses a pixel inside the frame."""
        return 0 <= x < self.width and 0 <= y < self.height

    def get_pixel(self, x: int, y: int) -> Tuple[int, int, int]:
        """Return the (B, G, R) value at (x, y)."""
        if not self.contains(x, y):
            raise IndexError(f"Pixel ({x},{y}) outside {self.width}x{self.height} frame")
        b, g, r = self.pixels[y, x]
        return (int(b), int(g), int(r))

    def set_pixel(self, x: int, y: int, bgr: Tuple[int, int, int]) -> None:
        """Write a (B, G, R) value at (x, y)."""
        if not self.contains(x, y):
            raise IndexError(f"Pixel ({x},{y}) outside {self.width}x{self.height} frame")
        self.pixels[y, x] = bgr

    def clip_rect(self, x: int, y: int, width: int, height: int) -> Optional[Tuple[int, int, int, int]]:
        """
        Intersect a rectangle with the frame.

        Returns:
            (x0, y0, x1, y1) half-open bounds of the visible part, or None if
            the rectangle lies completely outside the frame
        """
        x0 = max(0, x)
        y0 = max(0, y)
        x1 = min(self.width, x + width)
        y1 = min(self.height, y + height)
        if x0 >= x1 or y0 >= y1:
            return None
        return (x0, y0, x1, y1)


def as_frame(frame: Union[Frame, np.ndarray]) -> Frame:
    """Accept either a Frame or a bare BGR array."""
    if isinstance(frame, Frame):
        return frame
    return Frame.from_array(frame)
