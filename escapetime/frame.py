"""Conversion of a canvas into the byte layout expected by image sinks."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .canvas import Canvas


def emit(canvas: Canvas) -> bytes:
    """Return the canvas as row-major RGBA bytes in sink order.

    The sink's horizontal axis runs opposite to the plane's, so sink column
    ``i`` of row ``y`` reads canvas column ``width - 1 - i``. Rows are not
    flipped.
    """

    flipped = canvas.pixels[::-1, :, :].transpose(1, 0, 2)
    return np.ascontiguousarray(flipped).tobytes()


def frame_array(data: bytes, width: int, height: int) -> np.ndarray:
    """View emitted bytes as a ``(height, width, 4)`` uint8 image array."""

    expected = 4 * width * height
    if len(data) != expected:
        raise ValueError(f"frame holds {len(data)} bytes, expected {expected} for {width}x{height}.")
    return np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)
