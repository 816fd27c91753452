"""Escape-time evaluation and pixel to plane mapping."""

from __future__ import annotations

import math

from .config import Coordinate, Viewport


def evaluate(coordinate: Coordinate, loop_threshold: int, escape_threshold: float) -> int:
    """Return the escape iteration count of ``coordinate``.

    The orbit starts at z = c. The count is returned as soon as the orbit's
    magnitude exceeds ``escape_threshold``, or once it exceeds
    ``loop_threshold``, so the result is always in ``[1, loop_threshold + 1]``
    and ``loop_threshold + 1`` means the point never escaped.
    """

    cr = coordinate.x
    ci = coordinate.y
    zr = cr
    zi = ci
    counter = 0
    while True:
        counter += 1
        zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci
        magnitude = math.sqrt(zr * zr + zi * zi)
        if magnitude > escape_threshold:
            return counter
        if counter > loop_threshold:
            return counter


def pixel_steps(viewport: Viewport, image_width: int, image_height: int) -> tuple[float, float]:
    """Plane distance covered by one pixel along each axis."""

    step_x = (viewport.upper_right.x - viewport.lower_left.x) / image_width
    step_y = (viewport.upper_right.y - viewport.lower_left.y) / image_height
    return step_x, step_y


def map_pixel(pixel_x: int, pixel_y: int, viewport: Viewport, image_width: int, image_height: int) -> Coordinate:
    step_x, step_y = pixel_steps(viewport, image_width, image_height)
    return Coordinate(
        x=viewport.lower_left.x + pixel_x * step_x,
        y=viewport.lower_left.y + pixel_y * step_y,
    )
