"""Colour policies mapping escape counts to RGBA pixels."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

import matplotlib
import numpy as np


@dataclass(frozen=True)
class Pixel:
    """One RGBA pixel with 8-bit channels."""

    r: int
    g: int
    b: int
    a: int = 255

    def to_bytes(self) -> bytes:
        return bytes((self.r, self.g, self.b, self.a))


# Colour of points that never escaped; also the initial canvas value.
SET_PIXEL = Pixel(0, 0, 0, 255)


class ColourPolicy(Protocol):
    def __call__(self, iterations: int, threshold: float) -> Pixel: ...


def _channel(value: float) -> int:
    return min(max(int(math.floor(value + 0.5)), 0), 255)


@dataclass(frozen=True)
class LinearColourPolicy:
    """Scale each channel linearly with ``iterations / threshold``."""

    red: float = 0.05
    green: float = 0.5
    blue: float = 1.0

    def __call__(self, iterations: int, threshold: float) -> Pixel:
        fraction = iterations / threshold
        return Pixel(
            r=_channel(self.red * fraction * 255),
            g=_channel(self.green * fraction * 255),
            b=_channel(self.blue * fraction * 255),
            a=255,
        )


linear_colour = LinearColourPolicy()


class ColormapPolicy:
    """Colour escape counts through a matplotlib colormap (e.g. "viridis", "inferno")."""

    def __init__(self, name: str, invert: bool = False) -> None:
        try:
            cmap = matplotlib.colormaps[name]
        except KeyError as exc:
            raise ValueError(f"Unknown colormap '{name}'.") from exc
        self.name = name
        self.invert = invert
        self._cmap = cmap.reversed() if invert else cmap

    def __call__(self, iterations: int, threshold: float) -> Pixel:
        fraction = min(max(iterations / threshold, 0.0), 1.0)
        rgba = np.uint8(np.clip(np.asarray(self._cmap(fraction)) * 255, 0, 255))
        return Pixel(int(rgba[0]), int(rgba[1]), int(rgba[2]), 255)

    def __repr__(self) -> str:
        return f"ColormapPolicy({self.name!r}, invert={self.invert})"


def colour_table(policy: ColourPolicy, escape_threshold: float, loop_threshold: int) -> np.ndarray:
    """Tabulate ``policy`` for every escape count ``evaluate`` can return.

    Row ``k`` holds the RGBA colour of count ``k``. Rows 0 and
    ``loop_threshold + 1`` hold :data:`SET_PIXEL`.
    """

    table = np.empty((loop_threshold + 2, 4), dtype=np.uint8)
    table[:] = (SET_PIXEL.r, SET_PIXEL.g, SET_PIXEL.b, SET_PIXEL.a)
    for iterations in range(1, loop_threshold + 1):
        pixel = policy(iterations, escape_threshold)
        table[iterations] = (pixel.r, pixel.g, pixel.b, pixel.a)
    return table
