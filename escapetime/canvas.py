"""Incremental render state: the pixel canvas and the driver that fills it."""

from __future__ import annotations

import enum
import threading
from typing import Optional

import numpy as np

from .colour import SET_PIXEL, ColourPolicy, Pixel, linear_colour
from .config import RenderConfig
from .frame import emit
from .kernel import evaluate, map_pixel


class Canvas:
    """Dense ``width`` x ``height`` RGBA buffer indexed ``[x, y]``."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.pixels = np.empty((width, height, 4), dtype=np.uint8)
        self.pixels[:] = (SET_PIXEL.r, SET_PIXEL.g, SET_PIXEL.b, SET_PIXEL.a)

    def __getitem__(self, index: tuple[int, int]) -> Pixel:
        r, g, b, a = (int(v) for v in self.pixels[index])
        return Pixel(r, g, b, a)

    def __setitem__(self, index: tuple[int, int], pixel: Pixel) -> None:
        self.pixels[index] = (pixel.r, pixel.g, pixel.b, pixel.a)


class RenderError(RuntimeError):
    """Raised when the render worker stopped before completing the canvas."""


class RenderState(enum.Enum):
    EMPTY = "empty"
    RENDERING = "rendering"
    COMPLETE = "complete"


class RenderDriver:
    """Owns the canvas and the render cursor and advances them in linear pixel order.

    Every public method takes the driver's lock, so one thread may advance the
    render while another emits frames. Each critical section covers either a
    single pixel or a single full :meth:`emit`.
    """

    def __init__(self, config: RenderConfig, colour_policy: ColourPolicy = linear_colour) -> None:
        self.config = config
        self.colour_policy = colour_policy
        self._canvas = Canvas(config.width, config.height)
        self._cursor = 0
        self._total = config.total_pixels
        self._lock = threading.Lock()
        self.worker_error: Optional[Exception] = None

    @property
    def total(self) -> int:
        return self._total

    @property
    def cursor(self) -> int:
        with self._lock:
            return self._cursor

    @property
    def state(self) -> RenderState:
        with self._lock:
            cursor = self._cursor
        if cursor == 0:
            return RenderState.EMPTY
        if cursor < self._total:
            return RenderState.RENDERING
        return RenderState.COMPLETE

    @property
    def progress(self) -> float:
        return self.cursor / self._total

    def pixel_at(self, x: int, y: int) -> Pixel:
        with self._lock:
            return self._canvas[x, y]

    def _compute(self, index: int) -> Pixel:
        x = index % self.config.width
        y = index // self.config.width
        coordinate = map_pixel(x, y, self.config.viewport, self.config.width, self.config.height)
        iterations = evaluate(coordinate, self.config.loop_threshold, self.config.escape_threshold)
        if iterations > self.config.loop_threshold:
            return SET_PIXEL
        return self.colour_policy(iterations, self.config.escape_threshold)

    def advance_one(self) -> bool:
        """Compute the pixel under the cursor. Returns False once the render is complete."""

        with self._lock:
            index = self._cursor
            if index >= self._total:
                return False
            self._canvas[index % self.config.width, index // self.config.width] = self._compute(index)
            self._cursor = index + 1
            return True

    def advance_batch(self, n: Optional[int] = None) -> int:
        """Compute up to ``n`` pixels (default ``pixels_per_tick``); returns how many were computed."""

        if n is None:
            n = self.config.pixels_per_tick
        done = 0
        while done < n and self.advance_one():
            done += 1
        return done

    def advance_all(self) -> int:
        done = 0
        while self.advance_one():
            done += 1
        return done

    def start_worker(self) -> threading.Thread:
        """Run :meth:`advance_all` on a daemon thread.

        The thread is not joined at interpreter exit; the canvas written so far
        remains a valid partial frame. An exception raised while rendering is
        kept in :attr:`worker_error` and re-raised by :meth:`check_worker`.
        """

        worker = threading.Thread(target=self._run_worker, name="escapetime-render", daemon=True)
        worker.start()
        return worker

    def _run_worker(self) -> None:
        try:
            self.advance_all()
        except Exception as exc:
            self.worker_error = exc

    def check_worker(self) -> None:
        """Raise :class:`RenderError` if the worker thread died with an exception."""

        if self.worker_error is not None:
            raise RenderError(
                f"render worker failed at pixel {self.cursor} of {self._total}: {self.worker_error}"
            ) from self.worker_error

    def emit(self) -> bytes:
        with self._lock:
            return emit(self._canvas)
