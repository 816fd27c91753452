"""Public API for incremental escape-time rendering."""

from .canvas import Canvas, RenderDriver, RenderError, RenderState
from .colour import (
    SET_PIXEL,
    ColourPolicy,
    ColormapPolicy,
    LinearColourPolicy,
    Pixel,
    colour_table,
    linear_colour,
)
from .config import DEFAULT_VIEWPORT, MAX_LOOP_THRESHOLD, ConfigurationError, Coordinate, RenderConfig, Viewport
from .frame import emit, frame_array
from .kernel import evaluate, map_pixel, pixel_steps
from .output import OutputConfig, OutputWriters, SinkError
from .renderer import render_image, render_iterations

__all__ = [
    "Canvas",
    "ColourPolicy",
    "ColormapPolicy",
    "ConfigurationError",
    "Coordinate",
    "DEFAULT_VIEWPORT",
    "LinearColourPolicy",
    "MAX_LOOP_THRESHOLD",
    "OutputConfig",
    "OutputWriters",
    "Pixel",
    "RenderConfig",
    "RenderDriver",
    "RenderError",
    "RenderState",
    "SET_PIXEL",
    "SinkError",
    "Viewport",
    "colour_table",
    "emit",
    "evaluate",
    "frame_array",
    "linear_colour",
    "map_pixel",
    "pixel_steps",
    "render_image",
    "render_iterations",
]
