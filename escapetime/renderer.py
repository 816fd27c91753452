"""One-shot vectorized rendering of a whole frame."""

from __future__ import annotations

from typing import Optional

import numpy as np
import tensorflow as tf

from .colour import ColourPolicy, colour_table, linear_colour
from .config import RenderConfig
from .kernel import pixel_steps


@tf.function
def _escape_step(
    zr: tf.Tensor,
    zi: tf.Tensor,
    cr: tf.Tensor,
    ci: tf.Tensor,
    ns: tf.Tensor,
    active: tf.Tensor,
    escape_threshold: tf.Tensor,
    loop_threshold: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance every still-active orbit by one iteration."""

    zr_new = zr * zr - zi * zi + cr
    zi_new = 2.0 * zr * zi + ci
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    ns = ns + tf.cast(active, tf.int32)
    magnitude = tf.sqrt(zr * zr + zi * zi)
    escaped = tf.greater(magnitude, escape_threshold)
    active = tf.logical_and(active, tf.logical_not(escaped))
    active = tf.logical_and(active, tf.less_equal(ns, loop_threshold))
    return zr, zi, ns, active


@tf.function
def _escape_run(cr: tf.Tensor, ci: tf.Tensor, escape_threshold: tf.Tensor, loop_threshold: tf.Tensor) -> tf.Tensor:
    """Iterate until every orbit has escaped or passed ``loop_threshold``."""

    ns = tf.zeros(tf.shape(cr), dtype=tf.int32)
    active = tf.ones(tf.shape(cr), dtype=tf.bool)

    def cond(zr: tf.Tensor, zi: tf.Tensor, ns: tf.Tensor, active: tf.Tensor) -> tf.Tensor:
        return tf.reduce_any(active)

    def body(zr: tf.Tensor, zi: tf.Tensor, ns: tf.Tensor, active: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
        return _escape_step(zr, zi, cr, ci, ns, active, escape_threshold, loop_threshold)

    _, _, ns, _ = tf.while_loop(cond, body, (tf.identity(cr), tf.identity(ci), ns, active))
    return ns


def _plane_axes(config: RenderConfig) -> tuple[np.ndarray, np.ndarray]:
    step_x, step_y = pixel_steps(config.viewport, config.width, config.height)
    lower_left = config.viewport.lower_left
    x = lower_left.x + np.arange(config.width, dtype=np.float64) * np.float64(step_x)
    y = lower_left.y + np.arange(config.height, dtype=np.float64) * np.float64(step_y)
    return x, y


def render_iterations(config: RenderConfig, *, device: Optional[str] = None) -> np.ndarray:
    """Escape counts for every pixel as a ``(height, width)`` int32 array.

    Element ``[y, x]`` equals ``evaluate`` applied to canvas pixel ``(x, y)``.
    """

    x, y = _plane_axes(config)

    with tf.device(device if device is not None else "/CPU:0"):
        x_tf = tf.convert_to_tensor(x, dtype=tf.float64)
        y_tf = tf.convert_to_tensor(y, dtype=tf.float64)
        CR, CI = tf.meshgrid(x_tf, y_tf)
        escape_threshold = tf.constant(config.escape_threshold, dtype=tf.float64)
        loop_threshold = tf.constant(config.loop_threshold, dtype=tf.int32)
        ns = _escape_run(CR, CI, escape_threshold, loop_threshold)

    return ns.numpy()


def render_image(
    config: RenderConfig,
    colour_policy: ColourPolicy = linear_colour,
    *,
    device: Optional[str] = None,
) -> bytes:
    """Render the whole frame at once, in the same byte layout as ``RenderDriver.emit``."""

    iterations = render_iterations(config, device=device)
    table = colour_table(colour_policy, config.escape_threshold, config.loop_threshold)
    rgba = table[iterations[:, ::-1]]
    return np.ascontiguousarray(rgba).tobytes()
