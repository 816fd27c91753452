"""Configuration values shared by the kernel, the driver and the CLI."""

from __future__ import annotations

from dataclasses import dataclass, field


class ConfigurationError(ValueError):
    """Raised when render parameters cannot describe a valid image."""


@dataclass(frozen=True)
class Coordinate:
    """A point of the complex plane: ``x`` is the real part, ``y`` the imaginary part."""

    x: float
    y: float


@dataclass(frozen=True)
class Viewport:
    """Rectangular region of the complex plane mapped onto the image."""

    lower_left: Coordinate
    upper_right: Coordinate

    def __post_init__(self) -> None:
        if not (self.upper_right.x > self.lower_left.x and self.upper_right.y > self.lower_left.y):
            raise ConfigurationError(
                f"upper_right {self.upper_right} must lie strictly above and to the right of "
                f"lower_left {self.lower_left}."
            )

    @property
    def x_width(self) -> float:
        return self.upper_right.x - self.lower_left.x

    @property
    def y_width(self) -> float:
        return self.upper_right.y - self.lower_left.y


DEFAULT_VIEWPORT = Viewport(Coordinate(-1.8, -1.2), Coordinate(0.7, 1.2))

# Escape counts reach loop_threshold + 1 and are stored as int32.
MAX_LOOP_THRESHOLD = 2**31 - 2


@dataclass(frozen=True)
class RenderConfig:
    """Fixed parameters of a single run."""

    width: int = 500
    height: int = 500
    viewport: Viewport = field(default=DEFAULT_VIEWPORT)
    escape_threshold: float = 25
    loop_threshold: int = 1000
    pixels_per_tick: int = 10000

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"image size must be positive, got {self.width}x{self.height}.")
        if self.escape_threshold <= 0:
            raise ConfigurationError("escape_threshold must be positive.")
        if not 0 <= self.loop_threshold <= MAX_LOOP_THRESHOLD:
            raise ConfigurationError(f"loop_threshold must be between 0 and {MAX_LOOP_THRESHOLD}.")
        if self.pixels_per_tick <= 0:
            raise ConfigurationError("pixels_per_tick must be positive.")

    @property
    def total_pixels(self) -> int:
        return self.width * self.height
