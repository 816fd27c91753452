"""File sinks for emitted frames: single images, GIF progressions and frame sequences."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import imageio
import numpy as np
import PIL.Image

from .frame import frame_array


class SinkError(RuntimeError):
    """Raised when an emitted frame cannot be written to its destination."""


@dataclass
class OutputConfig:
    modes: tuple[str, ...]
    gif_path: Path | None
    image_path: Path | None
    frame_dir: Path | None
    image_format: str
    gif_frame_duration: float = 0.1


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def frame_image(data: bytes, width: int, height: int) -> PIL.Image.Image:
    return PIL.Image.frombytes("RGBA", (width, height), data)


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write a single image to ``output_path`` using the provided format."""

    pil_format = _pil_format_name(image_format)
    if pil_format == "JPEG":
        image = image.convert("RGB")
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        image.save(str(output_path), format=pil_format)
    except (OSError, ValueError, KeyError) as exc:
        raise SinkError(f"could not write {output_path}: {exc}") from exc


def write_frame_sequence(
    image: PIL.Image.Image,
    frame_dir: Path,
    index: int,
    digits: int,
    image_format: str,
    prefix: str,
) -> Path:
    """Persist a frame in a numbered sequence inside ``frame_dir``."""

    frame_path = frame_dir / f"{prefix}{index:0{digits}d}.{image_format}"
    write_single_image(image, frame_path, image_format)
    return frame_path


def write_gif(writer: Any, array: np.ndarray) -> None:
    """Append ``array`` to an active GIF writer."""

    try:
        writer.append_data(array)
    except (OSError, ValueError) as exc:
        raise SinkError(f"could not append GIF frame: {exc}") from exc


@dataclass
class OutputWriters:
    """Route each emitted frame to the sinks selected in ``config``."""

    config: OutputConfig
    width: int
    height: int
    frame_digits: int = 4

    def __post_init__(self) -> None:
        self._needs_frames = bool("frames" in self.config.modes and self.config.frame_dir is not None)
        self._needs_final_image = bool("image" in self.config.modes and self.config.image_path is not None)
        self._gif_writer = None
        self.frames_written = 0
        if "gif" in self.config.modes and self.config.gif_path is not None:
            try:
                self.config.gif_path.parent.mkdir(parents=True, exist_ok=True)
                self._gif_writer = imageio.get_writer(
                    str(self.config.gif_path),
                    mode='I',
                    duration=self.config.gif_frame_duration,
                    loop=0,
                )
            except (OSError, ValueError) as exc:
                raise SinkError(f"could not open {self.config.gif_path}: {exc}") from exc

    @property
    def wants_progress_frames(self) -> bool:
        return self._needs_frames or self._gif_writer is not None

    def write_progress_frame(self, data: bytes) -> None:
        """Record one intermediate frame of the render."""

        if self._gif_writer is not None:
            write_gif(self._gif_writer, frame_array(data, self.width, self.height))
        if self._needs_frames and self.config.frame_dir is not None:
            write_frame_sequence(
                frame_image(data, self.width, self.height),
                self.config.frame_dir,
                self.frames_written,
                self.frame_digits,
                self.config.image_format,
                "frame",
            )
        self.frames_written += 1

    def finalize(self, data: bytes) -> None:
        if self._needs_final_image and self.config.image_path is not None:
            write_single_image(
                frame_image(data, self.width, self.height),
                self.config.image_path,
                self.config.image_format,
            )

    def close(self) -> None:
        if self._gif_writer is not None:
            self._gif_writer.close()
            self._gif_writer = None
