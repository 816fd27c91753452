import PIL.Image
import pytest

import render
from escapetime import OutputConfig, OutputWriters, RenderConfig, RenderDriver, RenderError

BASE_ARGS = ["--width", "12", "--height", "8", "--loop-threshold", "30", "--escape-threshold", "2"]


def _read(path):
    with PIL.Image.open(path) as image:
        return image.size, image.convert("RGBA").tobytes()


def test_cooperative_image(tmp_path):
    output = tmp_path / "coop.png"
    assert render.main([*BASE_ARGS, "--pixels-per-tick", "10", "--output", str(output)]) == 0
    size, _ = _read(output)
    assert size == (12, 8)


def test_execution_shapes_produce_identical_images(tmp_path):
    render.main([*BASE_ARGS, "--output", str(tmp_path / "coop.png")])
    render.main([*BASE_ARGS, "--threaded", "--poll-interval", "0.01", "--output", str(tmp_path / "threaded.png")])
    render.main([*BASE_ARGS, "--vectorized", "--output", str(tmp_path / "vectorized.png")])
    _, coop = _read(tmp_path / "coop.png")
    _, threaded = _read(tmp_path / "threaded.png")
    _, vectorized = _read(tmp_path / "vectorized.png")
    assert coop == threaded == vectorized


def test_progress_frames_per_tick(tmp_path):
    frame_dir = tmp_path / "frames"
    render.main([*BASE_ARGS, "--pixels-per-tick", "40", "--mode", "frames", "--frame-dir", str(frame_dir)])
    # 96 pixels in ticks of 40
    assert len(list(frame_dir.iterdir())) == 3


def test_gif_and_image_into_directory(tmp_path):
    render.main([*BASE_ARGS, "--mode", "gif", "--mode", "image", "--colormap", "viridis", "--output", str(tmp_path)])
    assert (tmp_path / "progress.gif").is_file()
    assert (tmp_path / "mandelbrot.png").is_file()


def test_output_suffix_added(tmp_path):
    render.main([*BASE_ARGS, "--format", "tiff", "--output", str(tmp_path / "plain")])
    assert (tmp_path / "plain.tiff").is_file()


@pytest.mark.parametrize(
    "args",
    [
        ["--lower-left", "1", "0", "--upper-right", "0", "1"],
        ["--width", "0"],
        ["--mode", "movie"],
        ["--colormap", "no-such-colormap"],
        ["--invert"],
        ["--frame-dir", "frames"],
        ["--format", "png", "--output", "picture.jpg"],
    ],
)
def test_invalid_arguments_exit_with_usage_error(args):
    with pytest.raises(SystemExit) as excinfo:
        render.main([*BASE_ARGS, *args])
    assert excinfo.value.code == 2


def test_threaded_run_fails_when_worker_dies(tmp_path):
    def failing_policy(iterations, threshold):
        raise RuntimeError("colour lookup failed")

    config = RenderConfig(width=4, height=4, escape_threshold=2, loop_threshold=10)
    driver = RenderDriver(config, colour_policy=failing_policy)
    output_config = OutputConfig(
        modes=("image",),
        gif_path=None,
        image_path=tmp_path / "partial.png",
        frame_dir=None,
        image_format="png",
    )
    writers = OutputWriters(output_config, width=4, height=4)
    try:
        with pytest.raises(RenderError):
            render.run_threaded(driver, writers, 0.01)
    finally:
        writers.close()
    assert not (tmp_path / "partial.png").exists()
