import os
import sys
import warnings
from argparse import ArgumentParser
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

from escapetime import (
    ColormapPolicy,
    ConfigurationError,
    Coordinate,
    OutputConfig,
    OutputWriters,
    RenderConfig,
    RenderDriver,
    RenderError,
    RenderState,
    SinkError,
    Viewport,
    linear_colour,
    render_image,
)

DEVICE = '/CPU:0'


def build_parser():
    parser = ArgumentParser(description='Render the Mandelbrot set incrementally and write the result to image files.')

    parser.add_argument('--width', type=int,
                        dest='width', help='image width in pixels',
                        metavar='WIDTH', default=500)

    parser.add_argument('--height', type=int,
                        dest='height', help='image height in pixels',
                        metavar='HEIGHT', default=500)

    parser.add_argument('--lower-left', type=float, nargs=2,
                        dest='lower_left', help='lower-left corner of the viewport in the complex plane',
                        metavar=('X', 'Y'), default=[-1.8, -1.2])

    parser.add_argument('--upper-right', type=float, nargs=2,
                        dest='upper_right', help='upper-right corner of the viewport in the complex plane',
                        metavar=('X', 'Y'), default=[0.7, 1.2])

    parser.add_argument('--escape-threshold', type=float,
                        dest='escape_threshold', help='orbit magnitude above which a point counts as escaped',
                        metavar='ESCAPE_THRESHOLD', default=25)

    parser.add_argument('--loop-threshold', type=int,
                        dest='loop_threshold', help='iterations after which a point is assumed to be in the set',
                        metavar='LOOP_THRESHOLD', default=1000)

    parser.add_argument('--pixels-per-tick', type=int,
                        dest='pixels_per_tick', help='pixels computed between two emitted frames in cooperative mode',
                        metavar='PIXELS', default=10000)

    parser.add_argument('--threaded', dest='threaded', action='store_true',
                        help='compute on a worker thread while the main thread emits frames')

    parser.add_argument('--poll-interval', type=float, dest='poll_interval', default=0.25,
                        metavar='SECONDS', help='seconds between emitted frames in threaded mode')

    parser.add_argument('--vectorized', dest='vectorized', action='store_true',
                        help='render the whole frame at once with TensorFlow instead of pixel by pixel')

    parser.add_argument('--mode', dest='modes', action='append', metavar='MODE',
                        help='Output modes to generate. May be repeated. Choices: image, gif, frames.')

    parser.add_argument('--output', dest='output', type=str,
                        help='Destination for single-file outputs (gif/image) or container directory when both are requested.')

    parser.add_argument('--frame-dir', dest='frame_dir', type=str,
                        help='Directory in which to store the numbered progress frames.')

    parser.add_argument('--format', type=str,
                        dest='format', help='file format for image-based outputs. Can be any extension supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('--gif-frame-duration', type=float, dest='gif_frame_duration', default=0.1,
                        metavar='SECONDS', help='display time of each GIF frame')

    parser.add_argument('--colormap', type=str,
                        dest='colormap', help='matplotlib colormap to colorize the fractal (e.g. "viridis", "inferno"); '
                                              'the default is a linear blue ramp',
                        metavar='COLORMAP', default=None)

    parser.add_argument('--invert', action='store_true', help='Invert the selected colormap.')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow diagnostics.')

    return parser


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    valid_modes = {"image", "gif", "frames"}
    modes = list(opt.modes or ["image"])

    normalized_modes: list[str] = []
    for mode in modes:
        if mode not in valid_modes:
            parser.error(f"Unknown output mode '{mode}'. Valid choices: {', '.join(sorted(valid_modes))}.")
        if mode not in normalized_modes:
            normalized_modes.append(mode)

    modes_tuple = tuple(normalized_modes)

    frame_dir_path: Path | None = None
    if "frames" in modes_tuple:
        frame_dir_path = Path(opt.frame_dir or "./frames").expanduser().resolve()
    elif opt.frame_dir is not None:
        parser.error("--frame-dir is only valid with the frames mode.")

    image_format = (opt.format or "png").lower().lstrip(".") or "png"

    file_modes = [mode for mode in modes_tuple if mode in {"gif", "image"}]
    gif_path: Path | None = None
    image_path: Path | None = None

    if not file_modes:
        if opt.output:
            parser.error("--output is only valid when gif or image modes are requested.")
    elif len(file_modes) == 1:
        mode = file_modes[0]
        if opt.output:
            output_path = Path(opt.output).expanduser()
            if output_path.exists() and output_path.is_dir():
                parser.error("--output must point to a file, not a directory, when a single file mode is active.")
            if mode == "gif":
                if output_path.suffix and output_path.suffix.lower() != ".gif":
                    parser.error("GIF outputs must end with .gif.")
                gif_path = output_path.with_suffix(".gif").resolve()
            else:
                expected_suffix = f".{image_format}"
                if output_path.suffix and output_path.suffix.lower() != expected_suffix:
                    parser.error(f"--output extension {output_path.suffix} does not match --format {image_format}.")
                image_path = output_path.with_suffix(expected_suffix).resolve()
        elif mode == "gif":
            gif_path = Path("progress.gif").resolve()
        else:
            image_path = Path(f"mandelbrot.{image_format}").resolve()
    else:
        base_dir = Path(opt.output).expanduser() if opt.output else Path.cwd()
        if base_dir.exists() and not base_dir.is_dir():
            parser.error("--output must be a directory when both gif and image modes are active.")
        gif_path = (base_dir / "progress.gif").resolve()
        image_path = (base_dir / f"mandelbrot.{image_format}").resolve()

    return OutputConfig(
        modes=modes_tuple,
        gif_path=gif_path,
        image_path=image_path,
        frame_dir=frame_dir_path,
        image_format=image_format,
        gif_frame_duration=opt.gif_frame_duration,
    )


def build_render_config(opt, parser: ArgumentParser) -> RenderConfig:
    try:
        viewport = Viewport(Coordinate(*opt.lower_left), Coordinate(*opt.upper_right))
        return RenderConfig(
            width=opt.width,
            height=opt.height,
            viewport=viewport,
            escape_threshold=opt.escape_threshold,
            loop_threshold=opt.loop_threshold,
            pixels_per_tick=opt.pixels_per_tick,
        )
    except ConfigurationError as exc:
        parser.error(str(exc))


def _report_progress(driver: RenderDriver) -> None:
    print("rendered {0:.1%} of {1} pixels".format(driver.progress, driver.total), end='\r')


def run_cooperative(driver: RenderDriver, writers: OutputWriters) -> bytes:
    """Alternate one tick of computation with one emitted frame until the render completes."""

    while driver.state is not RenderState.COMPLETE:
        driver.advance_batch()
        _report_progress(driver)
        if writers.wants_progress_frames:
            writers.write_progress_frame(driver.emit())
    return driver.emit()


def run_threaded(driver: RenderDriver, writers: OutputWriters, poll_interval: float) -> bytes:
    """Let a worker thread drain the render while this thread emits a frame every ``poll_interval``."""

    worker = driver.start_worker()
    log("started worker thread %s" % worker.name)
    while worker.is_alive():
        worker.join(poll_interval)
        _report_progress(driver)
        if writers.wants_progress_frames:
            writers.write_progress_frame(driver.emit())
    driver.check_worker()
    return driver.emit()


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = VERBOSE or bool(opt.verbose)

    output_config = resolve_output_config(opt, parser)
    config = build_render_config(opt, parser)

    if opt.colormap:
        try:
            colour_policy = ColormapPolicy(opt.colormap, invert=opt.invert)
        except ValueError as exc:
            parser.error(str(exc))
    else:
        if opt.invert:
            parser.error("--invert requires --colormap.")
        colour_policy = linear_colour

    log("TensorFlow version: %s" % tf.__version__)
    log("rendering %dx%d over %s with %r" % (config.width, config.height, config.viewport, colour_policy))

    writers = OutputWriters(output_config, width=config.width, height=config.height)
    try:
        if opt.vectorized:
            final_frame = render_image(config, colour_policy, device=DEVICE)
            if writers.wants_progress_frames:
                writers.write_progress_frame(final_frame)
        else:
            driver = RenderDriver(config, colour_policy)
            if opt.threaded:
                final_frame = run_threaded(driver, writers, opt.poll_interval)
            else:
                final_frame = run_cooperative(driver, writers)
        print()
    finally:
        writers.close()

    writers.finalize(final_frame)
    log("wrote %d progress frames" % writers.frames_written)
    return 0


if __name__ == '__main__':
    try:
        sys.exit(main())
    except (SinkError, RenderError) as exc:
        sys.exit(f"error: {exc}")
