import logging
import os
import sys
import warnings
from argparse import ArgumentParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

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

import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")

from mandelbrot import (
    BackgroundRenderer,
    Controller,
    PngFileSink,
    RasterScheduler,
    RenderParams,
    Viewport,
    setup_logging,
)
from mandelbrot import gui
from mandelbrot.renderer import MAX_ITERATIONS, MIN_ITERATIONS

logger = logging.getLogger("mandelbrot.explorer")


@dataclass(frozen=True)
class AppConfig:
    width: int
    height: int
    window_size: int
    viewport: Viewport
    params: RenderParams
    workers: Optional[int]
    render_path: Optional[Path]
    save_dir: Path
    background: bool
    verbose: bool
    log_file: Optional[str]


def build_parser():
    parser = ArgumentParser(description="Interactive Mandelbrot set explorer.")

    parser.add_argument('--width', type=int,
                        dest='width', help='width of the rendered image in pixels',
                        metavar='WIDTH', default=800)

    parser.add_argument('--height', type=int,
                        dest='height', help='height of the rendered image in pixels',
                        metavar='HEIGHT', default=800)

    parser.add_argument('--window-size', type=int,
                        dest='window_size', help='edge length of the square window in screen pixels',
                        metavar='WINDOW_SIZE', default=1000)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help=f'iteration budget per pixel ({MIN_ITERATIONS}-{MAX_ITERATIONS})',
                        metavar='MAX_ITERATIONS', default=1000)

    parser.add_argument('--color-offset', type=int,
                        dest='color_offset', help='hue offset slider position (0-100)',
                        metavar='COLOR_OFFSET', default=0)

    parser.add_argument('--zoom', type=float,
                        dest='zoom', help='initial zoom factor; 1 shows the square [-2, 2] x [-2, 2]',
                        metavar='ZOOM', default=1.0)

    parser.add_argument('--x-offset', type=float,
                        dest='x_offset', help='real part of the initial view centre',
                        metavar='X_OFFSET', default=0.0)

    parser.add_argument('--y-offset', type=float,
                        dest='y_offset', help='imaginary part of the initial view centre',
                        metavar='Y_OFFSET', default=0.0)

    parser.add_argument('--workers', type=int,
                        dest='workers', help='number of render threads (default: number of CPUs)',
                        metavar='WORKERS', default=None)

    parser.add_argument('--render', type=str,
                        dest='render_path', help='render one frame to this PNG file and exit without opening a window',
                        metavar='PATH', default=None)

    parser.add_argument('--save-dir', type=str,
                        dest='save_dir', help='directory that "Save Image" writes numbered PNG files into',
                        metavar='SAVE_DIR', default='.')

    parser.add_argument('--background', action='store_true',
                        help='render in a background thread so the window stays responsive; newer gestures cancel older renders')

    parser.add_argument('--log-file', type=str,
                        dest='log_file', help='also write the log to this file',
                        metavar='LOG_FILE', default=None)

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow diagnostics.')

    return parser


def resolve_config(opt, parser: ArgumentParser) -> AppConfig:
    if opt.width <= 0 or opt.height <= 0:
        parser.error("--width and --height must be positive.")
    if opt.window_size <= 0:
        parser.error("--window-size must be positive.")
    if opt.workers is not None and opt.workers <= 0:
        parser.error("--workers must be positive.")
    if opt.zoom <= 0:
        parser.error("--zoom must be positive.")

    try:
        params = RenderParams.from_controls(opt.color_offset, opt.max_iterations)
    except ValueError as exc:
        parser.error(str(exc))

    render_path = None
    if opt.render_path:
        render_path = Path(opt.render_path).expanduser()
        if render_path.suffix and render_path.suffix.lower() != ".png":
            parser.error("--render only writes PNG files.")
        render_path = render_path.with_suffix(".png").resolve()

    return AppConfig(
        width=opt.width,
        height=opt.height,
        window_size=opt.window_size,
        viewport=Viewport(zoom=opt.zoom, offset_x=opt.x_offset, offset_y=opt.y_offset),
        params=params,
        workers=opt.workers,
        render_path=render_path,
        save_dir=Path(opt.save_dir).expanduser().resolve(),
        background=bool(opt.background),
        verbose=bool(opt.verbose),
        log_file=opt.log_file,
    )


def render_to_file(config: AppConfig, scheduler: RasterScheduler) -> int:
    """Render the configured view once and write it to ``config.render_path``."""

    sink = PngFileSink()
    controller = Controller(
        scheduler,
        sink,
        width=config.width,
        height=config.height,
        viewport=config.viewport,
        params=config.params,
    )
    if not controller.start():
        return 1
    result = controller.save(config.render_path)
    if not result.ok:
        return 1
    print(result.path)
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    opt = parser.parse_args(argv)
    config = resolve_config(opt, parser)

    setup_logging(logging.DEBUG if config.verbose else logging.INFO, config.log_file)
    logger.debug("TensorFlow version: %s", tf.__version__)

    with RasterScheduler(config.workers) as scheduler:
        logger.debug("Rendering with %d worker threads", scheduler.workers)
        if config.render_path is not None:
            return render_to_file(config, scheduler)

        background = BackgroundRenderer(scheduler) if config.background else None

        def make_controller(sink):
            return Controller(
                scheduler,
                sink,
                width=config.width,
                height=config.height,
                viewport=config.viewport,
                params=config.params,
                background=background,
            )

        try:
            return gui.run(make_controller, config.save_dir, config.window_size)
        finally:
            if background is not None:
                background.close()


if __name__ == '__main__':
    sys.exit(main())
