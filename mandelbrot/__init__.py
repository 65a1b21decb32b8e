"""Public API for the Mandelbrot explorer core."""

from .controller import Controller, ControllerState
from .errors import InvalidSelection, MandelbrotError, RenderCancelled, RenderError, SinkError
from .events import (
    ControlChange,
    Drag,
    Key,
    KeyAction,
    MouseButton,
    Press,
    Release,
    Reset,
    Save,
    Undo,
    Wheel,
)
from .history import UndoHistory
from .kernel import calculate_color, colorize, escape_time, hsb_to_rgb
from .logging_config import setup_logging
from .renderer import PixelBuffer, RenderParams, SamplingMetadata, escape_counts, render_band
from .scheduler import RasterScheduler, partition_rows
from .sink import ImageSink, PngFileSink, SaveResult
from .viewport import (
    Selection,
    Viewport,
    pan,
    pixel_to_complex,
    reset,
    unzoom_from_selection,
    validate,
    wheel_zoom,
    zoom_to_selection,
)
from .worker import BackgroundRenderer

__all__ = [
    "BackgroundRenderer",
    "ControlChange",
    "Controller",
    "ControllerState",
    "Drag",
    "ImageSink",
    "InvalidSelection",
    "Key",
    "KeyAction",
    "MandelbrotError",
    "MouseButton",
    "PixelBuffer",
    "PngFileSink",
    "Press",
    "RasterScheduler",
    "Release",
    "RenderCancelled",
    "RenderError",
    "RenderParams",
    "Reset",
    "SamplingMetadata",
    "Save",
    "SaveResult",
    "Selection",
    "SinkError",
    "Undo",
    "UndoHistory",
    "Viewport",
    "Wheel",
    "calculate_color",
    "colorize",
    "escape_counts",
    "escape_time",
    "hsb_to_rgb",
    "pan",
    "partition_rows",
    "pixel_to_complex",
    "render_band",
    "reset",
    "setup_logging",
    "unzoom_from_selection",
    "validate",
    "wheel_zoom",
    "zoom_to_selection",
]
