"""Rendering primitives for Mandelbrot frames."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
import tensorflow as tf

from .kernel import ESCAPE_RADIUS_SQUARED, colorize

MIN_ITERATIONS = 100
MAX_ITERATIONS = 2000
DEFAULT_ITERATIONS = 1000


@dataclass(frozen=True)
class RenderParams:
    """Visual parameters of a render: iteration budget and hue offset."""

    max_iter: int = DEFAULT_ITERATIONS
    color_offset: float = 0.0

    def __post_init__(self) -> None:
        if not MIN_ITERATIONS <= int(self.max_iter) <= MAX_ITERATIONS:
            raise ValueError(
                f"max_iter must be in [{MIN_ITERATIONS}, {MAX_ITERATIONS}], got {self.max_iter}"
            )
        if not 0.0 <= float(self.color_offset) <= 1.0:
            raise ValueError(f"color_offset must be in [0.0, 1.0], got {self.color_offset}")
        object.__setattr__(self, "max_iter", int(self.max_iter))
        object.__setattr__(self, "color_offset", float(self.color_offset))

    @classmethod
    def from_controls(cls, color_slider: int, iter_slider: int) -> "RenderParams":
        """Build parameters from the integer slider positions of the control panel."""

        return cls(max_iter=int(iter_slider), color_offset=int(color_slider) / 100.0)


@dataclass(frozen=True)
class SamplingMetadata:
    """Metadata describing the sampling grid for a rendered frame."""

    x_min: float
    y_min: float
    x_span: float
    y_span: float
    x_res: int
    y_res: int

    @property
    def x_step(self) -> float:
        return self.x_span / self.x_res

    @property
    def y_step(self) -> float:
        return self.y_span / self.y_res

    def columns(self) -> np.ndarray:
        cols = np.arange(self.x_res, dtype=np.float64)
        return np.float64(self.x_min) + (cols * np.float64(self.x_span)) / np.float64(self.x_res)

    def rows(self, start: int = 0, stop: Optional[int] = None) -> np.ndarray:
        stop = self.y_res if stop is None else stop
        rows = np.arange(start, stop, dtype=np.float64)
        return np.float64(self.y_min) + (rows * np.float64(self.y_span)) / np.float64(self.y_res)


class PixelBuffer:
    """Immutable ``height x width`` grid of packed ``0xRRGGBB`` pixels."""

    __slots__ = ("width", "height", "pixels")

    def __init__(self, width: int, height: int, pixels: np.ndarray) -> None:
        pixels = np.array(pixels, dtype=np.uint32, copy=True)
        if pixels.shape != (height, width):
            raise ValueError(f"pixel array has shape {pixels.shape}, expected {(height, width)}")
        pixels.setflags(write=False)
        self.width = int(width)
        self.height = int(height)
        self.pixels = pixels

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        return cls(width, height, np.zeros((height, width), dtype=np.uint32))

    def pixel(self, x: int, y: int) -> int:
        return int(self.pixels[y, x])

    def to_rgb(self) -> np.ndarray:
        """Return an ``(height, width, 3)`` ``uint8`` array."""

        rgb = np.empty((self.height, self.width, 3), dtype=np.uint8)
        rgb[..., 0] = (self.pixels >> 16) & 0xFF
        rgb[..., 1] = (self.pixels >> 8) & 0xFF
        rgb[..., 2] = self.pixels & 0xFF
        return rgb

    def tobytes(self) -> bytes:
        return self.pixels.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.pixels, other.pixels)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"


@tf.function
def _mandelbrot_step(zx: tf.Tensor, zy: tf.Tensor, cx: tf.Tensor, cy: tf.Tensor, ns: tf.Tensor, active: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Perform a single Mandelbrot iteration for points that have not escaped."""

    horizon = tf.constant(ESCAPE_RADIUS_SQUARED, dtype=zx.dtype)
    active = tf.logical_and(active, zx * zx + zy * zy < horizon)
    zx_new = zx * zx - zy * zy + cx
    zy_new = tf.constant(2.0, dtype=zy.dtype) * zx * zy + cy
    zx = tf.where(active, zx_new, zx)
    zy = tf.where(active, zy_new, zy)
    ns = ns + tf.cast(active, tf.int32)
    return zx, zy, ns, active


@tf.function(
    input_signature=(
        tf.TensorSpec(shape=[None], dtype=tf.float64),
        tf.TensorSpec(shape=[None], dtype=tf.float64),
        tf.TensorSpec(shape=[], dtype=tf.int32),
    )
)
def _mandelbrot_run(xs: tf.Tensor, ys: tf.Tensor, max_iterations: tf.Tensor) -> tf.Tensor:
    """Iterate the Mandelbrot formula over the ``ys x xs`` grid using a TensorFlow while loop."""

    cx, cy = tf.meshgrid(xs, ys)
    zx = tf.zeros_like(cx)
    zy = tf.zeros_like(cy)
    ns = tf.zeros(tf.shape(cx), dtype=tf.int32)
    active = tf.ones(tf.shape(cx), dtype=tf.bool)
    i = tf.constant(0, dtype=tf.int32)

    def cond(i, zx, zy, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zx, zy, ns, active):
        zx, zy, ns, active = _mandelbrot_step(zx, zy, cx, cy, ns, active)
        return i + 1, zx, zy, ns, active

    _, _, _, ns, _ = tf.while_loop(cond, body, (i, zx, zy, ns, active))

    finite = tf.logical_and(tf.math.is_finite(cx), tf.math.is_finite(cy))
    return tf.where(finite, ns, tf.fill(tf.shape(ns), max_iterations))


def escape_counts(xs: np.ndarray, ys: np.ndarray, max_iter: int, *, device: Optional[str] = None) -> np.ndarray:
    """Escape counts for every ``(ys[row], xs[col])`` sample; non-finite samples count as bounded."""

    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    if xs.size == 0 or ys.size == 0:
        return np.zeros((ys.size, xs.size), dtype=np.int32)

    with tf.device(device if device is not None else "/CPU:0"):
        ns = _mandelbrot_run(
            tf.convert_to_tensor(xs, dtype=tf.float64),
            tf.convert_to_tensor(ys, dtype=tf.float64),
            tf.constant(max_iter, dtype=tf.int32),
        )
    return ns.numpy()


def render_band(
    metadata: SamplingMetadata,
    params: RenderParams,
    start: int,
    stop: int,
    *,
    device: Optional[str] = None,
) -> np.ndarray:
    """Render rows ``[start, stop)`` of the frame into packed ``uint32`` pixels."""

    counts = escape_counts(metadata.columns(), metadata.rows(start, stop), params.max_iter, device=device)
    return colorize(counts, params.max_iter, params.color_offset)
