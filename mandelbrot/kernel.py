"""Escape-time kernel and the hue/saturation colour mapping."""

from __future__ import annotations

import math

import numpy as np

ESCAPE_RADIUS_SQUARED = 4.0
BASE_HUE = 0.6
BLACK = 0x000000


def escape_time(cx: float, cy: float, max_iter: int) -> int:
    """Return the number of completed ``z <- z**2 + c`` updates before escape."""

    zx = 0.0
    zy = 0.0
    iteration = 0
    while zx * zx + zy * zy < ESCAPE_RADIUS_SQUARED and iteration < max_iter:
        temp = zx * zx - zy * zy + cx
        zy = 2.0 * zx * zy + cy
        zx = temp
        iteration += 1
    return iteration


def palette_hue(color_offset: float) -> float:
    return (BASE_HUE + color_offset) % 1.0


def _hsb_channels(hue: float, saturation, brightness: float):
    # Works on Python floats and on numpy arrays of saturations alike, so the
    # scalar and vectorised paths share the exact same arithmetic.
    h = (hue - math.floor(hue)) * 6.0
    sector = int(math.floor(h))
    f = h - math.floor(h)
    v = brightness * 255.0 + 0.5
    p = brightness * (1.0 - saturation) * 255.0 + 0.5
    q = brightness * (1.0 - saturation * f) * 255.0 + 0.5
    t = brightness * (1.0 - (saturation * (1.0 - f))) * 255.0 + 0.5
    if sector == 0:
        return v, t, p
    if sector == 1:
        return q, v, p
    if sector == 2:
        return p, v, t
    if sector == 3:
        return p, q, v
    if sector == 4:
        return t, p, v
    return v, p, q


def hsb_to_rgb(hue: float, saturation: float, brightness: float) -> int:
    """Convert an HSB triple to a packed ``0xRRGGBB`` integer."""

    if saturation == 0:
        gray = int(brightness * 255.0 + 0.5)
        return (gray << 16) | (gray << 8) | gray
    r, g, b = _hsb_channels(hue, saturation, brightness)
    return (int(r) << 16) | (int(g) << 8) | int(b)


def calculate_color(cx: float, cy: float, max_iter: int, color_offset: float = 0.0) -> int:
    """Colour of the point ``cx + i*cy``.

    Points that stay bounded for ``max_iter`` updates are black. Escaping
    points are blue (shifted by ``color_offset`` around the hue circle) and
    fade towards white the longer they take to escape.
    """

    if not (math.isfinite(cx) and math.isfinite(cy)):
        return BLACK
    iteration = escape_time(cx, cy, max_iter)
    if iteration >= max_iter:
        return BLACK
    saturation = 1.0 - iteration / max_iter
    return hsb_to_rgb(palette_hue(color_offset), saturation, 1.0)


def colorize(counts: np.ndarray, max_iter: int, color_offset: float = 0.0) -> np.ndarray:
    """Vectorised :func:`calculate_color` over an array of escape counts."""

    counts = np.asarray(counts)
    saturation = 1.0 - counts.astype(np.float64) / np.float64(max_iter)
    r, g, b = (
        np.broadcast_to(channel, saturation.shape)
        for channel in _hsb_channels(palette_hue(color_offset), saturation, 1.0)
    )

    packed = (
        (r.astype(np.uint32) << np.uint32(16))
        | (g.astype(np.uint32) << np.uint32(8))
        | b.astype(np.uint32)
    )
    # Bounded points are black whatever the hue.
    return np.where(counts >= max_iter, np.uint32(BLACK), packed).astype(np.uint32)
