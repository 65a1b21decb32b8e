"""Viewport state and the gesture transforms applied to it."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from .errors import InvalidSelection, RenderError
from .renderer import SamplingMetadata

HALF_EXTENT = 2.0
PLANE_EXTENT = 2 * HALF_EXTENT
WHEEL_ZOOM_IN = 1.1
WHEEL_ZOOM_OUT = 0.9


@dataclass(frozen=True)
class Viewport:
    """Zoom factor and centre of the view in complex-plane coordinates."""

    zoom: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def bounds(self) -> tuple[float, float, float, float]:
        """Return ``(min_x, max_x, min_y, max_y)`` of the visible square."""

        half = HALF_EXTENT / self.zoom
        return (
            -half + self.offset_x,
            half + self.offset_x,
            -half + self.offset_y,
            half + self.offset_y,
        )

    def sampling(self, width: int, height: int) -> SamplingMetadata:
        min_x, max_x, min_y, max_y = self.bounds()
        return SamplingMetadata(
            x_min=min_x,
            y_min=min_y,
            x_span=max_x - min_x,
            y_span=max_y - min_y,
            x_res=int(width),
            y_res=int(height),
        )


@dataclass(frozen=True)
class Selection:
    """Square drag selection anchored at ``origin`` with signed extents."""

    origin_x: float
    origin_y: float
    dx: float = 0.0
    dy: float = 0.0

    @classmethod
    def from_drag(cls, origin_x: float, origin_y: float, x: float, y: float) -> "Selection":
        delta_x = x - origin_x
        delta_y = y - origin_y
        size = min(abs(delta_x), abs(delta_y))
        return cls(
            origin_x=origin_x,
            origin_y=origin_y,
            dx=-size if delta_x < 0 else size,
            dy=-size if delta_y < 0 else size,
        )

    @property
    def side(self) -> float:
        return abs(self.dx)

    @property
    def center(self) -> tuple[float, float]:
        return self.origin_x + self.dx / 2.0, self.origin_y + self.dy / 2.0

    @property
    def is_empty(self) -> bool:
        return self.dx == 0 or self.dy == 0

    def corners(self) -> tuple[float, float, float, float]:
        """Return ``(left, top, right, bottom)`` in pixels."""

        x0, x1 = sorted((self.origin_x, self.origin_x + self.dx))
        y0, y1 = sorted((self.origin_y, self.origin_y + self.dy))
        return x0, y0, x1, y1


def validate(viewport: Viewport) -> Viewport:
    """Raise :class:`RenderError` when ``viewport`` cannot be rendered."""

    zoom = viewport.zoom
    if not math.isfinite(zoom) or zoom <= 0.0:
        raise RenderError(f"zoom must be a finite positive number, got {zoom!r}")
    bounds = viewport.bounds()
    if not all(math.isfinite(value) for value in bounds):
        raise RenderError(f"viewport bounds overflow: {bounds!r}")
    min_x, max_x, min_y, max_y = bounds
    if not (max_x > min_x and max_y > min_y):
        raise RenderError(f"viewport collapsed to zero extent at zoom {zoom!r}")
    return viewport


def zoom_to_selection(viewport: Viewport, selection: Selection, width: int, height: int) -> Viewport:
    """Centre the view on ``selection`` and zoom so its side fills the width."""

    if selection.is_empty:
        raise InvalidSelection("selection has zero area")
    center_x, center_y = selection.center
    norm_x = center_x / width - 0.5
    norm_y = center_y / height - 0.5
    return Viewport(
        zoom=viewport.zoom * (width / selection.side),
        offset_x=viewport.offset_x + norm_x * PLANE_EXTENT / viewport.zoom,
        offset_y=viewport.offset_y + norm_y * PLANE_EXTENT / viewport.zoom,
    )


def unzoom_from_selection(viewport: Viewport, selection: Selection, width: int, height: int) -> Viewport:
    """Inverse of :func:`zoom_to_selection` for the same selection and image size."""

    if selection.is_empty:
        raise InvalidSelection("selection has zero area")
    center_x, center_y = selection.center
    zoom = viewport.zoom / (width / selection.side)
    return Viewport(
        zoom=zoom,
        offset_x=viewport.offset_x - (center_x / width - 0.5) * PLANE_EXTENT / zoom,
        offset_y=viewport.offset_y - (center_y / height - 0.5) * PLANE_EXTENT / zoom,
    )


def pan(viewport: Viewport, dx: float, dy: float, width: int, height: int) -> Viewport:
    """Move the view so the plane follows a mouse drag of ``(dx, dy)`` pixels."""

    return replace(
        viewport,
        offset_x=viewport.offset_x - dx * PLANE_EXTENT / (viewport.zoom * width),
        offset_y=viewport.offset_y - dy * PLANE_EXTENT / (viewport.zoom * height),
    )


def wheel_zoom(viewport: Viewport, delta: float) -> Viewport:
    if delta > 0:
        return replace(viewport, zoom=viewport.zoom * WHEEL_ZOOM_IN)
    if delta < 0:
        return replace(viewport, zoom=viewport.zoom * WHEEL_ZOOM_OUT)
    return viewport


def reset() -> Viewport:
    return Viewport()


def pixel_to_complex(metadata: SamplingMetadata, row: float, col: float) -> tuple[float, float]:
    x = metadata.x_min + (col * metadata.x_span) / metadata.x_res
    y = metadata.y_min + (row * metadata.y_span) / metadata.y_res
    return x, y
