"""Parallel raster scheduler: splits a frame into row bands rendered on a shared pool."""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Optional

import numpy as np

from .errors import RenderCancelled, RenderError
from .renderer import PixelBuffer, RenderParams, SamplingMetadata, render_band
from .viewport import Viewport, validate

logger = logging.getLogger(__name__)


def partition_rows(height: int, workers: int) -> list[tuple[int, int]]:
    """Split ``height`` rows into ``workers`` contiguous bands.

    Every band gets ``height // workers`` rows and the last one absorbs the
    remainder. Empty bands are dropped.
    """

    workers = max(int(workers), 1)
    rows_per_band = height // workers
    bands = []
    for index in range(workers):
        start = index * rows_per_band
        stop = height if index == workers - 1 else start + rows_per_band
        if stop > start:
            bands.append((start, stop))
    return bands


class RasterScheduler:
    """Renders frames on one long-lived thread pool sized to the available cores."""

    def __init__(self, workers: Optional[int] = None, *, device: Optional[str] = None) -> None:
        self.workers = max(int(workers or os.cpu_count() or 1), 1)
        self.device = device
        self._executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="mandelbrot-band")
        self._closed = False

    def __enter__(self) -> "RasterScheduler":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if not self._closed:
            self._executor.shutdown(wait=True, cancel_futures=True)
            self._closed = True

    def render(
        self,
        viewport: Viewport,
        params: RenderParams,
        width: int,
        height: int,
        cancel: Optional[threading.Event] = None,
    ) -> PixelBuffer:
        """Render ``viewport`` at ``width x height`` and return the finished buffer.

        Raises :class:`RenderError` if any band fails and
        :class:`RenderCancelled` if ``cancel`` is set before the join completes.
        """

        if self._closed:
            raise RenderError("scheduler is closed")
        if width <= 0 or height <= 0:
            raise RenderError(f"image size must be positive, got {width}x{height}")
        metadata = validate(viewport).sampling(width, height)

        started = time.perf_counter()
        pixels = np.zeros((height, width), dtype=np.uint32)
        bands = partition_rows(height, self.workers)
        futures = [
            self._executor.submit(self._render_into, pixels, metadata, params, start, stop, cancel)
            for start, stop in bands
        ]
        wait(futures)

        for future in futures:
            error = future.exception()
            if error is None:
                continue
            if isinstance(error, RenderCancelled):
                raise error
            raise RenderError(f"band worker failed: {error}") from error
        if cancel is not None and cancel.is_set():
            raise RenderCancelled("render superseded by a newer request")

        logger.debug(
            "Rendered %dx%d at zoom=%g offset=(%g, %g) max_iter=%d in %.3fs using %d bands",
            width,
            height,
            viewport.zoom,
            viewport.offset_x,
            viewport.offset_y,
            params.max_iter,
            time.perf_counter() - started,
            len(bands),
        )
        return PixelBuffer(width, height, pixels)

    def _render_into(
        self,
        pixels: np.ndarray,
        metadata: SamplingMetadata,
        params: RenderParams,
        start: int,
        stop: int,
        cancel: Optional[threading.Event],
    ) -> None:
        if cancel is not None and cancel.is_set():
            raise RenderCancelled("render superseded by a newer request")
        pixels[start:stop] = render_band(metadata, params, start, stop, device=self.device)
