"""Background rendering with most-recent-wins semantics."""

from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Optional

from .errors import RenderCancelled, RenderError
from .renderer import PixelBuffer, RenderParams
from .scheduler import RasterScheduler
from .viewport import Viewport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderRequest:
    render_id: int
    viewport: Viewport
    params: RenderParams
    width: int
    height: int


@dataclass(frozen=True)
class RenderOutcome:
    request: RenderRequest
    buffer: Optional[PixelBuffer] = None
    error: Optional[RenderError] = None


class BackgroundRenderer:
    """Runs renders off the control thread; only the newest request is ever delivered.

    Submitting a request cancels the render in flight. :meth:`poll` is called
    from the control thread and returns the outcome of the most recent request
    once it has finished, or ``None``.
    """

    def __init__(self, scheduler: RasterScheduler) -> None:
        self.scheduler = scheduler
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mandelbrot-render")
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._latest_id = 0
        self._cancel: Optional[threading.Event] = None
        self._future: Optional[Future] = None

    def submit(self, viewport: Viewport, params: RenderParams, width: int, height: int) -> RenderRequest:
        request = RenderRequest(next(self._ids), viewport, params, width, height)
        cancel = threading.Event()
        with self._lock:
            if self._cancel is not None:
                self._cancel.set()
            self._latest_id = request.render_id
            self._cancel = cancel
            self._future = self._executor.submit(self._run, request, cancel)
        logger.debug("Queued render %d", request.render_id)
        return request

    def _run(self, request: RenderRequest, cancel: threading.Event) -> RenderOutcome:
        if cancel.is_set():
            return RenderOutcome(request, error=RenderCancelled("superseded before start"))
        try:
            buffer = self.scheduler.render(request.viewport, request.params, request.width, request.height, cancel)
        except RenderError as exc:
            return RenderOutcome(request, error=exc)
        return RenderOutcome(request, buffer=buffer)

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._future is not None and not self._future.done()

    def poll(self) -> Optional[RenderOutcome]:
        with self._lock:
            future = self._future
            if future is None or not future.done():
                return None
            self._future = None
            self._cancel = None
        outcome = future.result()
        if outcome.request.render_id != self._latest_id:
            return None
        return outcome

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the newest request has finished.

        Returns ``False`` when nothing is pending or ``timeout`` runs out first.
        """

        with self._lock:
            future = self._future
        if future is None:
            return False
        try:
            future.exception(timeout=timeout)
        except FutureTimeoutError:
            return False
        return True

    def close(self) -> None:
        with self._lock:
            if self._cancel is not None:
                self._cancel.set()
        self._executor.shutdown(wait=True, cancel_futures=True)
