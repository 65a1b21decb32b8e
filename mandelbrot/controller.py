"""Gesture-driven state machine that owns the viewport, the current frame and the undo history."""

from __future__ import annotations

import enum
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

from .errors import InvalidSelection, RenderCancelled, RenderError
from .events import (
    ControlChange,
    Drag,
    Gesture,
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
from .renderer import PixelBuffer, RenderParams
from .scheduler import RasterScheduler
from .sink import ImageSink, SaveResult
from .viewport import Selection, Viewport, pan, reset, wheel_zoom, zoom_to_selection
from .worker import BackgroundRenderer

logger = logging.getLogger(__name__)


class ControllerState(enum.Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    PANNING = "panning"


class Controller:
    """Translate gestures into viewport updates, renders and published frames.

    Every published frame pushes the one it replaces onto the undo
    history. A failed render leaves the viewport, the parameters, the
    history and the visible frame untouched.

    With a :class:`BackgroundRenderer` the controller returns immediately
    after queueing a render; the host calls :meth:`poll` to publish the
    newest finished frame.
    """

    def __init__(
        self,
        scheduler: RasterScheduler,
        sink: ImageSink,
        *,
        width: int = 800,
        height: int = 800,
        viewport: Optional[Viewport] = None,
        params: Optional[RenderParams] = None,
        history: Optional[UndoHistory] = None,
        background: Optional[BackgroundRenderer] = None,
    ) -> None:
        self.scheduler = scheduler
        self.sink = sink
        self.width = width
        self.height = height
        self.viewport = viewport or Viewport()
        self.params = params or RenderParams()
        self.history = history if history is not None else UndoHistory()
        self.background = background
        self.current = PixelBuffer.blank(width, height)
        self.state = ControllerState.IDLE
        self.selection: Optional[Selection] = None
        self._origin: Optional[tuple[float, float]] = None
        self._published = (self.viewport, self.params)

    def start(self) -> bool:
        """Render the first frame."""

        return self._rerender(self.viewport, self.params)

    def handle(self, event: Gesture) -> bool:
        """Apply ``event``; return ``True`` when it produced or queued a new frame."""

        if isinstance(event, Press):
            return self._on_press(event)
        if isinstance(event, Drag):
            return self._on_drag(event)
        if isinstance(event, Release):
            return self._on_release(event)
        if isinstance(event, Wheel):
            if event.delta == 0:
                return False
            return self._rerender(wheel_zoom(self.viewport, event.delta), self.params)
        if isinstance(event, ControlChange):
            return self._on_control_change(event)
        if isinstance(event, Reset):
            return self.reset()
        if isinstance(event, Undo):
            return self.undo()
        if isinstance(event, Save):
            return self.save(event.path).ok
        if isinstance(event, Key):
            return self._on_key(event)
        raise TypeError(f"unsupported gesture: {event!r}")

    def reset(self) -> bool:
        return self._rerender(reset(), self.params)

    def undo(self) -> bool:
        """Show the previous frame again. The viewport is left as it is."""

        buffer = self.history.pop()
        if buffer is None:
            logger.debug("Undo requested with empty history")
            return False
        self.current = buffer
        self.sink.present(buffer)
        return True

    def save(self, path: Union[str, Path]) -> SaveResult:
        return self.sink.write_png(self.current, path)

    def poll(self) -> bool:
        """Publish the newest finished background render, if any."""

        if self.background is None:
            return False
        outcome = self.background.poll()
        if outcome is None:
            return False
        if outcome.error is not None:
            if not isinstance(outcome.error, RenderCancelled):
                logger.error("Render failed, keeping previous frame: %s", outcome.error)
                self.viewport, self.params = self._published
            return False
        request = outcome.request
        self._publish(outcome.buffer, request.viewport, request.params)
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the queued background render finishes, then publish it."""

        if self.background is None or not self.background.wait(timeout):
            return False
        return self.poll()

    def _on_press(self, event: Press) -> bool:
        if self.state is not ControllerState.IDLE:
            return False
        self._origin = (event.x, event.y)
        if event.button is MouseButton.RIGHT:
            self.state = ControllerState.PANNING
        else:
            self.state = ControllerState.SELECTING
            self.selection = Selection(event.x, event.y)
        return False

    def _on_drag(self, event: Drag) -> bool:
        if self._origin is None:
            return False
        origin_x, origin_y = self._origin
        if self.state is ControllerState.SELECTING:
            self.selection = Selection.from_drag(origin_x, origin_y, event.x, event.y)
            return False
        if self.state is ControllerState.PANNING:
            moved = pan(self.viewport, event.x - origin_x, event.y - origin_y, self.width, self.height)
            self._origin = (event.x, event.y)
            return self._rerender(moved, self.params)
        return False

    def _on_release(self, event: Release) -> bool:
        state, selection = self.state, self.selection
        self.state = ControllerState.IDLE
        self.selection = None
        self._origin = None
        if state is not ControllerState.SELECTING or selection is None:
            return False
        try:
            zoomed = zoom_to_selection(self.viewport, selection, self.width, self.height)
        except InvalidSelection:
            logger.debug("Ignoring empty selection at (%g, %g)", event.x, event.y)
            return False
        return self._rerender(zoomed, self.params)

    def _on_control_change(self, event: ControlChange) -> bool:
        changes = {}
        if event.max_iter is not None:
            changes["max_iter"] = event.max_iter
        if event.color_offset is not None:
            changes["color_offset"] = event.color_offset
        try:
            params = replace(self.params, **changes)
        except ValueError as exc:
            logger.warning("Ignoring invalid control value: %s", exc)
            return False
        return self._rerender(self.viewport, params)

    def _on_key(self, event: Key) -> bool:
        if event.action is KeyAction.UNDO:
            return self.undo()
        if event.action is KeyAction.RESET:
            return self.reset()
        if event.action is KeyAction.SAVE and event.path is not None:
            return self.save(event.path).ok
        return False

    def _rerender(self, viewport: Viewport, params: RenderParams) -> bool:
        if self.background is not None:
            self.viewport, self.params = viewport, params
            self.background.submit(viewport, params, self.width, self.height)
            return True

        try:
            buffer = self.scheduler.render(viewport, params, self.width, self.height)
        except RenderError as exc:
            logger.error("Render failed, keeping previous frame: %s", exc)
            return False
        self._publish(buffer, viewport, params)
        return True

    def _publish(self, buffer: PixelBuffer, viewport: Viewport, params: RenderParams) -> None:
        self.history.push(self.current)
        self.viewport, self.params = viewport, params
        self._published = (viewport, params)
        self.current = buffer
        self.sink.present(buffer)
