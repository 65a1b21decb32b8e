"""Matplotlib front end: the window, the control panel and mouse/keyboard translation."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Optional

import matplotlib
import matplotlib.patches
import matplotlib.widgets

from .controller import Controller, ControllerState
from .events import ControlChange, Drag, Gesture, MouseButton, Press, Release, Reset, Save, Undo, Wheel
from .renderer import MAX_ITERATIONS, MIN_ITERATIONS, PixelBuffer
from .sink import ImageSink

logger = logging.getLogger(__name__)

_BUTTONS = {1: MouseButton.LEFT, 3: MouseButton.RIGHT}
_NON_INTERACTIVE_BACKENDS = {"agg", "cairo", "pdf", "pgf", "ps", "svg", "template"}
_POLL_INTERVAL_MS = 40


def is_interactive_backend(backend: Optional[str] = None) -> bool:
    backend = (backend or matplotlib.get_backend()).lower()
    return backend not in _NON_INTERACTIVE_BACKENDS and not backend.startswith("module://matplotlib_inline")


def _image_coords(event: Any, ax: Any = None) -> tuple[Optional[float], Optional[float]]:
    if ax is None or event.inaxes is ax:
        if event.xdata is None or event.ydata is None:
            return None, None
        return float(event.xdata), float(event.ydata)
    # Over another axes xdata/ydata belong to that axes; map the screen position back into the image.
    if event.x is None or event.y is None:
        return None, None
    x, y = ax.transData.inverted().transform((event.x, event.y))
    return float(x), float(y)


def translate_mouse_event(
    kind: str, event: Any, pressed: Optional[MouseButton] = None, ax: Any = None
) -> Optional[Gesture]:
    """Map a matplotlib mouse event onto a gesture, or ``None`` when it is irrelevant.

    ``kind`` is the matplotlib event name (``button_press_event``,
    ``motion_notify_event``, ``button_release_event`` or ``scroll_event``).
    Coordinates are image pixels. When ``ax`` is the image axes they are
    computed in its data space wherever the cursor is, so a drag that
    crosses the control panel keeps tracking the image.
    Motion events do not carry the held button, so ``pressed`` supplies it.
    """

    if kind == "scroll_event":
        if event.button == "up":
            return Wheel(1)
        if event.button == "down":
            return Wheel(-1)
        return None

    button = _BUTTONS.get(int(event.button)) if event.button is not None else None
    x, y = _image_coords(event, ax)
    if kind == "button_release_event":
        if button is None:
            return None
        # Releasing outside the window still has to end the gesture.
        return Release(math.nan if x is None else x, math.nan if y is None else y, button)

    if x is None or y is None:
        return None
    if kind == "motion_notify_event":
        return Drag(x, y, pressed) if pressed is not None else None
    if kind == "button_press_event" and button is not None:
        return Press(x, y, button)
    return None


def translate_key_event(key: Optional[str], save_dir: Path) -> Optional[Gesture]:
    if key == "ctrl+z":
        return Undo()
    if key == "r":
        return Reset()
    if key == "ctrl+s":
        return Save(str(next_save_path(save_dir)))
    return None


def next_save_path(save_dir: Path, prefix: str = "mandelbrot", digits: int = 3) -> Path:
    """First ``<prefix>_NNN.png`` in ``save_dir`` that does not exist yet."""

    index = 0
    while True:
        candidate = save_dir / f"{prefix}_{index:0{digits}d}.png"
        if not candidate.exists():
            return candidate
        index += 1


class MatplotlibSink(ImageSink):
    """Shows frames in a matplotlib image axes."""

    def __init__(self, ax) -> None:
        self.ax = ax
        self.artist = None

    def present(self, buffer: PixelBuffer) -> None:
        rgb = buffer.to_rgb()
        if self.artist is None:
            self.artist = self.ax.imshow(
                rgb,
                extent=(0, buffer.width, buffer.height, 0),
                interpolation="nearest",
            )
        else:
            self.artist.set_data(rgb)
            self.artist.set_extent((0, buffer.width, buffer.height, 0))
        self.ax.set_title("")
        self.ax.figure.canvas.draw_idle()

    def report_error(self, message: str) -> None:
        self.ax.set_title(message, color="red", fontsize="small")
        self.ax.figure.canvas.draw_idle()


class ExplorerWindow:
    """Wires a figure's events and widgets to a :class:`Controller`."""

    def __init__(self, figure, image_ax, controller: Controller, save_dir: Path) -> None:
        self.figure = figure
        self.image_ax = image_ax
        self.controller = controller
        self.save_dir = save_dir
        self._pressed: Optional[MouseButton] = None
        self.selection_patch = matplotlib.patches.Rectangle(
            (0, 0), 0, 0, fill=False, edgecolor="red", linewidth=1.0, visible=False
        )
        image_ax.add_patch(self.selection_patch)
        self._build_controls()
        self._connect()
        self._timer = figure.canvas.new_timer(interval=_POLL_INTERVAL_MS)
        self._timer.add_callback(self._poll)

    def _build_controls(self) -> None:
        params = self.controller.params
        figure = self.figure
        self.color_slider = matplotlib.widgets.Slider(
            figure.add_axes([0.18, 0.11, 0.62, 0.03]),
            "Color Offset:",
            0,
            100,
            valinit=round(params.color_offset * 100),
            valstep=1,
        )
        self.iter_slider = matplotlib.widgets.Slider(
            figure.add_axes([0.18, 0.065, 0.62, 0.03]),
            "Max Iterations:",
            MIN_ITERATIONS,
            MAX_ITERATIONS,
            valinit=params.max_iter,
            valstep=1,
        )
        self.reset_button = matplotlib.widgets.Button(figure.add_axes([0.18, 0.01, 0.18, 0.04]), "Reset View")
        self.undo_button = matplotlib.widgets.Button(figure.add_axes([0.41, 0.01, 0.18, 0.04]), "Undo")
        self.save_button = matplotlib.widgets.Button(figure.add_axes([0.64, 0.01, 0.18, 0.04]), "Save Image")

        self.color_slider.on_changed(lambda value: self.dispatch(ControlChange(color_offset=int(value) / 100.0)))
        self.iter_slider.on_changed(lambda value: self.dispatch(ControlChange(max_iter=int(value))))
        self.reset_button.on_clicked(lambda _: self.dispatch(Reset()))
        self.undo_button.on_clicked(lambda _: self.dispatch(Undo()))
        self.save_button.on_clicked(lambda _: self.dispatch(Save(str(next_save_path(self.save_dir)))))

    def _connect(self) -> None:
        canvas = self.figure.canvas
        for kind in ("button_press_event", "motion_notify_event", "button_release_event", "scroll_event"):
            canvas.mpl_connect(kind, lambda event, kind=kind: self._on_mouse(kind, event))
        canvas.mpl_connect("key_press_event", self._on_key)

    def _on_mouse(self, kind: str, event) -> None:
        if kind == "button_press_event" and event.inaxes is not self.image_ax:
            return
        gesture = translate_mouse_event(kind, event, self._pressed, self.image_ax)
        if isinstance(gesture, Press):
            self._pressed = gesture.button
        elif isinstance(gesture, Release):
            self._pressed = None
        if gesture is not None:
            self.dispatch(gesture)

    def _on_key(self, event) -> None:
        gesture = translate_key_event(event.key, self.save_dir)
        if gesture is not None:
            self.dispatch(gesture)

    def dispatch(self, gesture: Gesture) -> None:
        self.controller.handle(gesture)
        self._draw_selection()

    def _draw_selection(self) -> None:
        selection = self.controller.selection
        if self.controller.state is not ControllerState.SELECTING or selection is None or selection.is_empty:
            self.selection_patch.set_visible(False)
        else:
            left, top, right, bottom = selection.corners()
            self.selection_patch.set_bounds(left, top, right - left, bottom - top)
            self.selection_patch.set_visible(True)
        self.figure.canvas.draw_idle()

    def _poll(self) -> None:
        self.controller.poll()

    def show(self) -> None:
        import matplotlib.pyplot as plt

        self._timer.start()
        plt.show()


def run(controller_factory, save_dir: Path, window_size: int = 1000) -> int:
    """Open the explorer window and block until it is closed.

    ``controller_factory`` receives the :class:`ImageSink` of the window and
    returns the controller that drives it.
    """

    import matplotlib.pyplot as plt

    if not is_interactive_backend():
        logger.error("No interactive matplotlib backend (current: %s); use --render for headless output", matplotlib.get_backend())
        return 1

    for keymap in ("keymap.home", "keymap.save", "keymap.back"):
        plt.rcParams[keymap] = [key for key in plt.rcParams[keymap] if key not in ("r", "ctrl+s", "ctrl+z")]
    plt.rcParams["toolbar"] = "None"

    dpi = 100
    figure = plt.figure(figsize=(window_size / dpi, window_size / dpi), dpi=dpi)
    figure.canvas.manager.set_window_title("Mandelbrot Set")
    image_ax = figure.add_axes([0.05, 0.2, 0.9, 0.78])
    image_ax.set_axis_off()

    controller = controller_factory(MatplotlibSink(image_ax))
    window = ExplorerWindow(figure, image_ax, controller, save_dir)
    if not controller.start():
        logger.error("Initial render failed")
        plt.close(figure)
        return 1
    if controller.background is not None and not controller.wait():
        logger.error("Initial render failed")
        plt.close(figure)
        return 1
    window.show()
    return 0
