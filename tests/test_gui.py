from types import SimpleNamespace

import numpy as np
import pytest
from matplotlib.backend_bases import MouseEvent
from matplotlib.figure import Figure

from mandelbrot import Controller, Drag, MouseButton, Press, Release, Reset, Save, Undo, Viewport, Wheel
from mandelbrot.gui import (
    ExplorerWindow,
    MatplotlibSink,
    is_interactive_backend,
    next_save_path,
    translate_key_event,
    translate_mouse_event,
)


def mouse(x, y, button):
    return SimpleNamespace(xdata=x, ydata=y, button=button)


def test_mouse_buttons_map_to_gestures():
    assert translate_mouse_event("button_press_event", mouse(10.0, 20.0, 1)) == Press(10.0, 20.0, MouseButton.LEFT)
    assert translate_mouse_event("motion_notify_event", mouse(11.0, 21.0, None), MouseButton.RIGHT) == Drag(
        11.0, 21.0, MouseButton.RIGHT
    )
    assert translate_mouse_event("button_release_event", mouse(12.0, 22.0, 3)) == Release(12.0, 22.0, MouseButton.RIGHT)


def test_irrelevant_mouse_events_are_dropped():
    assert translate_mouse_event("button_press_event", mouse(1.0, 1.0, 2)) is None
    assert translate_mouse_event("motion_notify_event", mouse(1.0, 1.0, None)) is None
    assert translate_mouse_event("button_press_event", mouse(None, None, 1)) is None
    assert translate_mouse_event("button_release_event", mouse(None, None, 2)) is None


def test_release_outside_image_still_ends_gesture():
    release = translate_mouse_event("button_release_event", mouse(None, None, 1))
    assert isinstance(release, Release)
    assert release.button is MouseButton.LEFT


def test_scroll_direction_maps_to_wheel_sign():
    assert translate_mouse_event("scroll_event", SimpleNamespace(button="up")) == Wheel(1)
    assert translate_mouse_event("scroll_event", SimpleNamespace(button="down")) == Wheel(-1)


def test_key_chords(tmp_path):
    assert translate_key_event("ctrl+z", tmp_path) == Undo()
    assert translate_key_event("r", tmp_path) == Reset()
    assert translate_key_event("ctrl+s", tmp_path) == Save(str(tmp_path / "mandelbrot_000.png"))
    assert translate_key_event("x", tmp_path) is None


def test_save_paths_are_numbered(tmp_path):
    (tmp_path / "mandelbrot_000.png").write_bytes(b"")
    (tmp_path / "mandelbrot_001.png").write_bytes(b"")
    assert next_save_path(tmp_path) == tmp_path / "mandelbrot_002.png"


def test_backend_detection():
    assert not is_interactive_backend("agg")
    assert not is_interactive_backend("module://matplotlib_inline.backend_inline")
    assert is_interactive_backend("TkAgg")


@pytest.fixture
def window(fake_scheduler, tmp_path):
    figure = Figure(figsize=(4, 4))
    image_ax = figure.add_axes([0.05, 0.2, 0.9, 0.78])
    controller = Controller(fake_scheduler, MatplotlibSink(image_ax), width=80, height=80)
    controller.start()
    return ExplorerWindow(figure, image_ax, controller, tmp_path)


def test_frames_are_shown_in_image_axes(window):
    artist = window.controller.sink.artist
    assert artist is not None
    assert artist.get_array().shape == (80, 80, 3)


def test_selection_rectangle_follows_drag(window):
    window.dispatch(Press(10, 10, MouseButton.LEFT))
    window.dispatch(Drag(50, 30, MouseButton.LEFT))
    patch = window.selection_patch
    assert patch.get_visible()
    assert (patch.get_x(), patch.get_y(), patch.get_width(), patch.get_height()) == (10, 10, 20, 20)

    window.dispatch(Release(50, 30, MouseButton.LEFT))
    assert not patch.get_visible()
    assert window.controller.viewport.zoom == 4.0


def test_sliders_drive_render_params(window):
    window.color_slider.set_val(50)
    window.iter_slider.set_val(300)
    assert window.controller.params.color_offset == 0.5
    assert window.controller.params.max_iter == 300


def test_buttons_reset_and_undo(window, tmp_path):
    window.dispatch(Wheel(1))
    window.reset_button._observers.process("clicked", None)
    assert window.controller.viewport == Viewport()
    window.save_button._observers.process("clicked", None)
    assert (tmp_path / "mandelbrot_000.png").exists()


def test_window_tracks_held_button_for_drags(window):
    def event(x, y, button):
        return SimpleNamespace(inaxes=window.image_ax, xdata=x, ydata=y, button=button)

    window._on_mouse("button_press_event", event(40.0, 40.0, 3))
    window._on_mouse("motion_notify_event", event(60.0, 40.0, None))
    window._on_mouse("button_release_event", event(60.0, 40.0, 3))
    window._on_mouse("motion_notify_event", event(70.0, 40.0, None))

    assert window.controller.viewport.offset_x == -1.0
    assert window.controller.state.value == "idle"


def test_drag_over_control_panel_keeps_image_coordinates(window):
    canvas = window.figure.canvas
    centre_x, centre_y = window.image_ax.transData.transform((40.0, 40.0))
    slider_box = window.color_slider.ax.get_window_extent()
    over_slider = (centre_x, (slider_box.y0 + slider_box.y1) / 2)

    press = MouseEvent("button_press_event", canvas, centre_x, centre_y, button=3)
    move = MouseEvent("motion_notify_event", canvas, *over_slider)
    assert press.inaxes is window.image_ax
    assert move.inaxes is window.color_slider.ax

    window._on_mouse("button_press_event", press)
    window._on_mouse("motion_notify_event", move)

    viewport = window.controller.viewport
    assert viewport.offset_x == pytest.approx(0.0, abs=1e-9)
    assert viewport.offset_y != 0.0
    assert type(viewport.offset_x) is float
    assert type(viewport.offset_y) is float


def test_gesture_coordinates_are_plain_floats():
    gesture = translate_mouse_event("button_press_event", mouse(np.float64(3.5), np.float64(4.5), 1))
    assert gesture == Press(3.5, 4.5, MouseButton.LEFT)
    assert type(gesture.x) is float and type(gesture.y) is float
