import pytest

from mandelbrot import (
    InvalidSelection,
    RenderError,
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


def test_default_bounds_cover_square_of_side_four():
    assert Viewport().bounds() == (-2.0, 2.0, -2.0, 2.0)


def test_bounds_follow_zoom_and_offset():
    min_x, max_x, min_y, max_y = Viewport(zoom=4.0, offset_x=-1.0, offset_y=0.5).bounds()
    assert (min_x, max_x) == (-1.5, -0.5)
    assert (min_y, max_y) == (0.0, 1.0)


def test_sampling_uses_top_left_pixel_convention():
    metadata = Viewport().sampling(800, 800)
    assert (metadata.x_span, metadata.y_span) == (4.0, 4.0)
    assert metadata.x_step == metadata.y_step == 4.0 / 800
    assert pixel_to_complex(metadata, 0, 0) == (-2.0, -2.0)
    assert pixel_to_complex(metadata, 400, 400) == (0.0, 0.0)


def test_reset_then_wheel_up_gives_zoom_1_1():
    assert wheel_zoom(reset(), 1).zoom == 1.1


def test_wheel_down_and_zero():
    assert wheel_zoom(Viewport(), -3).zoom == 0.9
    assert wheel_zoom(Viewport(zoom=2.0), 0) == Viewport(zoom=2.0)


def test_centred_selection_doubles_zoom():
    selection = Selection.from_drag(200, 200, 600, 600)
    zoomed = zoom_to_selection(Viewport(), selection, 800, 800)
    assert zoomed == Viewport(zoom=2.0, offset_x=0.0, offset_y=0.0)


def test_off_centre_selection_moves_offset():
    selection = Selection.from_drag(0, 0, 400, 400)
    zoomed = zoom_to_selection(Viewport(), selection, 800, 800)
    assert zoomed.zoom == 2.0
    assert zoomed.offset_x == pytest.approx(-1.0)
    assert zoomed.offset_y == pytest.approx(-1.0)


def test_zoom_to_selection_round_trips():
    start = Viewport(zoom=3.7, offset_x=-0.52, offset_y=0.31)
    selection = Selection.from_drag(513, 97, 388, 161)
    zoomed = zoom_to_selection(start, selection, 800, 800)
    restored = unzoom_from_selection(zoomed, selection, 800, 800)
    assert restored.zoom == pytest.approx(start.zoom)
    assert restored.offset_x == pytest.approx(start.offset_x)
    assert restored.offset_y == pytest.approx(start.offset_y)


def test_empty_selection_is_rejected():
    with pytest.raises(InvalidSelection):
        zoom_to_selection(Viewport(), Selection(100, 100), 800, 800)


def test_pan_right_moves_view_left():
    moved = pan(Viewport(), 100, 0, 800, 800)
    assert moved.offset_x == -0.5
    assert moved.offset_y == 0.0


def test_pan_scales_with_zoom():
    moved = pan(Viewport(zoom=4.0), 0, -200, 800, 800)
    assert moved.offset_y == pytest.approx(0.25)


@pytest.mark.parametrize(
    "end, expected",
    [
        ((50, 30), (20, 20)),
        ((-20, 40), (-30, 30)),
        ((15, -100), (5, -5)),
        ((-7, -7), (-17, -17)),
        ((10, 90), (0, 0)),
    ],
)
def test_selection_is_square_with_signs_of_drag(end, expected):
    selection = Selection.from_drag(10, 10, *end)
    assert (selection.dx, selection.dy) == expected
    assert abs(selection.dx) == abs(selection.dy)


def test_selection_corners_are_normalised():
    selection = Selection.from_drag(100, 100, 40, 160)
    assert selection.corners() == (40, 100, 100, 160)
    assert selection.center == (70, 130)
    assert selection.side == 60


@pytest.mark.parametrize("viewport", [Viewport(zoom=0.0), Viewport(zoom=-2.0), Viewport(zoom=1e-320)])
def test_validate_rejects_degenerate_viewports(viewport):
    with pytest.raises(RenderError):
        validate(viewport)


def test_validate_passes_normal_viewport():
    viewport = Viewport(zoom=1e6, offset_x=-0.743, offset_y=0.131)
    assert validate(viewport) is viewport
