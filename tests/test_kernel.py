import math

import numpy as np
import pytest

from mandelbrot import calculate_color, colorize, escape_time, hsb_to_rgb


def test_origin_is_black_for_any_budget():
    for max_iter in (1, 2, 100, 1000, 2000):
        assert calculate_color(0.0, 0.0, max_iter, 0.0) == 0x000000


def test_far_point_escapes_immediately():
    assert escape_time(2.0, 2.0, 1000) == 1
    assert calculate_color(2.0, 2.0, 1000, 0.0) != 0x000000


def test_known_colour_of_first_iteration_escape():
    # hue 0.6, saturation 0.999 -> nearly pure blue
    assert calculate_color(2.0, 2.0, 1000, 0.0) == 0x0066FF


def test_escape_count_matches_hand_iteration():
    # 0.5+0.5i: |z|^2 = 0.5, 1.25, 2.3125, 2.910..., then escapes
    assert escape_time(0.5, 0.5, 1000) == 5
    assert escape_time(-1.0, -1.0, 1000) == 3
    assert escape_time(1.0, 0.0, 1000) == 2


@pytest.mark.parametrize("cx, cy", [(-0.75, 0.1), (0.5, 0.5), (-1.0, 0.3), (0.25, 0.5), (-0.1, 0.65)])
def test_colour_is_symmetric_about_real_axis(cx, cy):
    for offset in (0.0, 0.37):
        assert calculate_color(cx, cy, 500, offset) == calculate_color(cx, -cy, 500, offset)


def test_interior_point_black_for_both_budgets():
    assert calculate_color(-0.1, 0.1, 1000, 0.0) == 0x000000
    assert calculate_color(-0.1, 0.1, 100, 0.0) == 0x000000


def test_escaping_point_coloured_differently_per_budget():
    high = calculate_color(0.5, 0.5, 1000, 0.0)
    low = calculate_color(0.5, 0.5, 100, 0.0)
    assert high != 0 and low != 0
    assert high != low


def test_seahorse_valley_point_escapes_slowly():
    count = escape_time(-0.75, 0.1, 1000)
    assert 30 <= count <= 36
    assert calculate_color(-0.75, 0.1, 100, 0.0) != 0x000000


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_non_finite_input_is_black(value):
    assert calculate_color(value, 0.0, 1000, 0.0) == 0x000000
    assert calculate_color(0.0, value, 1000, 0.0) == 0x000000


def test_hsb_reference_values():
    assert hsb_to_rgb(0.0, 1.0, 1.0) == 0xFF0000
    assert hsb_to_rgb(0.5, 1.0, 1.0) == 0x00FFFF
    assert hsb_to_rgb(0.25, 0.0, 1.0) == 0xFFFFFF
    assert hsb_to_rgb(0.0, 1.0, 0.0) == 0x000000


def test_colour_offset_shifts_hue():
    base = calculate_color(2.0, 2.0, 1000, 0.0)
    shifted = calculate_color(2.0, 2.0, 1000, 0.4)
    assert shifted != base
    # 0.6 + 0.4 wraps to red
    assert shifted >> 16 == 0xFF


def test_colour_offset_of_one_wraps_to_base_hue():
    assert calculate_color(0.5, 0.5, 1000, 1.0) == calculate_color(0.5, 0.5, 1000, 0.0)


@pytest.mark.parametrize("offset", [0.0, 0.25, 0.5, 0.83, 1.0])
def test_vectorised_colours_match_scalar_mapping(offset):
    max_iter = 100
    counts = np.arange(max_iter + 1, dtype=np.int32).reshape(1, -1)
    colours = colorize(counts, max_iter, offset)
    assert colours.dtype == np.uint32
    for count in range(max_iter):
        expected = hsb_to_rgb((0.6 + offset) % 1.0, 1.0 - count / max_iter, 1.0)
        assert int(colours[0, count]) == expected
    assert int(colours[0, max_iter]) == 0
