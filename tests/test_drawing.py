import numpy as np
import pytest

from candle_chart_module.drawing import (
    axis_line_points,
    bresenham_points,
    draw_dashed_rows,
    draw_level_line,
    draw_line,
    draw_text,
    fill_rect,
    new_canvas,
)

BG = (0, 0, 0)
RED = (255, 0, 0)


def pixels(image) -> np.ndarray:
    return np.asarray(image)


def is_red(arr: np.ndarray, x: int, y: int) -> bool:
    return tuple(arr[y, x]) == RED


def test_new_canvas_is_filled():
    image, _ = new_canvas(20, 10, (1, 2, 3))
    arr = pixels(image)
    assert arr.shape == (10, 20, 3)
    assert (arr == np.array([1, 2, 3], dtype=np.uint8)).all()


def test_fill_rect_is_half_open():
    image, draw = new_canvas(10, 10, BG)
    fill_rect(draw, 2, 3, 5, 6, RED)
    arr = pixels(image)
    mask = (arr == np.array(RED, dtype=np.uint8)).all(axis=2)
    assert mask.sum() == 3 * 3
    assert is_red(arr, 2, 3) and is_red(arr, 4, 5)
    assert not is_red(arr, 5, 5)
    assert not is_red(arr, 4, 6)


def test_fill_rect_ignores_empty_rectangles():
    image, draw = new_canvas(10, 10, BG)
    fill_rect(draw, 5, 5, 5, 8, RED)
    fill_rect(draw, 5, 5, 3, 8, RED)
    assert not pixels(image).any()


def test_axis_line_points_inclusive_and_dashed():
    assert axis_line_points(4, 7, 4, 3) == [(4, 3), (4, 4), (4, 5), (4, 6), (4, 7)]
    assert axis_line_points(0, 2, 9, 2, step=3) == [(0, 2), (3, 2), (6, 2), (9, 2)]
    with pytest.raises(ValueError):
        axis_line_points(0, 0, 3, 3)


@pytest.mark.parametrize(
    "start, end",
    [((0, 0), (10, 3)), ((0, 0), (3, 10)), ((10, 8), (1, 1)), ((5, 0), (5, 6)), ((2, 2), (2, 2))],
)
def test_bresenham_is_gap_free(start, end):
    points = bresenham_points(start[0], start[1], end[0], end[1])
    assert points[0] == start
    assert points[-1] == end
    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        assert max(abs(x1 - x0), abs(y1 - y0)) == 1
    dominant = max(abs(end[0] - start[0]), abs(end[1] - start[1]))
    assert len(points) == dominant + 1


def test_draw_line_sets_endpoints():
    image, draw = new_canvas(12, 12, BG)
    draw_line(draw, 1, 1, 10, 7, RED)
    arr = pixels(image)
    assert is_red(arr, 1, 1)
    assert is_red(arr, 10, 7)


def test_dashed_rows_cover_every_band_edge():
    image, draw = new_canvas(40, 60, BG)
    draw_dashed_rows(draw, 0, 30, 5, 55, 5, RED)
    arr = pixels(image)
    rows = [y for y in range(60) if (arr[y] == np.array(RED, dtype=np.uint8)).all(axis=1).any()]
    assert rows == [5, 15, 25, 35, 45, 55]
    assert is_red(arr, 3, 5)
    assert not is_red(arr, 4, 5)


def test_level_line_is_two_pixels_thick():
    image, draw = new_canvas(20, 20, BG)
    draw_level_line(draw, 0, 19, 10, RED)
    arr = pixels(image)
    assert is_red(arr, 7, 10) and is_red(arr, 7, 9)
    assert not is_red(arr, 7, 11)


def test_draw_text_marks_pixels():
    image, draw = new_canvas(80, 20, BG)
    draw_text(draw, 2, 2, "1.2345", RED)
    arr = pixels(image).reshape(-1, 3)
    marked = arr[(arr != BG).any(axis=1)]
    assert len(marked) > 0
    # Bitmap glyphs are not antialiased.
    assert (marked == RED).all()
