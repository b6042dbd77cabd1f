"""Pixel-level drawing primitives on a Pillow RGB canvas.

Coordinates are integer pixels with the origin at the top-left corner. Pixels
outside the canvas are clipped by Pillow.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Tuple

from PIL import Image, ImageDraw, ImageFont

from .config import RGB

Point = Tuple[int, int]


def new_canvas(width: int, height: int, background: RGB) -> Tuple[Image.Image, ImageDraw.ImageDraw]:
    """Allocate a ``width x height`` RGB buffer filled with ``background``."""

    image = Image.new("RGB", (width, height), background)
    return image, ImageDraw.Draw(image)


def fill_rect(draw: ImageDraw.ImageDraw, x1: int, y1: int, x2: int, y2: int, color: RGB) -> None:
    """Fill the half-open rectangle ``[x1, x2) x [y1, y2)``."""

    if x2 <= x1 or y2 <= y1:
        return
    draw.rectangle([x1, y1, x2 - 1, y2 - 1], fill=color)


def axis_line_points(x1: int, y1: int, x2: int, y2: int, step: int = 1) -> List[Point]:
    """Pixels of a vertical or horizontal line, endpoints inclusive."""

    if step < 1:
        raise ValueError("step must be at least 1")
    if x1 == x2:
        lo, hi = sorted((y1, y2))
        return [(x1, y) for y in range(lo, hi + 1, step)]
    if y1 == y2:
        lo, hi = sorted((x1, x2))
        return [(x, y1) for x in range(lo, hi + 1, step)]
    raise ValueError("axis_line_points only handles vertical or horizontal lines")


def draw_axis_line(
    draw: ImageDraw.ImageDraw, x1: int, y1: int, x2: int, y2: int, color: RGB, step: int = 1
) -> None:
    draw.point(axis_line_points(x1, y1, x2, y2, step), fill=color)


def draw_dashed_rows(
    draw: ImageDraw.ImageDraw,
    left: int,
    right: int,
    top: int,
    bottom: int,
    count: int,
    color: RGB,
) -> None:
    """Dashed horizontal lines splitting ``[top, bottom]`` into ``count`` bands."""

    step = (bottom - top) // count
    for i in range(count + 1):
        y = top + i * step
        draw_axis_line(draw, left, y, right, y, color, step=3)


def bresenham_points(x0: int, y0: int, x1: int, y1: int) -> List[Point]:
    """Integer pixels of the segment from ``(x0, y0)`` to ``(x1, y1)``.

    Consecutive pixels are 8-connected for every slope.
    """

    points: List[Point] = []
    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy
    while True:
        points.append((x0, y0))
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x0 += sx
        if e2 < dx:
            err += dx
            y0 += sy
    return points


def draw_line(draw: ImageDraw.ImageDraw, x0: int, y0: int, x1: int, y1: int, color: RGB) -> None:
    draw.point(bresenham_points(x0, y0, x1, y1), fill=color)


def draw_level_line(draw: ImageDraw.ImageDraw, left: int, right: int, y: int, color: RGB) -> None:
    """Two pixel thick horizontal marker line across ``[left, right]``."""

    draw_axis_line(draw, left, y, right, y, color)
    draw_axis_line(draw, left, y - 1, right, y - 1, color)


@lru_cache(maxsize=1)
def _font() -> ImageFont.ImageFont:
    return ImageFont.load_default_imagefont()


def draw_text(draw: ImageDraw.ImageDraw, x: int, y: int, text: str, color: RGB) -> None:
    """Draw ``text`` with the default bitmap font, top-left corner at ``(x, y)``."""

    draw.text((x, y), text, fill=color, font=_font())


def text_width(draw: ImageDraw.ImageDraw, text: str) -> int:
    return int(round(draw.textlength(text, font=_font())))
