"""Rasterizer producing deterministic candlestick chart images."""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from .config import (
    RGB,
    ChartConfig,
    Theme,
    TradeLevels,
    default_chart_config,
    levels_chart_config,
    theme_for,
    timeframe_name,
)
from .data import Bar
from .drawing import (
    draw_axis_line,
    draw_dashed_rows,
    draw_level_line,
    draw_line,
    draw_text,
    fill_rect,
    new_canvas,
    text_width,
)
from .indicators import format_price, trailing_ma
from .mapping import ChartMapper, derive_price_range
from .processing import max_visible_candles, window_bars

LOGGER = logging.getLogger(__name__)

GRID_ROWS = 5
MA_MIN_BARS = 50
PRICE_SCALE_STEPS = 5
LEVEL_LABEL_MARGIN = 80
VOLUME_GAP = 10
PRICE_REGION_SHARE = 0.75
HEADER_Y = 8
TEXT_HALF_HEIGHT = 6
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M UTC"


class EmptyInputError(ValueError):
    """Raised when there are no bars to render."""


class ChartEncodingError(RuntimeError):
    """Raised when the pixel buffer cannot be serialised."""


@dataclass(frozen=True)
class RenderedChart:
    """PNG bytes plus the interval label and the bars actually drawn."""

    image_bytes: bytes
    interval: str
    bars: Tuple[Bar, ...]

    def to_image(self) -> Image.Image:
        return Image.open(io.BytesIO(self.image_bytes)).convert("RGB")


@dataclass(frozen=True)
class _Layout:
    chart_left: int
    chart_right: int
    chart_top: int
    chart_bottom: int
    volume_top: int
    volume_bottom: int

    @property
    def volume_height(self) -> int:
        return self.volume_bottom - self.volume_top


def compute_layout(cfg: ChartConfig, with_levels: bool = False) -> _Layout:
    """Split the canvas into the price region and the volume strip."""

    chart_right = cfg.width - cfg.padding
    if with_levels:
        chart_right -= LEVEL_LABEL_MARGIN
    chart_bottom = cfg.height - cfg.padding
    if cfg.show_volume:
        chart_bottom = int((cfg.height - cfg.padding) * PRICE_REGION_SHARE)
    return _Layout(
        chart_left=cfg.padding,
        chart_right=chart_right,
        chart_top=cfg.padding,
        chart_bottom=chart_bottom,
        volume_top=chart_bottom + VOLUME_GAP,
        volume_bottom=cfg.height - cfg.padding,
    )


def _draw_candles(
    draw: ImageDraw.ImageDraw,
    bars: Sequence[Bar],
    mapper: ChartMapper,
    layout: _Layout,
    cfg: ChartConfig,
    theme: Theme,
    max_volume: float,
) -> None:
    for i, bar in enumerate(bars):
        x = mapper.index_to_x(i)
        color = theme.candle_color(bar.is_bullish)

        wick_x = mapper.center_x(i)
        draw_axis_line(draw, wick_x, mapper.price_to_y(bar.high), wick_x, mapper.price_to_y(bar.low), color)

        open_y = mapper.price_to_y(bar.open)
        close_y = mapper.price_to_y(bar.close)
        body_top, body_bottom = min(open_y, close_y), max(open_y, close_y)
        if body_bottom - body_top < 1:
            body_bottom = body_top + 1
        fill_rect(draw, x, body_top, x + cfg.candle_width, body_bottom, color)

        if cfg.show_volume and max_volume > 0:
            vol_height = int(bar.volume / max_volume * layout.volume_height)
            fill_rect(
                draw,
                x,
                layout.volume_bottom - vol_height,
                x + cfg.candle_width,
                layout.volume_bottom,
                theme.volume_color(bar.is_bullish),
            )


def _draw_moving_averages(
    draw: ImageDraw.ImageDraw,
    bars: Sequence[Bar],
    mapper: ChartMapper,
    cfg: ChartConfig,
    theme: Theme,
) -> None:
    if len(bars) <= MA_MIN_BARS:
        LOGGER.debug("Skipping moving averages: %d visible bars, need > %d.", len(bars), MA_MIN_BARS)
        return

    closes = [bar.close for bar in bars]
    for slot, period in enumerate(cfg.ma_periods):
        color = theme.ma_color(slot)
        previous: Optional[Tuple[int, int]] = None
        for i, value in enumerate(trailing_ma(closes, period)):
            if value == 0:
                continue
            point = (mapper.center_x(i), mapper.price_to_y(float(value)))
            if previous is not None:
                draw_line(draw, previous[0], previous[1], point[0], point[1], color)
            previous = point


def _draw_levels(
    draw: ImageDraw.ImageDraw, levels: TradeLevels, mapper: ChartMapper, theme: Theme
) -> None:
    for label, price in levels.labelled():
        color = theme.level_color(label)
        y = mapper.price_to_y(price)
        draw_level_line(draw, mapper.chart_left, mapper.chart_right, y, color)
        draw_text(draw, mapper.chart_right + 5, y - TEXT_HALF_HEIGHT, f"{label} {format_price(price)}", color)


def _draw_legend(draw: ImageDraw.ImageDraw, x: int, y: int, cfg: ChartConfig, theme: Theme) -> None:
    entries = [("Entry", theme.entry), ("Stoploss", theme.stop_loss), ("Take Profit", theme.take_profit)]
    if cfg.show_ma:
        entries += [(f"MA{period}", theme.ma_color(slot)) for slot, period in enumerate(cfg.ma_periods)]
    for text, color in entries:
        draw_text(draw, x, y, text, color)
        x += text_width(draw, text) + 16


def _draw_price_scale(draw: ImageDraw.ImageDraw, mapper: ChartMapper, color: RGB) -> None:
    price_step = (mapper.max_price - mapper.min_price) / PRICE_SCALE_STEPS
    y_step = mapper.chart_height // PRICE_SCALE_STEPS
    for i in range(PRICE_SCALE_STEPS + 1):
        price = mapper.max_price - i * price_step
        y = mapper.chart_top + i * y_step
        draw_text(draw, mapper.chart_right + 5, y - TEXT_HALF_HEIGHT, format_price(price), color)


def _encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    try:
        image.save(buf, format="PNG")
    except (OSError, ValueError) as exc:
        raise ChartEncodingError(f"Failed to encode PNG: {exc}") from exc
    return buf.getvalue()


def render_chart(
    bars: Sequence[Bar],
    config: Optional[ChartConfig] = None,
    levels: Optional[TradeLevels] = None,
    symbol: str = "",
    interval: str = "",
    generated_at: Optional[datetime] = None,
) -> RenderedChart:
    """Render a candlestick chart into PNG bytes.

    Only the most recent bars that fit the chart width are drawn; the bars
    actually used are returned on the result. The price range and the volume
    scale are taken from every bar passed in, not just the visible ones. ``generated_at`` fixes the
    header timestamp (defaults to the current UTC time).
    """

    if not bars:
        raise EmptyInputError("no candle data to render")

    with_levels = levels is not None and not levels.is_empty()
    cfg = config or (levels_chart_config() if with_levels else default_chart_config())
    theme = theme_for(cfg.dark_mode)
    layout = compute_layout(cfg, with_levels)

    image, draw = new_canvas(cfg.width, cfg.height, theme.background)

    price_range = derive_price_range(bars, levels if with_levels else None)
    max_volume = max(bar.volume for bar in bars)

    budget = max_visible_candles(layout.chart_right - layout.chart_left, cfg.candle_width, cfg.candle_gap)
    visible = window_bars(bars, budget)
    if not visible:
        raise EmptyInputError(f"chart width {cfg.width} leaves no room for a single candle")

    mapper = ChartMapper.for_range(
        price_range,
        chart_left=layout.chart_left,
        chart_right=layout.chart_right,
        chart_top=layout.chart_top,
        chart_bottom=layout.chart_bottom,
        candle_width=cfg.candle_width,
        candle_gap=cfg.candle_gap,
    )

    draw_dashed_rows(
        draw, layout.chart_left, layout.chart_right, layout.chart_top, layout.chart_bottom, GRID_ROWS, theme.grid
    )
    _draw_candles(draw, visible, mapper, layout, cfg, theme, max_volume)

    if cfg.show_ma:
        _draw_moving_averages(draw, visible, mapper, cfg, theme)

    if with_levels:
        _draw_levels(draw, levels, mapper, theme)
        _draw_legend(draw, layout.chart_left, cfg.height - cfg.padding + 20, cfg, theme)

    _draw_price_scale(draw, mapper, theme.text)

    title = f"{symbol} - {timeframe_name(interval)}" if symbol else timeframe_name(interval)
    if with_levels:
        title += " | ENTRY CHART"
    draw_text(draw, layout.chart_left, HEADER_Y, title, theme.text)

    last = visible[-1]
    price_x = layout.chart_left + (300 if with_levels else 200)
    draw_text(draw, price_x, HEADER_Y, f"Price: {format_price(last.close)}", theme.candle_color(last.is_bullish))

    stamp = (generated_at or datetime.now(timezone.utc)).strftime(TIMESTAMP_FORMAT)
    draw_text(draw, layout.chart_right - 150, HEADER_Y, stamp, theme.text)

    LOGGER.debug("Rendered %s %s chart with %d of %d bars.", symbol, interval, len(visible), len(bars))
    return RenderedChart(image_bytes=_encode_png(image), interval=interval, bars=tuple(visible))


def render_timeframes(
    frames: Sequence[Tuple[str, Sequence[Bar]]],
    config: Optional[ChartConfig] = None,
    symbol: str = "",
    levels: Optional[TradeLevels] = None,
    generated_at: Optional[datetime] = None,
) -> List[RenderedChart]:
    """Render one chart per ``(interval, bars)`` pair; any failure aborts the batch."""

    charts = []
    for interval, bars in frames:
        try:
            charts.append(render_chart(bars, config, levels, symbol, interval, generated_at))
        except EmptyInputError as exc:
            raise EmptyInputError(f"failed to generate {interval} chart: {exc}") from exc
    return charts
