"""Indicator summaries and rasterized candlestick charts for OHLCV bar sequences."""
from .config import (
    PRICE_COLUMNS,
    REQUIRED_COLUMNS,
    ChartConfig,
    Theme,
    TradeLevels,
    default_chart_config,
    levels_chart_config,
    theme_for,
    timeframe_name,
    timeframes_for_mode,
)
from .data import Bar, bars_from_frame, bars_to_frame, fetch_bars, fetch_ohlcv, validate_bars
from .indicators import Summary, TypedCandle, format_price, summarize, summarize_timeframes, technical_snapshot
from .mapping import ChartMapper, PriceRange, derive_price_range
from .metadata import build_chart_row, summary_to_dict
from .processing import max_visible_candles, window_bars
from .render import ChartEncodingError, EmptyInputError, RenderedChart, render_chart, render_timeframes

__all__ = [
    "PRICE_COLUMNS",
    "REQUIRED_COLUMNS",
    "ChartConfig",
    "Theme",
    "TradeLevels",
    "default_chart_config",
    "levels_chart_config",
    "theme_for",
    "timeframe_name",
    "timeframes_for_mode",
    "Bar",
    "bars_from_frame",
    "bars_to_frame",
    "fetch_bars",
    "fetch_ohlcv",
    "validate_bars",
    "Summary",
    "TypedCandle",
    "format_price",
    "summarize",
    "summarize_timeframes",
    "technical_snapshot",
    "ChartMapper",
    "PriceRange",
    "derive_price_range",
    "build_chart_row",
    "summary_to_dict",
    "max_visible_candles",
    "window_bars",
    "ChartEncodingError",
    "EmptyInputError",
    "RenderedChart",
    "render_chart",
    "render_timeframes",
]
