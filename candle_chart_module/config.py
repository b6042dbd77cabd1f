"""Configuration objects and shared constants for candlestick chart generation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Final, List, Tuple

from matplotlib import colors as mcolors

RGB = Tuple[int, int, int]

PRICE_COLUMNS: Final[List[str]] = ["Open", "High", "Low", "Close"]
REQUIRED_COLUMNS: Final[List[str]] = PRICE_COLUMNS + ["Volume"]

DEFAULT_WIDTH: Final[int] = 1200
DEFAULT_HEIGHT: Final[int] = 600
LEVELS_WIDTH: Final[int] = 1400
LEVELS_HEIGHT: Final[int] = 700
DEFAULT_MA_PERIODS: Final[Tuple[int, ...]] = (20, 50)

TIMEFRAME_NAMES: Final[Dict[str, str]] = {
    "1m": "1 Minute",
    "2m": "2 Minutes",
    "5m": "5 Minutes",
    "15m": "15 Minutes",
    "30m": "30 Minutes",
    "90m": "90 Minutes",
    "1h": "1 Hour",
    "4h": "4 Hours",
    "1d": "1 Day",
    "1w": "1 Week",
    "1wk": "1 Week",
    "1mo": "1 Month",
    "3mo": "3 Months",
}

_FULL_TOP_DOWN: Final[Tuple[str, ...]] = ("5m", "15m", "1h", "4h", "1d", "1w")

TIMEFRAMES_BY_MODE: Final[Dict[str, Tuple[str, ...]]] = {
    # Scalping skips the weekly frame.
    "scalping": ("5m", "15m", "1h", "4h", "1d"),
    "swing": _FULL_TOP_DOWN,
    "intraday": _FULL_TOP_DOWN,
}


def timeframe_name(interval: str) -> str:
    """Return a human readable name for an interval label, or the label itself."""

    return TIMEFRAME_NAMES.get(interval, interval)


def timeframes_for_mode(mode: str) -> Tuple[str, ...]:
    """Intervals analysed for a trading mode, largest context last."""

    return TIMEFRAMES_BY_MODE.get(mode.lower(), _FULL_TOP_DOWN)


@dataclass(frozen=True)
class ChartConfig:
    """Container for rendering related configuration."""

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    padding: int = 60
    candle_width: int = 4
    candle_gap: int = 2
    show_volume: bool = True
    show_ma: bool = True
    ma_periods: Tuple[int, ...] = DEFAULT_MA_PERIODS
    dark_mode: bool = True

    def __post_init__(self) -> None:
        if self.width <= 2 * self.padding or self.height <= 2 * self.padding:
            raise ValueError(
                f"Canvas {self.width}x{self.height} leaves no room inside padding {self.padding}."
            )
        if self.candle_width < 1 or self.candle_gap < 0:
            raise ValueError("candle_width must be positive and candle_gap non-negative.")
        if self.show_ma and not self.ma_periods:
            raise ValueError("ma_periods must not be empty when show_ma is enabled.")
        if any(period < 1 for period in self.ma_periods):
            raise ValueError(f"Invalid moving average periods: {self.ma_periods}")
        # Normalise lists passed by callers into an ordered tuple.
        object.__setattr__(self, "ma_periods", tuple(self.ma_periods))


def default_chart_config() -> ChartConfig:
    return ChartConfig()


def levels_chart_config() -> ChartConfig:
    """Larger canvas used when trade levels are overlaid."""

    return ChartConfig(width=LEVELS_WIDTH, height=LEVELS_HEIGHT)


@dataclass(frozen=True)
class TradeLevels:
    """Entry / stop-loss / take-profit prices. ``0.0`` marks a level as absent."""

    entry: float = 0.0
    stop_loss: float = 0.0
    take_profit1: float = 0.0
    take_profit2: float = 0.0
    take_profit3: float = 0.0

    def labelled(self) -> List[Tuple[str, float]]:
        """Active levels as ``(label, price)`` pairs in drawing order."""

        pairs = [
            ("ENTRY", self.entry),
            ("SL", self.stop_loss),
            ("TP1", self.take_profit1),
            ("TP2", self.take_profit2),
            ("TP3", self.take_profit3),
        ]
        return [(name, price) for name, price in pairs if price > 0]

    def highest_take_profit(self) -> float:
        """Largest active take-profit, or ``0.0`` when none is set."""

        return max(self.take_profit1, self.take_profit2, self.take_profit3, 0.0)

    def is_empty(self) -> bool:
        return not self.labelled()


def to_rgb(color: str) -> RGB:
    """Convert a matplotlib-compatible colour string to an 8-bit RGB tuple."""

    red, green, blue = mcolors.to_rgb(color)
    return (int(round(red * 255)), int(round(green * 255)), int(round(blue * 255)))


def with_alpha(color: str, alpha: float, background: str) -> RGB:
    """Blend ``color`` over an opaque ``background`` at the given alpha."""

    fg = mcolors.to_rgb(color)
    bg = mcolors.to_rgb(background)
    blended = [alpha * f + (1.0 - alpha) * b for f, b in zip(fg, bg)]
    return to_rgb(mcolors.to_hex(blended))


@dataclass(frozen=True)
class Theme:
    """Immutable palette passed to the rasterizer."""

    background: RGB
    grid: RGB
    text: RGB
    bullish: RGB
    bearish: RGB
    volume_up: RGB
    volume_down: RGB
    entry: RGB
    stop_loss: RGB
    take_profit: RGB
    ma_colors: Tuple[RGB, ...] = field(default_factory=tuple)

    def candle_color(self, bullish: bool) -> RGB:
        return self.bullish if bullish else self.bearish

    def volume_color(self, bullish: bool) -> RGB:
        return self.volume_up if bullish else self.volume_down

    def ma_color(self, slot: int) -> RGB:
        return self.ma_colors[slot % len(self.ma_colors)]

    def level_color(self, label: str) -> RGB:
        if label == "ENTRY":
            return self.entry
        if label == "SL":
            return self.stop_loss
        return self.take_profit


_BULLISH = "#26a65b"
_BEARISH = "#e74c3c"
_MA_COLORS = ("#ffc107", "#9c27b0", "#00bcd4", "#ff9800")


def _make_theme(background: str, grid: str, text: str) -> Theme:
    return Theme(
        background=to_rgb(background),
        grid=to_rgb(grid),
        text=to_rgb(text),
        bullish=to_rgb(_BULLISH),
        bearish=to_rgb(_BEARISH),
        volume_up=with_alpha(_BULLISH, 0.5, background),
        volume_down=with_alpha(_BEARISH, 0.5, background),
        entry=to_rgb("#2196f3"),
        stop_loss=to_rgb("#f44336"),
        take_profit=to_rgb("#4caf50"),
        ma_colors=tuple(to_rgb(c) for c in _MA_COLORS),
    )


DARK_THEME: Final[Theme] = _make_theme("#15191f", "#2a2e39", "#b4b4b4")
LIGHT_THEME: Final[Theme] = _make_theme("#ffffff", "#e6e6e6", "#3c3c3c")


def theme_for(dark_mode: bool) -> Theme:
    return DARK_THEME if dark_mode else LIGHT_THEME
