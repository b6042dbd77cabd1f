"""Mapping between the (bar index, price) domain and chart pixel space."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .config import TradeLevels
from .data import Bar

RANGE_PADDING = 0.05
LEVEL_BUFFER = 0.005


@dataclass(frozen=True)
class PriceRange:
    min_price: float
    max_price: float

    @property
    def span(self) -> float:
        return self.max_price - self.min_price


def raw_price_range(bars: Sequence[Bar]) -> PriceRange:
    """Lowest low and highest high across ``bars``."""

    if not bars:
        raise ValueError("Cannot derive a price range from an empty bar sequence.")
    return PriceRange(min(bar.low for bar in bars), max(bar.high for bar in bars))


def derive_price_range(bars: Sequence[Bar], levels: Optional[TradeLevels] = None) -> PriceRange:
    """Bar extremes widened for the stop-loss and top take-profit, then padded 5% per side."""

    rng = raw_price_range(bars)
    min_price, max_price = rng.min_price, rng.max_price

    if levels is not None:
        if 0 < levels.stop_loss < min_price:
            min_price = levels.stop_loss * (1 - LEVEL_BUFFER)
        take_profit = levels.highest_take_profit()
        if take_profit > max_price:
            max_price = take_profit * (1 + LEVEL_BUFFER)

    span = max_price - min_price
    if span <= 0:
        # Flat series: open a band around the single price.
        span = abs(max_price) * 0.01 or 1.0
        min_price -= span / 2
        max_price += span / 2

    return PriceRange(min_price - span * RANGE_PADDING, max_price + span * RANGE_PADDING)


@dataclass(frozen=True)
class ChartMapper:
    """Maps price to pixel rows and bar indices to pixel columns."""

    chart_left: int
    chart_right: int
    chart_top: int
    chart_bottom: int
    min_price: float
    max_price: float
    candle_width: int
    candle_gap: int

    def __post_init__(self) -> None:
        if self.max_price <= self.min_price:
            raise ValueError(f"Degenerate price range [{self.min_price}, {self.max_price}].")
        if self.chart_bottom <= self.chart_top or self.chart_right <= self.chart_left:
            raise ValueError("Chart area has no height or width.")

    @classmethod
    def for_range(
        cls,
        price_range: PriceRange,
        chart_left: int,
        chart_right: int,
        chart_top: int,
        chart_bottom: int,
        candle_width: int,
        candle_gap: int,
    ) -> "ChartMapper":
        return cls(
            chart_left=chart_left,
            chart_right=chart_right,
            chart_top=chart_top,
            chart_bottom=chart_bottom,
            min_price=price_range.min_price,
            max_price=price_range.max_price,
            candle_width=candle_width,
            candle_gap=candle_gap,
        )

    @property
    def chart_width(self) -> int:
        return self.chart_right - self.chart_left

    @property
    def chart_height(self) -> int:
        return self.chart_bottom - self.chart_top

    @property
    def slot_width(self) -> int:
        return self.candle_width + self.candle_gap

    def price_to_y(self, price: float) -> int:
        # Price grows upward, pixel rows grow downward.
        frac = (self.max_price - price) / (self.max_price - self.min_price)
        return self.chart_top + int(round(frac * self.chart_height))

    def y_to_price(self, y: int) -> float:
        frac = (y - self.chart_top) / self.chart_height
        return self.max_price - frac * (self.max_price - self.min_price)

    def index_to_x(self, index: int) -> int:
        """Left edge of the candle body at ``index``."""

        return self.chart_left + index * self.slot_width + self.candle_gap // 2

    def center_x(self, index: int) -> int:
        """Column of the wick and moving-average point at ``index``."""

        return self.index_to_x(index) + self.candle_width // 2
