"""Indicator engine: aggregate statistics and trend classification for a bar sequence.

All indicators are simplified, fixed-period approximations. Indicators that
need more history than is available are left at ``0.0`` (or ``""`` for the
string classifications); callers must treat those values as "not computed".
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Final, List, Optional, Sequence, Tuple

import numpy as np

from .data import Bar

LOGGER = logging.getLogger(__name__)

BULLISH: Final[str] = "BULLISH"
BEARISH: Final[str] = "BEARISH"
SIDEWAYS: Final[str] = "SIDEWAYS"

VOLATILITY_LOW: Final[str] = "LOW"
VOLATILITY_MEDIUM: Final[str] = "MEDIUM"
VOLATILITY_HIGH: Final[str] = "HIGH"

CANDLE_BULL: Final[str] = "BULL"
CANDLE_BEAR: Final[str] = "BEAR"
CANDLE_DOJI: Final[str] = "DOJI"

RSI_PERIOD: Final[int] = 14
ATR_PERIOD: Final[int] = 14
LAST_CANDLES: Final[int] = 10
DOJI_BODY_RATIO: Final[float] = 0.1
CANDLE_TIME_FORMAT: Final[str] = "%m-%d %H:%M"


@dataclass(frozen=True)
class TypedCandle:
    """Rendering-friendly projection of one recent bar."""

    time: str
    open: float
    high: float
    low: float
    close: float
    volume: float
    change_pct: float
    kind: str


@dataclass(frozen=True)
class Summary:
    """Derived statistics for a bar sequence; ``candle_count == 0`` means no data."""

    interval: str = ""
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    candle_count: int = 0
    open: float = 0.0
    high: float = 0.0
    low: float = 0.0
    close: float = 0.0
    total_volume: float = 0.0
    avg_volume: float = 0.0
    price_change_pct: float = 0.0
    trend: str = ""
    ma20: float = 0.0
    ma50: float = 0.0
    rsi14: float = 0.0
    volatility: str = ""
    last_candles: List[TypedCandle] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.candle_count == 0


def format_price(price: float) -> str:
    """Format a price with precision that scales with its magnitude."""

    if price >= 1000:
        return f"{price:.2f}"
    if price >= 1:
        return f"{price:.4f}"
    if price >= 0.01:
        return f"{price:.6f}"
    return f"{price:.8f}"


def trailing_ma(closes: Sequence[float], period: int) -> np.ndarray:
    """Simple moving average at every index; ``0.0`` until ``period`` closes exist."""

    values = np.asarray(closes, dtype=float)
    out = np.zeros(len(values), dtype=float)
    if period < 1 or len(values) < period:
        return out
    window_sums = np.convolve(values, np.ones(period), mode="valid")
    out[period - 1 :] = window_sums / period
    return out


def moving_average(closes: Sequence[float], period: int) -> float:
    """Mean of the last ``period`` closes, or ``0.0`` with too little history."""

    if len(closes) < period:
        return 0.0
    return float(np.mean(np.asarray(closes[-period:], dtype=float)))


def rsi(closes: Sequence[float], period: int = RSI_PERIOD) -> float:
    """Simple-average RSI over the last ``period`` close-to-close deltas.

    Needs ``period + 1`` closes; returns ``0.0`` otherwise. With no losses
    in the window the value is pinned at 100.
    """

    if len(closes) < period + 1:
        return 0.0
    deltas = np.diff(np.asarray(closes[-(period + 1) :], dtype=float))
    avg_gain = float(deltas[deltas > 0].sum()) / period
    avg_loss = float(-deltas[deltas < 0].sum()) / period
    if avg_loss > 0:
        rs = avg_gain / avg_loss
        return 100.0 - 100.0 / (1.0 + rs)
    return 100.0


def classify_trend(close: float, ma20: float, ma50: float) -> str:
    if close > ma20 > ma50:
        return BULLISH
    if close < ma20 < ma50:
        return BEARISH
    return SIDEWAYS


def atr_percent(bars: Sequence[Bar], period: int = ATR_PERIOD) -> Optional[float]:
    """Mean high-low range of the last ``period`` bars as a percent of the last close."""

    if len(bars) < period:
        return None
    last_close = bars[-1].close
    if last_close <= 0:
        return None
    ranges = [bar.high - bar.low for bar in bars[-period:]]
    return float(np.mean(ranges)) / last_close * 100.0


def classify_volatility(bars: Sequence[Bar]) -> str:
    pct = atr_percent(bars)
    if pct is None:
        return ""
    if pct > 3:
        return VOLATILITY_HIGH
    if pct > 1.5:
        return VOLATILITY_MEDIUM
    return VOLATILITY_LOW


def candle_kind(bar: Bar) -> str:
    """BULL / BEAR / DOJI from the body-to-range ratio; ``""`` for a zero range."""

    total_range = bar.high - bar.low
    if total_range <= 0:
        return ""
    body_ratio = (bar.close - bar.open) / total_range
    if body_ratio > DOJI_BODY_RATIO:
        return CANDLE_BULL
    if body_ratio < -DOJI_BODY_RATIO:
        return CANDLE_BEAR
    return CANDLE_DOJI


def type_candles(bars: Sequence[Bar], count: int = LAST_CANDLES) -> List[TypedCandle]:
    """Project the last ``count`` bars, measuring change against the full sequence."""

    start = max(0, len(bars) - count)
    typed: List[TypedCandle] = []
    for idx in range(start, len(bars)):
        bar = bars[idx]
        change = 0.0
        if idx > 0:
            prev_close = bars[idx - 1].close
            if prev_close != 0:
                change = (bar.close - prev_close) / prev_close * 100.0
        typed.append(
            TypedCandle(
                time=bar.open_time.strftime(CANDLE_TIME_FORMAT),
                open=bar.open,
                high=bar.high,
                low=bar.low,
                close=bar.close,
                volume=bar.volume,
                change_pct=change,
                kind=candle_kind(bar),
            )
        )
    return typed


def summarize(bars: Sequence[Bar], interval: str = "") -> Summary:
    """Summarise a bar sequence. An empty input yields the empty ``Summary()``."""

    if not bars:
        return Summary(interval=interval)

    closes = [bar.close for bar in bars]
    total_volume = float(sum(bar.volume for bar in bars))
    first, last = bars[0], bars[-1]

    open_price = first.open
    close_price = last.close
    change_pct = (close_price - open_price) / open_price * 100.0 if open_price > 0 else 0.0

    ma20 = moving_average(closes, 20)
    ma50 = moving_average(closes, 50)

    return Summary(
        interval=interval,
        period_start=first.open_time,
        period_end=last.close_time,
        candle_count=len(bars),
        open=open_price,
        high=max(bar.high for bar in bars),
        low=min(bar.low for bar in bars),
        close=close_price,
        total_volume=total_volume,
        avg_volume=total_volume / len(bars),
        price_change_pct=change_pct,
        trend=classify_trend(close_price, ma20, ma50),
        ma20=ma20,
        ma50=ma50,
        rsi14=rsi(closes),
        volatility=classify_volatility(bars),
        last_candles=type_candles(bars),
    )


def technical_snapshot(bars: Sequence[Bar]) -> str:
    """One-line trend / volatility / momentum context for the latest bars.

    Uses coarser thresholds than :func:`summarize` (2% / 1% of price) and an
    open-to-close momentum estimate over the last 14 bars.
    """

    if len(bars) < 50:
        return "Insufficient data"

    closes = [bar.close for bar in bars]
    last = bars[-1]
    ma20 = moving_average(closes, 20)
    ma50 = moving_average(closes, 50)

    trend = classify_trend(last.close, ma20, ma50)
    if trend == SIDEWAYS:
        trend = "NEUTRAL"

    recent = bars[-ATR_PERIOD:]
    atr = float(np.mean([bar.high - bar.low for bar in recent]))
    ratio = atr / last.close if last.close > 0 else 0.0
    volatility = VOLATILITY_LOW
    if ratio > 0.02:
        volatility = VOLATILITY_HIGH
    elif ratio > 0.01:
        volatility = VOLATILITY_MEDIUM

    bodies = np.array([bar.close - bar.open for bar in recent], dtype=float)
    gains = float(bodies[bodies > 0].sum())
    losses = float(-bodies[bodies < 0].sum())
    rs = gains / losses if losses > 0 else 1.0
    momentum_rsi = 100.0 - 100.0 / (1.0 + rs)

    momentum = "NEUTRAL"
    if momentum_rsi > 70:
        momentum = "OVERBOUGHT"
    elif momentum_rsi < 30:
        momentum = "OVERSOLD"
    elif momentum_rsi > 55:
        momentum = BULLISH
    elif momentum_rsi < 45:
        momentum = BEARISH

    return (
        f"Trend: {trend} | Volatility: {volatility} | "
        f"Momentum: {momentum} | RSI: {momentum_rsi:.1f}"
    )


def summarize_timeframes(frames: Sequence[Tuple[str, Sequence[Bar]]]) -> List[Summary]:
    """Summarise ``(interval, bars)`` pairs in order."""

    summaries = []
    for interval, bars in frames:
        summary = summarize(bars, interval)
        if summary.is_empty:
            LOGGER.warning("No bars for interval %s; summary left empty.", interval)
        summaries.append(summary)
    return summaries
