"""Bar type, validation and the Yahoo Finance adapter feeding the chart pipeline."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

import pandas as pd
from dateutil import tz
import yfinance as yf

from .config import REQUIRED_COLUMNS

LOGGER = logging.getLogger(__name__)

_YF_INTERVALS: Dict[str, str] = {
    "1w": "1wk",
    "4h": "1h",
}

_DOWNLOAD_PERIODS: Dict[str, str] = {
    "1m": "1d",
    "2m": "1d",
    "5m": "5d",
    "15m": "1mo",
    "30m": "1mo",
    "90m": "1mo",
    "1h": "3mo",
    "1d": "1y",
    "1wk": "5y",
    "1mo": "max",
    "3mo": "max",
}

_RESAMPLE_RULES: Dict[str, str] = {
    "4h": "4h",
}

_BAR_DURATIONS: Dict[str, timedelta] = {
    "1m": timedelta(minutes=1),
    "2m": timedelta(minutes=2),
    "5m": timedelta(minutes=5),
    "15m": timedelta(minutes=15),
    "30m": timedelta(minutes=30),
    "90m": timedelta(minutes=90),
    "1h": timedelta(hours=1),
    "4h": timedelta(hours=4),
    "1d": timedelta(days=1),
    "1w": timedelta(weeks=1),
    "1wk": timedelta(weeks=1),
    "1mo": timedelta(days=30),
    "3mo": timedelta(days=91),
}


@dataclass(frozen=True)
class Bar:
    """One OHLCV observation for a fixed interval."""

    open_time: datetime
    close_time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float

    @property
    def is_bullish(self) -> bool:
        return self.close >= self.open


def period_for_interval(interval: str) -> str:
    """Download range wide enough to return a useful number of bars."""

    return _DOWNLOAD_PERIODS.get(_YF_INTERVALS.get(interval, interval), "1mo")


def bar_duration(interval: str) -> timedelta:
    try:
        return _BAR_DURATIONS[interval]
    except KeyError as exc:
        raise ValueError(f"Unsupported interval: {interval!r}") from exc


def bars_from_frame(df: pd.DataFrame, interval: str) -> List[Bar]:
    """Convert an OHLCV frame with a DatetimeIndex into ``Bar`` objects."""

    missing_cols = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_cols:
        raise ValueError(f"Frame missing required columns: {missing_cols}")
    if not isinstance(df.index, pd.DatetimeIndex):
        raise TypeError("Expected a DatetimeIndex on the OHLCV frame.")

    duration = bar_duration(interval)
    bars: List[Bar] = []
    for ts, row in df.loc[:, REQUIRED_COLUMNS].iterrows():
        open_time = ts.to_pydatetime()
        bars.append(
            Bar(
                open_time=open_time,
                close_time=open_time + duration - timedelta(milliseconds=1),
                open=float(row["Open"]),
                high=float(row["High"]),
                low=float(row["Low"]),
                close=float(row["Close"]),
                volume=float(row["Volume"]),
            )
        )
    return bars


def bars_to_frame(bars: Sequence[Bar]) -> pd.DataFrame:
    """Inverse of :func:`bars_from_frame`, indexed by open time."""

    index = pd.DatetimeIndex([bar.open_time for bar in bars], name="Date")
    data = {
        "Open": [bar.open for bar in bars],
        "High": [bar.high for bar in bars],
        "Low": [bar.low for bar in bars],
        "Close": [bar.close for bar in bars],
        "Volume": [bar.volume for bar in bars],
    }
    return pd.DataFrame(data, index=index)


def _resample(df: pd.DataFrame, rule: str) -> pd.DataFrame:
    agg = {"Open": "first", "High": "max", "Low": "min", "Close": "last", "Volume": "sum"}
    out = df.resample(rule, label="left", closed="left").agg(agg)
    return out.dropna(subset=["Open", "High", "Low", "Close"])


def fetch_ohlcv(ticker: str, interval: str, limit: int = 200) -> pd.DataFrame:
    """Fetch the most recent ``limit`` OHLCV rows from Yahoo Finance."""

    yf_interval = _YF_INTERVALS.get(interval, interval)
    period = period_for_interval(interval)
    try:
        df = yf.download(
            ticker,
            period=period,
            interval=yf_interval,
            auto_adjust=True,
            prepost=False,
            progress=False,
        )
    except Exception as exc:  # pragma: no cover - network path
        raise RuntimeError(f"Failed to download data for {ticker!r}: {exc}") from exc

    # Flatten MultiIndex columns (yfinance wraps cols for multi-ticker support)
    if isinstance(df.columns, pd.MultiIndex):
        df.columns = df.columns.get_level_values(0)

    if df.empty:
        raise ValueError(f"No data returned for ticker {ticker!r} at interval {interval}.")

    missing_cols = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_cols:
        raise ValueError(f"Downloaded data missing required columns: {missing_cols}")

    df = df.loc[:, REQUIRED_COLUMNS].copy()
    if not isinstance(df.index, pd.DatetimeIndex):
        raise TypeError("Expected DatetimeIndex from yfinance download.")

    if df.index.tz is None:
        df.index = df.index.tz_localize(tz.UTC)
    else:
        df.index = df.index.tz_convert(tz.UTC)
    df = df[~df.index.duplicated(keep="first")]
    df = df.sort_index()
    df = df.dropna(subset=["Open", "High", "Low", "Close"])
    df["Volume"] = df["Volume"].fillna(0.0)

    rule = _RESAMPLE_RULES.get(interval)
    if rule is not None:
        df = _resample(df, rule)

    if limit > 0:
        df = df.tail(limit)
    LOGGER.debug("Fetched %d %s bars for %s (period=%s).", len(df), interval, ticker, period)
    return df


def fetch_bars(ticker: str, interval: str, limit: int = 200) -> List[Bar]:
    """Ordered bar sequence for a symbol/interval/limit."""

    return bars_from_frame(fetch_ohlcv(ticker, interval, limit), interval)


def validate_bars(bars: Sequence[Bar], tolerance: Optional[float] = 1e-9) -> None:
    """Validate ordering and the OHLC envelope of a bar sequence."""

    if not bars:
        raise ValueError("Bar sequence is empty.")

    eps = tolerance or 0.0
    previous: Optional[Bar] = None
    for idx, bar in enumerate(bars):
        if not bar.open_time < bar.close_time:
            raise ValueError(f"Bar {idx} closes before it opens ({bar.open_time}).")
        body_low = min(bar.open, bar.close)
        body_high = max(bar.open, bar.close)
        if bar.low > body_low + eps or body_high > bar.high + eps:
            raise ValueError(
                f"Bar {idx} violates low <= open/close <= high "
                f"(o={bar.open}, h={bar.high}, l={bar.low}, c={bar.close})."
            )
        if previous is not None and not previous.open_time < bar.open_time:
            raise ValueError(f"Bar open times must be strictly increasing (index {idx}).")
        previous = bar
