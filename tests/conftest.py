from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

import pytest

from candle_chart_module.data import Bar

START = datetime(2024, 1, 1, tzinfo=timezone.utc)
FROZEN_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def build_bars(
    closes: Sequence[float],
    step: timedelta = timedelta(hours=1),
    wick: float = 0.5,
    volumes: Optional[Sequence[float]] = None,
) -> List[Bar]:
    """Chain of bars where each open is the previous close."""

    bars = []
    prev = closes[0]
    for i, close in enumerate(closes):
        open_price = prev if i else close
        open_time = START + i * step
        bars.append(
            Bar(
                open_time=open_time,
                close_time=open_time + step - timedelta(milliseconds=1),
                open=float(open_price),
                high=float(max(open_price, close) + wick),
                low=float(min(open_price, close) - wick),
                close=float(close),
                volume=float(volumes[i]) if volumes is not None else 100.0 + i,
            )
        )
        prev = close
    return bars


@pytest.fixture
def make_bars():
    return build_bars


@pytest.fixture
def rising_bars():
    """60 bars with strictly increasing closes, +1 per bar."""

    return build_bars([100.0 + i + 1 for i in range(60)])
