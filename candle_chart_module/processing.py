"""Windowing utilities that fit a bar sequence into a horizontal pixel budget."""
from __future__ import annotations

import logging
from typing import List, Sequence

from .data import Bar

LOGGER = logging.getLogger(__name__)


def max_visible_candles(chart_width: int, candle_width: int, candle_gap: int) -> int:
    """Number of candle slots that fit across ``chart_width`` pixels."""

    slot = candle_width + candle_gap
    if slot <= 0:
        raise ValueError("candle_width + candle_gap must be positive.")
    return max(0, chart_width // slot)


def window_bars(bars: Sequence[Bar], max_candles: int) -> List[Bar]:
    """Keep the most recent ``max_candles`` bars; older history is dropped."""

    n = len(bars)
    if max_candles <= 0:
        return []
    if n <= max_candles:
        return list(bars)
    LOGGER.debug("Windowing %d bars down to the latest %d.", n, max_candles)
    return list(bars[n - max_candles :])
