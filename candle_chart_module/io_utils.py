"""I/O helpers used by the command line caller to store rendered charts."""
from __future__ import annotations

import os

from .render import RenderedChart


def chart_filename(symbol: str, chart: RenderedChart) -> str:
    """``SYMBOL_interval_YYYYmmddHHMM.png`` named after the last drawn bar."""

    safe_symbol = "".join(ch if ch.isalnum() else "-" for ch in symbol) or "chart"
    end_label = chart.bars[-1].open_time.strftime("%Y%m%d%H%M")
    return f"{safe_symbol}_{chart.interval}_{end_label}.png"


def save_chart(chart: RenderedChart, path: str) -> None:
    """Write the encoded PNG bytes to ``path``."""

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "wb") as fh:
        fh.write(chart.image_bytes)
