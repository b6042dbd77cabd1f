"""JSON-ready views of summaries and rendered charts."""
from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

from .config import ChartConfig, TradeLevels
from .indicators import Summary, format_price
from .render import RenderedChart


def summary_to_dict(summary: Summary) -> Dict[str, Any]:
    """Flatten a ``Summary`` into plain JSON-serialisable values.

    Timestamps become ISO strings (``None`` for the empty summary) and
    ``last_candles`` a list of dicts.
    """

    row = asdict(summary)
    for key in ("period_start", "period_end"):
        value = getattr(summary, key)
        row[key] = value.isoformat() if value is not None else None
    return row


def build_chart_row(
    symbol: str,
    chart: RenderedChart,
    cfg: ChartConfig,
    img_path: Optional[str] = None,
    levels: Optional[TradeLevels] = None,
) -> Dict[str, object]:
    """Describe a rendered chart: what was drawn and with which settings."""

    first, last = chart.bars[0], chart.bars[-1]
    row: Dict[str, object] = {
        "symbol": symbol,
        "interval": chart.interval,
        "img_path": img_path,
        "n_bars": len(chart.bars),
        "start_ts": first.open_time.isoformat(),
        "end_ts": last.close_time.isoformat(),
        "last_close": format_price(last.close),
        "width": cfg.width,
        "height": cfg.height,
        "show_volume": cfg.show_volume,
        "show_ma": cfg.show_ma,
        "ma_periods": list(cfg.ma_periods),
        "dark_mode": cfg.dark_mode,
        "png_bytes": len(chart.image_bytes),
    }
    if levels is not None:
        row["levels"] = {label: price for label, price in levels.labelled()}
    return row
