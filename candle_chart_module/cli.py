"""Command line interface for summarising and charting OHLCV data.

Example usage
-------------

* Daily chart and summary for a single symbol::

    python make_candle_charts.py --ticker BTC-USD --interval 1d --out_dir ./out

* Top-down set of timeframes with an entry plan overlaid::

    python make_candle_charts.py --ticker EURUSD=X --mode swing --entry 1.085 --sl 1.079 --tp1 1.092 --out_dir ./out
"""
from __future__ import annotations

import argparse
import json
import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

from .config import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    LEVELS_HEIGHT,
    LEVELS_WIDTH,
    ChartConfig,
    TradeLevels,
    timeframes_for_mode,
)
from .data import fetch_bars, validate_bars
from .indicators import summarize, technical_snapshot
from .io_utils import chart_filename, save_chart
from .metadata import build_chart_row, summary_to_dict
from .render import render_chart


LOGGER_NAME = "make_candle_charts"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""

    parser = argparse.ArgumentParser(description="Summarise OHLCV data and render candlestick charts.")
    parser.add_argument("--ticker", required=True, help="Ticker symbol (e.g. BTC-USD, AAPL).")
    parser.add_argument(
        "--interval",
        action="append",
        default=None,
        help="Interval to analyse (repeatable, e.g. --interval 1h --interval 4h).",
    )
    parser.add_argument(
        "--mode",
        choices=["scalping", "swing", "intraday"],
        default=None,
        help="Analyse the standard timeframe set for a trading mode.",
    )
    parser.add_argument("--limit", type=int, default=200, help="Number of bars to fetch per interval.")
    parser.add_argument("--out_dir", default="./out", help="Directory for rendered PNG charts.")
    parser.add_argument("--no_chart", action="store_true", help="Only print summaries.")
    parser.add_argument("--width", type=int, default=0, help="Canvas width in pixels.")
    parser.add_argument("--height", type=int, default=0, help="Canvas height in pixels.")
    parser.add_argument("--padding", type=int, default=60, help="Canvas padding in pixels.")
    parser.add_argument("--candle_width", type=int, default=4, help="Candle body width in pixels.")
    parser.add_argument("--candle_gap", type=int, default=2, help="Gap between candles in pixels.")
    parser.add_argument("--no_volume", action="store_true", help="Disable the volume strip.")
    parser.add_argument("--no_ma", action="store_true", help="Disable moving average lines.")
    parser.add_argument(
        "--ma_periods",
        type=int,
        nargs="+",
        default=[20, 50],
        help="Moving average periods to draw.",
    )
    parser.add_argument("--light", action="store_true", help="Use the light palette.")

    levels_group = parser.add_argument_group("Trade Levels")
    levels_group.add_argument("--entry", type=float, default=0.0, help="Entry price.")
    levels_group.add_argument("--sl", type=float, default=0.0, help="Stop-loss price.")
    levels_group.add_argument("--tp1", type=float, default=0.0, help="Take-profit 1.")
    levels_group.add_argument("--tp2", type=float, default=0.0, help="Take-profit 2.")
    levels_group.add_argument("--tp3", type=float, default=0.0, help="Take-profit 3.")

    return parser.parse_args(argv)


def build_levels(args: argparse.Namespace) -> Optional[TradeLevels]:
    levels = TradeLevels(
        entry=args.entry,
        stop_loss=args.sl,
        take_profit1=args.tp1,
        take_profit2=args.tp2,
        take_profit3=args.tp3,
    )
    return None if levels.is_empty() else levels


def build_config(args: argparse.Namespace, with_levels: bool) -> ChartConfig:
    default_width, default_height = (LEVELS_WIDTH, LEVELS_HEIGHT) if with_levels else (DEFAULT_WIDTH, DEFAULT_HEIGHT)
    return ChartConfig(
        width=args.width or default_width,
        height=args.height or default_height,
        padding=args.padding,
        candle_width=args.candle_width,
        candle_gap=args.candle_gap,
        show_volume=not args.no_volume,
        show_ma=not args.no_ma,
        ma_periods=tuple(args.ma_periods),
        dark_mode=not args.light,
    )


def resolve_intervals(args: argparse.Namespace) -> List[str]:
    intervals: List[str] = []
    if args.mode:
        intervals.extend(timeframes_for_mode(args.mode))
    for interval in args.interval or []:
        if interval not in intervals:
            intervals.append(interval)
    return intervals or ["1h"]


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI utility."""

    args = parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    logger = logging.getLogger(LOGGER_NAME)

    levels = build_levels(args)
    try:
        cfg = build_config(args, levels is not None)
    except ValueError as exc:
        raise SystemExit(f"Invalid chart configuration: {exc}")

    intervals = resolve_intervals(args)
    generated_at = datetime.now(timezone.utc)
    logger.info("Analysing %s on %s", args.ticker, ", ".join(intervals))

    for interval in intervals:
        bars = fetch_bars(args.ticker, interval, args.limit)
        logger.info("Downloaded %d %s bars.", len(bars), interval)
        validate_bars(bars)

        summary = summarize(bars, interval)
        record = {
            "summary": summary_to_dict(summary),
            "technical": technical_snapshot(bars),
        }

        if not args.no_chart:
            chart = render_chart(bars, cfg, levels, args.ticker, interval, generated_at)
            img_path = os.path.join(args.out_dir, chart_filename(args.ticker, chart))
            save_chart(chart, img_path)
            logger.info("Saved chart %s", img_path)
            record["chart"] = build_chart_row(args.ticker, chart, cfg, img_path, levels)

        print(json.dumps(record, sort_keys=True))

    logger.info("Processed %d interval(s).", len(intervals))
