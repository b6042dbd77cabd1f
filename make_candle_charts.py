#!/usr/bin/env python3
"""make_candle_charts.py
=================================

Entry-point script for summarising OHLCV data and rendering candlestick
charts (volume, moving averages, optional entry / stop-loss / take-profit
levels) from Yahoo Finance data. The heavy lifting lives in the
``candle_chart_module`` package.

Example usage
-------------

* Daily chart and summary for a single symbol::

    python make_candle_charts.py --ticker BTC-USD --interval 1d --out_dir ./out

* Top-down set of timeframes with an entry plan overlaid::

    python make_candle_charts.py --ticker EURUSD=X --mode swing --entry 1.085 --sl 1.079 --tp1 1.092 --out_dir ./out

The script requires the following packages: ``yfinance``, ``pandas``, ``numpy``,
``matplotlib``, ``pillow`` and ``python-dateutil``.
"""
from __future__ import annotations

from candle_chart_module.cli import main


if __name__ == "__main__":
    main()
