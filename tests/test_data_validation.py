import json
from dataclasses import replace
from datetime import timedelta

import pandas as pd
import pytest

from candle_chart_module.config import ChartConfig, TradeLevels, timeframe_name, timeframes_for_mode
from candle_chart_module.data import bar_duration, bars_from_frame, bars_to_frame, period_for_interval, validate_bars
from candle_chart_module.indicators import summarize
from candle_chart_module.metadata import build_chart_row, summary_to_dict
from candle_chart_module.render import render_chart

from conftest import FROZEN_NOW


def make_valid_df():
    index = pd.date_range("2023-01-01", periods=5, freq="D", tz="UTC")
    data = {
        "Open": [1, 2, 3, 4, 5],
        "High": [2, 3, 4, 5, 6],
        "Low": [0.5, 1.5, 2.5, 3.5, 4.5],
        "Close": [1.5, 2.5, 3.5, 4.5, 5.5],
        "Volume": [100, 120, 140, 160, 180],
    }
    return pd.DataFrame(data, index=index)


def test_bars_from_frame_converts_rows():
    bars = bars_from_frame(make_valid_df(), "1d")
    assert len(bars) == 5
    first = bars[0]
    assert first.open == 1.0 and first.high == 2.0 and first.low == 0.5 and first.close == 1.5
    assert first.volume == 100.0
    assert first.close_time - first.open_time == timedelta(days=1) - timedelta(milliseconds=1)
    validate_bars(bars)


def test_bars_to_frame_layout(make_bars):
    bars = make_bars([1.0, 2.0, 3.0])
    out = bars_to_frame(bars)
    assert list(out.columns) == ["Open", "High", "Low", "Close", "Volume"]
    assert out.index.is_monotonic_increasing
    assert out["Close"].tolist() == [1.0, 2.0, 3.0]
    assert out.index[0] == pd.Timestamp(bars[0].open_time)


def test_bars_from_frame_rejects_missing_columns():
    with pytest.raises(ValueError):
        bars_from_frame(make_valid_df().drop(columns=["Volume"]), "1d")


def test_unknown_interval_rejected():
    with pytest.raises(ValueError):
        bar_duration("weird")


def test_validate_bars_rejects_empty():
    with pytest.raises(ValueError):
        validate_bars([])


def test_validate_bars_rejects_unordered(make_bars):
    bars = make_bars([1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        validate_bars([bars[1], bars[0], bars[2]])


def test_validate_bars_rejects_broken_envelope(make_bars):
    bars = make_bars([1.0, 2.0, 3.0])
    broken = replace(bars[1], high=bars[1].close - 0.1)
    with pytest.raises(ValueError):
        validate_bars([bars[0], broken, bars[2]])


def test_download_periods_and_timeframes():
    assert period_for_interval("4h") == "3mo"
    assert period_for_interval("1w") == "5y"
    assert timeframe_name("4h") == "4 Hours"
    assert timeframe_name("7h") == "7h"
    assert "1w" not in timeframes_for_mode("scalping")
    assert timeframes_for_mode("SWING")[-1] == "1w"


def test_summary_to_dict_is_json_ready(make_bars):
    row = summary_to_dict(summarize(make_bars([1.0, 2.0, 3.0]), "1h"))
    decoded = json.loads(json.dumps(row))
    assert decoded["candle_count"] == 3
    assert decoded["period_start"].startswith("2024-01-01")
    assert len(decoded["last_candles"]) == 3
    assert {"time", "kind", "change_pct"}.issubset(decoded["last_candles"][0])

    empty = summary_to_dict(summarize([]))
    assert empty["period_start"] is None
    assert empty["candle_count"] == 0


def test_build_chart_row_serialises_expected_fields(make_bars, tmp_path):
    cfg = ChartConfig(width=400, height=300, padding=20)
    levels = TradeLevels(entry=2.0, stop_loss=0.5)
    chart = render_chart(make_bars([1.0, 2.0, 3.0]), cfg, levels, "TEST", "1h", FROZEN_NOW)
    row = build_chart_row("TEST", chart, cfg, str(tmp_path / "chart.png"), levels)

    assert row["symbol"] == "TEST"
    assert row["interval"] == "1h"
    assert row["n_bars"] == 3
    assert row["ma_periods"] == [20, 50]
    assert row["levels"] == {"ENTRY": 2.0, "SL": 0.5}
    assert row["png_bytes"] == len(chart.image_bytes)
    json.dumps(row)
