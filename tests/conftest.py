"""Pytest configuration and fixtures."""

from typing import Iterator, List

import numpy as np
import pandas as pd
import pytest

from chartengine.domain.series.candles import Candles
from config.config_manager import set_engine_config


def candles_from_closes(closes: np.ndarray, spread: float = 0.5) -> Candles:
    """Candles whose high/low sit ``spread`` above/below the close."""
    closes = np.asarray(closes, dtype=np.float64)
    return Candles.from_arrays(
        open=closes,
        high=closes + spread,
        low=closes - spread,
        close=closes,
        volume=np.full(len(closes), 1000.0),
    )


def piecewise_closes(knots: List[tuple]) -> np.ndarray:
    """Closes moving linearly between (index, price) knots."""
    closes: List[float] = []
    for (i0, p0), (i1, p1) in zip(knots, knots[1:]):
        segment = np.linspace(p0, p1, i1 - i0 + 1)
        closes.extend(segment if not closes else segment[1:])
    return np.array(closes, dtype=np.float64)


@pytest.fixture(autouse=True)
def reset_engine_config() -> Iterator[None]:
    """Every test starts from the default engine configuration."""
    set_engine_config(None)
    yield
    set_engine_config(None)


@pytest.fixture
def ohlcv_frame() -> pd.DataFrame:
    """Random-walk OHLCV data."""
    np.random.seed(42)
    n = 200
    dates = pd.date_range(start="2024-01-01", periods=n, freq="1h")
    close = 100 + np.cumsum(np.random.randn(n) * 0.5)
    return pd.DataFrame(
        {
            "open": close - np.random.rand(n) * 0.5,
            "high": close + np.random.rand(n) * 0.5 + 0.1,
            "low": close - np.random.rand(n) * 0.5 - 0.1,
            "close": close,
            "volume": np.random.randint(1000, 10000, n).astype(float),
        },
        index=dates,
    )


@pytest.fixture
def random_candles(ohlcv_frame: pd.DataFrame) -> Candles:
    """Random-walk candles."""
    return Candles.from_frame(ohlcv_frame)


@pytest.fixture
def channel_candles() -> Candles:
    """Steady uptrend: high = 101 + i, low = 99 + i (ATR 2)."""
    i = np.arange(60, dtype=np.float64)
    return Candles.from_arrays(open=100 + i, high=101 + i, low=99 + i, close=100 + i)


@pytest.fixture
def broadening_candles() -> Candles:
    """Uptrend whose highs rise twice as fast as its lows."""
    i = np.arange(40, dtype=np.float64)
    high = 101 + 2 * i
    low = 99 + i
    close = (high + low) / 2
    return Candles.from_arrays(open=close, high=high, low=low, close=close)


@pytest.fixture
def double_top_candles() -> Candles:
    """Two peaks at 120 (candles 20 and 50) around a valley at 105 (candle 35)."""
    closes = piecewise_closes([(0, 100), (20, 120), (35, 105), (50, 120), (55, 112), (60, 112)])
    return candles_from_closes(closes)


@pytest.fixture
def head_and_shoulders_candles() -> Candles:
    """Shoulders at 110 (10, 50), head at 118 (30), troughs at 104 (20, 40)."""
    closes = piecewise_closes(
        [(0, 100), (10, 110), (20, 104), (30, 118), (40, 104), (50, 110), (60, 100)]
    )
    return candles_from_closes(closes)
