"""
Window-weighted moving averages.

- SMA: arithmetic mean of the window
- WMA: linear weights 1..length, newest candle heaviest
- HULLMA: WMA(2 * WMA(x, length/2) - WMA(x, length), sqrt(length))
- VWMA: volume-weighted mean of the window

SMA and WMA accept a per-index length Series.
"""

from __future__ import annotations

import math
from typing import Any, Dict

import numpy as np
import pandas as pd

from ...series.core import check_same_length, freeze, validate_length
from ...series.window import Length, reduce, rolling
from ..base import IndicatorBase, IndicatorCategory


def sma(series: np.ndarray, length: Length) -> np.ndarray:
    """Simple moving average; ``length`` may be a Series of per-index lengths."""
    if np.ndim(length) > 0:
        return reduce(series, length, np.mean)
    return freeze(rolling(series, validate_length(length), np.mean))


def _linear_weights(length: int) -> np.ndarray:
    return np.arange(1, length + 1, dtype=np.float64)


def wma(series: np.ndarray, length: Length) -> np.ndarray:
    """Linearly weighted moving average; ``length`` may be a Series."""
    if np.ndim(length) > 0:
        return reduce(series, length, lambda w: np.dot(w, _linear_weights(len(w))) / (len(w) * (len(w) + 1) / 2))

    length = validate_length(length)
    weights = _linear_weights(length)
    norm = weights.sum()
    return freeze(rolling(series, length, lambda windows, axis: windows @ weights / norm))


def hullma(series: np.ndarray, length: int) -> np.ndarray:
    """Hull moving average."""
    length = validate_length(length)
    half = max(1, length // 2)
    root = max(1, int(math.sqrt(length)))
    raw = 2 * wma(series, half) - wma(series, length)
    return wma(raw, root)


def vwma(price: np.ndarray, volume: np.ndarray, length: int) -> np.ndarray:
    """Volume-weighted moving average; windows with zero total volume are missing."""
    length = validate_length(length)
    p = np.asarray(price, dtype=np.float64)
    v = np.asarray(volume, dtype=np.float64)
    check_same_length(p, v)

    weighted = rolling(p * v, length, np.sum)
    total = rolling(v, length, np.sum)
    out = np.full(len(p), np.nan, dtype=np.float64)
    np.divide(weighted, total, out=out, where=(total != 0) & ~np.isnan(total))
    return freeze(out)


class SMAIndicator(IndicatorBase):
    """
    Simple Moving Average.

    Default Parameters:
        length: 20
        source: "close"
    """

    name = "sma"
    category = IndicatorCategory.TREND
    required_fields = []

    _default_params = {
        "length": 20,
        "source": "close",
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        values = sma(self._column(data, params["source"]), params["length"])
        return pd.DataFrame({"sma": values}, index=data.index)


class WMAIndicator(IndicatorBase):
    """
    Weighted Moving Average.

    Default Parameters:
        length: 20
        source: "close"
    """

    name = "wma"
    category = IndicatorCategory.TREND
    required_fields = []

    _default_params = {
        "length": 20,
        "source": "close",
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        values = wma(self._column(data, params["source"]), params["length"])
        return pd.DataFrame({"wma": values}, index=data.index)


class HullMAIndicator(IndicatorBase):
    """
    Hull Moving Average.

    Default Parameters:
        length: 20
        source: "close"
    """

    name = "hullma"
    category = IndicatorCategory.TREND
    required_fields = []

    _default_params = {
        "length": 20,
        "source": "close",
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        values = hullma(self._column(data, params["source"]), params["length"])
        return pd.DataFrame({"hullma": values}, index=data.index)


class VWMAIndicator(IndicatorBase):
    """
    Volume Weighted Moving Average.

    Default Parameters:
        length: 20
        source: "close"
    """

    name = "vwma"
    category = IndicatorCategory.TREND
    required_fields = ["volume"]

    _default_params = {
        "length": 20,
        "source": "close",
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        values = vwma(
            self._column(data, params["source"]),
            self._column(data, "volume"),
            params["length"],
        )
        return pd.DataFrame({"vwma": values}, index=data.index)
