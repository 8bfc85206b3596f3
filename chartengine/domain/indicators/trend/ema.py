"""
Exponential moving averages.

- EMA: alpha = 2 / (length + 1)
- WILDMA (Wilder's RMA): alpha = 1 / length

Both seed with the simple average of the first ``length`` consecutive
valid values and then apply ``ma[i] = ma[i-1] + alpha * (x[i] - ma[i-1])``.
A missing input cell yields a missing output and restarts the seeding.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np
import pandas as pd

from ...series.core import freeze, validate_length
from ..base import IndicatorBase, IndicatorCategory


def smoothed_average(values: np.ndarray, length: int, alpha: float) -> np.ndarray:
    """
    Seeded exponential recursion shared by EMA, WILDMA and Wilder-smoothed indicators.

    Returns:
        Mutable float64 array.
    """
    x = np.asarray(values, dtype=np.float64)
    n = len(x)
    out = np.full(n, np.nan, dtype=np.float64)

    prev = np.nan
    run = 0
    for i in range(n):
        value = x[i]
        if np.isnan(value):
            prev = np.nan
            run = 0
            continue
        run += 1
        if np.isnan(prev):
            if run >= length:
                prev = np.mean(x[i - length + 1:i + 1])
                out[i] = prev
            continue
        prev = prev + alpha * (value - prev)
        out[i] = prev
    return out


def ema(series: np.ndarray, length: int) -> np.ndarray:
    """
    Exponential moving average.

    Args:
        series: Input series
        length: Window length (>= 1)
    """
    length = validate_length(length)
    return freeze(smoothed_average(series, length, 2.0 / (length + 1)))


def wildma(series: np.ndarray, length: int) -> np.ndarray:
    """Wilder's moving average (RMA), ``alpha = 1 / length``."""
    length = validate_length(length)
    return freeze(smoothed_average(series, length, 1.0 / length))


class EMAIndicator(IndicatorBase):
    """
    Exponential Moving Average.

    Default Parameters:
        length: 20
        source: "close"
    """

    name = "ema"
    category = IndicatorCategory.TREND
    required_fields = []

    _default_params = {
        "length": 20,
        "source": "close",
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        values = ema(self._column(data, params["source"]), params["length"])
        return pd.DataFrame({"ema": values}, index=data.index)


class WildMAIndicator(IndicatorBase):
    """
    Wilder's Moving Average.

    Default Parameters:
        length: 14
        source: "close"
    """

    name = "wildma"
    category = IndicatorCategory.TREND
    required_fields = []

    _default_params = {
        "length": 14,
        "source": "close",
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        values = wildma(self._column(data, params["source"]), params["length"])
        return pd.DataFrame({"wildma": values}, index=data.index)
