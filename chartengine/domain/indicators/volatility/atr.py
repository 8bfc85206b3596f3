"""
ATR (Average True Range) Indicator.

Measures market volatility as Wilder's moving average of the true range:

    TR[0] = high[0] - low[0]
    TR[i] = max(high[i] - low[i], |high[i] - close[i-1]|, |low[i] - close[i-1]|)

The first ATR value is the simple average of the first ``length`` true
ranges (index ``length - 1``).
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np
import pandas as pd

from ...series.core import check_same_length, freeze, validate_length
from ..base import IndicatorBase, IndicatorCategory
from ..trend.ema import smoothed_average


def true_range(high: np.ndarray, low: np.ndarray, close: np.ndarray) -> np.ndarray:
    """True range series; the first candle (or one after a missing close) uses high - low."""
    h = np.asarray(high, dtype=np.float64)
    l = np.asarray(low, dtype=np.float64)
    c = np.asarray(close, dtype=np.float64)
    check_same_length(h, l, c)

    tr = h - l
    if len(tr) > 1:
        prev_close = c[:-1]
        gaps = np.fmax(np.abs(h[1:] - prev_close), np.abs(l[1:] - prev_close))
        tr[1:] = np.fmax(tr[1:], gaps)
    return freeze(tr)


def atr(high: np.ndarray, low: np.ndarray, close: np.ndarray, length: int = 14) -> np.ndarray:
    """Average true range."""
    length = validate_length(length)
    return freeze(smoothed_average(true_range(high, low, close), length, 1.0 / length))


def backfilled_atr(high: np.ndarray, low: np.ndarray, close: np.ndarray, length: int = 14) -> np.ndarray:
    """
    ATR with its warm-up cells filled from the first valid value.

    Used wherever a distance must be normalised on every candle. Falls back
    to the mean true range when the chart is shorter than ``length``.

    Returns:
        Mutable float64 array.
    """
    values = np.array(atr(high, low, close, length), dtype=np.float64)
    if np.isnan(values).all():
        tr = true_range(high, low, close)
        fallback = np.nanmean(tr) if (~np.isnan(tr)).any() else np.nan
        values[:] = fallback
        return values

    series = pd.Series(values)
    return series.bfill().ffill().values.astype(np.float64)


class ATRIndicator(IndicatorBase):
    """
    Average True Range indicator.

    Default Parameters:
        length: 14
    """

    name = "atr"
    category = IndicatorCategory.VOLATILITY
    required_fields = ["high", "low", "close"]

    _default_params = {
        "length": 14,
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        """Calculate ATR values."""
        values = atr(
            self._column(data, "high"),
            self._column(data, "low"),
            self._column(data, "close"),
            params["length"],
        )
        return pd.DataFrame({"atr": values}, index=data.index)
