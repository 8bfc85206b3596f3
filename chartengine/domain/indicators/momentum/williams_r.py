"""
Williams %R Indicator.

Momentum oscillator measuring overbought/oversold levels:

    %R = -100 * (highest(high) - close) / (highest(high) - lowest(low))

Range: -100 to 0. A zero range (flat window) gives -50.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np
import pandas as pd

from ...series.core import check_same_length, freeze, validate_length
from ...series.window import rolling
from ..base import IndicatorBase, IndicatorCategory


def williams_r(high: np.ndarray, low: np.ndarray, close: np.ndarray, period: int = 14) -> np.ndarray:
    """Williams %R (-100..0)."""
    period = validate_length(period, "period")
    close = np.asarray(close, dtype=np.float64)
    check_same_length(high, low, close)

    highest = rolling(high, period, np.max)
    lowest = rolling(low, period, np.min)
    span = highest - lowest

    willr = np.full(len(close), np.nan, dtype=np.float64)
    valid = ~np.isnan(span) & ~np.isnan(close)
    ranged = valid & (span != 0)
    willr[ranged] = -100.0 * (highest[ranged] - close[ranged]) / span[ranged]
    willr[valid & (span == 0)] = -50.0
    return freeze(willr)


class WilliamsRIndicator(IndicatorBase):
    """
    Williams %R indicator.

    Default Parameters:
        period: 14
    """

    name = "williams_r"
    category = IndicatorCategory.MOMENTUM
    required_fields = ["high", "low", "close"]

    _default_params = {
        "period": 14,
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        """Calculate Williams %R values."""
        values = williams_r(
            self._column(data, "high"),
            self._column(data, "low"),
            self._column(data, "close"),
            params["period"],
        )
        return pd.DataFrame({"willr": values}, index=data.index)
