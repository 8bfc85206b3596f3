"""
Stochastic Oscillator (%K).

Position of the close within the high/low range of the trailing window:

    %K = 100 * (close - lowest(low)) / (highest(high) - lowest(low))

A zero range (flat window) gives 50.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np
import pandas as pd

from ...series.core import check_same_length, freeze, validate_length
from ...series.window import rolling
from ..base import IndicatorBase, IndicatorCategory


def stochastic(close: np.ndarray, high: np.ndarray, low: np.ndarray, length: int = 14) -> np.ndarray:
    """Stochastic %K (0..100)."""
    length = validate_length(length)
    close = np.asarray(close, dtype=np.float64)
    check_same_length(close, high, low)

    highest = rolling(high, length, np.max)
    lowest = rolling(low, length, np.min)
    span = highest - lowest

    out = np.full(len(close), np.nan, dtype=np.float64)
    valid = ~np.isnan(span) & ~np.isnan(close)
    ranged = valid & (span != 0)
    out[ranged] = 100.0 * (close[ranged] - lowest[ranged]) / span[ranged]
    out[valid & (span == 0)] = 50.0
    return freeze(out)


class StochasticIndicator(IndicatorBase):
    """
    Stochastic Oscillator.

    Default Parameters:
        length: 14
    """

    name = "stochastic"
    category = IndicatorCategory.MOMENTUM
    required_fields = ["high", "low", "close"]

    _default_params = {
        "length": 14,
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        values = stochastic(
            self._column(data, "close"),
            self._column(data, "high"),
            self._column(data, "low"),
            params["length"],
        )
        return pd.DataFrame({"stoch_k": values}, index=data.index)
