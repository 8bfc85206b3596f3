"""
RSI and CMO.

Both are built from the Wilder-smoothed averages of the positive and
negative price changes (seeded by the mean of the first ``length``
changes, so the first value is at index ``length``):

    RSI = 100 - 100 / (1 + avg_gain / avg_loss)
    CMO = 100 * (avg_gain - avg_loss) / (avg_gain + avg_loss)

Flat markets: RSI is 100 when only gains were seen, 50 when neither
gains nor losses were seen; CMO is 0 when neither were seen.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

import numpy as np
import pandas as pd

from ...series.core import freeze, validate_length
from ..base import IndicatorBase, IndicatorCategory
from ..trend.ema import smoothed_average


def average_gain_loss(series: np.ndarray, length: int) -> Tuple[np.ndarray, np.ndarray]:
    """Wilder-smoothed average gain and average loss (both non-negative)."""
    x = np.asarray(series, dtype=np.float64)
    delta = np.full(len(x), np.nan, dtype=np.float64)
    if len(x) > 1:
        delta[1:] = np.diff(x)
    gains = np.where(np.isnan(delta), np.nan, np.maximum(delta, 0.0))
    losses = np.where(np.isnan(delta), np.nan, np.maximum(-delta, 0.0))
    alpha = 1.0 / length
    return smoothed_average(gains, length, alpha), smoothed_average(losses, length, alpha)


def rsi(series: np.ndarray, length: int = 14) -> np.ndarray:
    """Relative Strength Index (0..100)."""
    length = validate_length(length)
    gain, loss = average_gain_loss(series, length)

    out = np.full(len(gain), np.nan, dtype=np.float64)
    valid = ~np.isnan(gain) & ~np.isnan(loss)
    with np.errstate(divide="ignore", invalid="ignore"):
        regular = 100.0 - 100.0 / (1.0 + gain / loss)
    out[valid & (loss > 0)] = regular[valid & (loss > 0)]
    out[valid & (loss == 0) & (gain > 0)] = 100.0
    out[valid & (loss == 0) & (gain == 0)] = 50.0
    return freeze(out)


def cmo(series: np.ndarray, length: int = 14) -> np.ndarray:
    """Chande Momentum Oscillator (-100..100)."""
    length = validate_length(length)
    gain, loss = average_gain_loss(series, length)

    out = np.full(len(gain), np.nan, dtype=np.float64)
    total = gain + loss
    valid = ~np.isnan(total)
    nonzero = valid & (total != 0)
    out[nonzero] = 100.0 * (gain[nonzero] - loss[nonzero]) / total[nonzero]
    out[valid & (total == 0)] = 0.0
    return freeze(out)


class RSIIndicator(IndicatorBase):
    """
    Relative Strength Index indicator.

    Default Parameters:
        length: 14
        source: "close"
    """

    name = "rsi"
    category = IndicatorCategory.MOMENTUM
    required_fields = []

    _default_params = {
        "length": 14,
        "source": "close",
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        """Calculate RSI values."""
        values = rsi(self._column(data, params["source"]), params["length"])
        return pd.DataFrame({"rsi": values}, index=data.index)


class CMOIndicator(IndicatorBase):
    """
    Chande Momentum Oscillator.

    Default Parameters:
        length: 14
        source: "close"
    """

    name = "cmo"
    category = IndicatorCategory.MOMENTUM
    required_fields = []

    _default_params = {
        "length": 14,
        "source": "close",
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        values = cmo(self._column(data, params["source"]), params["length"])
        return pd.DataFrame({"cmo": values}, index=data.index)
