"""
Parabolic SAR (Stop and Reverse) Indicator.

Welles Wilder's trend-following stop. The SAR trails price by an
acceleration factor that starts at ``start``, grows by ``increment`` each
time a new extreme point is made, and is capped at ``maximum``. When price
crosses the SAR the trend flips and the SAR jumps to the previous extreme.

The first candle only seeds the state (uptrend, SAR at its low) and is
reported as missing.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np
import pandas as pd

from ...exceptions import ConfigurationError
from ...series.core import check_same_length, freeze
from ..base import IndicatorBase, IndicatorCategory


def psar(
    high: np.ndarray,
    low: np.ndarray,
    start: float = 0.02,
    increment: float = 0.02,
    maximum: float = 0.2,
) -> np.ndarray:
    """
    Parabolic SAR.

    Args:
        high: High series
        low: Low series
        start: Initial acceleration factor
        increment: Acceleration step per new extreme point
        maximum: Acceleration cap

    Raises:
        ConfigurationError: Non-positive factors or start above maximum.
    """
    for name, value in (("start", start), ("increment", increment), ("maximum", maximum)):
        if not value > 0:
            raise ConfigurationError(name, f"must be > 0, got {value}")
    if start > maximum:
        raise ConfigurationError("start", f"must not exceed maximum ({maximum}), got {start}")

    high = np.asarray(high, dtype=np.float64)
    low = np.asarray(low, dtype=np.float64)
    n = check_same_length(high, low)
    out = np.full(n, np.nan, dtype=np.float64)
    if n < 2:
        return freeze(out)

    af = start
    uptrend = True
    ep = high[0]
    sar = low[0]

    for i in range(1, n):
        if np.isnan(high[i]) or np.isnan(low[i]):
            continue
        prev_sar = sar
        if uptrend:
            sar = prev_sar + af * (ep - prev_sar)
            sar = min(sar, low[i - 1])
            if i >= 2:
                sar = min(sar, low[i - 2])

            if low[i] < sar:
                uptrend = False
                sar = ep
                ep = low[i]
                af = start
            elif high[i] > ep:
                ep = high[i]
                af = min(af + increment, maximum)
        else:
            sar = prev_sar + af * (ep - prev_sar)
            sar = max(sar, high[i - 1])
            if i >= 2:
                sar = max(sar, high[i - 2])

            if high[i] > sar:
                uptrend = True
                sar = ep
                ep = high[i]
                af = start
            elif low[i] < ep:
                ep = low[i]
                af = min(af + increment, maximum)
        out[i] = sar

    return freeze(out)


class PSARIndicator(IndicatorBase):
    """
    Parabolic SAR indicator.

    Default Parameters:
        start: 0.02
        increment: 0.02
        maximum: 0.2
    """

    name = "psar"
    category = IndicatorCategory.TREND
    required_fields = ["high", "low"]

    _default_params = {
        "start": 0.02,
        "increment": 0.02,
        "maximum": 0.2,
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        """Calculate Parabolic SAR values."""
        values = psar(
            self._column(data, "high"),
            self._column(data, "low"),
            params["start"],
            params["increment"],
            params["maximum"],
        )
        return pd.DataFrame({"psar": values}, index=data.index)
