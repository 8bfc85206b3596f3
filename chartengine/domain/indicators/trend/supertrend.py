"""
SuperTrend Indicator.

ATR band around hl2 that trails price with directional persistence:

    basic_upper = hl2 + multiplier * ATR
    basic_lower = hl2 - multiplier * ATR

The final lower band only rises while the trend is up and the final upper
band only falls while the trend is down. The trend flips when price
crosses the active band (candle wicks when ``use_wicks``, else closes).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

import numpy as np
import pandas as pd

from ...exceptions import ConfigurationError
from ...series.core import check_same_length, freeze, validate_length
from ..base import IndicatorBase, IndicatorCategory
from ..volatility.atr import atr


@dataclass(frozen=True, eq=False)
class SuperTrend:
    """SuperTrend line and direction (+1 up, -1 down, missing during warm-up)."""
    line: np.ndarray
    direction: np.ndarray


def supertrend_with_direction(
    high: np.ndarray,
    low: np.ndarray,
    close: np.ndarray,
    length: int = 14,
    multiplier: float = 3.0,
    use_wicks: bool = True,
) -> SuperTrend:
    """SuperTrend line together with its direction series."""
    length = validate_length(length)
    if not multiplier > 0:
        raise ConfigurationError("multiplier", f"must be > 0, got {multiplier}")

    high = np.asarray(high, dtype=np.float64)
    low = np.asarray(low, dtype=np.float64)
    close = np.asarray(close, dtype=np.float64)
    n = check_same_length(high, low, close)

    line = np.full(n, np.nan, dtype=np.float64)
    direction = np.full(n, np.nan, dtype=np.float64)

    atr_values = atr(high, low, close, length)
    hl2 = (high + low) / 2
    upper_band = hl2 + multiplier * atr_values
    lower_band = hl2 - multiplier * atr_values

    # Price used for the flip checks
    up_trigger = low if use_wicks else close
    down_trigger = high if use_wicks else close

    final_upper = np.nan
    final_lower = np.nan
    trend = 0
    for i in range(n):
        if np.isnan(upper_band[i]) or np.isnan(close[i]):
            trend = 0
            continue
        if trend == 0:
            final_upper = upper_band[i]
            final_lower = lower_band[i]
            trend = 1
            line[i] = final_lower
            direction[i] = trend
            continue

        if lower_band[i] > final_lower or close[i - 1] < final_lower:
            final_lower = lower_band[i]
        if upper_band[i] < final_upper or close[i - 1] > final_upper:
            final_upper = upper_band[i]

        if trend == 1 and up_trigger[i] < final_lower:
            trend = -1
        elif trend == -1 and down_trigger[i] > final_upper:
            trend = 1

        line[i] = final_lower if trend == 1 else final_upper
        direction[i] = trend

    return SuperTrend(line=freeze(line), direction=freeze(direction))


def supertrend(
    high: np.ndarray,
    low: np.ndarray,
    close: np.ndarray,
    length: int = 14,
    multiplier: float = 3.0,
    use_wicks: bool = True,
) -> np.ndarray:
    """SuperTrend line."""
    return supertrend_with_direction(high, low, close, length, multiplier, use_wicks).line


class SuperTrendIndicator(IndicatorBase):
    """
    SuperTrend indicator.

    Default Parameters:
        length: 14
        multiplier: 3.0
        use_wicks: True
    """

    name = "supertrend"
    category = IndicatorCategory.TREND
    required_fields = ["high", "low", "close"]

    _default_params = {
        "length": 14,
        "multiplier": 3.0,
        "use_wicks": True,
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        """Calculate SuperTrend values."""
        result = supertrend_with_direction(
            self._column(data, "high"),
            self._column(data, "low"),
            self._column(data, "close"),
            params["length"],
            params["multiplier"],
            params["use_wicks"],
        )
        return pd.DataFrame(
            {"supertrend": result.line, "supertrend_direction": result.direction},
            index=data.index,
        )
