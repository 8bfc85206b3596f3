"""
Adaptive moving averages.

ALMA (Arnaud Legoux): gaussian window weights centred at
``sigma * (window - 1)`` with width ``window / smooth``; ``sigma`` close to
1 favours recent candles.

KAMA (Kaufman): exponential smoothing whose constant follows the
efficiency ratio ``|x[i] - x[i-ER]| / sum(|x[j] - x[j-1]|)`` over the last
ER candles, between the fast and slow EMA constants.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np
import pandas as pd

from ...exceptions import ConfigurationError
from ...series.core import freeze, validate_length
from ...series.window import rolling
from ..base import IndicatorBase, IndicatorCategory


def alma(series: np.ndarray, window: int = 9, sigma: float = 0.85, smooth: float = 6.0) -> np.ndarray:
    """
    Arnaud Legoux moving average.

    Args:
        series: Input series
        window: Window length
        sigma: Gaussian centre as a fraction of the window (0..1)
        smooth: Window divided by this gives the gaussian width (> 0)
    """
    window = validate_length(window, "window")
    if not 0.0 <= sigma <= 1.0:
        raise ConfigurationError("sigma", f"must be within [0, 1], got {sigma}")
    if smooth <= 0:
        raise ConfigurationError("smooth", f"must be > 0, got {smooth}")

    centre = sigma * (window - 1)
    width = window / smooth
    k = np.arange(window, dtype=np.float64)
    weights = np.exp(-((k - centre) ** 2) / (2 * width * width))
    weights /= weights.sum()
    return freeze(rolling(series, window, lambda windows, axis: windows @ weights))


def kama(series: np.ndarray, er_length: int = 10, fast: int = 2, slow: int = 30) -> np.ndarray:
    """
    Kaufman adaptive moving average.

    Seeds with the input value at the first index with a full efficiency
    ratio window; a missing input restarts the seeding.
    """
    er_length = validate_length(er_length, "er_length")
    fast = validate_length(fast, "fast")
    slow = validate_length(slow, "slow")

    x = np.asarray(series, dtype=np.float64)
    n = len(x)
    out = np.full(n, np.nan, dtype=np.float64)
    if n <= er_length:
        return freeze(out)

    fast_sc = 2.0 / (fast + 1)
    slow_sc = 2.0 / (slow + 1)
    change = np.full(n, np.nan)
    change[er_length:] = np.abs(x[er_length:] - x[:-er_length])
    steps = np.full(n, np.nan)
    steps[1:] = np.abs(np.diff(x))
    volatility = rolling(steps, er_length, np.sum)

    prev = np.nan
    for i in range(er_length, n):
        if np.isnan(change[i]) or np.isnan(volatility[i]):
            prev = np.nan
            continue
        if np.isnan(prev):
            prev = x[i]
            out[i] = prev
            continue
        er = change[i] / volatility[i] if volatility[i] != 0 else 0.0
        sc = (er * (fast_sc - slow_sc) + slow_sc) ** 2
        prev = prev + sc * (x[i] - prev)
        out[i] = prev
    return freeze(out)


class ALMAIndicator(IndicatorBase):
    """
    Arnaud Legoux Moving Average.

    Default Parameters:
        window: 9
        sigma: 0.85
        smooth: 6
        source: "close"
    """

    name = "alma"
    category = IndicatorCategory.TREND
    required_fields = []

    _default_params = {
        "window": 9,
        "sigma": 0.85,
        "smooth": 6.0,
        "source": "close",
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        values = alma(
            self._column(data, params["source"]),
            params["window"],
            params["sigma"],
            params["smooth"],
        )
        return pd.DataFrame({"alma": values}, index=data.index)


class KAMAIndicator(IndicatorBase):
    """
    Kaufman Adaptive Moving Average.

    Default Parameters:
        er_length: 10
        fast: 2
        slow: 30
        source: "close"
    """

    name = "kama"
    category = IndicatorCategory.TREND
    required_fields = []

    _default_params = {
        "er_length": 10,
        "fast": 2,
        "slow": 30,
        "source": "close",
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        values = kama(
            self._column(data, params["source"]),
            params["er_length"],
            params["fast"],
            params["slow"],
        )
        return pd.DataFrame({"kama": values}, index=data.index)
