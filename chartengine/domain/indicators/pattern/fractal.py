"""
Williams Fractals and pivot points.

Both produce sparse series: the source value at candles that are the strict
extreme of their surrounding window, missing everywhere else.

- fractal_high/fractal_low(series, length, peak_index): window of
  ``length`` candles in which the candle at ``peak_index`` must be the
  strict extreme (``peak_index`` defaults to the centre, so ``length``
  must then be odd).
- pivot_high/pivot_low(series, left, right): the candle must be the strict
  extreme of ``left`` candles before and ``right`` candles after it.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view

from ...exceptions import ConfigurationError
from ...series.core import freeze, validate_length
from ..base import IndicatorBase, IndicatorCategory


def _window_extremes(series: np.ndarray, length: int, peak_index: int, highs: bool) -> np.ndarray:
    x = np.asarray(series, dtype=np.float64)
    n = len(x)
    out = np.full(n, np.nan, dtype=np.float64)
    if n < length:
        return out

    windows = sliding_window_view(x, length)
    peak = windows[:, peak_index]
    others = np.delete(windows, peak_index, axis=1)
    valid = ~np.isnan(windows).any(axis=1)
    if others.shape[1] == 0:
        strict = valid
    elif highs:
        strict = valid & (peak > others.max(axis=1))
    else:
        strict = valid & (peak < others.min(axis=1))

    positions = np.flatnonzero(strict) + peak_index
    out[positions] = x[positions]
    return out


def _resolve_peak_index(length: int, peak_index: Optional[int]) -> int:
    if peak_index is None:
        if length % 2 == 0:
            raise ConfigurationError("length", f"must be odd when peak_index is not given, got {length}")
        return (length - 1) // 2
    if isinstance(peak_index, bool) or int(peak_index) != peak_index or not 0 <= peak_index < length:
        raise ConfigurationError("peak_index", f"must be an integer within [0, {length - 1}], got {peak_index!r}")
    return int(peak_index)


def fractal_high(series: np.ndarray, length: int = 5, peak_index: Optional[int] = None) -> np.ndarray:
    """Williams fractal highs as a sparse series."""
    length = validate_length(length)
    return freeze(_window_extremes(series, length, _resolve_peak_index(length, peak_index), highs=True))


def fractal_low(series: np.ndarray, length: int = 5, peak_index: Optional[int] = None) -> np.ndarray:
    """Williams fractal lows as a sparse series."""
    length = validate_length(length)
    return freeze(_window_extremes(series, length, _resolve_peak_index(length, peak_index), highs=False))


def pivot_high(series: np.ndarray, left: int, right: int) -> np.ndarray:
    """Pivot highs: strict maximum of ``left`` candles before and ``right`` after."""
    left = validate_length(left, "left", minimum=0)
    right = validate_length(right, "right", minimum=0)
    return freeze(_window_extremes(series, left + right + 1, left, highs=True))


def pivot_low(series: np.ndarray, left: int, right: int) -> np.ndarray:
    """Pivot lows: strict minimum of ``left`` candles before and ``right`` after."""
    left = validate_length(left, "left", minimum=0)
    right = validate_length(right, "right", minimum=0)
    return freeze(_window_extremes(series, left + right + 1, left, highs=False))


class FractalIndicator(IndicatorBase):
    """
    Williams Fractals on high/low.

    Default Parameters:
        length: 5
        peak_index: None (centre of the window)
    """

    name = "fractal"
    category = IndicatorCategory.PATTERN
    required_fields = ["high", "low"]

    _default_params = {
        "length": 5,
        "peak_index": None,
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        high = self._column(data, "high")
        low = self._column(data, "low")
        return pd.DataFrame(
            {
                "fractal_high": fractal_high(high, params["length"], params["peak_index"]),
                "fractal_low": fractal_low(low, params["length"], params["peak_index"]),
            },
            index=data.index,
        )


class PivotIndicator(IndicatorBase):
    """
    Pivot highs/lows on high/low.

    Default Parameters:
        left: 5
        right: 5
    """

    name = "pivot"
    category = IndicatorCategory.PATTERN
    required_fields = ["high", "low"]

    _default_params = {
        "left": 5,
        "right": 5,
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "pivot_high": pivot_high(self._column(data, "high"), params["left"], params["right"]),
                "pivot_low": pivot_low(self._column(data, "low"), params["left"], params["right"]),
            },
            index=data.index,
        )
