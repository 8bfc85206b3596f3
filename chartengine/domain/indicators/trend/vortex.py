"""
Vortex Indicator (VI).

Compares upward and downward trend movement against the true range:

    VM+[i] = |high[i] - low[i-1]|
    VM-[i] = |low[i] - high[i-1]|
    VI+ = sum(VM+, length) / sum(TR, length)
    VI- = sum(VM-, length) / sum(TR, length)

VI+ above VI- indicates an uptrend. The first candle has no previous
candle, so the first value is at index ``length``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

import numpy as np
import pandas as pd

from ...series.core import check_same_length, freeze, validate_length
from ...series.window import rolling
from ..base import IndicatorBase, IndicatorCategory
from ..volatility.atr import true_range


@dataclass(frozen=True, eq=False)
class Vortex:
    """Positive (VI+) and negative (VI-) vortex lines."""
    positive: np.ndarray
    negative: np.ndarray


def vortex(high: np.ndarray, low: np.ndarray, close: np.ndarray, length: int = 14) -> Vortex:
    """Vortex indicator lines."""
    length = validate_length(length)
    high = np.asarray(high, dtype=np.float64)
    low = np.asarray(low, dtype=np.float64)
    n = check_same_length(high, low, close)

    tr = np.array(true_range(high, low, close), dtype=np.float64)
    vm_plus = np.full(n, np.nan, dtype=np.float64)
    vm_minus = np.full(n, np.nan, dtype=np.float64)
    if n > 1:
        tr[0] = np.nan
        vm_plus[1:] = np.abs(high[1:] - low[:-1])
        vm_minus[1:] = np.abs(low[1:] - high[:-1])

    sum_tr = rolling(tr, length, np.sum)
    positive = np.full(n, np.nan, dtype=np.float64)
    negative = np.full(n, np.nan, dtype=np.float64)
    ok = (sum_tr != 0) & ~np.isnan(sum_tr)
    np.divide(rolling(vm_plus, length, np.sum), sum_tr, out=positive, where=ok)
    np.divide(rolling(vm_minus, length, np.sum), sum_tr, out=negative, where=ok)
    return Vortex(positive=freeze(positive), negative=freeze(negative))


class VortexIndicator(IndicatorBase):
    """
    Vortex Indicator.

    Default Parameters:
        length: 14
    """

    name = "vortex"
    category = IndicatorCategory.TREND
    required_fields = ["high", "low", "close"]

    _default_params = {
        "length": 14,
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        """Calculate Vortex Indicator values."""
        result = vortex(
            self._column(data, "high"),
            self._column(data, "low"),
            self._column(data, "close"),
            params["length"],
        )
        return pd.DataFrame({"vi_plus": result.positive, "vi_minus": result.negative}, index=data.index)
