"""
Standard Deviation Indicator.

Population standard deviation (denominator = length) of the trailing
window.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np
import pandas as pd

from ...series.core import freeze, validate_length
from ...series.window import Length, reduce, rolling
from ..base import IndicatorBase, IndicatorCategory


def stdev(series: np.ndarray, length: Length) -> np.ndarray:
    """Population standard deviation of the trailing window."""
    if np.ndim(length) > 0:
        return reduce(series, length, np.std)
    return freeze(rolling(series, validate_length(length), np.std))


class StdDevIndicator(IndicatorBase):
    """
    Standard deviation.

    Default Parameters:
        length: 20
        source: "close"
    """

    name = "stdev"
    category = IndicatorCategory.VOLATILITY
    required_fields = []

    _default_params = {
        "length": 20,
        "source": "close",
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        values = stdev(self._column(data, params["source"]), params["length"])
        return pd.DataFrame({"stdev": values}, index=data.index)
