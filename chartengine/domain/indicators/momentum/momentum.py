"""
Momentum Indicator.

Raw change over ``length`` candles: ``x[i] - x[i - length]``.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np
import pandas as pd

from ...series.core import freeze, validate_length
from ..base import IndicatorBase, IndicatorCategory


def momentum(series: np.ndarray, length: int = 10) -> np.ndarray:
    """Change over ``length`` candles; missing for the first ``length`` cells."""
    length = validate_length(length)
    x = np.asarray(series, dtype=np.float64)
    out = np.full(len(x), np.nan, dtype=np.float64)
    if len(x) > length:
        out[length:] = x[length:] - x[:-length]
    return freeze(out)


class MomentumIndicator(IndicatorBase):
    """
    Momentum indicator.

    Default Parameters:
        length: 10
        source: "close"
    """

    name = "momentum"
    category = IndicatorCategory.MOMENTUM
    required_fields = []

    _default_params = {
        "length": 10,
        "source": "close",
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        values = momentum(self._column(data, params["source"]), params["length"])
        return pd.DataFrame({"momentum": values}, index=data.index)
