"""
Anchored VWAP.

Cumulative volume-weighted average price starting at ``from_index`` and
optionally stopping at ``to_index``. Cells outside the anchored range are
missing, as are cells where no volume has traded yet.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from ...series.core import check_same_length, freeze, resolve_range
from ..base import IndicatorBase, IndicatorCategory


def vwap(
    price: np.ndarray,
    volume: np.ndarray,
    from_index: int = 0,
    to_index: Optional[int] = None,
) -> np.ndarray:
    """
    Anchored volume-weighted average price.

    Args:
        price: Price series (the chart's ohlc4 is the usual choice).
        volume: Volume series.
        from_index: Anchor candle; negative counts from the end.
        to_index: Last candle to compute (inclusive); defaults to the last one.
    """
    p = np.asarray(price, dtype=np.float64)
    v = np.asarray(volume, dtype=np.float64)
    n = check_same_length(p, v)
    out = np.full(n, np.nan, dtype=np.float64)

    start, end = resolve_range(n, int(from_index), to_index)
    if start > end:
        return freeze(out)

    pv = np.nan_to_num(p[start:end + 1] * v[start:end + 1])
    vol = np.nan_to_num(v[start:end + 1])
    cum_pv = np.cumsum(pv)
    cum_vol = np.cumsum(vol)
    segment = np.full(end - start + 1, np.nan)
    np.divide(cum_pv, cum_vol, out=segment, where=cum_vol != 0)
    out[start:end + 1] = segment
    return freeze(out)


class VWAPIndicator(IndicatorBase):
    """
    Anchored Volume Weighted Average Price on ohlc4.

    Default Parameters:
        from_index: 0
        to_index: None
    """

    name = "vwap"
    category = IndicatorCategory.TREND
    required_fields = ["open", "high", "low", "close", "volume"]

    _default_params = {
        "from_index": 0,
        "to_index": None,
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        ohlc4 = (
            self._column(data, "open")
            + self._column(data, "high")
            + self._column(data, "low")
            + self._column(data, "close")
        ) / 4
        values = vwap(ohlc4, self._column(data, "volume"), params["from_index"], params["to_index"])
        return pd.DataFrame({"vwap": values}, index=data.index)
