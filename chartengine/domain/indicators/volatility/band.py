"""
Bands around a base line.

A band is a pair of lines offset symmetrically around a core line:

- "St.Dev.": multiplier x population standard deviation of a basis series
  (the line by default)
- "Constant": multiplier (in price units)
- "ATR": multiplier x ATR of the candles
- "Percentage": multiplier percent of a basis series (the line by default)

Bollinger Bands are
``compute_band(sma(close, 20), "St.Dev.", 2, 20, deviation_basis=close)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from ...exceptions import ConfigurationError, PreconditionError
from ...series.core import check_same_length, freeze, validate_length
from ..base import IndicatorBase, IndicatorCategory
from ..trend.sma import sma
from .atr import atr
from .stddev import stdev

BAND_TYPES = ("St.Dev.", "Constant", "ATR", "Percentage")


@dataclass(frozen=True, eq=False)
class Band:
    """Upper and lower band lines."""
    upper: np.ndarray
    lower: np.ndarray


def compute_band(
    line: np.ndarray,
    band_type: str = "St.Dev.",
    multiplier: float = 1.0,
    length: int = 2,
    percentage_basis: Optional[np.ndarray] = None,
    deviation_basis: Optional[np.ndarray] = None,
    high: Optional[np.ndarray] = None,
    low: Optional[np.ndarray] = None,
    close: Optional[np.ndarray] = None,
) -> Band:
    """
    Compute a band around ``line``.

    Args:
        line: Core line.
        band_type: One of BAND_TYPES.
        multiplier: Scale applied to the band measure.
        length: Window of the St.Dev./ATR measure.
        percentage_basis: Series the "Percentage" type takes a percent of.
        deviation_basis: Series whose St.Dev. the "St.Dev." type measures.
        high, low, close: Candle series, required by the "ATR" type.

    Raises:
        ConfigurationError: Unknown band type or invalid length.
        PreconditionError: ATR band without candle series.
    """
    if band_type not in BAND_TYPES:
        raise ConfigurationError("band_type", f"must be one of {BAND_TYPES}, got {band_type!r}")
    length = validate_length(length)

    core = np.asarray(line, dtype=np.float64)
    if band_type == "St.Dev.":
        basis = core if deviation_basis is None else np.asarray(deviation_basis, dtype=np.float64)
        check_same_length(core, basis)
        offset = multiplier * stdev(basis, length)
    elif band_type == "Constant":
        offset = np.full(len(core), float(multiplier))
    elif band_type == "ATR":
        if high is None or low is None or close is None:
            raise PreconditionError("ATR band requires high, low and close series")
        check_same_length(core, high, low, close)
        offset = multiplier * atr(high, low, close, length)
    else:
        basis = core if percentage_basis is None else np.asarray(percentage_basis, dtype=np.float64)
        check_same_length(core, basis)
        offset = basis * multiplier / 100.0

    return Band(upper=freeze(core + offset), lower=freeze(core - offset))


class BollingerBandsIndicator(IndicatorBase):
    """
    Bollinger Bands indicator.

    Default Parameters:
        length: 20
        multiplier: 2.0
        source: "close"
    """

    name = "bollinger"
    category = IndicatorCategory.VOLATILITY
    required_fields = []

    _default_params = {
        "length": 20,
        "multiplier": 2.0,
        "source": "close",
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        """Calculate Bollinger Bands values."""
        source = self._column(data, params["source"])
        middle = sma(source, params["length"])
        band = compute_band(middle, "St.Dev.", params["multiplier"], params["length"], deviation_basis=source)
        return pd.DataFrame(
            {"bb_upper": band.upper, "bb_middle": middle, "bb_lower": band.lower},
            index=data.index,
        )
