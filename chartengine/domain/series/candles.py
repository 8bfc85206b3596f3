"""
Candle context.

Bundles the OHLCV series of one chart together with the convenience
series derived from them. Derived series are computed once at
construction and are read-only like every other Series.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from ..exceptions import PreconditionError
from .core import as_series, check_same_length, freeze

REQUIRED_COLUMNS = ["open", "high", "low", "close"]


@dataclass(frozen=True, eq=False)
class Candles:
    """
    OHLCV candles of one chart, oldest first.

    Attributes:
        time: Timestamps (any monotonically increasing numeric unit)
        open, high, low, close, volume: Price/volume series
        hl2, oc2, hlc3, ohlc4, wclose, body_top, body_bottom: Derived series
    """

    time: np.ndarray
    open: np.ndarray
    high: np.ndarray
    low: np.ndarray
    close: np.ndarray
    volume: np.ndarray
    hl2: np.ndarray = field(init=False, repr=False)
    oc2: np.ndarray = field(init=False, repr=False)
    hlc3: np.ndarray = field(init=False, repr=False)
    ohlc4: np.ndarray = field(init=False, repr=False)
    wclose: np.ndarray = field(init=False, repr=False)
    body_top: np.ndarray = field(init=False, repr=False)
    body_bottom: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        for name in ("time", "open", "high", "low", "close", "volume"):
            object.__setattr__(self, name, as_series(getattr(self, name)))
        check_same_length(self.time, self.open, self.high, self.low, self.close, self.volume)

        o, h, l, c = self.open, self.high, self.low, self.close
        derived = {
            "hl2": (h + l) / 2,
            "oc2": (o + c) / 2,
            "hlc3": (h + l + c) / 3,
            "ohlc4": (o + h + l + c) / 4,
            "wclose": (h + l + 2 * c) / 4,
            "body_top": np.maximum(o, c),
            "body_bottom": np.minimum(o, c),
        }
        for name, values in derived.items():
            object.__setattr__(self, name, freeze(np.asarray(values, dtype=np.float64)))

    def __len__(self) -> int:
        return len(self.close)

    def series(self, name: str) -> np.ndarray:
        """Get a candle series by name (e.g. "high", "hlc3")."""
        if name not in self.__dataclass_fields__:
            raise PreconditionError(f"Unknown candle field: {name}")
        return getattr(self, name)

    @classmethod
    def from_arrays(
        cls,
        open: Sequence[float],
        high: Sequence[float],
        low: Sequence[float],
        close: Sequence[float],
        volume: Optional[Sequence[float]] = None,
        time: Optional[Sequence[float]] = None,
    ) -> "Candles":
        """Build candles from plain sequences; time defaults to 0..n-1, volume to zeros."""
        n = len(close)
        return cls(
            time=np.arange(n, dtype=np.float64) if time is None else time,
            open=open,
            high=high,
            low=low,
            close=close,
            volume=np.zeros(n) if volume is None else volume,
        )

    @classmethod
    def from_frame(cls, data: pd.DataFrame) -> "Candles":
        """
        Build candles from a DataFrame with OHLCV columns.

        A "time" column is used when present, otherwise a DatetimeIndex is
        converted to epoch seconds, otherwise positions are used.

        Raises:
            PreconditionError: If a required column is missing.
        """
        missing = [col for col in REQUIRED_COLUMNS if col not in data.columns]
        if missing:
            raise PreconditionError(f"Missing required columns: {missing}")

        if "time" in data.columns:
            time = data["time"].values.astype(np.float64)
        elif isinstance(data.index, pd.DatetimeIndex):
            time = np.array([ts.timestamp() for ts in data.index], dtype=np.float64)
        else:
            time = np.arange(len(data), dtype=np.float64)

        volume = data["volume"].values if "volume" in data.columns else np.zeros(len(data))
        return cls(
            time=time,
            open=data["open"].values.astype(np.float64),
            high=data["high"].values.astype(np.float64),
            low=data["low"].values.astype(np.float64),
            close=data["close"].values.astype(np.float64),
            volume=np.asarray(volume, dtype=np.float64),
        )

    def to_frame(self) -> pd.DataFrame:
        """Convert back to a DataFrame with time/open/high/low/close/volume columns."""
        return pd.DataFrame({
            "time": self.time,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        })
