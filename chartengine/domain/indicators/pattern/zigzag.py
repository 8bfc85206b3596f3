"""
ZigZag Extractor.

Reduces high/low series to an alternating sequence of swing highs and
swing lows.

Scan (left to right, one tentative extreme at a time):
1. Seeding: track the running highest high and lowest low; once they are
   ``depth`` candles apart and the move between them is at least
   ``deviation`` percent, the earlier one becomes the first swing and the
   later one the tentative swing.
2. A superior extreme on the tentative swing's side replaces it.
3. An opposite extreme at least ``depth`` candles after the tentative
   swing, moving at least ``deviation`` percent away from it, confirms the
   tentative swing and becomes the new tentative swing.
4. For ``backstep`` candles after a confirmation, a superior extreme on the
   confirmed swing's side retracts the confirmation: the new opposite swing
   is dropped and the confirmed swing moves to that candle. After that
   grace period the swing is final.

The output ends with the current tentative swing. Charts too short to seed
a first swing pair yield an empty list.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from config.config_manager import get_engine_config

from ...exceptions import ConfigurationError
from ...series.core import check_same_length, freeze, validate_length
from ...series.sparse import interpolate_sparse_series
from ..base import IndicatorBase, IndicatorCategory


class SwingKind(Enum):
    """Swing direction."""

    HIGH = "high"
    LOW = "low"

    @property
    def opposite(self) -> "SwingKind":
        return SwingKind.LOW if self is SwingKind.HIGH else SwingKind.HIGH


@dataclass(frozen=True)
class SwingPoint:
    """A detected swing high or low."""

    index: int
    price: float
    kind: SwingKind


@dataclass(frozen=True)
class ZigZagPoints:
    """Swing point indexes split by kind, plus the ordered points."""

    high_indexes: List[int]
    low_indexes: List[int]
    points: List[SwingPoint]


def _move_percent(base: float, price: float) -> float:
    if base == 0:
        return 0.0 if price == base else float("inf")
    return abs(price - base) / abs(base) * 100.0


class ZigZagExtractor:
    """
    Extracts alternating swing points from high/low series.

    Example:
        extractor = ZigZagExtractor(depth=5, deviation=1.0, backstep=2)
        swings = extractor.extract(candles.high, candles.low)
    """

    def __init__(
        self,
        depth: Optional[int] = None,
        deviation: Optional[float] = None,
        backstep: Optional[int] = None,
    ) -> None:
        """
        Initialize the extractor.

        Args:
            depth: Minimum candles between a swing and the opposite swing confirming it
            deviation: Minimum percent move between consecutive swings
            backstep: Candles after a confirmation during which it can be revised

        Parameters left as None come from the ``zigzag`` section of the
        engine configuration.
        """
        defaults = get_engine_config().zigzag
        depth = defaults.depth if depth is None else depth
        deviation = defaults.deviation if deviation is None else deviation
        backstep = defaults.backstep if backstep is None else backstep

        self.depth = validate_length(depth, "depth")
        if isinstance(deviation, bool) or not np.isfinite(deviation) or deviation < 0:
            raise ConfigurationError("deviation", f"must be a finite number >= 0, got {deviation!r}")
        self.deviation = float(deviation)
        self.backstep = validate_length(backstep, "backstep", minimum=0)

    def extract(self, high: np.ndarray, low: np.ndarray) -> List[SwingPoint]:
        """
        Identify swing highs and lows.

        Args:
            high: Series of high prices
            low: Series of low prices

        Returns:
            SwingPoints in chronological order, strictly alternating kind
        """
        h = np.asarray(high, dtype=np.float64)
        l = np.asarray(low, dtype=np.float64)
        n = check_same_length(h, l)
        valid = ~(np.isnan(h) | np.isnan(l))

        points: List[SwingPoint] = []
        tentative: Optional[SwingPoint] = None

        # Seeding
        hi_idx = lo_idx = -1
        i = 0
        while i < n and tentative is None:
            if valid[i]:
                if hi_idx < 0 or h[i] > h[hi_idx]:
                    hi_idx = i
                if lo_idx < 0 or l[i] < l[lo_idx]:
                    lo_idx = i
                if abs(hi_idx - lo_idx) >= self.depth:
                    low_point = SwingPoint(lo_idx, float(l[lo_idx]), SwingKind.LOW)
                    high_point = SwingPoint(hi_idx, float(h[hi_idx]), SwingKind.HIGH)
                    first, second = (low_point, high_point) if lo_idx < hi_idx else (high_point, low_point)
                    if _move_percent(first.price, second.price) >= self.deviation:
                        points.append(first)
                        tentative = second
            i += 1

        if tentative is None:
            return []

        opposite: Optional[SwingPoint] = None
        grace_until = -1

        for i in range(i, n):
            if not valid[i]:
                continue

            # Backstep grace period: revise the last confirmed swing
            if i <= grace_until:
                confirmed = points[-1]
                if confirmed.kind is SwingKind.HIGH and h[i] > confirmed.price:
                    points.pop()
                    tentative = SwingPoint(i, float(h[i]), SwingKind.HIGH)
                    opposite = None
                    grace_until = -1
                    continue
                if confirmed.kind is SwingKind.LOW and l[i] < confirmed.price:
                    points.pop()
                    tentative = SwingPoint(i, float(l[i]), SwingKind.LOW)
                    opposite = None
                    grace_until = -1
                    continue

            # Superior extreme on the tentative side
            if tentative.kind is SwingKind.HIGH and h[i] > tentative.price:
                tentative = SwingPoint(i, float(h[i]), SwingKind.HIGH)
                opposite = None
                continue
            if tentative.kind is SwingKind.LOW and l[i] < tentative.price:
                tentative = SwingPoint(i, float(l[i]), SwingKind.LOW)
                opposite = None
                continue

            # Opposite extreme far enough away
            if i - tentative.index < self.depth:
                continue
            if tentative.kind is SwingKind.HIGH:
                if opposite is None or l[i] < opposite.price:
                    opposite = SwingPoint(i, float(l[i]), SwingKind.LOW)
            elif opposite is None or h[i] > opposite.price:
                opposite = SwingPoint(i, float(h[i]), SwingKind.HIGH)

            if _move_percent(tentative.price, opposite.price) >= self.deviation:
                points.append(tentative)
                tentative = opposite
                opposite = None
                grace_until = i + self.backstep

        points.append(tentative)
        return points


def find_swing_points(
    high: np.ndarray,
    low: np.ndarray,
    depth: Optional[int] = None,
    deviation: Optional[float] = None,
    backstep: Optional[int] = None,
) -> List[SwingPoint]:
    """Alternating swing points of the high/low series."""
    return ZigZagExtractor(depth, deviation, backstep).extract(high, low)


def zigzag_points(
    high: np.ndarray,
    low: np.ndarray,
    depth: Optional[int] = None,
    deviation: Optional[float] = None,
    backstep: Optional[int] = None,
) -> ZigZagPoints:
    """
    Swing point indexes split into highs and lows.

    Example:
        zz = zigzag_points(candles.high, candles.low)
        for index in zz.high_indexes:
            ...
    """
    points = find_swing_points(high, low, depth, deviation, backstep)
    return ZigZagPoints(
        high_indexes=[p.index for p in points if p.kind is SwingKind.HIGH],
        low_indexes=[p.index for p in points if p.kind is SwingKind.LOW],
        points=points,
    )


def swing_line(points: List[SwingPoint], length: int) -> np.ndarray:
    """Series connecting swing points with straight segments."""
    sparse = np.full(length, np.nan, dtype=np.float64)
    for point in points:
        sparse[point.index] = point.price
    return interpolate_sparse_series(freeze(sparse), "linear")


def zigzag(
    high: np.ndarray,
    low: np.ndarray,
    depth: Optional[int] = None,
    deviation: Optional[float] = None,
    backstep: Optional[int] = None,
) -> np.ndarray:
    """ZigZag line through the swing points (missing outside the first/last swing)."""
    points = find_swing_points(high, low, depth, deviation, backstep)
    return swing_line(points, len(np.asarray(high)))


class ZigZagIndicator(IndicatorBase):
    """
    ZigZag line on high/low.

    Default Parameters:
        depth, deviation, backstep: None, resolved from the zigzag
            configuration section (20, 1.0, 2 when not configured)
    """

    name = "zigzag"
    category = IndicatorCategory.PATTERN
    required_fields = ["high", "low"]

    _default_params = {
        "depth": None,
        "deviation": None,
        "backstep": None,
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        values = zigzag(
            self._column(data, "high"),
            self._column(data, "low"),
            params["depth"],
            params["deviation"],
            params["backstep"],
        )
        return pd.DataFrame({"zigzag": values}, index=data.index)
