"""
Hit metrics of a candidate trend line.

Every candle from the line's first anchor to the last candle is classified
against the line with a tolerance of ``touch_tolerance_atr * ATR[i]``:

- above: low > line + tolerance
- below: high < line - tolerance
- touching: otherwise

Consecutive touching candles form a touch cluster. A cluster followed by
a candle above the line is an upward bounce, one followed by a candle below
is a downward bounce. A strict bounce also approaches from the side it
leaves to and never closes across the line while touching.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional

import numpy as np

from ..exceptions import ConfigurationError
from ..series.candles import Candles
from ..indicators.volatility.atr import backfilled_atr

CANDLE_FIELDS = ("high", "low")


@dataclass(frozen=True)
class HitMetrics:
    """Per-line statistics the scoring formula is evaluated on."""

    violations: int
    bounce_down: int
    bounce_up: int
    bounce_down_candles: int
    bounce_up_candles: int
    bounce_down_strict: int
    bounce_up_strict: int
    bounce_down_strict_candles: int
    bounce_up_strict_candles: int
    peaks_down: int
    peaks_up: int
    number: int
    percent: float
    candles_above: int
    candles_below: int
    max_confirmation_distance: int
    slope_percent: float
    length: int
    price_deviation_p25: float
    price_deviation_p50: float
    price_deviation_p75: float
    line_points_base: int
    line_points_weight: float
    trends_accumulated: int

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def _local_extremes(values: np.ndarray, highs: bool) -> np.ndarray:
    """3-bar local maxima (highs) or minima of a series."""
    flags = np.zeros(len(values), dtype=bool)
    if len(values) < 3:
        return flags
    mid, left, right = values[1:-1], values[:-2], values[2:]
    with np.errstate(invalid="ignore"):
        if highs:
            flags[1:-1] = (mid > left) & (mid >= right)
        else:
            flags[1:-1] = (mid < left) & (mid <= right)
    return flags


class HitCounter:
    """
    Measures candidate lines against one chart.

    Precomputes the ATR tolerance and peak flags once so that each line is
    measured with a handful of vectorised operations over its candles.

    Example:
        counter = HitCounter(candles, "low", atr_length=14)
        metrics = counter.measure(10, 101.5, 40, 110.0)
    """

    def __init__(
        self,
        candles: Candles,
        candle_field: str,
        atr_length: int = 14,
        touch_tolerance_atr: float = 0.1,
        base_indexes: Optional[np.ndarray] = None,
        base_prices: Optional[np.ndarray] = None,
        base_weights: Optional[np.ndarray] = None,
    ) -> None:
        if candle_field not in CANDLE_FIELDS:
            raise ConfigurationError("candle_field", f"must be one of {CANDLE_FIELDS}, got {candle_field!r}")
        if not np.isfinite(touch_tolerance_atr) or touch_tolerance_atr < 0:
            raise ConfigurationError("touch_tolerance_atr", f"must be >= 0, got {touch_tolerance_atr!r}")

        self.candle_field = candle_field
        self.high = np.asarray(candles.high, dtype=np.float64)
        self.low = np.asarray(candles.low, dtype=np.float64)
        self.close = np.asarray(candles.close, dtype=np.float64)
        self.field = self.high if candle_field == "high" else self.low
        self.size = len(candles)

        self.atr = backfilled_atr(candles.high, candles.low, candles.close, atr_length)
        self.tolerance = touch_tolerance_atr * self.atr
        self.peak_high = _local_extremes(self.high, highs=True)
        self.peak_low = _local_extremes(self.low, highs=False)

        self.base_indexes = np.asarray(base_indexes if base_indexes is not None else [], dtype=np.int64)
        self.base_prices = np.asarray(base_prices if base_prices is not None else [], dtype=np.float64)
        self.base_weights = np.asarray(base_weights if base_weights is not None else [], dtype=np.float64)

    def measure(
        self,
        from_index: int,
        from_price: float,
        to_index: int,
        to_price: float,
        end_index: Optional[int] = None,
    ) -> HitMetrics:
        """
        Hit metrics of the line through (from_index, from_price) and
        (to_index, to_price), evaluated from from_index to end_index
        (default: the last candle).
        """
        end = self.size - 1 if end_index is None else end_index
        slope = (to_price - from_price) / (to_index - from_index)
        idx = np.arange(from_index, end + 1)
        line = from_price + slope * (idx - from_index)

        high = self.high[from_index:end + 1]
        low = self.low[from_index:end + 1]
        close = self.close[from_index:end + 1]
        tol = self.tolerance[from_index:end + 1]
        valid = ~(np.isnan(high) | np.isnan(low) | np.isnan(close))

        above = valid & (low > line + tol)
        below = valid & (high < line - tol)
        touch = valid & ~above & ~below
        length = len(idx)
        number = int(touch.sum())

        if self.candle_field == "low":
            violations = int((valid & (close < line - tol)).sum())
        else:
            violations = int((valid & (close > line + tol)).sum())

        bounces = self._bounces(touch, above, below, close, line)

        touch_positions = np.flatnonzero(touch)
        max_gap = int(np.diff(touch_positions).max()) if len(touch_positions) >= 2 else 0

        peaks_up = int((touch & self.peak_high[from_index:end + 1]).sum())
        peaks_down = int((touch & self.peak_low[from_index:end + 1]).sum())

        p25, p50, p75 = self._price_deviation(line, from_index, end)
        base_count, base_weight = self._line_points(from_index, from_price, slope)

        return HitMetrics(
            violations=violations,
            peaks_down=peaks_down,
            peaks_up=peaks_up,
            number=number,
            percent=number / length * 100.0 if length else 0.0,
            candles_above=int(above.sum()),
            candles_below=int(below.sum()),
            max_confirmation_distance=max_gap,
            slope_percent=100.0 * slope / from_price if from_price != 0 else float("nan"),
            length=length,
            price_deviation_p25=p25,
            price_deviation_p50=p50,
            price_deviation_p75=p75,
            line_points_base=base_count,
            line_points_weight=base_weight,
            trends_accumulated=base_count * (base_count - 1) // 2,
            **bounces,
        )

    @staticmethod
    def _bounces(
        touch: np.ndarray,
        above: np.ndarray,
        below: np.ndarray,
        close: np.ndarray,
        line: np.ndarray,
    ) -> Dict[str, int]:
        """Count touch clusters by the side the price leaves to."""
        edges = np.diff(np.concatenate(([0], touch.astype(np.int8), [0])))
        starts = np.flatnonzero(edges == 1)
        ends = np.flatnonzero(edges == -1) - 1
        sizes = ends - starts + 1
        m = len(touch)

        after = ends + 1
        has_after = after < m
        after = np.minimum(after, m - 1)
        up = has_after & above[after]
        down = has_after & below[after]

        before = starts - 1
        has_before = before >= 0
        before = np.maximum(before, 0)

        with np.errstate(invalid="ignore"):
            closes_below = np.concatenate(([0], np.cumsum(close < line)))
            closes_above = np.concatenate(([0], np.cumsum(close > line)))
        crossed_down = closes_below[ends + 1] - closes_below[starts]
        crossed_up = closes_above[ends + 1] - closes_above[starts]

        up_strict = up & has_before & above[before] & (crossed_down == 0)
        down_strict = down & has_before & below[before] & (crossed_up == 0)

        return {
            "bounce_up": int(up.sum()),
            "bounce_down": int(down.sum()),
            "bounce_up_candles": int(sizes[up].sum()),
            "bounce_down_candles": int(sizes[down].sum()),
            "bounce_up_strict": int(up_strict.sum()),
            "bounce_down_strict": int(down_strict.sum()),
            "bounce_up_strict_candles": int(sizes[up_strict].sum()),
            "bounce_down_strict_candles": int(sizes[down_strict].sum()),
        }

    def _price_deviation(self, line: np.ndarray, from_index: int, end: int) -> tuple[float, float, float]:
        """Quartiles of |field - line| in ATR units."""
        atr = self.atr[from_index:end + 1]
        distance = np.abs(self.field[from_index:end + 1] - line)
        with np.errstate(divide="ignore", invalid="ignore"):
            deviation = np.where(atr > 0, distance / atr, np.nan)
        deviation = deviation[~np.isnan(deviation)]
        if len(deviation) == 0:
            return float("nan"), float("nan"), float("nan")
        p25, p50, p75 = np.percentile(deviation, [25, 50, 75])
        return float(p25), float(p50), float(p75)

    def _line_points(self, from_index: int, from_price: float, slope: float) -> tuple[int, float]:
        """Base points at or after from_index lying within the touch tolerance."""
        if len(self.base_indexes) == 0:
            return 0, 0.0
        eligible = self.base_indexes >= from_index
        idx = self.base_indexes[eligible]
        expected = from_price + slope * (idx - from_index)
        on_line = np.abs(self.base_prices[eligible] - expected) <= self.tolerance[idx] + 1e-9
        return int(on_line.sum()), float(self.base_weights[eligible][on_line].sum())
