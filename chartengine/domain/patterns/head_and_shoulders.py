"""
Head and shoulders detection.

The pattern is built from consecutive zigzag swings:

    start (low), left shoulder (high), left trough (low), head (high),
    right trough (low), right shoulder (high), end (low)

The end falls back to the last candle when the right shoulder is the last
swing. The inverse pattern is the same topology on the mirrored chart.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from chartengine.utils.logging_setup import get_logger
from chartengine.utils.perf_logger import timed
from chartengine.utils.trace_context import get_evaluation_id
from config.config_manager import get_engine_config
from config.models import HeadAndShouldersConfig

from ..exceptions import ConfigurationError
from ..indicators.pattern.zigzag import SwingKind, SwingPoint, find_swing_points
from ..series.candles import Candles
from ..series.core import line
from ..series.sparse import IndexedPoint, interpolate_sparse_series, sparse_series_of
from .models import HeadAndShouldersIndexes, HeadAndShouldersResult

logger = get_logger(__name__)


def _neck_price(left_trough: SwingPoint, right_trough: SwingPoint, index: int) -> float:
    slope = (right_trough.price - left_trough.price) / (right_trough.index - left_trough.index)
    return left_trough.price + slope * (index - left_trough.index)


def _score(ls: SwingPoint, lt: SwingPoint, head: SwingPoint, rt: SwingPoint, rs: SwingPoint) -> float:
    """Negative asymmetry of the shoulders in price and in time."""
    height = head.price - min(lt.price, rt.price)
    price_asymmetry = abs(ls.price - rs.price) / height if height > 0 else float("inf")
    left_span = head.index - ls.index
    right_span = rs.index - head.index
    time_asymmetry = abs(left_span - right_span) / (rs.index - ls.index)
    return -(price_asymmetry + time_asymmetry)


@timed("find_head_and_shoulders")
def find_head_and_shoulders(
    candles: Candles,
    depth: Optional[int] = None,
    deviation: Optional[float] = None,
    backstep: Optional[int] = None,
    inverse: bool = False,
    head_height: Optional[float] = None,
    config: Optional[HeadAndShouldersConfig] = None,
) -> Optional[HeadAndShouldersResult]:
    """
    Best head and shoulders pattern.

    Args:
        candles: Chart candles
        depth, deviation, backstep: ZigZag parameters (defaults 11, 0.01, 2)
        inverse: Search for inverse head and shoulders
        head_height: Minimum head excess over the shoulders, as a multiple
            of the left leg (left shoulder - start)
        config: Defaults for unset parameters (defaults to the engine configuration)

    Returns:
        HeadAndShouldersResult, or None when no pattern matches
    """
    defaults = config or get_engine_config().head_and_shoulders
    depth = defaults.depth if depth is None else depth
    deviation = defaults.deviation if deviation is None else deviation
    backstep = defaults.backstep if backstep is None else backstep
    head_height = defaults.head_height if head_height is None else head_height
    if isinstance(head_height, bool) or not np.isfinite(head_height) or head_height < 0:
        raise ConfigurationError("head_height", f"must be a finite number >= 0, got {head_height!r}")

    eval_id = get_evaluation_id()
    n = len(candles)
    sign = -1.0 if inverse else 1.0
    if inverse:
        high, low, close = -candles.low, -candles.high, -candles.close
    else:
        high, low, close = candles.high, candles.low, candles.close

    points = find_swing_points(high, low, depth, deviation, backstep)

    best: Optional[Tuple[float, int, List[SwingPoint]]] = None
    for k in range(1, len(points) - 4):
        start, ls, lt, head, rt, rs = points[k - 1:k + 5]
        if ls.kind is not SwingKind.HIGH:
            continue

        if k + 5 < len(points):
            end = points[k + 5]
        elif rs.index < n - 1 and not np.isnan(close[n - 1]):
            end = SwingPoint(n - 1, float(close[n - 1]), SwingKind.LOW)
        else:
            continue

        margin = head_height * (ls.price - start.price)
        if head.price <= ls.price + margin or head.price <= rs.price + margin:
            continue
        if ls.price <= _neck_price(lt, rt, ls.index) or rs.price <= _neck_price(lt, rt, rs.index):
            continue

        score = _score(ls, lt, head, rt, rs)
        if best is None or (score, head.index) > (best[0], best[1]):
            best = (score, head.index, [start, ls, lt, head, rt, rs, end])

    if best is None:
        logger.debug(f"[{eval_id}] No {'inverse ' if inverse else ''}head and shoulders among {len(points)} swings")
        return None

    score, _, pattern = best
    start, ls, lt, head, rt, rs, end = pattern
    polyline = [IndexedPoint(sign * p.price, p.index) for p in pattern]

    logger.debug(
        f"[{eval_id}] head and shoulders: shoulders {ls.index}/{rs.index} head {head.index} score={score:.3f}"
    )
    return HeadAndShouldersResult(
        inverse=inverse,
        pattern_line=interpolate_sparse_series(sparse_series_of(polyline, n), "linear"),
        neck_line=line(lt.index, sign * lt.price, rt.index, sign * rt.price, n),
        indexes=HeadAndShouldersIndexes(
            start=start.index,
            left_shoulder=ls.index,
            left_trough=lt.index,
            head=head.index,
            right_trough=rt.index,
            right_shoulder=rs.index,
            end=end.index,
        ),
        score=score,
    )
