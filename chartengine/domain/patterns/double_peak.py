"""
Double top / double bottom detection.

A double top is the zigzag sequence

    start (low) -> first peak (high) -> valley floor (low) -> second peak (high)

with two peaks of similar height, a valley clearly below them and clearly
above the start, and halves of comparable duration. Double bottoms are
found by running the same search on the price axis mirrored around zero.

Distances in price are expressed in multiples of the latest ATR.
"""

from __future__ import annotations

from dataclasses import asdict, replace
from typing import Any, List, Optional, Tuple

import numpy as np

from chartengine.utils.logging_setup import get_logger
from chartengine.utils.perf_logger import log_timing
from chartengine.utils.trace_context import get_evaluation_id
from config.config_manager import get_engine_config
from config.models import DoublePeakConfig, DoublePeakParams

from ..exceptions import ConfigurationError
from ..indicators.pattern.zigzag import SwingKind, SwingPoint, find_swing_points
from ..indicators.volatility.atr import backfilled_atr
from ..series.candles import Candles
from ..series.core import horizontal_line
from ..series.sparse import IndexedPoint, interpolate_sparse_series, sparse_series_of
from .models import DoublePeakIndexes, DoublePeakResult

logger = get_logger(__name__)

PEAK_TYPES = ("top", "bottom")

ADAM = "Adam"
EVE = "Eve"


def resolve_double_peak_params(
    time_span: str,
    overrides: Optional[dict] = None,
    config: Optional[DoublePeakConfig] = None,
) -> DoublePeakParams:
    """
    Timespan defaults with keyword overrides applied.

    Raises:
        ConfigurationError: Unknown timespan or override name
    """
    config = config or get_engine_config().double_peak
    try:
        params = config.time_spans[time_span]
    except KeyError:
        raise ConfigurationError("time_span", f"must be one of {sorted(config.time_spans)}, got {time_span!r}") from None

    overrides = overrides or {}
    unknown = set(overrides) - set(asdict(params))
    if unknown:
        raise ConfigurationError(next(iter(sorted(unknown))), "unknown double peak parameter")
    return replace(params, **overrides)


def peak_label(highs: np.ndarray, peak: int, half_width: int, atr: float, threshold: float) -> str:
    """
    Adam (sharp) or Eve (rounded) by the curvature of a quadratic fit.

    The fit covers ``half_width`` candles on both sides of the peak; its
    drop over ``half_width`` candles, in ATR, is compared to ``threshold``.
    """
    lo = max(0, peak - half_width)
    hi = min(len(highs) - 1, peak + half_width)
    x = np.arange(lo, hi + 1) - peak
    y = highs[lo:hi + 1]
    valid = ~np.isnan(y)
    if valid.sum() < 3 or atr <= 0:
        return EVE
    a = np.polyfit(x[valid], y[valid], 2)[0]
    curvature = abs(a) * half_width ** 2 / atr
    return ADAM if curvature >= threshold else EVE


def _score(first: SwingPoint, valley: SwingPoint, second: SwingPoint, atr: float) -> float:
    price_gap = abs(first.price - second.price) / atr
    ratio = (second.index - valley.index) / (valley.index - first.index)
    return -(price_gap + abs(np.log(ratio)))


def _candidates(
    points: List[SwingPoint],
    high: np.ndarray,
    low: np.ndarray,
    atr: float,
    params: DoublePeakParams,
) -> List[Tuple[float, Tuple[SwingPoint, SwingPoint, SwingPoint, SwingPoint], int]]:
    """Every (start, first peak, valley, second peak) passing the constraints, with its score and position."""
    found = []
    for k in range(1, len(points) - 2):
        start, first, valley, second = points[k - 1:k + 3]
        if first.kind is not SwingKind.HIGH:
            continue

        distance = second.index - first.index
        if not params.min_distance <= distance <= params.max_distance:
            continue

        price_gap = abs(first.price - second.price)
        if price_gap > params.price_max_difference_atr * atr:
            continue
        if price_gap > params.price_max_difference_percentage / 100.0 * abs(first.price):
            continue

        if valley.price - start.price < params.min_start_valley_floor_difference * atr:
            continue
        if min(first.price, second.price) - valley.price < params.min_valley_floor_peak_difference * atr:
            continue

        ratio = (second.index - valley.index) / (valley.index - first.index)
        if max(ratio, 1.0 / ratio) > params.max_halves_ratio:
            continue

        height = max(first.price, second.price) - valley.price
        margin = params.relevant_area_threshold * height
        after_high = high[second.index + 1:]
        after_low = low[second.index + 1:]
        if np.any(after_high > max(first.price, second.price) + margin) or np.any(after_low < valley.price - margin):
            continue

        found.append((_score(first, valley, second, atr), (start, first, valley, second), k))
    return found


def find_double_peak_formation(
    candles: Candles,
    peak_type: str = "top",
    time_span: str = "long term",
    config: Optional[DoublePeakConfig] = None,
    **params: Any,
) -> Optional[DoublePeakResult]:
    """
    Best double top or double bottom.

    Args:
        candles: Chart candles
        peak_type: "top" or "bottom"
        time_span: "short term" or "long term"
        config: Double peak configuration (defaults to the engine configuration)
        **params: Overrides of the timespan parameters (max_distance,
            min_distance, price_max_difference_atr, ...)

    Returns:
        DoublePeakResult, or None when no pattern matches

    Example:
        top = find_double_peak_formation(candles, "top", "short term", price_max_difference_percentage=2)
    """
    if peak_type not in PEAK_TYPES:
        raise ConfigurationError("peak_type", f"must be one of {PEAK_TYPES}, got {peak_type!r}")
    config = config or get_engine_config().double_peak
    resolved = resolve_double_peak_params(time_span, params, config)
    eval_id = get_evaluation_id()

    n = len(candles)
    if n < 4:
        return None

    # A double bottom is a double top of the mirrored chart
    sign = 1.0 if peak_type == "top" else -1.0
    if peak_type == "top":
        high, low, close = candles.high, candles.low, candles.close
    else:
        high, low, close = -candles.low, -candles.high, -candles.close

    with log_timing("find_double_peak_formation", extra={"peak_type": peak_type, "time_span": time_span}) as ctx:
        atr_series = backfilled_atr(candles.high, candles.low, candles.close, config.atr_length)
        atr = float(atr_series[-1])
        if not np.isfinite(atr) or atr <= 0:
            logger.debug(f"[{eval_id}] double {peak_type}: no volatility, nothing to measure")
            return None

        points = find_swing_points(
            high, low, resolved.zigzag_depth, resolved.zigzag_deviation, resolved.zigzag_backstep
        )
        found = _candidates(points, high, low, atr, resolved)
        ctx["swings"] = len(points)
        ctx["candidates"] = len(found)

    if not found:
        logger.debug(f"[{eval_id}] No double {peak_type} among {len(points)} swings")
        return None

    score, (start, first, valley, second), position = max(found, key=lambda c: (c[0], c[2]))

    next_swing = points[position + 3] if position + 3 < len(points) else None
    after = close[second.index + 1:]
    below = np.flatnonzero(after < valley.price)
    if len(below):
        last_index = second.index + 1 + int(below[0])
    elif next_swing is not None:
        last_index = next_swing.index
    else:
        last_index = n - 1

    in_force = not np.any(after < valley.price - config.support_break_atr * atr)

    half_width = max(2, min(5, (second.index - first.index) // 4))
    first_label = peak_label(high, first.index, half_width, atr, config.adam_curvature_atr)
    second_label = peak_label(high, second.index, half_width, atr, config.adam_curvature_atr)

    vertices = [start, first, valley, second]
    polyline = [IndexedPoint(sign * p.price, p.index) for p in vertices]
    if last_index > second.index:
        if next_swing is not None and next_swing.index == last_index:
            last_price = next_swing.price
        else:
            last_price = float(close[last_index])
        polyline.append(IndexedPoint(sign * last_price, last_index))

    logger.debug(
        f"[{eval_id}] double {peak_type}: peaks {first.index}/{second.index} valley {valley.index} "
        f"last={last_index} in_force={in_force}"
    )
    return DoublePeakResult(
        peak_type=peak_type,
        pattern_line=interpolate_sparse_series(sparse_series_of(polyline, n), "linear"),
        support_line=horizontal_line(sign * valley.price, n, valley.index),
        indexes=DoublePeakIndexes(
            pattern_start=start.index,
            first_peak=first.index,
            valley_floor=valley.index,
            second_peak=second.index,
            pattern_last_index=last_index,
        ),
        first_peak_label=first_label,
        second_peak_label=second_label,
        in_force=bool(in_force),
        score=float(score),
    )
