"""
Trend Finder - enumerate, measure and rank candidate trend lines.

Pipeline:
1. Parse the scoring formula (fails before any work is done)
2. Normalise base points and prune them to the candidate cap
3. Enumerate every pair (a, b) with a.index < b.index
4. Measure hit metrics of each line (HitCounter)
5. Score all candidates with the formula in one vectorised pass
6. Sort by score (ties by anchor indexes) and keep the strongest share

Example:
    with new_evaluation():
        trends = find_trends(candles, swing_lows, "low", "bu * 2 - v")
    best = trends[0]
    series = best.to_series(len(candles))
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from chartengine.utils.logging_setup import get_debug_logger, get_logger
from chartengine.utils.perf_logger import log_timing
from chartengine.utils.trace_context import get_evaluation_id
from config.config_manager import get_engine_config
from config.models import TrendScorerConfig

from ..exceptions import ComputationError, ConfigurationError, PreconditionError
from ..series.candles import Candles
from ..series.core import line, validate_length
from .formula import TrendFormula
from .hits import CANDLE_FIELDS, HitCounter, HitMetrics

logger = get_logger(__name__)

DEBUG_CATEGORIES = ("enumeration", "hits", "scoring")

# Budget is checked once per this many measured candidates
_BUDGET_CHECK_EVERY = 256


@dataclass(frozen=True)
class TrendPoint:
    """Anchor candle of a trend line."""

    index: int
    price: float
    weight: float = 1.0


@dataclass(frozen=True)
class CandidateTrendLine:
    """A scored line through two base points."""

    from_point: TrendPoint
    to_point: TrendPoint
    hits: HitMetrics
    score: float

    @property
    def strength(self) -> float:
        return self.score

    @property
    def slope(self) -> float:
        """Price change per candle."""
        return (self.to_point.price - self.from_point.price) / (self.to_point.index - self.from_point.index)

    def value_at(self, index: int) -> float:
        """Line price at a candle index."""
        return self.from_point.price + self.slope * (index - self.from_point.index)

    def to_series(self, length: int, extend_right: bool = True) -> np.ndarray:
        """Line as a Series starting at the first anchor."""
        return line(
            self.from_point.index,
            self.from_point.price,
            self.to_point.index,
            self.to_point.price,
            length,
            extend_right,
        )


BasePoint = Union[int, TrendPoint, Mapping[str, Any]]
DiscardFn = Callable[[TrendPoint, TrendPoint], bool]


def normalize_base_points(points: Iterable[BasePoint], field: np.ndarray) -> List[TrendPoint]:
    """
    Convert base points to TrendPoints priced on the candle field.

    Accepts plain indexes, TrendPoints, mappings with "index" (and
    optionally "weight") and objects exposing ``index``. Points on missing
    candles are skipped; duplicate indexes keep the first occurrence.

    Raises:
        PreconditionError: Index outside the chart.
    """
    n = len(field)
    seen = set()
    result: List[TrendPoint] = []
    for point in points:
        if isinstance(point, Mapping):
            index, weight = point["index"], point.get("weight", 1.0)
        elif isinstance(point, (int, np.integer)) and not isinstance(point, bool):
            index, weight = point, 1.0
        else:
            index, weight = point.index, getattr(point, "weight", 1.0)

        if isinstance(index, bool) or int(index) != index:
            raise PreconditionError(f"Base point index must be an integer, got {index!r}")
        index = int(index)
        if not 0 <= index < n:
            raise PreconditionError(f"Base point index {index} outside chart of {n} candles")
        if index in seen or np.isnan(field[index]):
            continue
        seen.add(index)
        result.append(TrendPoint(index, float(field[index]), float(weight)))

    result.sort(key=lambda p: p.index)
    return result


def prune_base_points(points: Sequence[TrendPoint], max_candidates: int) -> List[TrendPoint]:
    """
    Keep the k highest (weight, index) points where k(k-1)/2 <= max_candidates.

    Returns the kept points in index order.
    """
    count = len(points)
    if count * (count - 1) // 2 <= max_candidates:
        return list(points)

    k = int((1 + math.sqrt(1 + 8 * max_candidates)) / 2)
    while k * (k - 1) // 2 > max_candidates:
        k -= 1
    kept = sorted(points, key=lambda p: (p.weight, p.index), reverse=True)[:k]
    return sorted(kept, key=lambda p: p.index)


def _metric_columns(metrics: Sequence[HitMetrics]) -> dict:
    if not metrics:
        return {}
    names = metrics[0].as_dict().keys()
    return {name: np.array([getattr(m, name) for m in metrics], dtype=np.float64) for name in names}


def score_lines(
    counter: HitCounter,
    pairs: Sequence[Tuple[TrendPoint, TrendPoint]],
    formula: TrendFormula,
    end_index: Optional[int] = None,
    deadline: Optional[float] = None,
) -> List[CandidateTrendLine]:
    """
    Measure and score candidate lines.

    Every candidate is kept. The result is sorted by score descending, ties
    broken by (from.index, to.index); non-finite scores (e.g. x / 0) rank
    after all finite ones.

    Raises:
        ComputationError: ``deadline`` (a time.monotonic() value) passed.
    """
    metrics: List[HitMetrics] = []
    for count, (a, b) in enumerate(pairs):
        if deadline is not None and count % _BUDGET_CHECK_EVERY == 0 and time.monotonic() > deadline:
            raise ComputationError(f"Trend scoring exceeded its time budget after {count} candidates")
        metrics.append(counter.measure(a.index, a.price, b.index, b.price, end_index))

    if not metrics:
        return []

    scores = np.broadcast_to(formula.evaluate(_metric_columns(metrics)), (len(metrics),))
    lines = [
        CandidateTrendLine(a, b, hits, float(score))
        for (a, b), hits, score in zip(pairs, metrics, scores)
    ]
    lines.sort(key=_rank_key)
    return lines


def _rank_key(candidate: CandidateTrendLine) -> Tuple[bool, float, int, int]:
    finite = bool(np.isfinite(candidate.score))
    return (not finite, -candidate.score if finite else 0.0, candidate.from_point.index, candidate.to_point.index)


def find_trends(
    candles: Candles,
    base_points: Iterable[BasePoint],
    candle_field: str,
    formula: Union[str, TrendFormula],
    strongest_trends_percentage: float = 0.1,
    atr_length: int = 14,
    discard: Optional[DiscardFn] = None,
    debug_category: Optional[str] = None,
    config: Optional[TrendScorerConfig] = None,
) -> List[CandidateTrendLine]:
    """
    Find the strongest trend lines through pairs of base points.

    Args:
        candles: Chart candles
        base_points: Anchor candidates (indexes, TrendPoints or {index, weight})
        candle_field: "high" (resistance lines) or "low" (support lines)
        formula: Scoring formula, e.g. "hits.bu * 2 - v"
        strongest_trends_percentage: Share of scored candidates returned, in (0, 1]
        atr_length: ATR length for the touch tolerance
        discard: Predicate removing candidate (from, to) pairs before measuring
        debug_category: Emit DEBUG logs for one of "enumeration", "hits", "scoring"
        config: Scorer limits (defaults to the engine configuration)

    Returns:
        Candidates sorted by score descending

    Raises:
        FormulaError: Formula does not parse
        ConfigurationError: Invalid parameter
        PreconditionError: Base point outside the chart
        ComputationError: Time budget exhausted
    """
    parsed = formula if isinstance(formula, TrendFormula) else TrendFormula.parse(formula)

    if candle_field not in CANDLE_FIELDS:
        raise ConfigurationError("candle_field", f"must be one of {CANDLE_FIELDS}, got {candle_field!r}")
    if (
        isinstance(strongest_trends_percentage, bool)
        or not np.isfinite(strongest_trends_percentage)
        or not 0 < strongest_trends_percentage <= 1
    ):
        raise ConfigurationError(
            "strongest_trends_percentage", f"must be within (0, 1], got {strongest_trends_percentage!r}"
        )
    atr_length = validate_length(atr_length, "atr_length")
    if debug_category is not None and debug_category not in DEBUG_CATEGORIES:
        raise ConfigurationError("debug_category", f"must be one of {DEBUG_CATEGORIES}, got {debug_category!r}")

    config = config or get_engine_config().trends
    debug = get_debug_logger("trends", debug_category) if debug_category else None
    eval_id = get_evaluation_id()

    with log_timing("find_trends") as ctx:
        field = candles.series(candle_field)
        points = normalize_base_points(base_points, field)
        kept = prune_base_points(points, config.max_candidates)
        if len(kept) < len(points):
            logger.info(
                f"[{eval_id}] Pruned base points {len(points)} -> {len(kept)} "
                f"(max_candidates={config.max_candidates})"
            )

        pairs = [
            (a, b)
            for i, a in enumerate(kept)
            for b in kept[i + 1:]
            if discard is None or not discard(a, b)
        ]
        if debug_category == "enumeration":
            debug.debug(f"[{eval_id}] {len(kept)} base points, {len(pairs)} candidate pairs")

        counter = HitCounter(
            candles,
            candle_field,
            atr_length,
            config.touch_tolerance_atr,
            base_indexes=np.array([p.index for p in kept], dtype=np.int64),
            base_prices=np.array([p.price for p in kept], dtype=np.float64),
            base_weights=np.array([p.weight for p in kept], dtype=np.float64),
        )
        deadline = time.monotonic() + config.max_seconds
        scored = score_lines(counter, pairs, parsed, deadline=deadline)

        if debug_category == "hits":
            for candidate in scored:
                debug.debug(
                    f"[{eval_id}] {candidate.from_point.index}->{candidate.to_point.index}: {candidate.hits}"
                )

        count = math.ceil(strongest_trends_percentage * len(scored))
        result = scored[:count]

        if debug_category == "scoring":
            for candidate in result:
                debug.debug(
                    f"[{eval_id}] {candidate.from_point.index}->{candidate.to_point.index} "
                    f"score={candidate.score:.4f}"
                )

        ctx["candidates"] = len(pairs)
        ctx["scored"] = len(scored)
        ctx["returned"] = len(result)

    logger.debug(f"[{eval_id}] find_trends({candle_field}): {len(result)}/{len(pairs)} candidates kept")
    return result
