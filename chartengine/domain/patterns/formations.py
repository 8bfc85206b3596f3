"""
Two-line formations: channels, broadening formations, triangles and wedges.

Search pipeline (shared by all four):
1. Window: the last ``lookback`` candles of the timespan
2. ZigZag swings inside the window; swing highs plus the window's first and
   last candle anchor top lines, swing lows plus the same candles anchor
   bottom lines
3. Candidate lines through every anchor pair, scored with the trend
   formula of the formation config and filtered by touches/violations
4. Every top/bottom combination is classified by its slopes (ATR per
   candle at the last candle) and tested against the shape
5. The best combination by score wins, ties going to the latest start

Slope classes:
    flat  |s| <= flat_slope_tolerance
    up    s > flat_slope_tolerance
    down  s < -flat_slope_tolerance

Line relation (top slope minus bottom slope):
    parallel    |d| <= parallel_tolerance
    diverging   d > parallel_tolerance
    converging  d < -parallel_tolerance
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from chartengine.utils.logging_setup import get_logger
from chartengine.utils.perf_logger import log_timing
from chartengine.utils.trace_context import get_evaluation_id
from config.config_manager import get_engine_config
from config.models import FormationConfig, TimeSpanConfig

from ..exceptions import ConfigurationError
from ..indicators.pattern.zigzag import SwingKind, find_swing_points
from ..series.candles import Candles
from ..series.core import line
from ..trends.finder import CandidateTrendLine, TrendPoint, score_lines
from ..trends.formula import TrendFormula
from ..trends.hits import HitCounter
from .models import FormationResult

logger = get_logger(__name__)

FLAT = "flat"
UP = "up"
DOWN = "down"

PARALLEL = "parallel"
DIVERGING = "diverging"
CONVERGING = "converging"

# shape(top direction, bottom direction, top slope, bottom slope, tolerance) -> match
ShapeTest = Callable[[str, str, float, float, float], bool]


def slope_direction(slope: float, tolerance: float) -> str:
    """Classify an ATR-normalised slope."""
    if abs(slope) <= tolerance:
        return FLAT
    return UP if slope > 0 else DOWN


def line_relation(top_slope: float, bottom_slope: float, tolerance: float) -> str:
    """Classify how two lines develop relative to each other."""
    difference = top_slope - bottom_slope
    if abs(difference) <= tolerance:
        return PARALLEL
    return DIVERGING if difference > 0 else CONVERGING


def _opposite_sum_is_symmetric(top: float, bottom: float, tolerance: float) -> bool:
    return abs(top + bottom) <= tolerance


CHANNEL_TYPES: Dict[str, ShapeTest] = {
    "ascending": lambda t, b, ts, bs, tol: t == UP and b == UP,
    "descending": lambda t, b, ts, bs, tol: t == DOWN and b == DOWN,
    "horizontal": lambda t, b, ts, bs, tol: t == FLAT and b == FLAT,
}

BROADENING_TYPES: Dict[str, ShapeTest] = {
    "ascending": lambda t, b, ts, bs, tol: t == UP and b == UP,
    "descending": lambda t, b, ts, bs, tol: t == DOWN and b == DOWN,
    "symmetrical": lambda t, b, ts, bs, tol: t == UP and b == DOWN and _opposite_sum_is_symmetric(ts, bs, tol),
    "asymmetrical": lambda t, b, ts, bs, tol: t == UP and b == DOWN and not _opposite_sum_is_symmetric(ts, bs, tol),
}

RIGHT_ANGLED_BROADENING_TYPES: Dict[str, ShapeTest] = {
    "ascending": lambda t, b, ts, bs, tol: t == UP and b == FLAT,
    "descending": lambda t, b, ts, bs, tol: t == FLAT and b == DOWN,
    "symmetrical": lambda t, b, ts, bs, tol: False,
    "asymmetrical": lambda t, b, ts, bs, tol: False,
}

TRIANGLE_TYPES: Dict[str, ShapeTest] = {
    "ascending": lambda t, b, ts, bs, tol: t == FLAT and b == UP,
    "descending": lambda t, b, ts, bs, tol: t == DOWN and b == FLAT,
    "symmetrical": lambda t, b, ts, bs, tol: t == DOWN and b == UP,
}
TRIANGLE_TYPES["all"] = lambda t, b, ts, bs, tol: any(
    test(t, b, ts, bs, tol) for test in list(TRIANGLE_TYPES.values())[:3]
)

WEDGE_TYPES: Dict[str, ShapeTest] = {
    "rising": lambda t, b, ts, bs, tol: t == UP and b == UP,
    "falling": lambda t, b, ts, bs, tol: t == DOWN and b == DOWN,
}


def _resolve_time_span(config: FormationConfig, time_span: str) -> TimeSpanConfig:
    try:
        return config.time_spans[time_span]
    except KeyError:
        raise ConfigurationError("time_span", f"must be one of {sorted(config.time_spans)}, got {time_span!r}") from None


def _resolve_type(types: Dict[str, ShapeTest], parameter: str, value: str) -> ShapeTest:
    try:
        return types[value]
    except KeyError:
        raise ConfigurationError(parameter, f"must be one of {sorted(types)}, got {value!r}") from None


def _anchor_pairs(indexes: List[int], prices: np.ndarray) -> List[Tuple[TrendPoint, TrendPoint]]:
    points = [TrendPoint(i, float(prices[i])) for i in sorted(set(indexes)) if not np.isnan(prices[i])]
    return [(a, b) for k, a in enumerate(points) for b in points[k + 1:]]


def _side_lines(
    counter: HitCounter,
    pairs: List[Tuple[TrendPoint, TrendPoint]],
    formula: TrendFormula,
    config: FormationConfig,
) -> List[CandidateTrendLine]:
    """Score one side's candidate lines and keep the acceptable best."""
    accepted = [
        candidate
        for candidate in score_lines(counter, pairs, formula)
        if np.isfinite(candidate.score)
        and candidate.hits.number >= config.min_touches
        and candidate.hits.violations / candidate.hits.length * 100.0 <= config.max_violations_percent
    ]
    return accepted[:config.max_lines_per_side]


def _find_formation(
    candles: Candles,
    formation: str,
    variant: str,
    time_span: str,
    shape: ShapeTest,
    relation: str,
    config: Optional[FormationConfig] = None,
) -> Optional[FormationResult]:
    """Run the shared search and return the best combination matching ``shape`` and ``relation``."""
    config = config or get_engine_config().formations
    span = _resolve_time_span(config, time_span)
    eval_id = get_evaluation_id()

    n = len(candles)
    if n < 3:
        return None

    with log_timing(f"find_{formation}", extra={"variant": variant, "time_span": time_span}) as ctx:
        start = max(0, n - span.lookback)
        end = n - 1
        swings = find_swing_points(
            candles.high[start:],
            candles.low[start:],
            span.zigzag_depth,
            span.zigzag_deviation,
            span.zigzag_backstep,
        )
        top_anchors = [start + p.index for p in swings if p.kind is SwingKind.HIGH] + [start, end]
        bottom_anchors = [start + p.index for p in swings if p.kind is SwingKind.LOW] + [start, end]

        formula = TrendFormula.parse(config.line_formula)
        tolerance_atr = get_engine_config().trends.touch_tolerance_atr
        top_counter = HitCounter(candles, "high", config.atr_length, tolerance_atr)
        bottom_counter = HitCounter(candles, "low", config.atr_length, tolerance_atr)

        tops = _side_lines(top_counter, _anchor_pairs(top_anchors, top_counter.high), formula, config)
        bottoms = _side_lines(bottom_counter, _anchor_pairs(bottom_anchors, bottom_counter.low), formula, config)
        ctx["tops"] = len(tops)
        ctx["bottoms"] = len(bottoms)

        scale = top_counter.atr[end]
        if not np.isfinite(scale) or scale <= 0:
            logger.debug(f"[{eval_id}] {formation}: no volatility at the last candle, nothing to classify")
            return None

        best: Optional[Tuple[float, int, CandidateTrendLine, CandidateTrendLine]] = None
        for top in tops:
            top_slope = top.slope / scale
            top_direction = slope_direction(top_slope, config.flat_slope_tolerance)
            for bottom in bottoms:
                bottom_slope = bottom.slope / scale
                if line_relation(top_slope, bottom_slope, config.parallel_tolerance) != relation:
                    continue
                bottom_direction = slope_direction(bottom_slope, config.flat_slope_tolerance)
                if not shape(top_direction, bottom_direction, top_slope, bottom_slope, config.parallel_tolerance):
                    continue

                pattern_start = min(top.from_point.index, bottom.from_point.index)
                if top.value_at(pattern_start) < bottom.value_at(pattern_start):
                    continue
                if top.value_at(end) < bottom.value_at(end):
                    continue

                score = top.score + bottom.score
                if best is None or (score, pattern_start) > (best[0], best[1]):
                    best = (score, pattern_start, top, bottom)

    if best is None:
        logger.debug(f"[{eval_id}] No {variant} {formation} in {time_span} window")
        return None

    score, pattern_start, top, bottom = best
    logger.debug(
        f"[{eval_id}] {variant} {formation}: start={pattern_start} "
        f"top={top.from_point.index}->{top.to_point.index} "
        f"bottom={bottom.from_point.index}->{bottom.to_point.index} score={score:.2f}"
    )
    return FormationResult(
        formation=formation,
        variant=variant,
        time_span=time_span,
        top_line=line(pattern_start, top.value_at(pattern_start), top.to_point.index, top.to_point.price, n),
        bottom_line=line(
            pattern_start, bottom.value_at(pattern_start), bottom.to_point.index, bottom.to_point.price, n
        ),
        top=top,
        bottom=bottom,
        top_slope=top.slope / scale,
        bottom_slope=bottom.slope / scale,
        start_index=pattern_start,
        score=score,
    )


def find_channel(
    candles: Candles,
    time_span: str = "short",
    channel_type: str = "ascending",
    config: Optional[FormationConfig] = None,
) -> Optional[FormationResult]:
    """
    Best channel: two parallel lines.

    Args:
        candles: Chart candles
        time_span: "short" or "long"
        channel_type: "ascending", "descending" or "horizontal"

    Returns:
        FormationResult, or None when no channel matches
    """
    shape = _resolve_type(CHANNEL_TYPES, "channel_type", channel_type)
    return _find_formation(candles, "channel", channel_type, time_span, shape, PARALLEL, config)


def find_broadening(
    candles: Candles,
    time_span: str = "short",
    broadening_type: str = "ascending",
    right_angled: bool = False,
    config: Optional[FormationConfig] = None,
) -> Optional[FormationResult]:
    """
    Best broadening formation: two diverging lines.

    With ``right_angled`` one of the lines must be flat; only "ascending"
    (flat bottom) and "descending" (flat top) can then match.
    """
    types = RIGHT_ANGLED_BROADENING_TYPES if right_angled else BROADENING_TYPES
    shape = _resolve_type(types, "broadening_type", broadening_type)
    return _find_formation(candles, "broadening", broadening_type, time_span, shape, DIVERGING, config)


def find_triangle(
    candles: Candles,
    time_span: str = "short",
    triangle_type: str = "ascending",
    config: Optional[FormationConfig] = None,
) -> Optional[FormationResult]:
    """Best triangle: converging lines not sloping the same way ("all" accepts any triangle)."""
    shape = _resolve_type(TRIANGLE_TYPES, "triangle_type", triangle_type)
    return _find_formation(candles, "triangle", triangle_type, time_span, shape, CONVERGING, config)


def find_wedge(
    candles: Candles,
    time_span: str = "short",
    wedge_type: str = "rising",
    broadening: bool = False,
    config: Optional[FormationConfig] = None,
) -> Optional[FormationResult]:
    """Best wedge: both lines sloping the same way, converging (diverging when ``broadening``)."""
    shape = _resolve_type(WEDGE_TYPES, "wedge_type", wedge_type)
    relation = DIVERGING if broadening else CONVERGING
    return _find_formation(candles, "wedge", wedge_type, time_span, shape, relation, config)
