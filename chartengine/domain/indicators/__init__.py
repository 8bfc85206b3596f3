"""
Indicator kernels and their named variants.

Kernels are plain functions over Series (``sma(close, 20)``); every
indicator also has an IndicatorBase variant reachable by name through the
static registry (``get_indicator_registry().get("sma")``).
"""

from .base import IndicatorBase, IndicatorCategory
from .momentum import SeqCount, cmo, momentum, rsi, seqcount, stochastic, williams_r
from .pattern import (
    SwingKind,
    SwingPoint,
    ZigZagPoints,
    find_swing_points,
    fractal_high,
    fractal_low,
    pivot_high,
    pivot_low,
    zigzag,
    zigzag_points,
)
from .registry import MA_TYPES, IndicatorRegistry, get_indicator_registry, moving_average
from .trend import (
    Vortex,
    alma,
    ema,
    hullma,
    kama,
    psar,
    sma,
    supertrend,
    vortex,
    vwap,
    vwma,
    wildma,
    wma,
)
from .volatility import Band, atr, compute_band, stdev, true_range

__all__ = [
    "Band",
    "IndicatorBase",
    "IndicatorCategory",
    "IndicatorRegistry",
    "MA_TYPES",
    "SeqCount",
    "SwingKind",
    "SwingPoint",
    "Vortex",
    "ZigZagPoints",
    "alma",
    "atr",
    "cmo",
    "compute_band",
    "ema",
    "find_swing_points",
    "fractal_high",
    "fractal_low",
    "get_indicator_registry",
    "hullma",
    "kama",
    "momentum",
    "moving_average",
    "pivot_high",
    "pivot_low",
    "psar",
    "rsi",
    "seqcount",
    "sma",
    "stdev",
    "stochastic",
    "supertrend",
    "true_range",
    "vortex",
    "vwap",
    "vwma",
    "wildma",
    "williams_r",
    "wma",
    "zigzag",
    "zigzag_points",
]
