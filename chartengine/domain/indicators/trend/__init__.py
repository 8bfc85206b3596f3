"""Trend indicators: moving averages, VWAP, PSAR, SuperTrend, Vortex."""

from .adaptive import ALMAIndicator, KAMAIndicator, alma, kama
from .ema import EMAIndicator, WildMAIndicator, ema, wildma
from .psar import PSARIndicator, psar
from .sma import HullMAIndicator, SMAIndicator, VWMAIndicator, WMAIndicator, hullma, sma, vwma, wma
from .supertrend import SuperTrend, SuperTrendIndicator, supertrend, supertrend_with_direction
from .vortex import Vortex, VortexIndicator, vortex
from .vwap import VWAPIndicator, vwap

__all__ = [
    "ALMAIndicator",
    "EMAIndicator",
    "HullMAIndicator",
    "KAMAIndicator",
    "PSARIndicator",
    "SMAIndicator",
    "SuperTrend",
    "SuperTrendIndicator",
    "VWAPIndicator",
    "VWMAIndicator",
    "Vortex",
    "VortexIndicator",
    "WMAIndicator",
    "WildMAIndicator",
    "alma",
    "ema",
    "hullma",
    "kama",
    "psar",
    "sma",
    "supertrend",
    "supertrend_with_direction",
    "vortex",
    "vwap",
    "vwma",
    "wildma",
    "wma",
]
