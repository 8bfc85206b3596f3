"""Volatility indicators: ATR, standard deviation, bands."""

from .atr import ATRIndicator, atr, backfilled_atr, true_range
from .band import BAND_TYPES, Band, BollingerBandsIndicator, compute_band
from .stddev import StdDevIndicator, stdev

__all__ = [
    "ATRIndicator",
    "BAND_TYPES",
    "Band",
    "BollingerBandsIndicator",
    "StdDevIndicator",
    "atr",
    "backfilled_atr",
    "compute_band",
    "stdev",
    "true_range",
]
