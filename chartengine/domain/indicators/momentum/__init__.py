"""Momentum indicators: RSI, CMO, Stochastic, Williams %R, Momentum, Sequential Count."""

from .momentum import MomentumIndicator, momentum
from .rsi import CMOIndicator, RSIIndicator, cmo, rsi
from .seqcount import SeqCount, SeqCountIndicator, seqcount
from .stochastic import StochasticIndicator, stochastic
from .williams_r import WilliamsRIndicator, williams_r

__all__ = [
    "CMOIndicator",
    "MomentumIndicator",
    "RSIIndicator",
    "SeqCount",
    "SeqCountIndicator",
    "StochasticIndicator",
    "WilliamsRIndicator",
    "cmo",
    "momentum",
    "rsi",
    "seqcount",
    "stochastic",
    "williams_r",
]
