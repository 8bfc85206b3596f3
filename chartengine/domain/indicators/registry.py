"""
Indicator Registry - static lookup of indicator variants by name.

Provides:
- A closed table of every indicator class (no module scanning)
- Registration and lookup by name
- Filtering by category
- MA_TYPES: the interchangeable moving-average kernels by name
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Set, Tuple, Type

import numpy as np

from chartengine.utils.logging_setup import get_logger

from ..exceptions import ConfigurationError
from .base import IndicatorBase, IndicatorCategory
from .momentum.momentum import MomentumIndicator
from .momentum.rsi import CMOIndicator, RSIIndicator
from .momentum.seqcount import SeqCountIndicator
from .momentum.stochastic import StochasticIndicator
from .momentum.williams_r import WilliamsRIndicator
from .pattern.fractal import FractalIndicator, PivotIndicator
from .pattern.zigzag import ZigZagIndicator
from .trend.adaptive import ALMAIndicator, KAMAIndicator
from .trend.ema import EMAIndicator, WildMAIndicator, ema, wildma
from .trend.psar import PSARIndicator
from .trend.sma import HullMAIndicator, SMAIndicator, VWMAIndicator, WMAIndicator, hullma, sma, wma
from .trend.supertrend import SuperTrendIndicator
from .trend.vortex import VortexIndicator
from .trend.vwap import VWAPIndicator
from .volatility.atr import ATRIndicator
from .volatility.band import BollingerBandsIndicator
from .volatility.stddev import StdDevIndicator

logger = get_logger(__name__)

INDICATOR_CLASSES: Tuple[Type[IndicatorBase], ...] = (
    SMAIndicator,
    EMAIndicator,
    WildMAIndicator,
    WMAIndicator,
    HullMAIndicator,
    VWMAIndicator,
    ALMAIndicator,
    KAMAIndicator,
    VWAPIndicator,
    PSARIndicator,
    SuperTrendIndicator,
    VortexIndicator,
    RSIIndicator,
    CMOIndicator,
    StochasticIndicator,
    WilliamsRIndicator,
    MomentumIndicator,
    SeqCountIndicator,
    ATRIndicator,
    StdDevIndicator,
    BollingerBandsIndicator,
    FractalIndicator,
    PivotIndicator,
    ZigZagIndicator,
)

MovingAverage = Callable[[np.ndarray, int], np.ndarray]

MA_TYPES: Dict[str, MovingAverage] = {
    "sma": sma,
    "ema": ema,
    "wildma": wildma,
    "wma": wma,
    "hullma": hullma,
}


def moving_average(name: str) -> MovingAverage:
    """
    Look up a moving-average kernel by name.

    Raises:
        ConfigurationError: Unknown MA type.
    """
    try:
        return MA_TYPES[name]
    except KeyError:
        raise ConfigurationError("ma_type", f"must be one of {sorted(MA_TYPES)}, got {name!r}") from None


class IndicatorRegistry:
    """
    Registry for indicator management.

    Built from the static INDICATOR_CLASSES table and provides lookup by
    name or category.
    """

    def __init__(self, indicator_classes: Tuple[Type[IndicatorBase], ...] = INDICATOR_CLASSES) -> None:
        """Initialize the registry with one instance of every class in the table."""
        self._indicators: Dict[str, IndicatorBase] = {}
        self._by_category: Dict[IndicatorCategory, Set[str]] = {
            cat: set() for cat in IndicatorCategory
        }
        for indicator_class in indicator_classes:
            self.register(indicator_class())
        logger.debug(f"Indicator registry built with {len(self._indicators)} indicators")

    def register(self, indicator: IndicatorBase) -> None:
        """
        Register an indicator instance.

        If an indicator with the same name exists, it will be replaced
        and removed from its previous category index.

        Args:
            indicator: Indicator to register
        """
        name = indicator.name

        if name in self._indicators:
            old_category = self._indicators[name].category
            self._by_category[old_category].discard(name)
            logger.warning(f"Indicator {name} already registered, overwriting")

        self._indicators[name] = indicator
        self._by_category[indicator.category].add(name)

    def get(self, name: str) -> IndicatorBase:
        """
        Get indicator by name.

        Args:
            name: Indicator name (e.g., "rsi")

        Raises:
            ConfigurationError: If no indicator has that name
        """
        indicator = self._indicators.get(name)
        if indicator is None:
            raise ConfigurationError("indicator", f"unknown indicator {name!r}")
        return indicator

    def get_by_category(self, category: IndicatorCategory) -> List[IndicatorBase]:
        """Get indicators of one category, sorted by name."""
        names = sorted(self._by_category.get(category, set()))
        return [self._indicators[n] for n in names]

    def get_names(self) -> List[str]:
        """Get all registered indicator names."""
        return list(self._indicators.keys())

    def __len__(self) -> int:
        """Return number of registered indicators."""
        return len(self._indicators)

    def __contains__(self, name: str) -> bool:
        """Check if indicator is registered."""
        return name in self._indicators


_global_registry: Optional[IndicatorRegistry] = None


def get_indicator_registry() -> IndicatorRegistry:
    """
    Get the global indicator registry.

    Creates the registry on first call.
    """
    global _global_registry
    if _global_registry is None:
        _global_registry = IndicatorRegistry()
    return _global_registry
