"""Unit tests for the static indicator registry."""

import numpy as np
import pandas as pd
import pytest

from chartengine.domain.exceptions import ConfigurationError
from chartengine.domain.indicators.base import IndicatorCategory
from chartengine.domain.indicators.registry import (
    INDICATOR_CLASSES,
    MA_TYPES,
    IndicatorRegistry,
    get_indicator_registry,
    moving_average,
)
from chartengine.domain.indicators.trend.sma import SMAIndicator, sma


class TestIndicatorRegistry:
    """Tests for IndicatorRegistry."""

    def test_every_class_registered(self) -> None:
        registry = IndicatorRegistry()
        assert len(registry) == len(INDICATOR_CLASSES) == 24
        for name in ("sma", "rsi", "atr", "bollinger", "zigzag", "williams_r", "seqcount"):
            assert name in registry

    def test_get_unknown(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            IndicatorRegistry().get("macd")
        assert exc_info.value.parameter == "indicator"

    def test_get_by_category_sorted(self) -> None:
        patterns = IndicatorRegistry().get_by_category(IndicatorCategory.PATTERN)
        assert [ind.name for ind in patterns] == ["fractal", "pivot", "zigzag"]

    def test_register_replaces(self) -> None:
        registry = IndicatorRegistry(())
        registry.register(SMAIndicator())
        registry.register(SMAIndicator())
        assert registry.get_names() == ["sma"]
        assert len(registry.get_by_category(IndicatorCategory.TREND)) == 1

    def test_global_registry_is_shared(self) -> None:
        assert get_indicator_registry() is get_indicator_registry()

    def test_every_indicator_runs_with_defaults(self, ohlcv_frame: pd.DataFrame) -> None:
        registry = get_indicator_registry()
        for name in registry.get_names():
            result = registry.get(name).calculate(ohlcv_frame)
            assert len(result) == len(ohlcv_frame), name
            assert result.index.equals(ohlcv_frame.index), name


class TestMovingAverageTypes:
    """Tests for MA_TYPES / moving_average()."""

    def test_lookup(self) -> None:
        assert set(MA_TYPES) == {"sma", "ema", "wildma", "wma", "hullma"}
        assert moving_average("sma") is sma

    def test_kernels_share_signature(self) -> None:
        values = np.arange(30, dtype=float)
        for kernel in MA_TYPES.values():
            assert len(kernel(values, 5)) == 30

    def test_unknown(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            moving_average("tema")
        assert exc_info.value.parameter == "ma_type"
