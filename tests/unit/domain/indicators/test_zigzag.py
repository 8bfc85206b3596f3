"""
Unit tests for the ZigZag extractor and fractals.

Tests:
- Swing alternation and index order on random data
- Deterministic swings on piecewise-linear prices
- Backstep revision of a confirmed swing
- Empty / too-short input
- Defaults taken from the zigzag configuration
- Fractal and pivot sparse series
"""

import numpy as np
import pandas as pd
import pytest

from chartengine.domain.exceptions import ConfigurationError
from chartengine.domain.indicators.pattern.fractal import fractal_high, fractal_low, pivot_high, pivot_low
from chartengine.domain.indicators.pattern.zigzag import (
    SwingKind,
    ZigZagExtractor,
    ZigZagIndicator,
    find_swing_points,
    zigzag,
    zigzag_points,
)
from chartengine.domain.series.candles import Candles
from chartengine.domain.series.core import to_list
from config.config_manager import set_engine_config
from config.models import EngineConfig, ZigZagConfig


def _zigzag_closes() -> np.ndarray:
    """100 -> 110 (10) -> 100 (20) -> 110 (30), one point per candle."""
    up = np.linspace(100, 110, 11)
    return np.concatenate([up, up[::-1][1:], up[1:]])


def _backstep_closes() -> np.ndarray:
    """Rise to 110 (10), dip to 107 (13), new high 111.5 (14), fall to 100 (25)."""
    return np.concatenate([
        np.linspace(100, 110, 11),
        [109.0, 108.0, 107.0, 111.5],
        np.linspace(110, 100, 11),
    ])


class TestZigZagExtractor:
    """Tests for ZigZagExtractor."""

    def test_alternation_on_random_data(self, random_candles: Candles) -> None:
        points = find_swing_points(random_candles.high, random_candles.low, depth=5, deviation=0.5, backstep=2)
        assert len(points) >= 2
        for prev, cur in zip(points, points[1:]):
            assert cur.index > prev.index
            assert cur.kind is prev.kind.opposite

    def test_piecewise_linear_swings(self) -> None:
        closes = _zigzag_closes()
        points = find_swing_points(closes + 0.5, closes - 0.5, depth=3, deviation=1.0, backstep=0)
        assert [p.index for p in points] == [0, 10, 20, 30]
        assert [p.kind for p in points] == [SwingKind.LOW, SwingKind.HIGH, SwingKind.LOW, SwingKind.HIGH]
        assert points[1].price == 110.5
        assert points[2].price == 99.5

    def test_backstep_retracts_confirmation(self) -> None:
        closes = _backstep_closes()
        high, low = closes + 0.5, closes - 0.5

        with_backstep = find_swing_points(high, low, depth=3, deviation=1.0, backstep=3)
        assert [p.index for p in with_backstep] == [0, 14, 25]

        without_backstep = find_swing_points(high, low, depth=3, deviation=1.0, backstep=0)
        assert [p.index for p in without_backstep] == [0, 10, 13, 16, 25]

    def test_empty_and_short_input(self) -> None:
        assert find_swing_points([], [], depth=3) == []
        assert find_swing_points([10.0, 10.5], [9.5, 10.0], depth=3) == []

    def test_flat_series_has_no_swings(self) -> None:
        flat = np.full(50, 10.0)
        assert find_swing_points(flat, flat, depth=3, deviation=1.0) == []

    def test_missing_cells_are_skipped(self) -> None:
        closes = _zigzag_closes()
        high, low = closes + 0.5, closes - 0.5
        high[5] = low[5] = np.nan
        points = find_swing_points(high, low, depth=3, deviation=1.0, backstep=0)
        assert [p.index for p in points] == [0, 10, 20, 30]

    @pytest.mark.parametrize(
        "kwargs,parameter",
        [
            ({"depth": 0}, "depth"),
            ({"deviation": -1.0}, "deviation"),
            ({"deviation": float("nan")}, "deviation"),
            ({"backstep": -1}, "backstep"),
        ],
    )
    def test_invalid_parameters(self, kwargs: dict, parameter: str) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            ZigZagExtractor(**kwargs)
        assert exc_info.value.parameter == parameter


class TestZigZagOutputs:
    """Tests for zigzag_points() and zigzag()."""

    def test_points_split_by_kind(self) -> None:
        closes = _zigzag_closes()
        zz = zigzag_points(closes + 0.5, closes - 0.5, depth=3, deviation=1.0, backstep=0)
        assert zz.high_indexes == [10, 30]
        assert zz.low_indexes == [0, 20]

    def test_line_interpolates_between_swings(self) -> None:
        closes = _zigzag_closes()
        result = zigzag(closes + 0.5, closes - 0.5, depth=3, deviation=1.0, backstep=0)
        assert result[0] == 99.5
        assert result[10] == 110.5
        assert result[5] == pytest.approx(105.0)
        assert not np.isnan(result).any()

    def test_indicator(self) -> None:
        closes = _zigzag_closes()
        frame = pd.DataFrame({"high": closes + 0.5, "low": closes - 0.5})
        result = ZigZagIndicator().calculate(frame, {"depth": 3, "backstep": 0})
        assert result["zigzag"].iloc[20] == 99.5


class TestZigZagConfiguration:
    """Tests for defaults resolved from the zigzag configuration section."""

    def test_extractor_uses_configured_defaults(self) -> None:
        set_engine_config(EngineConfig(zigzag=ZigZagConfig(depth=3, deviation=0.1, backstep=1)))
        extractor = ZigZagExtractor()
        assert (extractor.depth, extractor.deviation, extractor.backstep) == (3, 0.1, 1)

    def test_shipped_defaults(self) -> None:
        extractor = ZigZagExtractor()
        assert (extractor.depth, extractor.deviation, extractor.backstep) == (20, 1.0, 2)

    def test_explicit_parameters_win(self) -> None:
        set_engine_config(EngineConfig(zigzag=ZigZagConfig(depth=3, deviation=0.1, backstep=1)))
        assert ZigZagExtractor(depth=7).depth == 7

    def test_swings_follow_configuration(self, random_candles: Candles) -> None:
        high, low = random_candles.high, random_candles.low
        set_engine_config(EngineConfig(zigzag=ZigZagConfig(depth=3, deviation=0.1, backstep=1)))
        assert find_swing_points(high, low) == find_swing_points(high, low, 3, 0.1, 1)

    def test_functions_and_indicator_follow_configuration(self) -> None:
        closes = _zigzag_closes()
        high, low = closes + 0.5, closes - 0.5
        assert zigzag_points(high, low).high_indexes != [10, 30]

        set_engine_config(EngineConfig(zigzag=ZigZagConfig(depth=3, deviation=1.0, backstep=0)))
        assert [p.index for p in find_swing_points(high, low)] == [0, 10, 20, 30]
        assert zigzag_points(high, low).high_indexes == [10, 30]
        frame = pd.DataFrame({"high": high, "low": low})
        assert ZigZagIndicator().calculate(frame)["zigzag"].iloc[20] == 99.5


class TestFractals:
    """Tests for fractal and pivot extremes."""

    values = [1.0, 3.0, 2.0, 5.0, 4.0, 6.0, 5.0]

    def test_fractal_high(self) -> None:
        assert to_list(fractal_high(self.values, 3)) == [None, 3.0, None, 5.0, None, 6.0, None]

    def test_fractal_low(self) -> None:
        assert to_list(fractal_low(self.values, 3)) == [None, None, 2.0, None, 4.0, None, None]

    def test_equal_neighbours_are_not_fractals(self) -> None:
        assert np.isnan(fractal_high([1.0, 2.0, 2.0, 1.0], 3)).all()

    def test_even_length_needs_peak_index(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            fractal_high(self.values, 4)
        assert exc_info.value.parameter == "length"
        result = fractal_high(self.values, 4, peak_index=3)
        assert to_list(result) == [None, None, None, 5.0, None, 6.0, None]

    def test_pivots(self) -> None:
        assert to_list(pivot_high(self.values, 1, 1)) == to_list(fractal_high(self.values, 3))
        assert to_list(pivot_low(self.values, 2, 0)) == [None, None, None, None, None, None, None]
        assert to_list(pivot_low([3.0, 2.0, 1.0, 4.0], 2, 1)) == [None, None, 1.0, None]
