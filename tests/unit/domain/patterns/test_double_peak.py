"""Unit tests for double top / double bottom detection."""

import numpy as np
import pytest

from chartengine.domain.exceptions import ConfigurationError
from chartengine.domain.patterns.double_peak import (
    ADAM,
    EVE,
    find_double_peak_formation,
    peak_label,
    resolve_double_peak_params,
)
from chartengine.domain.patterns.models import DoublePeakIndexes
from chartengine.domain.series.candles import Candles


def _mirrored(candles: Candles) -> Candles:
    """Chart flipped around 100 so tops become bottoms."""
    return Candles.from_arrays(
        open=200 - candles.open,
        high=200 - candles.low,
        low=200 - candles.high,
        close=200 - candles.close,
    )


class TestDoubleTop:
    """Tests for find_double_peak_formation(peak_type="top")."""

    def test_pattern_points(self, double_top_candles: Candles) -> None:
        result = find_double_peak_formation(double_top_candles, "top", "short term")
        assert result is not None
        assert result.indexes == DoublePeakIndexes(
            pattern_start=0, first_peak=20, valley_floor=35, second_peak=50, pattern_last_index=55
        )
        assert result.in_force is True
        assert result.score == 0.0

    def test_lines(self, double_top_candles: Candles) -> None:
        result = find_double_peak_formation(double_top_candles, "top", "short term")
        assert result.pattern_line[20] == 120.5
        assert result.pattern_line[35] == 104.5
        assert np.isnan(result.pattern_line[56:]).all()
        assert np.isnan(result.support_line[:35]).all()
        np.testing.assert_array_equal(result.support_line[35:], 104.5)

    def test_sharp_peaks_are_adam(self, double_top_candles: Candles) -> None:
        result = find_double_peak_formation(double_top_candles, "top", "short term")
        assert result.first_peak_label == ADAM
        assert result.second_peak_label == ADAM

    def test_no_double_bottom_in_double_top(self, double_top_candles: Candles) -> None:
        assert find_double_peak_formation(double_top_candles, "bottom", "short term") is None

    def test_override_rejects_pattern(self, double_top_candles: Candles) -> None:
        assert find_double_peak_formation(double_top_candles, "top", "short term", min_distance=40) is None

    def test_broken_support_ends_in_force(self, double_top_candles: Candles) -> None:
        closes = np.concatenate([double_top_candles.close[:56], [108.0, 104.0, 100.0, 99.0, 98.0]])
        candles = Candles.from_arrays(open=closes, high=closes + 0.5, low=closes - 0.5, close=closes)
        result = find_double_peak_formation(candles, "top", "short term")
        assert result is not None
        assert result.indexes.pattern_last_index == 57
        assert result.in_force is False


class TestDoubleBottom:
    """Tests for find_double_peak_formation(peak_type="bottom")."""

    def test_mirrored_double_top(self, double_top_candles: Candles) -> None:
        result = find_double_peak_formation(_mirrored(double_top_candles), "bottom", "short term")
        assert result is not None
        assert result.peak_type == "bottom"
        assert (result.indexes.first_peak, result.indexes.valley_floor, result.indexes.second_peak) == (20, 35, 50)
        assert result.pattern_line[20] == pytest.approx(79.5)
        np.testing.assert_allclose(result.support_line[35:], 95.5)


class TestParameters:
    """Tests for parameter resolution and validation."""

    def test_overrides(self) -> None:
        params = resolve_double_peak_params("short term", {"max_distance": 90})
        assert params.max_distance == 90
        assert params.min_distance == 10

    def test_unknown_override(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_double_peak_params("short term", {"max_width": 3})
        assert exc_info.value.parameter == "max_width"

    def test_unknown_time_span(self, double_top_candles: Candles) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            find_double_peak_formation(double_top_candles, "top", "medium term")
        assert exc_info.value.parameter == "time_span"

    def test_unknown_peak_type(self, double_top_candles: Candles) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            find_double_peak_formation(double_top_candles, "middle")
        assert exc_info.value.parameter == "peak_type"


class TestPeakLabel:
    """Tests for peak_label()."""

    def test_sharp_peak(self) -> None:
        highs = np.array([0.0, 1.0, 2.0, 3.0, 2.0, 1.0, 0.0])
        assert peak_label(highs, 3, 3, atr=1.0, threshold=0.25) == ADAM

    def test_flat_top(self) -> None:
        highs = np.full(7, 5.0)
        assert peak_label(highs, 3, 3, atr=1.0, threshold=0.25) == EVE

    def test_too_few_candles(self) -> None:
        assert peak_label(np.array([1.0, 2.0]), 1, 2, atr=1.0, threshold=0.25) == EVE
