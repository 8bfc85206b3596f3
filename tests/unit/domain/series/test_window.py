"""
Unit tests for the windowed reducer framework.

Tests:
- Missing history before length - 1
- Missing cells inside a window
- Dynamic (per-index) lengths
- sliding_window_function callbacks
"""

import numpy as np
import pytest

from chartengine.domain.exceptions import ConfigurationError, PreconditionError
from chartengine.domain.series.core import to_list
from chartengine.domain.series.window import highest, lowest, reduce, rolling_sum, sliding_window_function


class TestReduce:
    """Tests for reduce()."""

    def test_warmup_cells_are_missing(self) -> None:
        result = reduce([1.0, 2.0, 3.0, 4.0, 5.0], 3, np.mean)
        assert to_list(result) == [None, None, 2.0, 3.0, 4.0]

    def test_window_with_missing_cell_is_missing(self) -> None:
        result = reduce([1.0, None, 3.0, 4.0, 5.0], 2, np.sum)
        assert to_list(result) == [None, None, None, 7.0, 9.0]

    def test_random_series_property(self) -> None:
        np.random.seed(42)
        values = np.random.randn(50)
        values[20] = np.nan
        length = 5
        result = reduce(values, length, np.max)
        for i in range(len(values)):
            window = values[max(0, i - length + 1):i + 1]
            if i < length - 1 or np.isnan(window).any():
                assert np.isnan(result[i])
            else:
                assert result[i] == window.max()

    def test_dynamic_length(self) -> None:
        lengths = [1, 2, 3, 0, np.nan]
        result = reduce([1.0, 2.0, 3.0, 4.0, 5.0], lengths, np.sum)
        assert to_list(result) == [1.0, 3.0, 6.0, None, None]

    def test_dynamic_length_before_chart_start(self) -> None:
        result = reduce([1.0, 2.0, 3.0], [3, 3, 3], np.sum)
        assert to_list(result) == [None, None, 6.0]

    def test_dynamic_length_mismatch(self) -> None:
        with pytest.raises(PreconditionError):
            reduce([1.0, 2.0, 3.0], [1, 2], np.sum)

    def test_invalid_scalar_length(self) -> None:
        with pytest.raises(ConfigurationError):
            reduce([1.0, 2.0], 0, np.sum)

    def test_short_series_all_missing(self) -> None:
        assert np.isnan(reduce([1.0, 2.0], 5, np.sum)).all()


class TestNamedReducers:
    """Tests for highest/lowest/rolling_sum."""

    def test_highest_lowest(self) -> None:
        values = [3.0, 1.0, 4.0, 1.0, 5.0]
        assert to_list(highest(values, 2)) == [None, 3.0, 4.0, 4.0, 5.0]
        assert to_list(lowest(values, 2)) == [None, 1.0, 1.0, 1.0, 1.0]

    def test_rolling_sum(self) -> None:
        assert to_list(rolling_sum([1.0, 2.0, 3.0], 2)) == [None, 3.0, 5.0]

    def test_results_are_read_only(self) -> None:
        result = highest([1.0, 2.0, 3.0], 2)
        assert not result.flags.writeable


class TestSlidingWindowFunction:
    """Tests for sliding_window_function()."""

    def test_callback_receives_list_oldest_first(self) -> None:
        windows = []

        def spread(window):
            windows.append(window)
            return max(window) - min(window)

        result = sliding_window_function([1.0, 4.0, 2.0], 2, spread)
        assert windows == [[1.0, 4.0], [4.0, 2.0]]
        assert to_list(result) == [None, 3.0, 2.0]

    def test_non_callable_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            sliding_window_function([1.0, 2.0], 2, None)
