"""
Unit tests for series primitives.

Tests:
- Conversion and read-only ownership
- Variadic algebra with scalar normalisation
- Construction helpers (series_of, shift, horizontal_line, line)
- for_every callbacks
"""

import numpy as np
import pytest

from chartengine.domain.exceptions import ConfigurationError, PreconditionError
from chartengine.domain.series.core import (
    add,
    as_series,
    div,
    for_every,
    horizontal_line,
    line,
    max_of,
    min_of,
    mult,
    series_of,
    shift,
    sub,
    to_list,
    validate_length,
)


class TestConversion:
    """Tests for as_series / to_list."""

    def test_none_becomes_missing(self) -> None:
        series = as_series([1, None, 3])
        assert series.dtype == np.float64
        assert np.isnan(series[1])
        assert to_list(series) == [1.0, None, 3.0]

    def test_result_is_read_only_copy(self) -> None:
        source = np.array([1.0, 2.0, 3.0])
        series = as_series(source)
        source[0] = 99.0
        assert series[0] == 1.0
        with pytest.raises(ValueError):
            series[0] = 5.0

    def test_rejects_two_dimensional_input(self) -> None:
        with pytest.raises(PreconditionError):
            as_series(np.zeros((2, 2)))


class TestValidateLength:
    """Tests for length validation."""

    @pytest.mark.parametrize("length", [0, -1, 2.5, "3", True, float("nan")])
    def test_invalid_lengths(self, length) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            validate_length(length)
        assert exc_info.value.parameter == "length"

    def test_integral_float_accepted(self) -> None:
        assert validate_length(3.0) == 3


class TestAlgebra:
    """Tests for variadic series algebra."""

    def test_add_series_and_scalars(self) -> None:
        result = add([1.0, 2.0, 3.0], 10, [1.0, 1.0, 1.0])
        np.testing.assert_array_equal(result, [12.0, 13.0, 14.0])

    def test_sub_is_left_to_right(self) -> None:
        result = sub([10.0, 10.0], [1.0, 2.0], 3)
        np.testing.assert_array_equal(result, [6.0, 5.0])

    def test_mult_propagates_missing(self) -> None:
        result = mult([1.0, None, 3.0], 2)
        assert to_list(result) == [2.0, None, 6.0]

    def test_div_by_zero_is_missing(self) -> None:
        result = div([4.0, 4.0], [2.0, 0.0])
        assert to_list(result) == [2.0, None]

    def test_max_and_min(self) -> None:
        np.testing.assert_array_equal(max_of([1.0, 5.0], [3.0, 2.0], 4), [4.0, 5.0])
        np.testing.assert_array_equal(min_of([1.0, 5.0], [3.0, 2.0]), [1.0, 2.0])

    def test_empty_operands_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            add()

    def test_scalars_only_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            add(1, 2)

    def test_length_mismatch(self) -> None:
        with pytest.raises(PreconditionError):
            add([1.0, 2.0], [1.0, 2.0, 3.0])

    def test_inputs_not_mutated(self) -> None:
        a = np.array([1.0, 2.0])
        add(a, 1)
        np.testing.assert_array_equal(a, [1.0, 2.0])


class TestConstruction:
    """Tests for series constructors."""

    def test_series_of(self) -> None:
        np.testing.assert_array_equal(series_of(2.5, 3), [2.5, 2.5, 2.5])
        assert np.isnan(series_of(None, 2)).all()

    def test_shift_right_and_left(self) -> None:
        assert to_list(shift([1.0, 2.0, 3.0], 1)) == [None, 1.0, 2.0]
        assert to_list(shift([1.0, 2.0, 3.0], -1)) == [2.0, 3.0, None]
        assert to_list(shift([1.0, 2.0, 3.0], 5)) == [None, None, None]

    def test_horizontal_line_range(self) -> None:
        assert to_list(horizontal_line(7.0, 5, 1, 3)) == [None, 7.0, 7.0, 7.0, None]
        assert to_list(horizontal_line(7.0, 3, -2)) == [None, 7.0, 7.0]

    def test_line_extends_right(self) -> None:
        result = line(1, 10.0, 3, 14.0, 6)
        assert to_list(result) == [None, 10.0, 12.0, 14.0, 16.0, 18.0]

    def test_line_segment_only(self) -> None:
        result = line(1, 10.0, 3, 14.0, 6, extend_right=False)
        assert to_list(result) == [None, 10.0, 12.0, 14.0, None, None]

    def test_line_requires_distinct_indexes(self) -> None:
        with pytest.raises(ConfigurationError):
            line(2, 1.0, 2, 3.0, 5)


class TestForEvery:
    """Tests for per-candle callbacks."""

    def test_running_total_uses_previous(self) -> None:
        result = for_every([1.0, 2.0, 3.0], lambda v, prev, i: (prev or 0.0) + v)
        np.testing.assert_array_equal(result, [1.0, 3.0, 6.0])

    def test_missing_values_passed_as_none(self) -> None:
        seen = []

        def record(value, previous, index):
            seen.append((value, index))
            return None

        result = for_every([1.0, None], record)
        assert seen == [(1.0, 0), (None, 1)]
        assert np.isnan(result).all()

    def test_callable_required(self) -> None:
        with pytest.raises(ConfigurationError):
            for_every([1.0, 2.0])
