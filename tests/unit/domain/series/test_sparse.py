"""
Unit tests for sparse series utilities.

Tests:
- indexed_points_of / sparse_series_of round trip
- Linear and constant interpolation
- Landing points across resolutions
- cut_series
"""

import numpy as np
import pytest

from chartengine.domain.exceptions import ConfigurationError, PreconditionError
from chartengine.domain.series.core import to_list
from chartengine.domain.series.sparse import (
    IndexedPoint,
    cut_series,
    indexed_points_of,
    interpolate_sparse_series,
    land_points_onto_series,
    sparse_series_of,
)


class TestIndexedPoints:
    """Tests for indexed_points_of()."""

    def test_example(self) -> None:
        points = indexed_points_of([None, None, 1, None, 2, None])
        assert points == [IndexedPoint(value=1.0, index=2), IndexedPoint(value=2.0, index=4)]

    def test_round_trip_through_interpolation(self) -> None:
        points = [IndexedPoint(5.0, 1), IndexedPoint(9.0, 4), IndexedPoint(3.0, 8)]
        dense = interpolate_sparse_series(sparse_series_of(points, 10))
        recovered = {p.index: p.value for p in indexed_points_of(dense)}
        for point in points:
            assert recovered[point.index] == point.value

    def test_point_outside_series(self) -> None:
        with pytest.raises(PreconditionError):
            sparse_series_of([IndexedPoint(1.0, 5)], 3)


class TestInterpolation:
    """Tests for interpolate_sparse_series()."""

    def test_linear_example(self) -> None:
        result = interpolate_sparse_series([1, None, None, 4, None, 10, None], "linear")
        assert to_list(result) == [1.0, 2.0, 3.0, 4.0, 7.0, 10.0, None]

    def test_constant_does_not_extrapolate(self) -> None:
        result = interpolate_sparse_series([None, 2, None, None, 5, None], "constant")
        assert to_list(result) == [None, 2.0, 2.0, 2.0, 5.0, None]

    def test_all_missing(self) -> None:
        assert np.isnan(interpolate_sparse_series([None, None])).all()

    def test_unknown_mode(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            interpolate_sparse_series([1.0], "cubic")
        assert exc_info.value.parameter == "mode"


class TestLandPoints:
    """Tests for land_points_onto_series()."""

    target = [0.0, 10.0, 20.0, 30.0]

    def test_exact_match(self) -> None:
        result = land_points_onto_series([10.0, 15.0], [1.0, 2.0], self.target, "eq")
        assert to_list(result) == [None, 1.0, None, None]

    @pytest.mark.parametrize(
        "method,expected",
        [
            # 5 -> 10 and 10 -> 10, the later point overwrites
            ("ge", [None, 2.0, None, None]),
            ("gt", [None, 1.0, 2.0, None]),
            ("le", [1.0, 2.0, None, None]),
            # 5 -> 0 and 10 -> 0
            ("lt", [2.0, None, None, None]),
        ],
    )
    def test_directional_methods(self, method: str, expected: list) -> None:
        result = land_points_onto_series([5.0, 10.0], [1.0, 2.0], self.target, method)
        assert to_list(result) == expected

    def test_merge_combines_collisions(self) -> None:
        result = land_points_onto_series([1.0, 2.0, 3.0], [1.0, 2.0, 3.0], self.target, "ge", merge=lambda a, b: a + b)
        assert to_list(result) == [None, 6.0, None, None]

    def test_points_outside_target_dropped(self) -> None:
        result = land_points_onto_series([40.0], [1.0], self.target, "ge")
        assert np.isnan(result).all()

    def test_unsorted_timestamps(self) -> None:
        with pytest.raises(PreconditionError):
            land_points_onto_series([2.0, 1.0], [1.0, 2.0], self.target, "eq")
        with pytest.raises(PreconditionError):
            land_points_onto_series([1.0], [1.0], [3.0, 1.0], "eq")

    def test_unknown_method(self) -> None:
        with pytest.raises(ConfigurationError):
            land_points_onto_series([1.0], [1.0], self.target, "near")


class TestCutSeries:
    """Tests for cut_series()."""

    def test_negative_from_index(self) -> None:
        assert to_list(cut_series([1.0, 2.0, 3.0, 4.0], -2)) == [None, None, 3.0, 4.0]

    def test_explicit_range(self) -> None:
        assert to_list(cut_series([1.0, 2.0, 3.0, 4.0], 1, 2)) == [None, 2.0, 3.0, None]
