"""
Sparse Series Utilities.

A sparse series is a Series where most cells are missing and only a few
indexes carry values (fractal points, landed higher-timeframe closes,
zigzag vertices).

Provides:
- indexed_points_of / sparse_series_of: series <-> point list
- interpolate_sparse_series: linear or constant fill between points
- land_points_onto_series: map points across timestamp grids
- cut_series: blank cells outside an index range
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import numpy as np

from ..exceptions import ConfigurationError, PreconditionError
from .core import resolve_range, freeze, validate_length

INTERPOLATION_MODES = ("linear", "constant")
LANDING_METHODS = ("eq", "gt", "ge", "lt", "le")


@dataclass(frozen=True)
class IndexedPoint:
    """A non-missing cell of a series."""
    value: float
    index: int


def indexed_points_of(series: np.ndarray) -> List[IndexedPoint]:
    """
    List the non-missing cells of a series, in index order.

    Example:
        indexed_points_of([None, None, 1, None, 2, None])
        # [IndexedPoint(value=1.0, index=2), IndexedPoint(value=2.0, index=4)]
    """
    x = np.array(series, dtype=np.float64)
    indexes = np.flatnonzero(~np.isnan(x))
    return [IndexedPoint(value=float(x[i]), index=int(i)) for i in indexes]


def sparse_series_of(points: Sequence[IndexedPoint], length: int) -> np.ndarray:
    """Build a series of ``length`` cells holding ``points`` and missing elsewhere."""
    length = validate_length(length, minimum=0)
    out = np.full(length, np.nan, dtype=np.float64)
    for point in points:
        if not 0 <= point.index < length:
            raise PreconditionError(f"Point index {point.index} outside series of length {length}")
        out[point.index] = point.value
    return freeze(out)


def interpolate_sparse_series(series: np.ndarray, mode: str = "linear") -> np.ndarray:
    """
    Fill the gaps between consecutive non-missing cells.

    Args:
        series: Sparse series.
        mode: "linear" interpolates, "constant" repeats the left point's value.

    Returns:
        New series; cells before the first point and after the last point
        stay missing.

    Example:
        interpolate_sparse_series([1, None, None, 4, None, 10, None])
        # [1, 2, 3, 4, 7, 10, None]
    """
    if mode not in INTERPOLATION_MODES:
        raise ConfigurationError("mode", f"must be one of {INTERPOLATION_MODES}, got {mode!r}")

    x = np.array(series, dtype=np.float64)
    out = np.full(len(x), np.nan, dtype=np.float64)
    known = np.flatnonzero(~np.isnan(x))
    if len(known) == 0:
        return freeze(out)

    first, last = known[0], known[-1]
    span = np.arange(first, last + 1)
    if mode == "linear":
        out[first:last + 1] = np.interp(span, known, x[known])
    else:
        # Index of the closest known point at or before each cell
        left = known[np.searchsorted(known, span, side="right") - 1]
        out[first:last + 1] = x[left]
    return freeze(out)


def land_points_onto_series(
    source_timestamps: Sequence[float],
    source_values: Sequence[Optional[float]],
    target_timestamps: Sequence[float],
    method: str = "eq",
    merge: Optional[Callable[[float, float], float]] = None,
) -> np.ndarray:
    """
    Land source points onto a target timestamp grid.

    Args:
        source_timestamps: Ascending timestamps of the source points.
        source_values: Source values (missing values are not landed).
        target_timestamps: Ascending timestamps of the target series.
        method: "eq" exact match, "gt"/"ge" first target after (or at) the
            source time, "lt"/"le" last target before (or at) it.
        merge: ``merge(existing, new)`` for points landing on the same
            target index; default is to overwrite.

    Returns:
        Sparse series aligned with the target timestamps.

    Raises:
        ConfigurationError: Unknown method.
        PreconditionError: Unsorted timestamps or mismatched source lengths.
    """
    if method not in LANDING_METHODS:
        raise ConfigurationError("method", f"must be one of {LANDING_METHODS}, got {method!r}")

    src_ts = np.asarray(source_timestamps, dtype=np.float64)
    src_values = np.array(
        [np.nan if v is None else v for v in source_values], dtype=np.float64
    )
    tgt_ts = np.asarray(target_timestamps, dtype=np.float64)
    if len(src_ts) != len(src_values):
        raise PreconditionError(
            f"source_timestamps ({len(src_ts)}) and source_values ({len(src_values)}) differ in length"
        )
    for name, ts in (("source_timestamps", src_ts), ("target_timestamps", tgt_ts)):
        if len(ts) > 1 and np.any(np.diff(ts) < 0):
            raise PreconditionError(f"{name} must be sorted ascending")

    n = len(tgt_ts)
    out = np.full(n, np.nan, dtype=np.float64)
    if n == 0:
        return freeze(out)

    if method == "eq":
        pos = np.searchsorted(tgt_ts, src_ts, side="left")
        clipped = np.minimum(pos, n - 1)
        targets = np.where((pos < n) & (tgt_ts[clipped] == src_ts), pos, -1)
    elif method == "ge":
        targets = np.searchsorted(tgt_ts, src_ts, side="left")
    elif method == "gt":
        targets = np.searchsorted(tgt_ts, src_ts, side="right")
    elif method == "le":
        targets = np.searchsorted(tgt_ts, src_ts, side="right") - 1
    else:
        targets = np.searchsorted(tgt_ts, src_ts, side="left") - 1

    for target, value in zip(targets, src_values):
        if target < 0 or target >= n or np.isnan(value):
            continue
        if merge is not None and not np.isnan(out[target]):
            out[target] = merge(float(out[target]), float(value))
        else:
            out[target] = value
    return freeze(out)


def cut_series(series: np.ndarray, from_index: int, to_index: Optional[int] = None) -> np.ndarray:
    """
    Blank every cell outside ``[from_index, to_index]``.

    Negative indexes count from the end; ``to_index`` defaults to the last
    candle.

    Example:
        cut_series(sma(close, 20), -10)  # keep the last 10 cells only
    """
    x = np.array(series, dtype=np.float64)
    n = len(x)
    out = np.full(n, np.nan, dtype=np.float64)
    start, end = resolve_range(n, int(from_index), None if to_index is None else int(to_index))
    if start <= end:
        out[start:end + 1] = x[start:end + 1]
    return freeze(out)
