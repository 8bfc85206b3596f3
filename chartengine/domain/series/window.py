"""
Windowed Reducer Framework.

Generic sliding-window evaluation over a Series. Element ``i`` of the
result is ``fn(window)`` where the window spans ``[i - length + 1, i]``;
windows reaching before the first candle or holding a missing cell
produce a missing cell.

The window length is either a scalar (validated up front) or a Series
giving a per-index length, in which case invalid per-index lengths only
blank that index.
"""

from __future__ import annotations

from typing import Any, Callable, List, Union

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from ..exceptions import ConfigurationError
from .core import check_same_length, freeze, validate_length

Length = Union[int, np.ndarray]


def _is_dynamic(length: Any) -> bool:
    return np.ndim(length) > 0


def rolling(values: np.ndarray, length: int, reducer: Callable[..., np.ndarray]) -> np.ndarray:
    """
    Vectorised fixed-length reduction.

    Args:
        values: Input series.
        length: Validated window length.
        reducer: numpy reduction accepting ``axis=1`` (np.mean, np.max, ...).

    Returns:
        Mutable float64 array (callers freeze it).
    """
    x = np.asarray(values, dtype=np.float64)
    n = len(x)
    out = np.full(n, np.nan, dtype=np.float64)
    if n < length:
        return out

    windows = sliding_window_view(x, length)
    valid = ~np.isnan(windows).any(axis=1)
    if valid.any():
        out[length - 1:][valid] = reducer(windows[valid], axis=1)
    return out


def reduce(series: np.ndarray, length: Length, fn: Callable[[np.ndarray], float]) -> np.ndarray:
    """
    Apply ``fn`` to every fully populated window.

    Args:
        series: Input series.
        length: Scalar window length, or a Series of per-index lengths.
        fn: Callable receiving the window as a read-only float64 array.

    Returns:
        New read-only series of the same length.

    Raises:
        ConfigurationError: If a scalar length is not a positive integer.
    """
    x = np.asarray(series, dtype=np.float64)
    n = len(x)
    out = np.full(n, np.nan, dtype=np.float64)

    if not _is_dynamic(length):
        length = validate_length(length)
        if n < length:
            return freeze(out)
        windows = sliding_window_view(x, length)
        for start in range(n - length + 1):
            window = windows[start]
            if not np.isnan(window).any():
                out[start + length - 1] = fn(window)
        return freeze(out)

    lengths = np.asarray(length, dtype=np.float64)
    check_same_length(x, lengths)
    for i in range(n):
        window_length = lengths[i]
        if not np.isfinite(window_length) or window_length <= 0 or window_length != int(window_length):
            continue
        start = i - int(window_length) + 1
        if start < 0:
            continue
        window = x[start:i + 1]
        if not np.isnan(window).any():
            out[i] = fn(window)
    return freeze(out)


def sliding_window_function(
    series: np.ndarray,
    window_size: Length,
    callback: Callable[[List[float]], float],
) -> np.ndarray:
    """
    Run a Python callback over every sliding window.

    The callback receives the window as a list of floats, oldest first,
    and is invoked once per index in increasing order.

    Example:
        # range of the last 5 closes
        sliding_window_function(close, 5, lambda w: max(w) - min(w))
    """
    if not callable(callback):
        raise ConfigurationError("callback", "must be callable")
    return reduce(series, window_size, lambda window: callback(window.tolist()))


def _dispatch(series: np.ndarray, length: Length, reducer: Callable[..., np.ndarray]) -> np.ndarray:
    if _is_dynamic(length):
        return reduce(series, length, lambda w: reducer(w))
    return freeze(rolling(series, validate_length(length), reducer))


def highest(series: np.ndarray, length: Length) -> np.ndarray:
    """Highest value of the trailing window."""
    return _dispatch(series, length, np.max)


def lowest(series: np.ndarray, length: Length) -> np.ndarray:
    """Lowest value of the trailing window."""
    return _dispatch(series, length, np.min)


def rolling_sum(series: np.ndarray, length: Length) -> np.ndarray:
    """Sum of the trailing window."""
    return _dispatch(series, length, np.sum)
