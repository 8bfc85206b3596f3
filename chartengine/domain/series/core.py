"""
Series primitives.

A Series is a one-dimensional float64 numpy array, oldest candle first, with
NaN as the explicit "no value" cell. Every producer in the engine returns a
freshly allocated, read-only array so downstream consumers can never mutate
another component's storage.

Provides:
- as_series / freeze: conversion and ownership helpers
- Variadic algebra: add, sub, mult, div, max_of, min_of
- Construction: series_of, horizontal_line, line, shift
- Per-candle callbacks: for_every
"""

from __future__ import annotations

import math
from typing import Any, Callable, Iterable, List, Optional, Sequence, Union

import numpy as np

from ..exceptions import ConfigurationError, PreconditionError

Series = np.ndarray
Operand = Union[np.ndarray, Sequence[Optional[float]], float, int]


def freeze(values: np.ndarray) -> np.ndarray:
    """Mark an array as read-only and return it."""
    values.flags.writeable = False
    return values


def as_series(values: Iterable[Optional[float]]) -> np.ndarray:
    """
    Convert a sequence (``None`` for missing) into a fresh read-only Series.

    Args:
        values: Any iterable of numbers / None, or a numpy array.

    Returns:
        New float64 array; never aliases the input.
    """
    if isinstance(values, np.ndarray):
        out = np.array(values, dtype=np.float64, copy=True)
    else:
        out = np.array(
            [np.nan if v is None else float(v) for v in values],
            dtype=np.float64,
        )
    if out.ndim != 1:
        raise PreconditionError(f"Series must be one-dimensional, got shape {out.shape}")
    return freeze(out)


def to_list(series: np.ndarray) -> List[Optional[float]]:
    """Convert a Series to a list with ``None`` in missing cells."""
    return [None if np.isnan(v) else float(v) for v in series]


def check_same_length(*series: np.ndarray) -> int:
    """
    Ensure all series share one length.

    Returns:
        The common length.

    Raises:
        PreconditionError: If lengths differ.
    """
    lengths = {len(s) for s in series}
    if len(lengths) > 1:
        raise PreconditionError(f"Series lengths differ: {sorted(lengths)}")
    return lengths.pop() if lengths else 0


def validate_length(length: Any, parameter: str = "length", minimum: int = 1) -> int:
    """
    Validate a scalar window length.

    Raises:
        ConfigurationError: If length is not an integer >= minimum.
    """
    if isinstance(length, bool) or not isinstance(length, (int, np.integer, float, np.floating)):
        raise ConfigurationError(parameter, f"must be an integer, got {length!r}")
    if not math.isfinite(float(length)) or float(length) != int(length):
        raise ConfigurationError(parameter, f"must be an integer, got {length!r}")
    if int(length) < minimum:
        raise ConfigurationError(parameter, f"must be >= {minimum}, got {length!r}")
    return int(length)


# =============================================================================
# VARIADIC ALGEBRA
# =============================================================================

def _normalize_operands(operands: Sequence[Operand]) -> List[np.ndarray]:
    """Turn a mixed series/scalar operand list into equal-length float arrays."""
    if not operands:
        raise ConfigurationError("operands", "at least one operand is required")

    arrays = [np.asarray(op, dtype=np.float64) for op in operands if np.ndim(op) > 0]
    if not arrays:
        raise ConfigurationError("operands", "at least one operand must be a series")
    n = check_same_length(*arrays)

    normalized = []
    for op in operands:
        if np.ndim(op) == 0:
            value = np.nan if op is None else float(op)
            normalized.append(np.full(n, value, dtype=np.float64))
        else:
            normalized.append(np.asarray(op, dtype=np.float64))
    return normalized


def _fold(operands: Sequence[Operand], op: Callable[[np.ndarray, np.ndarray], np.ndarray]) -> np.ndarray:
    arrays = _normalize_operands(operands)
    result = arrays[0].copy()
    with np.errstate(invalid="ignore", divide="ignore"):
        for other in arrays[1:]:
            result = op(result, other)
    return freeze(np.asarray(result, dtype=np.float64))


def add(*operands: Operand) -> np.ndarray:
    """Element-wise sum of all operands, left to right."""
    return _fold(operands, np.add)


def sub(*operands: Operand) -> np.ndarray:
    """Element-wise ``a - b - c ...``."""
    return _fold(operands, np.subtract)


def mult(*operands: Operand) -> np.ndarray:
    """Element-wise product of all operands."""
    return _fold(operands, np.multiply)


def _safe_divide(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    out = np.full(len(a), np.nan, dtype=np.float64)
    ok = b != 0
    np.divide(a, b, out=out, where=ok)
    return out


def div(*operands: Operand) -> np.ndarray:
    """Element-wise ``a / b / c ...``; division by zero yields a missing cell."""
    return _fold(operands, _safe_divide)


def max_of(*operands: Operand) -> np.ndarray:
    """Element-wise maximum; missing if any operand is missing."""
    return _fold(operands, np.maximum)


def min_of(*operands: Operand) -> np.ndarray:
    """Element-wise minimum; missing if any operand is missing."""
    return _fold(operands, np.minimum)


# =============================================================================
# CONSTRUCTION
# =============================================================================

def series_of(value: Optional[float], length: int) -> np.ndarray:
    """Constant series of ``length`` cells (``None`` gives an all-missing series)."""
    length = validate_length(length, minimum=0)
    fill = np.nan if value is None else float(value)
    return freeze(np.full(length, fill, dtype=np.float64))


def shift(series: Operand, offset: int) -> np.ndarray:
    """
    Shift a series right by ``offset`` candles (left when negative).

    ``shift(close, 1)[i] == close[i - 1]``; cells shifted in from outside
    the chart are missing.
    """
    if isinstance(offset, bool) or int(offset) != offset:
        raise ConfigurationError("offset", f"must be an integer, got {offset!r}")
    offset = int(offset)
    src = np.asarray(series, dtype=np.float64)
    n = len(src)
    out = np.full(n, np.nan, dtype=np.float64)
    if offset == 0:
        out[:] = src
    elif 0 < offset < n:
        out[offset:] = src[:-offset]
    elif -n < offset < 0:
        out[:offset] = src[-offset:]
    return freeze(out)


def horizontal_line(value: float, length: int, from_index: int = 0, to_index: Optional[int] = None) -> np.ndarray:
    """Series holding ``value`` on ``[from_index, to_index]`` and missing elsewhere."""
    length = validate_length(length, minimum=0)
    out = np.full(length, np.nan, dtype=np.float64)
    start, end = resolve_range(length, from_index, to_index)
    if start <= end:
        out[start:end + 1] = float(value)
    return freeze(out)


def line(
    from_index: int,
    from_price: float,
    to_index: int,
    to_price: float,
    length: int,
    extend_right: bool = True,
) -> np.ndarray:
    """
    Straight line through two points.

    Args:
        from_index: Candle index of point A (line starts here).
        from_price: Price at point A.
        to_index: Candle index of point B.
        to_price: Price at point B.
        length: Length of the resulting series (chart candle count).
        extend_right: Continue the ray to the last candle instead of stopping at B.

    Returns:
        Series with the line values from A onward, missing elsewhere.
    """
    length = validate_length(length, minimum=0)
    if from_index == to_index:
        raise ConfigurationError("to_index", "line endpoints must have distinct indexes")
    out = np.full(length, np.nan, dtype=np.float64)
    slope = (to_price - from_price) / (to_index - from_index)
    start = max(min(from_index, to_index), 0)
    end = length - 1 if extend_right else min(max(from_index, to_index), length - 1)
    if start <= end:
        idx = np.arange(start, end + 1)
        out[start:end + 1] = from_price + slope * (idx - from_index)
    return freeze(out)


def resolve_range(length: int, from_index: int, to_index: Optional[int]) -> tuple[int, int]:
    """Resolve possibly negative from/to indexes to an inclusive clipped range."""
    start = from_index + length if from_index < 0 else from_index
    end = length - 1 if to_index is None else (to_index + length if to_index < 0 else to_index)
    return max(start, 0), min(end, length - 1)


# =============================================================================
# PER-CANDLE CALLBACKS
# =============================================================================

def for_every(*args: Any) -> np.ndarray:
    """
    Build a series by running an operation once per candle.

    The last positional argument is the operation; all others are series.
    The operation is called as ``operation(v1, v2, ..., previous, index)``
    in increasing index order, where missing cells are passed as ``None``
    and ``previous`` is the previous output (``None`` at index 0 or when
    the previous output was missing).

    Example:
        obv = for_every(close, open_, volume,
                        lambda c, o, v, prev, i: (prev or 0) + (v if c > o else -v))
    """
    if len(args) < 2 or not callable(args[-1]):
        raise ConfigurationError("operation", "for_every needs at least one series and a callable")
    operation = args[-1]
    arrays = [np.asarray(s, dtype=np.float64) for s in args[:-1]]
    n = check_same_length(*arrays)

    out = np.full(n, np.nan, dtype=np.float64)
    previous: Optional[float] = None
    for i in range(n):
        values = [None if np.isnan(a[i]) else float(a[i]) for a in arrays]
        result = operation(*values, previous, i)
        if result is None or (isinstance(result, float) and math.isnan(result)):
            previous = None
        else:
            out[i] = float(result)
            previous = out[i]
    return freeze(out)
