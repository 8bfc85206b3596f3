"""
Series layer.

Read-only float64 arrays with NaN as the missing cell, the candle context,
the windowed reducer framework and sparse-series utilities.
"""

from .candles import Candles
from .core import (
    add,
    as_series,
    div,
    for_every,
    freeze,
    horizontal_line,
    line,
    max_of,
    min_of,
    mult,
    series_of,
    shift,
    sub,
    to_list,
)
from .sparse import (
    IndexedPoint,
    cut_series,
    indexed_points_of,
    interpolate_sparse_series,
    land_points_onto_series,
    sparse_series_of,
)
from .window import highest, lowest, reduce, rolling_sum, sliding_window_function

__all__ = [
    "Candles",
    "IndexedPoint",
    "add",
    "as_series",
    "cut_series",
    "div",
    "for_every",
    "freeze",
    "highest",
    "horizontal_line",
    "indexed_points_of",
    "interpolate_sparse_series",
    "land_points_onto_series",
    "line",
    "lowest",
    "max_of",
    "min_of",
    "mult",
    "reduce",
    "rolling_sum",
    "series_of",
    "shift",
    "sliding_window_function",
    "sparse_series_of",
    "sub",
    "to_list",
]
