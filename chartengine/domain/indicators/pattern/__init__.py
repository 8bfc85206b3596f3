"""Pattern indicators: fractals, pivots and the ZigZag extractor."""

from .fractal import FractalIndicator, PivotIndicator, fractal_high, fractal_low, pivot_high, pivot_low
from .zigzag import (
    SwingKind,
    SwingPoint,
    ZigZagExtractor,
    ZigZagIndicator,
    ZigZagPoints,
    find_swing_points,
    swing_line,
    zigzag,
    zigzag_points,
)

__all__ = [
    "FractalIndicator",
    "PivotIndicator",
    "SwingKind",
    "SwingPoint",
    "ZigZagExtractor",
    "ZigZagIndicator",
    "ZigZagPoints",
    "find_swing_points",
    "fractal_high",
    "fractal_low",
    "pivot_high",
    "pivot_low",
    "swing_line",
    "zigzag",
    "zigzag_points",
]
