"""Configuration data models."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Any, Optional


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    json: bool = False
    colors: bool = True
    category_levels: Dict[str, str] = field(default_factory=dict)  # e.g. {"trends": "DEBUG"}


@dataclass
class TrendScorerConfig:
    """Trend scorer limits and tolerances."""
    touch_tolerance_atr: float = 0.1  # Touch zone half-width as a multiple of ATR
    max_candidates: int = 20000  # Pair count above which base points are pruned
    max_seconds: float = 10.0  # Wall-clock budget for one find_trends call


@dataclass
class ZigZagConfig:
    """Default zigzag parameters."""
    depth: int = 20
    deviation: float = 1.0  # Percent
    backstep: int = 2


@dataclass
class TimeSpanConfig:
    """Lookback window and zigzag parameters for one formation timespan."""
    lookback: int
    zigzag_depth: int
    zigzag_deviation: float
    zigzag_backstep: int


@dataclass
class FormationConfig:
    """Channel / broadening / triangle / wedge search configuration."""
    time_spans: Dict[str, TimeSpanConfig] = field(default_factory=lambda: {
        "short": TimeSpanConfig(lookback=100, zigzag_depth=5, zigzag_deviation=1.0, zigzag_backstep=2),
        "long": TimeSpanConfig(lookback=300, zigzag_depth=10, zigzag_deviation=2.0, zigzag_backstep=3),
    })
    atr_length: int = 14
    flat_slope_tolerance: float = 0.01  # ATR per bar below which a line counts as flat
    parallel_tolerance: float = 0.015  # ATR per bar slope difference for parallel lines
    min_touches: int = 2  # Touching candles required on each line
    max_violations_percent: float = 10.0  # Closes beyond a line, percent of its candles
    line_formula: str = "n - 2 * v"
    max_lines_per_side: int = 50  # Best lines per side kept for combination


@dataclass
class DoublePeakParams:
    """Double top/bottom constraints for one timespan."""
    max_distance: int
    min_distance: int
    price_max_difference_atr: float
    price_max_difference_percentage: float
    min_start_valley_floor_difference: float
    min_valley_floor_peak_difference: float
    max_halves_ratio: float
    relevant_area_threshold: float
    zigzag_depth: int
    zigzag_deviation: float
    zigzag_backstep: int


@dataclass
class DoublePeakConfig:
    """Double top/bottom search configuration."""
    time_spans: Dict[str, DoublePeakParams] = field(default_factory=lambda: {
        "short term": DoublePeakParams(
            max_distance=60,
            min_distance=10,
            price_max_difference_atr=1.0,
            price_max_difference_percentage=3.0,
            min_start_valley_floor_difference=1.0,
            min_valley_floor_peak_difference=1.5,
            max_halves_ratio=3.0,
            relevant_area_threshold=0.5,
            zigzag_depth=5,
            zigzag_deviation=1.0,
            zigzag_backstep=2,
        ),
        "long term": DoublePeakParams(
            max_distance=200,
            min_distance=20,
            price_max_difference_atr=1.5,
            price_max_difference_percentage=5.0,
            min_start_valley_floor_difference=1.5,
            min_valley_floor_peak_difference=2.0,
            max_halves_ratio=3.0,
            relevant_area_threshold=0.5,
            zigzag_depth=10,
            zigzag_deviation=2.0,
            zigzag_backstep=3,
        ),
    })
    atr_length: int = 14
    support_break_atr: float = 0.5  # Close below support by this many ATR ends in_force
    adam_curvature_atr: float = 0.25  # Normalised curvature at or above which a peak is "Adam"


@dataclass
class HeadAndShouldersConfig:
    """Head-and-shoulders defaults."""
    depth: int = 11
    deviation: float = 0.01
    backstep: int = 2
    head_height: float = 0.0


@dataclass
class EngineConfig:
    """Complete engine configuration."""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    trends: TrendScorerConfig = field(default_factory=TrendScorerConfig)
    zigzag: ZigZagConfig = field(default_factory=ZigZagConfig)
    formations: FormationConfig = field(default_factory=FormationConfig)
    double_peak: DoublePeakConfig = field(default_factory=DoublePeakConfig)
    head_and_shoulders: HeadAndShouldersConfig = field(default_factory=HeadAndShouldersConfig)
    raw: Optional[Dict[str, Any]] = None  # Raw merged YAML, when loaded from files
