"""Chart pattern result models."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..trends.finder import CandidateTrendLine


@dataclass(frozen=True, eq=False)
class FormationResult:
    """
    Best two-line formation (channel, broadening, triangle, wedge).

    Attributes:
        formation: "channel", "broadening", "triangle" or "wedge"
        variant: Requested subtype (e.g. "ascending")
        time_span: Timespan key used for the search window
        top_line, bottom_line: Series from the pattern start to the last candle
        top, bottom: The scored candidate lines the series are drawn from
        top_slope, bottom_slope: Slopes in ATR per candle
        start_index: First candle of the pattern
        score: Combined line score
    """

    formation: str
    variant: str
    time_span: str
    top_line: np.ndarray
    bottom_line: np.ndarray
    top: CandidateTrendLine
    bottom: CandidateTrendLine
    top_slope: float
    bottom_slope: float
    start_index: int
    score: float


@dataclass(frozen=True)
class DoublePeakIndexes:
    pattern_start: int
    first_peak: int
    valley_floor: int
    second_peak: int
    pattern_last_index: int


@dataclass(frozen=True, eq=False)
class DoublePeakResult:
    """
    Double top / double bottom.

    ``pattern_line`` connects the pattern points; ``support_line`` runs
    horizontally from the valley floor to the last candle. ``in_force`` is
    False once price has closed through the support line.
    """

    peak_type: str
    pattern_line: np.ndarray
    support_line: np.ndarray
    indexes: DoublePeakIndexes
    first_peak_label: str
    second_peak_label: str
    in_force: bool
    score: float


@dataclass(frozen=True)
class HeadAndShouldersIndexes:
    start: int
    left_shoulder: int
    left_trough: int
    head: int
    right_trough: int
    right_shoulder: int
    end: int


@dataclass(frozen=True, eq=False)
class HeadAndShouldersResult:
    """Head and shoulders (or inverse) with its neck line."""

    inverse: bool
    pattern_line: np.ndarray
    neck_line: np.ndarray
    indexes: HeadAndShouldersIndexes
    score: float
