"""
Trend line discovery.

- formula: whitelisted arithmetic over hit metrics
- hits: per-line candle classification (HitMetrics, HitCounter)
- finder: enumeration, pruning, scoring and ranking (find_trends)
"""

from .finder import CandidateTrendLine, TrendPoint, find_trends, score_lines
from .formula import FormulaError, TrendFormula, parse_formula
from .hits import HitCounter, HitMetrics

__all__ = [
    "CandidateTrendLine",
    "FormulaError",
    "HitCounter",
    "HitMetrics",
    "TrendFormula",
    "TrendPoint",
    "find_trends",
    "parse_formula",
    "score_lines",
]
