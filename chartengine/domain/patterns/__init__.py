"""
Chart pattern matchers.

Each matcher returns its single best candidate, or None when nothing
matches.
"""

from .double_peak import find_double_peak_formation
from .formations import find_broadening, find_channel, find_triangle, find_wedge
from .head_and_shoulders import find_head_and_shoulders
from .models import (
    DoublePeakIndexes,
    DoublePeakResult,
    FormationResult,
    HeadAndShouldersIndexes,
    HeadAndShouldersResult,
)

__all__ = [
    "DoublePeakIndexes",
    "DoublePeakResult",
    "FormationResult",
    "HeadAndShouldersIndexes",
    "HeadAndShouldersResult",
    "find_broadening",
    "find_channel",
    "find_double_peak_formation",
    "find_head_and_shoulders",
    "find_triangle",
    "find_wedge",
]
