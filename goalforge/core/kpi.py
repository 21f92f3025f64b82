"""
kpi.py — KPI achievement, severity bands and department roll-up.
"""

from typing import Iterable, Optional

from goalforge.core.progress import percent
from goalforge.schemas import KPI

LOW_BAND_BELOW = 30
HIGH_BAND_FROM = 70


def compute_achievement(current_value: float, target_value: float) -> int:
    """Achievement percentage, capped at 100. A zero target yields 0."""
    if target_value == 0:
        return 0
    return min(100, percent(current_value, target_value))


def kpi_achievement(kpi: KPI) -> int:
    return compute_achievement(kpi.current_value, kpi.target_value)


def achievement_band(achievement: int) -> str:
    if achievement < LOW_BAND_BELOW:
        return "low"
    if achievement < HIGH_BAND_FROM:
        return "medium"
    return "high"


def weighted_rollup(children: Iterable[KPI]) -> Optional[int]:
    """Weighted mean achievement of the children, or None when there are none."""
    total_weight = 0.0
    weighted = 0.0
    for child in children:
        total_weight += child.weight
        weighted += child.weight * kpi_achievement(child)
    if total_weight == 0:
        return None
    return percent(weighted, total_weight * 100)
