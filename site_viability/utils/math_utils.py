"""Numeric helpers shared by feature extraction and scoring"""

import math
from typing import Sequence


def clamp(value: float, lower: float, upper: float) -> float:
    """Bound value to [lower, upper]"""
    return min(upper, max(lower, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward +infinity (not banker's rounding)"""
    return int(math.floor(value + 0.5))


def round2(value: float) -> float:
    return round(value, 2)


def median(values: Sequence[float]) -> float:
    """Median of values; 0 for an empty sequence, mean of the middle pair for even lengths"""
    if not values:
        return 0

    ordered = sorted(values)
    middle = len(ordered) // 2

    if len(ordered) % 2 == 0:
        return (ordered[middle - 1] + ordered[middle]) / 2

    return ordered[middle]
