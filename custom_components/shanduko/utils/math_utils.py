# File: utils/math_utils.py
"""Math and calculation utilities for Shanduko.

Pure Python math functions with ZERO Home Assistant dependencies.

Functions:
    - round_half_up: Rounding that never rounds .5 toward even
    - calculate_percentage: Capped progress percentage
    - quiz_score: Fraction of correct answers
"""

from __future__ import annotations

import logging
import math

_LOGGER = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding up.

    Python's built-in ``round`` rounds halves to even (``round(2.5) == 2``),
    which would hand out one XP less than expected for half scores.

    Examples:
        round_half_up(2.5) → 3
        round_half_up(13.3) → 13
    """
    return math.floor(value + 0.5)


def calculate_percentage(current: float, target: float) -> float:
    """Return ``current / target`` as a percentage capped at 100.

    A non-positive target yields 0.0.
    """
    if target <= 0:
        return 0.0
    return min((current / target) * 100, 100.0)


def quiz_score(correct: int, total: int) -> float:
    """Return the fraction of questions answered correctly (0.0 - 1.0)."""
    if total <= 0:
        _LOGGER.debug("DEBUG: quiz_score called with total=%s", total)
        return 0.0
    return correct / total
