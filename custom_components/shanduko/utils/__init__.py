"""Pure Python utilities for Shanduko.

This module contains pure Python functions with ZERO Home Assistant
dependencies. All functions here can be unit tested without Home Assistant
mocking.

Submodules:
    - dt_utils: UTC timestamps, history windows, parsing
    - math_utils: XP rounding, progress percentages, quiz scores
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
