"""Engine modules for Shanduko integration.

Contains pure computation engines:
- gamification_engine: Achievement catalog, context and evaluation
- alert_engine: Static threshold checks on readings
"""

# Use relative imports within package to avoid mypy module resolution issues
from .alert_engine import evaluate_reading
from .gamification_engine import (
    ACHIEVEMENTS,
    Achievement,
    AchievementCategory,
    GamificationContext,
    Rarity,
    check_achievements,
    format_achievement_progress,
    get_achievement_by_code,
)

__all__ = [
    "ACHIEVEMENTS",
    "Achievement",
    "AchievementCategory",
    "GamificationContext",
    "Rarity",
    "check_achievements",
    "evaluate_reading",
    "format_achievement_progress",
    "get_achievement_by_code",
]
