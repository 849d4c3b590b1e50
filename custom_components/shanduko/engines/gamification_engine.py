"""Gamification Engine - Pure logic for achievement evaluation.

This engine provides the static achievement catalog and stateless functions
for deciding which achievements a profile has newly earned:
- Achievement definitions (code, reward, rarity, predicate)
- The per-event evaluation context
- Newly-earned evaluation in catalog order
- Progress reporting for threshold achievements

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
The GamificationManager loads the profile, calls into this engine and applies
the results (badges, XP, announcements).

PURITY CONTRACT:
- Conditions read only profile scalars (points, streak_days) and context
- No side effects, no storage access, no state mutation
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass, fields
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from ..utils.math_utils import calculate_percentage

if TYPE_CHECKING:
    from ..type_defs import AchievementProgress, BadgeData, ProfileData


class Rarity(StrEnum):
    """Achievement rarity tier. Controls celebration intensity only."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"

    @property
    def rank(self) -> int:
        """Return the ordinal position (common=0 ... legendary=4)."""
        return list(Rarity).index(self)


class AchievementCategory(StrEnum):
    """Display grouping for achievements."""

    REPORTING = "reporting"
    LEARNING = "learning"
    ENGAGEMENT = "engagement"
    EXPERT = "expert"
    COMMUNITY = "community"


BADGE_CATEGORIES: dict[AchievementCategory, dict[str, str]] = {
    AchievementCategory.REPORTING: {"name": "Reporting", "color": "blue"},
    AchievementCategory.LEARNING: {"name": "Learning", "color": "green"},
    AchievementCategory.ENGAGEMENT: {"name": "Engagement", "color": "purple"},
    AchievementCategory.EXPERT: {"name": "Expert", "color": "orange"},
    AchievementCategory.COMMUNITY: {"name": "Community", "color": "pink"},
}


# =============================================================================
# EVALUATION CONTEXT
# =============================================================================

_CONTEXT_FLAGS = frozenset({"has_perfect_quiz", "has_location_reports"})


@dataclass(frozen=True, slots=True)
class GamificationContext:
    """What just happened, as seen by achievement conditions.

    Every field is optional. Counters must be non-negative integers, flags
    must be booleans. An unset counter never satisfies a threshold.
    """

    reports_count: int | None = None
    quizzes_completed: int | None = None
    anomalies_reported: int | None = None
    has_perfect_quiz: bool | None = None
    high_score_quizzes: int | None = None
    dashboard_views: int | None = None
    map_views: int | None = None
    shared_reports: int | None = None
    has_location_reports: bool | None = None

    def __post_init__(self) -> None:
        """Validate field types at construction."""
        for field in fields(self):
            value = getattr(self, field.name)
            if value is None:
                continue
            if field.name in _CONTEXT_FLAGS:
                if not isinstance(value, bool):
                    raise TypeError(f"{field.name} must be a boolean, got {value!r}")
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{field.name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{field.name} must be non-negative, got {value}")

    def count(self, name: str) -> int:
        """Return a counter value, treating unset as zero."""
        return getattr(self, name) or 0

    def as_dict(self) -> dict[str, Any]:
        """Return only the fields that were set (for logging/events)."""
        return {key: value for key, value in asdict(self).items() if value is not None}


# =============================================================================
# ACHIEVEMENT CATALOG
# =============================================================================

Condition = Callable[["ProfileData", GamificationContext], bool]


@dataclass(frozen=True, slots=True)
class Achievement:
    """Static achievement definition. Never persisted."""

    code: str
    title: str
    description: str
    emoji: str
    category: AchievementCategory
    xp_reward: int
    rarity: Rarity
    condition: Condition

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable view (condition omitted)."""
        return {
            "code": self.code,
            "title": self.title,
            "description": self.description,
            "emoji": self.emoji,
            "category": str(self.category),
            "category_name": BADGE_CATEGORIES[self.category]["name"],
            "category_color": BADGE_CATEGORIES[self.category]["color"],
            "xp_reward": self.xp_reward,
            "rarity": str(self.rarity),
            "rarity_rank": self.rarity.rank,
        }


def _points(profile: ProfileData) -> int:
    return profile.get("points") or 0


def _streak(profile: ProfileData) -> int:
    return profile.get("streak_days") or 0


ACHIEVEMENTS: tuple[Achievement, ...] = (
    # Reporting
    Achievement(
        code="first_report",
        title="First Reporter",
        description="Submit your first water quality report",
        emoji="📝",
        category=AchievementCategory.REPORTING,
        xp_reward=25,
        rarity=Rarity.COMMON,
        condition=lambda profile, ctx: ctx.count("reports_count") >= 1,
    ),
    Achievement(
        code="reporter_5",
        title="Active Reporter",
        description="Submit 5 water quality reports",
        emoji="📊",
        category=AchievementCategory.REPORTING,
        xp_reward=50,
        rarity=Rarity.UNCOMMON,
        condition=lambda profile, ctx: ctx.count("reports_count") >= 5,
    ),
    Achievement(
        code="reporter_10",
        title="Dedicated Reporter",
        description="Submit 10 water quality reports",
        emoji="🏆",
        category=AchievementCategory.REPORTING,
        xp_reward=100,
        rarity=Rarity.RARE,
        condition=lambda profile, ctx: ctx.count("reports_count") >= 10,
    ),
    Achievement(
        code="anomaly_finder",
        title="Anomaly Detector",
        description="Report a confirmed water quality anomaly",
        emoji="🔍",
        category=AchievementCategory.REPORTING,
        xp_reward=75,
        rarity=Rarity.UNCOMMON,
        condition=lambda profile, ctx: ctx.count("anomalies_reported") >= 1,
    ),
    # Learning
    Achievement(
        code="first_quiz",
        title="Knowledge Seeker",
        description="Complete your first daily quiz",
        emoji="🧠",
        category=AchievementCategory.LEARNING,
        xp_reward=20,
        rarity=Rarity.COMMON,
        condition=lambda profile, ctx: ctx.count("quizzes_completed") >= 1,
    ),
    Achievement(
        code="perfect_quiz",
        title="Perfect Score",
        description="Get 100% on a daily quiz",
        emoji="🎯",
        category=AchievementCategory.LEARNING,
        xp_reward=50,
        rarity=Rarity.UNCOMMON,
        condition=lambda profile, ctx: ctx.has_perfect_quiz is True,
    ),
    Achievement(
        code="quiz_streak_7",
        title="Learning Streak",
        description="Complete 7 daily quizzes in a row",
        emoji="🔥",
        category=AchievementCategory.LEARNING,
        xp_reward=100,
        rarity=Rarity.RARE,
        condition=lambda profile, ctx: _streak(profile) >= 7,
    ),
    Achievement(
        code="quiz_streak_30",
        title="Knowledge Master",
        description="Complete 30 daily quizzes in a row",
        emoji="🌟",
        category=AchievementCategory.LEARNING,
        xp_reward=300,
        rarity=Rarity.EPIC,
        condition=lambda profile, ctx: _streak(profile) >= 30,
    ),
    # Engagement
    Achievement(
        code="points_100",
        title="Rising Star",
        description="Earn your first 100 points",
        emoji="⭐",
        category=AchievementCategory.ENGAGEMENT,
        xp_reward=25,
        rarity=Rarity.COMMON,
        condition=lambda profile, ctx: _points(profile) >= 100,
    ),
    Achievement(
        code="points_500",
        title="Community Champion",
        description="Earn 500 points",
        emoji="🏅",
        category=AchievementCategory.ENGAGEMENT,
        xp_reward=75,
        rarity=Rarity.UNCOMMON,
        condition=lambda profile, ctx: _points(profile) >= 500,
    ),
    Achievement(
        code="points_1000",
        title="Lake Guardian",
        description="Earn 1000 points",
        emoji="🛡️",
        category=AchievementCategory.ENGAGEMENT,
        xp_reward=150,
        rarity=Rarity.RARE,
        condition=lambda profile, ctx: _points(profile) >= 1000,
    ),
    Achievement(
        code="early_adopter",
        title="Early Adopter",
        description="Join the Shanduko community",
        emoji="🚀",
        category=AchievementCategory.ENGAGEMENT,
        xp_reward=10,
        rarity=Rarity.COMMON,
        condition=lambda profile, ctx: True,
    ),
    # Expert
    Achievement(
        code="water_expert",
        title="Water Quality Expert",
        description="Score 90%+ on 5 different quizzes",
        emoji="💧",
        category=AchievementCategory.EXPERT,
        xp_reward=200,
        rarity=Rarity.EPIC,
        condition=lambda profile, ctx: ctx.count("high_score_quizzes") >= 5,
    ),
    Achievement(
        code="data_analyst",
        title="Data Analyst",
        description="View the dashboard 10 times",
        emoji="📈",
        category=AchievementCategory.EXPERT,
        xp_reward=50,
        rarity=Rarity.UNCOMMON,
        condition=lambda profile, ctx: ctx.count("dashboard_views") >= 10,
    ),
    Achievement(
        code="map_explorer",
        title="Map Explorer",
        description="Explore the water quality map 5 times",
        emoji="🗺️",
        category=AchievementCategory.EXPERT,
        xp_reward=30,
        rarity=Rarity.COMMON,
        condition=lambda profile, ctx: ctx.count("map_views") >= 5,
    ),
    # Community
    Achievement(
        code="social_butterfly",
        title="Social Butterfly",
        description="Share a report with the community",
        emoji="🦋",
        category=AchievementCategory.COMMUNITY,
        xp_reward=40,
        rarity=Rarity.UNCOMMON,
        condition=lambda profile, ctx: ctx.count("shared_reports") >= 1,
    ),
    Achievement(
        code="helpful_citizen",
        title="Helpful Citizen",
        description="Enable location sharing for reports",
        emoji="📍",
        category=AchievementCategory.COMMUNITY,
        xp_reward=20,
        rarity=Rarity.COMMON,
        condition=lambda profile, ctx: ctx.has_location_reports is True,
    ),
)

_ACHIEVEMENTS_BY_CODE: dict[str, Achievement] = {a.code: a for a in ACHIEVEMENTS}

# Threshold achievements: code -> (source, key, target)
_PROGRESS_TARGETS: dict[str, tuple[str, str, int]] = {
    "reporter_5": ("context", "reports_count", 5),
    "reporter_10": ("context", "reports_count", 10),
    "quiz_streak_7": ("profile", "streak_days", 7),
    "quiz_streak_30": ("profile", "streak_days", 30),
    "points_100": ("profile", "points", 100),
    "points_500": ("profile", "points", 500),
    "points_1000": ("profile", "points", 1000),
}


# =============================================================================
# EVALUATION
# =============================================================================


def earned_codes(profile: ProfileData) -> set[str]:
    """Return the set of achievement codes already recorded on a profile."""
    return {
        badge["code"]
        for badge in profile.get("badges") or []
        if isinstance(badge, dict) and "code" in badge
    }


def check_achievements(
    profile: ProfileData,
    context: GamificationContext | None = None,
) -> list[Achievement]:
    """Return achievements newly earned by ``profile`` under ``context``.

    Already-earned codes are skipped, remaining conditions are evaluated, and
    survivors are returned in catalog order (the tie-break for achievements
    earned in the same evaluation).
    """
    ctx = context or GamificationContext()
    already_earned = earned_codes(profile)

    return [
        achievement
        for achievement in ACHIEVEMENTS
        if achievement.code not in already_earned
        and achievement.condition(profile, ctx)
    ]


def get_achievement_by_code(code: str) -> Achievement | None:
    """Look up a catalog entry by code."""
    return _ACHIEVEMENTS_BY_CODE.get(code)


def build_badge(achievement: Achievement, earned_at: str) -> BadgeData:
    """Create the badge record stored on a profile for an earned achievement."""
    return {
        "code": achievement.code,
        "title": achievement.title,
        "emoji": achievement.emoji,
        "description": achievement.description,
        "earned_at": earned_at,
    }


def format_achievement_progress(
    achievement: Achievement,
    profile: ProfileData,
    context: GamificationContext | None = None,
) -> AchievementProgress:
    """Return progress toward a threshold achievement.

    Achievements without a numeric threshold report ``0 / 1``.
    """
    progress_target = _PROGRESS_TARGETS.get(achievement.code)
    if progress_target is None:
        return {"current": 0, "target": 1, "percentage": 0.0}

    source, key, target = progress_target
    if source == "profile":
        value = profile.get(key) or 0  # type: ignore[misc]
    else:
        value = (context or GamificationContext()).count(key)

    return {
        "current": min(value, target),
        "target": target,
        "percentage": calculate_percentage(value, target),
    }
