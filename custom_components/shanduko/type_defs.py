"""Type definitions for Shanduko data structures.

TypedDicts describe the application-level models returned by the data access
layer. Storage rows coming back from the cloud store are plain
``dict[str, Any]`` until ``data_builders`` has shaped them.

IMPORTANT: This file must NOT import from coordinator.py or any manager to
avoid circular dependencies. Only typing machinery is imported here.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime shape checks live in
data_builders.py.
"""

from typing import Any, Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

UserId = str
ReportId = str
ISODatetime = str  # "2026-01-18T12:30:00+00:00"
ISODate = str  # "2026-01-18"

ReportStatus = Literal["submitted", "reviewing", "resolved", "closed"]
ReactionType = Literal["helpful", "concerning", "thankful", "verified"]

Row = dict[str, Any]


# =============================================================================
# Profile
# =============================================================================


class BadgeData(TypedDict):
    """One earned achievement, recorded on a profile."""

    code: str
    title: str
    emoji: str
    description: str
    earned_at: ISODatetime


class AlertPreferences(TypedDict):
    """Per-user water quality alert thresholds."""

    ph_min: float
    ph_max: float
    turbidity_max: float
    dissolved_oxygen_min: float
    alert_radius: float


class FeatureFlags(TypedDict):
    """Per-user feature toggles."""

    gamification: bool
    community: bool
    animated_charts: bool
    heatmap: bool
    crazy_demo: bool
    use_cloud_backend: bool


class ProfileData(TypedDict):
    """A community member's profile (points and badges live here)."""

    id: UserId
    username: str
    avatar_emoji: str
    region: str
    points: int
    streak_days: int
    badges: list[BadgeData]
    alert_preferences: AlertPreferences
    feature_flags: FeatureFlags
    created_at: ISODatetime
    updated_at: ISODatetime


class LeaderboardEntry(TypedDict):
    """A profile annotated with its leaderboard position."""

    id: UserId
    username: str
    avatar_emoji: str
    points: int
    badges: list[BadgeData]
    rank: int
    is_current_user: bool


class CloudUser(TypedDict):
    """Identity resolved from the cloud auth endpoint."""

    id: UserId
    email: str | None


# =============================================================================
# Reports
# =============================================================================


class VerificationData(TypedDict):
    """A community judgement on a report's accuracy."""

    id: str
    user_id: UserId
    username: str
    is_accurate: bool
    notes: NotRequired[str]
    timestamp: ISODatetime


class ReactionData(TypedDict):
    """A toggled reaction on a report."""

    id: str
    user_id: UserId
    username: str
    type: ReactionType
    timestamp: ISODatetime


class ReportData(TypedDict):
    """A user-submitted water quality observation."""

    id: ReportId
    user_id: NotRequired[UserId]
    timestamp: ISODatetime
    title: str
    description: str
    location: NotRequired[str]
    latitude: NotRequired[float]
    longitude: NotRequired[float]
    images: list[str]
    status: ReportStatus
    verifications: list[VerificationData]
    reactions: list[ReactionData]


# =============================================================================
# Readings and quiz
# =============================================================================


class SensorReadingData(TypedDict):
    """One water quality sample."""

    id: str
    timestamp: ISODatetime
    temperature: float
    ph_level: float
    dissolved_oxygen: float
    turbidity: float
    e_coli: int
    total_coliform: int
    bacteria_atp: int
    latitude: NotRequired[float]
    longitude: NotRequired[float]
    location_name: NotRequired[str]
    is_anomaly: NotRequired[bool]


class PredictionData(TypedDict):
    """A forecast water quality sample."""

    id: str
    timestamp: ISODatetime
    temperature: float
    ph_level: float
    dissolved_oxygen: float
    turbidity: float
    is_anomaly: bool


class QuizAttemptData(TypedDict):
    """A daily quiz attempt (one per user per calendar day)."""

    id: str
    user_id: UserId
    date: ISODate
    correct: int
    total: int
    questions_answered: list[int]


class AchievementProgress(TypedDict):
    """Progress toward a threshold achievement."""

    current: int
    target: int
    percentage: float
