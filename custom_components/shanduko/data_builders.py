"""Row shaping helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Turning storage rows (nullable columns, JSON blobs) into application models
- Typed defaults for malformed JSON blobs
- Building new verification, reaction, report and quiz attempt records
- Mapping partial profile updates onto the row shape

## JSON blobs
Badges, alert preferences and feature flags are stored as JSON. Reads never
fail on a malformed blob: each ``parse_*`` function returns a ``ParseResult``
holding either the parsed value or the documented default, with
``used_fallback`` set and a WARNING logged when the default was substituted.

Consumers:
- data_access.py (both backends)
- demo_data.py shapes its collections to match these models
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any, Generic, TypeVar
import uuid

from . import const
from .type_defs import (
    AlertPreferences,
    BadgeData,
    FeatureFlags,
    LeaderboardEntry,
    PredictionData,
    ProfileData,
    QuizAttemptData,
    ReactionData,
    ReportData,
    Row,
    SensorReadingData,
    VerificationData,
)

T = TypeVar("T")

# Required on every stored badge; description and earned_at are optional
_BADGE_REQUIRED_KEYS = (
    const.DATA_BADGE_CODE,
    const.DATA_BADGE_TITLE,
    const.DATA_BADGE_EMOJI,
)
# Key written by older clients
_BADGE_EARNED_AT_LEGACY = "earnedAt"


@dataclass(frozen=True, slots=True)
class ParseResult(Generic[T]):
    """Outcome of decoding a JSON blob."""

    value: T
    used_fallback: bool = False


# ==============================================================================
# HELPER FUNCTIONS FOR FIELD NORMALIZATION
# ==============================================================================


_MALFORMED = object()


def _decode_json(raw: Any) -> Any:
    """Decode a JSON string; other values pass through unchanged."""
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except ValueError:
            return _MALFORMED
    return raw


def _normalize_list_field(value: Any) -> list[Any]:
    """Return ``value`` when it is a list, otherwise an empty list."""
    return list(value) if isinstance(value, list) else []


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _build_badge_entry(item: dict[str, Any]) -> BadgeData:
    """Shape one stored badge, filling the optional fields."""
    earned_at = item.get(const.DATA_BADGE_EARNED_AT)
    if not isinstance(earned_at, str):
        earned_at = item.get(_BADGE_EARNED_AT_LEGACY)
    description = item.get(const.DATA_BADGE_DESCRIPTION)
    return {
        "code": item[const.DATA_BADGE_CODE],
        "title": item[const.DATA_BADGE_TITLE],
        "emoji": item[const.DATA_BADGE_EMOJI],
        "description": description if isinstance(description, str) else "",
        "earned_at": earned_at if isinstance(earned_at, str) else "",
    }


def _drop_none(record: dict[str, Any], optional_keys: tuple[str, ...]) -> None:
    """Remove optional keys whose value is None (absent rather than null)."""
    for key in optional_keys:
        if record.get(key) is None:
            record.pop(key, None)


def new_record_id() -> str:
    """Return a fresh identifier for a locally created record."""
    return str(uuid.uuid4())


# ==============================================================================
# JSON BLOB PARSERS
# ==============================================================================


def parse_badges(raw: Any) -> ParseResult[list[BadgeData]]:
    """Parse a stored badge list.

    Every entry must be an object carrying string code, title and emoji.
    A missing description becomes "" and a missing earned_at falls back to
    the legacy ``earnedAt`` key, then "".
    """
    if raw is None:
        return ParseResult([])

    value = _decode_json(raw)
    if isinstance(value, list) and all(
        isinstance(item, dict)
        and all(isinstance(item.get(key), str) for key in _BADGE_REQUIRED_KEYS)
        for item in value
    ):
        badges = [_build_badge_entry(item) for item in value]
        return ParseResult(badges)

    const.LOGGER.warning("WARNING: Malformed badges blob, using empty list: %r", raw)
    return ParseResult([], used_fallback=True)


def parse_alert_preferences(raw: Any) -> ParseResult[AlertPreferences]:
    """Parse stored alert thresholds; every threshold must be numeric."""
    default: AlertPreferences = dict(const.DEFAULT_ALERT_PREFERENCES)  # type: ignore[assignment]
    if raw is None:
        return ParseResult(default)

    value = _decode_json(raw)
    if isinstance(value, dict) and all(
        _is_number(value.get(key)) for key in const.DEFAULT_ALERT_PREFERENCES
    ):
        prefs: AlertPreferences = {
            key: float(value[key])  # type: ignore[misc]
            for key in const.DEFAULT_ALERT_PREFERENCES
        }
        return ParseResult(prefs)

    const.LOGGER.warning(
        "WARNING: Malformed alert preferences blob, using defaults: %r", raw
    )
    return ParseResult(default, used_fallback=True)


def default_feature_flags(cloud_configured: bool) -> FeatureFlags:
    """Return the default feature flags for the current cloud configuration."""
    return {  # type: ignore[return-value]
        **const.DEFAULT_FEATURE_FLAGS,
        const.CONF_USE_CLOUD_BACKEND: cloud_configured,
    }


def parse_feature_flags(
    raw: Any, *, cloud_configured: bool = False
) -> ParseResult[FeatureFlags]:
    """Parse stored feature flags.

    The five display flags must be booleans. ``use_cloud_backend`` defaults to
    whether the cloud client is configured when it is missing.
    """
    default = default_feature_flags(cloud_configured)
    if raw is None:
        return ParseResult(default)

    value = _decode_json(raw)
    if isinstance(value, dict) and all(
        isinstance(value.get(key), bool) for key in const.DEFAULT_FEATURE_FLAGS
    ):
        use_cloud = value.get(const.CONF_USE_CLOUD_BACKEND)
        flags: FeatureFlags = {  # type: ignore[assignment]
            **{key: value[key] for key in const.DEFAULT_FEATURE_FLAGS},
            const.CONF_USE_CLOUD_BACKEND: (
                use_cloud if isinstance(use_cloud, bool) else cloud_configured
            ),
        }
        return ParseResult(flags)

    const.LOGGER.warning("WARNING: Malformed feature flags blob, using defaults: %r", raw)
    return ParseResult(default, used_fallback=True)


# ==============================================================================
# ROW → MODEL
# ==============================================================================


def build_profile(row: Row, *, cloud_configured: bool = False) -> ProfileData:
    """Build a profile model from a stored row."""
    return {
        "id": row[const.DATA_ID],
        "username": row.get(const.DATA_PROFILE_USERNAME) or "",
        "avatar_emoji": row.get(const.DATA_PROFILE_AVATAR_EMOJI)
        or const.DEFAULT_AVATAR_EMOJI,
        "region": row.get(const.DATA_PROFILE_REGION) or const.DEFAULT_REGION,
        "points": int(row.get(const.DATA_PROFILE_POINTS) or 0),
        "streak_days": int(row.get(const.DATA_PROFILE_STREAK_DAYS) or 0),
        "badges": parse_badges(row.get(const.DATA_PROFILE_BADGES)).value,
        "alert_preferences": parse_alert_preferences(
            row.get(const.DATA_PROFILE_ALERT_PREFERENCES)
        ).value,
        "feature_flags": parse_feature_flags(
            row.get(const.DATA_PROFILE_FEATURE_FLAGS),
            cloud_configured=cloud_configured,
        ).value,
        "created_at": row.get(const.DATA_CREATED_AT) or "",
        "updated_at": row.get(const.DATA_UPDATED_AT) or "",
    }


def build_report(row: Row) -> ReportData:
    """Build a report model from a stored row."""
    report: dict[str, Any] = {
        "id": row[const.DATA_ID],
        "user_id": row.get(const.DATA_REPORT_USER_ID),
        "timestamp": row.get(const.DATA_TIMESTAMP) or "",
        "title": row.get(const.DATA_REPORT_TITLE) or "",
        "description": row.get(const.DATA_REPORT_DESCRIPTION) or "",
        "location": row.get(const.DATA_REPORT_LOCATION),
        "latitude": row.get(const.DATA_REPORT_LATITUDE),
        "longitude": row.get(const.DATA_REPORT_LONGITUDE),
        "images": _normalize_list_field(_decode_json(row.get(const.DATA_REPORT_IMAGES))),
        "status": row.get(const.DATA_REPORT_STATUS) or const.REPORT_STATUS_SUBMITTED,
        "verifications": _normalize_list_field(
            _decode_json(row.get(const.DATA_REPORT_VERIFICATIONS))
        ),
        "reactions": _normalize_list_field(
            _decode_json(row.get(const.DATA_REPORT_REACTIONS))
        ),
    }
    _drop_none(
        report,
        (
            const.DATA_REPORT_USER_ID,
            const.DATA_REPORT_LOCATION,
            const.DATA_REPORT_LATITUDE,
            const.DATA_REPORT_LONGITUDE,
        ),
    )
    return report  # type: ignore[return-value]


def build_sensor_reading(row: Row) -> SensorReadingData:
    """Build a sensor reading model from a stored row."""
    reading: dict[str, Any] = {
        "id": str(row[const.DATA_ID]),
        "timestamp": row.get(const.DATA_TIMESTAMP) or "",
        "temperature": float(row.get(const.DATA_READING_TEMPERATURE) or 0),
        "ph_level": float(row.get(const.DATA_READING_PH_LEVEL) or 0),
        "dissolved_oxygen": float(row.get(const.DATA_READING_DISSOLVED_OXYGEN) or 0),
        "turbidity": float(row.get(const.DATA_READING_TURBIDITY) or 0),
        "e_coli": int(row.get(const.DATA_READING_E_COLI) or 0),
        "total_coliform": int(row.get(const.DATA_READING_TOTAL_COLIFORM) or 0),
        "bacteria_atp": int(row.get(const.DATA_READING_BACTERIA_ATP) or 0),
        "latitude": row.get(const.DATA_READING_LATITUDE),
        "longitude": row.get(const.DATA_READING_LONGITUDE),
        "location_name": row.get(const.DATA_READING_LOCATION_NAME),
        "is_anomaly": row.get(const.DATA_READING_IS_ANOMALY),
    }
    _drop_none(
        reading,
        (
            const.DATA_READING_LATITUDE,
            const.DATA_READING_LONGITUDE,
            const.DATA_READING_LOCATION_NAME,
            const.DATA_READING_IS_ANOMALY,
        ),
    )
    return reading  # type: ignore[return-value]


def build_prediction(row: Row) -> PredictionData:
    """Build a forecast sample from a stored row."""
    return {
        "id": str(row[const.DATA_ID]),
        "timestamp": row.get(const.DATA_TIMESTAMP) or "",
        "temperature": float(row.get(const.DATA_READING_TEMPERATURE) or 0),
        "ph_level": float(row.get(const.DATA_READING_PH_LEVEL) or 0),
        "dissolved_oxygen": float(row.get(const.DATA_READING_DISSOLVED_OXYGEN) or 0),
        "turbidity": float(row.get(const.DATA_READING_TURBIDITY) or 0),
        "is_anomaly": bool(row.get(const.DATA_READING_IS_ANOMALY)),
    }


def build_quiz_attempt(row: Row) -> QuizAttemptData:
    """Build a quiz attempt model from a stored row."""
    return {
        "id": str(row[const.DATA_ID]),
        "user_id": row.get(const.DATA_QUIZ_USER_ID) or "",
        "date": row.get(const.DATA_QUIZ_DATE) or "",
        "correct": int(row.get(const.DATA_QUIZ_CORRECT) or 0),
        "total": int(row.get(const.DATA_QUIZ_TOTAL) or 0),
        "questions_answered": _normalize_list_field(
            _decode_json(row.get(const.DATA_QUIZ_QUESTIONS_ANSWERED))
        ),
    }


def build_leaderboard_entry(
    profile: ProfileData, rank: int, is_current_user: bool
) -> LeaderboardEntry:
    """Annotate a profile with its leaderboard position."""
    return {
        "id": profile["id"],
        "username": profile["username"],
        "avatar_emoji": profile["avatar_emoji"],
        "points": profile["points"],
        "badges": profile["badges"],
        "rank": rank,
        "is_current_user": is_current_user,
    }


def build_leaderboard(
    profiles: list[ProfileData], current_user_id: str | None
) -> list[LeaderboardEntry]:
    """Rank profiles by points, highest first (stable for ties)."""
    ordered = sorted(profiles, key=lambda profile: profile["points"], reverse=True)
    return [
        build_leaderboard_entry(profile, index + 1, profile["id"] == current_user_id)
        for index, profile in enumerate(ordered)
    ]


# ==============================================================================
# NEW RECORDS
# ==============================================================================


def build_new_report(
    report: dict[str, Any], *, user_id: str | None, timestamp: str
) -> ReportData:
    """Stamp a user-supplied report with an id, author and timestamp."""
    record: dict[str, Any] = {
        "id": new_record_id(),
        "user_id": user_id,
        "timestamp": timestamp,
        "title": report.get(const.DATA_REPORT_TITLE, ""),
        "description": report.get(const.DATA_REPORT_DESCRIPTION, ""),
        "location": report.get(const.DATA_REPORT_LOCATION),
        "latitude": report.get(const.DATA_REPORT_LATITUDE),
        "longitude": report.get(const.DATA_REPORT_LONGITUDE),
        "images": list(report.get(const.DATA_REPORT_IMAGES) or []),
        "status": report.get(const.DATA_REPORT_STATUS, const.REPORT_STATUS_SUBMITTED),
        "verifications": [],
        "reactions": [],
    }
    _drop_none(
        record,
        (
            const.DATA_REPORT_USER_ID,
            const.DATA_REPORT_LOCATION,
            const.DATA_REPORT_LATITUDE,
            const.DATA_REPORT_LONGITUDE,
        ),
    )
    return record  # type: ignore[return-value]


def build_verification(
    *,
    user_id: str,
    username: str,
    is_accurate: bool,
    notes: str | None,
    timestamp: str,
) -> VerificationData:
    """Create a verification record."""
    verification: VerificationData = {
        "id": new_record_id(),
        "user_id": user_id,
        "username": username,
        "is_accurate": is_accurate,
        "timestamp": timestamp,
    }
    if notes:
        verification["notes"] = notes
    return verification


def toggle_reaction(
    reactions: list[ReactionData],
    *,
    user_id: str,
    username: str,
    reaction_type: str,
    timestamp: str,
) -> list[ReactionData]:
    """Return a new reaction list with ``(user_id, reaction_type)`` toggled.

    An existing pair is removed; otherwise a new stamped reaction is appended.
    """
    for index, reaction in enumerate(reactions):
        if (
            reaction.get(const.DATA_FEEDBACK_USER_ID) == user_id
            and reaction.get(const.DATA_REACTION_TYPE) == reaction_type
        ):
            return reactions[:index] + reactions[index + 1 :]

    new_reaction: ReactionData = {
        "id": new_record_id(),
        "user_id": user_id,
        "username": username,
        "type": reaction_type,  # type: ignore[typeddict-item]
        "timestamp": timestamp,
    }
    return [*reactions, new_reaction]


def build_quiz_attempt_record(
    *,
    user_id: str,
    date: str,
    correct: int,
    total: int,
    questions_answered: list[int],
) -> QuizAttemptData:
    """Create a quiz attempt record for today."""
    return {
        "id": new_record_id(),
        "user_id": user_id,
        "date": date,
        "correct": correct,
        "total": total,
        "questions_answered": list(questions_answered),
    }


def build_new_profile(
    *,
    user_id: str,
    username: str,
    avatar_emoji: str | None,
    region: str,
    timestamp: str,
    cloud_configured: bool,
) -> ProfileData:
    """Create a fresh zero-point profile."""
    return {
        "id": user_id,
        "username": username,
        "avatar_emoji": avatar_emoji or const.DEFAULT_AVATAR_EMOJI,
        "region": region,
        "points": 0,
        "streak_days": 0,
        "badges": [],
        "alert_preferences": dict(const.DEFAULT_ALERT_PREFERENCES),  # type: ignore[typeddict-item]
        "feature_flags": default_feature_flags(cloud_configured),
        "created_at": timestamp,
        "updated_at": timestamp,
    }


# ==============================================================================
# MODEL → ROW
# ==============================================================================


def profile_updates_to_row(updates: dict[str, Any]) -> Row:
    """Map a partial profile onto row columns, dropping keys not supplied."""
    return {
        key: updates[key] for key in const.PROFILE_UPDATABLE_FIELDS if key in updates
    }
