"""Tests for row shaping helpers.

Test Categories:
- JSON blob parsing with typed defaults and fallback signalling
- Row → model builders (profiles, reports, readings)
- Reaction toggling and verification records
- Leaderboard ranking
"""

from __future__ import annotations

import json
import logging

from custom_components.shanduko import const, data_builders as db

from tests.conftest import make_profile

NOW = "2025-01-15T12:00:00+00:00"


class TestParseBadges:
    """Badge blob parsing."""

    def test_none_is_empty_without_fallback(self) -> None:
        """A missing blob is an empty list, not a fallback."""
        result = db.parse_badges(None)
        assert result.value == []
        assert result.used_fallback is False

    def test_json_string(self) -> None:
        """A JSON-encoded badge list is decoded."""
        raw = json.dumps(make_profile(badge_codes=["first_quiz"])["badges"])
        result = db.parse_badges(raw)
        assert [badge["code"] for badge in result.value] == ["first_quiz"]
        assert result.used_fallback is False

    def test_malformed_uses_fallback(self, caplog) -> None:
        """An invalid blob falls back to [] and logs a warning."""
        with caplog.at_level(logging.WARNING):
            result = db.parse_badges("{not json")
        assert result.value == []
        assert result.used_fallback is True
        assert "Malformed badges blob" in caplog.text

    def test_optional_fields_filled(self) -> None:
        """Badges without description or earned_at are kept with defaults."""
        result = db.parse_badges([{"code": "x", "title": "X", "emoji": "x"}])
        assert result.used_fallback is False
        assert result.value == [
            {"code": "x", "title": "X", "emoji": "x", "description": "", "earned_at": ""}
        ]

    def test_legacy_earned_at_key(self) -> None:
        """The camel-cased earnedAt key is read when earned_at is missing."""
        result = db.parse_badges(
            [
                {
                    "code": "points_500",
                    "title": "Point Master",
                    "emoji": "💎",
                    "description": "Earn 500 points",
                    "earnedAt": NOW,
                }
            ]
        )
        assert result.used_fallback is False
        assert result.value[0]["earned_at"] == NOW

    def test_entry_missing_required_field(self) -> None:
        """A badge without an emoji makes the whole blob malformed."""
        result = db.parse_badges([{"code": "x", "title": "X"}])
        assert result.used_fallback is True
        assert result.value == []


class TestParsePreferencesAndFlags:
    """Alert preference and feature flag parsing."""

    def test_alert_preferences_defaults(self) -> None:
        """Missing preferences use the defaults."""
        result = db.parse_alert_preferences(None)
        assert result.value == const.DEFAULT_ALERT_PREFERENCES
        assert result.used_fallback is False

    def test_alert_preferences_non_numeric(self, caplog) -> None:
        """A non-numeric threshold triggers the fallback."""
        raw = {**const.DEFAULT_ALERT_PREFERENCES, "ph_min": "low"}
        with caplog.at_level(logging.WARNING):
            result = db.parse_alert_preferences(raw)
        assert result.used_fallback is True
        assert result.value == const.DEFAULT_ALERT_PREFERENCES
        assert "alert preferences" in caplog.text

    def test_alert_preferences_ints_become_floats(self) -> None:
        """Integer thresholds are accepted and stored as floats."""
        raw = {**const.DEFAULT_ALERT_PREFERENCES, "alert_radius": 10}
        result = db.parse_alert_preferences(raw)
        assert result.value["alert_radius"] == 10.0
        assert result.used_fallback is False

    def test_feature_flags_cloud_default(self) -> None:
        """use_cloud_backend defaults to the cloud configuration."""
        assert db.parse_feature_flags(None, cloud_configured=True).value[
            "use_cloud_backend"
        ] is True
        raw = dict(const.DEFAULT_FEATURE_FLAGS)
        assert db.parse_feature_flags(raw).value["use_cloud_backend"] is False

    def test_feature_flags_non_bool(self) -> None:
        """A non-boolean display flag triggers the fallback."""
        raw = {**const.DEFAULT_FEATURE_FLAGS, "heatmap": "yes"}
        result = db.parse_feature_flags(raw)
        assert result.used_fallback is True
        assert result.value["heatmap"] is True


class TestRowBuilders:
    """Row → model builders."""

    def test_build_profile_nullable_columns(self) -> None:
        """Null columns become zeros and defaults."""
        profile = db.build_profile({"id": "u1", "username": "Ana"})
        assert profile["points"] == 0
        assert profile["streak_days"] == 0
        assert profile["badges"] == []
        assert profile["avatar_emoji"] == const.DEFAULT_AVATAR_EMOJI
        assert profile["alert_preferences"] == const.DEFAULT_ALERT_PREFERENCES

    def test_build_report_drops_null_optionals(self) -> None:
        """Optional report fields are absent rather than None."""
        report = db.build_report(
            {"id": "r1", "title": "T", "latitude": None, "verifications": "oops"}
        )
        assert "latitude" not in report
        assert "user_id" not in report
        assert report["verifications"] == []
        assert report["status"] == const.REPORT_STATUS_SUBMITTED

    def test_build_sensor_reading(self) -> None:
        """Numeric columns are coerced and ids stringified."""
        reading = db.build_sensor_reading(
            {"id": 7, "timestamp": NOW, "temperature": "24.5", "ph_level": 7}
        )
        assert reading["id"] == "7"
        assert reading["temperature"] == 24.5
        assert reading["ph_level"] == 7.0
        assert "is_anomaly" not in reading

    def test_build_prediction(self) -> None:
        """Forecast rows are coerced and is_anomaly defaults to False."""
        prediction = db.build_prediction(
            {"id": 3, "timestamp": NOW, "turbidity": "4.2", "extra": "dropped"}
        )
        assert prediction == {
            "id": "3",
            "timestamp": NOW,
            "temperature": 0.0,
            "ph_level": 0.0,
            "dissolved_oxygen": 0.0,
            "turbidity": 4.2,
            "is_anomaly": False,
        }

    def test_profile_updates_to_row(self) -> None:
        """Only updatable profile fields are mapped."""
        row = db.profile_updates_to_row({"points": 5, "id": "x", "created_at": NOW})
        assert row == {"points": 5}


class TestRecords:
    """New record builders."""

    def test_new_report_stamped(self) -> None:
        """A new report gets an id, author, timestamp and empty feedback."""
        report = db.build_new_report({"title": "Algae"}, user_id="u1", timestamp=NOW)
        assert report["id"]
        assert report["user_id"] == "u1"
        assert report["timestamp"] == NOW
        assert report["verifications"] == []
        assert report["reactions"] == []
        assert "location" not in report

    def test_verification_notes_optional(self) -> None:
        """Empty notes are left out."""
        verification = db.build_verification(
            user_id="u1", username="Ana", is_accurate=True, notes="", timestamp=NOW
        )
        assert "notes" not in verification

    def test_toggle_reaction_adds_then_removes(self) -> None:
        """Toggling the same pair twice restores the original list."""
        original = [
            {"id": "a", "user_id": "u2", "username": "Bo", "type": "helpful", "timestamp": NOW}
        ]
        added = db.toggle_reaction(
            original, user_id="u1", username="Ana", reaction_type="helpful", timestamp=NOW
        )
        assert len(added) == 2
        assert added[-1]["user_id"] == "u1"
        assert original == [added[0]]

        removed = db.toggle_reaction(
            added, user_id="u1", username="Ana", reaction_type="helpful", timestamp=NOW
        )
        assert removed == original

    def test_toggle_reaction_other_type_kept(self) -> None:
        """A different type from the same user is a separate reaction."""
        reactions = db.toggle_reaction(
            [], user_id="u1", username="Ana", reaction_type="helpful", timestamp=NOW
        )
        reactions = db.toggle_reaction(
            reactions, user_id="u1", username="Ana", reaction_type="thankful", timestamp=NOW
        )
        assert [r["type"] for r in reactions] == ["helpful", "thankful"]


class TestLeaderboard:
    """Leaderboard ranking."""

    def test_ranked_by_points(self) -> None:
        """Profiles are ranked highest first with 1-based ranks."""
        profiles = [
            db.build_profile(make_profile(user_id="a", points=10)),
            db.build_profile(make_profile(user_id="b", points=30)),
            db.build_profile(make_profile(user_id="c", points=20)),
        ]
        board = db.build_leaderboard(profiles, "c")
        assert [(e["id"], e["rank"]) for e in board] == [("b", 1), ("c", 2), ("a", 3)]
        assert [e["is_current_user"] for e in board] == [False, True, False]

    def test_ties_keep_input_order(self) -> None:
        """Equal points keep their original order."""
        profiles = [
            db.build_profile(make_profile(user_id="a", points=5)),
            db.build_profile(make_profile(user_id="b", points=5)),
        ]
        assert [e["id"] for e in db.build_leaderboard(profiles, None)] == ["a", "b"]
