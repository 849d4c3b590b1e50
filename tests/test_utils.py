"""Tests for pure utilities, threshold alerts and demo data generation."""

from __future__ import annotations

from datetime import UTC, datetime

from freezegun import freeze_time
import pytest

from custom_components.shanduko import const
from custom_components.shanduko.demo_data import generate_demo_data
from custom_components.shanduko.engines.alert_engine import (
    ALERT_ANOMALY_FLAGGED,
    ALERT_DISSOLVED_OXYGEN_LOW,
    ALERT_PH_HIGH,
    ALERT_PH_LOW,
    ALERT_TURBIDITY_HIGH,
    alerts_for_metric,
    evaluate_reading,
)
from custom_components.shanduko.utils.dt_utils import (
    dt_hours_ago_iso,
    dt_now_iso,
    dt_to_utc,
    dt_today_iso,
)
from custom_components.shanduko.utils.math_utils import (
    calculate_percentage,
    quiz_score,
    round_half_up,
)

REFERENCE = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


class TestDateTimeUtils:
    """dt_utils behavior."""

    @freeze_time("2025-01-15 23:30:00", tz_offset=0)
    def test_today_is_utc_date(self) -> None:
        """The quiz day key is the UTC calendar date."""
        assert dt_today_iso() == "2025-01-15"
        assert dt_now_iso().startswith("2025-01-15T23:30:00")

    def test_hours_ago(self) -> None:
        """The history cutoff is an ISO timestamp N hours back."""
        assert dt_hours_ago_iso(24, REFERENCE) == "2025-01-14T12:00:00+00:00"

    def test_to_utc_naive_assumed_utc(self) -> None:
        """Naive strings are treated as UTC."""
        assert dt_to_utc("2025-01-15T12:00:00") == REFERENCE

    def test_to_utc_converts_offset(self) -> None:
        """Offset timestamps are converted to UTC."""
        assert dt_to_utc("2025-01-15T14:00:00+02:00") == REFERENCE

    @pytest.mark.parametrize("value", [None, "", "yesterday", 12])
    def test_to_utc_invalid(self, value) -> None:
        """Unparseable input returns None."""
        assert dt_to_utc(value) is None


class TestMathUtils:
    """math_utils behavior."""

    @pytest.mark.parametrize(
        ("value", "expected"), [(2.5, 3), (13.3, 13), (13.5, 14), (0.0, 0)]
    )
    def test_round_half_up(self, value: float, expected: int) -> None:
        """Halves always round up."""
        assert round_half_up(value) == expected

    def test_percentage_capped(self) -> None:
        """Percentages stop at 100 and a zero target yields 0."""
        assert calculate_percentage(450, 500) == 90.0
        assert calculate_percentage(900, 500) == 100.0
        assert calculate_percentage(3, 0) == 0.0

    def test_quiz_score(self) -> None:
        """Quiz score is the fraction of correct answers."""
        assert quiz_score(3, 3) == 1.0
        assert quiz_score(2, 4) == 0.5
        assert quiz_score(0, 0) == 0.0


class TestAlertEngine:
    """Static threshold alerts."""

    def _reading(self, **overrides):
        reading = {
            "id": "r",
            "timestamp": REFERENCE.isoformat(),
            "temperature": 24.0,
            "ph_level": 7.2,
            "dissolved_oxygen": 7.5,
            "turbidity": 2.0,
            "e_coli": 0,
            "total_coliform": 0,
            "bacteria_atp": 0,
        }
        reading.update(overrides)
        return reading

    def test_healthy_reading(self) -> None:
        """A reading inside every threshold raises nothing."""
        assert evaluate_reading(self._reading(), const.DEFAULT_ALERT_PREFERENCES) == []

    def test_all_alerts_in_order(self) -> None:
        """Each breached threshold adds its code in a fixed order."""
        alerts = evaluate_reading(
            self._reading(ph_level=9.1, turbidity=12.0, dissolved_oxygen=3.0, is_anomaly=True),
            const.DEFAULT_ALERT_PREFERENCES,
        )
        assert alerts == [
            ALERT_PH_HIGH,
            ALERT_TURBIDITY_HIGH,
            ALERT_DISSOLVED_OXYGEN_LOW,
            ALERT_ANOMALY_FLAGGED,
        ]

    def test_alerts_for_metric(self) -> None:
        """Alerts are filtered per sensor metric."""
        alerts = [ALERT_PH_LOW, ALERT_TURBIDITY_HIGH]
        assert alerts_for_metric(alerts, "ph_level") == [ALERT_PH_LOW]
        assert alerts_for_metric(alerts, "turbidity") == [ALERT_TURBIDITY_HIGH]
        assert alerts_for_metric(alerts, "temperature") == []


class TestDemoData:
    """Deterministic demo data generation."""

    def test_same_seed_same_data(self) -> None:
        """The generator is deterministic for a (now, seed) pair."""
        assert generate_demo_data(REFERENCE, 42) == generate_demo_data(REFERENCE, 42)

    def test_collections_shape(self) -> None:
        """Every collection is generated with the demo user first."""
        data = generate_demo_data(REFERENCE, const.DEMO_SEED)
        assert set(data) == set(const.DEMO_COLLECTIONS)
        readings = data[const.COLLECTION_SENSOR_READINGS]
        assert len(readings) == 24
        assert readings[0]["timestamp"] == REFERENCE.isoformat()
        assert data[const.COLLECTION_PROFILES][0]["id"] == const.DEMO_USER_ID
        assert data[const.COLLECTION_PROFILES][0]["points"] == 450
        assert [r["id"] for r in data[const.COLLECTION_REPORTS]] == ["report-1", "report-2"]
        assert data[const.COLLECTION_QUIZ_ATTEMPTS] == []
