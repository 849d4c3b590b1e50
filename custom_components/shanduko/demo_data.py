# File: demo_data.py
"""Deterministic sample data for demo (local) mode.

Generates every demo collection from a reference time and a seed, so that the
same ``(now, seed)`` pair always yields the same dataset.
"""

from __future__ import annotations

from datetime import datetime
import random
from typing import Any

from . import const
from .type_defs import (
    PredictionData,
    ProfileData,
    ReportData,
    SensorReadingData,
)
from .utils.dt_utils import dt_days_ago_iso, dt_shift_hours

READING_ANOMALY_CHANCE = 0.1
PREDICTION_ANOMALY_CHANCE = 0.05
DEMO_HOURS = 24


def _jitter(rng: random.Random) -> float:
    return (rng.random() - 0.5) * 0.01


def generate_sensor_readings(
    now: datetime, rng: random.Random, hours: int = DEMO_HOURS
) -> list[SensorReadingData]:
    """Generate hourly readings going back from ``now`` (newest first)."""
    readings: list[SensorReadingData] = []
    for index in range(hours):
        timestamp = dt_shift_hours(now, -index)
        is_anomaly = rng.random() < READING_ANOMALY_CHANCE
        if is_anomaly:
            temperature = 15 + rng.random() * 30
            ph_level = 4 + rng.random() * 6
            dissolved_oxygen = 2 + rng.random() * 3
            turbidity = 8 + rng.random() * 12
        else:
            temperature = 22 + rng.random() * 6
            ph_level = 6.5 + rng.random() * 2
            dissolved_oxygen = 6 + rng.random() * 3
            turbidity = 1 + rng.random() * 4

        readings.append(
            {
                "id": f"reading-{index}",
                "timestamp": timestamp.isoformat(),
                "temperature": round(temperature, 2),
                "ph_level": round(ph_level, 2),
                "dissolved_oxygen": round(dissolved_oxygen, 2),
                "turbidity": round(turbidity, 2),
                "e_coli": int(5 + rng.random() * 20),
                "total_coliform": int(40 + rng.random() * 80),
                "bacteria_atp": int(250 + rng.random() * 500),
                "latitude": round(const.DEMO_LATITUDE + _jitter(rng), 6),
                "longitude": round(const.DEMO_LONGITUDE + _jitter(rng), 6),
                "location_name": const.DEMO_LOCATION_NAME,
                "is_anomaly": is_anomaly,
            }
        )
    return readings


def generate_predictions(
    now: datetime, rng: random.Random, hours: int = DEMO_HOURS
) -> list[PredictionData]:
    """Generate hourly forecasts going forward from ``now``."""
    return [
        {
            "id": f"prediction-{index}",
            "timestamp": dt_shift_hours(now, index + 1).isoformat(),
            "temperature": round(23 + rng.random() * 4, 2),
            "ph_level": round(6.8 + rng.random(), 2),
            "dissolved_oxygen": round(7 + rng.random() * 2, 2),
            "turbidity": round(2 + rng.random() * 3, 2),
            "is_anomaly": rng.random() < PREDICTION_ANOMALY_CHANCE,
        }
        for index in range(hours)
    ]


def generate_reports(now: datetime) -> list[ReportData]:
    """Return the two sample community reports."""
    return [
        {
            "id": "report-1",
            "user_id": const.DEMO_USER_ID,
            "timestamp": dt_shift_hours(now, -2).isoformat(),
            "title": "Unusual water color observed",
            "description": (
                "The water near the eastern shore has a greenish tint. "
                "Possibly an algae bloom."
            ),
            "location": "Lake Chivero - East Shore",
            "latitude": -17.8250,
            "longitude": 31.0600,
            "images": [],
            "status": const.REPORT_STATUS_SUBMITTED,
            "verifications": [],
            "reactions": [],
        },
        {
            "id": "report-2",
            "user_id": "other-user",
            "timestamp": dt_shift_hours(now, -6).isoformat(),
            "title": "Fish kill event",
            "description": "Several dead fish spotted near the inlet this morning.",
            "location": "Lake Chivero - North Inlet",
            "latitude": -17.8200,
            "longitude": 31.0450,
            "images": [],
            "status": const.REPORT_STATUS_REVIEWING,
            "verifications": [
                {
                    "id": "verify-1",
                    "user_id": "user-3",
                    "username": "WaterGuardian",
                    "is_accurate": True,
                    "notes": "Confirmed, saw the same thing.",
                    "timestamp": dt_shift_hours(now, -5).isoformat(),
                }
            ],
            "reactions": [
                {
                    "id": "react-1",
                    "user_id": "user-4",
                    "username": "EcoWatcher",
                    "type": const.REACTION_CONCERNING,
                    "timestamp": dt_shift_hours(now, -4).isoformat(),
                }
            ],
        },
    ]


def generate_profiles(now: datetime) -> list[ProfileData]:
    """Return the demo user profile followed by one community member."""
    return [
        {
            "id": const.DEMO_USER_ID,
            "username": const.DEMO_USERNAME,
            "avatar_emoji": "🌊",
            "region": const.DEFAULT_REGION,
            "points": 450,
            "streak_days": 7,
            "badges": [
                {
                    "code": "ecoStarter",
                    "title": "Eco Starter",
                    "emoji": "🌱",
                    "description": "Joined the community",
                    "earned_at": dt_days_ago_iso(30, now),
                },
                {
                    "code": "waterGuardian",
                    "title": "Water Guardian",
                    "emoji": "💧",
                    "description": "Submitted 10 reports",
                    "earned_at": dt_days_ago_iso(10, now),
                },
            ],
            "alert_preferences": dict(const.DEFAULT_ALERT_PREFERENCES),
            "feature_flags": {
                **const.DEFAULT_FEATURE_FLAGS,
                const.CONF_USE_CLOUD_BACKEND: False,
            },
            "created_at": dt_days_ago_iso(30, now),
            "updated_at": now.isoformat(),
        },
        {
            "id": "user-2",
            "username": "AquaExpert",
            "avatar_emoji": "🔬",
            "region": const.DEFAULT_REGION,
            "points": 820,
            "streak_days": 15,
            "badges": [],
            "alert_preferences": {
                **const.DEFAULT_ALERT_PREFERENCES,
                "alert_radius": 10.0,
            },
            "feature_flags": {
                **const.DEFAULT_FEATURE_FLAGS,
                const.CONF_USE_CLOUD_BACKEND: False,
            },
            "created_at": dt_days_ago_iso(60, now),
            "updated_at": now.isoformat(),
        },
    ]


def generate_demo_data(now: datetime, seed: int = const.DEMO_SEED) -> dict[str, Any]:
    """Generate every demo collection keyed by collection name."""
    rng = random.Random(seed)
    return {
        const.COLLECTION_SENSOR_READINGS: generate_sensor_readings(now, rng),
        const.COLLECTION_PREDICTIONS: generate_predictions(now, rng),
        const.COLLECTION_REPORTS: generate_reports(now),
        const.COLLECTION_PROFILES: generate_profiles(now),
        const.COLLECTION_QUIZ_ATTEMPTS: [],
    }
