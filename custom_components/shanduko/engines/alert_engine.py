"""Alert Engine - Static threshold checks for water quality readings.

Compares a reading against the profile's alert preferences. This is a plain
flag comparison, not an anomaly model.

ARCHITECTURE: Pure logic, NO Home Assistant dependencies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..type_defs import AlertPreferences, SensorReadingData

ALERT_PH_LOW = "ph_low"
ALERT_PH_HIGH = "ph_high"
ALERT_TURBIDITY_HIGH = "turbidity_high"
ALERT_DISSOLVED_OXYGEN_LOW = "dissolved_oxygen_low"
ALERT_ANOMALY_FLAGGED = "anomaly_flagged"


def evaluate_reading(
    reading: SensorReadingData, preferences: AlertPreferences
) -> list[str]:
    """Return the alert codes raised by ``reading``, in a fixed order."""
    alerts: list[str] = []
    if reading["ph_level"] < preferences["ph_min"]:
        alerts.append(ALERT_PH_LOW)
    if reading["ph_level"] > preferences["ph_max"]:
        alerts.append(ALERT_PH_HIGH)
    if reading["turbidity"] > preferences["turbidity_max"]:
        alerts.append(ALERT_TURBIDITY_HIGH)
    if reading["dissolved_oxygen"] < preferences["dissolved_oxygen_min"]:
        alerts.append(ALERT_DISSOLVED_OXYGEN_LOW)
    if reading.get("is_anomaly"):
        alerts.append(ALERT_ANOMALY_FLAGGED)
    return alerts


def alerts_for_metric(alerts: list[str], metric: str) -> list[str]:
    """Filter alert codes down to the ones concerning ``metric``."""
    if metric == "ph_level":
        return [code for code in alerts if code in (ALERT_PH_LOW, ALERT_PH_HIGH)]
    return [code for code in alerts if code.startswith(metric)]
