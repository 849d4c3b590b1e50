# File: sensor.py
"""Sensors for the Shanduko integration.

Sensors Defined in This File (7):

# Water Quality Sensors (4), from the latest reading
01. WaterQualitySensor (temperature)
02. WaterQualitySensor (pH)
03. WaterQualitySensor (dissolved oxygen)
04. WaterQualitySensor (turbidity)

# Profile Sensors (3)
05. ProfilePointsSensor
06. ProfileBadgesSensor
07. LeaderboardRankSensor
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.const import UnitOfTemperature

from . import const
from .engines.alert_engine import alerts_for_metric, evaluate_reading
from .entity import ShandukoCoordinatorEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import ShandukoDataCoordinator

# (reading key, translation key, unit, device class)
WATER_QUALITY_METRICS: tuple[tuple[str, str, str | None, SensorDeviceClass | None], ...] = (
    (
        const.DATA_READING_TEMPERATURE,
        const.TRANS_KEY_SENSOR_TEMPERATURE,
        UnitOfTemperature.CELSIUS,
        SensorDeviceClass.TEMPERATURE,
    ),
    (
        const.DATA_READING_PH_LEVEL,
        const.TRANS_KEY_SENSOR_PH,
        None,
        SensorDeviceClass.PH,
    ),
    (
        const.DATA_READING_DISSOLVED_OXYGEN,
        const.TRANS_KEY_SENSOR_DISSOLVED_OXYGEN,
        const.UNIT_MG_PER_L,
        None,
    ),
    (
        const.DATA_READING_TURBIDITY,
        const.TRANS_KEY_SENSOR_TURBIDITY,
        const.UNIT_NTU,
        None,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Set up sensors for Shanduko integration."""
    data = hass.data[const.DOMAIN][entry.entry_id]
    coordinator: ShandukoDataCoordinator = data[const.COORDINATOR]

    entities: list[SensorEntity] = [
        WaterQualitySensor(coordinator, entry, metric, translation_key, unit, device_class)
        for metric, translation_key, unit, device_class in WATER_QUALITY_METRICS
    ]
    entities.extend(
        [
            ProfilePointsSensor(coordinator, entry),
            ProfileBadgesSensor(coordinator, entry),
            LeaderboardRankSensor(coordinator, entry),
        ]
    )
    async_add_entities(entities)


# ------------------------------------------------------------------------------------------
class WaterQualitySensor(ShandukoCoordinatorEntity, SensorEntity):
    """One metric from the latest reading, with threshold alerts."""

    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(
        self,
        coordinator: ShandukoDataCoordinator,
        entry: ConfigEntry,
        metric: str,
        translation_key: str,
        unit: str | None,
        device_class: SensorDeviceClass | None,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, entry)
        self._metric = metric
        self._attr_translation_key = translation_key
        self._attr_unique_id = f"{entry.entry_id}_{metric}"
        self._attr_native_unit_of_measurement = unit
        self._attr_device_class = device_class

    @property
    def native_value(self) -> float | None:
        """Return the metric value from the newest reading."""
        reading = self.latest_reading
        return reading[self._metric] if reading else None  # type: ignore[literal-required]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return reading metadata and the alerts raised for this metric."""
        reading = self.latest_reading
        if reading is None:
            return {}

        profile = self.profile
        preferences = (
            profile["alert_preferences"]
            if profile
            else const.DEFAULT_ALERT_PREFERENCES
        )
        alerts = evaluate_reading(reading, preferences)  # type: ignore[arg-type]
        return {
            const.ATTR_READING_TIMESTAMP: reading["timestamp"],
            const.ATTR_IS_ANOMALY: reading.get("is_anomaly", False),
            const.ATTR_LOCATION_NAME: reading.get("location_name"),
            const.ATTR_ALERTS: alerts_for_metric(alerts, self._metric),
        }


# ------------------------------------------------------------------------------------------
class ProfilePointsSensor(ShandukoCoordinatorEntity, SensorEntity):
    """Total XP of the current profile."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_POINTS
    _attr_state_class = SensorStateClass.TOTAL_INCREASING
    _attr_native_unit_of_measurement = const.UNIT_XP
    _attr_icon = "mdi:star-circle"

    def __init__(self, coordinator: ShandukoDataCoordinator, entry: ConfigEntry) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, entry)
        self._attr_unique_id = f"{entry.entry_id}{const.SENSOR_UID_SUFFIX_POINTS}"

    @property
    def native_value(self) -> int | None:
        """Return the profile's points."""
        profile = self.profile
        return profile["points"] if profile else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return username, streak and badge count."""
        profile = self.profile
        if profile is None:
            return {}
        return {
            const.ATTR_USERNAME: profile["username"],
            const.ATTR_STREAK_DAYS: profile["streak_days"],
            const.ATTR_BADGES: len(profile["badges"]),
            const.ATTR_BACKEND_MODE: str(
                self._snapshot.get(const.COORDINATOR_DATA_MODE, "")
            ),
        }


# ------------------------------------------------------------------------------------------
class ProfileBadgesSensor(ShandukoCoordinatorEntity, SensorEntity):
    """Number of earned badges; the badge list is in the attributes."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_BADGES
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:trophy-award"

    def __init__(self, coordinator: ShandukoDataCoordinator, entry: ConfigEntry) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, entry)
        self._attr_unique_id = f"{entry.entry_id}{const.SENSOR_UID_SUFFIX_BADGES}"

    @property
    def native_value(self) -> int | None:
        """Return how many badges the profile holds."""
        profile = self.profile
        return len(profile["badges"]) if profile else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the earned badges."""
        profile = self.profile
        return {const.ATTR_BADGES: list(profile["badges"]) if profile else []}


# ------------------------------------------------------------------------------------------
class LeaderboardRankSensor(ShandukoCoordinatorEntity, SensorEntity):
    """Leaderboard position of the current user."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_LEADERBOARD_RANK
    _attr_icon = "mdi:podium"

    def __init__(self, coordinator: ShandukoDataCoordinator, entry: ConfigEntry) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, entry)
        self._attr_unique_id = (
            f"{entry.entry_id}{const.SENSOR_UID_SUFFIX_LEADERBOARD_RANK}"
        )

    @property
    def native_value(self) -> int | None:
        """Return the current user's rank, or None when not ranked."""
        for entry in self._snapshot.get(const.COORDINATOR_DATA_LEADERBOARD) or []:
            if entry["is_current_user"]:
                return entry["rank"]
        return None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the top of the leaderboard."""
        leaderboard = self._snapshot.get(const.COORDINATOR_DATA_LEADERBOARD) or []
        return {
            const.ATTR_LEADERBOARD: [
                {
                    "rank": entry["rank"],
                    "username": entry["username"],
                    "points": entry["points"],
                }
                for entry in leaderboard[:10]
            ]
        }
