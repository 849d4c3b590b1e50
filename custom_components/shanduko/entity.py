"""Base entity classes for Shanduko integration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from . import const
from .coordinator import ShandukoDataCoordinator

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry

    from .type_defs import ProfileData, SensorReadingData


class ShandukoCoordinatorEntity(CoordinatorEntity[ShandukoDataCoordinator]):
    """Base entity class for Shanduko sensors.

    All entities of an entry share one device and read from the coordinator's
    latest snapshot.
    """

    _attr_has_entity_name = True

    def __init__(self, coordinator: ShandukoDataCoordinator, entry: ConfigEntry) -> None:
        """Initialize the entity and attach it to the entry's device."""
        super().__init__(coordinator)
        self._entry = entry
        self._attr_device_info = DeviceInfo(
            identifiers={(const.DOMAIN, entry.entry_id)},
            name=entry.title or const.SHANDUKO_TITLE,
            manufacturer=const.DEVICE_MANUFACTURER,
            model=const.DEVICE_MODEL,
        )

    @property
    def _snapshot(self) -> dict[str, Any]:
        return self.coordinator.data or {}

    @property
    def latest_reading(self) -> SensorReadingData | None:
        """Return the newest reading in the snapshot."""
        readings = self._snapshot.get(const.COORDINATOR_DATA_READINGS) or []
        return readings[0] if readings else None

    @property
    def profile(self) -> ProfileData | None:
        """Return the current profile in the snapshot."""
        return self._snapshot.get(const.COORDINATOR_DATA_PROFILE)
