# File: coordinator.py
"""Coordinator for the Shanduko integration.

Periodically refreshes the data sensors display: latest readings, forecast,
the current profile and the leaderboard. Services request a refresh after
every mutation so sensors follow gamification changes promptly.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import const
from .cloud_client import ShandukoError

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .data_access import ShandukoDataAccess


class ShandukoDataCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Coordinator for the Shanduko integration."""

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        data_access: ShandukoDataAccess,
    ) -> None:
        """Initialize the ShandukoDataCoordinator."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )

        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.data_access = data_access

    async def _async_update_data(self) -> dict[str, Any]:
        """Fetch readings, forecast, profile and leaderboard."""
        try:
            mode = await self.data_access.async_get_mode()
            readings = await self.data_access.async_get_latest_readings()
            predictions = await self.data_access.async_get_predictions()
            profile = await self.data_access.async_get_profile()
            leaderboard = await self.data_access.async_get_leaderboard()
        except ShandukoError as err:
            raise UpdateFailed(f"Error fetching Shanduko data: {err}") from err

        const.LOGGER.debug(
            "DEBUG: Coordinator refreshed (%s): %s readings, profile=%s",
            mode,
            len(readings),
            profile["id"] if profile else None,
        )
        return {
            const.COORDINATOR_DATA_MODE: mode,
            const.COORDINATOR_DATA_READINGS: readings,
            const.COORDINATOR_DATA_PREDICTIONS: predictions,
            const.COORDINATOR_DATA_PROFILE: profile,
            const.COORDINATOR_DATA_LEADERBOARD: leaderboard,
        }
