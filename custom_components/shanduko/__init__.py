# File: __init__.py
"""Initialization file for the Shanduko Water Watch integration.

Wires one set of components per config entry and keeps them in
hass.data[DOMAIN][entry_id]:

- demo store and cloud client (storage backends)
- data access layer (backend chosen per call)
- notification and gamification managers
- data coordinator feeding the sensors
"""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady

from . import const
from .backend import BackendSelector
from .cloud_client import ShandukoCloudClient
from .coordinator import ShandukoDataCoordinator
from .data_access import ShandukoDataAccess
from .managers import GamificationManager, NotificationManager
from .services import async_setup_services, async_unload_services
from .store import ShandukoDemoStore


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("INFO: Starting setup for Shanduko entry: %s", entry.entry_id)

    store = ShandukoDemoStore(hass, const.STORAGE_KEY)
    cloud_client = ShandukoCloudClient(
        hass,
        entry.data.get(const.CONF_SUPABASE_URL),
        entry.data.get(const.CONF_SUPABASE_ANON_KEY),
        entry.data.get(const.CONF_ACCESS_TOKEN),
    )
    selector = BackendSelector(store, cloud_client)

    notification_manager = NotificationManager(hass, entry)
    data_access = ShandukoDataAccess(
        store,
        cloud_client,
        selector,
        notifier=notification_manager,
        region=entry.data.get(const.CONF_REGION, const.DEFAULT_REGION),
    )
    gamification_manager = GamificationManager(
        hass,
        entry,
        data_access,
        notification_manager,
        announce_interval=entry.options.get(
            const.CONF_ANNOUNCE_INTERVAL, const.DEFAULT_ANNOUNCE_INTERVAL
        ),
    )
    await notification_manager.async_setup()
    await gamification_manager.async_setup()

    coordinator = ShandukoDataCoordinator(hass, entry, data_access)
    try:
        await coordinator.async_config_entry_first_refresh()
    except ConfigEntryNotReady as err:
        const.LOGGER.error("ERROR: Failed to refresh coordinator data: %s", err)
        raise

    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.COORDINATOR: coordinator,
        const.DATA_ACCESS: data_access,
        const.DEMO_STORE: store,
        const.GAMIFICATION_MANAGER: gamification_manager,
        const.NOTIFICATION_MANAGER: notification_manager,
    }

    async_setup_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)

    entry.async_on_unload(entry.add_update_listener(async_update_options))

    const.LOGGER.info(
        "INFO: Shanduko setup complete for entry: %s (backend=%s)",
        entry.entry_id,
        await data_access.async_get_mode(),
    )
    return True


async def async_update_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry so new intervals take effect."""
    const.LOGGER.debug("DEBUG: Options updated, reloading entry %s", entry.entry_id)
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading Shanduko entry: %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        hass.data[const.DOMAIN].pop(entry.entry_id)

        if not hass.data[const.DOMAIN]:
            await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry."""
    const.LOGGER.info("INFO: Removing Shanduko entry: %s", entry.entry_id)

    await ShandukoDemoStore(hass, const.STORAGE_KEY).async_delete()

    const.LOGGER.info("INFO: Shanduko entry data cleared: %s", entry.entry_id)
