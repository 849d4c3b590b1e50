# File: store.py
"""Handles the local demo-mode storage for the Shanduko integration.

Uses Home Assistant's Storage helper to keep named collections (readings,
predictions, reports, profiles, quiz attempts and the settings blob) so that
demo mode survives restarts. Collections are seeded lazily from the
deterministic demo generator the first time each one is read.
"""

from __future__ import annotations

from copy import deepcopy
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const
from .demo_data import generate_demo_data
from .utils.dt_utils import dt_now_utc

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class ShandukoDemoStore:
    """Handles persistent storage operations for demo-mode data.

    Thin wrapper around Home Assistant's Store API. Every collection lives
    under its own key inside a single storage file; a missing key means the
    collection has never been read and will be generated on first access.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        storage_key: str = const.STORAGE_KEY,
        seed: int = const.DEMO_SEED,
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).
            seed: Seed for the demo data generator.

        """
        self.hass = hass
        self._storage_key = storage_key
        self._seed = seed
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] | None = None

    async def _async_ensure_loaded(self) -> dict[str, Any]:
        """Load the storage file into memory once."""
        if self._data is None:
            const.LOGGER.debug("DEBUG: ShandukoDemoStore: Loading data from storage")
            existing_data = await self._store.async_load()
            if existing_data is None:
                const.LOGGER.info(
                    "INFO: No existing demo storage found. Collections will be seeded on first read"
                )
                self._data = {}
            else:
                self._data = existing_data
                const.LOGGER.debug(
                    "DEBUG: Loaded demo storage with collections: %s",
                    list(self._data.keys()),
                )
        return self._data

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache (empty before first load)."""
        return self._data or {}

    async def async_get_collection(self, key: str) -> list[dict[str, Any]]:
        """Return the stored collection, seeding it on first access.

        Seeding is idempotent per key: once a collection is persisted, later
        reads return it unchanged until it is explicitly overwritten.
        """
        data = await self._async_ensure_loaded()
        if key not in data:
            generated = generate_demo_data(dt_now_utc(), self._seed)
            if key not in generated:
                raise KeyError(f"Unknown demo collection: {key}")
            const.LOGGER.info("INFO: Seeding demo collection '%s'", key)
            data[key] = generated[key]
            await self._async_save()
        return deepcopy(data[key])

    async def async_set_collection(self, key: str, value: list[dict[str, Any]]) -> None:
        """Overwrite a collection and persist it."""
        data = await self._async_ensure_loaded()
        data[key] = deepcopy(value)
        await self._async_save()

    async def async_get_settings(self) -> dict[str, Any] | None:
        """Return the persisted settings blob, or None if never saved."""
        data = await self._async_ensure_loaded()
        settings = data.get(const.COLLECTION_SETTINGS)
        return deepcopy(settings) if settings is not None else None

    async def async_set_settings(self, settings: dict[str, Any]) -> None:
        """Persist the settings blob."""
        data = await self._async_ensure_loaded()
        data[const.COLLECTION_SETTINGS] = deepcopy(settings)
        await self._async_save()

    async def _async_save(self) -> None:
        """Save the in-memory data to storage."""
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug(
                "DEBUG: Demo data saved successfully to storage: %s",
                self._storage_key,
            )
        except OSError as err:
            const.LOGGER.error("ERROR: Failed to save demo data to storage: %s", err)
            raise

    async def async_clear(self) -> None:
        """Drop every collection so the next read reseeds."""
        const.LOGGER.info("INFO: Clearing all Shanduko demo data")
        self._data = {}
        await self._async_save()

    async def async_delete(self) -> None:
        """Remove the storage file (config entry removal)."""
        await self._store.async_remove()
        self._data = None
        const.LOGGER.info("INFO: Demo storage file removed: %s", self._storage_key)
