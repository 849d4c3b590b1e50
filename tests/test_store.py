"""Tests for the demo store and backend mode selection.

Test Categories:
- Lazy seeding per collection and idempotent reads
- Settings blob persistence
- Clearing and reseeding
- Per-call backend resolution
"""

from __future__ import annotations

from typing import Any

from homeassistant.core import HomeAssistant
import pytest

from custom_components.shanduko import const
from custom_components.shanduko.backend import BackendMode, BackendSelector
from custom_components.shanduko.store import ShandukoDemoStore

from tests.conftest import make_cloud_client


class TestDemoStore:
    """ShandukoDemoStore behavior."""

    async def test_seeded_on_first_read(
        self, hass: HomeAssistant, hass_storage: dict[str, Any]
    ) -> None:
        """A collection is generated once and persisted."""
        store = ShandukoDemoStore(hass)
        first = await store.async_get_collection(const.COLLECTION_SENSOR_READINGS)

        assert len(first) == 24
        stored = hass_storage[const.STORAGE_KEY]["data"]
        assert const.COLLECTION_SENSOR_READINGS in stored
        assert const.COLLECTION_REPORTS not in stored

        second = await store.async_get_collection(const.COLLECTION_SENSOR_READINGS)
        assert second == first

    async def test_existing_storage_is_reused(
        self, hass: HomeAssistant, hass_storage: dict[str, Any]
    ) -> None:
        """Stored collections are returned as-is after a restart."""
        hass_storage[const.STORAGE_KEY] = {
            "version": const.STORAGE_VERSION,
            "minor_version": 1,
            "key": const.STORAGE_KEY,
            "data": {const.COLLECTION_REPORTS: [{"id": "saved", "title": "Kept"}]},
        }
        store = ShandukoDemoStore(hass)
        reports = await store.async_get_collection(const.COLLECTION_REPORTS)
        assert reports == [{"id": "saved", "title": "Kept"}]

    async def test_returns_copies(self, hass: HomeAssistant, hass_storage) -> None:
        """Mutating a returned collection does not change the store."""
        store = ShandukoDemoStore(hass)
        reports = await store.async_get_collection(const.COLLECTION_REPORTS)
        reports.clear()
        assert len(await store.async_get_collection(const.COLLECTION_REPORTS)) == 2

    async def test_unknown_collection(self, hass: HomeAssistant, hass_storage) -> None:
        """An unknown key raises KeyError."""
        store = ShandukoDemoStore(hass)
        with pytest.raises(KeyError):
            await store.async_get_collection("nope")

    async def test_settings_round_trip(self, hass: HomeAssistant, hass_storage) -> None:
        """The settings blob is absent until saved."""
        store = ShandukoDemoStore(hass)
        assert await store.async_get_settings() is None

        await store.async_set_settings({const.SETTINGS_USE_CLOUD_BACKEND: True})
        assert await store.async_get_settings() == {const.SETTINGS_USE_CLOUD_BACKEND: True}

    async def test_clear_reseeds(self, hass: HomeAssistant, hass_storage) -> None:
        """After clearing, the next read generates the collection again."""
        store = ShandukoDemoStore(hass)
        await store.async_set_collection(const.COLLECTION_REPORTS, [])
        assert await store.async_get_collection(const.COLLECTION_REPORTS) == []

        await store.async_clear()
        assert len(await store.async_get_collection(const.COLLECTION_REPORTS)) == 2


class TestBackendSelector:
    """Backend mode resolution."""

    async def test_no_settings_follows_configuration(
        self, hass: HomeAssistant, hass_storage
    ) -> None:
        """Without settings, cloud is used only when configured."""
        store = ShandukoDemoStore(hass)
        assert (
            await BackendSelector(store, make_cloud_client(configured=True)).async_resolve_mode()
            == BackendMode.CLOUD
        )
        assert (
            await BackendSelector(store, make_cloud_client(configured=False)).async_resolve_mode()
            == BackendMode.LOCAL
        )

    async def test_settings_flag(self, hass: HomeAssistant, hass_storage) -> None:
        """A saved flag decides, but never selects an unconfigured cloud."""
        store = ShandukoDemoStore(hass)
        configured = BackendSelector(store, make_cloud_client(configured=True))
        unconfigured = BackendSelector(store, make_cloud_client(configured=False))

        await store.async_set_settings({const.SETTINGS_USE_CLOUD_BACKEND: False})
        assert await configured.async_resolve_mode() == BackendMode.LOCAL

        await store.async_set_settings({const.SETTINGS_USE_CLOUD_BACKEND: True})
        assert await configured.async_resolve_mode() == BackendMode.CLOUD
        assert await unconfigured.async_resolve_mode() == BackendMode.LOCAL

    async def test_blob_without_flag_is_local(
        self, hass: HomeAssistant, hass_storage
    ) -> None:
        """A settings blob missing the flag means local."""
        store = ShandukoDemoStore(hass)
        await store.async_set_settings({"gamification": True})
        selector = BackendSelector(store, make_cloud_client(configured=True))
        assert await selector.async_resolve_mode() == BackendMode.LOCAL
