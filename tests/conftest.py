"""Shared fixtures for Shanduko tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.shanduko import const
from custom_components.shanduko.backend import BackendSelector
from custom_components.shanduko.data_access import ShandukoDataAccess
from custom_components.shanduko.managers import GamificationManager, NotificationManager
from custom_components.shanduko.store import ShandukoDemoStore

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name

CLOUD_URL = "https://shanduko.supabase.test"
CLOUD_ANON_KEY = "anon-key"
CLOUD_TOKEN = "user-token"
CLOUD_USER_ID = "cloud-user-1"


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a demo-mode config entry (no cloud credentials)."""
    return MockConfigEntry(
        domain=const.DOMAIN,
        title=const.SHANDUKO_TITLE,
        data={
            const.CONF_SUPABASE_URL: "",
            const.CONF_SUPABASE_ANON_KEY: "",
            const.CONF_ACCESS_TOKEN: "",
            const.CONF_REGION: const.DEFAULT_REGION,
        },
        options={const.CONF_ANNOUNCE_INTERVAL: 0},
        entry_id="test_entry_id",
    )


def make_cloud_client(
    *, configured: bool = True, user: dict[str, Any] | None = None
) -> MagicMock:
    """Build a cloud client double with async table methods."""
    client = MagicMock()
    client.configured = configured
    client.async_get_user = AsyncMock(return_value=user)
    client.async_select = AsyncMock(return_value=[])
    client.async_insert = AsyncMock(side_effect=lambda table, row: dict(row, id="new-id"))
    client.async_update = AsyncMock(return_value=[])
    return client


def make_profile(
    *,
    points: int = 0,
    streak_days: int = 0,
    badge_codes: list[str] | None = None,
    user_id: str = const.DEMO_USER_ID,
    username: str = const.DEMO_USERNAME,
) -> dict[str, Any]:
    """Build a stored profile row holding the given badge codes."""
    return {
        "id": user_id,
        "username": username,
        "avatar_emoji": "🌊",
        "region": "ZW",
        "points": points,
        "streak_days": streak_days,
        "badges": [
            {
                "code": code,
                "title": code,
                "emoji": "🏅",
                "description": code,
                "earned_at": "2025-01-01T00:00:00+00:00",
            }
            for code in badge_codes or []
        ],
        "alert_preferences": dict(const.DEFAULT_ALERT_PREFERENCES),
        "feature_flags": {**const.DEFAULT_FEATURE_FLAGS, "use_cloud_backend": False},
        "created_at": "2025-01-01T00:00:00+00:00",
        "updated_at": "2025-01-01T00:00:00+00:00",
    }


@dataclass
class Components:
    """One wired set of Shanduko components for a test."""

    store: ShandukoDemoStore
    cloud_client: Any
    data_access: ShandukoDataAccess
    notifier: NotificationManager
    manager: GamificationManager


@pytest.fixture
def build_components(
    hass: HomeAssistant, hass_storage: dict[str, Any], mock_config_entry: MockConfigEntry
):
    """Return a factory wiring store, data access and managers."""
    # pylint: disable=unused-argument
    mock_config_entry.add_to_hass(hass)

    def _build(cloud_client: Any = None) -> Components:
        store = ShandukoDemoStore(hass)
        client = cloud_client or make_cloud_client(configured=False)
        notifier = NotificationManager(hass, mock_config_entry)
        data_access = ShandukoDataAccess(
            store, client, BackendSelector(store, client), notifier=notifier
        )
        manager = GamificationManager(
            hass, mock_config_entry, data_access, notifier, announce_interval=0
        )
        return Components(store, client, data_access, notifier, manager)

    return _build


@pytest.fixture
def components(build_components) -> Components:
    """Return local-mode components."""
    return build_components()


@pytest.fixture
async def init_integration(
    hass: HomeAssistant, hass_storage: dict[str, Any], mock_config_entry: MockConfigEntry
) -> MockConfigEntry:
    """Set up the integration in demo mode."""
    # pylint: disable=unused-argument
    mock_config_entry.add_to_hass(hass)
    await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()
    return mock_config_entry
