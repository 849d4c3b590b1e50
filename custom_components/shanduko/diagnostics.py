"""Diagnostics support for Shanduko integration.

Reports which backend is active and dumps the raw local store so demo-mode
state can be inspected. Cloud credentials are redacted.
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from . import const

TO_REDACT = {const.CONF_SUPABASE_ANON_KEY, const.CONF_ACCESS_TOKEN}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    entry_data = hass.data[const.DOMAIN][entry.entry_id]
    data_access = entry_data[const.DATA_ACCESS]
    store = entry_data[const.DEMO_STORE]
    manager = entry_data[const.GAMIFICATION_MANAGER]

    return {
        "entry": async_redact_data(dict(entry.data), TO_REDACT),
        "options": dict(entry.options),
        "backend_mode": str(await data_access.async_get_mode()),
        "announcements_pending": [a.code for a in manager.pending_announcements],
        "local_store": store.data,
    }
