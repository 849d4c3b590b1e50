# File: options_flow.py
"""Options flow for the Shanduko integration.

Tunes announcement pacing and the refresh interval, and switches between
the cloud and local backends. The backend switch is written to the persisted
settings blob, which every data access call reads.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant import config_entries

from . import const


class ShandukoOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for Shanduko."""

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        """Show and save the integration options."""
        entry = self.config_entry
        cloud_configured = bool(
            entry.data.get(const.CONF_SUPABASE_URL)
            and entry.data.get(const.CONF_SUPABASE_ANON_KEY)
        )

        if user_input is not None:
            entry_data = self.hass.data.get(const.DOMAIN, {}).get(entry.entry_id)
            if entry_data is not None:
                store = entry_data[const.DEMO_STORE]
                settings = await store.async_get_settings() or {}
                settings[const.SETTINGS_USE_CLOUD_BACKEND] = user_input[
                    const.CONF_USE_CLOUD_BACKEND
                ]
                await store.async_set_settings(settings)
                const.LOGGER.debug(
                    "DEBUG: Options flow set use_cloud_backend=%s",
                    user_input[const.CONF_USE_CLOUD_BACKEND],
                )
            return self.async_create_entry(title="", data=user_input)

        options = entry.options
        schema = vol.Schema(
            {
                vol.Required(
                    const.CONF_ANNOUNCE_INTERVAL,
                    default=options.get(
                        const.CONF_ANNOUNCE_INTERVAL, const.DEFAULT_ANNOUNCE_INTERVAL
                    ),
                ): vol.All(vol.Coerce(float), vol.Range(min=0, max=60)),
                vol.Required(
                    const.CONF_UPDATE_INTERVAL,
                    default=options.get(
                        const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
                    ),
                ): vol.All(vol.Coerce(int), vol.Range(min=1, max=1440)),
                vol.Required(
                    const.CONF_USE_CLOUD_BACKEND,
                    default=options.get(const.CONF_USE_CLOUD_BACKEND, cloud_configured),
                ): bool,
            }
        )
        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT, data_schema=schema
        )
