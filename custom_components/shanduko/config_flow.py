# File: config_flow.py
"""Config flow for the Shanduko integration.

A single step collects the optional cloud credentials and the display region.
Leaving the cloud fields empty sets the integration up in demo (local) mode.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from .options_flow import ShandukoOptionsFlowHandler


def build_user_schema(defaults: dict[str, Any] | None = None) -> vol.Schema:
    """Build the schema for the user step."""
    defaults = defaults or {}
    return vol.Schema(
        {
            vol.Optional(
                const.CONF_SUPABASE_URL,
                default=defaults.get(const.CONF_SUPABASE_URL, ""),
            ): str,
            vol.Optional(
                const.CONF_SUPABASE_ANON_KEY,
                default=defaults.get(const.CONF_SUPABASE_ANON_KEY, ""),
            ): str,
            vol.Optional(
                const.CONF_ACCESS_TOKEN,
                default=defaults.get(const.CONF_ACCESS_TOKEN, ""),
            ): str,
            vol.Optional(
                const.CONF_REGION,
                default=defaults.get(const.CONF_REGION, const.DEFAULT_REGION),
            ): str,
        }
    )


class ShandukoConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for Shanduko."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        """Collect cloud credentials (optional) and region."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        errors: dict[str, str] = {}
        if user_input is not None:
            url = user_input.get(const.CONF_SUPABASE_URL, "").strip()
            anon_key = user_input.get(const.CONF_SUPABASE_ANON_KEY, "").strip()

            # URL and key only make sense together
            if bool(url) != bool(anon_key):
                errors["base"] = const.TRANS_KEY_ERROR_INCOMPLETE_CLOUD
            else:
                const.LOGGER.info(
                    "INFO: Creating Shanduko entry (cloud configured=%s)",
                    bool(url and anon_key),
                )
                return self.async_create_entry(
                    title=const.SHANDUKO_TITLE,
                    data={
                        const.CONF_SUPABASE_URL: url,
                        const.CONF_SUPABASE_ANON_KEY: anon_key,
                        const.CONF_ACCESS_TOKEN: user_input.get(
                            const.CONF_ACCESS_TOKEN, ""
                        ).strip(),
                        const.CONF_REGION: user_input.get(
                            const.CONF_REGION, const.DEFAULT_REGION
                        ),
                    },
                )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER,
            data_schema=build_user_schema(user_input),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return ShandukoOptionsFlowHandler()
