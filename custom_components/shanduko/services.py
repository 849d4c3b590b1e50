# File: services.py
"""Defines custom services for the Shanduko integration.

These services are the entry points automations and dashboards use to record
community activity. Every gamification service goes through one of the
GamificationManager triggers, which award XP and check achievements.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import voluptuous as vol
from homeassistant.core import HomeAssistant, ServiceCall, SupportsResponse
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from . import const
from .engines.gamification_engine import (
    GamificationContext,
    format_achievement_progress,
)

if TYPE_CHECKING:
    from .coordinator import ShandukoDataCoordinator
    from .data_access import ShandukoDataAccess
    from .engines.gamification_engine import Achievement
    from .managers.gamification_manager import GamificationManager

# --- Service Schemas ---
SUBMIT_REPORT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TITLE): cv.string,
        vol.Required(const.FIELD_DESCRIPTION): cv.string,
        vol.Optional(const.FIELD_LOCATION): cv.string,
        vol.Optional(const.FIELD_LATITUDE): cv.latitude,
        vol.Optional(const.FIELD_LONGITUDE): cv.longitude,
        vol.Optional(const.FIELD_IMAGES, default=[]): vol.All(
            cv.ensure_list, [cv.string]
        ),
        vol.Optional(const.FIELD_IS_ANOMALY, default=False): cv.boolean,
    }
)

VERIFY_REPORT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_REPORT_ID): cv.string,
        vol.Required(const.FIELD_IS_ACCURATE): cv.boolean,
        vol.Optional(const.FIELD_NOTES): cv.string,
    }
)

REACT_TO_REPORT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_REPORT_ID): cv.string,
        vol.Required(const.FIELD_REACTION_TYPE): vol.In(const.REACTION_TYPES),
    }
)

COMPLETE_QUIZ_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CORRECT): vol.All(vol.Coerce(int), vol.Range(min=0)),
        vol.Required(const.FIELD_TOTAL): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional(const.FIELD_QUESTIONS_ANSWERED, default=[]): vol.All(
            cv.ensure_list, [vol.Coerce(int)]
        ),
    }
)

RECORD_VISIT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_PAGE): vol.In(
            [const.VISIT_PAGE_DASHBOARD, const.VISIT_PAGE_MAP]
        ),
    }
)

SHARE_REPORT_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_REPORT_ID): cv.string,
    }
)

ENABLE_LOCATION_SCHEMA = vol.Schema({})

UPDATE_PROFILE_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_USERNAME): cv.string,
        vol.Optional(const.FIELD_AVATAR_EMOJI): cv.string,
        vol.Optional(const.FIELD_REGION): cv.string,
        vol.Optional(const.FIELD_STREAK_DAYS): vol.All(
            vol.Coerce(int), vol.Range(min=0)
        ),
    }
)

SAVE_ALERT_PREFERENCES_SCHEMA = vol.Schema(
    {
        vol.Optional(key): vol.Coerce(float)
        for key in const.DEFAULT_ALERT_PREFERENCES
    }
)

SAVE_FEATURE_FLAGS_SCHEMA = vol.Schema(
    {
        **{vol.Optional(key): cv.boolean for key in const.DEFAULT_FEATURE_FLAGS},
        vol.Optional(const.CONF_USE_CLOUD_BACKEND): cv.boolean,
    }
)

_CONTEXT_COUNTERS = (
    "reports_count",
    "quizzes_completed",
    "anomalies_reported",
    "high_score_quizzes",
    "dashboard_views",
    "map_views",
    "shared_reports",
)
_CONTEXT_FLAGS = ("has_perfect_quiz", "has_location_reports")

CHECK_ACHIEVEMENTS_SCHEMA = vol.Schema(
    {
        **{
            vol.Optional(key): vol.All(vol.Coerce(int), vol.Range(min=0))
            for key in _CONTEXT_COUNTERS
        },
        **{vol.Optional(key): cv.boolean for key in _CONTEXT_FLAGS},
    }
)


def _get_first_entry_data(hass: HomeAssistant) -> dict[str, Any] | None:
    """Return hass.data for the first loaded Shanduko entry."""
    entries = hass.data.get(const.DOMAIN) or {}
    for entry_data in entries.values():
        if isinstance(entry_data, dict) and const.GAMIFICATION_MANAGER in entry_data:
            return entry_data
    return None


def _achievement_summary(achievements: list[Achievement]) -> list[dict[str, Any]]:
    return [achievement.as_dict() for achievement in achievements]


def async_setup_services(hass: HomeAssistant) -> None:
    """Register Shanduko services."""

    def _components(
        service_label: str,
    ) -> tuple[ShandukoDataAccess, GamificationManager, ShandukoDataCoordinator]:
        entry_data = _get_first_entry_data(hass)
        if entry_data is None:
            const.LOGGER.warning(
                "WARNING: %s: %s", service_label, const.MSG_NO_ENTRY_FOUND
            )
            raise HomeAssistantError(const.MSG_NO_ENTRY_FOUND)
        return (
            entry_data[const.DATA_ACCESS],
            entry_data[const.GAMIFICATION_MANAGER],
            entry_data[const.COORDINATOR],
        )

    async def handle_submit_report(call: ServiceCall) -> dict[str, Any]:
        """Handle submitting a water quality report."""
        data_access, manager, coordinator = _components("Submit Report")
        is_anomaly = call.data[const.FIELD_IS_ANOMALY]
        report = await data_access.async_create_report(
            {
                key: call.data[key]
                for key in (
                    const.FIELD_TITLE,
                    const.FIELD_DESCRIPTION,
                    const.FIELD_LOCATION,
                    const.FIELD_LATITUDE,
                    const.FIELD_LONGITUDE,
                    const.FIELD_IMAGES,
                )
                if key in call.data
            }
        )
        achievements = await manager.async_on_report_submitted(is_anomaly=is_anomaly)

        const.LOGGER.info(
            "INFO: Report '%s' submitted (anomaly=%s)", report["title"], is_anomaly
        )
        await coordinator.async_request_refresh()
        return {
            "report": dict(report),
            "achievements": _achievement_summary(achievements),
        }

    async def handle_verify_report(call: ServiceCall) -> None:
        """Handle verifying a report's accuracy."""
        data_access, _manager, coordinator = _components("Verify Report")
        report_id = call.data[const.FIELD_REPORT_ID]
        report = await data_access.async_verify_report(
            report_id,
            call.data[const.FIELD_IS_ACCURATE],
            call.data.get(const.FIELD_NOTES),
        )
        if report is None:
            raise HomeAssistantError(const.ERROR_REPORT_NOT_FOUND_FMT.format(report_id))
        await coordinator.async_request_refresh()

    async def handle_react_to_report(call: ServiceCall) -> None:
        """Handle toggling a reaction on a report."""
        data_access, _manager, coordinator = _components("React To Report")
        report_id = call.data[const.FIELD_REPORT_ID]
        report = await data_access.async_react_to_report(
            report_id, call.data[const.FIELD_REACTION_TYPE]
        )
        if report is None:
            raise HomeAssistantError(const.ERROR_REPORT_NOT_FOUND_FMT.format(report_id))
        await coordinator.async_request_refresh()

    async def handle_complete_quiz(call: ServiceCall) -> dict[str, Any]:
        """Handle recording today's quiz result."""
        _data_access, manager, coordinator = _components("Complete Quiz")
        correct = call.data[const.FIELD_CORRECT]
        total = call.data[const.FIELD_TOTAL]
        if correct > total:
            raise HomeAssistantError(
                f"Correct answers ({correct}) cannot exceed total ({total})"
            )

        attempt = await manager.async_complete_quiz(
            correct, total, call.data[const.FIELD_QUESTIONS_ANSWERED]
        )
        await coordinator.async_request_refresh()
        return {"accepted": attempt is not None, "attempt": attempt}

    async def handle_record_visit(call: ServiceCall) -> None:
        """Handle a dashboard or map visit."""
        _data_access, manager, coordinator = _components("Record Visit")
        if call.data[const.FIELD_PAGE] == const.VISIT_PAGE_MAP:
            await manager.async_on_map_visit()
        else:
            await manager.async_on_dashboard_visit()
        await coordinator.async_request_refresh()

    async def handle_share_report(call: ServiceCall) -> None:
        """Handle sharing a report with the community."""
        _data_access, manager, coordinator = _components("Share Report")
        await manager.async_on_report_shared()
        await coordinator.async_request_refresh()

    async def handle_enable_location(call: ServiceCall) -> None:
        """Handle enabling location sharing for reports."""
        _data_access, manager, coordinator = _components("Enable Location")
        await manager.async_on_location_enabled()
        await coordinator.async_request_refresh()

    async def handle_update_profile(call: ServiceCall) -> None:
        """Handle editing the profile; creates one when none exists yet."""
        data_access, _manager, coordinator = _components("Update Profile")
        updates = dict(call.data)
        profile = await data_access.async_update_profile(updates)
        if profile is None:
            username = updates.get(const.FIELD_USERNAME)
            if not username:
                raise HomeAssistantError("No profile yet; a username is required")
            await data_access.async_create_profile(
                username, updates.get(const.FIELD_AVATAR_EMOJI)
            )
        await coordinator.async_request_refresh()

    async def handle_save_alert_preferences(call: ServiceCall) -> None:
        """Handle saving alert thresholds (unspecified values are kept)."""
        data_access, _manager, coordinator = _components("Save Alert Preferences")
        current = await data_access.async_get_alert_preferences()
        await data_access.async_save_alert_preferences(
            {**current, **call.data}  # type: ignore[typeddict-item]
        )
        await coordinator.async_request_refresh()

    async def handle_save_feature_flags(call: ServiceCall) -> None:
        """Handle saving feature flags (unspecified flags are kept)."""
        data_access, _manager, coordinator = _components("Save Feature Flags")
        current = await data_access.async_get_feature_flags()
        await data_access.async_save_feature_flags(
            {**current, **call.data}  # type: ignore[typeddict-item]
        )
        await coordinator.async_request_refresh()

    async def handle_check_achievements(call: ServiceCall) -> dict[str, Any]:
        """Handle an explicit achievement check with an optional context."""
        data_access, manager, coordinator = _components("Check Achievements")
        context = GamificationContext(**call.data)
        achievements = await manager.async_check_achievements(context)

        profile = await data_access.async_get_profile()
        progress = (
            {
                achievement.code: format_achievement_progress(
                    achievement, profile, context
                )
                for achievement in achievements
            }
            if profile
            else {}
        )
        await coordinator.async_request_refresh()
        return {
            "achievements": _achievement_summary(achievements),
            "progress": progress,
        }

    # --- Register Services ---
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SUBMIT_REPORT,
        handle_submit_report,
        schema=SUBMIT_REPORT_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_VERIFY_REPORT,
        handle_verify_report,
        schema=VERIFY_REPORT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_REACT_TO_REPORT,
        handle_react_to_report,
        schema=REACT_TO_REPORT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_COMPLETE_QUIZ,
        handle_complete_quiz,
        schema=COMPLETE_QUIZ_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_RECORD_VISIT,
        handle_record_visit,
        schema=RECORD_VISIT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SHARE_REPORT,
        handle_share_report,
        schema=SHARE_REPORT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ENABLE_LOCATION,
        handle_enable_location,
        schema=ENABLE_LOCATION_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_UPDATE_PROFILE,
        handle_update_profile,
        schema=UPDATE_PROFILE_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SAVE_ALERT_PREFERENCES,
        handle_save_alert_preferences,
        schema=SAVE_ALERT_PREFERENCES_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SAVE_FEATURE_FLAGS,
        handle_save_feature_flags,
        schema=SAVE_FEATURE_FLAGS_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CHECK_ACHIEVEMENTS,
        handle_check_achievements,
        schema=CHECK_ACHIEVEMENTS_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )

    const.LOGGER.info("INFO: Shanduko services have been registered successfully")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister Shanduko services when unloading the integration."""
    for service in const.SERVICES:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: Shanduko services have been unregistered")
