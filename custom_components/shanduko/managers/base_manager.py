"""Base manager class for Shanduko managers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import async_dispatcher_send

from .. import const

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build an instance-scoped dispatcher signal name.

    Example:
        get_event_signal("abc123", "xp_gained") → "shanduko_abc123_xp_gained"
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


class BaseManager(ABC):
    """Base class for all Shanduko managers with scoped event support.

    Provides:
    - Instance-scoped event emitting (emit)
    - Access to the owning config entry

    Subclasses must implement:
    - async_setup(): Initialize state
    """

    def __init__(self, hass: HomeAssistant, config_entry: ConfigEntry) -> None:
        """Initialize manager.

        Args:
            hass: Home Assistant instance
            config_entry: Config entry owning this manager instance
        """
        self.hass = hass
        self.config_entry = config_entry
        self.entry_id = config_entry.entry_id

    def emit(self, suffix: str, payload: Any) -> None:
        """Emit instance-scoped event to subscribers.

        Args:
            suffix: Signal suffix constant (e.g., const.SIGNAL_SUFFIX_XP_GAINED)
            payload: Event object passed as the single listener argument
        """
        signal = get_event_signal(self.entry_id, suffix)
        const.LOGGER.debug(
            "DEBUG: Emitting event '%s' for instance %s: %s",
            suffix,
            self.entry_id,
            type(payload).__name__,
        )
        async_dispatcher_send(self.hass, signal, payload)

    @abstractmethod
    async def async_setup(self) -> None:
        """Set up the manager.

        Called once during config entry setup.
        """
