# File: notification_manager.py
"""Notification Manager for Shanduko integration.

Publish/subscribe channel through which XP gains, unlocked achievements,
toasts and celebrations are announced. Rendering is left to whoever listens:

- Dispatcher signals (``shanduko_{entry_id}_{suffix}``) carry the typed event
  object for in-process subscribers such as sensors.
- Home Assistant bus events (``shanduko_xp_gained`` etc.) carry the event as
  a plain dict for dashboards and automations.

Delivery is fire-and-forget: there is no acknowledgement or backpressure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from homeassistant.helpers.dispatcher import async_dispatcher_connect

from .. import const
from .base_manager import BaseManager, get_event_signal

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..engines.gamification_engine import Achievement


# =============================================================================
# Typed event payloads
# =============================================================================


@dataclass(frozen=True, slots=True)
class XpGainedEvent:
    """XP was added to the profile."""

    SUFFIX: ClassVar[str] = const.SIGNAL_SUFFIX_XP_GAINED
    EVENT_TYPE: ClassVar[str] = const.EVENT_XP_GAINED

    amount: int
    reason: str

    def as_dict(self) -> dict[str, Any]:
        return {"amount": self.amount, "reason": self.reason}


@dataclass(frozen=True, slots=True)
class AchievementEarnedEvent:
    """An achievement is being announced."""

    SUFFIX: ClassVar[str] = const.SIGNAL_SUFFIX_ACHIEVEMENT_EARNED
    EVENT_TYPE: ClassVar[str] = const.EVENT_ACHIEVEMENT_EARNED

    achievement: Achievement

    def as_dict(self) -> dict[str, Any]:
        return {"achievement": self.achievement.as_dict()}


@dataclass(frozen=True, slots=True)
class ToastEvent:
    """A transient message for the user."""

    SUFFIX: ClassVar[str] = const.SIGNAL_SUFFIX_TOAST
    EVENT_TYPE: ClassVar[str] = const.EVENT_TOAST

    message: str
    level: str = const.TOAST_LEVEL_SUCCESS

    def as_dict(self) -> dict[str, Any]:
        return {"message": self.message, "level": self.level}


@dataclass(frozen=True, slots=True)
class CelebrationEvent:
    """A celebratory effect request; ``intensity`` scales the effect."""

    SUFFIX: ClassVar[str] = const.SIGNAL_SUFFIX_CELEBRATION
    EVENT_TYPE: ClassVar[str] = const.EVENT_CELEBRATION

    style: str
    intensity: int = 1

    def as_dict(self) -> dict[str, Any]:
        return {"style": self.style, "intensity": self.intensity}


ShandukoEvent = XpGainedEvent | AchievementEarnedEvent | ToastEvent | CelebrationEvent


class NotificationManager(BaseManager):
    """Broadcasts feedback events for one config entry."""

    async def async_setup(self) -> None:
        """Nothing to subscribe to; the channel only publishes."""
        const.LOGGER.debug(
            "DEBUG: NotificationManager ready for entry %s", self.entry_id
        )

    def publish(self, event: ShandukoEvent) -> None:
        """Send ``event`` to dispatcher subscribers and the event bus."""
        self.emit(event.SUFFIX, event)
        self.hass.bus.async_fire(
            event.EVENT_TYPE, {"entry_id": self.entry_id, **event.as_dict()}
        )

    def subscribe(
        self, suffix: str, callback: Callable[[Any], Any]
    ) -> Callable[[], None]:
        """Subscribe to one event kind and return the unsubscribe callable."""
        return async_dispatcher_connect(
            self.hass, get_event_signal(self.entry_id, suffix), callback
        )
