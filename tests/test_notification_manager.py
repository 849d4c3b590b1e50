"""Tests for the notification channel."""

from __future__ import annotations

from homeassistant.core import HomeAssistant, callback

from custom_components.shanduko import const
from custom_components.shanduko.engines.gamification_engine import (
    get_achievement_by_code,
)
from custom_components.shanduko.managers.base_manager import get_event_signal
from custom_components.shanduko.managers.notification_manager import (
    AchievementEarnedEvent,
    CelebrationEvent,
    ToastEvent,
    XpGainedEvent,
)


def test_event_signal_format() -> None:
    """Signals are scoped to the config entry."""
    assert get_event_signal("abc123", "xp_gained") == "shanduko_abc123_xp_gained"


def test_event_payloads() -> None:
    """Each event serializes to its bus payload."""
    assert XpGainedEvent(25, "Report").as_dict() == {"amount": 25, "reason": "Report"}
    assert ToastEvent("Saved").as_dict() == {"message": "Saved", "level": "success"}
    assert CelebrationEvent("firework").as_dict() == {"style": "firework", "intensity": 1}
    event = AchievementEarnedEvent(get_achievement_by_code("first_report"))
    assert event.as_dict()["achievement"]["xp_reward"] == 25


async def test_publish_reaches_dispatcher_and_bus(
    hass: HomeAssistant, components
) -> None:
    """Publishing delivers the typed event and fires a bus event."""
    received = []
    bus_events = []

    @callback
    def _on_xp(event) -> None:
        received.append(event)

    components.notifier.subscribe(const.SIGNAL_SUFFIX_XP_GAINED, _on_xp)
    hass.bus.async_listen(
        const.EVENT_XP_GAINED, callback(lambda event: bus_events.append(event))
    )

    components.notifier.publish(XpGainedEvent(amount=10, reason="Quiz Completion"))
    await hass.async_block_till_done()

    assert received == [XpGainedEvent(amount=10, reason="Quiz Completion")]
    assert bus_events[0].data == {
        "entry_id": "test_entry_id",
        "amount": 10,
        "reason": "Quiz Completion",
    }


async def test_unsubscribe(hass: HomeAssistant, components) -> None:
    """No events arrive after unsubscribing."""
    received = []

    @callback
    def _on_toast(event) -> None:
        received.append(event)

    unsub = components.notifier.subscribe(const.SIGNAL_SUFFIX_TOAST, _on_toast)
    components.notifier.publish(ToastEvent("first"))
    unsub()
    components.notifier.publish(ToastEvent("second"))
    await hass.async_block_till_done()

    assert [event.message for event in received] == ["first"]


async def test_other_kinds_not_delivered(hass: HomeAssistant, components) -> None:
    """Subscribers only see their own event kind."""
    received = []

    @callback
    def _on_toast(event) -> None:
        received.append(event)

    components.notifier.subscribe(const.SIGNAL_SUFFIX_TOAST, _on_toast)
    components.notifier.publish(CelebrationEvent("xp", 5))
    await hass.async_block_till_done()

    assert received == []
