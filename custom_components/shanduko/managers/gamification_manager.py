"""Gamification Manager - XP awards, achievement checks and paced announcements.

This manager orchestrates the gamification flow for one config entry:
- XP awarding through the data access layer
- Achievement evaluation against the static catalog
- Persisting newly earned badges and bonus XP in a single profile update
- Announcing unlocked achievements one at a time, paced by announce_interval

ARCHITECTURE:
- GamificationManager = STATEFUL orchestration (queue + draining flag)
- gamification_engine = Pure evaluation logic (STATELESS)
- NotificationManager = outgoing channel for XP, toast and celebration events

One instance per config entry lives in hass.data[DOMAIN][entry_id]. The six
``async_on_*`` triggers are the entry points used by services.

Errors never reach the end user: every public method logs and swallows
failures (XP awarding and achievement checks are best-effort).
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import TYPE_CHECKING

from .. import const
from ..engines.gamification_engine import (
    Achievement,
    GamificationContext,
    Rarity,
    build_badge,
    check_achievements,
)
from ..utils.dt_utils import dt_now_iso
from ..utils.math_utils import quiz_score, round_half_up
from .base_manager import BaseManager
from .notification_manager import (
    AchievementEarnedEvent,
    CelebrationEvent,
    XpGainedEvent,
)

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from ..data_access import ShandukoDataAccess
    from ..type_defs import QuizAttemptData
    from .notification_manager import NotificationManager


class GamificationManager(BaseManager):
    """Manager for XP and achievement orchestration.

    Responsibilities:
    - Award event-specific base XP, then check achievements
    - Write new badges and bonus XP with exactly one profile update
    - Queue achievements and drain them sequentially (single-flight)
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        data_access: ShandukoDataAccess,
        notifier: NotificationManager,
        announce_interval: float = const.DEFAULT_ANNOUNCE_INTERVAL,
    ) -> None:
        """Initialize the gamification manager.

        Args:
            hass: Home Assistant instance
            config_entry: Owning config entry
            data_access: Data access layer used for all profile reads/writes
            notifier: Outgoing event channel
            announce_interval: Seconds to pause between achievement announcements
        """
        super().__init__(hass, config_entry)
        self._data_access = data_access
        self._notifier = notifier
        self._announce_interval = announce_interval
        self._queue: deque[Achievement] = deque()
        self._draining = False

    async def async_setup(self) -> None:
        """Set up the manager."""
        const.LOGGER.debug(
            "DEBUG: GamificationManager ready for entry %s (announce every %ss)",
            self.entry_id,
            self._announce_interval,
        )

    @property
    def is_draining(self) -> bool:
        """Return True while the announcement loop is running."""
        return self._draining

    @property
    def pending_announcements(self) -> list[Achievement]:
        """Return achievements waiting to be announced, in order."""
        return list(self._queue)

    # =========================================================================
    # XP and achievements
    # =========================================================================

    async def async_award_xp(
        self, amount: int, reason: str, show_feedback: bool = True
    ) -> None:
        """Award XP to the current profile; failures are logged only."""
        try:
            await self._data_access.async_award_xp(amount, reason)
        except Exception:
            const.LOGGER.exception("ERROR: Failed to award %s XP for %s", amount, reason)
            return

        if show_feedback:
            self._notifier.publish(XpGainedEvent(amount=amount, reason=reason))
            self._notifier.publish(
                CelebrationEvent(style=const.CELEBRATION_XP, intensity=amount)
            )

    async def async_check_achievements(
        self, context: GamificationContext | None = None
    ) -> list[Achievement]:
        """Evaluate, persist and queue newly earned achievements.

        Returns the newly earned achievements without waiting for the
        announcements. A missing profile or any failure returns [].
        """
        try:
            profile = await self._data_access.async_get_profile()
            if profile is None:
                return []

            new_achievements = check_achievements(profile, context)
            if not new_achievements:
                return []

            earned_at = dt_now_iso()
            badges = [
                *profile["badges"],
                *(build_badge(achievement, earned_at) for achievement in new_achievements),
            ]
            total_xp = sum(achievement.xp_reward for achievement in new_achievements)

            await self._data_access.async_update_profile(
                {
                    const.DATA_PROFILE_BADGES: badges,
                    const.DATA_PROFILE_POINTS: profile["points"] + total_xp,
                }
            )
            const.LOGGER.info(
                "INFO: Earned %s achievement(s) worth %s XP: %s",
                len(new_achievements),
                total_xp,
                [achievement.code for achievement in new_achievements],
            )
        except Exception:
            const.LOGGER.exception("ERROR: Achievement check failed")
            return []

        self._queue.extend(new_achievements)
        if not self._draining:
            self._draining = True
            self.hass.async_create_task(
                self._async_drain_queue(), f"{const.DOMAIN}_announce_achievements"
            )
        return new_achievements

    async def _async_drain_queue(self) -> None:
        """Announce queued achievements one at a time until the queue is empty."""
        try:
            while self._queue:
                achievement = self._queue.popleft()
                self._notifier.publish(AchievementEarnedEvent(achievement=achievement))
                await self._async_celebrate(achievement)
                await asyncio.sleep(self._announce_interval)
        except Exception:
            const.LOGGER.exception("ERROR: Achievement announcement failed")
        finally:
            self._draining = False

    async def _async_celebrate(self, achievement: Achievement) -> None:
        """Publish a celebration sized by the achievement's rarity."""
        if achievement.rarity == Rarity.LEGENDARY:
            event = CelebrationEvent(style=const.CELEBRATION_FIREWORK)
        elif achievement.rarity == Rarity.EPIC:
            event = CelebrationEvent(style=const.CELEBRATION_REPORT)
        elif achievement.rarity == Rarity.RARE:
            profile = await self._data_access.async_get_profile()
            streak = (profile or {}).get("streak_days") or 1
            event = CelebrationEvent(style=const.CELEBRATION_STREAK, intensity=streak)
        else:
            event = CelebrationEvent(
                style=const.CELEBRATION_XP, intensity=achievement.xp_reward
            )
        self._notifier.publish(event)

    # =========================================================================
    # Triggers
    # =========================================================================

    async def async_on_report_submitted(
        self, is_anomaly: bool = False
    ) -> list[Achievement]:
        """Award report XP and check reporting achievements."""
        if is_anomaly:
            await self.async_award_xp(
                const.XP_ANOMALY_REPORT, const.XP_REASON_ANOMALY_REPORT
            )
        else:
            await self.async_award_xp(const.XP_REPORT, const.XP_REASON_REPORT)

        return await self.async_check_achievements(
            GamificationContext(
                reports_count=1,
                anomalies_reported=1 if is_anomaly else 0,
            )
        )

    async def async_on_quiz_completed(
        self, score: float, perfect_score: bool = False
    ) -> list[Achievement]:
        """Award quiz XP and check learning achievements.

        Args:
            score: Fraction of correct answers (0.0 - 1.0)
            perfect_score: All answers correct
        """
        xp = (
            const.XP_PERFECT_QUIZ
            if perfect_score
            else round_half_up(score * const.XP_QUIZ_SCALE)
        )
        await self.async_award_xp(xp, const.XP_REASON_QUIZ)

        return await self.async_check_achievements(
            GamificationContext(
                quizzes_completed=1,
                has_perfect_quiz=perfect_score,
                high_score_quizzes=1 if score >= const.HIGH_SCORE_THRESHOLD else 0,
            )
        )

    async def async_on_dashboard_visit(self) -> list[Achievement]:
        """Check achievements for a dashboard view."""
        return await self.async_check_achievements(
            GamificationContext(dashboard_views=1)
        )

    async def async_on_map_visit(self) -> list[Achievement]:
        """Check achievements for a map view."""
        return await self.async_check_achievements(GamificationContext(map_views=1))

    async def async_on_report_shared(self) -> list[Achievement]:
        """Award sharing XP and check community achievements."""
        await self.async_award_xp(const.XP_REPORT_SHARED, const.XP_REASON_REPORT_SHARED)
        return await self.async_check_achievements(
            GamificationContext(shared_reports=1)
        )

    async def async_on_location_enabled(self) -> list[Achievement]:
        """Check achievements after location sharing was enabled."""
        return await self.async_check_achievements(
            GamificationContext(has_location_reports=True)
        )

    async def async_complete_quiz(
        self, correct: int, total: int, questions_answered: list[int]
    ) -> QuizAttemptData | None:
        """Record today's quiz and trigger the quiz completion flow.

        Only one attempt per day is accepted; a second one returns None
        without awarding anything.
        """
        if await self._data_access.async_get_todays_quiz_attempt() is not None:
            const.LOGGER.info("INFO: Quiz already completed today, ignoring attempt")
            return None

        attempt = await self._data_access.async_save_quiz_attempt(
            correct, total, questions_answered
        )
        await self.async_on_quiz_completed(
            quiz_score(correct, total), perfect_score=total > 0 and correct == total
        )
        return attempt
