# File: data_access.py
"""Data access layer for the Shanduko integration.

Every operation resolves its backend per call (see backend.py) and returns
application models shaped by data_builders.py:

- LOCAL: collections in the demo store, acting as the fixed demo user
- CLOUD: PostgREST tables, acting as the signed-in user

Backend failures propagate to the caller. Cloud mutations raise
NotAuthenticatedError before any request when nobody is signed in.

Profile writes are read-modify-write with no compare-and-swap: two
concurrent callers can read the same profile and the later write wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from . import const, data_builders as db
from .backend import BackendMode
from .cloud_client import CloudQueryError, NotAuthenticatedError
from .managers.notification_manager import ToastEvent
from .utils.dt_utils import dt_hours_ago_iso, dt_now_iso, dt_to_utc, dt_today_iso

if TYPE_CHECKING:
    from .backend import BackendSelector
    from .cloud_client import ShandukoCloudClient
    from .managers.notification_manager import NotificationManager
    from .store import ShandukoDemoStore
    from .type_defs import (
        AlertPreferences,
        CloudUser,
        FeatureFlags,
        LeaderboardEntry,
        PredictionData,
        ProfileData,
        QuizAttemptData,
        ReportData,
        Row,
        SensorReadingData,
    )


class ShandukoDataAccess:
    """Domain operations over the local demo store or the cloud store."""

    def __init__(
        self,
        store: ShandukoDemoStore,
        cloud_client: ShandukoCloudClient,
        selector: BackendSelector,
        notifier: NotificationManager | None = None,
        region: str = const.DEFAULT_REGION,
    ) -> None:
        """Initialize the data access layer."""
        self._store = store
        self._cloud = cloud_client
        self._selector = selector
        self._notifier = notifier
        self._region = region

    # -------------------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------------------

    async def async_get_mode(self) -> BackendMode:
        """Return the backend the next call would use."""
        return await self._selector.async_resolve_mode()

    async def _async_require_user(self) -> CloudUser:
        user = await self._cloud.async_get_user()
        if user is None:
            raise NotAuthenticatedError("Sign in to the cloud store first")
        return user

    async def _async_cloud_display_name(self, user: CloudUser) -> str:
        """Return the profile username for ``user``, falling back to email."""
        try:
            row = await self._cloud.async_select(
                const.TABLE_PROFILES,
                filters=[(const.DATA_ID, const.FILTER_EQ, user["id"])],
                single=True,
                columns=const.DATA_PROFILE_USERNAME,
            )
        except CloudQueryError as err:
            if not err.is_no_rows:
                raise
            row = {}
        return row.get(const.DATA_PROFILE_USERNAME) or user.get("email") or "Anonymous"

    async def _async_cloud_report_row(self, report_id: str) -> Row | None:
        try:
            return await self._cloud.async_select(
                const.TABLE_REPORTS,
                filters=[(const.DATA_ID, const.FILTER_EQ, report_id)],
                single=True,
            )
        except CloudQueryError as err:
            if err.is_no_rows:
                return None
            raise

    async def _async_local_reports(self) -> list[Row]:
        return await self._store.async_get_collection(const.COLLECTION_REPORTS)

    @staticmethod
    def _find_report(reports: list[Row], report_id: str) -> int | None:
        for index, report in enumerate(reports):
            if report.get(const.DATA_ID) == report_id:
                return index
        return None

    # -------------------------------------------------------------------------------------
    # Sensor readings and predictions
    # -------------------------------------------------------------------------------------

    async def async_get_latest_readings(self) -> list[SensorReadingData]:
        """Return the most recent readings (newest first)."""
        if await self.async_get_mode() == BackendMode.LOCAL:
            rows = await self._store.async_get_collection(
                const.COLLECTION_SENSOR_READINGS
            )
            return [
                db.build_sensor_reading(row)
                for row in rows[: const.READINGS_LATEST_LIMIT]
            ]

        rows = await self._cloud.async_select(
            const.TABLE_SENSOR_READINGS,
            order=const.DATA_TIMESTAMP,
            ascending=False,
            limit=const.READINGS_LATEST_LIMIT,
        )
        return [db.build_sensor_reading(row) for row in rows]

    async def async_get_history(
        self, hours: int = const.DEFAULT_HISTORY_HOURS
    ) -> list[SensorReadingData]:
        """Return readings taken within the last ``hours`` hours."""
        cutoff = dt_hours_ago_iso(hours)

        if await self.async_get_mode() == BackendMode.LOCAL:
            cutoff_dt = dt_to_utc(cutoff)
            rows = await self._store.async_get_collection(
                const.COLLECTION_SENSOR_READINGS
            )
            return [
                db.build_sensor_reading(row)
                for row in rows
                if (stamp := dt_to_utc(row.get(const.DATA_TIMESTAMP))) is not None
                and cutoff_dt is not None
                and stamp >= cutoff_dt
            ]

        rows = await self._cloud.async_select(
            const.TABLE_SENSOR_READINGS,
            filters=[(const.DATA_TIMESTAMP, const.FILTER_GTE, cutoff)],
            order=const.DATA_TIMESTAMP,
            ascending=True,
        )
        return [db.build_sensor_reading(row) for row in rows]

    async def async_get_predictions(
        self, hours: int = const.DEFAULT_HISTORY_HOURS
    ) -> list[PredictionData]:
        """Return the first ``hours`` forecast points (always local)."""
        rows = await self._store.async_get_collection(const.COLLECTION_PREDICTIONS)
        return [db.build_prediction(row) for row in rows[:hours]]

    # -------------------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------------------

    async def async_list_reports(self) -> list[ReportData]:
        """Return all community reports."""
        if await self.async_get_mode() == BackendMode.LOCAL:
            return [db.build_report(row) for row in await self._async_local_reports()]

        rows = await self._cloud.async_select(
            const.TABLE_REPORTS, order=const.DATA_TIMESTAMP, ascending=False
        )
        return [db.build_report(row) for row in rows]

    async def async_create_report(self, report: dict[str, Any]) -> ReportData:
        """Create a report and return it as stored."""
        timestamp = dt_now_iso()

        if await self.async_get_mode() == BackendMode.LOCAL:
            new_report = db.build_new_report(
                report, user_id=const.DEMO_USER_ID, timestamp=timestamp
            )
            reports = await self._async_local_reports()
            await self._store.async_set_collection(
                const.COLLECTION_REPORTS, [new_report, *reports]
            )
            const.LOGGER.debug("DEBUG: Created local report %s", new_report["id"])
            return new_report

        user = await self._async_require_user()
        row: dict[str, Any] = dict(
            db.build_new_report(report, user_id=user["id"], timestamp=timestamp)
        )
        row.pop(const.DATA_ID)
        inserted = await self._cloud.async_insert(const.TABLE_REPORTS, row)
        return db.build_report(inserted)

    async def async_verify_report(
        self, report_id: str, is_accurate: bool, notes: str | None = None
    ) -> ReportData | None:
        """Append a verification to a report. Returns None for an unknown id.

        Verifications are appended as-is: the same user may verify twice.
        """
        timestamp = dt_now_iso()

        if await self.async_get_mode() == BackendMode.LOCAL:
            reports = await self._async_local_reports()
            index = self._find_report(reports, report_id)
            if index is None:
                const.LOGGER.warning("WARNING: Verify: report %s not found", report_id)
                return None
            report = reports[index]
            report[const.DATA_REPORT_VERIFICATIONS] = [
                *(report.get(const.DATA_REPORT_VERIFICATIONS) or []),
                db.build_verification(
                    user_id=const.DEMO_USER_ID,
                    username=const.DEMO_USERNAME,
                    is_accurate=is_accurate,
                    notes=notes,
                    timestamp=timestamp,
                ),
            ]
            await self._store.async_set_collection(const.COLLECTION_REPORTS, reports)
            return db.build_report(report)

        user = await self._async_require_user()
        row = await self._async_cloud_report_row(report_id)
        if row is None:
            return None
        verifications = [
            *db.build_report(row)["verifications"],
            db.build_verification(
                user_id=user["id"],
                username=await self._async_cloud_display_name(user),
                is_accurate=is_accurate,
                notes=notes,
                timestamp=timestamp,
            ),
        ]
        updated = await self._cloud.async_update(
            const.TABLE_REPORTS,
            {const.DATA_REPORT_VERIFICATIONS: verifications},
            [(const.DATA_ID, const.FILTER_EQ, report_id)],
        )
        return db.build_report(updated[0]) if updated else None

    async def async_react_to_report(
        self, report_id: str, reaction_type: str
    ) -> ReportData | None:
        """Toggle the current user's ``reaction_type`` on a report.

        The whole reaction list is written back (last writer wins).
        """
        timestamp = dt_now_iso()

        if await self.async_get_mode() == BackendMode.LOCAL:
            reports = await self._async_local_reports()
            index = self._find_report(reports, report_id)
            if index is None:
                const.LOGGER.warning("WARNING: React: report %s not found", report_id)
                return None
            report = reports[index]
            report[const.DATA_REPORT_REACTIONS] = db.toggle_reaction(
                report.get(const.DATA_REPORT_REACTIONS) or [],
                user_id=const.DEMO_USER_ID,
                username=const.DEMO_USERNAME,
                reaction_type=reaction_type,
                timestamp=timestamp,
            )
            await self._store.async_set_collection(const.COLLECTION_REPORTS, reports)
            return db.build_report(report)

        user = await self._async_require_user()
        row = await self._async_cloud_report_row(report_id)
        if row is None:
            return None
        reactions = db.toggle_reaction(
            db.build_report(row)["reactions"],
            user_id=user["id"],
            username=await self._async_cloud_display_name(user),
            reaction_type=reaction_type,
            timestamp=timestamp,
        )
        updated = await self._cloud.async_update(
            const.TABLE_REPORTS,
            {const.DATA_REPORT_REACTIONS: reactions},
            [(const.DATA_ID, const.FILTER_EQ, report_id)],
        )
        return db.build_report(updated[0]) if updated else None

    # -------------------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------------------

    async def async_get_profile(self) -> ProfileData | None:
        """Return the current user's profile, or None."""
        if await self.async_get_mode() == BackendMode.LOCAL:
            profiles = await self._store.async_get_collection(const.COLLECTION_PROFILES)
            if not profiles:
                return None
            return db.build_profile(profiles[0], cloud_configured=self._cloud.configured)

        user = await self._cloud.async_get_user()
        if user is None:
            return None
        try:
            row = await self._cloud.async_select(
                const.TABLE_PROFILES,
                filters=[(const.DATA_ID, const.FILTER_EQ, user["id"])],
                single=True,
            )
        except CloudQueryError as err:
            if err.is_no_rows:
                return None
            raise
        return db.build_profile(row, cloud_configured=True)

    async def async_create_profile(
        self, username: str, avatar_emoji: str | None = None
    ) -> ProfileData:
        """Create a fresh profile for the current user."""
        timestamp = dt_now_iso()

        if await self.async_get_mode() == BackendMode.LOCAL:
            profile = db.build_new_profile(
                user_id=const.DEMO_USER_ID,
                username=username,
                avatar_emoji=avatar_emoji,
                region=self._region,
                timestamp=timestamp,
                cloud_configured=self._cloud.configured,
            )
            profiles = await self._store.async_get_collection(const.COLLECTION_PROFILES)
            await self._store.async_set_collection(
                const.COLLECTION_PROFILES, [profile, *profiles[1:]]
            )
            return profile

        user = await self._async_require_user()
        profile = db.build_new_profile(
            user_id=user["id"],
            username=username,
            avatar_emoji=avatar_emoji,
            region=self._region,
            timestamp=timestamp,
            cloud_configured=True,
        )
        inserted = await self._cloud.async_insert(const.TABLE_PROFILES, dict(profile))
        return db.build_profile(inserted, cloud_configured=True)

    async def async_update_profile(self, updates: dict[str, Any]) -> ProfileData | None:
        """Merge ``updates`` into the current profile and refresh updated_at.

        This is the only path that writes profile fields. Returns None when
        there is no profile to update.
        """
        row_updates = db.profile_updates_to_row(updates)
        row_updates[const.DATA_UPDATED_AT] = dt_now_iso()

        if await self.async_get_mode() == BackendMode.LOCAL:
            profiles = await self._store.async_get_collection(const.COLLECTION_PROFILES)
            if not profiles:
                const.LOGGER.debug("DEBUG: No local profile to update")
                return None
            profiles[0] = {**profiles[0], **row_updates}
            await self._store.async_set_collection(const.COLLECTION_PROFILES, profiles)
            return db.build_profile(profiles[0], cloud_configured=self._cloud.configured)

        user = await self._async_require_user()
        updated = await self._cloud.async_update(
            const.TABLE_PROFILES,
            row_updates,
            [(const.DATA_ID, const.FILTER_EQ, user["id"])],
        )
        if not updated:
            return None
        return db.build_profile(updated[0], cloud_configured=True)

    async def async_award_xp(self, amount: int, reason: str) -> ProfileData | None:
        """Add ``amount`` points to the current profile.

        A missing profile is a silent no-op. On success a toast is published.
        """
        profile = await self.async_get_profile()
        if profile is None:
            const.LOGGER.debug("DEBUG: No profile, skipping %s XP for %s", amount, reason)
            return None

        updated = await self.async_update_profile(
            {const.DATA_PROFILE_POINTS: profile["points"] + amount}
        )
        if self._notifier is not None:
            self._notifier.publish(ToastEvent(f"+{amount} XP: {reason}"))
        return updated

    # -------------------------------------------------------------------------------------
    # Leaderboard
    # -------------------------------------------------------------------------------------

    async def async_get_leaderboard(
        self, period: str = const.LEADERBOARD_PERIOD_ALL_TIME
    ) -> list[LeaderboardEntry]:
        """Return profiles ranked by points.

        ``period`` is accepted for callers but both periods rank all-time
        points.
        """
        if await self.async_get_mode() == BackendMode.LOCAL:
            rows = await self._store.async_get_collection(const.COLLECTION_PROFILES)
            profiles = [
                db.build_profile(row, cloud_configured=self._cloud.configured)
                for row in rows
            ]
            return db.build_leaderboard(profiles, const.DEMO_USER_ID)

        rows = await self._cloud.async_select(
            const.TABLE_PROFILES,
            order=const.DATA_PROFILE_POINTS,
            ascending=False,
            limit=const.LEADERBOARD_LIMIT,
        )
        user = await self._cloud.async_get_user()
        profiles = [db.build_profile(row, cloud_configured=True) for row in rows]
        return db.build_leaderboard(profiles, user["id"] if user else None)

    # -------------------------------------------------------------------------------------
    # Quiz attempts
    # -------------------------------------------------------------------------------------

    async def async_get_todays_quiz_attempt(self) -> QuizAttemptData | None:
        """Return today's quiz attempt (UTC date key), or None."""
        today = dt_today_iso()

        if await self.async_get_mode() == BackendMode.LOCAL:
            rows = await self._store.async_get_collection(const.COLLECTION_QUIZ_ATTEMPTS)
            for row in rows:
                if (
                    row.get(const.DATA_QUIZ_DATE) == today
                    and row.get(const.DATA_QUIZ_USER_ID) == const.DEMO_USER_ID
                ):
                    return db.build_quiz_attempt(row)
            return None

        user = await self._cloud.async_get_user()
        if user is None:
            return None
        try:
            row = await self._cloud.async_select(
                const.TABLE_QUIZ_ATTEMPTS,
                filters=[
                    (const.DATA_QUIZ_USER_ID, const.FILTER_EQ, user["id"]),
                    (const.DATA_QUIZ_DATE, const.FILTER_EQ, today),
                ],
                single=True,
            )
        except CloudQueryError as err:
            if err.is_no_rows:
                return None
            raise
        return db.build_quiz_attempt(row)

    async def async_save_quiz_attempt(
        self, correct: int, total: int, questions_answered: list[int]
    ) -> QuizAttemptData:
        """Store a quiz attempt for today.

        Does not check for an existing attempt; callers look that up first.
        """
        today = dt_today_iso()

        if await self.async_get_mode() == BackendMode.LOCAL:
            attempt = db.build_quiz_attempt_record(
                user_id=const.DEMO_USER_ID,
                date=today,
                correct=correct,
                total=total,
                questions_answered=questions_answered,
            )
            rows = await self._store.async_get_collection(const.COLLECTION_QUIZ_ATTEMPTS)
            await self._store.async_set_collection(
                const.COLLECTION_QUIZ_ATTEMPTS, [*rows, attempt]
            )
            return attempt

        user = await self._async_require_user()
        row: dict[str, Any] = dict(
            db.build_quiz_attempt_record(
                user_id=user["id"],
                date=today,
                correct=correct,
                total=total,
                questions_answered=questions_answered,
            )
        )
        row.pop(const.DATA_ID)
        inserted = await self._cloud.async_insert(const.TABLE_QUIZ_ATTEMPTS, row)
        return db.build_quiz_attempt(inserted)

    # -------------------------------------------------------------------------------------
    # Preferences
    # -------------------------------------------------------------------------------------

    async def async_get_alert_preferences(self) -> AlertPreferences:
        """Return the profile's alert thresholds (defaults without a profile)."""
        profile = await self.async_get_profile()
        if profile is None:
            return db.parse_alert_preferences(None).value
        return profile["alert_preferences"]

    async def async_save_alert_preferences(
        self, preferences: AlertPreferences
    ) -> ProfileData | None:
        """Persist alert thresholds on the profile."""
        return await self.async_update_profile(
            {const.DATA_PROFILE_ALERT_PREFERENCES: dict(preferences)}
        )

    async def async_get_feature_flags(self) -> FeatureFlags:
        """Return the profile's feature flags (defaults without a profile)."""
        profile = await self.async_get_profile()
        if profile is None:
            return db.default_feature_flags(self._cloud.configured)
        return profile["feature_flags"]

    async def async_save_feature_flags(self, flags: FeatureFlags) -> ProfileData | None:
        """Persist feature flags on the profile and in the settings blob.

        The settings blob drives backend selection, so a changed
        ``use_cloud_backend`` applies from the next call on.
        """
        updated = await self.async_update_profile(
            {const.DATA_PROFILE_FEATURE_FLAGS: dict(flags)}
        )
        await self._store.async_set_settings(dict(flags))
        return updated
