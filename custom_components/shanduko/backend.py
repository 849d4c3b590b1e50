# File: backend.py
"""Backend mode selection.

The mode is resolved from the persisted settings blob on every call, so a
settings change takes effect on the next operation without a reload.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from . import const

if TYPE_CHECKING:
    from .cloud_client import ShandukoCloudClient
    from .store import ShandukoDemoStore


class BackendMode(StrEnum):
    """Where a data access call is routed."""

    CLOUD = "cloud"
    LOCAL = "local"


class BackendSelector:
    """Resolve the backend for each data access call."""

    def __init__(
        self, store: ShandukoDemoStore, cloud_client: ShandukoCloudClient
    ) -> None:
        """Initialize with the settings source and the cloud client."""
        self._store = store
        self._cloud_client = cloud_client

    async def async_resolve_mode(self) -> BackendMode:
        """Return the backend mode for this call.

        No settings blob: cloud when the client is configured, otherwise local.
        With a blob: cloud only when the flag is set and the client is
        configured.
        """
        settings = await self._store.async_get_settings()
        configured = self._cloud_client.configured

        if settings is None:
            return BackendMode.CLOUD if configured else BackendMode.LOCAL

        wants_cloud = settings.get(const.SETTINGS_USE_CLOUD_BACKEND) is True
        if wants_cloud and not configured:
            const.LOGGER.debug(
                "DEBUG: Cloud backend requested but not configured, using local"
            )
        return BackendMode.CLOUD if wants_cloud and configured else BackendMode.LOCAL
