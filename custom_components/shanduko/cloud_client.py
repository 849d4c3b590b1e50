# File: cloud_client.py
"""Cloud store client for the Shanduko integration.

Speaks the PostgREST dialect (Supabase) over Home Assistant's shared aiohttp
session. Only the small surface the data access layer needs is exposed:
filtered selects, inserts, updates, and identity lookup.

Calls carry no timeout: a hung request stalls its own call chain only, other
triggers keep running on the event loop.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import aiohttp
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .type_defs import CloudUser, Row

# (column, operator, value) with operator one of const.FILTER_*
Filter = tuple[str, str, Any]

_HEADER_ACCEPT_SINGLE = "application/vnd.pgrst.object+json"
_HEADER_PREFER_REPRESENTATION = "return=representation"


class ShandukoError(HomeAssistantError):
    """Base error for the Shanduko integration."""


class NotAuthenticatedError(ShandukoError):
    """Raised before a cloud mutation when no user is signed in."""


class CloudQueryError(ShandukoError):
    """Raised when the cloud store rejects a request or cannot be reached."""

    def __init__(
        self, message: str, *, code: str | None = None, status: int | None = None
    ) -> None:
        """Store the PostgREST error code and HTTP status alongside the message."""
        super().__init__(message)
        self.code = code
        self.status = status

    @property
    def is_no_rows(self) -> bool:
        """Return True for a single-row request that matched nothing."""
        return self.code == const.CLOUD_ERROR_NO_ROWS


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ShandukoCloudClient:
    """Typed table access against a PostgREST endpoint."""

    def __init__(
        self,
        hass: HomeAssistant,
        url: str | None,
        anon_key: str | None,
        access_token: str | None = None,
    ) -> None:
        """Initialize the client. Missing credentials leave it unconfigured."""
        self.hass = hass
        self._url = (url or "").rstrip("/")
        self._anon_key = anon_key or ""
        self._access_token = access_token or ""

    @property
    def configured(self) -> bool:
        """Return True when both the URL and the anon key are present."""
        return bool(self._url and self._anon_key)

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {self._access_token or self._anon_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    def _table_url(self, table: str) -> str:
        return f"{self._url}{const.CLOUD_REST_PATH}{table}"

    @staticmethod
    def _filter_params(filters: list[Filter] | None) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        for column, operator, value in filters or []:
            if operator not in (const.FILTER_EQ, const.FILTER_GTE, const.FILTER_LTE):
                raise ValueError(f"Unsupported filter operator: {operator}")
            params.append((column, f"{operator}.{_encode_value(value)}"))
        return params

    async def _async_request(
        self,
        method: str,
        table: str,
        *,
        params: list[tuple[str, str]],
        headers: dict[str, str] | None = None,
        json_body: Any = None,
    ) -> Any:
        """Send one request and return the decoded JSON payload."""
        if not self.configured:
            raise CloudQueryError("Cloud store is not configured")

        session = async_get_clientsession(self.hass)
        url = self._table_url(table)
        const.LOGGER.debug("DEBUG: Cloud %s %s params=%s", method, table, params)
        try:
            async with session.request(
                method,
                url,
                params=params,
                headers=self._headers(headers),
                json=json_body,
            ) as response:
                try:
                    payload = await response.json(content_type=None)
                except ValueError as err:
                    raise CloudQueryError(
                        f"HTTP {response.status} from {table}: response is not JSON",
                        status=response.status,
                    ) from err
                if response.status >= 400:
                    code = payload.get("code") if isinstance(payload, dict) else None
                    message = (
                        payload.get("message") if isinstance(payload, dict) else None
                    )
                    raise CloudQueryError(
                        f"HTTP {response.status} from {table}: {message or 'request failed'}",
                        code=code,
                        status=response.status,
                    )
                return payload
        except aiohttp.ClientError as err:
            raise CloudQueryError(f"Failed to reach cloud store: {err}") from err

    async def async_select(
        self,
        table: str,
        *,
        filters: list[Filter] | None = None,
        order: str | None = None,
        ascending: bool = True,
        limit: int | None = None,
        single: bool = False,
        columns: str = "*",
    ) -> Any:
        """Select rows from ``table``.

        Returns a list of rows, or one row when ``single`` is set. A single-row
        request that matches nothing raises CloudQueryError with code PGRST116.
        """
        params = [("select", columns), *self._filter_params(filters)]
        if order:
            params.append(("order", f"{order}.{'asc' if ascending else 'desc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))

        headers = {"Accept": _HEADER_ACCEPT_SINGLE} if single else None
        payload = await self._async_request("GET", table, params=params, headers=headers)

        if not single:
            if not isinstance(payload, list):
                raise CloudQueryError(f"Unexpected response shape from {table}")
            return payload

        if isinstance(payload, list):
            if len(payload) != 1:
                raise CloudQueryError(
                    f"Expected one row from {table}, got {len(payload)}",
                    code=const.CLOUD_ERROR_NO_ROWS if not payload else None,
                    status=406,
                )
            return payload[0]
        return payload

    async def async_insert(self, table: str, row: Row) -> Row:
        """Insert one row and return the stored representation."""
        payload = await self._async_request(
            "POST",
            table,
            params=[],
            headers={"Prefer": _HEADER_PREFER_REPRESENTATION},
            json_body=row,
        )
        if isinstance(payload, list):
            return payload[0] if payload else row
        return payload

    async def async_update(
        self, table: str, values: Row, filters: list[Filter]
    ) -> list[Row]:
        """Update rows matching ``filters`` and return them."""
        payload = await self._async_request(
            "PATCH",
            table,
            params=self._filter_params(filters),
            headers={"Prefer": _HEADER_PREFER_REPRESENTATION},
            json_body=values,
        )
        return payload if isinstance(payload, list) else [payload]

    async def async_get_user(self) -> CloudUser | None:
        """Return the signed-in user, or None when nobody is signed in."""
        if not self.configured or not self._access_token:
            return None

        session = async_get_clientsession(self.hass)
        try:
            async with session.get(
                f"{self._url}{const.CLOUD_AUTH_USER_PATH}", headers=self._headers()
            ) as response:
                if response.status != 200:
                    const.LOGGER.warning(
                        "WARNING: Cloud auth lookup returned HTTP %s", response.status
                    )
                    return None
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, ValueError) as err:
            const.LOGGER.warning("WARNING: Cloud auth lookup failed: %s", err)
            return None

        if not isinstance(payload, dict) or not payload.get("id"):
            return None
        return {"id": payload["id"], "email": payload.get("email")}
