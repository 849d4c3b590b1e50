"""Tests for the PostgREST cloud client.

Test Categories:
- Select query encoding (filters, order, limit, single)
- Error mapping (HTTP errors, no-row singles, connection failures)
- Insert and update
- Identity lookup
"""

from __future__ import annotations

import aiohttp
from homeassistant.core import HomeAssistant
import pytest
from pytest_homeassistant_custom_component.test_util.aiohttp import (
    AiohttpClientMocker,
)

from custom_components.shanduko import const
from custom_components.shanduko.cloud_client import (
    CloudQueryError,
    ShandukoCloudClient,
)

from tests.conftest import CLOUD_ANON_KEY, CLOUD_TOKEN, CLOUD_URL, CLOUD_USER_ID

PROFILES_URL = f"{CLOUD_URL}/rest/v1/profiles"
USER_URL = f"{CLOUD_URL}/auth/v1/user"


@pytest.fixture
def client(hass: HomeAssistant) -> ShandukoCloudClient:
    """Return a configured, signed-in client."""
    return ShandukoCloudClient(hass, CLOUD_URL, CLOUD_ANON_KEY, CLOUD_TOKEN)


class TestSelect:
    """Select requests."""

    async def test_query_encoding(
        self, client: ShandukoCloudClient, aioclient_mock: AiohttpClientMocker
    ) -> None:
        """Filters, order and limit map onto PostgREST query params."""
        aioclient_mock.get(PROFILES_URL, json=[{"id": "a"}])

        rows = await client.async_select(
            const.TABLE_PROFILES,
            filters=[("points", const.FILTER_GTE, 100)],
            order="points",
            ascending=False,
            limit=50,
        )

        assert rows == [{"id": "a"}]
        _, url, _, headers = aioclient_mock.mock_calls[-1]
        assert url.query["select"] == "*"
        assert url.query["points"] == "gte.100"
        assert url.query["order"] == "points.desc"
        assert url.query["limit"] == "50"
        assert headers["apikey"] == CLOUD_ANON_KEY
        assert headers["Authorization"] == f"Bearer {CLOUD_TOKEN}"

    async def test_single_row(
        self, client: ShandukoCloudClient, aioclient_mock: AiohttpClientMocker
    ) -> None:
        """A single select returns the row itself."""
        aioclient_mock.get(PROFILES_URL, json={"id": "a", "points": 5})

        row = await client.async_select(
            const.TABLE_PROFILES, filters=[("id", const.FILTER_EQ, "a")], single=True
        )

        assert row == {"id": "a", "points": 5}
        headers = aioclient_mock.mock_calls[-1][3]
        assert headers["Accept"] == "application/vnd.pgrst.object+json"

    async def test_single_no_rows(
        self, client: ShandukoCloudClient, aioclient_mock: AiohttpClientMocker
    ) -> None:
        """A single select that matches nothing raises the no-rows error."""
        aioclient_mock.get(
            PROFILES_URL,
            status=406,
            json={"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"},
        )

        with pytest.raises(CloudQueryError) as err:
            await client.async_select(const.TABLE_PROFILES, single=True)

        assert err.value.is_no_rows
        assert err.value.status == 406

    async def test_single_empty_list(
        self, client: ShandukoCloudClient, aioclient_mock: AiohttpClientMocker
    ) -> None:
        """An empty list for a single select is treated as no rows."""
        aioclient_mock.get(PROFILES_URL, json=[])

        with pytest.raises(CloudQueryError) as err:
            await client.async_select(const.TABLE_PROFILES, single=True)

        assert err.value.is_no_rows

    async def test_server_error(
        self, client: ShandukoCloudClient, aioclient_mock: AiohttpClientMocker
    ) -> None:
        """Other HTTP errors keep their code and are not no-rows."""
        aioclient_mock.get(PROFILES_URL, status=500, json={"code": "XX000", "message": "boom"})

        with pytest.raises(CloudQueryError) as err:
            await client.async_select(const.TABLE_PROFILES)

        assert err.value.code == "XX000"
        assert not err.value.is_no_rows

    async def test_non_json_error_page(
        self, client: ShandukoCloudClient, aioclient_mock: AiohttpClientMocker
    ) -> None:
        """A gateway error page that is not JSON still maps to CloudQueryError."""
        aioclient_mock.get(PROFILES_URL, status=502, text="<html>Bad Gateway</html>")

        with pytest.raises(CloudQueryError) as err:
            await client.async_select(const.TABLE_PROFILES)

        assert err.value.status == 502
        assert not err.value.is_no_rows

    async def test_connection_error(
        self, client: ShandukoCloudClient, aioclient_mock: AiohttpClientMocker
    ) -> None:
        """Connection failures surface as CloudQueryError."""
        aioclient_mock.get(PROFILES_URL, exc=aiohttp.ClientError())

        with pytest.raises(CloudQueryError):
            await client.async_select(const.TABLE_PROFILES)

    async def test_unconfigured(
        self, hass: HomeAssistant, aioclient_mock: AiohttpClientMocker
    ) -> None:
        """An unconfigured client refuses to send requests."""
        client = ShandukoCloudClient(hass, None, None)
        assert client.configured is False

        with pytest.raises(CloudQueryError):
            await client.async_select(const.TABLE_PROFILES)
        assert aioclient_mock.call_count == 0

    async def test_unsupported_operator(self, client: ShandukoCloudClient) -> None:
        """Only eq, gte and lte filters are supported."""
        with pytest.raises(ValueError):
            await client.async_select(const.TABLE_PROFILES, filters=[("id", "like", "a")])


class TestMutations:
    """Insert and update requests."""

    async def test_insert_returns_representation(
        self, client: ShandukoCloudClient, aioclient_mock: AiohttpClientMocker
    ) -> None:
        """Insert posts the row and returns the stored row."""
        aioclient_mock.post(
            f"{CLOUD_URL}/rest/v1/reports", json=[{"id": "r1", "title": "Algae"}]
        )

        row = await client.async_insert(const.TABLE_REPORTS, {"title": "Algae"})

        assert row == {"id": "r1", "title": "Algae"}
        method, _, data, headers = aioclient_mock.mock_calls[-1]
        assert method == "POST"
        assert data == {"title": "Algae"}
        assert headers["Prefer"] == "return=representation"

    async def test_update_filters(
        self, client: ShandukoCloudClient, aioclient_mock: AiohttpClientMocker
    ) -> None:
        """Update patches rows matching the filters."""
        aioclient_mock.patch(PROFILES_URL, json=[{"id": CLOUD_USER_ID, "points": 10}])

        rows = await client.async_update(
            const.TABLE_PROFILES, {"points": 10}, [("id", const.FILTER_EQ, CLOUD_USER_ID)]
        )

        assert rows == [{"id": CLOUD_USER_ID, "points": 10}]
        _, url, data, _ = aioclient_mock.mock_calls[-1]
        assert url.query["id"] == f"eq.{CLOUD_USER_ID}"
        assert data == {"points": 10}


class TestGetUser:
    """Identity lookup."""

    async def test_signed_in(
        self, client: ShandukoCloudClient, aioclient_mock: AiohttpClientMocker
    ) -> None:
        """A valid token resolves to id and email."""
        aioclient_mock.get(
            USER_URL, json={"id": CLOUD_USER_ID, "email": "ana@example.com", "role": "x"}
        )
        assert await client.async_get_user() == {
            "id": CLOUD_USER_ID,
            "email": "ana@example.com",
        }

    async def test_rejected_token(
        self, client: ShandukoCloudClient, aioclient_mock: AiohttpClientMocker
    ) -> None:
        """A rejected token means nobody is signed in."""
        aioclient_mock.get(USER_URL, status=401, json={"message": "invalid JWT"})
        assert await client.async_get_user() is None

    async def test_gateway_error_page(
        self, client: ShandukoCloudClient, aioclient_mock: AiohttpClientMocker
    ) -> None:
        """An HTML error page from the auth endpoint means nobody is signed in."""
        aioclient_mock.get(USER_URL, status=502, text="<html>Bad Gateway</html>")
        assert await client.async_get_user() is None

    async def test_non_json_success_body(
        self, client: ShandukoCloudClient, aioclient_mock: AiohttpClientMocker, caplog
    ) -> None:
        """A 200 response that is not JSON is logged and yields None."""
        aioclient_mock.get(USER_URL, text="<html>maintenance</html>")
        assert await client.async_get_user() is None
        assert "Cloud auth lookup failed" in caplog.text

    async def test_no_token(
        self, hass: HomeAssistant, aioclient_mock: AiohttpClientMocker
    ) -> None:
        """Without an access token no lookup is made."""
        client = ShandukoCloudClient(hass, CLOUD_URL, CLOUD_ANON_KEY)
        assert await client.async_get_user() is None
        assert aioclient_mock.call_count == 0
