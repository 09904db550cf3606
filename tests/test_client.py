"""Tests for NCAAClient against a mocked transport."""

import asyncio
import json

import httpx
import pytest

from ncaa_api.core import UpstreamFetchError
from ncaa_api.providers.ncaa import NCAAClient
from ncaa_api.providers.ncaa.client import GRAPHQL_URL, LEGACY_BASE_URL


def make_client(handler) -> NCAAClient:
    return NCAAClient(timeout=1.0, retry_count=1, transport=httpx.MockTransport(handler))


def run(client: NCAAClient, coro):
    async def scenario():
        try:
            return await coro
        finally:
            await client.close()

    return asyncio.run(scenario())


class TestPersistedQuery:
    """GraphQL persisted query requests."""

    def test_request_parameters(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": {"contests": [{"contestId": 1}]}})

        client = make_client(handler)
        payload = run(
            client, client.persisted_query("GetContests_web", "abc123", {"seasonYear": 2025})
        )

        assert payload == {"data": {"contests": [{"contestId": 1}]}}
        request = seen[0]
        assert str(request.url).startswith(GRAPHQL_URL)
        assert request.url.params["meta"] == "GetContests_web"
        extensions = json.loads(request.url.params["extensions"])
        assert extensions["persistedQuery"]["sha256Hash"] == "abc123"
        assert json.loads(request.url.params["variables"]) == {"seasonYear": 2025}

    def test_unknown_hash_is_empty(self):
        def handler(request):
            return httpx.Response(200, json={"errors": [{"message": "PersistedQueryNotFound"}]})

        client = make_client(handler)
        assert run(client, client.persisted_query("op", "stale", {})) is None

    def test_null_data_is_empty(self):
        client = make_client(lambda request: httpx.Response(200, json={"data": None}))
        assert run(client, client.persisted_query("op", "h", {})) is None

    def test_non_object_body_is_upstream_error(self):
        client = make_client(lambda request: httpx.Response(200, json=[1, 2]))

        with pytest.raises(UpstreamFetchError, match="list"):
            run(client, client.persisted_query("op", "h", {}))


class TestErrors:
    """Transport and HTTP failures become UpstreamFetchError."""

    def test_http_error_keeps_status(self):
        client = make_client(lambda request: httpx.Response(404))

        with pytest.raises(UpstreamFetchError) as exc_info:
            run(client, client.fetch_static_json("game/1/gameInfo.json"))

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == f"{LEGACY_BASE_URL}/game/1/gameInfo.json"

    def test_server_error(self):
        client = make_client(lambda request: httpx.Response(503))

        with pytest.raises(UpstreamFetchError) as exc_info:
            run(client, client.fetch_text("stats/football/fbs"))

        assert exc_info.value.status_code == 503

    def test_invalid_json(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(UpstreamFetchError):
            run(client, client.fetch_static_json("scoreboard.json"))

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = make_client(handler)

        with pytest.raises(UpstreamFetchError) as exc_info:
            run(client, client.fetch_static_json("scoreboard.json"))

        assert exc_info.value.status_code is None

    def test_client_error_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(400)

        client = NCAAClient(retry_count=3, transport=httpx.MockTransport(handler))

        with pytest.raises(UpstreamFetchError):
            run(client, client.fetch_static_json("scoreboard.json"))

        assert len(calls) == 1


class TestHtml:
    """Page fetching."""

    def test_fetch_html_parses(self):
        client = make_client(lambda request: httpx.Response(200, text="<h1>Title</h1>"))

        page = run(client, client.fetch_html("/stats/football/fbs"))

        assert page.find("h1").get_text() == "Title"
