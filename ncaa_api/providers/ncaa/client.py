"""NCAA HTTP client.

Handles raw HTTP requests to the three upstream mechanisms:
- GraphQL persisted queries (sdataprod.ncaa.com)
- Legacy static JSON (data.ncaa.com/casablanca)
- HTML pages and RSS feeds (www.ncaa.com)

No data transformation - just fetch and return JSON, text or parsed HTML.

Configuration via environment variables:
    NCAA_MAX_CONNECTIONS: Max concurrent connections (default: 50)
    NCAA_TIMEOUT: Request timeout in seconds (default: 10)
    NCAA_RETRY_COUNT: Attempts for transient network errors (default: 2)
"""

import asyncio
import json
import logging
import os
import random

import httpx
from bs4 import BeautifulSoup

from ncaa_api.core import UpstreamFetchError

logger = logging.getLogger(__name__)

NCAA_MAX_CONNECTIONS = int(os.environ.get("NCAA_MAX_CONNECTIONS", 50))
NCAA_TIMEOUT = float(os.environ.get("NCAA_TIMEOUT", 10.0))
NCAA_RETRY_COUNT = int(os.environ.get("NCAA_RETRY_COUNT", 2))

# Retry backoff for transient transport failures
RETRY_BASE_DELAY = 0.5
RETRY_MAX_DELAY = 5.0
RETRY_JITTER = 0.3  # ±30% randomization

RETRYABLE_STATUS_CODES = {429, 502, 503, 504}

GRAPHQL_URL = "https://sdataprod.ncaa.com/"
LEGACY_BASE_URL = "https://data.ncaa.com/casablanca"
WEB_BASE_URL = "https://www.ncaa.com"

USER_AGENT = "Mozilla/5.0 (compatible; ncaa-api/1.0)"

# GraphQL errors that mean "this hash is not (or no longer) known" rather than a failure
EMPTY_RESULT_ERRORS = {"PersistedQueryNotFound", "PERSISTED_QUERY_NOT_FOUND"}


def _calculate_delay(attempt: int) -> float:
    """Exponential backoff with jitter: 0.5, 1, 2... capped at 5s."""
    capped = min(RETRY_BASE_DELAY * (2**attempt), RETRY_MAX_DELAY)
    jitter = capped * RETRY_JITTER * (2 * random.random() - 1)
    return max(0.1, capped + jitter)


def _short(url: str) -> str:
    return url.split("://", 1)[-1][:120]


class NCAAClient:
    """Low-level async client for the NCAA upstream sources.

    One httpx.AsyncClient is shared by all requests and created lazily on the
    running event loop.

    Error contract:
    - persisted_query() returns None for an empty-but-valid answer
    - every method raises UpstreamFetchError on transport, HTTP or parse failure
    """

    def __init__(
        self,
        timeout: float | None = None,
        retry_count: int | None = None,
        max_connections: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._timeout = timeout if timeout is not None else NCAA_TIMEOUT
        self._retry_count = max(1, retry_count if retry_count is not None else NCAA_RETRY_COUNT)
        self._max_connections = (
            max_connections if max_connections is not None else NCAA_MAX_CONNECTIONS
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(
                    max_connections=self._max_connections,
                    max_keepalive_connections=self._max_connections,
                ),
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def _get(self, url: str, params: dict | None = None) -> httpx.Response:
        """GET with bounded retry of transient failures.

        4xx responses (other than 429) are not retried.
        """
        last_error: Exception | None = None

        for attempt in range(self._retry_count):
            try:
                response = await self._get_client().get(url, params=params)
                if response.status_code in RETRYABLE_STATUS_CODES and (
                    attempt < self._retry_count - 1
                ):
                    logger.warning(
                        "[NCAA] HTTP %d for %s, retry %d/%d",
                        response.status_code,
                        _short(url),
                        attempt + 1,
                        self._retry_count - 1,
                    )
                    await asyncio.sleep(_calculate_delay(attempt))
                    continue
                response.raise_for_status()
                logger.debug("[FETCH] %s", _short(url))
                return response

            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                logger.warning("[NCAA] HTTP %d for %s", status_code, _short(url))
                raise UpstreamFetchError(
                    f"Upstream returned HTTP {status_code}", url=url, status_code=status_code
                ) from e
            except (httpx.RequestError, OSError) as e:
                # httpx.RequestError covers timeouts, DNS failures, refused connections
                last_error = e
                logger.warning("[NCAA] Request failed for %s: %s", _short(url), e)
                if attempt < self._retry_count - 1:
                    await asyncio.sleep(_calculate_delay(attempt))
                    continue

        raise UpstreamFetchError(f"Upstream request failed: {last_error}", url=url)

    async def _get_json(self, url: str, params: dict | None = None) -> dict:
        response = await self._get(url, params)
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise UpstreamFetchError(f"Invalid JSON from upstream: {e}", url=url) from e

    async def persisted_query(
        self,
        operation: str,
        sha256_hash: str,
        variables: dict,
    ) -> dict | None:
        """Run a GraphQL persisted query.

        Args:
            operation: Persisted operation name (sent as `meta`)
            sha256_hash: Persisted query hash
            variables: Query variables

        Returns:
            Full GraphQL response, or None when the answer is empty but valid
            (null/empty data, unknown persisted query)
        """
        params = {
            "meta": operation,
            "extensions": json.dumps(
                {"persistedQuery": {"version": 1, "sha256Hash": sha256_hash}},
                separators=(",", ":"),
            ),
            "variables": json.dumps(variables, separators=(",", ":")),
        }
        payload = await self._get_json(GRAPHQL_URL, params)
        if not isinstance(payload, dict):
            raise UpstreamFetchError(
                f"Unexpected GraphQL response type: {type(payload).__name__}", url=GRAPHQL_URL
            )

        errors = payload.get("errors") or []
        for error in errors:
            message = str(error.get("message", "")) if isinstance(error, dict) else str(error)
            if message in EMPTY_RESULT_ERRORS:
                logger.debug("[NCAA] Persisted query %s not found: %s", operation, sha256_hash[:12])
                return None

        data = payload.get("data")
        if not data:
            if errors:
                logger.debug("[NCAA] GraphQL errors for %s: %s", operation, errors)
            return None
        return payload

    async def fetch_static_json(self, path: str) -> dict:
        """Fetch a legacy static JSON document (path relative to casablanca/)."""
        return await self._get_json(f"{LEGACY_BASE_URL}/{path.lstrip('/')}")

    async def fetch_text(self, path: str) -> str:
        """Fetch a www.ncaa.com page (or feed) as text."""
        response = await self._get(f"{WEB_BASE_URL}/{path.lstrip('/')}")
        return response.text

    async def fetch_html(self, path: str) -> BeautifulSoup:
        """Fetch and parse a www.ncaa.com page."""
        text = await self.fetch_text(path)
        return BeautifulSoup(text, "lxml")

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
