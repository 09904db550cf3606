"""Persisted query hash discovery.

A persisted query hash that has been rotated upstream does not fail loudly:
the API answers with null data or with a payload of a different shape. The
resolver tries candidates in order and accepts the first payload whose
discriminator (__typename) matches the shape expected for the query kind.

Each attempt uses a different hash; there is no blind retry and the number
of attempts is capped at the candidate set size.
"""

import logging
from collections.abc import Awaitable, Callable

from ncaa_api.core import HashDiscoveryExhaustedError, QueryKind
from ncaa_api.providers.ncaa.hashes import (
    DEFAULT_HASH_TABLE,
    EXPECTED_SHAPES,
    PersistedQueryHashTable,
)

logger = logging.getLogger(__name__)

HashFetch = Callable[[str], Awaitable[dict | None]]


def _typename_matches(node: object, expected: str) -> bool:
    if not isinstance(node, dict):
        return False
    typename = node.get("__typename")
    if not isinstance(typename, str) or not typename.endswith(expected):
        return False
    # A bare {"__typename": ...} carries no data
    return any(k != "__typename" and v is not None for k, v in node.items())


def is_usable_payload(kind: QueryKind, payload: dict | None) -> bool:
    """Check that a GraphQL payload is typed and non-empty for this query kind.

    Accepts either the full response ({"data": {...}}) or its data object.
    """
    if not payload or not isinstance(payload, dict):
        return False
    data = payload.get("data", payload)
    if not isinstance(data, dict):
        return False

    root, expected = EXPECTED_SHAPES[kind]
    node = data.get(root)
    if isinstance(node, list):
        return bool(node) and _typename_matches(node[0], expected)
    return _typename_matches(node, expected)


class HashResolver:
    """Finds the persisted query hash that currently answers a query kind.

    The hash that last worked for a (sport, kind) is tried first on later
    calls; the static table is never modified.
    """

    def __init__(self, table: PersistedQueryHashTable | None = None):
        self._table = table or DEFAULT_HASH_TABLE
        self._preferred: dict[tuple[str | None, QueryKind], str] = {}

    def candidates(self, sport: str | None, kind: QueryKind) -> list[str]:
        ordered = list(self._table.candidates(sport, kind))
        preferred = self._preferred.get((sport, kind))
        if preferred in ordered:
            ordered.remove(preferred)
            ordered.insert(0, preferred)
        return ordered

    async def resolve_hash(
        self,
        sport: str | None,
        kind: QueryKind,
        fetch_fn: HashFetch,
    ) -> tuple[str, dict]:
        """Return (hash, payload) for the first candidate with usable data.

        UpstreamFetchError raised by fetch_fn propagates unchanged.

        Raises:
            HashDiscoveryExhaustedError: no candidate produced a usable payload
        """
        attempted: list[str] = []
        for candidate in self.candidates(sport, kind):
            attempted.append(candidate)
            payload = await fetch_fn(candidate)
            if is_usable_payload(kind, payload):
                if len(attempted) > 1:
                    logger.info(
                        "[HASH] Discovered %s hash for %s after %d attempts: %s",
                        kind.value,
                        sport or "any sport",
                        len(attempted),
                        candidate[:12],
                    )
                self._preferred[(sport, kind)] = candidate
                return candidate, payload
            logger.debug(
                "[HASH] Candidate %s unusable for %s/%s", candidate[:12], sport, kind.value
            )

        logger.warning(
            "[HASH] Exhausted %d candidate(s) for %s/%s", len(attempted), sport, kind.value
        )
        raise HashDiscoveryExhaustedError(sport, kind.value, attempted)
