"""Error taxonomy for request resolution.

- UnsupportedSourceError: bad sport/division/date combination (client error, not retried)
- HashDiscoveryExhaustedError: no persisted query candidate produced usable data
- UpstreamFetchError: network, HTTP or parse failure talking to the provider
- PartialMergeWarning: bracket game that matched no round (reported, never raised)
"""


class NCAAApiError(Exception):
    """Base class for errors raised by the resolution core."""


class UnsupportedSourceError(NCAAApiError):
    """No upstream source can answer this sport/division/kind/date combination."""

    def __init__(self, message: str, sport: str | None = None, division: str | None = None):
        super().__init__(message)
        self.sport = sport
        self.division = division


class HashDiscoveryExhaustedError(NCAAApiError):
    """Every persisted query candidate was tried without a usable result."""

    def __init__(self, sport: str | None, query_kind: str, attempted: list[str]):
        self.sport = sport
        self.query_kind = query_kind
        self.attempted = list(attempted)
        super().__init__(
            f"No usable persisted query for {sport or 'any sport'}/{query_kind} "
            f"after {len(self.attempted)} attempt(s)"
        )


class UpstreamFetchError(NCAAApiError):
    """Fetching from the upstream provider failed.

    status_code is the upstream HTTP status when one was received.
    """

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class PartialMergeWarning(UserWarning):
    """A championship game could not be placed into any bracket round."""

    def __init__(self, game_id: str, bracket_round: str | None, round_name: str | None = None):
        self.game_id = game_id
        self.bracket_round = bracket_round
        self.round_name = round_name
        super().__init__(
            f"Game {game_id} matched no bracket round "
            f"(bracketRound={bracket_round!r}, roundName={round_name!r})"
        )
