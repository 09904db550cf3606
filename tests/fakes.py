"""Test doubles and payload builders shared by the test modules."""

import asyncio

from bs4 import BeautifulSoup

from ncaa_api.core import UpstreamFetchError


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def team(
    name: str,
    is_home: bool,
    score: int | None = None,
    winner: bool = False,
    conference: str = "big-ten",
    rank: int | None = None,
    seed: int | None = None,
) -> dict:
    return {
        "__typename": "ContestTeam",
        "isHome": is_home,
        "nameShort": name,
        "name6Char": name.upper().replace(" ", "").replace(".", "")[:6],
        "seoname": name.lower().replace(" ", "-").replace(".", ""),
        "nameFull": name,
        "score": score,
        "isWinner": winner,
        "teamRank": rank,
        "seed": seed,
        "conferenceSeo": conference,
        "conferenceName": conference.upper(),
    }


def contest(
    contest_id: int,
    home: str = "Ohio St.",
    away: str = "Michigan",
    state: str = "F",
    home_score: int | None = 27,
    away_score: int | None = 20,
    conference: str = "big-ten",
    **extra,
) -> dict:
    data = {
        "__typename": "Contest",
        "contestId": contest_id,
        "gameState": state,
        "currentPeriod": "FINAL" if state == "F" else "",
        "contestClock": "0:00",
        "startTimeEpoch": 1756569600,
        "broadcasterName": "FOX",
        "url": f"/game/{contest_id}",
        "teams": [
            team(home, True, home_score, winner=(home_score or 0) > (away_score or 0), conference=conference),
            team(away, False, away_score, winner=(away_score or 0) > (home_score or 0), conference=conference),
        ],
    }
    data.update(extra)
    return data


def scoreboard_payload(*contests: dict) -> dict:
    return {"data": {"contests": list(contests)}}


def boxscore_payload(contest_id: str = "6458012") -> dict:
    return {
        "data": {
            "boxscore": {
                "__typename": "FootballBoxscore",
                "contestId": contest_id,
                "teamBoxscore": [{"teamId": "1", "playerStats": []}],
            }
        }
    }


def championship_payload(*games: dict) -> dict:
    return {
        "data": {
            "championships": [
                {
                    "__typename": "Championship",
                    "title": "Division I Men's Basketball Championship",
                    "games": list(games),
                }
            ]
        }
    }


def championship_game(contest_id: int, bracket_round, teams=(("Houston", 1, 70), ("Florida", 1, 65))) -> dict:
    return {
        "__typename": "ChampionshipGame",
        "contestId": contest_id,
        "startDate": "04/07/2025",
        "gameState": "F",
        "bracketRound": bracket_round,
        "teams": [
            {"nameShort": name, "seed": seed, "score": score, "isWinner": i == 0}
            for i, (name, seed, score) in enumerate(teams)
        ],
    }


BRACKET_HTML = """
<html><body>
  <h1>2025 NCAA Division I Men's Basketball Championship</h1>
  <div class="bracket-container" data-bracket-id="mbb-2025" data-bracket-size="68">
    <div class="region" data-region="South"><h3>South</h3></div>
    <div class="region" data-region="East"><h3>East</h3></div>
    <div class="round-title" data-round="1">First Round</div>
    <div class="round-title" data-round="2">Final</div>
  </div>
</body></html>
"""


class FakeClient:
    """In-memory stand-in for NCAAClient.

    query_handler(operation, hash, variables) returns a payload, None (empty
    result) or an exception instance to raise.
    """

    def __init__(self, query_handler=None, delay: float = 0.0):
        self.query_handler = query_handler or (lambda op, h, v: scoreboard_payload(contest(1)))
        self.delay = delay
        self.static_responses: dict[str, object] = {}
        self.html_pages: dict[str, str] = {}
        self.texts: dict[str, str] = {}
        self.queries: list[tuple[str, str, dict]] = []
        self.static_calls: list[str] = []
        self.html_calls: list[str] = []
        self.closed = False

    async def _pause(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)

    async def persisted_query(self, operation: str, sha256_hash: str, variables: dict):
        self.queries.append((operation, sha256_hash, variables))
        await self._pause()
        result = self.query_handler(operation, sha256_hash, variables)
        if isinstance(result, Exception):
            raise result
        return result

    async def fetch_static_json(self, path: str) -> dict:
        self.static_calls.append(path)
        await self._pause()
        result = self.static_responses.get(path)
        if result is None:
            raise UpstreamFetchError("Upstream returned HTTP 404", url=path, status_code=404)
        if isinstance(result, Exception):
            raise result
        return result

    async def fetch_text(self, path: str) -> str:
        self.html_calls.append(path)
        await self._pause()
        if path in self.texts:
            return self.texts[path]
        if path in self.html_pages:
            return self.html_pages[path]
        raise UpstreamFetchError("Upstream returned HTTP 404", url=path, status_code=404)

    async def fetch_html(self, path: str) -> BeautifulSoup:
        return BeautifulSoup(await self.fetch_text(path), "lxml")

    async def close(self) -> None:
        self.closed = True
