"""Tests for NCAAService resolution paths (fake upstream client)."""

import asyncio
from datetime import date

import pytest

from ncaa_api.cache import InFlightCoordinator, RequestCache
from ncaa_api.core import DataKind, QueryKind, UnsupportedSourceError, UpstreamFetchError
from ncaa_api.providers.ncaa.hashes import DEFAULT_HASH_TABLE, OPERATIONS
from ncaa_api.services import NCAAService
from tests.fakes import (
    BRACKET_HTML,
    FakeClient,
    FakeClock,
    boxscore_payload,
    championship_game,
    championship_payload,
    contest,
    scoreboard_payload,
)

TODAY = date(2026, 1, 10)


def make_service(client: FakeClient, clock: FakeClock | None = None) -> NCAAService:
    coordinator = InFlightCoordinator(RequestCache(clock=clock or FakeClock()))
    return NCAAService(client, coordinator=coordinator, today=lambda: TODAY, cutoff=2025)


def playoff_handler(failing_week: int):
    def handler(operation, sha256_hash, variables):
        week = variables["week"]
        if week == failing_week:
            return UpstreamFetchError("Upstream returned HTTP 500", status_code=500)
        return scoreboard_payload(contest(week * 100 + 1))

    return handler


def game_ids(scoreboard: dict) -> list[str]:
    return [g["game"]["gameID"] for g in scoreboard["games"]]


class TestPlayoffScoreboard:
    """Football weeks 16-20 fetched independently and merged."""

    def test_failed_week_does_not_fail_response(self):
        client = FakeClient(playoff_handler(failing_week=18))
        service = make_service(client)

        result = asyncio.run(service.scoreboard("football", "fbs", ["2025", "P"]))

        assert game_ids(result) == ["1601", "1701", "1901", "2001"]
        week18 = next(w for w in result["weeks"] if w["week"] == 18)
        assert week18["games"] == 0
        assert "500" in week18["error"]
        assert sorted(v["week"] for _, _, v in client.queries) == [16, 17, 18, 19, 20]

    def test_any_playoff_week_gives_combined_result(self):
        client = FakeClient(playoff_handler(failing_week=0))
        service = make_service(client)

        result = asyncio.run(service.scoreboard("football", "fbs", ["2025", "17"]))

        assert len(result["games"]) == 5
        assert len(result["weeks"]) == 5

    def test_failed_week_is_retried_on_next_request(self):
        """Back-to-back requests: only the failed week goes upstream again."""
        client = FakeClient(playoff_handler(failing_week=18))
        service = make_service(client)

        async def scenario():
            await service.scoreboard("football", "fbs", ["2025", "P"])
            return await service.scoreboard("football", "fbs", ["2025", "P"])

        second = asyncio.run(scenario())

        weeks = [v["week"] for _, _, v in client.queries]
        assert len(weeks) == 6
        assert weeks[5:] == [18]
        assert game_ids(second) == ["1601", "1701", "1901", "2001"]

    def test_recovered_week_is_served(self):
        failing = {"week": 18}

        def handler(operation, sha256_hash, variables):
            return playoff_handler(failing["week"])(operation, sha256_hash, variables)

        client = FakeClient(handler)
        service = make_service(client)

        async def scenario():
            await service.scoreboard("football", "fbs", ["2025", "P"])
            failing["week"] = 0
            return await service.scoreboard("football", "fbs", ["2025", "P"])

        second = asyncio.run(scenario())

        assert game_ids(second) == ["1601", "1701", "1801", "1901", "2001"]
        assert all(w["error"] is None for w in second["weeks"])

    def test_complete_merge_is_cached(self):
        client = FakeClient(playoff_handler(failing_week=0))
        service = make_service(client)

        async def scenario():
            first = await service.scoreboard("football", "fbs", ["2025", "P"])
            second = await service.scoreboard("football", "fbs", ["2025", "P"])
            return first, second

        first, second = asyncio.run(scenario())

        assert second == first
        assert len(client.queries) == 5

    def test_week_without_games_is_empty_not_failed(self):
        def handler(operation, sha256_hash, variables):
            if variables["week"] == 20:
                return scoreboard_payload()
            return scoreboard_payload(contest(variables["week"] * 100 + 1))

        client = FakeClient(handler)
        service = make_service(client)

        result = asyncio.run(service.scoreboard("football", "fbs", ["2025", "P"]))

        week20 = next(w for w in result["weeks"] if w["week"] == 20)
        assert week20 == {"week": 20, "games": 0, "error": None}
        assert len(result["games"]) == 4


class TestScoreboard:
    """Cache, coalescing and degradation on the scoreboard path."""

    def test_graphql_scoreboard(self):
        client = FakeClient(lambda op, h, v: scoreboard_payload(contest(1), contest(2)))
        service = make_service(client)

        result = asyncio.run(service.scoreboard("basketball-men", "d1", ["2026", "01", "10"]))

        assert game_ids(result) == ["1", "2"]
        operation, _, variables = client.queries[0]
        assert operation == OPERATIONS[QueryKind.SCOREBOARD]
        assert variables["contestDate"] == "01/10/2026"

    def test_concurrent_requests_share_one_query(self):
        client = FakeClient(delay=0.01)
        service = make_service(client)

        async def scenario():
            return await asyncio.gather(
                *(service.scoreboard("basketball-men", "d1", []) for _ in range(5))
            )

        results = asyncio.run(scenario())

        assert len(client.queries) == 1
        assert all(r is results[0] for r in results)

    def test_path_key_and_explicit_date_share_entry(self):
        client = FakeClient()
        service = make_service(client)

        async def scenario():
            await service.scoreboard(
                "basketball-men", "d1", [], path_key="/scoreboard/basketball-men/d1"
            )
            await service.scoreboard("basketball-men", "d1", ["2026", "01", "10"])

        asyncio.run(scenario())

        assert len(client.queries) == 1
        assert service.invalidate("/scoreboard/basketball-men/d1") == 2

    def test_conference_filter(self):
        client = FakeClient(
            lambda op, h, v: scoreboard_payload(
                contest(1, conference="acc"), contest(2, conference="sec")
            )
        )
        service = make_service(client)

        result = asyncio.run(
            service.scoreboard("basketball-men", "d1", ["2026", "01", "10", "acc"])
        )

        assert game_ids(result) == ["1"]

    def test_day_without_games_is_cached_empty(self):
        """No candidate matches an empty day; the empty board is cached for the FAST TTL."""
        clock = FakeClock()
        client = FakeClient(lambda op, h, v: scoreboard_payload())
        service = make_service(client, clock)
        candidates = DEFAULT_HASH_TABLE.candidates("basketball-men", QueryKind.SCOREBOARD)

        async def scenario():
            results = [
                await service.scoreboard("basketball-men", "d1", ["2026", "01", "09"])
                for _ in range(3)
            ]
            after_first_window = len(client.queries)
            clock.advance(46)
            await service.scoreboard("basketball-men", "d1", ["2026", "01", "09"])
            return results, after_first_window

        results, after_first_window = asyncio.run(scenario())

        assert all(r["games"] == [] for r in results)
        assert after_first_window == len(candidates)
        assert len(client.queries) == 2 * len(candidates)

    def test_exhausted_hashes_degrade_to_empty(self):
        client = FakeClient(lambda op, h, v: None)
        service = make_service(client)

        result = asyncio.run(service.scoreboard("basketball-men", "d1", []))

        assert result["games"] == []
        assert "inputMD5Sum" in result

    def test_legacy_scoreboard(self):
        client = FakeClient()
        path = "scoreboard/football/fbs/2023/03/scoreboard.json"
        client.static_responses[path] = {"games": [{"game": {"gameID": "1"}}]}
        service = make_service(client)

        result = asyncio.run(service.scoreboard("football", "fbs", ["2023", "3"]))

        assert game_ids(result) == ["1"]
        assert client.static_calls == [path]
        assert client.queries == []

    def test_upstream_error_not_cached(self):
        client = FakeClient()
        service = make_service(client)

        async def scenario():
            for _ in range(2):
                with pytest.raises(UpstreamFetchError):
                    await service.scoreboard("football", "fbs", ["2023", "3"])

        asyncio.run(scenario())

        assert len(client.static_calls) == 2

    def test_football_by_date_rejected(self):
        service = make_service(FakeClient())
        with pytest.raises(UnsupportedSourceError):
            asyncio.run(service.scoreboard("football", "fbs", ["2025", "10", "04"]))

    def test_invalid_date_rejected(self):
        service = make_service(FakeClient())
        with pytest.raises(UnsupportedSourceError):
            asyncio.run(service.scoreboard("basketball-men", "d1", ["2026", "02", "30"]))

    def test_ttl_expiry_refetches(self):
        clock = FakeClock()
        client = FakeClient()
        service = make_service(client, clock)

        async def scenario():
            await service.scoreboard("basketball-men", "d1", [])
            clock.advance(44)
            await service.scoreboard("basketball-men", "d1", [])
            clock.advance(2)
            await service.scoreboard("basketball-men", "d1", [])

        asyncio.run(scenario())

        assert len(client.queries) == 2


class TestGame:
    """Game info and detail."""

    def test_game_info_from_legacy_json(self):
        client = FakeClient()
        client.static_responses["game/6458012/gameInfo.json"] = {"id": "6458012"}
        service = make_service(client)

        assert asyncio.run(service.game("6458012")) == {"id": "6458012"}

    def test_boxscore(self):
        client = FakeClient(lambda op, h, v: boxscore_payload(v["contestId"]))
        service = make_service(client)

        result = asyncio.run(service.game("6458012", DataKind.BOXSCORE, sport="football"))

        assert result["boxscore"]["contestId"] == "6458012"
        operation, sha, variables = client.queries[0]
        assert operation == OPERATIONS[QueryKind.BOXSCORE]
        assert sha == DEFAULT_HASH_TABLE.candidates("football", QueryKind.BOXSCORE)[0]
        assert variables == {"contestId": "6458012", "staticTestEnv": None}

    def test_detail_exhaustion_returns_empty(self):
        client = FakeClient(lambda op, h, v: None)
        service = make_service(client)
        candidates = DEFAULT_HASH_TABLE.candidates(None, QueryKind.PLAY_BY_PLAY)

        async def scenario():
            first = await service.game("6458012", DataKind.PLAY_BY_PLAY)
            second = await service.game("6458012", DataKind.PLAY_BY_PLAY)
            return first, second

        first, second = asyncio.run(scenario())

        assert first == {}
        assert second == {}
        assert len(client.queries) == len(candidates)

    def test_not_a_game_kind(self):
        service = make_service(FakeClient())
        with pytest.raises(UnsupportedSourceError):
            asyncio.run(service.game("6458012", DataKind.STATS))


class TestBracket:
    """HTML structure merged with GraphQL championship games."""

    def test_bracket_merge(self):
        payload = championship_payload(
            championship_game(1, "Final"), championship_game(99, "Consolation")
        )
        client = FakeClient(lambda op, h, v: payload)
        client.html_pages["brackets/basketball-men/d1/2025"] = BRACKET_HTML
        service = make_service(client)

        result = asyncio.run(service.bracket("basketball-men", "d1", 2025))

        assert result["bracketId"] == "mbb-2025"
        assert result["regions"] == ["South", "East"]
        assert [r["name"] for r in result["rounds"]] == ["First Round", "Final"]
        assert result["rounds"][0]["games"] == []
        assert [g["gameId"] for g in result["rounds"][1]["games"]] == ["1"]
        assert result["unmatchedGames"] == ["99"]
        assert client.queries[0][2] == {"sportCode": "MBB", "division": 1, "year": 2025}

    def test_no_games_yet(self):
        client = FakeClient(lambda op, h, v: None)
        client.html_pages["brackets/basketball-men/d1/2025"] = BRACKET_HTML
        service = make_service(client)

        result = asyncio.run(service.bracket("basketball-men", "d1", 2025))

        assert [r["games"] for r in result["rounds"]] == [[], []]
        assert result["unmatchedGames"] == []

    def test_missing_page_fails(self):
        service = make_service(FakeClient(lambda op, h, v: None))
        with pytest.raises(UpstreamFetchError):
            asyncio.run(service.bracket("basketball-men", "d1", 2025))


STATS_PAGE = """
<html><body>
  <h2>Points Per Game</h2>
  <div class="stats-header__lower__desc">Through games Jan. 9, 2026</div>
  <span class="last-updated">Last updated Jan. 10, 2026</span>
  <table>
    <thead><tr><th>Rank</th><th>Name</th><th>PPG</th></tr></thead>
    <tbody><tr><td>{rank}</td><td>Player {rank}</td><td>30.1</td></tr></tbody>
  </table>
  <ul class="stats-pager"><li>1</li><li>2</li><li>next</li></ul>
</body></html>
"""

STANDINGS_PAGE = """
<html><body>
  <h2>FBS Standings</h2>
  <h3>Big Ten</h3>
  <table>
    <thead>
      <tr><th colspan="2">CONFERENCE</th><th colspan="2">OVERALL</th></tr>
      <tr><th>School</th><th>W</th><th>School</th><th>W</th></tr>
    </thead>
    <tbody><tr><td>Ohio St.</td><td>9</td><td>Ohio St.</td><td>12</td></tr></tbody>
  </table>
  <h3>SEC</h3>
  <table>
    <thead><tr><th>School</th><th>W</th></tr></thead>
    <tbody><tr><td>Georgia</td><td>8</td></tr></tbody>
  </table>
</body></html>
"""


class TestTables:
    """HTML table pages."""

    def test_stats_follows_pages(self):
        client = FakeClient()
        base = "stats/basketball-men/d1/individual/136"
        client.html_pages[base] = STATS_PAGE.format(rank=1)
        client.html_pages[f"{base}/p2"] = STATS_PAGE.format(rank=2)
        service = make_service(client)

        result = asyncio.run(
            service.table(DataKind.STATS, "basketball-men", "d1", "individual/136")
        )

        assert result["title"] == "Points Per Game"
        assert result["pages"] == 2
        assert result["updated"] == "Last updated Jan. 10, 2026"
        assert [row["Name"] for row in result["data"]] == ["Player 1", "Player 2"]

    def test_rankings_single_page(self):
        client = FakeClient()
        client.html_pages["rankings/football/fbs/associated-press"] = STATS_PAGE.format(rank=1)
        service = make_service(client)

        result = asyncio.run(
            service.table(DataKind.RANKINGS, "football", "fbs", "associated-press")
        )

        assert len(result["data"]) == 1
        assert client.html_calls == ["rankings/football/fbs/associated-press"]

    def test_standings(self):
        client = FakeClient()
        client.html_pages["standings/football/fbs"] = STANDINGS_PAGE
        service = make_service(client)

        result = asyncio.run(service.table(DataKind.STANDINGS, "football", "fbs"))

        assert [c["conference"] for c in result["data"]] == ["Big Ten", "SEC"]
        assert result["data"][1]["standings"] == [{"School": "Georgia", "W": "8"}]

    def test_not_a_table_kind(self):
        service = make_service(FakeClient())
        with pytest.raises(UnsupportedSourceError):
            asyncio.run(service.table(DataKind.SCOREBOARD, "football", "fbs"))


RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
  <channel>
    <title>NCAA.com Football</title>
    <item>
      <title>Bowl schedule released</title>
      <link>https://www.ncaa.com/news/football/article/bowl-schedule</link>
      <description><![CDATA[<p>All the <b>bowl</b> games.</p>]]></description>
      <pubDate>Sun, 07 Dec 2025 18:00:00 EST</pubDate>
      <media:content url="https://www.ncaa.com/image.jpg" />
    </item>
  </channel>
</rss>
"""


class TestContent:
    """Schedule, news and schools."""

    def test_schedule(self):
        client = FakeClient()
        path = "schedule/basketball-men/d1/2026/01/schedule-all-conf.json"
        client.static_responses[path] = {"gameDates": []}
        service = make_service(client)

        assert asyncio.run(service.schedule("basketball-men", "d1", 2026, 1)) == {"gameDates": []}

    def test_schedule_invalid_month(self):
        service = make_service(FakeClient())
        with pytest.raises(UnsupportedSourceError):
            asyncio.run(service.schedule("basketball-men", "d1", 2026, 13))

    def test_news(self):
        client = FakeClient()
        client.texts["news/football/fbs/rss.xml"] = RSS
        service = make_service(client)

        result = asyncio.run(service.news("football", "fbs"))

        assert result["sport"] == "football"
        (item,) = result["items"]
        assert item["title"] == "Bowl schedule released"
        assert item["description"] == "All the bowl games."
        assert item["image"] == "https://www.ncaa.com/image.jpg"

    def test_schools(self):
        client = FakeClient()
        client.html_pages["schools-index"] = """
            <table><tbody>
              <tr><td><a href="/schools/ohio-st">Ohio State University</a></td></tr>
            </tbody></table>
        """
        service = make_service(client)

        schools = asyncio.run(service.schools())

        assert schools == [
            {"slug": "ohio-st", "name": "Ohio State University", "long": "Ohio State University"}
        ]
