"""NCAA data service.

Every logical operation follows the same path:

    select_source() -> SourceDescriptor
    coordinator.resolve(canonical key, fetch plan, ttl class, equivalent keys)
        fetch plan: transport (+ HashResolver for GraphQL) -> normalization

Route handlers only talk to this service; the cache and the in-flight map
are owned by the coordinator.

Empty answers (no hash candidate matched) are normal data and cached for the
resource's TTL; upstream failures never are. A merged playoff scoreboard is
only cached when every week succeeded.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import date
from functools import partial

from ncaa_api.cache import InFlightCoordinator, RequestCache
from ncaa_api.config import CACHE_MAX_ENTRIES, NEW_API_CUTOFF_SEASON
from ncaa_api.core import (
    DataKind,
    HashDiscoveryExhaustedError,
    QueryKind,
    SourceDescriptor,
    SourceKind,
    TTLClass,
    UnsupportedSourceError,
    UpstreamFetchError,
)
from ncaa_api.core.sports import get_sport
from ncaa_api.normalize import (
    empty_scoreboard,
    filter_conference,
    games_from_championship,
    graphql_scoreboard_to_legacy,
    merge_bracket,
    merge_week_scoreboards,
)
from ncaa_api.providers.ncaa import HashResolver, NCAAClient, select_source
from ncaa_api.providers.ncaa.hashes import OPERATIONS
from ncaa_api.providers.ncaa.html import (
    parse_bracket_structure,
    parse_page_meta,
    parse_schools_index,
    parse_standings,
    parse_table,
)
from ncaa_api.providers.ncaa.rss import parse_feed

logger = logging.getLogger(__name__)

# Upper bound on stats result pages followed per request
MAX_STATS_PAGES = 5

GAME_KINDS = frozenset(
    {
        DataKind.GAME,
        DataKind.BOXSCORE,
        DataKind.PLAY_BY_PLAY,
        DataKind.TEAM_STATS,
        DataKind.SCORING_SUMMARY,
    }
)

TABLE_KINDS = frozenset(
    {DataKind.STATS, DataKind.RANKINGS, DataKind.STANDINGS, DataKind.HISTORY}
)


def _equivalents(descriptor: SourceDescriptor, path_key: str | None) -> list[str]:
    if path_key and path_key != descriptor.cache_key():
        return [path_key]
    return []


def _all_weeks_ok(merged: dict) -> bool:
    return not any(w["error"] for w in merged.get("weeks", []))


def _parse_int(value: str, what: str) -> int:
    if not value.isdigit():
        raise UnsupportedSourceError(f"Invalid {what}: {value}")
    return int(value)


class NCAAService:
    """Logical NCAA data operations on top of the resolution core.

    Usage:
        service = NCAAService(NCAAClient())
        data = await service.scoreboard("football", "fbs", ["2025", "03"])
    """

    def __init__(
        self,
        client: NCAAClient,
        coordinator: InFlightCoordinator | None = None,
        resolver: HashResolver | None = None,
        today: Callable[[], date] = date.today,
        cutoff: int = NEW_API_CUTOFF_SEASON,
    ):
        self._client = client
        self._coordinator = coordinator or InFlightCoordinator(
            RequestCache(max_entries=CACHE_MAX_ENTRIES)
        )
        self._resolver = resolver or HashResolver()
        self._today = today
        self._cutoff = cutoff

    # -------------------------------------------------------------------------
    # GraphQL helper
    # -------------------------------------------------------------------------

    async def _run_query(self, sport: str | None, kind: QueryKind, variables: dict) -> dict:
        operation = OPERATIONS[kind]

        async def fetch(sha256_hash: str) -> dict | None:
            return await self._client.persisted_query(operation, sha256_hash, variables)

        _, payload = await self._resolver.resolve_hash(sport or None, kind, fetch)
        return payload

    # -------------------------------------------------------------------------
    # Scoreboards
    # -------------------------------------------------------------------------

    def _scoreboard_descriptor(
        self, sport: str, division: str, segments: list[str]
    ) -> SourceDescriptor:
        """Interpret the scoreboard path after /scoreboard/{sport}/{division}.

        Week-based (football): [] | [year, week] | [year, week, conference]
        Date-based:            [] | [year, month, day] | [year, month, day, conference]
        """
        config = get_sport(sport)
        segments = [s for s in segments if s]
        conference = "all-conf"

        if config is not None and config.week_based:
            if not segments:
                return select_source(
                    sport, division, DataKind.SCOREBOARD, self._today(), cutoff=self._cutoff
                )
            if len(segments) in (2, 3) and not (len(segments) == 3 and segments[2].isdigit()):
                if len(segments) == 3:
                    conference = segments[2]
                return select_source(
                    sport,
                    division,
                    DataKind.SCOREBOARD,
                    season=_parse_int(segments[0], "year"),
                    week=segments[1],
                    conference=conference,
                    cutoff=self._cutoff,
                )
            raise UnsupportedSourceError(
                f"{sport} scoreboards are by week: /{{year}}/{{week}}[/{{conference}}]",
                sport=sport,
            )

        if not segments:
            return select_source(
                sport, division, DataKind.SCOREBOARD, self._today(), cutoff=self._cutoff
            )
        if len(segments) not in (3, 4):
            raise UnsupportedSourceError(
                f"{sport} scoreboards are by date: /{{year}}/{{month}}/{{day}}[/{{conference}}]",
                sport=sport,
            )
        if len(segments) == 4:
            conference = segments[3]
        try:
            target = date(
                _parse_int(segments[0], "year"),
                _parse_int(segments[1], "month"),
                _parse_int(segments[2], "day"),
            )
        except ValueError as e:
            raise UnsupportedSourceError(f"Invalid date: {'/'.join(segments[:3])}") from e
        return select_source(
            sport, division, DataKind.SCOREBOARD, target, conference=conference, cutoff=self._cutoff
        )

    async def _graphql_scoreboard(self, descriptor: SourceDescriptor) -> dict:
        # No candidate answers for a date without games: cache the empty board
        try:
            payload = await self._run_query(
                descriptor.sport, QueryKind.SCOREBOARD, descriptor.variables_dict()
            )
        except HashDiscoveryExhaustedError as e:
            logger.warning("[SCOREBOARD] %s; returning empty scoreboard", e)
            return empty_scoreboard()
        return filter_conference(graphql_scoreboard_to_legacy(payload), descriptor.conference)

    async def _legacy_scoreboard(self, descriptor: SourceDescriptor) -> dict:
        data = await self._client.fetch_static_json(descriptor.path)
        return filter_conference(data, descriptor.conference)

    async def _playoff_week(
        self, descriptor: SourceDescriptor
    ) -> tuple[int, dict | None, str | None]:
        try:
            scoreboard = await self._coordinator.resolve(
                descriptor.cache_key(),
                lambda: self._graphql_scoreboard(descriptor),
                TTLClass.FAST,
            )
            return descriptor.week, scoreboard, None
        except UpstreamFetchError as e:
            logger.warning("[SCOREBOARD] Playoff week %s unavailable: %s", descriptor.week, e)
            return descriptor.week, None, str(e)

    async def _playoff_scoreboard(self, descriptor: SourceDescriptor) -> dict:
        """Fetch each playoff week independently and merge."""
        results = await asyncio.gather(
            *(self._playoff_week(descriptor.for_week(week)) for week in descriptor.weeks)
        )
        return merge_week_scoreboards(list(results))

    async def scoreboard(
        self,
        sport: str,
        division: str,
        segments: list[str],
        path_key: str | None = None,
    ) -> dict:
        """Scoreboard in the legacy shape.

        Raises:
            UnsupportedSourceError: bad sport/division/path
            UpstreamFetchError: upstream failed (not cached)
        """
        descriptor = self._scoreboard_descriptor(sport, division, segments)

        cache_if = None
        if descriptor.kind == SourceKind.GRAPHQL and descriptor.combined:
            fetch = partial(self._playoff_scoreboard, descriptor)
            cache_if = _all_weeks_ok
        elif descriptor.kind == SourceKind.GRAPHQL:
            fetch = partial(self._graphql_scoreboard, descriptor)
        else:
            fetch = partial(self._legacy_scoreboard, descriptor)

        return await self._coordinator.resolve(
            descriptor.cache_key(),
            fetch,
            TTLClass.FAST,
            _equivalents(descriptor, path_key),
            cache_if=cache_if,
        )

    # -------------------------------------------------------------------------
    # Games
    # -------------------------------------------------------------------------

    async def _game_detail(self, descriptor: SourceDescriptor) -> dict:
        try:
            payload = await self._run_query(
                descriptor.sport, descriptor.query, descriptor.variables_dict()
            )
        except HashDiscoveryExhaustedError as e:
            logger.warning("[GAME] %s; returning empty %s", e, descriptor.cache_key())
            return {}
        return payload.get("data") or {}

    async def game(
        self,
        game_id: str,
        kind: DataKind = DataKind.GAME,
        sport: str | None = None,
        path_key: str | None = None,
    ) -> dict:
        """Game info (legacy JSON) or game detail (GraphQL).

        Without a sport hint every known hash for the detail kind is probed.
        """
        if kind not in GAME_KINDS:
            raise UnsupportedSourceError(f"Not a game data kind: {kind}")
        descriptor = select_source(sport, "", kind, self._today(), game_id=game_id)

        if descriptor.kind == SourceKind.LEGACY_JSON:
            fetch = partial(self._client.fetch_static_json, descriptor.path)
        else:
            fetch = partial(self._game_detail, descriptor)

        return await self._coordinator.resolve(
            descriptor.cache_key(),
            fetch,
            TTLClass.FAST,
            _equivalents(descriptor, path_key),
        )

    # -------------------------------------------------------------------------
    # Brackets
    # -------------------------------------------------------------------------

    async def _bracket_structure(self, descriptor: SourceDescriptor):
        soup = await self._client.fetch_html(descriptor.path)
        return parse_bracket_structure(soup, descriptor.sport, descriptor.season)

    async def _championship_games(self, descriptor: SourceDescriptor):
        payload = await self._run_query(
            descriptor.sport, QueryKind.CHAMPIONSHIP, descriptor.variables_dict()
        )
        return games_from_championship(payload)

    async def _bracket(self, descriptor: SourceDescriptor) -> dict:
        structure, games = await asyncio.gather(
            self._bracket_structure(descriptor),
            self._championship_games(descriptor),
            return_exceptions=True,
        )
        if isinstance(structure, BaseException):
            raise structure
        if isinstance(games, HashDiscoveryExhaustedError):
            logger.info("[BRACKET] No championship games for %s: %s", descriptor.path, games)
            games = []
        elif isinstance(games, BaseException):
            raise games

        response = merge_bracket(structure, games)
        data = response.to_dict()
        data["unmatchedGames"] = [w.game_id for w in response.warnings]
        return data

    async def bracket(
        self, sport: str, division: str, year: int, path_key: str | None = None
    ) -> dict:
        """Championship bracket: HTML structure merged with GraphQL games."""
        descriptor = select_source(sport, division, DataKind.BRACKET, season=year)
        return await self._coordinator.resolve(
            descriptor.cache_key(),
            lambda: self._bracket(descriptor),
            TTLClass.SLOW,
            _equivalents(descriptor, path_key),
        )

    # -------------------------------------------------------------------------
    # HTML tables (stats, rankings, standings, history)
    # -------------------------------------------------------------------------

    async def _html_table(self, descriptor: SourceDescriptor) -> dict:
        soup = await self._client.fetch_html(descriptor.path)
        meta = parse_page_meta(soup)

        if descriptor.data_kind == DataKind.STANDINGS:
            data = parse_standings(soup)
        else:
            data = parse_table(soup)
            pages = min(meta["pages"], MAX_STATS_PAGES)
            if descriptor.data_kind == DataKind.STATS and pages > 1:
                urls = [f"{descriptor.path}/p{n}" for n in range(2, pages + 1)]
                extra = await asyncio.gather(*(self._client.fetch_html(u) for u in urls))
                for page in extra:
                    data.extend(parse_table(page))

        return {
            "sport": descriptor.sport,
            "division": descriptor.division,
            "title": meta["title"],
            "updated": meta["updated"],
            "pages": meta["pages"],
            "data": data,
        }

    async def table(
        self,
        kind: DataKind,
        sport: str,
        division: str,
        path: str = "",
        path_key: str | None = None,
    ) -> dict:
        """Stats, rankings, standings or history scraped from ncaa.com."""
        if kind not in TABLE_KINDS:
            raise UnsupportedSourceError(f"Not a table data kind: {kind}")
        descriptor = select_source(sport, division, kind, self._today(), path=path)
        return await self._coordinator.resolve(
            descriptor.cache_key(),
            lambda: self._html_table(descriptor),
            TTLClass.SLOW,
            _equivalents(descriptor, path_key),
        )

    # -------------------------------------------------------------------------
    # Schedule, news, schools
    # -------------------------------------------------------------------------

    async def schedule(self, sport: str, division: str, year: int, month: int) -> dict:
        """Monthly schedule (legacy JSON)."""
        try:
            target = date(year, month, 1)
        except ValueError as e:
            raise UnsupportedSourceError(f"Invalid year/month: {year}/{month}") from e
        descriptor = select_source(sport, division, DataKind.SCHEDULE, target)
        return await self._coordinator.resolve(
            descriptor.cache_key(),
            lambda: self._client.fetch_static_json(descriptor.path),
            TTLClass.SLOW,
        )

    async def _news(self, descriptor: SourceDescriptor) -> dict:
        text = await self._client.fetch_text(descriptor.path)
        return {
            "sport": descriptor.sport,
            "division": descriptor.division,
            "items": parse_feed(text),
        }

    async def news(self, sport: str, division: str) -> dict:
        """Latest news items from the sport's RSS feed."""
        descriptor = select_source(sport, division, DataKind.NEWS, self._today())
        return await self._coordinator.resolve(
            descriptor.cache_key(), lambda: self._news(descriptor), TTLClass.SLOW
        )

    async def _schools(self, descriptor: SourceDescriptor) -> list[dict]:
        soup = await self._client.fetch_html(descriptor.path)
        return parse_schools_index(soup)

    async def schools(self) -> list[dict]:
        """All schools listed in the ncaa.com schools index."""
        descriptor = select_source(None, "", DataKind.SCHOOLS, self._today())
        return await self._coordinator.resolve(
            descriptor.cache_key(), lambda: self._schools(descriptor), TTLClass.SLOW
        )

    # -------------------------------------------------------------------------
    # Cache management
    # -------------------------------------------------------------------------

    def invalidate(self, key: str) -> int:
        """Drop a cached resource (by canonical or request-path key)."""
        removed = self._coordinator.invalidate(key)
        logger.info("[CACHE] Invalidated %s (%d keys)", key, removed)
        return removed

    def cache_stats(self) -> dict:
        return self._coordinator.stats()

    async def close(self) -> None:
        await self._client.close()
