"""Upstream source selection.

Decides which upstream mechanism answers a logical request:

    SCOREBOARD       GraphQL for seasons >= cutoff (if the sport is on GraphQL),
                     legacy JSON otherwise. Football is week-based; playoff
                     weeks 16-20 become one combined range under GraphQL.
    GAME             legacy JSON gameInfo
    BOXSCORE etc.    GraphQL game-detail persisted queries
    BRACKET          HTML structure + GraphQL championship games
    STATS etc.       HTML tables
    SCHEDULE         legacy JSON
    NEWS             RSS (fetched as HTML-source text)
    SCHOOLS          HTML

Pure and deterministic: the same inputs always give the same descriptor.
Anything outside the table raises UnsupportedSourceError.
"""

from datetime import date

from ncaa_api.config import MIN_SEASON, NEW_API_CUTOFF_SEASON
from ncaa_api.core import (
    PLAYOFF_WEEKS,
    DataKind,
    QueryKind,
    SourceDescriptor,
    SourceKind,
    UnsupportedSourceError,
    football_week,
    is_playoff_week,
    season_year,
)
from ncaa_api.core.sports import SportConfig, get_sport, normalize_sport

GAME_DETAIL_QUERIES: dict[DataKind, QueryKind] = {
    DataKind.BOXSCORE: QueryKind.BOXSCORE,
    DataKind.PLAY_BY_PLAY: QueryKind.PLAY_BY_PLAY,
    DataKind.TEAM_STATS: QueryKind.TEAM_STATS,
    DataKind.SCORING_SUMMARY: QueryKind.SCORING_SUMMARY,
}

HTML_TABLE_KINDS = frozenset(
    {DataKind.STATS, DataKind.RANKINGS, DataKind.STANDINGS, DataKind.HISTORY}
)

PLAYOFFS = "P"


def _require_sport(sport: str, division: str) -> SportConfig:
    config = get_sport(sport)
    if config is None:
        raise UnsupportedSourceError(f"Unsupported sport: {sport}", sport=sport)
    if division not in config.divisions:
        raise UnsupportedSourceError(
            f"Unsupported division for {config.slug}: {division}",
            sport=config.slug,
            division=division,
        )
    return config


def _check_season(season: int, sport: str) -> None:
    if season < MIN_SEASON:
        raise UnsupportedSourceError(
            f"Season {season} is older than the oldest supported season ({MIN_SEASON})",
            sport=sport,
        )


def _parse_week(week: int | str) -> int | str:
    if isinstance(week, str):
        if week.upper() == PLAYOFFS:
            return PLAYOFFS
        if not week.isdigit():
            raise UnsupportedSourceError(f"Invalid week: {week}")
        week = int(week)
    if not 1 <= week <= PLAYOFF_WEEKS[-1]:
        raise UnsupportedSourceError(f"Week out of range: {week}")
    return week


def _game_source(data_kind: DataKind, sport: str | None, game_id: str, today: date):
    if not game_id or not str(game_id).isdigit():
        raise UnsupportedSourceError(f"Invalid game id: {game_id}")
    if sport is not None and get_sport(sport) is None:
        raise UnsupportedSourceError(f"Unsupported sport: {sport}", sport=sport)
    slug = normalize_sport(sport) if sport else ""

    if data_kind == DataKind.GAME:
        return SourceDescriptor(
            kind=SourceKind.LEGACY_JSON,
            data_kind=data_kind,
            sport=slug,
            division="",
            season=season_year(today),
            path=f"game/{game_id}/gameInfo.json",
            game_id=str(game_id),
        )
    return SourceDescriptor(
        kind=SourceKind.GRAPHQL,
        data_kind=data_kind,
        sport=slug,
        division="",
        season=season_year(today),
        query=GAME_DETAIL_QUERIES[data_kind],
        game_id=str(game_id),
        variables=(("contestId", str(game_id)), ("staticTestEnv", None)),
    )


def _scoreboard_source(
    config: SportConfig,
    division: str,
    target_date: date | None,
    season: int | None,
    week: int | str | None,
    conference: str,
    cutoff: int,
) -> SourceDescriptor:
    if config.week_based:
        if week is None:
            if target_date is None:
                raise UnsupportedSourceError(f"{config.slug} scoreboards need a week")
            week = football_week(target_date)
        week = _parse_week(week)
        if season is None:
            if target_date is None:
                raise UnsupportedSourceError(f"{config.slug} scoreboards need a season")
            season = season_year(target_date)
        contest_date = None
    else:
        if week is not None:
            raise UnsupportedSourceError(f"{config.slug} scoreboards are by date, not week")
        if target_date is None:
            raise UnsupportedSourceError(f"{config.slug} scoreboards need a date")
        season = season_year(target_date)
        contest_date = target_date

    _check_season(season, config.slug)
    division_code = config.divisions[division]

    if config.graphql and season >= cutoff:
        variables: list[tuple[str, object]] = [
            ("sportCode", config.code),
            ("division", division_code),
            ("seasonYear", season),
        ]
        if contest_date is not None:
            variables.append(("contestDate", contest_date.strftime("%m/%d/%Y")))
            return SourceDescriptor(
                kind=SourceKind.GRAPHQL,
                data_kind=DataKind.SCOREBOARD,
                sport=config.slug,
                division=division,
                season=season,
                query=QueryKind.SCOREBOARD,
                contest_date=contest_date,
                conference=conference,
                variables=tuple(variables),
            )

        weeks: tuple[int, ...]
        if week == PLAYOFFS or is_playoff_week(week):
            weeks = PLAYOFF_WEEKS
            week = PLAYOFFS
            variables.append(("week", PLAYOFF_WEEKS[0]))
        else:
            weeks = (week,)
            variables.append(("week", week))
        return SourceDescriptor(
            kind=SourceKind.GRAPHQL,
            data_kind=DataKind.SCOREBOARD,
            sport=config.slug,
            division=division,
            season=season,
            query=QueryKind.SCOREBOARD,
            week=week,
            weeks=weeks,
            conference=conference,
            variables=tuple(variables),
        )

    if contest_date is not None:
        path = f"scoreboard/{config.slug}/{division}/{contest_date:%Y/%m/%d}/scoreboard.json"
    else:
        if week != PLAYOFFS and is_playoff_week(week):
            week = PLAYOFFS
        segment = week if week == PLAYOFFS else f"{week:02d}"
        path = f"scoreboard/{config.slug}/{division}/{season}/{segment}/scoreboard.json"
    return SourceDescriptor(
        kind=SourceKind.LEGACY_JSON,
        data_kind=DataKind.SCOREBOARD,
        sport=config.slug,
        division=division,
        season=season,
        path=path,
        week=week if config.week_based else None,
        contest_date=contest_date,
        conference=conference,
    )


def select_source(
    sport: str | None,
    division: str,
    data_kind: DataKind,
    target_date: date | None = None,
    *,
    season: int | None = None,
    week: int | str | None = None,
    conference: str = "all-conf",
    game_id: str | None = None,
    path: str | None = None,
    cutoff: int = NEW_API_CUTOFF_SEASON,
) -> SourceDescriptor:
    """Choose the upstream source for one logical request.

    Args:
        sport: Sport slug or alias (None allowed for game and schools requests)
        division: Division slug (fbs, d1, ...)
        data_kind: What is being asked for
        target_date: Calendar date of the request (scoreboards, schedules, today for games)
        season: Explicit season (football weeks) or championship year (brackets)
        week: Football week number or 'P'
        conference: Conference filter for scoreboards
        game_id: Contest id for game requests
        path: Remaining URL path for HTML table pages
        cutoff: First season served by GraphQL

    Returns:
        Immutable SourceDescriptor

    Raises:
        UnsupportedSourceError: combination is not served by any source
    """
    if data_kind == DataKind.GAME or data_kind in GAME_DETAIL_QUERIES:
        return _game_source(data_kind, sport, game_id, target_date or date.today())

    if data_kind == DataKind.SCHOOLS:
        return SourceDescriptor(
            kind=SourceKind.HTML,
            data_kind=data_kind,
            sport="",
            division="",
            season=season_year(target_date or date.today()),
            path="schools-index",
        )

    config = _require_sport(sport or "", division)

    if data_kind == DataKind.SCOREBOARD:
        return _scoreboard_source(
            config, division, target_date, season, week, conference, cutoff
        )

    if data_kind == DataKind.BRACKET:
        if division not in config.bracket_divisions:
            raise UnsupportedSourceError(
                f"No championship bracket for {config.slug}/{division}",
                sport=config.slug,
                division=division,
            )
        if season is None:
            raise UnsupportedSourceError("Bracket requests need a year", sport=config.slug)
        _check_season(season, config.slug)
        return SourceDescriptor(
            kind=SourceKind.HTML,
            data_kind=data_kind,
            sport=config.slug,
            division=division,
            season=season,
            query=QueryKind.CHAMPIONSHIP,
            path=f"brackets/{config.slug}/{division}/{season}",
            variables=(
                ("sportCode", config.code),
                ("division", config.divisions[division]),
                ("year", season),
            ),
        )

    if data_kind in HTML_TABLE_KINDS:
        suffix = f"/{path.strip('/')}" if path and path.strip("/") else ""
        return SourceDescriptor(
            kind=SourceKind.HTML,
            data_kind=data_kind,
            sport=config.slug,
            division=division,
            season=season if season is not None else season_year(target_date or date.today()),
            path=f"{data_kind.value}/{config.slug}/{division}{suffix}",
        )

    if data_kind == DataKind.SCHEDULE:
        if target_date is None:
            raise UnsupportedSourceError("Schedule requests need a year and month")
        _check_season(season_year(target_date), config.slug)
        return SourceDescriptor(
            kind=SourceKind.LEGACY_JSON,
            data_kind=data_kind,
            sport=config.slug,
            division=division,
            season=season_year(target_date),
            path=(
                f"schedule/{config.slug}/{division}/{target_date:%Y/%m}/schedule-all-conf.json"
            ),
        )

    if data_kind == DataKind.NEWS:
        return SourceDescriptor(
            kind=SourceKind.HTML,
            data_kind=data_kind,
            sport=config.slug,
            division=division,
            season=season_year(target_date or date.today()),
            path=f"news/{config.slug}/{division}/rss.xml",
        )

    raise UnsupportedSourceError(f"Unsupported data kind: {data_kind}")
