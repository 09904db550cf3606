"""Core data types.

All types are immutable once constructed. Dicts handed out to callers are
built fresh by the to_dict() helpers.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum


class SourceKind(str, Enum):
    """Upstream mechanism that answers a request."""

    GRAPHQL = "graphql"
    LEGACY_JSON = "legacy_json"
    HTML = "html"


class DataKind(str, Enum):
    """Logical kind of data a caller asks for."""

    SCOREBOARD = "scoreboard"
    GAME = "game"
    BOXSCORE = "boxscore"
    PLAY_BY_PLAY = "play-by-play"
    TEAM_STATS = "team-stats"
    SCORING_SUMMARY = "scoring-summary"
    BRACKET = "brackets"
    STATS = "stats"
    RANKINGS = "rankings"
    STANDINGS = "standings"
    HISTORY = "history"
    SCHEDULE = "schedule"
    NEWS = "news"
    SCHOOLS = "schools-index"


class QueryKind(str, Enum):
    """GraphQL persisted query kinds."""

    SCOREBOARD = "scoreboard"
    BOXSCORE = "boxscore"
    PLAY_BY_PLAY = "play_by_play"
    TEAM_STATS = "team_stats"
    SCORING_SUMMARY = "scoring_summary"
    CHAMPIONSHIP = "championship"


class TTLClass(Enum):
    """Freshness tiers. Value is the time-to-live in seconds."""

    FAST = 45  # live scores, game detail
    SLOW = 30 * 60  # stats, rankings, standings, schedules, brackets

    @property
    def seconds(self) -> int:
        return self.value


@dataclass(frozen=True)
class SourceDescriptor:
    """Immutable plan for fetching one logical resource.

    weeks holds more than one entry only for combined ranges (football
    playoffs); each week is then fetched through for_week().
    """

    kind: SourceKind
    data_kind: DataKind
    sport: str
    division: str
    season: int
    query: QueryKind | None = None
    path: str | None = None
    week: int | str | None = None
    weeks: tuple[int, ...] = ()
    contest_date: date | None = None
    conference: str = "all-conf"
    game_id: str | None = None
    variables: tuple[tuple[str, object], ...] = ()

    @property
    def combined(self) -> bool:
        return len(self.weeks) > 1

    def variables_dict(self) -> dict:
        return dict(self.variables)

    def for_week(self, week: int) -> "SourceDescriptor":
        """Derive the single-week descriptor of a combined range."""
        variables = tuple((k, week if k == "week" else v) for k, v in self.variables)
        return replace(self, week=week, weeks=(week,), variables=variables)

    def cache_key(self) -> str:
        """Canonical key computed from the resolved parameters."""
        if self.game_id:
            return f"{self.data_kind.value}/{self.game_id}"
        if self.data_kind != DataKind.SCOREBOARD:
            return self.path or f"{self.data_kind.value}/{self.sport}/{self.division}"

        parts = [self.data_kind.value, self.sport, self.division, str(self.season)]
        if self.combined:
            parts.append("P")
        elif self.week is not None:
            parts.append(f"w{self.week}")
        elif self.contest_date is not None:
            parts.append(self.contest_date.isoformat())
        parts.append(self.conference)
        return "/".join(parts)


@dataclass(frozen=True)
class BracketRound:
    """One round of a tournament as read from the bracket page."""

    name: str
    round_id: str | None = None
    games: tuple = ()

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "roundId": self.round_id,
            "games": [g.to_dict() for g in self.games],
        }


@dataclass(frozen=True)
class BracketStructure:
    """Tournament layout scraped from HTML, independent of live results."""

    sport: str
    title: str
    year: int
    bracket_id: str | None
    regions: tuple[str, ...] = ()
    rounds: tuple[BracketRound, ...] = ()
    size: int | None = None


@dataclass(frozen=True)
class GameTeam:
    name: str
    seed: int | None = None
    score: int | None = None
    winner: bool = False

    def to_dict(self) -> dict:
        return {"name": self.name, "seed": self.seed, "score": self.score, "winner": self.winner}


@dataclass(frozen=True)
class GameRecord:
    """Championship game from the GraphQL championship query."""

    game_id: str
    start_date: str | None
    game_state: str
    bracket_round: str | None = None
    round_name: str | None = None
    region: str | None = None
    teams: tuple[GameTeam, ...] = ()

    def to_dict(self) -> dict:
        return {
            "gameId": self.game_id,
            "startDate": self.start_date,
            "gameState": self.game_state,
            "bracketRound": self.bracket_round,
            "region": self.region,
            "teams": [t.to_dict() for t in self.teams],
        }


@dataclass(frozen=True)
class BracketResponse:
    """Bracket structure with each round's games filled in."""

    structure: BracketStructure
    rounds: tuple[BracketRound, ...]
    warnings: tuple = field(default=(), compare=False)

    def to_dict(self) -> dict:
        s = self.structure
        return {
            "sport": s.sport,
            "title": s.title,
            "year": s.year,
            "bracketId": s.bracket_id,
            "size": s.size,
            "regions": list(s.regions),
            "rounds": [r.to_dict() for r in self.rounds],
        }
