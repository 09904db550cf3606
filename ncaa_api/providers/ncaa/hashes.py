"""Persisted query hash table.

The GraphQL API only accepts queries stored server-side, addressed by sha256
hash. The hash for a given query changes when the site is redeployed and some
game-detail queries differ per sport, so each (sport, query kind) has an
ordered list of candidates. HashResolver walks the list.

Read-only at runtime. NCAA_HASH_FILE may point at a JSON file of the form
{"football": {"boxscore": ["<sha256>", ...]}} whose hashes are placed ahead
of the built-in ones when the table is loaded.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType

from ncaa_api.config import NCAA_HASH_FILE
from ncaa_api.core import QueryKind

logger = logging.getLogger(__name__)

# Persisted operation names sent in the `meta` parameter
OPERATIONS: dict[QueryKind, str] = {
    QueryKind.SCOREBOARD: "GetContests_web",
    QueryKind.BOXSCORE: "NCAA_GetGamecenterBoxscoreById_web",
    QueryKind.PLAY_BY_PLAY: "NCAA_GetGamecenterPbpById_web",
    QueryKind.TEAM_STATS: "NCAA_GetGamecenterTeamStatsById_web",
    QueryKind.SCORING_SUMMARY: "NCAA_GetGamecenterScoringSummaryById_web",
    QueryKind.CHAMPIONSHIP: "GetChampionshipBracket_web",
}

# Root field under `data` and the __typename a usable payload carries there.
# Sport-specific variants share the suffix (e.g. FootballBoxscore).
EXPECTED_SHAPES: dict[QueryKind, tuple[str, str]] = {
    QueryKind.SCOREBOARD: ("contests", "Contest"),
    QueryKind.BOXSCORE: ("boxscore", "Boxscore"),
    QueryKind.PLAY_BY_PLAY: ("playbyplay", "PlayByPlay"),
    QueryKind.TEAM_STATS: ("teamStats", "TeamStats"),
    QueryKind.SCORING_SUMMARY: ("scoringSummary", "ScoringSummary"),
    QueryKind.CHAMPIONSHIP: ("championships", "Championship"),
}

DEFAULT_SPORT = "default"

# fmt: off
_BUILTIN: dict[str, dict[QueryKind, tuple[str, ...]]] = {
    DEFAULT_SPORT: {
        QueryKind.SCOREBOARD: (
            "f583913598f2a200f015a6f959f1e11f5ea0a42ff4fca3e19fe9540542498fff",
            "f6cc49602492ef464022db83519429a8e46eacd68d3f812237531f90087eef83",
        ),
        QueryKind.BOXSCORE: (
            "a923ba12f92c7cf7695dbda1c442c6d4dd8c0a836a117cce47b7924c5b66245a",
            "7e8e6289956df391968a03affd5e68e60c53901ddea3eee17e6679e628faf705",
        ),
        QueryKind.PLAY_BY_PLAY: (
            "af31f966becd1fa53d8c124541ecde386cb2c8fab3db7dd524678c5555509d6c",
        ),
        QueryKind.TEAM_STATS: (
            "f090296ff654a9ce999e69ba97288b73557f5c7a0482b63137f48c89a6b38e03",
        ),
        QueryKind.SCORING_SUMMARY: (
            "202771377df3ea294762dec9bd7af4637a72819f30dcb331ff3232a3d1578be8",
        ),
        QueryKind.CHAMPIONSHIP: (
            "e99005a78716226fb48900354027fc525ffaf7ee442bbed630615470379a155a",
            "c654b61cdacc49b0aa10551437dd1902fe6ce4ea132a65ae80a7ef14fef2b66d",
        ),
    },
    "football": {
        QueryKind.BOXSCORE: (
            "d62f70c0bf0827327b7e47c4bf245e5e701316a9c00b040d57627385d5b84558",
        ),
        QueryKind.PLAY_BY_PLAY: (
            "cb41a0a28db5d38152935167a483f3bb453aec369683a5224db9a976dc871d20",
        ),
        QueryKind.TEAM_STATS: (
            "78114bd28a3b87b3ab55817cf3e73883909c5d86cc12bd81a9185bdb75bdbd0c",
        ),
        QueryKind.SCORING_SUMMARY: (
            "9a57c3a215aeca647baef7ea792cf25612bc561244807069819b93d273ce6a47",
        ),
    },
    "basketball-men": {
        QueryKind.BOXSCORE: (
            "c87550e080e9e44a61f3170bb0d7d7d93cd3f5e47bbc970cf53a2adb80313ff3",
        ),
        QueryKind.PLAY_BY_PLAY: (
            "ce3f7ec9fed63d89a202e3aca9aa0e191675dbf8a152ee50a9400052606e10c5",
        ),
    },
    "baseball": {
        QueryKind.BOXSCORE: (
            "87096e575dae0bf0abdd9ef3e2c2e82ffe7b86692a41e534ede7404fb670cc12",
        ),
        QueryKind.PLAY_BY_PLAY: (
            "83a4c06ba746f0f48e44fb395dc6a2d58d6ef496698c7dba4db7d1cec2760353",
        ),
    },
    "icehockey-men": {
        QueryKind.BOXSCORE: (
            "e1549989c21f554e56aa0298bfd6c54ab9809083051cef6be04c6732fca8fc32",
        ),
    },
    "soccer-men": {
        QueryKind.BOXSCORE: (
            "08062ba361dcdb283d7c1d2af53150814859eaad330bb285c59d56c5c17d507e",
        ),
    },
    "volleyball-women": {
        QueryKind.BOXSCORE: (
            "01f8ebe648ca1f79fef99a5030ac0cb573cede0b4deb0a146650da12d147db9f",
        ),
    },
}
# fmt: on

# Sports that share another sport's game-detail queries
_SHARED_QUERIES: dict[str, str] = {
    "basketball-women": "basketball-men",
    "softball": "baseball",
    "icehockey-women": "icehockey-men",
    "soccer-women": "soccer-men",
}


class PersistedQueryHashTable:
    """Ordered persisted query candidates per (sport, query kind)."""

    def __init__(self, table: dict[str, dict[QueryKind, tuple[str, ...]]]):
        self._table = MappingProxyType(
            {sport: MappingProxyType(dict(kinds)) for sport, kinds in table.items()}
        )

    def own_candidates(self, sport: str | None, kind: QueryKind) -> tuple[str, ...]:
        """Hashes registered directly for this sport (or the sport it shares with)."""
        if sport is None:
            return ()
        sport = _SHARED_QUERIES.get(sport, sport)
        return tuple(self._table.get(sport, {}).get(kind, ()))

    def candidates(self, sport: str | None, kind: QueryKind) -> tuple[str, ...]:
        """Ordered candidates: sport-specific, shared defaults, then every other sport's.

        With sport=None (game requests without a sport hint) every known hash for
        the kind is returned, defaults first.
        """
        ordered = list(self.own_candidates(sport, kind))
        ordered.extend(self._table.get(DEFAULT_SPORT, {}).get(kind, ()))
        for other, kinds in self._table.items():
            if other != DEFAULT_SPORT:
                ordered.extend(kinds.get(kind, ()))
        return tuple(dict.fromkeys(ordered))

    @staticmethod
    def operation(kind: QueryKind) -> str:
        return OPERATIONS[kind]

    @staticmethod
    def expected_shape(kind: QueryKind) -> tuple[str, str]:
        return EXPECTED_SHAPES[kind]


def load_hash_table(override_path: str | None = None) -> PersistedQueryHashTable:
    """Build the hash table, merging an optional JSON override file."""
    table = {sport: dict(kinds) for sport, kinds in _BUILTIN.items()}

    if override_path:
        path = Path(override_path)
        try:
            overrides = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("[HASH] Could not read hash overrides from %s: %s", path, e)
            overrides = {}

        for sport, kinds in overrides.items():
            sport_table = table.setdefault(sport, {})
            for kind_name, hashes in kinds.items():
                try:
                    kind = QueryKind(kind_name)
                except ValueError:
                    logger.warning("[HASH] Unknown query kind in overrides: %s", kind_name)
                    continue
                sport_table[kind] = tuple(dict.fromkeys([*hashes, *sport_table.get(kind, ())]))
        logger.info("[HASH] Loaded hash overrides for %d sport(s)", len(overrides))

    return PersistedQueryHashTable(table)


DEFAULT_HASH_TABLE = load_hash_table(NCAA_HASH_FILE)
