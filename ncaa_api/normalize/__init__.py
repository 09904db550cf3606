"""Response normalization: legacy scoreboard shape and bracket merging."""

from ncaa_api.normalize.bracket import (
    games_from_championship,
    merge_bracket,
    normalize_round_name,
)
from ncaa_api.normalize.scoreboard import (
    contest_to_legacy_game,
    empty_scoreboard,
    filter_conference,
    graphql_scoreboard_to_legacy,
    merge_week_scoreboards,
)

__all__ = [
    "contest_to_legacy_game",
    "empty_scoreboard",
    "filter_conference",
    "games_from_championship",
    "graphql_scoreboard_to_legacy",
    "merge_bracket",
    "merge_week_scoreboards",
    "normalize_round_name",
]
