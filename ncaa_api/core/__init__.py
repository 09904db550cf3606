"""Core types, errors and calendar."""

from ncaa_api.core.errors import (
    HashDiscoveryExhaustedError,
    NCAAApiError,
    PartialMergeWarning,
    UnsupportedSourceError,
    UpstreamFetchError,
)
from ncaa_api.core.season import PLAYOFF_WEEKS, football_week, is_playoff_week, season_year
from ncaa_api.core.types import (
    BracketResponse,
    BracketRound,
    BracketStructure,
    DataKind,
    GameRecord,
    GameTeam,
    QueryKind,
    SourceDescriptor,
    SourceKind,
    TTLClass,
)

__all__ = [
    "BracketResponse",
    "BracketRound",
    "BracketStructure",
    "DataKind",
    "GameRecord",
    "GameTeam",
    "HashDiscoveryExhaustedError",
    "NCAAApiError",
    "PLAYOFF_WEEKS",
    "PartialMergeWarning",
    "QueryKind",
    "SourceDescriptor",
    "SourceKind",
    "TTLClass",
    "UnsupportedSourceError",
    "UpstreamFetchError",
    "football_week",
    "is_playoff_week",
    "season_year",
]
