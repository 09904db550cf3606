"""Bracket merging.

The tournament structure (rounds, regions) comes from the bracket HTML page
and the games come from the GraphQL championship query. The two are fetched
independently and joined here:

1. bracketRound identity: round id, then exact round name
2. normalized round name (unidecode, lowercase, ordinals/numbers folded)
3. fuzzy name match (rapidfuzz ratio >= 90)

Games that match no round are dropped and reported as PartialMergeWarning.
An empty game list is a valid "not yet played" bracket.
"""

import logging
import re

from rapidfuzz import fuzz
from unidecode import unidecode

from ncaa_api.core import (
    BracketResponse,
    BracketRound,
    BracketStructure,
    GameRecord,
    GameTeam,
    PartialMergeWarning,
)

logger = logging.getLogger(__name__)

FUZZY_THRESHOLD = 90

# Token folding so "2nd Round" == "Second Round" and "Elite 8" == "Elite Eight"
ROUND_TOKENS = {
    "1st": "first",
    "2nd": "second",
    "3rd": "third",
    "4th": "fourth",
    "4": "four",
    "8": "eight",
    "16": "sixteen",
    "32": "thirty two",
    "64": "sixty four",
    "semifinal": "semifinals",
    "semis": "semifinals",
    "quarterfinal": "quarterfinals",
    "championship": "final",
    "finals": "final",
    "natl": "national",
}


def normalize_round_name(name: str | None) -> str:
    """Canonical form of a round name for comparison.

    >>> normalize_round_name("Sweet 16")
    'sweet sixteen'
    >>> normalize_round_name("2nd Round")
    'second round'
    """
    if not name:
        return ""
    text = unidecode(name).lower()
    text = re.sub(r"[^a-z0-9]+", " ", text)
    tokens = [ROUND_TOKENS.get(t, t) for t in text.split()]
    return " ".join(t for t in tokens if t != "the")


def _int(value: object) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def games_from_championship(payload: dict | None) -> list[GameRecord]:
    """GameRecords from a GraphQL championship response."""
    data = (payload or {}).get("data") or {}
    championships = data.get("championships") or []
    if not championships:
        return []

    records = []
    for game in championships[0].get("games") or []:
        bracket_round = game.get("bracketRound")
        round_name = game.get("roundName")
        if isinstance(bracket_round, dict):
            round_name = round_name or bracket_round.get("title")
            bracket_round = bracket_round.get("roundNumber")

        teams = tuple(
            GameTeam(
                name=t.get("nameShort") or t.get("name") or "",
                seed=_int(t.get("seed")),
                score=_int(t.get("score")),
                winner=bool(t.get("isWinner")),
            )
            for t in game.get("teams") or []
        )
        records.append(
            GameRecord(
                game_id=str(game.get("contestId", "")),
                start_date=game.get("startDate"),
                game_state=str(game.get("gameState") or ""),
                bracket_round=str(bracket_round) if bracket_round not in (None, "") else None,
                round_name=round_name,
                region=game.get("sectionTitle") or game.get("region"),
                teams=teams,
            )
        )
    return records


def _match_round(game: GameRecord, rounds: tuple[BracketRound, ...]) -> int | None:
    """Index of the round a game belongs to, or None."""
    if game.bracket_round:
        for i, r in enumerate(rounds):
            if r.round_id is not None and r.round_id == game.bracket_round:
                return i
        for i, r in enumerate(rounds):
            if r.name == game.bracket_round:
                return i

    names = [n for n in (game.round_name, game.bracket_round) if n]
    normalized_rounds = [normalize_round_name(r.name) for r in rounds]
    for name in names:
        wanted = normalize_round_name(name)
        if wanted in normalized_rounds:
            return normalized_rounds.index(wanted)

    best_index, best_score = None, 0.0
    for name in names:
        wanted = normalize_round_name(name)
        for i, candidate in enumerate(normalized_rounds):
            score = fuzz.ratio(wanted, candidate)
            if score >= FUZZY_THRESHOLD and score > best_score:
                best_index, best_score = i, score
    return best_index


def merge_bracket(structure: BracketStructure, games: list[GameRecord]) -> BracketResponse:
    """Place championship games into the structure's rounds.

    Args:
        structure: Rounds/regions from the bracket page
        games: Games from the championship query (may be empty)

    Returns:
        BracketResponse; warnings lists games that matched no round
    """
    placed: list[list[GameRecord]] = [[] for _ in structure.rounds]
    warnings: list[PartialMergeWarning] = []

    for game in games:
        index = _match_round(game, structure.rounds)
        if index is None:
            warning = PartialMergeWarning(game.game_id, game.bracket_round, game.round_name)
            logger.warning("[BRACKET] %s", warning)
            warnings.append(warning)
            continue
        placed[index].append(game)

    rounds = tuple(
        BracketRound(name=r.name, round_id=r.round_id, games=tuple(placed[i]))
        for i, r in enumerate(structure.rounds)
    )
    if games:
        logger.debug(
            "[BRACKET] Merged %d/%d games into %d rounds",
            len(games) - len(warnings),
            len(games),
            len(rounds),
        )
    return BracketResponse(structure=structure, rounds=rounds, warnings=tuple(warnings))
