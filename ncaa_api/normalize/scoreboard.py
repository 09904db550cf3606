"""Scoreboard format normalization.

GraphQL contests are converted into the legacy casablanca scoreboard shape
so consumers of the old JSON see no change:

    {
      "inputMD5Sum": "...",
      "instanceId": "",
      "updated_at": "10-18-2025 14:02:11",
      "hideRank": false,
      "games": [{"game": {"gameID": "...", "home": {...}, "away": {...}, ...}}]
    }

Legacy values are strings ("" for missing), booleans only where the legacy
feed used booleans.
"""

import hashlib
import json
import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

EASTERN = ZoneInfo("America/New_York")

ALL_CONFERENCES = "all-conf"
TOP_25 = "top-25"

# GraphQL gameState codes -> legacy gameState values
GAME_STATES = {
    "P": "pre",
    "I": "live",
    "F": "final",
    "C": "canceled",
    "D": "delayed",
    "O": "postponed",
}


def _str(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def game_state(raw: object) -> str:
    """Map a GraphQL state code (or already-legacy value) to the legacy state."""
    text = _str(raw).strip()
    if text.upper() in GAME_STATES:
        return GAME_STATES[text.upper()]
    return text.lower()


def _team(team: dict | None) -> dict:
    team = team or {}
    record = team.get("record") or team.get("teamRecord")
    conference = {
        "conferenceName": _str(team.get("conferenceName")),
        "conferenceSeo": _str(team.get("conferenceSeo")),
    }
    return {
        "score": _str(team.get("score")),
        "names": {
            "char6": _str(team.get("name6Char")),
            "short": _str(team.get("nameShort")),
            "seo": _str(team.get("seoname")),
            "full": _str(team.get("nameFull") or team.get("nameShort")),
        },
        "winner": bool(team.get("isWinner")),
        "seed": _str(team.get("seed")),
        "description": f"({record})" if record else "",
        "rank": _str(team.get("teamRank")),
        "conferences": [conference] if conference["conferenceSeo"] else [],
    }


def _start(contest: dict) -> tuple[str, str, str]:
    """(startDate MM-DD-YYYY, startTime like 7:00PM ET, epoch string)."""
    epoch = contest.get("startTimeEpoch")
    start: datetime | None = None
    if epoch not in (None, ""):
        try:
            start = datetime.fromtimestamp(int(epoch), tz=EASTERN)
        except (TypeError, ValueError, OverflowError):
            start = None
    if start is None and contest.get("startDate"):
        try:
            start = date_parser.parse(str(contest["startDate"]))
        except (ValueError, OverflowError):
            logger.debug("[NORMALIZE] Unparseable startDate: %s", contest.get("startDate"))

    if start is None:
        return "", _str(contest.get("startTime")), _str(epoch)

    start_time = _str(contest.get("startTime"))
    if not start_time and start.tzinfo is not None:
        start_time = start.strftime("%I:%M%p ET").lstrip("0")
    return start.strftime("%m-%d-%Y"), start_time, _str(epoch)


def contest_to_legacy_game(contest: dict) -> dict:
    """Convert one GraphQL contest into a legacy scoreboard game."""
    teams = contest.get("teams") or []
    home = next((t for t in teams if t.get("isHome")), None)
    if home is None and len(teams) > 1:
        # No home flag: listed away-first like the legacy feed
        away, home = teams[0], teams[1]
    else:
        away = next((t for t in teams if t is not home), None)
    state = game_state(contest.get("gameState"))
    game_id = _str(contest.get("contestId"))
    start_date, start_time, epoch = _start(contest)

    home_names = _team(home)["names"]
    away_names = _team(away)["names"]

    return {
        "gameID": game_id,
        "away": _team(away),
        "home": _team(home),
        "finalMessage": _str(contest.get("finalMessage")) or ("FINAL" if state == "final" else ""),
        "bracketRound": _str(contest.get("bracketRound")),
        "title": f"{away_names['short']} {home_names['short']}".strip(),
        "contestName": _str(contest.get("contestName")),
        "url": _str(contest.get("url")) or f"/game/{game_id}",
        "network": _str(contest.get("broadcasterName")),
        "liveVideoEnabled": bool(contest.get("liveVideoEnabled")),
        "startTime": start_time,
        "startTimeEpoch": epoch,
        "bracketId": _str(contest.get("bracketId")),
        "gameState": state,
        "startDate": start_date,
        "currentPeriod": _str(contest.get("currentPeriod")),
        "videoState": _str(contest.get("videoState")),
        "bracketRegion": _str(contest.get("bracketRegion")),
        "contestClock": _str(contest.get("contestClock")) or "0:00",
    }


def legacy_scoreboard(games: list[dict], updated_at: datetime | None = None) -> dict:
    """Wrap legacy games in the scoreboard envelope."""
    updated_at = updated_at or datetime.now(EASTERN)
    digest = hashlib.md5(json.dumps(games, sort_keys=True).encode("utf-8")).hexdigest()
    return {
        "inputMD5Sum": digest,
        "instanceId": "",
        "updated_at": updated_at.strftime("%m-%d-%Y %H:%M:%S"),
        "hideRank": False,
        "games": games,
    }


def empty_scoreboard() -> dict:
    return legacy_scoreboard([])


def graphql_scoreboard_to_legacy(payload: dict | None) -> dict:
    """Convert a GraphQL scoreboard response into the legacy shape."""
    data = (payload or {}).get("data") or {}
    contests = data.get("contests") or []
    return legacy_scoreboard([{"game": contest_to_legacy_game(c)} for c in contests])


def _in_conference(game: dict, conference: str) -> bool:
    for side in ("home", "away"):
        team = game.get(side) or {}
        if conference == TOP_25:
            if _str(team.get("rank")).strip():
                return True
            continue
        if any(c.get("conferenceSeo") == conference for c in team.get("conferences") or []):
            return True
    return False


def filter_conference(scoreboard: dict, conference: str | None) -> dict:
    """Keep only games involving a conference (or top-25 teams)."""
    if not conference or conference == ALL_CONFERENCES:
        return scoreboard
    games = [
        g for g in scoreboard.get("games", []) if _in_conference(g.get("game", {}), conference)
    ]
    filtered = legacy_scoreboard(games)
    filtered["updated_at"] = scoreboard.get("updated_at", filtered["updated_at"])
    return filtered


def merge_week_scoreboards(weeks: list[tuple[int, dict | None, str | None]]) -> dict:
    """Merge per-week scoreboards into one response.

    Args:
        weeks: (week, scoreboard or None, error message or None) per week

    A failed week contributes an empty game list and is reported in the
    "weeks" summary; it never fails the merged response.
    """
    games: list[dict] = []
    summary = []
    for week, scoreboard, error in weeks:
        week_games = (scoreboard or {}).get("games", []) if error is None else []
        games.extend(week_games)
        summary.append({"week": week, "games": len(week_games), "error": error})

    merged = legacy_scoreboard(games)
    merged["weeks"] = summary
    return merged
