"""Game endpoints.

- GET /game/{id} - game info
- GET /game/{id}/boxscore
- GET /game/{id}/play-by-play
- GET /game/{id}/team-stats
- GET /game/{id}/scoring-summary

An optional ?sport= hint narrows persisted query discovery.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from ncaa_api.api.dependencies import get_service
from ncaa_api.core import DataKind
from ncaa_api.services import NCAAService

router = APIRouter(prefix="/game")

DETAIL_KINDS = {
    DataKind.BOXSCORE.value: DataKind.BOXSCORE,
    DataKind.PLAY_BY_PLAY.value: DataKind.PLAY_BY_PLAY,
    DataKind.TEAM_STATS.value: DataKind.TEAM_STATS,
    DataKind.SCORING_SUMMARY.value: DataKind.SCORING_SUMMARY,
}


@router.get("/{game_id}")
async def get_game(
    game_id: str,
    request: Request,
    sport: str | None = Query(None, description="Sport hint (e.g., 'football')"),
    service: NCAAService = Depends(get_service),
) -> dict:
    """Game info."""
    return await service.game(game_id, DataKind.GAME, sport=sport, path_key=request.url.path)


@router.get("/{game_id}/{detail}")
async def get_game_detail(
    game_id: str,
    detail: str,
    request: Request,
    sport: str | None = Query(None, description="Sport hint (e.g., 'football')"),
    service: NCAAService = Depends(get_service),
) -> dict:
    """Box score, play-by-play, team stats or scoring summary."""
    kind = DETAIL_KINDS.get(detail)
    if kind is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
    return await service.game(game_id, kind, sport=sport, path_key=request.url.path)
