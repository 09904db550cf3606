"""Scoreboard endpoints.

- GET /scoreboard/{sport}/{division} - today's (or this week's) games
- GET /scoreboard/{sport}/{division}/{year}/{month}/{day}[/{conference}]
- GET /scoreboard/football/{division}/{year}/{week|P}[/{conference}]

Always answered in the legacy scoreboard shape regardless of upstream source.
"""

from fastapi import APIRouter, Depends, Request

from ncaa_api.api.dependencies import get_service
from ncaa_api.services import NCAAService

router = APIRouter(prefix="/scoreboard")


@router.get("/{sport}/{division}")
async def get_current_scoreboard(
    sport: str,
    division: str,
    request: Request,
    service: NCAAService = Depends(get_service),
) -> dict:
    """Scoreboard for today (date-based sports) or the current week (football)."""
    return await service.scoreboard(sport, division, [], path_key=request.url.path)


@router.get("/{sport}/{division}/{rest:path}")
async def get_scoreboard(
    sport: str,
    division: str,
    rest: str,
    request: Request,
    service: NCAAService = Depends(get_service),
) -> dict:
    """Scoreboard for an explicit date or week."""
    return await service.scoreboard(
        sport, division, rest.strip("/").split("/"), path_key=request.url.path
    )
