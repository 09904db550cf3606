"""Championship bracket endpoint."""

from fastapi import APIRouter, Depends, Request

from ncaa_api.api.dependencies import get_service
from ncaa_api.services import NCAAService

router = APIRouter(prefix="/brackets")


@router.get("/{sport}/{division}/{year}")
async def get_bracket(
    sport: str,
    division: str,
    year: int,
    request: Request,
    service: NCAAService = Depends(get_service),
) -> dict:
    """Bracket rounds and regions with championship games filled in.

    Before the tournament starts every round's games list is empty.
    """
    return await service.bracket(sport, division, year, path_key=request.url.path)
