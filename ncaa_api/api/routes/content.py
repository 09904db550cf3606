"""Schedule, news and schools endpoints."""

from fastapi import APIRouter, Depends

from ncaa_api.api.dependencies import get_service
from ncaa_api.services import NCAAService

router = APIRouter()


@router.get("/schedule/{sport}/{division}/{year}/{month}")
async def get_schedule(
    sport: str,
    division: str,
    year: int,
    month: int,
    service: NCAAService = Depends(get_service),
) -> dict:
    """Game dates for a month."""
    return await service.schedule(sport, division, year, month)


@router.get("/news/{sport}/{division}")
async def get_news(
    sport: str, division: str, service: NCAAService = Depends(get_service)
) -> dict:
    """Latest news from the sport's RSS feed."""
    return await service.news(sport, division)


@router.get("/schools-index")
async def get_schools(service: NCAAService = Depends(get_service)) -> list[dict]:
    """All schools with their ncaa.com slugs."""
    return await service.schools()
