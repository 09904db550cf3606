"""Scraped table endpoints.

- GET /stats/{sport}/{division}/{...}
- GET /rankings/{sport}/{division}/{...}
- GET /standings/{sport}/{division}
- GET /history/{sport}/{division}

The remaining path is forwarded to the matching ncaa.com page.
"""

from fastapi import APIRouter, Depends, Request

from ncaa_api.api.dependencies import get_service
from ncaa_api.core import DataKind
from ncaa_api.services import NCAAService

router = APIRouter()


async def _table(
    kind: DataKind, sport: str, division: str, rest: str, request: Request, service: NCAAService
) -> dict:
    return await service.table(kind, sport, division, rest, path_key=request.url.path)


@router.get("/stats/{sport}/{division}/{rest:path}")
async def get_stats(
    sport: str,
    division: str,
    rest: str,
    request: Request,
    service: NCAAService = Depends(get_service),
) -> dict:
    """Individual or team statistics."""
    return await _table(DataKind.STATS, sport, division, rest, request, service)


@router.get("/rankings/{sport}/{division}/{rest:path}")
async def get_rankings(
    sport: str,
    division: str,
    rest: str,
    request: Request,
    service: NCAAService = Depends(get_service),
) -> dict:
    """Poll rankings (e.g., associated-press)."""
    return await _table(DataKind.RANKINGS, sport, division, rest, request, service)


@router.get("/standings/{sport}/{division}")
async def get_standings(
    sport: str, division: str, request: Request, service: NCAAService = Depends(get_service)
) -> dict:
    """Conference standings."""
    return await _table(DataKind.STANDINGS, sport, division, "", request, service)


@router.get("/history/{sport}/{division}")
async def get_history(
    sport: str, division: str, request: Request, service: NCAAService = Depends(get_service)
) -> dict:
    """Past champions."""
    return await _table(DataKind.HISTORY, sport, division, "", request, service)
