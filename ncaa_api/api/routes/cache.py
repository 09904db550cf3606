"""Cache management endpoints.

- GET /cache/status - cache and in-flight statistics
- DELETE /cache/{path} - drop a cached resource so the next request refetches
"""

from fastapi import APIRouter, Depends

from ncaa_api.api.dependencies import get_service
from ncaa_api.api.models import CacheStatusResponse, InvalidateResponse
from ncaa_api.services import NCAAService

router = APIRouter(prefix="/cache")


@router.get("/status", response_model=CacheStatusResponse)
def get_cache_status(service: NCAAService = Depends(get_service)) -> dict:
    """Get cache statistics."""
    return service.cache_stats()


@router.delete("/{path:path}", response_model=InvalidateResponse)
def invalidate(path: str, service: NCAAService = Depends(get_service)) -> dict:
    """Invalidate by request path (e.g. scoreboard/football/fbs) or canonical key."""
    key = path.strip("/")
    removed = service.invalidate(f"/{key}") or service.invalidate(key)
    return {"key": key, "removed": removed}
