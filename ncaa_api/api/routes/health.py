"""Health check endpoint."""

from fastapi import APIRouter

from ncaa_api.api.models import HealthResponse
from ncaa_api.config import VERSION

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=VERSION)
