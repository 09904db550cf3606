"""Pydantic models for API responses."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str


class ErrorResponse(BaseModel):
    """Body of every error response."""

    message: str
    attempted: list[str] | None = Field(
        default=None, description="Persisted query hashes tried, when discovery failed"
    )


class CacheStatusResponse(BaseModel):
    keys: int
    live_keys: int
    hits: int
    misses: int
    in_flight: int
    fetches_started: int


class InvalidateResponse(BaseModel):
    key: str
    removed: int
