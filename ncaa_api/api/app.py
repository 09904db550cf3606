"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from ncaa_api.api.dependencies import verify_api_key
from ncaa_api.api.routes import brackets, cache, content, game, health, scoreboard, tables
from ncaa_api.config import VERSION
from ncaa_api.core import HashDiscoveryExhaustedError, UnsupportedSourceError, UpstreamFetchError
from ncaa_api.providers.ncaa import NCAAClient
from ncaa_api.services import NCAAService
from ncaa_api.utilities.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler - runs on startup and shutdown."""
    setup_logging()
    logger.info("Starting NCAA API %s...", VERSION)

    # A service injected by create_app() (tests) is used as-is
    owns_service = getattr(app.state, "service", None) is None
    if owns_service:
        app.state.service = NCAAService(NCAAClient())

    logger.info("NCAA API ready")

    yield

    logger.info("Shutting down NCAA API...")
    if owns_service:
        await app.state.service.close()
        app.state.service = None
    logger.info("NCAA API stopped")


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(UnsupportedSourceError)
    async def unsupported_source(request: Request, exc: UnsupportedSourceError):
        return JSONResponse(status_code=400, content={"message": str(exc)})

    @app.exception_handler(UpstreamFetchError)
    async def upstream_failed(request: Request, exc: UpstreamFetchError):
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"message": "Resource not found"})
        logger.error("[API] Upstream failure for %s: %s", request.url.path, exc)
        return JSONResponse(status_code=502, content={"message": "Upstream request failed"})

    @app.exception_handler(HashDiscoveryExhaustedError)
    async def discovery_exhausted(request: Request, exc: HashDiscoveryExhaustedError):
        # Services degrade to empty data; reaching here means a caller opted out
        return JSONResponse(
            status_code=502, content={"message": str(exc), "attempted": exc.attempted}
        )

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


def create_app(service: NCAAService | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        service: Optional pre-built service (tests); otherwise one is created
            on startup and closed on shutdown.
    """
    app = FastAPI(
        title="NCAA API",
        description="Stable JSON API over NCAA scoreboards, games, stats and brackets",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.service = service

    _register_error_handlers(app)

    protected = [Depends(verify_api_key)]
    app.include_router(health.router, tags=["Health"])
    app.include_router(scoreboard.router, tags=["Scoreboard"], dependencies=protected)
    app.include_router(game.router, tags=["Game"], dependencies=protected)
    app.include_router(brackets.router, tags=["Brackets"], dependencies=protected)
    app.include_router(tables.router, tags=["Stats"], dependencies=protected)
    app.include_router(content.router, tags=["Content"], dependencies=protected)
    app.include_router(cache.router, tags=["Cache"], dependencies=protected)

    return app


app = create_app()
