"""FastAPI dependencies."""

import secrets

from fastapi import Header, HTTPException, Request, status

from ncaa_api import config
from ncaa_api.services import NCAAService


def get_service(request: Request) -> NCAAService:
    """The process-wide service created in the app lifespan."""
    return request.app.state.service


def verify_api_key(x_ncaa_key: str | None = Header(default=None)) -> None:
    """Reject requests without the shared secret, when one is configured."""
    expected = config.NCAA_HEADER_KEY
    if not expected:
        return
    if not x_ncaa_key or not secrets.compare_digest(x_ncaa_key, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
