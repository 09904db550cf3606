"""Service layer."""

from ncaa_api.services.ncaa_service import NCAAService

__all__ = ["NCAAService"]
