"""NCAA data API - stable JSON over GraphQL, legacy JSON and HTML sources."""

from ncaa_api.config import VERSION

__version__ = VERSION
