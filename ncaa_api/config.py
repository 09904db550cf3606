"""Application configuration.

Values are read from environment variables once at import time.

Environment variables:
    NCAA_HEADER_KEY: Shared secret required in the x-ncaa-key header (default: unset, open)
    NEW_API_CUTOFF_SEASON: First season served by the GraphQL API (default: 2025)
    CACHE_MAX_ENTRIES: Soft bound on cached keys before expired ones are purged (default: 5000)
    NCAA_HASH_FILE: Optional JSON file overriding persisted query hashes
    LOG_LEVEL: Root log level (default: INFO)
    LOG_DIR: Directory for rotating log files (default: unset, console only)
"""

import os

VERSION = "1.0.0"

HEADER_KEY_NAME = "x-ncaa-key"
NCAA_HEADER_KEY = os.environ.get("NCAA_HEADER_KEY") or None

# Seasons at or after this year are served by the GraphQL API
NEW_API_CUTOFF_SEASON = int(os.environ.get("NEW_API_CUTOFF_SEASON", 2025))

# Oldest season the legacy sources still answer for
MIN_SEASON = 2010

CACHE_MAX_ENTRIES = int(os.environ.get("CACHE_MAX_ENTRIES", 5000))

NCAA_HASH_FILE = os.environ.get("NCAA_HASH_FILE") or None

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_DIR = os.environ.get("LOG_DIR") or None
