"""NCAA upstream provider: transport, source selection and hash discovery."""

from ncaa_api.providers.ncaa.client import NCAAClient
from ncaa_api.providers.ncaa.hash_resolver import HashResolver, is_usable_payload
from ncaa_api.providers.ncaa.hashes import (
    DEFAULT_HASH_TABLE,
    PersistedQueryHashTable,
    load_hash_table,
)
from ncaa_api.providers.ncaa.source_selector import select_source

__all__ = [
    "DEFAULT_HASH_TABLE",
    "HashResolver",
    "NCAAClient",
    "PersistedQueryHashTable",
    "is_usable_payload",
    "load_hash_table",
    "select_source",
]
