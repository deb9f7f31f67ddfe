"""
Geo-indexed storage for forecast records.

This module provides:
- Geo store backends (Redis, in-memory)
- The record writer that keys entries by epoch and gives each a member identity
"""

from core.store.geo import (
    GEO_LAT_LIMIT,
    GEO_LON_LIMIT,
    GeoMember,
    GeoStoreBackend,
    GeoStoreType,
    MemoryGeoStore,
    RedisGeoStore,
    create_geo_store,
    normalize_store_url,
)
from core.store.writer import GeoRecordWriter, IdentityMode, record_key

__all__ = [
    "GEO_LAT_LIMIT",
    "GEO_LON_LIMIT",
    "GeoMember",
    "GeoStoreBackend",
    "GeoStoreType",
    "MemoryGeoStore",
    "RedisGeoStore",
    "create_geo_store",
    "normalize_store_url",
    "GeoRecordWriter",
    "IdentityMode",
    "record_key",
]
