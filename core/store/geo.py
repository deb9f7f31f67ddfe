"""
Geo-indexed Store Backends.

Each store key maps to a set of named members positioned by lat/lon,
mirroring Redis geo sets. Adding a member whose name already exists under
the key updates its position instead of adding a second member.

Backends:
- RedisGeoStore: GEOADD against a Redis server
- MemoryGeoStore: in-process store for testing and dry runs
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

import redis

from core.exceptions import StoreError

logger = logging.getLogger(__name__)

# Coordinate limits accepted by Redis geo commands (EPSG:900913)
GEO_LAT_LIMIT = 85.05112878
GEO_LON_LIMIT = 180.0

REDIS_SCHEMES = ("redis", "rediss", "unix")


class GeoStoreType(Enum):
    """Supported geo store backend types."""

    REDIS = "redis"
    MEMORY = "memory"


@dataclass(frozen=True)
class GeoMember:
    """
    A positioned member of a geo set.

    Attributes:
        name: Member identity within the key
        lat: Latitude
        lon: Longitude
    """

    name: str
    lat: float
    lon: float


class GeoStoreBackend(ABC):
    """Abstract base class for geo-indexed stores."""

    @property
    @abstractmethod
    def store_type(self) -> GeoStoreType:
        """Return the backend type."""
        pass

    @abstractmethod
    def put(self, key: str, member: GeoMember) -> int:
        """
        Add a member to the geo set at key.

        Args:
            key: Store key
            member: Member to add

        Returns:
            Number of newly added members (0 if the name already existed)

        Raises:
            StoreError: If the write fails
        """
        pass

    @abstractmethod
    def members(self, key: str) -> List[GeoMember]:
        """List the members stored under key."""
        pass

    def close(self) -> None:
        """Release backend resources."""


class RedisGeoStore(GeoStoreBackend):
    """
    Redis-backed geo store.

    Thread-safe: the client draws connections from a shared pool, so
    concurrent writers need no additional locking.
    """

    @property
    def store_type(self) -> GeoStoreType:
        return GeoStoreType.REDIS

    def __init__(self, url: str, client: redis.Redis = None):
        self.url = url
        self._client = client or redis.Redis.from_url(url, decode_responses=True)
        logger.info(f"Initialized redis geo store at {_redact(url)}")

    def put(self, key: str, member: GeoMember) -> int:
        try:
            return int(self._client.geoadd(key, (member.lon, member.lat, member.name)))
        except redis.RedisError as e:
            raise StoreError(f"Error inserting geo member: {e}", key=key, original_error=e) from e

    def members(self, key: str) -> List[GeoMember]:
        try:
            names = self._client.zrange(key, 0, -1)
            if not names:
                return []
            positions = self._client.geopos(key, *names)
        except redis.RedisError as e:
            raise StoreError(f"Error reading geo members: {e}", key=key, original_error=e) from e

        result = []
        for name, pos in zip(names, positions):
            if pos is None:
                continue
            lon, lat = pos
            result.append(GeoMember(name=name, lat=float(lat), lon=float(lon)))
        return result

    def close(self) -> None:
        self._client.close()


class MemoryGeoStore(GeoStoreBackend):
    """
    In-memory geo store for testing and dry runs.

    Enforces the same coordinate limits as Redis so out-of-range writes
    fail the same way.
    """

    @property
    def store_type(self) -> GeoStoreType:
        return GeoStoreType.MEMORY

    def __init__(self):
        self._data: Dict[str, Dict[str, Tuple[float, float]]] = {}
        self._lock = threading.Lock()
        logger.info("Initialized memory geo store")

    def put(self, key: str, member: GeoMember) -> int:
        if abs(member.lon) > GEO_LON_LIMIT or abs(member.lat) > GEO_LAT_LIMIT:
            raise StoreError(
                f"invalid longitude,latitude pair {member.lon:.6f},{member.lat:.6f}",
                key=key,
            )
        with self._lock:
            geo_set = self._data.setdefault(key, {})
            added = 0 if member.name in geo_set else 1
            geo_set[member.name] = (member.lat, member.lon)
        return added

    def members(self, key: str) -> List[GeoMember]:
        with self._lock:
            geo_set = dict(self._data.get(key, {}))
        return [GeoMember(name=n, lat=lat, lon=lon) for n, (lat, lon) in geo_set.items()]

    def keys(self) -> List[str]:
        """List all keys holding at least one member."""
        with self._lock:
            return sorted(self._data)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(s) for s in self._data.values())


def _redact(url: str) -> str:
    """Hide the password portion of a connection URL."""
    if "@" not in url or "://" not in url:
        return url
    scheme, rest = url.split("://", 1)
    return f"{scheme}://***@{rest.rsplit('@', 1)[1]}"


def normalize_store_url(address: str) -> str:
    """Turn a bare host:port address into a redis:// URL."""
    if "://" in address:
        return address
    return f"redis://{address}/0"


def create_geo_store(url: str) -> GeoStoreBackend:
    """
    Factory function to create a geo store from a connection address.

    Args:
        url: ``memory://`` for an in-memory store; a redis URL
            (``redis://``, ``rediss://``, ``unix://``) or bare ``host:port``
            for Redis

    Returns:
        Configured geo store backend
    """
    if url.startswith("memory://"):
        return MemoryGeoStore()

    url = normalize_store_url(url)
    scheme = url.split("://", 1)[0]
    if scheme not in REDIS_SCHEMES:
        raise ValueError(f"Unsupported geo store scheme: {scheme}")
    return RedisGeoStore(url)
