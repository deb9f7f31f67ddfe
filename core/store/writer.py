"""
Geo Record Writer.

Persists a validated hourly entry as a member of the geo set keyed by the
entry's epoch. The member name carries an identity token plus the entry
payload so that entries sharing a timestamp stay distinct members.

Identity modes:
- COORDINATE: token is the originating coordinate. Re-running a coordinate
  replaces its own member; other coordinates never collide with it.
- RANDOM: token is a fresh random value per write. Every write adds a new
  member, including repeat runs over the same coordinate.
"""

import json
import logging
import uuid
from enum import Enum
from typing import Any, Dict

from core.forecast.models import ForecastEntry
from core.store.geo import GeoMember, GeoStoreBackend

logger = logging.getLogger(__name__)


class IdentityMode(Enum):
    """How member identity tokens are generated."""

    COORDINATE = "coordinate"
    RANDOM = "random"


def record_key(entry: ForecastEntry) -> str:
    """Store key for an entry: its epoch as a decimal string."""
    return str(entry.timestamp)


class GeoRecordWriter:
    """Builds store keys and member identities for forecast entries."""

    def __init__(
        self,
        store: GeoStoreBackend,
        identity: IdentityMode = IdentityMode.COORDINATE,
    ):
        self.store = store
        self.identity = identity

    def _identity_token(self, lat: float, lon: float) -> str:
        if self.identity == IdentityMode.RANDOM:
            return uuid.uuid4().hex
        return f"{lat!r},{lon!r}"

    def member_name(self, entry: ForecastEntry, lat: float, lon: float) -> str:
        """Serialized member identity for an entry at a coordinate."""
        payload: Dict[str, Any] = {
            "id": self._identity_token(lat, lon),
            "hourly": entry.to_dict(),
        }
        return json.dumps(payload, sort_keys=True, separators=(",", ":"))

    def write(self, entry: ForecastEntry, lat: float, lon: float) -> int:
        """
        Persist an entry positioned at lat/lon.

        Returns:
            The store's count of newly added members

        Raises:
            StoreError: Propagated from the store; no retry
        """
        key = record_key(entry)
        member = GeoMember(name=self.member_name(entry, lat, lon), lat=lat, lon=lon)
        added = self.store.put(key, member)
        logger.debug(f"Stored entry {key} at {lat},{lon} (added={added})")
        return added
