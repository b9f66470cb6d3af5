"""Admin-managed records: sponsors, sponsor tiers, floor maps, event config.

Records are plain dicts with an ``id``, partitioned by event slug. The
admin dashboard writes them; kiosk routes only read. Only an in-memory
store ships here; a durable backend implements the same protocol.
"""

import copy
import logging
import threading
from typing import Protocol

logger = logging.getLogger(__name__)

SPONSORS = "sponsors"
SPONSOR_TIERS = "sponsor-tiers"
FLOOR_MAPS = "floor-maps"
EVENT_CONFIGS = "event-configs"


class RecordStore(Protocol):
    def find_all(self, container: str, event_slug: str) -> list[dict]: ...

    def find_by_id(self, container: str, event_slug: str, record_id: str) -> dict | None: ...

    def upsert(self, container: str, event_slug: str, record: dict) -> dict: ...

    def delete(self, container: str, event_slug: str, record_id: str) -> None: ...


def _sort_key(record: dict) -> tuple:
    # Missing or non-numeric sortOrder counts as 0
    order = record.get("sortOrder")
    if isinstance(order, bool) or not isinstance(order, (int, float)):
        order = 0
    return (order, str(record["id"]))


class InMemoryRecordStore:
    """Process-local RecordStore. Returns copies so callers cannot mutate stored records."""

    def __init__(self):
        self._records: dict[tuple[str, str], dict[str, dict]] = {}
        self._lock = threading.Lock()

    def find_all(self, container: str, event_slug: str) -> list[dict]:
        with self._lock:
            records = list(self._records.get((container, event_slug), {}).values())
        return [copy.deepcopy(r) for r in sorted(records, key=_sort_key)]

    def find_by_id(self, container: str, event_slug: str, record_id: str) -> dict | None:
        with self._lock:
            record = self._records.get((container, event_slug), {}).get(record_id)
        return copy.deepcopy(record) if record is not None else None

    def upsert(self, container: str, event_slug: str, record: dict) -> dict:
        if not record.get("id"):
            raise ValueError(f"Record for {container} is missing an id")
        stored = copy.deepcopy(record)
        with self._lock:
            self._records.setdefault((container, event_slug), {})[str(stored["id"])] = stored
        logger.info("Upserted %s/%s for %s", container, stored["id"], event_slug)
        return copy.deepcopy(stored)

    def delete(self, container: str, event_slug: str, record_id: str) -> None:
        with self._lock:
            removed = self._records.get((container, event_slug), {}).pop(record_id, None)
        if removed is None:
            raise KeyError(f"{container}/{record_id} not found for {event_slug}")
