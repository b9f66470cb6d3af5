"""Agenda aggregation and the "happening now" window.

run.events hands out a flat list of schedule items. The kiosk wants them
regrouped into days -> timeslots -> sessions, and separately needs to know
which sessions are running right now and which start next. Both views are
computed from the same cached raw list.

Time handling is lexical: start/end values are naive local-time strings in
the event's zone (validated as fixed-width in services/schemas.py), and "now"
is rendered in the same format before comparing.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from errors import MalformedDataError, SearchQueryTooShortError
from services.cache import DEFAULT_TTL_SECONDS, TTLCache
from services.run_events import RunEventsClient
from services.schemas import (
    LOCAL_DATETIME_FORMAT,
    Agenda,
    AgendaDay,
    AgendaSession,
    AgendaTimeslot,
    NowView,
    RawAgendaItem,
    parse_agenda_items,
)

logger = logging.getLogger(__name__)

DEFAULT_TIME_ZONE = "Europe/Amsterdam"

# run.events rejects shorter queries
MIN_SEARCH_LENGTH = 4


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------

def group_agenda(items: Iterable[RawAgendaItem]) -> Agenda:
    """Regroup flat items into days, then timeslots, then sessions.

    Days are keyed by the date part of ``startDate`` and timeslots by the
    upstream ``startTimeGroup`` label, both sorted lexically. Labels are
    zero-padded "HH:MM", so lexical order is chronological. Every item counts
    towards its slot's time bounds, but only Session items are listed.
    """
    by_date: dict[str, dict[str, list[RawAgendaItem]]] = {}
    for item in items:
        by_date.setdefault(item.date, {}).setdefault(item.start_time_group, []).append(item)

    days = []
    for date in sorted(by_date):
        groups = by_date[date]
        timeslots = [_build_timeslot(label, groups[label]) for label in sorted(groups)]
        days.append(AgendaDay(date=date, timeslots=timeslots))
    return Agenda(days=days)


def _build_timeslot(label: str, members: list[RawAgendaItem]) -> AgendaTimeslot:
    # Sessions in one slot may have different durations
    return AgendaTimeslot(
        start_time_group=label,
        start_date=min(m.start_date for m in members),
        end_date=max(m.end_date for m in members),
        sessions=[AgendaSession.from_raw(m) for m in members if m.is_session],
    )


# ---------------------------------------------------------------------------
# Now window
# ---------------------------------------------------------------------------

def event_time_zone(items: Sequence[RawAgendaItem], default: str = DEFAULT_TIME_ZONE) -> str:
    """The zone travels with the data; fall back only when there is none."""
    return items[0].time_zone if items else default


def local_now(time_zone: str, now: datetime | None = None) -> str:
    """Render ``now`` (default: the current instant) as a naive local string.

    ``now`` should be timezone-aware; a naive value is taken as system local
    time by ``astimezone``.
    """
    try:
        zone = ZoneInfo(time_zone)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise MalformedDataError(f"Unknown event time zone: {time_zone}") from e

    moment = datetime.now(zone) if now is None else now.astimezone(zone)
    return moment.strftime(LOCAL_DATETIME_FORMAT)


def compute_now_view(items: Iterable[RawAgendaItem], now_local: str) -> NowView:
    """Split sessions into the ones running at ``now_local`` and the next slot.

    A session is current when ``start <= now < end``. ``upNext`` holds every
    upcoming session in the earliest upcoming slot, identified by its date and
    time-group label, so parallel tracks starting together are all listed.
    """
    current: list[RawAgendaItem] = []
    upcoming: list[RawAgendaItem] = []
    for item in items:
        if not item.is_session:
            continue
        if item.start_date <= now_local < item.end_date:
            current.append(item)
        elif item.start_date > now_local:
            upcoming.append(item)

    upcoming.sort(key=lambda i: i.start_date)
    up_next: list[RawAgendaItem] = []
    if upcoming:
        first = upcoming[0]
        up_next = [
            i for i in upcoming
            if i.date == first.date and i.start_time_group == first.start_time_group
        ]

    return NowView(
        current=[AgendaSession.from_raw(i) for i in current],
        up_next=[AgendaSession.from_raw(i) for i in up_next],
    )


# ---------------------------------------------------------------------------
# Cache-through access
# ---------------------------------------------------------------------------

class EventAggregator:
    """Serves agenda, now-window and directory data for events.

    Every cache miss is single-flight per key: concurrent requests for the
    same key share one upstream fetch. The fetch runs as its own task and is
    awaited through ``asyncio.shield``, so an abandoned request still lets it
    finish and populate the cache. A failed fetch leaves any existing entry
    alone.
    """

    def __init__(
        self,
        client: RunEventsClient,
        cache: TTLCache,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        default_time_zone: str = DEFAULT_TIME_ZONE,
    ):
        self._client = client
        self._cache = cache
        self._ttl_seconds = ttl_seconds
        self._default_time_zone = default_time_zone
        self._inflight: dict[str, asyncio.Task] = {}

    async def _cached(self, key: str, load: Callable[[], Awaitable[Any]]) -> Any:
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        task = self._inflight.get(key)
        if task is None:
            logger.info("Cache miss for %s, fetching", key)
            task = asyncio.create_task(self._load_and_store(key, load))
            self._inflight[key] = task
            task.add_done_callback(lambda t: self._forget(key, t))
        return await asyncio.shield(task)

    async def _load_and_store(self, key: str, load: Callable[[], Awaitable[Any]]) -> Any:
        value = await load()
        self._cache.set(key, value, ttl_seconds=self._ttl_seconds)
        return value

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Mark the failure as retrieved when every waiter has gone away
        if not task.cancelled():
            task.exception()

    async def get_raw_items(self, slug: str) -> tuple[RawAgendaItem, ...]:
        async def load():
            payload = await self._client.fetch_agenda_items(slug)
            return tuple(parse_agenda_items(payload))

        return await self._cached(f"agenda-raw:{slug}", load)

    async def get_agenda(self, slug: str) -> Agenda:
        async def load():
            items = await self.get_raw_items(slug)
            agenda = group_agenda(items)
            logger.info("Grouped %d agenda items for %s into %d days", len(items), slug, len(agenda.days))
            return agenda

        return await self._cached(f"agenda:{slug}", load)

    async def get_now_view(self, slug: str, now: datetime | None = None) -> NowView:
        """Current and next sessions. Computed per call, never cached."""
        items = await self.get_raw_items(slug)
        now_local = local_now(event_time_zone(items, self._default_time_zone), now)
        return compute_now_view(items, now_local)

    async def get_speakers(self, slug: str) -> list[dict]:
        return await self._cached(f"speakers:{slug}", lambda: self._client.fetch_speakers(slug))

    async def get_booths(self, slug: str) -> list[dict]:
        return await self._cached(f"booths:{slug}", lambda: self._client.fetch_booths(slug))

    async def get_partnerships(self, slug: str) -> list[dict]:
        return await self._cached(f"partnerships:{slug}", lambda: self._client.fetch_partnerships(slug))

    async def search(self, slug: str, query: str) -> list[dict]:
        """Agenda search. Not cached, queries vary too much."""
        query = query.strip()
        if len(query) < MIN_SEARCH_LENGTH:
            raise SearchQueryTooShortError(MIN_SEARCH_LENGTH)
        return await self._client.search_agenda(slug, query)
