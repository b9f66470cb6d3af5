"""Pytest configuration and fixtures"""

import os

# Settings are read at import time
os.environ.setdefault("EVENT_SLUG", "test-event")
os.environ.setdefault("RUN_EVENTS_API_KEY", "test-key")
os.environ.setdefault("RUN_EVENTS_API_BASE", "https://upstream.test")

import httpx
import pytest

from services.cache import TTLCache

SLUG = "test-event"


class FakeClock:
    """Manually advanced monotonic clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """Canned run.events responses served through httpx.MockTransport."""

    def __init__(self):
        self.routes: dict[tuple[str, str], object] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, json=None, status_code: int = 200, text: str | None = None):
        self.routes[(method, path)] = (status_code, json, text)

    def fail(self, method: str, path: str, exc: Exception):
        self.routes[(method, path)] = exc

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, text="no such route")
        if isinstance(route, Exception):
            raise route
        status_code, json, text = route
        if text is not None:
            return httpx.Response(status_code, text=text)
        return httpx.Response(status_code, json=json)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def make_item(**overrides) -> dict:
    """A valid run.events agenda item in wire format."""
    item = {
        "id": 1,
        "guid": "a1b2c3",
        "elementType": "Session",
        "title": "Keynote",
        "description": "Opening keynote",
        "roomName": "Main Hall",
        "roomId": 10,
        "startDate": "2026-06-01T08:30:00",
        "endDate": "2026-06-01T09:15:00",
        "startTimeGroup": "08:30",
        "timeZone": "Europe/Amsterdam",
        "speakers": [{"id": "s1", "name": "Ada Lovelace"}],
        "labels": [{"name": "Keynote", "showInElement": True}],
    }
    item.update(overrides)
    return item


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache:
    return TTLCache(clock=clock)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()
