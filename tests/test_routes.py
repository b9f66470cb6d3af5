"""HTTP route tests"""

import pytest
from httpx import ASGITransport, AsyncClient

from app import create_app
from conftest import SLUG, make_item
from dependencies import get_aggregator, get_record_store
from services.agenda import EventAggregator
from services.records import EVENT_CONFIGS, SPONSORS, InMemoryRecordStore
from services.run_events import RunEventsClient


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
async def run_events(upstream):
    client = RunEventsClient("test-key", "https://upstream.test", transport=upstream.transport)
    yield client
    await client.aclose()


@pytest.fixture
async def client(run_events, cache, store):
    app = create_app()
    aggregator = EventAggregator(run_events, cache)
    app.dependency_overrides[get_aggregator] = lambda: aggregator
    app.dependency_overrides[get_record_store] = lambda: store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestHealthEndpoints:
    async def test_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "timestamp" in data

    async def test_ready(self, client):
        response = await client.get("/ready")
        assert response.json()["status"] == "ok"

    async def test_security_headers(self, client):
        response = await client.get("/ready")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"


class TestAgendaEndpoints:
    async def test_agenda(self, client, upstream):
        upstream.add(
            "POST",
            f"/v2/events/{SLUG}/agenda",
            json=[
                make_item(id=2, startDate="2026-06-02T09:00:00", endDate="2026-06-02T10:00:00", startTimeGroup="09:00"),
                make_item(id=1),
            ],
        )

        response = await client.get(f"/api/events/{SLUG}/agenda")

        assert response.status_code == 200
        days = response.json()["days"]
        assert [d["date"] for d in days] == ["2026-06-01", "2026-06-02"]
        slot = days[0]["timeslots"][0]
        assert slot["startTimeGroup"] == "08:30"
        assert slot["sessions"][0]["elementType"] == "Session"

    async def test_agenda_served_from_cache(self, client, upstream):
        upstream.add("POST", f"/v2/events/{SLUG}/agenda", json=[make_item()])

        await client.get(f"/api/events/{SLUG}/agenda")
        await client.get(f"/api/events/{SLUG}/agenda")
        await client.get(f"/api/events/{SLUG}/sessions/now")

        assert len(upstream.requests) == 1

    async def test_now_view_shape(self, client, upstream):
        upstream.add("POST", f"/v2/events/{SLUG}/agenda", json=[])

        response = await client.get(f"/api/events/{SLUG}/sessions/now")

        assert response.status_code == 200
        assert response.json() == {"current": [], "upNext": []}

    async def test_upstream_failure_is_502(self, client, upstream):
        upstream.add("POST", f"/v2/events/{SLUG}/agenda", status_code=500, text="boom")

        response = await client.get(f"/api/events/{SLUG}/agenda")

        assert response.status_code == 502
        assert "error" in response.json()

    async def test_malformed_payload_is_502(self, client, upstream):
        upstream.add("POST", f"/v2/events/{SLUG}/agenda", json=[{"id": 1}])

        response = await client.get(f"/api/events/{SLUG}/agenda")

        assert response.status_code == 502

    async def test_unknown_event_is_404(self, client, upstream):
        response = await client.get("/api/events/some-other-event/agenda")

        assert response.status_code == 404
        assert response.json() == {"error": "Event not found"}
        assert upstream.requests == []


class TestDirectoryEndpoints:
    @pytest.mark.parametrize("resource", ["speakers", "booths", "partnerships"])
    async def test_proxied_lists(self, client, upstream, resource):
        upstream.add("POST", f"/v2/events/{SLUG}/{resource}", json=[{"id": "x1"}])

        response = await client.get(f"/api/events/{SLUG}/{resource}")

        assert response.status_code == 200
        assert response.json() == [{"id": "x1"}]

    async def test_search(self, client, upstream):
        upstream.add("GET", f"/v2/events/{SLUG}/agenda/search", json=[{"id": 3}])

        response = await client.get(f"/api/events/{SLUG}/search", params={"q": "security"})

        assert response.status_code == 200
        assert response.json() == [{"id": 3}]
        assert upstream.requests[0].url.params["q"] == "security"

    async def test_short_search_is_400(self, client, upstream):
        response = await client.get(f"/api/events/{SLUG}/search", params={"q": "abc"})

        assert response.status_code == 400
        assert "at least 4" in response.json()["error"]
        assert upstream.requests == []


class TestStoredRecordEndpoints:
    async def test_sponsors(self, client, store):
        store.upsert(SPONSORS, SLUG, {"id": "sp1", "name": "Contoso", "sortOrder": 1})

        response = await client.get(f"/api/events/{SLUG}/sponsors")

        assert response.json() == [{"id": "sp1", "name": "Contoso", "sortOrder": 1}]

    async def test_floor_maps_empty(self, client):
        response = await client.get(f"/api/events/{SLUG}/floor-maps")
        assert response.json() == []

    async def test_config_defaults(self, client):
        response = await client.get(f"/api/events/{SLUG}/config")

        data = response.json()
        assert data["slug"] == SLUG
        assert data["timezone"] == "Europe/Amsterdam"
        assert data["branding"]["primaryColor"] == "#0082C8"
        assert "apiKey" not in data

    async def test_config_overrides_hide_api_key(self, client, store):
        store.upsert(
            EVENT_CONFIGS,
            SLUG,
            {"id": SLUG, "name": "Custom", "apiKey": "secret", "branding": {"primaryColor": "#FF0000"}},
        )

        data = (await client.get(f"/api/events/{SLUG}/config")).json()

        assert data["name"] == "Custom"
        assert "apiKey" not in data
        assert data["branding"]["primaryColor"] == "#FF0000"
        assert data["branding"]["textColor"] == "#FFFFFF"

    async def test_config_with_null_branding_uses_defaults(self, client, store):
        store.upsert(EVENT_CONFIGS, SLUG, {"id": SLUG, "branding": None})

        response = await client.get(f"/api/events/{SLUG}/config")

        assert response.status_code == 200
        assert response.json()["branding"]["primaryColor"] == "#0082C8"

    async def test_sponsors_with_mixed_sort_order(self, client, store):
        store.upsert(SPONSORS, SLUG, {"id": "sp1", "sortOrder": 2})
        store.upsert(SPONSORS, SLUG, {"id": "sp2", "sortOrder": None})

        response = await client.get(f"/api/events/{SLUG}/sponsors")

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == ["sp2", "sp1"]
