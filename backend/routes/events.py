"""Kiosk-facing event routes.

Agenda, now-window and directory data come from run.events through the
EventAggregator (cached); sponsors, floor maps and config overrides come
from the admin record store.

Only the configured event slug is served; anything else is a 404.
"""

from fastapi import APIRouter, Depends, Query

from config import Settings
from dependencies import get_aggregator, get_config, get_record_store
from errors import EventNotFoundError
from services.agenda import EventAggregator
from services.records import EVENT_CONFIGS, FLOOR_MAPS, SPONSORS, RecordStore
from services.schemas import Agenda, NowView

DEFAULT_BRANDING = {
    "primaryColor": "#0082C8",
    "secondaryColor": "#1B2A5B",
    "backgroundColor": "#0F1629",
    "textColor": "#FFFFFF",
    "fontFamily": "Nunito",
}


def require_event(slug: str, config: Settings = Depends(get_config)) -> None:
    if slug != config.event_slug:
        raise EventNotFoundError(slug)


router = APIRouter(prefix="/api/events", dependencies=[Depends(require_event)])


@router.get("/{slug}/config")
async def event_config(
    slug: str,
    config: Settings = Depends(get_config),
    store: RecordStore = Depends(get_record_store),
) -> dict:
    """Public event config: stored admin overrides on top of env defaults."""
    result = {
        "slug": slug,
        "name": config.event_name,
        "timezone": config.default_time_zone,
        "languages": config.languages,
        "defaultLanguage": config.default_language,
        "branding": DEFAULT_BRANDING,
        "days": [],
    }
    stored = store.find_by_id(EVENT_CONFIGS, slug, slug)
    if stored:
        # Never expose the upstream key through the public config
        stored.pop("apiKey", None)
        stored.pop("id", None)
        result.update(stored)
        result["branding"] = {**DEFAULT_BRANDING, **(stored.get("branding") or {})}
    return result


@router.get("/{slug}/agenda", response_model=Agenda)
async def agenda(
    slug: str,
    aggregator: EventAggregator = Depends(get_aggregator),
) -> Agenda:
    return await aggregator.get_agenda(slug)


@router.get("/{slug}/sessions/now", response_model=NowView)
async def sessions_now(
    slug: str,
    aggregator: EventAggregator = Depends(get_aggregator),
) -> NowView:
    return await aggregator.get_now_view(slug)


@router.get("/{slug}/speakers")
async def speakers(
    slug: str,
    aggregator: EventAggregator = Depends(get_aggregator),
) -> list[dict]:
    return await aggregator.get_speakers(slug)


@router.get("/{slug}/booths")
async def booths(
    slug: str,
    aggregator: EventAggregator = Depends(get_aggregator),
) -> list[dict]:
    return await aggregator.get_booths(slug)


@router.get("/{slug}/partnerships")
async def partnerships(
    slug: str,
    aggregator: EventAggregator = Depends(get_aggregator),
) -> list[dict]:
    return await aggregator.get_partnerships(slug)


@router.get("/{slug}/search")
async def search(
    slug: str,
    q: str = Query(""),
    aggregator: EventAggregator = Depends(get_aggregator),
) -> list[dict]:
    return await aggregator.search(slug, q)


@router.get("/{slug}/sponsors")
async def sponsors(
    slug: str,
    store: RecordStore = Depends(get_record_store),
) -> list[dict]:
    return store.find_all(SPONSORS, slug)


@router.get("/{slug}/floor-maps")
async def floor_maps(
    slug: str,
    store: RecordStore = Depends(get_record_store),
) -> list[dict]:
    return store.find_all(FLOOR_MAPS, slug)
