"""Dependency providers for routes.

Shared objects are built once in the app lifespan and kept on ``app.state``;
tests swap them through ``app.dependency_overrides``.
"""

from fastapi import Request

from config import Settings, settings
from services.agenda import EventAggregator
from services.records import RecordStore


def get_config() -> Settings:
    return settings


def get_aggregator(request: Request) -> EventAggregator:
    return request.app.state.aggregator


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.record_store
