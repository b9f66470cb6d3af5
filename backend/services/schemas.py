"""Typed shapes for run.events agenda data and the aggregated kiosk views.

Raw items are validated strictly at ingestion. Grouping and the now-window
compare ``startDate``/``endDate`` as plain strings, which is only correct
while every value is a fixed-width, zero-padded ``YYYY-MM-DDTHH:MM:SS`` local
time without UTC offset. Values in any other shape are rejected here rather
than misordered later.
"""

import logging
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from errors import MalformedDataError

logger = logging.getLogger(__name__)

LOCAL_DATETIME_PATTERN = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$"
TIME_GROUP_PATTERN = r"^\d{2}:\d{2}$"
LOCAL_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


class ElementType(str, Enum):
    SESSION = "Session"
    NON_CONTENT_BLOCK = "NonContentBlock"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class RawAgendaItem(_CamelModel):
    """One flat schedule record as run.events returns it."""

    model_config = ConfigDict(extra="ignore")

    id: int
    guid: str | None = None
    element_type: ElementType
    title: str
    description: str | None = None
    room_name: str | None = None
    room_id: int | str | None = None
    start_date: str = Field(pattern=LOCAL_DATETIME_PATTERN)
    end_date: str = Field(pattern=LOCAL_DATETIME_PATTERN)
    start_time_group: str = Field(pattern=TIME_GROUP_PATTERN)
    time_zone: str = Field(min_length=1)
    speakers: list[dict[str, Any]] = Field(default_factory=list)
    labels: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("time_zone")
    @classmethod
    def check_time_zone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            raise ValueError(f"unknown time zone {value!r}") from e
        return value

    @property
    def date(self) -> str:
        return self.start_date[:10]

    @property
    def is_session(self) -> bool:
        return self.element_type is ElementType.SESSION


class AgendaSession(_CamelModel):
    id: int
    guid: str | None = None
    element_type: ElementType
    title: str
    description: str | None = None
    room_name: str | None = None
    room_id: int | str | None = None
    start_date: str
    end_date: str
    start_time_group: str
    speakers: list[dict[str, Any]] = Field(default_factory=list)
    labels: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_raw(cls, item: RawAgendaItem) -> "AgendaSession":
        return cls(
            id=item.id,
            guid=item.guid,
            element_type=item.element_type,
            title=item.title,
            description=item.description,
            room_name=item.room_name,
            room_id=item.room_id,
            start_date=item.start_date,
            end_date=item.end_date,
            start_time_group=item.start_time_group,
            speakers=item.speakers,
            labels=item.labels,
        )


class AgendaTimeslot(_CamelModel):
    start_time_group: str
    start_date: str
    end_date: str
    sessions: list[AgendaSession]


class AgendaDay(_CamelModel):
    date: str
    timeslots: list[AgendaTimeslot]


class Agenda(_CamelModel):
    days: list[AgendaDay]


class NowView(_CamelModel):
    current: list[AgendaSession]
    up_next: list[AgendaSession]


def parse_agenda_items(payload: Any) -> list[RawAgendaItem]:
    """Validate a decoded run.events agenda payload.

    Raises MalformedDataError on the first item that fails the schema; a
    partial list is never returned.
    """
    if not isinstance(payload, list):
        raise MalformedDataError(
            f"Expected a list of agenda items, got {type(payload).__name__}"
        )

    items = []
    for index, raw in enumerate(payload):
        try:
            items.append(RawAgendaItem.model_validate(raw))
        except ValidationError as e:
            logger.warning("Rejecting agenda payload, item %d invalid: %s", index, e)
            raise MalformedDataError(f"Agenda item {index} is malformed: {e}") from e
    return items
