from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from volunteer_hub.models.event import EventCategory, EventStatus


def _ensure_tzaware(value: datetime | None) -> datetime | None:
    if value is None:
        return value
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        raise ValueError("datetime must be timezone-aware")
    return value


class SchemaBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


class TZAwareMixin(BaseModel):
    @field_validator("start_time", "end_time", mode="after", check_fields=False)
    @classmethod
    def _validate_tzaware(cls, value: datetime | None) -> datetime | None:
        return _ensure_tzaware(value)


class EventCreate(TZAwareMixin, SchemaBase):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    location: str = ""
    start_time: datetime
    end_time: datetime
    max_participants: int = Field(ge=1)
    category: EventCategory = EventCategory.OTHER
    hours: int = Field(ge=1)

    @model_validator(mode="after")
    def _validate_time_bounds(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class EventUpdate(TZAwareMixin, SchemaBase):
    # current_participants is deliberately absent: only registrations move it.
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    location: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    max_participants: int | None = Field(default=None, ge=1)
    category: EventCategory | None = None
    hours: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _validate_time_bounds(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class EventOut(SchemaBase):
    id: UUID
    title: str
    description: str
    location: str
    start_time: datetime
    end_time: datetime
    max_participants: int
    current_participants: int
    category: EventCategory
    status: EventStatus
    hours: int
    organizer_id: UUID
    created_at: datetime
    updated_at: datetime


class EventListOut(SchemaBase):
    items: list[EventOut]
    page: int = Field(ge=1)
    page_size: int = Field(ge=1)
    total: int = Field(ge=0)


class RegistrationStatus(str, Enum):
    REGISTERED = "registered"
    CANCELLED = "cancelled"
    NOT_REGISTERED = "not_registered"


class RegistrationOut(SchemaBase):
    status: RegistrationStatus
    event_id: UUID
    volunteer_id: UUID
    participation_id: UUID | None = None
