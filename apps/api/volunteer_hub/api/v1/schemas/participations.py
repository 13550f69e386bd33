from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

from volunteer_hub.api.v1.schemas.events import EventOut, SchemaBase
from volunteer_hub.models.participation import ParticipationStatus


class ParticipationOut(SchemaBase):
    id: UUID
    event_id: UUID
    volunteer_id: UUID
    status: ParticipationStatus
    hours_logged: int
    feedback: str | None = None
    created_at: datetime
    updated_at: datetime


class EventParticipationOut(ParticipationOut):
    volunteer_name: str | None = None


class VolunteerParticipationOut(ParticipationOut):
    event: EventOut


class AttendanceIn(SchemaBase):
    # Defaults to the event's listed hours when omitted.
    hours_logged: int | None = Field(default=None, ge=0)
