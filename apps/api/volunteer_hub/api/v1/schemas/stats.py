from __future__ import annotations

from volunteer_hub.api.v1.schemas.events import SchemaBase
from volunteer_hub.models.event import EventCategory


class VolunteerStatsOut(SchemaBase):
    total_events: int
    total_hours: int
    categories_participated: dict[EventCategory, int]
    upcoming_events: int
    rank: int
    level: str


class SweepOut(SchemaBase):
    events_completed: int
    participations_credited: int
    failed_event_ids: list[str]
