from __future__ import annotations

import uuid
from dataclasses import dataclass, field

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from volunteer_hub.models import Event, Participation, Volunteer
from volunteer_hub.models.event import OPEN_EVENT_STATUSES, EventCategory
from volunteer_hub.models.participation import (
    ACTIVE_PARTICIPATION_STATUSES,
    ParticipationStatus,
)
from volunteer_hub.services.error_codes import ErrorCode
from volunteer_hub.services.exceptions import NotFoundError

logger = structlog.get_logger()

DEFAULT_RANK = 1


def _empty_categories() -> dict[EventCategory, int]:
    return {category: 0 for category in EventCategory}


@dataclass
class VolunteerStats:
    total_events: int = 0
    total_hours: int = 0
    categories_participated: dict[EventCategory, int] = field(default_factory=_empty_categories)
    upcoming_events: int = 0
    rank: int = DEFAULT_RANK
    level: str = "beginner"


def level_for_hours(total_hours: int) -> str:
    if total_hours < 10:
        return "beginner"
    if total_hours < 30:
        return "experienced"
    return "expert"


def rank_for_volunteer(db: Session, volunteer_id: uuid.UUID) -> int:
    ordered_ids = db.scalars(
        select(Volunteer.id).order_by(
            Volunteer.total_hours.desc(),
            Volunteer.joined_at,
            Volunteer.id,
        )
    ).all()
    for position, candidate in enumerate(ordered_ids, start=1):
        if candidate == volunteer_id:
            return position
    return DEFAULT_RANK


def get_stats(db: Session, volunteer_id: uuid.UUID) -> VolunteerStats:
    """Derive a volunteer's statistics.

    Totals come from the volunteer's credited aggregates, not from recounting
    participations, so they stay in step with the sweeper. The participation
    scan and the ranking are secondary lookups: if either fails the stats are
    still returned, zeroed or with rank 1.
    """
    volunteer = db.get(Volunteer, volunteer_id)
    if not volunteer:
        raise NotFoundError(ErrorCode.VOLUNTEER_NOT_FOUND.value, "volunteer not found")

    stats = VolunteerStats(
        total_events=volunteer.events_attended or 0,
        total_hours=volunteer.total_hours or 0,
    )
    stats.level = level_for_hours(stats.total_hours)

    try:
        rows = db.execute(
            select(Participation.status, Event.status, Event.category)
            .join(Event, Event.id == Participation.event_id)
            .where(Participation.volunteer_id == volunteer_id)
        ).all()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("volunteer_participations_failed", volunteer_id=str(volunteer_id))
        rows = []

    for participation_status, event_status, category in rows:
        if (
            participation_status in ACTIVE_PARTICIPATION_STATUSES
            and event_status in OPEN_EVENT_STATUSES
        ):
            stats.upcoming_events += 1
        if participation_status == ParticipationStatus.ATTENDED:
            stats.categories_participated[category] += 1

    try:
        stats.rank = rank_for_volunteer(db, volunteer_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("volunteer_rank_failed", volunteer_id=str(volunteer_id))
        stats.rank = DEFAULT_RANK

    return stats
