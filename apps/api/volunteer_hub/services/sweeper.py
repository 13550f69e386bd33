"""Time-based reconciliation of events and attendance.

Events whose end time has passed while still upcoming/ongoing become
completed, and their confirmed participants are credited the event's listed
hours. Registered-but-never-confirmed participants are left untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from volunteer_hub.models import Event, Participation
from volunteer_hub.models.event import OPEN_EVENT_STATUSES, EventStatus
from volunteer_hub.models.participation import ParticipationStatus
from volunteer_hub.services.exceptions import InvalidStateError, ServiceError
from volunteer_hub.services.registration_service import mark_attended

logger = structlog.get_logger()


@dataclass
class SweepResult:
    events_completed: int = 0
    participations_credited: int = 0
    failed_event_ids: list[str] = field(default_factory=list)


def _still_open(db: Session, event_id: Any) -> bool:
    # Row lock on PostgreSQL; a cancel landing after the due-event read wins.
    return (
        db.scalar(
            select(Event.id)
            .where(Event.id == event_id, Event.status.in_(OPEN_EVENT_STATUSES))
            .with_for_update()
        )
        is not None
    )


def _complete_event(db: Session, event_id: Any, hours: int) -> tuple[bool, int]:
    if not _still_open(db, event_id):
        db.rollback()
        return False, 0

    confirmed_ids = db.scalars(
        select(Participation.id).where(
            Participation.event_id == event_id,
            Participation.status == ParticipationStatus.CONFIRMED,
        )
    ).all()

    credited = 0
    for position, participation_id in enumerate(confirmed_ids):
        # Each credit commits on its own, so re-check before the next one.
        if position and not _still_open(db, event_id):
            db.rollback()
            return False, credited
        try:
            mark_attended(db, participation_id, hours)
        except InvalidStateError:
            # Cancelled or credited since the snapshot was read.
            continue
        credited += 1

    # The event only leaves the open set once every credit above went through,
    # so a partial failure is picked up again by the next sweep.
    moved = db.execute(
        update(Event)
        .where(Event.id == event_id, Event.status.in_(OPEN_EVENT_STATUSES))
        .values(status=EventStatus.COMPLETED)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return moved.rowcount == 1, credited


def run_sweep(db: Session, now: datetime | None = None) -> SweepResult:
    now = now or datetime.now(timezone.utc)
    result = SweepResult()

    due = db.execute(
        select(Event.id, Event.hours).where(
            Event.status.in_(OPEN_EVENT_STATUSES),
            Event.end_time < now,
        )
    ).all()
    db.rollback()

    for event_id, hours in due:
        try:
            completed, credited = _complete_event(db, event_id, hours)
        except (ServiceError, SQLAlchemyError):
            db.rollback()
            result.failed_event_ids.append(str(event_id))
            logger.exception("sweep_event_failed", event_id=str(event_id))
            continue
        if completed:
            result.events_completed += 1
        result.participations_credited += credited

    if due:
        logger.info(
            "sweep_finished",
            events_completed=result.events_completed,
            participations_credited=result.participations_credited,
            failed=len(result.failed_event_ids),
        )
    return result
