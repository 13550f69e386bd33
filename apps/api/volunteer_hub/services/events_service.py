from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from volunteer_hub.api.v1.schemas.events import EventCreate, EventUpdate
from volunteer_hub.models import Event, Organizer, Participation
from volunteer_hub.models.event import OPEN_EVENT_STATUSES, EventCategory, EventStatus
from volunteer_hub.models.notification import NotificationType
from volunteer_hub.models.participation import ACTIVE_PARTICIPATION_STATUSES
from volunteer_hub.services.error_codes import ErrorCode
from volunteer_hub.services.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from volunteer_hub.services.notifications_service import create_notification
from volunteer_hub.services.registration_service import as_utc

logger = structlog.get_logger()


def _require_manage_permission(organizer: Organizer, event: Event) -> None:
    if event.organizer_id != organizer.id:
        raise PermissionDeniedError(
            ErrorCode.NOT_EVENT_ORGANIZER.value, "not organizer for this event"
        )


def get_event(db: Session, event_id: Any) -> Event:
    event = db.get(Event, event_id)
    if not event:
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "event not found")
    return event


def get_managed_event(db: Session, organizer: Organizer, event_id: Any) -> Event:
    event = get_event(db, event_id)
    _require_manage_permission(organizer, event)
    return event


def list_events(
    db: Session,
    status: EventStatus | None = None,
    category: EventCategory | None = None,
    upcoming_only: bool = False,
    organizer_id: Any | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Event], int]:
    filters = []
    if status is not None:
        filters.append(Event.status == status)
    if category is not None:
        filters.append(Event.category == category)
    if organizer_id is not None:
        filters.append(Event.organizer_id == organizer_id)
    if upcoming_only:
        filters.append(Event.start_time > datetime.now(timezone.utc))
        filters.append(Event.status.in_(OPEN_EVENT_STATUSES))

    total = int(db.scalar(select(func.count()).select_from(Event).where(*filters)) or 0)
    items = db.scalars(
        select(Event)
        .where(*filters)
        .order_by(Event.start_time)
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).all()
    return list(items), total


def create_event(db: Session, organizer: Organizer, payload: EventCreate) -> Event:
    event = Event(
        title=payload.title,
        description=payload.description,
        location=payload.location,
        start_time=payload.start_time,
        end_time=payload.end_time,
        max_participants=payload.max_participants,
        current_participants=0,
        category=payload.category,
        status=EventStatus.UPCOMING,
        hours=payload.hours,
        organizer_id=organizer.id,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("event_created", event_id=str(event.id), organizer_id=str(organizer.id))
    return event


def update_event(db: Session, organizer: Organizer, event_id: Any, patch: EventUpdate) -> Event:
    event = db.scalar(select(Event).where(Event.id == event_id).with_for_update())
    if not event:
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "event not found")

    _require_manage_permission(organizer, event)

    if event.status not in OPEN_EVENT_STATUSES:
        db.rollback()
        raise InvalidStateError(
            ErrorCode.INVALID_STATE.value, f"cannot edit a {event.status.value} event"
        )

    patch_data = patch.model_dump(exclude_unset=True)
    # Explicit nulls mean "leave as is" for required columns.
    patch_data = {key: value for key, value in patch_data.items() if value is not None}

    if "max_participants" in patch_data:
        if patch_data["max_participants"] < event.current_participants:
            db.rollback()
            raise ConflictError(
                ErrorCode.CAPACITY_BELOW_PARTICIPANTS.value,
                "max_participants cannot be below current participants",
            )

    new_start = as_utc(patch_data.get("start_time", event.start_time))
    new_end = as_utc(patch_data.get("end_time", event.end_time))
    if new_end <= new_start:
        db.rollback()
        raise ValidationError(ErrorCode.VALIDATION_ERROR.value, "end_time must be after start_time")

    for key, value in patch_data.items():
        setattr(event, key, value)

    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def cancel_event(db: Session, organizer: Organizer, event_id: Any) -> Event:
    event = get_managed_event(db, organizer, event_id)

    if event.status not in OPEN_EVENT_STATUSES:
        raise InvalidStateError(
            ErrorCode.INVALID_STATE.value, f"cannot cancel a {event.status.value} event"
        )

    event.status = EventStatus.CANCELLED
    db.add(event)
    db.commit()
    db.refresh(event)

    volunteer_ids = db.scalars(
        select(Participation.volunteer_id).where(
            Participation.event_id == event.id,
            Participation.status.in_(ACTIVE_PARTICIPATION_STATUSES),
        )
    ).all()
    for volunteer_id in volunteer_ids:
        create_notification(
            db,
            volunteer_id,
            "Event cancelled",
            f'The event "{event.title}" has been cancelled by the organizer.',
            NotificationType.EVENT,
            event.id,
        )

    logger.info("event_cancelled", event_id=str(event.id), notified=len(volunteer_ids))
    return event


def delete_event(db: Session, organizer: Organizer, event_id: Any) -> None:
    event = get_managed_event(db, organizer, event_id)

    # Explicit cascade; SQLite does not enforce ON DELETE without a pragma.
    result = db.execute(delete(Participation).where(Participation.event_id == event.id))
    db.delete(event)
    db.commit()
    logger.info("event_deleted", event_id=str(event_id), participations_deleted=result.rowcount)
