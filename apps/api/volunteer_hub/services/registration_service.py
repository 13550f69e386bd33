from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from volunteer_hub.models import Event, Participation, Volunteer
from volunteer_hub.models.event import OPEN_EVENT_STATUSES
from volunteer_hub.models.notification import NotificationType
from volunteer_hub.models.participation import (
    ACTIVE_PARTICIPATION_STATUSES,
    ParticipationStatus,
)
from volunteer_hub.services.error_codes import ErrorCode
from volunteer_hub.services.exceptions import (
    AlreadyRegisteredError,
    EventFullError,
    InvalidStateError,
    NotFoundError,
    RegistrationClosedError,
    ServiceError,
    StoreError,
    ValidationError,
)
from volunteer_hub.services.notifications_service import create_notification

logger = structlog.get_logger()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _store_error(exc: Exception) -> StoreError:
    return StoreError(ErrorCode.STORE_ERROR.value, f"store failure: {exc.__class__.__name__}")


def _lock_event(db: Session, event_id: Any) -> Event | None:
    # Row lock on PostgreSQL; other backends rely on the conditional counter updates.
    return db.scalar(select(Event).where(Event.id == event_id).with_for_update())


def register(
    db: Session,
    event_id: Any,
    volunteer_id: uuid.UUID,
    now: datetime | None = None,
) -> Participation:
    """Register a volunteer for an event.

    Preconditions are checked in order and the first failure wins: the event
    exists, it has not started (and is still open), the volunteer holds no
    live participation, and a seat is free. The seat is claimed with a
    conditional increment so concurrent callers can never overbook.
    """
    now = now or _now()
    try:
        event = _lock_event(db, event_id)
        if not event:
            raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "event not found")

        if as_utc(event.start_time) <= now:
            raise RegistrationClosedError(
                ErrorCode.REGISTRATION_CLOSED.value, "event already started"
            )
        if event.status not in OPEN_EVENT_STATUSES:
            raise RegistrationClosedError(
                ErrorCode.REGISTRATION_CLOSED.value, f"event is {event.status.value}"
            )

        existing = db.scalar(
            select(Participation.id)
            .where(
                Participation.event_id == event.id,
                Participation.volunteer_id == volunteer_id,
                Participation.status != ParticipationStatus.CANCELLED,
            )
            .limit(1)
        )
        if existing:
            raise AlreadyRegisteredError(
                ErrorCode.ALREADY_REGISTERED.value, "already registered for this event"
            )

        if event.current_participants >= event.max_participants:
            raise EventFullError(ErrorCode.EVENT_FULL.value, "event is full")

        claimed = db.execute(
            update(Event)
            .where(
                Event.id == event.id,
                Event.current_participants < Event.max_participants,
            )
            .values(current_participants=Event.current_participants + 1)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            raise EventFullError(ErrorCode.EVENT_FULL.value, "event is full")

        participation = Participation(
            event_id=event.id,
            volunteer_id=volunteer_id,
            status=ParticipationStatus.REGISTERED,
            hours_logged=0,
        )
        db.add(participation)
        db.commit()
    except ServiceError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        raise AlreadyRegisteredError(
            ErrorCode.ALREADY_REGISTERED.value, "already registered for this event"
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise _store_error(exc) from exc

    db.refresh(participation)
    logger.info(
        "participation_registered",
        event_id=str(participation.event_id),
        volunteer_id=str(volunteer_id),
    )
    create_notification(
        db,
        volunteer_id,
        "Registration confirmed",
        f'You are registered for "{event.title}".',
        NotificationType.EVENT,
        participation.event_id,
    )
    return participation


def cancel(db: Session, event_id: Any, volunteer_id: uuid.UUID) -> bool:
    """Cancel a volunteer's live registration.

    Returns False without side effects when there is nothing to cancel.
    """
    try:
        event = _lock_event(db, event_id)
        if not event:
            db.rollback()
            return False

        participation = db.scalar(
            select(Participation).where(
                Participation.event_id == event.id,
                Participation.volunteer_id == volunteer_id,
                Participation.status.in_(ACTIVE_PARTICIPATION_STATUSES),
            )
        )
        if not participation:
            db.rollback()
            return False

        moved = db.execute(
            update(Participation)
            .where(
                Participation.id == participation.id,
                Participation.status.in_(ACTIVE_PARTICIPATION_STATUSES),
            )
            .values(status=ParticipationStatus.CANCELLED)
            .execution_options(synchronize_session=False)
        )
        if moved.rowcount != 1:
            # Lost a race with confirm/sweep; nothing left to cancel.
            db.rollback()
            return False

        db.execute(
            update(Event)
            .where(Event.id == event.id, Event.current_participants > 0)
            .values(current_participants=Event.current_participants - 1)
            .execution_options(synchronize_session=False)
        )
        title = event.title
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise _store_error(exc) from exc

    logger.info("participation_cancelled", event_id=str(event_id), volunteer_id=str(volunteer_id))
    create_notification(
        db,
        volunteer_id,
        "Registration cancelled",
        f'Your registration for "{title}" was cancelled.',
        NotificationType.EVENT,
        participation.event_id,
    )
    return True


def _transition(
    db: Session,
    participation_id: Any,
    allowed: tuple[ParticipationStatus, ...],
    target: ParticipationStatus,
    **values: Any,
) -> Participation:
    participation = db.get(Participation, participation_id)
    if not participation:
        raise NotFoundError(ErrorCode.PARTICIPATION_NOT_FOUND.value, "participation not found")

    current = participation.status
    moved = db.execute(
        update(Participation)
        .where(Participation.id == participation.id, Participation.status.in_(allowed))
        .values(status=target, **values)
        .execution_options(synchronize_session=False)
    )
    if moved.rowcount != 1:
        db.rollback()
        raise InvalidStateError(
            ErrorCode.INVALID_STATE.value,
            f"cannot move a {current.value} participation to {target.value}",
        )
    return participation


def confirm(db: Session, participation_id: Any) -> Participation:
    try:
        participation = _transition(
            db,
            participation_id,
            (ParticipationStatus.REGISTERED,),
            ParticipationStatus.CONFIRMED,
        )
        db.commit()
    except ServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        raise _store_error(exc) from exc

    db.refresh(participation)
    return participation


def mark_attended(db: Session, participation_id: Any, hours_logged: int) -> Participation:
    """Mark attendance and credit the volunteer's aggregates in one transaction.

    The status update is conditional on the participation still being live, so
    a retried call never credits the same participation twice.
    """
    if hours_logged < 0:
        raise ValidationError(ErrorCode.VALIDATION_ERROR.value, "hours_logged must be >= 0")

    try:
        participation = db.get(Participation, participation_id)
        if not participation:
            raise NotFoundError(
                ErrorCode.PARTICIPATION_NOT_FOUND.value, "participation not found"
            )
        volunteer = db.get(Volunteer, participation.volunteer_id)
        if not volunteer:
            raise NotFoundError(ErrorCode.VOLUNTEER_NOT_FOUND.value, "volunteer not found")

        _transition(
            db,
            participation.id,
            ACTIVE_PARTICIPATION_STATUSES,
            ParticipationStatus.ATTENDED,
            hours_logged=hours_logged,
        )
        db.execute(
            update(Volunteer)
            .where(Volunteer.id == volunteer.id)
            .values(
                total_hours=Volunteer.total_hours + hours_logged,
                events_attended=Volunteer.events_attended + 1,
            )
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except ServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        raise _store_error(exc) from exc

    db.refresh(participation)
    logger.info(
        "participation_attended",
        participation_id=str(participation.id),
        volunteer_id=str(participation.volunteer_id),
        hours_logged=hours_logged,
    )
    create_notification(
        db,
        participation.volunteer_id,
        "Hours credited",
        f"{hours_logged} volunteer hours were added to your profile.",
        NotificationType.SYSTEM,
        participation.event_id,
    )
    return participation


def mark_no_show(db: Session, participation_id: Any) -> Participation:
    try:
        participation = _transition(
            db,
            participation_id,
            ACTIVE_PARTICIPATION_STATUSES,
            ParticipationStatus.NO_SHOW,
        )
        db.commit()
    except ServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        raise _store_error(exc) from exc

    db.refresh(participation)
    return participation


def list_event_participations(db: Session, event_id: Any) -> list[tuple[Participation, str | None]]:
    rows = db.execute(
        select(Participation, Volunteer.name)
        .outerjoin(Volunteer, Volunteer.id == Participation.volunteer_id)
        .where(Participation.event_id == event_id)
        .order_by(Participation.created_at)
    ).all()
    return [(participation, name) for participation, name in rows]


def list_volunteer_participations(
    db: Session, volunteer_id: uuid.UUID
) -> list[tuple[Participation, Event]]:
    rows = db.execute(
        select(Participation, Event)
        .join(Event, Event.id == Participation.event_id)
        .where(Participation.volunteer_id == volunteer_id)
        .order_by(Event.start_time)
    ).all()
    return [(participation, event) for participation, event in rows]
