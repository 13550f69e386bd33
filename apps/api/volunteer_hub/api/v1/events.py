from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from volunteer_hub.api.errors import http_error_from_service
from volunteer_hub.api.v1.schemas import (
    EventCreate,
    EventListOut,
    EventOut,
    EventParticipationOut,
    EventUpdate,
    ParticipationOut,
    RegistrationOut,
    RegistrationStatus,
)
from volunteer_hub.auth.deps import CurrentOrganizer, CurrentVolunteer
from volunteer_hub.db import get_db
from volunteer_hub.models.event import EventCategory, EventStatus
from volunteer_hub.services import events_service, registration_service
from volunteer_hub.services.exceptions import ServiceError

router = APIRouter(prefix="/events", tags=["events"])

DBSession = Annotated[Session, Depends(get_db)]


@router.get("", response_model=EventListOut)
def list_events(
    db: DBSession,
    status: EventStatus | None = None,
    category: EventCategory | None = None,
    upcoming: bool = False,
    organizer_id: UUID | None = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
):
    items, total = events_service.list_events(
        db,
        status=status,
        category=category,
        upcoming_only=upcoming,
        organizer_id=organizer_id,
        page=page,
        page_size=page_size,
    )
    return EventListOut(
        items=[EventOut.model_validate(item) for item in items],
        page=page,
        page_size=page_size,
        total=total,
    )


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: UUID, db: DBSession):
    try:
        return events_service.get_event(db, event_id)
    except ServiceError as exc:
        raise http_error_from_service(exc) from exc


@router.post("", response_model=EventOut, status_code=201)
def create_event(payload: EventCreate, organizer: CurrentOrganizer, db: DBSession):
    try:
        return events_service.create_event(db, organizer, payload)
    except ServiceError as exc:
        raise http_error_from_service(exc) from exc


@router.patch("/{event_id}", response_model=EventOut)
def update_event(event_id: UUID, patch: EventUpdate, organizer: CurrentOrganizer, db: DBSession):
    try:
        return events_service.update_event(db, organizer, event_id, patch)
    except ServiceError as exc:
        raise http_error_from_service(exc) from exc


@router.post("/{event_id}/cancel", response_model=EventOut)
def cancel_event(event_id: UUID, organizer: CurrentOrganizer, db: DBSession):
    try:
        return events_service.cancel_event(db, organizer, event_id)
    except ServiceError as exc:
        raise http_error_from_service(exc) from exc


@router.delete("/{event_id}", status_code=204)
def delete_event(event_id: UUID, organizer: CurrentOrganizer, db: DBSession):
    try:
        events_service.delete_event(db, organizer, event_id)
    except ServiceError as exc:
        raise http_error_from_service(exc) from exc
    return Response(status_code=204)


@router.post("/{event_id}/registration", response_model=ParticipationOut, status_code=201)
def register(event_id: UUID, volunteer: CurrentVolunteer, db: DBSession):
    try:
        return registration_service.register(db, event_id, volunteer.id)
    except ServiceError as exc:
        raise http_error_from_service(exc) from exc


@router.delete("/{event_id}/registration", response_model=RegistrationOut)
def cancel_registration(event_id: UUID, volunteer: CurrentVolunteer, db: DBSession):
    volunteer_id = volunteer.id
    try:
        cancelled = registration_service.cancel(db, event_id, volunteer_id)
    except ServiceError as exc:
        raise http_error_from_service(exc) from exc

    return RegistrationOut(
        status=RegistrationStatus.CANCELLED if cancelled else RegistrationStatus.NOT_REGISTERED,
        event_id=event_id,
        volunteer_id=volunteer_id,
    )


@router.get("/{event_id}/participations", response_model=list[EventParticipationOut])
def list_participations(event_id: UUID, organizer: CurrentOrganizer, db: DBSession):
    try:
        events_service.get_managed_event(db, organizer, event_id)
    except ServiceError as exc:
        raise http_error_from_service(exc) from exc

    rows = registration_service.list_event_participations(db, event_id)
    return [
        EventParticipationOut.model_validate(participation).model_copy(
            update={"volunteer_name": name}
        )
        for participation, name in rows
    ]
