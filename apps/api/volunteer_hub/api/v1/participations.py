from __future__ import annotations

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from volunteer_hub.api.errors import http_error_from_service
from volunteer_hub.api.v1.schemas import AttendanceIn, ParticipationOut
from volunteer_hub.auth.deps import CurrentOrganizer
from volunteer_hub.db import get_db
from volunteer_hub.models import Event, Organizer, Participation
from volunteer_hub.services import events_service, registration_service
from volunteer_hub.services.error_codes import ErrorCode
from volunteer_hub.services.exceptions import NotFoundError, ServiceError

router = APIRouter(prefix="/participations", tags=["participations"])

DBSession = Annotated[Session, Depends(get_db)]


def _managed_participation(
    db: Session, organizer: Organizer, participation_id: Any
) -> tuple[Participation, Event]:
    participation = db.get(Participation, participation_id)
    if not participation:
        raise NotFoundError(ErrorCode.PARTICIPATION_NOT_FOUND.value, "participation not found")
    event = events_service.get_managed_event(db, organizer, participation.event_id)
    return participation, event


@router.post("/{participation_id}/confirm", response_model=ParticipationOut)
def confirm(participation_id: UUID, organizer: CurrentOrganizer, db: DBSession):
    try:
        _managed_participation(db, organizer, participation_id)
        return registration_service.confirm(db, participation_id)
    except ServiceError as exc:
        raise http_error_from_service(exc) from exc


@router.post("/{participation_id}/attendance", response_model=ParticipationOut)
def mark_attended(
    participation_id: UUID,
    organizer: CurrentOrganizer,
    db: DBSession,
    payload: AttendanceIn = Body(default_factory=AttendanceIn),
):
    try:
        _, event = _managed_participation(db, organizer, participation_id)
        hours = payload.hours_logged if payload.hours_logged is not None else event.hours
        return registration_service.mark_attended(db, participation_id, hours)
    except ServiceError as exc:
        raise http_error_from_service(exc) from exc


@router.post("/{participation_id}/no-show", response_model=ParticipationOut)
def mark_no_show(participation_id: UUID, organizer: CurrentOrganizer, db: DBSession):
    try:
        _managed_participation(db, organizer, participation_id)
        return registration_service.mark_no_show(db, participation_id)
    except ServiceError as exc:
        raise http_error_from_service(exc) from exc
