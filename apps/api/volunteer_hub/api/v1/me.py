from __future__ import annotations

from datetime import datetime
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from volunteer_hub.api.errors import http_error_from_service
from volunteer_hub.api.v1.schemas import (
    EventOut,
    ParticipationOut,
    VolunteerParticipationOut,
    VolunteerStatsOut,
)
from volunteer_hub.auth.deps import CurrentVolunteer
from volunteer_hub.db import get_db
from volunteer_hub.services import registration_service, stats_service, sweeper
from volunteer_hub.services.exceptions import ServiceError

router = APIRouter(prefix="/me", tags=["me"])

DBSession = Annotated[Session, Depends(get_db)]

logger = structlog.get_logger()


class MeOut(BaseModel):
    volunteer_id: str
    name: str
    email: str
    total_hours: int
    events_attended: int
    joined_at: datetime


@router.get("", response_model=MeOut)
def me(volunteer: CurrentVolunteer):
    return MeOut(
        volunteer_id=str(volunteer.id),
        name=volunteer.name,
        email=volunteer.email,
        total_hours=volunteer.total_hours,
        events_attended=volunteer.events_attended,
        joined_at=volunteer.joined_at,
    )


@router.get("/participations", response_model=list[VolunteerParticipationOut])
def my_participations(volunteer: CurrentVolunteer, db: DBSession):
    rows = registration_service.list_volunteer_participations(db, volunteer.id)
    return [
        VolunteerParticipationOut(
            **ParticipationOut.model_validate(participation).model_dump(),
            event=EventOut.model_validate(event),
        )
        for participation, event in rows
    ]


@router.get("/stats", response_model=VolunteerStatsOut)
def my_stats(volunteer: CurrentVolunteer, db: DBSession):
    volunteer_id = volunteer.id
    # Bring completed events and credited hours up to date before reading.
    try:
        sweeper.run_sweep(db)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("stats_presweep_failed", volunteer_id=str(volunteer_id))

    try:
        stats = stats_service.get_stats(db, volunteer_id)
    except ServiceError as exc:
        raise http_error_from_service(exc) from exc
    return VolunteerStatsOut.model_validate(stats)
