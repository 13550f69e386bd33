from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from volunteer_hub.auth.jwt import Principal, Role, principal_from_claims, verify_access_token
from volunteer_hub.db import get_db
from volunteer_hub.models import Organizer, Volunteer

DBSession = Annotated[Session, Depends(get_db)]


def _unauthorized(detail: str = "unauthorized") -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_principal(request: Request) -> Principal:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        raise _unauthorized("missing bearer token")

    token = auth.removeprefix("Bearer ").strip()
    try:
        return principal_from_claims(verify_access_token(token))
    except ValueError as exc:
        raise _unauthorized(str(exc)) from None


CurrentPrincipal = Annotated[Principal, Depends(get_principal)]


def _display_name(principal: Principal) -> str:
    if principal.name:
        return principal.name
    if principal.email:
        return principal.email.split("@", 1)[0]
    return "volunteer"


def get_current_volunteer(principal: CurrentPrincipal, db: DBSession) -> Volunteer:
    if principal.role != Role.VOLUNTEER:
        raise HTTPException(status_code=403, detail="volunteer role required")

    volunteer = db.get(Volunteer, principal.user_id)
    if volunteer:
        return volunteer

    # First request from a new identity: create the volunteer profile.
    volunteer = Volunteer(
        id=principal.user_id,
        name=_display_name(principal),
        email=principal.email or "",
        skills=[],
    )
    db.add(volunteer)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        volunteer = db.get(Volunteer, principal.user_id)
        if volunteer is None:
            raise
        return volunteer
    db.refresh(volunteer)
    return volunteer


def get_current_organizer(principal: CurrentPrincipal, db: DBSession) -> Organizer:
    if principal.role != Role.ORGANIZER:
        raise HTTPException(status_code=403, detail="organizer role required")

    organizer = db.get(Organizer, principal.user_id)
    if organizer:
        return organizer

    organizer = Organizer(
        id=principal.user_id,
        name=_display_name(principal),
        email=principal.email or "",
        organization=principal.organization or "",
    )
    db.add(organizer)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        organizer = db.get(Organizer, principal.user_id)
        if organizer is None:
            raise
        return organizer
    db.refresh(organizer)
    return organizer


CurrentVolunteer = Annotated[Volunteer, Depends(get_current_volunteer)]
CurrentOrganizer = Annotated[Organizer, Depends(get_current_organizer)]
