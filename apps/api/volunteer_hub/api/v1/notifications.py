from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from volunteer_hub.api.errors import http_error_from_service
from volunteer_hub.api.v1.schemas import MarkedReadOut, NotificationOut, UnreadCountOut
from volunteer_hub.auth.deps import CurrentPrincipal
from volunteer_hub.db import get_db
from volunteer_hub.services import notifications_service
from volunteer_hub.services.exceptions import ServiceError

router = APIRouter(prefix="/notifications", tags=["notifications"])

DBSession = Annotated[Session, Depends(get_db)]


@router.get("", response_model=list[NotificationOut])
def list_notifications(
    principal: CurrentPrincipal,
    db: DBSession,
    limit: int = Query(default=50, ge=1, le=200),
):
    return notifications_service.list_notifications(db, principal.user_id, limit=limit)


@router.get("/unread-count", response_model=UnreadCountOut)
def unread_count(principal: CurrentPrincipal, db: DBSession):
    return UnreadCountOut(unread=notifications_service.unread_count(db, principal.user_id))


@router.post("/read-all", response_model=MarkedReadOut)
def mark_all_read(principal: CurrentPrincipal, db: DBSession):
    return MarkedReadOut(updated=notifications_service.mark_all_read(db, principal.user_id))


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: UUID, principal: CurrentPrincipal, db: DBSession):
    try:
        return notifications_service.mark_read(db, principal.user_id, notification_id)
    except ServiceError as exc:
        raise http_error_from_service(exc) from exc
