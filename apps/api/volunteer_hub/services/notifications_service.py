from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from volunteer_hub.models import Notification
from volunteer_hub.models.notification import NotificationType
from volunteer_hub.services.error_codes import ErrorCode
from volunteer_hub.services.exceptions import NotFoundError

logger = structlog.get_logger()


def create_notification(
    db: Session,
    user_id: uuid.UUID,
    title: str,
    message: str,
    type: NotificationType = NotificationType.SYSTEM,
    related_id: uuid.UUID | None = None,
) -> Notification | None:
    """Persist a notification for ``user_id``.

    Best effort: callers invoke this after their own commit, so a failure here
    is rolled back and logged without touching the triggering operation.
    """
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        related_id=related_id,
        read=False,
    )
    try:
        db.add(notification)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            "notification_create_failed",
            user_id=str(user_id),
            type=type.value,
            related_id=str(related_id) if related_id else None,
        )
        return None
    return notification


def list_notifications(db: Session, user_id: uuid.UUID, limit: int = 50) -> list[Notification]:
    return list(
        db.scalars(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
        ).all()
    )


def unread_count(db: Session, user_id: uuid.UUID) -> int:
    return int(
        db.scalar(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
        )
        or 0
    )


def mark_read(db: Session, user_id: uuid.UUID, notification_id: Any) -> Notification:
    notification = db.get(Notification, notification_id)
    if not notification or notification.user_id != user_id:
        raise NotFoundError(ErrorCode.NOTIFICATION_NOT_FOUND.value, "notification not found")

    notification.read = True
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: uuid.UUID) -> int:
    result = db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
        .values(read=True)
    )
    db.commit()
    return int(result.rowcount or 0)
