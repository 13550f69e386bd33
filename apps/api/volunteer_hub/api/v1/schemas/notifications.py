from __future__ import annotations

from datetime import datetime
from uuid import UUID

from volunteer_hub.api.v1.schemas.events import SchemaBase
from volunteer_hub.models.notification import NotificationType


class NotificationOut(SchemaBase):
    id: UUID
    title: str
    message: str
    type: NotificationType
    related_id: UUID | None = None
    read: bool
    created_at: datetime


class UnreadCountOut(SchemaBase):
    unread: int


class MarkedReadOut(SchemaBase):
    updated: int
