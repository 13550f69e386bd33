from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

import sqlalchemy as sa
from sqlalchemy import DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from volunteer_hub.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


def enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EventCategory(str, Enum):
    ENVIRONMENT = "environment"
    EDUCATION = "education"
    HEALTH = "health"
    COMMUNITY = "community"
    ANIMAL = "animal"
    OTHER = "other"


OPEN_EVENT_STATUSES = (EventStatus.UPCOMING, EventStatus.ONGOING)


class Event(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "events"
    __table_args__ = (
        sa.CheckConstraint("max_participants >= 1", name="ck_events_max_participants_positive"),
        sa.CheckConstraint(
            "current_participants >= 0 AND current_participants <= max_participants",
            name="ck_events_current_participants_range",
        ),
        sa.CheckConstraint("hours >= 1", name="ck_events_hours_positive"),
        sa.CheckConstraint("end_time > start_time", name="ck_events_time_order"),
        sa.Index("ix_events_status_end_time", "status", "end_time"),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    location: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    max_participants: Mapped[int] = mapped_column(Integer, nullable=False)
    # Maintained only by the registration service and the completion sweeper.
    current_participants: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    category: Mapped[EventCategory] = mapped_column(
        sa.Enum(EventCategory, name="event_category", values_callable=enum_values),
        nullable=False,
        default=EventCategory.OTHER,
    )
    status: Mapped[EventStatus] = mapped_column(
        sa.Enum(EventStatus, name="event_status", values_callable=enum_values),
        nullable=False,
        default=EventStatus.UPCOMING,
    )
    hours: Mapped[int] = mapped_column(Integer, nullable=False)

    organizer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, sa.ForeignKey("organizers.id", ondelete="CASCADE"), nullable=False, index=True
    )

    def __repr__(self) -> str:
        return (
            f"<Event(id={self.id}, title={self.title!r}, "
            f"participants={self.current_participants}/{self.max_participants})>"
        )
