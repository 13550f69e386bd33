from __future__ import annotations

import uuid
from enum import Enum

import sqlalchemy as sa
from sqlalchemy import ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from volunteer_hub.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from volunteer_hub.models.event import enum_values


class ParticipationStatus(str, Enum):
    REGISTERED = "registered"
    CONFIRMED = "confirmed"
    ATTENDED = "attended"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


ACTIVE_PARTICIPATION_STATUSES = (ParticipationStatus.REGISTERED, ParticipationStatus.CONFIRMED)

_ACTIVE_WHERE = sa.text("status IN ('registered', 'confirmed')")


class Participation(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "participations"
    __table_args__ = (
        # Cancelled/attended rows are history; only one live row per pair.
        sa.Index(
            "uq_participations_active_event_volunteer",
            "event_id",
            "volunteer_id",
            unique=True,
            postgresql_where=_ACTIVE_WHERE,
            sqlite_where=_ACTIVE_WHERE,
        ),
        sa.CheckConstraint("hours_logged >= 0", name="ck_participations_hours_logged_non_negative"),
    )

    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    volunteer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("volunteers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[ParticipationStatus] = mapped_column(
        sa.Enum(ParticipationStatus, name="participation_status", values_callable=enum_values),
        nullable=False,
        default=ParticipationStatus.REGISTERED,
    )
    hours_logged: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
