from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from volunteer_hub.models.base import Base, TimestampMixin


class Volunteer(Base, TimestampMixin):
    __tablename__ = "volunteers"
    __table_args__ = (
        sa.CheckConstraint("total_hours >= 0", name="ck_volunteers_total_hours_non_negative"),
        sa.Index("ix_volunteers_total_hours", "total_hours"),
    )

    # Same id as the identity provider's user.
    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    skills: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Aggregates credited by mark_attended; authoritative for stats.
    total_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    events_attended: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
