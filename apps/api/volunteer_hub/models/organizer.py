import uuid

import sqlalchemy as sa
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from volunteer_hub.models.base import Base, TimestampMixin


class Organizer(Base, TimestampMixin):
    __tablename__ = "organizers"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    organization: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    logo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
