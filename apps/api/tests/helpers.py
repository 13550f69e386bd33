from __future__ import annotations

import time
import uuid
from datetime import datetime, timedelta, timezone

import jwt

from volunteer_hub.core.config import settings
from volunteer_hub.models import Event, Organizer, Volunteer
from volunteer_hub.models.event import EventCategory, EventStatus


def make_token(
    user_id: uuid.UUID,
    role: str = "volunteer",
    email: str | None = None,
    name: str | None = None,
    organization: str | None = None,
) -> str:
    claims = {
        "sub": str(user_id),
        "exp": int(time.time()) + 900,
        "role": "authenticated",
        "email": email or f"{user_id.hex[:8]}@example.com",
        "user_metadata": {"role": role, "name": name, "organization": organization},
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def auth_headers(user_id: uuid.UUID, role: str = "volunteer", **claims) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, role, **claims)}"}


def make_organizer(db, name: str = "Green Org") -> Organizer:
    organizer = Organizer(
        id=uuid.uuid4(),
        name=name,
        email=f"{uuid.uuid4().hex[:8]}@org.example.com",
        organization=name,
    )
    db.add(organizer)
    db.commit()
    db.refresh(organizer)
    return organizer


def make_volunteer(db, name: str = "Vol", total_hours: int = 0, **values) -> Volunteer:
    volunteer = Volunteer(
        id=values.pop("id", None) or uuid.uuid4(),
        name=name,
        email=f"{uuid.uuid4().hex[:8]}@example.com",
        skills=[],
        total_hours=total_hours,
        **values,
    )
    db.add(volunteer)
    db.commit()
    db.refresh(volunteer)
    return volunteer


def make_event(
    db,
    organizer: Organizer,
    starts_in: timedelta = timedelta(days=1),
    duration: timedelta = timedelta(hours=3),
    max_participants: int = 10,
    hours: int = 3,
    category: EventCategory = EventCategory.COMMUNITY,
    status: EventStatus = EventStatus.UPCOMING,
    **values,
) -> Event:
    start = datetime.now(timezone.utc) + starts_in
    event = Event(
        title=values.pop("title", "Beach cleanup"),
        description="",
        location="Pier 7",
        start_time=start,
        end_time=start + duration,
        max_participants=max_participants,
        current_participants=values.pop("current_participants", 0),
        category=category,
        status=status,
        hours=hours,
        organizer_id=organizer.id,
        **values,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event
