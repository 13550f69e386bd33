from __future__ import annotations

import uuid
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from tests.helpers import make_event, make_volunteer
from volunteer_hub.models import Participation
from volunteer_hub.models.event import EventCategory, EventStatus
from volunteer_hub.models.participation import ParticipationStatus
from volunteer_hub.services import stats_service
from volunteer_hub.services.exceptions import NotFoundError


@pytest.mark.parametrize(
    ("hours", "level"),
    [(0, "beginner"), (9, "beginner"), (10, "experienced"), (29, "experienced"), (30, "expert")],
)
def test_level_thresholds(hours, level):
    assert stats_service.level_for_hours(hours) == level


def test_new_volunteer_gets_zeroed_stats(db_session):
    volunteer = make_volunteer(db_session)

    stats = stats_service.get_stats(db_session, volunteer.id)

    assert stats.total_events == 0
    assert stats.total_hours == 0
    assert stats.upcoming_events == 0
    assert stats.level == "beginner"
    assert stats.rank == 1
    assert set(stats.categories_participated) == set(EventCategory)
    assert all(count == 0 for count in stats.categories_participated.values())


def test_unknown_volunteer_is_not_found(db_session):
    with pytest.raises(NotFoundError):
        stats_service.get_stats(db_session, uuid.uuid4())


def test_stats_count_attended_categories_and_upcoming(db_session, organizer):
    volunteer = make_volunteer(db_session, total_hours=12, events_attended=2)
    done = make_event(
        db_session,
        organizer,
        starts_in=timedelta(days=-3),
        category=EventCategory.HEALTH,
        status=EventStatus.COMPLETED,
    )
    coming = make_event(db_session, organizer, category=EventCategory.EDUCATION)
    dropped = make_event(db_session, organizer, category=EventCategory.ANIMAL)
    for event, status in (
        (done, ParticipationStatus.ATTENDED),
        (coming, ParticipationStatus.REGISTERED),
        (dropped, ParticipationStatus.CANCELLED),
    ):
        db_session.add(Participation(event_id=event.id, volunteer_id=volunteer.id, status=status))
    db_session.commit()

    stats = stats_service.get_stats(db_session, volunteer.id)

    assert stats.total_events == 2
    assert stats.total_hours == 12
    assert stats.level == "experienced"
    assert stats.upcoming_events == 1
    assert stats.categories_participated[EventCategory.HEALTH] == 1
    assert stats.categories_participated[EventCategory.EDUCATION] == 0
    assert stats.categories_participated[EventCategory.ANIMAL] == 0


def test_rank_orders_by_total_hours(db_session):
    low = make_volunteer(db_session, name="Low", total_hours=2)
    high = make_volunteer(db_session, name="High", total_hours=40)
    mid = make_volunteer(db_session, name="Mid", total_hours=15)

    assert stats_service.get_stats(db_session, high.id).rank == 1
    assert stats_service.get_stats(db_session, mid.id).rank == 2
    assert stats_service.get_stats(db_session, low.id).rank == 3


def test_rank_failure_defaults_to_one(db_session, monkeypatch):
    make_volunteer(db_session, total_hours=50)
    volunteer = make_volunteer(db_session, total_hours=1)

    def broken_rank(db, volunteer_id):
        raise OperationalError("SELECT volunteers", {}, Exception("connection reset"))

    monkeypatch.setattr(stats_service, "rank_for_volunteer", broken_rank)
    stats = stats_service.get_stats(db_session, volunteer.id)

    assert stats.rank == 1
    assert stats.total_hours == 1
