from __future__ import annotations

from datetime import timedelta

from tests.helpers import make_event, make_volunteer
from volunteer_hub.models import Participation, Volunteer
from volunteer_hub.models.participation import ParticipationStatus
from volunteer_hub.worker import tasks
from volunteer_hub.worker.celery_app import celery_app


def test_sweep_task_is_scheduled():
    schedule = celery_app.conf.beat_schedule["sweep-completed-events"]
    assert schedule["task"] == "sweep_completed_events"
    assert "sweep_completed_events" in celery_app.tasks


def test_sweep_task_credits_ended_events(db_session, session_factory, organizer, monkeypatch):
    event = make_event(db_session, organizer, starts_in=timedelta(hours=-6), hours=2)
    volunteer = make_volunteer(db_session)
    db_session.add(
        Participation(
            event_id=event.id,
            volunteer_id=volunteer.id,
            status=ParticipationStatus.CONFIRMED,
        )
    )
    db_session.commit()
    monkeypatch.setattr(tasks, "SessionLocal", session_factory)

    result = tasks.sweep_completed_events.apply().get()

    assert result == {
        "events_completed": 1,
        "participations_credited": 1,
        "failed_event_ids": [],
    }
    db_session.expire_all()
    assert db_session.get(Volunteer, volunteer.id).total_hours == 2
