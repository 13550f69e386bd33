from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from tests.helpers import auth_headers, make_event
from volunteer_hub.models import Participation
from volunteer_hub.models.participation import ParticipationStatus


def _organizer_headers(user_id: uuid.UUID | None = None) -> dict[str, str]:
    return auth_headers(user_id or uuid.uuid4(), "organizer", organization="Green Org")


def _create_event(client: TestClient, headers: dict[str, str], **overrides):
    start = datetime.now(timezone.utc) + timedelta(days=1)
    payload = {
        "title": "Park cleanup",
        "description": "Bring gloves",
        "location": "Central Park",
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(hours=3)).isoformat(),
        "max_participants": 2,
        "category": "environment",
        "hours": 3,
    }
    payload.update(overrides)
    return client.post("/v1/events", json=payload, headers=headers)


def test_organizer_can_create_update_cancel(client: TestClient):
    headers = _organizer_headers()

    create_resp = _create_event(client, headers)
    assert create_resp.status_code == 201
    body = create_resp.json()
    assert body["status"] == "upcoming"
    assert body["current_participants"] == 0
    event_id = body["id"]

    patch_resp = client.patch(
        f"/v1/events/{event_id}",
        json={"title": "Updated Title", "max_participants": 5},
        headers=headers,
    )
    assert patch_resp.status_code == 200
    assert patch_resp.json()["title"] == "Updated Title"
    assert patch_resp.json()["max_participants"] == 5

    cancel_resp = client.post(f"/v1/events/{event_id}/cancel", headers=headers)
    assert cancel_resp.status_code == 200
    assert cancel_resp.json()["status"] == "cancelled"

    again = client.post(f"/v1/events/{event_id}/cancel", headers=headers)
    assert again.status_code == 409
    assert again.json()["detail"]["code"] == "INVALID_STATE"


def test_create_rejects_end_before_start(client: TestClient):
    start = datetime.now(timezone.utc) + timedelta(days=1)
    resp = _create_event(
        client,
        _organizer_headers(),
        end_time=(start - timedelta(hours=1)).isoformat(),
        start_time=start.isoformat(),
    )
    assert resp.status_code == 422


def test_volunteer_cannot_create_or_update(client: TestClient):
    volunteer_headers = auth_headers(uuid.uuid4())

    assert _create_event(client, volunteer_headers).status_code == 403

    event_id = _create_event(client, _organizer_headers()).json()["id"]
    resp = client.patch(
        f"/v1/events/{event_id}", json={"title": "Blocked"}, headers=volunteer_headers
    )
    assert resp.status_code == 403


def test_other_organizer_cannot_manage_event(client: TestClient):
    event_id = _create_event(client, _organizer_headers()).json()["id"]
    intruder = _organizer_headers()

    resp = client.patch(f"/v1/events/{event_id}", json={"title": "Mine"}, headers=intruder)
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "NOT_EVENT_ORGANIZER"

    assert client.delete(f"/v1/events/{event_id}", headers=intruder).status_code == 403
    assert client.get(f"/v1/events/{event_id}/participations", headers=intruder).status_code == 403


def test_list_events_filters_and_paginates(client: TestClient):
    headers = _organizer_headers()
    _create_event(client, headers, title="A", category="health")
    _create_event(client, headers, title="B", category="health")
    _create_event(client, headers, title="C", category="education")

    resp = client.get("/v1/events", params={"category": "health", "page_size": 1})
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert len(data["items"]) == 1
    assert data["items"][0]["category"] == "health"

    upcoming = client.get("/v1/events", params={"upcoming": "true"}).json()
    assert upcoming["total"] == 3


def test_registration_flow_and_capacity(client: TestClient):
    organizer_headers = _organizer_headers()
    event_id = _create_event(client, organizer_headers, max_participants=1).json()["id"]
    first = auth_headers(uuid.uuid4(), name="First")
    second = auth_headers(uuid.uuid4(), name="Second")

    resp = client.post(f"/v1/events/{event_id}/registration", headers=first)
    assert resp.status_code == 201
    assert resp.json()["status"] == "registered"

    dup = client.post(f"/v1/events/{event_id}/registration", headers=first)
    assert dup.status_code == 409
    assert dup.json()["detail"]["code"] == "ALREADY_REGISTERED"

    full = client.post(f"/v1/events/{event_id}/registration", headers=second)
    assert full.status_code == 409
    assert full.json()["detail"]["code"] == "EVENT_FULL"

    event = client.get(f"/v1/events/{event_id}").json()
    assert event["current_participants"] == 1

    roster = client.get(f"/v1/events/{event_id}/participations", headers=organizer_headers)
    assert roster.status_code == 200
    assert [row["volunteer_name"] for row in roster.json()] == ["First"]

    cancel = client.delete(f"/v1/events/{event_id}/registration", headers=first)
    assert cancel.status_code == 200
    assert cancel.json()["status"] == "cancelled"

    noop = client.delete(f"/v1/events/{event_id}/registration", headers=first)
    assert noop.json()["status"] == "not_registered"

    assert client.post(f"/v1/events/{event_id}/registration", headers=second).status_code == 201


def test_register_unknown_event_is_404(client: TestClient):
    resp = client.post(f"/v1/events/{uuid.uuid4()}/registration", headers=auth_headers(uuid.uuid4()))
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "EVENT_NOT_FOUND"


def test_capacity_cannot_drop_below_participants(client: TestClient):
    headers = _organizer_headers()
    event_id = _create_event(client, headers, max_participants=2).json()["id"]
    client.post(f"/v1/events/{event_id}/registration", headers=auth_headers(uuid.uuid4()))
    client.post(f"/v1/events/{event_id}/registration", headers=auth_headers(uuid.uuid4()))

    resp = client.patch(f"/v1/events/{event_id}", json={"max_participants": 1}, headers=headers)
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "CAPACITY_BELOW_PARTICIPANTS"


def test_confirm_and_attendance_credit_hours(client: TestClient):
    organizer_headers = _organizer_headers()
    event_id = _create_event(client, organizer_headers, hours=4).json()["id"]
    volunteer_headers = auth_headers(uuid.uuid4())
    participation_id = client.post(
        f"/v1/events/{event_id}/registration", headers=volunteer_headers
    ).json()["id"]

    assert client.post(
        f"/v1/participations/{participation_id}/confirm", headers=volunteer_headers
    ).status_code == 403

    confirm = client.post(
        f"/v1/participations/{participation_id}/confirm", headers=organizer_headers
    )
    assert confirm.status_code == 200
    assert confirm.json()["status"] == "confirmed"

    attended = client.post(
        f"/v1/participations/{participation_id}/attendance", headers=organizer_headers
    )
    assert attended.status_code == 200
    assert attended.json()["status"] == "attended"
    assert attended.json()["hours_logged"] == 4

    again = client.post(
        f"/v1/participations/{participation_id}/attendance",
        json={"hours_logged": 2},
        headers=organizer_headers,
    )
    assert again.status_code == 409

    me = client.get("/v1/me", headers=volunteer_headers).json()
    assert me["total_hours"] == 4
    assert me["events_attended"] == 1

    mine = client.get("/v1/me/participations", headers=volunteer_headers).json()
    assert len(mine) == 1
    assert mine[0]["event"]["id"] == event_id

    notifications = client.get("/v1/notifications", headers=volunteer_headers).json()
    assert {n["title"] for n in notifications} >= {"Registration confirmed", "Hours credited"}


def test_my_stats_runs_sweep_first(client: TestClient, db_session, organizer):
    volunteer_id = uuid.uuid4()
    headers = auth_headers(volunteer_id)
    client.get("/v1/me", headers=headers)

    event = make_event(db_session, organizer, starts_in=timedelta(hours=-6), hours=5)
    db_session.add(
        Participation(
            event_id=event.id,
            volunteer_id=volunteer_id,
            status=ParticipationStatus.CONFIRMED,
        )
    )
    db_session.commit()

    resp = client.get("/v1/me/stats", headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_hours"] == 5
    assert body["total_events"] == 1
    assert body["categories_participated"]["community"] == 1
    assert body["rank"] == 1
    assert body["level"] == "beginner"


def test_notifications_read_flow(client: TestClient):
    event_id = _create_event(client, _organizer_headers()).json()["id"]
    headers = auth_headers(uuid.uuid4())
    client.post(f"/v1/events/{event_id}/registration", headers=headers)
    client.delete(f"/v1/events/{event_id}/registration", headers=headers)

    assert client.get("/v1/notifications/unread-count", headers=headers).json()["unread"] == 2

    first_id = client.get("/v1/notifications", headers=headers).json()[0]["id"]
    read = client.post(f"/v1/notifications/{first_id}/read", headers=headers)
    assert read.status_code == 200
    assert read.json()["read"] is True

    assert client.post("/v1/notifications/read-all", headers=headers).json()["updated"] == 1
    assert client.get("/v1/notifications/unread-count", headers=headers).json()["unread"] == 0

    other = auth_headers(uuid.uuid4())
    assert client.post(f"/v1/notifications/{first_id}/read", headers=other).status_code == 404


def test_delete_event_removes_it(client: TestClient):
    headers = _organizer_headers()
    event_id = _create_event(client, headers).json()["id"]
    client.post(f"/v1/events/{event_id}/registration", headers=auth_headers(uuid.uuid4()))

    assert client.delete(f"/v1/events/{event_id}", headers=headers).status_code == 204
    assert client.get(f"/v1/events/{event_id}").status_code == 404


def test_manual_sweep_requires_organizer(client: TestClient):
    assert client.post("/v1/sweeps", headers=auth_headers(uuid.uuid4())).status_code == 403

    resp = client.post("/v1/sweeps", headers=_organizer_headers())
    assert resp.status_code == 200
    assert resp.json() == {
        "events_completed": 0,
        "participations_credited": 0,
        "failed_event_ids": [],
    }


def test_closed_event_cannot_be_edited(client: TestClient):
    headers = _organizer_headers()
    event_id = _create_event(client, headers).json()["id"]
    client.post(f"/v1/events/{event_id}/cancel", headers=headers)

    resp = client.patch(
        f"/v1/events/{event_id}", json={"hours": 10, "max_participants": 50}, headers=headers
    )

    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "INVALID_STATE"
    event = client.get(f"/v1/events/{event_id}").json()
    assert event["hours"] == 3
    assert event["max_participants"] == 2
