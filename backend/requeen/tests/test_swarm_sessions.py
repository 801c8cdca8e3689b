import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from requeen import models
from requeen.tests.conftest import TestingSessionLocal, seed_operator, seed_site


def open_session(client, headers, site_id, label=None):
    return client.post(
        "/api/swarm/sessions",
        json={"site_id": str(site_id), "label": label},
        headers=headers,
    )


def test_open_session_and_get_active(client, apiary):
    headers = apiary["headers"]
    none_yet = client.get(f"/api/swarm/sites/{apiary['site_id']}/active-session", headers=headers)
    assert none_yet.status_code == 200
    assert none_yet.json() == {"session": None}

    resp = open_session(client, headers, apiary["site_id"], label="June nucs")
    assert resp.status_code == 201
    session = resp.json()
    assert session["is_active"] is True
    assert session["ended_at"] is None
    assert session["label"] == "June nucs"

    active = client.get(f"/api/swarm/sites/{apiary['site_id']}/active-session", headers=headers)
    assert active.json()["session"]["id"] == session["id"]


def test_opening_a_second_session_supersedes_the_first(client, apiary):
    headers = apiary["headers"]
    first = open_session(client, headers, apiary["site_id"]).json()
    second = open_session(client, headers, apiary["site_id"]).json()

    active = client.get(f"/api/swarm/sites/{apiary['site_id']}/active-session", headers=headers)
    assert active.json()["session"]["id"] == second["id"]

    sessions = client.get(f"/api/swarm/sites/{apiary['site_id']}/sessions", headers=headers).json()
    by_id = {s["id"]: s for s in sessions}
    assert by_id[first["id"]]["is_active"] is False
    assert by_id[first["id"]]["ended_at"] is not None
    assert [s["id"] for s in sessions if s["is_active"]] == [second["id"]]

    db = TestingSessionLocal()
    try:
        open_count = (
            db.query(models.SwarmSession)
            .filter(
                models.SwarmSession.site_id == apiary["site_id"],
                models.SwarmSession.is_active.is_(True),
            )
            .count()
        )
        audit_actions = [
            row.action
            for row in db.query(models.AuditLog)
            .filter(models.AuditLog.user_id == apiary["owner_id"])
            .all()
        ]
    finally:
        db.close()
    assert open_count == 1
    assert audit_actions.count("swarm_session.open") == 2


def test_close_session_rejects_second_close(client, apiary):
    headers = apiary["headers"]
    session = open_session(client, headers, apiary["site_id"]).json()

    closed = client.post(f"/api/swarm/sessions/{session['id']}/close", headers=headers)
    assert closed.status_code == 200
    assert closed.json()["is_active"] is False
    assert closed.json()["ended_at"] is not None

    again = client.post(f"/api/swarm/sessions/{session['id']}/close", headers=headers)
    assert again.status_code == 409
    assert again.json()["detail"]["code"] == "already_closed"

    active = client.get(f"/api/swarm/sites/{apiary['site_id']}/active-session", headers=headers)
    assert active.json()["session"] is None


def test_sessions_are_invisible_to_other_operators(client, apiary):
    session = open_session(client, apiary["headers"], apiary["site_id"]).json()
    intruder_headers, _ = seed_operator()

    assert open_session(client, intruder_headers, apiary["site_id"]).status_code == 404
    close = client.post(f"/api/swarm/sessions/{session['id']}/close", headers=intruder_headers)
    assert close.status_code == 404
    assert close.json()["detail"]["code"] == "not_found"
    detail = client.get(f"/api/swarm/sessions/{session['id']}", headers=intruder_headers)
    assert detail.status_code == 404
    missing = client.get(f"/api/swarm/sessions/{uuid.uuid4()}", headers=intruder_headers)
    assert missing.json() == detail.json()


def test_session_detail_lists_colonies_with_hive_codes(client, apiary):
    headers = apiary["headers"]
    session = open_session(client, headers, apiary["site_id"]).json()
    for hive_id in apiary["hive_ids"]:
        client.post(
            f"/api/swarm/sessions/{session['id']}/colonies",
            json={"hive_id": str(hive_id)},
            headers=headers,
        )

    detail = client.get(f"/api/swarm/sessions/{session['id']}", headers=headers)
    assert detail.status_code == 200
    body = detail.json()
    assert body["total"] == 2
    assert body["by_status"] == {"pending": 2}
    assert sorted(c["hive_code"] for c in body["colonies"]) == ["N-01", "N-02"]


def test_database_refuses_two_active_sessions_on_one_site():
    _, owner_id = seed_operator()
    site_id = seed_site(owner_id)
    db = TestingSessionLocal()
    try:
        db.add(models.SwarmSession(site_id=site_id, owner_id=owner_id, is_active=True))
        db.commit()
        db.add(models.SwarmSession(site_id=site_id, owner_id=owner_id, is_active=True))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()
    finally:
        db.close()
