import uuid

from requeen import models
from requeen.tests.conftest import TestingSessionLocal, seed_hive, seed_site


def _open(client, apiary):
    resp = client.post(
        "/api/swarm/sessions",
        json={"site_id": str(apiary["site_id"])},
        headers=apiary["headers"],
    )
    assert resp.status_code == 201
    return resp.json()


def test_register_colony_by_hive_id_logs_arrival(client, apiary):
    session = _open(client, apiary)
    hive_id = apiary["hive_ids"][0]
    resp = client.post(
        f"/api/swarm/sessions/{session['id']}/colonies",
        json={"hive_id": str(hive_id)},
        headers=apiary["headers"],
    )
    assert resp.status_code == 201
    colony = resp.json()
    assert colony["status"] == "pending"
    assert colony["hive_id"] == str(hive_id)
    assert colony["site_id"] == str(apiary["site_id"])

    events = client.get(f"/api/swarm/colonies/{colony['id']}/events", headers=apiary["headers"]).json()
    assert [e["event_type"] for e in events] == ["scan_arrival"]
    assert events[0]["payload"]["hive_id"] == str(hive_id)
    assert events[0]["payload"]["hive_code"] == "N-01"


def test_register_colony_by_scanned_token_is_case_insensitive(client, apiary):
    session = _open(client, apiary)
    hive_id = seed_hive(apiary["site_id"], code="N-07", public_key="e26add9c-token")
    resp = client.post(
        f"/api/swarm/sessions/{session['id']}/colonies",
        json={"hive_public_key": "E26ADD9C-TOKEN"},
        headers=apiary["headers"],
    )
    assert resp.status_code == 201
    assert resp.json()["hive_id"] == str(hive_id)
    assert resp.json()["hive_code"] == "N-07"


def test_cross_site_token_is_rejected(client, apiary):
    session = _open(client, apiary)
    other_site = seed_site(apiary["owner_id"], name="Out Apiary")
    seed_hive(other_site, code="X-01", public_key="cross-site-token")
    resp = client.post(
        f"/api/swarm/sessions/{session['id']}/colonies",
        json={"hive_public_key": "cross-site-token"},
        headers=apiary["headers"],
    )
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "not_found"


def test_register_on_closed_session_creates_nothing(client, apiary):
    session = _open(client, apiary)
    client.post(f"/api/swarm/sessions/{session['id']}/close", headers=apiary["headers"])
    resp = client.post(
        f"/api/swarm/sessions/{session['id']}/colonies",
        json={"hive_id": str(apiary["hive_ids"][0])},
        headers=apiary["headers"],
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "invalid_session"

    db = TestingSessionLocal()
    try:
        count = db.query(models.SwarmColony).filter(models.SwarmColony.session_id == uuid.UUID(session["id"])).count()
    finally:
        db.close()
    assert count == 0


def test_hive_cannot_be_registered_twice_in_one_session(client, apiary):
    session = _open(client, apiary)
    payload = {"hive_id": str(apiary["hive_ids"][0])}
    first = client.post(f"/api/swarm/sessions/{session['id']}/colonies", json=payload, headers=apiary["headers"])
    assert first.status_code == 201
    second = client.post(f"/api/swarm/sessions/{session['id']}/colonies", json=payload, headers=apiary["headers"])
    assert second.status_code == 409
    assert second.json()["detail"]["code"] == "conflict"


def test_hive_reference_is_required(client, apiary):
    session = _open(client, apiary)
    resp = client.post(f"/api/swarm/sessions/{session['id']}/colonies", json={}, headers=apiary["headers"])
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "invalid_argument"
