from requeen.services.swarm_analytics import success_rate, summarize_statuses
from requeen.tests.conftest import seed_hive, seed_site


def _open(client, headers, site_id, started_at):
    resp = client.post(
        "/api/swarm/sessions",
        json={"site_id": str(site_id), "started_at": started_at},
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.json()


def _register(client, headers, session_id, hive_id):
    resp = client.post(
        f"/api/swarm/sessions/{session_id}/colonies",
        json={"hive_id": str(hive_id)},
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.json()["id"]


def _outcome(client, headers, colony_id, status):
    resp = client.post(f"/api/swarm/colonies/{colony_id}/outcome", json={"status": status}, headers=headers)
    assert resp.status_code == 200


def _may_campaign(client, apiary):
    """Two sites worked in May 2025: mated queens at home, a cell then a virgin at the orchard."""

    headers = apiary["headers"]
    home = _open(client, headers, apiary["site_id"], "2025-05-03T08:00:00")
    ok_id, failed_id = [_register(client, headers, home["id"], h) for h in apiary["hive_ids"]]
    client.post(
        f"/api/swarm/sessions/{home['id']}/introductions",
        json={"method": "mated", "event_date": "2025-05-03T09:00:00"},
        headers=headers,
    )
    _outcome(client, headers, ok_id, "laying_ok")
    _outcome(client, headers, failed_id, "failed")

    orchard_id = seed_site(apiary["owner_id"], name="Zz Orchard")
    orchard = _open(client, headers, orchard_id, "2025-05-10T07:30:00")
    retried_id = _register(client, headers, orchard["id"], seed_hive(orchard_id, code="O-01"))
    client.post(
        f"/api/swarm/sessions/{orchard['id']}/introductions",
        json={"method": "cell", "event_date": "2025-05-10T08:00:00"},
        headers=headers,
    )
    _outcome(client, headers, retried_id, "queenless")
    client.post(
        f"/api/swarm/colonies/{retried_id}/reintroductions",
        json={"method": "virgin", "event_date": "2025-05-20T08:00:00"},
        headers=headers,
    )
    return home, orchard, orchard_id


def test_success_rate_of_empty_population_is_zero():
    assert success_rate(0, 0) == 0.0
    assert summarize_statuses([])["success_rate"] == 0.0
    assert success_rate(1, 3) == 33.3


def test_session_stats_counts_statuses(client, apiary):
    headers = apiary["headers"]
    home, _, _ = _may_campaign(client, apiary)
    resp = client.get(f"/api/swarm/sessions/{home['id']}/stats", headers=headers)
    assert resp.status_code == 200
    stats = resp.json()
    assert stats["total"] == 2
    assert stats["by_status"] == {"laying_ok": 1, "failed": 1}
    assert stats["success"] == 1
    assert stats["failures"] == 1
    assert stats["success_rate"] == 50.0


def test_session_stats_for_empty_session(client, apiary):
    session = _open(client, apiary["headers"], apiary["site_id"], "2025-04-01T08:00:00")
    stats = client.get(f"/api/swarm/sessions/{session['id']}/stats", headers=apiary["headers"]).json()
    assert stats["total"] == 0
    assert stats["success_rate"] == 0.0


def test_overview_breaks_down_by_method_and_site(client, apiary):
    headers = apiary["headers"]
    _may_campaign(client, apiary)
    resp = client.get(
        "/api/swarm/analytics/overview",
        params={"date_from": "2025-05-01", "date_to": "2025-05-31"},
        headers=headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["global"]["total"] == 3
    assert body["global"]["success"] == 1
    assert body["global"]["failures"] == 1
    assert body["global"]["waiting"] == 1
    assert body["global"]["success_rate"] == 33.3

    # the retried colony counts under its latest introduction method
    assert set(body["by_intro_type"]) == {"mated", "virgin"}
    assert body["by_intro_type"]["mated"]["success_rate"] == 50.0
    assert body["by_intro_type"]["virgin"]["waiting"] == 1

    sites = body["by_site"]
    assert [site["site_id"] for site in sites] == [str(apiary["site_id"]), sites[1]["site_id"]]
    assert sites[1]["site_name"] == "Zz Orchard"
    assert [site["total"] for site in sites] == [2, 1]
    assert sites[0]["success_rate"] == 50.0


def test_overview_filtered_to_one_site_omits_site_breakdown(client, apiary):
    headers = apiary["headers"]
    _, _, orchard_id = _may_campaign(client, apiary)
    body = client.get(
        "/api/swarm/analytics/overview",
        params={"date_from": "2025-05-01", "date_to": "2025-05-31", "site_id": str(orchard_id)},
        headers=headers,
    ).json()
    assert body["by_site"] is None
    assert body["global"]["total"] == 1
    assert body["global"]["by_status"] == {"waiting_check": 1}


def test_overview_window_excludes_other_months(client, apiary):
    _may_campaign(client, apiary)
    body = client.get(
        "/api/swarm/analytics/overview",
        params={"date_from": "2025-06-01", "date_to": "2025-06-30"},
        headers=apiary["headers"],
    ).json()
    assert body["global"]["total"] == 0
    assert body["by_intro_type"] == {}
    assert body["by_site"] == []


def test_overview_rejects_inverted_range(client, apiary):
    resp = client.get(
        "/api/swarm/analytics/overview",
        params={"date_from": "2025-06-01", "date_to": "2025-05-01"},
        headers=apiary["headers"],
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "invalid_argument"


def test_site_overview_reports_backlogs(client, apiary):
    headers = apiary["headers"]
    home, _, orchard_id = _may_campaign(client, apiary)
    late_hive = seed_hive(apiary["site_id"], code="N-03")
    _register(client, headers, home["id"], late_hive)

    home_view = client.get(f"/api/swarm/sites/{apiary['site_id']}/overview", headers=headers)
    assert home_view.status_code == 200
    body = home_view.json()
    assert body["produced"] == 3
    assert body["introduced"] == 2
    assert body["success_rate"] == 50.0
    assert body["due_today"] == 0
    assert [c["hive_code"] for c in body["awaiting_introduction"]] == ["N-03"]

    orchard_view = client.get(f"/api/swarm/sites/{orchard_id}/overview", headers=headers).json()
    assert orchard_view["produced"] == 1
    assert orchard_view["success_rate"] == 0.0
    assert orchard_view["due_today"] == 1
    assert orchard_view["checks_due"][0]["hive_code"] == "O-01"
    assert orchard_view["checks_due"][0]["is_overdue"] is True


def test_session_start_with_offset_is_windowed_in_utc(client, apiary):
    headers = apiary["headers"]
    session = _open(client, headers, apiary["site_id"], "2025-06-30T23:30:00-05:00")
    assert session["started_at"].startswith("2025-07-01T04:30:00")
    _register(client, headers, session["id"], apiary["hive_ids"][0])

    def total(date_from, date_to):
        return client.get(
            "/api/swarm/analytics/overview",
            params={"date_from": date_from, "date_to": date_to},
            headers=headers,
        ).json()["global"]["total"]

    assert total("2025-07-01", "2025-07-31") == 1
    assert total("2025-06-01", "2025-06-30") == 0
