"""API tests for /api/v1/donations."""

from semisto.models.submission import Donation


def _dispatch(client, action):
    return client.post("/api/v1/donations/flow/dispatch", json=action)


def test_flow_starts_with_defaults(client):
    body = client.get("/api/v1/donations/flow").get_json()
    assert body["step"] == "amount"
    assert body["final_amount"] == 50
    assert body["presets"] == [10, 25, 50, 100, 250]


def test_invalid_custom_amount_is_blocked(client):
    _dispatch(client, {"type": "custom_amount", "value": "abc"})
    res = _dispatch(client, {"type": "next"})
    assert res.status_code == 400
    assert res.get_json()["details"]["state"]["final_amount"] == 0


def test_full_donation_for_project(client):
    start = client.post("/api/v1/donations/flow/start", json={"project_slug": "jardin-foret-forest"})
    assert start.status_code == 201

    _dispatch(client, {"type": "select_amount", "amount": 25})
    _dispatch(client, {"type": "next"})
    _dispatch(client, {"type": "update", "fields": {"name": "Marc", "email": "marc@example.org"}})
    body = _dispatch(client, {"type": "next"}).get_json()

    assert body["committed"] is True
    assert body["step"] == "thanks"
    donation = Donation.query.one()
    assert donation.project_id == "project-001"
    assert float(donation.amount) == 25


def test_unknown_project(client):
    res = client.post("/api/v1/donations/flow/start", json={"project_slug": "nope"})
    assert res.status_code == 404


def test_impact_lookup(client):
    body = client.get("/api/v1/donations/impact?amount=100").get_json()
    assert body == {"amount": 100, "impact": "1 journée de formation offerte"}
