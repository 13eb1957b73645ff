"""Tests for the partner portal pages and data service."""

from semisto.models.submission import ContactMessage, PackageInterest
from semisto.services import portal_service


class TestPortalService:
    def test_lookups(self):
        assert portal_service.get_partner()["name"] == "Colruyt Group"
        assert portal_service.get_package_by_id("pkg-team")["type"] == "team-building"
        assert portal_service.get_package_by_id("pkg-nope") is None
        assert portal_service.get_engagement_by_id("eng-002")["status"] == "completed"
        assert [e["id"] for e in portal_service.get_engagements("active")] == ["eng-001"]

    def test_package_interest_is_idempotent(self):
        first, created = portal_service.register_package_interest("partner-001", "pkg-team")
        again, created_again = portal_service.register_package_interest("partner-001", "pkg-team")
        assert created is True
        assert created_again is False
        assert first.id == again.id
        assert PackageInterest.query.count() == 1

    def test_snapshot_fundings_come_first(self):
        assert [f["id"] for f in portal_service.get_fundings()] == ["funding-001"]


class TestPortalPages:
    def test_dashboard(self, portal_client):
        body = portal_client.get("/portal/").get_json()
        assert body["partner"]["id"] == "partner-001"
        assert [e["id"] for e in body["active_engagements"]] == ["eng-001"]
        assert {p["id"] for p in body["open_proposals"]} == {"prop-001", "prop-002"}

    def test_package_detail_with_similar(self, portal_client):
        body = portal_client.get("/portal/packages/pkg-team").get_json()
        assert body["package"]["interestSent"] is False
        assert [p["id"] for p in body["similar"]] == ["pkg-citizen", "pkg-sponsorship", "pkg-patronage"]

    def test_package_interest_endpoint(self, portal_client):
        first = portal_client.post("/portal/packages/pkg-team/interest")
        assert first.status_code == 201
        assert first.get_json()["already_sent"] is False

        second = portal_client.post("/portal/packages/pkg-team/interest")
        assert second.status_code == 200
        assert second.get_json()["already_sent"] is True

        listed = portal_client.get("/portal/packages").get_json()
        assert {p["id"]: p["interestSent"] for p in listed}["pkg-team"] is True

    def test_unknown_package(self, portal_client):
        assert portal_client.get("/portal/packages/pkg-x").status_code == 404
        assert portal_client.post("/portal/packages/pkg-x/interest").status_code == 404

    def test_engagements(self, portal_client):
        assert len(portal_client.get("/portal/engagements").get_json()) == 2
        assert portal_client.get("/portal/engagements/eng-404").status_code == 404

    def test_funding_flow(self, portal_client):
        start = portal_client.post("/portal/funding/prop-001/start")
        assert start.status_code == 201
        assert start.get_json()["remaining"] == 1000

        def dispatch(action):
            return portal_client.post("/portal/funding/prop-001/dispatch", json=action)

        dispatch({"type": "next"})
        dispatch({"type": "update", "fields": {"amount": "2000"}})
        dispatch({"type": "next"})
        body = dispatch({"type": "next"}).get_json()
        assert body["committed"] is True
        assert body["result"]["raised_amount"] == 10000

        detail = portal_client.get("/portal/funding/prop-001").get_json()
        assert detail["proposal"]["raisedPercent"] == 100
        assert detail["flow"]["completed"] is True

        listing = portal_client.get("/portal/funding").get_json()
        assert listing["fundings"][-1]["amount"] == 2000

    def test_funded_proposal_is_blocked(self, portal_client):
        portal_client.post("/portal/funding/prop-003/start")
        res = portal_client.post("/portal/funding/prop-003/dispatch", json={"type": "next"})
        assert res.status_code == 400
        assert res.get_json()["details"]["step"] == "info"

    def test_unknown_proposal(self, portal_client):
        assert portal_client.get("/portal/funding/prop-404").status_code == 404
        assert portal_client.post("/portal/funding/prop-404/start").status_code == 404

    def test_contact(self, portal_client):
        subjects = portal_client.get("/portal/contact").get_json()["subjects"]
        assert [s["id"] for s in subjects] == ["new-project", "question", "custom", "support"]

        res = portal_client.post("/portal/contact", json={"subject": "question", "message": "Hello"})
        assert res.status_code == 201
        assert ContactMessage.query.one().partner_id == "partner-001"

        bad = portal_client.post("/portal/contact", json={"subject": "question", "message": ""})
        assert bad.status_code == 400

    def test_impact(self, portal_client):
        assert "history" in portal_client.get("/portal/impact").get_json()
