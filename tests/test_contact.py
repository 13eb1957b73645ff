"""Tests for the contact forms (site and portal)."""

from unittest.mock import MagicMock

import pytest
from flask import Flask

from semisto.blueprints.contact_bp import contact_bp
from semisto.blueprints.portal_bp import portal_bp
from semisto.middleware.rate_limiter import init_rate_limits
from semisto.models.submission import ContactMessage
from semisto.services import contact_service as svc
from semisto.services.contact_service import ContactValidationError

VALID = {
    "name": "Lou",
    "email": "lou@example.org",
    "subject": "Inscription formation",
    "message": "Bonjour !",
}


class TestSiteForm:
    def test_valid_message_is_stored(self):
        msg = svc.send_site_message(dict(VALID, lab="Semisto France Nord"))
        assert msg.id is not None
        assert msg.channel == "site"
        assert msg.lab == "Semisto France Nord"

    @pytest.mark.parametrize("field,value", [
        ("name", " "),
        ("email", "lou-at-example"),
        ("subject", "Spam"),
        ("message", ""),
    ])
    def test_invalid_field(self, field, value):
        with pytest.raises(ContactValidationError) as exc_info:
            svc.send_site_message(dict(VALID, **{field: value}))
        assert field in exc_info.value.errors
        assert ContactMessage.query.count() == 0

    def test_api(self, client):
        res = client.post("/api/v1/contact", json=VALID)
        assert res.status_code == 201

        bad = client.post("/api/v1/contact", json={})
        assert bad.status_code == 400
        assert set(bad.get_json()["details"]["fields"]) == {"name", "email", "subject", "message"}

    def test_subjects(self, client):
        assert len(client.get("/api/v1/contact/subjects").get_json()) == 6


class TestPortalForm:
    PARTNER = {"id": "partner-001", "contactName": "Sophie", "contactEmail": "demo@partner.com"}

    def test_valid(self):
        msg = svc.send_portal_message(self.PARTNER, {"subject": "support", "message": "Help"})
        assert msg.channel == "portal"
        assert msg.partner_id == "partner-001"

    def test_blank_message(self):
        with pytest.raises(ContactValidationError):
            svc.send_portal_message(self.PARTNER, {"subject": "support", "message": "   "})

    def test_unknown_subject(self):
        with pytest.raises(ContactValidationError):
            svc.send_portal_message(self.PARTNER, {"subject": "other", "message": "Hi"})


class TestRateLimits:
    def test_both_contact_forms_are_limited(self):
        app = Flask(__name__)
        app.config["CONTACT_RATE_LIMIT"] = "3/minute"
        app.register_blueprint(contact_bp)
        app.register_blueprint(portal_bp)
        portal_view = app.view_functions["portal.send_contact"]

        limiter = MagicMock()
        init_rate_limits(app, limiter)

        limiter.limit.assert_called_with("3/minute")
        limited = [c.args[0] for c in limiter.limit.return_value.call_args_list]
        assert app.blueprints["contact"] in limited
        assert portal_view in limited
        assert app.view_functions["portal.send_contact"] is limiter.limit.return_value.return_value

    def test_disabled_under_testing(self, app):
        limiter = MagicMock()
        init_rate_limits(app, limiter)
        limiter.limit.assert_not_called()
