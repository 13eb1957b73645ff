"""Tests for partner portal login, logout and the /portal gate."""

import pytest

from semisto import auth
from semisto.auth import COOKIE_MAX_AGE, PORTAL_COOKIE, PortalAuthError


def _login(client, email="demo@partner.com", password="partner2026"):
    return client.post("/api/portal/login", data={"email": email, "password": password})


class TestLoginService:
    def test_valid_credentials_return_token(self):
        assert auth.login("demo@partner.com", "partner2026") == "mock-partner-token-2026"

    @pytest.mark.parametrize("email", ["DEMO@partner.com", " demo@partner.com"])
    def test_email_must_match_exactly(self, email):
        with pytest.raises(PortalAuthError):
            auth.login(email, "partner2026")

    @pytest.mark.parametrize("email,password", [
        ("demo@partner.com", "wrong"),
        ("other@partner.com", "partner2026"),
        ("", ""),
    ])
    def test_bad_credentials_share_one_message(self, email, password):
        with pytest.raises(PortalAuthError, match="Invalid email or password"):
            auth.login(email, password)

    def test_token_checks(self):
        assert auth.is_authorized("mock-partner-token-2026")
        assert not auth.is_authorized("forged")
        assert not auth.is_authorized(None)
        assert auth.get_auth_user("forged") is None
        assert auth.get_auth_user("mock-partner-token-2026")["partnerId"] == "partner-001"


class TestLoginEndpoint:
    def test_success_sets_cookie_and_redirects(self, client):
        res = _login(client)
        assert res.status_code == 302
        assert res.headers["Location"].endswith("/portal/")

        set_cookie = res.headers["Set-Cookie"]
        assert set_cookie.startswith(f"{PORTAL_COOKIE}=mock-partner-token-2026")
        assert "HttpOnly" in set_cookie
        assert f"Max-Age={COOKIE_MAX_AGE}" in set_cookie
        assert "Path=/" in set_cookie

        cookie = client.get_cookie(PORTAL_COOKIE)
        assert cookie is not None
        assert cookie.value == "mock-partner-token-2026"

    def test_failure_redirects_with_error(self, client):
        res = _login(client, password="nope")
        assert res.status_code == 302
        assert res.headers["Location"].endswith("/portal/login?error=invalid")
        assert client.get_cookie(PORTAL_COOKIE) is None

    def test_logout_deletes_cookie(self, client):
        _login(client)
        res = client.get("/api/portal/logout")
        assert res.status_code == 302
        assert res.headers["Location"].endswith("/portal/login")
        assert client.get_cookie(PORTAL_COOKIE) is None

    def test_me(self, client):
        assert client.get("/api/portal/me").status_code == 401
        _login(client)
        body = client.get("/api/portal/me").get_json()
        assert body["user"]["name"] == "Sophie Vandenberghe"
        assert body["partner"]["id"] == "partner-001"


class TestGate:
    @pytest.mark.parametrize("path", ["/portal/", "/portal/packages", "/portal/funding/prop-001"])
    def test_redirects_without_cookie(self, client, path):
        res = client.get(path)
        assert res.status_code == 302
        assert res.headers["Location"].endswith("/portal/login")

    def test_forged_cookie_redirects(self, client):
        client.set_cookie(PORTAL_COOKIE, "forged")
        assert client.get("/portal/").status_code == 302

    def test_login_page_is_open(self, client):
        res = client.get("/portal/login?error=invalid")
        assert res.status_code == 200
        assert res.get_json()["error"] == "Invalid email or password"

    def test_passes_with_cookie(self, portal_client):
        assert portal_client.get("/portal/").status_code == 200

    def test_public_site_is_not_gated(self, client):
        assert client.get("/api/v1/website/labs").status_code == 200
