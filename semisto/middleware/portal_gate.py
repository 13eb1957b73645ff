"""Redirect unauthenticated visitors of /portal pages to the login page."""
from flask import redirect, request

from semisto.auth import PORTAL_COOKIE, is_authorized

LOGIN_PATH = "/portal/login"


def init_portal_gate(app):
    """Gate every /portal path except the login page on the portal cookie."""

    @app.before_request
    def require_portal_session():
        path = request.path
        if not path.startswith("/portal"):
            return None
        if path.rstrip("/") == LOGIN_PATH:
            return None
        if is_authorized(request.cookies.get(PORTAL_COOKIE)):
            return None
        return redirect(LOGIN_PATH, code=302)
