"""
Partner portal authentication.

The portal uses a single demo partner account. A successful login hands
out an opaque session token that is stored in the ``portal-token`` cookie;
every portal page is gated on that cookie.

Credentials and the token come from config:
    PORTAL_DEMO_EMAIL / PORTAL_DEMO_PASSWORD / PORTAL_TOKEN
"""

import hmac
import logging

from flask import current_app

logger = logging.getLogger(__name__)

PORTAL_COOKIE = "portal-token"
COOKIE_MAX_AGE = 60 * 60 * 24 * 7  # 7 days

MOCK_USER = {
    "id": "user-001",
    "name": "Sophie Vandenberghe",
    "role": "Responsable RSE",
    "partnerId": "partner-001",
}


class PortalAuthError(Exception):
    """Login refused. The message never says which credential was wrong."""

    def __init__(self, message="Invalid email or password", status_code=401):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _same(a, b):
    return hmac.compare_digest(str(a or "").encode(), str(b or "").encode())


def login(email, password):
    """Check credentials and return the session token.

    Raises:
        PortalAuthError: on any mismatch.
    """
    cfg = current_app.config
    valid_email = _same(email, cfg["PORTAL_DEMO_EMAIL"])
    valid_password = _same(password, cfg["PORTAL_DEMO_PASSWORD"])
    if not (valid_email and valid_password):
        logger.warning("Portal login refused for %s", email or "<empty>")
        raise PortalAuthError()
    logger.info("Portal login: %s", email)
    return cfg["PORTAL_TOKEN"]


def is_authorized(token):
    """True when ``token`` is the current portal session token."""
    if not token:
        return False
    return _same(token, current_app.config["PORTAL_TOKEN"])


def get_auth_user(token):
    """The user behind ``token``, or None."""
    if not is_authorized(token):
        return None
    user = dict(MOCK_USER)
    user["email"] = current_app.config["PORTAL_DEMO_EMAIL"]
    return user
