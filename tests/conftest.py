"""
Shared pytest fixtures for the Semisto backend test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - portal_client: test client carrying a valid portal session cookie
    - remote_catalog: turns CATALOG_USE_API on for one test
"""

import pytest

from semisto import create_app
from semisto.auth import PORTAL_COOKIE
from semisto.models import db as _db


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def portal_client(app):
    """Test client already logged in to the partner portal."""
    c = app.test_client()
    c.set_cookie(PORTAL_COOKIE, app.config["PORTAL_TOKEN"])
    return c


@pytest.fixture()
def remote_catalog(app, monkeypatch):
    """Enable the remote catalog source for a single test."""
    monkeypatch.setitem(app.config, "CATALOG_USE_API", True)
    return app
