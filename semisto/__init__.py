"""
Semisto website backend
Flask Application Factory.

Usage:
    from semisto import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask, abort, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from sqlalchemy.exc import SQLAlchemyError

from semisto.config import config
from semisto.models import db
from semisto.middleware.logging_config import configure_logging
from semisto.middleware.portal_gate import init_portal_gate
from semisto.middleware.rate_limiter import init_rate_limits
from semisto.middleware.security_headers import init_security_headers
from semisto.middleware.timing import init_request_timing

logger = logging.getLogger(__name__)

migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],  # per-blueprint limits only
    storage_uri=os.getenv("REDIS_URL", "memory://"),
)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: One of "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()],
             supports_credentials=True)
    else:
        CORS(app)

    # ── Middleware ───────────────────────────────────────────────────────
    init_security_headers(app)
    init_request_timing(app)
    init_portal_gate(app)

    # ── Request guards (input length + Content-Type) ─────────────────────
    app.config.setdefault("MAX_CONTENT_LENGTH", 1 * 1024 * 1024)  # 1 MB

    @app.before_request
    def _guard_request():
        max_len = app.config.get("MAX_CONTENT_LENGTH")
        if max_len and request.content_length and request.content_length > max_len:
            abort(413, description="Request body too large")
        # The portal login form posts form-encoded data outside /api/v1/.
        if request.method in ("POST", "PUT", "PATCH") and request.path.startswith("/api/v1/"):
            ct = request.content_type or ""
            if request.content_length and "json" not in ct:
                abort(415, description="Content-Type must be application/json")

    # ── Models & tables ──────────────────────────────────────────────────
    from semisto.models import submission as _submission_models  # noqa: F401

    if app.config.get("SQLALCHEMY_DATABASE_URI"):
        if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///") and not app.testing:
            os.makedirs(app.instance_path, exist_ok=True)
        with app.app_context():
            try:
                db.create_all()
                app.logger.info("db.create_all() completed successfully")
            except SQLAlchemyError as e:
                app.logger.warning("db.create_all() failed: %s", e)

    # ── Blueprints ───────────────────────────────────────────────────────
    from semisto.blueprints.contact_bp import contact_bp
    from semisto.blueprints.donation_bp import donation_bp
    from semisto.blueprints.health_bp import health_bp
    from semisto.blueprints.portal_auth_bp import portal_auth_bp
    from semisto.blueprints.portal_bp import portal_bp
    from semisto.blueprints.shop_bp import shop_bp
    from semisto.blueprints.website_bp import website_bp

    app.register_blueprint(website_bp)
    app.register_blueprint(shop_bp)
    app.register_blueprint(donation_bp)
    app.register_blueprint(contact_bp)
    app.register_blueprint(portal_bp)
    app.register_blueprint(portal_auth_bp)
    app.register_blueprint(health_bp)

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        return {"error": "Not found", "code": "ERR_NOT_FOUND", "path": request.path}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(413)
    def too_large(e):
        return {"error": "Request body too large"}, 413

    @app.errorhandler(415)
    def unsupported_media_type(e):
        return {"error": e.description, "code": "ERR_VALIDATION_INVALID"}, 415

    @app.errorhandler(429)
    def rate_limited(e):
        return {"error": "Too many requests", "retry_after": e.description}, 429

    @app.errorhandler(SQLAlchemyError)
    def database_error(e):
        db.session.rollback()
        logger.error("Database error on %s: %s", request.path, e, exc_info=True)
        return {"error": "Database error", "code": "ERR_DATABASE"}, 500

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return {"error": "Internal server error", "code": "ERR_INTERNAL"}, 500

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    return app
