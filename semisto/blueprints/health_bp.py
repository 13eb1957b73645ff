"""
Health check blueprint.

Endpoints:
    GET /api/v1/health/ready  — simple 200 for load balancers
    GET /api/v1/health/live   — database and remote catalog status
"""

import logging
import time

from flask import Blueprint, current_app, jsonify

from semisto.integrations import catalog_gateway as gw_module
from semisto.models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/v1/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Dependency status. The remote catalog is optional and never fails the check."""
    checks = {}
    overall = True

    # ── Database ─────────────────────────────────────────────────────
    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        checks["database"] = {"status": "ok", "latency_ms": round((time.perf_counter() - t0) * 1000, 1)}
    except Exception as exc:
        db.session.rollback()
        checks["database"] = {"status": "error", "detail": str(exc)}
        overall = False
        logger.error("Health check — database failed: %s", exc)

    # ── Remote catalog ───────────────────────────────────────────────
    if current_app.config.get("CATALOG_USE_API"):
        result = gw_module.catalog_gateway.fetch(
            "/website/labs",
            base_url=current_app.config["CATALOG_API_URL"],
            timeout=current_app.config.get("CATALOG_API_TIMEOUT", 5),
        )
        if result.ok:
            checks["catalog"] = {"status": "ok", "latency_ms": result.duration_ms}
        else:
            checks["catalog"] = {"status": "fallback", "detail": result.error}
    else:
        checks["catalog"] = {"status": "skipped", "detail": "CATALOG_USE_API is off"}

    status = "ok" if overall else "degraded"
    return jsonify({"status": status, "checks": checks}), 200 if overall else 503
