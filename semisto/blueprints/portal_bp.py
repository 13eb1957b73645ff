"""
Partner Portal Blueprint.

Every route except /portal/login sits behind the portal gate
(semisto.middleware.portal_gate); unauthenticated requests never get here.
"""

from flask import Blueprint, jsonify, request

from semisto.auth import PORTAL_COOKIE, get_auth_user
from semisto.blueprints import dispatch_response, load_run, save_run
from semisto.services import contact_service
from semisto.services import funding_service
from semisto.services import portal_service as svc
from semisto.services.contact_service import ContactValidationError
from semisto.services.listing import similar_packages
from semisto.services.portal_service import PortalDataError
from semisto.utils.errors import E, api_error

portal_bp = Blueprint("portal", __name__, url_prefix="/portal")

LOGIN_ERRORS = {"invalid": "Invalid email or password"}


@portal_bp.errorhandler(PortalDataError)
def _portal_data_error(exc):
    return api_error(E.INTERNAL, exc.message)


def _partner_id():
    user = get_auth_user(request.cookies.get(PORTAL_COOKIE)) or {}
    return user.get("partnerId") or svc.get_partner()["id"]


def _funding_run_key(proposal_id):
    return f"funding:{proposal_id}"


# ═══════════════════════════════════════════════════════════════
# Login page & dashboard
# ═══════════════════════════════════════════════════════════════

@portal_bp.route("/login", methods=["GET"])
def login_page():
    """Data for the login screen (error banner after a failed attempt)."""
    error_key = request.args.get("error")
    return jsonify({
        "error": LOGIN_ERRORS.get(error_key) if error_key else None,
        "action": "/api/portal/login",
    }), 200


@portal_bp.route("/", methods=["GET"])
def dashboard():
    return jsonify(svc.dashboard(_partner_id())), 200


@portal_bp.route("/impact", methods=["GET"])
def impact():
    return jsonify(svc.get_impact_metrics()), 200


# ═══════════════════════════════════════════════════════════════
# Packages
# ═══════════════════════════════════════════════════════════════

@portal_bp.route("/packages", methods=["GET"])
def list_packages():
    interested = svc.interested_package_ids(_partner_id())
    packages = svc.get_packages()
    for pkg in packages:
        pkg["interestSent"] = pkg["id"] in interested
    return jsonify(packages), 200


@portal_bp.route("/packages/<package_id>", methods=["GET"])
def get_package(package_id):
    package = svc.get_package_by_id(package_id)
    if not package:
        return api_error(E.NOT_FOUND, "Package not found")
    package["interestSent"] = package_id in svc.interested_package_ids(_partner_id())
    return jsonify({
        "package": package,
        "similar": similar_packages(svc.get_packages(), package_id),
    }), 200


@portal_bp.route("/packages/<package_id>/interest", methods=["POST"])
def package_interest(package_id):
    """Record interest; a second request reports that it was already sent."""
    if not svc.get_package_by_id(package_id):
        return api_error(E.NOT_FOUND, "Package not found")
    interest, created = svc.register_package_interest(_partner_id(), package_id)
    body = {"interest": interest.to_dict(), "already_sent": not created}
    return jsonify(body), 201 if created else 200


# ═══════════════════════════════════════════════════════════════
# Engagements
# ═══════════════════════════════════════════════════════════════

@portal_bp.route("/engagements", methods=["GET"])
def list_engagements():
    status = request.args.get("status") or None
    return jsonify(svc.get_engagements(status)), 200


@portal_bp.route("/engagements/<engagement_id>", methods=["GET"])
def get_engagement(engagement_id):
    engagement = svc.get_engagement_by_id(engagement_id)
    if not engagement:
        return api_error(E.NOT_FOUND, "Engagement not found")
    return jsonify(engagement), 200


# ═══════════════════════════════════════════════════════════════
# Funding
# ═══════════════════════════════════════════════════════════════

@portal_bp.route("/funding", methods=["GET"])
def list_funding():
    return jsonify({
        "proposals": svc.get_funding_proposals(),
        "fundings": svc.get_fundings(_partner_id()),
    }), 200


@portal_bp.route("/funding/<proposal_id>", methods=["GET"])
def get_funding(proposal_id):
    proposal = svc.get_funding_proposal_by_id(proposal_id)
    if not proposal:
        return api_error(E.NOT_FOUND, "Funding proposal not found")
    state = load_run(_funding_run_key(proposal_id))
    return jsonify({
        "proposal": proposal,
        "flow": funding_service.describe(state) if state else None,
    }), 200


@portal_bp.route("/funding/<proposal_id>/start", methods=["POST"])
def start_funding(proposal_id):
    proposal = svc.get_funding_proposal_by_id(proposal_id)
    if not proposal:
        return api_error(E.NOT_FOUND, "Funding proposal not found")
    state = funding_service.start_funding(proposal, _partner_id())
    save_run(_funding_run_key(proposal_id), state)
    return jsonify(funding_service.describe(state)), 201


@portal_bp.route("/funding/<proposal_id>/dispatch", methods=["POST"])
def dispatch_funding(proposal_id):
    key = _funding_run_key(proposal_id)
    state = load_run(key)
    if state is None:
        proposal = svc.get_funding_proposal_by_id(proposal_id)
        if not proposal:
            return api_error(E.NOT_FOUND, "Funding proposal not found")
        state = funding_service.start_funding(proposal, _partner_id())
    action = request.get_json(silent=True) or {}
    result = funding_service.funding_workflow.dispatch(state, action)
    if result.ok:
        save_run(key, result.state)
    return dispatch_response(state, result, funding_service.describe)


# ═══════════════════════════════════════════════════════════════
# Contact
# ═══════════════════════════════════════════════════════════════

@portal_bp.route("/contact", methods=["GET"])
def contact_subjects():
    subjects = [{"id": k, "label": v} for k, v in contact_service.PORTAL_SUBJECTS.items()]
    return jsonify({"subjects": subjects, "partner": svc.get_partner()["name"]}), 200


@portal_bp.route("/contact", methods=["POST"])
def send_contact():
    data = request.get_json(silent=True) or {}
    try:
        msg = contact_service.send_portal_message(svc.get_partner(), data)
    except ContactValidationError as exc:
        return api_error(E.VALIDATION_INVALID, exc.message, details={"fields": exc.errors})
    return jsonify({"id": msg.id, "message": "Message sent"}), 201
