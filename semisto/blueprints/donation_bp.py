"""
Donation Blueprint — public donation flow.

    GET  /api/v1/donations/flow            current run (a new one if none)
    POST /api/v1/donations/flow/start      {project_slug?}
    POST /api/v1/donations/flow/dispatch   {type, ...}
    GET  /api/v1/donations/impact?amount=  what an amount pays for
"""

from flask import Blueprint, jsonify, request

from semisto.blueprints import dispatch_response, load_run, save_run
from semisto.services import catalog_service
from semisto.services import donation_service as svc
from semisto.utils.errors import E, api_error
from semisto.utils.helpers import coerce_amount

donation_bp = Blueprint("donation", __name__, url_prefix="/api/v1/donations")

RUN_KEY = "donation"


@donation_bp.route("/flow", methods=["GET"])
def get_flow():
    state = load_run(RUN_KEY)
    if state is None:
        state = svc.start_donation()
        save_run(RUN_KEY, state)
    return jsonify(svc.describe(state)), 200


@donation_bp.route("/flow/start", methods=["POST"])
def start_flow():
    """Start a new donation, optionally earmarked for a project."""
    data = request.get_json(silent=True) or {}
    project = None
    slug = data.get("project_slug")
    if slug:
        project = catalog_service.get_project_by_slug(slug)
        if not project:
            return api_error(E.NOT_FOUND, "Project not found")
    state = svc.start_donation(project)
    save_run(RUN_KEY, state)
    return jsonify(svc.describe(state)), 201


@donation_bp.route("/flow/dispatch", methods=["POST"])
def dispatch_flow():
    state = load_run(RUN_KEY) or svc.start_donation()
    action = request.get_json(silent=True) or {}
    result = svc.donation_workflow.dispatch(state, action)
    if result.ok:
        save_run(RUN_KEY, result.state)
    return dispatch_response(state, result, svc.describe)


@donation_bp.route("/impact", methods=["GET"])
def impact():
    amount = coerce_amount(request.args.get("amount"))
    return jsonify({"amount": amount, "impact": svc.impact_for(amount)}), 200
