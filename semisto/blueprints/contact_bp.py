"""Contact Blueprint — public contact form."""

from flask import Blueprint, jsonify, request

from semisto.services import contact_service as svc
from semisto.services.contact_service import ContactValidationError
from semisto.utils.errors import E, api_error

contact_bp = Blueprint("contact", __name__, url_prefix="/api/v1/contact")


@contact_bp.route("/subjects", methods=["GET"])
def list_subjects():
    return jsonify(list(svc.SITE_SUBJECTS)), 200


@contact_bp.route("", methods=["POST"])
def send_message():
    data = request.get_json(silent=True) or {}
    try:
        msg = svc.send_site_message(data)
    except ContactValidationError as exc:
        return api_error(E.VALIDATION_INVALID, exc.message, details={"fields": exc.errors})
    return jsonify({"id": msg.id, "message": "Message sent"}), 201
