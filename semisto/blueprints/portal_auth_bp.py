"""
Portal Auth Blueprint — login / logout / current user.

    POST /api/portal/login    form: email, password
                              → 302 /portal/ with the portal-token cookie
                              → 302 /portal/login?error=invalid
    GET|POST /api/portal/logout
    GET  /api/portal/me       → {user, partner} or 401
"""

from flask import Blueprint, current_app, jsonify, redirect, request

from semisto import auth
from semisto.services import portal_service
from semisto.utils.errors import E, api_error

portal_auth_bp = Blueprint("portal_auth", __name__, url_prefix="/api/portal")


@portal_auth_bp.route("/login", methods=["POST"])
def login():
    email = request.form.get("email", "")
    password = request.form.get("password", "")
    try:
        token = auth.login(email, password)
    except auth.PortalAuthError:
        return redirect("/portal/login?error=invalid", code=302)

    response = redirect("/portal/", code=302)
    response.set_cookie(
        auth.PORTAL_COOKIE,
        token,
        max_age=auth.COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        samesite="Lax",
        secure=current_app.config.get("PORTAL_COOKIE_SECURE", False),
    )
    return response


@portal_auth_bp.route("/logout", methods=["GET", "POST"])
def logout():
    response = redirect("/portal/login", code=302)
    response.delete_cookie(auth.PORTAL_COOKIE, path="/")
    return response


@portal_auth_bp.route("/me", methods=["GET"])
def me():
    user = auth.get_auth_user(request.cookies.get(auth.PORTAL_COOKIE))
    if user is None:
        return api_error(E.UNAUTHORIZED, "Not authenticated")
    return jsonify({"user": user, "partner": portal_service.get_partner()}), 200
