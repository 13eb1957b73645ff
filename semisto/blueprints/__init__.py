"""
Semisto website backend
Blueprint registry and helpers shared by the blueprints.

Visitor state (the cart and in-progress workflow runs) lives in the signed
Flask session cookie, so every request reads it, applies one change and
writes it back.
"""

from flask import jsonify, request, session

from semisto.services.cart import Cart
from semisto.services.workflow import WorkflowState
from semisto.utils.errors import api_error

CART_KEY = "cart"
RUN_PREFIX = "run:"


def query_int(name, default):
    """Integer query parameter; falls back to ``default`` on junk."""
    try:
        return int(request.args.get(name, default))
    except (ValueError, TypeError):
        return default


def query_filter(name):
    """Optional string filter; empty and "all" mean no filter."""
    value = (request.args.get(name) or "").strip()
    if not value or value == "all":
        return None
    return value


# ── Session-held cart ────────────────────────────────────────────────────


def load_cart():
    return Cart.from_dict(session.get(CART_KEY))


def save_cart(cart):
    session[CART_KEY] = cart.to_dict()


# ── Session-held workflow runs ───────────────────────────────────────────


def load_run(key):
    data = session.get(RUN_PREFIX + key)
    if data is None:
        return None
    return WorkflowState.from_dict(data)


def save_run(key, state):
    session[RUN_PREFIX + key] = state.to_dict()


def drop_run(key):
    session.pop(RUN_PREFIX + key, None)


def dispatch_response(state, result, describe):
    """Turn a WorkflowResult into the JSON response for a dispatch call.

    ``describe`` renders a state for the client. Rejected actions keep the
    previous state and report it under ``details.state``.
    """
    if not result.ok:
        details = {"state": describe(state)}
        if result.step:
            details["step"] = result.step
        return api_error(result.code, result.error, details=details)
    body = describe(result.state)
    body["committed"] = result.committed
    return jsonify(body), 200
