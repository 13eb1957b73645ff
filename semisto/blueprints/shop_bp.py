"""
Shop Blueprint — session cart and checkout flow.

Cart:
    GET    /api/v1/shop/cart                  summary + suggestions
    POST   /api/v1/shop/cart/items            {product_id, quantity}
    PUT    /api/v1/shop/cart/items/<id>       {quantity}  (< 1 removes)
    DELETE /api/v1/shop/cart/items/<id>
    DELETE /api/v1/shop/cart

Checkout:
    GET    /api/v1/shop/checkout              current run
    POST   /api/v1/shop/checkout/start        new run from the cart
    POST   /api/v1/shop/checkout/dispatch     {type, ...}
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from semisto.blueprints import (
    dispatch_response, load_cart, load_run, save_cart, save_run,
)
from semisto.services import catalog_service
from semisto.services import checkout_service as svc
from semisto.services.cart import CartError
from semisto.services.listing import clamp_quantity
from semisto.utils.errors import E, api_error

logger = logging.getLogger(__name__)

shop_bp = Blueprint("shop", __name__, url_prefix="/api/v1/shop")

RUN_KEY = "checkout"


@shop_bp.errorhandler(CartError)
def _cart_error(exc):
    code = E.CONFLICT_STATE if exc.status_code == 409 else E.VALIDATION_INVALID
    return api_error(code, exc.message, status=exc.status_code)


def _cart_view(cart):
    view = cart.summary(current_app.config["FREE_PICKUP_THRESHOLD"])
    view["currency"] = current_app.config["SHOP_CURRENCY"]
    view["suggestions"] = cart.suggestions(catalog_service.get_products())
    return view


def _parse_quantity(data, default=None):
    raw = data.get("quantity", default)
    if isinstance(raw, bool):
        raise CartError("quantity must be a whole number")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise CartError("quantity must be a whole number") from None


# ═══════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════

@shop_bp.route("/cart", methods=["GET"])
def get_cart():
    return jsonify(_cart_view(load_cart())), 200


@shop_bp.route("/cart/items", methods=["POST"])
def add_item():
    """Add a product; quantities are capped at the product stock."""
    data = request.get_json(silent=True) or {}
    product_id = data.get("product_id")
    if not product_id:
        return api_error(E.VALIDATION_REQUIRED, "product_id is required")
    quantity = _parse_quantity(data, default=1)
    if quantity < 1:
        raise CartError("quantity must be at least 1")

    product = catalog_service.get_product_by_id(product_id)
    if not product:
        return api_error(E.NOT_FOUND, "Product not found")
    if product.get("stock", 0) <= 0:
        raise CartError(f"{product['name']} is out of stock", status_code=409)

    cart = load_cart()
    line = cart.add(product, quantity)
    cart.set_quantity(product_id, clamp_quantity(line.quantity, product["stock"]))
    save_cart(cart)
    return jsonify(_cart_view(cart)), 201


@shop_bp.route("/cart/items/<product_id>", methods=["PUT"])
def update_item(product_id):
    data = request.get_json(silent=True) or {}
    quantity = _parse_quantity(data)
    cart = load_cart()
    line = cart.get(product_id)
    if line is None:
        return api_error(E.NOT_FOUND, "Product is not in the cart")
    if quantity >= 1:
        quantity = clamp_quantity(quantity, line.product.get("stock", quantity))
    cart.set_quantity(product_id, quantity)
    save_cart(cart)
    return jsonify(_cart_view(cart)), 200


@shop_bp.route("/cart/items/<product_id>", methods=["DELETE"])
def remove_item(product_id):
    cart = load_cart()
    cart.remove(product_id)
    save_cart(cart)
    return jsonify(_cart_view(cart)), 200


@shop_bp.route("/cart", methods=["DELETE"])
def clear_cart():
    cart = load_cart()
    cart.clear()
    save_cart(cart)
    return jsonify(_cart_view(cart)), 200


# ═══════════════════════════════════════════════════════════════
# Checkout
# ═══════════════════════════════════════════════════════════════

@shop_bp.route("/checkout", methods=["GET"])
def get_checkout():
    state = load_run(RUN_KEY)
    if state is None:
        return api_error(E.NOT_FOUND, "No checkout in progress")
    return jsonify(svc.checkout_workflow.describe(state)), 200


@shop_bp.route("/checkout/start", methods=["POST"])
def start_checkout():
    """Freeze the current cart into a new checkout run."""
    cart = load_cart()
    state = svc.start_checkout(
        cart, catalog_service.get_labs(), currency=current_app.config["SHOP_CURRENCY"],
    )
    save_run(RUN_KEY, state)
    return jsonify(svc.checkout_workflow.describe(state)), 201


@shop_bp.route("/checkout/dispatch", methods=["POST"])
def dispatch_checkout():
    state = load_run(RUN_KEY)
    if state is None:
        return api_error(E.CONFLICT_STATE, "No checkout in progress")
    action = request.get_json(silent=True) or {}

    result = svc.checkout_workflow.dispatch(state, action)
    if result.ok:
        save_run(RUN_KEY, result.state)
        if result.committed:
            cart = load_cart()
            cart.clear()
            save_cart(cart)
    return dispatch_response(state, result, svc.checkout_workflow.describe)
