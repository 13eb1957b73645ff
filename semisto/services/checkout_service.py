"""
Checkout Service — shop order flow.

Steps:  cart → info → pickup → confirm

    cart     guard: at least one line
    info     guard: name, email, phone filled in; email well-formed
    pickup   guard: a pickup Lab chosen among the offered ones;
             skipped when nothing in the order needs collecting
             (online courses only)
    confirm  terminal: the order is placed exactly once

Orders are paid at pickup; placing one only records it.
"""

import logging
import uuid
from decimal import Decimal

from semisto.models import db
from semisto.models.submission import Order, OrderLine
from semisto.services.workflow import Step, Workflow
from semisto.utils.helpers import is_blank, is_valid_email

logger = logging.getLogger(__name__)

# Product types delivered without a physical pickup.
NON_PHYSICAL_TYPES = frozenset({"course"})

CHECKOUT_FIELDS = {
    "name": "",
    "email": "",
    "phone": "",
    "pickup_location_id": "",
}


# ── Guards ───────────────────────────────────────────────────────────────


def has_lines(values):
    return bool(values.get("lines"))


def customer_info_complete(values):
    if any(is_blank(values.get(f)) for f in ("name", "email", "phone")):
        return False
    return is_valid_email(values["email"])


def needs_pickup(values):
    return any(line.get("type") not in NON_PHYSICAL_TYPES for line in values.get("lines", []))


def pickup_chosen(values):
    choice = values.get("pickup_location_id")
    if is_blank(choice):
        return False
    return choice in {opt["id"] for opt in values.get("pickup_options", [])}


# ── Commit ───────────────────────────────────────────────────────────────


def order_code(order_id):
    """Public order code for a row id: CMD-0001, CMD-0002, ..."""
    return f"CMD-{order_id:04d}"


def place_order(values):
    """Persist the order and return what the confirmation screen shows."""
    order = Order(
        # Unique placeholder until the row id is known.
        code=f"tmp-{uuid.uuid4().hex[:16]}",
        customer_name=values["name"].strip(),
        customer_email=values["email"].strip(),
        customer_phone=values["phone"].strip(),
        pickup_location_id=values.get("pickup_location_id") if needs_pickup(values) else None,
        subtotal=Decimal(str(values.get("subtotal", 0))),
        currency=values.get("currency", "EUR"),
    )
    for line in values["lines"]:
        order.lines.append(OrderLine(
            product_id=line["product_id"],
            product_name=line["name"],
            unit_price=Decimal(str(line["price"])),
            quantity=line["quantity"],
        ))
    db.session.add(order)
    db.session.flush()
    order.code = order_code(order.id)
    db.session.commit()
    logger.info("Order %s placed (%d lines, %.2f)", order.code, len(order.lines), order.subtotal)
    return {
        "order_code": order.code,
        "name": order.customer_name,
        "email": order.customer_email,
        "pickup_location_id": order.pickup_location_id,
        "subtotal": float(order.subtotal),
    }


# ── Workflow ─────────────────────────────────────────────────────────────


def build_checkout_workflow(place_order=place_order):
    """Checkout workflow; ``place_order`` is the order submission collaborator."""
    return Workflow(
        "checkout",
        steps=[
            Step("cart", guard=has_lines, error="Your cart is empty"),
            Step(
                "info", guard=customer_info_complete,
                error="Please fill in your name, a valid email and your phone number",
            ),
            Step(
                "pickup", guard=pickup_chosen, skip=lambda v: not needs_pickup(v),
                error="Please choose a pickup location",
            ),
            Step("confirm"),
        ],
        commit=place_order,
        fields=CHECKOUT_FIELDS,
    )


checkout_workflow = build_checkout_workflow()


def checkout_context(cart, labs, currency="EUR"):
    """Freeze the cart and pickup options a checkout run works from."""
    return {
        "lines": [
            {
                "product_id": line.product["id"],
                "name": line.product["name"],
                "type": line.product.get("type"),
                "price": line.product["price"],
                "quantity": line.quantity,
            }
            for line in cart.lines
        ],
        "subtotal": cart.subtotal,
        "currency": currency,
        "pickup_options": [
            {"id": lab["id"], "name": lab["name"], "address": lab.get("address")}
            for lab in labs
        ],
    }


def start_checkout(cart, labs, currency="EUR", workflow=None):
    workflow = workflow or checkout_workflow
    return workflow.start(context=checkout_context(cart, labs, currency))
