"""
Cart aggregate — (product, quantity) lines held in the visitor's session.

Invariants:
    - at most one line per product id
    - a line's quantity is never below 1; setting it below 1 removes the line
    - totals are derived on every read, never stored
"""

from collections import OrderedDict


class CartError(Exception):
    """Raised when a cart operation is refused (e.g. product out of stock)."""

    def __init__(self, message, status_code=400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class CartLine:
    __slots__ = ("product", "quantity")

    def __init__(self, product, quantity):
        self.product = product
        self.quantity = quantity

    @property
    def line_total(self):
        return self.product["price"] * self.quantity

    def to_dict(self):
        return {
            "product": self.product,
            "quantity": self.quantity,
            "line_total": round(self.line_total, 2),
        }


class Cart:
    """In-memory cart; serialise with to_dict()/from_dict() between requests."""

    def __init__(self, lines=None):
        self._lines = OrderedDict()
        for line in lines or []:
            self.add(line["product"], line["quantity"])

    # ── Mutations ────────────────────────────────────────────────────────

    def add(self, product, quantity=1):
        """Add ``quantity`` of ``product``; merges into an existing line."""
        quantity = int(quantity)
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        line = self._lines.get(product["id"])
        if line is None:
            self._lines[product["id"]] = CartLine(dict(product), quantity)
        else:
            line.quantity += quantity
        return self._lines[product["id"]]

    def set_quantity(self, product_id, quantity):
        """Set a line's quantity; anything below 1 removes the line."""
        quantity = int(quantity)
        if quantity < 1:
            self.remove(product_id)
            return None
        line = self._lines.get(product_id)
        if line is None:
            raise KeyError(product_id)
        line.quantity = quantity
        return line

    def remove(self, product_id):
        """Delete a line if present; silently ignores unknown ids."""
        self._lines.pop(product_id, None)

    def clear(self):
        self._lines.clear()

    # ── Reads ────────────────────────────────────────────────────────────

    @property
    def lines(self):
        return list(self._lines.values())

    def get(self, product_id):
        return self._lines.get(product_id)

    def __contains__(self, product_id):
        return product_id in self._lines

    def __len__(self):
        return len(self._lines)

    @property
    def subtotal(self):
        return round(sum(line.line_total for line in self._lines.values()), 2)

    @property
    def item_count(self):
        return sum(line.quantity for line in self._lines.values())

    @property
    def is_empty(self):
        return not self._lines

    def suggestions(self, products, limit=3):
        """In-stock products not already in the cart."""
        return [
            p for p in products
            if p["id"] not in self._lines and p.get("stock", 0) > 0
        ][:limit]

    # ── Serialisation ────────────────────────────────────────────────────

    def to_dict(self):
        return {
            "lines": [
                {"product": line.product, "quantity": line.quantity}
                for line in self._lines.values()
            ]
        }

    @classmethod
    def from_dict(cls, data):
        return cls((data or {}).get("lines", []))

    def summary(self, free_pickup_threshold):
        """Cart view for the API: lines plus every derived figure."""
        subtotal = self.subtotal
        return {
            "lines": [line.to_dict() for line in self._lines.values()],
            "subtotal": subtotal,
            "item_count": self.item_count,
            "amount_to_free_pickup": amount_to_free_pickup(subtotal, free_pickup_threshold),
            "free_pickup_progress": free_pickup_progress(subtotal, free_pickup_threshold),
        }


def amount_to_free_pickup(subtotal, threshold):
    """What is left to spend before pickup becomes free (never negative)."""
    return round(max(0.0, threshold - subtotal), 2)


def free_pickup_progress(subtotal, threshold):
    """Progress towards the free-pickup threshold, 0–100."""
    if threshold <= 0:
        return 100
    return min(100, round(subtotal / threshold * 100))
