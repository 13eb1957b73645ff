"""
Submission records — what the checkout, donation and funding workflows
hand off when they reach their terminal step, plus portal package interest
and contact-form messages.
"""

from datetime import datetime, timezone

from semisto.models import db


def _utcnow():
    return datetime.now(timezone.utc)


class Order(db.Model):
    """A shop order placed through the checkout flow (pay at pickup)."""
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(20), unique=True, nullable=False)  # e.g. "CMD-0001"
    customer_name = db.Column(db.String(200), nullable=False)
    customer_email = db.Column(db.String(254), nullable=False)
    customer_phone = db.Column(db.String(50), nullable=False)
    pickup_location_id = db.Column(db.String(100))  # lab id, NULL when no pickup needed
    subtotal = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    currency = db.Column(db.String(3), nullable=False, default="EUR")
    created_at = db.Column(db.DateTime, default=_utcnow)

    lines = db.relationship(
        "OrderLine", back_populates="order",
        cascade="all, delete-orphan", order_by="OrderLine.id",
    )

    def to_dict(self, include_lines=True):
        d = {
            "id": self.id,
            "code": self.code,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "pickup_location_id": self.pickup_location_id,
            "subtotal": float(self.subtotal or 0),
            "currency": self.currency,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_lines:
            d["lines"] = [line.to_dict() for line in self.lines]
        return d


class OrderLine(db.Model):
    """One product line of an order; price is frozen at order time."""
    __tablename__ = "order_lines"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(
        db.Integer, db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    product_id = db.Column(db.String(100), nullable=False)
    product_name = db.Column(db.String(200), nullable=False)
    unit_price = db.Column(db.Numeric(10, 2), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    order = db.relationship("Order", back_populates="lines")

    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_order_lines_quantity_positive"),
    )

    def to_dict(self):
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "unit_price": float(self.unit_price),
            "quantity": self.quantity,
        }


class Donation(db.Model):
    """A once-off or monthly donation pledge."""
    __tablename__ = "donations"

    id = db.Column(db.Integer, primary_key=True)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    is_monthly = db.Column(db.Boolean, nullable=False, default=False)
    donor_name = db.Column(db.String(200), nullable=False)
    donor_email = db.Column(db.String(254), nullable=False)
    message = db.Column(db.Text)
    project_id = db.Column(db.String(100))  # optional catalog project the gift targets
    created_at = db.Column(db.DateTime, default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "amount": float(self.amount),
            "is_monthly": self.is_monthly,
            "donor_name": self.donor_name,
            "donor_email": self.donor_email,
            "message": self.message,
            "project_id": self.project_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class FundingAllocation(db.Model):
    """A partner allocation towards a funding proposal.

    ``amount`` is what the partner asked to allocate; ``applied_amount`` is
    what actually counted towards the proposal once clamped to its target.
    """
    __tablename__ = "funding_allocations"

    id = db.Column(db.Integer, primary_key=True)
    proposal_id = db.Column(db.String(100), nullable=False, index=True)
    proposal_title = db.Column(db.String(300))
    partner_id = db.Column(db.String(100), nullable=False)
    lab_name = db.Column(db.String(200))
    amount = db.Column(db.Integer, nullable=False)
    applied_amount = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False, default="pending")  # allocated | spent | pending
    created_at = db.Column(db.DateTime, default=_utcnow)

    def to_funding_dict(self):
        """Shape matching the ``fundings`` entries of the portal bundle."""
        return {
            "id": f"funding-db-{self.id}",
            "proposalId": self.proposal_id,
            "proposalTitle": self.proposal_title,
            "amount": self.amount,
            "date": self.created_at.date().isoformat() if self.created_at else None,
            "status": self.status,
            "labName": self.lab_name,
        }


class PackageInterest(db.Model):
    """A partner's expression of interest in an engagement package."""
    __tablename__ = "package_interests"

    id = db.Column(db.Integer, primary_key=True)
    partner_id = db.Column(db.String(100), nullable=False)
    package_id = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=_utcnow)

    __table_args__ = (
        db.UniqueConstraint("partner_id", "package_id", name="uq_package_interest_partner_package"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "partner_id": self.partner_id,
            "package_id": self.package_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class ContactMessage(db.Model):
    """Message sent through the public contact form or the portal."""
    __tablename__ = "contact_messages"

    id = db.Column(db.Integer, primary_key=True)
    channel = db.Column(db.String(20), nullable=False)  # site | portal
    name = db.Column(db.String(200))
    email = db.Column(db.String(254))
    subject = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    lab = db.Column(db.String(200))
    partner_id = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "channel": self.channel,
            "name": self.name,
            "email": self.email,
            "subject": self.subject,
            "message": self.message,
            "lab": self.lab,
            "partner_id": self.partner_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
