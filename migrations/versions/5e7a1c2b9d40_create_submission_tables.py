"""create_submission_tables

Tables written by the shop checkout, donation and funding workflows, plus
portal package interest and contact messages.

Revision ID: 5e7a1c2b9d40
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "5e7a1c2b9d40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    existing_tables = set(sa_inspect(bind).get_table_names())

    if "orders" not in existing_tables:
        op.create_table(
            "orders",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("code", sa.String(length=20), nullable=False),
            sa.Column("customer_name", sa.String(length=200), nullable=False),
            sa.Column("customer_email", sa.String(length=254), nullable=False),
            sa.Column("customer_phone", sa.String(length=50), nullable=False),
            sa.Column("pickup_location_id", sa.String(length=100), nullable=True),
            sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
            sa.Column("currency", sa.String(length=3), nullable=False, server_default="EUR"),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("code"),
        )

    if "order_lines" not in existing_tables:
        op.create_table(
            "order_lines",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("order_id", sa.Integer(), nullable=False),
            sa.Column("product_id", sa.String(length=100), nullable=False),
            sa.Column("product_name", sa.String(length=200), nullable=False),
            sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
            sa.Column("quantity", sa.Integer(), nullable=False),
            sa.CheckConstraint("quantity >= 1", name="ck_order_lines_quantity_positive"),
            sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_order_lines_order_id", "order_lines", ["order_id"])

    if "donations" not in existing_tables:
        op.create_table(
            "donations",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("amount", sa.Numeric(10, 2), nullable=False),
            sa.Column("is_monthly", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("donor_name", sa.String(length=200), nullable=False),
            sa.Column("donor_email", sa.String(length=254), nullable=False),
            sa.Column("message", sa.Text(), nullable=True),
            sa.Column("project_id", sa.String(length=100), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("id"),
        )

    if "funding_allocations" not in existing_tables:
        op.create_table(
            "funding_allocations",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("proposal_id", sa.String(length=100), nullable=False),
            sa.Column("proposal_title", sa.String(length=300), nullable=True),
            sa.Column("partner_id", sa.String(length=100), nullable=False),
            sa.Column("lab_name", sa.String(length=200), nullable=True),
            sa.Column("amount", sa.Integer(), nullable=False),
            sa.Column("applied_amount", sa.Integer(), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(
            "ix_funding_allocations_proposal_id", "funding_allocations", ["proposal_id"],
        )

    if "package_interests" not in existing_tables:
        op.create_table(
            "package_interests",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("partner_id", sa.String(length=100), nullable=False),
            sa.Column("package_id", sa.String(length=100), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint(
                "partner_id", "package_id", name="uq_package_interest_partner_package",
            ),
        )

    if "contact_messages" not in existing_tables:
        op.create_table(
            "contact_messages",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("channel", sa.String(length=20), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=True),
            sa.Column("email", sa.String(length=254), nullable=True),
            sa.Column("subject", sa.String(length=200), nullable=False),
            sa.Column("message", sa.Text(), nullable=False),
            sa.Column("lab", sa.String(length=200), nullable=True),
            sa.Column("partner_id", sa.String(length=100), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("id"),
        )


def downgrade():
    bind = op.get_bind()
    existing_tables = set(sa_inspect(bind).get_table_names())

    for table in ("contact_messages", "package_interests", "donations"):
        if table in existing_tables:
            op.drop_table(table)
    if "funding_allocations" in existing_tables:
        op.drop_index("ix_funding_allocations_proposal_id", table_name="funding_allocations")
        op.drop_table("funding_allocations")
    if "order_lines" in existing_tables:
        op.drop_index("ix_order_lines_order_id", table_name="order_lines")
        op.drop_table("order_lines")
    if "orders" in existing_tables:
        op.drop_table("orders")
