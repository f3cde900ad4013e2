"""Initial booking schema

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-17 09:12:31.402118

"""

import sqlalchemy as sa

from alembic import op  # type: ignore[attr-defined]
from stay_booking.config import SCHEMA

# revision identifiers, used by Alembic.
revision = "3f1c9a2b7d10"
down_revision = None
branch_labels = None
depends_on = None

MONEY = sa.Numeric(14, 4)


def _fk(column: str) -> str:
    return f"{SCHEMA}.{column}" if SCHEMA else column


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("total_rooms", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("guest_capacity", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("base_price", MONEY, nullable=False),
        sa.Column("cleaning_fee", MONEY, server_default=sa.text("0"), nullable=False),
        sa.Column("service_fee", MONEY, server_default=sa.text("0"), nullable=False),
        sa.Column("is_approved", sa.Boolean(), server_default=sa.text("FALSE"), nullable=False),
        sa.Column("is_suspended", sa.Boolean(), server_default=sa.text("FALSE"), nullable=False),
        sa.Column("suspension_reason", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        schema=SCHEMA,
    )
    op.create_index("ix_properties_owner_id", "properties", ["owner_id"], schema=SCHEMA)

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("account_id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        schema=SCHEMA,
    )
    op.create_index("ix_customers_account_id", "customers", ["account_id"], unique=True, schema=SCHEMA)

    op.create_table(
        "promo_codes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("discount_percentage", MONEY, nullable=False),
        sa.Column("valid_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("valid_to", sa.DateTime(timezone=True), nullable=False),
        sa.Column("max_uses", sa.Integer(), nullable=True),
        sa.Column("current_uses", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("discount_percentage >= 0 AND discount_percentage <= 100"),
        sa.CheckConstraint("current_uses >= 0"),
        sa.CheckConstraint("max_uses IS NULL OR current_uses <= max_uses"),
        sa.ForeignKeyConstraint(["property_id"], [_fk("properties.id")], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
        schema=SCHEMA,
    )
    op.create_index("ix_promo_codes_property_id", "promo_codes", ["property_id"], schema=SCHEMA)

    op.create_table(
        "inventory_nights",
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("night", sa.Date(), nullable=False),
        sa.Column("booked", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.CheckConstraint("booked >= 0"),
        sa.ForeignKeyConstraint(["property_id"], [_fk("properties.id")], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("property_id", "night"),
        schema=SCHEMA,
    )

    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("coupon_id", sa.Integer(), nullable=True),
        sa.Column("check_in", sa.Date(), nullable=False),
        sa.Column("check_out", sa.Date(), nullable=False),
        sa.Column("nights", sa.Integer(), nullable=False),
        sa.Column("guests", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("base_price_per_night", MONEY, nullable=False),
        sa.Column("base_total", MONEY, nullable=False),
        sa.Column("cleaning_fee", MONEY, nullable=False),
        sa.Column("service_fee", MONEY, nullable=False),
        sa.Column("subtotal", MONEY, nullable=False),
        sa.Column("taxes", MONEY, nullable=False),
        sa.Column("discount", MONEY, nullable=False),
        sa.Column("total", MONEY, nullable=False),
        sa.Column("coupon_code", sa.String(length=20), nullable=True),
        sa.Column("coupon_discount_percentage", MONEY, nullable=True),
        sa.Column("confirmed_by", sa.String(length=16), nullable=True),
        sa.Column("cancellation_reason", sa.String(), nullable=True),
        sa.Column("cancellation_policy", sa.String(length=32), nullable=True),
        sa.Column("refund_amount", MONEY, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("auto_confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("checked_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("checked_out_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("check_in < check_out"),
        sa.CheckConstraint("nights >= 1"),
        sa.CheckConstraint("guests >= 1"),
        sa.CheckConstraint("total >= 0"),
        sa.ForeignKeyConstraint(["property_id"], [_fk("properties.id")], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["customer_id"], [_fk("customers.id")], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["coupon_id"], [_fk("promo_codes.id")], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        schema=SCHEMA,
        sqlite_autoincrement=True,
    )
    op.create_index("ix_reservations_customer_id", "reservations", ["customer_id"], schema=SCHEMA)
    op.create_index(
        "ix_reservations_property_range",
        "reservations",
        ["property_id", "check_in", "check_out"],
        schema=SCHEMA,
    )
    op.create_index(
        "ix_reservations_status_created", "reservations", ["status", "created_at"], schema=SCHEMA
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("reservations", schema=SCHEMA)
    op.drop_table("inventory_nights", schema=SCHEMA)
    op.drop_table("promo_codes", schema=SCHEMA)
    op.drop_table("customers", schema=SCHEMA)
    op.drop_table("properties", schema=SCHEMA)
