# models/reservations.py

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.sql import func

from stay_booking.models.base import Base, Money, qualified, table_args


class Reservation(Base):
    """
    ORM model for reservations (bookings).

    Each reservation books one room at a property for the half-open date range
    [check_in, check_out). The price snapshot columns hold the breakdown from
    the last price computation; they are overwritten only by a reschedule.
    Non-pending reservations are never deleted, so cancelled and rejected rows
    remain as the audit trail.
    """

    __tablename__ = "reservations"
    __table_args__ = table_args(
        CheckConstraint("check_in < check_out"),
        CheckConstraint("nights >= 1"),
        CheckConstraint("guests >= 1"),
        CheckConstraint("total >= 0"),
        Index("ix_reservations_property_range", "property_id", "check_in", "check_out"),
        Index("ix_reservations_status_created", "status", "created_at"),
        # Deleted pending reservations must never hand their id to a new booking
        sqlite_autoincrement=True,
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    property_id = Column(
        Integer, ForeignKey(qualified("properties.id"), ondelete="CASCADE"), nullable=False
    )
    customer_id = Column(
        Integer,
        ForeignKey(qualified("customers.id"), ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    coupon_id = Column(
        Integer, ForeignKey(qualified("promo_codes.id"), ondelete="SET NULL"), nullable=True
    )
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    nights = Column(Integer, nullable=False)
    guests = Column(Integer, nullable=False)
    status = Column(String(16), nullable=False)

    # Price snapshot
    base_price_per_night = Column(Money, nullable=False)
    base_total = Column(Money, nullable=False)
    cleaning_fee = Column(Money, nullable=False)
    service_fee = Column(Money, nullable=False)
    subtotal = Column(Money, nullable=False)
    taxes = Column(Money, nullable=False)
    discount = Column(Money, nullable=False)
    total = Column(Money, nullable=False)
    coupon_code = Column(String(20), nullable=True)
    coupon_discount_percentage = Column(Money, nullable=True)

    confirmed_by = Column(String(16), nullable=True)  # owner | auto
    cancellation_reason = Column(String, nullable=True)
    cancellation_policy = Column(String(32), nullable=True)
    refund_amount = Column(Money, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    auto_confirmed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    checked_in_at = Column(DateTime(timezone=True), nullable=True)
    checked_out_at = Column(DateTime(timezone=True), nullable=True)
