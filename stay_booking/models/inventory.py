"""SQLAlchemy model for per-property, per-night booked room counters."""

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Integer, text

from stay_booking.models.base import Base, qualified, table_args


class InventoryNight(Base):
    """
    Booked room count for one property on one calendar night.

    Claims and releases are single guarded UPDATE statements
    (booked < total_rooms / booked > 0), which is what keeps concurrent
    bookings from oversubscribing a night.
    """

    __tablename__ = "inventory_nights"
    __table_args__ = table_args(CheckConstraint("booked >= 0"))

    property_id = Column(
        Integer,
        ForeignKey(qualified("properties.id"), ondelete="CASCADE"),
        primary_key=True,
    )
    night = Column(Date, primary_key=True)
    booked = Column(Integer, nullable=False, server_default=text("0"))
