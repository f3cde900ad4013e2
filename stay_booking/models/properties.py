"""SQLAlchemy model for the property inventory projection."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, text
from sqlalchemy.sql import func

from stay_booking.models.base import Base, Money, table_args


class Property(Base):
    """
    ORM model for a bookable property.

    Rows are owned by the external inventory system and arrive through the
    property upsert; the booking core only reads them, except for the
    suspension flag which triggers cancellation of open reservations.
    """

    __tablename__ = "properties"
    __table_args__ = table_args()

    id = Column(Integer, primary_key=True, autoincrement=False)  # Inventory system ID
    owner_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    total_rooms = Column(Integer, nullable=False, server_default=text("1"))
    guest_capacity = Column(Integer, nullable=False, server_default=text("1"))
    base_price = Column(Money, nullable=False)
    cleaning_fee = Column(Money, nullable=False, server_default=text("0"))
    service_fee = Column(Money, nullable=False, server_default=text("0"))
    is_approved = Column(Boolean, nullable=False, server_default=text("FALSE"))
    is_suspended = Column(Boolean, nullable=False, server_default=text("FALSE"))
    suspension_reason = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
