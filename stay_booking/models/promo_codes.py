"""SQLAlchemy model for promotional codes."""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, text
from sqlalchemy.sql import func

from stay_booking.models.base import Base, Money, qualified, table_args


class PromoCode(Base):
    """
    ORM model for property promotional codes.

    current_uses is only ever changed through guarded UPDATE statements so it
    never exceeds max_uses and never drops below zero.
    """

    __tablename__ = "promo_codes"
    __table_args__ = table_args(
        CheckConstraint("discount_percentage >= 0 AND discount_percentage <= 100"),
        CheckConstraint("current_uses >= 0"),
        CheckConstraint("max_uses IS NULL OR current_uses <= max_uses"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    property_id = Column(
        Integer,
        ForeignKey(qualified("properties.id"), ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    code = Column(String(20), nullable=False, unique=True)
    discount_percentage = Column(Money, nullable=False)
    valid_from = Column(DateTime(timezone=True), nullable=False)
    valid_to = Column(DateTime(timezone=True), nullable=False)
    max_uses = Column(Integer, nullable=True)
    current_uses = Column(Integer, nullable=False, server_default=text("0"))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
