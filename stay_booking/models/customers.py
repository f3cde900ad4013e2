"""SQLAlchemy model for customer profiles keyed by external account id."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from stay_booking.models.base import Base, table_args


class Customer(Base):
    """
    ORM model for customer profiles.

    Each profile is created lazily the first time an account books or reads
    its reservations; account_id is the identity issued by the upstream
    authentication service.
    """

    __tablename__ = "customers"
    __table_args__ = table_args()

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(String, nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
