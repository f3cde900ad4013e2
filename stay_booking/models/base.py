from sqlalchemy import Numeric
from sqlalchemy.orm import DeclarativeBase

from stay_booking.config import SCHEMA

# Money columns keep four decimal places so no rounding happens before output
Money = Numeric(14, 4, asdecimal=True)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models in this application inherit from this base class to provide
    consistent table metadata and ORM functionality across the database schema.
    """

    pass


def table_args(*constraints: object, **options: object) -> tuple:
    """Build __table_args__ carrying the configured schema (if any) and dialect options."""
    return (*constraints, {"schema": SCHEMA, **options})


def qualified(column: str) -> str:
    """Schema-qualify a `table.column` reference for ForeignKey targets."""
    return f"{SCHEMA}.{column}" if SCHEMA else column
