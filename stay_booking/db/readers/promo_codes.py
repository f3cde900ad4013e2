from datetime import datetime
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.engine import Connection

from stay_booking.domain.records import PromoCode as PromoCodeRecord
from stay_booking.models.promo_codes import PromoCode


def find_active_by_property(
    conn: Connection, property_id: int, now: datetime
) -> list[PromoCodeRecord]:
    """
    Find codes for a property that can be applied right now, oldest first.

    A code is active when `now` lies inside its validity window and its usage
    is below max_uses (or max_uses is unset).

    Args:
        conn (Connection): SQLAlchemy DB connection.
        property_id (int): Property ID.
        now (datetime): Evaluation instant (aware UTC).

    Returns:
        list[PromoCodeRecord]: Active codes ordered by creation time, then ID.
    """
    result = conn.execute(
        select(PromoCode.__table__)
        .where(PromoCode.property_id == property_id)
        .where(PromoCode.valid_from <= now)
        .where(PromoCode.valid_to >= now)
        .where(or_(PromoCode.max_uses.is_(None), PromoCode.current_uses < PromoCode.max_uses))
        .order_by(PromoCode.created_at.asc(), PromoCode.id.asc())
    )
    return [PromoCodeRecord.from_row(row) for row in result.mappings()]


def find_by_code(conn: Connection, code: str) -> Optional[PromoCodeRecord]:
    """
    Find a code by its (case-insensitive) text.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        code (str): Coupon code.

    Returns:
        Optional[PromoCodeRecord]: The code or None.
    """
    row = (
        conn.execute(select(PromoCode.__table__).where(PromoCode.code == code.upper()))
        .mappings()
        .fetchone()
    )
    return PromoCodeRecord.from_row(row) if row else None


def get_promo_code(conn: Connection, coupon_id: int) -> Optional[PromoCodeRecord]:
    row = (
        conn.execute(select(PromoCode.__table__).where(PromoCode.id == coupon_id))
        .mappings()
        .fetchone()
    )
    return PromoCodeRecord.from_row(row) if row else None


def list_by_property(conn: Connection, property_id: int) -> list[PromoCodeRecord]:
    """All codes for a property, newest first."""
    result = conn.execute(
        select(PromoCode.__table__)
        .where(PromoCode.property_id == property_id)
        .order_by(PromoCode.created_at.desc(), PromoCode.id.desc())
    )
    return [PromoCodeRecord.from_row(row) for row in result.mappings()]
