from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import structlog
from sqlalchemy import delete, insert, or_, update
from sqlalchemy.engine import Connection

from stay_booking.models.promo_codes import PromoCode
from stay_booking.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def create_promo_code(
    conn: Connection,
    property_id: int,
    code: str,
    discount_percentage: Decimal,
    valid_from: datetime,
    valid_to: datetime,
    max_uses: Optional[int] = None,
) -> int:
    """
    Insert a new promotional code with zero usage.

    Returns:
        int: ID of the new code.
    """
    now = utc_now()
    result = conn.execute(
        insert(PromoCode).values(
            property_id=property_id,
            code=code,
            discount_percentage=discount_percentage,
            valid_from=valid_from,
            valid_to=valid_to,
            max_uses=max_uses,
            current_uses=0,
            created_at=now,
            updated_at=now,
        )
    )
    return int(result.inserted_primary_key[0])


def increment_usage(conn: Connection, coupon_id: int) -> bool:
    """
    Consume one use of a code, only if it still has uses left.

    The limit check and the increment are a single UPDATE, so concurrent
    bookings cannot push current_uses past max_uses.

    Returns:
        bool: True if a use was consumed, False if the code is exhausted or gone.
    """
    stmt = (
        update(PromoCode)
        .where(PromoCode.id == coupon_id)
        .where(or_(PromoCode.max_uses.is_(None), PromoCode.current_uses < PromoCode.max_uses))
        .values(current_uses=PromoCode.current_uses + 1, updated_at=utc_now())
    )
    return conn.execute(stmt).rowcount > 0


def decrement_usage(conn: Connection, coupon_id: int) -> bool:
    """
    Give back one use of a code; never drops current_uses below zero.

    Returns:
        bool: True if a use was released.
    """
    stmt = (
        update(PromoCode)
        .where(PromoCode.id == coupon_id)
        .where(PromoCode.current_uses > 0)
        .values(current_uses=PromoCode.current_uses - 1, updated_at=utc_now())
    )
    released = conn.execute(stmt).rowcount > 0
    if not released:
        logger.warning("coupon_release_noop", coupon_id=coupon_id)
    return released


def update_promo_code(conn: Connection, coupon_id: int, data: dict[str, Any]) -> None:
    """
    Update editable fields of a code.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        coupon_id (int): Code ID.
        data (dict): Fields to update (only non-None values)
    """
    data["updated_at"] = utc_now()
    conn.execute(update(PromoCode).where(PromoCode.id == coupon_id).values(**data))


def delete_promo_code(conn: Connection, coupon_id: int) -> None:
    conn.execute(delete(PromoCode).where(PromoCode.id == coupon_id))
