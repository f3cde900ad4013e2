"""
Promotional code allocation and owner-side code management.

Allocation picks the oldest active code for a property and consumes one use
with a conditional increment; a code exhausted by a concurrent booking is
skipped in favour of the next-oldest one.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from stay_booking.db.readers.promo_codes import (
    find_active_by_property,
    find_by_code,
    get_promo_code,
    list_by_property,
)
from stay_booking.db.writers.promo_codes import (
    create_promo_code,
    decrement_usage,
    delete_promo_code,
    increment_usage,
    update_promo_code,
)
from stay_booking.domain.records import AppliedCoupon, PromoCode
from stay_booking.errors import ConflictError, NotFoundError, ValidationError
from stay_booking.metrics import coupon_allocations, coupon_releases
from stay_booking.services.authorization import require_owned_property
from stay_booking.utils.datetime import ensure_utc, utc_now
from stay_booking.validation import normalize_code, validate_coupon_code, validate_coupon_terms

logger = structlog.get_logger(__name__)


def find_and_reserve(
    conn: Connection, property_id: int, now: Optional[datetime] = None
) -> Optional[AppliedCoupon]:
    """
    Select the oldest active code for a property and consume one use.

    Args:
        conn: Active database connection (within transaction)
        property_id: Property ID
        now: Evaluation instant (defaults to current UTC time)

    Returns:
        Optional[AppliedCoupon]: The consumed code, or None if none is available
    """
    now = now or utc_now()

    for code in find_active_by_property(conn, property_id, now):
        if increment_usage(conn, code.id):
            coupon_allocations.inc()
            logger.info("coupon_allocated", coupon_id=code.id, property_id=property_id)
            return AppliedCoupon(
                id=code.id,
                code=code.code,
                discount_percentage=code.discount_percentage,
                valid_from=code.valid_from,
                valid_to=code.valid_to,
            )
        logger.info("coupon_exhausted_during_allocation", coupon_id=code.id)

    return None


def release_usage(conn: Connection, coupon_id: Optional[int]) -> None:
    """Give back the use consumed by a cancelled or rejected reservation."""
    if coupon_id is None:
        return
    if decrement_usage(conn, coupon_id):
        coupon_releases.inc()
        logger.info("coupon_released", coupon_id=coupon_id)


def _owned_code(conn: Connection, coupon_id: int, owner_id: int) -> PromoCode:
    code = get_promo_code(conn, coupon_id)
    if code is None:
        raise NotFoundError(f"Coupon {coupon_id} not found")
    require_owned_property(conn, code.property_id, owner_id)
    return code


def create_coupon(
    engine: Engine,
    owner_id: int,
    property_id: int,
    code: str,
    discount_percentage: Decimal,
    valid_from: datetime,
    valid_to: datetime,
    max_uses: Optional[int] = None,
) -> Optional[PromoCode]:
    """
    Create a promotional code for one of the owner's properties.

    Raises:
        NotFoundError: Unknown property
        AuthorizationError: Property belongs to another owner
        ConflictError: Property suspended, or code already taken
        ValidationError: Malformed code or terms
    """
    code = normalize_code(code)
    valid_from = ensure_utc(valid_from)
    valid_to = ensure_utc(valid_to)

    failures = validate_coupon_code(code) + validate_coupon_terms(
        discount_percentage, valid_from, valid_to, max_uses
    )
    if failures:
        raise ValidationError.from_failures(failures)

    try:
        with engine.begin() as conn:
            prop = require_owned_property(conn, property_id, owner_id)
            if prop.is_suspended:
                raise ConflictError(f"Property {property_id} is suspended")
            if find_by_code(conn, code) is not None:
                raise ConflictError(f"Coupon code {code} already exists")

            coupon_id = create_promo_code(
                conn, property_id, code, discount_percentage, valid_from, valid_to, max_uses
            )
            created = get_promo_code(conn, coupon_id)
    except IntegrityError:
        # Lost a race with another insert of the same code
        raise ConflictError(f"Coupon code {code} already exists")

    logger.info("coupon_created", coupon_id=coupon_id, property_id=property_id, code=code)
    return created


def list_coupons(engine: Engine, owner_id: int, property_id: int) -> list[PromoCode]:
    with engine.connect() as conn:
        require_owned_property(conn, property_id, owner_id)
        return list_by_property(conn, property_id)


def update_coupon(
    engine: Engine, owner_id: int, coupon_id: int, changes: dict[str, Any]
) -> Optional[PromoCode]:
    """
    Change the percentage, validity window or usage limit of a code.

    Args:
        engine: SQLAlchemy Engine
        owner_id: Acting owner
        coupon_id: Code ID
        changes: Subset of discount_percentage, valid_from, valid_to, max_uses
                (max_uses=None makes the code unlimited)

    Returns:
        PromoCode: The updated code
    """
    allowed = {"discount_percentage", "valid_from", "valid_to", "max_uses"}
    # A null max_uses lifts the limit; other columns cannot be cleared
    data = {
        k: v
        for k, v in changes.items()
        if k in allowed and (v is not None or k == "max_uses")
    }
    for key in ("valid_from", "valid_to"):
        if key in data:
            data[key] = ensure_utc(data[key])

    with engine.begin() as conn:
        current = _owned_code(conn, coupon_id, owner_id)

        failures = validate_coupon_terms(
            data.get("discount_percentage"),
            data.get("valid_from", current.valid_from),
            data.get("valid_to", current.valid_to),
            data.get("max_uses"),
            current_uses=current.current_uses,
        )
        if failures:
            raise ValidationError.from_failures(failures)

        if data:
            update_promo_code(conn, coupon_id, data)
        updated = get_promo_code(conn, coupon_id)

    logger.info("coupon_updated", coupon_id=coupon_id, fields=sorted(data))
    return updated


def delete_coupon(engine: Engine, owner_id: int, coupon_id: int) -> None:
    with engine.begin() as conn:
        _owned_code(conn, coupon_id, owner_id)
        delete_promo_code(conn, coupon_id)
    logger.info("coupon_deleted", coupon_id=coupon_id)
