from datetime import date, datetime
from typing import Any, Iterable, Optional

import structlog
from sqlalchemy import delete, insert, update
from sqlalchemy.engine import Connection

from stay_booking.domain.records import PriceBreakdown
from stay_booking.domain.status import ReservationStatus
from stay_booking.models.reservations import Reservation

logger = structlog.get_logger(__name__)


def price_columns(price: PriceBreakdown) -> dict[str, Any]:
    """Flatten a price breakdown into reservation snapshot columns."""
    return {
        "base_price_per_night": price.base_price_per_night,
        "nights": price.nights,
        "base_total": price.base_total,
        "cleaning_fee": price.cleaning_fee,
        "service_fee": price.service_fee,
        "subtotal": price.subtotal,
        "taxes": price.taxes,
        "discount": price.discount,
        "total": price.total,
        "coupon_code": price.coupon_code,
        "coupon_discount_percentage": price.coupon_discount_percentage,
    }


def insert_reservation(
    conn: Connection,
    property_id: int,
    customer_id: int,
    check_in: date,
    check_out: date,
    guests: int,
    price: PriceBreakdown,
    coupon_id: Optional[int],
    now: datetime,
) -> int:
    """
    Persist a new pending reservation with its price snapshot.

    Args:
        conn: Active database connection (within transaction)
        property_id: Property ID
        customer_id: Customer profile ID
        check_in: Arrival date
        check_out: Departure date
        guests: Number of guests
        price: Computed price breakdown
        coupon_id: Consumed coupon, if any
        now: Creation timestamp (aware UTC)

    Returns:
        int: ID of the new reservation
    """
    values = {
        "property_id": property_id,
        "customer_id": customer_id,
        "coupon_id": coupon_id,
        "check_in": check_in,
        "check_out": check_out,
        "guests": guests,
        "status": ReservationStatus.PENDING.value,
        "created_at": now,
        "updated_at": now,
    }
    values.update(price_columns(price))

    result = conn.execute(insert(Reservation).values(**values))
    return int(result.inserted_primary_key[0])


def transition_status(
    conn: Connection,
    reservation_id: int,
    sources: Iterable[ReservationStatus],
    target: ReservationStatus,
    now: datetime,
    **values: Any,
) -> bool:
    """
    Move a reservation to `target` only if it is still in one of `sources`.

    The status check and the write are one UPDATE, so two actors racing on
    the same reservation cannot both succeed.

    Returns:
        bool: True if this call performed the transition.
    """
    stmt = (
        update(Reservation)
        .where(Reservation.id == reservation_id)
        .where(Reservation.status.in_([s.value for s in sources]))
        .values(status=target.value, updated_at=now, **values)
    )
    moved = conn.execute(stmt).rowcount > 0
    if moved:
        logger.debug("reservation_status_written", reservation_id=reservation_id, status=target.value)
    return moved


def delete_pending_reservation(conn: Connection, reservation_id: int) -> bool:
    """
    Physically delete a reservation that is still pending.

    Returns:
        bool: True if a row was deleted.
    """
    stmt = (
        delete(Reservation)
        .where(Reservation.id == reservation_id)
        .where(Reservation.status == ReservationStatus.PENDING.value)
    )
    return conn.execute(stmt).rowcount > 0


def update_schedule(
    conn: Connection,
    reservation_id: int,
    sources: Iterable[ReservationStatus],
    check_in: date,
    check_out: date,
    price: PriceBreakdown,
    now: datetime,
) -> bool:
    """
    Overwrite a reservation's dates and the date-dependent price fields.

    Per-night rate, fees, taxes and the coupon columns are left untouched.

    Returns:
        bool: True if the reservation was still in one of `sources`.
    """
    stmt = (
        update(Reservation)
        .where(Reservation.id == reservation_id)
        .where(Reservation.status.in_([s.value for s in sources]))
        .values(
            check_in=check_in,
            check_out=check_out,
            nights=price.nights,
            base_total=price.base_total,
            subtotal=price.subtotal,
            discount=price.discount,
            total=price.total,
            updated_at=now,
        )
    )
    return conn.execute(stmt).rowcount > 0
