"""Move an existing reservation to new dates."""

from datetime import date, datetime
from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from stay_booking.db.readers.properties import get_property
from stay_booking.db.readers.reservations import get_reservation
from stay_booking.db.writers.inventory import release_nights
from stay_booking.db.writers.reservations import update_schedule
from stay_booking.domain.records import Reservation
from stay_booking.domain.status import ReservationStatus, sources_for
from stay_booking.errors import ConflictError, NotFoundError, ValidationError
from stay_booking.metrics import availability_conflicts
from stay_booking.services.availability import is_available
from stay_booking.services.lifecycle import claim_or_conflict, load_customer_reservation
from stay_booking.services.pricing import price_stay
from stay_booking.utils.datetime import local_today, nights_between, utc_now
from stay_booking.validation import validate_stay_dates

logger = structlog.get_logger(__name__)

# Stays that have not started yet are the ones that can still be called off
RESCHEDULABLE = sources_for(ReservationStatus.CANCELLED)


def reschedule_reservation(
    engine: Engine,
    reservation_id: int,
    account_id: str,
    new_check_in: date,
    new_check_out: date,
    now: Optional[datetime] = None,
) -> Reservation:
    """
    Move a pending or confirmed reservation to [new_check_in, new_check_out).

    The reservation's own nights are excluded from the availability check.
    The new price reuses the stored nightly rate, fees and coupon percentage;
    the coupon's validity window is not checked again.

    Args:
        engine: SQLAlchemy Engine
        reservation_id: Reservation to move
        account_id: Customer account ID
        new_check_in: New arrival date
        new_check_out: New departure date
        now: Current time (defaults to UTC now)

    Returns:
        Reservation: The updated reservation

    Raises:
        NotFoundError: Unknown reservation or not the caller's
        ValidationError: Bad date range
        ConflictError: Wrong status, or a night in the new range is full
    """
    now = now or utc_now()

    with engine.begin() as conn:
        reservation = load_customer_reservation(conn, reservation_id, account_id)
        if reservation.status not in RESCHEDULABLE:
            raise ConflictError(
                f"Cannot reschedule reservation {reservation.id} with status "
                f"'{reservation.status.value}'"
            )

        failures = validate_stay_dates(new_check_in, new_check_out, local_today(now))
        if failures:
            raise ValidationError.from_failures(failures)

        prop = get_property(conn, reservation.property_id)
        if prop is None:
            raise NotFoundError(f"Property {reservation.property_id} not found")

        availability = is_available(
            conn,
            prop.id,
            prop.total_rooms,
            new_check_in,
            new_check_out,
            exclude_reservation_id=reservation.id,
        )
        if not availability.available:
            availability_conflicts.labels(operation="reschedule").inc()
            raise ConflictError(f"No rooms available on {availability.conflict_date.isoformat()}")

        release_nights(conn, prop.id, reservation.check_in, reservation.check_out)
        claim_or_conflict(
            conn, prop.id, prop.total_rooms, new_check_in, new_check_out, "reschedule"
        )

        snapshot = reservation.price
        price = price_stay(
            snapshot.base_price_per_night,
            nights_between(new_check_in, new_check_out),
            snapshot.cleaning_fee,
            snapshot.service_fee,
            discount_percentage=snapshot.coupon_discount_percentage,
            coupon_code=snapshot.coupon_code,
        )
        if not update_schedule(
            conn, reservation.id, RESCHEDULABLE, new_check_in, new_check_out, price, now
        ):
            raise ConflictError(f"Reservation {reservation.id} was modified by another request")

        updated = get_reservation(conn, reservation.id)

    logger.info(
        "reservation_rescheduled",
        reservation_id=reservation_id,
        check_in=new_check_in.isoformat(),
        check_out=new_check_out.isoformat(),
        total=str(price.total),
    )
    return updated
