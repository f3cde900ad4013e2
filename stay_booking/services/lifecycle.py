"""
Reservation lifecycle: creation, owner decisions, customer cancellation and
property suspension.

Every operation runs in a single transaction. Status changes are conditional
updates on the expected source status, inventory nights are claimed or freed
in the same transaction, and notifications are left to the caller so they are
only sent after commit.
"""

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional

import structlog
from sqlalchemy.engine import Connection, Engine

from stay_booking.config import CANCELLATION_CUTOFF_HOURS
from stay_booking.db.readers.customers import get_customer_id
from stay_booking.db.readers.properties import get_owner_property_ids, get_property
from stay_booking.db.readers.reservations import (
    find_open_for_property,
    get_reservation as read_reservation,
    list_customer_reservations,
    list_property_reservations,
)
from stay_booking.db.writers.customers import get_or_create_customer
from stay_booking.db.writers.inventory import claim_nights, release_nights
from stay_booking.db.writers.properties import set_property_suspended
from stay_booking.db.writers.reservations import (
    delete_pending_reservation,
    insert_reservation,
    transition_status,
)
from stay_booking.domain.records import CancellationOutcome, CreatedReservation, Reservation
from stay_booking.domain.status import ReservationStatus, can_transition, sources_for
from stay_booking.errors import ConflictError, NotFoundError, ValidationError
from stay_booking.metrics import availability_conflicts, reservation_transitions
from stay_booking.services.authorization import require_owned_property
from stay_booking.services.availability import is_available
from stay_booking.services.coupons import find_and_reserve, release_usage
from stay_booking.services.pricing import compute_price
from stay_booking.utils.datetime import local_midnight, local_today, nights_between, utc_now
from stay_booking.validation import validate_guests, validate_stay_dates

logger = structlog.get_logger(__name__)

CUSTOMER_CANCEL_POLICY = "24h-before-check-in"
SUSPENSION_CANCEL_POLICY = "property-suspended"


def _reload(conn: Connection, reservation_id: int) -> Reservation:
    reservation = read_reservation(conn, reservation_id)
    if reservation is None:
        raise NotFoundError(f"Reservation {reservation_id} not found")
    return reservation


def _move(
    conn: Connection,
    reservation: Reservation,
    sources: Iterable[ReservationStatus],
    target: ReservationStatus,
    now: datetime,
    **values: Any,
) -> None:
    if not transition_status(conn, reservation.id, sources, target, now, **values):
        raise ConflictError(f"Reservation {reservation.id} was modified by another request")


def _require_transition(reservation: Reservation, target: ReservationStatus, action: str) -> None:
    if not can_transition(reservation.status, target):
        expected = ", ".join(sorted(f"'{s.value}'" for s in sources_for(target)))
        raise ConflictError(
            f"Cannot {action} reservation {reservation.id}: "
            f"status is '{reservation.status.value}', expected {expected}"
        )


def _free_inventory(conn: Connection, reservation: Reservation) -> None:
    release_nights(conn, reservation.property_id, reservation.check_in, reservation.check_out)
    release_usage(conn, reservation.coupon_id)


def claim_or_conflict(
    conn: Connection,
    property_id: int,
    total_rooms: int,
    check_in: date,
    check_out: date,
    operation: str,
) -> None:
    """
    Claim every night of the range, raising ConflictError on the first full night.

    Raising inside the caller's transaction rolls back everything written so far.
    """
    blocked = claim_nights(conn, property_id, total_rooms, check_in, check_out)
    if blocked is not None:
        availability_conflicts.labels(operation=operation).inc()
        raise ConflictError(f"No rooms available on {blocked.isoformat()}")


# =============================================================================
# Customer operations
# =============================================================================


def create_reservation(
    engine: Engine,
    property_id: int,
    check_in: date,
    check_out: date,
    guests: int,
    account_id: str,
    now: Optional[datetime] = None,
) -> CreatedReservation:
    """
    Book one room at a property for [check_in, check_out).

    Flow: validate input, check availability, allocate the oldest active
    coupon, price the stay, persist as pending and claim the nights.

    Args:
        engine: SQLAlchemy Engine
        property_id: Property ID
        check_in: Arrival date (local calendar date)
        check_out: Departure date
        guests: Number of guests
        account_id: Customer account ID
        now: Current time (defaults to UTC now)

    Returns:
        CreatedReservation: The pending reservation and the coupon applied to it

    Raises:
        NotFoundError: Unknown property
        ConflictError: Suspended property or no rooms left on some night
        ValidationError: Unapproved property, bad dates or guest count
    """
    now = now or utc_now()

    with engine.begin() as conn:
        prop = get_property(conn, property_id)
        if prop is None:
            raise NotFoundError(f"Property {property_id} not found")
        if prop.is_suspended:
            raise ConflictError(f"Property {property_id} is suspended")

        failures = []
        if not prop.is_approved:
            failures.append(f"Property {property_id} is not approved for booking")
        failures += validate_guests(guests, prop.guest_capacity)
        failures += validate_stay_dates(check_in, check_out, local_today(now))
        if failures:
            raise ValidationError.from_failures(failures)

        availability = is_available(conn, prop.id, prop.total_rooms, check_in, check_out)
        if not availability.available:
            availability_conflicts.labels(operation="create").inc()
            raise ConflictError(f"No rooms available on {availability.conflict_date.isoformat()}")

        customer_id = get_or_create_customer(conn, account_id)
        coupon = find_and_reserve(conn, prop.id, now)
        price = compute_price(prop, nights_between(check_in, check_out), coupon, now)

        reservation_id = insert_reservation(
            conn,
            property_id=prop.id,
            customer_id=customer_id,
            check_in=check_in,
            check_out=check_out,
            guests=guests,
            price=price,
            coupon_id=coupon.id if coupon else None,
            now=now,
        )
        claim_or_conflict(conn, prop.id, prop.total_rooms, check_in, check_out, "create")
        reservation = _reload(conn, reservation_id)

    reservation_transitions.labels(status=ReservationStatus.PENDING.value).inc()
    logger.info(
        "reservation_created",
        reservation_id=reservation.id,
        property_id=property_id,
        nights=reservation.nights,
        total=str(reservation.total),
        coupon_id=reservation.coupon_id,
    )

    applied = replace(coupon, discount_amount=price.discount) if coupon else None
    return CreatedReservation(reservation=reservation, applied_coupon=applied)


def load_customer_reservation(
    conn: Connection, reservation_id: int, account_id: str
) -> Reservation:
    """
    Fetch a reservation owned by the given account.

    A reservation belonging to someone else is reported as not found.
    """
    customer_id = get_customer_id(conn, account_id)
    reservation = read_reservation(conn, reservation_id)
    if reservation is None or customer_id is None or reservation.customer_id != customer_id:
        raise NotFoundError(f"Reservation {reservation_id} not found")
    return reservation


def get_reservations(
    engine: Engine,
    account_id: str,
    status: Optional[ReservationStatus] = None,
    page: int = 1,
    limit: int = 10,
) -> list[Reservation]:
    """List the account's reservations, newest first, one page at a time."""
    with engine.connect() as conn:
        customer_id = get_customer_id(conn, account_id)
        if customer_id is None:
            return []
        return list_customer_reservations(
            conn, customer_id, status=status, limit=limit, offset=(page - 1) * limit
        )


def get_reservation(engine: Engine, reservation_id: int, account_id: str) -> Reservation:
    with engine.connect() as conn:
        return load_customer_reservation(conn, reservation_id, account_id)


def cancellation_deadline(check_in: date) -> datetime:
    """Last instant (exclusive) at which a confirmed stay may still be cancelled."""
    return local_midnight(check_in) - timedelta(hours=CANCELLATION_CUTOFF_HOURS)


def cancel_reservation(
    engine: Engine,
    reservation_id: int,
    account_id: str,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CancellationOutcome:
    """
    Cancel a reservation on behalf of its customer.

    Pending reservations are deleted outright. Confirmed ones are kept as
    cancelled with a full refund, but only until 24 hours before check-in.
    Either way the nights and any consumed coupon use are given back.

    Raises:
        NotFoundError: Unknown reservation or not the caller's
        ConflictError: Outside the cancellation window or wrong status
    """
    now = now or utc_now()

    with engine.begin() as conn:
        reservation = load_customer_reservation(conn, reservation_id, account_id)

        if reservation.status is ReservationStatus.PENDING:
            if not delete_pending_reservation(conn, reservation.id):
                raise ConflictError(f"Reservation {reservation.id} was modified by another request")
            _free_inventory(conn, reservation)
            outcome = CancellationOutcome(
                message="Reservation cancelled",
                reservation=replace(
                    reservation,
                    status=ReservationStatus.CANCELLED,
                    cancellation_reason=reason,
                    cancelled_at=now,
                ),
                deleted=True,
            )

        elif reservation.status is ReservationStatus.CONFIRMED:
            if now >= cancellation_deadline(reservation.check_in):
                raise ConflictError(
                    f"Confirmed reservations can only be cancelled at least "
                    f"{CANCELLATION_CUTOFF_HOURS} hours before check-in"
                )
            _move(
                conn,
                reservation,
                [ReservationStatus.CONFIRMED],
                ReservationStatus.CANCELLED,
                now,
                cancelled_at=now,
                cancellation_reason=reason,
                cancellation_policy=CUSTOMER_CANCEL_POLICY,
                refund_amount=reservation.total,
            )
            _free_inventory(conn, reservation)
            outcome = CancellationOutcome(
                message=f"Reservation cancelled; a refund of {reservation.total} will be issued",
                reservation=_reload(conn, reservation.id),
            )

        else:
            raise ConflictError(
                f"Cannot cancel reservation {reservation.id} with status "
                f"'{reservation.status.value}'"
            )

    reservation_transitions.labels(
        status="deleted" if outcome.deleted else ReservationStatus.CANCELLED.value
    ).inc()
    logger.info(
        "reservation_cancelled",
        reservation_id=reservation_id,
        deleted=outcome.deleted,
        reason=reason,
    )
    return outcome


# =============================================================================
# Owner operations
# =============================================================================


def load_owner_reservation(conn: Connection, reservation_id: int, owner_id: int) -> Reservation:
    """
    Fetch a reservation at a property controlled by `owner_id`.

    Raises:
        NotFoundError: Unknown reservation
        AuthorizationError: The property belongs to another owner
    """
    reservation = read_reservation(conn, reservation_id)
    if reservation is None:
        raise NotFoundError(f"Reservation {reservation_id} not found")
    require_owned_property(conn, reservation.property_id, owner_id)
    return reservation


def get_owner_reservations(
    engine: Engine, owner_id: int, status: Optional[ReservationStatus] = None
) -> list[Reservation]:
    """All reservations at the owner's non-suspended properties, newest first."""
    with engine.connect() as conn:
        property_ids = get_owner_property_ids(conn, owner_id)
        return list_property_reservations(conn, property_ids, status=status)


def _owner_transition(
    engine: Engine,
    reservation_id: int,
    owner_id: int,
    target: ReservationStatus,
    action: str,
    now: datetime,
    free_inventory: bool = False,
    **values: Any,
) -> Reservation:
    with engine.begin() as conn:
        reservation = load_owner_reservation(conn, reservation_id, owner_id)
        _require_transition(reservation, target, action)
        _move(conn, reservation, sources_for(target), target, now, **values)
        if free_inventory:
            _free_inventory(conn, reservation)
        updated = _reload(conn, reservation_id)

    reservation_transitions.labels(status=target.value).inc()
    logger.info(
        f"reservation_{target.value.replace('-', '_')}",
        reservation_id=reservation_id,
        owner_id=owner_id,
    )
    return updated


def confirm_reservation(
    engine: Engine, reservation_id: int, owner_id: int, now: Optional[datetime] = None
) -> Reservation:
    """Owner accepts a pending reservation."""
    now = now or utc_now()
    return _owner_transition(
        engine,
        reservation_id,
        owner_id,
        ReservationStatus.CONFIRMED,
        "confirm",
        now,
        confirmed_at=now,
        confirmed_by="owner",
    )


def reject_reservation(
    engine: Engine, reservation_id: int, owner_id: int, now: Optional[datetime] = None
) -> Reservation:
    """Owner declines a pending reservation; its nights and coupon use are freed."""
    now = now or utc_now()
    return _owner_transition(
        engine,
        reservation_id,
        owner_id,
        ReservationStatus.REJECTED,
        "reject",
        now,
        free_inventory=True,
    )


def check_in_reservation(
    engine: Engine, reservation_id: int, owner_id: int, now: Optional[datetime] = None
) -> Reservation:
    now = now or utc_now()
    return _owner_transition(
        engine,
        reservation_id,
        owner_id,
        ReservationStatus.CHECKED_IN,
        "check in",
        now,
        checked_in_at=now,
    )


def check_out_reservation(
    engine: Engine, reservation_id: int, owner_id: int, now: Optional[datetime] = None
) -> Reservation:
    now = now or utc_now()
    return _owner_transition(
        engine,
        reservation_id,
        owner_id,
        ReservationStatus.CHECKED_OUT,
        "check out",
        now,
        checked_out_at=now,
    )


# =============================================================================
# Property suspension
# =============================================================================


def cancel_for_suspension(
    conn: Connection, property_id: int, reason: Optional[str], now: datetime
) -> list[Reservation]:
    """
    Cancel every pending or confirmed reservation at a property.

    The customer cancellation window does not apply; each stay is refunded in
    full. A reservation that changed status in the meantime is left alone.

    Args:
        conn: Active database connection (within transaction)
        property_id: Suspended property
        reason: Suspension reason recorded on each reservation
        now: Cancellation timestamp

    Returns:
        list[Reservation]: The reservations that were cancelled
    """
    cancelled = []
    for reservation in find_open_for_property(conn, property_id):
        moved = transition_status(
            conn,
            reservation.id,
            sources_for(ReservationStatus.CANCELLED),
            ReservationStatus.CANCELLED,
            now,
            cancelled_at=now,
            cancellation_reason=reason,
            cancellation_policy=SUSPENSION_CANCEL_POLICY,
            refund_amount=reservation.total,
        )
        if not moved:
            continue
        _free_inventory(conn, reservation)
        cancelled.append(_reload(conn, reservation.id))

    return cancelled


def suspend_property(
    engine: Engine, property_id: int, reason: Optional[str], now: Optional[datetime] = None
) -> list[Reservation]:
    """
    Suspend a property and cancel its open reservations.

    Raises:
        NotFoundError: Unknown property
    """
    now = now or utc_now()

    with engine.begin() as conn:
        if not set_property_suspended(conn, property_id, True, reason):
            raise NotFoundError(f"Property {property_id} not found")
        cancelled = cancel_for_suspension(conn, property_id, reason, now)

    reservation_transitions.labels(status=ReservationStatus.CANCELLED.value).inc(len(cancelled))
    logger.info("property_suspended", property_id=property_id, cancelled=len(cancelled))
    return cancelled


def reinstate_property(engine: Engine, property_id: int) -> None:
    """Lift a suspension. Cancelled reservations stay cancelled."""
    with engine.begin() as conn:
        if not set_property_suspended(conn, property_id, False):
            raise NotFoundError(f"Property {property_id} not found")
    logger.info("property_reinstated", property_id=property_id)
