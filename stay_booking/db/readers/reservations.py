from datetime import date
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from stay_booking.domain.records import Reservation as ReservationRecord
from stay_booking.domain.status import OCCUPYING_STATUSES, ReservationStatus, sources_for
from stay_booking.models.properties import Property
from stay_booking.models.reservations import Reservation


def get_reservation(conn: Connection, reservation_id: int) -> Optional[ReservationRecord]:
    """
    Fetch a reservation by ID.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        reservation_id (int): Reservation ID.

    Returns:
        Optional[ReservationRecord]: The reservation or None.
    """
    row = (
        conn.execute(select(Reservation.__table__).where(Reservation.id == reservation_id))
        .mappings()
        .fetchone()
    )
    return ReservationRecord.from_row(row) if row else None


def find_overlapping(
    conn: Connection,
    property_id: int,
    check_in: date,
    check_out: date,
) -> list[ReservationRecord]:
    """
    Fetch reservations at a property whose range overlaps [check_in, check_out)
    and that still hold inventory (anything but cancelled or rejected).

    Args:
        conn (Connection): SQLAlchemy DB connection.
        property_id (int): Property ID.
        check_in (date): Start of the window (inclusive).
        check_out (date): End of the window (exclusive).

    Returns:
        list[ReservationRecord]: Overlapping reservations ordered by check-in.
    """
    result = conn.execute(
        select(Reservation.__table__)
        .where(Reservation.property_id == property_id)
        .where(Reservation.check_in < check_out)
        .where(Reservation.check_out > check_in)
        .where(Reservation.status.in_([s.value for s in OCCUPYING_STATUSES]))
        .order_by(Reservation.check_in, Reservation.id)
    )
    return [ReservationRecord.from_row(row) for row in result.mappings()]


def list_customer_reservations(
    conn: Connection,
    customer_id: int,
    status: Optional[ReservationStatus] = None,
    limit: int = 10,
    offset: int = 0,
) -> list[ReservationRecord]:
    """
    List a customer's reservations, newest first, hiding suspended properties.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        customer_id (int): Customer profile ID.
        status (Optional[ReservationStatus]): Only this status when given.
        limit (int): Page size.
        offset (int): Rows to skip.

    Returns:
        list[ReservationRecord]: One page of reservations.
    """
    stmt = (
        select(Reservation.__table__)
        .join(Property, Property.id == Reservation.property_id)
        .where(Reservation.customer_id == customer_id)
        .where(Property.is_suspended == False)  # noqa: E712
    )
    if status is not None:
        stmt = stmt.where(Reservation.status == status.value)

    stmt = stmt.order_by(Reservation.created_at.desc(), Reservation.id.desc())
    result = conn.execute(stmt.limit(limit).offset(offset))
    return [ReservationRecord.from_row(row) for row in result.mappings()]


def list_property_reservations(
    conn: Connection,
    property_ids: Iterable[int],
    status: Optional[ReservationStatus] = None,
) -> list[ReservationRecord]:
    """List all reservations for the given properties, newest first."""
    ids = list(property_ids)
    if not ids:
        return []

    stmt = select(Reservation.__table__).where(Reservation.property_id.in_(ids))
    if status is not None:
        stmt = stmt.where(Reservation.status == status.value)

    result = conn.execute(stmt.order_by(Reservation.created_at.desc(), Reservation.id.desc()))
    return [ReservationRecord.from_row(row) for row in result.mappings()]


def find_open_for_property(conn: Connection, property_id: int) -> list[ReservationRecord]:
    """Reservations at a property that can still be cancelled (suspension candidates)."""
    cancellable = sources_for(ReservationStatus.CANCELLED)
    result = conn.execute(
        select(Reservation.__table__)
        .where(Reservation.property_id == property_id)
        .where(Reservation.status.in_([s.value for s in cancellable]))
        .order_by(Reservation.id)
    )
    return [ReservationRecord.from_row(row) for row in result.mappings()]


def find_auto_confirm_candidates(conn: Connection, created_before) -> list[int]:
    """
    IDs of pending reservations created at or before `created_before` that
    have never been auto-confirmed, oldest first.
    """
    result = conn.execute(
        select(Reservation.id)
        .where(Reservation.status == ReservationStatus.PENDING.value)
        .where(Reservation.created_at <= created_before)
        .where(Reservation.auto_confirmed_at.is_(None))
        .order_by(Reservation.created_at, Reservation.id)
    )
    return list(result.scalars().all())
