"""Per-night availability check for a property's room inventory."""

from datetime import date
from typing import Iterable, Optional

import structlog
from sqlalchemy.engine import Connection

from stay_booking.db.readers.reservations import find_overlapping
from stay_booking.domain.records import AvailabilityResult, Reservation
from stay_booking.utils.datetime import iter_nights

logger = structlog.get_logger(__name__)


def first_full_night(
    reservations: Iterable[Reservation],
    total_rooms: int,
    check_in: date,
    check_out: date,
) -> Optional[date]:
    """
    Walk [check_in, check_out) night by night and return the first night on
    which the given reservations already use every room.

    Args:
        reservations: Reservations holding inventory at the property
        total_rooms: Property room count
        check_in: First requested night
        check_out: Departure date (not counted)

    Returns:
        Optional[date]: First fully booked night, or None if every night has a free room
    """
    if total_rooms <= 0:
        return check_in

    booked = list(reservations)
    for night in iter_nights(check_in, check_out):
        covering = sum(1 for r in booked if r.check_in <= night < r.check_out)
        if covering >= total_rooms:
            return night
    return None


def is_available(
    conn: Connection,
    property_id: int,
    total_rooms: int,
    check_in: date,
    check_out: date,
    exclude_reservation_id: Optional[int] = None,
) -> AvailabilityResult:
    """
    Decide whether one more room can be booked for [check_in, check_out).

    Cancelled and rejected reservations are ignored; pending ones still hold
    their nights. The caller must have rejected empty or inverted ranges.

    Args:
        conn: Database connection
        property_id: Property ID
        total_rooms: Property room count
        check_in: Arrival date
        check_out: Departure date
        exclude_reservation_id: Reservation to leave out of the count (reschedule)

    Returns:
        AvailabilityResult: available flag and the first conflicting night
    """
    overlapping = [
        r
        for r in find_overlapping(conn, property_id, check_in, check_out)
        if r.id != exclude_reservation_id
    ]

    conflict = first_full_night(overlapping, total_rooms, check_in, check_out)
    if conflict is not None:
        logger.debug(
            "availability_conflict",
            property_id=property_id,
            conflict_date=conflict.isoformat(),
            overlapping=len(overlapping),
        )
        return AvailabilityResult(available=False, conflict_date=conflict)

    return AvailabilityResult(available=True)
