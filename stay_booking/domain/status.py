"""Reservation status enum and the lifecycle transition table."""

from __future__ import annotations

from enum import Enum


class ReservationStatus(str, Enum):
    """
    Reservation lifecycle states.

    pending -> confirmed | rejected | (deleted on customer cancel)
    confirmed -> checked-in | cancelled
    checked-in -> checked-out
    rejected, cancelled, checked-out are terminal.
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    CHECKED_IN = "checked-in"
    CHECKED_OUT = "checked-out"


# Statuses whose reservations hold inventory nights; cancelled and rejected
# reservations have given theirs back
OCCUPYING_STATUSES = frozenset(
    {
        ReservationStatus.PENDING,
        ReservationStatus.CONFIRMED,
        ReservationStatus.CHECKED_IN,
        ReservationStatus.CHECKED_OUT,
    }
)

ALLOWED_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset(
        {
            ReservationStatus.CONFIRMED,
            ReservationStatus.REJECTED,
            # Only reachable through property suspension
            ReservationStatus.CANCELLED,
        }
    ),
    ReservationStatus.CONFIRMED: frozenset(
        {ReservationStatus.CHECKED_IN, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.CHECKED_IN: frozenset({ReservationStatus.CHECKED_OUT}),
    ReservationStatus.REJECTED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.CHECKED_OUT: frozenset(),
}


def can_transition(source: ReservationStatus, target: ReservationStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[source]


def sources_for(target: ReservationStatus) -> frozenset[ReservationStatus]:
    """All statuses from which `target` can be reached."""
    return frozenset(
        source for source, targets in ALLOWED_TRANSITIONS.items() if target in targets
    )
