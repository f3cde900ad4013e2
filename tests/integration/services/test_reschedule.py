"""
Integration tests for moving reservations to new dates.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable

import pytest
from sqlalchemy import insert, select
from sqlalchemy.engine import Engine

from stay_booking.db.readers.promo_codes import get_promo_code
from stay_booking.db.readers.reservations import get_reservation as read_reservation
from stay_booking.errors import ConflictError, NotFoundError, ValidationError
from stay_booking.models.inventory import InventoryNight
from stay_booking.services.lifecycle import (
    confirm_reservation,
    create_reservation,
    reject_reservation,
)
from stay_booking.services.reschedule import reschedule_reservation

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
OWNER_ID = 10


def _booked_nights(engine: Engine, property_id: int = 1) -> dict[date, int]:
    with engine.connect() as conn:
        rows = conn.execute(
            select(InventoryNight.night, InventoryNight.booked).where(
                InventoryNight.property_id == property_id
            )
        )
        return {night: booked for night, booked in rows if booked}


def _book(engine: Engine, check_in: date, check_out: date, account_id: str = "acct-1") -> int:
    return create_reservation(
        engine, 1, check_in, check_out, 1, account_id, now=NOW
    ).reservation.id


@pytest.mark.integration
def test_round_trip_restores_nights_and_total(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    make_property(base_price="100", cleaning_fee="20")
    reservation_id = _book(engine, date(2026, 3, 10), date(2026, 3, 12))
    original_nights = _booked_nights(engine)

    longer = reschedule_reservation(
        engine, reservation_id, "acct-1", date(2026, 3, 20), date(2026, 3, 23), now=NOW
    )
    assert longer.nights == 3
    assert longer.total == Decimal("320")
    assert _booked_nights(engine) == {
        date(2026, 3, 20): 1,
        date(2026, 3, 21): 1,
        date(2026, 3, 22): 1,
    }

    back = reschedule_reservation(
        engine, reservation_id, "acct-1", date(2026, 3, 10), date(2026, 3, 12), now=NOW
    )
    assert back.nights == 2
    assert back.total == Decimal("220")
    assert back.check_in == date(2026, 3, 10)
    assert _booked_nights(engine) == original_nights


@pytest.mark.integration
def test_overlapping_own_nights_are_not_a_conflict(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    """A single-room property can still shift a stay by one night."""
    make_property(total_rooms=1)
    reservation_id = _book(engine, date(2026, 3, 10), date(2026, 3, 12))

    moved = reschedule_reservation(
        engine, reservation_id, "acct-1", date(2026, 3, 11), date(2026, 3, 13), now=NOW
    )

    assert moved.check_in == date(2026, 3, 11)
    assert _booked_nights(engine) == {date(2026, 3, 11): 1, date(2026, 3, 12): 1}


@pytest.mark.integration
def test_conflict_names_the_full_night(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    make_property(total_rooms=1)
    reservation_id = _book(engine, date(2026, 3, 10), date(2026, 3, 12))
    _book(engine, date(2026, 3, 15), date(2026, 3, 16), account_id="acct-2")

    with pytest.raises(ConflictError, match="2026-03-15"):
        reschedule_reservation(
            engine, reservation_id, "acct-1", date(2026, 3, 13), date(2026, 3, 17), now=NOW
        )

    # The original nights are untouched
    assert _booked_nights(engine) == {
        date(2026, 3, 10): 1,
        date(2026, 3, 11): 1,
        date(2026, 3, 15): 1,
    }


@pytest.mark.integration
def test_lost_night_claim_keeps_original_dates(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    """The 11th was taken after the availability read: the move is undone."""
    make_property(total_rooms=1)
    reservation_id = _book(engine, date(2026, 3, 20), date(2026, 3, 21))
    with engine.begin() as conn:
        conn.execute(
            insert(InventoryNight).values(property_id=1, night=date(2026, 3, 11), booked=1)
        )

    with pytest.raises(ConflictError, match="2026-03-11"):
        reschedule_reservation(
            engine, reservation_id, "acct-1", date(2026, 3, 10), date(2026, 3, 12), now=NOW
        )

    with engine.connect() as conn:
        reservation = read_reservation(conn, reservation_id)
    assert (reservation.check_in, reservation.check_out) == (date(2026, 3, 20), date(2026, 3, 21))
    assert _booked_nights(engine) == {date(2026, 3, 11): 1, date(2026, 3, 20): 1}


@pytest.mark.integration
def test_confirmed_reservation_keeps_coupon_percentage(
    engine: Engine, make_property: Callable[..., int], make_coupon: Callable[..., int]
) -> None:
    make_property(base_price="100")
    coupon_id = make_coupon(code="SAVE10", discount_percentage="10")
    reservation_id = _book(engine, date(2026, 3, 10), date(2026, 3, 12))
    confirm_reservation(engine, reservation_id, OWNER_ID, now=NOW)

    moved = reschedule_reservation(
        engine,
        reservation_id,
        "acct-1",
        date(2026, 4, 1),
        date(2026, 4, 5),
        now=NOW + timedelta(days=1),
    )

    assert moved.price.coupon_code == "SAVE10"
    assert moved.price.discount == Decimal("40")
    assert moved.total == Decimal("360")
    with engine.connect() as conn:
        assert get_promo_code(conn, coupon_id).current_uses == 1


@pytest.mark.integration
def test_rejected_reservation_cannot_move(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    make_property()
    reservation_id = _book(engine, date(2026, 3, 10), date(2026, 3, 12))
    reject_reservation(engine, reservation_id, OWNER_ID, now=NOW)

    with pytest.raises(ConflictError, match="rejected"):
        reschedule_reservation(
            engine, reservation_id, "acct-1", date(2026, 3, 20), date(2026, 3, 21), now=NOW
        )


@pytest.mark.integration
def test_bad_range_and_foreign_reservation(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    make_property()
    reservation_id = _book(engine, date(2026, 3, 10), date(2026, 3, 12))

    with pytest.raises(ValidationError):
        reschedule_reservation(
            engine, reservation_id, "acct-1", date(2026, 3, 20), date(2026, 3, 20), now=NOW
        )
    with pytest.raises(NotFoundError):
        reschedule_reservation(
            engine, reservation_id, "acct-2", date(2026, 3, 20), date(2026, 3, 21), now=NOW
        )
