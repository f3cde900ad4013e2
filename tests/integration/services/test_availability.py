"""
Integration tests for the per-night availability check.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable

import pytest
from sqlalchemy.engine import Engine

from stay_booking.errors import ConflictError
from stay_booking.services.availability import is_available
from stay_booking.services.lifecycle import (
    cancel_reservation,
    confirm_reservation,
    create_reservation,
    reject_reservation,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
OWNER_ID = 10


def _book(engine: Engine, check_in: date, check_out: date, account: str = "acct-1") -> int:
    created = create_reservation(engine, 1, check_in, check_out, 1, account, now=NOW)
    return created.reservation.id


@pytest.mark.integration
def test_overlapping_request_reports_first_conflict_night(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    """One room, confirmed 10-12: a request for 11-13 conflicts on the 11th."""
    make_property(total_rooms=1)
    reservation_id = _book(engine, date(2026, 3, 10), date(2026, 3, 12))
    confirm_reservation(engine, reservation_id, OWNER_ID, now=NOW)

    with engine.connect() as conn:
        result = is_available(conn, 1, 1, date(2026, 3, 11), date(2026, 3, 13))

    assert result.available is False
    assert result.conflict_date == date(2026, 3, 11)

    with pytest.raises(ConflictError, match="2026-03-11"):
        create_reservation(engine, 1, date(2026, 3, 11), date(2026, 3, 13), 1, "acct-2", now=NOW)


@pytest.mark.integration
def test_back_to_back_stays_do_not_overlap(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    make_property(total_rooms=1)
    _book(engine, date(2026, 3, 10), date(2026, 3, 12))

    with engine.connect() as conn:
        assert is_available(conn, 1, 1, date(2026, 3, 12), date(2026, 3, 14)).available
        assert is_available(conn, 1, 1, date(2026, 3, 8), date(2026, 3, 10)).available


@pytest.mark.integration
def test_pending_reservation_holds_inventory(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    make_property(total_rooms=1)
    _book(engine, date(2026, 3, 10), date(2026, 3, 11))

    with engine.connect() as conn:
        result = is_available(conn, 1, 1, date(2026, 3, 10), date(2026, 3, 11))

    assert result.available is False


@pytest.mark.integration
def test_second_room_allows_one_more_booking(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    make_property(total_rooms=2)
    _book(engine, date(2026, 3, 10), date(2026, 3, 13), account="acct-1")
    _book(engine, date(2026, 3, 12), date(2026, 3, 14), account="acct-2")

    with engine.connect() as conn:
        result = is_available(conn, 1, 2, date(2026, 3, 10), date(2026, 3, 14))

    assert result.available is False
    assert result.conflict_date == date(2026, 3, 12)


@pytest.mark.integration
def test_rejected_and_cancelled_reservations_free_nights(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    make_property(total_rooms=1)
    first = _book(engine, date(2026, 3, 10), date(2026, 3, 12), account="acct-1")
    reject_reservation(engine, first, OWNER_ID, now=NOW)
    second = _book(engine, date(2026, 3, 10), date(2026, 3, 12), account="acct-2")
    cancel_reservation(engine, second, "acct-2", now=NOW)

    with engine.connect() as conn:
        result = is_available(conn, 1, 1, date(2026, 3, 10), date(2026, 3, 12))
    assert result.available is True

    # Both earlier stays released their nights, so a third booking fits
    third = _book(engine, date(2026, 3, 10), date(2026, 3, 12), account="acct-3")

    assert third not in (first, second)


@pytest.mark.integration
def test_own_reservation_can_be_excluded(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    make_property(total_rooms=1)
    reservation_id = _book(engine, date(2026, 3, 10), date(2026, 3, 12))

    with engine.connect() as conn:
        result = is_available(
            conn,
            1,
            1,
            date(2026, 3, 11),
            date(2026, 3, 13),
            exclude_reservation_id=reservation_id,
        )

    assert result.available is True


@pytest.mark.integration
def test_property_without_rooms_is_never_available(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    make_property(total_rooms=0)

    with engine.connect() as conn:
        result = is_available(conn, 1, 0, date(2026, 3, 10), date(2026, 3, 11))

    assert result.available is False
    assert result.conflict_date == date(2026, 3, 10)


@pytest.mark.integration
def test_check_is_idempotent(engine: Engine, make_property: Callable[..., int]) -> None:
    make_property(total_rooms=1)
    _book(engine, date(2026, 3, 10), date(2026, 3, 12))

    with engine.connect() as conn:
        first = is_available(conn, 1, 1, date(2026, 3, 9), date(2026, 3, 15))
        second = is_available(conn, 1, 1, date(2026, 3, 9), date(2026, 3, 15))

    assert first == second
