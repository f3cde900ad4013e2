"""
Integration tests for promotional code allocation and owner code management.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable

import pytest
from sqlalchemy.engine import Engine

from stay_booking.db.readers.promo_codes import get_promo_code
from stay_booking.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from stay_booking.services.coupons import (
    create_coupon,
    delete_coupon,
    find_and_reserve,
    list_coupons,
    release_usage,
    update_coupon,
)
from stay_booking.services.lifecycle import create_reservation, suspend_property

UTC = timezone.utc
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
OWNER_ID = 10
OTHER_OWNER_ID = 20


def _uses(engine: Engine, coupon_id: int) -> int:
    with engine.connect() as conn:
        return get_promo_code(conn, coupon_id).current_uses


@pytest.mark.integration
def test_booking_applies_coupon_and_consumes_a_use(
    engine: Engine, make_property: Callable[..., int], make_coupon: Callable[..., int]
) -> None:
    """SAVE10 on a $100/night, 2-night stay: $20 off, $180 total, one use consumed."""
    make_property(base_price="100")
    coupon_id = make_coupon(code="SAVE10", discount_percentage="10", max_uses=5)

    created = create_reservation(
        engine, 1, date(2026, 3, 10), date(2026, 3, 12), 2, "acct-1", now=NOW
    )

    price = created.reservation.price
    assert price.subtotal == Decimal("200")
    assert price.discount == Decimal("20")
    assert price.total == Decimal("180")
    assert price.coupon_code == "SAVE10"
    assert created.reservation.coupon_id == coupon_id
    assert created.applied_coupon is not None
    assert created.applied_coupon.discount_amount == Decimal("20")
    assert _uses(engine, coupon_id) == 1


@pytest.mark.integration
def test_oldest_active_code_wins(
    engine: Engine, make_property: Callable[..., int], make_coupon: Callable[..., int]
) -> None:
    make_property()
    make_coupon(code="NEWER20", created_at=datetime(2026, 2, 1, tzinfo=UTC))
    older = make_coupon(code="OLDER5", created_at=datetime(2026, 1, 5, tzinfo=UTC))

    with engine.begin() as conn:
        applied = find_and_reserve(conn, 1, NOW)

    assert applied is not None
    assert applied.id == older
    assert applied.code == "OLDER5"


@pytest.mark.integration
def test_exhausted_and_expired_codes_are_skipped(
    engine: Engine, make_property: Callable[..., int], make_coupon: Callable[..., int]
) -> None:
    make_property()
    make_coupon(
        code="USEDUP", max_uses=2, current_uses=2, created_at=datetime(2026, 1, 1, tzinfo=UTC)
    )
    make_coupon(
        code="EXPIRED",
        valid_to=datetime(2026, 2, 1, tzinfo=timezone.utc),
        created_at=datetime(2026, 1, 2, tzinfo=timezone.utc),
    )
    live = make_coupon(code="LIVE15", created_at=datetime(2026, 1, 3, tzinfo=UTC))

    with engine.begin() as conn:
        applied = find_and_reserve(conn, 1, NOW)

    assert applied is not None
    assert applied.id == live


@pytest.mark.integration
def test_no_active_code_means_no_discount(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    make_property()

    created = create_reservation(
        engine, 1, date(2026, 3, 10), date(2026, 3, 12), 1, "acct-1", now=NOW
    )

    assert created.applied_coupon is None
    assert created.reservation.price.discount == Decimal("0")
    assert created.reservation.coupon_id is None


@pytest.mark.integration
def test_last_use_is_never_exceeded(
    engine: Engine, make_property: Callable[..., int], make_coupon: Callable[..., int]
) -> None:
    make_property(total_rooms=5)
    coupon_id = make_coupon(code="ONCE", max_uses=1)

    first = create_reservation(engine, 1, date(2026, 3, 10), date(2026, 3, 11), 1, "a-1", now=NOW)
    second = create_reservation(engine, 1, date(2026, 3, 10), date(2026, 3, 11), 1, "a-2", now=NOW)

    assert first.applied_coupon is not None
    assert second.applied_coupon is None
    assert _uses(engine, coupon_id) == 1


@pytest.mark.integration
def test_release_never_goes_below_zero(
    engine: Engine, make_property: Callable[..., int], make_coupon: Callable[..., int]
) -> None:
    make_property()
    coupon_id = make_coupon(current_uses=1)

    with engine.begin() as conn:
        release_usage(conn, coupon_id)
        release_usage(conn, coupon_id)
        release_usage(conn, None)

    assert _uses(engine, coupon_id) == 0


@pytest.mark.integration
def test_owner_creates_lists_updates_and_deletes_code(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    make_property()

    created = create_coupon(
        engine,
        OWNER_ID,
        1,
        code="spring25",
        discount_percentage=Decimal("25"),
        valid_from=datetime(2026, 3, 1, tzinfo=timezone.utc),
        valid_to=datetime(2026, 6, 1, tzinfo=timezone.utc),
        max_uses=10,
    )
    assert created.code == "SPRING25"
    assert created.current_uses == 0

    assert [c.code for c in list_coupons(engine, OWNER_ID, 1)] == ["SPRING25"]

    updated = update_coupon(engine, OWNER_ID, created.id, {"discount_percentage": Decimal("30")})
    assert updated.discount_percentage == Decimal("30")
    assert updated.max_uses == 10

    delete_coupon(engine, OWNER_ID, created.id)
    assert list_coupons(engine, OWNER_ID, 1) == []


@pytest.mark.integration
def test_duplicate_code_is_a_conflict(
    engine: Engine, make_property: Callable[..., int], make_coupon: Callable[..., int]
) -> None:
    make_property()
    make_coupon(code="SAVE10")

    with pytest.raises(ConflictError):
        create_coupon(
            engine,
            OWNER_ID,
            1,
            code="save10",
            discount_percentage=Decimal("10"),
            valid_from=datetime(2026, 3, 1, tzinfo=timezone.utc),
            valid_to=datetime(2026, 4, 1, tzinfo=timezone.utc),
        )


@pytest.mark.integration
def test_invalid_terms_are_rejected(engine: Engine, make_property: Callable[..., int]) -> None:
    make_property()

    with pytest.raises(ValidationError) as exc_info:
        create_coupon(
            engine,
            OWNER_ID,
            1,
            code="X!",
            discount_percentage=Decimal("150"),
            valid_from=datetime(2026, 4, 1, tzinfo=timezone.utc),
            valid_to=datetime(2026, 3, 1, tzinfo=timezone.utc),
        )

    assert len(exc_info.value.errors) == 3


@pytest.mark.integration
def test_max_uses_cannot_be_lowered_below_current(
    engine: Engine, make_property: Callable[..., int], make_coupon: Callable[..., int]
) -> None:
    make_property()
    coupon_id = make_coupon(max_uses=5, current_uses=3)

    with pytest.raises(ValidationError):
        update_coupon(engine, OWNER_ID, coupon_id, {"max_uses": 2})


@pytest.mark.integration
def test_null_max_uses_makes_code_unlimited(
    engine: Engine, make_property: Callable[..., int], make_coupon: Callable[..., int]
) -> None:
    make_property()
    coupon_id = make_coupon(discount_percentage="10", max_uses=5, current_uses=3)

    updated = update_coupon(
        engine, OWNER_ID, coupon_id, {"max_uses": None, "discount_percentage": None}
    )

    assert updated.max_uses is None
    assert updated.discount_percentage == Decimal("10")
    assert updated.current_uses == 3


@pytest.mark.integration
def test_other_owner_cannot_manage_codes(
    engine: Engine, make_property: Callable[..., int], make_coupon: Callable[..., int]
) -> None:
    make_property()
    coupon_id = make_coupon()

    with pytest.raises(AuthorizationError):
        list_coupons(engine, OTHER_OWNER_ID, 1)
    with pytest.raises(AuthorizationError):
        delete_coupon(engine, OTHER_OWNER_ID, coupon_id)
    with pytest.raises(NotFoundError):
        delete_coupon(engine, OWNER_ID, 9999)


@pytest.mark.integration
def test_suspended_property_gets_no_new_codes(
    engine: Engine, make_property: Callable[..., int]
) -> None:
    make_property()
    suspend_property(engine, 1, "under review", now=NOW)

    with pytest.raises(ConflictError, match="suspended"):
        create_coupon(
            engine,
            OWNER_ID,
            1,
            code="LATE10",
            discount_percentage=Decimal("10"),
            valid_from=datetime(2026, 3, 1, tzinfo=timezone.utc),
            valid_to=datetime(2026, 4, 1, tzinfo=timezone.utc),
        )
