"""
Shared fixtures for the test suite.

Configuration is read at import time, so the environment is set up here
before any stay_booking module is imported. Every test gets its own
in-memory SQLite database with the schema created from the models.
"""

from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_SCHEMA"] = ""
os.environ["LOCAL_TIMEZONE"] = "UTC"
os.environ["AUTO_CONFIRM_ENABLED"] = "false"
os.environ["NOTIFICATION_WEBHOOK_URL"] = ""
os.environ.setdefault("ALLOWED_ORIGINS", "*")
os.environ.setdefault("LOG_LEVEL", "INFO")

from datetime import datetime, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any, Callable, Generator, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import insert  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402

from stay_booking.db.engine import build_engine  # noqa: E402
from stay_booking.db.writers.properties import upsert_properties  # noqa: E402
from stay_booking.models.base import Base  # noqa: E402
from stay_booking.models.customers import Customer  # noqa: E402,F401
from stay_booking.models.inventory import InventoryNight  # noqa: E402,F401
from stay_booking.models.promo_codes import PromoCode  # noqa: E402
from stay_booking.models.properties import Property  # noqa: E402,F401
from stay_booking.models.reservations import Reservation  # noqa: E402,F401

# Fixed "current time" for service tests: 2026-03-01 12:00 UTC
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

OWNER_ID = 10
OTHER_OWNER_ID = 20


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database with all tables created."""
    test_engine = build_engine("sqlite://")
    Base.metadata.create_all(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def make_property(engine: Engine) -> Callable[..., int]:
    """
    Factory inserting a property through the inventory upsert.

    Returns the property ID.
    """

    def _make(
        property_id: int = 1,
        owner_id: int = OWNER_ID,
        total_rooms: int = 1,
        guest_capacity: int = 4,
        base_price: str = "100",
        cleaning_fee: str = "0",
        service_fee: str = "0",
        is_approved: bool = True,
    ) -> int:
        upsert_properties(
            engine,
            [
                {
                    "id": property_id,
                    "owner_id": owner_id,
                    "name": f"Property {property_id}",
                    "total_rooms": total_rooms,
                    "guest_capacity": guest_capacity,
                    "base_price": Decimal(base_price),
                    "cleaning_fee": Decimal(cleaning_fee),
                    "service_fee": Decimal(service_fee),
                    "is_approved": is_approved,
                }
            ],
        )
        return property_id

    return _make


@pytest.fixture
def make_coupon(engine: Engine) -> Callable[..., int]:
    """
    Factory inserting a promotional code directly, with full control over
    its usage counter and creation time.

    Returns the coupon ID.
    """

    def _make(
        property_id: int = 1,
        code: str = "SAVE10",
        discount_percentage: str = "10",
        valid_from: Optional[datetime] = None,
        valid_to: Optional[datetime] = None,
        max_uses: Optional[int] = 5,
        current_uses: int = 0,
        created_at: Optional[datetime] = None,
    ) -> int:
        values: dict[str, Any] = {
            "property_id": property_id,
            "code": code,
            "discount_percentage": Decimal(discount_percentage),
            "valid_from": valid_from or datetime(2026, 1, 1, tzinfo=timezone.utc),
            "valid_to": valid_to or datetime(2026, 12, 31, tzinfo=timezone.utc),
            "max_uses": max_uses,
            "current_uses": current_uses,
            "created_at": created_at or datetime(2026, 1, 1, tzinfo=timezone.utc),
            "updated_at": created_at or datetime(2026, 1, 1, tzinfo=timezone.utc),
        }
        with engine.begin() as conn:
            result = conn.execute(insert(PromoCode).values(**values))
            return int(result.inserted_primary_key[0])

    return _make


@pytest.fixture
def client(engine: Engine) -> Generator[TestClient, None, None]:
    """TestClient bound to the per-test database."""
    from stay_booking.dependencies import get_db_engine
    from stay_booking.main import app

    app.dependency_overrides[get_db_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()
