"""
FastAPI dependency injection providers.

This module contains dependency providers for FastAPI routes, enabling better
testability through dependency injection and following FastAPI best practices.

Dependencies can be overridden in tests using app.dependency_overrides, making
it easy to inject an isolated database engine for each test.

Identity is established by the upstream gateway; the service only reads the
account and owner IDs it forwards.
"""

from __future__ import annotations

from typing import Generator

from fastapi import Header, HTTPException
from sqlalchemy.engine import Engine

from stay_booking.db.engine import engine


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> app.dependency_overrides[get_db_engine] = lambda: test_engine
        >>> client = TestClient(app)
        >>> response = client.get("/reservations", headers={"X-Account-Id": "acct-1"})
    """
    yield engine


def get_account_id(x_account_id: str | None = Header(default=None)) -> str:
    """
    Customer account ID forwarded by the gateway.

    Raises:
        HTTPException: 401 if the header is missing or blank
    """
    if not x_account_id or not x_account_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-Account-Id header")
    return x_account_id.strip()


def get_owner_id(x_owner_id: str | None = Header(default=None)) -> int:
    """
    Property owner ID forwarded by the gateway.

    Raises:
        HTTPException: 401 if the header is missing, 400 if it is not an integer
    """
    if not x_owner_id:
        raise HTTPException(status_code=401, detail="Missing X-Owner-Id header")
    try:
        return int(x_owner_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="X-Owner-Id must be an integer")
