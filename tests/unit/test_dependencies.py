"""
Unit tests for FastAPI dependency injection.
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from stay_booking.dependencies import get_account_id, get_db_engine, get_owner_id


@pytest.fixture
def identity_client() -> TestClient:
    app = FastAPI()

    @app.get("/whoami")
    def whoami(account_id: str = Depends(get_account_id)) -> dict[str, str]:
        return {"account_id": account_id}

    @app.get("/owner")
    def owner(owner_id: int = Depends(get_owner_id)) -> dict[str, int]:
        return {"owner_id": owner_id}

    return TestClient(app)


@pytest.mark.unit
def test_get_db_engine_dependency() -> None:
    """Test that get_db_engine returns the engine instance."""
    engine = next(get_db_engine())

    assert isinstance(engine, Engine)


@pytest.mark.unit
def test_dependency_injection_provides_same_engine() -> None:
    """Test that multiple calls get the same engine instance."""
    assert next(get_db_engine()) is next(get_db_engine())


@pytest.mark.unit
def test_dependency_injection_can_be_overridden() -> None:
    """Test that dependency can be overridden for testing."""
    app = FastAPI()

    @app.get("/test")
    def test_endpoint(engine: Engine = Depends(get_db_engine)) -> dict[str, str]:
        return {"engine_name": engine.name}

    mock_engine = Mock(spec=Engine)
    mock_engine.name = "mock_engine"
    app.dependency_overrides[get_db_engine] = lambda: mock_engine

    response = TestClient(app).get("/test")

    assert response.status_code == 200
    assert response.json() == {"engine_name": "mock_engine"}


@pytest.mark.unit
def test_account_id_header_is_read(identity_client: TestClient) -> None:
    response = identity_client.get("/whoami", headers={"X-Account-Id": "acct-42"})

    assert response.json() == {"account_id": "acct-42"}


@pytest.mark.unit
def test_missing_account_id_is_401(identity_client: TestClient) -> None:
    assert identity_client.get("/whoami").status_code == 401


@pytest.mark.unit
def test_owner_id_must_be_integer(identity_client: TestClient) -> None:
    assert identity_client.get("/owner", headers={"X-Owner-Id": "abc"}).status_code == 400
    assert identity_client.get("/owner").status_code == 401
    assert identity_client.get("/owner", headers={"X-Owner-Id": "7"}).json() == {"owner_id": 7}
