"""
Integration tests for the owner reservation endpoints.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from stay_booking.utils.datetime import local_today

CUSTOMER = {"X-Account-Id": "acct-1"}
OWNER = {"X-Owner-Id": "10"}
OTHER_OWNER = {"X-Owner-Id": "20"}


def _book(client: TestClient) -> int:
    check_in = local_today() + timedelta(days=30)
    response = client.post(
        "/reservations",
        json={
            "property_id": 1,
            "check_in": check_in.isoformat(),
            "check_out": (check_in + timedelta(days=2)).isoformat(),
        },
        headers=CUSTOMER,
    )
    assert response.status_code == 201
    return response.json()["reservation"]["id"]


def _act(client: TestClient, reservation_id: int, action: str, headers: Any = OWNER) -> Any:
    return client.post(f"/owner/reservations/{reservation_id}/{action}", headers=headers)


@pytest.mark.integration
def test_owner_walks_reservation_through_stay(
    client: TestClient, make_property: Callable[..., int]
) -> None:
    make_property()
    reservation_id = _book(client)

    confirmed = _act(client, reservation_id, "confirm")
    assert confirmed.status_code == 200
    assert confirmed.json()["message"] == "Reservation confirmed"
    assert confirmed.json()["reservation"]["confirmed_by"] == "owner"

    checked_in = _act(client, reservation_id, "check-in")
    assert checked_in.json()["reservation"]["status"] == "checked-in"

    checked_out = _act(client, reservation_id, "check-out")
    assert checked_out.json()["reservation"]["status"] == "checked-out"
    assert checked_out.json()["reservation"]["checked_out_at"] is not None


@pytest.mark.integration
def test_reject_then_confirm_is_a_conflict(
    client: TestClient, make_property: Callable[..., int]
) -> None:
    make_property()
    reservation_id = _book(client)

    assert _act(client, reservation_id, "reject").json()["reservation"]["status"] == "rejected"

    response = _act(client, reservation_id, "confirm")
    assert response.status_code == 409
    assert "rejected" in response.json()["detail"]


@pytest.mark.integration
def test_other_owner_is_forbidden(client: TestClient, make_property: Callable[..., int]) -> None:
    make_property()
    reservation_id = _book(client)

    assert _act(client, reservation_id, "confirm", headers=OTHER_OWNER).status_code == 403
    assert _act(client, 9999, "confirm").status_code == 404


@pytest.mark.integration
def test_owner_header_is_required_and_numeric(client: TestClient) -> None:
    assert client.get("/owner/reservations").status_code == 401
    assert client.get("/owner/reservations", headers={"X-Owner-Id": "abc"}).status_code == 400


@pytest.mark.integration
def test_owner_listing(client: TestClient, make_property: Callable[..., int]) -> None:
    make_property()
    reservation_id = _book(client)

    listing = client.get("/owner/reservations", headers=OWNER).json()
    assert listing["count"] == 1
    assert listing["reservations"][0]["id"] == reservation_id

    pending_only = client.get("/owner/reservations", params={"status": "pending"}, headers=OWNER)
    assert pending_only.json()["count"] == 1
    assert client.get("/owner/reservations", headers=OTHER_OWNER).json()["count"] == 0
