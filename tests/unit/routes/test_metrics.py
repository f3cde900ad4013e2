"""
Unit tests for metrics endpoint.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from stay_booking.main import app
from stay_booking.metrics import (
    availability_conflicts,
    coupon_allocations,
    reservation_transitions,
    sweep_duration,
    sweep_runs,
)


@pytest.fixture
def metrics_client() -> TestClient:
    """FastAPI test client."""
    return TestClient(app)


@pytest.mark.unit
def test_metrics_endpoint_returns_prometheus_format(metrics_client: TestClient) -> None:
    """Test that /metrics endpoint returns Prometheus text format."""
    response = metrics_client.get("/metrics")

    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]


@pytest.mark.unit
def test_metrics_endpoint_contains_booking_metrics(metrics_client: TestClient) -> None:
    """Test that /metrics endpoint includes the reservation and sweep metrics."""
    reservation_transitions.labels(status="confirmed").inc()
    availability_conflicts.labels(operation="create").inc()
    coupon_allocations.inc()
    sweep_runs.labels(status="success").inc()
    sweep_duration.observe(0.42)

    body = metrics_client.get("/metrics").text

    assert 'stay_booking_reservation_transitions_total{status="confirmed"}' in body
    assert 'stay_booking_availability_conflicts_total{operation="create"}' in body
    assert "stay_booking_coupon_allocations_total" in body
    assert 'stay_booking_auto_confirm_runs_total{status="success"}' in body
    assert "stay_booking_auto_confirm_duration_seconds_bucket" in body
