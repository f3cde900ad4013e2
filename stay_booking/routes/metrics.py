"""
Prometheus metrics endpoint for monitoring and observability.

This module provides a FastAPI route that exposes Prometheus metrics in the
standard text-based format for scraping by Prometheus servers.

Example:
    GET /metrics

    Response:
        # HELP stay_booking_reservation_transitions_total Total number of reservation status transitions
        # TYPE stay_booking_reservation_transitions_total counter
        stay_booking_reservation_transitions_total{status="confirmed"} 42.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text-based exposition format. This endpoint
    should be scraped by Prometheus at regular intervals (e.g., every 15-30 seconds).

    Returns:
        Response: Metrics in Prometheus format with Content-Type: text/plain
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
