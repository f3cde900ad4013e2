"""
Prometheus metrics for reservation lifecycle, inventory and the auto-confirm sweep.

This module defines all Prometheus metrics used throughout the application for
observability and monitoring. Metrics are exposed via the /metrics endpoint for
scraping by Prometheus.

Metric Types:
    - Counter: Cumulative metrics that only increase (e.g., total transitions)
    - Histogram: Observations bucketed by value (e.g., sweep duration)

Example:
    >>> from stay_booking.metrics import sweep_duration, sweep_runs
    >>> with sweep_duration.time():
    ...     result = run_auto_confirm_sweep(engine)
    >>> sweep_runs.labels(status="success").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Reservation Metrics
# =============================================================================

reservation_transitions = Counter(
    "stay_booking_reservation_transitions_total",
    "Total number of reservation status transitions",
    ["status"],
)
"""
Counter for reservation lifecycle transitions.

Labels:
    status: Resulting status (pending, confirmed, rejected, cancelled,
        checked-in, checked-out, deleted)
"""

availability_conflicts = Counter(
    "stay_booking_availability_conflicts_total",
    "Total number of booking attempts refused for lack of inventory",
    ["operation"],
)
"""
Counter for availability conflicts.

Labels:
    operation: create or reschedule
"""

# =============================================================================
# Coupon Metrics
# =============================================================================

coupon_allocations = Counter(
    "stay_booking_coupon_allocations_total",
    "Total number of promotional code uses consumed by reservations",
)

coupon_releases = Counter(
    "stay_booking_coupon_releases_total",
    "Total number of promotional code uses given back on cancellation",
)

# =============================================================================
# Sweep Metrics
# =============================================================================

sweep_runs = Counter(
    "stay_booking_auto_confirm_runs_total",
    "Total number of auto-confirm sweep passes (success and failure)",
    ["status"],
)
"""
Counter for sweep passes.

Labels:
    status: success or failure
"""

sweep_outcomes = Counter(
    "stay_booking_auto_confirm_reservations_total",
    "Reservations processed by the auto-confirm sweep",
    ["outcome"],
)
"""
Counter for per-reservation sweep outcomes.

Labels:
    outcome: confirmed, skipped or failed
"""

sweep_duration = Histogram(
    "stay_booking_auto_confirm_duration_seconds",
    "Duration of auto-confirm sweep passes in seconds",
    buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, float("inf")),
)
"""
Histogram for sweep duration.

Buckets: 0.1s, 0.5s, 1s, 2.5s, 5s, 10s, 30s, 60s, +Inf
"""
