"""
Auto-confirmation sweep.

Pending reservations that nobody acted on for AUTO_CONFIRM_AFTER_HOURS are
confirmed on the owner's behalf. Each candidate is handled in its own
transaction so one failure does not stop the rest of the batch.
"""

from datetime import datetime, timedelta
from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from stay_booking.config import AUTO_CONFIRM_AFTER_HOURS
from stay_booking.db.readers.reservations import find_auto_confirm_candidates, get_reservation
from stay_booking.db.writers.reservations import transition_status
from stay_booking.domain.records import SweepResult
from stay_booking.domain.status import ReservationStatus, sources_for
from stay_booking.metrics import reservation_transitions, sweep_duration, sweep_outcomes, sweep_runs
from stay_booking.services.notifications import notify_reservation
from stay_booking.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def auto_confirm_one(engine: Engine, reservation_id: int, now: datetime) -> bool:
    """
    Confirm a single pending reservation.

    Returns:
        bool: True if confirmed, False if it had already left pending
    """
    with engine.begin() as conn:
        confirmed = transition_status(
            conn,
            reservation_id,
            sources_for(ReservationStatus.CONFIRMED),
            ReservationStatus.CONFIRMED,
            now,
            confirmed_at=now,
            auto_confirmed_at=now,
            confirmed_by="auto",
        )
        reservation = get_reservation(conn, reservation_id) if confirmed else None

    if reservation is not None:
        notify_reservation("reservation.confirmed", reservation)
    return confirmed


def run_auto_confirm_sweep(engine: Engine, now: Optional[datetime] = None) -> SweepResult:
    """
    Promote every stale pending reservation to confirmed.

    Candidates are pending, created at least AUTO_CONFIRM_AFTER_HOURS before
    `now`, and never auto-confirmed. A candidate moved by an owner or customer
    in the meantime is skipped; an error on one candidate is logged and counted.

    Args:
        engine: SQLAlchemy Engine
        now: Sweep time (defaults to UTC now)

    Returns:
        SweepResult: IDs confirmed, skipped and failed
    """
    now = now or utc_now()
    cutoff = now - timedelta(hours=AUTO_CONFIRM_AFTER_HOURS)

    with sweep_duration.time():
        try:
            with engine.connect() as conn:
                candidates = find_auto_confirm_candidates(conn, cutoff)
        except Exception:
            sweep_runs.labels(status="failure").inc()
            raise

        logger.info("auto_confirm_started", candidates=len(candidates), cutoff=cutoff.isoformat())

        result = SweepResult(candidates=len(candidates))
        for reservation_id in candidates:
            try:
                if auto_confirm_one(engine, reservation_id, now):
                    result.confirmed.append(reservation_id)
                    sweep_outcomes.labels(outcome="confirmed").inc()
                    reservation_transitions.labels(status=ReservationStatus.CONFIRMED.value).inc()
                else:
                    result.skipped.append(reservation_id)
                    sweep_outcomes.labels(outcome="skipped").inc()
                    logger.info("auto_confirm_skipped", reservation_id=reservation_id)
            except Exception as e:
                result.failed.append(reservation_id)
                sweep_outcomes.labels(outcome="failed").inc()
                logger.exception(
                    "auto_confirm_failed", reservation_id=reservation_id, error=str(e)
                )

    sweep_runs.labels(status="success").inc()
    logger.info(
        "auto_confirm_completed",
        confirmed=len(result.confirmed),
        skipped=len(result.skipped),
        failed=len(result.failed),
    )
    return result
