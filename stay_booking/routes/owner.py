"""Owner-facing reservation endpoints: listing and lifecycle decisions."""

from typing import Any, Callable, Optional

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from stay_booking.dependencies import get_db_engine, get_owner_id
from stay_booking.domain.records import Reservation
from stay_booking.domain.status import ReservationStatus
from stay_booking.errors import BookingError
from stay_booking.schemas.reservations import serialize_reservation
from stay_booking.services.lifecycle import (
    check_in_reservation,
    check_out_reservation,
    confirm_reservation,
    get_owner_reservations,
    reject_reservation,
)
from stay_booking.services.notifications import notify_reservation

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/reservations")
def list_owner_reservations_endpoint(
    status_filter: Optional[ReservationStatus] = Query(None, alias="status"),
    owner_id: int = Depends(get_owner_id),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """List reservations at the owner's non-suspended properties, newest first."""
    try:
        reservations = get_owner_reservations(engine, owner_id, status=status_filter)
        return {
            "count": len(reservations),
            "reservations": [serialize_reservation(r) for r in reservations],
        }

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.exception("owner_reservation_list_failed", owner_id=owner_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


def _run_owner_action(
    action: Callable[[Engine, int, int], Reservation],
    event: str,
    message: str,
    reservation_id: int,
    owner_id: int,
    engine: Engine,
    background_tasks: BackgroundTasks,
) -> dict[str, Any]:
    try:
        reservation = action(engine, reservation_id, owner_id)
        background_tasks.add_task(notify_reservation, event, reservation)
        return {"message": message, "reservation": serialize_reservation(reservation)}

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.exception(
            "owner_action_failed",
            notification_event=event,
            reservation_id=reservation_id,
            error=str(e),
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/reservations/{reservation_id}/confirm")
def confirm_reservation_endpoint(
    reservation_id: int,
    background_tasks: BackgroundTasks,
    owner_id: int = Depends(get_owner_id),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    return _run_owner_action(
        confirm_reservation,
        "reservation.confirmed",
        "Reservation confirmed",
        reservation_id,
        owner_id,
        engine,
        background_tasks,
    )


@router.post("/reservations/{reservation_id}/reject")
def reject_reservation_endpoint(
    reservation_id: int,
    background_tasks: BackgroundTasks,
    owner_id: int = Depends(get_owner_id),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    return _run_owner_action(
        reject_reservation,
        "reservation.rejected",
        "Reservation rejected",
        reservation_id,
        owner_id,
        engine,
        background_tasks,
    )


@router.post("/reservations/{reservation_id}/check-in")
def check_in_endpoint(
    reservation_id: int,
    background_tasks: BackgroundTasks,
    owner_id: int = Depends(get_owner_id),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    return _run_owner_action(
        check_in_reservation,
        "reservation.checked_in",
        "Guest checked in",
        reservation_id,
        owner_id,
        engine,
        background_tasks,
    )


@router.post("/reservations/{reservation_id}/check-out")
def check_out_endpoint(
    reservation_id: int,
    background_tasks: BackgroundTasks,
    owner_id: int = Depends(get_owner_id),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    return _run_owner_action(
        check_out_reservation,
        "reservation.checked_out",
        "Guest checked out",
        reservation_id,
        owner_id,
        engine,
        background_tasks,
    )
