"""Customer-facing reservation endpoints."""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.engine import Engine

from stay_booking.dependencies import get_account_id, get_db_engine
from stay_booking.domain.status import ReservationStatus
from stay_booking.errors import BookingError
from stay_booking.schemas.reservations import (
    ReservationCancelPayload,
    ReservationCreatePayload,
    ReservationReschedulePayload,
    serialize_applied_coupon,
    serialize_reservation,
)
from stay_booking.services.lifecycle import (
    cancel_reservation,
    create_reservation,
    get_reservation,
    get_reservations,
)
from stay_booking.services.notifications import notify_reservation
from stay_booking.services.reschedule import reschedule_reservation

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/reservations", status_code=status.HTTP_201_CREATED)
def create_reservation_endpoint(
    payload: ReservationCreatePayload,
    background_tasks: BackgroundTasks,
    account_id: str = Depends(get_account_id),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Book a stay. The reservation starts out pending.

    Args:
        payload: Property, dates and guest count
        background_tasks: FastAPI background task runner
        account_id: Customer account from X-Account-Id
        engine: Database engine

    Returns:
        dict: The reservation and the coupon applied to it (or null)
    """
    try:
        created = create_reservation(
            engine,
            property_id=payload.property_id,
            check_in=payload.check_in,
            check_out=payload.check_out,
            guests=payload.guests,
            account_id=account_id,
        )
        background_tasks.add_task(notify_reservation, "reservation.created", created.reservation)

        return {
            "reservation": serialize_reservation(created.reservation),
            "applied_coupon": serialize_applied_coupon(created.applied_coupon),
        }

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.exception("reservation_creation_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/reservations")
def list_reservations_endpoint(
    status_filter: Optional[ReservationStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    account_id: str = Depends(get_account_id),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    List the caller's reservations, newest first.

    Reservations at suspended properties are hidden.
    """
    try:
        reservations = get_reservations(
            engine, account_id, status=status_filter, page=page, limit=limit
        )
        return {
            "page": page,
            "limit": limit,
            "count": len(reservations),
            "reservations": [serialize_reservation(r) for r in reservations],
        }

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.exception("reservation_list_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/reservations/{reservation_id}")
def get_reservation_endpoint(
    reservation_id: int,
    account_id: str = Depends(get_account_id),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        return serialize_reservation(get_reservation(engine, reservation_id, account_id))

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.exception("reservation_fetch_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/reservations/{reservation_id}/cancel")
def cancel_reservation_endpoint(
    reservation_id: int,
    background_tasks: BackgroundTasks,
    payload: Optional[ReservationCancelPayload] = None,
    account_id: str = Depends(get_account_id),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Cancel a reservation.

    Pending reservations are removed; confirmed ones are cancelled with a full
    refund as long as check-in is more than 24 hours away.

    Returns:
        dict: Outcome message, plus the cancelled reservation when it is kept
    """
    try:
        outcome = cancel_reservation(
            engine,
            reservation_id,
            account_id,
            reason=payload.reason if payload else None,
        )
        background_tasks.add_task(notify_reservation, "reservation.cancelled", outcome.reservation)

        response: dict[str, Any] = {"message": outcome.message}
        if not outcome.deleted:
            response["reservation"] = serialize_reservation(outcome.reservation)
        return response

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.exception("reservation_cancel_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/reservations/{reservation_id}/reschedule")
def reschedule_reservation_endpoint(
    reservation_id: int,
    payload: ReservationReschedulePayload,
    background_tasks: BackgroundTasks,
    account_id: str = Depends(get_account_id),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        updated = reschedule_reservation(
            engine,
            reservation_id,
            account_id,
            new_check_in=payload.check_in,
            new_check_out=payload.check_out,
        )
        background_tasks.add_task(notify_reservation, "reservation.rescheduled", updated)
        return serialize_reservation(updated)

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.exception(
            "reservation_reschedule_failed", reservation_id=reservation_id, error=str(e)
        )
        raise HTTPException(status_code=500, detail="Internal server error")
