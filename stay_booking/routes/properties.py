"""
Inventory sync and moderation endpoints.

These are called by the property inventory system and the moderation
dashboard, not by customers or owners.
"""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.engine import Engine

from stay_booking.db.writers.properties import upsert_properties
from stay_booking.dependencies import get_db_engine
from stay_booking.errors import BookingError
from stay_booking.schemas.properties import PropertySuspendPayload, PropertySyncPayload
from stay_booking.services.lifecycle import reinstate_property, suspend_property
from stay_booking.services.notifications import notify_reservation

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.put("/properties/{property_id}")
def sync_property_endpoint(
    property_id: int,
    payload: PropertySyncPayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Create or update a property's inventory and pricing.

    Rows are only rewritten when a value actually changed.
    """
    try:
        upsert_properties(engine, [{"id": property_id, **payload.model_dump()}])
        return {"message": f"Property {property_id} synced"}

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.exception("property_sync_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/properties/{property_id}/suspend")
def suspend_property_endpoint(
    property_id: int,
    background_tasks: BackgroundTasks,
    payload: Optional[PropertySuspendPayload] = None,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Suspend a property and cancel all of its pending and confirmed reservations.

    Returns:
        dict: Message and the number of reservations cancelled
    """
    try:
        cancelled = suspend_property(engine, property_id, payload.reason if payload else None)
        for reservation in cancelled:
            background_tasks.add_task(notify_reservation, "reservation.cancelled", reservation)

        return {
            "message": f"Property {property_id} suspended",
            "cancelled_reservations": len(cancelled),
        }

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.exception("property_suspension_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/properties/{property_id}/unsuspend")
def unsuspend_property_endpoint(
    property_id: int,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, str]:
    try:
        reinstate_property(engine, property_id)
        return {"message": f"Property {property_id} reinstated"}

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.exception("property_reinstate_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
