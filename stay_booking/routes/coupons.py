"""Owner-facing promotional code management."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.engine import Engine

from stay_booking.dependencies import get_db_engine, get_owner_id
from stay_booking.errors import BookingError
from stay_booking.schemas.coupons import CouponCreatePayload, CouponUpdatePayload, serialize_coupon
from stay_booking.services.coupons import create_coupon, delete_coupon, list_coupons, update_coupon
from stay_booking.utils.datetime import utc_now

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/coupons", status_code=status.HTTP_201_CREATED)
def create_coupon_endpoint(
    payload: CouponCreatePayload,
    owner_id: int = Depends(get_owner_id),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Create a promotional code for one of the owner's properties.

    New codes are picked up automatically by the next booking at that
    property while they are valid and have uses left.
    """
    try:
        created = create_coupon(
            engine,
            owner_id=owner_id,
            property_id=payload.property_id,
            code=payload.code,
            discount_percentage=payload.discount_percentage,
            valid_from=payload.valid_from,
            valid_to=payload.valid_to,
            max_uses=payload.max_uses,
        )
        return serialize_coupon(created, utc_now())

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.exception("coupon_creation_failed", owner_id=owner_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/properties/{property_id}/coupons")
def list_coupons_endpoint(
    property_id: int,
    owner_id: int = Depends(get_owner_id),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        now = utc_now()
        codes = list_coupons(engine, owner_id, property_id)
        return {"count": len(codes), "coupons": [serialize_coupon(c, now) for c in codes]}

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.exception("coupon_list_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/coupons/{coupon_id}")
def update_coupon_endpoint(
    coupon_id: int,
    payload: CouponUpdatePayload,
    owner_id: int = Depends(get_owner_id),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        updated = update_coupon(engine, owner_id, coupon_id, payload.model_dump(exclude_unset=True))
        return serialize_coupon(updated, utc_now())

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.exception("coupon_update_failed", coupon_id=coupon_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/coupons/{coupon_id}")
def delete_coupon_endpoint(
    coupon_id: int,
    owner_id: int = Depends(get_owner_id),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, str]:
    try:
        delete_coupon(engine, owner_id, coupon_id)
        return {"message": f"Coupon {coupon_id} deleted"}

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.exception("coupon_deletion_failed", coupon_id=coupon_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
