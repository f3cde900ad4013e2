from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field

from stay_booking.domain.records import AppliedCoupon, PriceBreakdown, Reservation


class ReservationCreatePayload(BaseModel):
    """
    Schema for booking a stay. Range and guest checks happen in the service
    so every failure is reported together.
    """

    property_id: int = Field(..., description="Property to book")
    check_in: date = Field(..., description="Arrival date (YYYY-MM-DD)")
    check_out: date = Field(..., description="Departure date (YYYY-MM-DD)")
    guests: int = Field(1, description="Number of guests")


class ReservationCancelPayload(BaseModel):
    reason: Optional[str] = Field(None, max_length=500, description="Why the stay is cancelled")


class ReservationReschedulePayload(BaseModel):
    check_in: date = Field(..., description="New arrival date")
    check_out: date = Field(..., description="New departure date")


def _money(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def serialize_price(price: PriceBreakdown) -> dict[str, Any]:
    """Money values are rendered as strings to keep their exact decimal value."""
    return {
        "base_price_per_night": _money(price.base_price_per_night),
        "nights": price.nights,
        "base_total": _money(price.base_total),
        "cleaning_fee": _money(price.cleaning_fee),
        "service_fee": _money(price.service_fee),
        "subtotal": _money(price.subtotal),
        "taxes": _money(price.taxes),
        "discount": _money(price.discount),
        "total": _money(price.total),
        "coupon_code": price.coupon_code,
        "coupon_discount_percentage": _money(price.coupon_discount_percentage),
    }


def serialize_reservation(reservation: Reservation) -> dict[str, Any]:
    """Render a reservation for API responses."""

    def ts(value: Any) -> Optional[str]:
        return value.isoformat() if value is not None else None

    return {
        "id": reservation.id,
        "property_id": reservation.property_id,
        "customer_id": reservation.customer_id,
        "check_in": reservation.check_in.isoformat(),
        "check_out": reservation.check_out.isoformat(),
        "nights": reservation.nights,
        "guests": reservation.guests,
        "status": reservation.status.value,
        "price": serialize_price(reservation.price),
        "coupon_id": reservation.coupon_id,
        "confirmed_by": reservation.confirmed_by,
        "cancellation_reason": reservation.cancellation_reason,
        "cancellation_policy": reservation.cancellation_policy,
        "refund_amount": _money(reservation.refund_amount),
        "created_at": ts(reservation.created_at),
        "updated_at": ts(reservation.updated_at),
        "confirmed_at": ts(reservation.confirmed_at),
        "auto_confirmed_at": ts(reservation.auto_confirmed_at),
        "cancelled_at": ts(reservation.cancelled_at),
        "checked_in_at": ts(reservation.checked_in_at),
        "checked_out_at": ts(reservation.checked_out_at),
    }


def serialize_applied_coupon(coupon: Optional[AppliedCoupon]) -> Optional[dict[str, Any]]:
    if coupon is None:
        return None
    return {
        "code": coupon.code,
        "discount_percentage": _money(coupon.discount_percentage),
        "discount_amount": _money(coupon.discount_amount),
    }
