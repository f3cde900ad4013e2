from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field

from stay_booking.domain.records import PromoCode


class CouponCreatePayload(BaseModel):
    """
    Schema for creating a promotional code. The code is upper-cased before
    it is checked against the allowed format.
    """

    property_id: int = Field(..., description="Property the code applies to")
    code: str = Field(..., description="Code text, 3-20 letters or digits")
    discount_percentage: Decimal = Field(..., description="Percentage off the subtotal (0-100)")
    valid_from: datetime = Field(..., description="Start of validity window")
    valid_to: datetime = Field(..., description="End of validity window")
    max_uses: Optional[int] = Field(None, description="Usage limit (unlimited when omitted)")


class CouponUpdatePayload(BaseModel):
    """Schema for changing a code's terms. All fields are optional."""

    discount_percentage: Optional[Decimal] = Field(None, description="Percentage off the subtotal")
    valid_from: Optional[datetime] = Field(None, description="Start of validity window")
    valid_to: Optional[datetime] = Field(None, description="End of validity window")
    max_uses: Optional[int] = Field(None, description="Usage limit; null removes it")


def serialize_coupon(code: PromoCode, now: datetime) -> dict[str, Any]:
    data = code.to_public(now)
    data["discount_percentage"] = str(code.discount_percentage)
    for key in ("valid_from", "valid_to", "created_at"):
        if data[key] is not None:
            data[key] = data[key].isoformat()
    return data
