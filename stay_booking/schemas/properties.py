from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class PropertySyncPayload(BaseModel):
    """
    Schema for a property pushed by the inventory system. The suspension flag
    is not part of the sync; it changes only through the suspend endpoints.
    """

    owner_id: int = Field(..., description="Owner controlling the property")
    name: str = Field(..., description="Display name")
    total_rooms: int = Field(..., ge=0, description="Rooms available per night")
    guest_capacity: int = Field(..., ge=1, description="Maximum guests per reservation")
    base_price: Decimal = Field(..., ge=0, description="Price per night")
    cleaning_fee: Decimal = Field(Decimal("0"), ge=0, description="Flat cleaning fee")
    service_fee: Decimal = Field(Decimal("0"), ge=0, description="Flat service fee")
    is_approved: bool = Field(False, description="Approved for booking")


class PropertySuspendPayload(BaseModel):
    reason: Optional[str] = Field(None, max_length=500, description="Suspension reason")
