"""Price computation for stays."""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from stay_booking.domain.records import (
    ZERO,
    AppliedCoupon,
    PriceBreakdown,
    PromoCode,
    PropertyInventory,
)
from stay_booking.utils.datetime import utc_now

HUNDRED = Decimal("100")


def price_stay(
    base_price_per_night: Decimal,
    nights: int,
    cleaning_fee: Decimal,
    service_fee: Decimal,
    discount_percentage: Optional[Decimal] = None,
    coupon_code: Optional[str] = None,
) -> PriceBreakdown:
    """
    Price a stay from explicit rates.

    subtotal = base_price_per_night * nights + cleaning_fee + service_fee
    discount = subtotal * discount_percentage / 100
    total = subtotal + taxes - discount, never below zero

    Taxes are always zero for now. No rounding is applied.

    Args:
        base_price_per_night: Nightly rate
        nights: Number of nights (>= 1)
        cleaning_fee: Flat cleaning fee
        service_fee: Flat service fee
        discount_percentage: Coupon percentage to apply, if any
        coupon_code: Code recorded on the snapshot alongside the percentage

    Returns:
        PriceBreakdown
    """
    base_total = base_price_per_night * nights
    subtotal = base_total + cleaning_fee + service_fee
    taxes = ZERO
    discount = subtotal * discount_percentage / HUNDRED if discount_percentage else ZERO
    total = max(subtotal + taxes - discount, ZERO)

    return PriceBreakdown(
        base_price_per_night=base_price_per_night,
        nights=nights,
        base_total=base_total,
        cleaning_fee=cleaning_fee,
        service_fee=service_fee,
        subtotal=subtotal,
        taxes=taxes,
        discount=discount,
        total=total,
        coupon_code=coupon_code,
        coupon_discount_percentage=discount_percentage,
    )


def compute_price(
    prop: PropertyInventory,
    nights: int,
    coupon: Optional[Union[AppliedCoupon, PromoCode]] = None,
    now: Optional[datetime] = None,
) -> PriceBreakdown:
    """
    Price a stay at a property, applying the coupon only if it is valid at `now`.
    """
    now = now or utc_now()
    if coupon is not None and coupon.is_valid(now):
        return price_stay(
            prop.base_price,
            nights,
            prop.cleaning_fee,
            prop.service_fee,
            discount_percentage=coupon.discount_percentage,
            coupon_code=coupon.code,
        )
    return price_stay(prop.base_price, nights, prop.cleaning_fee, prop.service_fee)
