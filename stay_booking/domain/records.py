"""
Immutable records passed between the booking services.

Rows read from the database are converted into these frozen dataclasses at
the reader boundary; services never mutate them; every change is a new
database write followed by a fresh read.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from stay_booking.domain.status import ReservationStatus
from stay_booking.utils.datetime import ensure_utc

ZERO = Decimal("0")


def _money(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    return ensure_utc(value) if value is not None else None


@dataclass(frozen=True)
class PropertyInventory:
    """Read-only projection of a property's inventory and pricing."""

    id: int
    owner_id: int
    name: str
    total_rooms: int
    guest_capacity: int
    base_price: Decimal
    cleaning_fee: Decimal = ZERO
    service_fee: Decimal = ZERO
    is_approved: bool = False
    is_suspended: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "PropertyInventory":
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            name=row["name"],
            total_rooms=row["total_rooms"],
            guest_capacity=row["guest_capacity"],
            base_price=_money(row["base_price"]),
            cleaning_fee=_money(row["cleaning_fee"]),
            service_fee=_money(row["service_fee"]),
            is_approved=bool(row["is_approved"]),
            is_suspended=bool(row["is_suspended"]),
        )


@dataclass(frozen=True)
class PromoCode:
    """A promotional code as stored, including its usage counter."""

    id: int
    property_id: int
    code: str
    discount_percentage: Decimal
    valid_from: datetime
    valid_to: datetime
    max_uses: Optional[int]
    current_uses: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "PromoCode":
        return cls(
            id=row["id"],
            property_id=row["property_id"],
            code=row["code"],
            discount_percentage=_money(row["discount_percentage"]),
            valid_from=ensure_utc(row["valid_from"]),
            valid_to=ensure_utc(row["valid_to"]),
            max_uses=row["max_uses"],
            current_uses=row["current_uses"],
            created_at=_aware(row.get("created_at")),
        )

    def is_valid(self, now: datetime) -> bool:
        """True when `now` falls inside the validity window (inclusive)."""
        return self.valid_from <= now <= self.valid_to

    def is_exhausted(self) -> bool:
        return self.max_uses is not None and self.current_uses >= self.max_uses

    def is_active(self, now: datetime) -> bool:
        return self.is_valid(now) and not self.is_exhausted()

    def to_public(self, now: datetime) -> dict[str, Any]:
        data = asdict(self)
        data["is_valid"] = self.is_valid(now)
        data["is_expired"] = now > self.valid_to
        data["is_active"] = self.is_active(now)
        return data


@dataclass(frozen=True)
class AppliedCoupon:
    """The coupon consumed by a reservation, as reported back to the customer."""

    id: int
    code: str
    discount_percentage: Decimal
    valid_from: datetime
    valid_to: datetime
    discount_amount: Decimal = ZERO

    def is_valid(self, now: datetime) -> bool:
        return self.valid_from <= now <= self.valid_to

    def to_public(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "discount_percentage": self.discount_percentage,
            "discount_amount": self.discount_amount,
        }


@dataclass(frozen=True)
class PriceBreakdown:
    """Charges for a stay at the time of the last price computation."""

    base_price_per_night: Decimal
    nights: int
    base_total: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    subtotal: Decimal
    taxes: Decimal
    discount: Decimal
    total: Decimal
    coupon_code: Optional[str] = None
    coupon_discount_percentage: Optional[Decimal] = None


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    conflict_date: Optional[date] = None


@dataclass(frozen=True)
class Reservation:
    """A reservation as persisted, with its price snapshot."""

    id: int
    property_id: int
    customer_id: int
    check_in: date
    check_out: date
    nights: int
    guests: int
    status: ReservationStatus
    price: PriceBreakdown
    coupon_id: Optional[int] = None
    confirmed_by: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancellation_policy: Optional[str] = None
    refund_amount: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    auto_confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    checked_in_at: Optional[datetime] = None
    checked_out_at: Optional[datetime] = None

    @property
    def total(self) -> Decimal:
        return self.price.total

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Reservation":
        pct = row["coupon_discount_percentage"]
        refund = row["refund_amount"]
        return cls(
            id=row["id"],
            property_id=row["property_id"],
            customer_id=row["customer_id"],
            check_in=row["check_in"],
            check_out=row["check_out"],
            nights=row["nights"],
            guests=row["guests"],
            status=ReservationStatus(row["status"]),
            price=PriceBreakdown(
                base_price_per_night=_money(row["base_price_per_night"]),
                nights=row["nights"],
                base_total=_money(row["base_total"]),
                cleaning_fee=_money(row["cleaning_fee"]),
                service_fee=_money(row["service_fee"]),
                subtotal=_money(row["subtotal"]),
                taxes=_money(row["taxes"]),
                discount=_money(row["discount"]),
                total=_money(row["total"]),
                coupon_code=row["coupon_code"],
                coupon_discount_percentage=_money(pct) if pct is not None else None,
            ),
            coupon_id=row["coupon_id"],
            confirmed_by=row["confirmed_by"],
            cancellation_reason=row["cancellation_reason"],
            cancellation_policy=row["cancellation_policy"],
            refund_amount=_money(refund) if refund is not None else None,
            created_at=_aware(row["created_at"]),
            updated_at=_aware(row["updated_at"]),
            confirmed_at=_aware(row["confirmed_at"]),
            auto_confirmed_at=_aware(row["auto_confirmed_at"]),
            cancelled_at=_aware(row["cancelled_at"]),
            checked_in_at=_aware(row["checked_in_at"]),
            checked_out_at=_aware(row["checked_out_at"]),
        )


@dataclass(frozen=True)
class CreatedReservation:
    reservation: Reservation
    applied_coupon: Optional[AppliedCoupon] = None


@dataclass(frozen=True)
class SweepResult:
    """Outcome counts for one auto-confirmation pass."""

    candidates: int = 0
    confirmed: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class CancellationOutcome:
    """Result of a customer cancellation; `deleted` is set for pending reservations."""

    message: str
    reservation: Reservation
    deleted: bool = False
