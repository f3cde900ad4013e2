"""
Pure input checks for reservations and promotional codes.

Each helper returns a list of human-readable failures; an empty list means the
input is acceptable. Callers combine the lists and raise a single
ValidationError so the client sees every problem at once.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

COUPON_CODE_PATTERN = re.compile(r"^[A-Z0-9]{3,20}$")


def validate_stay_dates(check_in: date, check_out: date, today: date) -> list[str]:
    """
    Check a requested stay range.

    Args:
        check_in: Arrival date
        check_out: Departure date
        today: Current local calendar date

    Returns:
        list[str]: Failures (empty when valid)
    """
    failures = []
    if check_in >= check_out:
        failures.append("check_out must be after check_in")
    if check_in < today:
        failures.append("check_in cannot be in the past")
    return failures


def validate_guests(guests: int, capacity: int) -> list[str]:
    failures = []
    if guests < 1:
        failures.append("guests must be at least 1")
    elif guests > capacity:
        failures.append(f"guests ({guests}) exceed property capacity ({capacity})")
    return failures


def normalize_code(code: str) -> str:
    return code.strip().upper()


def validate_coupon_code(code: str) -> list[str]:
    if not COUPON_CODE_PATTERN.match(code):
        return ["code must be 3-20 upper-case letters or digits"]
    return []


def validate_coupon_terms(
    discount_percentage: Optional[Decimal],
    valid_from: Optional[datetime],
    valid_to: Optional[datetime],
    max_uses: Optional[int],
    current_uses: int = 0,
) -> list[str]:
    """
    Check the editable terms of a promotional code.

    Unset values are skipped so the same helper serves both creation (all
    values present) and partial updates.
    """
    failures = []
    if discount_percentage is not None and not (0 <= discount_percentage <= 100):
        failures.append("discount_percentage must be between 0 and 100")
    if valid_from is not None and valid_to is not None and valid_from >= valid_to:
        failures.append("valid_to must be after valid_from")
    if max_uses is not None:
        if max_uses < 1:
            failures.append("max_uses must be at least 1")
        elif max_uses < current_uses:
            failures.append(f"max_uses cannot be lower than current uses ({current_uses})")
    return failures
