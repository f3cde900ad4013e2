"""
Writers for the per-night inventory ledger.

Every reservation that holds inventory has claimed each of its nights here.
Claims happen inside the same transaction as the reservation write, so a
failed claim rolls back the whole booking.
"""

from datetime import date
from typing import Optional

import structlog
from sqlalchemy import update
from sqlalchemy.engine import Connection

from stay_booking.db.writers._upsert import insert_ignore
from stay_booking.models.inventory import InventoryNight
from stay_booking.utils.datetime import iter_nights

logger = structlog.get_logger(__name__)


def claim_nights(
    conn: Connection,
    property_id: int,
    total_rooms: int,
    check_in: date,
    check_out: date,
) -> Optional[date]:
    """
    Atomically book one room on every night in [check_in, check_out).

    Each night is claimed with a guarded increment (booked < total_rooms).
    The caller must roll back the transaction when a night is returned.

    Args:
        conn: Active database connection (within transaction)
        property_id: Property ID
        total_rooms: Property room count
        check_in: First night
        check_out: Departure date (not claimed)

    Returns:
        Optional[date]: The first night that could not be claimed, or None on success
    """
    nights = list(iter_nights(check_in, check_out))
    insert_ignore(
        conn,
        InventoryNight,
        [{"property_id": property_id, "night": night, "booked": 0} for night in nights],
        conflict_columns=["property_id", "night"],
    )

    for night in nights:
        stmt = (
            update(InventoryNight)
            .where(InventoryNight.property_id == property_id)
            .where(InventoryNight.night == night)
            .where(InventoryNight.booked < total_rooms)
            .values(booked=InventoryNight.booked + 1)
        )
        if conn.execute(stmt).rowcount == 0:
            logger.info("inventory_claim_rejected", property_id=property_id, night=str(night))
            return night

    return None


def release_nights(conn: Connection, property_id: int, check_in: date, check_out: date) -> None:
    """
    Give back one room on every night in [check_in, check_out).

    Args:
        conn: Active database connection (within transaction)
        property_id: Property ID
        check_in: First night
        check_out: Departure date (not released)
    """
    stmt = (
        update(InventoryNight)
        .where(InventoryNight.property_id == property_id)
        .where(InventoryNight.night >= check_in)
        .where(InventoryNight.night < check_out)
        .where(InventoryNight.booked > 0)
        .values(booked=InventoryNight.booked - 1)
    )
    conn.execute(stmt)
