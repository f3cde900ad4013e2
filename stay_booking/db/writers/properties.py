import json
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import update
from sqlalchemy.engine import Connection, Engine

from stay_booking.config import DEBUG
from stay_booking.db.writers._upsert import upsert_with_distinct_check
from stay_booking.models.properties import Property

logger = structlog.get_logger(__name__)

PROPERTY_COLUMNS = [
    "owner_id",
    "name",
    "total_rooms",
    "guest_capacity",
    "base_price",
    "cleaning_fee",
    "service_fee",
    "is_approved",
]


def upsert_properties(engine: Engine, data: list[dict[str, Any]]) -> int:
    """
    Upsert property inventory rows, updating only those whose values changed.

    The suspension flag is not part of the sync payload; it is owned by
    suspend_property() so a routine inventory sync cannot lift a suspension.

    Args:
        engine: SQLAlchemy Engine
        data: Property dicts from the inventory system

    Returns:
        int: Number of rows sent to the database
    """
    now = datetime.now(tz=timezone.utc)

    rows = []
    for p in data:
        property_id = p.get("id")
        owner_id = p.get("owner_id")

        if property_id is None or owner_id is None:
            logger.warning("property_skipped_missing_ids", payload_keys=sorted(p.keys()))
            continue

        rows.append(
            {
                "id": property_id,
                "owner_id": owner_id,
                "name": p.get("name") or f"Property {property_id}",
                "total_rooms": p.get("total_rooms", 1),
                "guest_capacity": p.get("guest_capacity", 1),
                "base_price": p.get("base_price", 0),
                "cleaning_fee": p.get("cleaning_fee", 0),
                "service_fee": p.get("service_fee", 0),
                "is_approved": p.get("is_approved", False),
                "created_at": now,
                "updated_at": now,
            }
        )

    if not rows:
        logger.info("No properties to upsert")
        return 0

    if DEBUG:
        logger.debug("Sample property to upsert:\n%s", json.dumps(rows[0], indent=2, default=str))

    with engine.begin() as conn:
        upsert_with_distinct_check(
            conn,
            Property,
            rows,
            conflict_column="id",
            update_columns=PROPERTY_COLUMNS,
        )

    logger.info("properties_upserted", count=len(rows))
    return len(rows)


def set_property_suspended(
    conn: Connection, property_id: int, suspended: bool, reason: str | None = None
) -> bool:
    """
    Set or clear the suspension flag for a property.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        property_id (int): Property ID.
        suspended (bool): New suspension state.
        reason (str | None): Suspension reason (cleared when lifting).

    Returns:
        bool: True if the property exists.
    """
    stmt = (
        update(Property)
        .where(Property.id == property_id)
        .values(
            is_suspended=suspended,
            suspension_reason=reason if suspended else None,
            updated_at=datetime.now(tz=timezone.utc),
        )
    )
    return conn.execute(stmt).rowcount > 0
