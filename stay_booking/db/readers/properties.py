from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from stay_booking.domain.records import PropertyInventory
from stay_booking.models.properties import Property


def get_property(conn: Connection, property_id: int) -> Optional[PropertyInventory]:
    """
    Fetch the inventory projection for a property.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (int): Property ID.

    Returns:
        Optional[PropertyInventory]: The property, or None if it does not exist.
    """
    row = (
        conn.execute(select(Property.__table__).where(Property.id == property_id))
        .mappings()
        .fetchone()
    )
    return PropertyInventory.from_row(row) if row else None


def get_owner_property_ids(
    conn: Connection, owner_id: int, include_suspended: bool = False
) -> list[int]:
    """
    List the IDs of properties controlled by an owner.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        owner_id (int): Owner ID.
        include_suspended (bool): Also return suspended properties.

    Returns:
        list[int]: Property IDs ordered by ID.
    """
    stmt = select(Property.id).where(Property.owner_id == owner_id)
    if not include_suspended:
        stmt = stmt.where(Property.is_suspended == False)  # noqa: E712
    return list(conn.execute(stmt.order_by(Property.id)).scalars().all())
