"""Ownership decisions for owner-facing operations."""

from sqlalchemy.engine import Connection

from stay_booking.db.readers.properties import get_property
from stay_booking.domain.records import PropertyInventory
from stay_booking.errors import AuthorizationError, NotFoundError


def owns_property(prop: PropertyInventory, owner_id: int) -> bool:
    return prop.owner_id == owner_id


def require_owned_property(conn: Connection, property_id: int, owner_id: int) -> PropertyInventory:
    """
    Load a property and make sure `owner_id` controls it.

    Raises:
        NotFoundError: Unknown property
        AuthorizationError: Property belongs to another owner
    """
    prop = get_property(conn, property_id)
    if prop is None:
        raise NotFoundError(f"Property {property_id} not found")
    if not owns_property(prop, owner_id):
        raise AuthorizationError(f"Not authorized to manage property {property_id}")
    return prop
