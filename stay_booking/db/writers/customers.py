from sqlalchemy.engine import Connection

from stay_booking.db.readers.customers import get_customer_id
from stay_booking.db.writers._upsert import insert_ignore
from stay_booking.models.customers import Customer
from stay_booking.utils.datetime import utc_now


def get_or_create_customer(conn: Connection, account_id: str) -> int:
    """
    Return the customer profile ID for an account, creating the profile if needed.

    Creation uses INSERT ... ON CONFLICT DO NOTHING so two concurrent first
    requests for the same account end up with the same profile.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        account_id (str): Account ID issued by the authentication service.

    Returns:
        int: Customer profile ID.
    """
    customer_id = get_customer_id(conn, account_id)
    if customer_id is not None:
        return customer_id

    insert_ignore(
        conn,
        Customer,
        [{"account_id": account_id, "created_at": utc_now()}],
        conflict_columns=["account_id"],
    )
    customer_id = get_customer_id(conn, account_id)
    if customer_id is None:
        raise RuntimeError(f"Customer profile for account {account_id} could not be created")
    return customer_id
