from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from stay_booking.models.customers import Customer


def get_customer_id(conn: Connection, account_id: str) -> Optional[int]:
    """
    Look up the customer profile ID for an external account.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        account_id (str): Account ID issued by the authentication service.

    Returns:
        Optional[int]: Customer ID or None if no profile exists yet.
    """
    result = conn.execute(select(Customer.id).where(Customer.account_id == account_id))
    row = result.fetchone()
    return row[0] if row else None
