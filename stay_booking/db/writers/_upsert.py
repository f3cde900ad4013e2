"""
Dialect-aware INSERT ... ON CONFLICT helpers.

Postgres and SQLite both support ON CONFLICT, but SQLAlchemy exposes it through
each dialect's own insert() construct. These helpers pick the right one for
the connection so writers stay backend-agnostic.
"""

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection


def dialect_insert(conn: Connection, table: type) -> Any:
    """Return an insert() construct supporting on_conflict_* for this connection."""
    if conn.dialect.name == "postgresql":
        return postgresql.insert(table)
    if conn.dialect.name == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"ON CONFLICT is not supported for dialect {conn.dialect.name}")


def insert_ignore(
    conn: Connection,
    table: type,
    rows: list[dict[str, Any]],
    conflict_columns: list[str],
) -> None:
    """
    Insert rows, silently skipping any that collide on conflict_columns.

    Args:
        conn: Active database connection (within transaction)
        table: SQLAlchemy ORM table class
        rows: Row dicts to insert
        conflict_columns: Columns forming the unique key
    """
    if not rows:
        return

    stmt = dialect_insert(conn, table).values(rows)
    stmt = stmt.on_conflict_do_nothing(index_elements=conflict_columns)
    conn.execute(stmt)


def upsert_with_distinct_check(
    conn: Connection,
    table: type,
    rows: list[dict[str, Any]],
    conflict_column: str,
    update_columns: list[str],
) -> None:
    """
    Perform upsert with IS DISTINCT FROM optimization.

    Only updates rows where at least one of update_columns actually changed,
    preventing unnecessary writes and updated_at timestamp changes.

    Args:
        conn: Active database connection (within transaction)
        table: SQLAlchemy ORM table class (e.g., Property)
        rows: List of row dicts to upsert
        conflict_column: Column name for ON CONFLICT (usually "id")
        update_columns: Columns compared and updated on conflict; updated_at
            is always refreshed when any of them changed

    Example:
        >>> with engine.begin() as conn:
        ...     upsert_with_distinct_check(
        ...         conn=conn,
        ...         table=Property,
        ...         rows=[{"id": 1, "name": "Lakeside", ...}],
        ...         conflict_column="id",
        ...         update_columns=["name", "total_rooms"],
        ...     )
    """
    if not rows:
        return

    stmt = dialect_insert(conn, table).values(rows)

    set_dict = {col: getattr(stmt.excluded, col) for col in update_columns}
    set_dict["updated_at"] = stmt.excluded.updated_at

    distinct_check = None
    for col in update_columns:
        clause = getattr(table, col).is_distinct_from(getattr(stmt.excluded, col))
        distinct_check = clause if distinct_check is None else distinct_check | clause

    stmt = stmt.on_conflict_do_update(
        index_elements=[conflict_column],
        set_=set_dict,
        where=distinct_check,
    )

    conn.execute(stmt)
