from __future__ import annotations

import logging
import sqlite3
from collections.abc import Mapping

from .db import now_str, transaction
from .errors import NotFoundError, ReferentialError, StorageError, ValidationError

logger = logging.getLogger(__name__)

MAX_ALLOCATION_ATTEMPTS = 3
EDITABLE_FIELDS = ("name", "contact_number", "address")


def _clean(value: object) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


def next_customer_number(conn: sqlite3.Connection) -> str:
    row = conn.execute(
        "SELECT MAX(CAST(customer_number AS INTEGER)) AS max_number FROM customers"
    ).fetchone()
    max_number = row["max_number"]
    if max_number is not None:
        return str(int(max_number) + 1)
    return "1"


def get_customer(conn: sqlite3.Connection, customer_id: int) -> dict:
    row = conn.execute("SELECT * FROM customers WHERE id = ?", (customer_id,)).fetchone()
    if row is None:
        raise NotFoundError("Customer not found")
    return dict(row)


def list_customers(conn: sqlite3.Connection, search: str | None = None) -> list[dict]:
    search = (search or "").strip()
    if search:
        like = f"%{search}%"
        rows = conn.execute(
            """
            SELECT * FROM customers
            WHERE customer_number LIKE ? OR name LIKE ? OR contact_number LIKE ?
            ORDER BY name ASC
            """,
            (like, like, like),
        ).fetchall()
    else:
        rows = conn.execute("SELECT * FROM customers ORDER BY name ASC").fetchall()
    return [dict(row) for row in rows]


def create_customer(conn: sqlite3.Connection, data: Mapping) -> dict:
    name = _clean(data.get("name"))
    if not name:
        raise ValidationError("Customer name is required")
    contact_number = _clean(data.get("contact_number"))
    address = _clean(data.get("address"))

    for attempt in range(1, MAX_ALLOCATION_ATTEMPTS + 1):
        try:
            with transaction(conn):
                customer_number = next_customer_number(conn)
                cur = conn.execute(
                    """
                    INSERT INTO customers (customer_number, name, contact_number, address, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (customer_number, name, contact_number, address, now_str()),
                )
                customer_id = cur.lastrowid
        except sqlite3.IntegrityError as exc:
            if "customer_number" not in str(exc):
                raise
            logger.warning(
                "Customer number %s taken (attempt %d), allocating again",
                customer_number,
                attempt,
            )
            continue
        logger.info("Created customer %s with number %s", customer_id, customer_number)
        return get_customer(conn, customer_id)

    raise StorageError("Could not allocate a customer number")


def update_customer(conn: sqlite3.Connection, customer_id: int, data: Mapping) -> dict:
    assignments = []
    values: list = []
    for field in EDITABLE_FIELDS:
        if field not in data:
            continue
        value = _clean(data.get(field))
        if field == "name" and not value:
            raise ValidationError("Customer name is required")
        assignments.append(f"{field} = ?")
        values.append(value)

    with transaction(conn):
        if conn.execute("SELECT 1 FROM customers WHERE id = ?", (customer_id,)).fetchone() is None:
            raise NotFoundError("Customer not found")
        if assignments:
            conn.execute(
                f"UPDATE customers SET {', '.join(assignments)} WHERE id = ?",
                (*values, customer_id),
            )

    logger.info("Updated customer %s", customer_id)
    return get_customer(conn, customer_id)


def delete_customer(conn: sqlite3.Connection, customer_id: int) -> None:
    with transaction(conn):
        if conn.execute("SELECT 1 FROM customers WHERE id = ?", (customer_id,)).fetchone() is None:
            raise NotFoundError("Customer not found")
        order_count = conn.execute(
            "SELECT COUNT(*) FROM orders WHERE customer_id = ?", (customer_id,)
        ).fetchone()[0]
        if order_count > 0:
            raise ReferentialError(
                "Cannot delete customer with existing orders. Please delete all orders first."
            )
        conn.execute("DELETE FROM customers WHERE id = ?", (customer_id,))
    logger.info("Deleted customer %s", customer_id)
