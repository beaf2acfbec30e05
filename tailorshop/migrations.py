from __future__ import annotations

import logging
import sqlite3

from .db import now_str, table_columns, table_exists

logger = logging.getLogger(__name__)

ORDERS_TABLE_SQL = """
    CREATE TABLE {name} (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        order_number TEXT UNIQUE NOT NULL,
        customer_id INTEGER,
        garment_types TEXT NOT NULL,
        order_date DATE DEFAULT CURRENT_DATE,
        delivery_date DATE,
        status TEXT DEFAULT 'pending',
        design_image TEXT,
        notes TEXT,
        total_amount REAL,
        advance_amount REAL,
        balance_amount REAL,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (customer_id) REFERENCES customers (id)
    )
"""

ORDER_COLUMNS = (
    "id",
    "order_number",
    "customer_id",
    "garment_types",
    "order_date",
    "delivery_date",
    "status",
    "design_image",
    "notes",
    "total_amount",
    "advance_amount",
    "balance_amount",
    "created_at",
)


def needs_migration(columns: list[str]) -> bool:
    return "created_at" not in columns or "garment_type" in columns


def _garment_types_expr(columns: list[str]) -> str:
    has_legacy = "garment_type" in columns
    has_current = "garment_types" in columns
    if has_legacy and has_current:
        return "COALESCE(garment_types, garment_json(garment_type))"
    if has_legacy:
        return "garment_json(garment_type)"
    if has_current:
        return "garment_types"
    return "garment_json(NULL)"


def _copy_orders(conn: sqlite3.Connection, columns: list[str]) -> int:
    copied = [
        col for col in ORDER_COLUMNS
        if col in columns and col not in ("garment_types", "created_at")
    ]
    insert_columns = copied + ["garment_types", "created_at"]
    select_exprs = copied + [_garment_types_expr(columns), "?"]
    cur = conn.execute(
        f"""
        INSERT INTO orders_new ({", ".join(insert_columns)})
        SELECT {", ".join(select_exprs)}
        FROM orders
        """,
        (now_str(),),
    )
    return cur.rowcount


def migrate_orders(conn: sqlite3.Connection) -> bool:
    """Rewrite the ``orders`` table into the current shape.

    Returns True when a rewrite happened. Rows keep their ids; ``created_at``
    is stamped with the migration time because older shapes never stored it.
    Must run inside a transaction so a failed step leaves the old table.
    """
    columns = table_columns(conn, "orders")
    logger.info("orders columns: %s", columns)

    if not needs_migration(columns):
        logger.info("Orders table schema is current")
        return False

    logger.info("Migrating orders table schema")
    conn.execute("DROP TABLE IF EXISTS orders_new")
    conn.execute(ORDERS_TABLE_SQL.format(name="orders_new"))

    if table_exists(conn, "orders"):
        copied = _copy_orders(conn, columns)
        logger.info("Copied %d orders into the new table", copied)
        conn.execute("DROP TABLE orders")
    else:
        logger.info("No existing orders table, installing a fresh one")

    conn.execute("ALTER TABLE orders_new RENAME TO orders")
    logger.info("Orders table migrated")
    return True


def reconcile_customer_ids(conn: sqlite3.Connection) -> int:
    """Repoint orders whose customer_id holds a customer number.

    Older builds stored the customer's number instead of its primary key.
    Orders that match neither are left untouched.
    """
    dangling = conn.execute(
        """
        SELECT o.id, o.customer_id
        FROM orders o
        LEFT JOIN customers c ON o.customer_id = c.id
        WHERE c.id IS NULL
        """
    ).fetchall()
    if not dangling:
        return 0

    logger.info("Found %d orders with unresolved customer_id", len(dangling))
    fixed = 0
    for order in dangling:
        if order["customer_id"] is None:
            logger.info("Order %s has no customer_id", order["id"])
            continue
        customer = conn.execute(
            "SELECT id FROM customers WHERE customer_number = ?",
            (str(order["customer_id"]),),
        ).fetchone()
        if customer is None:
            logger.info(
                "No customer matches order %s customer_id %s",
                order["id"],
                order["customer_id"],
            )
            continue
        conn.execute(
            "UPDATE orders SET customer_id = ? WHERE id = ?",
            (customer["id"], order["id"]),
        )
        logger.info(
            "Fixed order %s customer_id from %s to %s",
            order["id"],
            order["customer_id"],
            customer["id"],
        )
        fixed += 1
    return fixed
