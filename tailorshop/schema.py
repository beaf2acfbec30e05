from __future__ import annotations

import logging
import sqlite3

from werkzeug.security import generate_password_hash

from .db import now_str, transaction
from .errors import MigrationError
from .migrations import migrate_orders, reconcile_customer_ids

logger = logging.getLogger(__name__)


def create_tables(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS tailors (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT UNIQUE NOT NULL,
            password TEXT NOT NULL,
            shop_name TEXT,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS customers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            customer_number TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            contact_number TEXT,
            address TEXT,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
        """
    )


def create_measurements_table(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS measurements (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            order_id INTEGER,
            measurement_type TEXT NOT NULL,
            value REAL NOT NULL,
            unit TEXT DEFAULT 'inch',
            FOREIGN KEY (order_id) REFERENCES orders (id)
        )
        """
    )


def seed_default_tailor(
    conn: sqlite3.Connection, username: str, password: str, shop_name: str
) -> bool:
    row = conn.execute("SELECT id FROM tailors WHERE username = ?", (username,)).fetchone()
    if row:
        return False
    conn.execute(
        "INSERT INTO tailors (username, password, shop_name, created_at) VALUES (?, ?, ?, ?)",
        (username, generate_password_hash(password), shop_name, now_str()),
    )
    logger.info("Seeded default tailor account %r", username)
    return True


def init_db(
    conn: sqlite3.Connection,
    username: str = "admin",
    password: str = "admin123",
    shop_name: str = "Default Tailor Shop",
) -> None:
    """Create missing tables, migrate ``orders`` and repair customer links.

    Everything runs in one transaction; on failure nothing is changed and
    ``MigrationError`` is raised so the process refuses to start.
    """
    try:
        with transaction(conn):
            create_tables(conn)
            migrate_orders(conn)
            create_measurements_table(conn)
            reconcile_customer_ids(conn)
            seed_default_tailor(conn, username, password, shop_name)
    except sqlite3.Error as exc:
        logger.exception("Schema setup failed, changes rolled back")
        raise MigrationError(f"Schema migration failed: {exc}") from exc
