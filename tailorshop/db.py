from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from flask import current_app, g

logger = logging.getLogger(__name__)


def connect(path: str, timeout: float = 5.0) -> sqlite3.Connection:
    # Autocommit mode: every multi-statement write goes through transaction().
    conn = sqlite3.connect(path, timeout=timeout, isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.create_function("garment_json", 1, legacy_garment_json, deterministic=True)
    return conn


def get_db() -> sqlite3.Connection:
    if "db" not in g:
        g.db = connect(current_app.config["DATABASE"], current_app.config["DB_TIMEOUT"])
    return g.db


def close_db(exc: BaseException | None = None) -> None:
    conn = g.pop("db", None)
    if conn is not None:
        conn.close()


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run the enclosed statements as one write-locked unit of work.

    ``BEGIN IMMEDIATE`` takes SQLite's reserved lock up front, so a
    read-then-write sequence inside the block cannot interleave with
    another writer.
    """
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise
    else:
        conn.execute("COMMIT")


def now_str() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def table_columns(conn: sqlite3.Connection, table: str) -> list[str]:
    return [row[1] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()]


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
        (table,),
    ).fetchone()
    return row is not None


def encode_garment_types(garment_types: list[str]) -> str:
    return json.dumps(list(garment_types))


def legacy_garment_json(value: object) -> str:
    if value is None or value == "":
        return encode_garment_types([])
    return encode_garment_types([str(value)])


def decode_garment_types(row: sqlite3.Row | dict) -> list:
    """Read garment types from any stored shape without raising.

    Handles the legacy single-value ``garment_type`` column, the JSON text
    ``garment_types`` column, and malformed JSON (kept as one raw entry).
    """
    keys = row.keys()
    raw = row["garment_types"] if "garment_types" in keys else None
    legacy = row["garment_type"] if "garment_type" in keys else None

    if legacy and not raw:
        return [legacy]
    if not raw:
        return []
    if not isinstance(raw, str):
        return [raw]
    try:
        value = json.loads(raw)
    except ValueError:
        return [raw]
    if isinstance(value, list):
        return value
    return [value]
