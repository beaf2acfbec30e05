"""Order writer and reader.

Orders are written through two payload shapes: ``NewOrder`` for creation and
``OrderPatch`` for partial updates, where every field is either ``ABSENT`` or
set to a value. Both are validated before any statement touches the
database, and every write runs inside a single ``transaction()``.
"""
from __future__ import annotations

import json
import logging
import math
import sqlite3
import time
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import ClassVar

from .catalog import DEFAULT_STATUS, is_valid_status
from .db import (
    decode_garment_types,
    encode_garment_types,
    now_str,
    table_columns,
    transaction,
)
from .errors import NotFoundError, ValidationError
from .uploads import remove_design_image

logger = logging.getLogger(__name__)

UPDATED_MESSAGE = "Order updated successfully"


class _Absent:
    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


def _clean(value: object) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


def parse_customer_id(value: object) -> int:
    if isinstance(value, bool):
        raise ValidationError("Invalid customer_id format")
    try:
        customer_id = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("Invalid customer_id format") from None
    if customer_id <= 0:
        raise ValidationError("Invalid customer_id format")
    return customer_id


def parse_garment_types(value: object) -> list[str]:
    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except ValueError:
            raise ValidationError("Invalid garment_types format") from None
    if not isinstance(value, list):
        raise ValidationError("Invalid garment_types format")
    garment_types = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ValidationError("Invalid garment_types format")
        garment_types.append(item.strip())
    return garment_types


def parse_amount(value: object, name: str) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{name} is required")
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {name}")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {name}") from None
    if not math.isfinite(amount):
        raise ValidationError(f"Invalid {name}")
    return amount


def parse_status(value: object) -> str:
    status = _clean(value)
    if not status or not is_valid_status(status):
        raise ValidationError(f"Invalid status: {value!r}")
    return status


def _measurement_value(raw: object) -> float | str:
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    text = str(raw).strip()
    try:
        return float(text)
    except ValueError:
        return text


def parse_measurements(value: object) -> list[dict]:
    """Normalize a measurements payload (list or JSON text) into rows.

    Entries may key the name as ``measurement_type`` or ``type``. Entries
    without a value are skipped since the column is NOT NULL.
    """
    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except ValueError:
            raise ValidationError("Invalid measurements format") from None
    if not isinstance(value, list):
        raise ValidationError("Invalid measurements format")

    measurements = []
    for entry in value:
        if not isinstance(entry, Mapping):
            raise ValidationError("Invalid measurements format")
        measurement_type = _clean(entry.get("measurement_type", entry.get("type")))
        if not measurement_type:
            raise ValidationError("Each measurement needs a measurement_type")
        raw = entry.get("value")
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            continue
        measurements.append(
            {
                "measurement_type": measurement_type,
                "value": _measurement_value(raw),
                "unit": _clean(entry.get("unit")) or "inch",
            }
        )
    return measurements


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass
class NewOrder:
    customer_id: int
    garment_types: list[str]
    total_amount: float
    advance_amount: float
    delivery_date: str | None = None
    notes: str | None = None
    status: str = DEFAULT_STATUS
    design_image: str | None = None
    measurements: list[dict] = field(default_factory=list)

    @property
    def balance_amount(self) -> float:
        return self.total_amount - self.advance_amount

    @classmethod
    def from_payload(cls, data: Mapping) -> NewOrder:
        advance = data.get("advance_amount")
        status = data.get("status")
        measurements = data.get("measurements")
        return cls(
            customer_id=parse_customer_id(data.get("customer_id")),
            garment_types=parse_garment_types(data.get("garment_types")),
            total_amount=parse_amount(data.get("total_amount"), "total_amount"),
            advance_amount=0.0 if _is_blank(advance) else parse_amount(advance, "advance_amount"),
            delivery_date=_clean(data.get("delivery_date")),
            notes=_clean(data.get("notes")),
            status=DEFAULT_STATUS if _is_blank(status) else parse_status(status),
            measurements=[] if _is_blank(measurements) else parse_measurements(measurements),
        )


@dataclass
class OrderPatch:
    customer_id: int | _Absent = ABSENT
    garment_types: list[str] | _Absent = ABSENT
    delivery_date: str | None | _Absent = ABSENT
    notes: str | None | _Absent = ABSENT
    status: str | _Absent = ABSENT
    total_amount: float | _Absent = ABSENT
    advance_amount: float | _Absent = ABSENT
    design_image: str | _Absent = ABSENT
    measurements: list[dict] | _Absent = ABSENT

    # Columns written by a plain assignment; balance_amount is derived.
    COLUMNS: ClassVar[tuple[str, ...]] = (
        "customer_id",
        "garment_types",
        "delivery_date",
        "notes",
        "status",
        "total_amount",
        "advance_amount",
        "design_image",
    )

    @classmethod
    def from_payload(cls, data: Mapping) -> OrderPatch:
        patch = cls()
        if "customer_id" in data:
            patch.customer_id = parse_customer_id(data["customer_id"])
        if "garment_types" in data:
            patch.garment_types = parse_garment_types(data["garment_types"])
        if "delivery_date" in data:
            patch.delivery_date = _clean(data["delivery_date"])
        if "notes" in data:
            patch.notes = _clean(data["notes"])
        if "status" in data:
            patch.status = parse_status(data["status"])
        if "total_amount" in data:
            patch.total_amount = parse_amount(data["total_amount"], "total_amount")
        if "advance_amount" in data:
            patch.advance_amount = parse_amount(data["advance_amount"], "advance_amount")
        if not _is_blank(data.get("measurements")):
            patch.measurements = parse_measurements(data["measurements"])
        return patch

    def is_full(self) -> bool:
        return all(
            getattr(self, name) is not ABSENT
            for name in ("customer_id", "garment_types", "total_amount", "advance_amount")
        )

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is ABSENT for f in fields(self))

    def assignments(self) -> list[tuple[str, object]]:
        pairs = []
        for column in self.COLUMNS:
            value = getattr(self, column)
            if value is ABSENT:
                continue
            if column == "garment_types":
                value = encode_garment_types(value)
            pairs.append((column, value))
        return pairs

    def balance(self, stored: Mapping) -> float | _Absent:
        """Recompute balance from supplied amounts, filling gaps from storage."""
        if self.total_amount is ABSENT and self.advance_amount is ABSENT:
            return ABSENT
        total = self.total_amount
        if total is ABSENT:
            total = stored["total_amount"] or 0
        advance = self.advance_amount
        if advance is ABSENT:
            advance = stored["advance_amount"] or 0
        return total - advance


def serialize_order(row: sqlite3.Row | Mapping) -> dict:
    order = dict(row)
    order.pop("garment_type", None)
    order["garment_types"] = decode_garment_types(row)
    return order


def fetch_measurements(conn: sqlite3.Connection, order_id: int) -> list[dict]:
    rows = conn.execute(
        "SELECT * FROM measurements WHERE order_id = ? ORDER BY id ASC", (order_id,)
    ).fetchall()
    return [dict(row) for row in rows]


def _insert_measurements(conn: sqlite3.Connection, order_id: int, measurements: list[dict]) -> None:
    conn.executemany(
        "INSERT INTO measurements (order_id, measurement_type, value, unit) VALUES (?, ?, ?, ?)",
        [
            (order_id, item["measurement_type"], item["value"], item["unit"])
            for item in measurements
        ],
    )


def _replace_measurements(conn: sqlite3.Connection, order_id: int, measurements: list[dict]) -> None:
    conn.execute("DELETE FROM measurements WHERE order_id = ?", (order_id,))
    _insert_measurements(conn, order_id, measurements)


def _allocate_order_number(conn: sqlite3.Connection) -> str:
    stamp = int(time.time() * 1000)
    while True:
        order_number = f"ORD{stamp}"
        taken = conn.execute(
            "SELECT 1 FROM orders WHERE order_number = ?", (order_number,)
        ).fetchone()
        if taken is None:
            return order_number
        stamp += 1


def _stored_order(conn: sqlite3.Connection, order_id: int) -> dict:
    row = conn.execute("SELECT * FROM orders WHERE id = ?", (order_id,)).fetchone()
    order = serialize_order(row)
    order["measurements"] = fetch_measurements(conn, order_id)
    return order


def create_order(conn: sqlite3.Connection, new_order: NewOrder) -> dict:
    with transaction(conn):
        order_number = _allocate_order_number(conn)
        cur = conn.execute(
            """
            INSERT INTO orders (
                order_number, customer_id, garment_types, delivery_date, status,
                design_image, notes, total_amount, advance_amount, balance_amount,
                created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                order_number,
                new_order.customer_id,
                encode_garment_types(new_order.garment_types),
                new_order.delivery_date,
                new_order.status,
                new_order.design_image,
                new_order.notes,
                new_order.total_amount,
                new_order.advance_amount,
                new_order.balance_amount,
                now_str(),
            ),
        )
        order_id = cur.lastrowid
        _insert_measurements(conn, order_id, new_order.measurements)

    logger.info(
        "Created order %s (%s) for customer %s with %d measurements",
        order_id,
        order_number,
        new_order.customer_id,
        len(new_order.measurements),
    )
    return _stored_order(conn, order_id)


def update_order(conn: sqlite3.Connection, order_id: int, patch: OrderPatch) -> dict:
    with transaction(conn):
        stored = conn.execute(
            "SELECT total_amount, advance_amount FROM orders WHERE id = ?", (order_id,)
        ).fetchone()
        if stored is None:
            raise NotFoundError("Order not found")

        assignments = patch.assignments()
        balance = patch.balance(stored)
        if balance is not ABSENT:
            assignments.append(("balance_amount", balance))
        if assignments:
            columns = ", ".join(f"{column} = ?" for column, _ in assignments)
            conn.execute(
                f"UPDATE orders SET {columns} WHERE id = ?",
                (*(value for _, value in assignments), order_id),
            )
        if patch.measurements is not ABSENT:
            _replace_measurements(conn, order_id, patch.measurements)

    logger.info("Updated order %s fields %s", order_id, [column for column, _ in assignments])
    if patch.is_full():
        order = _stored_order(conn, order_id)
        order["message"] = UPDATED_MESSAGE
        return order
    return {"id": order_id, "message": UPDATED_MESSAGE}


def replace_measurements(conn: sqlite3.Connection, order_id: int, value: object) -> list[dict]:
    measurements = parse_measurements(value)
    with transaction(conn):
        if conn.execute("SELECT 1 FROM orders WHERE id = ?", (order_id,)).fetchone() is None:
            raise NotFoundError("Order not found")
        _replace_measurements(conn, order_id, measurements)
    logger.info("Replaced measurements of order %s (%d rows)", order_id, len(measurements))
    return fetch_measurements(conn, order_id)


def get_order(conn: sqlite3.Connection, order_id: int) -> dict:
    row = conn.execute(
        """
        SELECT o.*, c.name AS customer_name, c.contact_number, c.customer_number, c.address
        FROM orders o
        JOIN customers c ON o.customer_id = c.id
        WHERE o.id = ?
        """,
        (order_id,),
    ).fetchone()
    if row is None:
        orphan = conn.execute(
            "SELECT customer_id FROM orders WHERE id = ?", (order_id,)
        ).fetchone()
        if orphan is not None:
            logger.warning(
                "Order %s exists but customer %s does not", order_id, orphan["customer_id"]
            )
        raise NotFoundError("Order not found")

    order = serialize_order(row)
    order["measurements"] = fetch_measurements(conn, order_id)
    return order


def list_orders(
    conn: sqlite3.Connection,
    search: str | None = None,
    status: str | None = None,
    customer_id: int | None = None,
) -> list[dict]:
    query = """
        SELECT o.*, c.name AS customer_name, c.contact_number, c.customer_number
        FROM orders o
        JOIN customers c ON o.customer_id = c.id
    """
    clauses = []
    params: list = []

    search = (search or "").strip()
    if search:
        like = f"%{search}%"
        clauses.append(
            "(o.order_number LIKE ? OR c.name LIKE ? OR c.contact_number LIKE ? "
            "OR c.customer_number LIKE ?)"
        )
        params.extend([like] * 4)
    if status:
        clauses.append("o.status = ?")
        params.append(status)
    if customer_id is not None:
        clauses.append("o.customer_id = ?")
        params.append(customer_id)

    if clauses:
        query += " WHERE " + " AND ".join(clauses)

    if "created_at" in table_columns(conn, "orders"):
        query += " ORDER BY o.created_at DESC, o.id DESC"
    else:
        query += " ORDER BY o.order_date DESC, o.id DESC"

    return [serialize_order(row) for row in conn.execute(query, params).fetchall()]


def delete_order(conn: sqlite3.Connection, order_id: int, upload_folder: str) -> None:
    with transaction(conn):
        row = conn.execute(
            "SELECT design_image FROM orders WHERE id = ?", (order_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError("Order not found")
        conn.execute("DELETE FROM measurements WHERE order_id = ?", (order_id,))
        conn.execute("DELETE FROM orders WHERE id = ?", (order_id,))

    if row["design_image"]:
        remove_design_image(upload_folder, row["design_image"])
    logger.info("Deleted order %s", order_id)
