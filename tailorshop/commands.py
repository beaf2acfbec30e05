from __future__ import annotations

import logging
import os
import sqlite3

import click
from flask import current_app
from flask.cli import with_appcontext

from .db import get_db, transaction
from .schema import init_db
from .uploads import remove_design_image

logger = logging.getLogger(__name__)


def clear_orders(conn: sqlite3.Connection, upload_folder: str) -> int:
    with transaction(conn):
        images = [
            row["design_image"]
            for row in conn.execute(
                "SELECT design_image FROM orders WHERE design_image IS NOT NULL"
            ).fetchall()
        ]
        conn.execute("DELETE FROM measurements")
        count = conn.execute("DELETE FROM orders").rowcount
    for filename in images:
        remove_design_image(upload_folder, filename)
    logger.info("Cleared %d orders", count)
    return count


def clear_customers(conn: sqlite3.Connection) -> int:
    """Delete customers that own no orders; referenced ones are kept."""
    with transaction(conn):
        count = conn.execute(
            """
            DELETE FROM customers
            WHERE id NOT IN (
                SELECT customer_id FROM orders WHERE customer_id IS NOT NULL
            )
            """
        ).rowcount
    logger.info("Cleared %d customers", count)
    return count


def clear_uploads(upload_folder: str) -> int:
    if not os.path.isdir(upload_folder):
        return 0
    removed = 0
    for filename in os.listdir(upload_folder):
        if remove_design_image(upload_folder, filename):
            removed += 1
    return removed


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create missing tables and migrate the orders table."""
    init_db(
        get_db(),
        current_app.config["DEFAULT_TAILOR_USERNAME"],
        current_app.config["DEFAULT_TAILOR_PASSWORD"],
        current_app.config["SHOP_NAME"],
    )
    click.echo("Database is up to date.")


@click.command("clear-orders")
@with_appcontext
def clear_orders_command():
    """Delete every order, its measurements and its design image."""
    count = clear_orders(get_db(), current_app.config["UPLOAD_FOLDER"])
    click.echo(f"Deleted {count} orders.")


@click.command("clear-customers")
@with_appcontext
def clear_customers_command():
    """Delete customers that have no orders."""
    count = clear_customers(get_db())
    click.echo(f"Deleted {count} customers.")


@click.command("clear-data")
@with_appcontext
def clear_data_command():
    """Delete all orders, customers and uploaded images."""
    conn = get_db()
    folder = current_app.config["UPLOAD_FOLDER"]
    orders = clear_orders(conn, folder)
    customers = clear_customers(conn)
    images = clear_uploads(folder)
    click.echo(f"Deleted {orders} orders, {customers} customers and {images} images.")


def register_commands(app) -> None:
    app.cli.add_command(init_db_command)
    app.cli.add_command(clear_orders_command)
    app.cli.add_command(clear_customers_command)
    app.cli.add_command(clear_data_command)
