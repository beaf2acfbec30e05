from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from .. import customers, orders
from ..db import get_db
from ..errors import ValidationError

customer_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return request.form.to_dict()
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object")
    return data


@customer_bp.post("")
@jwt_required()
def create_customer():
    customer = customers.create_customer(get_db(), _json_body())
    return jsonify(customer), 201


@customer_bp.get("")
@jwt_required()
def list_customers():
    return jsonify(customers.list_customers(get_db(), request.args.get("search")))


@customer_bp.get("/<int:customer_id>")
@jwt_required()
def get_customer(customer_id: int):
    return jsonify(customers.get_customer(get_db(), customer_id))


@customer_bp.put("/<int:customer_id>")
@jwt_required()
def update_customer(customer_id: int):
    customer = customers.update_customer(get_db(), customer_id, _json_body())
    customer["message"] = "Customer updated successfully"
    return jsonify(customer)


@customer_bp.delete("/<int:customer_id>")
@jwt_required()
def delete_customer(customer_id: int):
    customers.delete_customer(get_db(), customer_id)
    return jsonify(message="Customer deleted successfully")


@customer_bp.get("/<int:customer_id>/orders")
@jwt_required()
def customer_orders(customer_id: int):
    conn = get_db()
    customers.get_customer(conn, customer_id)
    return jsonify(orders.list_orders(conn, customer_id=customer_id))
