from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request, send_file, send_from_directory
from flask_jwt_extended import jwt_required

from .. import orders
from ..db import get_db
from ..errors import ValidationError
from ..receipts import generate_order_receipt_80mm
from ..uploads import remove_design_image, save_design_image

order_bp = Blueprint("orders", __name__, url_prefix="/api/orders")
uploads_bp = Blueprint("uploads", __name__)


def _order_payload() -> dict:
    """Read order fields from a JSON body or a (multipart) form."""
    if request.is_json:
        data = request.get_json()
        if not isinstance(data, dict):
            raise ValidationError("Expected a JSON object")
        return data
    payload = request.form.to_dict()
    garment_types = request.form.getlist("garment_types")
    # A single field may still carry a JSON-encoded list.
    if garment_types and (len(garment_types) > 1 or not garment_types[0].lstrip().startswith("[")):
        payload["garment_types"] = garment_types
    return payload


def _save_upload() -> str | None:
    return save_design_image(
        request.files.get("design_image"), current_app.config["UPLOAD_FOLDER"]
    )


@order_bp.post("")
@jwt_required()
def create_order():
    new_order = orders.NewOrder.from_payload(_order_payload())
    new_order.design_image = _save_upload()
    try:
        order = orders.create_order(get_db(), new_order)
    except Exception:
        remove_design_image(current_app.config["UPLOAD_FOLDER"], new_order.design_image)
        raise
    return jsonify(order), 201


@order_bp.get("")
@jwt_required()
def list_orders():
    return jsonify(
        orders.list_orders(
            get_db(),
            search=request.args.get("search"),
            status=request.args.get("status") or None,
        )
    )


@order_bp.get("/<int:order_id>")
@jwt_required()
def get_order(order_id: int):
    return jsonify(orders.get_order(get_db(), order_id))


@order_bp.put("/<int:order_id>")
@jwt_required()
def update_order(order_id: int):
    patch = orders.OrderPatch.from_payload(_order_payload())
    filename = _save_upload()
    if filename:
        patch.design_image = filename
    try:
        result = orders.update_order(get_db(), order_id, patch)
    except Exception:
        remove_design_image(current_app.config["UPLOAD_FOLDER"], filename)
        raise
    return jsonify(result)


@order_bp.delete("/<int:order_id>")
@jwt_required()
def delete_order(order_id: int):
    orders.delete_order(get_db(), order_id, current_app.config["UPLOAD_FOLDER"])
    return jsonify(message="Order deleted successfully")


@order_bp.post("/<int:order_id>/measurements")
@jwt_required()
def save_measurements(order_id: int):
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict) or "measurements" not in data:
        raise ValidationError("measurements is required")
    measurements = orders.replace_measurements(get_db(), order_id, data["measurements"])
    return jsonify(message="Measurements saved successfully", measurements=measurements)


@order_bp.get("/<int:order_id>/receipt")
@jwt_required()
def order_receipt(order_id: int):
    order = orders.get_order(get_db(), order_id)
    path = generate_order_receipt_80mm(
        order,
        current_app.config["RECEIPT_FOLDER"],
        current_app.config["SHOP_NAME"],
    )
    return send_file(path, mimetype="application/pdf", download_name=f"{order['order_number']}.pdf")


@uploads_bp.get("/uploads/<path:filename>")
def uploaded_file(filename: str):
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)
