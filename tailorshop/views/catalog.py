from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from ..catalog import catalog_payload

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")


@catalog_bp.get("/catalog")
@jwt_required()
def catalog():
    return jsonify(catalog_payload())
