from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request
from flask_jwt_extended import create_access_token
from werkzeug.security import check_password_hash

from ..db import get_db
from ..errors import AuthError, ValidationError

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api")


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or request.form
    username = str(data.get("username") or "").strip()
    password = str(data.get("password") or "")
    if not username or not password:
        raise ValidationError("Username and password are required")

    tailor = get_db().execute(
        "SELECT * FROM tailors WHERE username = ?", (username,)
    ).fetchone()
    if tailor is None or not check_password_hash(tailor["password"], password):
        logger.warning("Failed login for %r", username)
        raise AuthError("Invalid credentials")

    token = create_access_token(
        identity=str(tailor["id"]),
        additional_claims={"username": tailor["username"]},
    )
    return jsonify(
        token=token,
        tailor={
            "id": tailor["id"],
            "username": tailor["username"],
            "shop_name": tailor["shop_name"],
        },
    )
