from __future__ import annotations

import logging
import os
import sqlite3
from collections.abc import Mapping
from datetime import datetime, timezone

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .commands import register_commands
from .config import Config
from .db import close_db, get_db
from .errors import TailorShopError
from .extensions import cors, jwt
from .schema import init_db
from .views import register_routes

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(TailorShopError)
    def handle_tailor_shop_error(e: TailorShopError):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(sqlite3.Error)
    def handle_database_error(e: sqlite3.Error):
        app.logger.error("Database error: %s", e, exc_info=True)
        return jsonify({"error": "Database error"}), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"error": e.description}), e.code

    @jwt.unauthorized_loader
    def missing_token_callback(error: str):
        return jsonify({"error": "Access token required"}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error: str):
        return jsonify({"error": "Invalid token"}), 401

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header: dict, jwt_payload: dict):
        return jsonify({"error": "Token has expired"}), 401


def create_app(test_config: Mapping | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    app.config.from_prefixed_env()
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)
    os.makedirs(app.config["RECEIPT_FOLDER"], exist_ok=True)

    cors.init_app(
        app,
        origins=app.config["CORS_ORIGINS"],
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    jwt.init_app(app)

    app.teardown_appcontext(close_db)
    register_error_handlers(app)
    register_routes(app)
    register_commands(app)

    with app.app_context():
        init_db(
            get_db(),
            app.config["DEFAULT_TAILOR_USERNAME"],
            app.config["DEFAULT_TAILOR_PASSWORD"],
            app.config["SHOP_NAME"],
        )
    logger.info("Database ready at %s", app.config["DATABASE"])

    @app.route("/")
    def home():
        return {
            "message": "Tailor Shop API is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "status": "OK",
        }

    @app.route("/test")
    def connection_test():
        return {
            "message": "Backend connection test successful",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app
