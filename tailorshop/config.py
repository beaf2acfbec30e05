from __future__ import annotations

import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

APP_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class Config:
    DATABASE = os.path.join(APP_DIR, "tailor_shop.db")
    DB_TIMEOUT = 5.0

    UPLOAD_FOLDER = os.path.join(APP_DIR, "uploads")
    RECEIPT_FOLDER = os.path.join(APP_DIR, "receipts")
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024

    SHOP_NAME = "Default Tailor Shop"
    DEFAULT_TAILOR_USERNAME = "admin"
    DEFAULT_TAILOR_PASSWORD = "admin123"

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "tailor-shop-development-secret-change-me")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)
    JWT_TOKEN_LOCATION = ["headers"]

    CORS_ORIGINS = "*"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
