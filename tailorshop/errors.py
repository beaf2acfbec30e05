from __future__ import annotations


class TailorShopError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(TailorShopError):
    status_code = 400


class AuthError(TailorShopError):
    status_code = 401


class NotFoundError(TailorShopError):
    status_code = 404


class ReferentialError(TailorShopError):
    """Raised when a delete would leave rows pointing at a missing parent."""

    status_code = 409


class StorageError(TailorShopError):
    status_code = 500


class MigrationError(TailorShopError):
    """Schema setup failed and was rolled back; the app must not start."""
