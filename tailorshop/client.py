"""HTTP client for the tailor shop API.

The auth token lives on an ``ApiSession`` created per login, never in a
module-level variable::

    session = ApiSession("http://localhost:5000")
    session.login("admin", "admin123")
    client = TailorShopClient(session)
    client.list_orders(search="kurti")
    session.logout()
"""
from __future__ import annotations

import json
import mimetypes
import os
from typing import Any

import requests


class ApiError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class ApiSession:
    def __init__(self, base_url: str, http: Any = None, timeout: float = 30) -> None:
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()
        self.timeout = timeout
        self.token: str | None = None
        self.tailor: dict | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def login(self, username: str, password: str) -> dict:
        data = self.request("POST", "/api/login", json={"username": username, "password": password})
        self.token = data["token"]
        self.tailor = data.get("tailor")
        return data

    def logout(self) -> None:
        self.token = None
        self.tailor = None

    def request(self, method: str, path: str, **kwargs) -> Any:
        headers = dict(kwargs.pop("headers", None) or {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = self.http.request(
            method,
            f"{self.base_url}{path}",
            headers=headers,
            timeout=self.timeout,
            **kwargs,
        )
        content_type = response.headers.get("Content-Type", "")
        if response.status_code >= 400:
            message = response.text
            if content_type.startswith("application/json"):
                message = response.json().get("error", message)
            raise ApiError(response.status_code, message)
        if content_type.startswith("application/json"):
            return response.json()
        return response.content


def _order_form(order_data: dict) -> dict:
    form = {}
    for key, value in order_data.items():
        if value is None:
            continue
        if key in ("measurements", "garment_types"):
            form[key] = json.dumps(value)
        else:
            form[key] = str(value)
    return form


class TailorShopClient:
    def __init__(self, session: ApiSession) -> None:
        self.session = session

    # Catalog
    def catalog(self) -> dict:
        return self.session.request("GET", "/api/catalog")

    # Customers
    def list_customers(self, search: str = "") -> list[dict]:
        return self.session.request("GET", "/api/customers", params={"search": search})

    def get_customer(self, customer_id: int) -> dict:
        return self.session.request("GET", f"/api/customers/{customer_id}")

    def add_customer(self, customer_data: dict) -> dict:
        return self.session.request("POST", "/api/customers", json=customer_data)

    def update_customer(self, customer_id: int, customer_data: dict) -> dict:
        return self.session.request("PUT", f"/api/customers/{customer_id}", json=customer_data)

    def delete_customer(self, customer_id: int) -> dict:
        return self.session.request("DELETE", f"/api/customers/{customer_id}")

    def customer_orders(self, customer_id: int) -> list[dict]:
        return self.session.request("GET", f"/api/customers/{customer_id}/orders")

    # Orders
    def list_orders(self, search: str = "", status: str | None = None) -> list[dict]:
        params = {"search": search}
        if status:
            params["status"] = status
        return self.session.request("GET", "/api/orders", params=params)

    def get_order(self, order_id: int) -> dict:
        return self.session.request("GET", f"/api/orders/{order_id}")

    def _send_order(self, method: str, path: str, order_data: dict, image_path: str | None) -> dict:
        form = _order_form(order_data)
        if not image_path:
            return self.session.request(method, path, data=form)
        mime_type = mimetypes.guess_type(image_path)[0] or "image/jpeg"
        with open(image_path, "rb") as fh:
            files = {"design_image": (os.path.basename(image_path), fh, mime_type)}
            return self.session.request(method, path, data=form, files=files)

    def create_order(self, order_data: dict, image_path: str | None = None) -> dict:
        return self._send_order("POST", "/api/orders", order_data, image_path)

    def update_order(self, order_id: int, order_data: dict, image_path: str | None = None) -> dict:
        return self._send_order("PUT", f"/api/orders/{order_id}", order_data, image_path)

    def delete_order(self, order_id: int) -> dict:
        return self.session.request("DELETE", f"/api/orders/{order_id}")

    def save_measurements(self, order_id: int, measurements: list[dict]) -> dict:
        return self.session.request(
            "POST", f"/api/orders/{order_id}/measurements", json={"measurements": measurements}
        )

    def order_receipt(self, order_id: int) -> bytes:
        return self.session.request("GET", f"/api/orders/{order_id}/receipt")
