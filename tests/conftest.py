from __future__ import annotations

import pytest

from tailorshop import create_app
from tailorshop.db import connect


@pytest.fixture
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "DATABASE": str(tmp_path / "tailor_shop.db"),
            "UPLOAD_FOLDER": str(tmp_path / "uploads"),
            "RECEIPT_FOLDER": str(tmp_path / "receipts"),
            "JWT_SECRET_KEY": "test-secret-key-that-is-long-enough-for-hs256",
            "SHOP_NAME": "Test Tailors",
        }
    )
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(client):
    response = client.post("/api/login", json={"username": "admin", "password": "admin123"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.get_json()['token']}"}


@pytest.fixture
def conn(app):
    conn = connect(app.config["DATABASE"])
    yield conn
    conn.close()


@pytest.fixture
def make_customer(client, auth_headers):
    def _make_customer(name: str = "Asha Verma", **fields) -> dict:
        response = client.post(
            "/api/customers", json={"name": name, **fields}, headers=auth_headers
        )
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    return _make_customer


@pytest.fixture
def make_order(client, auth_headers, make_customer):
    def _make_order(customer_id: int | None = None, **fields) -> dict:
        if customer_id is None:
            customer_id = make_customer()["id"]
        payload = {
            "customer_id": customer_id,
            "garment_types": ["kurti"],
            "total_amount": 1000,
            "advance_amount": 300,
            **fields,
        }
        response = client.post("/api/orders", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    return _make_order
