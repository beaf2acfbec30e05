from __future__ import annotations

import io
import json
import os
import sqlite3

import pytest


def _measurements(client, auth_headers, order_id):
    return client.get(f"/api/orders/{order_id}", headers=auth_headers).get_json()["measurements"]


def test_create_order_computes_balance(client, auth_headers, make_customer):
    for name in ("Asha", "Bela", "Chitra"):
        make_customer(name)

    response = client.post(
        "/api/orders",
        json={
            "customer_id": 3,
            "garment_types": ["kurti"],
            "total_amount": 1000,
            "advance_amount": 300,
        },
        headers=auth_headers,
    )
    created = response.get_json()
    assert response.status_code == 201
    assert created["balance_amount"] == 700
    assert created["garment_types"] == ["kurti"]
    assert created["status"] == "pending"
    assert created["order_number"].startswith("ORD")

    fetched = client.get(f"/api/orders/{created['id']}", headers=auth_headers).get_json()
    assert fetched["garment_types"] == ["kurti"]
    assert fetched["balance_amount"] == 700
    assert fetched["customer_name"] == "Chitra"
    assert fetched["customer_number"] == "3"


@pytest.mark.parametrize(
    "total, advance, balance",
    [(1000, 300, 700), (500, 500, 0), (400, 650, -250), (1250.5, 0.5, 1250)],
)
def test_balance_is_total_minus_advance(make_order, total, advance, balance):
    order = make_order(total_amount=total, advance_amount=advance)
    assert order["balance_amount"] == balance


def test_create_order_from_multipart_form(client, auth_headers, make_customer, app):
    customer = make_customer()
    measurements = [
        {"measurement_type": "bust", "value": "34"},
        {"measurement_type": "zip_preference", "value": "side", "unit": "text"},
        {"measurement_type": "hip", "value": ""},
    ]
    response = client.post(
        "/api/orders",
        data={
            "customer_id": str(customer["id"]),
            "garment_types": json.dumps(["blouse", "lehenga"]),
            "total_amount": "2400",
            "advance_amount": "400",
            "delivery_date": "2026-11-02",
            "notes": "Gold border",
            "measurements": json.dumps(measurements),
            "design_image": (io.BytesIO(b"fake image bytes"), "design.jpg"),
        },
        headers=auth_headers,
        content_type="multipart/form-data",
    )
    order = response.get_json()
    assert response.status_code == 201
    assert order["garment_types"] == ["blouse", "lehenga"]
    assert order["balance_amount"] == 2000
    assert order["delivery_date"] == "2026-11-02"
    assert order["design_image"].endswith("_design.jpg")
    assert os.path.exists(os.path.join(app.config["UPLOAD_FOLDER"], order["design_image"]))
    assert [(m["measurement_type"], m["value"], m["unit"]) for m in order["measurements"]] == [
        ("bust", 34.0, "inch"),
        ("zip_preference", "side", "text"),
    ]


def test_repeated_garment_type_fields(client, auth_headers, make_customer):
    customer = make_customer()
    response = client.post(
        "/api/orders",
        data={
            "customer_id": str(customer["id"]),
            "garment_types": ["kurti", "salwar"],
            "total_amount": "800",
        },
        headers=auth_headers,
    )
    assert response.status_code == 201
    assert response.get_json()["garment_types"] == ["kurti", "salwar"]
    assert response.get_json()["advance_amount"] == 0


def test_single_garment_type_field(client, auth_headers, make_customer):
    customer = make_customer()
    response = client.post(
        "/api/orders",
        data={
            "customer_id": str(customer["id"]),
            "garment_types": "kurti",
            "total_amount": "800",
        },
        headers=auth_headers,
    )
    assert response.status_code == 201
    assert response.get_json()["garment_types"] == ["kurti"]


def test_single_garment_type_field_on_update(client, auth_headers, make_order):
    order = make_order()
    response = client.put(
        f"/api/orders/{order['id']}", data={"garment_types": "blouse"}, headers=auth_headers
    )
    assert response.status_code == 200

    fetched = client.get(f"/api/orders/{order['id']}", headers=auth_headers).get_json()
    assert fetched["garment_types"] == ["blouse"]


def test_database_error_is_reported(client, auth_headers, monkeypatch, caplog):
    def broken_list_orders(*args, **kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr("tailorshop.orders.list_orders", broken_list_orders)

    response = client.get("/api/orders", headers=auth_headers)
    assert response.status_code == 500
    assert response.get_json() == {"error": "Database error"}
    assert "Database error: disk I/O error" in caplog.text


@pytest.mark.parametrize("customer_id", ["abc", "0", "-4", "", None, "3.0", "3abc"])
def test_invalid_customer_id_is_rejected(client, auth_headers, conn, customer_id):
    response = client.post(
        "/api/orders",
        json={"customer_id": customer_id, "garment_types": ["kurti"], "total_amount": 100},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid customer_id format"}
    assert conn.execute("SELECT COUNT(*) FROM orders").fetchone()[0] == 0


@pytest.mark.parametrize("garment_types", ["kurti", "[kurti", '{"a": 1}', [1, 2], None])
def test_invalid_garment_types_are_rejected(client, auth_headers, conn, make_customer, garment_types):
    customer = make_customer()
    response = client.post(
        "/api/orders",
        json={"customer_id": customer["id"], "garment_types": garment_types, "total_amount": 100},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid garment_types format"}
    assert conn.execute("SELECT COUNT(*) FROM orders").fetchone()[0] == 0


def test_invalid_measurements_reject_whole_order(client, auth_headers, conn, make_customer):
    customer = make_customer()
    response = client.post(
        "/api/orders",
        json={
            "customer_id": customer["id"],
            "garment_types": ["kurti"],
            "total_amount": 100,
            "measurements": "not json",
        },
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert conn.execute("SELECT COUNT(*) FROM orders").fetchone()[0] == 0


def test_invalid_status_and_amount(client, auth_headers, make_customer):
    customer = make_customer()
    base = {"customer_id": customer["id"], "garment_types": ["kurti"]}

    response = client.post(
        "/api/orders", json={**base, "total_amount": 100, "status": "lost"}, headers=auth_headers
    )
    assert response.status_code == 400

    response = client.post("/api/orders", json={**base, "total_amount": "lots"}, headers=auth_headers)
    assert response.get_json() == {"error": "Invalid total_amount"}

    response = client.post("/api/orders", json=base, headers=auth_headers)
    assert response.get_json() == {"error": "total_amount is required"}


def test_partial_update_recomputes_balance(client, auth_headers, make_order):
    order = make_order(total_amount=1000, advance_amount=300, notes="Lining")

    response = client.put(
        f"/api/orders/{order['id']}", json={"advance_amount": 500}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.get_json() == {"id": order["id"], "message": "Order updated successfully"}

    fetched = client.get(f"/api/orders/{order['id']}", headers=auth_headers).get_json()
    assert fetched["advance_amount"] == 500
    assert fetched["balance_amount"] == 500
    assert fetched["total_amount"] == 1000
    assert fetched["notes"] == "Lining"
    assert fetched["garment_types"] == ["kurti"]


def test_status_only_update_leaves_amounts(client, auth_headers, make_order):
    order = make_order()

    client.put(f"/api/orders/{order['id']}", json={"status": "ready"}, headers=auth_headers)

    fetched = client.get(f"/api/orders/{order['id']}", headers=auth_headers).get_json()
    assert fetched["status"] == "ready"
    assert fetched["balance_amount"] == 700


def test_full_update_returns_stored_order(client, auth_headers, make_customer, make_order):
    order = make_order()
    other = make_customer("Bela")

    response = client.put(
        f"/api/orders/{order['id']}",
        json={
            "customer_id": other["id"],
            "garment_types": ["gown", "dress"],
            "total_amount": 5000,
            "advance_amount": 1500,
            "measurements": [{"measurement_type": "waist", "value": 30}],
        },
        headers=auth_headers,
    )
    data = response.get_json()
    assert response.status_code == 200
    assert data["message"] == "Order updated successfully"
    assert data["customer_id"] == other["id"]
    assert data["garment_types"] == ["gown", "dress"]
    assert data["balance_amount"] == 3500
    assert data["order_number"] == order["order_number"]
    assert [m["measurement_type"] for m in data["measurements"]] == ["waist"]


def test_update_replaces_measurements(client, auth_headers, make_order):
    order = make_order(
        measurements=[
            {"measurement_type": "bust", "value": 34},
            {"measurement_type": "waist", "value": 28},
        ]
    )

    client.put(
        f"/api/orders/{order['id']}",
        json={"measurements": [{"measurement_type": "hip", "value": 38}]},
        headers=auth_headers,
    )

    saved = _measurements(client, auth_headers, order["id"])
    assert [(m["measurement_type"], m["value"]) for m in saved] == [("hip", 38.0)]


def test_update_with_invalid_field_changes_nothing(client, auth_headers, make_order):
    order = make_order()

    response = client.put(
        f"/api/orders/{order['id']}",
        json={"advance_amount": 900, "garment_types": "oops"},
        headers=auth_headers,
    )
    assert response.status_code == 400

    fetched = client.get(f"/api/orders/{order['id']}", headers=auth_headers).get_json()
    assert fetched["advance_amount"] == 300


def test_update_missing_order(client, auth_headers):
    response = client.put("/api/orders/77", json={"notes": "x"}, headers=auth_headers)
    assert response.status_code == 404
    assert response.get_json() == {"error": "Order not found"}


def test_get_missing_order(client, auth_headers):
    response = client.get("/api/orders/123", headers=auth_headers)
    assert response.status_code == 404
    assert response.get_json() == {"error": "Order not found"}


def test_order_with_dangling_customer_is_not_found(client, auth_headers, conn, make_order):
    order = make_order()
    conn.execute("UPDATE orders SET customer_id = 555 WHERE id = ?", (order["id"],))

    response = client.get(f"/api/orders/{order['id']}", headers=auth_headers)
    assert response.status_code == 404
    assert response.get_json() == {"error": "Order not found"}


def test_stored_garment_types_are_normalized_on_read(client, auth_headers, conn, make_order):
    order = make_order()
    conn.execute("UPDATE orders SET garment_types = ? WHERE id = ?", ("kurti, blouse", order["id"]))

    fetched = client.get(f"/api/orders/{order['id']}", headers=auth_headers).get_json()
    assert fetched["garment_types"] == ["kurti, blouse"]

    listed = client.get("/api/orders", headers=auth_headers).get_json()
    assert listed[0]["garment_types"] == ["kurti, blouse"]


def test_list_orders_newest_first_and_search(client, auth_headers, make_customer, make_order):
    asha = make_customer("Asha", contact_number="90000")
    bela = make_customer("Bela", contact_number="81111")
    first = make_order(asha["id"])
    second = make_order(bela["id"])

    listed = client.get("/api/orders", headers=auth_headers).get_json()
    assert [o["id"] for o in listed] == [second["id"], first["id"]]
    assert listed[0]["customer_name"] == "Bela"

    for term in ("BELA", second["order_number"]):
        found = client.get("/api/orders", query_string={"search": term}, headers=auth_headers)
        assert [o["id"] for o in found.get_json()] == [second["id"]]

    for term in ("8111", bela["customer_number"]):
        found = client.get("/api/orders", query_string={"search": term}, headers=auth_headers)
        assert second["id"] in [o["id"] for o in found.get_json()]


def test_list_orders_by_status(client, auth_headers, make_order):
    make_order()
    ready = make_order(status="ready")

    listed = client.get("/api/orders?status=ready", headers=auth_headers).get_json()
    assert [o["id"] for o in listed] == [ready["id"]]


def test_delete_order_removes_measurements_and_image(client, auth_headers, conn, app, make_customer):
    customer = make_customer()
    created = client.post(
        "/api/orders",
        data={
            "customer_id": str(customer["id"]),
            "garment_types": '["gown"]',
            "total_amount": "3000",
            "advance_amount": "1000",
            "measurements": '[{"measurement_type": "bust", "value": 36}]',
            "design_image": (io.BytesIO(b"img"), "gown.png"),
        },
        headers=auth_headers,
        content_type="multipart/form-data",
    ).get_json()
    image_path = os.path.join(app.config["UPLOAD_FOLDER"], created["design_image"])
    assert os.path.exists(image_path)

    response = client.delete(f"/api/orders/{created['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert not os.path.exists(image_path)
    rows = conn.execute("SELECT * FROM measurements WHERE order_id = ?", (created["id"],)).fetchall()
    assert rows == []

    again = client.delete(f"/api/orders/{created['id']}", headers=auth_headers)
    assert again.status_code == 404


def test_delete_order_with_missing_image_file(client, auth_headers, conn, make_order):
    order = make_order()
    conn.execute("UPDATE orders SET design_image = 'gone.jpg' WHERE id = ?", (order["id"],))

    response = client.delete(f"/api/orders/{order['id']}", headers=auth_headers)
    assert response.status_code == 200


def test_replace_measurements_route(client, auth_headers, make_order):
    order = make_order(measurements=[{"measurement_type": "bust", "value": 34}])

    response = client.post(
        f"/api/orders/{order['id']}/measurements",
        json={"measurements": [{"type": "waist", "value": 28}, {"type": "hip", "value": 38}]},
        headers=auth_headers,
    )
    assert response.status_code == 200
    saved = _measurements(client, auth_headers, order["id"])
    assert [(m["measurement_type"], m["value"]) for m in saved] == [("waist", 28.0), ("hip", 38.0)]


def test_replace_measurements_for_missing_order(client, auth_headers):
    response = client.post(
        "/api/orders/99/measurements", json={"measurements": []}, headers=auth_headers
    )
    assert response.status_code == 404


def test_order_receipt_pdf(client, auth_headers, make_order):
    order = make_order(measurements=[{"measurement_type": "bust", "value": 34}])

    response = client.get(f"/api/orders/{order['id']}/receipt", headers=auth_headers)
    assert response.status_code == 200
    assert response.mimetype == "application/pdf"
    assert response.data.startswith(b"%PDF")


def test_catalog(client, auth_headers):
    data = client.get("/api/catalog", headers=auth_headers).get_json()
    assert "kurti" in data["garment_types"]
    assert [s["value"] for s in data["order_statuses"]][0] == "pending"


def test_health_routes(client):
    assert client.get("/").get_json()["status"] == "OK"
    assert "timestamp" in client.get("/test").get_json()
