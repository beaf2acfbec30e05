from __future__ import annotations

import os

from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from werkzeug.utils import secure_filename

from .catalog import garment_name

THERMAL_WIDTH = 80 * mm   # 80mm paper width


def _money(amount: float | None) -> str:
    return f"Rs. {amount or 0:.2f}"


def generate_order_receipt_80mm(order: dict, folder: str, shop_name: str) -> str:
    os.makedirs(folder, exist_ok=True)
    filename = secure_filename(str(order["order_number"])) or f"order-{order['id']}"
    file_path = os.path.join(folder, f"{filename}.pdf")

    garments = order.get("garment_types") or []
    measurements = order.get("measurements") or []
    height = (150 + 5 * (len(garments) + len(measurements))) * mm
    pdf = canvas.Canvas(file_path, pagesize=(THERMAL_WIDTH, height))

    y = height - 10 * mm

    def line(text: str, bold: bool = False) -> None:
        nonlocal y
        pdf.setFont("Helvetica-Bold" if bold else "Helvetica", 9)
        pdf.drawString(5 * mm, y, text)
        y -= 5 * mm

    # HEADER
    line(shop_name.upper(), bold=True)
    line("Order Receipt", bold=True)
    line("-" * 32)

    # INFO
    line(f"Order No   : {order['order_number']}")
    line(f"Order Date : {order.get('order_date') or '-'}")
    line(f"Delivery   : {order.get('delivery_date') or '-'}")
    line(f"Status     : {order.get('status') or '-'}")
    line("-" * 32)

    # CUSTOMER
    line(f"Customer No: {order.get('customer_number') or '-'}")
    line(order.get("customer_name") or "")
    if order.get("contact_number"):
        line(order["contact_number"])
    line("-" * 32)

    # BODY
    line("Garments:")
    for garment in garments:
        line(f"  {garment_name(str(garment))}")
    if measurements:
        line("Measurements:")
        for item in measurements:
            line(f"  {item['measurement_type']}: {item['value']} {item.get('unit') or ''}".rstrip())
    line("-" * 32)

    line(f"Total   : {_money(order.get('total_amount'))}")
    line(f"Advance : {_money(order.get('advance_amount'))}")
    line(f"Balance : {_money(order.get('balance_amount'))}", bold=True)

    line("-" * 32)
    line("Thank you", bold=True)
    line("System Generated")

    pdf.showPage()
    pdf.save()
    return file_path
