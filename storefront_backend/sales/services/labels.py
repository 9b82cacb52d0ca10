# sales/services/labels.py

"""
PRINTABLE ORDER DOCUMENTS

- Order summary: A4 page, items with unit weight, totals, tracking
- Shipping label: page size from the chosen LabelFormat (default 100x150mm),
  sender from StoreSettings, recipient from the order, tracking code or
  "AGUARDANDO POSTAGEM"
"""

from __future__ import annotations

import string
from decimal import Decimal

from django.template.loader import render_to_string

from store.models import LabelFormat, StoreSettings

AWAITING_POSTING = "AGUARDANDO POSTAGEM"

DEFAULT_LABEL_WIDTH_MM = 100
DEFAULT_LABEL_HEIGHT_MM = 150


def format_postal_code(value) -> str:
    digits = "".join(ch for ch in str(value or "") if ch in string.digits)
    if len(digits) == 8:
        return f"{digits[:5]}-{digits[5:]}"
    return digits


def order_total_weight_grams(order) -> int:
    """
    Sum of weight_grams * quantity over the order lines.
    """
    return sum(item.line_weight_grams for item in order.items.all())


def _item_rows(order) -> list[dict]:
    return [
        {
            "name": item.product_name,
            "grind_type": item.get_grind_type_display() if item.grind_type else "",
            "quantity": item.quantity,
            "weight_grams": item.weight_grams,
            "unit_price": item.unit_price,
            "subtotal": item.subtotal,
        }
        for item in order.items.all()
    ]


def render_order_summary(order) -> str:
    store = StoreSettings.load()
    weight = order_total_weight_grams(order)
    context = {
        "order": order,
        "store": store,
        "status_label": order.get_status_display(),
        "items": _item_rows(order),
        "total_weight_grams": weight,
        "total_weight_kg": (Decimal(weight) / Decimal("1000")).quantize(Decimal("0.01")),
        "postal_code": format_postal_code(order.shipping_postal_code),
        "carrier_name": order.carrier_name or "N/A",
    }
    return render_to_string("sales/order_summary.html", context)


def render_shipping_label(order, label_format: LabelFormat | None = None) -> str:
    store = StoreSettings.load()
    label_format = label_format or LabelFormat.objects.default()

    context = {
        "order": order,
        "store": store,
        "sender_name": store.sender_display_name,
        "sender_postal_code": format_postal_code(store.sender_postal_code),
        "postal_code": format_postal_code(order.shipping_postal_code),
        "width_mm": label_format.width_mm if label_format else DEFAULT_LABEL_WIDTH_MM,
        "height_mm": label_format.height_mm if label_format else DEFAULT_LABEL_HEIGHT_MM,
        "carrier_name": order.carrier_name or "A definir",
        "tracking_text": order.tracking_code or AWAITING_POSTING,
        "total_weight_grams": order_total_weight_grams(order),
    }
    return render_to_string("sales/shipping_label.html", context)
