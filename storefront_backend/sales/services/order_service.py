# sales/services/order_service.py

"""
ORDER WRITER (APPLICATION SERVICE)

Purpose:
- Materialize a Cart + checkout customer into Order + OrderItem rows.

Hard rules:
- Header (status=pending) and items are written in ONE transaction.
  If the item insert fails the header is rolled back with it and the caller
  gets OrderPartiallyCreated; an order with zero items is never left behind.
- Prices come from the cart lines (catalog snapshot), never from the client.
- Checkout fields are checked for presence only (no CPF check digits).
"""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass, fields
from decimal import ROUND_HALF_UP, Decimal

from django.db import DatabaseError, transaction

from sales.models import Order, OrderItem
from sales.services.cart import Cart

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


class OrderCreationError(Exception):
    """Base order writer exception"""


class EmptyCartError(OrderCreationError):
    pass


class MissingCheckoutFields(OrderCreationError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing required fields: {', '.join(missing)}")


class OrderPartiallyCreated(OrderCreationError):
    """
    The header insert succeeded but the items did not. The transaction was
    rolled back, so no order row survives; the checkout can be retried.
    """


@dataclass(frozen=True)
class CheckoutCustomer:
    name: str
    email: str
    phone: str
    postal_code: str
    street: str
    number: str
    neighborhood: str
    city: str
    state: str
    complement: str = ""
    document: str = ""

    OPTIONAL = ("complement", "document")

    def missing_fields(self) -> list[str]:
        return [
            f.name
            for f in fields(self)
            if f.name not in self.OPTIONAL and not str(getattr(self, f.name) or "").strip()
        ]

    def as_order_fields(self) -> dict:
        digits = "".join(ch for ch in self.postal_code if ch in string.digits)
        return {
            "customer_name": self.name.strip(),
            "customer_email": self.email.strip(),
            "customer_phone": self.phone.strip(),
            "customer_document": (self.document or "").strip(),
            "shipping_postal_code": digits,
            "shipping_street": self.street.strip(),
            "shipping_number": self.number.strip(),
            "shipping_complement": (self.complement or "").strip(),
            "shipping_neighborhood": self.neighborhood.strip(),
            "shipping_city": self.city.strip(),
            "shipping_state": self.state.strip(),
        }


def _insert_items(*, order: Order, cart: Cart) -> list[OrderItem]:
    items = []
    for line in cart:
        item = OrderItem(
            order=order,
            product_id=line.product_id,
            product_name=line.name,
            grind_type=line.grind_type,
            quantity=line.quantity,
            unit_price=_money(line.unit_price),
            weight_grams=line.weight_grams,
        )
        # bulk_create skips save(); compute subtotal here
        item.clean()
        items.append(item)

    return OrderItem.objects.bulk_create(items)


def create_order(
    *,
    customer: CheckoutCustomer,
    cart: Cart,
    order_type: str = Order.TYPE_SINGLE,
    shipping_cost=Decimal("0.00"),
    shipping_method: str = "",
    carrier=None,
    user=None,
    subscription=None,
) -> Order:
    if cart.is_empty():
        raise EmptyCartError("Cart is empty")

    missing = customer.missing_fields()
    if missing:
        raise MissingCheckoutFields(missing)

    subtotal = cart.display_total()
    shipping = _money(shipping_cost)

    subscription_fields = {}
    if order_type == Order.TYPE_SUBSCRIPTION and subscription is not None:
        subscription_fields = {
            "subscription": subscription,
            "subscription_frequency": Order.FREQUENCY_MONTHLY,
            "subscription_shipping_day": subscription.shipping_day,
        }

    with transaction.atomic():
        order = Order.objects.create(
            user=user if getattr(user, "is_authenticated", False) else None,
            status=Order.STATUS_PENDING,
            status_source=Order.SOURCE_SYSTEM,
            order_type=order_type,
            subtotal_amount=subtotal,
            shipping_cost=shipping,
            total_amount=_money(subtotal + shipping),
            shipping_method=shipping_method or "",
            carrier=carrier,
            carrier_name=getattr(carrier, "name", "") or "",
            **customer.as_order_fields(),
            **subscription_fields,
        )

        try:
            with transaction.atomic():
                _insert_items(order=order, cart=cart)
        except DatabaseError as exc:
            logger.error(
                "Order items insert failed; rolling back order header",
                extra={"order_id": str(order.id)},
            )
            raise OrderPartiallyCreated(
                f"Order {order.order_number} could not store its items"
            ) from exc

    logger.info(
        "Order created",
        extra={
            "order_id": str(order.id),
            "order_number": order.order_number,
            "order_type": order_type,
            "total_amount": str(order.total_amount),
        },
    )
    return order
