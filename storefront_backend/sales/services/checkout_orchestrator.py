# sales/services/checkout_orchestrator.py

"""
CHECKOUT ORCHESTRATOR (APPLICATION SERVICE)

Purpose:
- Turn a storefront checkout request into a pending Order + a Mercado Pago
  preference.

Flow:
1) build_cart(): price submitted {product_id, quantity} lines from the catalog
2) create_order(): header + items in one transaction (status=pending)
3) attach_preference(): request a preference, store its id on the order

Hard rules:
- The order is committed BEFORE the gateway call. If the gateway is down the
  order stays pending and the shopper retries attach_preference() on the same
  order, which asks for a fresh preference each time.
- Client prices and totals are ignored; products are re-read server-side.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from products.models import Product
from public.services.mercadopago import (
    PaymentGatewayError,
    PaymentGatewayUnavailable,
    create_preference,
)
from sales.models import Order
from sales.services.cart import Cart, CartError
from sales.services.order_service import CheckoutCustomer, create_order

logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    """Base checkout exception"""


class ProductUnavailable(CheckoutError):
    pass


class OrderNotPayable(CheckoutError):
    pass


class PreferenceCreationFailed(CheckoutError):
    """
    The order exists (pending) but no preference could be created.
    retryable is True when the gateway was unavailable.
    """

    def __init__(self, *, order: Order, retryable: bool, reason: str = ""):
        self.order = order
        self.retryable = retryable
        super().__init__(reason or f"Could not create a payment preference for {order.order_number}")


@dataclass(frozen=True)
class CheckoutResult:
    order: Order
    preference_id: str
    init_point: str = ""


def build_cart(items) -> Cart:
    """
    items: [{"product_id", "quantity", "grind_type"?}]
    Duplicate product ids are merged.
    """
    wanted = {}
    for line in items or []:
        key = str(line["product_id"])
        entry = wanted.setdefault(key, {"quantity": 0, "grind_type": ""})
        entry["quantity"] += int(line.get("quantity") or 0)
        entry["grind_type"] = line.get("grind_type") or entry["grind_type"]

    products = {
        str(p.id): p
        for p in Product.objects.active().filter(id__in=list(wanted.keys()))
    }

    missing = [pid for pid in wanted if pid not in products]
    if missing:
        raise ProductUnavailable(f"Products not available: {', '.join(missing)}")

    cart = Cart()
    for pid, entry in wanted.items():
        cart.add(products[pid])
        try:
            cart.set_quantity(pid, entry["quantity"])
        except CartError as exc:
            raise CheckoutError(str(exc)) from exc
        if entry["grind_type"] and pid in {line.product_id for line in cart}:
            cart.set_grind_type(pid, entry["grind_type"])

    return cart


def attach_preference(*, order: Order) -> CheckoutResult:
    """
    Request a new preference for a pending order and store its id.
    Raises PaymentGatewayError / PaymentGatewayUnavailable untouched.
    """
    if order.status != Order.STATUS_PENDING:
        raise OrderNotPayable(f"Order {order.order_number} is '{order.status}', not pending")

    preference = create_preference(order)

    order.mercadopago_preference_id = preference["id"]
    order.save(update_fields=["mercadopago_preference_id", "updated_at"])

    logger.info(
        "Payment preference created",
        extra={"order_id": str(order.id), "preference_id": preference["id"]},
    )
    return CheckoutResult(
        order=order,
        preference_id=preference["id"],
        init_point=preference.get("init_point") or "",
    )


def start_checkout(
    *,
    customer: CheckoutCustomer,
    items,
    user=None,
    carrier=None,
    order_type: str = Order.TYPE_SINGLE,
    shipping_cost: Optional[Decimal] = None,
    shipping_method: str = "",
    subscription=None,
    cart: Optional[Cart] = None,
) -> CheckoutResult:
    """
    Shipping: an explicit shipping_cost wins; otherwise the carrier's quote
    for the cart weight; otherwise free.
    """
    cart = cart if cart is not None else build_cart(items)

    if shipping_cost is None:
        shipping_cost = Decimal("0.00")
        if carrier is not None:
            shipping_cost = carrier.quote(weight_grams=cart.total_weight_grams())
            shipping_method = shipping_method or carrier.code

    order = create_order(
        customer=customer,
        cart=cart,
        order_type=order_type,
        shipping_cost=shipping_cost,
        shipping_method=shipping_method,
        carrier=carrier,
        user=user,
        subscription=subscription,
    )

    return request_preference(order=order)


def request_preference(*, order: Order) -> CheckoutResult:
    """
    attach_preference() for a freshly written order; gateway failures become
    PreferenceCreationFailed carrying the (still pending) order.
    """
    try:
        return attach_preference(order=order)
    except PaymentGatewayError as exc:
        logger.warning(
            "Preference creation failed; order left pending",
            extra={"order_id": str(order.id), "error": str(exc)},
        )
        raise PreferenceCreationFailed(
            order=order,
            retryable=isinstance(exc, PaymentGatewayUnavailable),
            reason=str(exc),
        ) from exc
