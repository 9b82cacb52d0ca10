# sales/services/subscription_service.py

"""
SUBSCRIPTION BOX (APPLICATION SERVICE)

Rules:
- at least SUBSCRIPTION["MIN_PRODUCTS"] distinct active products
- every coffee in the box is priced at SUBSCRIPTION["UNIT_PRICE"], quantity 1
- grind type applies to every line
- freight from sales.services.freight
- Subscription + its first monthly order are written together; the payment
  preference is requested after commit (same as single checkout)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.db import transaction

from products.models import Product
from sales.models import Order, OrderItem, Subscription
from sales.services.cart import Cart
from sales.services.checkout_orchestrator import CheckoutResult, ProductUnavailable, request_preference
from sales.services.freight import FreightQuote, quote_subscription_freight
from sales.services.order_service import CheckoutCustomer, create_order

logger = logging.getLogger(__name__)

GRIND_TYPES = {value for value, _ in OrderItem.GRIND_CHOICES}
SHIPPING_DAYS = {value for value, _ in Subscription.SHIPPING_DAY_CHOICES}


class SubscriptionError(Exception):
    pass


class _SubscriptionProduct:
    """
    Catalog product re-priced at the subscription unit price.
    """

    def __init__(self, product: Product, unit_price: Decimal):
        self.id = product.id
        self.name = product.name
        self.price = unit_price
        self.weight_grams = product.weight_grams


@dataclass(frozen=True)
class SubscriptionCheckout:
    subscription: Subscription
    freight: FreightQuote
    checkout: CheckoutResult


def _config() -> tuple[Decimal, int]:
    cfg = getattr(settings, "SUBSCRIPTION", {}) or {}
    unit_price = Decimal(str(cfg.get("UNIT_PRICE", "35.00")))
    min_products = int(cfg.get("MIN_PRODUCTS", 2))
    return unit_price, min_products


def build_subscription_cart(*, product_ids, grind_type: str) -> Cart:
    unit_price, min_products = _config()

    if grind_type not in GRIND_TYPES:
        raise SubscriptionError(f"Invalid grind type '{grind_type}'")

    unique_ids = list(dict.fromkeys(str(pid) for pid in product_ids or []))
    if len(unique_ids) < min_products:
        raise SubscriptionError(f"Select at least {min_products} coffees")

    products = {str(p.id): p for p in Product.objects.active().filter(id__in=unique_ids)}
    missing = [pid for pid in unique_ids if pid not in products]
    if missing:
        raise ProductUnavailable(f"Products not available: {', '.join(missing)}")

    cart = Cart()
    for pid in unique_ids:
        cart.add(_SubscriptionProduct(products[pid], unit_price))
        cart.set_grind_type(pid, grind_type)
    return cart


def quote_subscription(*, account_type: str, state: str, product_ids, grind_type: str) -> tuple[Cart, FreightQuote]:
    cart = build_subscription_cart(product_ids=product_ids, grind_type=grind_type)
    freight = quote_subscription_freight(
        account_type=account_type,
        state=state,
        subtotal=cart.display_total(),
    )
    return cart, freight


def create_subscription(
    *,
    user,
    account_type: str,
    product_ids,
    grind_type: str,
    shipping_day: int,
    customer: CheckoutCustomer,
) -> SubscriptionCheckout:
    if int(shipping_day) not in SHIPPING_DAYS:
        raise SubscriptionError("shipping_day must be 1 or 15")

    cart, freight = quote_subscription(
        account_type=account_type,
        state=customer.state,
        product_ids=product_ids,
        grind_type=grind_type,
    )

    with transaction.atomic():
        subscription = Subscription.objects.create(
            user=user,
            account_type=account_type,
            grind_type=grind_type,
            shipping_day=int(shipping_day),
        )
        subscription.products.set([line.product_id for line in cart])

        order = create_order(
            customer=customer,
            cart=cart,
            order_type=Order.TYPE_SUBSCRIPTION,
            shipping_cost=freight.price,
            shipping_method=freight.method,
            user=user,
            subscription=subscription,
        )

    logger.info(
        "Subscription created",
        extra={
            "subscription_id": str(subscription.id),
            "order_id": str(order.id),
            "freight_method": freight.method,
        },
    )

    return SubscriptionCheckout(
        subscription=subscription,
        freight=freight,
        checkout=request_preference(order=order),
    )
