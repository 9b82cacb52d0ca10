# public/urls.py
"""
PUBLIC API URLS (ONLINE STORE)

Base path (mounted in backend/urls.py):
    /api/public/

Catalog & config:
- GET  catalog/                      catalog/<product_id>/
- GET  config/
- GET  address/<cep>/
- GET  shipping/quotes/?weight_grams=

Checkout (Mercado Pago):
- POST orders/                       pending order + preference
- POST orders/<order_id>/preference/ retry preference
- GET  orders/<order_id>/            status polling

Subscriptions:
- POST subscriptions/quote/
- POST subscriptions/                (JWT)

Payment signals:
- POST payments/mercadopago/webhook/
- GET  payments/return/<success|pending|failure>/
"""

from __future__ import annotations

from django.urls import path

from public.views.address import AddressLookupView
from public.views.catalog import PublicCatalogView, PublicProductDetailView
from public.views.config import PublicConfigView
from public.views.mercadopago_webhook import MercadoPagoWebhookView
from public.views.order import (
    PublicCheckoutView,
    PublicOrderPreferenceView,
    PublicOrderStatusView,
)
from public.views.payment_return import PaymentReturnView
from public.views.shipping import ShippingQuoteView
from public.views.subscription import SubscriptionCheckoutView, SubscriptionQuoteView

app_name = "public"

urlpatterns = [
    # Catalog & config
    path("catalog/", PublicCatalogView.as_view(), name="public-catalog"),
    path("catalog/<uuid:product_id>/", PublicProductDetailView.as_view(), name="public-product"),
    path("config/", PublicConfigView.as_view(), name="public-config"),
    path("address/<str:postal_code>/", AddressLookupView.as_view(), name="public-address"),
    path("shipping/quotes/", ShippingQuoteView.as_view(), name="public-shipping-quotes"),

    # Checkout
    path("orders/", PublicCheckoutView.as_view(), name="public-checkout"),
    path("orders/<uuid:order_id>/", PublicOrderStatusView.as_view(), name="public-order-status"),
    path(
        "orders/<uuid:order_id>/preference/",
        PublicOrderPreferenceView.as_view(),
        name="public-order-preference",
    ),

    # Subscriptions
    path("subscriptions/quote/", SubscriptionQuoteView.as_view(), name="public-subscription-quote"),
    path("subscriptions/", SubscriptionCheckoutView.as_view(), name="public-subscription-checkout"),

    # Mercado Pago
    path(
        "payments/mercadopago/webhook/",
        MercadoPagoWebhookView.as_view(),
        name="mercadopago-webhook",
    ),
    path(
        "payments/return/<str:outcome>/",
        PaymentReturnView.as_view(),
        name="payment-return",
    ),
]
