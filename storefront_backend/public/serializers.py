# PATH: public/serializers.py

"""
PATH: public/serializers.py

PUBLIC SERIALIZERS (ONLINE STORE)

Purpose:
- Shared schema contracts for the Public API endpoints.

Used by:
- public/views/order.py                 (checkout, preference retry, status)
- public/views/subscription.py          (subscription quote + checkout)
- public/views/mercadopago_webhook.py   (webhook ack)
- public/views/payment_return.py        (return page)
- public/views/address.py               (CEP lookup)

Notes:
- These serializers are deliberately "transport layer" only:
  they validate request/response shapes, not business rules.
"""

from __future__ import annotations

import string

from rest_framework import serializers

from sales.models import OrderItem, Subscription
from users.accounts import ACCOUNT_TYPE_CHOICES


class PublicCartItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    grind_type = serializers.ChoiceField(choices=OrderItem.GRIND_CHOICES, required=False, allow_blank=True)


class PublicCustomerSerializer(serializers.Serializer):
    """
    Checkout form. Presence only: no CPF/CNPJ check digits.
    """

    name = serializers.CharField(max_length=160)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=40)
    document = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")

    postal_code = serializers.CharField(max_length=9)
    street = serializers.CharField(max_length=255)
    number = serializers.CharField(max_length=20)
    complement = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
    neighborhood = serializers.CharField(max_length=120)
    city = serializers.CharField(max_length=120)
    state = serializers.CharField(max_length=60)

    def validate_postal_code(self, value):
        digits = "".join(ch for ch in str(value or "") if ch in string.digits)
        if len(digits) != 8:
            raise serializers.ValidationError("CEP must have 8 digits")
        return digits


class PublicCheckoutSerializer(serializers.Serializer):
    customer = PublicCustomerSerializer()
    items = PublicCartItemSerializer(many=True, allow_empty=False)
    carrier_id = serializers.UUIDField(required=False, allow_null=True)


class PublicCheckoutResponseSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    order_number = serializers.CharField()
    status = serializers.CharField()
    subtotal_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    shipping_cost = serializers.DecimalField(max_digits=10, decimal_places=2)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    preference_id = serializers.CharField()
    init_point = serializers.CharField(allow_blank=True)
    public_key = serializers.CharField(allow_blank=True)


class PublicOrderItemSerializer(serializers.Serializer):
    product_name = serializers.CharField()
    grind_type = serializers.CharField(allow_blank=True)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)


class PublicOrderStatusResponseSerializer(serializers.Serializer):
    """
    Used for polling from the payment result page.
    """

    order_id = serializers.UUIDField(source="id")
    order_number = serializers.CharField()
    status = serializers.CharField()
    status_label = serializers.CharField(source="get_status_display")
    order_type = serializers.CharField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    shipping_cost = serializers.DecimalField(max_digits=10, decimal_places=2)
    paid_at = serializers.DateTimeField(allow_null=True)
    tracking_code = serializers.CharField(allow_blank=True)
    carrier_name = serializers.CharField(allow_blank=True)
    items = PublicOrderItemSerializer(many=True)


class PublicWebhookAckSerializer(serializers.Serializer):
    """
    Simple webhook acknowledgement (Mercado Pago expects a 2xx).
    """

    ok = serializers.BooleanField()
    detail = serializers.CharField(required=False, allow_blank=True)


class PaymentReturnQuerySerializer(serializers.Serializer):
    external_reference = serializers.CharField(required=False, allow_blank=True, default="")
    payment_id = serializers.CharField(required=False, allow_blank=True, default="")
    collection_id = serializers.CharField(required=False, allow_blank=True, default="")
    collection_status = serializers.CharField(required=False, allow_blank=True, default="")
    payment_type = serializers.CharField(required=False, allow_blank=True, default="")
    preference_id = serializers.CharField(required=False, allow_blank=True, default="")


class AddressResponseSerializer(serializers.Serializer):
    postal_code = serializers.CharField()
    street = serializers.CharField(allow_blank=True)
    neighborhood = serializers.CharField(allow_blank=True)
    city = serializers.CharField(allow_blank=True)
    state = serializers.CharField(allow_blank=True)
    state_code = serializers.CharField(allow_blank=True)


class SubscriptionQuoteSerializer(serializers.Serializer):
    account_type = serializers.ChoiceField(choices=ACCOUNT_TYPE_CHOICES)
    state = serializers.CharField(max_length=60)
    product_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    grind_type = serializers.ChoiceField(choices=OrderItem.GRIND_CHOICES)


class SubscriptionCheckoutSerializer(serializers.Serializer):
    account_type = serializers.ChoiceField(choices=ACCOUNT_TYPE_CHOICES)
    product_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    grind_type = serializers.ChoiceField(choices=OrderItem.GRIND_CHOICES)
    shipping_day = serializers.ChoiceField(choices=Subscription.SHIPPING_DAY_CHOICES)
    customer = PublicCustomerSerializer()


class FreightQuoteResponseSerializer(serializers.Serializer):
    method = serializers.CharField()
    label = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)


class PublicConfigSerializer(serializers.Serializer):
    mercadopago_public_key = serializers.CharField(allow_blank=True)
    currency = serializers.CharField()
    subscription_unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    subscription_min_products = serializers.IntegerField()
    store_name = serializers.CharField(allow_blank=True)
    whatsapp_number = serializers.CharField(allow_blank=True)


class ShippingQuoteQuerySerializer(serializers.Serializer):
    weight_grams = serializers.IntegerField(min_value=0)
