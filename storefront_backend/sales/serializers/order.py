# sales/serializers/order.py

from rest_framework import serializers

from sales.models import Order, OrderItem, PaymentNotification


class OrderItemSerializer(serializers.ModelSerializer):
    """
    Order line (read-only snapshot).
    """

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "product_name",
            "grind_type",
            "quantity",
            "unit_price",
            "subtotal",
            "weight_grams",
        ]
        read_only_fields = fields


class PaymentNotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentNotification
        fields = [
            "id",
            "source",
            "payment_id",
            "gateway_status",
            "mapped_status",
            "previous_status",
            "outcome",
            "received_at",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    status_label = serializers.CharField(source="get_status_display", read_only=True)
    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_name",
            "customer_email",
            "order_type",
            "status",
            "status_label",
            "total_amount",
            "item_count",
            "tracking_code",
            "carrier_name",
            "created_at",
        ]
        read_only_fields = fields


class OrderDetailSerializer(serializers.ModelSerializer):
    """
    Back-office order detail: everything, including payment audit trail.
    """

    status_label = serializers.CharField(source="get_status_display", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    payment_notifications = PaymentNotificationSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "user",
            "customer_name",
            "customer_email",
            "customer_phone",
            "customer_document",
            "shipping_postal_code",
            "shipping_street",
            "shipping_number",
            "shipping_complement",
            "shipping_neighborhood",
            "shipping_city",
            "shipping_state",
            "subtotal_amount",
            "shipping_cost",
            "total_amount",
            "shipping_method",
            "status",
            "status_label",
            "status_source",
            "order_type",
            "subscription",
            "subscription_frequency",
            "subscription_shipping_day",
            "mercadopago_preference_id",
            "mercadopago_payment_id",
            "mercadopago_collection_id",
            "mercadopago_collection_status",
            "payment_method",
            "paid_at",
            "carrier",
            "carrier_name",
            "tracking_code",
            "shipped_at",
            "delivered_at",
            "created_at",
            "updated_at",
            "items",
            "payment_notifications",
        ]
        read_only_fields = fields


class OrderStatusUpdateSerializer(serializers.Serializer):
    """
    Input for POST /api/sales/orders/<id>/set-status/
    "paid" is accepted as a legacy alias of "approved".
    """

    status = serializers.ChoiceField(choices=[*[value for value, _ in Order.STATUS_CHOICES], "paid"])
    tracking_code = serializers.CharField(required=False, allow_blank=True, max_length=64)
    carrier_id = serializers.UUIDField(required=False, allow_null=True)
