# sales/admin.py

from django.contrib import admin

from sales.models import Order, OrderItem, PaymentNotification, Subscription


# ======================================================
# ORDER ADMIN
# ======================================================


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "product_name", "grind_type", "quantity", "unit_price", "subtotal", "weight_grams")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Read-mostly: status changes belong to the back-office API so the
    tracking/timestamp rules run.
    """

    list_display = (
        "order_number",
        "customer_name",
        "order_type",
        "status",
        "status_source",
        "total_amount",
        "created_at",
    )
    readonly_fields = (
        "order_number",
        "status",
        "status_source",
        "subtotal_amount",
        "shipping_cost",
        "total_amount",
        "mercadopago_preference_id",
        "mercadopago_payment_id",
        "mercadopago_collection_id",
        "mercadopago_collection_status",
        "payment_method",
        "paid_at",
        "tracking_code",
        "shipped_at",
        "delivered_at",
        "created_at",
        "updated_at",
    )
    search_fields = ("order_number", "customer_name", "customer_email", "tracking_code")
    list_filter = ("status", "order_type", "created_at")
    inlines = [OrderItemInline]

    def has_delete_permission(self, request, obj=None):
        return False


# ======================================================
# PAYMENT NOTIFICATION ADMIN
# ======================================================


@admin.register(PaymentNotification)
class PaymentNotificationAdmin(admin.ModelAdmin):
    list_display = ("received_at", "source", "payment_id", "gateway_status", "mapped_status", "outcome", "order")
    readonly_fields = (
        "order",
        "source",
        "external_reference",
        "payment_id",
        "gateway_status",
        "mapped_status",
        "previous_status",
        "outcome",
        "payload",
        "received_at",
    )
    search_fields = ("payment_id", "external_reference")
    list_filter = ("outcome", "source", "received_at")


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ("user", "account_type", "grind_type", "shipping_day", "status", "created_at")
    list_filter = ("status", "account_type", "shipping_day")
    filter_horizontal = ("products",)
