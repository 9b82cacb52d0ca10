# sales/models/order.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class Order(models.Model):
    """
    Storefront order (single purchase or subscription box).

    Key rules:
    - Created by the order writer at PENDING
    - id is the external_reference handed to Mercado Pago
    - Payment status is written only through sales.services.order_lifecycle
    - Never deleted
    """

    STATUS_PENDING = "pending"
    STATUS_IN_PROCESS = "in_process"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"
    STATUS_SHIPPED = "shipped"
    STATUS_DELIVERED = "delivered"
    STATUS_CANCELLED = "cancelled"
    STATUS_REFUNDED = "refunded"

    # Display labels only; behavior always switches on the values above.
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pendente"),
        (STATUS_IN_PROCESS, "Em processamento"),
        (STATUS_APPROVED, "Pago"),
        (STATUS_REJECTED, "Recusado"),
        (STATUS_SHIPPED, "Enviado"),
        (STATUS_DELIVERED, "Entregue"),
        (STATUS_CANCELLED, "Cancelado"),
        (STATUS_REFUNDED, "Reembolsado"),
    ]

    STATUS_VALUES = frozenset(value for value, _ in STATUS_CHOICES)

    # Orders that count as revenue.
    PAID_STATUSES = (STATUS_APPROVED, STATUS_SHIPPED, STATUS_DELIVERED)

    SOURCE_SYSTEM = "system"
    SOURCE_GATEWAY = "gateway"
    SOURCE_ADMIN = "admin"

    SOURCE_CHOICES = [
        (SOURCE_SYSTEM, "System"),
        (SOURCE_GATEWAY, "Payment gateway"),
        (SOURCE_ADMIN, "Admin"),
    ]

    TYPE_SINGLE = "single"
    TYPE_SUBSCRIPTION = "subscription"

    TYPE_CHOICES = [
        (TYPE_SINGLE, "Avulso"),
        (TYPE_SUBSCRIPTION, "Assinatura"),
    ]

    FREQUENCY_MONTHLY = "monthly"
    FREQUENCY_CHOICES = [
        (FREQUENCY_MONTHLY, "Mensal"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_number = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated public order number",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    # Customer contact
    customer_name = models.CharField(max_length=160)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=40)
    customer_document = models.CharField(max_length=20, blank=True, default="")

    # Shipping address
    shipping_postal_code = models.CharField(max_length=8)
    shipping_street = models.CharField(max_length=255)
    shipping_number = models.CharField(max_length=20)
    shipping_complement = models.CharField(max_length=120, blank=True, default="")
    shipping_neighborhood = models.CharField(max_length=120)
    shipping_city = models.CharField(max_length=120)
    shipping_state = models.CharField(max_length=60)

    # Money (server authoritative, BRL 2dp)
    subtotal_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    shipping_cost = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    shipping_method = models.CharField(max_length=40, blank=True, default="")

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    status_source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default=SOURCE_SYSTEM)

    order_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_SINGLE)
    subscription = models.ForeignKey(
        "sales.Subscription",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    subscription_frequency = models.CharField(max_length=20, choices=FREQUENCY_CHOICES, blank=True, default="")
    subscription_shipping_day = models.PositiveSmallIntegerField(null=True, blank=True)

    # Mercado Pago correlation
    mercadopago_preference_id = models.CharField(max_length=128, blank=True, default="")
    mercadopago_payment_id = models.CharField(max_length=64, blank=True, default="")
    mercadopago_collection_id = models.CharField(max_length=64, blank=True, default="")
    mercadopago_collection_status = models.CharField(max_length=40, blank=True, default="")
    payment_method = models.CharField(max_length=60, blank=True, default="")
    paid_at = models.DateTimeField(null=True, blank=True)

    # Fulfilment
    carrier = models.ForeignKey(
        "store.ShippingCarrier",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    carrier_name = models.CharField(max_length=120, blank=True, default="")
    tracking_code = models.CharField(max_length=64, blank=True, default="")
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="order_status_idx"),
            models.Index(fields=["order_type", "status"], name="order_type_status_idx"),
            models.Index(fields=["created_at"], name="order_created_idx"),
            models.Index(fields=["mercadopago_payment_id"], name="order_mp_payment_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self.order_number:
            prefix = timezone.now().strftime("PED%Y%m%d")
            self.order_number = f"{prefix}-{uuid.uuid4().hex[:8].upper()}"
        super().save(*args, **kwargs)

    @property
    def external_reference(self) -> str:
        return str(self.id)

    @property
    def is_paid(self) -> bool:
        return self.status in self.PAID_STATUSES

    @property
    def shipping_address_line(self) -> str:
        parts = [f"{self.shipping_street}, {self.shipping_number}"]
        if self.shipping_complement:
            parts.append(self.shipping_complement)
        parts.append(self.shipping_neighborhood)
        parts.append(f"{self.shipping_city} - {self.shipping_state}")
        return " | ".join(p for p in parts if p)

    def __str__(self):
        return f"{self.order_number} | {self.total_amount} | {self.status}"
