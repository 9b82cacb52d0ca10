# sales/models/subscription.py

import uuid

from django.conf import settings
from django.db import models

from users.accounts import ACCOUNT_PERSONAL, ACCOUNT_TYPE_CHOICES

from .order_item import OrderItem


class Subscription(models.Model):
    """
    Monthly coffee box.

    - products: the coffees picked by the customer (at least two)
    - grind_type applies to every coffee in the box
    - shipping_day: the box ships on day 1 or day 15 of the month
    """

    STATUS_ACTIVE = "active"
    STATUS_PAUSED = "paused"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Ativa"),
        (STATUS_PAUSED, "Pausada"),
        (STATUS_CANCELLED, "Cancelada"),
    ]

    SHIPPING_DAY_CHOICES = [
        (1, "Dia 1"),
        (15, "Dia 15"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="subscriptions",
    )

    account_type = models.CharField(max_length=2, choices=ACCOUNT_TYPE_CHOICES, default=ACCOUNT_PERSONAL)
    products = models.ManyToManyField("products.Product", related_name="subscriptions")

    grind_type = models.CharField(max_length=20, choices=OrderItem.GRIND_CHOICES)
    shipping_day = models.PositiveSmallIntegerField(choices=SHIPPING_DAY_CHOICES)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "status"], name="subscription_user_status_idx"),
        ]

    def __str__(self):
        return f"{self.user_id} | {self.grind_type} | dia {self.shipping_day} | {self.status}"
