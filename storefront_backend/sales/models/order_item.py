# sales/models/order_item.py

from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from products.models import Product

TWOPLACES = Decimal("0.01")


class OrderItem(models.Model):
    """
    One product line of an Order.

    Rules:
    - product_name / unit_price are snapshots taken at checkout; later
      catalog edits never touch them
    - subtotal = quantity * unit_price, computed once at write time
    - immutable after insert
    """

    GRIND_BEANS = "beans"
    GRIND_FILTER = "coado"
    GRIND_ESPRESSO = "espresso"

    GRIND_CHOICES = [
        (GRIND_BEANS, "Em grãos"),
        (GRIND_FILTER, "Moído para coado"),
        (GRIND_ESPRESSO, "Moído para espresso"),
    ]

    order = models.ForeignKey(
        "sales.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    product_name = models.CharField(max_length=200)
    grind_type = models.CharField(max_length=20, choices=GRIND_CHOICES, blank=True, default="")

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    subtotal = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="quantity * unit_price (server computed)",
    )

    weight_grams = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["order"], name="order_item_order_idx"),
            models.Index(fields=["product"], name="order_item_product_idx"),
        ]

    def clean(self):
        if self.quantity is None or int(self.quantity) <= 0:
            raise ValidationError("quantity must be >= 1")

        if self.unit_price is None or Decimal(self.unit_price) < Decimal("0.00"):
            raise ValidationError("unit_price must be >= 0")

        self.subtotal = (Decimal(self.quantity) * Decimal(self.unit_price)).quantize(
            TWOPLACES, rounding=ROUND_HALF_UP
        )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Order items are immutable once saved.")
        self.clean()
        return super().save(*args, **kwargs)

    @property
    def line_weight_grams(self) -> int:
        return int(self.weight_grams or 0) * int(self.quantity or 0)

    def __str__(self):
        return f"{self.product_name} x{self.quantity}"
