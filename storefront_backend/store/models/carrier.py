# store/models/carrier.py

import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.core.validators import MinValueValidator
from django.db import models

TWOPLACES = Decimal("0.01")


def normalize_carrier_code(value) -> str:
    """
    "  Jadlog Express " -> "jadlog-express"
    """
    return "-".join(str(value or "").strip().lower().split())


class ShippingCarrier(models.Model):
    """
    A delivery option the back office can assign to orders.

    Rules:
    - code is the natural key (normalized, unique)
    - fixed_price >= 0, price_per_kg >= 0
    - delivery_time_days >= 1
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=120)
    code = models.CharField(max_length=60, unique=True)

    price_per_kg = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    fixed_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    delivery_time_days = models.PositiveIntegerField(
        default=5,
        validators=[MinValueValidator(1)],
    )

    logo_url = models.URLField(max_length=500, blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def save(self, *args, **kwargs):
        self.code = normalize_carrier_code(self.code or self.name)
        super().save(*args, **kwargs)

    def quote(self, *, weight_grams: int) -> Decimal:
        """
        fixed_price + price_per_kg * kg (2dp, half-up).
        """
        kg = Decimal(int(weight_grams or 0)) / Decimal("1000")
        total = Decimal(self.fixed_price) + Decimal(self.price_per_kg) * kg
        return total.quantize(TWOPLACES, rounding=ROUND_HALF_UP)

    def __str__(self):
        return f"{self.name} ({self.code})"
