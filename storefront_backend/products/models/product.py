# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Case, IntegerField, Value, When


class ProductQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def for_catalog(self):
        """
        Storefront ordering: display_order ascending, where 0 means
        "not positioned" and sorts after every positioned product.
        """
        return (
            self.active()
            .annotate(
                _unpositioned=Case(
                    When(display_order=0, then=Value(1)),
                    default=Value(0),
                    output_field=IntegerField(),
                )
            )
            .order_by("_unpositioned", "display_order", "name")
        )


class Product(models.Model):
    """
    A coffee (or accessory) sold in the storefront.

    - price is the current catalog price; orders snapshot it per line,
      so editing it never rewrites past orders.
    - weight_grams feeds shipping weight on labels and carrier quotes.
    - stock is informational for the storefront (buttons disabled at 0);
      checkout does not reserve stock.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=64, unique=True, null=True, blank=True)
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")

    price = models.DecimalField(max_digits=10, decimal_places=2)

    image_url = models.URLField(max_length=500, blank=True, default="")
    category = models.CharField(max_length=60, default="café")

    weight = models.CharField(
        max_length=30,
        blank=True,
        default="",
        help_text="Display label, e.g. '250g'",
    )
    weight_grams = models.PositiveIntegerField(default=500)

    stock = models.PositiveIntegerField(default=0)

    featured = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    display_order = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["is_active", "display_order"], name="product_active_order_idx"),
            models.Index(fields=["name"], name="product_name_idx"),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if self.price is None or Decimal(self.price) <= Decimal("0.00"):
            raise ValidationError("Price must be greater than zero")

        if self.sku is not None:
            self.sku = self.sku.strip().upper() or None

    @property
    def in_stock(self) -> bool:
        return int(self.stock or 0) > 0
