# store/models/label_format.py

import uuid

from django.core.validators import MinValueValidator
from django.db import models, transaction
from django.db.models import Q


class LabelFormatQuerySet(models.QuerySet):
    def default(self):
        """
        The active default format, else the first active one, else None.
        """
        active = self.filter(is_active=True)
        return active.filter(is_default=True).first() or active.order_by("name").first()


class LabelFormat(models.Model):
    """
    Page size used to print shipping labels (e.g. 100x150mm thermal).
    Exactly one format may be the default.
    """

    TYPE_CORREIOS = "correios"
    TYPE_CARRIER = "transportadora"
    TYPE_MARKETPLACE = "marketplace"

    TYPE_CHOICES = [
        (TYPE_CORREIOS, "Correios"),
        (TYPE_CARRIER, "Transportadora"),
        (TYPE_MARKETPLACE, "Marketplace"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=120)
    code = models.CharField(max_length=60, unique=True)

    width_mm = models.PositiveIntegerField(default=100, validators=[MinValueValidator(10)])
    height_mm = models.PositiveIntegerField(default=150, validators=[MinValueValidator(10)])

    format_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_CORREIOS)

    is_active = models.BooleanField(default=True)
    is_default = models.BooleanField(default=False)
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    objects = LabelFormatQuerySet.as_manager()

    class Meta:
        ordering = ["-is_default", "name"]
        constraints = [
            models.UniqueConstraint(
                fields=["is_default"],
                condition=Q(is_default=True),
                name="uniq_default_label_format",
            ),
        ]

    @transaction.atomic
    def save(self, *args, **kwargs):
        if self.is_default:
            LabelFormat.objects.filter(is_default=True).exclude(pk=self.pk).update(is_default=False)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.width_mm}x{self.height_mm}mm)"
