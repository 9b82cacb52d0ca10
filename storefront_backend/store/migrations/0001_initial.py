import uuid
from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="StoreSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("store_name", models.CharField(blank=True, default="", max_length=160)),
                ("store_cnpj", models.CharField(blank=True, default="", max_length=18)),
                ("store_email", models.EmailField(blank=True, default="", max_length=254)),
                ("store_phone", models.CharField(blank=True, default="", max_length=40)),
                ("whatsapp_number", models.CharField(blank=True, default="", max_length=40)),
                ("sender_name", models.CharField(blank=True, default="", max_length=160)),
                ("sender_street", models.CharField(blank=True, default="", max_length=255)),
                ("sender_number", models.CharField(blank=True, default="", max_length=20)),
                ("sender_complement", models.CharField(blank=True, default="", max_length=120)),
                ("sender_neighborhood", models.CharField(blank=True, default="", max_length=120)),
                ("sender_city", models.CharField(blank=True, default="", max_length=120)),
                ("sender_state", models.CharField(blank=True, default="", max_length=60)),
                ("sender_postal_code", models.CharField(blank=True, default="", max_length=8)),
                ("mercadopago_access_token", models.CharField(blank=True, default="", max_length=255)),
                ("mercadopago_public_key", models.CharField(blank=True, default="", max_length=255)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "store settings",
                "verbose_name_plural": "store settings",
            },
        ),
        migrations.CreateModel(
            name="ShippingCarrier",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=120)),
                ("code", models.CharField(max_length=60, unique=True)),
                (
                    "price_per_kg",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "fixed_price",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "delivery_time_days",
                    models.PositiveIntegerField(
                        default=5,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("logo_url", models.URLField(blank=True, default="", max_length=500)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="LabelFormat",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=120)),
                ("code", models.CharField(max_length=60, unique=True)),
                (
                    "width_mm",
                    models.PositiveIntegerField(default=100, validators=[django.core.validators.MinValueValidator(10)]),
                ),
                (
                    "height_mm",
                    models.PositiveIntegerField(default=150, validators=[django.core.validators.MinValueValidator(10)]),
                ),
                (
                    "format_type",
                    models.CharField(
                        choices=[
                            ("correios", "Correios"),
                            ("transportadora", "Transportadora"),
                            ("marketplace", "Marketplace"),
                        ],
                        default="correios",
                        max_length=20,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("is_default", models.BooleanField(default=False)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-is_default", "name"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_default", True)),
                        fields=("is_default",),
                        name="uniq_default_label_format",
                    )
                ],
            },
        ),
    ]
