import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("products", "0001_initial"),
        ("store", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Subscription",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "account_type",
                    models.CharField(
                        choices=[("PF", "Pessoa Física"), ("PJ", "Pessoa Jurídica")],
                        default="PF",
                        max_length=2,
                    ),
                ),
                (
                    "grind_type",
                    models.CharField(
                        choices=[
                            ("beans", "Em grãos"),
                            ("coado", "Moído para coado"),
                            ("espresso", "Moído para espresso"),
                        ],
                        max_length=20,
                    ),
                ),
                ("shipping_day", models.PositiveSmallIntegerField(choices=[(1, "Dia 1"), (15, "Dia 15")])),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Ativa"), ("paused", "Pausada"), ("cancelled", "Cancelada")],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("products", models.ManyToManyField(related_name="subscriptions", to="products.product")),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="subscriptions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "status"], name="subscription_user_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "order_number",
                    models.CharField(
                        blank=True,
                        help_text="System-generated public order number",
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("customer_name", models.CharField(max_length=160)),
                ("customer_email", models.EmailField(max_length=254)),
                ("customer_phone", models.CharField(max_length=40)),
                ("customer_document", models.CharField(blank=True, default="", max_length=20)),
                ("shipping_postal_code", models.CharField(max_length=8)),
                ("shipping_street", models.CharField(max_length=255)),
                ("shipping_number", models.CharField(max_length=20)),
                ("shipping_complement", models.CharField(blank=True, default="", max_length=120)),
                ("shipping_neighborhood", models.CharField(max_length=120)),
                ("shipping_city", models.CharField(max_length=120)),
                ("shipping_state", models.CharField(max_length=60)),
                ("subtotal_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("shipping_cost", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("shipping_method", models.CharField(blank=True, default="", max_length=40)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pendente"),
                            ("in_process", "Em processamento"),
                            ("approved", "Pago"),
                            ("rejected", "Recusado"),
                            ("shipped", "Enviado"),
                            ("delivered", "Entregue"),
                            ("cancelled", "Cancelado"),
                            ("refunded", "Reembolsado"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "status_source",
                    models.CharField(
                        choices=[("system", "System"), ("gateway", "Payment gateway"), ("admin", "Admin")],
                        default="system",
                        max_length=20,
                    ),
                ),
                (
                    "order_type",
                    models.CharField(
                        choices=[("single", "Avulso"), ("subscription", "Assinatura")],
                        default="single",
                        max_length=20,
                    ),
                ),
                (
                    "subscription_frequency",
                    models.CharField(blank=True, choices=[("monthly", "Mensal")], default="", max_length=20),
                ),
                ("subscription_shipping_day", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("mercadopago_preference_id", models.CharField(blank=True, default="", max_length=128)),
                ("mercadopago_payment_id", models.CharField(blank=True, default="", max_length=64)),
                ("mercadopago_collection_id", models.CharField(blank=True, default="", max_length=64)),
                ("mercadopago_collection_status", models.CharField(blank=True, default="", max_length=40)),
                ("payment_method", models.CharField(blank=True, default="", max_length=60)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("carrier_name", models.CharField(blank=True, default="", max_length=120)),
                ("tracking_code", models.CharField(blank=True, default="", max_length=64)),
                ("shipped_at", models.DateTimeField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "carrier",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to="store.shippingcarrier",
                    ),
                ),
                (
                    "subscription",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to="sales.subscription",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="order_status_idx"),
                    models.Index(fields=["order_type", "status"], name="order_type_status_idx"),
                    models.Index(fields=["created_at"], name="order_created_idx"),
                    models.Index(fields=["mercadopago_payment_id"], name="order_mp_payment_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("product_name", models.CharField(max_length=200)),
                (
                    "grind_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("beans", "Em grãos"),
                            ("coado", "Moído para coado"),
                            ("espresso", "Moído para espresso"),
                        ],
                        default="",
                        max_length=20,
                    ),
                ),
                ("quantity", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                (
                    "unit_price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "subtotal",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="quantity * unit_price (server computed)",
                        max_digits=12,
                    ),
                ),
                ("weight_grams", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="sales.order",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="order_items",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["order"], name="order_item_order_idx"),
                    models.Index(fields=["product"], name="order_item_product_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentNotification",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "source",
                    models.CharField(
                        choices=[("webhook", "Webhook"), ("return_page", "Return page")],
                        max_length=20,
                    ),
                ),
                ("external_reference", models.CharField(blank=True, default="", max_length=128)),
                ("payment_id", models.CharField(blank=True, default="", max_length=64)),
                ("gateway_status", models.CharField(blank=True, default="", max_length=40)),
                ("mapped_status", models.CharField(blank=True, default="", max_length=20)),
                ("previous_status", models.CharField(blank=True, default="", max_length=20)),
                (
                    "outcome",
                    models.CharField(
                        choices=[
                            ("applied", "Applied"),
                            ("duplicate", "Duplicate (no-op)"),
                            ("stale", "Stale (not applied)"),
                            ("ignored", "Ignored"),
                            ("unknown_order", "Unknown order"),
                        ],
                        max_length=20,
                    ),
                ),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("received_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payment_notifications",
                        to="sales.order",
                    ),
                ),
            ],
            options={
                "ordering": ["-received_at"],
                "indexes": [
                    models.Index(fields=["payment_id"], name="payment_notif_payment_idx"),
                    models.Index(fields=["outcome"], name="payment_notif_outcome_idx"),
                    models.Index(fields=["received_at"], name="payment_notif_received_idx"),
                ],
            },
        ),
    ]
