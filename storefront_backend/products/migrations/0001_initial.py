import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sku", models.CharField(blank=True, max_length=64, null=True, unique=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("image_url", models.URLField(blank=True, default="", max_length=500)),
                ("category", models.CharField(default="café", max_length=60)),
                (
                    "weight",
                    models.CharField(blank=True, default="", help_text="Display label, e.g. '250g'", max_length=30),
                ),
                ("weight_grams", models.PositiveIntegerField(default=500)),
                ("stock", models.PositiveIntegerField(default=0)),
                ("featured", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("display_order", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["is_active", "display_order"], name="product_active_order_idx"),
                    models.Index(fields=["name"], name="product_name_idx"),
                ],
            },
        ),
    ]
