from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from products.models import Product

CATALOG = [
    # sku, name, price, weight label, grams, display_order, featured
    ("CAF-CLASSICO-250", "Café Clássico", "35.00", "250g", 250, 1, True),
    ("CAF-BOURBON-250", "Bourbon Amarelo", "42.00", "250g", 250, 2, True),
    ("CAF-CATUAI-500", "Catuaí Vermelho", "65.00", "500g", 500, 3, False),
    ("CAF-ESPRESSO-1K", "Blend Espresso", "110.00", "1kg", 1000, 0, False),
]


class Command(BaseCommand):
    help = "Seed the coffee catalog (idempotent by SKU)"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding catalog..."))

        created_count = 0
        for sku, name, price, weight, grams, order, featured in CATALOG:
            _, created = Product.objects.update_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "price": Decimal(price),
                    "weight": weight,
                    "weight_grams": grams,
                    "display_order": order,
                    "featured": featured,
                    "stock": 50,
                    "is_active": True,
                },
            )
            created_count += int(created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Catalog ready: {len(CATALOG)} products ({created_count} new)."
            )
        )
