# products/tests/test_products.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.test import TestCase

from products.models import Product


class ProductModelTests(TestCase):
    """
    Product model tests.

    GUARANTEES:
    - Products can be created safely
    - SKU uniqueness is enforced (when present)
    - Pricing is sane
    - Catalog ordering puts unpositioned (display_order=0) products last
    """

    def test_product_creation(self):
        product = Product.objects.create(
            name="Bourbon Amarelo",
            sku="CAF-BOURBON",
            price=Decimal("42.00"),
            weight_grams=250,
        )

        self.assertEqual(product.name, "Bourbon Amarelo")
        self.assertEqual(product.category, "café")
        self.assertFalse(product.in_stock)

    def test_sku_must_be_unique(self):
        Product.objects.create(name="Clássico", sku="CAF-1", price=Decimal("35.00"))

        with self.assertRaises(IntegrityError):
            Product.objects.create(name="Clássico 2", sku="CAF-1", price=Decimal("36.00"))

    def test_products_without_sku_can_coexist(self):
        Product.objects.create(name="A", price=Decimal("10.00"))
        Product.objects.create(name="B", price=Decimal("10.00"))

        self.assertEqual(Product.objects.filter(sku__isnull=True).count(), 2)

    def test_price_must_be_positive(self):
        product = Product(name="Grátis", price=Decimal("0.00"))

        with self.assertRaises(ValidationError):
            product.full_clean()

    def test_catalog_orders_positioned_first_and_zero_last(self):
        Product.objects.create(name="Sem posição", price=Decimal("10.00"), display_order=0)
        Product.objects.create(name="Segundo", price=Decimal("10.00"), display_order=2)
        Product.objects.create(name="Primeiro", price=Decimal("10.00"), display_order=1)
        Product.objects.create(name="Inativo", price=Decimal("10.00"), display_order=1, is_active=False)

        names = list(Product.objects.for_catalog().values_list("name", flat=True))

        self.assertEqual(names, ["Primeiro", "Segundo", "Sem posição"])
