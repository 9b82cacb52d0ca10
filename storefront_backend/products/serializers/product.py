# products/serializers/product.py

"""
PRODUCT SERIALIZERS

- ProductSerializer: back-office CRUD (staff)
- PublicProductSerializer: storefront read model (no sku / timestamps)
"""

from decimal import Decimal

from rest_framework import serializers

from products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """
    GUARANTEES:
    - price > 0
    - sku normalized to upper case, blank -> null (uniqueness only when set)
    """

    in_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "description",
            "price",
            "image_url",
            "category",
            "weight",
            "weight_grams",
            "stock",
            "in_stock",
            "featured",
            "is_active",
            "display_order",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "in_stock", "created_at", "updated_at"]

    def validate_sku(self, value):
        value = (value or "").strip().upper()
        return value or None

    def validate_price(self, value):
        if value is None or value <= Decimal("0.00"):
            raise serializers.ValidationError("Price must be greater than zero")
        return value

    def validate_weight_grams(self, value):
        if value <= 0:
            raise serializers.ValidationError("weight_grams must be greater than zero")
        return value


class PublicProductSerializer(serializers.ModelSerializer):
    in_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "image_url",
            "category",
            "weight",
            "weight_grams",
            "stock",
            "in_stock",
            "featured",
        ]
        read_only_fields = fields
