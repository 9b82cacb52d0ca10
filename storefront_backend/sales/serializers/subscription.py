# sales/serializers/subscription.py

from rest_framework import serializers

from sales.models import Subscription


class SubscriptionSerializer(serializers.ModelSerializer):
    products = serializers.SerializerMethodField()

    class Meta:
        model = Subscription
        fields = [
            "id",
            "account_type",
            "products",
            "grind_type",
            "shipping_day",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_products(self, obj):
        return [{"id": str(p.id), "name": p.name} for p in obj.products.all()]
